# src/onepiece_api/database/auth_manager.py
import logging
from pathlib import Path
from typing import Dict, Any, Optional

import keyring
from keyring.errors import KeyringError

from onepiece_api.core.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class AuthenticationManager:
    """
    Resolves the credentials used to open the catalog database.

    Passwords come either straight from configuration or from the system keyring
    when a keyring service name is configured.
    """

    BASIC_AUTH = "basic"
    KEYRING_AUTH = "keyring"
    SSL_AUTH = "ssl"

    def get_basic_auth_credentials(self, username: str, password: Optional[str]) -> Dict[str, Any]:
        """
        Get basic username/password credentials.

        Args:
            username (str): Database username
            password (Optional[str]): Database password

        Returns:
            Dict[str, Any]: Credential dictionary
        """
        return {
            "auth_type": self.BASIC_AUTH,
            "username": username,
            "password": password
        }

    def get_keyring_credentials(self, service_name: str, username: str) -> Dict[str, Any]:
        """
        Get credentials from the system keyring.

        Args:
            service_name (str): Name of the service in keyring
            username (str): Username to retrieve password for

        Returns:
            Dict[str, Any]: Credential dictionary

        Raises:
            DatabaseConnectionError: If no password is stored or the keyring backend fails
        """
        try:
            password = keyring.get_password(service_name, username)
        except KeyringError as e:
            raise DatabaseConnectionError(f"Keyring lookup failed for {service_name}: {str(e)}") from e

        if not password:
            raise DatabaseConnectionError(
                f"No password found in keyring for {service_name}/{username}"
            )

        logger.debug(f"Loaded database password for '{username}' from keyring service '{service_name}'")
        return {
            "auth_type": self.KEYRING_AUTH,
            "username": username,
            "password": password
        }

    def set_keyring_credentials(self, service_name: str, username: str, password: str) -> None:
        """Store a database password in the system keyring."""
        keyring.set_password(service_name, username, password)

    def get_ssl_credentials(self, ca_path: str, username: Optional[str] = None,
                            password: Optional[str] = None) -> Dict[str, Any]:
        """
        Get credentials that add a CA certificate to the connection.

        Raises:
            DatabaseConnectionError: If the CA file doesn't exist
        """
        ca = Path(ca_path)
        if not ca.exists():
            raise DatabaseConnectionError(f"CA certificate not found at {ca_path}")

        return {
            "auth_type": self.SSL_AUTH,
            "username": username,
            "password": password,
            "ssl_ca": str(ca.absolute())
        }

    def get_auth_params(self, credentials: Dict[str, Any]) -> Dict[str, Any]:
        """
        Get SQLAlchemy connection parameters from credentials.

        Args:
            credentials (Dict[str, Any]): Authentication credentials

        Returns:
            Dict[str, Any]: ``username``, ``password`` and optional ``connect_args``

        Raises:
            DatabaseConnectionError: If credential format is invalid
        """
        if "auth_type" not in credentials:
            raise DatabaseConnectionError("Invalid credential format: missing auth_type")

        auth_type = credentials["auth_type"]

        if auth_type in (self.BASIC_AUTH, self.KEYRING_AUTH):
            if not credentials.get("username"):
                raise DatabaseConnectionError(f"Invalid {auth_type} credentials: missing username")
            return {
                "username": credentials["username"],
                "password": credentials.get("password")
            }

        if auth_type == self.SSL_AUTH:
            return {
                "username": credentials.get("username"),
                "password": credentials.get("password"),
                "connect_args": {"ssl": {"ca": credentials["ssl_ca"]}}
            }

        raise DatabaseConnectionError(f"Unsupported authentication type: {auth_type}")
