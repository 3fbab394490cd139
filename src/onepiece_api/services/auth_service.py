# src/onepiece_api/services/auth_service.py
"""
Admin login and bearer tokens.

The single admin account is configured through ``API_ADMIN_USERNAME`` and
``API_ADMIN_PASSWORD_HASH``. Hashes use PBKDF2-SHA256 in the form
``pbkdf2_sha256$<iterations>$<salt>$<hash>`` (salt and hash urlsafe base64);
``hash_password`` produces one. Tokens are HS256 JWTs signed with
``API_JWT_SECRET``.
"""
import base64
import hmac
import os
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import jwt
from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from onepiece_api.config.app_config import AppConfig
from onepiece_api.config.logging_config import get_security_logger
from onepiece_api.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ErrorCode,
    ValidationError
)

security_logger = get_security_logger()

HASH_SCHEME = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 390000
ALGORITHM = "HS256"
ADMIN_ROLE = "admin"


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=salt, iterations=iterations)


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS, salt: Optional[bytes] = None) -> str:
    """Hash a password for ``API_ADMIN_PASSWORD_HASH``."""
    salt = salt or os.urandom(16)
    derived = _kdf(salt, iterations).derive(password.encode())
    return f"{HASH_SCHEME}${iterations}${_b64encode(salt)}${_b64encode(derived)}"


def verify_password(password: str, encoded: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never verify."""
    try:
        scheme, iterations, salt, expected = encoded.split("$")
        if scheme != HASH_SCHEME:
            return False
        _kdf(_b64decode(salt), int(iterations)).verify(password.encode(), _b64decode(expected))
        return True
    except (InvalidKey, ValueError):
        return False


class AuthService:
    """Authenticates the admin user and issues/verifies bearer tokens."""

    def __init__(self, config: AppConfig):
        self.config = config

    def _secret(self) -> str:
        secret = self.config.jwt_secret
        if not secret:
            raise ConfigurationError("API_JWT_SECRET")
        return secret

    def authenticate(self, username: Optional[str], password: Optional[str],
                     client: str = "unknown") -> Dict[str, Any]:
        """
        Verify admin credentials and issue a token.

        Args:
            username (Optional[str]): Submitted username
            password (Optional[str]): Submitted password
            client (str): Client address, for the security log

        Returns:
            Dict[str, Any]: ``token``, ``expiresIn`` (seconds) and ``user``

        Raises:
            ValidationError: Username or password missing
            ConfigurationError: Admin credentials or JWT secret not configured
            AuthenticationError: Credentials do not match
        """
        if not username or not password:
            security_logger.warning(f"Login failed for '{username or 'unknown'}' from {client}: missing credentials")
            raise ValidationError("Username and password are required", "MISSING_CREDENTIALS")

        admin_username = self.config.admin_username
        admin_hash = self.config.admin_password_hash
        if not admin_username or not admin_hash:
            raise ConfigurationError("Admin credentials", "are not configured")
        self._secret()

        username_ok = hmac.compare_digest(username.encode(), admin_username.encode())
        password_ok = verify_password(password, admin_hash)
        if not (username_ok and password_ok):
            reason = "invalid username" if not username_ok else "invalid password"
            security_logger.warning(f"Login failed for '{username}' from {client}: {reason}")
            raise AuthenticationError("Invalid credentials")

        token = self.issue_token(admin_username)
        security_logger.info(f"Login succeeded for '{admin_username}' from {client}")
        return {
            "token": token,
            "expiresIn": self.config.jwt_expires_in,
            "user": {"username": admin_username, "role": ADMIN_ROLE}
        }

    def issue_token(self, username: str, role: str = ADMIN_ROLE) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": username,
            "role": role,
            "iat": now,
            "exp": now + timedelta(seconds=self.config.jwt_expires_in)
        }
        return jwt.encode(payload, self._secret(), algorithm=ALGORITHM)

    def verify_token(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Decode a bearer token.

        Returns:
            Dict[str, Any]: ``username`` and ``role`` of the authenticated identity

        Raises:
            AuthenticationError: TOKEN_MISSING, TOKEN_EXPIRED or INVALID_TOKEN
        """
        if not token:
            raise AuthenticationError("Access token is required", ErrorCode.TOKEN_MISSING)

        try:
            claims = jwt.decode(token, self._secret(), algorithms=[ALGORITHM],
                                options={"require": ["exp", "sub"]})
        except jwt.ExpiredSignatureError:
            security_logger.info("Rejected expired token")
            raise AuthenticationError("Token expired", ErrorCode.TOKEN_EXPIRED)
        except jwt.InvalidTokenError as e:
            security_logger.warning(f"Rejected invalid token: {str(e)}")
            raise AuthenticationError("Invalid token", ErrorCode.INVALID_TOKEN)

        return {"username": claims["sub"], "role": claims.get("role", ADMIN_ROLE)}
