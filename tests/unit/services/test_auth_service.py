import unittest
from datetime import datetime, timedelta, timezone

import jwt

from onepiece_api.core.exceptions import AuthenticationError, ConfigurationError, ValidationError
from onepiece_api.services.auth_service import AuthService, hash_password, verify_password, ALGORITHM

from catalog_fixtures import make_app_config, ADMIN_USERNAME, ADMIN_PASSWORD, JWT_SECRET


class TestPasswordHashing(unittest.TestCase):
    """Test cases for the PBKDF2 password hash helpers."""

    def test_hash_format(self):
        """Test the scheme, iteration count and salted output."""
        first = hash_password("sanji", iterations=1000)
        second = hash_password("sanji", iterations=1000)

        scheme, iterations, salt, derived = first.split("$")
        self.assertEqual(scheme, "pbkdf2_sha256")
        self.assertEqual(iterations, "1000")
        self.assertNotIn("=", salt + derived)
        self.assertNotEqual(first, second)

    def test_verify(self):
        """Test verification of correct and wrong passwords."""
        encoded = hash_password("sanji", iterations=1000)

        self.assertTrue(verify_password("sanji", encoded))
        self.assertFalse(verify_password("zoro", encoded))

    def test_fixed_salt_is_deterministic(self):
        """Test that the same salt gives the same hash."""
        self.assertEqual(hash_password("nami", 1000, b"0" * 16), hash_password("nami", 1000, b"0" * 16))

    def test_malformed_hashes_never_verify(self):
        """Test that broken or foreign hash strings are rejected without raising."""
        for encoded in ("", "plain-text", "md5$1$abc$def", "pbkdf2_sha256$many$abc$def",
                        "pbkdf2_sha256$1000$!!!$###"):
            self.assertFalse(verify_password("anything", encoded), encoded)


class TestAuthService(unittest.TestCase):
    """Test cases for the AuthService class."""

    def setUp(self):
        """Set up an auth service with a configured admin account."""
        self.service = AuthService(make_app_config())

    def test_authenticate(self):
        """Test a successful login."""
        result = self.service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD, "127.0.0.1")

        self.assertEqual(result["expiresIn"], 3600)
        self.assertEqual(result["user"], {"username": ADMIN_USERNAME, "role": "admin"})
        claims = jwt.decode(result["token"], JWT_SECRET, algorithms=[ALGORITHM])
        self.assertEqual(claims["sub"], ADMIN_USERNAME)
        self.assertEqual(claims["role"], "admin")
        self.assertEqual(claims["exp"] - claims["iat"], 3600)

    def test_wrong_password(self):
        """Test that a wrong password is a 401 with INVALID_CREDENTIALS."""
        with self.assertRaises(AuthenticationError) as context:
            self.service.authenticate(ADMIN_USERNAME, "wrong")

        self.assertEqual(context.exception.status_code, 401)
        self.assertEqual(context.exception.error_code, "INVALID_CREDENTIALS")
        self.assertEqual(context.exception.message, "Invalid credentials")

    def test_wrong_username(self):
        """Test that an unknown username gets the same answer as a wrong password."""
        with self.assertRaises(AuthenticationError) as context:
            self.service.authenticate("buggy", ADMIN_PASSWORD)

        self.assertEqual(context.exception.message, "Invalid credentials")

    def test_missing_credentials(self):
        """Test that a missing username or password is a validation error."""
        for username, password in ((None, ADMIN_PASSWORD), (ADMIN_USERNAME, None), ("", "")):
            with self.assertRaises(ValidationError) as context:
                self.service.authenticate(username, password)
            self.assertEqual(context.exception.status_code, 400)
            self.assertEqual(context.exception.error_code, "MISSING_CREDENTIALS")

    def test_unconfigured_admin(self):
        """Test that missing admin settings are a server configuration error."""
        service = AuthService(make_app_config(admin_password_hash=None))

        with self.assertRaises(ConfigurationError) as context:
            service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD)

        self.assertEqual(context.exception.status_code, 500)

    def test_unconfigured_secret(self):
        """Test that a missing JWT secret is a server configuration error."""
        service = AuthService(make_app_config(jwt_secret=None))

        with self.assertRaises(ConfigurationError):
            service.authenticate(ADMIN_USERNAME, ADMIN_PASSWORD)

    def test_verify_token(self):
        """Test decoding a token issued by the service."""
        token = self.service.issue_token(ADMIN_USERNAME)

        self.assertEqual(self.service.verify_token(token), {"username": ADMIN_USERNAME, "role": "admin"})

    def test_missing_token(self):
        """Test that no token is TOKEN_MISSING."""
        with self.assertRaises(AuthenticationError) as context:
            self.service.verify_token(None)

        self.assertEqual(context.exception.error_code, "TOKEN_MISSING")

    def test_expired_token(self):
        """Test that an expired token is TOKEN_EXPIRED."""
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode({"sub": ADMIN_USERNAME, "iat": past, "exp": past + timedelta(minutes=5)},
                           JWT_SECRET, algorithm=ALGORITHM)

        with self.assertRaises(AuthenticationError) as context:
            self.service.verify_token(token)

        self.assertEqual(context.exception.error_code, "TOKEN_EXPIRED")

    def test_invalid_tokens(self):
        """Test that tampered, foreign or malformed tokens are INVALID_TOKEN."""
        now = datetime.now(timezone.utc)
        foreign = jwt.encode({"sub": ADMIN_USERNAME, "exp": now + timedelta(hours=1)},
                             "another-secret-of-sufficient-length-for-hs256", algorithm=ALGORITHM)
        no_subject = jwt.encode({"exp": now + timedelta(hours=1)}, JWT_SECRET, algorithm=ALGORITHM)

        for token in ("not-a-jwt", foreign, no_subject):
            with self.assertRaises(AuthenticationError) as context:
                self.service.verify_token(token)
            self.assertEqual(context.exception.error_code, "INVALID_TOKEN")


if __name__ == '__main__':
    unittest.main()
