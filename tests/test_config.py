"""Unit tests for staffauth.core.config: defaults and field validators."""

import unittest

from pydantic import ValidationError

from staffauth.core.config import Settings


class TestDefaults(unittest.TestCase):
    def test_port_defaults_to_8000(self) -> None:
        settings = Settings(_env_file=None)
        self.assertEqual(settings.PORT, 8000)
        self.assertEqual(settings.SIGNUP_DB_TIMEOUT_SEC, 10.0)
        self.assertEqual(settings.DB_TIMEOUT_SEC, 100.0)
        self.assertFalse(settings.USER_ADMIN_ROUTES_ENABLED)
        self.assertLess(settings.ACCESS_TOKEN_EXPIRE_MINUTES, settings.REFRESH_TOKEN_EXPIRE_MINUTES)


class TestValidators(unittest.TestCase):
    def test_rejects_non_sql_database_url(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="mongodb://localhost:27017")

    def test_accepts_sqlite_url(self) -> None:
        self.assertEqual(Settings(_env_file=None, DATABASE_URL="sqlite:///./dev.db").DATABASE_URL, "sqlite:///./dev.db")

    def test_rejects_bad_port(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, PORT=0)

    def test_rejects_blank_secret(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, JWT_SECRET="   ")

    def test_rejects_bcrypt_rounds_out_of_range(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, BCRYPT_ROUNDS=3)


if __name__ == "__main__":
    unittest.main()
