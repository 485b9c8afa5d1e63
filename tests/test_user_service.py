"""Tests for staffauth.services.users: signup, login, get, edit and admin listing."""

import unittest
from unittest.mock import MagicMock, patch

from staffauth.models import User
from staffauth.schemas.user import Caller, EditUserRequest, LoginRequest
from staffauth.services.directory import MAX_PAGE_SIZE, UserDirectory
from staffauth.services.errors import (
    AuthorizationError,
    DuplicateUserError,
    InvalidCredentialsError,
    NotFoundError,
    StorageError,
)
from staffauth.services.tokens import TokenIssuer
from staffauth.services.users import EDIT_SUCCESS_MESSAGE, UserService
from support import (
    TEST_PASSWORD,
    make_engine,
    make_session_factory,
    make_settings,
    make_user,
    signup_body,
)


class UserServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        self.session = make_session_factory(self.engine)()
        self.settings = make_settings()
        self.issuer = TokenIssuer(self.settings)
        self.directory = UserDirectory(self.session, timeout_seconds=10)
        self.service = UserService(self.directory, self.issuer, bcrypt_rounds=4)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()

    def admin(self) -> Caller:
        return Caller(user_id="0" * 32, user_type="ADMIN")

    def caller_for(self, user_id: str) -> Caller:
        return Caller(user_id=user_id, user_type="USER")


class TestSignup(UserServiceTestCase):
    def test_creates_user_with_hashed_password(self) -> None:
        result = self.service.signup(signup_body(1))
        stored = self.session.query(User).filter(User.user_id == result.inserted_id).one()
        self.assertNotEqual(stored.password, TEST_PASSWORD)
        self.assertEqual(stored.id, stored.user_id)
        self.assertTrue(stored.token)
        self.assertTrue(stored.refresh_token)
        self.assertEqual(stored.created_at, stored.updated_at)

    def test_issued_token_identifies_user(self) -> None:
        result = self.service.signup(signup_body(1, user_type="ADMIN"))
        stored = self.directory.find_by_id(result.inserted_id)
        claims = self.issuer.decode_access_token(stored.token)
        self.assertEqual(claims["uid"], result.inserted_id)
        self.assertEqual(claims["user_type"], "ADMIN")
        self.assertEqual(claims["staff_no"], "STAFF-0001")

    def test_duplicate_email_rejected_without_insert(self) -> None:
        self.service.signup(signup_body(1))
        with self.assertRaises(DuplicateUserError) as ctx:
            self.service.signup(signup_body(2, email="USER0001@example.com"))
        self.assertEqual(ctx.exception.message, "this email already exists")
        self.assertEqual(self.session.query(User).count(), 1)

    def test_duplicate_staff_number_rejected_without_insert(self) -> None:
        self.service.signup(signup_body(1))
        with self.assertRaises(DuplicateUserError) as ctx:
            self.service.signup(signup_body(2, staff_no="staff-0001"))
        self.assertEqual(ctx.exception.message, "this user already exists")
        self.assertEqual(self.session.query(User).count(), 1)


class TestLogin(UserServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user_id = self.service.signup(signup_body(1)).inserted_id

    def test_success_rotates_tokens(self) -> None:
        record = self.service.login(LoginRequest(staff_no="STAFF-0001", password=TEST_PASSWORD))
        self.assertEqual(record.user_id, self.user_id)
        self.assertTrue(record.token)
        self.assertTrue(record.refresh_token)
        stored = self.directory.find_by_id(self.user_id)
        self.assertEqual(stored.token, record.token)
        self.assertEqual(stored.refresh_token, record.refresh_token)

    def test_response_has_no_password_field(self) -> None:
        record = self.service.login(LoginRequest(staff_no="STAFF-0001", password=TEST_PASSWORD))
        self.assertNotIn("password", record.model_dump())

    def test_wrong_password_and_unknown_staff_number_look_the_same(self) -> None:
        with self.assertRaises(InvalidCredentialsError) as wrong_pw:
            self.service.login(LoginRequest(staff_no="STAFF-0001", password="not-it"))
        with self.assertRaises(InvalidCredentialsError) as unknown:
            self.service.login(LoginRequest(staff_no="STAFF-9999", password=TEST_PASSWORD))
        self.assertEqual(wrong_pw.exception.message, unknown.exception.message)
        self.assertIn("incorrect", wrong_pw.exception.message)
        self.assertEqual(wrong_pw.exception.status_code, 401)

    def test_login_moves_updated_at_forward(self) -> None:
        before = self.directory.find_by_id(self.user_id).updated_at
        self.service.login(LoginRequest(staff_no="STAFF-0001", password=TEST_PASSWORD))
        after = self.directory.find_by_id(self.user_id)
        self.assertGreater(after.updated_at, before)
        self.assertLess(after.created_at, after.updated_at)

    def test_unknown_staff_number_still_checks_a_password_hash(self) -> None:
        with patch(
            "staffauth.services.users.verify_password",
            return_value=(False, "staff number or password is incorrect"),
        ) as verify:
            with self.assertRaises(InvalidCredentialsError):
                self.service.login(LoginRequest(staff_no="STAFF-9999", password=TEST_PASSWORD))
        verify.assert_called_once()
        checked_hash, supplied = verify.call_args.args
        self.assertTrue(checked_hash.startswith("$2"))
        self.assertEqual(supplied, TEST_PASSWORD)

    def test_failed_token_persist_surfaces_storage_error(self) -> None:
        directory = MagicMock(wraps=self.directory)
        directory.update_tokens.side_effect = StorageError("error occurred while saving the tokens")
        service = UserService(directory, self.issuer, bcrypt_rounds=4)
        with self.assertRaises(StorageError):
            service.login(LoginRequest(staff_no="STAFF-0001", password=TEST_PASSWORD))
        directory.find_by_id.assert_not_called()


class TestGetUser(UserServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.directory.insert(make_user(1))
        self.directory.insert(make_user(2))
        self.first, self.second = f"{1:032x}", f"{2:032x}"

    def test_self(self) -> None:
        self.assertEqual(self.service.get_user(self.caller_for(self.first), self.first).name, "User 1")

    def test_admin_any(self) -> None:
        self.assertEqual(self.service.get_user(self.admin(), self.second).name, "User 2")

    def test_other_user_rejected(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.get_user(self.caller_for(self.first), self.second)

    def test_admin_unknown_id(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.get_user(self.admin(), "e" * 32)


class TestEditUser(UserServiceTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.directory.insert(make_user(1))
        self.user_id = f"{1:032x}"

    def test_rename_visible_to_get_user(self) -> None:
        caller = self.caller_for(self.user_id)
        msg = self.service.edit_user(caller, self.user_id, EditUserRequest(name="New Name"))
        self.assertEqual(msg, EDIT_SUCCESS_MESSAGE)
        self.assertEqual(self.service.get_user(caller, self.user_id).name, "New Name")

    def test_admin_can_rename_anyone(self) -> None:
        self.service.edit_user(self.admin(), self.user_id, EditUserRequest(name="By Admin"))
        self.assertEqual(self.directory.find_by_id(self.user_id).name, "By Admin")

    def test_other_user_rejected(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.edit_user(self.caller_for("b" * 32), self.user_id, EditUserRequest(name="Nope"))

    def test_missing_or_malformed_id(self) -> None:
        for raw in (None, "", "not-hex", "abc"):
            with self.assertRaises(NotFoundError):
                self.service.edit_user(self.admin(), raw, EditUserRequest(name="Whoever"))

    def test_unknown_id(self) -> None:
        with self.assertRaises(NotFoundError):
            self.service.edit_user(self.admin(), "c" * 32, EditUserRequest(name="Ghost"))


class TestGetUsers(UserServiceTestCase):
    def test_admin_only(self) -> None:
        with self.assertRaises(AuthorizationError):
            self.service.get_users(self.caller_for("a" * 32))

    def test_empty(self) -> None:
        page = self.service.get_users(self.admin())
        self.assertEqual(page.total_count, 0)
        self.assertEqual(page.user_items, [])

    def test_defaults_and_fallbacks(self) -> None:
        for n in range(1, 13):
            self.directory.insert(make_user(n))
        self.assertEqual(len(self.service.get_users(self.admin()).user_items), 10)
        page = self.service.get_users(self.admin(), page="2", record_per_page="0")
        self.assertEqual(page.total_count, 12)
        self.assertEqual(len(page.user_items), 2)
        page = self.service.get_users(self.admin(), page="x", record_per_page="5")
        self.assertEqual([u.staff_no for u in page.user_items][0], "STAFF-0001")

    def test_oversized_page_size_is_clamped(self) -> None:
        directory = MagicMock()
        directory.list_page.return_value = (0, [])
        service = UserService(directory, self.issuer, bcrypt_rounds=4)
        service.get_users(self.admin(), record_per_page="99999999999999999999")
        directory.list_page.assert_called_once_with(1, MAX_PAGE_SIZE, None)

    def test_oversized_page_size_returns_every_user(self) -> None:
        for n in range(1, 4):
            self.directory.insert(make_user(n))
        page = self.service.get_users(self.admin(), record_per_page="99999999999999999999")
        self.assertEqual(page.total_count, 3)
        self.assertEqual(len(page.user_items), 3)

    def test_start_index_override(self) -> None:
        for n in range(1, 6):
            self.directory.insert(make_user(n))
        page = self.service.get_users(self.admin(), page="1", record_per_page="2", start_index="4")
        self.assertEqual([u.staff_no for u in page.user_items], ["STAFF-0005"])


if __name__ == "__main__":
    unittest.main()
