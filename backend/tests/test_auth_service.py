import unittest

from app.core.errors import Conflict, Unauthenticated, ValidationError
from app.core.security import create_session_token, verify_password
from app.db.models import AuthToken
from app.services.auth_service import (
    DuplicateUserError,
    InvalidCredentialsError,
    authenticate_user,
    login,
    register_user,
    resolve_session_token,
)
from support import make_session_factory, make_user


class TestRegistration(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = make_session_factory()
        self.db = self.factory()

    def tearDown(self) -> None:
        self.db.close()
        self.factory.kw["bind"].dispose()

    def test_username_shorter_than_three_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            register_user(self.db, "ab", "secret1")

    def test_password_shorter_than_six_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            register_user(self.db, "abc", "abcde")

    def test_minimum_lengths_are_accepted(self) -> None:
        user = register_user(self.db, "abc", "abcdef")
        self.assertIsNotNone(user.id)
        self.assertEqual(user.username, "abc")

    def test_username_longer_than_fifty_is_rejected(self) -> None:
        register_user(self.db, "a" * 50, "abcdef")
        with self.assertRaises(ValidationError):
            register_user(self.db, "b" * 51, "abcdef")

    def test_blank_or_missing_fields_are_rejected(self) -> None:
        for username, password in [(None, "abcdef"), ("alice", None), ("   ", "abcdef"), ("alice", "      ")]:
            with self.subTest(username=username, password=password):
                with self.assertRaises(ValidationError) as ctx:
                    register_user(self.db, username, password)
                self.assertEqual(ctx.exception.message, "Username and password are required")

    def test_duplicate_username_is_a_conflict(self) -> None:
        register_user(self.db, "alice", "password1")
        with self.assertRaises(DuplicateUserError) as ctx:
            register_user(self.db, "alice", "password2")
        self.assertIsInstance(ctx.exception, Conflict)
        self.assertEqual(ctx.exception.message, "Username already exists")

    def test_session_is_usable_after_duplicate(self) -> None:
        register_user(self.db, "alice", "password1")
        with self.assertRaises(DuplicateUserError):
            register_user(self.db, "alice", "password1")
        self.assertEqual(register_user(self.db, "bob", "password1").username, "bob")

    def test_password_is_stored_hashed(self) -> None:
        user = register_user(self.db, "alice", "password1")
        self.assertNotEqual(user.password_hash, "password1")
        self.assertTrue(verify_password("password1", user.password_hash))


class TestLoginAndSessions(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = make_session_factory()
        self.db = self.factory()
        self.alice = make_user(self.db, "alice")

    def tearDown(self) -> None:
        self.db.close()
        self.factory.kw["bind"].dispose()

    def test_unknown_user_and_wrong_password_fail_identically(self) -> None:
        with self.assertRaises(InvalidCredentialsError) as unknown:
            authenticate_user(self.db, "nobody", "password1")
        with self.assertRaises(InvalidCredentialsError) as wrong:
            authenticate_user(self.db, "alice", "wrong-password")
        self.assertEqual(unknown.exception.message, wrong.exception.message)
        self.assertEqual(unknown.exception.status_code, 401)

    def test_login_returns_resolvable_token(self) -> None:
        user, token = login(self.db, "alice", "password1")
        self.assertEqual(user.id, self.alice.id)
        self.assertEqual(resolve_session_token(self.db, token), self.alice.id)

    def test_second_login_invalidates_first_token(self) -> None:
        _, first = login(self.db, "alice", "password1")
        _, second = login(self.db, "alice", "password1")

        self.assertNotEqual(first, second)
        self.assertEqual(resolve_session_token(self.db, second), self.alice.id)
        with self.assertRaises(Unauthenticated):
            resolve_session_token(self.db, first)

    def test_one_token_row_per_user(self) -> None:
        for _ in range(3):
            login(self.db, "alice", "password1")
        rows = self.db.query(AuthToken).filter(AuthToken.user_id == self.alice.id).count()
        self.assertEqual(rows, 1)

    def test_tokens_of_different_users_are_independent(self) -> None:
        bob = make_user(self.db, "bob")
        _, alice_token = login(self.db, "alice", "password1")
        _, bob_token = login(self.db, "bob", "password1")
        self.assertEqual(resolve_session_token(self.db, alice_token), self.alice.id)
        self.assertEqual(resolve_session_token(self.db, bob_token), bob.id)

    def test_missing_tampered_or_unissued_tokens_are_unauthenticated(self) -> None:
        _, token = login(self.db, "alice", "password1")
        unissued = create_session_token(self.alice.id, "alice")
        for candidate in [None, "", "not-a-token", token + "x", unissued]:
            with self.subTest(token=candidate):
                with self.assertRaises(Unauthenticated) as ctx:
                    resolve_session_token(self.db, candidate)
                self.assertEqual(ctx.exception.message, "Authentication required")


if __name__ == "__main__":
    unittest.main()
