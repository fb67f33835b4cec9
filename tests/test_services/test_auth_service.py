import time
import unittest

from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from auth.services.auth_service import get_current_active_user, get_current_user
from core.config_loader import settings


def make_token(claims=None, key=None, expired=False):
    now = int(time.time())
    payload = {"sub": "user-42", "exp": now - 60 if expired else now + 3600}
    payload.update(claims or {})
    return jwt.encode(payload, key or settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class AuthServiceTests(unittest.TestCase):
    def test_valid_token_gives_principal(self):
        user = get_current_user(bearer(make_token()))
        self.assertEqual(user.id, "user-42")
        self.assertTrue(user.is_active)
        self.assertIs(get_current_active_user(user), user)

    def test_missing_credentials(self):
        with self.assertRaises(HTTPException) as ctx:
            get_current_user(None)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_expired_token(self):
        with self.assertRaises(HTTPException) as ctx:
            get_current_user(bearer(make_token(expired=True)))
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(ctx.exception.detail, "Token is expired")

    def test_wrong_signature(self):
        with self.assertRaises(HTTPException) as ctx:
            get_current_user(bearer(make_token(key="someone-elses-secret")))
        self.assertEqual(ctx.exception.status_code, 401)

    def test_token_without_subject(self):
        token = jwt.encode({"exp": int(time.time()) + 60}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        with self.assertRaises(HTTPException) as ctx:
            get_current_user(bearer(token))
        self.assertEqual(ctx.exception.status_code, 401)

    def test_overlong_subject_is_rejected(self):
        with self.assertRaises(HTTPException) as ctx:
            get_current_user(bearer(make_token({"sub": "u" * 65})))
        self.assertEqual(ctx.exception.status_code, 401)

    def test_inactive_user(self):
        user = get_current_user(bearer(make_token({"active": False})))
        with self.assertRaises(HTTPException) as ctx:
            get_current_active_user(user)
        self.assertEqual(ctx.exception.status_code, 400)


if __name__ == "__main__":
    unittest.main()
