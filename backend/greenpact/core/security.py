"""Security helpers for password hashing, password policy, and session signing."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext

from .config import get_settings
from .errors import WeakPassword

SESSION_SALT = "greenpact-session"
PASSWORD_SYMBOLS = '!@#$%^&*(),.?":{}|<>'
PASSWORD_MIN_LENGTH = 8

_password_context = CryptContext(schemes=["argon2"], deprecated="auto")

_PASSWORD_RULES: list[tuple[str, re.Pattern[str]]] = [
    ("an uppercase letter", re.compile(r"[A-Z]")),
    ("a lowercase letter", re.compile(r"[a-z]")),
    ("a number", re.compile(r"\d")),
    ("a special character", re.compile("[" + re.escape(PASSWORD_SYMBOLS) + "]")),
]


class PasswordHasher:
    """Hash and verify user passwords using Argon2id."""

    @staticmethod
    def hash(password: str) -> str:
        return _password_context.hash(password)

    @staticmethod
    def verify(password: str, hashed: str) -> bool:
        return _password_context.verify(password, hashed)

    @staticmethod
    def dummy_verify() -> None:
        """Spend the same time as a real verify when there is no hash to check."""
        _password_context.dummy_verify()


def password_policy_failures(password: str) -> list[str]:
    """Return the unmet password rules, empty when the password is acceptable."""

    failures = []
    if len(password) < PASSWORD_MIN_LENGTH:
        failures.append(f"at least {PASSWORD_MIN_LENGTH} characters")
    failures.extend(label for label, pattern in _PASSWORD_RULES if not pattern.search(password))
    return failures


def check_password_strength(password: str) -> None:
    failures = password_policy_failures(password)
    if failures:
        raise WeakPassword(f"Password must contain {', '.join(failures)}.")


@dataclass(frozen=True, slots=True)
class SessionIdentity:
    """Identity decoded from a session token."""

    user_id: int
    role: str


class SessionSigner:
    """Sign and unsign short-lived session payloads."""

    def __init__(self, secret_key: str | None = None, salt: str = SESSION_SALT) -> None:
        key = secret_key or get_settings().secret_key
        self._serializer = URLSafeTimedSerializer(key, salt=salt)

    def dumps(self, data: dict[str, Any]) -> str:
        return self._serializer.dumps(data)

    def loads(self, token: str, max_age: int | None = None) -> dict[str, Any]:
        try:
            return self._serializer.loads(token, max_age=max_age)
        except (BadSignature, SignatureExpired) as exc:
            raise ValueError("Invalid or expired session token") from exc

    def issue(self, user_id: int, role: str) -> str:
        return self.dumps({"sub": user_id, "role": role})

    def identify(self, token: str, max_age: int | None = None) -> SessionIdentity:
        payload = self.loads(token, max_age=max_age)
        if not isinstance(payload, dict):
            raise ValueError("Malformed session payload")
        user_id = payload.get("sub")
        role = payload.get("role")
        if not isinstance(user_id, int) or not isinstance(role, str):
            raise ValueError("Malformed session payload")
        return SessionIdentity(user_id=user_id, role=role)
