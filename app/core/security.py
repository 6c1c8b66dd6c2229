# app/core/security.py
from passlib.context import CryptContext
from common.api_error import InternalFailureError


class PasswordHasher:
    """
    One-way salted password hashing (bcrypt) with a fixed work factor.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__ident="2b",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        try:
            return self._context.hash(password)
        except ValueError as e:
            raise InternalFailureError(cause=f"password hashing failed: {e}") from e

    def verify(self, password: str, hashed_password: str) -> bool:
        # A malformed stored hash is a failed login, not a server error
        try:
            return self._context.verify(password, hashed_password)
        except ValueError:
            return False


__all__ = ["PasswordHasher"]
