# app/services/v1/identity_service.py
"""
Accounts and credentials.

Accounts are keyed by the normalized id card; patients find their account
through that number, never through a foreign key.
"""

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from app.core.security import PasswordHasher
from app.db.models import Account, Patient, PasswordChange
from app.db.unit_of_work import UnitOfWork
from common import get_app_logger
from common.api_error import AuthFailureError, DuplicateIdentityError, NotFoundError
from app.core.formatting import normalize_id_card, strip_separators

logger = get_app_logger(__name__)

class IdentityService:
    def __init__(self, uow: UnitOfWork, hasher: PasswordHasher):
        self.uow = uow
        self.hasher = hasher

    async def _find_account(self, id_card: str):
        query = (
            select(Account)
            .where(Account.id_card == id_card)
            .execution_options(logging_token="IdentityService._find_account")
        )
        return await self.uow.query_optional(query)

    async def register(self, id_card: str, password: str) -> Account:
        """Create the account for an id card. Raises DuplicateIdentityError if taken."""
        id_card = normalize_id_card(id_card)
        if await self._find_account(id_card) is not None:
            raise DuplicateIdentityError()

        account = Account(id_card=id_card, password=self.hasher.hash(password))
        self.uow.add(account)
        try:
            await self.uow.flush()
        except IntegrityError as e:
            # a concurrent registration won the unique index on users.id_card
            raise DuplicateIdentityError() from e
        logger.info("Account registered", user_id=account.id)
        return account

    async def verify(self, id_card: str, password: str) -> Account:
        """
        Check credentials.

        Unknown id card and wrong password raise the same AuthFailureError.
        """
        id_card = strip_separators(id_card or "")
        account = await self._find_account(id_card)
        if account is None or not self.hasher.verify(password, account.password):
            logger.info("Login rejected")
            raise AuthFailureError()
        return account

    async def change_password(self, patient_id: int, password: str) -> None:
        """Rotate the password of the account belonging to a patient."""
        patient = await self.uow.get(Patient, patient_id)
        if patient is None:
            raise NotFoundError("Patient not found")

        account = await self._find_account(patient.id_card)
        if account is None:
            raise NotFoundError("User not found")

        hashed = self.hasher.hash(password)
        account.password = hashed
        patient.password = hashed
        self.uow.add(PasswordChange(user_id=account.id, patient_id=patient.id))
        await self.uow.flush()
        logger.info("Password changed", user_id=account.id, patient_id=patient.id)

    async def sync_identity_number(self, old_id_card: str, new_id_card: str) -> None:
        """Re-key the account from old_id_card to new_id_card."""
        old_id_card = normalize_id_card(old_id_card)
        new_id_card = normalize_id_card(new_id_card)
        if old_id_card == new_id_card:
            return

        if await self._find_account(new_id_card) is not None:
            raise DuplicateIdentityError()

        try:
            rows = await self.uow.execute(
                update(Account)
                .where(Account.id_card == old_id_card)
                .values(id_card=new_id_card)
                .execution_options(synchronize_session="fetch")
            )
        except IntegrityError as e:
            raise DuplicateIdentityError() from e
        if rows == 0:
            raise NotFoundError("User not found")
        logger.info("Account id card updated")


__all__ = ["IdentityService"]
