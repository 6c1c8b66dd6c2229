"""Tests for account registration, login and credential changes."""

import pytest
from sqlalchemy import select, func

from app.db.models import Account, Patient, PasswordChange
from app.services.v1 import IdentityService
from common.api_error import AuthFailureError, DuplicateIdentityError, NotFoundError

pytestmark = pytest.mark.anyio

ID_CARD = "1234567890123"
OTHER_ID_CARD = "3210987654321"


async def _account_ids(db_manager, id_card: str) -> list[int]:
    async with db_manager.unit_of_work() as uow:
        return list(
            await uow.query_many(select(Account.id).where(Account.id_card == id_card))
        )


class TestRegisterAndVerify:
    async def test_register_normalizes_and_hashes(self, uow, hasher):
        account = await IdentityService(uow, hasher).register(
            "1-2345-67890-12-3", "pw-1"
        )

        assert account.id is not None
        assert account.id_card == ID_CARD
        assert account.password != "pw-1"
        assert hasher.verify("pw-1", account.password)

    async def test_duplicate_registration_keeps_first(self, uow, hasher):
        service = IdentityService(uow, hasher)
        first = await service.register(ID_CARD, "first")

        with pytest.raises(DuplicateIdentityError):
            await service.register("1-2345-67890-12-3", "second")

        verified = await service.verify(ID_CARD, "first")
        assert verified.id == first.id

    async def test_verify_accepts_display_form(self, uow, hasher):
        service = IdentityService(uow, hasher)
        await service.register(ID_CARD, "pw")

        account = await service.verify("1-2345-67890-12-3", "pw")
        assert account.id_card == ID_CARD

    async def test_wrong_password_and_unknown_identity_look_the_same(self, uow, hasher):
        service = IdentityService(uow, hasher)
        await service.register(ID_CARD, "pw")

        with pytest.raises(AuthFailureError) as wrong_password:
            await service.verify(ID_CARD, "not-pw")
        with pytest.raises(AuthFailureError) as unknown_identity:
            await service.verify(OTHER_ID_CARD, "pw")

        assert wrong_password.value.message == unknown_identity.value.message
        assert wrong_password.value.status_code == unknown_identity.value.status_code == 401

    async def test_malformed_identity_is_an_auth_failure(self, uow, hasher):
        with pytest.raises(AuthFailureError):
            await IdentityService(uow, hasher).verify("abc", "pw")


class TestSyncIdentityNumber:
    async def test_rekeys_account(self, db_manager, hasher):
        async with db_manager.unit_of_work() as uow:
            await IdentityService(uow, hasher).register(ID_CARD, "pw")
        async with db_manager.unit_of_work() as uow:
            await IdentityService(uow, hasher).sync_identity_number(
                ID_CARD, "3-2109-87654-32-1"
            )

        assert await _account_ids(db_manager, ID_CARD) == []
        assert len(await _account_ids(db_manager, OTHER_ID_CARD)) == 1

    async def test_same_number_is_noop(self, uow, hasher):
        service = IdentityService(uow, hasher)
        await service.register(ID_CARD, "pw")
        await service.sync_identity_number(ID_CARD, "1-2345-67890-12-3")

        assert (await service.verify(ID_CARD, "pw")).id_card == ID_CARD

    async def test_target_taken(self, uow, hasher):
        service = IdentityService(uow, hasher)
        await service.register(ID_CARD, "pw")
        await service.register(OTHER_ID_CARD, "pw")

        with pytest.raises(DuplicateIdentityError):
            await service.sync_identity_number(ID_CARD, OTHER_ID_CARD)

    async def test_unknown_source(self, uow, hasher):
        with pytest.raises(NotFoundError):
            await IdentityService(uow, hasher).sync_identity_number(
                ID_CARD, OTHER_ID_CARD
            )


class TestChangePassword:
    async def test_rotates_both_hashes_and_records_change(
        self, db_manager, hasher, patient_id
    ):
        async with db_manager.unit_of_work() as uow:
            await IdentityService(uow, hasher).change_password(patient_id, "new-pass")

        async with db_manager.unit_of_work() as uow:
            service = IdentityService(uow, hasher)
            account = await service.verify(ID_CARD, "new-pass")
            with pytest.raises(AuthFailureError):
                await service.verify(ID_CARD, "secret-pass")

            patient = await uow.get(Patient, patient_id)
            assert patient.password == account.password

            changes = await uow.query_one(
                select(func.count()).select_from(PasswordChange)
            )
            assert changes == 1

    async def test_unknown_patient(self, uow, hasher):
        with pytest.raises(NotFoundError):
            await IdentityService(uow, hasher).change_password(999, "pw")


class TestUniqueIndexBackstop:
    """A registration that slips past the lookup still fails as a duplicate."""

    @pytest.fixture
    def blind_lookup(self, monkeypatch):
        async def _never_found(self, id_card):
            return None

        monkeypatch.setattr(IdentityService, "_find_account", _never_found)

    async def _existing(self, db_manager, hasher, *id_cards):
        async with db_manager.unit_of_work() as uow:
            for id_card in id_cards:
                await IdentityService(uow, hasher).register(id_card, "pw")

    async def test_register_collision_on_flush(self, db_manager, hasher, blind_lookup):
        await self._existing(db_manager, hasher, ID_CARD)

        with pytest.raises(DuplicateIdentityError):
            async with db_manager.unit_of_work() as uow:
                await IdentityService(uow, hasher).register(ID_CARD, "other")

        assert len(await _account_ids(db_manager, ID_CARD)) == 1

    async def test_create_patient_reports_duplicate_not_internal_failure(
        self, db_manager, hasher, patient_create, blind_lookup
    ):
        from app.services.v1 import PatientService

        await self._existing(db_manager, hasher, ID_CARD)

        with pytest.raises(DuplicateIdentityError) as exc_info:
            async with db_manager.unit_of_work() as uow:
                await PatientService(uow, hasher).create_patient(patient_create)
        assert exc_info.value.status_code == 409

    async def test_rekey_collision_on_update(self, db_manager, hasher, blind_lookup):
        await self._existing(db_manager, hasher, ID_CARD, OTHER_ID_CARD)

        with pytest.raises(DuplicateIdentityError):
            async with db_manager.unit_of_work() as uow:
                await IdentityService(uow, hasher).sync_identity_number(
                    ID_CARD, OTHER_ID_CARD
                )

        assert len(await _account_ids(db_manager, ID_CARD)) == 1
