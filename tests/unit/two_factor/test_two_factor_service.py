"""
Unit tests for TwoFactorService.
"""

import asyncio
import uuid

import pytest

from core.domain.exceptions import InvalidCodeError, InvalidStateError, NotFoundError
from core.domain.value_objects import TwoFactorMechanism
from tests.fakes import InMemoryUserRepository
from two_factor.application.services.two_factor_service import TwoFactorService
from two_factor.domain.backup_codes import generate_backup_codes
from two_factor.domain.events import BackupCodesRegenerated, TwoFactorDisabled, TwoFactorEnabled
from two_factor.domain.totp import code_at, generate_totp_secret

T = 30 * 56666667 + 5


async def enable(service, user):
    """Run the two-phase setup to completion and return the setup material."""
    setup = await service.begin_setup(user.id)
    assert await service.complete_setup(
        user.id, setup.secret, code_at(setup.secret, T), setup.backup_codes, for_time=T
    )
    return setup


class YieldingUserRepository(InMemoryUserRepository):
    """Hands control back to the event loop after every lookup."""

    async def find_by_id(self, user_id):
        user = await super().find_by_id(user_id)
        await asyncio.sleep(0)
        return user


@pytest.mark.asyncio
class TestSetup:
    """Tests for the two-phase setup."""

    async def test_begin_setup_returns_material(self, two_factor_service, user, fake_user_repository):
        setup = await two_factor_service.begin_setup(user.id)

        assert len(setup.secret) == 32
        assert setup.provisioning_uri.startswith("otpauth://totp/")
        assert "issuer=Test%20Store" in setup.provisioning_uri
        assert "alice%40example.com" in setup.provisioning_uri
        assert setup.qr_code.startswith("data:image/png;base64,")
        assert setup.manual_entry_key.replace(" ", "") == setup.secret
        assert len(setup.backup_codes) == 10
        assert setup.secret not in repr(setup)
        # Nothing is stored yet
        assert not fake_user_repository.users[user.id].two_factor_enabled

    async def test_begin_setup_with_label(self, two_factor_service, user):
        setup = await two_factor_service.begin_setup(user.id, account_label="workstation")
        assert "workstation" in setup.provisioning_uri

    async def test_complete_setup(self, two_factor_service, user, fake_user_repository, audit_log, event_bus):
        setup = await enable(two_factor_service, user)

        stored = fake_user_repository.users[user.id]
        assert stored.two_factor_enabled
        assert stored.two_factor_secret == setup.secret
        assert await two_factor_service.is_enabled(user.id)
        assert await two_factor_service.backup_codes_remaining(user.id) == 10
        assert audit_log.actions() == ["TWO_FACTOR_ENABLED"]
        assert len(event_bus.of_type(TwoFactorEnabled)) == 1

    async def test_backup_codes_stored_hashed(self, two_factor_service, user, fake_user_repository):
        setup = await enable(two_factor_service, user)
        stored = fake_user_repository.backup_codes[user.id]
        assert not set(setup.backup_codes) & stored

    async def test_wrong_code_leaves_disabled(self, two_factor_service, user, fake_user_repository):
        setup = await two_factor_service.begin_setup(user.id)
        wrong = code_at(setup.secret, T + 300)

        assert not await two_factor_service.complete_setup(
            user.id, setup.secret, wrong, setup.backup_codes, for_time=T
        )
        assert not fake_user_repository.users[user.id].two_factor_enabled

    async def test_malformed_secret_refused(self, two_factor_service, user):
        assert not await two_factor_service.complete_setup(
            user.id, "not-base32!", "123456", [], for_time=T
        )
        assert not await two_factor_service.is_enabled(user.id)

    async def test_begin_setup_when_enabled(self, two_factor_service, user):
        await enable(two_factor_service, user)
        with pytest.raises(InvalidStateError):
            await two_factor_service.begin_setup(user.id)

    async def test_begin_setup_unknown_user(self, two_factor_service):
        with pytest.raises(NotFoundError):
            await two_factor_service.begin_setup(uuid.uuid4())

    async def test_complete_setup_cannot_rekey_enabled_account(
        self, two_factor_service, user, fake_user_repository, audit_log
    ):
        original = await enable(two_factor_service, user)
        other_secret = generate_totp_secret()

        assert not await two_factor_service.complete_setup(
            user.id,
            other_secret,
            code_at(other_secret, T),
            generate_backup_codes(),
            for_time=T,
        )

        assert fake_user_repository.users[user.id].two_factor_secret == original.secret
        assert (await two_factor_service.verify(user.id, original.backup_codes[0], for_time=T)).success
        assert audit_log.actions().count("TWO_FACTOR_ENABLED") == 1

    @pytest.mark.parametrize(
        "backup_codes",
        [
            ["x", ""],
            [],
            generate_backup_codes(9),
            ["ABCDEFGH"] * 10,
            generate_backup_codes(9) + ["abc-0000"],
        ],
    )
    async def test_unusable_backup_codes_refused(
        self, two_factor_service, user, fake_user_repository, backup_codes
    ):
        secret = generate_totp_secret()

        assert not await two_factor_service.complete_setup(
            user.id, secret, code_at(secret, T), backup_codes, for_time=T
        )
        assert not fake_user_repository.users[user.id].two_factor_enabled
        assert await two_factor_service.backup_codes_remaining(user.id) == 0


@pytest.mark.asyncio
class TestVerify:
    """Tests for login verification."""

    async def test_totp_code(self, two_factor_service, user, audit_log):
        setup = await enable(two_factor_service, user)

        result = await two_factor_service.verify(user.id, code_at(setup.secret, T + 30), for_time=T)

        assert result.success
        assert result.mechanism == TwoFactorMechanism.TOTP
        assert audit_log.events[-1].details == {"mechanism": "totp"}

    async def test_totp_outside_window(self, two_factor_service, user, audit_log):
        setup = await enable(two_factor_service, user)

        result = await two_factor_service.verify(user.id, code_at(setup.secret, T + 60), for_time=T)

        assert not result.success
        assert audit_log.actions()[-1] == "TWO_FACTOR_FAILED"

    async def test_backup_code_is_single_use(self, two_factor_service, user):
        """Test a backup code works once and the remaining count drops by one."""
        setup = await enable(two_factor_service, user)
        code = setup.backup_codes[0]

        first = await two_factor_service.verify(user.id, code, for_time=T)
        second = await two_factor_service.verify(user.id, code, for_time=T)

        assert first.success
        assert first.mechanism == TwoFactorMechanism.BACKUP
        assert not second.success
        assert await two_factor_service.backup_codes_remaining(user.id) == 9

    async def test_concurrent_backup_code_has_one_winner(self, two_factor_service, user):
        setup = await enable(two_factor_service, user)
        code = setup.backup_codes[0]

        results = await asyncio.gather(
            *[two_factor_service.verify(user.id, code, for_time=T) for _ in range(4)]
        )

        assert [r.success for r in results].count(True) == 1
        assert await two_factor_service.backup_codes_remaining(user.id) == 9

    async def test_backup_code_formatting_is_forgiven(self, two_factor_service, user):
        setup = await enable(two_factor_service, user)
        code = setup.backup_codes[1]
        typed = f"{code[:4].lower()}-{code[4:].lower()}"

        assert (await two_factor_service.verify(user.id, typed, for_time=T)).success

    async def test_unknown_code(self, two_factor_service, user):
        await enable(two_factor_service, user)
        assert not (await two_factor_service.verify(user.id, "ZZZZZZZZ", for_time=T)).success
        assert await two_factor_service.backup_codes_remaining(user.id) == 10

    async def test_not_enabled(self, two_factor_service, user):
        result = await two_factor_service.verify(user.id, "123456", for_time=T)
        assert not result.success
        assert result.mechanism is None

    async def test_unknown_user(self, two_factor_service):
        assert not (await two_factor_service.verify(uuid.uuid4(), "123456")).success

    async def test_raise_for_failure(self, two_factor_service, user):
        setup = await enable(two_factor_service, user)

        (await two_factor_service.verify(user.id, code_at(setup.secret, T + 30), for_time=T)).raise_for_failure()
        with pytest.raises(InvalidCodeError):
            (await two_factor_service.verify(user.id, "ZZZZZZZZ", for_time=T)).raise_for_failure()


@pytest.mark.asyncio
class TestDisableAndRegenerate:
    """Tests for disabling and regenerating backup codes."""

    async def test_disable_clears_everything(self, two_factor_service, user, fake_user_repository, event_bus):
        setup = await enable(two_factor_service, user)

        assert await two_factor_service.disable(user.id)

        stored = fake_user_repository.users[user.id]
        assert not stored.two_factor_enabled
        assert stored.two_factor_secret is None
        assert await two_factor_service.backup_codes_remaining(user.id) == 0
        assert not (await two_factor_service.verify(user.id, setup.backup_codes[0], for_time=T)).success
        assert len(event_bus.of_type(TwoFactorDisabled)) == 1

    async def test_setup_again_after_disable(self, two_factor_service, user):
        first = await enable(two_factor_service, user)
        await two_factor_service.disable(user.id)

        second = await enable(two_factor_service, user)

        assert second.secret != first.secret

    async def test_disable_unknown_user(self, two_factor_service):
        assert not await two_factor_service.disable(uuid.uuid4())

    async def test_regenerate_invalidates_old_codes(self, two_factor_service, user, event_bus):
        setup = await enable(two_factor_service, user)

        codes = await two_factor_service.regenerate_backup_codes(user.id)

        assert len(codes) == 10
        assert not (await two_factor_service.verify(user.id, setup.backup_codes[0], for_time=T)).success
        assert (await two_factor_service.verify(user.id, codes[0], for_time=T)).success
        assert event_bus.of_type(BackupCodesRegenerated)[0].count == 10

    async def test_regenerate_when_not_enabled(self, two_factor_service, user):
        with pytest.raises(InvalidStateError):
            await two_factor_service.regenerate_backup_codes(user.id)

    async def test_regenerate_unknown_user(self, two_factor_service):
        with pytest.raises(NotFoundError):
            await two_factor_service.regenerate_backup_codes(uuid.uuid4())

    async def test_regenerate_racing_disable_leaves_no_codes(self, user, audit_log, event_bus):
        repository = YieldingUserRepository()
        repository.users[user.id] = user
        repository.backup_codes[user.id] = set()
        service = TwoFactorService(repository, audit_log, event_bus, issuer="Test Store")
        await enable(service, user)

        results = await asyncio.gather(
            service.regenerate_backup_codes(user.id),
            service.disable(user.id),
            return_exceptions=True,
        )

        assert isinstance(results[0], InvalidStateError)
        assert results[1] is True
        assert not repository.users[user.id].two_factor_enabled
        assert await service.backup_codes_remaining(user.id) == 0
        assert not event_bus.of_type(BackupCodesRegenerated)
