"""
Integration tests for the audit log, notifications, tasks and commands.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from io import StringIO

import pytest
from asgiref.sync import async_to_sync
from django.core.management import call_command

from core.domain.value_objects import LicenseStatus, TokenType
from core.infrastructure.audit_log import DjangoAuditLog
from core.infrastructure.models import SecurityLog
from core.infrastructure.notifications import EmailNotificationDispatcher
from core.ports.audit_log import AuditEvent
from core.ports.notifications import Notification
from CredentialService.services import build_license_manager, build_verification_token_service
from licenses.domain.license import License
from licenses.domain.license_key import generate_license_key
from licenses.infrastructure.models import License as LicenseModel
from verification.domain.token import VerificationToken
from verification.infrastructure.models import VerificationToken as TokenModel


def utc(**delta):
    return datetime.now(timezone.utc) + timedelta(**delta)


def insert_license(license_repository, user_id, expires_at):
    license = License.create(
        license_key=generate_license_key("photo-suite", str(user_id)),
        user_id=user_id,
        product_id="photo-suite",
        duration_days=30,
    )
    return async_to_sync(license_repository.insert)(replace(license, expires_at=expires_at))


@pytest.mark.django_db
@pytest.mark.integration
class TestDjangoAuditLog:
    """Integration tests for the security log writer."""

    def test_record(self):
        async_to_sync(DjangoAuditLog().record)(
            AuditEvent(actor_id="admin-1", action="LICENSE_REVOKED", details={"reason": "fraud"})
        )

        entry = SecurityLog.objects.get()
        assert entry.actor_id == "admin-1"
        assert entry.action == "LICENSE_REVOKED"
        assert entry.details == {"reason": "fraud"}

    def test_system_actor(self):
        async_to_sync(DjangoAuditLog().record)(AuditEvent(actor_id=None, action="LICENSE_EXPIRED"))
        assert str(SecurityLog.objects.get()) == "LICENSE_EXPIRED by system"

    def test_write_failure_is_logged_and_dropped(self, caplog):
        async_to_sync(DjangoAuditLog().record)(
            AuditEvent(actor_id="admin-1", action="LICENSE_REVOKED", details={"at": object()})
        )

        assert not SecurityLog.objects.exists()
        assert "Failed to write audit event LICENSE_REVOKED" in caplog.text


@pytest.mark.django_db
@pytest.mark.integration
class TestEmailNotificationDispatcher:
    """Integration tests for email delivery."""

    def test_dispatch_sends_mail(self, db_user, mailoutbox):
        notification = Notification(
            user_id=str(db_user.id),
            kind="license_revoked",
            title="License revoked",
            message="Your license for photo-suite has been revoked.",
        )

        assert async_to_sync(EmailNotificationDispatcher(from_email="store@example.com").dispatch)(notification)

        (message,) = mailoutbox
        assert message.to == [db_user.email]
        assert message.subject == "License revoked"
        assert message.from_email == "store@example.com"

    def test_unknown_user(self, mailoutbox):
        notification = Notification(
            user_id=str(uuid.uuid4()), kind="license_revoked", title="t", message="m"
        )

        assert not async_to_sync(EmailNotificationDispatcher().dispatch)(notification)
        assert mailoutbox == []


@pytest.mark.django_db
@pytest.mark.integration
class TestWiredServices:
    """End-to-end flows through the composition root."""

    def test_license_lifecycle(self, db_user, mailoutbox):
        manager = build_license_manager()

        license = async_to_sync(manager.issue)(db_user.id, "photo-suite", 30, None)
        assert async_to_sync(manager.validate)(license.license_key, "photo-suite").is_valid

        assert async_to_sync(manager.revoke)(license.id, "fraud", "admin-1")
        result = async_to_sync(manager.validate)(license.license_key)

        assert result.status == "revoked"
        assert list(
            SecurityLog.objects.order_by("created_at").values_list("action", flat=True)
        ) == ["LICENSE_ISSUED", "LICENSE_REVOKED"]
        assert [m.subject for m in mailoutbox] == ["License revoked"]

    def test_email_confirmation(self, db_user, django_user_model):
        service = build_verification_token_service()

        token = async_to_sync(service.issue)(db_user.id, TokenType.EMAIL_VERIFICATION)
        user = async_to_sync(service.confirm_email)(token.token)

        assert user.is_email_verified
        assert django_user_model.objects.get(id=db_user.id).email_verified_at is not None


@pytest.mark.django_db(transaction=True)
@pytest.mark.integration
class TestMaintenanceCommands:
    """Integration tests for the periodic maintenance entry points."""

    def test_sweep_expired_licenses_dry_run(self, db_user, license_repository):
        overdue = insert_license(license_repository, db_user.id, utc(days=-1))
        out = StringIO()

        call_command("sweep_expired_licenses", "--dry-run", stdout=out)

        assert "Found 1 expired license(s)" in out.getvalue()
        assert LicenseModel.objects.get(id=overdue.id).status == LicenseStatus.ACTIVE.value

    def test_sweep_expired_licenses(self, db_user, license_repository):
        overdue = insert_license(license_repository, db_user.id, utc(days=-1))
        current = insert_license(license_repository, db_user.id, utc(days=5))
        out = StringIO()

        call_command("sweep_expired_licenses", stdout=out)

        assert "Successfully marked 1 license(s) as expired" in out.getvalue()
        assert LicenseModel.objects.get(id=overdue.id).status == LicenseStatus.EXPIRED.value
        assert LicenseModel.objects.get(id=current.id).status == LicenseStatus.ACTIVE.value

    def test_notify_expiring_licenses(self, db_user, license_repository, mailoutbox):
        insert_license(license_repository, db_user.id, utc(hours=12))
        insert_license(license_repository, db_user.id, utc(days=5))
        out = StringIO()

        call_command("notify_expiring_licenses", stdout=out)

        assert "2 warning(s) for licenses expiring within 7 day(s)" in out.getvalue()
        assert "1 warning(s) for licenses expiring within 1 day(s)" in out.getvalue()
        subjects = sorted(m.subject for m in mailoutbox)
        assert subjects == [
            "License expiring soon",
            "License expiring soon",
            "Urgent: License expiring soon",
        ]

    def test_sweep_expired_tokens(self, db_user):
        stale = VerificationToken.create(
            db_user.id, TokenType.PASSWORD_RESET, now=utc(hours=-3)
        )
        TokenModel.objects.create(
            id=stale.id,
            user_id=db_user.id,
            token=stale.token,
            type=stale.type.value,
            expires_at=stale.expires_at,
            created_at=stale.created_at,
        )
        out = StringIO()

        call_command("sweep_expired_tokens", stdout=out)

        assert "Deleted 1 expired token(s)" in out.getvalue()
        assert not TokenModel.objects.exists()
