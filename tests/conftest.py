"""
Pytest configuration and shared fixtures.
"""

import uuid
from dataclasses import replace

import pytest
from asgiref.sync import async_to_sync

from accounts.infrastructure.repositories.django_user_repository import DjangoUserRepository
from core.domain.value_objects import HardwareInfo
from licenses.application.services.license_manager import LicenseManager
from licenses.domain.license import License
from licenses.domain.license_key import generate_license_key
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from tests.fakes import (
    InMemoryLicenseRepository,
    InMemoryTokenRepository,
    InMemoryUserRepository,
    RecordingAuditLog,
    RecordingEventBus,
)
from two_factor.application.services.two_factor_service import TwoFactorService
from verification.application.services.verification_token_service import (
    VerificationTokenService,
)
from verification.infrastructure.repositories.django_token_repository import (
    DjangoTokenRepository,
)

# Fakes


@pytest.fixture
def fake_license_repository():
    """Fixture for an in-memory LicenseRepository."""
    return InMemoryLicenseRepository()


@pytest.fixture
def fake_user_repository():
    """Fixture for an in-memory UserRepository."""
    return InMemoryUserRepository()


@pytest.fixture
def fake_token_repository(fake_user_repository):
    """Fixture for an in-memory TokenRepository."""
    return InMemoryTokenRepository(fake_user_repository)


@pytest.fixture
def audit_log():
    """Fixture for a recording AuditLog."""
    return RecordingAuditLog()


@pytest.fixture
def event_bus():
    """Fixture for a recording EventBus."""
    return RecordingEventBus()


@pytest.fixture
def user(fake_user_repository):
    """Fixture for a user stored in the fake user repository."""
    return fake_user_repository.add_user("alice@example.com", "Alice")


# Services


@pytest.fixture
def license_manager(fake_license_repository, audit_log, event_bus):
    """Fixture for a LicenseManager wired to fakes."""
    return LicenseManager(fake_license_repository, audit_log, event_bus)


@pytest.fixture
def token_service(fake_token_repository, fake_user_repository):
    """Fixture for a VerificationTokenService wired to fakes."""
    return VerificationTokenService(fake_token_repository, fake_user_repository)


@pytest.fixture
def two_factor_service(fake_user_repository, audit_log, event_bus):
    """Fixture for a TwoFactorService wired to fakes."""
    return TwoFactorService(
        fake_user_repository, audit_log, event_bus, issuer="Test Store"
    )


# Entities


@pytest.fixture
def hardware():
    """Fixture for a sample machine."""
    return HardwareInfo(
        cpu_id="BFEBFBFF000906EA",
        motherboard_id="MB-4471",
        disk_id="S3Z9NB0K123456",
        mac_address="00:1A:2B:3C:4D:5E",
        system_uuid="4C4C4544-0037-3010-8052-B4C04F4D3732",
    )


@pytest.fixture
def other_hardware():
    """Fixture for a second, different machine."""
    return HardwareInfo(cpu_id="AMD-00A20F10", mac_address="00:11:22:33:44:55")


@pytest.fixture
def make_license(fake_license_repository, user):
    """Factory fixture storing a license in the fake repository."""

    def _make(product_id="photo-suite", duration_days=30, **changes):
        license = License.create(
            license_key=generate_license_key(product_id, str(user.id)),
            user_id=user.id,
            product_id=product_id,
            duration_days=duration_days,
        )
        if changes:
            license = replace(license, **changes)
        return fake_license_repository.add(license)

    return _make


# Django adapters


@pytest.fixture
def license_repository():
    """Fixture for DjangoLicenseRepository."""
    return DjangoLicenseRepository()


@pytest.fixture
def user_repository():
    """Fixture for DjangoUserRepository."""
    return DjangoUserRepository()


@pytest.fixture
def token_repository():
    """Fixture for DjangoTokenRepository."""
    return DjangoTokenRepository()


@pytest.fixture
def db_user(db, django_user_model):
    """Fixture for a User saved in database."""
    unique_id = uuid.uuid4().hex[:8]
    return django_user_model.objects.create_user(
        username=f"user{unique_id}",
        email=f"user{unique_id}@example.com",
        password="old-password",
        name="Database User",
    )


@pytest.fixture
def db_license(db_user, license_repository):
    """Fixture for a License saved in database."""
    license = License.create(
        license_key=generate_license_key("photo-suite", str(db_user.id)),
        user_id=db_user.id,
        product_id="photo-suite",
        duration_days=30,
    )
    return async_to_sync(license_repository.insert)(license)
