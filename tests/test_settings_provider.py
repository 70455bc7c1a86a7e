"""Tests for settings persistence: repository, provider and secret sealing."""
from __future__ import annotations

import pytest
from cryptography.fernet import Fernet

from notifier.core.security import (
    ENCRYPTED_PREFIX,
    FernetEncryptionProvider,
    SecurityService,
    build_security_service,
)
from notifier.db.models import SYSTEM_SETTINGS_ROW_ID
from notifier.db.repositories import SystemSettingsRepository
from notifier.notification.schemas import MailConfiguration
from notifier.notification.settings_provider import DatabaseSettingsProvider, StaticSettingsProvider


def _security() -> SecurityService:
    return SecurityService(FernetEncryptionProvider(Fernet.generate_key().decode("utf-8")))


# ===========================================================================
# SystemSettingsRepository
# ===========================================================================

class TestSystemSettingsRepository:
    def test_upsert_creates_single_row_then_updates(self, session_factory):
        with session_factory() as db:
            repo = SystemSettingsRepository(db)
            assert repo.get_current() is None

            first = repo.upsert(smtp_host="smtp.a.com", company_email="a@a.com")
            second = repo.upsert(smtp_host="smtp.b.com")
            db.commit()

            assert first is second
            assert repo.get_current().smtp_host == "smtp.b.com"
            assert repo.get_current().company_email == "a@a.com"
            assert repo.get_current() is second
            assert second.id == SYSTEM_SETTINGS_ROW_ID


# ===========================================================================
# DatabaseSettingsProvider
# ===========================================================================

class TestDatabaseSettingsProvider:
    def test_no_row_returns_none(self, session_factory):
        assert DatabaseSettingsProvider(session_factory).get_system_settings() is None

    def test_row_mapped_to_configuration(self, session_factory):
        security = _security()
        with session_factory() as db:
            SystemSettingsRepository(db).upsert(
                site_name="Asset Portal",
                smtp_host="smtp.example.com",
                smtp_port=465,
                smtp_password=security.seal("pw"),
                company_email="assets@example.com",
                admin_email="admin@example.com",
                notify_on_vm_expiration=True,
            )
            db.commit()

        config = DatabaseSettingsProvider(session_factory, security).get_system_settings()

        assert config.is_configured
        assert config.from_address == "assets@example.com"
        assert config.smtp_port == 465
        assert config.smtp_password == "pw"
        assert config.notify_on_vm_expiration is True
        assert config.notify_on_iam_expiration is False

    def test_each_call_reads_fresh_values(self, session_factory):
        provider = DatabaseSettingsProvider(session_factory)
        with session_factory() as db:
            SystemSettingsRepository(db).upsert(smtp_host="one")
            db.commit()
        assert provider.get_system_settings().smtp_host == "one"

        with session_factory() as db:
            SystemSettingsRepository(db).upsert(smtp_host="two")
            db.commit()
        assert provider.get_system_settings().smtp_host == "two"


def test_static_provider_returns_config():
    config = MailConfiguration(smtp_host="h", from_address="f@x.com")

    assert StaticSettingsProvider(config).get_system_settings() is config
    assert StaticSettingsProvider(None).get_system_settings() is None


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({"smtp_host": "h", "from_address": "f@x.com"}, True),
        ({"smtp_host": "h"}, False),
        ({"from_address": "f@x.com"}, False),
        ({}, False),
    ],
)
def test_is_configured(overrides, expected):
    assert MailConfiguration(**overrides).is_configured is expected


# ===========================================================================
# SecurityService
# ===========================================================================

class TestSecurityService:
    def test_seal_and_unseal(self):
        security = _security()
        sealed = security.seal("s3cret")

        assert sealed.startswith(ENCRYPTED_PREFIX)
        assert "s3cret" not in sealed
        assert security.unseal(sealed) == "s3cret"

    def test_plain_values_pass_through(self):
        assert SecurityService().seal("plain") == "plain"
        assert _security().unseal("legacy-plain") == "legacy-plain"
        assert _security().seal(None) is None

    def test_sealed_value_without_key_raises(self):
        sealed = _security().seal("s3cret")

        with pytest.raises(ValueError, match="Encryption provider is required"):
            SecurityService().unseal(sealed)

    def test_wrong_key_raises(self):
        sealed = _security().seal("s3cret")

        with pytest.raises(ValueError, match="cannot be decrypted"):
            _security().unseal(sealed)

    def test_build_without_key(self):
        assert build_security_service(None).encryption_provider is None
        assert build_security_service(Fernet.generate_key().decode()).encryption_provider is not None
