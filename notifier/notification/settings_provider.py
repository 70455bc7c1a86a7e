"""Sources of mail configuration for ``EmailService``.

A provider is asked for a fresh ``MailConfiguration`` on every use; the
service never caches the result across calls.
"""
from __future__ import annotations

import logging
from typing import Callable, Protocol

from sqlalchemy.orm import Session

from notifier.core.security import SecurityService
from notifier.db.models import SystemSettings
from notifier.db.repositories import SystemSettingsRepository
from notifier.notification.schemas import MailConfiguration

logger = logging.getLogger(__name__)


class SettingsProvider(Protocol):
    def get_system_settings(self) -> MailConfiguration | None: ...


class StaticSettingsProvider:
    """Return the same configuration on every call."""

    def __init__(self, config: MailConfiguration | None) -> None:
        self.config = config

    def get_system_settings(self) -> MailConfiguration | None:
        return self.config


def configuration_from_row(row: SystemSettings, security: SecurityService) -> MailConfiguration:
    """Copy a ``system_settings`` row into a detached ``MailConfiguration``."""
    return MailConfiguration(
        smtp_host=row.smtp_host,
        smtp_port=row.smtp_port,
        smtp_user=row.smtp_user,
        smtp_password=security.unseal(row.smtp_password),
        from_address=row.company_email,
        site_name=row.site_name,
        admin_email=row.admin_email,
        enable_admin_notifications=bool(row.enable_admin_notifications),
        notify_on_iam_expiration=bool(row.notify_on_iam_expiration),
        notify_on_vm_expiration=bool(row.notify_on_vm_expiration),
        iam_expiration_email_subject=row.iam_expiration_email_subject,
        iam_expiration_email_template=row.iam_expiration_email_template,
    )


class DatabaseSettingsProvider:
    """Read the single ``system_settings`` row through a short-lived session."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        security: SecurityService | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.security = security or SecurityService()

    def get_system_settings(self) -> MailConfiguration | None:
        with self.session_factory() as db:
            row = SystemSettingsRepository(db).get_current()
            if row is None:
                logger.debug("No system_settings row found")
                return None
            return configuration_from_row(row, self.security)
