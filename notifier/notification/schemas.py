"""Dataclasses passed into and out of the e-mail service."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MailConfiguration:
    """Snapshot of the mail settings returned by a ``SettingsProvider``."""

    smtp_host: str | None = None
    smtp_port: int | None = None
    smtp_user: str | None = None
    smtp_password: str | None = None
    from_address: str | None = None
    site_name: str | None = None
    admin_email: str | None = None
    enable_admin_notifications: bool = False
    notify_on_iam_expiration: bool = False
    notify_on_vm_expiration: bool = False
    iam_expiration_email_subject: str | None = None
    iam_expiration_email_template: str | None = None

    @property
    def is_configured(self) -> bool:
        """True when both the SMTP host and the sender address are set."""
        return bool(self.smtp_host) and bool(self.from_address)


# ---------------------------------------------------------------------------
# Messages and audit entries
# ---------------------------------------------------------------------------

@dataclass
class OutboundMessage:
    to: str
    subject: str
    html: str
    text: str | None = None


@dataclass(frozen=True)
class LogEntry:
    """One line of the e-mail audit log."""

    timestamp: datetime
    to: str
    subject: str
    status: Literal["success", "failed"]
    error: str | None = None
    message_id: str | None = None


# ---------------------------------------------------------------------------
# Notification payloads
# ---------------------------------------------------------------------------

@dataclass
class ModificationData:
    action: str
    item_type: str
    item_name: str
    user_name: str
    details: str | None = None
    timestamp: datetime | None = None


@dataclass
class IamAccountRecord:
    requestor: str | None = None
    knox_id: str | None = None
    permission: str | None = None
    cloud_platform: str | None = None
    department: str | None = None
    end_date: str | None = None
    approval_id: str | None = None


@dataclass
class IamExpirationData:
    accounts: list[IamAccountRecord] = field(default_factory=list)


@dataclass
class VmRecord:
    vm_name: str | None = None
    knox_id: str | None = None
    requestor: str | None = None
    department: str | None = None
    end_date: str | None = None
    approval_number: str | None = None


@dataclass
class VmExpirationData:
    vms: list[VmRecord] = field(default_factory=list)
