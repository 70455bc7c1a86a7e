"""E-mail service: lazy SMTP transport, audited sends, notification builders.

Every public operation returns ``bool`` and never raises.  ``send_email``
writes exactly one audit entry per call; builders whose feature flag or
admin recipient is missing return ``False`` before reaching it.

Concurrency: initialisation runs under a single lock and installs the
transport only after it has been verified, so a failed attempt never
replaces a working one.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone

from notifier.notification.audit_log import EmailAuditLog
from notifier.notification.errors import NotConfiguredError, TransportInitError
from notifier.notification.schemas import (
    IamAccountRecord,
    IamExpirationData,
    LogEntry,
    MailConfiguration,
    ModificationData,
    OutboundMessage,
    VmExpirationData,
)
from notifier.notification.settings_provider import SettingsProvider
from notifier.notification import templates
from notifier.notification.transport import DEFAULT_SMTP_PORT, IMPLICIT_TLS_PORT, SmtpTransport

logger = logging.getLogger(__name__)

NOT_CONFIGURED_ERROR = "Email service not configured"
DEFAULT_SITE_NAME = "Asset Management System"
DEFAULT_OWNER_DOMAIN = "samsung.com"


def owner_email_for(knox_id: str, domain: str = DEFAULT_OWNER_DOMAIN) -> str:
    """Derive the owner address from a Knox ID, e.g. ``jdoe`` -> ``jdoe@samsung.com``."""
    return f"{knox_id}@{domain}"


class EmailService:
    """Send notification e-mails through a lazily initialised SMTP transport."""

    def __init__(
        self,
        settings_provider: SettingsProvider,
        audit_log: EmailAuditLog | None = None,
        *,
        smtp_timeout: float = 30.0,
        owner_domain: str = DEFAULT_OWNER_DOMAIN,
        default_site_name: str = DEFAULT_SITE_NAME,
        removal_grace_days: int = 7,
    ) -> None:
        self.settings_provider = settings_provider
        self.audit_log = audit_log or EmailAuditLog()
        self.smtp_timeout = smtp_timeout
        self.owner_domain = owner_domain
        self.default_site_name = default_site_name
        self.removal_grace_days = removal_grace_days
        self.transporter: SmtpTransport | None = None
        self._init_lock = threading.Lock()

    # -- configuration ------------------------------------------------------

    def _get_configuration(self) -> MailConfiguration | None:
        try:
            return self.settings_provider.get_system_settings()
        except Exception:
            logger.exception("Failed to load mail settings")
            return None

    def _site_name(self, config: MailConfiguration | None) -> str:
        return (config.site_name if config else None) or self.default_site_name

    # -- transport lifecycle ------------------------------------------------

    def _build_transport(self, config: MailConfiguration) -> SmtpTransport:
        if not config.is_configured:
            raise NotConfiguredError("SMTP host or sender address missing")
        port = config.smtp_port or DEFAULT_SMTP_PORT
        return SmtpTransport(
            host=config.smtp_host,
            port=port,
            secure=port == IMPLICIT_TLS_PORT,
            user=config.smtp_user or config.from_address,
            password=config.smtp_password or "",
            timeout=self.smtp_timeout,
        )

    def initialize(self) -> bool:
        """Build and verify the SMTP transport from the current settings."""
        with self._init_lock:
            config = self._get_configuration()
            if config is None or not config.is_configured:
                logger.info("Email service not configured; SMTP host or sender address missing")
                return False

            candidate = self._build_transport(config)
            try:
                candidate.verify()
            except TransportInitError as exc:
                logger.error("Email transport verification failed: %s", exc)
                return False

            self.transporter = candidate
            logger.info("Email service initialised (%s:%d)", candidate.host, candidate.port)
            return True

    def reset(self) -> None:
        """Drop the current transport so the next send re-reads the settings."""
        with self._init_lock:
            self.transporter = None

    # -- core send ----------------------------------------------------------

    def _log(self, message: OutboundMessage, status: str, *, error: str | None = None,
             message_id: str | None = None) -> None:
        self.audit_log.append(
            LogEntry(
                timestamp=datetime.now(timezone.utc),
                to=message.to,
                subject=message.subject,
                status=status,
                error=error,
                message_id=message_id,
            )
        )

    def send_email(self, message: OutboundMessage) -> bool:
        """Send *message*; append one audit entry; return whether it was accepted."""
        if self.transporter is None and not self.initialize():
            self._log(message, "failed", error=NOT_CONFIGURED_ERROR)
            return False

        transporter = self.transporter
        if transporter is None:
            self._log(message, "failed", error=NOT_CONFIGURED_ERROR)
            return False

        try:
            config = self._get_configuration()
            from_address = (config.from_address if config else None) or transporter.user
            from_header = f"{self._site_name(config)} <{from_address}>"
            text = message.text if message.text is not None else templates.strip_html_tags(message.html)
            result = transporter.send(from_header, message.to, message.subject, message.html, text)
        except Exception as exc:
            logger.error("Email send failed (subject=%r): %s", message.subject, exc)
            self._log(message, "failed", error=str(exc))
            return False

        logger.info("Email sent (subject=%r, message_id=%s)", message.subject, result.message_id)
        self._log(message, "success", message_id=result.message_id)
        return True

    # -- builders -------------------------------------------------------------

    def send_modification_notification(self, data: ModificationData) -> bool:
        config = self._get_configuration()
        if config is None or not config.enable_admin_notifications or not config.admin_email:
            return False

        site_name = self._site_name(config)
        return self.send_email(
            OutboundMessage(
                to=config.admin_email,
                subject=f"[{site_name}] {data.action}: {data.item_type} - {data.item_name}",
                html=templates.modification_html(data, site_name),
            )
        )

    def send_vm_expiration_notification(self, data: VmExpirationData) -> bool:
        config = self._get_configuration()
        if config is None or not config.notify_on_vm_expiration or not config.admin_email:
            return False

        site_name = self._site_name(config)
        return self.send_email(
            OutboundMessage(
                to=config.admin_email,
                subject=f"[{site_name}] VM Expiration Notice - {len(data.vms)} VM(s)",
                html=templates.vm_expiration_html(data.vms, site_name),
            )
        )

    def send_iam_expiration_notification(self, data: IamExpirationData) -> bool:
        """Notify each account owner and the admin, one pair of e-mails per account.

        Returns True if any owner or admin e-mail in the batch was sent.
        """
        config = self._get_configuration()
        if config is None or not config.notify_on_iam_expiration or not config.admin_email:
            return False

        site_name = self._site_name(config)
        any_sent = False
        for account in data.accounts:
            owner_email = owner_email_for(account.knox_id or "", self.owner_domain)
            try:
                if self.send_iam_expiration_owner_notification(account):
                    any_sent = True
            except Exception:
                logger.exception("Owner notification failed for knox_id=%s", account.knox_id)

            try:
                sent = self.send_email(
                    OutboundMessage(
                        to=config.admin_email,
                        subject=(
                            f"[{site_name}] IAM Access Expired - "
                            f"{account.knox_id or templates.NOT_AVAILABLE} "
                            f"({account.cloud_platform or templates.NOT_AVAILABLE})"
                        ),
                        html=templates.iam_admin_html(account, owner_email, site_name),
                    )
                )
                if sent:
                    any_sent = True
            except Exception:
                logger.exception("Admin notification failed for knox_id=%s", account.knox_id)

        return any_sent

    def send_iam_expiration_owner_notification(self, account: IamAccountRecord) -> bool:
        """Send the expiration notice to the account owner.

        Does not initialise the transport; returns False if it is not ready.
        """
        if self.transporter is None:
            return False

        config = self._get_configuration()
        site_name = self._site_name(config)
        subject_template = (config.iam_expiration_email_subject if config else None) or ""
        body_template = (config.iam_expiration_email_template if config else None) or ""
        if not subject_template.strip():
            subject_template = templates.DEFAULT_IAM_OWNER_SUBJECT
        if not body_template.strip():
            body_template = templates.DEFAULT_IAM_OWNER_TEMPLATE

        values = templates.placeholder_values(
            account,
            templates.removal_date(grace_days=self.removal_grace_days),
        )
        subject = templates.substitute_placeholders(subject_template, values)
        body = templates.substitute_placeholders(body_template, values)
        html = templates.wrap_html(
            "IAM Access Expiration",
            templates.plain_text_to_html(body),
            site_name,
            accent="#d35400",
        )
        return self.send_email(
            OutboundMessage(
                to=owner_email_for(account.knox_id or "", self.owner_domain),
                subject=subject,
                html=html,
                text=body,
            )
        )
