"""FastAPI dependency injection — database sessions and the e-mail service."""
from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy.orm import Session

from notifier.core.security import SecurityService, build_security_service
from notifier.core.settings import get_settings
from notifier.db.session import get_session_factory
from notifier.notification.audit_log import EmailAuditLog
from notifier.notification.email_service import EmailService
from notifier.notification.settings_provider import DatabaseSettingsProvider


def get_db() -> Generator[Session, None, None]:
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    db = get_session_factory()()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_security_service() -> SecurityService:
    return build_security_service(get_settings().fernet_key)


@lru_cache(maxsize=1)
def get_email_service() -> EmailService:
    """Return the process-wide ``EmailService`` backed by ``system_settings``."""
    settings = get_settings()
    return EmailService(
        DatabaseSettingsProvider(get_session_factory(), get_security_service()),
        EmailAuditLog(settings.email_log_path),
        smtp_timeout=settings.smtp_timeout_seconds,
        owner_domain=settings.owner_email_domain,
        default_site_name=settings.default_site_name,
        removal_grace_days=settings.owner_removal_grace_days,
    )
