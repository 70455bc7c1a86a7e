"""Mail settings routes — GET /settings/email, PUT /settings/email."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from notifier.api.deps import get_db, get_email_service, get_security_service
from notifier.core.security import SecurityService
from notifier.db.models import SystemSettings
from notifier.db.repositories import SystemSettingsRepository
from notifier.notification.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])

PASSWORD_MASK = "********"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class EmailSettingsBody(BaseModel):
    site_name: str | None = None
    smtp_host: str | None = None
    smtp_port: int | None = Field(default=None, ge=1, le=65535)
    smtp_user: str | None = None
    smtp_password: str | None = None
    company_email: EmailStr | None = None
    admin_email: EmailStr | None = None
    enable_admin_notifications: bool = False
    notify_on_iam_expiration: bool = False
    notify_on_vm_expiration: bool = False
    iam_expiration_email_subject: str | None = None
    iam_expiration_email_template: str | None = None


def _settings_dict(row: SystemSettings | None) -> dict:
    if row is None:
        return {"configured": False}
    return {
        "configured": bool(row.smtp_host and row.company_email),
        "site_name": row.site_name,
        "smtp_host": row.smtp_host,
        "smtp_port": row.smtp_port,
        "smtp_user": row.smtp_user,
        "smtp_password": PASSWORD_MASK if row.smtp_password else None,
        "company_email": row.company_email,
        "admin_email": row.admin_email,
        "enable_admin_notifications": row.enable_admin_notifications,
        "notify_on_iam_expiration": row.notify_on_iam_expiration,
        "notify_on_vm_expiration": row.notify_on_vm_expiration,
        "iam_expiration_email_subject": row.iam_expiration_email_subject,
        "iam_expiration_email_template": row.iam_expiration_email_template,
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("/email", summary="Get mail and notification settings")
def get_email_settings(db: Session = Depends(get_db)):
    return _settings_dict(SystemSettingsRepository(db).get_current())


@router.put("/email", summary="Update mail and notification settings")
def update_email_settings(
    body: EmailSettingsBody,
    db: Session = Depends(get_db),
    service: EmailService = Depends(get_email_service),
    security: SecurityService = Depends(get_security_service),
):
    fields = body.model_dump(exclude_unset=True)
    # An omitted password, or the mask echoed back by GET, keeps the stored one.
    if fields.get("smtp_password") == PASSWORD_MASK:
        fields.pop("smtp_password")
    elif "smtp_password" in fields:
        fields["smtp_password"] = security.seal(fields["smtp_password"])

    row = SystemSettingsRepository(db).upsert(**fields)
    db.commit()
    service.reset()
    logger.info("Mail settings updated (host=%s)", row.smtp_host)
    return _settings_dict(row)
