"""Notification routes.

POST /notifications/test            — send a test e-mail
POST /notifications/modification    — admin modification alert
POST /notifications/iam-expiration  — owner + admin IAM expiration notices
POST /notifications/vm-expiration   — admin VM expiration summary
GET  /notifications/log             — recent e-mail audit log entries

Every send route answers 200 with ``{"sent": bool}``; delivery failures
are reported in the audit log, not as HTTP errors.
"""
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, EmailStr

from notifier.api.deps import get_email_service
from notifier.notification.email_service import EmailService
from notifier.notification.schemas import (
    IamAccountRecord,
    IamExpirationData,
    LogEntry,
    ModificationData,
    OutboundMessage,
    VmExpirationData,
    VmRecord,
)
from notifier.notification.templates import wrap_html

router = APIRouter(prefix="/notifications", tags=["notifications"])


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class SendTestBody(BaseModel):
    to: EmailStr


class ModificationBody(BaseModel):
    action: str
    item_type: str
    item_name: str
    user_name: str
    details: str | None = None
    timestamp: datetime | None = None


class IamAccountBody(BaseModel):
    requestor: str | None = None
    knox_id: str | None = None
    permission: str | None = None
    cloud_platform: str | None = None
    department: str | None = None
    end_date: str | None = None
    approval_id: str | None = None


class IamExpirationBody(BaseModel):
    accounts: list[IamAccountBody]


class VmBody(BaseModel):
    vm_name: str | None = None
    knox_id: str | None = None
    requestor: str | None = None
    department: str | None = None
    end_date: str | None = None
    approval_number: str | None = None


class VmExpirationBody(BaseModel):
    vms: list[VmBody]


def _entry_dict(entry: LogEntry) -> dict:
    return {
        "timestamp": entry.timestamp.isoformat(),
        "to": entry.to,
        "subject": entry.subject,
        "status": entry.status,
        "message_id": entry.message_id,
        "error": entry.error,
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/test", summary="Send a test e-mail")
def send_test_email(body: SendTestBody, service: EmailService = Depends(get_email_service)):
    html = wrap_html(
        "Test Email",
        "<p>Mail delivery is configured correctly.</p>",
        service.default_site_name,
    )
    sent = service.send_email(OutboundMessage(to=body.to, subject="Test Email", html=html))
    return {"sent": sent}


@router.post("/modification", summary="Send a modification alert to the admin")
def send_modification(body: ModificationBody, service: EmailService = Depends(get_email_service)):
    sent = service.send_modification_notification(ModificationData(**body.model_dump()))
    return {"sent": sent}


@router.post("/iam-expiration", summary="Send IAM expiration notices")
def send_iam_expiration(body: IamExpirationBody, service: EmailService = Depends(get_email_service)):
    data = IamExpirationData(accounts=[IamAccountRecord(**a.model_dump()) for a in body.accounts])
    return {"sent": service.send_iam_expiration_notification(data)}


@router.post("/vm-expiration", summary="Send the VM expiration summary")
def send_vm_expiration(body: VmExpirationBody, service: EmailService = Depends(get_email_service)):
    data = VmExpirationData(vms=[VmRecord(**vm.model_dump()) for vm in body.vms])
    return {"sent": service.send_vm_expiration_notification(data)}


@router.get("/log", summary="Get recent e-mail audit log entries")
def get_log(
    limit: int = Query(default=50, ge=1, le=1000),
    service: EmailService = Depends(get_email_service),
):
    return [_entry_dict(entry) for entry in reversed(service.audit_log.tail(limit))]
