from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from notifier.db.base import Base
from notifier.notification.audit_log import EmailAuditLog
from notifier.notification.schemas import MailConfiguration
from notifier.notification.transport import SendResult


def _make_config(**overrides) -> MailConfiguration:
    fields = {
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_user": "mailer",
        "smtp_password": "s3cret",
        "from_address": "assets@example.com",
        "site_name": "Asset Portal",
        "admin_email": "admin@example.com",
        "enable_admin_notifications": True,
        "notify_on_iam_expiration": True,
        "notify_on_vm_expiration": True,
    }
    fields.update(overrides)
    return MailConfiguration(**fields)


def _make_transport(message_id: str = "<abc@example.com>") -> MagicMock:
    transport = MagicMock()
    transport.user = "mailer"
    transport.send.return_value = SendResult(message_id=message_id, response="250 OK")
    return transport


@pytest.fixture()
def audit_log(tmp_path) -> EmailAuditLog:
    return EmailAuditLog(tmp_path / "LOGS" / "email_notifications.log")


@pytest.fixture()
def session_factory():
    """In-memory SQLite sessionmaker with all tables created."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def make_config():
    return _make_config


@pytest.fixture()
def make_transport():
    return _make_transport
