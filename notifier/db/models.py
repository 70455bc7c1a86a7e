from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func, text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from notifier.db.base import Base

SYSTEM_SETTINGS_ROW_ID = 1


class SystemSettings(Base):
    """Mail and notification settings edited by administrators.

    The table holds a single row (``id == 1``).
    """

    __tablename__ = "system_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SYSTEM_SETTINGS_ROW_ID)
    site_name: Mapped[str | None] = mapped_column(String(256), nullable=True)
    smtp_host: Mapped[str | None] = mapped_column(String(512), nullable=True)
    smtp_port: Mapped[int | None] = mapped_column(Integer, nullable=True)
    smtp_user: Mapped[str | None] = mapped_column(String(512), nullable=True)
    smtp_password: Mapped[str | None] = mapped_column(String(512), nullable=True)
    company_email: Mapped[str | None] = mapped_column(String(512), nullable=True)
    admin_email: Mapped[str | None] = mapped_column(String(512), nullable=True)
    enable_admin_notifications: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sql_text("false")
    )
    notify_on_iam_expiration: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sql_text("false")
    )
    notify_on_vm_expiration: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sql_text("false")
    )
    iam_expiration_email_subject: Mapped[str | None] = mapped_column(String(512), nullable=True)
    iam_expiration_email_template: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
