"""SMTP transport used by ``EmailService``.

A transport is built once from the mail settings, verified with a
connect/auth round-trip, and then reused for every send.  Each operation
opens its own connection; ``timeout`` bounds every socket operation.
"""
from __future__ import annotations

import logging
import smtplib
import ssl
from contextlib import contextmanager
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formatdate, make_msgid, parseaddr
from typing import Iterator

from notifier.notification.errors import SendError, TransportInitError

logger = logging.getLogger(__name__)

DEFAULT_SMTP_PORT = 587
IMPLICIT_TLS_PORT = 465


@dataclass
class SendResult:
    message_id: str
    response: str


class SmtpTransport:
    """Submit mail to a single SMTP server."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_SMTP_PORT,
        secure: bool = False,
        user: str | None = None,
        password: str = "",
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.secure = secure
        self.user = user
        self.password = password
        self.timeout = timeout

    @contextmanager
    def _connect(self) -> Iterator[smtplib.SMTP]:
        context = ssl.create_default_context()
        if self.secure:
            server: smtplib.SMTP = smtplib.SMTP_SSL(
                self.host, self.port, timeout=self.timeout, context=context
            )
        else:
            server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        with server:
            server.ehlo()
            if not self.secure and server.has_extn("starttls"):
                server.starttls(context=context)
                server.ehlo()
            if self.user and self.password:
                server.login(self.user, self.password)
            yield server

    # -- verification -------------------------------------------------------

    def verify(self) -> None:
        """Connect, authenticate and issue ``NOOP``.

        Raises ``TransportInitError`` on any network, TLS or auth failure.
        """
        try:
            with self._connect() as server:
                code, _ = server.noop()
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            raise TransportInitError(f"{type(exc).__name__}: {exc}") from exc
        if code != 250:
            raise TransportInitError(f"NOOP returned {code}")
        logger.info("SMTP transport verified for %s:%d", self.host, self.port)

    # -- send -----------------------------------------------------------------

    def build_message(
        self, from_addr: str, to: str, subject: str, html: str, text: str
    ) -> EmailMessage:
        _, sender = parseaddr(from_addr)
        domain = sender.rpartition("@")[2] or None

        msg = EmailMessage()
        msg["From"] = from_addr
        msg["To"] = to
        msg["Subject"] = subject
        msg["Date"] = formatdate(localtime=False)
        msg["Message-ID"] = make_msgid(domain=domain)
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, from_addr: str, to: str, subject: str, html: str, text: str) -> SendResult:
        """Send one message; raise ``SendError`` if it is not accepted."""
        msg = self.build_message(from_addr, to, subject, html, text)
        try:
            with self._connect() as server:
                refused = server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise SendError(f"{type(exc).__name__}: {exc}") from exc
        if refused:
            raise SendError(f"Recipient refused: {', '.join(refused)}")
        return SendResult(message_id=msg["Message-ID"], response="250 OK")
