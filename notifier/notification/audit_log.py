"""Append-only e-mail audit log.

One line per send attempt, in the format::

    [<ISO timestamp>] [<SUCCESS|FAILED>] To: <addr> | Subject: <subj>[ | MessageID: <id>][ | Error: <msg>]

Log readers depend on this format.  Writing is best-effort: a failure to
append never propagates to the caller.
"""
from __future__ import annotations

import logging
import re
import threading
from datetime import datetime, timezone
from pathlib import Path

from notifier.notification.schemas import LogEntry

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path("LOGS") / "email_notifications.log"

_LINE_RE = re.compile(
    r"^\[(?P<timestamp>[^\]]+)\] \[(?P<status>SUCCESS|FAILED)\] "
    r"To: (?P<to>.*?) \| Subject: (?P<subject>.*?)"
    r"(?: \| MessageID: (?P<message_id>.*?))?"
    r"(?: \| Error: (?P<error>.*))?$"
)


def _one_line(value: str) -> str:
    return " ".join(value.splitlines())


def _format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_entry(entry: LogEntry) -> str:
    """Render *entry* as a single newline-terminated log line."""
    line = (
        f"[{_format_timestamp(entry.timestamp)}] [{entry.status.upper()}] "
        f"To: {_one_line(entry.to)} | Subject: {_one_line(entry.subject)}"
    )
    if entry.message_id:
        line += f" | MessageID: {_one_line(entry.message_id)}"
    if entry.error:
        line += f" | Error: {_one_line(entry.error)}"
    return line + "\n"


def parse_line(line: str) -> LogEntry | None:
    """Parse one log line back into a ``LogEntry``; ``None`` if malformed."""
    match = _LINE_RE.match(line.rstrip("\n"))
    if match is None:
        return None
    try:
        ts = datetime.fromisoformat(match["timestamp"].replace("Z", "+00:00"))
    except ValueError:
        return None
    return LogEntry(
        timestamp=ts,
        to=match["to"],
        subject=match["subject"],
        status="success" if match["status"] == "SUCCESS" else "failed",
        error=match["error"],
        message_id=match["message_id"],
    )


class EmailAuditLog:
    """Write ``LogEntry`` lines to *path*, creating its directory on demand."""

    def __init__(self, path: str | Path = DEFAULT_LOG_PATH) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, entry: LogEntry) -> None:
        try:
            line = format_entry(entry)
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8", errors="backslashreplace") as fh:
                    fh.write(line)
        except (OSError, ValueError) as exc:
            logger.debug("Could not write e-mail audit log %s: %s", self.path, exc)

    def tail(self, limit: int = 50) -> list[LogEntry]:
        """Return the last *limit* well-formed entries, oldest first."""
        if limit <= 0 or not self.path.is_file():
            return []
        with self.path.open("r", encoding="utf-8", errors="replace") as fh:
            lines = fh.readlines()
        entries = [entry for entry in (parse_line(line) for line in lines) if entry is not None]
        return entries[-limit:]
