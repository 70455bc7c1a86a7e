"""Tests for notifier/notification/audit_log.py."""
from __future__ import annotations

import threading
from datetime import datetime, timezone

from notifier.notification.audit_log import EmailAuditLog, format_entry, parse_line
from notifier.notification.schemas import LogEntry

_TS = datetime(2026, 10, 18, 9, 30, 0, 123000, tzinfo=timezone.utc)


def _entry(**overrides) -> LogEntry:
    fields = {
        "timestamp": _TS,
        "to": "bob@example.com",
        "subject": "Hello",
        "status": "success",
    }
    fields.update(overrides)
    return LogEntry(**fields)


# ===========================================================================
# format_entry / parse_line
# ===========================================================================

class TestFormat:
    def test_success_line_with_message_id(self):
        line = format_entry(_entry(message_id="<m1@example.com>"))

        assert line == (
            "[2026-10-18T09:30:00.123Z] [SUCCESS] To: bob@example.com | Subject: Hello"
            " | MessageID: <m1@example.com>\n"
        )

    def test_failed_line_with_error(self):
        line = format_entry(_entry(status="failed", error="Email service not configured"))

        assert line == (
            "[2026-10-18T09:30:00.123Z] [FAILED] To: bob@example.com | Subject: Hello"
            " | Error: Email service not configured\n"
        )

    def test_multiline_error_stays_on_one_line(self):
        line = format_entry(_entry(status="failed", error="550 rejected\nmailbox full"))

        assert line.count("\n") == 1
        assert "Error: 550 rejected mailbox full" in line

    def test_naive_timestamp_treated_as_utc(self):
        line = format_entry(_entry(timestamp=datetime(2026, 1, 2, 3, 4, 5)))

        assert line.startswith("[2026-01-02T03:04:05.000Z]")

    def test_parse_round_trip_fields(self):
        line = format_entry(_entry(status="failed", error="timeout", message_id="<x@y>"))
        entry = parse_line(line)

        assert entry is not None
        assert entry.timestamp == _TS
        assert entry.status == "failed"
        assert entry.message_id == "<x@y>"
        assert entry.error == "timeout"

    def test_parse_malformed_returns_none(self):
        assert parse_line("garbage\n") is None


# ===========================================================================
# EmailAuditLog
# ===========================================================================

class TestEmailAuditLog:
    def test_creates_directory_and_appends(self, tmp_path):
        log = EmailAuditLog(tmp_path / "LOGS" / "email_notifications.log")

        log.append(_entry(subject="first"))
        log.append(_entry(subject="second"))

        lines = log.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert "Subject: first" in lines[0]
        assert "Subject: second" in lines[1]

    def test_directory_recreated_if_removed(self, tmp_path):
        log = EmailAuditLog(tmp_path / "LOGS" / "email_notifications.log")
        log.append(_entry())
        log.path.unlink()
        log.path.parent.rmdir()

        log.append(_entry())

        assert log.path.read_text(encoding="utf-8").count("\n") == 1

    def test_write_failure_is_swallowed(self, tmp_path):
        (tmp_path / "LOGS").write_text("a file, not a directory")
        log = EmailAuditLog(tmp_path / "LOGS" / "email_notifications.log")

        log.append(_entry())

    def test_unencodable_subject_is_escaped(self, tmp_path):
        log = EmailAuditLog(tmp_path / "email.log")

        log.append(_entry(subject="bad \ud800", to="x\udcff@example.com"))

        line = log.path.read_text(encoding="utf-8")
        assert "Subject: bad \\ud800" in line
        assert "To: x\\udcff@example.com" in line
        assert parse_line(line) is not None

    def test_concurrent_appends_keep_whole_lines(self, tmp_path):
        log = EmailAuditLog(tmp_path / "email.log")

        def worker(n: int) -> None:
            for i in range(50):
                log.append(_entry(subject=f"t{n}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        lines = log.path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 400
        assert all(parse_line(line) is not None for line in lines)

    def test_tail_returns_latest_entries(self, tmp_path):
        log = EmailAuditLog(tmp_path / "email.log")
        for i in range(5):
            log.append(_entry(subject=f"s{i}"))

        assert [e.subject for e in log.tail(2)] == ["s3", "s4"]

    def test_tail_missing_file_is_empty(self, tmp_path):
        assert EmailAuditLog(tmp_path / "none.log").tail() == []
