"""HTML bodies for the notification e-mails.

The IAM owner template is user-editable plain text with ``{token}``
placeholders.  Substitution is a literal replacement of every occurrence
of each known token; unknown tokens are left untouched.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from html import escape

from notifier.notification.schemas import IamAccountRecord, ModificationData, VmRecord

NOT_AVAILABLE = "N/A"

PLACEHOLDER_TOKENS: tuple[str, ...] = (
    "{removalDate}",
    "{requestor}",
    "{knoxId}",
    "{permission}",
    "{cloudPlatform}",
    "{endDate}",
    "{approvalId}",
)

DEFAULT_IAM_OWNER_SUBJECT = "[Action Required] Your IAM access for {cloudPlatform} is expiring"

DEFAULT_IAM_OWNER_TEMPLATE = """Hello {requestor},

Your IAM access ({permission}) on {cloudPlatform} for account {knoxId} expired on {endDate}.

If no extension is requested, the access will be removed on {removalDate}.

Approval ID: {approvalId}

To keep this access, please submit an extension request through the asset management portal.

Thank you."""

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"[ \t]+")

_SHELL = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 640px; margin: 0 auto; padding: 20px;">
    <div style="background-color: {accent}; color: #fff; padding: 16px 20px; border-radius: 6px 6px 0 0;">
      <h2 style="margin: 0;">{title}</h2>
    </div>
    <div style="background-color: #f9f9f9; padding: 20px; border: 1px solid #ddd; border-top: none;">
      {content}
    </div>
    <p style="font-size: 12px; color: #888; margin-top: 16px;">
      This is an automated message from {site_name}. Please do not reply.
    </p>
  </div>
</body>
</html>"""


def _value(value: object) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    return escape(str(value))


def wrap_html(title: str, content: str, site_name: str, accent: str = "#2c3e50") -> str:
    """Place *content* inside the shared styled HTML shell."""
    return _SHELL.format(
        accent=accent,
        title=escape(title),
        content=content,
        site_name=escape(site_name),
    )


def strip_html_tags(html: str) -> str:
    """Plain-text alternative for an HTML body."""
    text = _TAG_RE.sub("", html)
    lines = [_WS_RE.sub(" ", line).strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line)


# ---------------------------------------------------------------------------
# IAM owner template
# ---------------------------------------------------------------------------

def removal_date(today: date | None = None, grace_days: int = 7) -> str:
    """Return *today* + *grace_days* as a long date, e.g. ``October 25, 2026``."""
    today = today or datetime.now(timezone.utc).date()
    return (today + timedelta(days=grace_days)).strftime("%B %d, %Y")


def placeholder_values(account: IamAccountRecord, removal: str) -> dict[str, str]:
    return {
        "{removalDate}": removal,
        "{requestor}": account.requestor or "",
        "{knoxId}": account.knox_id or "",
        "{permission}": account.permission or "",
        "{cloudPlatform}": account.cloud_platform or "",
        "{endDate}": account.end_date or "",
        "{approvalId}": account.approval_id or "",
    }


def substitute_placeholders(template: str, values: dict[str, str]) -> str:
    rendered = template
    for token in PLACEHOLDER_TOKENS:
        if token in values:
            rendered = rendered.replace(token, values[token])
    return rendered


def plain_text_to_html(text: str) -> str:
    """Convert a plain-text body to HTML, one element per line.

    URL lines become links, other non-empty lines become paragraphs and
    empty lines become ``<br>``.
    """
    parts: list[str] = []
    for raw in text.split("\n"):
        line = raw.strip()
        if line.startswith(("http://", "https://")):
            url = escape(line)
            parts.append(f'<p><a href="{url}" style="color: #1a73e8;">{url}</a></p>')
        elif line:
            parts.append(f"<p>{escape(line)}</p>")
        else:
            parts.append("<br>")
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Admin notifications
# ---------------------------------------------------------------------------

def modification_html(data: ModificationData, site_name: str) -> str:
    ts = data.timestamp or datetime.now(timezone.utc)
    rows = [
        ("Action", data.action),
        ("Item Type", data.item_type),
        ("Item Name", data.item_name),
        ("Modified By", data.user_name),
        ("Time", ts.strftime("%Y-%m-%d %H:%M:%S %Z").strip()),
    ]
    table = "\n".join(
        f'<tr><td style="padding: 6px 12px; font-weight: bold;">{label}</td>'
        f'<td style="padding: 6px 12px;">{_value(value)}</td></tr>'
        for label, value in rows
    )
    content = f'<table style="border-collapse: collapse;">\n{table}\n</table>'
    if data.details:
        content += (
            '\n<h3 style="margin-top: 20px;">Details</h3>\n'
            f'<pre style="white-space: pre-wrap; background: #fff; padding: 12px; '
            f'border: 1px solid #eee;">{escape(data.details)}</pre>'
        )
    return wrap_html(f"{data.item_type} {data.action}", content, site_name)


def vm_expiration_html(vms: list[VmRecord], site_name: str) -> str:
    header = "".join(
        f'<th style="padding: 8px; border: 1px solid #ddd; background: #eee;">{label}</th>'
        for label in ("VM Name", "Knox ID", "Requestor", "Department", "End Date", "Approval No.")
    )
    body_rows = []
    for vm in vms:
        cells = "".join(
            f'<td style="padding: 8px; border: 1px solid #ddd;">{_value(value)}</td>'
            for value in (
                vm.vm_name,
                vm.knox_id,
                vm.requestor,
                vm.department,
                vm.end_date,
                vm.approval_number,
            )
        )
        body_rows.append(f"<tr>{cells}</tr>")
    content = (
        f"<p>The following {len(vms)} virtual machine(s) have reached their end date "
        "and require review.</p>\n"
        f'<table style="border-collapse: collapse; width: 100%;">\n<tr>{header}</tr>\n'
        + "\n".join(body_rows)
        + "\n</table>"
    )
    return wrap_html("VM Expiration Notice", content, site_name, accent="#c0392b")


def iam_admin_html(account: IamAccountRecord, owner_email: str, site_name: str) -> str:
    rows = [
        ("Requestor", account.requestor),
        ("Knox ID", account.knox_id),
        ("Permission", account.permission),
        ("Cloud Platform", account.cloud_platform),
        ("Department", account.department),
        ("End Date", account.end_date),
        ("Approval ID", account.approval_id),
    ]
    table = "\n".join(
        f'<tr><td style="padding: 6px 12px; font-weight: bold;">{label}</td>'
        f'<td style="padding: 6px 12px;">{_value(value)}</td></tr>'
        for label, value in rows
    )
    content = (
        "<p>The following IAM access has expired.</p>\n"
        f'<table style="border-collapse: collapse;">\n{table}\n</table>\n'
        f"<p>A notification was sent to the owner at <strong>{escape(owner_email)}</strong>.</p>"
    )
    return wrap_html("IAM Access Expiration", content, site_name, accent="#d35400")
