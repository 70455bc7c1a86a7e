"""Exception types for the notification package.

These are raised inside the package and converted to a ``False`` return
value at the boundary of each public ``EmailService`` operation.
"""
from __future__ import annotations


class NotificationError(Exception):
    """Base class for notification failures."""


class NotConfiguredError(NotificationError):
    """SMTP host or sender address is missing from the system settings."""


class TransportInitError(NotificationError):
    """The SMTP transport could not be verified (network, auth, protocol)."""


class SendError(NotificationError):
    """The SMTP server rejected or failed to accept a message."""
