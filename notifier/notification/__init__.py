"""E-mail notification package.

Sends modification, IAM-expiration and VM-expiration notices through a
lazily initialised SMTP transport, and appends every send attempt to the
e-mail audit log.
"""
