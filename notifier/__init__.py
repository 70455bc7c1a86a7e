"""Outbound e-mail notifier for the asset and IAM management application."""
