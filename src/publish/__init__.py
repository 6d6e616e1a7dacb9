"""Publish domain — the append-only published-articles log."""

from qulome.publish.services import PublishService

__all__ = ["PublishService"]
