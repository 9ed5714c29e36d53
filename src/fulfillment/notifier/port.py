"""Notifier port — abstract interface for merchant notifications."""

from abc import ABC, abstractmethod


class NotifierPort(ABC):
    @abstractmethod
    def notify(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        link: str,
        metadata: dict | None = None,
    ) -> dict:
        """Deliver a notification to ``user_id``.

        Returns:
            dict with keys: notification_id, status
        """
        ...
