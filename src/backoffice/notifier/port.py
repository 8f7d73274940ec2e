"""Notifier port: abstract interface for customer notifications."""

from abc import ABC, abstractmethod


class NotifierPort(ABC):
    """Abstract interface for notification adapters.

    Delivery is fire-and-forget from the back office's point of view.
    """

    @abstractmethod
    def notify(self, order_id: str, event: str) -> dict:
        """Hand an order event (e.g. "shipped") to the notification service.

        Returns:
            dict with keys: notification_id, status ("queued" or "failed"), error (optional)
        """
        ...
