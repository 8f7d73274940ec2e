"""Fake notifier: records notification requests for testing."""

from uuid import uuid4

from backoffice.notifier.port import NotifierPort


class FakeNotifier(NotifierPort):
    """Notifier that records requests in memory for test assertions."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification service unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification service unavailable"):
        """Configure the fake notifier behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def notify(self, order_id: str, event: str) -> dict:
        if not self.should_succeed:
            return {"notification_id": None, "status": "failed", "error": self.failure_reason}

        notification_id = f"ntf-{uuid4().hex[:12]}"
        self.sent.append({"notification_id": notification_id, "order_id": order_id, "event": event})
        return {"notification_id": notification_id, "status": "queued"}

    def reset(self):
        """Clear recorded notifications (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Notification service unavailable"
