"""Fake push adapter. Records pushes in memory for tests and local runs."""

from uuid import uuid4

from marketplace.channel.push_port import PushPort

DEFAULT_FAILURE = "Push delivery failed"


class FakePushAdapter(PushPort):
    def __init__(self):
        self.sent_pushes: list[dict] = []
        self.should_succeed = True
        self.failure_reason = DEFAULT_FAILURE

    def configure(self, should_succeed: bool = True, failure_reason: str = DEFAULT_FAILURE):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, recipient_id, audience, title, body, data=None) -> dict:
        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"push-{uuid4().hex[:12]}"
        self.sent_pushes.append(
            {
                "message_id": message_id,
                "recipient_id": recipient_id,
                "audience": audience,
                "title": title,
                "body": body,
                "data": data or {},
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def pushes_to(self, recipient_id: str, audience: str | None = None) -> list[dict]:
        return [
            p
            for p in self.sent_pushes
            if p["recipient_id"] == recipient_id and (audience is None or p["audience"] == audience)
        ]

    def reset(self):
        self.sent_pushes.clear()
        self.configure()
