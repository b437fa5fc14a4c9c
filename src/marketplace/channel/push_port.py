"""Push channel port.

Pushes are addressed to a marketplace user, not to a device. Resolving the
user's registered devices is the provider adapter's job.
"""

from abc import ABC, abstractmethod


class PushPort(ABC):
    @abstractmethod
    def send(
        self,
        recipient_id: str,
        audience: str,
        title: str,
        body: str,
        data: dict | None = None,
    ) -> dict:
        """Push one rendered notification to every device of ``recipient_id``.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
