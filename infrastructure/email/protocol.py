"""Notifier protocol: services depend on this, not the concrete implementation."""

from typing import Protocol


class Notifier(Protocol):
    async def send_reset_code(
        self, email: str, code: str, expires_in_minutes: int
    ) -> bool:
        """Attempt delivery of *code* to *email*; True only if accepted for delivery."""
        ...
