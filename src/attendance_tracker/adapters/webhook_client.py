"""HTTP webhook used to signal other processes about session changes."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from attendance_tracker.services.notifications import SessionEvent


class WebhookClient(Protocol):
    """Interface for cross-process change signals."""

    async def notify(self, event: SessionEvent) -> None:
        """Deliver an event to the remote listener."""

    async def close(self) -> None:
        """Release network resources."""


@dataclass
class HttpxWebhookClient:
    """Webhook client implemented with httpx."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxWebhookClient":
        """Create a webhook client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def notify(self, event: SessionEvent) -> None:
        """POST the event as JSON."""
        response = await self.http_client.post(
            self.url,
            json=event.to_dict(),
            headers={"Cache-Control": "no-cache"},
            timeout=5,
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
