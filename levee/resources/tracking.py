from typing import Dict, Optional

from levee.resources._base import dump_input
from levee.schemas.resources import TrackEventInput


class Tracking:
    """Custom event tracking resource."""

    def __init__(self, client):
        self._client = client

    async def track(
        self,
        event: str,
        email: Optional[str] = None,
        properties: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Tracks a custom event.

        Example:
            await levee.tracking.track(
                event="purchase_completed",
                email="user@example.com",
                properties={"product": "pro-plan", "amount": "99.00"},
            )
        """
        payload = dump_input(TrackEventInput, {"event": event, "email": email, "properties": properties})
        await self._client.request_void("POST", "/events", json=payload)
