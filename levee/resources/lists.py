from typing import Optional

from levee.resources._base import segment


class Lists:
    """Email list subscription resource."""

    def __init__(self, client):
        self._client = client

    async def subscribe(self, list_slug: str, email: str, name: Optional[str] = None) -> None:
        payload = {"email": email}
        if name:
            payload["name"] = name
        await self._client.request_void("POST", f"/lists/{segment(list_slug)}/subscribe", json=payload)

    async def unsubscribe(self, list_slug: str, email: str) -> None:
        await self._client.request_void("POST", f"/lists/{segment(list_slug)}/unsubscribe", json={"email": email})
