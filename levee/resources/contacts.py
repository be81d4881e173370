from typing import Any, List, Mapping, Optional, Union

from levee.resources._base import dump_input, segment
from levee.schemas.resources import (
    ContactActivity,
    ContactInfo,
    ContactInput,
    ContactResponse,
    UpdateContactInput,
)


class Contacts:
    """Contact management resource."""

    def __init__(self, client):
        self._client = client

    async def create(self, data: Union[ContactInput, Mapping[str, Any]]) -> ContactResponse:
        """Creates a new contact or returns the existing one for that email."""
        body = await self._client.request("POST", "/contacts", json=dump_input(ContactInput, data))
        return ContactResponse.model_validate(body)

    async def get(self, id_or_email: str) -> ContactInfo:
        body = await self._client.request("GET", f"/contacts/{segment(id_or_email)}")
        return ContactInfo.model_validate(body)

    async def update(
        self, id_or_email: str, data: Union[UpdateContactInput, Mapping[str, Any]]
    ) -> ContactInfo:
        body = await self._client.request(
            "PUT",
            f"/contacts/{segment(id_or_email)}",
            json=dump_input(UpdateContactInput, data),
        )
        return ContactInfo.model_validate(body)

    async def add_tags(self, id_or_email: str, tags: List[str]) -> None:
        await self._client.request_void("POST", f"/contacts/{segment(id_or_email)}/tags", json={"tags": tags})

    async def remove_tags(self, id_or_email: str, tags: List[str]) -> None:
        await self._client.request_void("DELETE", f"/contacts/{segment(id_or_email)}/tags", json={"tags": tags})

    async def list_activity(self, id_or_email: str, limit: Optional[int] = None) -> List[ContactActivity]:
        body = await self._client.request(
            "GET",
            f"/contacts/{segment(id_or_email)}/activity",
            params={"limit": limit} if limit else None,
        )
        return [ContactActivity.model_validate(item) for item in body or []]

    async def global_unsubscribe(self, email: str, reason: Optional[str] = None) -> None:
        """Globally unsubscribes a contact from all communications."""
        payload = {"email": email}
        if reason:
            payload["reason"] = reason
        await self._client.request_void("POST", "/contacts/unsubscribe", json=payload)
