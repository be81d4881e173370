from typing import Any, List, Mapping, Union

from levee.resources._base import dump_input, segment
from levee.schemas.resources import EmailEvent, EmailStatus, SendEmailInput, SendEmailResponse


class Emails:
    """Transactional email resource."""

    def __init__(self, client):
        self._client = client

    async def send(self, data: Union[SendEmailInput, Mapping[str, Any]]) -> SendEmailResponse:
        body = await self._client.request("POST", "/emails", json=dump_input(SendEmailInput, data))
        return SendEmailResponse.model_validate(body)

    async def get_status(self, message_id: str) -> EmailStatus:
        body = await self._client.request("GET", f"/emails/{segment(message_id)}")
        return EmailStatus.model_validate(body)

    async def list_events(self, message_id: str) -> List[EmailEvent]:
        body = await self._client.request("GET", f"/emails/{segment(message_id)}/events")
        return [EmailEvent.model_validate(item) for item in body or []]
