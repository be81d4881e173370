from typing import Any, List, Mapping, Optional, Union

from levee.resources._base import dump_input, segment
from levee.schemas.resources import (
    RegisterWebhookInput,
    RegisterWebhookResponse,
    TestWebhookResponse,
    UpdateWebhookInput,
    Webhook,
    WebhookLog,
)


class Webhooks:
    """Outbound webhook registration and delivery logs."""

    def __init__(self, client):
        self._client = client

    async def register(
        self, data: Union[RegisterWebhookInput, Mapping[str, Any]]
    ) -> RegisterWebhookResponse:
        """Registers a webhook; the response carries the signing secret."""
        body = await self._client.request("POST", "/webhooks", json=dump_input(RegisterWebhookInput, data))
        return RegisterWebhookResponse.model_validate(body)

    async def list(self) -> List[Webhook]:
        body = await self._client.request("GET", "/webhooks")
        return [Webhook.model_validate(item) for item in body or []]

    async def get(self, webhook_id: str) -> Webhook:
        body = await self._client.request("GET", f"/webhooks/{segment(webhook_id)}")
        return Webhook.model_validate(body)

    async def update(self, webhook_id: str, data: Union[UpdateWebhookInput, Mapping[str, Any]]) -> Webhook:
        body = await self._client.request(
            "PUT", f"/webhooks/{segment(webhook_id)}", json=dump_input(UpdateWebhookInput, data)
        )
        return Webhook.model_validate(body)

    async def delete(self, webhook_id: str) -> None:
        await self._client.request_void("DELETE", f"/webhooks/{segment(webhook_id)}")

    async def test(self, webhook_id: str) -> TestWebhookResponse:
        """Sends a test delivery to the webhook URL."""
        body = await self._client.request("POST", f"/webhooks/{segment(webhook_id)}/test")
        return TestWebhookResponse.model_validate(body)

    async def list_logs(self, webhook_id: str, limit: Optional[int] = None) -> List[WebhookLog]:
        body = await self._client.request(
            "GET", f"/webhooks/{segment(webhook_id)}/logs", params={"limit": limit or None}
        )
        return [WebhookLog.model_validate(item) for item in body or []]
