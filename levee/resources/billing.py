from typing import Any, Mapping, Union

from levee.resources._base import dump_input, segment
from levee.schemas.resources import (
    CheckoutInput,
    CheckoutResponse,
    CustomerInput,
    CustomerResponse,
    PortalInput,
    PortalResponse,
    SubscriptionInput,
    SubscriptionResponse,
    UsageInput,
)


class Billing:
    """
    Stripe-backed billing resource.

    Example:
        checkout = await levee.billing.create_checkout({
            "customer_email": "user@example.com",
            "line_items": [{"price_id": "price_123", "quantity": 1}],
            "mode": "subscription",
            "success_url": "https://example.com/success",
            "cancel_url": "https://example.com/cancel",
        })
    """

    def __init__(self, client):
        self._client = client

    async def create_customer(self, data: Union[CustomerInput, Mapping[str, Any]]) -> CustomerResponse:
        body = await self._client.request("POST", "/billing/customers", json=dump_input(CustomerInput, data))
        return CustomerResponse.model_validate(body)

    async def create_checkout(self, data: Union[CheckoutInput, Mapping[str, Any]]) -> CheckoutResponse:
        body = await self._client.request("POST", "/billing/checkout", json=dump_input(CheckoutInput, data))
        return CheckoutResponse.model_validate(body)

    async def create_subscription(
        self, data: Union[SubscriptionInput, Mapping[str, Any]]
    ) -> SubscriptionResponse:
        body = await self._client.request(
            "POST", "/billing/subscriptions", json=dump_input(SubscriptionInput, data)
        )
        return SubscriptionResponse.model_validate(body)

    async def cancel_subscription(self, subscription_id: str) -> None:
        await self._client.request_void("POST", f"/billing/subscriptions/{segment(subscription_id)}/cancel")

    async def record_usage(self, data: Union[UsageInput, Mapping[str, Any]]) -> None:
        """Records metered usage against a subscription item."""
        await self._client.request_void("POST", "/billing/usage", json=dump_input(UsageInput, data))

    async def get_portal(self, data: Union[PortalInput, Mapping[str, Any]]) -> PortalResponse:
        body = await self._client.request("POST", "/billing/portal", json=dump_input(PortalInput, data))
        return PortalResponse.model_validate(body)
