from typing import List, Optional

from levee.resources._base import segment
from levee.schemas.resources import CustomerInfo, CustomerOrder, Invoice, Payment, Subscription


class Customers:
    """Read-only view of a customer's billing history, keyed by email."""

    def __init__(self, client):
        self._client = client

    def _path(self, email: str, suffix: str = "") -> str:
        return f"/customers/{segment(email)}{suffix}"

    async def get_by_email(self, email: str) -> CustomerInfo:
        body = await self._client.request("GET", self._path(email))
        return CustomerInfo.model_validate(body)

    async def list_invoices(self, email: str, limit: Optional[int] = None) -> List[Invoice]:
        body = await self._client.request("GET", self._path(email, "/invoices"), params={"limit": limit or None})
        return [Invoice.model_validate(item) for item in body or []]

    async def list_orders(self, email: str, limit: Optional[int] = None) -> List[CustomerOrder]:
        body = await self._client.request("GET", self._path(email, "/orders"), params={"limit": limit or None})
        return [CustomerOrder.model_validate(item) for item in body or []]

    async def list_subscriptions(self, email: str) -> List[Subscription]:
        body = await self._client.request("GET", self._path(email, "/subscriptions"))
        return [Subscription.model_validate(item) for item in body or []]

    async def list_payments(self, email: str, limit: Optional[int] = None) -> List[Payment]:
        body = await self._client.request("GET", self._path(email, "/payments"), params={"limit": limit or None})
        return [Payment.model_validate(item) for item in body or []]
