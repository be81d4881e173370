from typing import Any, Mapping, Union

from levee.resources._base import dump_input
from levee.schemas.resources import OrderInput, OrderResponse


class Orders:
    """Order creation; paid products answer with a checkout URL."""

    def __init__(self, client):
        self._client = client

    async def create(self, data: Union[OrderInput, Mapping[str, Any]]) -> OrderResponse:
        body = await self._client.request("POST", "/orders", json=dump_input(OrderInput, data))
        return OrderResponse.model_validate(body)
