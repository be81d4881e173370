from levee.schemas.chat import ChatResponse, LLMConfig
from levee.streaming.llm import ChatInputLike, coerce_chat_input


class LLM:
    """
    LLM chat over HTTP (non-streaming).
    For streaming, use ``levee.streaming.LLMClient``.
    """

    def __init__(self, client):
        self._client = client

    async def chat(self, chat_input: ChatInputLike) -> ChatResponse:
        chat_input = coerce_chat_input(chat_input)
        payload = chat_input.model_dump(exclude_none=True)
        payload["messages"] = [m.model_dump() for m in chat_input.messages]
        body = await self._client.request("POST", "/llm/chat", json=payload)
        return ChatResponse.model_validate(body)

    async def get_config(self) -> LLMConfig:
        """Gets the LLM configuration for this org."""
        body = await self._client.request("GET", "/llm/config")
        return LLMConfig.model_validate(body)
