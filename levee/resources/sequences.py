from typing import Any, List, Mapping, Optional, Union

from levee.resources._base import dump_input
from levee.schemas.resources import EnrollSequenceInput, EnrollSequenceResponse, SequenceEnrollment


class Sequences:
    """Email sequence (drip campaign) enrollment resource."""

    def __init__(self, client):
        self._client = client

    async def enroll(self, data: Union[EnrollSequenceInput, Mapping[str, Any]]) -> EnrollSequenceResponse:
        body = await self._client.request(
            "POST", "/sequences/enroll", json=dump_input(EnrollSequenceInput, data)
        )
        return EnrollSequenceResponse.model_validate(body)

    async def get_enrollments(self, email: str, sequence_slug: Optional[str] = None) -> List[SequenceEnrollment]:
        body = await self._client.request(
            "GET",
            "/sequences/enrollments",
            params={"email": email, "sequence_slug": sequence_slug},
        )
        return [SequenceEnrollment.model_validate(item) for item in body or []]

    async def unenroll(self, email: str, sequence_slug: Optional[str] = None) -> None:
        """Unenrolls from one sequence, or from every sequence when no slug is given."""
        payload = {"email": email}
        if sequence_slug:
            payload["sequence_slug"] = sequence_slug
        await self._client.request_void("POST", "/sequences/unenroll", json=payload)

    async def pause(self, email: str, sequence_slug: str) -> None:
        await self._client.request_void(
            "POST", "/sequences/pause", json={"email": email, "sequence_slug": sequence_slug}
        )

    async def resume(self, email: str, sequence_slug: str) -> None:
        await self._client.request_void(
            "POST", "/sequences/resume", json={"email": email, "sequence_slug": sequence_slug}
        )
