from typing import Optional

from levee.resources._base import segment
from levee.schemas.resources import (
    ContentPage,
    ContentPost,
    ListCategoriesResponse,
    ListPagesResponse,
    ListPostsResponse,
)


class Content:
    """Published CMS posts, pages and categories."""

    def __init__(self, client):
        self._client = client

    async def list_posts(
        self,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        category_slug: Optional[str] = None,
    ) -> ListPostsResponse:
        params = {"page": page or None, "page_size": page_size or None, "category": category_slug or None}
        body = await self._client.request("GET", "/content/posts", params=params)
        return ListPostsResponse.model_validate(body)

    async def get_post(self, slug: str) -> ContentPost:
        body = await self._client.request("GET", f"/content/posts/{segment(slug)}")
        return ContentPost.model_validate(body)

    async def list_pages(self, page: Optional[int] = None, page_size: Optional[int] = None) -> ListPagesResponse:
        body = await self._client.request(
            "GET", "/content/pages", params={"page": page or None, "page_size": page_size or None}
        )
        return ListPagesResponse.model_validate(body)

    async def get_page(self, slug: str) -> ContentPage:
        body = await self._client.request("GET", f"/content/pages/{segment(slug)}")
        return ContentPage.model_validate(body)

    async def list_categories(self) -> ListCategoriesResponse:
        body = await self._client.request("GET", "/content/categories")
        return ListCategoriesResponse.model_validate(body)
