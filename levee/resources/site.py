from typing import Optional

from levee.resources._base import segment
from levee.schemas.resources import Author, ListAuthorsResponse, ListMenusResponse, NavigationMenu, SiteSettings


class Site:
    """Site-wide settings, navigation menus and authors."""

    def __init__(self, client):
        self._client = client

    async def get_settings(self) -> SiteSettings:
        body = await self._client.request("GET", "/site/settings")
        return SiteSettings.model_validate(body)

    async def list_menus(self, location: Optional[str] = None) -> ListMenusResponse:
        body = await self._client.request("GET", "/site/menus", params={"location": location or None})
        return ListMenusResponse.model_validate(body)

    async def get_menu(self, slug: str) -> NavigationMenu:
        body = await self._client.request("GET", f"/site/menus/{segment(slug)}")
        return NavigationMenu.model_validate(body)

    async def list_authors(self) -> ListAuthorsResponse:
        body = await self._client.request("GET", "/site/authors")
        return ListAuthorsResponse.model_validate(body)

    async def get_author(self, author_id: str) -> Author:
        body = await self._client.request("GET", f"/site/authors/{segment(author_id)}")
        return Author.model_validate(body)
