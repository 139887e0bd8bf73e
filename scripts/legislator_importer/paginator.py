"""Offset pagination over one Congress's member list."""

from __future__ import annotations

import logging

import httpx

from .fetcher import RetryingFetcher
from .schema import PAGE_SIZE, RawMember

logger = logging.getLogger(__name__)


class MemberPaginator:
    """Collects every member of a Congress, one page at a time."""

    def __init__(
        self,
        fetcher: RetryingFetcher,
        *,
        base_url: str,
        api_key: str,
        limit: int = PAGE_SIZE,
        log: logging.Logger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.limit = limit
        self.log = log or logger

    def page_url(self, congress: int, offset: int) -> httpx.URL:
        return httpx.URL(
            f"{self.base_url}/member",
            params={
                "congress": congress,
                "limit": self.limit,
                "offset": offset,
                "api_key": self.api_key,
            },
        )

    async def list_all(self, congress: int) -> list[RawMember]:
        """
        Fetch all members for a Congress.

        Pages are requested in offset order until one comes back with fewer
        than `limit` members. The API's own count field is not consulted.

        Args:
            congress: Congress number (e.g. 118)

        Returns:
            Every member returned across all pages

        Raises:
            FetchError: If any page fails after retries
        """
        members: list[RawMember] = []
        offset = 0

        while True:
            response = await self.fetcher.fetch(self.page_url(congress, offset))
            page = response.json().get("members") or []
            members.extend(page)

            if len(page) < self.limit:
                break
            offset += self.limit

        self.log.info(
            f"Found {len(members)} members in Congress {congress}",
            extra={"congress": congress, "member_count": len(members)},
        )
        return members
