"""Concrete resolution stages, in the order the resolver runs them."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import quote

from iconfetch.models.icon import IconResult
from iconfetch.resilience.fetcher import HTML_HEADERS, ResilientFetcher
from iconfetch.resolver.base import BaseStage, ResolveTarget
from iconfetch.resolver.html import extract_icon_href
from iconfetch.validators.url import resolve_icon_href

logger = logging.getLogger(__name__)

CONVENTIONAL_PREFIXES = ("", "/static", "/assets")
CONVENTIONAL_EXTENSIONS = ("ico", "png", "jpg", "jpeg", "svg", "gif")


class HtmlLinkStage(BaseStage):
    """Downloads the icon declared by the page's ``<link rel=...>`` tag."""

    name = "html_link"

    async def attempt(self, target: ResolveTarget) -> IconResult | None:
        page = await self._fetcher.fetch(target.url, headers=HTML_HEADERS)
        html = page.content.decode("utf-8", errors="replace")

        href = await asyncio.to_thread(extract_icon_href, html)
        if href is None:
            logger.debug("No icon link on %s", target.url, extra={"target_url": target.url})
            return None

        icon_url = resolve_icon_href(href, page.url)
        logger.debug("Found icon link %s on %s", icon_url, page.url)
        return await self.download_icon(icon_url)


class ConventionalPathStage(BaseStage):
    """Probes ``/favicon.*`` then the same names under ``/static`` and ``/assets``.

    Probes run one at a time and the first valid image wins.
    """

    name = "conventional_path"

    def __init__(self, fetcher: ResilientFetcher, scheme: str = "https") -> None:
        super().__init__(fetcher)
        self._scheme = scheme

    def candidate_urls(self, host: str) -> list[str]:
        return [
            f"{self._scheme}://{host}{prefix}/favicon.{ext}"
            for prefix in CONVENTIONAL_PREFIXES
            for ext in CONVENTIONAL_EXTENSIONS
        ]

    async def attempt(self, target: ResolveTarget) -> IconResult | None:
        if not target.host:
            return None
        for url in self.candidate_urls(target.host):
            result = await self.download_icon(url)
            if result is not None:
                return result
        return None


class ExternalServiceStage(BaseStage):
    """Asks a third-party favicon-by-domain service for the host's icon."""

    def __init__(self, fetcher: ResilientFetcher, name: str, url_template: str) -> None:
        super().__init__(fetcher)
        self.name = name
        self._url_template = url_template

    def service_url(self, host: str) -> str:
        return self._url_template.format(host=quote(host, safe=".-:"))

    async def attempt(self, target: ResolveTarget) -> IconResult | None:
        if not target.host:
            return None
        return await self.download_icon(self.service_url(target.host))


def google_service(fetcher: ResilientFetcher) -> ExternalServiceStage:
    return ExternalServiceStage(
        fetcher, "google", "https://www.google.com/s2/favicons?domain={host}"
    )


def duckduckgo_service(fetcher: ResilientFetcher) -> ExternalServiceStage:
    return ExternalServiceStage(
        fetcher, "duckduckgo", "https://icons.duckduckgo.com/ip3/{host}.ico"
    )
