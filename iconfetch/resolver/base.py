"""Abstract base class for icon resolution stages.

Each stage is one step of the fallback chain. A stage either produces an
IconResult or returns ``None`` to let the next stage try; stages may raise,
and the resolver treats a raised exception like ``None``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from iconfetch.imaging.mime import is_image_mime, sniff_mime
from iconfetch.middleware.error_handler import FetchError
from iconfetch.models.icon import IconResult
from iconfetch.resilience.fetcher import ResilientFetcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveTarget:
    """What the chain is resolving: the normalized page URL and its host."""

    url: str
    host: str | None


class BaseStage(ABC):
    """Base class all resolution stages extend.

    Subclasses set ``name`` and implement ``attempt``. ``download_icon`` is
    shared by every stage that downloads a candidate image.
    """

    name: str

    def __init__(self, fetcher: ResilientFetcher) -> None:
        self._fetcher = fetcher

    @abstractmethod
    async def attempt(self, target: ResolveTarget) -> IconResult | None:
        """Try to produce an icon for ``target``."""
        ...

    async def download_icon(self, url: str) -> IconResult | None:
        """Download ``url`` and return it if it validates as an image.

        The body must be non-empty, a Content-Type header (when present) must
        be ``image/*``, and the sniffed content type must be ``image/*`` too.
        """
        try:
            response = await self._fetcher.fetch(url)
        except FetchError as exc:
            logger.debug("Candidate %s unreachable: %s", url, exc.last_error)
            return None

        if not response.content:
            return None

        if response.content_type is not None and not is_image_mime(response.content_type):
            logger.debug("Candidate %s rejected: Content-Type %s", url, response.content_type)
            return None

        sniffed = sniff_mime(response.content)
        if not is_image_mime(sniffed):
            logger.debug("Candidate %s rejected: content sniffed as %s", url, sniffed)
            return None

        return IconResult(content=response.content, mime=sniffed, cached=False)
