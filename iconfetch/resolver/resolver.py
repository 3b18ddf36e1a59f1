"""Ordered fallback chain that always produces an icon.

Stages run strictly one after another; the first one that returns an
IconResult wins. Any stage failure, raised or returned, moves the chain on.
When every stage comes up empty, a deterministic SVG placeholder is rendered
for the host, so ``resolve`` never raises for network reasons.
"""

from __future__ import annotations

import logging

from iconfetch.imaging.mime import SVG
from iconfetch.imaging.placeholder import PlaceholderGenerator
from iconfetch.models.icon import IconResult
from iconfetch.resilience.fetcher import ResilientFetcher
from iconfetch.resolver.base import BaseStage, ResolveTarget
from iconfetch.resolver.stages import (
    ConventionalPathStage,
    HtmlLinkStage,
    duckduckgo_service,
    google_service,
)
from iconfetch.validators.url import extract_host, normalize_url

logger = logging.getLogger(__name__)


def default_stages(fetcher: ResilientFetcher, probe_scheme: str = "https") -> list[BaseStage]:
    """The standard chain: page link, conventional paths, Google, DuckDuckGo."""
    return [
        HtmlLinkStage(fetcher),
        ConventionalPathStage(fetcher, scheme=probe_scheme),
        google_service(fetcher),
        duckduckgo_service(fetcher),
    ]


class IconResolver:
    """Runs the resolution stages in order and falls back to a placeholder."""

    def __init__(
        self,
        stages: list[BaseStage],
        placeholder: PlaceholderGenerator | None = None,
    ) -> None:
        self._stages = list(stages)
        self._placeholder = placeholder or PlaceholderGenerator()

    @property
    def stage_names(self) -> list[str]:
        return [stage.name for stage in self._stages]

    async def resolve(self, url: str) -> IconResult:
        normalized = normalize_url(url)
        target = ResolveTarget(url=normalized, host=extract_host(normalized))

        for stage in self._stages:
            try:
                result = await stage.attempt(target)
            except Exception as exc:
                logger.debug(
                    "Stage %s failed for %s: %s",
                    stage.name,
                    normalized,
                    exc,
                    extra={
                        "target_url": normalized,
                        "host": target.host,
                        "stage": stage.name,
                        "error_reason": repr(exc),
                    },
                )
                continue
            if result is not None:
                logger.debug(
                    "Resolved %s via %s",
                    normalized,
                    stage.name,
                    extra={"target_url": normalized, "host": target.host, "stage": stage.name},
                )
                return result

        logger.debug(
            "Falling back to placeholder for %s",
            normalized,
            extra={"target_url": normalized, "host": target.host, "stage": "placeholder"},
        )
        key = target.host or url
        return IconResult(
            content=self._placeholder.generate(key), mime=SVG, cached=False, placeholder=True
        )
