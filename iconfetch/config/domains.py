"""Domain list models and YAML loader.

The lists drive regional classification of hosts: which hosts are served
through the regional proxy pool and which are treated as global.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_REGIONAL_SUFFIXES: tuple[str, ...] = (
    ".cn", ".com.cn", ".net.cn", ".org.cn", ".gov.cn", ".edu.cn",
    ".ac.cn", ".mil.cn", ".biz.cn", ".info.cn", ".name.cn",
    ".moe.cn", ".xn--fiqs8s",
    ".wang", ".top", ".xyz", ".site", ".online", ".tech", ".store",
    ".shop", ".club", ".vip", ".work", ".ltd", ".group", ".ink",
    ".design", ".website", ".space", ".press", ".host", ".fun",
)


class DomainLists(BaseModel):
    """Static host lists used by the domain classifier."""

    model_config = ConfigDict(frozen=True)

    regional_whitelist: tuple[str, ...] = ()
    global_whitelist: tuple[str, ...] = ()
    regional_suffixes: tuple[str, ...] = Field(default=DEFAULT_REGIONAL_SUFFIXES)

    @field_validator("regional_whitelist", "global_whitelist", mode="before")
    @classmethod
    def _normalize_domains(cls, value: object) -> object:
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            return tuple(str(d).strip().lower().strip(".") for d in value if str(d).strip())
        return value

    @field_validator("regional_suffixes", mode="before")
    @classmethod
    def _normalize_suffixes(cls, value: object) -> object:
        if value is None:
            return ()
        if isinstance(value, (list, tuple)):
            suffixes = []
            for raw in value:
                suffix = str(raw).strip().lower()
                if not suffix:
                    continue
                suffixes.append(suffix if suffix.startswith(".") else f".{suffix}")
            return tuple(suffixes)
        return value


def load_domain_lists(yaml_path: str) -> DomainLists:
    """Parse a domain lists YAML file.

    Args:
        yaml_path: Path to the YAML configuration file.

    Returns:
        The parsed DomainLists. A missing or malformed file yields the
        built-in defaults (empty whitelists, default regional suffixes).
    """
    path = Path(yaml_path)

    if not path.exists():
        logger.warning("Domain lists file not found at %s, using built-in defaults", yaml_path)
        return DomainLists()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        logger.error("Failed to parse domain lists YAML at %s: %s", yaml_path, exc)
        return DomainLists()

    if raw is None:
        return DomainLists()
    if not isinstance(raw, dict):
        logger.warning("Domain lists YAML at %s is not a mapping, using built-in defaults", yaml_path)
        return DomainLists()

    try:
        return DomainLists.model_validate(raw)
    except Exception as exc:
        logger.error("Invalid domain lists at %s: %s, using built-in defaults", yaml_path, exc)
        return DomainLists()
