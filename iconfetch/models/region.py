"""Host classification used to pick a proxy pool."""

from __future__ import annotations

from enum import Enum


class Region(str, Enum):
    """Network region a host belongs to."""

    REGIONAL = "regional"
    GLOBAL = "global"
