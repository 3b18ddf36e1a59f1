"""Imaging package: MIME sniffing, PNG normalization and placeholder icons."""

from iconfetch.imaging.mime import extension_for, is_image_mime, sniff_mime
from iconfetch.imaging.normalizer import (
    ImageNormalizer,
    PillowRasterConverter,
    SvgRasterizer,
)
from iconfetch.imaging.placeholder import PlaceholderGenerator

__all__ = [
    "ImageNormalizer",
    "PillowRasterConverter",
    "PlaceholderGenerator",
    "SvgRasterizer",
    "extension_for",
    "is_image_mime",
    "sniff_mime",
]
