"""Deterministic SVG placeholder icons.

The CRC-32 of the host seeds a private ``random.Random``; the seed picks a
visual variant and palette and drives every coordinate, size and opacity, so
the same host always renders to byte-identical markup.
"""

from __future__ import annotations

import random
import zlib

WIDTH = 100
HEIGHT = 100

_PALETTE_A = ("#92A1C6", "#146A7C", "#F0AB3D", "#C271B4", "#C20D90")
_PALETTE_B = ("#FFAD08", "#EDD75A", "#73B06F", "#0C8F8F", "#405059")
_PALETTE_C = ("#EA526F", "#E76B74", "#D7AF70", "#937B63", "#385B59")
_PALETTE_D = ("#2A2D34", "#009DDC", "#F26430", "#6761A8", "#009B72")
_PALETTE_E = ("#F7C1BB", "#885A5A", "#353A47", "#84B082", "#DC136C")

VARIANTS: dict[str, tuple[tuple[str, ...], ...]] = {
    "beam": (_PALETTE_A, _PALETTE_B, _PALETTE_C, _PALETTE_D, _PALETTE_E),
    "pixel": (_PALETTE_B, _PALETTE_C, _PALETTE_D, _PALETTE_E, _PALETTE_A),
    "sunset": (_PALETTE_C, _PALETTE_D, _PALETTE_E, _PALETTE_A, _PALETTE_B),
}


def _opacity(value: int) -> str:
    return f"{value / 100:g}"


class PlaceholderGenerator:
    """Renders a 100x100 SVG placeholder for a host."""

    def generate(self, host: str) -> bytes:
        seed = zlib.crc32(host.encode("utf-8"))
        rng = random.Random(seed)

        variant = rng.choice(sorted(VARIANTS))
        colors = rng.choice(VARIANTS[variant])

        if variant == "pixel":
            body = self._pixel(rng, colors)
        elif variant == "sunset":
            body = self._sunset(rng, colors, seed)
        else:
            body = self._beam(rng, colors)

        svg = (
            f'<svg xmlns="http://www.w3.org/2000/svg" version="1.1" '
            f'width="{WIDTH}" height="{HEIGHT}" viewBox="0 0 {WIDTH} {HEIGHT}">'
            f"{body}</svg>"
        )
        return svg.encode("utf-8")

    @staticmethod
    def _background(fill: str) -> str:
        return f'<rect fill="{fill}" x="0" y="0" width="{WIDTH}" height="{HEIGHT}"/>'

    def _beam(self, rng: random.Random, colors: tuple[str, ...]) -> str:
        parts = [self._background(colors[0])]
        for _ in range(3):
            x1, y1 = rng.randint(0, WIDTH), rng.randint(0, HEIGHT)
            x2, y2 = rng.randint(0, WIDTH), rng.randint(0, HEIGHT)
            color = colors[rng.randint(1, len(colors) - 1)]
            opacity = _opacity(rng.randint(30, 70))
            cx, cy = rng.randint(0, WIDTH), rng.randint(0, HEIGHT)
            stroke_width = rng.randint(10, 30)
            parts.append(
                f'<path d="M{x1},{y1} Q{cx},{cy} {x2},{y2}" stroke="{color}" '
                f'stroke-width="{stroke_width}" fill="none" opacity="{opacity}"/>'
            )
        return "".join(parts)

    def _pixel(self, rng: random.Random, colors: tuple[str, ...]) -> str:
        size = 10
        parts = [self._background(colors[0])]
        for x in range(0, WIDTH, size):
            for y in range(0, HEIGHT, size):
                if rng.randint(0, 100) >= 30:
                    continue
                color = colors[rng.randint(1, len(colors) - 1)]
                opacity = _opacity(rng.randint(40, 90))
                parts.append(
                    f'<rect fill="{color}" x="{x}" y="{y}" width="{size}" '
                    f'height="{size}" opacity="{opacity}"/>'
                )
        return "".join(parts)

    def _sunset(self, rng: random.Random, colors: tuple[str, ...], seed: int) -> str:
        gradient_id = f"gradient_{seed:08x}"
        parts = [
            f'<defs><linearGradient id="{gradient_id}" x1="0%" y1="0%" x2="0%" y2="100%">'
            f'<stop offset="0%" style="stop-color:{colors[0]}"/>'
            f'<stop offset="100%" style="stop-color:{colors[1]}"/>'
            f"</linearGradient></defs>",
            f'<rect fill="url(#{gradient_id})" x="0" y="0" width="{WIDTH}" height="{HEIGHT}"/>',
        ]
        for _ in range(3):
            color = colors[rng.randint(2, len(colors) - 1)]
            opacity = _opacity(rng.randint(20, 40))
            size = rng.randint(20, 40)
            x = rng.randint(0, WIDTH - size)
            y = rng.randint(0, HEIGHT - size)
            radius = size // 2
            parts.append(
                f'<circle fill="{color}" cx="{x + radius}" cy="{y + radius}" '
                f'r="{radius}" opacity="{opacity}"/>'
            )
        return "".join(parts)
