"""Color helpers — hex/RGB conversion, HSL compositing and RGB interpolation."""

import colorsys

RGB = tuple[int, int, int]

# Categorical palette, cycled for region/division/attribute categories.
CATEGORICAL_PALETTE = [
    "#3b82f6", "#f59e0b", "#ef4444", "#10b981",
    "#8b5cf6", "#ec4899", "#14b8a6", "#f97316",
]

NEUTRAL = "#9ca3af"
FALLBACK = "#2563eb"


def hex_to_rgb(color: str) -> RGB:
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Not a hex color: {color!r}")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


def rgb_to_hex(rgb: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*(max(0, min(255, c)) for c in rgb))


def interpolate_rgb(start: str, end: str, t: float) -> str:
    """Per-channel linear blend of two 8-bit colors; t=0 gives start."""
    t = max(0.0, min(1.0, t))
    a = hex_to_rgb(start)
    b = hex_to_rgb(end)
    return rgb_to_hex(tuple(round(x + (y - x) * t) for x, y in zip(a, b)))


def hsl(hue: float, saturation: float, lightness: float) -> str:
    """CSS-style hsl (degrees, percent, percent) as a hex string."""
    h = (hue % 360) / 360.0
    s = max(0.0, min(100.0, saturation)) / 100.0
    l = max(0.0, min(100.0, lightness)) / 100.0
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return rgb_to_hex((round(r * 255), round(g * 255), round(b * 255)))


def hue_saturation(color: str) -> tuple[float, float]:
    """Hue in degrees and saturation in percent of a hex color."""
    r, g, b = (c / 255.0 for c in hex_to_rgb(color))
    h, _l, s = colorsys.rgb_to_hls(r, g, b)
    return h * 360.0, s * 100.0


def palette_color(index: int) -> str:
    return CATEGORICAL_PALETTE[index % len(CATEGORICAL_PALETTE)]
