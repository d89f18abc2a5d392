from __future__ import annotations

from typing import Sequence

DARK_TEXT = "#0A0A0A"
LIGHT_TEXT = "#FFFFFF"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def subject_hash(name: str) -> int:
    """Rolling ``(h << 5) - h + c`` hash over UTF-16 code units.

    The shift wraps to a signed 32-bit integer while the subtraction and
    addition do not, so colors match the ones the web dashboard assigns.
    """
    key = name.lower().encode("utf-16-le")
    value = 0
    for offset in range(0, len(key), 2):
        code_unit = key[offset] | (key[offset + 1] << 8)
        value = _to_int32(_to_int32(value) << 5) - value + code_unit
    return value


def subject_color(name: str | None, palette: Sequence[str]) -> str:
    if not palette:
        raise ValueError("Color palette cannot be empty")
    if not name:
        return palette[0]
    return palette[abs(subject_hash(str(name))) % len(palette)]


def hex_to_rgb(value: str) -> tuple[int, int, int] | None:
    digits = (value or "").strip().lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    if len(digits) != 6:
        return None
    try:
        packed = int(digits, 16)
    except ValueError:
        return None
    return (packed >> 16) & 255, (packed >> 8) & 255, packed & 255


def relative_luminance(value: str) -> float:
    rgb = hex_to_rgb(value)
    if rgb is None:
        return 0.0

    def channel(component: int) -> float:
        scaled = component / 255
        return scaled / 12.92 if scaled <= 0.03928 else ((scaled + 0.055) / 1.055) ** 2.4

    red, green, blue = (channel(component) for component in rgb)
    return 0.2126 * red + 0.7152 * green + 0.0722 * blue


def is_light_color(value: str) -> bool:
    return relative_luminance(value) > 0.5


def text_color_for(background: str) -> str:
    return DARK_TEXT if is_light_color(background) else LIGHT_TEXT
