from __future__ import annotations

from typing import Any, Dict, Tuple

QUALITY_MIN = 1
QUALITY_MAX = 5
DEFAULT_QUALITY = 3

RGBA = Tuple[float, float, float, float]

_EMOJIS: Dict[int, str] = {
    1: "😡",
    2: "😠",
    3: "🙂",
    4: "😀",
    5: "😍",
}

_LABELS: Dict[int, str] = {
    1: "Awful",
    2: "Poor",
    3: "Okay",
    4: "Good",
    5: "Great",
}

# Calendar heat-map colours (r, g, b, alpha).
_COLORS: Dict[int, RGBA] = {
    1: (1.00, 0.23, 0.19, 0.5),   # red
    2: (1.00, 0.58, 0.00, 0.5),   # orange
    3: (1.00, 0.80, 0.00, 0.5),   # yellow
    4: (0.50, 0.75, 0.00, 0.3),   # yellow-green
    5: (0.20, 0.78, 0.35, 0.5),   # green
}

FALLBACK_EMOJI = "❔"
FALLBACK_LABEL = "Unknown"
TRANSPARENT: RGBA = (0.0, 0.0, 0.0, 0.0)


def _as_int(q: Any) -> int | None:
    try:
        return int(q)
    except (TypeError, ValueError):
        return None


def clamp_quality(q: Any) -> int:
    v = _as_int(q)
    if v is None:
        return DEFAULT_QUALITY
    return QUALITY_MIN if v < QUALITY_MIN else QUALITY_MAX if v > QUALITY_MAX else v


def is_valid_quality(q: Any) -> bool:
    v = _as_int(q)
    return v is not None and QUALITY_MIN <= v <= QUALITY_MAX


def quality_emoji(q: Any) -> str:
    v = _as_int(q)
    return _EMOJIS.get(v, FALLBACK_EMOJI) if v is not None else FALLBACK_EMOJI


def quality_label(q: Any) -> str:
    v = _as_int(q)
    return _LABELS.get(v, FALLBACK_LABEL) if v is not None else FALLBACK_LABEL


def quality_color(q: Any) -> RGBA:
    """Heat-map colour for a quality value; anything off the scale is transparent."""
    v = _as_int(q)
    return _COLORS.get(v, TRANSPARENT) if v is not None else TRANSPARENT


def quality_choices() -> Tuple[int, ...]:
    return tuple(range(QUALITY_MIN, QUALITY_MAX + 1))
