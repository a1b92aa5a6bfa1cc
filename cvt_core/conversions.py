"""Helpers that convert user and config data into calculator requests."""

from __future__ import annotations

import math
import re
from decimal import Decimal
from fractions import Fraction
from typing import Mapping, Optional

from .errors import InvalidInputError
from .models import ModeRequest, Resolution, Variant

_RESOLUTION_RE = re.compile(r"^\s*(\d+)\s*[xX*]\s*(\d+)\s*$")

_VARIANT_ALIASES: Mapping[str, Variant] = {
    "normal": "normal",
    "cvt": "normal",
    "reduced": "reduced",
    "rb": "reduced",
    "rb1": "reduced",
    "rbv1": "reduced",
    "reduced_v1": "reduced",
    "reduced_v2": "reduced_v2",
    "rb2": "reduced_v2",
    "rbv2": "reduced_v2",
}


class ConversionError(InvalidInputError):
    """Raised when raw data cannot be translated into a mode request."""


def parse_resolution(value: object) -> Resolution:
    """Return a :class:`Resolution` from ``"1920x1080"`` or a two-item sequence."""

    if isinstance(value, Resolution):
        return value
    if isinstance(value, str):
        match = _RESOLUTION_RE.match(value)
        if not match:
            raise ConversionError(f"Invalid resolution {value!r}, expected WIDTHxHEIGHT.", field="resolution")
        return Resolution(int(match.group(1)), int(match.group(2)))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        width = _integer(value[0], "horizontal_pixels")
        height = _integer(value[1], "vertical_lines")
        return Resolution(width, height)
    raise ConversionError(f"Invalid resolution {value!r}.", field="resolution")


def parse_refresh_rate(value: object) -> Fraction:
    """Return ``value`` as an exact fraction of Hz.

    Floats go through their shortest decimal spelling, so ``59.94`` becomes
    ``2997/50`` rather than the nearest binary fraction.
    """

    if isinstance(value, bool):
        raise ConversionError(f"Invalid refresh rate {value!r}.", field="refresh_rate")
    if isinstance(value, Fraction):
        return value
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ConversionError(f"Invalid refresh rate {value!r}.", field="refresh_rate")
        return Fraction(repr(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ConversionError(f"Invalid refresh rate {value!r}.", field="refresh_rate")
        return Fraction(value)
    if isinstance(value, str):
        text = value.strip()
        if text.lower().endswith("hz"):
            text = text[:-2].strip()
        try:
            return Fraction(text)
        except (ValueError, ZeroDivisionError):
            raise ConversionError(f"Invalid refresh rate {value!r}.", field="refresh_rate")
    raise ConversionError(f"Invalid refresh rate {value!r}.", field="refresh_rate")


def parse_variant(value: object) -> Variant:
    """Map a user-facing variant name or alias to its canonical tag."""

    if not isinstance(value, str):
        raise ConversionError(f"Invalid variant {value!r}.", field="variant")
    key = value.strip().lower().replace("-", "_")
    try:
        return _VARIANT_ALIASES[key]
    except KeyError:
        raise ConversionError(
            f"Unknown variant {value!r}; expected one of {', '.join(sorted(set(_VARIANT_ALIASES)))}.",
            field="variant",
        )


def mode_request_from_mapping(raw: Mapping[str, object]) -> ModeRequest:
    """Return a :class:`ModeRequest` for one entry of a batch file.

    Recognised keys are ``resolution`` (or ``width``/``height``),
    ``refresh`` (or ``refresh_rate``), ``variant``, ``interlaced``,
    ``margins`` and ``video_optimized``. Only the size is mandatory; the
    refresh rate defaults to 60 Hz and the variant to normal blanking.
    """

    context = _preferred_label(raw)

    try:
        if raw.get("resolution") is not None:
            resolution = parse_resolution(raw["resolution"])
        elif raw.get("width") is not None and raw.get("height") is not None:
            resolution = Resolution(
                _integer(raw["width"], "horizontal_pixels"),
                _integer(raw["height"], "vertical_lines"),
            )
        else:
            raise ConversionError("a resolution or width/height pair is required.", field="resolution")

        rate = raw.get("refresh", raw.get("refresh_rate"))
        refresh_rate = parse_refresh_rate(60 if rate is None else rate)
        variant = parse_variant(raw.get("variant") or "normal")
    except ConversionError as exc:
        raise ConversionError(f"{context}: {exc}", field=exc.field) from exc

    return ModeRequest(
        resolution=resolution,
        refresh_rate=refresh_rate,
        variant=variant,
        interlaced=_optional_bool(raw, "interlaced", context),
        margins=_optional_bool(raw, "margins", context),
        video_optimized=_optional_bool(raw, "video_optimized", context),
    )


def _preferred_label(raw: Mapping[str, object]) -> str:
    for key in ("name", "label", "resolution"):
        val = raw.get(key)
        if isinstance(val, str) and val.strip():
            return val
    return "mode"


def _integer(value: object, field: str) -> int:
    if isinstance(value, bool):
        raise ConversionError(f"invalid integer value for '{field}'.", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise ConversionError(f"invalid integer value for '{field}'.", field=field)


def _optional_bool(raw: Mapping[str, object], key: str, context: str) -> bool:
    value: Optional[object] = raw.get(key)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise ConversionError(f"{context}: '{key}' must be true or false.", field=key)
