"""Pure math routines for CVT timing derivation.

The arithmetic follows VESA CVT 1.2 sections 5.2 to 5.4 step by step, using
exact fractions so every ``floor`` lands where the published procedure puts
it. The horizontal period is estimated once and never iterated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Tuple, Union

from .conversions import parse_refresh_rate
from .errors import InvalidInputError, UnsupportedCombinationError
from .models import (
    ASPECT_V_SYNC,
    DEFAULT_V_SYNC,
    MARGIN_PER,
    VARIANT_CONSTANTS,
    ModeRequest,
    Resolution,
    TimingDescriptor,
    Variant,
    VariantConstants,
)

MIN_PIXELS = 8
MAX_REFRESH_RATE = 300
MIN_CLOCK_STEPS = 10  # Smallest pixel clock a request may need, in clock steps

RefreshRate = Union[int, float, str, Fraction]


@dataclass(frozen=True)
class _Blanking:
    """Per-field blanking produced by one of the variant branches."""

    h_blank: int
    h_front_porch: int
    h_sync: int
    h_back_porch: int
    v_front_porch: int
    v_back_porch: int
    field_total: Fraction
    pixel_clock: int


def compute(
    resolution: Union[Resolution, Tuple[int, int]],
    refresh_rate: RefreshRate,
    variant: Variant = "normal",
    interlaced: bool = False,
    margins: bool = False,
    video_optimized: bool = False,
) -> TimingDescriptor:
    """Return the CVT timing for ``resolution`` at ``refresh_rate``.

    Parameters
    ----------
    resolution:
        Requested addressable size, either a :class:`Resolution` or a
        ``(width, height)`` tuple.
    refresh_rate:
        Frame rate in Hz. Decimal strings and floats are converted through
        their decimal spelling so ``59.94`` stays exactly ``2997/50``.
    variant:
        ``"normal"``, ``"reduced"`` (RBv1) or ``"reduced_v2"`` (RBv2).
    interlaced:
        Produce an interlaced mode. Not defined for RBv2.
    margins:
        Add the 1.8% CVT borders around the active area.
    video_optimized:
        RBv2 only: scale the pixel clock by 1000/1001 for 59.94-style rates.

    Raises
    ------
    InvalidInputError
        A size, rate or variant is out of range.
    UnsupportedCombinationError
        The variant does not define the requested flags.
    """

    res = _coerce_resolution(resolution)
    rate = _coerce_refresh_rate(refresh_rate)
    consts = _validate(res, rate, variant, interlaced, video_optimized)

    cell = consts.cell_gran
    fields = 2 if interlaced else 1

    # 1: field rate required
    field_rate_rqd = rate * fields
    # 2-4: horizontal active area rounded to character cells, plus borders
    h_pixels_rnd = res.horizontal_pixels // cell * cell
    h_border = math.floor(h_pixels_rnd * MARGIN_PER / 100 / cell) * cell if margins else 0
    total_active_pixels = h_pixels_rnd + 2 * h_border
    # 5-7: vertical lines per field, borders and the half-line offset
    v_lines_rnd = res.vertical_lines // fields
    v_border = math.floor(v_lines_rnd * MARGIN_PER / 100) if margins else 0
    interlace = Fraction(1, 2) if interlaced else Fraction(0)

    if consts.v_sync is not None:
        v_sync = consts.v_sync
    else:
        v_sync = aspect_v_sync(h_pixels_rnd, v_lines_rnd * fields, cell)

    if consts.reduced_blanking:
        blanking = _reduced_blanking(
            consts, field_rate_rqd, total_active_pixels, v_lines_rnd, v_border,
            interlace, v_sync, video_optimized,
        )
    else:
        blanking = _normal_blanking(
            consts, field_rate_rqd, total_active_pixels, v_lines_rnd, v_border,
            interlace, v_sync,
        )

    h_total = total_active_pixels + blanking.h_blank
    v_total = int(blanking.field_total * fields)
    v_active = v_lines_rnd * fields

    h_freq = Fraction(blanking.pixel_clock, h_total)
    field_rate = h_freq / blanking.field_total
    frame_rate = field_rate / fields

    return TimingDescriptor(
        variant=variant,
        interlaced=interlaced,
        h_active=h_pixels_rnd,
        h_border=h_border,
        h_blank=blanking.h_blank,
        h_front_porch=blanking.h_front_porch,
        h_sync=blanking.h_sync,
        h_back_porch=blanking.h_back_porch,
        h_total=h_total,
        h_sync_polarity=consts.h_sync_polarity,
        v_active=v_active,
        v_border=v_border,
        v_blank=v_total - v_active - 2 * v_border * fields,
        v_front_porch=blanking.v_front_porch,
        v_sync=v_sync,
        v_back_porch=blanking.v_back_porch,
        v_total=v_total,
        v_sync_polarity=consts.v_sync_polarity,
        pixel_clock=blanking.pixel_clock,
        h_freq=h_freq,
        field_rate=field_rate,
        frame_rate=frame_rate,
    )


def compute_request(request: ModeRequest) -> TimingDescriptor:
    """Run :func:`compute` for a parsed :class:`ModeRequest`."""

    return compute(
        request.resolution,
        request.refresh_rate,
        variant=request.variant,
        interlaced=request.interlaced,
        margins=request.margins,
        video_optimized=request.video_optimized,
    )


def aspect_v_sync(h_pixels_rnd: int, ver_pixels: int, cell_gran: int) -> int:
    """Return the vertical sync width CVT assigns to the mode's aspect ratio."""

    for (num, den), v_sync in ASPECT_V_SYNC:
        if h_pixels_rnd == cell_gran * (ver_pixels * num // den // cell_gran):
            return v_sync
    return DEFAULT_V_SYNC


def _normal_blanking(
    consts: VariantConstants,
    field_rate: Fraction,
    total_active_pixels: int,
    v_lines_rnd: int,
    v_border: int,
    interlace: Fraction,
    v_sync: int,
) -> _Blanking:
    cell = consts.cell_gran

    # 8: estimated horizontal period (us)
    h_period_est = (Fraction(1_000_000) / field_rate - consts.min_vsync_bp) / (
        v_lines_rnd + 2 * v_border + consts.min_v_porch + interlace
    )
    # 9: lines in vsync + back porch, never below sync + minimum back porch
    v_sync_bp = math.floor(consts.min_vsync_bp / h_period_est) + 1
    v_sync_bp = max(v_sync_bp, v_sync + consts.min_v_bporch)
    # 11: total lines per field
    field_total = (
        v_lines_rnd + 2 * v_border + v_sync_bp + interlace + consts.min_v_porch
    )
    # 12-13: horizontal blanking from the ideal duty cycle
    ideal_duty_cycle = consts.c_prime - consts.m_prime * h_period_est / 1000
    duty_cycle = max(ideal_duty_cycle, Fraction(consts.min_duty_cycle))
    gran = 2 * cell
    h_blank = math.floor(total_active_pixels * duty_cycle / (100 - duty_cycle) / gran) * gran
    # 14: total pixels per line
    h_total = total_active_pixels + h_blank
    # 15: pixel clock rounded down to the clock step
    pixel_clock = _round_clock(h_total / h_period_est * 1_000_000, consts.clock_step)

    h_sync = math.floor(consts.h_sync_per * h_total / cell) * cell
    h_back_porch = h_blank // 2

    return _Blanking(
        h_blank=h_blank,
        h_front_porch=h_blank - h_sync - h_back_porch,
        h_sync=h_sync,
        h_back_porch=h_back_porch,
        v_front_porch=consts.min_v_porch,
        v_back_porch=v_sync_bp - v_sync,
        field_total=field_total,
        pixel_clock=pixel_clock,
    )


def _reduced_blanking(
    consts: VariantConstants,
    field_rate: Fraction,
    total_active_pixels: int,
    v_lines_rnd: int,
    v_border: int,
    interlace: Fraction,
    v_sync: int,
    video_optimized: bool,
) -> _Blanking:
    # 8: estimated horizontal period (us)
    h_period_est = (Fraction(1_000_000) / field_rate - consts.min_v_blank) / (
        v_lines_rnd + 2 * v_border
    )
    # 9-10: vertical blanking lines, never below front porch + sync + back porch
    vbi_lines = math.floor(consts.min_v_blank / h_period_est) + 1
    rb_min_vbi = consts.v_front_porch + v_sync + consts.min_v_bporch
    act_vbi_lines = max(vbi_lines, rb_min_vbi)
    # 11: total lines per field
    field_total = act_vbi_lines + v_lines_rnd + 2 * v_border + interlace
    # 12: total pixels per line, blanking is a fixed time
    h_total = consts.h_blank + total_active_pixels
    # 13: pixel clock rounded down to the clock step
    multiplier = Fraction(1000, 1001) if video_optimized else 1
    pixel_clock = _round_clock(
        field_rate * field_total * h_total * multiplier, consts.clock_step
    )

    if consts.fixed_v_bporch:
        v_back_porch = consts.min_v_bporch
        v_front_porch = act_vbi_lines - v_sync - v_back_porch
    else:
        v_front_porch = consts.v_front_porch
        v_back_porch = act_vbi_lines - v_front_porch - v_sync

    return _Blanking(
        h_blank=consts.h_blank,
        h_front_porch=consts.h_blank - consts.h_sync - consts.h_back_porch,
        h_sync=consts.h_sync,
        h_back_porch=consts.h_back_porch,
        v_front_porch=v_front_porch,
        v_back_porch=v_back_porch,
        field_total=field_total,
        pixel_clock=pixel_clock,
    )


def _round_clock(exact_hz: Fraction, clock_step: int) -> int:
    return math.floor(exact_hz / clock_step) * clock_step


def _coerce_resolution(resolution: Union[Resolution, Tuple[int, int]]) -> Resolution:
    if isinstance(resolution, Resolution):
        return resolution
    try:
        width, height = resolution
    except (TypeError, ValueError):
        raise InvalidInputError(
            f"Resolution must be a (width, height) pair, got {resolution!r}.",
            field="resolution",
        )
    return Resolution(horizontal_pixels=width, vertical_lines=height)


def _coerce_refresh_rate(refresh_rate: RefreshRate) -> Fraction:
    if isinstance(refresh_rate, Fraction):
        return refresh_rate
    return parse_refresh_rate(refresh_rate)


def _validate(
    resolution: Resolution,
    rate: Fraction,
    variant: Variant,
    interlaced: bool,
    video_optimized: bool,
) -> VariantConstants:
    consts = VARIANT_CONSTANTS.get(variant) if isinstance(variant, str) else None
    if consts is None:
        raise InvalidInputError(f"Unsupported variant: {variant!r}", field="variant")

    for field, value in (
        ("horizontal_pixels", resolution.horizontal_pixels),
        ("vertical_lines", resolution.vertical_lines),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError(f"{field} must be an integer, got {value!r}.", field=field)
        if value < MIN_PIXELS:
            raise InvalidInputError(f"{field} must be at least {MIN_PIXELS}, got {value}.", field=field)

    if resolution.horizontal_pixels < consts.min_h_pixels:
        raise InvalidInputError(
            f"horizontal_pixels must be at least {consts.min_h_pixels} for {variant} blanking, "
            f"got {resolution.horizontal_pixels}.",
            field="horizontal_pixels",
        )

    fields = 2 if interlaced else 1
    if resolution.vertical_lines // fields < consts.min_v_lines:
        raise InvalidInputError(
            f"vertical_lines must give at least {consts.min_v_lines} lines per field for {variant} "
            f"blanking, got {resolution.vertical_lines}.",
            field="vertical_lines",
        )

    if rate <= 0 or rate > MAX_REFRESH_RATE:
        raise InvalidInputError(
            f"refresh_rate must be in (0, {MAX_REFRESH_RATE}] Hz, got {float(rate):g}.",
            field="refresh_rate",
        )

    if interlaced and not consts.interlace_supported:
        raise UnsupportedCombinationError(f"Interlaced output is not defined for {variant} blanking.")
    if video_optimized and variant != "reduced_v2":
        raise UnsupportedCombinationError("Video-optimized clocks are only defined for reduced_v2 blanking.")

    # The active area alone bounds the exact clock from below for every variant.
    active_clock = (
        rate
        * (resolution.horizontal_pixels // consts.cell_gran * consts.cell_gran)
        * (resolution.vertical_lines // fields * fields)
        * (Fraction(1000, 1001) if video_optimized else 1)
    )
    if active_clock < MIN_CLOCK_STEPS * consts.clock_step:
        raise InvalidInputError(
            f"{resolution.horizontal_pixels}x{resolution.vertical_lines} at {float(rate):g} Hz would need a "
            f"pixel clock under {MIN_CLOCK_STEPS} steps of {consts.clock_step} Hz.",
            field="refresh_rate",
        )

    return consts
