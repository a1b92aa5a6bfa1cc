"""Domain models for CVT timing computations."""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from types import MappingProxyType
from typing import Literal, Mapping, Optional

Variant = Literal["normal", "reduced", "reduced_v2"]
Polarity = Literal["positive", "negative"]


@dataclass(frozen=True)
class Resolution:
    """Requested addressable resolution in pixels and lines."""

    horizontal_pixels: int
    vertical_lines: int


@dataclass(frozen=True)
class ModeRequest:
    """Validated request as handed from a collaborator to the calculator."""

    resolution: Resolution
    refresh_rate: Fraction
    variant: Variant = "normal"
    interlaced: bool = False
    margins: bool = False
    video_optimized: bool = False


@dataclass(frozen=True)
class VariantConstants:
    """Constant set selected by a CVT variant (VESA CVT 1.2, section 5.1)."""

    cell_gran: int  # Character cell granularity in pixels
    clock_step: int  # Pixel clock granularity in Hz
    min_h_pixels: int  # Smallest width keeping every porch positive
    min_v_lines: int  # Smallest per-field height keeping the achieved rate near the request
    h_sync_polarity: Polarity
    v_sync_polarity: Polarity
    interlace_supported: bool
    # Normal blanking
    min_vsync_bp: Optional[int] = None  # Minimum vsync + back porch time in us
    min_v_porch: Optional[int] = None  # Vertical front porch in lines
    c_prime: Optional[int] = None  # Duty cycle offset (%)
    m_prime: Optional[int] = None  # Duty cycle gradient (%/kHz)
    h_sync_per: Optional[Fraction] = None  # Horizontal sync share of the total
    min_duty_cycle: Optional[int] = None  # Floor for the ideal duty cycle (%)
    # Reduced blanking
    min_v_blank: Optional[int] = None  # Minimum vertical blank time in us
    v_front_porch: Optional[int] = None  # Fixed (RBv1) or minimum (RBv2) lines
    h_blank: Optional[int] = None  # Fixed horizontal blank in pixels
    h_sync: Optional[int] = None  # Fixed horizontal sync in pixels
    h_back_porch: Optional[int] = None  # Fixed horizontal back porch in pixels
    v_sync: Optional[int] = None  # Fixed vertical sync; None uses the aspect table
    # Shared
    min_v_bporch: int = 6  # Minimum vertical back porch in lines
    fixed_v_bporch: bool = False  # RBv2 pins the back porch to the minimum

    @property
    def reduced_blanking(self) -> bool:
        return self.min_v_blank is not None


VARIANT_CONSTANTS: Mapping[str, VariantConstants] = MappingProxyType(
    {
        "normal": VariantConstants(
            cell_gran=8,
            clock_step=250_000,
            min_h_pixels=320,
            min_v_lines=200,
            h_sync_polarity="negative",
            v_sync_polarity="positive",
            interlace_supported=True,
            min_vsync_bp=550,
            min_v_porch=3,
            c_prime=30,
            m_prime=300,
            h_sync_per=Fraction(8, 100),
            min_duty_cycle=20,
        ),
        "reduced": VariantConstants(
            cell_gran=8,
            clock_step=250_000,
            min_h_pixels=8,
            min_v_lines=8,
            h_sync_polarity="positive",
            v_sync_polarity="negative",
            interlace_supported=True,
            min_v_blank=460,
            v_front_porch=3,
            h_blank=160,
            h_sync=32,
            h_back_porch=80,
        ),
        "reduced_v2": VariantConstants(
            cell_gran=1,
            clock_step=1_000,
            min_h_pixels=8,
            min_v_lines=8,
            h_sync_polarity="positive",
            v_sync_polarity="negative",
            interlace_supported=False,
            min_v_blank=460,
            v_front_porch=1,
            h_blank=80,
            h_sync=32,
            h_back_porch=40,
            v_sync=8,
            fixed_v_bporch=True,
        ),
    }
)

# Vertical sync width keyed by aspect ratio; anything unlisted uses 10 lines.
ASPECT_V_SYNC = (
    ((4, 3), 4),
    ((16, 9), 5),
    ((16, 10), 6),
    ((5, 4), 7),
    ((15, 9), 7),
)
DEFAULT_V_SYNC = 10

MARGIN_PER = Fraction(18, 10)  # Border size as a percentage of the active area


@dataclass(frozen=True)
class TimingDescriptor:
    """Complete timing for one video mode.

    Horizontal quantities are in pixels and ``h_total`` is
    ``h_active + 2 * h_border + h_blank``. ``v_active``, ``v_blank`` and
    ``v_total`` count the whole frame (both fields when interlaced), while
    ``v_border``, ``v_front_porch``, ``v_sync`` and ``v_back_porch`` are the
    per-field intervals the standard defines. ``pixel_clock`` is in Hz, the
    achieved rates are exact fractions in Hz.
    """

    variant: Variant
    interlaced: bool

    h_active: int
    h_border: int
    h_blank: int
    h_front_porch: int
    h_sync: int
    h_back_porch: int
    h_total: int
    h_sync_polarity: Polarity

    v_active: int
    v_border: int
    v_blank: int
    v_front_porch: int
    v_sync: int
    v_back_porch: int
    v_total: int
    v_sync_polarity: Polarity

    pixel_clock: int
    h_freq: Fraction
    field_rate: Fraction
    frame_rate: Fraction

    @property
    def pixel_clock_mhz(self) -> float:
        return self.pixel_clock / 1_000_000

    @property
    def h_sync_start(self) -> int:
        return self.h_active + self.h_border + self.h_front_porch

    @property
    def h_sync_end(self) -> int:
        return self.h_sync_start + self.h_sync

    @property
    def v_sync_start(self) -> int:
        # Per-field intervals count twice in frame-level positions.
        fields = 2 if self.interlaced else 1
        return self.v_active + (self.v_border + self.v_front_porch) * fields

    @property
    def v_sync_end(self) -> int:
        fields = 2 if self.interlaced else 1
        return self.v_sync_start + self.v_sync * fields
