"""X11 modeline rendering for computed timings."""

from __future__ import annotations

from typing import Dict, Optional

from .models import TimingDescriptor


def mode_name(timing: TimingDescriptor) -> str:
    """Return the conventional ``WIDTHxHEIGHT_RATE`` name, ``i`` for interlaced."""

    suffix = "i" if timing.interlaced else ""
    return f"{timing.h_active}x{timing.v_active}_{float(timing.frame_rate):.2f}{suffix}"


def format_modeline(timing: TimingDescriptor, name: Optional[str] = None) -> str:
    """Return an xorg.conf ``Modeline`` line for ``timing``."""

    label = name if name is not None else mode_name(timing)
    parts = [
        f'Modeline "{label}"',
        f"{timing.pixel_clock_mhz:.3f}",
        f"{timing.h_active} {timing.h_sync_start} {timing.h_sync_end} {timing.h_total}",
        f"{timing.v_active} {timing.v_sync_start} {timing.v_sync_end} {timing.v_total}",
        "+HSync" if timing.h_sync_polarity == "positive" else "-HSync",
        "+VSync" if timing.v_sync_polarity == "positive" else "-VSync",
    ]
    if timing.interlaced:
        parts.append("Interlace")
    return " ".join(parts)


def timing_to_dict(timing: TimingDescriptor) -> Dict[str, object]:
    """Flatten ``timing`` into plain YAML/JSON friendly values."""

    return {
        "name": mode_name(timing),
        "variant": timing.variant,
        "interlaced": timing.interlaced,
        "pixel_clock_hz": timing.pixel_clock,
        "h_freq_hz": round(float(timing.h_freq), 3),
        "field_rate_hz": round(float(timing.field_rate), 3),
        "frame_rate_hz": round(float(timing.frame_rate), 3),
        "horizontal": {
            "active": timing.h_active,
            "border": timing.h_border,
            "front_porch": timing.h_front_porch,
            "sync": timing.h_sync,
            "back_porch": timing.h_back_porch,
            "blank": timing.h_blank,
            "total": timing.h_total,
            "polarity": timing.h_sync_polarity,
        },
        "vertical": {
            "active": timing.v_active,
            "border": timing.v_border,
            "front_porch": timing.v_front_porch,
            "sync": timing.v_sync,
            "back_porch": timing.v_back_porch,
            "blank": timing.v_blank,
            "total": timing.v_total,
            "polarity": timing.v_sync_polarity,
        },
    }
