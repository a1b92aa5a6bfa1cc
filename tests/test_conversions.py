from decimal import Decimal
from fractions import Fraction

import pytest

from cvt_core.conversions import (
    ConversionError,
    mode_request_from_mapping,
    parse_refresh_rate,
    parse_resolution,
    parse_variant,
)
from cvt_core.errors import InvalidInputError
from cvt_core.models import Resolution


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("1920x1080", Resolution(1920, 1080)),
        (" 640 X 480 ", Resolution(640, 480)),
        ("800*600", Resolution(800, 600)),
        ([1280, 720], Resolution(1280, 720)),
        (("1024", "768"), Resolution(1024, 768)),
        (Resolution(320, 200), Resolution(320, 200)),
    ],
)
def test_parse_resolution(value: object, expected: Resolution) -> None:
    assert parse_resolution(value) == expected


@pytest.mark.parametrize("value", ["1920", "1920x", "axb", "1920x1080x2", [1920], (True, 1080), 1920])
def test_parse_resolution_rejects_garbage(value: object) -> None:
    with pytest.raises(ConversionError):
        parse_resolution(value)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (60, Fraction(60)),
        ("60", Fraction(60)),
        ("59.94", Fraction(2997, 50)),
        ("59.94 Hz", Fraction(2997, 50)),
        (59.94, Fraction(2997, 50)),
        ("60000/1001", Fraction(60000, 1001)),
        (Decimal("23.976"), Fraction(2997, 125)),
        (Fraction(75), Fraction(75)),
    ],
)
def test_parse_refresh_rate_is_exact(value: object, expected: Fraction) -> None:
    assert parse_refresh_rate(value) == expected


@pytest.mark.parametrize("value", ["", "fast", "1/0", True, None, float("nan"), Decimal("Infinity")])
def test_parse_refresh_rate_rejects_garbage(value: object) -> None:
    with pytest.raises(ConversionError) as excinfo:
        parse_refresh_rate(value)

    assert isinstance(excinfo.value, InvalidInputError)
    assert excinfo.value.field == "refresh_rate"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("normal", "normal"),
        ("CVT", "normal"),
        ("rb", "reduced"),
        ("RBv1", "reduced"),
        ("reduced", "reduced"),
        ("rb2", "reduced_v2"),
        ("reduced-v2", "reduced_v2"),
    ],
)
def test_parse_variant_aliases(value: str, expected: str) -> None:
    assert parse_variant(value) == expected


def test_parse_variant_rejects_unknown() -> None:
    with pytest.raises(ConversionError) as excinfo:
        parse_variant("gtf")

    assert excinfo.value.field == "variant"


def test_mode_request_from_mapping_full_entry() -> None:
    request = mode_request_from_mapping(
        {
            "name": "uhd",
            "resolution": "4096x2160",
            "refresh": 59.94,
            "variant": "rb2",
            "video_optimized": True,
        }
    )

    assert request.resolution == Resolution(4096, 2160)
    assert request.refresh_rate == Fraction(2997, 50)
    assert request.variant == "reduced_v2"
    assert request.video_optimized
    assert not request.interlaced
    assert not request.margins


def test_mode_request_from_mapping_defaults() -> None:
    request = mode_request_from_mapping({"width": 1280, "height": 1024})

    assert request.resolution == Resolution(1280, 1024)
    assert request.refresh_rate == Fraction(60)
    assert request.variant == "normal"


def test_mode_request_from_mapping_reports_entry_label() -> None:
    with pytest.raises(ConversionError, match="^broken: ") as excinfo:
        mode_request_from_mapping({"name": "broken", "width": 640})

    assert excinfo.value.field == "resolution"


def test_mode_request_from_mapping_rejects_non_bool_flags() -> None:
    with pytest.raises(ConversionError, match="'interlaced' must be true or false"):
        mode_request_from_mapping({"resolution": "640x480", "interlaced": "yes"})
