import pytest

from cvt_core.models import Resolution


@pytest.fixture
def full_hd() -> Resolution:
    """1920x1080, the resolution most reference timings are quoted for."""
    return Resolution(horizontal_pixels=1920, vertical_lines=1080)
