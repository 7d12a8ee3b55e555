"""Pytest configuration and shared fixtures."""

import io
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from PIL import Image

from goldenshot.comparator.comparator import Comparator
from goldenshot.comparator.oracle import ImageOracle
from goldenshot.models.config import ComparisonOptions, GoldenConfig


# ============================================================================
# Image Fixtures
# ============================================================================


def png_bytes(
    size: tuple[int, int] = (8, 8),
    color: tuple[int, int, int, int] = (255, 255, 255, 255),
    pixels: dict[tuple[int, int], tuple[int, int, int, int]] | None = None,
) -> bytes:
    """Build an in-memory PNG with an optional set of overridden pixels."""
    img = Image.new("RGBA", size, color)
    for xy, value in (pixels or {}).items():
        img.putpixel(xy, value)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_png():
    """Factory fixture around png_bytes."""
    return png_bytes


@pytest.fixture
def white_png() -> bytes:
    """An 8x8 opaque white PNG."""
    return png_bytes()


@pytest.fixture
def altered_png() -> bytes:
    """The white PNG with one pixel turned black."""
    return png_bytes(pixels={(3, 4): (0, 0, 0, 255)})


@pytest.fixture
def golden_dir(tmp_path: Path) -> Path:
    path = tmp_path / "ref"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "diffs"
    path.mkdir()
    return path


# ============================================================================
# Comparator Fixtures
# ============================================================================


@pytest.fixture
def compare_config() -> GoldenConfig:
    """Update mode off, default options."""
    return GoldenConfig()


@pytest.fixture
def update_config() -> GoldenConfig:
    """Update mode on."""
    return GoldenConfig(update_goldens=True)


@pytest.fixture
def comparator(compare_config: GoldenConfig) -> Comparator:
    return Comparator(compare_config)


@pytest.fixture
def spy_oracle() -> Mock:
    """A real ImageOracle wrapped so calls can be asserted."""
    return Mock(wraps=ImageOracle())


@pytest.fixture
def strict_options() -> ComparisonOptions:
    return ComparisonOptions(strict=True, tolerance=0)


# ============================================================================
# Browser Fixtures
# ============================================================================


@pytest.fixture
def mock_element() -> AsyncMock:
    """A Playwright element handle with a fixed bounding box."""
    element = AsyncMock()
    element.bounding_box = AsyncMock(return_value={"x": 10, "y": 20, "width": 100, "height": 50})
    element.evaluate_handle = AsyncMock(side_effect=lambda *a, **k: AsyncMock())
    return element


@pytest.fixture
def mock_page(white_png: bytes) -> AsyncMock:
    page = AsyncMock()
    page.url = "https://example.com/"
    page.screenshot = AsyncMock(return_value=white_png)
    return page
