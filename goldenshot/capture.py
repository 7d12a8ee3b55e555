"""Capture helper — masks a page, screenshots it, and checks it against a golden."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Mapping, Optional, Sequence

from playwright.async_api import ElementHandle, Page

from goldenshot.comparator.comparator import CONFIGURED_OUTPUT, Comparator
from goldenshot.masking.mask import DEFAULT_Z_INDEX, masked
from goldenshot.models.comparison import ComparisonResult
from goldenshot.models.config import ComparisonOptions, GoldenConfig

logger = logging.getLogger(__name__)


async def check_screenshot(
    page: Page,
    golden_path: str | Path,
    output_folder: str | Path | None = CONFIGURED_OUTPUT,
    options: ComparisonOptions | Mapping | None = None,
    *,
    mask_elements: Sequence[ElementHandle] = (),
    mask_color: str = "#000000",
    mask_z_index: int = DEFAULT_Z_INDEX,
    mask_x_offset: float = 0,
    mask_y_offset: float = 0,
    mask_size_multiplier: float = 1.0,
    full_page: bool = False,
    comparator: Optional[Comparator] = None,
) -> ComparisonResult:
    """Capture ``page`` with dynamic regions masked and compare it to a golden.

    The ``mask_*`` arguments apply to every mask. Masks are removed as soon as
    the screenshot is taken. The comparison runs in a worker thread so the
    event loop keeps serving the browser.
    """
    comparator = comparator or Comparator(GoldenConfig.from_env())

    async with masked(
        mask_elements, mask_color, mask_z_index, mask_x_offset, mask_y_offset, mask_size_multiplier
    ):
        data = await page.screenshot(full_page=full_page)
    logger.debug("Captured %d bytes from %s", len(data), page.url)

    return await asyncio.to_thread(comparator.compare, data, golden_path, output_folder, options)
