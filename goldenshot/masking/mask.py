"""Mask controller — covers dynamic page regions with opaque overlays before capture."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from typing import AsyncIterator, Iterable

from playwright.async_api import ElementHandle, JSHandle

from goldenshot.errors import MaskError

logger = logging.getLogger(__name__)

DEFAULT_Z_INDEX = 10000

# Bounding boxes are viewport-relative; adding the scroll offset pins the
# overlay to the document so full-page captures line up too.
MASK_SCRIPT = """
(_, m) => {
    const el = document.createElement('div');
    el.setAttribute('data-goldenshot-mask', '');
    Object.assign(el.style, {
        position: 'absolute',
        left: (m.x + window.scrollX) + 'px',
        top: (m.y + window.scrollY) + 'px',
        width: m.width + 'px',
        height: m.height + 'px',
        margin: '0',
        padding: '0',
        border: 'none',
        opacity: '1',
        pointerEvents: 'none',
        background: m.color,
        zIndex: String(m.zIndex),
    });
    document.body.appendChild(el);
    return el;
}
"""

REMOVE_SCRIPT = "m => m.parentNode.removeChild(m)"


@dataclass
class MaskRectangle:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_bounding_box(
        cls,
        box: dict,
        x_offset: float = 0,
        y_offset: float = 0,
        size_multiplier: float = 1.0,
    ) -> "MaskRectangle":
        """Shift the box by the offsets and scale its size (not its position)."""
        return cls(
            x=box["x"] + x_offset,
            y=box["y"] + y_offset,
            width=box["width"] * size_multiplier,
            height=box["height"] * size_multiplier,
        )


async def add_mask(
    element: ElementHandle,
    color: str,
    z_index: int = DEFAULT_Z_INDEX,
    x_offset: float = 0,
    y_offset: float = 0,
    size_multiplier: float = 1.0,
) -> JSHandle:
    """Insert an opaque overlay over ``element`` and return a handle to it."""
    if size_multiplier <= 0:
        raise ValueError(f"size_multiplier must be > 0, got {size_multiplier}")

    box = await element.bounding_box()
    if box is None:
        raise MaskError("Element has no bounding box (detached or not rendered)")

    rect = MaskRectangle.from_bounding_box(box, x_offset, y_offset, size_multiplier)
    mask = await element.evaluate_handle(
        MASK_SCRIPT, {**asdict(rect), "color": color, "zIndex": z_index}
    )
    logger.debug("Added mask at %s (z-index %d)", rect, z_index)
    return mask


async def remove_mask(mask: JSHandle) -> None:
    """Detach a mask created by add_mask. Fails if it was already removed."""
    await mask.evaluate(REMOVE_SCRIPT)
    logger.debug("Removed mask")


@asynccontextmanager
async def masked(
    elements: Iterable[ElementHandle],
    color: str,
    z_index: int = DEFAULT_Z_INDEX,
    x_offset: float = 0,
    y_offset: float = 0,
    size_multiplier: float = 1.0,
) -> AsyncIterator[list[JSHandle]]:
    """Mask every element for the duration of the block.

    Every mask added is removed on exit, also when the block (or adding a later
    mask) raises. A removal failure never hides the block's own exception; if
    the block succeeded, the first removal failure is raised once all removals
    have been attempted.
    """
    masks: list[JSHandle] = []
    failed = False
    try:
        for element in elements:
            masks.append(await add_mask(element, color, z_index, x_offset, y_offset, size_multiplier))
        yield masks
    except BaseException:
        failed = True
        raise
    finally:
        errors: list[Exception] = []
        for mask in reversed(masks):
            try:
                await remove_mask(mask)
            except Exception as e:
                logger.warning("Could not remove mask: %s", e)
                errors.append(e)
        if errors and not failed:
            raise errors[0]
