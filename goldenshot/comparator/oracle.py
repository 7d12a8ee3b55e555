"""Pixel-equality oracle — decides whether two images match and renders diffs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

import numpy as np
from PIL import Image, ImageColor, UnidentifiedImageError

from goldenshot.errors import OracleError
from goldenshot.models.config import ComparisonOptions

logger = logging.getLogger(__name__)


class PixelOracle(Protocol):
    """Anything that can compare two image files and draw their difference."""

    def compare_images(self, path_a: Path, path_b: Path, options: ComparisonOptions) -> bool:
        ...

    def render_diff(
        self,
        reference: Path,
        current: Path,
        diff_path: Path,
        highlight_color: str,
        options: Optional[ComparisonOptions] = None,
    ) -> None:
        ...


def _load_rgba(path: Path) -> np.ndarray:
    try:
        with Image.open(path) as img:
            return np.array(img.convert("RGBA"), dtype=np.uint8)
    except (OSError, UnidentifiedImageError) as e:
        raise OracleError(f"Cannot read image {path}: {e}") from e


def _srgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert an (..., 3) array of 0-255 sRGB values to CIE L*a*b* (D65)."""
    c = rgb.astype(np.float64) / 255.0
    linear = np.where(c > 0.04045, ((c + 0.055) / 1.055) ** 2.4, c / 12.92)

    m = np.array([
        [0.4124564, 0.3575761, 0.1804375],
        [0.2126729, 0.7151522, 0.0721750],
        [0.0193339, 0.1191920, 0.9503041],
    ])
    xyz = linear @ m.T / np.array([0.95047, 1.0, 1.08883])

    delta = 6.0 / 29.0
    f = np.where(xyz > delta ** 3, np.cbrt(xyz), xyz / (3.0 * delta * delta) + 4.0 / 29.0)

    lab = np.empty_like(f)
    lab[..., 0] = 116.0 * f[..., 1] - 16.0
    lab[..., 1] = 500.0 * (f[..., 0] - f[..., 1])
    lab[..., 2] = 200.0 * (f[..., 1] - f[..., 2])
    return lab


def ciede2000(lab1: np.ndarray, lab2: np.ndarray) -> np.ndarray:
    """CIEDE2000 colour difference between two (..., 3) L*a*b* arrays."""
    l1, a1, b1 = lab1[..., 0], lab1[..., 1], lab1[..., 2]
    l2, a2, b2 = lab2[..., 0], lab2[..., 1], lab2[..., 2]

    c_bar = (np.hypot(a1, b1) + np.hypot(a2, b2)) / 2.0
    g = 0.5 * (1.0 - np.sqrt(c_bar ** 7 / (c_bar ** 7 + 25.0 ** 7)))
    a1p = (1.0 + g) * a1
    a2p = (1.0 + g) * a2
    c1p = np.hypot(a1p, b1)
    c2p = np.hypot(a2p, b2)
    h1p = np.degrees(np.arctan2(b1, a1p)) % 360.0
    h2p = np.degrees(np.arctan2(b2, a2p)) % 360.0

    chroma_zero = (c1p * c2p) == 0
    dhp = h2p - h1p
    dhp = np.where(dhp > 180.0, dhp - 360.0, dhp)
    dhp = np.where(dhp < -180.0, dhp + 360.0, dhp)
    dhp = np.where(chroma_zero, 0.0, dhp)

    d_l = l2 - l1
    d_c = c2p - c1p
    d_h = 2.0 * np.sqrt(c1p * c2p) * np.sin(np.radians(dhp / 2.0))

    l_bar = (l1 + l2) / 2.0
    c_bar_p = (c1p + c2p) / 2.0
    h_sum = h1p + h2p
    h_bar = np.where(
        np.abs(h1p - h2p) <= 180.0,
        h_sum / 2.0,
        np.where(h_sum < 360.0, (h_sum + 360.0) / 2.0, (h_sum - 360.0) / 2.0),
    )
    h_bar = np.where(chroma_zero, h_sum, h_bar)

    t = (
        1.0
        - 0.17 * np.cos(np.radians(h_bar - 30.0))
        + 0.24 * np.cos(np.radians(2.0 * h_bar))
        + 0.32 * np.cos(np.radians(3.0 * h_bar + 6.0))
        - 0.20 * np.cos(np.radians(4.0 * h_bar - 63.0))
    )
    s_l = 1.0 + 0.015 * (l_bar - 50.0) ** 2 / np.sqrt(20.0 + (l_bar - 50.0) ** 2)
    s_c = 1.0 + 0.045 * c_bar_p
    s_h = 1.0 + 0.015 * c_bar_p * t
    d_theta = 30.0 * np.exp(-(((h_bar - 275.0) / 25.0) ** 2))
    r_t = -2.0 * np.sqrt(c_bar_p ** 7 / (c_bar_p ** 7 + 25.0 ** 7)) * np.sin(np.radians(2.0 * d_theta))

    dl = d_l / s_l
    dc = d_c / s_c
    dh = d_h / s_h
    return np.sqrt(dl * dl + dc * dc + dh * dh + r_t * dc * dh)


def difference_mask(a: np.ndarray, b: np.ndarray, options: ComparisonOptions) -> np.ndarray:
    """Boolean (h, w) mask of pixels that count as different.

    Both arrays must be RGBA with the same shape. Strict mode flags any changed
    channel; otherwise colour changes within ``options.tolerance`` are ignored.
    Alpha changes always count.
    """
    changed = np.any(a != b, axis=-1)
    if options.strict or not changed.any():
        return changed

    alpha_changed = a[..., 3] != b[..., 3]
    # Only convert pixels that differ at all; screenshots are mostly identical.
    idx = np.nonzero(changed)
    distance = ciede2000(_srgb_to_lab(a[idx][:, :3]), _srgb_to_lab(b[idx][:, :3]))
    mask = np.zeros_like(changed)
    mask[idx] = (distance > options.tolerance) | alpha_changed[idx]
    return mask


class ImageOracle:
    """Pillow/numpy implementation of the pixel oracle."""

    def compare_images(self, path_a: Path, path_b: Path, options: ComparisonOptions) -> bool:
        a = _load_rgba(path_a)
        b = _load_rgba(path_b)
        if a.shape != b.shape:
            logger.debug("Image sizes differ: %s vs %s", a.shape[1::-1], b.shape[1::-1])
            return False
        diff_count = int(np.count_nonzero(difference_mask(a, b, options)))
        logger.debug(
            "Compared %s with %s: %d differing pixel(s) (strict=%s, tolerance=%s)",
            path_a, path_b, diff_count, options.strict, options.tolerance,
        )
        return diff_count == 0

    def render_diff(
        self,
        reference: Path,
        current: Path,
        diff_path: Path,
        highlight_color: str,
        options: Optional[ComparisonOptions] = None,
    ) -> None:
        """Write ``reference`` with differing pixels painted in ``highlight_color``.

        The canvas covers both images; area present in only one of them is
        highlighted as well.
        """
        options = options or ComparisonOptions()
        try:
            color = ImageColor.getcolor(highlight_color, "RGBA")
        except ValueError as e:
            raise OracleError(f"Invalid highlight color {highlight_color!r}: {e}") from e

        ref = _load_rgba(reference)
        cur = _load_rgba(current)
        height = max(ref.shape[0], cur.shape[0])
        width = max(ref.shape[1], cur.shape[1])
        oh = min(ref.shape[0], cur.shape[0])
        ow = min(ref.shape[1], cur.shape[1])

        canvas = np.empty((height, width, 4), dtype=np.uint8)
        canvas[...] = color
        canvas[:ref.shape[0], :ref.shape[1]] = ref

        overlap = difference_mask(ref[:oh, :ow], cur[:oh, :ow], options)
        mask = np.ones((height, width), dtype=bool)
        mask[:oh, :ow] = overlap
        canvas[mask] = color

        try:
            diff_path.parent.mkdir(parents=True, exist_ok=True)
            Image.fromarray(canvas).save(diff_path, format="PNG")
        except OSError as e:
            raise OracleError(f"Cannot write diff image {diff_path}: {e}") from e
        logger.debug("Rendered diff of %d pixel(s) to %s", int(np.count_nonzero(mask)), diff_path)
