"""Comparator — checks a captured screenshot against its golden, or refreshes the golden."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Mapping, Optional

from goldenshot.errors import OracleError
from goldenshot.models.comparison import ComparisonKind, ComparisonResult
from goldenshot.models.config import ComparisonOptions, GoldenConfig

from .oracle import ImageOracle, PixelOracle
from .staging import stage_screenshot

logger = logging.getLogger(__name__)

PASS_MESSAGE = "The test passed."

# Default for output_folder: use GoldenConfig.output_folder. An explicit None
# disables diff artifacts for that call.
CONFIGURED_OUTPUT: Any = object()


def diff_artifact_paths(golden_path: Path, output_folder: Path) -> tuple[Path, Path]:
    """Return the (diff, current) artifact paths for a golden."""
    name = golden_path.name
    return output_folder / f"diff-{name}", output_folder / f"current-{name}"


class Comparator:
    """Compares screenshots against golden images.

    Update mode is taken from ``config.update_goldens``; build the config with
    ``GoldenConfig.from_env()`` to honour the UPDATE_GOLDENS variable.
    """

    def __init__(self, config: GoldenConfig | None = None, oracle: PixelOracle | None = None):
        self.config = config or GoldenConfig()
        self.oracle = oracle or ImageOracle()

    def compare(
        self,
        data: bytes | str,
        golden_path: str | Path,
        output_folder: str | Path | None = CONFIGURED_OUTPUT,
        options: ComparisonOptions | Mapping | None = None,
    ) -> ComparisonResult:
        """Compare ``data`` with the golden at ``golden_path``.

        Staging failures raise StagingError; every other outcome, including
        oracle failures, is returned as a ComparisonResult.
        """
        golden = Path(golden_path)
        if output_folder is CONFIGURED_OUTPUT:
            output_folder = self.config.output_folder
        merged = self.config.options.merged(options)
        logger.debug("Comparing against %s with %s", golden, merged)

        screenshot_path = stage_screenshot(data)
        update = self.config.update_goldens

        # First run in update mode: accept without comparing
        if update and not golden.exists():
            return self._update_golden(screenshot_path, golden)

        try:
            equal = self.oracle.compare_images(screenshot_path, golden, merged)
        except OracleError as e:
            logger.warning("Comparison against %s failed: %s", golden, e)
            return ComparisonResult(
                kind=ComparisonKind.ORACLE_ERROR,
                detail=f"There has been an error. Error: {e}",
                golden_path=str(golden),
            )

        if equal:
            logger.info("Screenshot matches %s", golden)
            return ComparisonResult(kind=ComparisonKind.PASS, detail=PASS_MESSAGE, golden_path=str(golden))

        if update:
            return self._update_golden(screenshot_path, golden)

        if output_folder:
            return self._save_diff(screenshot_path, golden, Path(output_folder), merged)

        logger.warning("Screenshot does not match %s", golden)
        return ComparisonResult(
            kind=ComparisonKind.MISMATCH,
            detail=f"Screenshots do not match for {golden}.",
            golden_path=str(golden),
        )

    def _update_golden(self, screenshot_path: Path, golden: Path) -> ComparisonResult:
        # No locking: concurrent updates of one golden are last-writer-wins
        golden.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(screenshot_path, golden)
        logger.info("Updated golden %s", golden)
        return ComparisonResult(
            kind=ComparisonKind.UPDATED,
            detail=f"Reference image {golden} was successfully updated.",
            golden_path=str(golden),
        )

    def _save_diff(
        self, screenshot_path: Path, golden: Path, output_folder: Path, options: ComparisonOptions
    ) -> ComparisonResult:
        diff_path, current_path = diff_artifact_paths(golden, output_folder)
        try:
            self.oracle.render_diff(golden, screenshot_path, diff_path, self.config.highlight_color, options)
        except OracleError as e:
            logger.warning("Could not save diff for %s: %s", golden, e)
            return ComparisonResult(
                kind=ComparisonKind.DIFF_ERROR,
                detail=f"An error occurred while saving the diff image: {e}",
                golden_path=str(golden),
            )

        output_folder.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(screenshot_path, current_path)
        logger.warning("Screenshot does not match %s, diff saved to %s", golden, diff_path)
        return ComparisonResult(
            kind=ComparisonKind.MISMATCH_WITH_DIFF,
            detail=(
                f"Screenshot {current_path} does not match {golden}. "
                f"Difference picture is saved as {diff_path}."
            ),
            golden_path=str(golden),
            diff_path=str(diff_path),
            current_path=str(current_path),
        )


def compare_screenshot(
    data: bytes | str,
    golden_path: str | Path,
    output_folder: str | Path | None = CONFIGURED_OUTPUT,
    options: ComparisonOptions | Mapping | None = None,
    *,
    config: Optional[GoldenConfig] = None,
    oracle: Optional[PixelOracle] = None,
) -> str:
    """Compare a screenshot to its golden and return the verdict message.

    Raises MismatchError, DiffWriteError or OracleError when the comparison
    does not pass. Without an explicit ``config`` the update flag is read from
    the UPDATE_GOLDENS environment variable.
    """
    config = config if config is not None else GoldenConfig.from_env()
    result = Comparator(config, oracle).compare(data, golden_path, output_folder, options)
    result.raise_for_failure()
    return result.detail
