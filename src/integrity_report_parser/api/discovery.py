"""Locating report files for an ingestion batch.

Patterns are glob expressions relative to a base directory; several patterns
can be given separated by commas. Files older than the build that is being
recorded are stale leftovers and are skipped unless timestamps are ignored.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from integrity_report_parser.character.stream import PathLike
from integrity_report_parser.shared import (
    IngestionConfig,
    NoReportsFoundError,
    get_logger,
)

PATTERN_SEPARATOR = ","

logger = get_logger(__name__, component="discovery")


def _timestamp(value: Union[datetime, float]) -> float:
    return value.timestamp() if isinstance(value, datetime) else float(value)


def collect_report_files(
    base_dir: PathLike,
    pattern: str,
    built_after: Optional[Union[datetime, float]] = None,
    config: Optional[IngestionConfig] = None,
    allow_empty: bool = False,
) -> List[Path]:
    """Collect report files matching ``pattern`` below ``base_dir``.

    Args:
        base_dir: Directory the patterns are relative to
        pattern: One or more comma-separated glob patterns (``**`` recurses)
        built_after: Files last modified before this moment are skipped
        config: Ingestion configuration; ``discovery.ignore_timestamps``
            disables the freshness check
        allow_empty: Return an empty list instead of raising

    Returns:
        Sorted, de-duplicated list of matching files

    Raises:
        NoReportsFoundError: If nothing (fresh) matched and ``allow_empty`` is
            not set
    """
    config = config or IngestionConfig.from_env()
    root = Path(base_dir)
    patterns = [part.strip() for part in pattern.split(PATTERN_SEPARATOR) if part.strip()]
    if not patterns:
        raise ValueError("At least one report file pattern is required")

    matches = sorted({
        path for glob in patterns for path in root.glob(glob) if path.is_file()
    })

    fresh = matches
    if built_after is not None and not config.discovery.ignore_timestamps:
        threshold = _timestamp(built_after)
        fresh, stale = [], []
        for path in matches:
            (fresh if path.stat().st_mtime >= threshold else stale).append(path)
        if stale:
            logger.info(
                "Skipping stale Integrity result files",
                extra={"stale_files": [str(path) for path in stale]},
            )

    if not fresh and not allow_empty:
        if matches:
            raise NoReportsFoundError(
                f"Integrity result files matching {pattern!r} were found in {root}, "
                "but none of them are new. Did the tests run?"
            )
        raise NoReportsFoundError(f"No Integrity result files matching {pattern!r} found in {root}")

    return fresh
