"""JSON report of a document comparison."""
from __future__ import annotations

import json
import logging
from pathlib import Path

from .core.types import ComparisonResult

logger = logging.getLogger(__name__)


def write_json_report(result: ComparisonResult, path: str | Path) -> Path:
    """Write ``result`` as indented UTF-8 JSON, creating parent folders."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8") as handle:
        json.dump(result.to_dict(), handle, ensure_ascii=False, indent=2)
    logger.info(
        "Report for %d page pair(s) written to %s", len(result.pages), out_path
    )
    return out_path
