"""Writes a call result to a JSON file (`--output`)."""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import ApiResult


def export_result_json(*, result: ApiResult, output_path: Path) -> Path:
    """Export an `ApiResult` to UTF-8 JSON with stable formatting."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
