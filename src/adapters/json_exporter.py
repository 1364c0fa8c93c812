"""JSON export of a job result.

Gives CI logs and other tooling a machine-readable record of the run (states
visited, step outcomes, whether anything was published).
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import JobResult


def export_job_json(*, result: JobResult, output_path: Path) -> Path:
    """Write `JobResult` as UTF-8 JSON with a stable layout."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
