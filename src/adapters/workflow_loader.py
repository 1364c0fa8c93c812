"""Loading of workflow definitions from JSON.

Keys missing from the file keep their defaults (the `rustdoc` workflow).
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from core.domain.workflow import DocPublishWorkflow
from core.errors import WorkflowConfigError


def load_workflow(path: Path | None) -> DocPublishWorkflow:
    if path is None:
        return DocPublishWorkflow()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise WorkflowConfigError(f"cannot read workflow file {path}: {exc}") from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise WorkflowConfigError(f"{path} is not valid JSON: {exc}") from exc

    try:
        return DocPublishWorkflow.model_validate(data)
    except ValidationError as exc:
        raise WorkflowConfigError(f"invalid workflow in {path}:\n{exc}") from exc
