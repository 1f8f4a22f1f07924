"""Atomic whole-file writes for run state and artifacts."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from workpacket.models import RunMetadata

RUN_METADATA_FILENAME = "run.json"
AUDIT_LOG_FILENAME = "run.log"


def write_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def to_json(value: Any) -> str:
    """Serialize a validated value (pydantic model or plain data)."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", exclude_none=True)
    return json.dumps(value, indent=2, ensure_ascii=False)


def write_run_metadata(output_dir: Path, metadata: RunMetadata) -> None:
    write_atomic(
        output_dir / RUN_METADATA_FILENAME,
        metadata.model_dump_json(indent=2, exclude_none=True),
    )


def read_run_metadata(output_dir: Path) -> RunMetadata:
    return RunMetadata.model_validate_json((output_dir / RUN_METADATA_FILENAME).read_text("utf-8"))
