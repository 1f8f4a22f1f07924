"""Shared fixtures for workpacket tests."""

from pathlib import Path

import pytest

from workpacket.config import Settings
from workpacket.models import RunConfig
from workpacket.protocols import GenerationRequest, GenerationResult


def reconstruct(path: Path, line_start: int, line_end: int) -> str:
    """Rebuild chunk text from a file's raw lines."""
    lines = path.read_bytes().decode("utf-8").split("\n")
    return "\n".join(lines[line_start - 1 : line_end])


class ScriptedGenerator:
    """Generation client that replays canned completions in order."""

    model_name = "scripted"

    def __init__(self, *responses: str):
        self.responses = list(responses)
        self.requests: list[GenerationRequest] = []

    def generate(self, request: GenerationRequest) -> GenerationResult:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("ScriptedGenerator ran out of responses")
        return GenerationResult(text=self.responses.pop(0), input_tokens=1, output_tokens=1)


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key=None, retrieval_limit=30)


@pytest.fixture
def run_config(tmp_path: Path) -> RunConfig:
    inputs = tmp_path / "inputs"
    inputs.mkdir()
    return RunConfig(
        assignment_id="hw1",
        input_paths=[str(inputs)],
        output_dir=str(tmp_path / "out"),
    )


@pytest.fixture
def assignment(tmp_path: Path) -> Path:
    """A small assignment folder with spec, slides and notes."""
    root = tmp_path / "hw1"
    (root / "slides").mkdir(parents=True)
    (root / "spec.md").write_text(
        "# Overview\n"
        "Build a binary search tree library.\n"
        "\n"
        "## Requirements\n"
        "The tree must support insert and delete.\n"
        "Deliverables include a README.\n"
        "\n"
        "## Grading\n"
        "Grading is based on hidden tests.\n"
    )
    (root / "slides" / "lecture1.md").write_text(
        "# Binary search trees\n"
        "Each node keeps smaller keys on the left.\n"
        "\n"
        "# Deletion\n"
        "Deleting a node with two children uses the successor.\n"
    )
    (root / "notes.txt").write_text(
        "Insert walks down from the root.\n\nDelete is the tricky tree operation.\n"
    )
    return root
