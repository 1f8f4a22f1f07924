"""Synthesize the final execution packet from all prior outputs."""

import json
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from workpacket.exceptions import InvalidStageInputError, MissingArtifactError
from workpacket.models import ConceptsOutput, RequirementsOutput
from workpacket.pipeline import Candidate, RunContext, Stage, TextContract
from workpacket.stages.common import generate, strip_fences

MAX_TOKENS = 8192

REQUIRED_HEADINGS = [
    "What You Are Building",
    "Acceptance Criteria",
    "Requirements Checklist",
    "Required Concepts",
    "System / Component Breakdown",
    "Execution Plan",
    "Common Pitfalls and Edge Cases",
    "Validation and Testing Plan",
    "Open Questions",
]

SYSTEM_PROMPT = (
    "You are a precise execution packet generator. Synthesize a complete, actionable "
    "execution packet from extracted requirements, mapped concepts and a concept primer.\n\n"
    "Output a Markdown document with EXACTLY these sections as level-2 headings, in order:\n"
    + "\n".join(f"## {heading}" for heading in REQUIRED_HEADINGS)
    + "\n\nRules:\n"
    "- Every requirement ID (REQ-xxx) from the input appears in the Requirements Checklist\n"
    "- No section is empty; write \"None identified.\" under Open Questions if there are none\n"
    "- No TBD or TODO placeholders\n"
    "- Cite sources as [file_id, locator] where available\n"
    "- No preamble before the first heading and no code fences around the output"
)

_HEADING = re.compile(r"^#{1,2}\s+(.+?)\s*$", re.MULTILINE)
_TBD = re.compile(r"\bTBD\b", re.IGNORECASE)
_ACCEPTANCE = re.compile(
    r"^#{1,2}\s+Acceptance Criteria\s*$(.*?)(?=^#{1,2}\s|\Z)",
    re.IGNORECASE | re.MULTILINE | re.DOTALL,
)


def _read_artifact(output_dir: Path, filename: str, model: type[BaseModel], producer: str) -> Any:
    path = output_dir / filename
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise MissingArtifactError(
            f"generate_packet stage requires {filename} in output directory '{output_dir}'. "
            f"Ensure the {producer} stage runs before this stage."
        ) from e
    except json.JSONDecodeError as e:
        raise MissingArtifactError(f"generate_packet stage found unreadable {filename}: {e}") from e

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise MissingArtifactError(
            f"generate_packet stage found invalid {filename}. Validation errors: {e.error_count()} issue(s)"
        ) from e


def read_prior_outputs(output_dir: Path) -> tuple[RequirementsOutput, ConceptsOutput]:
    """Load and validate requirements.json and concepts.json from a run directory."""
    requirements = _read_artifact(output_dir, "requirements.json", RequirementsOutput, "extract_requirements")
    concepts = _read_artifact(output_dir, "concepts.json", ConceptsOutput, "map_concepts")
    return requirements, concepts


def build_user_message(requirements: RequirementsOutput, concepts: ConceptsOutput, primer: str) -> str:
    req_lines = "\n".join(
        f"- {r.id} [{r.type.value}]: {r.text} "
        f"(source: {r.source_ref.file_id}, {r.source_ref.section or r.source_ref.page or 'unknown'})"
        for r in requirements.requirements
    )
    concept_lines = "\n".join(
        f'- {c.id}: "{c.name}" - {c.description} (linked to: {", ".join(c.requirement_ids)})'
        for c in concepts.concepts
    )
    return (
        "Generate a complete execution packet from the following inputs.\n\n"
        f"=== REQUIREMENTS ===\n{req_lines}\n\n"
        f"=== CONCEPTS ===\n{concept_lines}\n\n"
        f"=== CONCEPT PRIMER ===\n{primer}"
    )


def check_packet(text: str) -> str:
    """Return ``text`` if it satisfies the packet structure, else ``""``.

    Requires every heading in REQUIRED_HEADINGS, no TBD placeholder, at
    least one REQ- reference and a non-empty Acceptance Criteria section.
    """
    headings = {h.lower() for h in _HEADING.findall(text)}
    if any(required.lower() not in headings for required in REQUIRED_HEADINGS):
        return ""
    if _TBD.search(text) or "REQ-" not in text:
        return ""
    acceptance = _ACCEPTANCE.search(text)
    if not acceptance or not acceptance.group(1).strip():
        return ""
    return text


def run(stage_input: Any, ctx: RunContext) -> Candidate:
    if not isinstance(stage_input, str) or not stage_input.strip():
        raise InvalidStageInputError(
            "generate_packet stage requires a non-empty primer string as input. "
            "Ensure the explain_concepts stage runs before this stage."
        )

    requirements, concepts = read_prior_outputs(ctx.output_dir)

    # Retries call the generation backend again.
    text = generate(
        ctx,
        "generate_packet",
        SYSTEM_PROMPT,
        build_user_message(requirements, concepts, stage_input),
        max_tokens=MAX_TOKENS,
    )
    return Candidate(check_packet(strip_fences(text)))


generate_packet_stage = Stage(
    name="generate_packet",
    run=run,
    contract=TextContract(),
    artifact="packet.md",
)
