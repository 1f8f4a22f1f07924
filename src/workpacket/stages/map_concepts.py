"""Map the concepts a student needs onto extracted requirements."""

from typing import AbstractSet, Any

from pydantic import ValidationError

from workpacket.exceptions import InvalidStageInputError
from workpacket.models import Chunk, ConceptsOutput, FileTag, RequirementsOutput
from workpacket.pipeline import Candidate, ModelContract, RunContext, Stage
from workpacket.pipeline.contracts import issues_from_error
from workpacket.query_builder import build_query
from workpacket.stages.common import format_chunks, generate, parse_json, retrieve

SYSTEM_PROMPT = """You are a precise concept mapping system. Identify the key concepts a student must understand to complete an assignment and link each to specific requirements.

For each concept produce a JSON object with:
- "id": a sequential identifier like "CON-001"
- "name": a concise, specific concept name
- "description": one sentence on what the student needs to understand
- "requirement_ids": requirement IDs from the REQUIREMENTS list this concept relates to (at least one; never invent IDs)
- "source_refs": where the concept appears; each has "file_id" and at least one locator copied verbatim from the chunk metadata

Rules:
- Only concepts NECESSARY to complete the assignment
- Merge duplicates into one entry with multiple source_refs
- Output ONLY valid JSON, no commentary and no code fences

Output schema:
{"concepts": [{"id": "CON-001", "name": "...", "description": "...", "requirement_ids": ["REQ-001"], "source_refs": [{"file_id": "...", "section": "..."}]}]}"""


def build_user_message(requirements: RequirementsOutput, chunks: list[Chunk]) -> str:
    req_lines = "\n".join(
        f"- {r.id}: [{r.type.value}] {r.text}" for r in requirements.requirements
    )
    return (
        "Identify the key concepts needed to complete this assignment and map each "
        "concept to the relevant requirement IDs.\n"
        "Use the source location shown above each chunk for your source_refs.\n\n"
        f"=== REQUIREMENTS ===\n{req_lines}\n\n"
        f"=== ASSIGNMENT MATERIALS ===\n{format_chunks(chunks)}"
    )


def sanitize_concepts(candidate: Any, valid_ids: AbstractSet[str]) -> Any:
    """Strip requirement ids that do not exist upstream.

    Concepts left without any known id are dropped. Returns ``{}`` when no
    concept survives, so the contract fails and the stage is retried.
    Structurally unexpected candidates pass through untouched for the
    contract to reject.
    """
    if not isinstance(candidate, dict) or not isinstance(candidate.get("concepts"), list):
        return candidate

    kept = []
    for concept in candidate["concepts"]:
        if not isinstance(concept, dict) or not isinstance(concept.get("requirement_ids"), list):
            kept.append(concept)
            continue
        known = [
            rid for rid in concept["requirement_ids"] if isinstance(rid, str) and rid in valid_ids
        ]
        if known:
            kept.append({**concept, "requirement_ids": known})

    if not kept:
        return {}
    return {**candidate, "concepts": kept}


def load_requirements(stage_input: Any) -> RequirementsOutput:
    if isinstance(stage_input, RequirementsOutput):
        return stage_input
    try:
        return RequirementsOutput.model_validate(stage_input)
    except ValidationError as e:
        issues = "; ".join(str(issue) for issue in issues_from_error(e))
        raise InvalidStageInputError(
            "map_concepts stage requires valid requirements as input. "
            "Ensure the extract_requirements stage runs before this stage. "
            f"Validation errors: {issues}"
        ) from e


def run(stage_input: Any, ctx: RunContext) -> Candidate:
    requirements = load_requirements(stage_input)
    valid_ids = {r.id for r in requirements.requirements}

    query = build_query(r.text for r in requirements.requirements)
    chunks = retrieve(
        ctx, "concept mapping", query, bias=FileTag.SLIDES, fallback_tag=FileTag.SLIDES
    )

    # Retries call the generation backend again.
    text = generate(ctx, "map_concepts", SYSTEM_PROMPT, build_user_message(requirements, chunks))

    parsed = parse_json(text)
    if parsed is None:
        return Candidate({})
    return Candidate(sanitize_concepts(parsed, valid_ids))


map_concepts_stage = Stage(
    name="map_concepts",
    run=run,
    contract=ModelContract(ConceptsOutput),
    artifact="concepts.json",
)
