"""Write a "just enough" primer explaining each mapped concept."""

import re
from typing import Any, Iterable

from pydantic import ValidationError

from workpacket.exceptions import InvalidStageInputError
from workpacket.models import Chunk, ConceptsOutput, FileTag
from workpacket.pipeline import Candidate, RunContext, Stage, TextContract
from workpacket.pipeline.contracts import issues_from_error
from workpacket.query_builder import build_query
from workpacket.stages.common import format_chunks, generate, retrieve, strip_fences

SYSTEM_PROMPT = """You are a precise concept explanation system. Write "just enough" explanations for each concept a student needs to complete an assignment.

For each concept:
- Explain it only as deeply as the assignment requires
- Use concrete examples from the materials where possible
- Cite sources inline as [file_id, locator], copying values verbatim from the chunk metadata

Output format:
- Valid Markdown; each concept is a level-2 heading (## Concept Name) using the exact concept name
- No preamble, introduction or conclusion, and no code fences around the output"""

H2 = re.compile(r"^##\s+(.+?)\s*$", re.MULTILINE)


def build_user_message(concepts: ConceptsOutput, chunks: list[Chunk]) -> str:
    concept_lines = "\n".join(
        f'- {c.id}: "{c.name}" - {c.description} (linked to: {", ".join(c.requirement_ids)})'
        for c in concepts.concepts
    )
    return (
        'Generate "just enough" explanations for each concept listed below.\n'
        "Use the source location shown above each chunk for your citations.\n\n"
        f"=== CONCEPTS TO EXPLAIN ===\n{concept_lines}\n\n"
        f"=== ASSIGNMENT MATERIALS ===\n{format_chunks(chunks)}"
    )


def check_concept_headings(text: str, names: Iterable[str]) -> str:
    """Return ``text`` if every concept name is a ## heading, else ``""``."""
    headings = {h.lower() for h in H2.findall(text)}
    if any(name.strip().lower() not in headings for name in names):
        return ""
    return text


def load_concepts(stage_input: Any) -> ConceptsOutput:
    if isinstance(stage_input, ConceptsOutput):
        return stage_input
    try:
        return ConceptsOutput.model_validate(stage_input)
    except ValidationError as e:
        issues = "; ".join(str(issue) for issue in issues_from_error(e))
        raise InvalidStageInputError(
            "explain_concepts stage requires valid concepts as input. "
            "Ensure the map_concepts stage runs before this stage. "
            f"Validation errors: {issues}"
        ) from e


def run(stage_input: Any, ctx: RunContext) -> Candidate:
    concepts = load_concepts(stage_input)

    query = build_query(text for c in concepts.concepts for text in (c.name, c.description))
    chunks = retrieve(
        ctx, "concept explanation", query, bias=FileTag.SLIDES, fallback_tag=FileTag.SLIDES
    )

    # Retries call the generation backend again.
    text = generate(ctx, "explain_concepts", SYSTEM_PROMPT, build_user_message(concepts, chunks))

    # An empty primer fails the contract and triggers a retry
    return Candidate(check_concept_headings(strip_fences(text), [c.name for c in concepts.concepts]))


explain_concepts_stage = Stage(
    name="explain_concepts",
    run=run,
    contract=TextContract(),
    artifact="primer.md",
)
