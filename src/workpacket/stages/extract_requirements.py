"""Extract requirements from spec-like material."""

from workpacket.models import Chunk, FileTag, RequirementsOutput
from workpacket.pipeline import Candidate, ModelContract, RunContext, Stage
from workpacket.stages.common import format_chunks, generate, parse_json, retrieve

# Explicit OR so chunks matching any of these terms are returned
RETRIEVAL_QUERY = (
    "requirements OR constraints OR interface OR grading OR deliverables "
    "OR specification OR must OR shall"
)

SYSTEM_PROMPT = """You are a precise requirement extraction system. Extract ALL requirements from the assignment materials.

For each requirement produce a JSON object with:
- "id": a sequential identifier like "REQ-001", "REQ-002"
- "text": the requirement stated clearly in one sentence
- "type": one of "functional", "constraint", "interface", "grading"
- "source_ref": an object with "file_id" and at least one of "section", "line_start", "line_end", "page".
  Copy these values verbatim from the chunk metadata. Do not invent locators.

Rules:
- Extract every requirement, constraint and interface specification
- Do not invent requirements or merge distinct ones
- Output ONLY valid JSON, no commentary and no code fences

Output schema:
{"requirements": [{"id": "REQ-001", "text": "...", "type": "functional", "source_ref": {"file_id": "...", "section": "..."}}]}"""


def build_user_message(chunks: list[Chunk]) -> str:
    return (
        "Extract all requirements from the following assignment materials.\n"
        "Use the source location shown above each chunk for your source_ref values.\n\n"
        + format_chunks(chunks)
    )


def run(_input: object, ctx: RunContext) -> Candidate:
    chunks = retrieve(ctx, "requirement extraction", RETRIEVAL_QUERY, bias=FileTag.SPEC)

    # Each retry calls the generation backend again; a discarded completion
    # has no side effects to undo.
    text = generate(ctx, "extract_requirements", SYSTEM_PROMPT, build_user_message(chunks))

    parsed = parse_json(text)
    # Unparsable output fails the contract and is retried
    return Candidate({} if parsed is None else parsed)


extract_requirements_stage = Stage(
    name="extract_requirements",
    run=run,
    contract=ModelContract(RequirementsOutput),
    artifact="requirements.json",
)
