"""Ingest stage: discover, chunk, tag and index the run's input paths."""

import logging

from workpacket.corpus import build_corpus
from workpacket.models import IngestOutput, utc_now
from workpacket.pipeline import Candidate, ModelContract, RunContext, Stage
from workpacket.storage import DB_FILENAME, ContentIndex

logger = logging.getLogger(__name__)


def run(_input: object, ctx: RunContext) -> Candidate:
    # Missing roots, no supported files and an empty corpus all raise here
    corpus = build_corpus(ctx.config.input_paths)

    index = ContentIndex.build(
        ctx.output_dir / DB_FILENAME,
        corpus.chunks,
        corpus.file_tags,
        metadata={
            "assignment_id": ctx.config.assignment_id,
            "run_id": ctx.run_id,
            "source": ", ".join(ctx.config.input_paths),
            "created_at": utc_now(),
        },
    )
    ctx.attach_index(index)

    logger.info(f"Ingested {len(corpus.documents)} files, {len(corpus.chunks)} chunks")
    return Candidate(IngestOutput(chunks=corpus.chunks))


ingest_stage = Stage(
    name="ingest",
    run=run,
    contract=ModelContract(IngestOutput),
    artifact="chunks.json",
)
