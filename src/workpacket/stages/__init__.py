"""Built-in pipeline stages."""

from workpacket.pipeline import Stage
from workpacket.stages.explain_concepts import explain_concepts_stage
from workpacket.stages.extract_requirements import extract_requirements_stage
from workpacket.stages.generate_packet import generate_packet_stage
from workpacket.stages.ingest import ingest_stage
from workpacket.stages.map_concepts import map_concepts_stage


def default_stages() -> list[Stage]:
    """The full chain, from raw files to the execution packet."""
    return [
        ingest_stage,
        extract_requirements_stage,
        map_concepts_stage,
        explain_concepts_stage,
        generate_packet_stage,
    ]


def ingest_stages() -> list[Stage]:
    return [ingest_stage]


__all__ = [
    "default_stages",
    "explain_concepts_stage",
    "extract_requirements_stage",
    "generate_packet_stage",
    "ingest_stage",
    "ingest_stages",
    "map_concepts_stage",
]
