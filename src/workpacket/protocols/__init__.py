"""Protocol definitions for extensible components."""

from workpacket.protocols.chunker import ChunkingStrategy
from workpacket.protocols.generator import GenerationClient, GenerationRequest, GenerationResult
from workpacket.protocols.ingester import Ingester

__all__ = [
    "ChunkingStrategy",
    "GenerationClient",
    "GenerationRequest",
    "GenerationResult",
    "Ingester",
]
