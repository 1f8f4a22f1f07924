"""Generation backends."""

from workpacket.generators.openai_generator import OpenAIGenerator

__all__ = ["OpenAIGenerator"]
