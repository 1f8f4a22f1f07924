"""workpacket - cite-able chunking, keyword retrieval and a validated stage pipeline."""

__version__ = "0.1.0"
