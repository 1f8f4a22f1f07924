"""Path-based category tagging for source files."""

from workpacket.models import FileTag

# Checked in order; the first category with a matching keyword wins.
TAG_KEYWORDS: list[tuple[FileTag, tuple[str, ...]]] = [
    (
        FileTag.SPEC,
        ("spec", "assignment", "requirement", "handout", "rubric", "instructions", "brief", "readme"),
    ),
    (FileTag.SLIDES, ("slide", "lecture", "deck", "presentation")),
    (FileTag.CODE, ("src/", "code", "starter", "skeleton", "example")),
    (FileTag.NOTES, ("note", "reading", "tutorial", "guide", "faq")),
]


def tag_file(file_id: str) -> FileTag:
    """Assign exactly one category to a file by case-insensitive keyword match."""
    lowered = file_id.lower()
    for tag, keywords in TAG_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return tag
    return FileTag.OTHER


def tag_files(file_ids: list[str]) -> dict[str, FileTag]:
    """Build the file_id -> tag map for a set of discovered files."""
    return {file_id: tag_file(file_id) for file_id in file_ids}
