"""Compile free text into a keyword query for the content index."""

import re
from typing import Iterable

# Words that add noise to a keyword query without signaling relevance.
STOP_WORDS = frozenset(
    """
    a an the and or but in on at to for of with by from as is was are were be
    been being have has had do does did will would could should may might shall
    can need must it its this that these those i you he she we they me him her
    us them my your his our their what which who whom not no nor if then else
    when where how all each every both few more most other some such only own
    same so than too very just about above after before between into through
    during out up down over under also
    """.split()
)

MIN_TERM_LENGTH = 3
MAX_TERMS = 40

_SPLIT = re.compile(r"[^a-z0-9]+")


def build_query(texts: Iterable[str]) -> str:
    """Build an OR query from free text.

    Terms are lower-cased, split on non-alphanumeric runs, stripped of stop
    words and tokens shorter than ``MIN_TERM_LENGTH``, deduplicated in
    first-seen order and capped at ``MAX_TERMS``. The FTS5 index treats
    space-separated terms as AND, so terms are joined with an explicit OR.

    Returns an empty string when nothing significant remains; callers should
    fall back to another retrieval strategy.
    """
    if isinstance(texts, str):
        texts = [texts]

    seen: set[str] = set()
    terms: list[str] = []
    for text in texts:
        for word in _SPLIT.split(text.lower()):
            if len(word) < MIN_TERM_LENGTH or word in STOP_WORDS or word in seen:
                continue
            seen.add(word)
            terms.append(word)

    return " OR ".join(terms[:MAX_TERMS])
