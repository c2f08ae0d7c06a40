"""
citation extraction from raw answer text (best-effort).

the answering service's citation format is not stable, so this never
raises: on any failure it returns whatever was collected so far.
"""

import logging
import re
from typing import List

logger = logging.getLogger("topicwalk.conversation.citations")


# [1], [12]
NUMERIC_REF_RE = re.compile(r"\[(\d+)\]")

# [Source Name], [Document Title] - must start with a letter
NAMED_REF_RE = re.compile(r"\[([A-Za-z][^\]]{1,80})\]")

# "according to X", "based on [X]", "as noted in X"
PHRASE_REF_RE = re.compile(
    r"(?:according to|based on|as (?:stated|noted|described|mentioned) in)"
    r"\s+\[?([^\].\n]{2,60})\]?",
    re.IGNORECASE
)


def parse_citations(response_text: str) -> List[str]:
    """
    extract source markers from an answer.

    looks for:
    - bracketed numeric references: [1], [2], [12]
    - bracketed named sources: [Source Name]
    - phrase-led sources, re-wrapped in brackets: according to X -> [X]

    returns deduplicated citation strings. order carries no meaning.
    """
    if not response_text:
        return []

    # dict keeps first-seen order and dedups
    citations = {}

    try:
        for match in NUMERIC_REF_RE.finditer(response_text):
            citations[match.group(0)] = None

        for match in NAMED_REF_RE.finditer(response_text):
            citations[match.group(0)] = None

        for match in PHRASE_REF_RE.finditer(response_text):
            source = match.group(1).strip()
            if source:
                citations[f"[{source}]"] = None

    except Exception as e:
        # best-effort: return whatever we collected so far
        logger.debug(f"citation extraction stopped early: {e!r}")

    return list(citations)
