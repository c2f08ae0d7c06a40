"""
heuristic relevance scorer - lexical similarity, no network.

similarity is a blend of difflib sequence ratio and token overlap,
both in [0, 1]; identical normalized text always scores 1.0.

usage:
    scorer = HeuristicScorer()
    topic = await scorer.score("retry with backoff", goal, error, explored)
"""

import logging
import re
from difflib import SequenceMatcher
from typing import List, Optional, Set, Tuple

from ..core.config import ScorerConfig
from ..core.models import (
    ScoredTopic, ScoreDimensions, normalize_topic,
    TASK_RELEVANCE_MAX, ERROR_RELEVANCE_MAX,
    IMPLEMENTATION_VALUE_MAX, NOVELTY_MAX
)

logger = logging.getLogger("topicwalk.scoring.heuristic")


# words that suggest a topic will yield actionable implementation detail
IMPLEMENTATION_SIGNALS = {
    'implement', 'implementation', 'example', 'examples', 'code', 'api',
    'configure', 'configuration', 'setup', 'install', 'usage', 'tutorial',
    'guide', 'syntax', 'function', 'method', 'class', 'library', 'pattern',
    'fix', 'debug', 'workaround', 'migration', 'integration', 'snippet',
    'command', 'parameter', 'parameters', 'option', 'options', 'step',
}

# stopwords ignored for token overlap
STOPWORDS = {
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for',
    'of', 'with', 'by', 'from', 'as', 'is', 'was', 'are', 'were', 'be',
    'this', 'that', 'these', 'those', 'it', 'its', 'how', 'what', 'which',
    'why', 'when', 'where', 'do', 'does', 'can', 'i', 'my', 'you', 'your',
}

TOKEN_RE = re.compile(r"[a-z0-9_]+")


class HeuristicScorer:
    """
    deterministic lexical scorer. never fails, never touches the network.

    dimensions:
    1. task relevance: similarity(candidate, goal) * 40
    2. error relevance: similarity(candidate, error) * 30, 0 without an error
    3. implementation value: 5 points per distinct signal keyword, cap 20
    4. novelty: 10 * (1 - best similarity to any explored topic)
    """

    def __init__(self, config: Optional[ScorerConfig] = None):
        self.config = config or ScorerConfig()
        self._initialized = False

    @property
    def name(self) -> str:
        return "heuristic"

    async def initialize(self) -> None:
        self._initialized = True

    async def score(
        self,
        candidate_topic: str,
        task_goal: str,
        current_error: Optional[str],
        previous_topics: List[str]
    ) -> ScoredTopic:
        """score a candidate topic for relevance to the current task."""
        task = similarity(candidate_topic, task_goal, self.config.lexical_weight)

        error = 0.0
        if current_error and current_error.strip():
            error = similarity(candidate_topic, current_error, self.config.lexical_weight)

        impl_points, matched = self._implementation_points(candidate_topic)

        best_prev = max(
            (similarity(candidate_topic, p, self.config.lexical_weight) for p in previous_topics),
            default=0.0
        )

        dimensions = ScoreDimensions(
            task_relevance=round(task * TASK_RELEVANCE_MAX, 2),
            error_relevance=round(error * ERROR_RELEVANCE_MAX, 2),
            implementation_value=float(impl_points),
            novelty=round(NOVELTY_MAX * (1.0 - best_prev), 2)
        )

        reasoning = (
            f"task {dimensions.task_relevance:.1f}/{TASK_RELEVANCE_MAX}, "
            f"error {dimensions.error_relevance:.1f}/{ERROR_RELEVANCE_MAX}, "
            f"impl {dimensions.implementation_value:.0f}/{IMPLEMENTATION_VALUE_MAX}"
        )
        if matched:
            reasoning += f" ({', '.join(matched)})"
        reasoning += f", novelty {dimensions.novelty:.1f}/{NOVELTY_MAX}"

        topic = ScoredTopic.from_dimensions(
            text=candidate_topic,
            dimensions=dimensions,
            reasoning=reasoning
        )
        logger.debug(f"[{self.name}] {topic.score:.1f} {candidate_topic}")
        return topic

    async def dispose(self) -> None:
        self._initialized = False

    def _implementation_points(self, text: str) -> Tuple[int, List[str]]:
        """keyword bonus and the keywords that earned it."""
        matched = sorted(tokenize(text, keep_stopwords=True) & IMPLEMENTATION_SIGNALS)
        points = min(IMPLEMENTATION_VALUE_MAX, len(matched) * self.config.keyword_points)
        return points, matched


def tokenize(text: str, keep_stopwords: bool = False) -> Set[str]:
    """lowercase word tokens."""
    tokens = set(TOKEN_RE.findall((text or "").lower()))
    if keep_stopwords:
        return tokens
    return tokens - STOPWORDS


def similarity(a: str, b: str, lexical_weight: float = 0.5) -> float:
    """
    lexical similarity in [0, 1].
    lexical_weight blends sequence ratio against token jaccard.
    """
    n1 = normalize_topic(a)
    n2 = normalize_topic(b)

    if not n1 or not n2:
        return 0.0
    if n1 == n2:
        return 1.0

    ratio = SequenceMatcher(None, n1, n2).ratio()

    t1 = tokenize(n1)
    t2 = tokenize(n2)
    if not t1 or not t2:
        return ratio

    jaccard = len(t1 & t2) / len(t1 | t2)
    score = lexical_weight * ratio + (1.0 - lexical_weight) * jaccard
    return min(1.0, max(0.0, score))
