"""
relevance scorer contract and strategy selection.

a scorer rates a candidate topic on four weighted dimensions:
- task relevance (0-40)
- error relevance (0-30)
- implementation value (0-20)
- novelty (0-10)

scorers never raise from score(); a failed score is a zero score.
"""

from typing import List, Optional, Protocol, runtime_checkable

from ..core.config import ScorerConfig, ScorerStrategy
from ..core.models import ScoredTopic, ScoreDimensions

FAILED_REASONING = "Failed to parse response"


@runtime_checkable
class RelevanceScorer(Protocol):
    """capability shared by every scoring strategy."""

    @property
    def name(self) -> str:
        ...

    async def initialize(self) -> None:
        """idempotent setup; may fail fast with a descriptive error."""
        ...

    async def score(
        self,
        candidate_topic: str,
        task_goal: str,
        current_error: Optional[str],
        previous_topics: List[str]
    ) -> ScoredTopic:
        ...

    async def dispose(self) -> None:
        ...


def zero_score(candidate_topic: str, reasoning: str = FAILED_REASONING) -> ScoredTopic:
    """fallback score that no positive threshold will accept."""
    return ScoredTopic.from_dimensions(
        text=candidate_topic,
        dimensions=ScoreDimensions(),
        reasoning=reasoning
    )


def build_scorer(config: Optional[ScorerConfig] = None) -> RelevanceScorer:
    """pick the scorer implementation named by config."""
    config = config or ScorerConfig()

    if config.strategy == ScorerStrategy.STRUCTURED:
        from .structured import StructuredScorer
        return StructuredScorer(config)

    from .heuristic import HeuristicScorer
    return HeuristicScorer(config)
