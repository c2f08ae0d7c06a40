"""
topicwalk - relevance-driven topic expansion for research conversations.
"""

from .core.config import (
    ExpansionConfig, ScorerConfig, ScorerStrategy, AnswerChainConfig, EngineConfig
)
from .core.models import (
    Topic, ScoredTopic, ScoreDimensions, QAPair, QASource,
    ExpansionResult, ResearchReport, normalize_topic
)
from .core.errors import (
    TopicwalkError, ScorerInitError, BackendUnreachableError, ModelNotInstalledError,
    InteractionError, TopicNotFoundError, StreamingTimeoutError, StateClosedError
)
from .graph.expansion_state import ExpansionState
from .graph.expansion import ExpansionEngine, ExpansionStats
from .scoring import RelevanceScorer, HeuristicScorer, StructuredScorer, build_scorer
from .conversation import AnswerChain, ContextInjection, parse_citations
from .interaction import TopicClicker, TopicSource, NullTopicSource, BoundedClicker

__version__ = "0.1.0"

__all__ = [
    "ExpansionConfig",
    "ScorerConfig",
    "ScorerStrategy",
    "AnswerChainConfig",
    "EngineConfig",
    "Topic",
    "ScoredTopic",
    "ScoreDimensions",
    "QAPair",
    "QASource",
    "ExpansionResult",
    "ResearchReport",
    "normalize_topic",
    "TopicwalkError",
    "ScorerInitError",
    "BackendUnreachableError",
    "ModelNotInstalledError",
    "InteractionError",
    "TopicNotFoundError",
    "StreamingTimeoutError",
    "StateClosedError",
    "ExpansionState",
    "ExpansionEngine",
    "ExpansionStats",
    "RelevanceScorer",
    "HeuristicScorer",
    "StructuredScorer",
    "build_scorer",
    "AnswerChain",
    "ContextInjection",
    "parse_citations",
    "TopicClicker",
    "TopicSource",
    "NullTopicSource",
    "BoundedClicker"
]
