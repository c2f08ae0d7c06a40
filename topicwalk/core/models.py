"""
core data models for topicwalk.
topics, scores, q&a pairs and session snapshots.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Mapping, Tuple
from enum import Enum
from datetime import datetime
import uuid


# dimension caps (sum to 100)
TASK_RELEVANCE_MAX = 40
ERROR_RELEVANCE_MAX = 30
IMPLEMENTATION_VALUE_MAX = 20
NOVELTY_MAX = 10


def normalize_topic(text: str) -> str:
    """canonical dedup key: lowercase, whitespace collapsed."""
    if not text:
        return ""
    return " ".join(text.lower().split())


class QASource(Enum):
    """where a q&a pair came from."""
    AUTO_EXPANSION = "auto-expansion"
    ERROR_BRIDGE = "error-bridge"
    MANUAL = "manual"


@dataclass
class Topic:
    """
    a candidate topic discovered during expansion.

    level is bfs depth from the root query (root = 0).
    parent_topic is the parent's text, resolved by lookup, never owned.
    """
    text: str
    level: int = 0
    parent_topic: Optional[str] = None
    score: float = 0.0

    @property
    def key(self) -> str:
        return normalize_topic(self.text)


@dataclass
class ScoreDimensions:
    """weighted relevance dimensions."""
    task_relevance: float = 0.0       # 0-40
    error_relevance: float = 0.0      # 0-30
    implementation_value: float = 0.0 # 0-20
    novelty: float = 0.0              # 0-10

    @property
    def total(self) -> float:
        return (
            self.task_relevance +
            self.error_relevance +
            self.implementation_value +
            self.novelty
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "task_relevance": self.task_relevance,
            "error_relevance": self.error_relevance,
            "implementation_value": self.implementation_value,
            "novelty": self.novelty
        }


@dataclass
class ScoredTopic(Topic):
    """
    topic with scoring breakdown. score is the sum of dimensions.
    dimensions is None only when a caller supplied a bare total.
    """
    reasoning: str = ""
    dimensions: Optional[ScoreDimensions] = None

    @classmethod
    def from_dimensions(
        cls,
        text: str,
        dimensions: ScoreDimensions,
        reasoning: str = "",
        level: int = 0,
        parent_topic: Optional[str] = None
    ) -> "ScoredTopic":
        """build a scored topic whose score is derived from its dimensions."""
        return cls(
            text=text,
            level=level,
            parent_topic=parent_topic,
            score=dimensions.total,
            reasoning=reasoning,
            dimensions=dimensions
        )

    def at_level(self, level: int, parent_topic: Optional[str]) -> "ScoredTopic":
        """same score placed at a position in the tree."""
        return dataclasses.replace(self, level=level, parent_topic=parent_topic)


@dataclass
class QAPair:
    """one question/answer exchange, append-only."""
    question: str
    answer: str
    timestamp: datetime = field(default_factory=datetime.now)
    source: QASource = QASource.MANUAL
    relevance_score: Optional[float] = None
    citations: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "answer": self.answer,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source.value,
            "relevance_score": self.relevance_score,
            "citations": list(self.citations or [])
        }


@dataclass(frozen=True)
class ExpansionResult:
    """
    immutable snapshot of a finished expansion session.
    topics_skipped = len(tree) - topics_expanded.
    """
    responses: Mapping[str, str]   # read-only view
    topics_expanded: int
    topics_skipped: int
    queries_used: int
    max_level_reached: int
    tree: Tuple[Topic, ...]


@dataclass
class ResearchReport:
    """
    session-level record of a research conversation.
    rendered by export.formats; never written to disk by the engine.
    """
    task_goal: str
    pairs: List[QAPair] = field(default_factory=list)
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_time: datetime = field(default_factory=datetime.now)
    end_time: datetime = field(default_factory=datetime.now)

    @property
    def duration_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()
