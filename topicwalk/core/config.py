"""
configuration for topicwalk.
all settings in one place, easily tunable.
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from enum import Enum


DEFAULT_MODEL = "qwen3-coder:latest"
DEFAULT_OLLAMA_URL = "http://localhost:11434"


class ScorerStrategy(Enum):
    """which relevance scorer to use."""
    HEURISTIC = "heuristic"    # lexical similarity, offline, deterministic
    STRUCTURED = "structured"  # llm with schema-constrained output


@dataclass(frozen=True)
class ExpansionConfig:
    """
    settings for one expansion session.
    fixed for the life of the session.
    """
    task_goal: str
    current_error: Optional[str] = None
    threshold: float = 50.0   # min score to be queued
    max_level: int = 2        # deepest bfs level to explore
    max_queries: int = 10     # interaction budget
    model: str = DEFAULT_MODEL


@dataclass
class ScorerConfig:
    """relevance scorer settings."""
    strategy: ScorerStrategy = ScorerStrategy.HEURISTIC

    # structured scorer backend
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_OLLAMA_URL
    timeout: float = 60.0          # seconds per scoring call
    temperature: float = 0.1
    warm_up: bool = True

    # heuristic scorer
    keyword_points: int = 5        # per distinct implementation keyword
    lexical_weight: float = 0.5    # sequence ratio vs token overlap blend

    @classmethod
    def from_env(cls, **overrides) -> "ScorerConfig":
        """build config from TOPICWALK_* env vars, explicit overrides win."""
        values = {}

        strategy = os.environ.get("TOPICWALK_SCORER")
        if strategy:
            values["strategy"] = ScorerStrategy(strategy.lower())

        model = os.environ.get("TOPICWALK_MODEL")
        if model:
            values["model"] = model

        base_url = os.environ.get("TOPICWALK_OLLAMA_URL")
        if base_url:
            values["base_url"] = base_url.rstrip("/")

        timeout = os.environ.get("TOPICWALK_SCORER_TIMEOUT")
        if timeout:
            values["timeout"] = float(timeout)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class AnswerChainConfig:
    """answer chain settings."""
    max_turns_before_summary: int = 5
    summary_answer_chars: int = 200   # longer answers are truncated


@dataclass
class EngineConfig:
    """driving loop settings."""
    interaction_timeout: float = 90.0   # seconds per topic interaction

    # failed interactions still consume budget unless disabled
    charge_failed_interactions: bool = True

    scorer: ScorerConfig = field(default_factory=ScorerConfig)
    answer_chain: AnswerChainConfig = field(default_factory=AnswerChainConfig)
