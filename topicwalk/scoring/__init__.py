# scoring - interchangeable relevance strategies
from .base import RelevanceScorer, build_scorer, zero_score, FAILED_REASONING
from .heuristic import HeuristicScorer, similarity
from .structured import StructuredScorer, RELEVANCE_JSON_SCHEMA

__all__ = [
    "RelevanceScorer", "build_scorer", "zero_score", "FAILED_REASONING",
    "HeuristicScorer", "similarity",
    "StructuredScorer", "RELEVANCE_JSON_SCHEMA"
]
