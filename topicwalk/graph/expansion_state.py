"""
expansion state - priority queue, visited set and response collection
for multi-level topic expansion.

one session owns one state and drives it sequentially:
enqueue -> dequeue -> mark_visited -> add_response, until can_continue()
is false. the state is closed once get_result() has been taken.
"""

import dataclasses
import heapq
import itertools
import logging
from types import MappingProxyType
from typing import List, Optional, Dict, Any, Set, Tuple, Union

from ..core.config import ExpansionConfig
from ..core.errors import StateClosedError
from ..core.models import (
    Topic, ScoredTopic, ExpansionResult, normalize_topic
)

logger = logging.getLogger("topicwalk.expansion_state")


class ExpansionState:
    """
    bfs/priority scheduler for candidate topics.

    invariants:
    - a normalized key is visited at most once and pending at most once
    - nothing below threshold is ever queued
    - queries_used counts mark_visited calls, nothing else
    - equal scores dequeue in insertion order
    """

    def __init__(self, config: ExpansionConfig):
        self.config = config

        self._visited: Set[str] = set()
        self._explored: List[str] = []  # raw text, visit order

        # heap of (-score, seq, topic); seq keeps ties first-in-first-out
        self._queue: List[Tuple[float, int, Topic]] = []
        self._pending: Set[str] = set()
        self._seq = itertools.count()

        self._responses: Dict[str, str] = {}
        self._tree: List[Topic] = []
        self._tree_index: Dict[str, Topic] = {}  # key -> first accepted topic

        self.queries_used = 0
        self.max_level_reached = 0

        self._result: Optional[ExpansionResult] = None

    # queue operations

    def enqueue(self, topic: Union[Topic, ScoredTopic]) -> bool:
        """
        add topic to queue if not visited, not pending and score >= threshold.
        returns true if added, false if duplicate or below threshold.
        """
        self._check_open()

        key = normalize_topic(topic.text)
        if not key:
            return False
        if key in self._visited:
            logger.debug(f"skip visited: {topic.text}")
            return False

        topic = self._with_derived_score(topic)
        if topic.score < self.config.threshold:
            logger.debug(f"skip below threshold ({topic.score:.1f}): {topic.text}")
            return False
        if key in self._pending:
            logger.debug(f"skip already queued: {topic.text}")
            return False

        heapq.heappush(self._queue, (-topic.score, next(self._seq), topic))
        self._pending.add(key)
        self._tree.append(topic)
        self._tree_index.setdefault(key, topic)
        return True

    def dequeue(self) -> Optional[Topic]:
        """pop highest-score topic from queue, or None if empty."""
        self._check_open()

        if not self._queue:
            return None
        _, _, topic = heapq.heappop(self._queue)
        self._pending.discard(normalize_topic(topic.text))
        return topic

    def peek(self) -> Optional[Topic]:
        """highest-score pending topic without removing it."""
        return self._queue[0][2] if self._queue else None

    @property
    def pending(self) -> int:
        """number of queued topics."""
        return len(self._queue)

    # visit / response bookkeeping

    def mark_visited(self, topic_text: str):
        """
        mark topic as visited and increment query count.
        the visited set is idempotent, the counter is not.
        """
        self._check_open()

        key = normalize_topic(topic_text)
        if key not in self._visited:
            self._visited.add(key)
            self._explored.append(topic_text)
        self.queries_used += 1

    def is_visited(self, topic_text: str) -> bool:
        """check if topic has been visited."""
        return normalize_topic(topic_text) in self._visited

    def add_response(self, topic_text: str, response: str):
        """store a response and update max level reached."""
        self._check_open()

        self._responses[topic_text] = response
        topic = self._tree_index.get(normalize_topic(topic_text))
        if topic and topic.level > self.max_level_reached:
            self.max_level_reached = topic.level

    def find(self, topic_text: str) -> Optional[Topic]:
        """look up an accepted topic by text."""
        return self._tree_index.get(normalize_topic(topic_text))

    def explored_topics(self) -> List[str]:
        """texts of visited topics in visit order."""
        return list(self._explored)

    # loop control

    def can_continue(self) -> bool:
        """true if queue has items and query budget remains."""
        if self._result is not None:
            return False
        return len(self._queue) > 0 and self.queries_used < self.config.max_queries

    def get_result(self) -> ExpansionResult:
        """freeze the session and build the final expansion result."""
        if self._result is None:
            self._result = ExpansionResult(
                responses=MappingProxyType(dict(self._responses)),
                topics_expanded=len(self._visited),
                topics_skipped=len(self._tree) - len(self._visited),
                queries_used=self.queries_used,
                max_level_reached=self.max_level_reached,
                tree=tuple(dataclasses.replace(t) for t in self._tree)
            )
            logger.info(
                f"expansion closed: {self._result.topics_expanded} expanded, "
                f"{self._result.topics_skipped} skipped, "
                f"{self.queries_used}/{self.config.max_queries} queries"
            )
        return self._result

    @property
    def closed(self) -> bool:
        return self._result is not None

    def get_stats(self) -> Dict[str, Any]:
        """quick stats for logging."""
        return {
            "queued": len(self._queue),
            "visited": len(self._visited),
            "responses": len(self._responses),
            "queries_used": self.queries_used
        }

    # private helpers

    def _with_derived_score(self, topic: Topic) -> Topic:
        """
        recompute score from dimensions when the topic carries them.
        a topic without dimensions keeps its supplied score.
        """
        if not isinstance(topic, ScoredTopic) or topic.dimensions is None:
            return topic

        derived = topic.dimensions.total
        if abs(derived - topic.score) > 1e-9:
            logger.debug(
                f"score {topic.score:.1f} for '{topic.text}' does not match "
                f"dimension sum {derived:.1f}, using sum"
            )
            return dataclasses.replace(topic, score=derived)
        return topic

    def _check_open(self):
        if self._result is not None:
            raise StateClosedError("expansion state is closed after get_result()")
