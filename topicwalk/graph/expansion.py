"""
expansion engine - drives one research session over the answering service.
score seeds -> dequeue -> interact -> record -> score children -> repeat,
until the state says the queue or the budget is exhausted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Set

from ..core.config import ExpansionConfig, EngineConfig
from ..core.errors import InteractionError
from ..core.models import (
    Topic, QAPair, QASource, ExpansionResult, ResearchReport, normalize_topic
)
from ..core.resilience import safe_execute
from ..conversation.answer_chain import AnswerChain
from ..conversation.citations import parse_citations
from ..interaction.clicker import (
    TopicClicker, TopicSource, NullTopicSource, BoundedClicker
)
from ..scoring.base import RelevanceScorer
from .expansion_state import ExpansionState

logger = logging.getLogger("topicwalk.expansion")


@dataclass
class ExpansionStats:
    """statistics for an expansion run."""
    topics_scored: int = 0
    topics_enqueued: int = 0
    topics_rejected: int = 0
    interactions_failed: int = 0
    duration_seconds: float = 0.0


class ExpansionEngine:
    """
    sequential driver for one expansion session.

    the scorer is injected already configured; run() calls its
    idempotent initialize() so config/connectivity errors surface
    before any budget is spent. those errors end the session.
    """

    def __init__(
        self,
        clicker: TopicClicker,
        scorer: RelevanceScorer,
        config: ExpansionConfig,
        answer_chain: Optional[AnswerChain] = None,
        topic_source: Optional[TopicSource] = None,
        engine_config: Optional[EngineConfig] = None
    ):
        self.engine_config = engine_config or EngineConfig()
        self.config = config
        self.scorer = scorer
        self.clicker = BoundedClicker(clicker, timeout=self.engine_config.interaction_timeout)
        self.answer_chain = answer_chain or AnswerChain(self.engine_config.answer_chain)
        self.topic_source = topic_source or NullTopicSource()

        self.state = ExpansionState(config)
        self.stats = ExpansionStats()
        self._abandoned: Set[str] = set()  # failed, uncharged topic keys
        self._start_time: Optional[datetime] = None
        self._end_time: Optional[datetime] = None

    async def run(self, seed_topics: List[str]) -> ExpansionResult:
        """
        expand from seed topics (level 0) until budget or queue runs out.
        main entry point.
        """
        self._start_time = datetime.now()

        await self.scorer.initialize()

        logger.info(
            f"[expansion] starting with {len(seed_topics)} seeds, "
            f"budget={self.config.max_queries}, threshold={self.config.threshold}, "
            f"scorer={getattr(self.scorer, 'name', type(self.scorer).__name__)}"
        )

        for text in seed_topics:
            await self._score_and_enqueue(text, level=0, parent=None)

        while self.state.can_continue():
            topic = self.state.dequeue()
            if topic is None:
                break
            await self._expand_topic(topic)

        result = self.state.get_result()

        self._end_time = datetime.now()
        self.stats.duration_seconds = (self._end_time - self._start_time).total_seconds()

        logger.info(
            f"[expansion] complete: {result.topics_expanded} expanded, "
            f"{result.topics_skipped} skipped, depth={result.max_level_reached}, "
            f"failed={self.stats.interactions_failed}, "
            f"{self.stats.duration_seconds:.1f}s"
        )
        return result

    def build_report(self, session_id: Optional[str] = None) -> ResearchReport:
        """session report from the answer chain."""
        now = datetime.now()
        report = ResearchReport(
            task_goal=self.config.task_goal,
            pairs=self.answer_chain.get_all(),
            start_time=self._start_time or now,
            end_time=self._end_time or now
        )
        if session_id:
            report.session_id = session_id
        return report

    async def _expand_topic(self, topic: Topic):
        """query one topic, record the answer, queue its follow-ups."""
        logger.info(f"[expansion] L{topic.level} ({topic.score:.0f}) {topic.text}")

        try:
            response = await self.clicker.interact(topic.text)
        except InteractionError as e:
            self.stats.interactions_failed += 1
            logger.warning(f"[expansion] abandoning topic: {e}")
            if self.engine_config.charge_failed_interactions:
                self.state.mark_visited(topic.text)
            else:
                self._abandoned.add(normalize_topic(topic.text))
            return

        self.state.mark_visited(topic.text)

        citations = parse_citations(response)
        self.state.add_response(topic.text, response)
        self.answer_chain.add(QAPair(
            question=topic.text,
            answer=response,
            source=QASource.AUTO_EXPANSION,
            relevance_score=topic.score,
            citations=citations
        ))

        child_level = topic.level + 1
        if child_level > self.config.max_level:
            return

        children = safe_execute(
            lambda: self.topic_source.discover(topic, response),
            default=[],
            error_msg=f"[expansion] topic discovery failed for '{topic.text}'"
        ) or []

        for text in children:
            await self._score_and_enqueue(text, level=child_level, parent=topic.text)

        logger.debug(f"[expansion] state: {self.state.get_stats()}")

    async def _score_and_enqueue(self, text: str, level: int, parent: Optional[str]) -> bool:
        """score a candidate against explored history and try to queue it."""
        if self.state.is_visited(text) or normalize_topic(text) in self._abandoned:
            self.stats.topics_rejected += 1
            return False

        scored = await self.scorer.score(
            text,
            self.config.task_goal,
            self.config.current_error,
            self.state.explored_topics()
        )
        self.stats.topics_scored += 1

        if self.state.enqueue(scored.at_level(level, parent)):
            self.stats.topics_enqueued += 1
            return True

        self.stats.topics_rejected += 1
        return False
