"""
answer chain - aggregates q&a pairs across a research session.

tracks pairs in insertion order and condenses them once a turn
threshold is reached, so injecting history into an agent prompt
stays bounded.

usage:
    chain = AnswerChain()
    chain.add(QAPair(question="...", answer="...", source=QASource.MANUAL))
    ctx = chain.get_for_context_injection()
    prompt = f"{ctx.summary}\n\nLatest: {ctx.latest.answer}"
"""

from dataclasses import dataclass
from typing import List, Optional

from ..core.config import AnswerChainConfig
from ..core.models import QAPair, normalize_topic


EMPTY_SUMMARY = "No research queries recorded."
ELLIPSIS = "..."


@dataclass
class ContextInjection:
    """history for prompt injection: bounded summary plus the exact latest pair."""
    summary: str
    latest: Optional[QAPair] = None


class AnswerChain:
    """
    ordered q&a history with summarization after a turn threshold.
    """

    def __init__(self, config: Optional[AnswerChainConfig] = None):
        self.config = config or AnswerChainConfig()
        self._pairs: List[QAPair] = []

    @property
    def max_turns_before_summary(self) -> int:
        return self.config.max_turns_before_summary

    def add(self, pair: QAPair):
        """append a q&a pair to the chain."""
        self._pairs.append(pair)

    def get_all(self) -> List[QAPair]:
        """all pairs in order."""
        return list(self._pairs)

    def get_latest(self) -> Optional[QAPair]:
        """most recent pair, or None if empty."""
        return self._pairs[-1] if self._pairs else None

    def get_existing_answer(self, question: str) -> Optional[QAPair]:
        """first pair whose question matches after normalization."""
        key = normalize_topic(question)
        for pair in self._pairs:
            if normalize_topic(pair.question) == key:
                return pair
        return None

    def needs_summarization(self) -> bool:
        """true once the chain has reached the summarization threshold."""
        return len(self._pairs) >= self.max_turns_before_summary

    def get_summary(self) -> str:
        """compile all pairs into a condensed text summary."""
        if not self._pairs:
            return EMPTY_SUMMARY

        limit = self.config.summary_answer_chars
        lines = [f"Key findings from {len(self._pairs)} research queries:"]

        for pair in self._pairs:
            citation_suffix = f" (Sources: {', '.join(pair.citations)})" if pair.citations else ""

            # truncate long answers to keep summary bounded
            answer = pair.answer
            if len(answer) > limit:
                answer = answer[:limit - len(ELLIPSIS)] + ELLIPSIS

            lines.append(f"- Q: {pair.question}")
            lines.append(f"  A: {answer}{citation_suffix}")

        return "\n".join(lines)

    def get_transcript(self) -> str:
        """full untruncated q/a text of every pair."""
        lines = []
        for pair in self._pairs:
            lines.append(f"Q: {pair.question}")
            lines.append(f"A: {pair.answer}")
            if pair.citations:
                lines.append(f"Citations: {', '.join(pair.citations)}")
            lines.append("")

        return "\n".join(lines).strip()

    def get_for_context_injection(self) -> ContextInjection:
        """
        conversation context for agent prompt injection.

        at or past the threshold the summary is condensed, below it the
        summary is the full transcript. latest is always the newest pair.
        """
        latest = self.get_latest()

        if self.needs_summarization():
            return ContextInjection(summary=self.get_summary(), latest=latest)

        return ContextInjection(summary=self.get_transcript(), latest=latest)

    def clear(self):
        """reset the chain."""
        self._pairs = []

    def __len__(self) -> int:
        return len(self._pairs)
