"""
topic interaction contracts.

the browser layer that actually clicks a topic and reads the answer
lives outside topicwalk; the engine only sees these protocols.
"""

import asyncio
import logging
from typing import List, Optional, Protocol, runtime_checkable

from ..core.errors import StreamingTimeoutError
from ..core.models import Topic

logger = logging.getLogger("topicwalk.interaction")


@runtime_checkable
class TopicClicker(Protocol):
    """
    performs one topic interaction and returns the raw answer text.

    must raise TopicNotFoundError if the topic element never appears,
    StreamingTimeoutError if the answer never stabilizes.
    """

    async def interact(self, topic_text: str) -> str:
        ...


@runtime_checkable
class TopicSource(Protocol):
    """finds follow-up topic candidates after an answer."""

    def discover(self, parent: Topic, response: str) -> List[str]:
        ...


class NullTopicSource:
    """no follow-ups: expansion stays at the seed level."""

    def discover(self, parent: Topic, response: str) -> List[str]:
        return []


class BoundedClicker:
    """
    puts a hard time limit on any clicker.

    a clicker that hangs past the limit surfaces as StreamingTimeoutError;
    typed errors from the wrapped clicker pass through untouched.
    """

    def __init__(self, clicker: TopicClicker, timeout: Optional[float] = 90.0):
        self.clicker = clicker
        self.timeout = timeout

    async def interact(self, topic_text: str) -> str:
        try:
            return await asyncio.wait_for(self.clicker.interact(topic_text), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"interaction timed out after {self.timeout}s: {topic_text}")
            raise StreamingTimeoutError(topic_text) from e
