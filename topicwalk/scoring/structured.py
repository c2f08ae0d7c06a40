"""
structured relevance scorer - asks a local ollama model for a
schema-constrained score and validates it before trusting it.

initialize() is strict (operator-actionable errors), score() is not:
any failure becomes a zero-scored topic so the threshold drops it.

usage:
    scorer = StructuredScorer(ScorerConfig(model="qwen3-coder:latest"))
    await scorer.initialize()
    topic = await scorer.score(candidate, goal, error, explored)
    await scorer.dispose()
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from .base import zero_score, FAILED_REASONING
from ..core.config import ScorerConfig
from ..core.errors import BackendUnreachableError, ModelNotInstalledError
from ..core.models import ScoredTopic, ScoreDimensions
from ..core.resilience import validate_score_payload
from ..llm.provider import OllamaProvider

logger = logging.getLogger("topicwalk.scoring.structured")


# json schema passed to ollama as the output format
RELEVANCE_JSON_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "taskRelevance": {"type": "number", "minimum": 0, "maximum": 40},
        "errorRelevance": {"type": "number", "minimum": 0, "maximum": 30},
        "implementationValue": {"type": "number", "minimum": 0, "maximum": 20},
        "novelty": {"type": "number", "minimum": 0, "maximum": 10},
        "total": {"type": "number", "minimum": 0, "maximum": 100},
        "reasoning": {"type": "string"},
    },
    "required": [
        "taskRelevance", "errorRelevance", "implementationValue",
        "novelty", "total", "reasoning"
    ],
}


SCORING_PROMPT = """You are a relevance scorer for an AI coding assistant. Score how relevant a candidate topic is for the current task.

Task goal: {task_goal}

{error_context}

{previous_list}

Candidate topic to score: "{candidate}"

Score on these dimensions:
- taskRelevance (0-40): How directly relevant is this topic to the task goal?
- errorRelevance (0-30): How likely is this topic to help resolve the current error?
- implementationValue (0-20): How much actionable implementation guidance might this provide?
- novelty (0-10): How much new information does this add vs previously explored topics?
- total (0-100): Sum of all dimensions.
- reasoning: Brief explanation of the score.

Respond with JSON only."""


class StructuredScorer:
    """
    llm scorer with schema-validated output.

    the model's total is checked for range but not trusted:
    the topic score is re-derived from the four dimensions.
    """

    def __init__(
        self,
        config: Optional[ScorerConfig] = None,
        provider: Optional[OllamaProvider] = None
    ):
        self.config = config or ScorerConfig()
        self.provider = provider or OllamaProvider(
            model=self.config.model,
            base_url=self.config.base_url,
            timeout=self.config.timeout
        )
        self._initialized = False

    @property
    def name(self) -> str:
        return f"structured:{self.provider.model}"

    async def initialize(self) -> None:
        """
        verify ollama is running and the model is installed, then warm up.
        raises BackendUnreachableError or ModelNotInstalledError.
        """
        if self._initialized:
            return

        model = self.provider.model

        # 1. check ollama is running
        try:
            installed = await self.provider.has_model(model)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            raise BackendUnreachableError(
                "Ollama is not running. Start with `ollama serve`"
            ) from e
        except httpx.HTTPError as e:
            raise BackendUnreachableError(
                f"Failed to connect to Ollama at {self.provider.base_url}: {e}"
            ) from e
        except ValueError as e:
            # includes json decode errors
            raise BackendUnreachableError(
                f"Unexpected reply from Ollama at {self.provider.base_url}: {e}"
            ) from e

        # 2. check model availability
        if not installed:
            raise ModelNotInstalledError(model)

        # 3. warm up model, failure is non-fatal
        if self.config.warm_up:
            try:
                await self.provider.chat("Reply with {}", format="json", timeout=self.config.timeout)
            except Exception as e:
                logger.warning(f"[{self.name}] warm-up failed: {e}")

        self._initialized = True
        logger.info(f"[{self.name}] relevance model ready")

    async def score(
        self,
        candidate_topic: str,
        task_goal: str,
        current_error: Optional[str],
        previous_topics: List[str]
    ) -> ScoredTopic:
        """score a candidate topic. never raises."""
        prompt = build_prompt(candidate_topic, task_goal, current_error, previous_topics)

        try:
            data = await asyncio.wait_for(
                self.provider.chat_json(
                    prompt,
                    schema=RELEVANCE_JSON_SCHEMA,
                    temperature=self.config.temperature
                ),
                timeout=self.config.timeout
            )
        except Exception as e:
            logger.warning(f"[{self.name}] scoring call failed for '{candidate_topic}': {e!r}")
            return zero_score(candidate_topic, FAILED_REASONING)

        return self._to_topic(candidate_topic, data)

    async def dispose(self) -> None:
        await self.provider.close()
        self._initialized = False

    def _to_topic(self, candidate_topic: str, data: Any) -> ScoredTopic:
        """validate the model payload and convert it to a scored topic."""
        valid, issues = validate_score_payload(data)
        if not valid:
            logger.warning(f"[{self.name}] rejected score for '{candidate_topic}': {'; '.join(issues)}")
            return zero_score(candidate_topic, FAILED_REASONING)

        dimensions = ScoreDimensions(
            task_relevance=float(data["taskRelevance"]),
            error_relevance=float(data["errorRelevance"]),
            implementation_value=float(data["implementationValue"]),
            novelty=float(data["novelty"])
        )

        if abs(dimensions.total - float(data["total"])) > 1.0:
            logger.warning(
                f"[{self.name}] model total {data['total']} != dimension sum "
                f"{dimensions.total:.1f} for '{candidate_topic}', using sum"
            )

        return ScoredTopic.from_dimensions(
            text=candidate_topic,
            dimensions=dimensions,
            reasoning=data["reasoning"]
        )


def build_prompt(
    candidate_topic: str,
    task_goal: str,
    current_error: Optional[str],
    previous_topics: List[str]
) -> str:
    """format the scoring prompt."""
    if previous_topics:
        previous_list = "Previously explored topics:\n" + "\n".join(f"- {t}" for t in previous_topics)
    else:
        previous_list = "No previous topics explored yet."

    if current_error:
        error_context = f"Current error to solve:\n{current_error}"
    else:
        error_context = "No specific error, general exploration."

    return SCORING_PROMPT.format(
        task_goal=task_goal,
        error_context=error_context,
        previous_list=previous_list,
        candidate=candidate_topic
    )
