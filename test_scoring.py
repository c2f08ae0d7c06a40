#!/usr/bin/env python3
"""
test relevance scorers - heuristic and structured strategies.

run with: pytest test_scoring.py -v
"""

import asyncio
import json

import httpx
import pytest

from topicwalk.core.config import ScorerConfig, ScorerStrategy
from topicwalk.core.errors import BackendUnreachableError, ModelNotInstalledError
from topicwalk.core.resilience import validate_score_payload
from topicwalk.llm.provider import OllamaProvider
from topicwalk.scoring import (
    RelevanceScorer, HeuristicScorer, StructuredScorer,
    build_scorer, similarity, FAILED_REASONING
)
from topicwalk.scoring.structured import build_prompt


GOAL = "add exponential backoff retries to the http client"
ERROR = "httpx.ReadTimeout: timed out while reading response"


# =============================================================================
# Test Fixtures
# =============================================================================

def valid_payload(**overrides):
    payload = {
        "taskRelevance": 32,
        "errorRelevance": 20,
        "implementationValue": 15,
        "novelty": 8,
        "total": 75,
        "reasoning": "directly about retry policy",
    }
    payload.update(overrides)
    return payload


def ollama_transport(models=("qwen3-coder:latest",), chat_content=None, chat_status=200):
    """mock ollama api: /api/tags lists models, /api/chat returns chat_content."""
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": m} for m in models]})
        if request.url.path == "/api/chat":
            if chat_status != 200:
                return httpx.Response(chat_status, text="boom")
            content = chat_content if isinstance(chat_content, str) else json.dumps(chat_content or {})
            return httpx.Response(200, json={"message": {"role": "assistant", "content": content}})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def structured_scorer(transport, model="qwen3-coder:latest", timeout=5.0):
    config = ScorerConfig(strategy=ScorerStrategy.STRUCTURED, model=model, timeout=timeout)
    provider = OllamaProvider(model=model, timeout=timeout, transport=transport)
    return StructuredScorer(config, provider=provider)


# =============================================================================
# Heuristic Scorer Tests
# =============================================================================

class TestHeuristicScorer:
    """test lexical scoring."""

    @pytest.mark.asyncio
    async def test_goal_against_itself_is_full_task_relevance(self):
        scorer = HeuristicScorer()
        topic = await scorer.score(GOAL, GOAL, None, [])

        assert topic.dimensions.task_relevance == 40

    @pytest.mark.asyncio
    async def test_no_previous_topics_is_full_novelty(self):
        scorer = HeuristicScorer()
        topic = await scorer.score("connection pooling", GOAL, None, [])

        assert topic.dimensions.novelty == 10

    @pytest.mark.asyncio
    async def test_repeat_of_previous_topic_has_no_novelty(self):
        scorer = HeuristicScorer()
        topic = await scorer.score("Retry Jitter", GOAL, None, ["logging", "retry  jitter"])

        assert topic.dimensions.novelty == 0

    @pytest.mark.asyncio
    async def test_error_dimension_zero_without_error(self):
        scorer = HeuristicScorer()
        topic = await scorer.score("read timeouts", GOAL, None, [])

        assert topic.dimensions.error_relevance == 0

    @pytest.mark.asyncio
    async def test_error_text_itself_is_full_error_relevance(self):
        scorer = HeuristicScorer()
        topic = await scorer.score(ERROR, GOAL, ERROR, [])

        assert topic.dimensions.error_relevance == 30

    @pytest.mark.asyncio
    async def test_keyword_bonus_is_capped(self):
        scorer = HeuristicScorer()
        two = await scorer.score("api example", GOAL, None, [])
        many = await scorer.score("api usage example code snippet tutorial", GOAL, None, [])

        assert two.dimensions.implementation_value == 10
        assert many.dimensions.implementation_value == 20

    @pytest.mark.asyncio
    async def test_score_is_sum_of_dimensions(self):
        scorer = HeuristicScorer()
        topic = await scorer.score("retry configuration example", GOAL, ERROR, ["timeouts"])

        assert topic.score == pytest.approx(topic.dimensions.total)
        assert 0 <= topic.score <= 100
        assert topic.reasoning

    @pytest.mark.asyncio
    async def test_deterministic(self):
        scorer = HeuristicScorer()
        a = await scorer.score("backoff with jitter", GOAL, ERROR, ["retries"])
        b = await scorer.score("backoff with jitter", GOAL, ERROR, ["retries"])

        assert a == b

    @pytest.mark.asyncio
    async def test_related_topic_outranks_unrelated(self):
        scorer = HeuristicScorer()
        related = await scorer.score("http client retries with backoff", GOAL, None, [])
        unrelated = await scorer.score("watercolor painting", GOAL, None, [])

        assert related.score > unrelated.score

    def test_similarity_bounds(self):
        assert similarity("", "anything") == 0.0
        assert similarity("Same  Text", "same text") == 1.0
        assert 0.0 <= similarity("retry policy", "retry budget") <= 1.0


# =============================================================================
# Payload Validation Tests
# =============================================================================

class TestValidateScorePayload:
    """test structured payload validation."""

    def test_valid(self):
        ok, issues = validate_score_payload(valid_payload())
        assert ok
        assert issues == []

    def test_total_out_of_range(self):
        ok, issues = validate_score_payload(valid_payload(total=150))
        assert not ok
        assert any("total" in i for i in issues)

    def test_dimension_out_of_range(self):
        ok, issues = validate_score_payload(valid_payload(taskRelevance=41))
        assert not ok

    def test_missing_field(self):
        payload = valid_payload()
        del payload["novelty"]
        ok, issues = validate_score_payload(payload)
        assert not ok
        assert "missing field: novelty" in issues

    def test_non_numeric_and_bool(self):
        ok, _ = validate_score_payload(valid_payload(novelty="high"))
        assert not ok
        ok, _ = validate_score_payload(valid_payload(novelty=True))
        assert not ok

    def test_not_an_object(self):
        ok, _ = validate_score_payload([1, 2, 3])
        assert not ok


# =============================================================================
# Structured Scorer Tests
# =============================================================================

class TestStructuredScorer:
    """test llm scoring with a mocked ollama api."""

    @pytest.mark.asyncio
    async def test_valid_response(self):
        scorer = structured_scorer(ollama_transport(chat_content=valid_payload()))
        topic = await scorer.score("retry budgets", GOAL, ERROR, [])

        assert topic.text == "retry budgets"
        assert topic.score == 75
        assert topic.dimensions.task_relevance == 32
        assert topic.reasoning == "directly about retry policy"
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_score_rederived_from_dimensions(self):
        scorer = structured_scorer(ollama_transport(chat_content=valid_payload(total=99)))
        topic = await scorer.score("retry budgets", GOAL, None, [])

        assert topic.score == 75
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_total_out_of_range_falls_back_to_zero(self):
        scorer = structured_scorer(ollama_transport(chat_content=valid_payload(total=120)))
        topic = await scorer.score("retry budgets", GOAL, None, [])

        assert topic.score == 0
        assert topic.reasoning == FAILED_REASONING
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_missing_field_falls_back_to_zero(self):
        payload = valid_payload()
        del payload["reasoning"]
        scorer = structured_scorer(ollama_transport(chat_content=payload))
        topic = await scorer.score("retry budgets", GOAL, None, [])

        assert topic.score == 0
        assert topic.reasoning == FAILED_REASONING
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_malformed_json_falls_back_to_zero(self):
        scorer = structured_scorer(ollama_transport(chat_content="not json {"))
        topic = await scorer.score("retry budgets", GOAL, None, [])

        assert topic.score == 0
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_backend_error_falls_back_to_zero(self):
        scorer = structured_scorer(ollama_transport(chat_status=500))
        topic = await scorer.score("retry budgets", GOAL, None, [])

        assert topic.score == 0
        assert topic.reasoning == FAILED_REASONING
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_slow_backend_times_out_to_zero(self):
        scorer = structured_scorer(ollama_transport(chat_content=valid_payload()), timeout=0.05)

        async def slow_chat_json(*args, **kwargs):
            await asyncio.sleep(1)
            return valid_payload()

        scorer.provider.chat_json = slow_chat_json
        topic = await scorer.score("retry budgets", GOAL, None, [])

        assert topic.score == 0
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_initialize_unreachable(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        scorer = structured_scorer(httpx.MockTransport(refuse))
        with pytest.raises(BackendUnreachableError, match="ollama serve"):
            await scorer.initialize()
        await scorer.dispose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", [
        httpx.Response(200, text="<html>proxy login</html>"),
        httpx.Response(200, json=["qwen3-coder:latest"]),
        httpx.Response(200, json={"models": "qwen3-coder:latest"}),
    ])
    async def test_initialize_malformed_tags_reply(self, reply):
        scorer = structured_scorer(httpx.MockTransport(lambda request: reply))
        with pytest.raises(BackendUnreachableError, match="Unexpected reply"):
            await scorer.initialize()
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_initialize_model_missing(self):
        scorer = structured_scorer(ollama_transport(models=("llama3:8b",)), model="qwen3-coder")
        with pytest.raises(ModelNotInstalledError, match="ollama pull qwen3-coder"):
            await scorer.initialize()
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_initialize_accepts_tagged_model(self):
        scorer = structured_scorer(
            ollama_transport(models=("qwen3-coder:latest",), chat_content={}),
            model="qwen3-coder"
        )
        await scorer.initialize()
        await scorer.initialize()  # idempotent
        await scorer.dispose()

    @pytest.mark.asyncio
    async def test_warm_up_failure_is_not_fatal(self):
        scorer = structured_scorer(ollama_transport(chat_status=500))
        await scorer.initialize()
        await scorer.dispose()

    def test_prompt_lists_previous_topics(self):
        prompt = build_prompt("jitter", GOAL, ERROR, ["timeouts", "pooling"])

        assert "- timeouts" in prompt
        assert "- pooling" in prompt
        assert ERROR in prompt
        assert '"jitter"' in prompt

    def test_prompt_without_history(self):
        prompt = build_prompt("jitter", GOAL, None, [])

        assert "No previous topics explored yet." in prompt
        assert "No specific error" in prompt


# =============================================================================
# Strategy Selection Tests
# =============================================================================

class TestBuildScorer:
    """test strategy selection from config."""

    def test_default_is_heuristic(self):
        assert isinstance(build_scorer(), HeuristicScorer)

    def test_structured(self):
        scorer = build_scorer(ScorerConfig(strategy=ScorerStrategy.STRUCTURED, model="m"))
        assert isinstance(scorer, StructuredScorer)
        assert scorer.provider.model == "m"

    def test_both_satisfy_protocol(self):
        assert isinstance(HeuristicScorer(), RelevanceScorer)
        assert isinstance(StructuredScorer(), RelevanceScorer)

    def test_env_config(self, monkeypatch):
        monkeypatch.setenv("TOPICWALK_SCORER", "structured")
        monkeypatch.setenv("TOPICWALK_MODEL", "llama3:8b")
        monkeypatch.setenv("TOPICWALK_OLLAMA_URL", "http://gpu-box:11434/")

        config = ScorerConfig.from_env(model="override:1b")
        assert config.strategy == ScorerStrategy.STRUCTURED
        assert config.model == "override:1b"
        assert config.base_url == "http://gpu-box:11434"
