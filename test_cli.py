#!/usr/bin/env python3
"""
test the topicwalk command line.

run with: pytest test_cli.py -v
"""

import json
import logging
from unittest.mock import AsyncMock, patch

import pytest

from topicwalk.cli import main, build_parser
from topicwalk.core.errors import BackendUnreachableError, ModelNotInstalledError


GOAL = "add exponential backoff retries to the http client"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ["TOPICWALK_SCORER", "TOPICWALK_MODEL", "TOPICWALK_OLLAMA_URL", "TOPICWALK_SCORER_TIMEOUT"]:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """drop handlers the cli attached to the topicwalk logger."""
    yield
    logger = logging.getLogger("topicwalk")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class TestParser:
    """test argument parsing."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_score_arguments(self):
        args = build_parser().parse_args([
            "score", GOAL, "backoff", "jitter",
            "--error", "ReadTimeout", "--previous", "timeouts", "--strategy", "structured"
        ])
        assert args.candidates == ["backoff", "jitter"]
        assert args.previous == ["timeouts"]
        assert args.strategy == "structured"

    def test_unknown_strategy_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["score", GOAL, "x", "--strategy", "magic"])


class TestScoreCommand:
    """test scoring from the command line with the offline scorer."""

    def test_json_ranked_output(self, capsys):
        code = main(["score", GOAL, "watercolor painting", "http client retries with backoff", "--json", "-q"])
        assert code == 0

        topics = json.loads(capsys.readouterr().out)
        assert [t["text"] for t in topics] == ["http client retries with backoff", "watercolor painting"]
        assert topics[0]["score"] >= topics[1]["score"]
        assert set(topics[0]["dimensions"]) == {
            "task_relevance", "error_relevance", "implementation_value", "novelty"
        }

    def test_table_output(self, capsys):
        assert main(["score", GOAL, "retry example", "-q"]) == 0

        out = capsys.readouterr().out
        assert "score" in out.splitlines()[0]
        assert "retry example" in out

    def test_log_file(self, tmp_path, capsys):
        log_file = tmp_path / "topicwalk.log"
        assert main(["score", GOAL, "retry example", "-v", "--log-file", str(log_file)]) == 0

        assert "[topicwalk.scoring.heuristic] DEBUG" in log_file.read_text()

    def test_structured_backend_down(self, capsys):
        with patch(
            "topicwalk.cli.StructuredScorer.initialize",
            new=AsyncMock(side_effect=BackendUnreachableError("Ollama is not running"))
        ):
            code = main(["score", GOAL, "x", "--strategy", "structured", "-q"])

        assert code == 1
        assert "scorer unavailable" in capsys.readouterr().err

    def test_scorer_disposed_when_init_fails(self):
        dispose = AsyncMock()
        with patch(
            "topicwalk.cli.StructuredScorer.initialize",
            new=AsyncMock(side_effect=ModelNotInstalledError("qwen3-coder"))
        ), patch("topicwalk.cli.StructuredScorer.dispose", new=dispose):
            code = main(["score", GOAL, "x", "--strategy", "structured", "-q"])

        assert code == 1
        dispose.assert_awaited_once()


class TestCheckCommand:
    """test backend readiness check."""

    def test_ready(self, capsys):
        with patch("topicwalk.cli.StructuredScorer.initialize", new=AsyncMock()):
            code = main(["check", "--model", "llama3:8b"])

        assert code == 0
        assert "ready: llama3:8b" in capsys.readouterr().out

    def test_model_missing(self, capsys):
        with patch(
            "topicwalk.cli.StructuredScorer.initialize",
            new=AsyncMock(side_effect=ModelNotInstalledError("llama3:8b"))
        ):
            code = main(["check", "--model", "llama3:8b"])

        assert code == 1
        assert "ollama pull llama3:8b" in capsys.readouterr().err
