from .models import (
    Topic, ScoredTopic, ScoreDimensions, QAPair, QASource,
    ExpansionResult, ResearchReport, normalize_topic
)
from .config import (
    ExpansionConfig, ScorerConfig, ScorerStrategy,
    AnswerChainConfig, EngineConfig
)
from .errors import (
    TopicwalkError, ScorerInitError, BackendUnreachableError,
    ModelNotInstalledError, InteractionError, TopicNotFoundError,
    StreamingTimeoutError, StateClosedError
)
from .resilience import safe_execute, validate_score_payload, setup_logging
