"""
exceptions raised by topicwalk.

only two kinds escape to the caller:
- scorer init failures (fatal, operator-actionable)
- interaction failures (per-topic, the driver decides what to do)
scoring and citation failures are absorbed where they happen.
"""


class TopicwalkError(Exception):
    """base for all topicwalk errors."""


class ScorerInitError(TopicwalkError):
    """scorer cannot start; the session must not begin."""


class BackendUnreachableError(ScorerInitError):
    """scoring backend is not running or not reachable."""


class ModelNotInstalledError(ScorerInitError):
    """backend is up but the configured model is missing."""

    def __init__(self, model: str, message: str = ""):
        self.model = model
        super().__init__(message or f"Model {model} not found. Pull with `ollama pull {model}`")


class InteractionError(TopicwalkError):
    """a topic interaction failed; abandon the topic."""

    def __init__(self, topic_text: str, message: str = ""):
        self.topic_text = topic_text
        super().__init__(message or f"interaction failed for \"{topic_text}\"")


class TopicNotFoundError(InteractionError):
    """topic element never appeared within the wait window."""

    def __init__(self, topic_text: str, message: str = ""):
        super().__init__(
            topic_text,
            message or f"TopicNotFound: Could not find topic pill \"{topic_text}\""
        )


class StreamingTimeoutError(InteractionError):
    """answer never stabilized within the wait window."""

    def __init__(self, topic_text: str, message: str = ""):
        super().__init__(
            topic_text,
            message or f"StreamingTimeout: Response did not complete for \"{topic_text}\""
        )


class StateClosedError(TopicwalkError):
    """expansion state was mutated after its result was taken."""
