"""
resilience utilities - safe execution, payload validation, logging setup.
keeps one bad candidate from taking down a whole session.
"""

import logging
import math
from typing import TypeVar, Callable, Optional, Any, List, Tuple, Dict


# setup logging
logger = logging.getLogger("topicwalk")


T = TypeVar("T")


# (field, max) for every numeric field the scoring model must return
SCORE_FIELD_RANGES: Tuple[Tuple[str, float], ...] = (
    ("taskRelevance", 40),
    ("errorRelevance", 30),
    ("implementationValue", 20),
    ("novelty", 10),
    ("total", 100),
)


def safe_execute(
    func: Callable[[], T],
    default: T = None,
    log_errors: bool = True,
    error_msg: str = ""
) -> T:
    """
    run a non-critical callback, such as follow-up topic discovery,
    and return default if it raises. the session keeps going.
    """
    try:
        return func()
    except KeyboardInterrupt:
        raise
    except Exception as e:
        if log_errors:
            msg = f"{error_msg}: {e!r}" if error_msg else f"callback failed: {e!r}"
            logger.warning(msg)
        return default


def validate_score_payload(data: Any) -> Tuple[bool, List[str]]:
    """
    validate a structured scoring response.
    returns (is_valid, list of issues).
    """
    if not isinstance(data, dict):
        return False, [f"expected object, got {type(data).__name__}"]

    issues = []

    for name, upper in SCORE_FIELD_RANGES:
        if name not in data:
            issues.append(f"missing field: {name}")
            continue

        value = data[name]
        # bool is an int subclass, reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            issues.append(f"{name} is not a number: {value!r}")
            continue

        if math.isnan(value) or value < 0 or value > upper:
            issues.append(f"{name} out of range 0-{upper}: {value}")

    reasoning = data.get("reasoning")
    if reasoning is None:
        issues.append("missing field: reasoning")
    elif not isinstance(reasoning, str):
        issues.append(f"reasoning is not a string: {reasoning!r}")

    return len(issues) == 0, issues


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None
):
    """
    route the topicwalk logger hierarchy to stderr and optionally a file.
    a second call replaces the handlers of the first.
    """
    formatter = logging.Formatter(
        "%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    # configure topicwalk logger, replacing handlers from an earlier call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)
    logger.addHandler(console_handler)

    # file handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger
