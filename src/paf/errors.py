"""
Shared error types and error-handling primitives for batch analysis.

`CsvFormatError` is the single domain error raised by the analysis pipeline
when an input recording cannot yield a result. It propagates unchanged from
the first unsatisfiable precondition.

On top of it, this module standardizes two execution modes for the CLI:
1) Debug mode: fail fast and re-raise exceptions immediately.
2) Run mode: capture structured failure details and return them to the caller,
   so a batch over several recordings continues past a malformed file.
"""

import json
import logging
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Generic, Optional, TypeVar

# ==================================================================================================
#                                   TYPES
# ==================================================================================================

T = TypeVar("T")


class CsvFormatError(ValueError):
    """
    Raised when a recording cannot be analyzed.

    The message names the first precondition that failed (empty file, no
    valid rows, unmeasurable sampling rate, invalid trim interval, ...).

    Usage example
    -------------
        try:
            result = analyze(rows)
        except CsvFormatError as exc:
            print(f"Error: {exc}")
    """


@dataclass(frozen=True)
class ErrorPolicy:
    """
    Error handling policy.

    Attributes
    ----------
    debug : bool
        If True, exceptions are re-raised (fail-fast).
        If False, exceptions are logged and the batch continues.
    log_path : Path
        Where to write logs (file logger).
    """

    debug: bool
    log_path: Path


@dataclass(frozen=True)
class StepFailure:
    """
    Structured failure record for non-debug runs.

    Attributes
    ----------
    step : str
        Name of the step that failed.
    context : dict[str, Any]
        Useful metadata (input path, parameters, etc.).
    exc_type : str
        Exception class name.
    message : str
        Exception message.
    traceback : str
        Full traceback.
    timestamp_utc : str
        ISO timestamp.
    """

    step: str
    context: dict[str, Any]
    exc_type: str
    message: str
    traceback: str
    timestamp_utc: str


@dataclass(frozen=True)
class StepResult(Generic[T]):
    """
    Result wrapper: either value or failure.

    Usage example
    -------------
        result = run_step(policy, "analyze", {"input": "rec.zip"}, analyze_recording, path)
        if result.failure is not None:
            # handle failure
            ...
        else:
            paf = result.value
    """

    value: Optional[T]
    failure: Optional[StepFailure]


# ==================================================================================================
#                                   HELPERS
# ==================================================================================================

def make_logger(*, log_path: Path) -> logging.Logger:
    """
    Return a file-backed logger used by batch steps.

    The function is idempotent for a given path: it avoids attaching duplicate
    handlers when called repeatedly in long-running processes or tests.
    """
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("paf.batch")
    logger.setLevel(logging.INFO)

    if not any(isinstance(h, logging.FileHandler) and h.baseFilename == str(log_path) for h in logger.handlers):
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


# ==================================================================================================
#                                   CORE LOGIC
# ==================================================================================================

def run_step(
    policy: ErrorPolicy,
    step: str,
    context: dict[str, Any],
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> StepResult[T]:
    """
    Run a batch step with policy-controlled error handling.

    In debug mode, re-raises exceptions to halt immediately.
    In run mode, logs the failure and returns StepResult(value=None, failure=...).

    Usage example
    -------------
        policy = ErrorPolicy(debug=False, log_path=Path("paf.log"))
        res = run_step(policy, "analyze", {"input": "rec.zip"}, analyze_recording, path)
        if res.failure:
            # continue with the next recording
            pass
    """
    logger = make_logger(log_path=policy.log_path)

    try:
        value = func(*args, **kwargs)
        return StepResult(value=value, failure=None)
    except Exception as exc:  # noqa: BLE001 (intentional: boundary catch)
        tb = traceback.format_exc()
        failure = StepFailure(
            step=step,
            context=context,
            exc_type=type(exc).__name__,
            message=str(exc),
            traceback=tb,
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
        )

        logger.error("%s failed | %s: %s", step, failure.exc_type, failure.message)
        logger.error("context=%s", json.dumps(context, ensure_ascii=False, default=str))
        logger.error("traceback=%s", tb)

        if policy.debug:
            raise

        return StepResult(value=None, failure=failure)
