"""Engine error hierarchy.

Every failure the engine surfaces to a caller is one of these. Messages are
meant to be shown verbatim; ``status_code`` is what the HTTP command surface
answers with. ``classification`` adds a stable code, a plain-language message
and an optional recovery action the UI can offer.
"""

from enum import Enum
from typing import Any, Dict, NamedTuple, Optional


class ErrorCode(str, Enum):
    """User-facing engine error codes."""
    OLLAMA_NOT_REACHABLE = "OLLAMA_NOT_REACHABLE"
    MODEL_MISSING = "MODEL_MISSING"
    TIMEOUT = "TIMEOUT"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    OOM = "OOM"
    PROMPT_TOO_LARGE = "PROMPT_TOO_LARGE"
    UNKNOWN = "UNKNOWN"


class ErrorClassification(NamedTuple):
    code: ErrorCode
    user_message: str
    recovery_action: Optional[str]


CLASSIFICATIONS = {
    ErrorCode.OLLAMA_NOT_REACHABLE: ErrorClassification(
        ErrorCode.OLLAMA_NOT_REACHABLE,
        "The booth can't reach your local AI engine. Make sure Ollama is installed and running, then retry.",
        "Open engine setup",
    ),
    ErrorCode.MODEL_MISSING: ErrorClassification(
        ErrorCode.MODEL_MISSING,
        "This engine pack is missing one or more models. Reinstall the pack to fix this.",
        "Repair this pack",
    ),
    ErrorCode.TIMEOUT: ErrorClassification(
        ErrorCode.TIMEOUT,
        "This question took too long to answer. Try a shorter question, or simplify the data summary.",
        None,
    ),
    ErrorCode.RUNTIME_ERROR: ErrorClassification(
        ErrorCode.RUNTIME_ERROR,
        "The local AI engine failed while answering. Retry, or check the engine settings.",
        "Open engine settings",
    ),
    ErrorCode.OOM: ErrorClassification(
        ErrorCode.OOM,
        "The model ran into a resource limit on your machine. Try switching to a lighter engine pack in settings.",
        "Open engine settings",
    ),
    ErrorCode.PROMPT_TOO_LARGE: ErrorClassification(
        ErrorCode.PROMPT_TOO_LARGE,
        "The data summary is too large. Try reducing the amount of data or splitting into smaller questions.",
        None,
    ),
    ErrorCode.UNKNOWN: ErrorClassification(
        ErrorCode.UNKNOWN,
        "An unexpected error occurred. Check the engine settings for more details.",
        "Open engine settings",
    ),
}


def classify_message(text: str, default: ErrorCode = ErrorCode.UNKNOWN) -> ErrorClassification:
    """Classify an error text by the failure patterns the server reports."""
    lowered = text.lower()
    if "OOM" in text or "out of memory" in lowered or "resource limit" in lowered:
        code = ErrorCode.OOM
    elif "context" in lowered and ("too large" in lowered or "too long" in lowered or "exceeds" in lowered):
        code = ErrorCode.PROMPT_TOO_LARGE
    elif "model" in lowered and ("not found" in lowered or "missing" in lowered):
        code = ErrorCode.MODEL_MISSING
    elif "timeout" in lowered or "timed out" in lowered or "took too long" in lowered:
        code = ErrorCode.TIMEOUT
    elif "connection refused" in lowered or "failed to connect to ollama" in lowered:
        code = ErrorCode.OLLAMA_NOT_REACHABLE
    else:
        code = default
    return CLASSIFICATIONS[code]


class EngineError(Exception):
    """Base engine error."""

    kind = "engine_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def classification(self) -> ErrorClassification:
        return classify_message(self.message)

    def to_dict(self) -> Dict[str, Any]:
        classification = self.classification
        return {
            "error": self.kind,
            "code": classification.code.value,
            "message": self.message,
            "user_message": classification.user_message,
            "recovery_action": classification.recovery_action,
        }


class ServerUnavailableError(EngineError):
    """Inference server could not be reached or timed out."""

    kind = "server_unavailable"
    status_code = 503

    def __init__(self, message: str, timed_out: bool = False):
        super().__init__(message)
        self.timed_out = timed_out

    @property
    def classification(self) -> ErrorClassification:
        if self.timed_out:
            return CLASSIFICATIONS[ErrorCode.TIMEOUT]
        return CLASSIFICATIONS[ErrorCode.OLLAMA_NOT_REACHABLE]


class ServerError(EngineError):
    """Inference server answered with a non-success status."""

    kind = "server_error"
    status_code = 502

    def __init__(self, status: int, body: str, message: Optional[str] = None):
        super().__init__(message or f"Ollama error: {body}")
        self.status = status
        self.body = body

    @property
    def classification(self) -> ErrorClassification:
        return classify_message(self.body, default=ErrorCode.RUNTIME_ERROR)


class ProtocolError(EngineError):
    """Response shape does not match what the protocol promises."""

    kind = "protocol_error"
    status_code = 502


class ConfigError(EngineError):
    """Missing active pack, unknown pack id, or config file I/O failure."""

    kind = "config_error"
    status_code = 409


class PartialInstallFailure(EngineError):
    """A model of a pack failed to pull."""

    kind = "partial_install_failure"
    status_code = 502

    def __init__(self, model: str, reason: str):
        super().__init__(f"Failed to pull model {model}: {reason}")
        self.model = model
        self.reason = reason

    @property
    def classification(self) -> ErrorClassification:
        return classify_message(self.reason, default=ErrorCode.MODEL_MISSING)


def unexpected_error_dict(exc: BaseException) -> Dict[str, Any]:
    """Error payload for failures outside the engine hierarchy."""
    classification = CLASSIFICATIONS[ErrorCode.UNKNOWN]
    return {
        "error": "internal_error",
        "code": classification.code.value,
        "message": str(exc),
        "user_message": classification.user_message,
        "recovery_action": classification.recovery_action,
    }
