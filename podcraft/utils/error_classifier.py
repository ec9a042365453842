"""
Error classification for calls into external providers.

Every failure observed by the retry and fallback machinery is mapped onto a
fixed taxonomy so that callers can decide whether to retry, fall back to the
next provider, or give up. Classifications are kept in a bounded ring log
that backs the health endpoints.
"""
import errno
import re
import threading
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Deque, Dict, List, Mapping, Optional, Pattern, Sequence, Union

from podcraft.utils.logger import get_logger

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    RATE_LIMIT = "RATE_LIMIT"
    AUTH_ERROR = "AUTH_ERROR"
    TIMEOUT = "TIMEOUT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    CONTENT_POLICY = "CONTENT_POLICY"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTOMATION_BLOCKED = "AUTOMATION_BLOCKED"
    FILESYSTEM_ERROR = "FILESYSTEM_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


DEFAULT_RETRYABLE_CODES = frozenset({
    ErrorCode.NETWORK_ERROR,
    ErrorCode.RATE_LIMIT,
    ErrorCode.TIMEOUT,
    ErrorCode.SERVICE_UNAVAILABLE,
    ErrorCode.AUTOMATION_BLOCKED,
    ErrorCode.INTERNAL_ERROR,
})

UNKNOWN_SUGGESTION = "An unexpected error occurred. Please try again or contact support if the problem persists."

HEALTH_WINDOW = 20
MAX_RECENT_CRITICAL = 3
MAX_RECENT_HIGH = 6


@dataclass(frozen=True)
class ErrorClassification:
    """Structured, immutable description of one observed failure."""
    code: ErrorCode
    severity: ErrorSeverity
    retryable: bool
    message: str
    suggestion: str
    context: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "message": self.message,
            "suggestion": self.suggestion,
            "context": {key: _json_safe(value) for key, value in self.context.items()},
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class ClassificationRule:
    code: ErrorCode
    severity: ErrorSeverity
    suggestion: str
    pattern: Pattern[str]

    def matches(self, fingerprint: str) -> bool:
        return self.pattern.search(fingerprint) is not None


def _rule(code: ErrorCode, severity: ErrorSeverity, suggestion: str, *patterns: str) -> ClassificationRule:
    return ClassificationRule(code, severity, suggestion, re.compile("|".join(patterns), re.IGNORECASE))


# Order matters: the first matching rule wins.
CLASSIFICATION_RULES: Sequence[ClassificationRule] = (
    _rule(
        ErrorCode.NETWORK_ERROR, ErrorSeverity.MEDIUM,
        "Network connection failed. Please check your internet connection and try again.",
        r"network", r"fetch failed", r"econnrefused", r"econnreset", r"enotfound",
        r"connect(ion)?[ _]?(error|refused|reset|failed)", r"name resolution", r"\bdns\b",
    ),
    _rule(
        ErrorCode.RATE_LIMIT, ErrorSeverity.MEDIUM,
        "Too many requests. Please wait a moment before trying again.",
        r"rate[ _-]?limit", r"\b429\b", r"quota", r"too many requests",
    ),
    _rule(
        ErrorCode.AUTH_ERROR, ErrorSeverity.HIGH,
        "Authentication failed. Please check your API keys configuration.",
        r"auth_error", r"\bauth(entication|orization)?\b", r"\b401\b", r"api[ _-]?key",
        r"unauthori[sz]ed", r"credentials",
    ),
    _rule(
        ErrorCode.TIMEOUT, ErrorSeverity.MEDIUM,
        "The request timed out. Please try again or use shorter content.",
        r"timeout", r"timed out", r"etimedout", r"\b408\b",
    ),
    _rule(
        ErrorCode.SERVICE_UNAVAILABLE, ErrorSeverity.MEDIUM,
        "The service is temporarily unavailable. Please try again in a few minutes.",
        r"service[ _]unavailable", r"\b50[234]\b", r"bad gateway", r"temporarily unavailable",
        r"overloaded",
    ),
    _rule(
        ErrorCode.CONTENT_POLICY, ErrorSeverity.MEDIUM,
        "Content was rejected by the provider's content policy. Please modify your content and try again.",
        r"content[ _-]?policy", r"safety", r"policy violation", r"flagged",
    ),
    _rule(
        ErrorCode.VALIDATION_ERROR, ErrorSeverity.LOW,
        "Invalid input provided. Please check your data and try again.",
        r"validation", r"invalid", r"\b400\b", r"bad request", r"malformed",
    ),
    _rule(
        ErrorCode.AUTOMATION_BLOCKED, ErrorSeverity.MEDIUM,
        "The website is blocking automated access. Try a different URL or paste the content directly.",
        r"automation[ _]blocked", r"playwright", r"browser", r"captcha", r"\bbot\b",
        r"cloudflare", r"access denied", r"\b403\b", r"forbidden",
    ),
    _rule(
        ErrorCode.FILESYSTEM_ERROR, ErrorSeverity.CRITICAL,
        "The server has run out of disk space. Please contact an administrator.",
        r"enospc", r"no space left",
    ),
    _rule(
        ErrorCode.FILESYSTEM_ERROR, ErrorSeverity.MEDIUM,
        "File system error. Please check file permissions and available disk space.",
        r"filesystem", r"enoent", r"eacces", r"no such file", r"permission denied", r"\bfile\b",
    ),
    _rule(
        ErrorCode.INTERNAL_ERROR, ErrorSeverity.HIGH,
        "An internal error occurred. The operation will be retried automatically.",
        r"internal", r"\b500\b",
    ),
)

_LOG_LEVELS = {
    ErrorSeverity.LOW: "info",
    ErrorSeverity.MEDIUM: "warning",
    ErrorSeverity.HIGH: "error",
    ErrorSeverity.CRITICAL: "error",
}


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return str(value)


def _describe(failure: Any) -> str:
    try:
        text = str(failure).strip()
    except Exception:
        text = ""
    return text or type(failure).__name__


def _explicit_code(failure: Any) -> Optional[str]:
    code = getattr(failure, "error_code", None)
    if isinstance(code, Enum):
        code = code.value
    if isinstance(code, str) and code in ErrorCode._value2member_map_:
        return code
    return None


def _status_code(failure: Any) -> Optional[int]:
    status = getattr(failure, "status_code", None)
    if status is None:
        try:
            status = getattr(getattr(failure, "response", None), "status_code", None)
        except Exception:
            status = None
    return status if isinstance(status, int) else None


def build_fingerprint(failure: Union[BaseException, str]) -> str:
    """
    Text the rule table is matched against.

    An explicit ``error_code`` on the failure stands on its own; otherwise the
    exception type, HTTP status, errno name and message are combined.
    """
    if isinstance(failure, str):
        return failure
    explicit = _explicit_code(failure)
    if explicit:
        return explicit.lower()
    parts = [type(failure).__name__]
    status = _status_code(failure)
    if status is not None:
        parts.append(f"http {status}")
    err_no = getattr(failure, "errno", None)
    if isinstance(err_no, int) and err_no in errno.errorcode:
        parts.append(errno.errorcode[err_no])
    parts.append(_describe(failure))
    return " ".join(parts)


class ErrorLog:
    """Bounded, thread-safe ring log of classifications (oldest evicted first)."""

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("Error log capacity must be at least 1")
        self._entries: Deque[ErrorClassification] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    def append(self, classification: ErrorClassification) -> None:
        with self._lock:
            self._entries.append(classification)

    def snapshot(self) -> List[ErrorClassification]:
        """Copy of the log, oldest first."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ErrorClassifier:
    """
    Maps raw failures onto ErrorClassification records.

    ``classify`` never raises. Its only side effects are appending to the
    injected ErrorLog and emitting a log line at a severity-appropriate level.
    """

    def __init__(
        self,
        error_log: Optional[ErrorLog] = None,
        rules: Sequence[ClassificationRule] = CLASSIFICATION_RULES,
    ):
        self.error_log = error_log if error_log is not None else ErrorLog()
        self.rules = tuple(rules)

    def match_rule(self, failure: Union[BaseException, str]) -> Optional[ClassificationRule]:
        try:
            fingerprint = build_fingerprint(failure)
        except Exception:
            fingerprint = _describe(failure)
        for rule in self.rules:
            if rule.matches(fingerprint):
                return rule
        return None

    def classify(
        self,
        failure: Union[BaseException, str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> ErrorClassification:
        message = _describe(failure)
        details = dict(context or {})
        details.setdefault("error_type", type(failure).__name__ if not isinstance(failure, str) else "message")

        rule = self.match_rule(failure)
        if rule is None:
            code, severity, suggestion = ErrorCode.UNKNOWN_ERROR, ErrorSeverity.MEDIUM, UNKNOWN_SUGGESTION
        else:
            code, severity, suggestion = rule.code, rule.severity, rule.suggestion

        classification = ErrorClassification(
            code=code,
            severity=severity,
            retryable=code in DEFAULT_RETRYABLE_CODES,
            message=message,
            suggestion=suggestion,
            context=MappingProxyType(details),
        )
        self.error_log.append(classification)
        self._emit(classification)
        return classification

    def _emit(self, classification: ErrorClassification) -> None:
        log = getattr(logger, _LOG_LEVELS[classification.severity])
        operation = classification.context.get("operation", "unknown")
        provider = classification.context.get("provider")
        where = f"{operation}/{provider}" if provider else operation
        log(
            f"[{classification.code.value}] {where}: {classification.message} "
            f"(severity={classification.severity.value}, retryable={classification.retryable})"
        )

    # Read-only projections of the ring log

    def recent_errors(self, limit: int = 10) -> List[ErrorClassification]:
        """Most recent classifications, newest last."""
        if limit <= 0:
            return []
        return self.error_log.snapshot()[-limit:]

    def errors_by_severity(self, severity: ErrorSeverity) -> List[ErrorClassification]:
        return [entry for entry in self.error_log.snapshot() if entry.severity == severity]

    def error_counts(self) -> Dict[str, int]:
        return dict(Counter(entry.code.value for entry in self.error_log.snapshot()))

    def error_stats(self, recent_limit: int = 10) -> Dict[str, Any]:
        entries = self.error_log.snapshot()
        return {
            "total": len(entries),
            "by_code": dict(Counter(entry.code.value for entry in entries)),
            "by_severity": dict(Counter(entry.severity.value for entry in entries)),
            "recent": [entry.to_dict() for entry in entries[-recent_limit:]] if recent_limit > 0 else [],
        }

    def is_system_healthy(self) -> bool:
        window = self.error_log.snapshot()[-HEALTH_WINDOW:]
        critical = sum(1 for entry in window if entry.severity == ErrorSeverity.CRITICAL)
        high = sum(1 for entry in window if entry.severity == ErrorSeverity.HIGH)
        return critical < MAX_RECENT_CRITICAL and high < MAX_RECENT_HIGH

    def clear(self) -> None:
        self.error_log.clear()
        logger.info("Error log cleared")
