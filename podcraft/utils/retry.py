"""
Retry controller with bounded exponential backoff.

Backoff is an asyncio suspension, so a request waiting to retry never blocks
other requests, and it is raced against the request's CancellationToken so an
abandoned request stops scheduling attempts straight away.
"""
import asyncio
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, FrozenSet, Mapping, Optional, TypeVar, Union

from podcraft.config import Settings, get_settings
from podcraft.exceptions import OperationCancelledError, OperationFailedError, ProviderTimeoutError
from podcraft.utils.error_classifier import DEFAULT_RETRYABLE_CODES, ErrorClassification, ErrorClassifier, ErrorCode
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

JITTER_RATIO = 0.1


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    exponential_backoff: bool = True
    retryable_codes: FrozenSet[ErrorCode] = DEFAULT_RETRYABLE_CODES

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays must be >= 0")
        object.__setattr__(self, "retryable_codes", frozenset(ErrorCode(code) for code in self.retryable_codes))

    @classmethod
    def for_operation(cls, operation: str, settings: Optional[Settings] = None) -> "RetryPolicy":
        """Policy for an operation class ("tts", "generation", "scrape") from settings."""
        settings = settings or get_settings()
        return cls(**settings.retry_settings_for(operation))

    def should_retry(self, classification: ErrorClassification) -> bool:
        return classification.code in self.retryable_codes

    def delay_for(self, attempt: int, rng: Optional[random.Random] = None) -> float:
        """Delay before the retry that follows the given 0-based attempt."""
        if not self.exponential_backoff:
            return min(self.max_delay, self.base_delay)
        exponential = self.base_delay * (2 ** attempt)
        jitter = (rng or random).uniform(0, exponential * JITTER_RATIO)
        return min(self.max_delay, exponential + jitter)


class CancellationToken:
    """Signal a caller sets when it abandons a request."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "Request cancelled by caller") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(self.reason or "Request cancelled")

    async def wait(self) -> None:
        await self._event.wait()


async def run_until_cancelled(awaitable: Awaitable[T], cancel_token: CancellationToken) -> T:
    """
    Await ``awaitable`` unless the token fires first.

    When the token wins, the pending work is cancelled, allowed to unwind, and
    OperationCancelledError is raised.
    """
    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_token.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not task.done():
            task.cancel()
    if task.done() and not task.cancelled():
        return task.result()
    await asyncio.gather(task, return_exceptions=True)
    raise OperationCancelledError(cancel_token.reason or "Request cancelled")


class RetryController:
    """Runs one operation under a RetryPolicy, classifying every failure."""

    def __init__(
        self,
        classifier: ErrorClassifier,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.classifier = classifier
        self._sleep = sleep
        self._rng = rng or random.Random()

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        context: Optional[Mapping[str, Any]] = None,
        policy: Optional[RetryPolicy] = None,
        cancel_token: Optional[CancellationToken] = None,
        timeout: Optional[float] = None,
    ) -> T:
        """
        Execute ``operation`` until it succeeds or the policy gives up.

        Args:
            operation: Zero-argument coroutine function performing one attempt
            context: Operation metadata attached to every classification
            policy: Retry policy (defaults to RetryPolicy())
            cancel_token: Optional token; once set no further attempt is made
            timeout: Per-attempt timeout in seconds

        Returns:
            The operation's result

        Raises:
            OperationFailedError: With the final classification attached
            OperationCancelledError: If the token fired
        """
        policy = policy or RetryPolicy()
        context = dict(context or {})
        name = context.get("operation", getattr(operation, "__name__", "operation"))
        provider = context.get("provider")
        label = f"{name} via {provider}" if provider else name

        attempt = 0
        while True:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            try:
                result = await self._attempt(operation, cancel_token, timeout)
            except OperationCancelledError:
                raise
            except Exception as e:
                failure = self._normalize(e, label, timeout, provider)
                classification = self.classifier.classify(
                    failure, {**context, "attempt": attempt + 1, "max_attempts": policy.max_retries + 1}
                )
                retryable = policy.should_retry(classification)
                if attempt >= policy.max_retries or not retryable:
                    reason = "retries exhausted" if retryable else "not retryable"
                    logger.error(
                        f"{label} failed after {attempt + 1} attempt(s) ({reason}): "
                        f"{classification.code.value}"
                    )
                    raise OperationFailedError(
                        f"{label} failed: {classification.message}",
                        classification=classification,
                        attempts=attempt + 1,
                        context=context,
                    ) from failure

                delay = policy.delay_for(attempt, self._rng)
                logger.warning(
                    f"Attempt {attempt + 1} failed for {label} ({classification.code.value}). "
                    f"Retrying in {delay:.2f}s..."
                )
                await self._backoff(delay, cancel_token)
                attempt += 1
            else:
                if attempt:
                    logger.info(f"{label} succeeded on attempt {attempt + 1}")
                return result

    async def _attempt(
        self,
        operation: Callable[[], Awaitable[T]],
        cancel_token: Optional[CancellationToken],
        timeout: Optional[float],
    ) -> T:
        call = operation()
        if timeout is not None:
            call = asyncio.wait_for(call, timeout)
        if cancel_token is None:
            return await call
        return await run_until_cancelled(call, cancel_token)

    async def _backoff(self, delay: float, cancel_token: Optional[CancellationToken]) -> None:
        if cancel_token is None:
            await self._sleep(delay)
            return
        await run_until_cancelled(self._sleep(delay), cancel_token)

    @staticmethod
    def _normalize(
        error: Exception, label: str, timeout: Optional[float], provider: Optional[str]
    ) -> Union[Exception, ProviderTimeoutError]:
        if isinstance(error, asyncio.TimeoutError):
            limit = f" after {timeout}s" if timeout is not None else ""
            timeout_error = ProviderTimeoutError(f"{label} timed out{limit}", provider=provider)
            timeout_error.__cause__ = error
            return timeout_error
        return error

