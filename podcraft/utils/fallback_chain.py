"""
Ordered provider fallback.

A chain is an ordered list of interchangeable providers. The executor walks
it, running each available provider under the retry controller, and stops at
the first success. Ordering is fixed configuration with an optional preferred
provider promoted to the front; there is no adaptive ranking.
"""
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from podcraft.exceptions import (
    ConfigurationError,
    OperationFailedError,
    ProviderChainExhaustedError,
    ServiceUnavailableError,
)
from podcraft.utils.error_classifier import ErrorClassification, ErrorClassifier
from podcraft.utils.logger import get_logger
from podcraft.utils.retry import CancellationToken, RetryController, RetryPolicy

logger = get_logger(__name__)

AUTO_PROVIDER = "auto"


@dataclass(frozen=True)
class ProviderDescriptor:
    """
    One provider bound into a chain.

    ``is_available`` must be free of side effects. ``timeout`` bounds each
    individual attempt.
    """
    name: str
    is_available: Callable[[], bool]
    invoke: Callable[..., Awaitable[Any]]
    timeout: Optional[float] = None


OperationFactory = Callable[[ProviderDescriptor], Callable[[], Awaitable[Any]]]


@dataclass(frozen=True)
class ChainResult:
    success: bool
    payload: Any = None
    error: Optional[ErrorClassification] = None
    provider: Optional[str] = None
    fallback_used: bool = False
    original_provider: Optional[str] = None
    attempted_providers: Tuple[str, ...] = ()
    skipped_providers: Tuple[str, ...] = ()
    processing_time: float = 0.0

    def metadata(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "fallback_used": self.fallback_used,
            "original_provider": self.original_provider,
            "attempted_providers": list(self.attempted_providers),
            "skipped_providers": list(self.skipped_providers),
            "processing_time": round(self.processing_time, 3),
        }

    def raise_for_failure(self) -> None:
        if self.success:
            return
        attempted = ", ".join(self.attempted_providers) or "none"
        raise ProviderChainExhaustedError(
            f"All providers failed (attempted: {attempted}): {self.error.message}",
            classification=self.error,
            attempted_providers=list(self.attempted_providers),
        )


def is_auto(preferred: Optional[str]) -> bool:
    return not preferred or preferred.strip().lower() == AUTO_PROVIDER


def _find(chain: Sequence[ProviderDescriptor], preferred: str) -> Optional[int]:
    wanted = preferred.strip().lower()
    for index, provider in enumerate(chain):
        if provider.name.lower() == wanted:
            return index
    return None


def resolve_preferred(chain: Sequence[ProviderDescriptor], preferred: Optional[str]) -> Optional[str]:
    """Canonical name of the caller's preferred provider.

    Hints match provider names case-insensitively. "auto" resolves to the
    chain head; an unknown hint comes back stripped and lowercased.
    """
    if is_auto(preferred):
        return chain[0].name if chain else None
    index = _find(chain, preferred)
    return chain[index].name if index is not None else preferred.strip().lower()


def build_chain(defaults: Sequence[ProviderDescriptor], preferred: Optional[str] = None) -> List[ProviderDescriptor]:
    """
    Build the chain for one call.

    Args:
        defaults: Providers in their fixed default order
        preferred: Provider to try first; None, "" or "auto" keeps the default order

    Returns:
        List[ProviderDescriptor]: The preferred provider first (when it exists
        in ``defaults``), the others in their original relative order

    Raises:
        ConfigurationError: If two providers share a name
    """
    names = [provider.name for provider in defaults]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate provider names in chain: {', '.join(duplicates)}")

    chain = list(defaults)
    if is_auto(preferred):
        return chain
    index = _find(chain, preferred)
    if index is not None:
        chain.insert(0, chain.pop(index))
    else:
        logger.warning(f"Preferred provider '{preferred}' is not configured; using default order")
    return chain


class FallbackChainExecutor:
    """Walks a provider chain until one provider succeeds."""

    def __init__(self, retry_controller: RetryController):
        self.retry_controller = retry_controller

    @property
    def classifier(self) -> ErrorClassifier:
        return self.retry_controller.classifier

    async def run(
        self,
        chain: Sequence[ProviderDescriptor],
        operation_factory: OperationFactory,
        preferred: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
        policy: Optional[RetryPolicy] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ChainResult:
        """
        Run the chain in order.

        Args:
            chain: Providers in the order to try them (see build_chain)
            operation_factory: Returns the zero-argument coroutine function
                performing one attempt against the given provider
            preferred: The caller's preferred provider; defaults to the chain head
            context: Operation metadata passed to every classification
            policy: Retry policy applied per provider
            cancel_token: Stops the walk once set

        Returns:
            ChainResult: success with payload, or failure carrying the last
            classification and the providers that were attempted

        Raises:
            OperationCancelledError: If the token fired
        """
        start = time.monotonic()
        base_context = dict(context or {})
        operation = base_context.get("operation", "operation")
        original = resolve_preferred(chain, preferred)

        attempted: List[str] = []
        skipped: List[str] = []
        last_error: Optional[ErrorClassification] = None

        for provider in chain:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()

            if not self._is_available(provider):
                logger.info(f"Skipping {provider.name} for {operation}: provider not available")
                skipped.append(provider.name)
                continue

            attempted.append(provider.name)
            try:
                payload = await self.retry_controller.execute_with_retry(
                    operation_factory(provider),
                    context={**base_context, "provider": provider.name},
                    policy=policy,
                    cancel_token=cancel_token,
                    timeout=provider.timeout,
                )
            except OperationFailedError as e:
                last_error = e.classification
                logger.warning(
                    f"Provider {provider.name} failed for {operation} "
                    f"({e.classification.code.value} after {e.attempts} attempt(s)); trying next provider"
                )
                continue

            fallback_used = provider.name != original
            if fallback_used:
                logger.info(f"{operation} succeeded with fallback provider {provider.name} (preferred: {original})")
            else:
                logger.info(f"{operation} succeeded with {provider.name}")
            return ChainResult(
                success=True,
                payload=payload,
                provider=provider.name,
                fallback_used=fallback_used,
                original_provider=original,
                attempted_providers=tuple(attempted),
                skipped_providers=tuple(skipped),
                processing_time=time.monotonic() - start,
            )

        if last_error is None:
            last_error = self.classifier.classify(
                ServiceUnavailableError(f"No available providers for {operation}"),
                {**base_context, "skipped_providers": list(skipped)},
            )
        logger.error(
            f"All providers failed for {operation} "
            f"(attempted: {', '.join(attempted) or 'none'}, skipped: {', '.join(skipped) or 'none'})"
        )
        return ChainResult(
            success=False,
            error=last_error,
            original_provider=original,
            attempted_providers=tuple(attempted),
            skipped_providers=tuple(skipped),
            processing_time=time.monotonic() - start,
        )

    @staticmethod
    def _is_available(provider: ProviderDescriptor) -> bool:
        try:
            return bool(provider.is_available())
        except Exception as e:
            logger.warning(f"Availability check for {provider.name} raised {type(e).__name__}: {e}")
            return False
