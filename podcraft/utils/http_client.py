"""
HTTP helpers shared by provider implementations.

Providers talk to vendors through ``httpx.AsyncClient``; these helpers turn
transport failures and non-success responses into the provider exception
hierarchy so the error classifier sees a consistent shape.
"""

from typing import Iterable

import httpx

from podcraft.exceptions import (
    AutomationBlockedError,
    ContentPolicyError,
    ProviderAuthError,
    ProviderConnectionError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def response_detail(response: httpx.Response, limit: int = 200) -> str:
    """Best-effort error detail from a vendor response body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:limit]
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error") or body.get("message") or ""
        if isinstance(detail, dict):
            detail = detail.get("message") or detail.get("status") or str(detail)
        return str(detail)[:limit]
    return str(body)[:limit]


def raise_for_provider_status(
    response: httpx.Response,
    provider: str,
    auth_statuses: Iterable[int] = (401, 403),
    blocked_statuses: Iterable[int] = (),
) -> None:
    """
    Raise the provider exception matching a non-2xx response.

    Args:
        response: Vendor response
        provider: Provider name used in messages
        auth_statuses: Statuses meaning rejected credentials
        blocked_statuses: Statuses meaning the target blocks automated clients
    """
    status = response.status_code
    if 200 <= status < 300:
        return

    detail = response_detail(response)
    suffix = f" - {detail}" if detail else ""
    if status in auth_statuses:
        raise ProviderAuthError(f"{provider} rejected the API key ({status}){suffix}", provider, status)
    if status in blocked_statuses:
        raise AutomationBlockedError(f"{provider} blocked automated access ({status})", provider, status)
    if status == 429:
        raise ProviderRateLimitError(f"{provider} rate limit exceeded{suffix}", provider, status)
    if status in (408, 504):
        raise ProviderTimeoutError(f"{provider} request timed out: {status}", provider, status)
    if status == 451 or "content policy" in detail.lower() or "safety" in detail.lower():
        raise ContentPolicyError(f"{provider} refused the content{suffix}", provider, status)
    raise ProviderError(f"{provider} request failed: {status}{suffix}", provider, status)


def translate_transport_error(error: httpx.HTTPError, provider: str) -> ProviderError:
    """Map an httpx transport failure onto the provider exception hierarchy."""
    if isinstance(error, httpx.TimeoutException):
        return ProviderTimeoutError(f"{provider} request timed out", provider)
    return ProviderConnectionError(f"{provider} connection failed: {error}", provider)
