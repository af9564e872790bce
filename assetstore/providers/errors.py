"""Provider exceptions and HTTP status classification."""

from __future__ import annotations


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, provider: str, message: str, status: int | None = None):
        self.provider = provider
        self.message = message
        self.status = status
        super().__init__(message)


class ProviderDisabledError(ProviderError):
    """Provider was called while disabled or without a credential."""

    def __init__(self, provider: str):
        super().__init__(provider, f"{provider} provider is not enabled or configured")


class ProviderAuthError(ProviderError):
    """Credential rejected (401/403)."""


class ProviderRateLimitError(ProviderError):
    """Quota exhausted (429) after retries."""


class ProviderOutageError(ProviderError):
    """Provider returned a 5xx."""


class ProviderMaintenanceError(ProviderOutageError):
    """Extended outage (522); retrying within a request will not help."""


class ProviderHTTPError(ProviderError):
    """Any other non-success status."""


class ProviderNetworkError(ProviderError):
    """Timeout or transport failure after retries."""


class ProviderResponseError(ProviderError):
    """Response body did not match the provider's schema."""


RETRYABLE_STATUSES = frozenset({429})
MAINTENANCE_STATUS = 522


def is_retryable_status(status: int) -> bool:
    """Retry on 429 and on 5xx other than 522."""
    if status == MAINTENANCE_STATUS:
        return False
    return status in RETRYABLE_STATUSES or 500 <= status < 600


def classify_status(provider: str, status: int, body: str = "") -> ProviderError:
    """Build the terminal error for a failed HTTP status."""
    detail = f"API request failed: {status}"
    if body:
        detail = f"{detail} {body[:200]}"

    if status in (401, 403):
        return ProviderAuthError(
            provider, f"{provider} rejected the API key ({status}). Check your credentials.", status
        )
    if status == 429:
        return ProviderRateLimitError(
            provider, f"{provider} rate limit exceeded (429). Try again later.", status
        )
    if status == MAINTENANCE_STATUS:
        return ProviderMaintenanceError(
            provider,
            f"{provider} is unreachable (522): the service appears to be down for "
            f"extended maintenance. Try again later or disable {provider} in settings.",
            status,
        )
    if 500 <= status < 600:
        return ProviderOutageError(
            provider, f"{provider} server error ({status}). {detail}", status
        )
    return ProviderHTTPError(provider, detail, status)
