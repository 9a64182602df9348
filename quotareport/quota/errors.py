"""Exceptions raised while collecting quota usage."""


class QuotaReportError(Exception):
    """Base class for quota report errors."""
    pass


class AuthenticationFailure(QuotaReportError):
    """Raised when no Azure credential could acquire a token."""
    pass


class SubscriptionEnumerationFailure(QuotaReportError):
    """Raised when subscriptions cannot be listed, or none are available."""
    pass


class ConfigError(QuotaReportError):
    """Raised when the report configuration file is invalid."""
    pass


class PerSubscriptionFetchFailure(QuotaReportError):
    """A usage fetch for one subscription and category failed.

    Never aborts a run; collected on the result so the operator can be warned.
    """

    def __init__(self, subscription_name: str, subscription_id: str, category: str, cause: Exception):
        self.subscription_name = subscription_name
        self.subscription_id = subscription_id
        self.category = category
        self.cause = cause
        super().__init__(
            f"Failed to fetch {category} usage for {subscription_name} ({subscription_id}): {cause}"
        )
