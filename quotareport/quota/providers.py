"""Category-specific usage fetchers."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple

from rich.console import Console

from .models import QuotaCategory, QuotaRecord

console = Console()

ARM_SCOPE = "https://management.azure.com/.default"


def _to_count(value: Any) -> int:
    """Convert an API usage value to a non-negative int.

    Some providers report -1 for unlimited quotas; those count as 0.
    """
    count = int(float(value))
    return max(count, 0)


class UsageFetcher(ABC):
    """Base class for fetching usage records of one category."""

    category: QuotaCategory

    def __init__(self, credential, debug: bool = False):
        """Initialize the fetcher.

        Args:
            credential: Azure credential shared by all fetchers of a run.
            debug: If True, print verbose debug information.
        """
        self.credential = credential
        self.debug = debug

    @abstractmethod
    def list_usages(self, subscription_id: str, location: str) -> Iterable[Tuple[Optional[str], Any, Any]]:
        """List raw usages as (display name, current value, limit) tuples."""
        pass

    def fetch(self, subscription_id: str, subscription_name: str, location: str) -> List[QuotaRecord]:
        """Fetch usage records for a subscription in a region.

        Args:
            subscription_id: Azure subscription ID.
            subscription_name: Display name of the subscription.
            location: Azure region name.

        Returns:
            List[QuotaRecord]: One record per usage reported by the API.
        """
        records = []
        for name, current_value, limit in self.list_usages(subscription_id, location):
            if not name:
                console.print(f"[yellow]Warning: Malformed {self.category.value} usage object in {subscription_name}[/yellow]")
                continue
            if current_value is None or limit is None:
                console.print(f"[yellow]Warning: Missing limit or currentValue for {name} in {subscription_name}[/yellow]")
                continue
            try:
                current_usage = _to_count(current_value)
                limit_count = _to_count(limit)
            except (TypeError, ValueError, OverflowError):
                console.print(f"[yellow]Warning: Non-numeric limit/currentValue for {name} in {subscription_name}[/yellow]")
                continue

            records.append(QuotaRecord(
                subscription_name=subscription_name,
                subscription_id=subscription_id,
                location=location,
                category=self.category,
                resource_type=name,
                current_usage=current_usage,
                limit=limit_count,
            ))

        if self.debug:
            console.print(f"Debug: {len(records)} {self.category.value} usages for {subscription_name} in {location}")
        return records


def _sdk_usage_name(usage) -> Optional[str]:
    name = getattr(usage, "name", None)
    if name is None:
        return None
    return getattr(name, "localized_value", None) or getattr(name, "value", None)


class ComputeUsageFetcher(UsageFetcher):
    """Virtual machine quotas from Microsoft.Compute."""

    category = QuotaCategory.COMPUTE

    def list_usages(self, subscription_id: str, location: str):
        from azure.mgmt.compute import ComputeManagementClient

        client = ComputeManagementClient(self.credential, subscription_id)
        for usage in client.usage.list(location):
            yield _sdk_usage_name(usage), usage.current_value, usage.limit


class StorageUsageFetcher(UsageFetcher):
    """Storage account quotas from Microsoft.Storage."""

    category = QuotaCategory.STORAGE

    def list_usages(self, subscription_id: str, location: str):
        from azure.mgmt.storage import StorageManagementClient

        client = StorageManagementClient(self.credential, subscription_id)
        for usage in client.usages.list_by_location(location):
            yield _sdk_usage_name(usage), usage.current_value, usage.limit


class WebAppUsageFetcher(UsageFetcher):
    """App Service quotas from Microsoft.Web."""

    category = QuotaCategory.WEBAPP

    def list_usages(self, subscription_id: str, location: str):
        from azure.mgmt.web import WebSiteManagementClient

        client = WebSiteManagementClient(self.credential, subscription_id)
        for usage in client.get_usages_in_location.list(location):
            yield _sdk_usage_name(usage), usage.current_value, usage.limit


class UsageFetcherRegistry:
    """Registry of usage fetchers by category."""

    def __init__(self, credential, debug: bool = False):
        """Initialize the registry.

        Args:
            credential: Azure credential passed to every fetcher.
            debug: If True, fetchers print verbose debug information.
        """
        self.fetchers: Dict[QuotaCategory, UsageFetcher] = {
            QuotaCategory.COMPUTE: ComputeUsageFetcher(credential, debug),
            QuotaCategory.STORAGE: StorageUsageFetcher(credential, debug),
            QuotaCategory.WEBAPP: WebAppUsageFetcher(credential, debug),
        }

    def get_fetcher(self, category: QuotaCategory) -> UsageFetcher:
        """Get the fetcher for a category.

        Raises:
            KeyError: If no fetcher is registered for the category.
        """
        return self.fetchers[category]
