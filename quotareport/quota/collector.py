"""Quota usage collection across subscriptions."""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from azure.core.exceptions import ClientAuthenticationError
from azure.identity import DefaultAzureCredential
from azure.mgmt.subscription import SubscriptionClient
from rich.console import Console

from .aggregator import aggregate_by_category
from .errors import AuthenticationFailure, PerSubscriptionFetchFailure, SubscriptionEnumerationFailure
from .models import QuotaRecord, QuotaSummary, RunMetadata
from .providers import ARM_SCOPE, UsageFetcherRegistry
from ..config.schema import ReportConfig
from ..report.renderer import ReportRenderer

console = Console()


@dataclass
class Subscription:
    """Subscription selected for scanning."""
    subscription_id: str
    display_name: str
    tenant_id: Optional[str] = None


@dataclass
class CollectionResult:
    """Records gathered in one run, with the failures that were skipped."""
    records: List[QuotaRecord]
    metadata: RunMetadata
    failures: List[PerSubscriptionFetchFailure] = field(default_factory=list)


class QuotaCollector:
    """Collects quota usage for every subscription and writes the report."""

    def __init__(self, config: ReportConfig, credential=None, debug: bool = False):
        """Initialize the collector.

        Args:
            config: Report configuration.
            credential: Azure credential. Defaults to DefaultAzureCredential.
            debug: If True, print verbose debug information.
        """
        self.config = config
        self.credential = credential or DefaultAzureCredential()
        self.debug = debug
        self.fetcher_registry = UsageFetcherRegistry(self.credential, debug=debug)

    def authenticate(self) -> None:
        """Verify the credential can acquire a management token.

        Raises:
            AuthenticationFailure: If no token could be acquired.
        """
        try:
            self.credential.get_token(ARM_SCOPE)
        except ClientAuthenticationError as e:
            raise AuthenticationFailure(f"Azure authentication failed: {e}") from e

        if self.debug:
            console.print("Debug: Acquired Azure management token")

    def list_subscriptions(self, client: SubscriptionClient) -> List[Subscription]:
        """List enabled subscriptions allowed by the configured filter.

        Raises:
            SubscriptionEnumerationFailure: If listing fails or nothing is left to scan.
        """
        try:
            available = list(client.subscriptions.list())
        except Exception as e:
            raise SubscriptionEnumerationFailure(f"Failed to list subscriptions: {e}") from e

        subscriptions = []
        for sub in available:
            state = str(getattr(sub.state, "value", sub.state) or "")
            if state and state.lower() != "enabled":
                if self.debug:
                    console.print(f"Debug: Skipping {sub.display_name} in state {state}")
                continue
            if not self.config.subscriptions.allows(sub.subscription_id, sub.display_name):
                if self.debug:
                    console.print(f"Debug: Skipping {sub.display_name} (filtered)")
                continue
            subscriptions.append(Subscription(sub.subscription_id, sub.display_name, sub.tenant_id))

        if not subscriptions:
            raise SubscriptionEnumerationFailure("No enabled subscriptions available to scan")
        return subscriptions

    def get_tenant(self, client: SubscriptionClient, tenant_id: Optional[str]) -> Tuple[str, Optional[str]]:
        """Look up the tenant ID and display name.

        The name falls back to the configured override, and is None when
        neither is available. Lookup failures never abort the run.
        """
        tenant_name = self.config.tenant_name
        try:
            for tenant in client.tenants.list():
                if tenant_id is None or tenant.tenant_id == tenant_id:
                    tenant_id = tenant.tenant_id
                    tenant_name = tenant_name or getattr(tenant, "display_name", None)
                    break
        except Exception as e:
            console.print(f"[yellow]Warning: Could not look up tenant details: {e}[/yellow]")
        return tenant_id or "", tenant_name

    def collect(self) -> CollectionResult:
        """Fetch usage records for every subscription and category.

        Returns:
            CollectionResult: All records that were fetched successfully.

        Raises:
            AuthenticationFailure: If authentication fails.
            SubscriptionEnumerationFailure: If no subscriptions can be scanned.
        """
        self.authenticate()

        client = SubscriptionClient(self.credential)
        subscriptions = self.list_subscriptions(client)
        tenant_id, tenant_name = self.get_tenant(client, subscriptions[0].tenant_id)
        console.print(f"[blue]Scanning {len(subscriptions)} subscription(s) in {self.config.location}...[/blue]")

        records: List[QuotaRecord] = []
        failures: List[PerSubscriptionFetchFailure] = []
        for subscription in subscriptions:
            console.print(f"[cyan]Subscription: {subscription.display_name} ({subscription.subscription_id})[/cyan]")
            for category in self.config.categories:
                fetcher = self.fetcher_registry.get_fetcher(category)
                try:
                    records.extend(fetcher.fetch(
                        subscription.subscription_id,
                        subscription.display_name,
                        self.config.location,
                    ))
                except Exception as e:
                    failure = PerSubscriptionFetchFailure(
                        subscription.display_name, subscription.subscription_id, category.value, e
                    )
                    failures.append(failure)
                    console.print(f"[yellow]Warning: {failure}[/yellow]")

        metadata = RunMetadata(
            tenant_id=tenant_id,
            tenant_name=tenant_name,
            location=self.config.location,
            generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC"),
            subscription_count=len(subscriptions),
        )
        return CollectionResult(records, metadata, failures)

    def generate_report(self) -> Tuple[CollectionResult, Dict[str, List[QuotaSummary]]]:
        """Collect usage, aggregate it and write the configured outputs.

        Returns:
            Tuple[CollectionResult, Dict[str, List[QuotaSummary]]]: The collected
            records and the summaries by category label.
        """
        result = self.collect()
        summaries = aggregate_by_category(result.records, self.config.categories)

        path = ReportRenderer().write(self.config.output, summaries, result.metadata)
        console.print(f"[green]Quota report saved to {path}[/green]")

        if self.config.json_output:
            save_summaries(self.config.json_output, summaries, result.metadata)
            console.print(f"[green]Quota summaries saved to {self.config.json_output}[/green]")

        return result, summaries


def save_summaries(output_path: str, summaries: Dict[str, List[QuotaSummary]], metadata: RunMetadata) -> None:
    """Save summaries to a JSON file.

    Args:
        output_path: Path to write the JSON file.
        summaries: Summaries keyed by category label.
        metadata: Run information.
    """
    result = {
        "tenant_id": metadata.tenant_id,
        "tenant_name": metadata.tenant_name,
        "location": metadata.location,
        "generated_at": metadata.generated_at,
        "subscription_count": metadata.subscription_count,
        "categories": {
            label: [summary.to_dict() for summary in category_summaries]
            for label, category_summaries in summaries.items()
        }
    }

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(result, f, indent=2)


def load_summaries(input_path: str) -> Tuple[Dict[str, List[QuotaSummary]], RunMetadata]:
    """Load summaries saved with save_summaries.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        json.JSONDecodeError: If the file is not valid JSON.
        KeyError: If a required field is missing.
    """
    with open(input_path, 'r') as f:
        data = json.load(f)

    metadata = RunMetadata(
        tenant_id=data["tenant_id"],
        tenant_name=data.get("tenant_name"),
        location=data["location"],
        generated_at=data["generated_at"],
        subscription_count=data["subscription_count"],
    )
    summaries = {
        label: [QuotaSummary.from_dict(item) for item in items]
        for label, items in data.get("categories", {}).items()
    }
    return summaries, metadata
