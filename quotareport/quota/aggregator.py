"""Aggregation of per-subscription usage records into summaries."""
from typing import Dict, Iterable, List, Optional, Sequence

from .models import QuotaCategory, QuotaRecord, QuotaSummary, SubscriptionDetail


def aggregate(records: Iterable[QuotaRecord]) -> List[QuotaSummary]:
    """Group records by resource type and sum their usage.

    Grouping is on the exact resource type string, so names differing only
    in case form separate groups.

    Args:
        records: Usage records from any number of subscriptions.

    Returns:
        List[QuotaSummary]: Summaries ordered by usage percentage, highest
        first. Ties keep the order in which resource types were first seen.
    """
    groups: Dict[str, List[QuotaRecord]] = {}
    for record in records:
        groups.setdefault(record.resource_type, []).append(record)

    summaries = []
    for resource_type, group in groups.items():
        details = [
            SubscriptionDetail(
                subscription_name=r.subscription_name,
                subscription_id=r.subscription_id,
                current_usage=r.current_usage,
                limit=r.limit,
            )
            for r in group
            if r.current_usage > 0 or r.limit > 0
        ]
        # sorted() is stable, equal usage keeps record order
        details = sorted(details, key=lambda d: d.current_usage, reverse=True)

        summaries.append(QuotaSummary(
            resource_type=resource_type,
            category=group[0].category,
            total_usage=sum(r.current_usage for r in group),
            total_limit=sum(r.limit for r in group),
            subscription_count=len(group),
            subscription_details=details,
        ))

    return sorted(summaries, key=lambda s: s.usage_percentage, reverse=True)


def aggregate_by_category(
    records: Iterable[QuotaRecord],
    categories: Optional[Sequence[QuotaCategory]] = None,
) -> Dict[str, List[QuotaSummary]]:
    """Aggregate records separately for each category.

    Args:
        records: Usage records of any category.
        categories: Categories to include. Defaults to all of them. Every
            requested category gets an entry, even when it has no records.

    Returns:
        Dict[str, List[QuotaSummary]]: Summaries keyed by category label.
    """
    categories = list(categories) if categories else list(QuotaCategory)
    partitions: Dict[QuotaCategory, List[QuotaRecord]] = {c: [] for c in categories}
    for record in records:
        if record.category in partitions:
            partitions[record.category].append(record)
    return {c.value: aggregate(partitions[c]) for c in QuotaCategory if c in partitions}
