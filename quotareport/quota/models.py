"""Data models for quota usage information."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

UNKNOWN_TENANT = "Unknown"


class QuotaCategory(Enum):
    """Resource category a usage record was fetched for."""
    COMPUTE = "Compute"
    STORAGE = "Storage"
    WEBAPP = "WebApp"


def usage_percentage(current_usage: int, limit: int) -> float:
    """Percentage of a limit in use, rounded to 2 decimals.

    A zero limit yields 0.0 rather than a division error.
    """
    if limit <= 0:
        return 0.0
    return round(current_usage / limit * 100, 2)


def _non_negative_int(name: str, value) -> int:
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


@dataclass
class QuotaRecord:
    """Usage of one resource type in one subscription."""
    subscription_name: str
    subscription_id: str
    location: str
    category: QuotaCategory
    resource_type: str
    current_usage: int
    limit: int

    def __post_init__(self):
        if not isinstance(self.category, QuotaCategory):
            self.category = QuotaCategory(self.category)
        _non_negative_int("current_usage", self.current_usage)
        _non_negative_int("limit", self.limit)

    @property
    def usage_percentage(self) -> float:
        return usage_percentage(self.current_usage, self.limit)


@dataclass
class SubscriptionDetail:
    """Per-subscription row shown under an aggregated summary."""
    subscription_name: str
    subscription_id: str
    current_usage: int
    limit: int

    def __post_init__(self):
        _non_negative_int("current_usage", self.current_usage)
        _non_negative_int("limit", self.limit)

    @property
    def usage_percentage(self) -> float:
        return usage_percentage(self.current_usage, self.limit)

    def to_dict(self) -> Dict:
        return {
            "subscription_name": self.subscription_name,
            "subscription_id": self.subscription_id,
            "current_usage": self.current_usage,
            "limit": self.limit,
            "usage_percentage": self.usage_percentage,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "SubscriptionDetail":
        return cls(
            subscription_name=data["subscription_name"],
            subscription_id=data["subscription_id"],
            current_usage=data["current_usage"],
            limit=data["limit"],
        )


@dataclass
class QuotaSummary:
    """Usage of one resource type summed across subscriptions."""
    resource_type: str
    category: QuotaCategory
    total_usage: int
    total_limit: int
    subscription_count: int
    subscription_details: List[SubscriptionDetail] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.category, QuotaCategory):
            self.category = QuotaCategory(self.category)
        _non_negative_int("total_usage", self.total_usage)
        _non_negative_int("total_limit", self.total_limit)
        _non_negative_int("subscription_count", self.subscription_count)

    @property
    def usage_percentage(self) -> float:
        return usage_percentage(self.total_usage, self.total_limit)

    @property
    def has_details(self) -> bool:
        return bool(self.subscription_details)

    def to_dict(self) -> Dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "resource_type": self.resource_type,
            "category": self.category.value,
            "total_usage": self.total_usage,
            "total_limit": self.total_limit,
            "usage_percentage": self.usage_percentage,
            "subscription_count": self.subscription_count,
            "subscription_details": [d.to_dict() for d in self.subscription_details],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "QuotaSummary":
        """Rebuild a summary saved with to_dict. Percentages are recomputed."""
        return cls(
            resource_type=data["resource_type"],
            category=QuotaCategory(data["category"]),
            total_usage=data["total_usage"],
            total_limit=data["total_limit"],
            subscription_count=data["subscription_count"],
            subscription_details=[SubscriptionDetail.from_dict(d) for d in data.get("subscription_details", [])],
        )


@dataclass
class RunMetadata:
    """Information about a report run shown in the report header."""
    tenant_id: str
    location: str
    generated_at: str
    subscription_count: int
    tenant_name: Optional[str] = None

    def __post_init__(self):
        if not self.tenant_name:
            self.tenant_name = UNKNOWN_TENANT
