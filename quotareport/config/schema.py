"""Pydantic models for report configuration."""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..quota.models import QuotaCategory


class SubscriptionFilter(BaseModel):
    """Subscriptions to include or exclude, by ID or display name."""
    include: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)

    def allows(self, subscription_id: str, display_name: str) -> bool:
        """Check whether a subscription should be scanned."""
        keys = {subscription_id, display_name}
        if self.include and not keys & set(self.include):
            return False
        return not keys & set(self.exclude)


class ReportConfig(BaseModel):
    """Root configuration schema."""
    model_config = ConfigDict(populate_by_name=True)

    location: str = "eastus"
    output: str = "quota-report.html"
    json_output: Optional[str] = Field(default=None, alias='jsonOutput')
    categories: List[QuotaCategory] = Field(default_factory=lambda: list(QuotaCategory))
    tenant_name: Optional[str] = Field(default=None, alias='tenantName')
    subscriptions: SubscriptionFilter = Field(default_factory=SubscriptionFilter)
