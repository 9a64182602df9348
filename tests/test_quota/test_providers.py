"""Tests for category usage fetchers."""
import pytest
from unittest.mock import patch, MagicMock
from azure.core.exceptions import HttpResponseError
from quotareport.quota.models import QuotaCategory
from quotareport.quota.providers import (
    ComputeUsageFetcher, StorageUsageFetcher, UsageFetcherRegistry, WebAppUsageFetcher
)

def sdk_usage(value, localized, current, limit):
    usage = MagicMock()
    usage.name.value = value
    usage.name.localized_value = localized
    usage.current_value = current
    usage.limit = limit
    return usage

@pytest.fixture
def credential():
    credential = MagicMock()
    credential.get_token.return_value.token = "test-token"
    return credential

class TestComputeUsageFetcher:
    def test_fetch_records(self, credential):
        """Test compute usages become records named by display name."""
        with patch('azure.mgmt.compute.ComputeManagementClient') as mock_client_class:
            mock_client = mock_client_class.return_value
            mock_client.usage.list.return_value = [
                sdk_usage("standardDSv5Family", "Standard DSv5 Family vCPUs", 12, 100),
                sdk_usage("cores", None, 20, 350),
            ]

            records = ComputeUsageFetcher(credential).fetch("sub-id", "Production", "eastus")

            mock_client_class.assert_called_once_with(credential, "sub-id")
            mock_client.usage.list.assert_called_once_with("eastus")
            assert len(records) == 2
            assert records[0].resource_type == "Standard DSv5 Family vCPUs"
            assert records[0].category is QuotaCategory.COMPUTE
            assert records[0].subscription_name == "Production"
            assert records[0].subscription_id == "sub-id"
            assert records[0].location == "eastus"
            assert records[0].current_usage == 12
            assert records[0].limit == 100
            # Falls back to the raw name without a display name
            assert records[1].resource_type == "cores"

    def test_skips_incomplete_usages(self, credential):
        """Test usages with missing values are skipped."""
        with patch('azure.mgmt.compute.ComputeManagementClient') as mock_client_class:
            mock_client_class.return_value.usage.list.return_value = [
                sdk_usage("a", "A", None, 10),
                sdk_usage("b", "B", 1, None),
                sdk_usage("c", "C", "n/a", 10),
                sdk_usage("d", "D", 3, 10),
            ]

            records = ComputeUsageFetcher(credential).fetch("sub-id", "Production", "eastus")

            assert [r.resource_type for r in records] == ["D"]

    def test_negative_values_clamped(self, credential):
        """Test unlimited quotas reported as -1 count as zero."""
        with patch('azure.mgmt.compute.ComputeManagementClient') as mock_client_class:
            mock_client_class.return_value.usage.list.return_value = [
                sdk_usage("x", "X", 4, -1),
            ]

            records = ComputeUsageFetcher(credential).fetch("sub-id", "Production", "eastus")

            assert records[0].limit == 0
            assert records[0].usage_percentage == 0.0

    def test_infinite_values_skipped(self, credential):
        """Test a non-finite value skips only that usage."""
        with patch('azure.mgmt.compute.ComputeManagementClient') as mock_client_class:
            mock_client_class.return_value.usage.list.return_value = [
                sdk_usage("a", "A", float("inf"), 10),
                sdk_usage("b", "B", 1, "inf"),
                sdk_usage("c", "C", 3, 10),
            ]

            records = ComputeUsageFetcher(credential).fetch("sub-id", "Production", "eastus")

            assert [r.resource_type for r in records] == ["C"]

class TestStorageUsageFetcher:
    def test_fetch_records(self, credential):
        """Test storage usages are listed by location."""
        with patch('azure.mgmt.storage.StorageManagementClient') as mock_client_class:
            mock_client = mock_client_class.return_value
            mock_client.usages.list_by_location.return_value = [
                sdk_usage("StorageAccounts", "Storage Accounts", 7, 250),
            ]

            records = StorageUsageFetcher(credential).fetch("sub-id", "Production", "westeurope")

            mock_client.usages.list_by_location.assert_called_once_with("westeurope")
            assert len(records) == 1
            assert records[0].category is QuotaCategory.STORAGE
            assert records[0].resource_type == "Storage Accounts"
            assert records[0].usage_percentage == 2.8

class TestWebAppUsageFetcher:
    def test_fetch_records(self, credential):
        """Test App Service usages are listed by location."""
        with patch('azure.mgmt.web.WebSiteManagementClient') as mock_client_class:
            mock_client = mock_client_class.return_value
            mock_client.get_usages_in_location.list.return_value = [
                sdk_usage("Cores", "App Service Cores", 4, 10),
                sdk_usage("ServerFarms", None, 2, 100),
            ]

            records = WebAppUsageFetcher(credential).fetch("sub-id", "Production", "eastus")

            mock_client_class.assert_called_once_with(credential, "sub-id")
            mock_client.get_usages_in_location.list.assert_called_once_with("eastus")
            assert [r.resource_type for r in records] == ["App Service Cores", "ServerFarms"]
            assert all(r.category is QuotaCategory.WEBAPP for r in records)
            assert records[0].usage_percentage == 40.0

    def test_client_error_propagates(self, credential):
        """Test API failures are raised to the caller."""
        with patch('azure.mgmt.web.WebSiteManagementClient') as mock_client_class:
            mock_client_class.return_value.get_usages_in_location.list.side_effect = HttpResponseError("403 Forbidden")

            with pytest.raises(HttpResponseError):
                WebAppUsageFetcher(credential).fetch("sub-id", "Production", "eastus")

def test_registry_has_every_category(credential):
    """Test each category has a fetcher of the right type."""
    registry = UsageFetcherRegistry(credential)
    for category in QuotaCategory:
        assert registry.get_fetcher(category).category is category
    assert isinstance(registry.get_fetcher(QuotaCategory.WEBAPP), WebAppUsageFetcher)
