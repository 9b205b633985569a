"""Azure client wrapper and inventory feeds."""

from .azure_client import AzureClient, SourceUnavailable
from .feeds import CommitmentFeed, InventoryFeed

__all__ = ["AzureClient", "SourceUnavailable", "InventoryFeed", "CommitmentFeed"]
