# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Inventory and reservation record models."""

from typing import NamedTuple, Optional

from pydantic import BaseModel, Field


class GroupKey(NamedTuple):
    """Bucket identity shared by VMs and reservations."""

    size_class: str
    location: str


class ResourceRecord(BaseModel):
    """A running virtual machine as reported by the compute API."""

    resource_id: Optional[str] = Field(None, description="ARM id of the VM")
    name: Optional[str] = Field(None, description="VM name")
    size_class: Optional[str] = Field(
        None, description="hardwareProfile.vmSize (e.g., Standard_D2s_v3)"
    )
    location: Optional[str] = Field(None, description="Azure region (e.g., eastus)")


class CommitmentRecord(BaseModel):
    """A reservation taken from a reservation order."""

    reservation_id: Optional[str] = Field(None, description="ARM id of the reservation")
    order_id: Optional[str] = Field(None, description="Parent reservation order id")
    display_name: Optional[str] = Field(None, description="Reservation display name")
    size_class: Optional[str] = Field(
        None, description="Purchased SKU name, matching the VM size family"
    )
    location: Optional[str] = Field(None, description="Reservation region")
    quantity: Optional[int] = Field(None, description="Number of reserved instances")
    scope_kind: Optional[str] = Field(
        None, description="appliedScopeType: Shared, Single or ManagementGroup"
    )
    target_scopes: list[str] = Field(
        default_factory=list,
        description="Explicit scopes the reservation applies to"
    )
    state: Optional[str] = Field(None, description="Provisioning state")
    reserved_resource_type: Optional[str] = Field(
        None, description="Reserved resource type (e.g., VirtualMachines)"
    )
