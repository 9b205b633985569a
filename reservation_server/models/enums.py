# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Enumerations for reservation scope and analysis status."""

from enum import Enum


class ScopeKind(str, Enum):
    """Applied scope type of an Azure reservation."""

    SHARED = "Shared"
    SINGLE = "Single"
    MANAGEMENT_GROUP = "ManagementGroup"


class ReservationStatus(str, Enum):
    """Classification of a (vmSize, location) bucket."""

    PERFECT_MATCH = "Perfect Match"
    UNDER_RESERVED = "Under-reserved"
    OVER_RESERVED = "Over-reserved"
    NEEDS_INVESTIGATION = "Needs Investigation"


SUCCEEDED_STATE = "Succeeded"
