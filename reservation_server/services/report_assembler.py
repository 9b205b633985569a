# Copyright (c) 2025 OptimNow - Jean Latiere. All Rights Reserved.
# Licensed under the Proprietary Software License.
# See LICENSE file in the project root for full license information.

"""Final ordering of analysis rows."""

from typing import Iterable

from ..models.analysis import AnalysisRow


def assemble_report(rows: Iterable[AnalysisRow], sort: bool = True) -> list[AnalysisRow]:
    """
    Return the rows handed to the presentation layer.

    Args:
        rows: Rows from reconcile()
        sort: Order by (location, size_class) for stable display

    Returns:
        List of rows, sorted when requested
    """
    if sort:
        return sorted(rows, key=lambda row: (row.location, row.size_class))
    return list(rows)
