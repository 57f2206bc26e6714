"""Utility functions for TAC simulation.

Contains sorting helpers and well address parsing.
"""

import re
from typing import Tuple

_WELL_PATTERN = re.compile(r"^([A-Za-z]+)(\d+)$")


def natural_sort_key(sample_name):
    """Extract numbers from sample name for natural sorting (e.g., HH2 < HH10)"""
    parts = re.split(r"(\d+)", str(sample_name))
    return [int(part) if part.isdigit() else part.lower() for part in parts]


def split_well(well: str) -> Tuple[str, int]:
    """Split a well address into (row letters, column number).

    Args:
        well: Address such as "B7".

    Returns:
        Tuple such as ("B", 7).

    Raises:
        ValueError: if the address is not letters followed by digits.
    """
    match = _WELL_PATTERN.match(str(well).strip())
    if not match:
        raise ValueError(f"Invalid well address: {well!r}")
    return match.group(1).upper(), int(match.group(2))
