"""
Lab and exhibit numbering.

Lab numbers look like CYB/LAB/0042. Exhibits of that case are
CYB/LAB/0042/A when the case has one exhibit, and CYB/LAB/0042/A1,
CYB/LAB/0042/A2, ... when it has several.
"""

import re
from typing import Optional

LAB_PREFIX = "CYB/LAB"

_LAB_SEQUENCE = re.compile(r"LAB/(\d{4})$")


def lab_number(sequence: int) -> str:
    return f"{LAB_PREFIX}/{sequence:04d}"


def lab_sequence(lab_no: Optional[str]) -> str:
    """Four-digit sequence of a lab number, "0000" if it has none."""
    if not lab_no:
        return "0000"
    match = _LAB_SEQUENCE.search(lab_no)
    return match.group(1) if match else "0000"


def format_exhibit_number(lab_no: Optional[str], index: int, total: int) -> str:
    """Number for the exhibit at zero-based `index` among `total` exhibits."""
    suffix = "A" if total == 1 else f"A{index + 1}"
    return f"{LAB_PREFIX}/{lab_sequence(lab_no)}/{suffix}"
