"""
Prize distribution parsing and payout computation
"""

from typing import List

from tourneyhub.core.errors import InvalidInput


def parse_distribution(value: str) -> List[int]:
    """
    Parse a distribution string such as "60-30-10".

    Args:
        value: Dash-separated non-negative integer percentages

    Returns:
        List of percentages, one per winning position

    Raises:
        InvalidInput: if the string is empty, has a non-integer part, or
            all parts are zero
    """
    if not value or not value.strip():
        raise InvalidInput("Prize distribution is required")

    parts = [part.strip() for part in value.strip().split("-")]
    if any(not part.isdigit() for part in parts):
        raise InvalidInput(f"Invalid prize distribution: {value}")

    percentages = [int(part) for part in parts]
    if sum(percentages) <= 0:
        raise InvalidInput(f"Invalid prize distribution: {value}")
    return percentages


def compute_prizes(prize_locked: int, percentages: List[int]) -> List[int]:
    """
    Split the locked prize by the given percentages.

    Each amount is floor(prize_locked * p / sum(percentages)); any rounding
    remainder stays in escrow.
    """
    total = sum(percentages)
    return [prize_locked * p // total for p in percentages]
