"""
Scorecard grid operations.

A scorecard is a jagged grid: one row per challenge week, seven cells
per full week and a shorter final row when the challenge length is not
a multiple of seven. Cell (week, day) covers challenge day week * 7 + day.
"""

from typing import List, Tuple

DAYS_PER_WEEK = 7

Scorecard = List[List[int]]


def generate_scorecard(length: int) -> Scorecard:
    """
    Build an empty scorecard for a challenge of the given length in days.

    Args:
        length: Challenge length in days

    Returns:
        Grid of zeros, full weeks followed by the partial week (if any)
    """
    if length <= 0:
        return []

    full_weeks, remainder = divmod(length, DAYS_PER_WEEK)
    scorecard = [[0] * DAYS_PER_WEEK for _ in range(full_weeks)]
    if remainder:
        scorecard.append([0] * remainder)
    return scorecard


def normalize_scorecard(
    scorecard: Scorecard,
    current_day: int,
    challenge_length: int,
) -> Tuple[Scorecard, int]:
    """
    Fit a submitted scorecard to the challenge grid and tally its points.

    The result always has the shape of generate_scorecard(challenge_length):
    cells outside the challenge window are dropped and missing cells are
    unchecked. Cells for days after current_day are forced to 0. Every
    other cell becomes 1 if its value is positive, else 0.

    Args:
        scorecard: Grid submitted by the client
        current_day: Zero-based index of today within the challenge
        challenge_length: Challenge length in days

    Returns:
        (normalized grid, points)
    """
    normalized = generate_scorecard(challenge_length)
    points = 0

    for week_index, row in enumerate(normalized):
        submitted = scorecard[week_index] if week_index < len(scorecard) else []
        if not isinstance(submitted, list):
            submitted = []
        for day_index in range(min(len(row), len(submitted))):
            day = week_index * DAYS_PER_WEEK + day_index
            if day <= current_day and _is_positive(submitted[day_index]):
                row[day_index] = 1
                points += 1

    return normalized, points


def compute_points(scorecard: Scorecard) -> int:
    """Count checked cells in an already-normalized scorecard."""
    return sum(1 for week in scorecard for value in week if _is_positive(value))


def _is_positive(value) -> bool:
    try:
        return value is not None and value > 0
    except TypeError:
        return False
