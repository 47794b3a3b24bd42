"""Unit tests for scorecard grid operations."""

from nhc.services.registration.scorecard import (
    compute_points,
    generate_scorecard,
    normalize_scorecard,
)


# ─────────────────────────────────────────────────────────────────
# generate_scorecard
# ─────────────────────────────────────────────────────────────────


class TestGenerateScorecard:
    def test_whole_weeks_have_no_partial_row(self):
        scorecard = generate_scorecard(28)
        assert len(scorecard) == 4
        assert all(week == [0] * 7 for week in scorecard)

    def test_partial_week_appended(self):
        scorecard = generate_scorecard(29)
        assert len(scorecard) == 5
        assert scorecard[-1] == [0]

    def test_short_challenge(self):
        assert generate_scorecard(3) == [[0, 0, 0]]

    def test_non_positive_length_is_empty(self):
        assert generate_scorecard(0) == []
        assert generate_scorecard(-5) == []


# ─────────────────────────────────────────────────────────────────
# normalize_scorecard
# ─────────────────────────────────────────────────────────────────


class TestNormalizeScorecard:
    def test_future_days_are_zeroed(self):
        grid = [[1] * 7, [1] * 7]
        normalized, points = normalize_scorecard(grid, current_day=8, challenge_length=14)
        assert normalized[0] == [1] * 7
        assert normalized[1] == [1, 1, 0, 0, 0, 0, 0]
        assert points == 9

    def test_values_clamped_to_zero_or_one(self):
        grid = [[5, -3, 0, 1, 2, 0, 0]]
        normalized, points = normalize_scorecard(grid, current_day=6, challenge_length=7)
        assert normalized == [[1, 0, 0, 1, 1, 0, 0]]
        assert points == 3

    def test_before_challenge_start_everything_is_zero(self):
        grid = [[1] * 7]
        normalized, points = normalize_scorecard(grid, current_day=-1, challenge_length=7)
        assert normalized == [[0] * 7]
        assert points == 0

    def test_keeps_jagged_shape(self):
        grid = [[1] * 7, [1]]
        normalized, points = normalize_scorecard(grid, current_day=100, challenge_length=8)
        assert normalized == [[1] * 7, [1]]
        assert points == 8

    def test_non_numeric_cells_count_as_unchecked(self):
        normalized, points = normalize_scorecard([[None, "x", 1]], current_day=10, challenge_length=3)
        assert normalized == [[0, 0, 1]]
        assert points == 1

    def test_long_row_is_cut_to_seven_days(self):
        normalized, points = normalize_scorecard([[1] * 300], current_day=400, challenge_length=29)
        assert normalized == [[1] * 7, [0] * 7, [0] * 7, [0] * 7, [0]]
        assert points == 7

    def test_extra_weeks_are_dropped(self):
        grid = [[1] * 7 for _ in range(10)]
        normalized, points = normalize_scorecard(grid, current_day=400, challenge_length=29)
        assert normalized == [[1] * 7, [1] * 7, [1] * 7, [1] * 7, [1]]
        assert points == 29

    def test_partial_week_row_is_cut_to_remaining_days(self):
        grid = [[1] * 7 for _ in range(4)] + [[1] * 7]
        normalized, points = normalize_scorecard(grid, current_day=400, challenge_length=29)
        assert normalized[-1] == [1]
        assert points == 29

    def test_missing_weeks_are_unchecked(self):
        normalized, points = normalize_scorecard([[1] * 7], current_day=400, challenge_length=14)
        assert normalized == [[1] * 7, [0] * 7]
        assert points == 7

    def test_non_list_rows_are_ignored(self):
        normalized, points = normalize_scorecard([5, [1, 1]], current_day=400, challenge_length=14)
        assert normalized == [[0] * 7, [1, 1, 0, 0, 0, 0, 0]]
        assert points == 2


class TestComputePoints:
    def test_counts_checked_cells(self):
        assert compute_points([[1, 0, 1], [1]]) == 3

    def test_empty(self):
        assert compute_points([]) == 0
