"""
Tests for German calendar helpers.
"""

from datetime import date

from src.menubot.calendar_de import day_name, week_number


class TestCalendar:
    def test_day_names(self):
        assert day_name(date(2024, 10, 14)) == "Montag"
        assert day_name(date(2024, 10, 18)) == "Freitag"
        assert day_name(date(2024, 10, 20)) == "Sonntag"

    def test_week_number(self):
        assert week_number(date(2024, 10, 14)) == 42
        assert week_number(date(2024, 10, 20)) == 42

    def test_week_number_at_year_boundary(self):
        """Test that early January days can belong to the previous year's last week."""
        assert week_number(date(2021, 1, 3)) == 53
        assert week_number(date(2024, 12, 30)) == 1
