"""
Tests for answer text formatting helpers.
"""

from datetime import datetime

from clientqa.utils.formatting import display, format_date, format_money


class TestFormatting:
    """Money, date and placeholder rendering."""

    def test_format_money(self):
        assert format_money(150000) == "$150,000"
        assert format_money(0) == "$0"
        assert format_money(None) == "N/A"

    def test_format_date(self):
        assert format_date(datetime(2025, 7, 28, 10, 0)) == "7/28/2025"
        assert format_date(None) == "N/A"

    def test_display(self):
        assert display("Finance") == "Finance"
        assert display("") == "N/A"
        assert display(None) == "N/A"
        assert display(0) == "0"
