"""Unit tests for adoption report form handling."""

import pytest

from conductor.core.errors import ConductorError
from conductor.server.services.adoption_reports import parse_count


class TestParseCount:
    @pytest.mark.parametrize("value, expected", [(None, None), ("", None), ("  ", None), ("12", 12), (7, 7)])
    def test_valid_counts(self, value, expected):
        assert parse_count(value) == expected

    @pytest.mark.parametrize("value", [True, "twelve", "1.5"])
    def test_invalid_counts(self, value):
        with pytest.raises(ConductorError) as exc_info:
            parse_count(value)
        assert exc_info.value.code == "err1"
