"""Unit tests for URL helpers."""

import pytest

from bestregi.server.mvc.urls import is_local_url


class TestIsLocalUrl:
    @pytest.mark.parametrize(
        "url,expected",
        [
            ("/", True),
            ("/Home/Privacy", True),
            ("~/css/site.css", True),
            ("//evil.example", False),
            ("/\\evil.example", False),
            ("https://evil.example", False),
            ("Home", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_local_url(self, url, expected):
        assert is_local_url(url) is expected
