"""Error page helpers: where the return button leads."""

import pytest

from pages.error import back_link, error_title, symbol_from_path


class TestErrorPageLinks:

    @pytest.mark.parametrize("path, symbol", [
        ("/analysis/aapl", "AAPL"),
        ("/analysis/BRK.B/", "BRK.B"),
        ("/analysis", ""),
        ("/analysis/", ""),
        ("/error", ""),
        ("", ""),
        (None, ""),
    ])
    def test_symbol_from_path(self, path, symbol):
        assert symbol_from_path(path) == symbol

    def test_back_link_to_symbol(self):
        assert back_link(" msft ") == ("/analysis/MSFT", "Back to MSFT")

    @pytest.mark.parametrize("symbol", ["", None, "   "])
    def test_back_link_without_symbol(self, symbol):
        assert back_link(symbol) == ("/analysis", "Back to analysis")

    def test_error_title(self):
        assert error_title(500) == "The chart page failed"
        assert error_title(418) == "Something went wrong"
