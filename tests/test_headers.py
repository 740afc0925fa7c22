"""Tests for signpost.http.headers — immutable, case-insensitive Headers."""

import pytest

from signpost._internal.multimap import MultiValueMapping
from signpost.http.headers import Headers


def _h(*pairs: tuple[str, str]) -> Headers:
    """Shorthand: build Headers from raw ASGI-style byte pairs."""
    raw = tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs)
    return Headers(raw)


class TestHeaders:
    def test_getitem(self) -> None:
        h = _h(("Content-Type", "text/html"))
        assert h["Content-Type"] == "text/html"

    def test_case_insensitive(self) -> None:
        h = _h(("Content-Type", "text/html"))
        assert h["content-type"] == "text/html"
        assert h["CONTENT-TYPE"] == "text/html"

    def test_missing_key_raises(self) -> None:
        h = _h(("Accept", "*/*"))
        with pytest.raises(KeyError):
            h["X-Missing"]

    def test_contains(self) -> None:
        h = _h(("Accept", "*/*"))
        assert "accept" in h
        assert "X-Missing" not in h
        assert 42 not in h

    def test_get_default(self) -> None:
        h = Headers()
        assert h.get("user-agent") is None
        assert h.get("user-agent", "") == ""

    def test_get_list(self) -> None:
        h = _h(("Accept", "text/html"), ("Accept", "application/json"))
        assert h.get_list("accept") == ["text/html", "application/json"]
        assert h["accept"] == "text/html"

    def test_len_counts_unique_names(self) -> None:
        h = _h(("Accept", "a"), ("accept", "b"), ("Host", "x"))
        assert len(h) == 2
        assert list(h) == ["accept", "host"]

    def test_from_mapping(self) -> None:
        h = Headers({"User-Agent": "Firefox"})
        assert h["user-agent"] == "Firefox"

    def test_from_string_pairs(self) -> None:
        h = Headers([("X-Forwarded-Proto", "https")])
        assert h["x-forwarded-proto"] == "https"

    def test_satisfies_protocol(self) -> None:
        assert isinstance(Headers(), MultiValueMapping)
