"""Tests for shared contract types."""

import pytest
from pydantic import ValidationError

from airport.contracts.common import Page, PageRequest, parse_json_column


class TestPageRequest:
    def test_defaults(self):
        req = PageRequest()
        assert req.page == 1
        assert req.limit == 10
        assert req.sort_order == "asc"
        assert req.offset == 0

    def test_offset(self):
        assert PageRequest(page=3, limit=20).offset == 40

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
    def test_bounds(self, params):
        with pytest.raises(ValidationError):
            PageRequest(**params)


class TestPage:
    def test_build_middle_page(self):
        page = Page.build([1, 2], total=25, page=2, limit=10)
        assert page.total_pages == 3
        assert page.has_next is True
        assert page.has_prev is True

    def test_build_empty(self):
        page = Page.build([], total=0, page=1, limit=10)
        assert page.total_pages == 0
        assert page.has_next is False
        assert page.has_prev is False

    def test_response_uses_camel_case_navigation(self):
        body = Page.build(["a"], total=1, page=1, limit=10).to_response()
        assert body == {
            "data": ["a"],
            "total": 1,
            "page": 1,
            "limit": 10,
            "totalPages": 1,
            "hasNext": False,
            "hasPrev": False,
        }


class TestParseJsonColumn:
    def test_decodes_text(self):
        assert parse_json_column('{"flights": ["read"]}') == {"flights": ["read"]}

    def test_passes_through(self):
        assert parse_json_column({"a": 1}) == {"a": 1}
        assert parse_json_column("") is None
        assert parse_json_column(None) is None
