"""Integration tests for opening, showing and listing stock documents."""

import pytest

from marketstock.application.list_upcoming_stock import ListUpcomingStockHandler
from marketstock.application.open_stock import OpenStockHandler
from marketstock.application.show_stock import ShowStockHandler
from marketstock.domain.exceptions import EntityNotFoundError, ValidationError
from tests.fakes import FakeStockRepository, make_document, make_line


class TestOpenStock:

    def test_find_or_create_is_idempotent(self):
        repo = FakeStockRepository()
        handler = OpenStockHandler(repo)
        first = handler.handle("LC-1", "2026-10-20", "morning", created_by_id="u-1")
        second = handler.handle("LC-1", "2026-10-20", "morning")
        assert first.id == second.id
        assert first.lines == []

    def test_different_shift_different_document(self):
        handler = OpenStockHandler(FakeStockRepository())
        a = handler.handle("LC-1", "2026-10-20", "morning")
        b = handler.handle("LC-1", "2026-10-20", "evening")
        assert a.id != b.id


class TestShowStock:

    def test_show_by_id_and_key(self):
        doc = make_document(make_line(), center="LC-2", day="2026-10-22", shift="night")
        handler = ShowStockHandler(FakeStockRepository([doc]))
        assert handler.handle(doc.id).shift == "night"
        assert handler.handle_by_key("LC-2", "2026-10-22", "night").id == doc.id

    def test_missing(self):
        handler = ShowStockHandler(FakeStockRepository())
        with pytest.raises(EntityNotFoundError):
            handler.handle("missing")
        with pytest.raises(EntityNotFoundError):
            handler.handle_by_key("LC-1", "2026-10-20", "morning")


class TestListUpcoming:

    def _repo(self):
        docs = [
            make_document(make_line(), day="2026-10-21", shift="morning"),
            make_document(day="2026-10-20", shift="night"),
            make_document(make_line(), day="2026-10-20", shift="afternoon"),
            make_document(make_line(), day="2026-10-19", shift="morning"),
            make_document(make_line(), center="LC-9", day="2026-10-20", shift="morning"),
        ]
        return FakeStockRepository(docs)

    def test_ordered_by_date_then_shift(self):
        handler = ListUpcomingStockHandler(self._repo())
        listed = handler.handle("LC-1", from_date="2026-10-20")
        assert [(d.date, d.shift) for d in listed] == [
            ("2026-10-20", "afternoon"),
            ("2026-10-20", "night"),
            ("2026-10-21", "morning"),
        ]

    def test_count_limits_results(self):
        handler = ListUpcomingStockHandler(self._repo(), default_count=1)
        assert len(handler.handle("LC-1", from_date="2026-10-19")) == 1
        assert len(handler.handle("LC-1", from_date="2026-10-19", count=3)) == 3

    def test_count_must_be_positive(self):
        handler = ListUpcomingStockHandler(self._repo())
        with pytest.raises(ValidationError):
            handler.handle("LC-1", count=0)

    def test_shifts_with_stock_keeps_input_order(self):
        handler = ListUpcomingStockHandler(self._repo())
        slots = [
            ("2026-10-21", "morning"),
            ("2026-10-20", "night"),       # document without lines
            ("2026-10-20", "evening"),     # no document
            ("2026-10-20", "afternoon"),
        ]
        result = handler.shifts_with_stock("LC-1", slots)
        assert [(s.date, s.shift) for s in result] == [
            ("2026-10-21", "morning"),
            ("2026-10-20", "afternoon"),
        ]
        assert all(s.document_id for s in result)
