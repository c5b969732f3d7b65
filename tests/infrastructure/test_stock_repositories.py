"""Contract tests run against both concrete stock stores (JSON file and SQL)."""

import threading
from datetime import date

import pytest

from marketstock.domain.exceptions import (
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from marketstock.domain.model.stock import LineStatus, StockKey
from marketstock.domain.model.value_objects import KilogramDelta, Money
from marketstock.domain.service.stock_quantity_adjuster import StockQuantityAdjuster
from marketstock.infrastructure.persistence.database import make_engine
from marketstock.infrastructure.persistence.json_stock_repository import (
    JsonStockRepository,
)
from marketstock.infrastructure.persistence.sql_stock_repository import (
    SqlStockRepository,
)
from tests.fakes import make_line

KEY = StockKey.of("LC-1", "2026-10-20", "morning")


@pytest.fixture(params=["json", "sql"])
def repo(request, tmp_path):
    if request.param == "json":
        yield JsonStockRepository(tmp_path / "stock.json")
    else:
        engine = make_engine(f"sqlite:///{tmp_path / 'stock.db'}")
        yield SqlStockRepository(engine)
        engine.dispose()


def _seed(repo, original=10.0, current=None):
    doc = repo.find_or_create(KEY, created_by_id="u-1")
    line = repo.add_line(doc.id, make_line(original=original, current=current))
    return doc.id, line.id


def _available(repo, doc_id, line_id):
    return repo.get_by_id(doc_id).get_line(line_id).current_available_quantity_kg


class TestDocuments:

    def test_find_or_create_returns_same_document(self, repo):
        first = repo.find_or_create(KEY, created_by_id="u-1")
        second = repo.find_or_create(StockKey.of("LC-1", "2026-10-20", "morning"))
        assert first.id == second.id
        assert second.created_by_id == "u-1"
        assert repo.get_by_key(KEY).id == first.id

    def test_get_missing(self, repo):
        assert repo.get_by_id("missing") is None
        assert repo.get_by_key(KEY) is None

    def test_round_trip_of_line_fields(self, repo):
        doc_id, line_id = _seed(repo, original=12.5, current=7.25)
        line = repo.get_by_id(doc_id).get_line(line_id)
        assert line.display_name == "Tomatoes"
        assert line.price_per_unit == Money.of("3.60")
        assert line.original_committed_quantity_kg == 12.5
        assert line.current_available_quantity_kg == 7.25
        assert line.status is LineStatus.ACTIVE
        assert line.farm_name == "Green Valley"

    def test_created_at_is_utc_aware(self, repo):
        doc = repo.find_or_create(KEY)
        assert repo.get_by_id(doc.id).created_at.tzinfo is not None

    def test_list_upcoming(self, repo):
        for day, shift in [("2026-10-21", "morning"), ("2026-10-20", "night"),
                           ("2026-10-20", "afternoon"), ("2026-10-18", "morning")]:
            repo.find_or_create(StockKey.of("LC-1", day, shift))
        repo.find_or_create(StockKey.of("LC-2", "2026-10-20", "morning"))

        listed = repo.list_upcoming("LC-1", date(2026, 10, 20), 2)
        assert [(d.key.available_date.day, d.key.shift.value) for d in listed] == [
            (20, "afternoon"),
            (20, "night"),
        ]

    def test_add_line_to_missing_document(self, repo):
        with pytest.raises(EntityNotFoundError):
            repo.add_line("missing", make_line())


class TestLineEdits:

    def test_lines_keep_order(self, repo):
        doc = repo.find_or_create(KEY)
        ids = [repo.add_line(doc.id, make_line(name=n)).id for n in ("A", "B", "C")]
        assert [line.id for line in repo.get_by_id(doc.id).lines] == ids

    def test_remove_line(self, repo):
        doc_id, line_id = _seed(repo)
        repo.remove_line(doc_id, line_id)
        assert repo.get_by_id(doc_id).lines == []
        with pytest.raises(EntityNotFoundError):
            repo.remove_line(doc_id, line_id)

    def test_update_line_quantity_and_status(self, repo):
        doc_id, line_id = _seed(repo)
        line = repo.update_line(doc_id, line_id, quantity_kg=4, status=LineStatus.SOLDOUT)
        assert line.current_available_quantity_kg == 4
        assert line.status is LineStatus.SOLDOUT
        assert _available(repo, doc_id, line_id) == 4

    def test_update_line_bounded_by_original(self, repo):
        doc_id, line_id = _seed(repo)
        with pytest.raises(ValidationError, match="Exceeds original"):
            repo.update_line(doc_id, line_id, quantity_kg=11)
        assert _available(repo, doc_id, line_id) == 10

    def test_update_unknown_line(self, repo):
        doc_id, _ = _seed(repo)
        with pytest.raises(EntityNotFoundError):
            repo.update_line(doc_id, "missing", status=LineStatus.REMOVED)

    def test_mark_soldout_if_exhausted(self, repo):
        doc_id, line_id = _seed(repo, original=10, current=0)
        line = repo.mark_soldout_if_exhausted(doc_id, line_id)
        assert line.status is LineStatus.SOLDOUT
        assert repo.get_by_id(doc_id).get_line(line_id).status is LineStatus.SOLDOUT

    def test_mark_soldout_leaves_stocked_line_active(self, repo):
        doc_id, line_id = _seed(repo, original=10, current=0.5)
        line = repo.mark_soldout_if_exhausted(doc_id, line_id)
        assert line.status is LineStatus.ACTIVE
        assert repo.get_by_id(doc_id).get_line(line_id).status is LineStatus.ACTIVE

    def test_mark_soldout_unknown_line(self, repo):
        doc_id, _ = _seed(repo)
        with pytest.raises(EntityNotFoundError):
            repo.mark_soldout_if_exhausted(doc_id, "missing")
        with pytest.raises(EntityNotFoundError):
            repo.mark_soldout_if_exhausted("missing", "missing")


class TestAdjustQuantity:

    def test_clamp_on_release(self, repo):
        doc_id, line_id = _seed(repo, original=10, current=5)
        repo.adjust_quantity(doc_id, line_id, KilogramDelta(100))
        assert _available(repo, doc_id, line_id) == 10

    def test_reserve_to_zero_then_refuse(self, repo):
        doc_id, line_id = _seed(repo, original=10, current=5)
        repo.adjust_quantity(doc_id, line_id, KilogramDelta(-5))
        assert _available(repo, doc_id, line_id) == 0

        with pytest.raises(InsufficientStockError) as info:
            repo.adjust_quantity(doc_id, line_id, KilogramDelta(-1))
        assert info.value.requested == 1
        assert info.value.available == 0
        assert _available(repo, doc_id, line_id) == 0

    def test_unenforced_reserve_floors_at_zero(self, repo):
        doc_id, line_id = _seed(repo, original=10, current=2)
        repo.adjust_quantity(doc_id, line_id, KilogramDelta(-3), enforce_sufficiency=False)
        assert _available(repo, doc_id, line_id) == 0

    def test_round_trip(self, repo):
        doc_id, line_id = _seed(repo, original=10, current=7)
        repo.adjust_quantity(doc_id, line_id, KilogramDelta(-4))
        repo.adjust_quantity(doc_id, line_id, KilogramDelta(4))
        assert _available(repo, doc_id, line_id) == 7

    def test_only_target_line_changes(self, repo):
        doc_id, line_id = _seed(repo)
        other = repo.add_line(doc_id, make_line(original=8, name="Cucumbers"))
        repo.adjust_quantity(doc_id, line_id, KilogramDelta(-2))
        doc = repo.get_by_id(doc_id)
        assert doc.get_line(other.id).current_available_quantity_kg == 8
        assert doc.get_line(line_id).status is LineStatus.ACTIVE

    @pytest.mark.parametrize("delta", [-1, 1])
    def test_not_found_never_mutates(self, repo, delta):
        doc_id, line_id = _seed(repo)
        with pytest.raises(EntityNotFoundError):
            repo.adjust_quantity(doc_id, "missing", KilogramDelta(delta))
        with pytest.raises(EntityNotFoundError):
            repo.adjust_quantity("missing", line_id, KilogramDelta(delta))
        assert _available(repo, doc_id, line_id) == 10

    def test_line_of_another_document_is_not_found(self, repo):
        doc_id, line_id = _seed(repo)
        other = repo.find_or_create(StockKey.of("LC-1", "2026-10-20", "evening"))
        with pytest.raises(EntityNotFoundError):
            repo.adjust_quantity(other.id, line_id, KilogramDelta(-1))


class TestConcurrentReservations:

    def test_two_reservations_for_the_last_units(self, repo):
        doc_id, line_id = _seed(repo, original=10, current=5)
        adjuster = StockQuantityAdjuster(repo)
        outcomes = _race(lambda: adjuster.adjust(doc_id, line_id, -3), workers=2)
        assert sorted(outcomes) == ["insufficient", "ok"]
        assert _available(repo, doc_id, line_id) == 2

    def test_many_reservations_never_oversell(self, repo):
        doc_id, line_id = _seed(repo, original=10, current=5)
        adjuster = StockQuantityAdjuster(repo)
        outcomes = _race(lambda: adjuster.adjust(doc_id, line_id, -1), workers=8)
        assert outcomes.count("ok") == 5
        assert outcomes.count("insufficient") == 3
        assert _available(repo, doc_id, line_id) == 0


def _race(action, workers):
    barrier = threading.Barrier(workers)
    outcomes: list[str] = []
    lock = threading.Lock()

    def run():
        barrier.wait()
        try:
            action()
            result = "ok"
        except InsufficientStockError:
            result = "insufficient"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=run) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return outcomes
