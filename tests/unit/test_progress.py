"""
Unit tests for progress models
"""

import threading

import pytest
from pydantic import ValidationError

from core.exceptions import InvalidProgressStateError, InvalidSourceReferenceError
from models.base import ElementCategory
from models.progress import InputItemProgress, InputProgress, ProgressSnapshot


class TestInputItemProgress:
    """Test item cursor behaviour"""

    def test_advance_moves_forward(self):
        item = InputItemProgress(name="part-0", total=10)
        item.advance_to(4)
        item.increase(3)
        assert item.offset == 7
        assert not item.is_complete

    def test_offset_regression_is_rejected(self):
        """Offsets are strictly monotonic per item"""
        item = InputItemProgress(offset=5)

        with pytest.raises(InvalidProgressStateError):
            item.advance_to(3)

        assert item.offset == 5

    def test_negative_increase_is_rejected(self):
        item = InputItemProgress(offset=5)

        with pytest.raises(InvalidProgressStateError):
            item.increase(-1)

    def test_offset_cannot_pass_known_size(self):
        item = InputItemProgress(offset=8, total=10)

        with pytest.raises(InvalidProgressStateError):
            item.increase(3)

        item.increase(2)
        assert item.is_complete

    def test_unknown_size_is_never_complete(self):
        item = InputItemProgress(offset=1000)
        assert not item.is_complete

    def test_offset_beyond_total_fails_validation(self):
        with pytest.raises(ValidationError):
            InputItemProgress(offset=11, total=10)

    def test_negative_offset_fails_validation(self):
        with pytest.raises(ValidationError):
            InputItemProgress(offset=-1)


class TestInputProgress:
    """Test per-source progress"""

    def test_consumed_count_sums_loaded_and_loading(self):
        progress = InputProgress()
        progress.add_loaded_item(InputItemProgress(offset=50))
        progress.add_loading_item(InputItemProgress(offset=20))

        assert progress.consumed_count() == 70

    def test_mark_all_moves_item_regardless_of_offset(self):
        progress = InputProgress()
        progress.add_loading_item(InputItemProgress(offset=3, total=10))

        assert progress.mark_loaded(True) is True

        assert progress.loading_item is None
        assert len(progress.loaded_items) == 1
        assert progress.loaded_items[0].loaded is True
        assert progress.loaded_items[0].offset == 3

    def test_mark_all_is_idempotent(self):
        progress = InputProgress()
        progress.add_loaded_item(InputItemProgress(offset=7))
        progress.add_loading_item(InputItemProgress(offset=4))

        progress.mark_loaded(True)
        once = progress.to_dict()
        assert progress.mark_loaded(True) is False

        assert progress.to_dict() == once

    def test_mark_without_full_consume_waits_for_size(self):
        progress = InputProgress()
        item = progress.add_loading_item(InputItemProgress(offset=0, total=5))
        item.increase(4)

        assert progress.mark_loaded(False) is False
        assert progress.loading_item is item

        item.increase(1)
        assert progress.mark_loaded(False) is True
        assert progress.loading_item is None
        assert progress.loaded_items == [item]

    def test_mark_without_full_consume_requires_loading_item(self):
        progress = InputProgress()

        with pytest.raises(InvalidProgressStateError):
            progress.mark_loaded(False)

    def test_only_one_loading_item(self):
        progress = InputProgress()
        progress.add_loading_item(InputItemProgress(name="a"))

        with pytest.raises(InvalidProgressStateError):
            progress.add_loading_item(InputItemProgress(name="b"))

    def test_loaded_item_cannot_become_loading(self):
        progress = InputProgress()

        with pytest.raises(InvalidProgressStateError):
            progress.add_loading_item(InputItemProgress(loaded=True))

    def test_match_items_by_name(self):
        progress = InputProgress()
        progress.add_loaded_item(InputItemProgress(name="a", offset=3))
        progress.add_loading_item(InputItemProgress(name="b", offset=1))

        assert progress.match_loaded_item("a").offset == 3
        assert progress.match_loaded_item("b") is None
        assert progress.match_loading_item("b").offset == 1
        assert progress.match_loading_item("a") is None

    def test_validation_rejects_pending_loaded_item(self):
        with pytest.raises(ValidationError):
            InputProgress.model_validate({"loadedItems": [{"offset": 1, "loaded": False}]})

    def test_validation_rejects_finished_loading_item(self):
        with pytest.raises(ValidationError):
            InputProgress.model_validate({"loadingItem": {"offset": 1, "loaded": True}})

    def test_serialises_with_checkpoint_field_names(self):
        progress = InputProgress()
        progress.add_loaded_item(InputItemProgress(offset=100))

        assert progress.to_dict() == {"loadedItems": [{"offset": 100, "loaded": True}]}


class TestProgressSnapshot:
    """Test snapshot aggregation"""

    def test_total_consumed_composes_sources(self):
        snapshot = ProgressSnapshot()
        source_a = snapshot.get_or_create(ElementCategory.VERTEX, "a")
        source_a.add_loaded_item(InputItemProgress(offset=100))
        source_b = snapshot.get_or_create(ElementCategory.VERTEX, "b")
        source_b.add_loaded_item(InputItemProgress(offset=50))
        source_b.add_loading_item(InputItemProgress(offset=20))

        assert snapshot.total_consumed(ElementCategory.VERTEX) == 170
        assert snapshot.total_consumed(ElementCategory.EDGE) == 0

    def test_empty_snapshot(self):
        snapshot = ProgressSnapshot()

        assert snapshot.is_empty()
        for category in ElementCategory:
            assert snapshot.total_consumed(category) == 0
            assert snapshot.category(category) == {}

    def test_get_or_create_returns_existing_entry(self):
        snapshot = ProgressSnapshot()
        first = snapshot.get_or_create(ElementCategory.EDGE, "k")
        second = snapshot.get_or_create(ElementCategory.EDGE, "k")

        assert first is second
        assert snapshot.get(ElementCategory.VERTEX, "k") is None

    def test_categories_are_independent(self):
        snapshot = ProgressSnapshot()
        vertex = snapshot.get_or_create(ElementCategory.VERTEX, "k")
        edge = snapshot.get_or_create(ElementCategory.EDGE, "k")

        assert vertex is not edge

    def test_mark_loaded_by_struct(self, vertex_struct):
        snapshot = ProgressSnapshot()
        progress = snapshot.get_or_create(vertex_struct.category, vertex_struct.unique_key_for_file())
        progress.add_loading_item(InputItemProgress(offset=9))

        assert snapshot.mark_loaded(vertex_struct, True) is True
        assert progress.loaded_items[0].offset == 9

    def test_mark_loaded_unknown_source(self, vertex_struct):
        snapshot = ProgressSnapshot()

        with pytest.raises(InvalidSourceReferenceError) as exc_info:
            snapshot.mark_loaded(vertex_struct, True)

        assert isinstance(exc_info.value, ValueError)
        assert exc_info.value.context["source_key"] == vertex_struct.unique_key_for_file()

    def test_concurrent_inserts_of_distinct_keys(self):
        snapshot = ProgressSnapshot()
        barrier = threading.Barrier(8)

        def worker(index):
            barrier.wait()
            for n in range(100):
                progress = snapshot.get_or_create(ElementCategory.VERTEX, f"{index}-{n}")
                progress.add_loaded_item(InputItemProgress(offset=1))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(snapshot.category(ElementCategory.VERTEX)) == 800
        assert snapshot.total_consumed(ElementCategory.VERTEX) == 800

    def test_concurrent_get_or_create_same_key(self):
        snapshot = ProgressSnapshot()
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(snapshot.get_or_create(ElementCategory.EDGE, "shared"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(result is results[0] for result in results)

    def test_to_dict_shape(self):
        snapshot = ProgressSnapshot()
        progress = snapshot.get_or_create(ElementCategory.VERTEX, "src")
        progress.add_loaded_item(InputItemProgress(offset=10, name="a"))
        progress.add_loading_item(InputItemProgress(offset=2, name="b", total=5))

        assert snapshot.to_dict() == {
            "vertex": {
                "src": {
                    "loadedItems": [{"offset": 10, "loaded": True, "name": "a"}],
                    "loadingItem": {"offset": 2, "loaded": False, "name": "b", "total": 5},
                }
            },
            "edge": {},
        }

    def test_from_dict_fills_missing_category(self):
        snapshot = ProgressSnapshot.from_dict(
            {"edge": {"src": {"loadedItems": [{"offset": 4, "loaded": True}]}}}
        )

        assert snapshot.total_consumed(ElementCategory.EDGE) == 4
        assert snapshot.category(ElementCategory.VERTEX) == {}

    def test_from_dict_rejects_unknown_category(self):
        with pytest.raises(ValidationError):
            ProgressSnapshot.from_dict({"hyperedge": {}})
