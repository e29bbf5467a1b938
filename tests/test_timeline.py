import json
import threading
from datetime import date
from decimal import Decimal

import pandas as pd
import pytest

from cvrate.errors import (
    DuplicateRateIntervalError,
    OverlappingRateIntervalError,
    RateIntervalNotFoundError,
)
from cvrate.timeline import (
    INFINITE_END_DATE,
    CachedRateTimeline,
    InMemoryRateTimeline,
    RateInterval,
    intervals_to_frame,
    load_timeline_frame,
    load_timeline_json,
)

from .conftest import PLAN, seed


@pytest.fixture
def loan_timeline(timeline):
    seed(
        timeline,
        PLAN,
        "2",
        [
            (date(2020, 1, 1), date(2020, 6, 30), 250),
            (date(2020, 7, 1), None, 200),
        ],
    )
    return timeline


class TestLookup:
    def test_containing_interval(self, loan_timeline):
        interval = loan_timeline.get_effective_rate(PLAN, "2", date(2020, 3, 15))
        assert interval.rate == Decimal("250")
        assert loan_timeline.get_effective_rate(PLAN, "2", date(2020, 7, 1)).rate == Decimal("200")

    def test_before_first_interval_is_absent(self, loan_timeline):
        assert loan_timeline.get_effective_rate(PLAN, "2", date(2019, 12, 31)) is None
        assert loan_timeline.get_effective_rate("OTHER", "2", date(2020, 3, 1)) is None

    def test_falls_back_to_latest_start_before_date(self, timeline):
        # gap between the intervals
        seed(timeline, PLAN, "0", [(date(2020, 1, 1), date(2020, 1, 31), 100)])
        seed(timeline, PLAN, "0", [(date(2020, 3, 1), None, 300)])
        assert timeline.find_by_base_date(PLAN, "0", date(2020, 2, 10)) is None
        assert timeline.get_effective_rate(PLAN, "0", date(2020, 2, 10)).rate == Decimal("100")

    def test_lookups_follow_each_mutation(self, timeline):
        seed(timeline, PLAN, "0", [(date(2020, 1, 1), date(2020, 1, 31), 100)])
        seed(timeline, PLAN, "0", [(date(2020, 6, 1), None, 300)])
        timeline.insert(PLAN, "0", date(2020, 3, 1), date(2020, 3, 31), Decimal("200"))
        assert timeline.find_by_base_date(PLAN, "0", date(2020, 3, 15)).rate == Decimal("200")
        assert timeline.get_effective_rate(PLAN, "0", date(2020, 4, 15)).rate == Decimal("200")

        timeline.delete(PLAN, "0", date(2020, 3, 1))
        assert timeline.find_by_base_date(PLAN, "0", date(2020, 3, 15)) is None
        assert timeline.get_effective_rate(PLAN, "0", date(2020, 4, 15)).rate == Decimal("100")
        assert timeline.get_effective_rate(PLAN, "0", date(2020, 7, 1)).rate == Decimal("300")

    def test_lookup_helper(self, loan_timeline):
        assert loan_timeline.lookup(PLAN, "2", date(2021, 1, 1)) == Decimal("200")
        assert loan_timeline.lookup(PLAN, "5", date(2021, 1, 1)) is None

    def test_counts(self, loan_timeline):
        assert loan_timeline.count(PLAN) == 2
        assert loan_timeline.count(PLAN, "5") == 0
        assert loan_timeline.exists(PLAN, "2", date(2020, 7, 1))
        assert not loan_timeline.exists(PLAN, "2", date(2020, 7, 2))
        assert loan_timeline.keys() == [(PLAN, "2")]


class TestMutations:
    def test_insert_truncates_latest(self, loan_timeline):
        new = loan_timeline.insert(PLAN, "2", date(2021, 1, 1), None, Decimal("180"))
        assert new.end_date == INFINITE_END_DATE

        intervals = loan_timeline.intervals(PLAN, "2")
        assert [i.start_date for i in intervals] == [
            date(2020, 1, 1),
            date(2020, 7, 1),
            date(2021, 1, 1),
        ]
        assert intervals[1].end_date == date(2020, 12, 31)

    def test_insert_into_empty_timeline_is_open_ended(self, timeline):
        interval = timeline.insert(PLAN, "5", "2020-01-01", date(2020, 5, 31), 150)
        assert interval.end_date == INFINITE_END_DATE
        assert interval.rate == Decimal("150")

    def test_insert_before_latest_keeps_given_end(self, loan_timeline):
        loan_timeline.delete(PLAN, "2", date(2020, 1, 1), date(2020, 6, 30))
        interval = loan_timeline.insert(
            PLAN, "2", date(2020, 1, 1), date(2020, 6, 30), Decimal("260")
        )
        assert interval.end_date == date(2020, 6, 30)
        assert loan_timeline.intervals(PLAN, "2")[-1].end_date == INFINITE_END_DATE

    def test_duplicate_insert_fails(self, loan_timeline):
        with pytest.raises(DuplicateRateIntervalError):
            loan_timeline.insert(PLAN, "2", date(2020, 7, 1), None, Decimal("1"))

    def test_delete_missing_fails(self, loan_timeline):
        with pytest.raises(RateIntervalNotFoundError):
            loan_timeline.delete(PLAN, "2", date(2020, 2, 1))
        with pytest.raises(RateIntervalNotFoundError):
            loan_timeline.delete(PLAN, "2", date(2020, 1, 1), date(2020, 5, 31))

    def test_delete_latest_reopens_predecessor(self, loan_timeline):
        removed = loan_timeline.delete(PLAN, "2", date(2020, 7, 1), INFINITE_END_DATE)
        assert removed.rate == Decimal("200")
        remaining = loan_timeline.intervals(PLAN, "2")
        assert len(remaining) == 1
        assert remaining[0].end_date == INFINITE_END_DATE

    def test_delete_with_stored_open_end_matches_any_end(self, loan_timeline):
        loan_timeline.delete(PLAN, "2", date(2020, 7, 1), date(2020, 12, 31))
        assert loan_timeline.count(PLAN, "2") == 1

    def test_insert_delete_round_trip_restores_state(self, loan_timeline):
        before = loan_timeline.intervals(PLAN, "2")
        loan_timeline.insert(PLAN, "2", date(2021, 1, 1), None, Decimal("175"))
        loan_timeline.delete(PLAN, "2", date(2021, 1, 1), None)
        assert loan_timeline.intervals(PLAN, "2") == before

    def test_update_rate_and_end_date(self, loan_timeline):
        assert loan_timeline.update_rate(PLAN, "2", date(2020, 1, 1), None, Decimal("255")) == 1
        assert loan_timeline.lookup(PLAN, "2", date(2020, 2, 1)) == Decimal("255")
        assert loan_timeline.update_rate(PLAN, "2", date(2020, 2, 1), None, Decimal("1")) == 0

        assert loan_timeline.update_end_date(PLAN, "2", date(2020, 1, 1), date(2020, 5, 31)) == 1
        assert loan_timeline.intervals(PLAN, "2")[0].end_date == date(2020, 5, 31)
        # no re-stitching of the neighbour
        assert loan_timeline.intervals(PLAN, "2")[1].start_date == date(2020, 7, 1)

    def test_load_rejects_overlap(self, timeline):
        with pytest.raises(OverlappingRateIntervalError):
            seed(
                timeline,
                PLAN,
                "2",
                [(date(2020, 1, 1), date(2020, 3, 31), 1), (date(2020, 3, 1), None, 2)],
            )
        with pytest.raises(DuplicateRateIntervalError):
            seed(timeline, PLAN, "2", [(date(2020, 1, 1), None, 1), (date(2020, 1, 1), None, 2)])


class TestCache:
    def test_hits_and_invalidation_on_mutation(self):
        cached = CachedRateTimeline(InMemoryRateTimeline(), max_size=10)
        cached.insert(PLAN, "2", date(2020, 1, 1), None, Decimal("250"))

        assert cached.lookup(PLAN, "2", date(2020, 5, 1)) == Decimal("250")
        assert cached.lookup(PLAN, "2", date(2020, 5, 1)) == Decimal("250")
        assert cached.hits == 1

        cached.insert(PLAN, "2", date(2020, 4, 1), None, Decimal("275"))
        assert cached.lookup(PLAN, "2", date(2020, 5, 1)) == Decimal("275")

        cached.update_rate(PLAN, "2", date(2020, 4, 1), None, Decimal("280"))
        assert cached.lookup(PLAN, "2", date(2020, 5, 1)) == Decimal("280")

        cached.delete(PLAN, "2", date(2020, 4, 1))
        assert cached.lookup(PLAN, "2", date(2020, 5, 1)) == Decimal("250")

    def test_failed_mutation_still_invalidates(self):
        cached = CachedRateTimeline(InMemoryRateTimeline())
        cached.insert(PLAN, "2", date(2020, 1, 1), None, Decimal("250"))
        cached.lookup(PLAN, "2", date(2020, 2, 1))
        with pytest.raises(DuplicateRateIntervalError):
            cached.insert(PLAN, "2", date(2020, 1, 1), None, Decimal("1"))
        assert len(cached) == 0

    def test_bounded_size(self):
        cached = CachedRateTimeline(InMemoryRateTimeline(), max_size=2)
        cached.insert(PLAN, "2", date(2020, 1, 1), None, Decimal("250"))
        for day in range(1, 6):
            cached.lookup(PLAN, "2", date(2020, 1, day))
        assert len(cached) == 2

    def test_delegates_read_helpers(self):
        cached = CachedRateTimeline(InMemoryRateTimeline())
        cached.insert(PLAN, "2", date(2020, 1, 1), None, Decimal("250"))
        assert cached.count(PLAN) == 1
        assert cached.exists(PLAN, "2", date(2020, 1, 1))


class _PausingTimeline(InMemoryRateTimeline):
    """Blocks effective-rate reads between the snapshot read and the return."""

    def __init__(self):
        super().__init__()
        self.pause = False
        self.reading = threading.Event()
        self.resume = threading.Event()

    def get_effective_rate(self, plan_code, int_rate_type, base_date):
        interval = super().get_effective_rate(plan_code, int_rate_type, base_date)
        if self.pause:
            self.reading.set()
            self.resume.wait(timeout=5)
        return interval


def _run_together(workers):
    barrier = threading.Barrier(len(workers))
    errors = []

    def run(work):
        barrier.wait()
        try:
            work()
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=run, args=(work,)) for work in workers]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    assert errors == []


class TestConcurrency:
    def test_lookup_racing_update_leaves_no_stale_entry(self):
        inner = _PausingTimeline()
        cached = CachedRateTimeline(inner)
        cached.insert(PLAN, "2", date(2020, 1, 1), None, Decimal("100"))

        seen = []
        inner.pause = True
        reader = threading.Thread(
            target=lambda: seen.append(cached.lookup(PLAN, "2", date(2020, 5, 1)))
        )
        reader.start()
        assert inner.reading.wait(timeout=5)

        # the reader holds the old interval while the update and its invalidation complete
        inner.pause = False
        assert cached.update_rate(PLAN, "2", date(2020, 1, 1), None, Decimal("300")) == 1
        inner.resume.set()
        reader.join(timeout=5)

        assert seen == [Decimal("100")]
        assert cached.lookup(PLAN, "2", date(2020, 5, 1)) == Decimal("300")
        assert inner.lookup(PLAN, "2", date(2020, 5, 1)) == Decimal("300")

    def test_concurrent_inserts_and_deletes_on_one_key(self, timeline):
        seeded = [date(2001 + offset, 1, 1) for offset in range(10)]
        seed(
            timeline, PLAN, "2", [(start, start.replace(month=12, day=31), 100) for start in seeded]
        )
        inserted = [date(2011 + offset // 12, offset % 12 + 1, 1) for offset in range(48)]

        def inserter(starts):
            def work():
                for start in starts:
                    timeline.insert(PLAN, "2", start, None, Decimal("200"))
            return work

        def deleter(starts):
            def work():
                for start in starts:
                    timeline.delete(PLAN, "2", start)
            return work

        _run_together(
            [inserter(inserted[i::4]) for i in range(4)]
            + [deleter(seeded[:5]), deleter(seeded[5:])]
        )

        intervals = timeline.intervals(PLAN, "2")
        starts = [interval.start_date for interval in intervals]
        assert starts == inserted
        assert timeline.count(PLAN, "2") == len(inserted)
        assert intervals[-1].end_date == INFINITE_END_DATE
        assert timeline.get_effective_rate(PLAN, "2", date(2030, 1, 1)).start_date == inserted[-1]

    def test_counts_while_new_keys_appear(self, timeline):
        def inserter(plan_prefix):
            def work():
                for n in range(200):
                    timeline.insert(f"{plan_prefix}{n}", "2", date(2020, 1, 1), None, Decimal("1"))
            return work

        def reader():
            for _ in range(200):
                timeline.count("A0")
                timeline.keys()

        _run_together([inserter("A"), inserter("B"), reader, reader])
        assert timeline.count("A0") == 1
        assert len(timeline.keys()) == 400


class TestLoaders:
    def test_json(self, tmp_path, timeline):
        path = tmp_path / "rates.json"
        path.write_text(
            json.dumps(
                {
                    "intervals": [
                        {
                            "plan_code": PLAN,
                            "int_rate_type": "5",
                            "start_date": "2020-01-01",
                            "end_date": "2020-12-31",
                            "rate": 250,
                        },
                        {
                            "plan_code": PLAN,
                            "int_rate_type": "5",
                            "start_date": "2021-01-01",
                            "end_date": None,
                            "rate": "212.5",
                        },
                    ]
                }
            )
        )
        assert load_timeline_json(timeline, path) == 2
        latest = timeline.intervals(PLAN, "5")[-1]
        assert latest.rate == Decimal("212.5")
        assert latest.end_date == INFINITE_END_DATE

    def test_frame_round_trip(self, timeline):
        frame = pd.DataFrame(
            {
                "plan_code": [PLAN, PLAN],
                "int_rate_type": ["0", "0"],
                "start_date": pd.to_datetime(["2020-01-01", "2020-07-01"]),
                "end_date": [pd.Timestamp("2020-06-30"), pd.NaT],
                "rate": [100, 125],
            }
        )
        assert load_timeline_frame(timeline, frame) == 2
        out = intervals_to_frame(timeline.intervals(PLAN, "0"))
        assert list(out["start_date"]) == [date(2020, 1, 1), date(2020, 7, 1)]
        assert out["end_date"].iloc[-1] == INFINITE_END_DATE

    def test_frame_missing_columns(self, timeline):
        with pytest.raises(ValueError):
            load_timeline_frame(timeline, pd.DataFrame({"plan_code": [PLAN]}))

    def test_interval_value_object(self):
        interval = RateInterval(PLAN, "2", date(2020, 1, 1), INFINITE_END_DATE, Decimal("1"))
        assert interval.key == (PLAN, "2")
        assert interval.is_open_ended
        assert interval.contains(date(2030, 1, 1))
