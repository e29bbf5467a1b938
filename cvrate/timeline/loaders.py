"""
Loaders that seed a rate timeline from files or data frames.

JSON layout::

    {"intervals": [
        {"plan_code": "P1", "int_rate_type": "2",
         "start_date": "2020-01-01", "end_date": "2020-12-31", "rate": 250},
        ...
    ]}

``end_date`` may be omitted or null for the open-ended latest interval.
"""

import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterable, List, Union

import pandas as pd

from cvrate.utils.date import to_date
from cvrate.utils.mathutils import to_decimal

from .base import BaseRateTimeline
from .interval import INFINITE_END_DATE, RateInterval

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("plan_code", "int_rate_type", "start_date", "rate")
FRAME_COLUMNS = ["plan_code", "int_rate_type", "start_date", "end_date", "rate"]


def interval_from_record(record: Dict) -> RateInterval:
    """Build a RateInterval from a mapping with the JSON/DataFrame column names."""
    missing = [column for column in REQUIRED_COLUMNS if column not in record]
    if missing:
        raise ValueError(f"Rate interval record missing fields: {missing}")

    rate = record["rate"]
    end_date = record.get("end_date")
    if end_date is None or (not isinstance(end_date, str) and pd.isna(end_date)):
        end_date = INFINITE_END_DATE

    return RateInterval(
        plan_code=str(record["plan_code"]),
        int_rate_type=str(record["int_rate_type"]),
        start_date=to_date(record["start_date"]),
        end_date=to_date(end_date),
        rate=to_decimal(rate if isinstance(rate, Decimal) else str(rate)),
    )


def read_intervals_json(filepath: Union[str, Path]) -> List[RateInterval]:
    with open(filepath, "r") as f:
        data = json.load(f)
    if isinstance(data, list):
        records = data
    else:
        records = data.get("intervals", [])
    return [interval_from_record(record) for record in records]


def read_intervals_frame(frame: pd.DataFrame) -> List[RateInterval]:
    missing = [column for column in REQUIRED_COLUMNS if column not in frame.columns]
    if missing:
        raise ValueError(f"Rate frame missing columns: {missing}")
    return [interval_from_record(record) for record in frame.to_dict(orient="records")]


def load_timeline_json(
    timeline: BaseRateTimeline, filepath: Union[str, Path]
) -> int:
    """
    Seed ``timeline`` from a JSON file.

    Args:
        timeline: Timeline exposing ``load_intervals``
        filepath: Path to the JSON file

    Returns:
        Number of intervals loaded
    """
    intervals = read_intervals_json(filepath)
    logger.info("Read %d rate intervals from %s", len(intervals), filepath)
    return timeline.load_intervals(intervals)


def load_timeline_frame(timeline: BaseRateTimeline, frame: pd.DataFrame) -> int:
    """Seed ``timeline`` from a DataFrame with the JSON column names."""
    return timeline.load_intervals(read_intervals_frame(frame))


def intervals_to_frame(intervals: Iterable[RateInterval]) -> pd.DataFrame:
    """Tabulate intervals, e.g. for inspection of one timeline."""
    rows = [
        {
            "plan_code": interval.plan_code,
            "int_rate_type": interval.int_rate_type,
            "start_date": interval.start_date,
            "end_date": interval.end_date,
            "rate": interval.rate,
        }
        for interval in intervals
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)
