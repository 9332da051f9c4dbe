"""History reader: prior-session baselines from the workout log.

All queries look at rows for the same mesocycle and exercise key that sit
strictly before the current (week, day index) position, are marked done and
have both weight and reps. Sessions are (week, day index) groups ordered
week-major.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Protocol, Sequence
from uuid import UUID

import pandas as pd

from progression_engine.models.set_log import SetLogEntry, TopSet
from progression_engine.normalizer import normalize

logger = logging.getLogger(__name__)

_COLUMNS = ["week", "day_ix", "set_index", "weight", "reps", "done"]


class SetLogSource(Protocol):
    """The workout log store, as seen by the history reader."""

    def query(
        self,
        mesocycle_id: UUID,
        exercise_key: str,
        before_week: int,
        before_day_ix: int,
    ) -> Sequence[SetLogEntry]:
        """Rows for the mesocycle/exercise logged before (week, day index)."""
        ...


class InMemorySetLog:
    """List-backed SetLogSource for tests and offline tools."""

    def __init__(self, entries: Iterable[SetLogEntry] = ()) -> None:
        self._entries: list[SetLogEntry] = list(entries)

    def add(self, entry: SetLogEntry) -> None:
        self._entries.append(entry)

    def extend(self, entries: Iterable[SetLogEntry]) -> None:
        self._entries.extend(entries)

    def query(
        self,
        mesocycle_id: UUID,
        exercise_key: str,
        before_week: int,
        before_day_ix: int,
    ) -> list[SetLogEntry]:
        return [
            e
            for e in self._entries
            if e.mesocycle_id == mesocycle_id
            and e.exercise_key == exercise_key
            and _is_before(e.week, e.day_ix, before_week, before_day_ix)
        ]


def _is_before(week: int, day_ix: int, current_week: int, current_day_ix: int) -> bool:
    return week < current_week or (week == current_week and day_ix < current_day_ix)


def qualifying_frame(
    entries: Sequence[SetLogEntry],
    current_week: int,
    current_day_ix: int,
) -> pd.DataFrame:
    """Tabulate the rows that count as baseline history.

    The position filter is re-applied here so a source that over-returns
    cannot leak the current or later sessions into a baseline.
    """
    frame = pd.DataFrame.from_records(
        [(e.week, e.day_ix, e.set_index, e.weight, e.reps, e.done) for e in entries],
        columns=_COLUMNS,
    )
    if frame.empty:
        return frame

    earlier = (frame["week"] < current_week) | (
        (frame["week"] == current_week) & (frame["day_ix"] < current_day_ix)
    )
    mask = earlier & frame["done"].astype(bool) & frame["weight"].notna() & frame["reps"].notna()
    return frame.loc[mask]


def latest_session_top_set(frame: pd.DataFrame) -> TopSet | None:
    """Heaviest row of the latest (week, day index) session in *frame*.

    Ties on weight go to the lowest set index.
    """
    if frame.empty:
        return None

    last_week, last_day = max(zip(frame["week"], frame["day_ix"]))
    session = frame[(frame["week"] == last_week) & (frame["day_ix"] == last_day)]
    ranked = session.sort_values(["weight", "set_index"], ascending=[False, True], kind="mergesort")
    top = ranked.iloc[0]
    return TopSet(
        weight=float(top["weight"]),
        reps=int(top["reps"]),
        session=(int(last_week), int(last_day)),
    )


def session_count(frame: pd.DataFrame) -> int:
    """Number of distinct (week, day index) sessions in *frame*."""
    if frame.empty:
        return 0
    return int(frame.groupby(["week", "day_ix"]).ngroups)


class HistoryReader:
    """Async read-only queries over a SetLogSource.

    The source is called off the event loop so a slow store does not block
    other decisions.
    """

    def __init__(self, source: SetLogSource) -> None:
        self._source = source

    async def _frame(
        self,
        mesocycle_id: UUID,
        exercise_name: str,
        current_week: int,
        current_day_ix: int,
    ) -> pd.DataFrame:
        key = normalize(exercise_name)
        entries = await asyncio.to_thread(
            self._source.query, mesocycle_id, key, current_week, current_day_ix
        )
        return qualifying_frame(entries, current_week, current_day_ix)

    async def has_baseline(
        self,
        mesocycle_id: UUID,
        exercise_name: str,
        current_week: int,
        current_day_ix: int,
    ) -> bool:
        """True iff at least one qualifying earlier row exists."""
        frame = await self._frame(mesocycle_id, exercise_name, current_week, current_day_ix)
        return not frame.empty

    async def prior_top_set(
        self,
        mesocycle_id: UUID,
        exercise_name: str,
        current_week: int,
        current_day_ix: int,
    ) -> TopSet | None:
        """Heaviest set of the most recent earlier session, if any."""
        frame = await self._frame(mesocycle_id, exercise_name, current_week, current_day_ix)
        top = latest_session_top_set(frame)
        logger.debug(
            "Prior top set for %s before w%d d%d: %s",
            normalize(exercise_name),
            current_week,
            current_day_ix,
            top,
        )
        return top

    async def prior_session_count(
        self,
        mesocycle_id: UUID,
        exercise_name: str,
        current_week: int,
        current_day_ix: int,
    ) -> int:
        """Count of distinct earlier sessions with qualifying rows."""
        frame = await self._frame(mesocycle_id, exercise_name, current_week, current_day_ix)
        return session_count(frame)


def top_set(sets: Iterable[tuple[float | None, int | None]]) -> TopSet | None:
    """Heaviest completed (weight, reps) pair of one session.

    Pairs missing either value are ignored; ties go to the earliest pair.
    """
    complete = [(w, r) for w, r in sets if w is not None and r is not None]
    if not complete:
        return None
    weight, reps = max(complete, key=lambda pair: pair[0])
    return TopSet(weight=float(weight), reps=int(reps))


def carry_over_reps(sets: Iterable[tuple[float | None, int | None]]) -> int | None:
    """Reps performed on the heaviest completed set.

    >>> carry_over_reps([(100.0, 10), (120.0, 8), (110.0, 9)])
    8
    """
    top = top_set(sets)
    return top.reps if top is not None else None
