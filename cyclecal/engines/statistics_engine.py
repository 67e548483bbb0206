"""Statistics Engine - cycle history aggregates and next-start prediction.

Consumes a user's history of start/end intervals and produces:
- Average interval length (days between consecutive starts)
- Average duration (inclusive day count of each interval)
- Predicted next start date
- Most common values of two independent tag sets
- A 0-100 confidence score for the prediction, from the spread of the
  historical interval lengths

Design Principles:
    - Stateless: No stored history, operates on passed collections
    - Deterministic: "today" is only used as the empty-history prediction
    - Not enough history is a normal state, answered with fallbacks
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..exceptions import PreconditionViolation
from ..utils.dt_utils import days_between, to_civil_date, to_optional_civil_date
from ..utils.math_utils import (
    clamp,
    mean,
    population_std_dev,
    round_half_up,
    round_value,
)

if TYPE_CHECKING:
    from ..type_defs import CycleStatsData, DateInput, StatsConfig


def _as_tags(value: Any) -> tuple[str, ...]:
    """Return a tag field as a tuple; a lone string is one tag, not letters."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    return tuple(value)


# =============================================================================
# Records and Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class CycleInterval:
    """One recorded interval with its tag sets.

    Attributes:
        start_date: First day of the interval
        end_date: Last day of the interval, or None while it is ongoing
        symptoms: Tag set A labels
        moods: Tag set B labels

    Precondition: ``end_date`` is not before ``start_date``. Violations are
    raised as PreconditionViolation, never swapped.
    """

    start_date: date
    end_date: date | None = None
    symptoms: tuple[str, ...] = ()
    moods: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Normalize dates and tags, then check the interval order."""
        object.__setattr__(self, "start_date", to_civil_date(self.start_date))
        object.__setattr__(self, "end_date", to_optional_civil_date(self.end_date))
        object.__setattr__(self, "symptoms", _as_tags(self.symptoms))
        object.__setattr__(self, "moods", _as_tags(self.moods))

        if self.end_date is not None and self.end_date < self.start_date:
            raise PreconditionViolation(
                const.FIELD_END_DATE,
                self.end_date.isoformat(),
                f"ends before its start {self.start_date.isoformat()}",
            )

    @property
    def duration_days(self) -> int:
        """Inclusive day count; an ongoing interval counts as one day."""
        end = self.end_date or self.start_date
        return days_between(self.start_date, end) + 1

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> CycleInterval:
        """Build a CycleInterval from a stored record mapping.

        Reads ``startDate``, ``endDate``, ``symptoms`` and ``moods``. A scalar
        ``mood`` is accepted as a one-element ``moods`` set, and a tag field
        holding a single string counts as one tag.

        Raises:
            InvalidDateError: If ``startDate`` is missing or a date is malformed.
            PreconditionViolation: If ``endDate`` precedes ``startDate``.
        """
        moods = record.get(const.FIELD_MOODS)
        if moods is None:
            moods = record.get(const.FIELD_MOOD)

        return cls(
            start_date=to_civil_date(record.get(const.FIELD_START_DATE)),
            end_date=to_optional_civil_date(record.get(const.FIELD_END_DATE)),
            symptoms=_as_tags(record.get(const.FIELD_SYMPTOMS)),
            moods=_as_tags(moods),
        )


@dataclass(frozen=True, slots=True)
class CycleStats:
    """Aggregates and prediction over a cycle history.

    ``interval_lengths`` holds the gap samples (most recent first) that the
    average and the confidence were computed from; it is empty when fewer
    than two intervals exist.
    """

    average_interval_length_days: int
    average_duration_days: float
    predicted_next_start: date
    top_tags_a: tuple[str, ...] = ()
    top_tags_b: tuple[str, ...] = ()
    total_intervals: int = 0
    prediction_confidence: int = 0
    interval_lengths: tuple[int, ...] = ()

    def to_dict(self) -> CycleStatsData:
        """Serialize to the camelCase shape the frontend consumes."""
        return {
            "averageCycleLength": self.average_interval_length_days,
            "averagePeriodLength": self.average_duration_days,
            "nextPredictedDate": self.predicted_next_start.isoformat(),
            "commonSymptoms": list(self.top_tags_a),
            "commonMoods": list(self.top_tags_b),
            "totalCycles": self.total_intervals,
            "predictionConfidence": self.prediction_confidence,
            "cycleLengths": list(self.interval_lengths),
        }


# =============================================================================
# Engine
# =============================================================================


class CycleStatsEngine:
    """Compute statistics and predictions over a cycle history.

    The engine holds only its configuration; every call works on the
    collection it is given and keeps no reference to it.

    Example:
        engine = CycleStatsEngine()
        stats = engine.compute_stats(
            [
                {"startDate": "2026-03-29", "endDate": "2026-04-02"},
                {"startDate": "2026-03-01", "endDate": "2026-03-05"},
            ],
            today=date(2026, 4, 10),
        )
        stats.average_interval_length_days  # 28
        stats.predicted_next_start  # date(2026, 4, 26)
    """

    def __init__(self, config: StatsConfig | None = None) -> None:
        """Initialize the engine with configuration.

        Args:
            config: StatsConfig TypedDict. Missing keys use defaults.

        Note:
            Non-positive values are coerced to the defaults.
        """
        config = config or {}

        default_interval = config.get(
            const.CONF_DEFAULT_INTERVAL_DAYS, const.DEFAULT_INTERVAL_DAYS
        )
        self._default_interval_days = (
            int(default_interval)
            if default_interval and default_interval > 0
            else const.DEFAULT_INTERVAL_DAYS
        )

        ceiling = config.get(
            const.CONF_CONFIDENCE_SPREAD_CEILING_DAYS,
            const.DEFAULT_CONFIDENCE_SPREAD_CEILING_DAYS,
        )
        self._spread_ceiling = (
            float(ceiling)
            if ceiling and ceiling > 0
            else const.DEFAULT_CONFIDENCE_SPREAD_CEILING_DAYS
        )

        limit = config.get(const.CONF_TOP_TAGS_LIMIT, const.DEFAULT_TOP_TAGS_LIMIT)
        self._top_tags_limit = (
            int(limit) if limit and limit > 0 else const.DEFAULT_TOP_TAGS_LIMIT
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def compute_stats(
        self,
        intervals: Iterable[CycleInterval | Mapping[str, Any]],
        today: DateInput,
    ) -> CycleStats:
        """Compute aggregates and the next-start prediction.

        Args:
            intervals: CycleInterval objects or stored record mappings, in any
                       order.
            today: The caller's current civil date; only used as the
                   prediction when the history is empty.

        Returns:
            CycleStats. With no intervals: zero averages, prediction = today.
            With one interval: the default interval length and confidence 0.

        Raises:
            InvalidDateError: If a date is malformed.
            PreconditionViolation: If an interval ends before it starts.
        """
        reference = to_civil_date(today)
        ordered = self.sort_intervals(
            [self._coerce_interval(interval) for interval in intervals]
        )

        if not ordered:
            const.LOGGER.debug("CycleStatsEngine: Empty history, returning zero stats")
            return CycleStats(
                average_interval_length_days=const.EMPTY_HISTORY_INTERVAL_DAYS,
                average_duration_days=0.0,
                predicted_next_start=reference,
            )

        gaps = self.interval_gaps(ordered)
        if gaps:
            average_interval = round_half_up(mean(gaps))
        else:
            const.LOGGER.debug(
                "CycleStatsEngine: Single interval, using default length %s",
                self._default_interval_days,
            )
            average_interval = self._default_interval_days

        average_duration = round_value(
            mean([interval.duration_days for interval in ordered]),
            const.DURATION_PRECISION,
        )

        return CycleStats(
            average_interval_length_days=average_interval,
            average_duration_days=average_duration,
            predicted_next_start=ordered[0].start_date
            + timedelta(days=average_interval),
            top_tags_a=tuple(
                self.top_tags(tag for interval in ordered for tag in interval.symptoms)
            ),
            top_tags_b=tuple(
                self.top_tags(tag for interval in ordered for tag in interval.moods)
            ),
            total_intervals=len(ordered),
            prediction_confidence=self.prediction_confidence(gaps),
            interval_lengths=tuple(gaps),
        )

    @staticmethod
    def sort_intervals(intervals: Iterable[CycleInterval]) -> list[CycleInterval]:
        """Return intervals most recent first; equal starts keep input order."""
        return sorted(intervals, key=lambda interval: interval.start_date, reverse=True)

    @staticmethod
    def interval_gaps(ordered: Sequence[CycleInterval]) -> list[int]:
        """Return the day gaps between consecutive starts of a sorted history."""
        return [
            abs(days_between(later.start_date, earlier.start_date))
            for later, earlier in zip(ordered, ordered[1:])
        ]

    def prediction_confidence(self, gaps: Sequence[int]) -> int:
        """Map the spread of the gap samples to a 0-100 confidence.

        confidence = 100 - (σ / ceiling) × 100, clamped to [0, 100], where σ is
        the population standard deviation of the gaps and the ceiling is one
        week by default.

        Returns:
            0 with fewer than two gap samples; otherwise the clamped score.

        Examples:
            gaps [28, 28, 28] → 100
            gaps [26, 30] (σ = 2) → 71
            gaps [21, 35] (σ = 7) → 0
        """
        if len(gaps) < const.MIN_GAPS_FOR_CONFIDENCE:
            return const.CONFIDENCE_MIN

        spread = population_std_dev(gaps)
        raw = const.CONFIDENCE_MAX - (spread / self._spread_ceiling) * const.CONFIDENCE_MAX
        return round_half_up(clamp(raw, const.CONFIDENCE_MIN, const.CONFIDENCE_MAX))

    def top_tags(self, tags: Iterable[str]) -> list[str]:
        """Return the most frequent tags, ties broken by first appearance."""
        counts = Counter(tags)
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [tag for tag, _count in ranked[: self._top_tags_limit]]

    # -------------------------------------------------------------------------
    # Private
    # -------------------------------------------------------------------------

    @staticmethod
    def _coerce_interval(
        interval: CycleInterval | Mapping[str, Any],
    ) -> CycleInterval:
        """Return ``interval`` as a CycleInterval, parsing mappings."""
        if isinstance(interval, CycleInterval):
            return interval
        return CycleInterval.from_record(interval)
