"""
Deload advisor.

Looks at rolling weekly aggregates (hit rate, average RPE, volume) and
recommends a lighter week when effort is creeping up or performance is
slipping. The advisor only signals; ``apply_deload`` is the separate step
that scales targets for sessions inside an active DeloadWindow.

Also provides the fatigue score shown alongside the suggestion.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from backend.core.loadable_weight import round_to_half
from backend.core.performance_evaluator import (
    DEFAULT_THRESHOLDS,
    EvaluationThresholds,
    hit_rate,
)
from domain.models.training import DeloadWindow, SessionRecord, TargetCalculation

logger = logging.getLogger(__name__)

DEFAULT_DELOAD_MULTIPLIER = 0.65
DEFAULT_LOOKBACK_WEEKS = 12
DELOAD_WINDOW_DAYS = 7

# RPE trend
RPE_TREND_DELTAS = 3
RPE_TREND_MIN_RISES = 2
RPE_TREND_CEILING = 7.5
RPE_TREND_MIN_INCREASE = 0.5

# Volume spike
VOLUME_MIN_WEEKS = 4
VOLUME_RECENT_WEEKS = 3
VOLUME_SPIKE_RATIO = 1.15

# Hit-rate rules
LOW_HIT_RATE = 50
LOW_HIT_STREAK = 2
DIP_MIN_WEEKS = 6
DIP_POINTS = 15
DIP_CEILING = 60
STRUGGLING_HIT_RATE = 65
TIME_BASED_RECENT_WEEKS = 4


class DeloadTrigger(str, Enum):
    """Rule that produced a deload suggestion."""

    RPE_TREND = "rpe_trend"
    VOLUME_SPIKE = "volume_spike"
    LOW_HIT_RATE_STREAK = "low_hit_rate_streak"
    RECENT_DIP = "recent_dip"
    TIME_BASED = "time_based"


class FatigueZone(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


ZONE_INSIGHTS = {
    FatigueZone.GREEN: "You're well-recovered. Push hard and aim for PRs this week.",
    FatigueZone.YELLOW: "Accumulated load is building. Prioritize sleep and nutrition to sustain performance.",
    FatigueZone.RED: "High fatigue detected. A deload week will help you recover and come back stronger.",
}


@dataclass(frozen=True)
class WeeklyAggregate:
    """One training week. ``hit_rate`` and ``avg_rpe`` are None without data."""

    week_start: date
    hit_rate: Optional[float] = None
    avg_rpe: Optional[float] = None
    total_volume: float = 0.0

    @property
    def has_hit_rate(self) -> bool:
        return self.hit_rate is not None and self.hit_rate > 0


@dataclass(frozen=True)
class DeloadSuggestion:
    should_deload: bool
    reason: str
    trigger: DeloadTrigger


@dataclass(frozen=True)
class FatigueScore:
    score: int
    zone: FatigueZone
    weeks_trained: int

    @property
    def insight(self) -> str:
        return ZONE_INSIGHTS[self.zone]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _valid_hit_rates(weeks: Iterable[WeeklyAggregate]) -> List[float]:
    return [w.hit_rate for w in weeks if w.has_hit_rate]


def _trailing_low_streak(rates: Sequence[float], threshold: float = LOW_HIT_RATE) -> int:
    streak = 0
    for rate in reversed(rates):
        if rate >= threshold:
            break
        streak += 1
    return streak


# =============================================================================
# Rules (first match wins)
# =============================================================================


def _rpe_trend(weeks: Sequence[WeeklyAggregate]) -> Optional[DeloadSuggestion]:
    rpes = [w.avg_rpe for w in weeks if w.avg_rpe is not None]
    if len(rpes) < RPE_TREND_DELTAS + 1:
        return None

    recent = rpes[-(RPE_TREND_DELTAS + 1):]
    rises = sum(1 for prev, cur in zip(recent, recent[1:]) if cur > prev)
    latest = rpes[-1]
    if (
        rises >= RPE_TREND_MIN_RISES
        and latest >= RPE_TREND_CEILING
        and latest >= rpes[0] + RPE_TREND_MIN_INCREASE
    ):
        return DeloadSuggestion(
            should_deload=True,
            reason="Your effort has been creeping up week over week. A lighter week can reset fatigue.",
            trigger=DeloadTrigger.RPE_TREND,
        )
    return None


def _volume_spike(weeks: Sequence[WeeklyAggregate]) -> Optional[DeloadSuggestion]:
    with_volume = [w for w in weeks if w.total_volume > 0]
    if len(with_volume) < VOLUME_MIN_WEEKS:
        return None

    recent = with_volume[-VOLUME_RECENT_WEEKS:]
    earlier = with_volume[:-VOLUME_RECENT_WEEKS]
    recent_rates = _valid_hit_rates(recent)
    if not recent_rates:
        return None

    recent_volume = _mean([w.total_volume for w in recent])
    earlier_volume = _mean([w.total_volume for w in earlier])
    if recent_volume > earlier_volume * VOLUME_SPIKE_RATIO and _mean(recent_rates) < STRUGGLING_HIT_RATE:
        return DeloadSuggestion(
            should_deload=True,
            reason="Training volume jumped while performance dipped. A deload week may help you adapt.",
            trigger=DeloadTrigger.VOLUME_SPIKE,
        )
    return None


def _low_hit_rate_streak(rates: Sequence[float]) -> Optional[DeloadSuggestion]:
    if _trailing_low_streak(rates) >= LOW_HIT_STREAK:
        return DeloadSuggestion(
            should_deload=True,
            reason="You've had a few tough weeks. Consider a lighter week to recover.",
            trigger=DeloadTrigger.LOW_HIT_RATE_STREAK,
        )
    return None


def _recent_dip(rates: Sequence[float]) -> Optional[DeloadSuggestion]:
    if len(rates) < DIP_MIN_WEEKS:
        return None
    recent_avg = _mean(rates[-2:])
    earlier_avg = _mean(rates[-6:-2])
    if recent_avg <= earlier_avg - DIP_POINTS and recent_avg < DIP_CEILING:
        return DeloadSuggestion(
            should_deload=True,
            reason="Performance has dipped recently. A deload week may help you bounce back.",
            trigger=DeloadTrigger.RECENT_DIP,
        )
    return None


def _time_based(rates: Sequence[float], deload_frequency_weeks: int) -> Optional[DeloadSuggestion]:
    if len(rates) < deload_frequency_weeks:
        return None
    if _mean(rates[-TIME_BASED_RECENT_WEEKS:]) < STRUGGLING_HIT_RATE:
        return DeloadSuggestion(
            should_deload=True,
            reason=f"You've trained for {len(rates)}+ weeks. Consider a lighter week to support recovery.",
            trigger=DeloadTrigger.TIME_BASED,
        )
    return None


def suggest_deload(
    weeks: Sequence[WeeklyAggregate],
    deload_frequency_weeks: int,
) -> Optional[DeloadSuggestion]:
    """
    Decide whether to recommend a deload week.

    Args:
        weeks: Weekly aggregates, oldest -> newest (6-12 weeks)
        deload_frequency_weeks: Plan setting; weeks of valid data before the
            time-based rule applies

    Returns:
        DeloadSuggestion from the first matching rule, or None
    """
    rates = _valid_hit_rates(weeks)
    suggestion = (
        _rpe_trend(weeks)
        or _volume_spike(weeks)
        or _low_hit_rate_streak(rates)
        or _recent_dip(rates)
        or _time_based(rates, deload_frequency_weeks)
    )
    if suggestion:
        logger.info("Deload suggested (%s) over %d weeks", suggestion.trigger.value, len(weeks))
    return suggestion


# =============================================================================
# Aggregation
# =============================================================================


def build_weekly_aggregates(
    sessions: Iterable[SessionRecord],
    end_date: date,
    weeks: int = DEFAULT_LOOKBACK_WEEKS,
    thresholds: EvaluationThresholds = DEFAULT_THRESHOLDS,
) -> List[WeeklyAggregate]:
    """
    Bucket dated sessions into 7-day weeks ending on ``end_date``.

    Returns ``weeks`` aggregates, oldest first. Sessions outside the range
    are ignored.
    """
    first_day = end_date - timedelta(days=weeks * 7 - 1)
    buckets: List[List[SessionRecord]] = [[] for _ in range(weeks)]
    for session in sessions:
        if first_day <= session.workout_date <= end_date:
            buckets[(session.workout_date - first_day).days // 7].append(session)

    aggregates = []
    for index, bucket in enumerate(buckets):
        working = [s for session in bucket for s in session.working_sets]
        rated = [s.rpe for s in working if s.rpe > 0]
        aggregates.append(
            WeeklyAggregate(
                week_start=first_day + timedelta(days=index * 7),
                hit_rate=hit_rate(working, thresholds),
                avg_rpe=_mean(rated) if rated else None,
                total_volume=sum(s.weight * s.reps for s in working),
            )
        )
    return aggregates


# =============================================================================
# Deload window
# =============================================================================


def start_deload_window(today: date) -> DeloadWindow:
    """Deload window ending on the coming Sunday (today if it is Sunday)."""
    days_to_sunday = (6 - today.weekday()) % 7
    return DeloadWindow(active_until=today + timedelta(days=days_to_sunday))


def is_in_deload(window: Optional[DeloadWindow], session_date: date) -> bool:
    return window is not None and window.contains(session_date)


def apply_deload(
    target: TargetCalculation,
    window: Optional[DeloadWindow],
    session_date: date,
    multiplier: float = DEFAULT_DELOAD_MULTIPLIER,
) -> TargetCalculation:
    """Scale a target's weight when the session falls inside the window."""
    if target.target_weight is None or not is_in_deload(window, session_date):
        return target
    return target.model_copy(
        update={"target_weight": round_to_half(target.target_weight * multiplier)}
    )


def apply_deload_to_targets(
    targets: Iterable[TargetCalculation],
    window: Optional[DeloadWindow],
    session_date: date,
    multiplier: float = DEFAULT_DELOAD_MULTIPLIER,
) -> List[TargetCalculation]:
    return [apply_deload(t, window, session_date, multiplier) for t in targets]


def exclude_deload_sessions(
    history: Iterable[SessionRecord],
    window: Optional[DeloadWindow],
) -> List[SessionRecord]:
    """
    Drop sessions logged inside the deload window.

    Deload weights must never become the progression base the week after.
    """
    history = list(history)
    if window is None:
        return history
    kept = [s for s in history if not window.contains(s.workout_date)]
    if len(kept) != len(history):
        logger.debug("Excluded %d deload-week sessions", len(history) - len(kept))
    return kept


# =============================================================================
# Fatigue score
# =============================================================================


def calculate_fatigue_score(
    weeks: Sequence[WeeklyAggregate],
    deload_frequency_weeks: int,
) -> FatigueScore:
    """
    Fatigue score 0-100: time trained, declining hit rate and low-week streak.
    """
    rates = _valid_hit_rates(weeks)
    weeks_trained = len(rates)
    score = min(100.0, weeks_trained / max(deload_frequency_weeks, 1) * 40)

    if len(rates) >= DIP_MIN_WEEKS:
        recent_avg = _mean(rates[-2:])
        earlier_avg = _mean(rates[-6:-2])
        if recent_avg < earlier_avg - 10:
            score += 25
        elif recent_avg < earlier_avg - 5:
            score += 15

    streak = _trailing_low_streak(rates)
    if streak >= 3:
        score += 30
    elif streak == 2:
        score += 20
    elif streak == 1:
        score += 10

    final = min(100, round(score))
    if final >= 75:
        zone = FatigueZone.RED
    elif final >= 50:
        zone = FatigueZone.YELLOW
    else:
        zone = FatigueZone.GREEN
    return FatigueScore(score=final, zone=zone, weeks_trained=weeks_trained)
