"""
Personal record detection.

Two independent record types per exercise (within one program day):
- heaviest set: the most weight moved for any reps
- estimated 1RM: the best Epley estimate

Only working resistance sets with positive weight and reps count, both for
the candidate set and for the history it is compared against.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Sequence, Set, Tuple

from backend.core.estimated_max import estimated_1rm
from domain.models.training import PersonalRecord, PRType, SessionRecord, SetRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PRStatus:
    is_heaviest_set_pr: bool = False
    is_e1rm_pr: bool = False

    @property
    def is_pr(self) -> bool:
        return self.is_heaviest_set_pr or self.is_e1rm_pr


@dataclass(frozen=True)
class SessionExercise:
    """One exercise's sets as logged in the current session."""

    exercise_name: str
    sets: Sequence[SetRecord] = ()


@dataclass(frozen=True)
class DaySession:
    """A completed program-day session, used to replay PR history."""

    day_id: str
    workout_date: date
    exercises: Sequence[SessionExercise] = ()


@dataclass(frozen=True)
class RecentPR:
    exercise_name: str
    day_id: str
    pr_type: PRType
    value: float
    workout_date: date


@dataclass
class _Best:
    weight: float = 0.0
    e1rm: float = 0.0


def _countable(s: SetRecord) -> bool:
    return s.is_working and s.is_resistance and s.weight > 0 and s.reps > 0


def _best_of(sets: Iterable[SetRecord]) -> _Best:
    best = _Best()
    for s in sets:
        if _countable(s):
            best.weight = max(best.weight, s.weight)
            best.e1rm = max(best.e1rm, estimated_1rm(s.weight, s.reps))
    return best


def check_set_pr(
    weight: float,
    reps: int,
    history: Iterable[SessionRecord],
    current_sets: Iterable[SetRecord] = (),
) -> PRStatus:
    """
    Check a set against prior sessions and the current session's other sets.

    Args:
        weight: Weight of the candidate set
        reps: Reps of the candidate set
        history: Prior sessions of this exercise in this program day
        current_sets: Other sets already logged in the current session

    Returns:
        PRStatus; both flags False when weight or reps is not positive
    """
    if weight <= 0 or reps <= 0:
        return PRStatus()

    prior = [s for session in history for s in session.sets]
    best = _best_of([*prior, *current_sets])
    return PRStatus(
        is_heaviest_set_pr=weight > best.weight,
        is_e1rm_pr=estimated_1rm(weight, reps) > best.e1rm,
    )


def detect_session_prs(
    exercises: Iterable[SessionExercise],
    history_by_exercise: Mapping[str, Sequence[SessionRecord]],
) -> List[PersonalRecord]:
    """
    All PRs set in a session, for the workout-complete summary.

    Each working set is compared against the exercise's history and the
    session's other working sets. Only the first occurrence of each PR type
    per exercise is reported, in session order.
    """
    records: List[PersonalRecord] = []
    seen: Dict[str, Set[PRType]] = {}

    for exercise in exercises:
        working = [s for s in exercise.sets if s.is_working and s.is_resistance]
        history = history_by_exercise.get(exercise.exercise_name, ())
        reported = seen.setdefault(exercise.exercise_name, set())

        for index, candidate in enumerate(working):
            if candidate.weight <= 0 or candidate.reps <= 0:
                continue
            # Earlier sets must be beaten; later sets only must not beat it,
            # so a record repeated across sets still counts once.
            status = check_set_pr(candidate.weight, candidate.reps, history, working[:index])
            later = _best_of(working[index + 1:])
            status = PRStatus(
                is_heaviest_set_pr=status.is_heaviest_set_pr and candidate.weight >= later.weight,
                is_e1rm_pr=(
                    status.is_e1rm_pr
                    and estimated_1rm(candidate.weight, candidate.reps) >= later.e1rm
                ),
            )

            if status.is_heaviest_set_pr and PRType.HEAVIEST_SET not in reported:
                reported.add(PRType.HEAVIEST_SET)
                records.append(
                    PersonalRecord(
                        exercise_name=exercise.exercise_name,
                        pr_type=PRType.HEAVIEST_SET,
                        value=candidate.weight,
                        weight=candidate.weight,
                        reps=candidate.reps,
                    )
                )
            if status.is_e1rm_pr and PRType.E1RM not in reported:
                reported.add(PRType.E1RM)
                records.append(
                    PersonalRecord(
                        exercise_name=exercise.exercise_name,
                        pr_type=PRType.E1RM,
                        value=round(estimated_1rm(candidate.weight, candidate.reps), 1),
                        weight=candidate.weight,
                        reps=candidate.reps,
                    )
                )

    logger.debug("Detected %d PRs across session", len(records))
    return records


def find_recent_prs(sessions: Iterable[DaySession], limit: int = 5) -> List[RecentPR]:
    """
    Replay sessions chronologically and return the newest PR events first.

    Bests are tracked per (day, exercise); the first logged set of an
    exercise always counts as a record.
    """
    bests: Dict[Tuple[str, str], _Best] = {}
    events: List[RecentPR] = []

    for session in sorted(sessions, key=lambda s: s.workout_date):
        for exercise in session.exercises:
            best = bests.setdefault((session.day_id, exercise.exercise_name), _Best())
            for s in exercise.sets:
                if not _countable(s):
                    continue
                e1rm = estimated_1rm(s.weight, s.reps)
                if s.weight > best.weight:
                    best.weight = s.weight
                    events.append(
                        RecentPR(
                            exercise_name=exercise.exercise_name,
                            day_id=session.day_id,
                            pr_type=PRType.HEAVIEST_SET,
                            value=s.weight,
                            workout_date=session.workout_date,
                        )
                    )
                if e1rm > best.e1rm:
                    best.e1rm = e1rm
                    events.append(
                        RecentPR(
                            exercise_name=exercise.exercise_name,
                            day_id=session.day_id,
                            pr_type=PRType.E1RM,
                            value=round(e1rm, 1),
                            workout_date=session.workout_date,
                        )
                    )

    if limit <= 0:
        return []
    return events[-limit:][::-1]
