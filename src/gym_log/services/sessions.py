"""Session lifecycle: start, finish, delete and the active-session pointer."""

import logging
from dataclasses import dataclass, field
from datetime import date as date_type
from pathlib import Path

from ..db.repositories import (
    AppStateRepository,
    ExerciseRepository,
    SessionExerciseRepository,
    SessionRepository,
    SetRepository,
)
from ..models.exercises import MeasurementType
from ..models.session import Session, normalize_focus
from ..models.sets import SessionExercise, WorkoutSet
from ..models.templates import TEMPLATES, SessionTemplate

logger = logging.getLogger(__name__)


@dataclass
class ExerciseSummary:
    """A session exercise with its sets."""

    exercise: SessionExercise
    sets: list[WorkoutSet] = field(default_factory=list)


@dataclass
class SessionSummary:
    """Everything needed to show one session."""

    session: Session
    exercises: list[ExerciseSummary]
    is_active: bool

    @property
    def total_sets(self) -> int:
        return sum(len(item.sets) for item in self.exercises)


@dataclass
class SetSuggestion:
    """Defaults for the next set of an exercise, drawn from all sessions."""

    exercise_name: str
    measurement_type: MeasurementType
    latest: WorkoutSet | None
    personal_best: float | None


class SessionService:
    """Orchestrates session rows, the active pointer and template preload.

    At most one session is tracked as active. Starting a session moves the
    pointer to it even if the previous one was never finished; the previous
    session keeps its ``active`` status until finished or deleted.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        templates: dict[str, SessionTemplate] | None = None,
    ):
        self.sessions = SessionRepository(db_path)
        self.state = AppStateRepository(db_path)
        self.session_exercises = SessionExerciseRepository(db_path)
        self.sets = SetRepository(db_path)
        self.catalog = ExerciseRepository(db_path)
        self.templates = templates if templates is not None else TEMPLATES

    async def create(
        self,
        date: str | date_type | None = None,
        focus: str | None = None,
        notes: str | None = None,
        preload_template: bool = False,
    ) -> int:
        """Start a session and make it the active one.

        Args:
            date: Calendar date (today if blank)
            focus: Category label (``other`` if blank)
            notes: Optional notes
            preload_template: Also attach the template exercises for ``focus``

        Returns:
            The new session's id
        """
        session_id = await self.sessions.create(date=date, focus=focus, notes=notes)

        previous = await self.state.get_active_session_id()
        if previous is not None and previous != session_id:
            logger.info("Active session moves from %d to %d", previous, session_id)
        await self.state.set_active_session_id(session_id)

        if preload_template:
            await self.preload_template(session_id, normalize_focus(focus))

        logger.info("Session %d started", session_id)
        return session_id

    async def finish(self, session_id: int) -> Session | None:
        """Finish a session and release the active pointer if it holds it.

        Finishing an already finished session keeps its original
        ``finished_at``.
        """
        if await self.sessions.mark_finished(session_id):
            logger.info("Session %d finished", session_id)

        if await self.state.get_active_session_id() == session_id:
            await self.state.clear_active_session_id()

        return await self.sessions.get(session_id)

    async def delete(self, session_id: int) -> bool:
        """Delete a session with its exercises and sets.

        Returns:
            True if a session was deleted
        """
        deleted = await self.sessions.delete(session_id)

        if await self.state.get_active_session_id() == session_id:
            await self.state.clear_active_session_id()

        if deleted:
            logger.info("Session %d deleted", session_id)
        return deleted

    async def get_active(self) -> int | None:
        return await self.state.get_active_session_id()

    async def get_active_session(self) -> Session | None:
        session_id = await self.get_active()
        if session_id is None:
            return None
        return await self.sessions.get(session_id)

    async def get_detail(self, session_id: int) -> Session | None:
        return await self.sessions.get(session_id)

    async def list_recent(self, limit: int = 20) -> list[Session]:
        """Most recent sessions first."""
        return await self.sessions.list_recent(limit)

    async def open(self, session_id: int) -> Session | None:
        """Load a session, pointing the active pointer at it if still active."""
        session = await self.sessions.get(session_id)
        if session is not None and session.is_active:
            await self.state.set_active_session_id(session.id)
        return session

    async def preload_template(self, session_id: int, focus: str) -> int:
        """Attach the template exercises for ``focus`` in template order.

        Names are inserted as-is; aliases are not resolved.

        Returns:
            Number of exercises attached (0 when no template exists)
        """
        template = self.templates.get(focus)
        if template is None:
            logger.info("No template for focus=%r", focus)
            return 0

        names = template.exercise_names
        for position, name in enumerate(names):
            await self.session_exercises.add(session_id, name, position=position)

        logger.info("Preloaded %d template exercises for %s", len(names), focus)
        return len(names)

    async def summary(self, session_id: int, order: str = "recent") -> SessionSummary | None:
        """Session detail with every exercise and its sets."""
        session = await self.sessions.get(session_id)
        if session is None:
            return None

        exercises = []
        for session_exercise in await self.session_exercises.list_for_session(
            session_id, order=order
        ):
            sets = await self.sets.list_for(session_exercise.id)
            exercises.append(ExerciseSummary(exercise=session_exercise, sets=sets))

        return SessionSummary(
            session=session,
            exercises=exercises,
            is_active=await self.get_active() == session_id,
        )

    async def suggest_set(self, exercise_name: str) -> SetSuggestion:
        """Latest set and heaviest weight logged for an exercise name."""
        return SetSuggestion(
            exercise_name=exercise_name,
            measurement_type=await self.catalog.get_measurement_type(exercise_name),
            latest=await self.sets.latest_for(exercise_name),
            personal_best=await self.sets.personal_best(exercise_name),
        )
