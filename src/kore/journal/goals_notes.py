"""Goals and quick notes.

Goal progress for profit, trades and winrate goals is refreshed from
the user's current trading stats; custom goals are tracked by hand.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from kore.aggregation.stats import TradingStats, compute_stats
from kore.core.errors import NotFoundError
from kore.db import repo
from kore.db.repo import DbSession
from kore.models.domain import GoalEntity, GoalType, NoteEntity, NoteType

logger = logging.getLogger(__name__)

DEFAULT_GOAL_TITLE = "New goal"


# ============================================================================
# Goals
# ============================================================================


def list_goals(session: DbSession, user_id: str) -> list[GoalEntity]:
    return repo.get_goals_for_user(session, user_id)


def create_goal(
    session: DbSession,
    user_id: str,
    *,
    title: str | None = None,
    target_value: float | None = None,
    current_value: float | None = None,
    goal_type: GoalType | None = None,
    is_completed: bool | None = None,
) -> GoalEntity:
    """Create a goal, filling defaults for omitted fields."""
    goal = GoalEntity(
        goal_id=str(uuid.uuid4()),
        user_id=user_id,
        title=title if title is not None else DEFAULT_GOAL_TITLE,
        target_value=target_value if target_value is not None else 0.0,
        current_value=current_value if current_value is not None else 0.0,
        goal_type=goal_type if goal_type is not None else "custom",
        is_completed=is_completed if is_completed is not None else False,
    )
    repo.create_goal(session, goal)
    repo.commit(session)
    logger.info(f"Created goal {goal.goal_id} for user {user_id}")
    return goal


def update_goal(
    session: DbSession, user_id: str, goal_id: str, changes: dict[str, Any]
) -> GoalEntity:
    """Apply a partial update.

    Raises:
        NotFoundError: If the user has no such goal.
    """
    goal = repo.update_goal(session, user_id, goal_id, changes)
    if goal is None:
        raise NotFoundError(f"Goal not found: {goal_id}")
    repo.commit(session)
    logger.info(f"Updated goal {goal_id}")
    return goal


def delete_goal(session: DbSession, user_id: str, goal_id: str) -> None:
    """Delete a goal.

    Raises:
        NotFoundError: If the user has no such goal.
    """
    if not repo.delete_goal(session, user_id, goal_id):
        raise NotFoundError(f"Goal not found: {goal_id}")
    repo.commit(session)
    logger.info(f"Deleted goal {goal_id}")


def goal_progress(goal_type: GoalType, stats: TradingStats) -> float | None:
    """Current value of a stats-backed goal, None for custom goals."""
    if goal_type == "profit":
        return stats.net_pnl
    if goal_type == "trades":
        return float(stats.closed_trades)
    if goal_type == "winrate":
        return stats.win_rate
    return None


def refresh_goal_progress(session: DbSession, user_id: str) -> list[GoalEntity]:
    """Recompute current_value and completion of stats-backed goals.

    Returns:
        All of the user's goals after the refresh.
    """
    stats = compute_stats(repo.get_trades_for_user(session, user_id))

    for goal in repo.get_goals_for_user(session, user_id):
        progress = goal_progress(goal.goal_type, stats)
        if progress is None:
            continue
        repo.update_goal(
            session,
            user_id,
            goal.goal_id,
            {"current_value": progress, "is_completed": progress >= goal.target_value},
        )

    repo.commit(session)
    logger.info(f"Refreshed goal progress for user {user_id}")
    return repo.get_goals_for_user(session, user_id)


# ============================================================================
# Notes
# ============================================================================


def list_notes(session: DbSession, user_id: str) -> list[NoteEntity]:
    return repo.get_notes_for_user(session, user_id)


def create_note(
    session: DbSession, user_id: str, content: str, note_type: NoteType = "thought"
) -> NoteEntity:
    """Create an unpinned note."""
    note = repo.create_note(
        session,
        NoteEntity(
            note_id=str(uuid.uuid4()),
            user_id=user_id,
            content=content,
            note_type=note_type,
            pinned=False,
        ),
    )
    repo.commit(session)
    logger.info(f"Created note {note.note_id} for user {user_id}")
    return note


def toggle_pin(session: DbSession, user_id: str, note_id: str) -> NoteEntity:
    """Pin an unpinned note or unpin a pinned one.

    Raises:
        NotFoundError: If the user has no such note.
    """
    note = repo.toggle_note_pin(session, user_id, note_id)
    if note is None:
        raise NotFoundError(f"Note not found: {note_id}")
    repo.commit(session)
    logger.info(f"Set note {note_id} pinned={note.pinned}")
    return note


def delete_note(session: DbSession, user_id: str, note_id: str) -> None:
    """Delete a note.

    Raises:
        NotFoundError: If the user has no such note.
    """
    if not repo.delete_note(session, user_id, note_id):
        raise NotFoundError(f"Note not found: {note_id}")
    repo.commit(session)
    logger.info(f"Deleted note {note_id}")
