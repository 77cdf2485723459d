"""Goals API endpoint.

GET /api/goals - List goals
POST /api/goals - Create a goal
PATCH /api/goals/{goal_id} - Edit a goal
DELETE /api/goals/{goal_id} - Delete a goal
POST /api/goals/refresh - Recompute progress of stats-backed goals
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from kore.api.app import get_current_user_id, get_db_session
from kore.core.errors import NotFoundError
from kore.db.repo import DbSession
from kore.journal import goals_notes as journal
from kore.models.domain import GoalEntity
from kore.models.types import GoalCreate, GoalDetail, GoalUpdate

router = APIRouter()


def _build_goal_detail(goal: GoalEntity) -> GoalDetail:
    return GoalDetail(
        goal_id=goal.goal_id,
        title=goal.title,
        target_value=goal.target_value,
        current_value=goal.current_value,
        goal_type=goal.goal_type,
        is_completed=goal.is_completed,
    )


@router.get("/goals", response_model=list[GoalDetail])
def list_goals(
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[GoalDetail]:
    return [_build_goal_detail(g) for g in journal.list_goals(session, user_id)]


@router.post("/goals", response_model=GoalDetail, status_code=201)
def create_goal(
    payload: GoalCreate,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> GoalDetail:
    """Create a goal. Omitted fields take defaults."""
    goal = journal.create_goal(session, user_id, **payload.model_dump())
    return _build_goal_detail(goal)


@router.post("/goals/refresh", response_model=list[GoalDetail])
def refresh_goals(
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[GoalDetail]:
    """Recompute current value and completion from the caller's stats."""
    return [_build_goal_detail(g) for g in journal.refresh_goal_progress(session, user_id)]


@router.patch("/goals/{goal_id}", response_model=GoalDetail)
def update_goal(
    goal_id: str,
    payload: GoalUpdate,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> GoalDetail:
    """Edit a goal. Omitted or null fields are left unchanged."""
    changes = {
        name: value
        for name, value in payload.model_dump(exclude_unset=True).items()
        if value is not None
    }

    try:
        goal = journal.update_goal(session, user_id, goal_id, changes)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return _build_goal_detail(goal)


@router.delete("/goals/{goal_id}", status_code=204)
def delete_goal(
    goal_id: str,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    try:
        journal.delete_goal(session, user_id, goal_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return Response(status_code=204)
