from fastapi import APIRouter, Depends

from app.constants import SuccessMessages
from app.schemas import TeamCreate, TeamUpdate, TeamMemberAdd
from app.utils import team_service
from app.utils.deps import APIContext

router = APIRouter(prefix="/teams", tags=["Teams"])

@router.get("")
def get_all_teams(ctx: APIContext = Depends()):
    """
    Retrieves all teams with their manager and member count.
    """
    return {"teams": team_service.list_teams(ctx.db)}

@router.get("/{team_id}")
def get_team(team_id: int, ctx: APIContext = Depends()):
    """
    Retrieves details of a specific team and its members.
    """
    return team_service.get_team(ctx.db, ctx.user, team_id)

@router.post("", status_code=201)
def create_team(team_data: TeamCreate, ctx: APIContext = Depends()):
    """
    Creates a new team.
    Restricted to Admins and Managers.
    """
    return {"team": team_service.create_team(ctx.db, ctx.user, team_data)}

@router.put("/{team_id}")
def update_team(team_id: int, team_update: TeamUpdate, ctx: APIContext = Depends()):
    """
    Updates an existing team.
    Restricted to Admins and Managers.
    """
    return {"team": team_service.update_team(ctx.db, ctx.user, team_id, team_update)}

@router.delete("/{team_id}")
def delete_team(team_id: int, ctx: APIContext = Depends()):
    """
    Deletes a team.
    Restricted to Admins.
    """
    team_service.delete_team(ctx.db, ctx.user, team_id)
    return {"message": SuccessMessages.TEAM_DELETED}

@router.post("/{team_id}/members")
def add_team_member(team_id: int, data: TeamMemberAdd, ctx: APIContext = Depends()):
    """
    Adds a member to a team.
    Restricted to Admins and the team's Manager.
    """
    team_service.add_member(ctx.db, ctx.user, team_id, data.user_id)
    return {"message": SuccessMessages.MEMBER_ADDED}

@router.delete("/{team_id}/members/{user_id}")
def remove_team_member(team_id: int, user_id: int, ctx: APIContext = Depends()):
    team_service.remove_member(ctx.db, ctx.user, team_id, user_id)
    return {"message": SuccessMessages.MEMBER_REMOVED}
