#teamtasks/api/team.py
from fastapi import APIRouter, Depends, status
from typing import List

from teamtasks.schemas.team import (
    TeamCreate,
    TeamRead,
    TeamDetail,
    TeamUpdate,
    TeamMemberRead,
    AddMemberRequest,
    InvitationCreate,
    InvitationRead,
)
from teamtasks.schemas.response import Envelope, MessageResponse
from teamtasks.core.security import CallerIdentity
from teamtasks.dependencies import get_current_identity, get_team_service
from teamtasks.services.teams import TeamService

router = APIRouter(prefix="/teams", tags=["Teams"])

@router.post("", response_model=Envelope[TeamRead], status_code=status.HTTP_201_CREATED)
def create_team_api(
    data: TeamCreate,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    """
    Создать новую команду (создатель автоматически становится admin).
    """
    team = service.create_team(data.model_dump(), caller.user_id)
    return Envelope(data=TeamRead.model_validate(team), message="Team created successfully")

@router.get("", response_model=Envelope[List[TeamRead]])
def list_teams(
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    """
    Команды, в которых состоит текущий пользователь.
    """
    return Envelope(data=[TeamRead.model_validate(t) for t in service.get_teams(caller.user_id)])

# --- Приглашения (до /{team_id}, чтобы "invitations" не разбирался как ID) ---

@router.get("/invitations/me", response_model=Envelope[List[InvitationRead]])
def my_invitations(
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    """
    Ожидающие приглашения текущего пользователя.
    """
    return Envelope(data=[InvitationRead.model_validate(i) for i in service.get_invitations(caller.user_id)])

@router.post("/invitations/{invitation_id}/accept", response_model=Envelope[InvitationRead])
def accept_invitation(
    invitation_id: int,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    invitation = service.respond_to_invitation(invitation_id, True, caller.user_id)
    return Envelope(data=InvitationRead.model_validate(invitation), message="Invitation accepted")

@router.post("/invitations/{invitation_id}/reject", response_model=Envelope[InvitationRead])
def reject_invitation(
    invitation_id: int,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    invitation = service.respond_to_invitation(invitation_id, False, caller.user_id)
    return Envelope(data=InvitationRead.model_validate(invitation), message="Invitation rejected")

@router.get("/{team_id}", response_model=Envelope[TeamDetail])
def read_team(
    team_id: int,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    """
    Получить команду по ID вместе с задачами. Только для участников.
    """
    return Envelope(data=TeamDetail.model_validate(service.get_team(team_id, caller.user_id)))

@router.put("/{team_id}", response_model=Envelope[TeamRead])
def update_team_api(
    team_id: int,
    data: TeamUpdate,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    """
    Обновить команду. Только admin.
    """
    team = service.update_team(team_id, data.model_dump(exclude_unset=True), caller.user_id)
    return Envelope(data=TeamRead.model_validate(team), message="Team updated successfully")

@router.delete("/{team_id}", response_model=MessageResponse)
def delete_team_api(
    team_id: int,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    """
    Удалить команду вместе с её задачами. Только создатель.
    """
    service.delete_team(team_id, caller.user_id)
    return MessageResponse(message="Team deleted successfully")

@router.post("/{team_id}/members", response_model=Envelope[TeamMemberRead], status_code=status.HTTP_201_CREATED)
def add_team_member(
    team_id: int,
    data: AddMemberRequest,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    """
    Добавить участника. Только admin.
    """
    membership = service.add_member(team_id, data.user_id, caller.user_id, role=data.role.value)
    return Envelope(data=TeamMemberRead.model_validate(membership), message="Member added successfully")

@router.delete("/{team_id}/members/{user_id}", response_model=MessageResponse)
def remove_team_member(
    team_id: int,
    user_id: int,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    """
    Убрать участника. Только admin; создателя убрать нельзя.
    """
    service.remove_member(team_id, user_id, caller.user_id)
    return MessageResponse(message="Member removed successfully")

@router.post("/{team_id}/invitations", response_model=Envelope[InvitationRead], status_code=status.HTTP_201_CREATED)
def invite_team_member(
    team_id: int,
    data: InvitationCreate,
    caller: CallerIdentity = Depends(get_current_identity),
    service: TeamService = Depends(get_team_service),
):
    """
    Пригласить пользователя в команду. Только admin.
    """
    invitation = service.invite_member(team_id, data.user_id, caller.user_id, message=data.message)
    return Envelope(data=InvitationRead.model_validate(invitation), message="Invitation sent")
