# teamtasks/crud/team.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import datetime, timezone
from typing import List, Optional
import logging

from teamtasks.models.team import Team, TeamMember, TeamInvitation, TeamRole, InvitationStatus
from teamtasks.crud.user import get_existing_user_ids
from teamtasks.core.exceptions import (
    AlreadyTeamMember,
    AuthenticationError,
    ConflictError,
    InvitationNotFound,
    TeamNotFound,
    TeamValidationError,
)

logger = logging.getLogger("TeamTasks.Teams")

NAME_MAX_LENGTH = 100

def _validated_name(raw: Optional[str]) -> str:
    name = (raw or "").strip()
    if not name:
        raise TeamValidationError("Team name is required.")
    if len(name) > NAME_MAX_LENGTH:
        raise TeamValidationError(f"Team name must be at most {NAME_MAX_LENGTH} characters.")
    return name

def create_team(db: Session, data: dict, creator_id: int) -> Team:
    """
    Создать команду: создатель — admin, member_ids — участники с ролью member.
    Всё пишется одной транзакцией: либо команда со всеми участниками, либо ничего.
    """
    name = _validated_name(data.get("name"))
    member_ids = [uid for uid in dict.fromkeys(data.get("member_ids") or []) if uid != creator_id]
    missing = set(member_ids) - get_existing_user_ids(db, member_ids)
    if missing:
        raise TeamValidationError(f"User not found: {', '.join(str(i) for i in sorted(missing))}")

    team = Team(
        name=name,
        description=(data.get("description") or "").strip() or None,
        creator_id=creator_id,
    )
    team.members.append(TeamMember(user_id=creator_id, role=TeamRole.ADMIN.value))
    for user_id in member_ids:
        team.members.append(TeamMember(user_id=user_id, role=TeamRole.MEMBER.value))
    db.add(team)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        # Участники уже проверены: остаётся только создатель из токена
        logger.error(f"Integrity error while creating team '{name}': {e}")
        raise AuthenticationError("User no longer exists. Please log in again.")
    db.refresh(team)
    logger.info(f"Created team '{team.name}' (ID: {team.id}) with {len(team.members)} members")
    return team

def get_team(db: Session, team_id: int) -> Team:
    """
    Получить команду по ID.
    """
    team = db.query(Team).filter(Team.id == team_id).first()
    if not team:
        raise TeamNotFound("Team not found")
    return team

def get_teams_for_user(db: Session, user_id: int) -> List[Team]:
    """
    Команды, в которых пользователь состоит, новые первыми.
    """
    return (
        db.query(Team)
        .filter(Team.members.any(TeamMember.user_id == user_id))
        .order_by(Team.created_at.desc(), Team.id.desc())
        .all()
    )

def get_membership(db: Session, team_id: int, user_id: int) -> Optional[TeamMember]:
    return (
        db.query(TeamMember)
        .filter(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
        .first()
    )

def is_member(db: Session, team_id: int, user_id: int) -> bool:
    return get_membership(db, team_id, user_id) is not None

def is_admin(db: Session, team_id: int, user_id: int) -> bool:
    membership = get_membership(db, team_id, user_id)
    return membership is not None and membership.role == TeamRole.ADMIN.value

def update_team(db: Session, team_id: int, data: dict) -> Team:
    """
    Обновить название/описание команды.
    """
    team = get_team(db, team_id)
    if data.get("name") is not None:
        team.name = _validated_name(data["name"])
    if "description" in data:
        team.description = (data["description"] or "").strip() or None
    team.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating team {team_id}: {e}")
        raise TeamValidationError("Database error while updating team.")
    db.refresh(team)
    logger.info(f"Updated team '{team.name}' (ID: {team.id})")
    return team

def delete_team(db: Session, team_id: int) -> None:
    """
    Удалить команду вместе с членствами, приглашениями и задачами.
    """
    team = get_team(db, team_id)
    db.delete(team)
    try:
        db.commit()
        logger.info(f"Deleted team {team_id}")
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to delete team {team_id}: {e}")
        raise TeamValidationError("Database error while deleting team.")

def add_member(db: Session, team_id: int, user_id: int, role: str = TeamRole.MEMBER.value) -> TeamMember:
    """
    Добавить пользователя в команду. Повторное добавление — конфликт.
    """
    team = get_team(db, team_id)
    if is_member(db, team_id, user_id):
        raise AlreadyTeamMember("User is already a member")
    membership = TeamMember(user_id=user_id, role=TeamRole(role).value)
    team.members.append(membership)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Failed to add user {user_id} to team {team_id}: {e}")
        raise AlreadyTeamMember("User is already a member")
    db.refresh(membership)
    logger.info(f"Added user {user_id} to team {team_id} as {membership.role}")
    return membership

def remove_member(db: Session, team_id: int, user_id: int) -> bool:
    """
    Убрать пользователя из команды. Возвращает False, если он не был участником.
    """
    team = get_team(db, team_id)
    membership = next((m for m in team.members if m.user_id == user_id), None)
    if membership is None:
        return False
    team.members.remove(membership)
    try:
        db.commit()
        logger.info(f"Removed user {user_id} from team {team_id}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to remove user {user_id} from team {team_id}: {e}")
        raise TeamValidationError("Database error while removing member.")

# --- Приглашения ---

def create_invitation(db: Session, team_id: int, user_id: int, invited_by: int, message: Optional[str] = None) -> TeamInvitation:
    """
    Создать приглашение. Нельзя пригласить участника или того, у кого уже есть ожидающее приглашение.
    """
    get_team(db, team_id)
    if is_member(db, team_id, user_id):
        raise AlreadyTeamMember("User is already a member")
    pending = db.query(TeamInvitation).filter(
        TeamInvitation.team_id == team_id,
        TeamInvitation.user_id == user_id,
        TeamInvitation.status == InvitationStatus.PENDING.value,
    ).first()
    if pending:
        raise ConflictError("User already has a pending invitation to this team")

    invitation = TeamInvitation(
        team_id=team_id,
        user_id=user_id,
        invited_by=invited_by,
        message=(message or "").strip() or None,
        status=InvitationStatus.PENDING.value,
    )
    db.add(invitation)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Failed to invite user {user_id} to team {team_id}: {e}")
        raise TeamValidationError("Database error while creating invitation.")
    db.refresh(invitation)
    logger.info(f"User {invited_by} invited user {user_id} to team {team_id}")
    return invitation

def get_invitation(db: Session, invitation_id: int) -> TeamInvitation:
    invitation = db.query(TeamInvitation).filter(TeamInvitation.id == invitation_id).first()
    if not invitation:
        raise InvitationNotFound()
    return invitation

def get_pending_invitations(db: Session, user_id: int) -> List[TeamInvitation]:
    return (
        db.query(TeamInvitation)
        .filter(
            TeamInvitation.user_id == user_id,
            TeamInvitation.status == InvitationStatus.PENDING.value,
        )
        .order_by(TeamInvitation.created_at.desc(), TeamInvitation.id.desc())
        .all()
    )

def resolve_invitation(db: Session, invitation_id: int, accept: bool) -> TeamInvitation:
    """
    Принять или отклонить приглашение. Принятие добавляет членство в той же транзакции.
    """
    invitation = get_invitation(db, invitation_id)
    if invitation.status != InvitationStatus.PENDING.value:
        raise TeamValidationError(f"Invitation is already {invitation.status.lower()}.")
    invitation.status = (InvitationStatus.ACCEPTED if accept else InvitationStatus.REJECTED).value
    if accept and not is_member(db, invitation.team_id, invitation.user_id):
        invitation.team.members.append(TeamMember(user_id=invitation.user_id, role=TeamRole.MEMBER.value))
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Failed to resolve invitation {invitation_id}: {e}")
        raise TeamValidationError("Database error while updating invitation.")
    db.refresh(invitation)
    logger.info(f"Invitation {invitation_id} {invitation.status.lower()} by user {invitation.user_id}")
    return invitation
