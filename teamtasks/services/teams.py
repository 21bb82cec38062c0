# teamtasks/services/teams.py
import logging
from typing import List

from sqlalchemy.orm import Session

from teamtasks.crud import team as crud_team
from teamtasks.crud.notification import create_notification
from teamtasks.crud.user import get_user
from teamtasks.core.exceptions import AuthorizationError, TeamValidationError, UserNotFound
from teamtasks.models.notification import NotificationType
from teamtasks.models.team import Team, TeamInvitation, TeamMember, TeamRole
from teamtasks.realtime import events
from teamtasks.realtime.events import EventPublisher, RealtimeEvent
from teamtasks.schemas.team import TeamRead

logger = logging.getLogger("TeamTasks.TeamService")


def team_payload(team: Team) -> dict:
    return TeamRead.model_validate(team).model_dump(mode="json")


class TeamService:
    """
    Команды: создание, управление участниками и приглашениями.
    Права: обновлять/добавлять/удалять участников может admin, удалить команду только создатель.
    """

    def __init__(self, db: Session, publisher: EventPublisher):
        self.db = db
        self.publisher = publisher

    def create_team(self, data: dict, caller_id: int) -> Team:
        team = crud_team.create_team(self.db, data, creator_id=caller_id)
        self._publish_to_members(team, events.TEAM_CREATED)
        return team

    def get_teams(self, caller_id: int) -> List[Team]:
        return crud_team.get_teams_for_user(self.db, caller_id)

    def get_team(self, team_id: int, caller_id: int) -> Team:
        team = crud_team.get_team(self.db, team_id)
        if not crud_team.is_member(self.db, team_id, caller_id):
            raise AuthorizationError("You are not a member of this team")
        return team

    def update_team(self, team_id: int, data: dict, caller_id: int) -> Team:
        crud_team.get_team(self.db, team_id)
        self._require_admin(team_id, caller_id, "Only team admins can update the team")
        team = crud_team.update_team(self.db, team_id, data)
        self._publish_to_members(team, events.TEAM_UPDATED)
        return team

    def delete_team(self, team_id: int, caller_id: int) -> None:
        team = crud_team.get_team(self.db, team_id)
        if team.creator_id != caller_id:
            logger.warning(f"User {caller_id} tried to delete team {team_id} without being its creator")
            raise AuthorizationError("Only the team creator can delete the team")
        former_members = list(team.member_ids)
        crud_team.delete_team(self.db, team_id)
        for user_id in former_members:
            self.publisher.publish_to_user(user_id, RealtimeEvent(event=events.TEAM_DELETED, data={"id": team_id}))

    def add_member(self, team_id: int, user_id: int, caller_id: int, role: str = TeamRole.MEMBER.value) -> TeamMember:
        team = crud_team.get_team(self.db, team_id)
        self._require_admin(team_id, caller_id, "Only team admins can add members")
        if get_user(self.db, user_id) is None:
            raise UserNotFound()

        membership = crud_team.add_member(self.db, team_id, user_id, role=role)
        create_notification(
            self.db,
            user_id,
            f"You have been added to team: {team.name}",
            type=NotificationType.TEAM_MEMBER_ADDED.value,
        )
        self.db.refresh(team)
        self._publish_to_members(team, events.TEAM_UPDATED)
        return membership

    def remove_member(self, team_id: int, user_id: int, caller_id: int) -> None:
        team = crud_team.get_team(self.db, team_id)
        self._require_admin(team_id, caller_id, "Only team admins can remove members")
        if user_id == team.creator_id:
            raise TeamValidationError("Cannot remove team creator")
        if not crud_team.remove_member(self.db, team_id, user_id):
            raise UserNotFound("User is not a member of this team")

        self.publisher.publish_to_user(user_id, RealtimeEvent(
            event=events.TEAM_REMOVED,
            data={"team_id": team_id, "team_name": team.name},
        ))
        self.db.refresh(team)
        self._publish_to_members(team, events.TEAM_UPDATED)

    def is_member(self, team_id: int, user_id: int) -> bool:
        return crud_team.is_member(self.db, team_id, user_id)

    def is_admin(self, team_id: int, user_id: int) -> bool:
        return crud_team.is_admin(self.db, team_id, user_id)

    # --- Приглашения ---

    def invite_member(self, team_id: int, user_id: int, caller_id: int, message: str = None) -> TeamInvitation:
        team = crud_team.get_team(self.db, team_id)
        self._require_admin(team_id, caller_id, "Only team admins can invite members")
        if get_user(self.db, user_id) is None:
            raise UserNotFound()

        invitation = crud_team.create_invitation(self.db, team_id, user_id, invited_by=caller_id, message=message)
        text = f"You have been invited to join team: {team.name}"
        create_notification(self.db, user_id, text, type=NotificationType.TEAM_INVITATION.value)
        self.publisher.publish_to_user(user_id, RealtimeEvent(
            event=events.TEAM_INVITATION,
            data={
                "invitation_id": invitation.id,
                "team_id": team.id,
                "team_name": team.name,
                "invited_by_name": invitation.inviter.name if invitation.inviter else None,
                "message": text,
            },
        ))
        return invitation

    def get_invitations(self, caller_id: int) -> List[TeamInvitation]:
        return crud_team.get_pending_invitations(self.db, caller_id)

    def respond_to_invitation(self, invitation_id: int, accept: bool, caller_id: int) -> TeamInvitation:
        invitation = crud_team.get_invitation(self.db, invitation_id)
        if invitation.user_id != caller_id:
            raise AuthorizationError("This invitation is addressed to another user")

        invitation = crud_team.resolve_invitation(self.db, invitation_id, accept)
        if accept:
            team = invitation.team
            self.db.refresh(team)
            self._publish_to_members(team, events.TEAM_UPDATED)
        return invitation

    def _require_admin(self, team_id: int, caller_id: int, message: str) -> None:
        if not crud_team.is_admin(self.db, team_id, caller_id):
            logger.warning(f"User {caller_id} is not an admin of team {team_id}")
            raise AuthorizationError(message)

    def _publish_to_members(self, team: Team, event_name: str) -> None:
        payload = team_payload(team)
        for user_id in team.member_ids:
            self.publisher.publish_to_user(user_id, RealtimeEvent(event=event_name, data=payload))
