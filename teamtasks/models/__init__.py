from .user import User
from .task import Task, TaskAssignment, TaskPriority, TaskStatus
from .team import Team, TeamMember, TeamInvitation, TeamRole, InvitationStatus
from .notification import Notification, NotificationType

# добавляй сюда все новые модели!
