# accounts/authz.py
"""
Authorization utilities.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- actor_for_user: Build the same context for a user resolved outside a request
  (webhooks identify the project manager by phone)
- require_role / require_project_access: Check and raise if not granted

Roles are flat: ADMIN and ACCOUNTANT see every project; PROJECT_MANAGER
sees the projects it is assigned to, or all of them when
can_view_all_projects is set; RESIDENT sees nothing in the back office.
"""

from dataclasses import dataclass
from typing import FrozenSet
from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import User, ProjectAssignment


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor.

    Passed explicitly into every command; nothing reads identity from
    a global.

    Attributes:
        user: The authenticated user
        role: One of User.Role
        project_ids: Projects the user is assigned to
        can_view_all_projects: Project scope bypass for managers
    """
    user: User
    role: str
    project_ids: FrozenSet[int]
    can_view_all_projects: bool = False

    @property
    def user_id(self) -> int:
        return self.user.pk

    def has_role(self, *roles: str) -> bool:
        return self.role in roles

    @property
    def is_admin(self) -> bool:
        return self.role == User.Role.ADMIN

    @property
    def is_finance(self) -> bool:
        """Accountants and admins decide on notes and payments."""
        return self.role in (User.Role.ADMIN, User.Role.ACCOUNTANT)

    @property
    def sees_all_projects(self) -> bool:
        if self.is_finance:
            return True
        return self.role == User.Role.PROJECT_MANAGER and self.can_view_all_projects

    def can_access_project(self, project_id) -> bool:
        if self.sees_all_projects:
            return True
        if self.role != User.Role.PROJECT_MANAGER:
            return False
        return project_id in self.project_ids


def actor_for_user(user: User) -> ActorContext:
    """Build an ActorContext from a user row, loading assignments fresh."""
    project_ids = frozenset(
        ProjectAssignment.objects.filter(user=user).values_list("project_id", flat=True)
    )
    return ActorContext(
        user=user,
        role=user.role,
        project_ids=project_ids,
        can_view_all_projects=user.can_view_all_projects,
    )


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    Called at the start of every view that needs authorization.
    Assignments are loaded fresh on every request so that changes
    take effect immediately.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If the account is deactivated
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    if not user.is_active:
        raise PermissionDenied("This account is deactivated.")

    return actor_for_user(user)


def require_role(actor: ActorContext, *roles: str) -> None:
    """
    Require that the actor holds one of the given roles.

    Example:
        require_role(actor, User.Role.ADMIN, User.Role.ACCOUNTANT)
    """
    if not actor.has_role(*roles):
        raise PermissionDenied(
            f"Permission denied: requires one of {', '.join(roles)}"
        )


def require_project_access(actor: ActorContext, project_id) -> None:
    """Raise PermissionDenied unless the actor may act on the project."""
    if not actor.can_access_project(project_id):
        raise PermissionDenied("You are not assigned to this project.")


def scope_to_projects(actor: ActorContext, queryset, field: str = "project_id"):
    """
    Restrict a queryset to the actor's projects.

    `field` is the lookup path to the project id, e.g. "unit__project_id".
    """
    if actor.sees_all_projects:
        return queryset
    if actor.role != User.Role.PROJECT_MANAGER:
        return queryset.none()
    return queryset.filter(**{f"{field}__in": actor.project_ids})
