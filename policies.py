"""Access-control rules shared by every handler.

Checks run in a fixed order:

1. the actor must be authenticated;
2. owner-gated actions need the ``owner`` or ``admin`` role,
   admin-gated actions need ``admin``;
3. resource-scoped actions need the actor to be the resource's stored owner,
   whatever their role.

Creating an application, visit request or favorite additionally goes through
:func:`ensure_not_self_dealing`. No FastAPI or database imports here.
"""
import enum
from typing import Optional

from errors import BadRequestError, ForbiddenError, UnauthorizedError
from models import UserRole


class Action(str, enum.Enum):
    PROPERTY_CREATE = "property:create"
    PROPERTY_UPDATE = "property:update"
    PROPERTY_DELETE = "property:delete"
    PROPERTY_UPLOAD_IMAGES = "property:upload_images"
    PROPERTY_LIST_OWN = "property:list_own"
    APPLICATION_LIST_RECEIVED = "application:list_received"
    APPLICATION_RESPOND = "application:respond"
    VISIT_LIST_RECEIVED = "visit:list_received"
    VISIT_RESPOND = "visit:respond"
    ADMIN_PANEL = "admin:panel"


OWNER_ROLES = frozenset({UserRole.OWNER.value, UserRole.ADMIN.value})
ADMIN_ROLES = frozenset({UserRole.ADMIN.value})

ROLE_REQUIREMENTS = {
    Action.PROPERTY_CREATE: OWNER_ROLES,
    Action.PROPERTY_UPDATE: OWNER_ROLES,
    Action.PROPERTY_DELETE: OWNER_ROLES,
    Action.PROPERTY_UPLOAD_IMAGES: OWNER_ROLES,
    Action.PROPERTY_LIST_OWN: OWNER_ROLES,
    Action.APPLICATION_LIST_RECEIVED: OWNER_ROLES,
    Action.APPLICATION_RESPOND: OWNER_ROLES,
    Action.VISIT_LIST_RECEIVED: OWNER_ROLES,
    Action.VISIT_RESPOND: OWNER_ROLES,
    Action.ADMIN_PANEL: ADMIN_ROLES,
}

RESOURCE_SCOPED = frozenset({
    Action.PROPERTY_UPDATE,
    Action.PROPERTY_DELETE,
    Action.PROPERTY_UPLOAD_IMAGES,
    Action.APPLICATION_RESPOND,
    Action.VISIT_RESPOND,
})

DENIAL_MESSAGES = {
    Action.PROPERTY_UPDATE: "You are not authorized to update this property",
    Action.PROPERTY_DELETE: "You are not authorized to delete this property",
    Action.PROPERTY_UPLOAD_IMAGES: "You are not authorized to upload images for this property",
    Action.APPLICATION_RESPOND: "You are not authorized to update this application",
    Action.VISIT_RESPOND: "You are not authorized to update this visit request",
}


def _role_of(actor) -> str:
    role = actor.role
    return role.value if isinstance(role, UserRole) else role


def require_role(actor, action: Action) -> None:
    """Authentication and role checks only, for use before the resource is loaded."""
    if actor is None:
        raise UnauthorizedError("Authentication required")

    required_roles = ROLE_REQUIREMENTS.get(action)
    if required_roles is not None and _role_of(actor) not in required_roles:
        if required_roles is ADMIN_ROLES:
            raise ForbiddenError("Admin role required")
        raise ForbiddenError("Owner role required")


def authorize(actor, action: Action, resource=None) -> None:
    """Raises a typed failure unless ``actor`` may perform ``action``.

    ``resource`` is anything carrying an ``owner_id``; it is required for
    resource-scoped actions.
    """
    require_role(actor, action)

    if action in RESOURCE_SCOPED:
        if resource is None:
            raise ValueError(f"{action.value} needs the target resource")
        if resource.owner_id != actor.id:
            raise ForbiddenError(DENIAL_MESSAGES.get(action, "Forbidden"))


def is_allowed(actor, action: Action, resource=None) -> bool:
    try:
        authorize(actor, action, resource)
    except (UnauthorizedError, ForbiddenError):
        return False
    return True


def ensure_not_self_dealing(actor, property_, message: Optional[str] = None) -> None:
    if property_.owner_id == actor.id:
        raise BadRequestError(message or "You cannot act on your own property")
