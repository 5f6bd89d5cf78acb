"""Role-based access control and resource ownership."""

from dataclasses import dataclass
from enum import Enum

from getlost.core.exceptions import AuthorizationError


class UserRole(str, Enum):
    """User roles in the system."""

    CUSTOMER = "customer"
    AGENCY = "agency"
    WEBADMIN = "webadmin"


class Permission(str, Enum):
    """System permissions."""

    # Booking permissions
    CREATE_BOOKING = "create_booking"
    CANCEL_BOOKING = "cancel_booking"
    CONFIRM_BOOKING = "confirm_booking"
    COMPLETE_BOOKING = "complete_booking"
    VIEW_BOOKING = "view_booking"
    VIEW_ALL_BOOKINGS = "view_all_bookings"

    # Availability permissions
    MANAGE_AVAILABILITY = "manage_availability"

    # Catalog permissions
    MANAGE_SERVICES = "manage_services"

    # Dispute permissions
    OPEN_DISPUTE = "open_dispute"
    RESPOND_DISPUTE = "respond_dispute"
    RESOLVE_DISPUTE = "resolve_dispute"
    VIEW_DISPUTE = "view_dispute"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserRole, set[Permission]] = {
    UserRole.CUSTOMER: {
        Permission.CREATE_BOOKING,
        Permission.CANCEL_BOOKING,
        Permission.VIEW_BOOKING,
        Permission.OPEN_DISPUTE,
        Permission.VIEW_DISPUTE,
    },
    UserRole.AGENCY: {
        Permission.CONFIRM_BOOKING,
        Permission.COMPLETE_BOOKING,
        Permission.VIEW_BOOKING,
        Permission.MANAGE_AVAILABILITY,
        Permission.MANAGE_SERVICES,
        Permission.RESPOND_DISPUTE,
        Permission.VIEW_DISPUTE,
    },
    UserRole.WEBADMIN: {
        Permission.VIEW_BOOKING,
        Permission.VIEW_ALL_BOOKINGS,
        Permission.MANAGE_AVAILABILITY,
        Permission.MANAGE_SERVICES,
        Permission.RESOLVE_DISPUTE,
        Permission.VIEW_DISPUTE,
    },
}


@dataclass(frozen=True)
class Actor:
    """The authenticated party performing an operation."""

    user_id: int
    role: UserRole
    agency_id: int | None = None


@dataclass(frozen=True)
class Ownership:
    """Who owns a resource: the customer behind it and the agency selling it."""

    customer_id: int | None = None
    agency_id: int | None = None


def has_permission(role: UserRole, permission: Permission) -> bool:
    """Check if a role has a specific permission."""
    return permission in ROLE_PERMISSIONS.get(role, set())


def owns(actor: Actor, owner: Ownership) -> bool:
    """Check whether the actor owns a resource.

    Customers own what they booked; agencies own what sits under their
    services. Web admins own nothing but bypass ownership in ``authorize``.
    """
    if actor.role == UserRole.CUSTOMER:
        return owner.customer_id is not None and owner.customer_id == actor.user_id
    if actor.role == UserRole.AGENCY:
        return actor.agency_id is not None and owner.agency_id == actor.agency_id
    return False


def require_role(actor: Actor, *allowed_roles: UserRole) -> None:
    """Require the actor to hold one of the given roles."""
    if actor.role not in allowed_roles:
        raise AuthorizationError(f"Role '{actor.role.value}' is not authorized for this action")


def authorize(actor: Actor, permission: Permission, owner: Ownership | None = None) -> None:
    """Require a role permission and, when a resource is given, its ownership.

    Raises:
        AuthorizationError: If the role lacks the permission or the actor
            does not own the resource
    """
    if not has_permission(actor.role, permission):
        raise AuthorizationError(
            f"Role '{actor.role.value}' is not authorized to {permission.value.replace('_', ' ')}"
        )
    if owner is None or actor.role == UserRole.WEBADMIN:
        return
    if not owns(actor, owner):
        raise AuthorizationError("You don't have permission to access this resource")
