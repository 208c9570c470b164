# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (MARKETPLACE PARTICIPANTS)
# =========================================================
# Mirrors users.User.ROLE_*; kept here so permission code does not
# import the model layer.
ROLE_FARMER = "farmer"
ROLE_DISTRIBUTOR = "distributor"
ROLE_TRANSPORTER = "transporter"
ROLE_ADMIN = "admin"

ALL_ROLES = {
    ROLE_FARMER,
    ROLE_DISTRIBUTOR,
    ROLE_TRANSPORTER,
    ROLE_ADMIN,
}


# =========================================================
# CAPABILITIES
# =========================================================
# Views protect capabilities, not raw roles.
CAP_ORDERS_PLACE = "orders.place"            # create / edit / cancel own orders
CAP_ORDERS_VIEW_OWN = "orders.view_own"

CAP_TRIPS_BROWSE = "trips.browse"            # see orders awaiting transport
CAP_TRIPS_MANAGE = "trips.manage"            # claim orders, drive trip lifecycle
CAP_TRIPS_STATS = "trips.stats"

CAP_FLEET_MANAGE = "fleet.manage"            # register / edit / retire vehicles

ALL_CAPABILITIES = {
    CAP_ORDERS_PLACE,
    CAP_ORDERS_VIEW_OWN,
    CAP_TRIPS_BROWSE,
    CAP_TRIPS_MANAGE,
    CAP_TRIPS_STATS,
    CAP_FLEET_MANAGE,
}


# =========================================================
# ROLE -> CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_DISTRIBUTOR: {
        CAP_ORDERS_PLACE,
        CAP_ORDERS_VIEW_OWN,
    },
    ROLE_TRANSPORTER: {
        CAP_TRIPS_BROWSE,
        CAP_TRIPS_MANAGE,
        CAP_TRIPS_STATS,
        CAP_FLEET_MANAGE,
    },
    ROLE_FARMER: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def capabilities_for(user) -> set[str]:
    return set(ROLE_CAPABILITIES.get(get_user_role(user), set()))


def user_has_capability(user, capability: str) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return capability in capabilities_for(user)


# =========================================================
# Base Role Permission
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Capability Permission
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_TRIPS_MANAGE
    """

    def has_permission(self, request, view):
        required = getattr(view, "required_capability", None)
        if not required:
            # deny-by-default when a view forgets to declare one
            return False
        return user_has_capability(request.user, required)


# =========================================================
# Role Permissions
# =========================================================
class IsDistributor(BaseRolePermission):
    allowed_roles = {ROLE_DISTRIBUTOR}


class IsTransporter(BaseRolePermission):
    allowed_roles = {ROLE_TRANSPORTER}
