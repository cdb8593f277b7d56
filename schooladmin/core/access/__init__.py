"""Access control for the school admin application.

Defines the access model (roles, modules, tiers, permission bundles), the
catalog of pages and actions, the permission evaluator and the guards that
call it.
"""

from .model import (
    AccessLevel,
    Module,
    ModulePermissions,
    PagePermission,
    PermissionBundle,
    PermissionTier,
    Role,
    UserAccess,
)
from .evaluator import (
    PermissionEvaluator,
    can_access_module,
    can_delete,
    can_edit,
    can_perform_action,
    default_permissions,
)
from .levels import (
    AccessControlError,
    AccessLevelNotFoundError,
    AccessLevelStore,
    AccessLevelValidationError,
)
from .guards import ActionGuard, ModuleGuard

__all__ = [
    "AccessControlError",
    "AccessLevel",
    "AccessLevelNotFoundError",
    "AccessLevelStore",
    "AccessLevelValidationError",
    "ActionGuard",
    "Module",
    "ModuleGuard",
    "ModulePermissions",
    "PagePermission",
    "PermissionBundle",
    "PermissionEvaluator",
    "PermissionTier",
    "Role",
    "UserAccess",
    "can_access_module",
    "can_delete",
    "can_edit",
    "can_perform_action",
    "default_permissions",
]
