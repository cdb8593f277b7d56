"""FastAPI dependencies exposing the access guards to route handlers.

The authenticated user is expected on ``request.state.user`` (a
``UserAccess`` or a stored user record), put there by the authentication
layer. The access level store lives on ``app.state.access_levels``.

The guard dependencies return a boolean instead of raising, so the handler
decides what a denied caller gets::

    @router.get("/fees")
    def list_fees(allowed: bool = Depends(ModuleGuardDependency("fees"))):
        if not allowed:
            return {"items": []}
        ...
"""

from typing import Any, Union

from fastapi import Request

from schooladmin.core.access import ActionGuard, ModuleGuard, PermissionEvaluator, PermissionTier
from schooladmin.core.access.levels import AccessLevelStore


def get_access_store(request: Request) -> AccessLevelStore:
    store = getattr(request.app.state, "access_levels", None)
    if store is None:
        store = AccessLevelStore()
    return store


def get_evaluator(request: Request) -> PermissionEvaluator:
    """Evaluator over the current access level snapshot."""
    settings = getattr(request.app.state, "settings", None)
    denied_roles = settings.denied_roles_list if settings is not None else ["Parent"]
    return PermissionEvaluator(get_access_store(request).snapshot(), denied_roles=denied_roles)


def get_request_user(request: Request) -> Any:
    return getattr(request.state, "user", None)


class ModuleGuardDependency:
    """
    Dependency answering a module-level check for the current user.

    Usage:
        @router.put("/fees/{fee_id}")
        def update_fee(fee_id: str, can_write: bool = Depends(ModuleGuardDependency("fees", "edit"))):
            ...
    """

    def __init__(self, module: Any, required_permission: Union[PermissionTier, str] = PermissionTier.VIEW_ONLY):
        self.module = module
        self.required_permission = required_permission

    def __call__(self, request: Request) -> bool:
        guard = ModuleGuard(get_evaluator(request), self.module, self.required_permission)
        return guard.allows(get_request_user(request))


class ActionGuardDependency:
    """
    Dependency answering an action-level check for the current user.

    Usage:
        @router.post("/fees/collect")
        def record_payment(allowed: bool = Depends(ActionGuardDependency("fees", "collect", "record_payment"))):
            ...
    """

    def __init__(self, module: Any, page: str, action: str):
        self.module = module
        self.page = page
        self.action = action

    def __call__(self, request: Request) -> bool:
        guard = ActionGuard(get_evaluator(request), self.module, self.page, self.action)
        return guard.allows(get_request_user(request))
