"""Guards that gate content on permission checks.

A guard wraps something to be shown (a page subtree, a control, a response
payload) and returns it or a fallback. Guards never raise and never
redirect. They hold no authorization rules of their own; every decision
comes from the evaluator.
"""

from typing import Any, Callable, Optional, Union

from .evaluator import PermissionEvaluator
from .model import PermissionTier

Content = Union[Callable[[], Any], Any]


def _render(allowed: bool, content: Content, fallback: Any) -> Any:
    if not allowed:
        return fallback
    return content() if callable(content) else content


class ModuleGuard:
    """Gates a module's route or navigation entry on a coarse tier.

    ``view_only`` asks whether the module is visible at all, ``edit`` whether
    the user can edit in it and ``full_access`` whether they can delete.
    """

    def __init__(
        self,
        evaluator: PermissionEvaluator,
        module: Any,
        required_permission: Union[PermissionTier, str] = PermissionTier.VIEW_ONLY,
    ):
        self.evaluator = evaluator
        self.module = module
        try:
            self.required_permission: Optional[PermissionTier] = PermissionTier(required_permission)
        except ValueError:
            # Unknown requirement: the guard never opens
            self.required_permission = None

    def allows(self, user: Any) -> bool:
        if self.required_permission is PermissionTier.VIEW_ONLY:
            return self.evaluator.can_access_module(user, self.module)
        if self.required_permission is PermissionTier.EDIT:
            return self.evaluator.can_edit(user, self.module)
        if self.required_permission is PermissionTier.FULL_ACCESS:
            return self.evaluator.can_delete(user, self.module)
        return False

    def render(self, user: Any, content: Content, fallback: Any = None) -> Any:
        """Return ``content`` (called if callable) when allowed, else ``fallback``."""
        return _render(self.allows(user), content, fallback)


class ActionGuard:
    """Gates a single control on a (module, page, action) check."""

    def __init__(self, evaluator: PermissionEvaluator, module: Any, page: str, action: str):
        self.evaluator = evaluator
        self.module = module
        self.page = page
        self.action = action

    def allows(self, user: Any) -> bool:
        return self.evaluator.can_perform_action(user, self.module, self.page, self.action)

    def render(self, user: Any, content: Content, fallback: Any = None) -> Any:
        return _render(self.allows(user), content, fallback)
