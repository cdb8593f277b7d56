"""Permission evaluation for school admin users.

Answers four questions about a user and a module: can they see it at all,
edit in it, delete in it, and perform a named action on one of its pages.

Evaluation order for every question:

1. ``Admin`` passes unconditionally, even for names outside the catalog.
2. Denied roles (``Parent`` by default) and missing users fail.
3. The user's inline override bundle, then the referenced access level.
   Within one bundle a closed page (``canAccess: false``) denies, then the
   exact action entry decides, then the page tier, then the module tier.
   The first bundle that has a rule decides.
4. Nothing matched: deny.

The evaluator never raises for bad input. Unknown modules, pages, actions,
dangling access level ids and malformed user records all evaluate to
``False``.
"""

from typing import Any, Iterable, List, Mapping, Optional

from ...common.logger import get_logger
from .catalog import (
    MODULE_CATALOG,
    get_page,
    get_pages,
    implied_tier,
    is_catalog_action,
    required_tier,
    resolve_module,
)
from .model import (
    AccessLevel,
    Module,
    ModulePermissions,
    PagePermission,
    PermissionBundle,
    PermissionTier,
    Role,
    UserAccess,
    highest_tier,
)

logger = get_logger("access.evaluator")


def _subject(user: Any) -> Optional[UserAccess]:
    if isinstance(user, UserAccess):
        return user
    if isinstance(user, Mapping):
        return UserAccess.from_record(user)
    return None


def _decide_action(
    bundle: PermissionBundle, module: Module, page_id: str, action_id: str
) -> Optional[bool]:
    """Decision of a single bundle, or ``None`` if it has no rule for the triple."""
    entry = bundle.module(module.value)
    if entry is None:
        return None

    # Tier rules only reach actions the catalog knows about
    in_catalog = is_catalog_action(module, page_id, action_id)

    page_rule = entry.page(page_id)
    if page_rule is not None:
        if not page_rule.can_access:
            return False
        if action_id in page_rule.actions:
            return page_rule.actions[action_id]
        if page_rule.tier is not None and in_catalog:
            return page_rule.tier.satisfies(required_tier(action_id))

    if entry.tier is not None and in_catalog:
        return entry.tier.satisfies(required_tier(action_id))
    return None


def _decide_page(bundle: PermissionBundle, module: Module, page_id: str) -> Optional[bool]:
    entry = bundle.module(module.value)
    if entry is None:
        return None
    page_rule = entry.page(page_id)
    if page_rule is not None:
        return page_rule.can_access
    if entry.tier is not None and get_page(module, page_id) is not None:
        return True
    return None


class PermissionEvaluator:
    """Evaluates users against a snapshot of access levels.

    The snapshot is read, never modified; one evaluator can serve any
    number of concurrent callers.
    """

    def __init__(
        self,
        access_levels: Optional[Mapping[str, AccessLevel]] = None,
        *,
        denied_roles: Iterable[Any] = (Role.PARENT,),
    ):
        """
        Args:
            access_levels: Access levels by id, as supplied by the store
            denied_roles: Roles that never get module access. ``Admin``
                cannot be denied and is ignored here.
        """
        self.access_levels: Mapping[str, AccessLevel] = (
            access_levels if access_levels is not None else {}
        )
        parsed = (Role.parse(role) for role in denied_roles)
        self.denied_roles = frozenset(
            role for role in parsed if role is not None and role is not Role.ADMIN
        )

    def resolve_access_level(self, user: UserAccess) -> Optional[AccessLevel]:
        """Active access level the user references, if it still exists."""
        level_id = user.access_level_id
        if not level_id:
            return None
        level = self.access_levels.get(level_id)
        if level is None:
            logger.debug(f"Access level {level_id} not found, treating as no access")
            return None
        if not level.is_active:
            logger.debug(f"Access level {level_id} is inactive, treating as no access")
            return None
        return level

    def _sources(self, user: UserAccess) -> List[PermissionBundle]:
        sources = []
        if user.overrides is not None:
            sources.append(user.overrides)
        level = self.resolve_access_level(user)
        if level is not None:
            sources.append(level.module_permissions)
        return sources

    def _action_allowed(
        self, sources: List[PermissionBundle], module: Module, page_id: str, action_id: str
    ) -> bool:
        for bundle in sources:
            decision = _decide_action(bundle, module, page_id, action_id)
            if decision is not None:
                return decision
        return False

    def _page_allowed(self, sources: List[PermissionBundle], module: Module, page_id: str) -> bool:
        for bundle in sources:
            decision = _decide_page(bundle, module, page_id)
            if decision is not None:
                return decision
        return False

    def _first_page_rule(
        self, sources: List[PermissionBundle], module: Module, page_id: str
    ) -> Optional[PagePermission]:
        for bundle in sources:
            entry = bundle.module(module.value)
            if entry is not None:
                page_rule = entry.page(page_id)
                if page_rule is not None:
                    return page_rule
        return None

    def _module_tier(self, sources: List[PermissionBundle], module: Module) -> Optional[PermissionTier]:
        # The first explicit module tier is a floor; granted pages and actions raise it
        derived: Optional[PermissionTier] = None
        for bundle in sources:
            entry = bundle.module(module.value)
            if entry is not None and entry.tier is not None:
                derived = entry.tier
                break

        page_ids: List[str] = [page.page for page in get_pages(module)]
        for bundle in sources:
            entry = bundle.module(module.value)
            if entry is None:
                continue
            for page_rule in entry.pages:
                if page_rule.page_id not in page_ids:
                    page_ids.append(page_rule.page_id)

        for page_id in page_ids:
            page_rule = self._first_page_rule(sources, module, page_id)
            if page_rule is None or not page_rule.can_access:
                continue
            derived = highest_tier(derived, PermissionTier.VIEW_ONLY, page_rule.tier)

            page_def = get_page(module, page_id)
            action_ids = [a.id for a in page_def.actions] if page_def is not None else []
            for bundle in sources:
                entry = bundle.module(module.value)
                rule = entry.page(page_id) if entry is not None else None
                if rule is not None:
                    action_ids.extend(a for a in rule.actions if a not in action_ids)

            for action_id in action_ids:
                if self._action_allowed(sources, module, page_id, action_id):
                    derived = highest_tier(derived, implied_tier(action_id))
        return derived

    def get_module_tier(self, user: Any, module: Any) -> Optional[PermissionTier]:
        """Effective coarse tier for ``module``; ``None`` means no access."""
        subject = _subject(user)
        if subject is None or subject.role in self.denied_roles:
            return None
        if subject.is_admin:
            return PermissionTier.FULL_ACCESS
        resolved = resolve_module(module)
        if resolved is None:
            logger.debug(f"Unknown module {module!r}, denying")
            return None
        return self._module_tier(self._sources(subject), resolved)

    def can_access_module(self, user: Any, module: Any) -> bool:
        """True if the user holds any permission at all under ``module``."""
        return self.get_module_tier(user, module) is not None

    def can_edit(self, user: Any, module: Any) -> bool:
        tier = self.get_module_tier(user, module)
        return tier is not None and tier.satisfies(PermissionTier.EDIT)

    def can_delete(self, user: Any, module: Any) -> bool:
        return self.get_module_tier(user, module) is PermissionTier.FULL_ACCESS

    def can_access_page(self, user: Any, module: Any, page: Any) -> bool:
        subject = _subject(user)
        if subject is None or subject.role in self.denied_roles:
            return False
        if subject.is_admin:
            return True
        resolved = resolve_module(module)
        if resolved is None or not isinstance(page, str):
            return False
        return self._page_allowed(self._sources(subject), resolved, page)

    def can_perform_action(self, user: Any, module: Any, page: Any, action: Any) -> bool:
        """Finest-grained check: may the user perform ``action`` on ``page``?"""
        subject = _subject(user)
        if subject is None or subject.role in self.denied_roles:
            return False
        if subject.is_admin:
            return True
        resolved = resolve_module(module)
        if resolved is None or not isinstance(page, str) or not isinstance(action, str):
            logger.debug(f"Unknown permission target {module!r}/{page!r}/{action!r}, denying")
            return False
        return self._action_allowed(self._sources(subject), resolved, page, action)

    def get_effective_permissions(self, user: Any) -> PermissionBundle:
        """Merged view of every catalog page and action the user may use.

        Only modules with at least one accessible page are listed; each
        module entry carries the effective tier.
        """
        subject = _subject(user)
        if subject is None or subject.role in self.denied_roles:
            return PermissionBundle()

        sources = [] if subject.is_admin else self._sources(subject)
        modules = []
        for module, pages in MODULE_CATALOG.items():
            page_rules = []
            for page in pages:
                if not subject.is_admin and not self._page_allowed(sources, module, page.page):
                    continue
                actions = {
                    action.id: subject.is_admin
                    or self._action_allowed(sources, module, page.page, action.id)
                    for action in page.actions
                }
                page_rules.append(PagePermission(page_id=page.page, can_access=True, actions=actions))
            if not page_rules:
                continue
            tier = PermissionTier.FULL_ACCESS if subject.is_admin else self._module_tier(sources, module)
            modules.append(ModulePermissions(module_id=module.value, tier=tier, pages=page_rules))
        return PermissionBundle(modules=modules)


def default_permissions(role: Any) -> PermissionBundle:
    """Starter permissions for a newly created user.

    Staff start with the pupils list and its search; Admin needs nothing
    and Parent accounts are not granted modules at all.
    """
    if Role.parse(role) in (Role.ADMIN, Role.PARENT):
        return PermissionBundle()
    return PermissionBundle.model_validate([
        {
            "moduleId": Module.PUPILS.value,
            "pages": [
                {
                    "pageId": "list",
                    "canAccess": True,
                    "actions": [
                        {"actionId": "view_list", "allowed": True},
                        {"actionId": "search_filter", "allowed": True},
                    ],
                }
            ],
        }
    ])


def can_access_module(user: Any, module: Any, access_levels: Optional[Mapping[str, AccessLevel]] = None) -> bool:
    """Check module visibility without building an evaluator by hand."""
    return PermissionEvaluator(access_levels).can_access_module(user, module)


def can_edit(user: Any, module: Any, access_levels: Optional[Mapping[str, AccessLevel]] = None) -> bool:
    return PermissionEvaluator(access_levels).can_edit(user, module)


def can_delete(user: Any, module: Any, access_levels: Optional[Mapping[str, AccessLevel]] = None) -> bool:
    return PermissionEvaluator(access_levels).can_delete(user, module)


def can_perform_action(
    user: Any,
    module: Any,
    page: Any,
    action: Any,
    access_levels: Optional[Mapping[str, AccessLevel]] = None,
) -> bool:
    return PermissionEvaluator(access_levels).can_perform_action(user, module, page, action)
