"""Access level management.

Holds the access level snapshot the evaluator reads, plus the administrative
operations on it: create/update/delete, the single-default rule, seeding of
the predefined levels and validation of submitted level data.

The store is an in-memory holder. Loading from and writing back to the
application's document database is the caller's business; ``from_yaml``
seeds a store from a deployment file.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError
from slugify import slugify

from ...common.config import load_access_level_documents
from ...common.logger import get_logger
from .catalog import implied_tier
from .model import AccessLevel, ModulePermissions, PermissionTier, highest_tier

logger = get_logger("access.levels")


class AccessControlError(Exception):
    """Base class for access level management errors."""


class AccessLevelNotFoundError(AccessControlError):
    """Raised when an access level id does not exist in the store."""

    def __init__(self, level_id: str):
        super().__init__(f"Access level not found: {level_id}")
        self.level_id = level_id


class AccessLevelValidationError(AccessControlError):
    """Raised when submitted access level data is invalid."""

    def __init__(self, errors: List[str]):
        super().__init__("Invalid access level: " + "; ".join(errors))
        self.errors = errors


def _page(page_id: str, *actions: str) -> Dict[str, Any]:
    return {
        "pageId": page_id,
        "canAccess": True,
        "actions": [{"actionId": action, "allowed": True} for action in actions],
    }


# Levels offered to administrators out of the box
PREDEFINED_ACCESS_LEVELS: Dict[str, Dict[str, Any]] = {
    "teacher": {
        "name": "Teacher",
        "description": "Standard teacher access with pupil management and attendance recording",
        "modulePermissions": [
            {"moduleId": "pupils", "pages": [
                _page("list", "view_list", "search_filter", "view_details_link"),
                _page(
                    "detail", "access_page", "view_personal_info", "view_academic_info",
                    "view_guardian_info", "view_exam_records", "view_siblings",
                ),
            ]},
            {"moduleId": "attendance", "pages": [
                _page("record", "view_page", "record_attendance", "edit_attendance"),
            ]},
            {"moduleId": "exams", "pages": [
                _page("results", "view_results", "enter_results", "edit_results"),
            ]},
        ],
    },
    "accountant": {
        "name": "Accountant",
        "description": "Financial management access for fee collection and banking",
        "modulePermissions": [
            {"moduleId": "fees", "pages": [
                _page("list", "view_list", "view_reports"),
                _page("collection", "access_page", "search_pupils", "view_balance", "collect_fees"),
                _page("collect", "access_page", "record_payment", "print_receipt", "view_history"),
            ]},
            {"moduleId": "banking", "pages": [
                _page(
                    "list", "view_accounts", "view_transactions", "make_deposit",
                    "make_withdrawal", "view_statements", "print_statements",
                ),
                _page("loans", "view_loans", "create_loan", "process_repayment", "view_loan_reports"),
            ]},
        ],
    },
    "administrator": {
        "name": "Administrator",
        "description": "Administrative access with user management and system settings",
        "modulePermissions": [
            {"moduleId": "users", "pages": [
                _page(
                    "list", "view_users", "create_user", "edit_user", "delete_user",
                    "reset_password", "manage_permissions",
                ),
            ]},
            {"moduleId": "staff", "pages": [
                _page("list", "view_list", "create_staff", "edit_staff", "delete_staff", "assign_roles"),
            ]},
            {"moduleId": "settings", "pages": [
                _page("school", "view_settings", "edit_general", "edit_contact", "edit_vision", "manage_logo"),
            ]},
        ],
    },
    "procurement_officer": {
        "name": "Procurement Officer",
        "description": "Procurement and inventory management access",
        "modulePermissions": [
            {"moduleId": "procurement", "pages": [
                _page("items", "view_items", "create_item", "edit_item", "delete_item"),
                _page(
                    "purchases", "view_purchases", "create_purchase", "edit_purchase",
                    "delete_purchase", "approve_purchase",
                ),
                _page("budget", "view_budget", "create_budget", "edit_budget", "view_comparison"),
            ]},
        ],
    },
}


def _get(data: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if camel in data:
        return data[camel]
    return data.get(snake, default)


def validate_access_level_data(data: Mapping[str, Any]) -> List[str]:
    """Validate submitted access level data.

    Returns:
        Human-readable error messages; empty when the data is valid
    """
    errors: List[str] = []

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Access level name is required")
    elif len(name) > 100:
        errors.append("Access level name must be less than 100 characters")

    description = data.get("description")
    if not isinstance(description, str) or not description.strip():
        errors.append("Access level description is required")

    modules = _get(data, "module_permissions", "modulePermissions")
    if not modules:
        errors.append("At least one module permission is required")
        return errors
    if not isinstance(modules, list):
        errors.append("Module permissions must be a list")
        return errors

    for index, module in enumerate(modules, start=1):
        if not isinstance(module, Mapping):
            errors.append(f"Module {index}: Module entry must be a mapping")
            continue
        if not _get(module, "module_id", "moduleId"):
            errors.append(f"Module {index}: Module ID is required")

        pages = module.get("pages") or []
        if not pages and not module.get("tier"):
            errors.append(f"Module {index}: At least one page permission is required")

        for page_index, page in enumerate(pages, start=1):
            if not isinstance(page, Mapping):
                errors.append(f"Module {index}, Page {page_index}: Page entry must be a mapping")
                continue
            if not _get(page, "page_id", "pageId"):
                errors.append(f"Module {index}, Page {page_index}: Page ID is required")
            if not page.get("actions") and not page.get("tier"):
                errors.append(
                    f"Module {index}, Page {page_index}: At least one action permission is required"
                )

    return errors


def derive_module_tier(bundle_entry: ModulePermissions) -> PermissionTier:
    """Coarse tier that stands for one module entry of a bundle.

    An explicit module tier is the starting point, ``view_only`` otherwise.
    Accessible pages then raise it: allowed delete/remove actions mean
    ``full_access``, create/edit/update and other write actions ``edit``.
    """
    tier = bundle_entry.tier or PermissionTier.VIEW_ONLY
    for page in bundle_entry.pages:
        if not page.can_access:
            continue
        tier = highest_tier(tier, page.tier)
        for action_id, allowed in page.actions.items():
            if allowed:
                tier = highest_tier(tier, implied_tier(action_id))
    return tier


def legacy_module_permissions(level: AccessLevel) -> List[Dict[str, str]]:
    """Per-module coarse permissions for user records that only understand tiers."""
    return [
        {"module": entry.module_id, "permission": derive_module_tier(entry).value}
        for entry in level.module_permissions.modules
    ]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AccessLevelStore:
    """In-memory access level collection.

    Only one level may be the default at a time; marking a level as default
    clears the flag everywhere else.
    """

    def __init__(self, levels: Optional[List[AccessLevel]] = None):
        self._levels: Dict[str, AccessLevel] = {}
        for level in levels or []:
            self._levels[level.id] = level

    def __len__(self) -> int:
        return len(self._levels)

    def __contains__(self, level_id: object) -> bool:
        return level_id in self._levels

    def snapshot(self) -> Dict[str, AccessLevel]:
        """Copy of the current levels by id, for handing to an evaluator."""
        return dict(self._levels)

    def get(self, level_id: str) -> Optional[AccessLevel]:
        return self._levels.get(level_id)

    def resolve(self, level_id: Optional[str]) -> Optional[AccessLevel]:
        """Active level by id; dangling and inactive ids give ``None``."""
        if not level_id:
            return None
        level = self._levels.get(level_id)
        if level is None or not level.is_active:
            return None
        return level

    def list_all(self) -> List[AccessLevel]:
        """All levels, newest first."""
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(
            self._levels.values(),
            key=lambda level: _aware(level.created_at) or epoch,
            reverse=True,
        )

    def list_active(self) -> List[AccessLevel]:
        """Active levels ordered by name."""
        return sorted(
            (level for level in self._levels.values() if level.is_active),
            key=lambda level: level.name,
        )

    def get_default(self) -> Optional[AccessLevel]:
        for level in self._levels.values():
            if level.is_default and level.is_active:
                return level
        return None

    def _unset_defaults(self) -> None:
        for level_id, level in list(self._levels.items()):
            if level.is_default:
                self._levels[level_id] = level.model_copy(update={"is_default": False})

    def create(self, data: Mapping[str, Any], created_by: str) -> str:
        """Create a level from submitted data and return its id.

        Raises:
            AccessLevelValidationError: If the data fails validation
        """
        errors = validate_access_level_data(data)
        if errors:
            raise AccessLevelValidationError(errors)

        now = _now()
        level_id = uuid.uuid4().hex
        try:
            level = AccessLevel(
                id=level_id,
                name=data["name"],
                description=data["description"],
                is_default=bool(_get(data, "is_default", "isDefault", False)),
                is_active=True,
                module_permissions=_get(data, "module_permissions", "modulePermissions"),
                created_at=now,
                created_by=created_by,
                updated_at=now,
                updated_by=created_by,
            )
        except ValidationError as exc:
            raise AccessLevelValidationError(
                [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
            ) from exc

        if level.is_default:
            self._unset_defaults()
        self._levels[level_id] = level
        logger.info(f"Created access level {level.name!r} ({level_id}) by {created_by}")
        return level_id

    def update(self, level_id: str, data: Mapping[str, Any], updated_by: str) -> AccessLevel:
        """Apply a partial update.

        Raises:
            AccessLevelNotFoundError: If ``level_id`` is unknown
            AccessLevelValidationError: If the updated fields do not parse
        """
        current = self._levels.get(level_id)
        if current is None:
            raise AccessLevelNotFoundError(level_id)

        changes: Dict[str, Any] = {}
        for snake, camel in (
            ("name", "name"),
            ("description", "description"),
            ("is_default", "isDefault"),
            ("is_active", "isActive"),
            ("module_permissions", "modulePermissions"),
        ):
            if camel in data or snake in data:
                changes[snake] = _get(data, snake, camel)

        merged = current.model_dump()
        merged.update(changes)
        merged["updated_at"] = _now()
        merged["updated_by"] = updated_by
        try:
            level = AccessLevel.model_validate(merged)
        except ValidationError as exc:
            raise AccessLevelValidationError(
                [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
            ) from exc

        if level.is_default:
            self._unset_defaults()
        self._levels[level_id] = level
        logger.info(f"Updated access level {level_id} by {updated_by}")
        return level

    def delete(self, level_id: str) -> None:
        """Remove a level. Users still pointing at it lose its grants.

        Raises:
            AccessLevelNotFoundError: If ``level_id`` is unknown
        """
        if level_id not in self._levels:
            raise AccessLevelNotFoundError(level_id)
        del self._levels[level_id]
        logger.info(f"Deleted access level {level_id}")

    def initialize_predefined(self, created_by: str) -> List[str]:
        """Add each predefined level whose name is not taken yet.

        Returns:
            Ids of the levels that were created
        """
        existing_names = {level.name for level in self._levels.values()}
        created = []
        for key, definition in PREDEFINED_ACCESS_LEVELS.items():
            if definition["name"] in existing_names:
                continue
            now = _now()
            level = AccessLevel(
                id=uuid.uuid4().hex,
                name=definition["name"],
                description=definition["description"],
                is_default=False,
                is_active=True,
                module_permissions=definition["modulePermissions"],
                created_at=now,
                created_by=created_by,
                updated_at=now,
                updated_by=created_by,
            )
            self._levels[level.id] = level
            created.append(level.id)
            logger.debug(f"Seeded predefined access level {key}")
        if created:
            logger.info(f"Initialized {len(created)} predefined access levels")
        return created

    @classmethod
    def from_documents(cls, documents: List[Mapping[str, Any]]) -> "AccessLevelStore":
        """Build a store from stored level documents.

        Documents without an ``id`` get one from their name. Documents that
        fail to parse are skipped, so users referencing them see no access.
        """
        store = cls()
        for index, document in enumerate(documents):
            doc = dict(document)
            if not doc.get("id") and isinstance(doc.get("name"), str):
                doc["id"] = slugify(doc["name"], separator="_")
            try:
                level = AccessLevel.model_validate(doc)
            except ValidationError as exc:
                logger.warning(f"Skipping malformed access level #{index}: {exc.error_count()} errors")
                continue
            if level.id in store._levels:
                logger.warning(f"Duplicate access level id {level.id!r}, keeping the first")
                continue
            store._levels[level.id] = level
        return store

    @classmethod
    def from_yaml(cls, path: str) -> "AccessLevelStore":
        store = cls.from_documents(load_access_level_documents(path))
        logger.info(f"Loaded {len(store)} access levels from {path}")
        return store


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def access_level_permissions(level: AccessLevel) -> Dict[str, Any]:
    """User record fields that copy a level's grants onto one user.

    ``granularPermissions`` becomes the user's inline override;
    ``modulePermissions`` carries the coarse per-module tiers for readers
    that only understand those.
    """
    return {
        "modulePermissions": legacy_module_permissions(level),
        "granularPermissions": level.module_permissions.to_documents(),
    }
