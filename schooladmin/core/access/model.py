"""Access model for school admin permissions.

A permission bundle maps modules → pages → actions. The same bundle shape is
used by named access levels (shared) and by per-user inline overrides
(owned by one user). Bundles are stored with camelCase keys::

    [
        {"moduleId": "fees", "tier": "view_only"},
        {"moduleId": "attendance", "pages": [
            {"pageId": "record", "canAccess": true,
             "actions": [{"actionId": "record_attendance", "allowed": true}]}
        ]},
    ]

Keys stay plain strings in the stored models. They are resolved against the
closed catalog only at evaluation time, so an entry naming a module that no
longer exists is carried along harmlessly and simply never grants anything.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ...common.logger import get_logger

logger = get_logger("access.model")


class Role(str, Enum):
    """Coarse user roles."""

    ADMIN = "Admin"
    STAFF = "Staff"
    PARENT = "Parent"

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """Resolve a stored role value; anything unrecognised is no role."""
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        wanted = value.strip().lower()
        for role in cls:
            if role.value.lower() == wanted:
                return role
        return None


class Module(str, Enum):
    """Functional areas of the application that carry permissions."""

    PUPILS = "pupils"
    FEES = "fees"
    EXAMS = "exams"
    STAFF = "staff"
    CLASSES = "classes"
    ATTENDANCE = "attendance"
    SUBJECTS = "subjects"
    ACADEMIC_YEARS = "academic_years"
    BANKING = "banking"
    USERS = "users"
    NOTIFICATIONS = "notifications"
    BULK_SMS = "bulk_sms"
    PROCUREMENT = "procurement"
    UNIFORMS = "uniforms"
    REQUIREMENTS = "requirements"
    SETTINGS = "settings"
    REPORTS = "reports"
    PUPIL_HISTORY = "pupil_history"
    EVENTS = "events"
    PROMOTION = "promotion"


class PermissionTier(str, Enum):
    """Coarse, ordered access level: view_only < edit < full_access."""

    VIEW_ONLY = "view_only"
    EDIT = "edit"
    FULL_ACCESS = "full_access"

    @property
    def rank(self) -> int:
        return _TIER_RANK[self]

    def satisfies(self, required: "PermissionTier") -> bool:
        """True if this tier is at least ``required``."""
        return self.rank >= required.rank


_TIER_RANK = {
    PermissionTier.VIEW_ONLY: 0,
    PermissionTier.EDIT: 1,
    PermissionTier.FULL_ACCESS: 2,
}


def highest_tier(*tiers: Optional[PermissionTier]) -> Optional[PermissionTier]:
    """Return the highest of the given tiers, ignoring ``None``."""
    present = [t for t in tiers if t is not None]
    if not present:
        return None
    return max(present, key=lambda t: t.rank)


class _StoredModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PagePermission(_StoredModel):
    """Grants for one page of a module."""

    page_id: str
    can_access: bool = True
    tier: Optional[PermissionTier] = None
    actions: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("actions", mode="before")
    @classmethod
    def _actions_from_list(cls, value: Any) -> Any:
        # Stored documents keep actions as [{"actionId": ..., "allowed": ...}]
        if not isinstance(value, list):
            return value
        actions: Dict[str, bool] = {}
        for item in value:
            if not isinstance(item, dict):
                raise ValueError("action entries must be mappings")
            action_id = item.get("actionId", item.get("action_id", item.get("action")))
            if not isinstance(action_id, str) or not action_id:
                raise ValueError("action entry is missing its actionId")
            # First entry wins, matching lookup order in stored lists
            actions.setdefault(action_id, item.get("allowed") is True)
        return actions


class ModulePermissions(_StoredModel):
    """Grants for one module: an optional coarse tier plus page rules."""

    module_id: str
    tier: Optional[PermissionTier] = None
    pages: List[PagePermission] = Field(default_factory=list)

    def page(self, page_id: str) -> Optional[PagePermission]:
        for page in self.pages:
            if page.page_id == page_id:
                return page
        return None


class PermissionBundle(_StoredModel):
    """A full module → page → action grant map."""

    modules: List[ModulePermissions] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _wrap_list(cls, value: Any) -> Any:
        if isinstance(value, list):
            return {"modules": value}
        return value

    def module(self, module_id: str) -> Optional[ModulePermissions]:
        for entry in self.modules:
            if entry.module_id == module_id:
                return entry
        return None

    def is_empty(self) -> bool:
        return not self.modules

    def to_documents(self) -> List[Dict[str, Any]]:
        """Serialize to the stored list form with camelCase keys."""
        documents = []
        for entry in self.modules:
            doc: Dict[str, Any] = {"moduleId": entry.module_id, "pages": []}
            if entry.tier is not None:
                doc["tier"] = entry.tier.value
            for page in entry.pages:
                page_doc: Dict[str, Any] = {
                    "pageId": page.page_id,
                    "canAccess": page.can_access,
                    "actions": [
                        {"actionId": action_id, "allowed": allowed}
                        for action_id, allowed in page.actions.items()
                    ],
                }
                if page.tier is not None:
                    page_doc["tier"] = page.tier.value
                doc["pages"].append(page_doc)
            documents.append(doc)
        return documents


class AccessLevel(_StoredModel):
    """A named, reusable permission bundle assigned to users by id."""

    id: str
    name: str
    description: str = ""
    is_default: bool = False
    is_active: bool = True
    module_permissions: PermissionBundle = Field(default_factory=PermissionBundle)
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None


@dataclass(frozen=True)
class UserAccess:
    """The slice of a user record the evaluator needs.

    ``overrides`` is the user's own bundle; it wins over the referenced
    access level for every rule it defines.
    """

    role: Optional[Role] = None
    access_level_id: Optional[str] = None
    overrides: Optional[PermissionBundle] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "UserAccess":
        """Build from a stored user document.

        Recognised keys: ``role``, ``accessLevelId``, ``granularPermissions``
        (inline override bundle) and the older ``modulePermissions`` list of
        ``{"module", "permission"}`` pairs, which becomes module-level tiers
        for modules the granular bundle does not mention.

        A record that cannot be parsed yields an anonymous user, which every
        check denies.
        """
        if not isinstance(record, Mapping):
            logger.warning(f"Ignoring user record of type {type(record).__name__}")
            return ANONYMOUS

        level_id = record.get("accessLevelId", record.get("access_level_id"))
        if level_id is not None and not isinstance(level_id, str):
            logger.warning("Ignoring user record with non-string accessLevelId")
            return ANONYMOUS

        try:
            overrides = _parse_overrides(record)
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning(f"Ignoring user record with malformed permissions: {exc}")
            return ANONYMOUS

        return cls(
            role=Role.parse(record.get("role")),
            access_level_id=level_id or None,
            overrides=overrides,
        )


ANONYMOUS = UserAccess()


def _parse_overrides(record: Mapping[str, Any]) -> Optional[PermissionBundle]:
    granular = record.get("granularPermissions", record.get("overrides"))
    legacy = record.get("modulePermissions")

    bundle = PermissionBundle.model_validate(granular) if granular is not None else None
    if not legacy:
        return bundle

    if not isinstance(legacy, list):
        raise TypeError("modulePermissions must be a list")
    modules = list(bundle.modules) if bundle is not None else []
    known = {entry.module_id for entry in modules}
    for item in legacy:
        if not isinstance(item, Mapping):
            raise TypeError("modulePermissions entries must be mappings")
        module_id = item.get("module")
        if module_id in known:
            continue
        modules.append(
            ModulePermissions(module_id=module_id, tier=PermissionTier(item.get("permission")))
        )
        known.add(module_id)
    return PermissionBundle(modules=modules)
