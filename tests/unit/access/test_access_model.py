"""Tests for the access model types."""

import pytest
from pydantic import ValidationError

from schooladmin.core.access.model import (
    ANONYMOUS,
    AccessLevel,
    PagePermission,
    PermissionBundle,
    PermissionTier,
    Role,
    UserAccess,
    highest_tier,
)

from tests.factories import make_bundle, module_rule, page_rule


class TestRole:
    """Tests for role parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("Admin", Role.ADMIN),
        ("admin", Role.ADMIN),
        (" Staff ", Role.STAFF),
        ("PARENT", Role.PARENT),
        (Role.STAFF, Role.STAFF),
        ("Teacher", None),
        (None, None),
        (1, None),
    ])
    def test_parse(self, value, expected):
        assert Role.parse(value) is expected


class TestPermissionTier:
    """Tests for tier ordering."""

    def test_ordering(self):
        assert PermissionTier.FULL_ACCESS.satisfies(PermissionTier.EDIT)
        assert PermissionTier.EDIT.satisfies(PermissionTier.VIEW_ONLY)
        assert PermissionTier.EDIT.satisfies(PermissionTier.EDIT)
        assert not PermissionTier.VIEW_ONLY.satisfies(PermissionTier.EDIT)
        assert not PermissionTier.EDIT.satisfies(PermissionTier.FULL_ACCESS)

    def test_highest_tier(self):
        assert highest_tier() is None
        assert highest_tier(None, None) is None
        assert highest_tier(None, PermissionTier.VIEW_ONLY) is PermissionTier.VIEW_ONLY
        assert highest_tier(
            PermissionTier.EDIT, PermissionTier.FULL_ACCESS, PermissionTier.VIEW_ONLY
        ) is PermissionTier.FULL_ACCESS


class TestPermissionBundle:
    """Tests for parsing stored permission bundles."""

    def test_parse_list_form(self):
        """Test the stored list form with camelCase keys."""
        bundle = make_bundle(
            module_rule("fees", [page_rule("collect", {"record_payment": True, "edit": False})]),
            module_rule("events", tier="view_only"),
        )

        fees = bundle.module("fees")
        assert fees.tier is None
        page = fees.page("collect")
        assert page.can_access is True
        assert page.actions == {"record_payment": True, "edit": False}
        assert bundle.module("events").tier is PermissionTier.VIEW_ONLY
        assert bundle.module("pupils") is None
        assert fees.page("list") is None

    def test_parse_dict_form_with_snake_case(self):
        bundle = PermissionBundle.model_validate({
            "modules": [
                {"module_id": "fees", "pages": [
                    {"page_id": "list", "can_access": False, "actions": {"view_list": True}},
                ]},
            ]
        })
        page = bundle.module("fees").page("list")
        assert page.can_access is False
        assert page.actions == {"view_list": True}

    def test_first_action_entry_wins(self):
        page = PagePermission.model_validate({
            "pageId": "list",
            "actions": [
                {"actionId": "view_list", "allowed": False},
                {"actionId": "view_list", "allowed": True},
            ],
        })
        assert page.actions == {"view_list": False}

    def test_allowed_must_be_true(self):
        """Test only a literal true grants an action."""
        page = PagePermission.model_validate({
            "pageId": "list",
            "actions": [{"actionId": "view_list", "allowed": "yes"}, {"actionId": "search_filter"}],
        })
        assert page.actions == {"view_list": False, "search_filter": False}

    @pytest.mark.parametrize("actions", [
        ["view_list"],
        [{"allowed": True}],
        [{"actionId": "", "allowed": True}],
    ])
    def test_malformed_actions_rejected(self, actions):
        with pytest.raises(ValidationError):
            PagePermission.model_validate({"pageId": "list", "actions": actions})

    def test_invalid_tier_rejected(self):
        with pytest.raises(ValidationError):
            make_bundle(module_rule("fees", tier="superuser"))

    def test_unknown_modules_are_kept(self):
        """Test rules for modules outside the catalog still parse."""
        bundle = make_bundle(module_rule("library", tier="edit"))
        assert bundle.module("library").tier is PermissionTier.EDIT

    def test_empty(self):
        assert PermissionBundle().is_empty()
        assert PermissionBundle.model_validate([]).is_empty()
        assert not make_bundle(module_rule("fees", tier="edit")).is_empty()

    def test_to_documents(self):
        docs = [
            module_rule("fees", [page_rule("collect", {"record_payment": True}, tier="edit")]),
            module_rule("events", tier="view_only"),
        ]
        assert make_bundle(*docs).to_documents() == docs


class TestAccessLevel:
    def test_parse_stored_document(self):
        level = AccessLevel.model_validate({
            "id": "bursar",
            "name": "Bursar",
            "isDefault": True,
            "modulePermissions": [module_rule("fees", tier="full_access")],
            "createdBy": "admin",
            "legacyField": "ignored",
        })
        assert level.is_default is True
        assert level.is_active is True
        assert level.created_by == "admin"
        assert level.module_permissions.module("fees").tier is PermissionTier.FULL_ACCESS


class TestUserAccess:
    """Tests for building users from stored records."""

    def test_from_record(self):
        user = UserAccess.from_record({
            "role": "Staff",
            "accessLevelId": "clerk",
            "granularPermissions": [module_rule("fees", tier="edit")],
        })
        assert user.role is Role.STAFF
        assert user.access_level_id == "clerk"
        assert user.overrides.module("fees").tier is PermissionTier.EDIT
        assert not user.is_admin

    def test_snake_case_keys(self):
        user = UserAccess.from_record({"role": "Staff", "access_level_id": "clerk"})
        assert user.access_level_id == "clerk"
        assert user.overrides is None

    def test_admin(self):
        assert UserAccess.from_record({"role": "Admin"}).is_admin

    def test_empty_level_id_is_no_level(self):
        assert UserAccess.from_record({"role": "Staff", "accessLevelId": ""}).access_level_id is None

    def test_legacy_module_list(self):
        """Test coarse module permissions fill in modules the bundle lacks."""
        user = UserAccess.from_record({
            "role": "Staff",
            "granularPermissions": [module_rule("fees", tier="view_only")],
            "modulePermissions": [
                {"module": "fees", "permission": "full_access"},
                {"module": "attendance", "permission": "edit"},
            ],
        })
        assert user.overrides.module("fees").tier is PermissionTier.VIEW_ONLY
        assert user.overrides.module("attendance").tier is PermissionTier.EDIT

    def test_legacy_only(self):
        user = UserAccess.from_record({
            "role": "Staff",
            "modulePermissions": [{"module": "events", "permission": "view_only"}],
        })
        assert user.overrides.module("events").tier is PermissionTier.VIEW_ONLY

    @pytest.mark.parametrize("record", [
        {"role": "Staff", "accessLevelId": 12},
        {"role": "Staff", "granularPermissions": "everything"},
        {"role": "Staff", "granularPermissions": [{"pages": []}]},
        {"role": "Staff", "modulePermissions": {"fees": "edit"}},
        {"role": "Staff", "modulePermissions": ["fees"]},
        {"role": "Staff", "modulePermissions": [{"module": "fees", "permission": "owner"}]},
    ])
    def test_malformed_record_is_anonymous(self, record):
        assert UserAccess.from_record(record) is ANONYMOUS

    def test_non_mapping_is_anonymous(self):
        assert UserAccess.from_record(["Admin"]) is ANONYMOUS
