"""Pytest configuration and shared fixtures."""

import pytest

from schooladmin.core.access import AccessLevelStore, PermissionEvaluator

from tests.factories import make_level, module_rule, page_rule


@pytest.fixture
def read_only_fees():
    """Access level granting view-only on fees."""
    return make_level(id="ReadOnlyFees", name="ReadOnlyFees", modules=[
        module_rule("fees", tier="view_only"),
    ])


@pytest.fixture
def clerk_level():
    """Access level built only from page and action rules."""
    return make_level(id="clerk", name="Clerk", modules=[
        module_rule("fees", [
            page_rule("list", {"view_list": True, "view_reports": True}),
            page_rule("collect", {"access_page": True, "record_payment": True, "edit": False}),
        ]),
        module_rule("attendance", [
            page_rule("record", {"view_page": True}),
        ]),
    ])


@pytest.fixture
def store(read_only_fees, clerk_level):
    return AccessLevelStore([read_only_fees, clerk_level])


@pytest.fixture
def evaluator(store):
    return PermissionEvaluator(store.snapshot())


@pytest.fixture
def sample_config():
    """Access level seed document as it appears in YAML."""
    return {
        "access_levels": [
            {
                "id": "read_only_fees",
                "name": "Read Only Fees",
                "description": "View fee structures",
                "modulePermissions": [{"moduleId": "fees", "tier": "view_only"}],
            },
            {
                "name": "Attendance Clerk",
                "description": "Records attendance",
                "modulePermissions": [
                    {
                        "moduleId": "attendance",
                        "pages": [
                            {
                                "pageId": "record",
                                "actions": [
                                    {"actionId": "view_page", "allowed": True},
                                    {"actionId": "record_attendance", "allowed": True},
                                ],
                            }
                        ],
                    }
                ],
            },
        ],
    }
