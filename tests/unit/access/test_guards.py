"""Tests for module and action guards."""

import pytest

from schooladmin.core.access import ActionGuard, ModuleGuard, PermissionTier

from tests.factories import make_user, module_rule


@pytest.fixture
def viewer(read_only_fees):
    return make_user("Staff", access_level=read_only_fees)


class TestModuleGuard:
    """Tests for ModuleGuard."""

    @pytest.mark.parametrize("required,expected", [
        ("view_only", True),
        ("edit", False),
        ("full_access", False),
        (PermissionTier.VIEW_ONLY, True),
    ])
    def test_required_tier(self, evaluator, viewer, required, expected):
        assert ModuleGuard(evaluator, "fees", required).allows(viewer) is expected

    def test_default_requirement_is_view(self, evaluator, viewer):
        assert ModuleGuard(evaluator, "fees").required_permission is PermissionTier.VIEW_ONLY

    def test_unknown_requirement_never_opens(self, evaluator):
        guard = ModuleGuard(evaluator, "fees", "owner")
        assert guard.required_permission is None
        assert not guard.allows(make_user("Admin"))

    def test_full_access_override(self, evaluator):
        user = make_user("Staff", overrides=[module_rule("fees", tier="full_access")])
        assert ModuleGuard(evaluator, "fees", "full_access").allows(user)

    def test_render_allowed(self, evaluator, viewer):
        guard = ModuleGuard(evaluator, "fees")
        assert guard.render(viewer, "fees page") == "fees page"
        assert guard.render(viewer, lambda: ["row"], fallback=[]) == ["row"]

    def test_render_denied(self, evaluator, viewer):
        """Test the fallback replaces content and the content is not built."""
        calls = []
        guard = ModuleGuard(evaluator, "attendance")

        assert guard.render(viewer, lambda: calls.append(1)) is None
        assert guard.render(viewer, "secret", fallback="no access") == "no access"
        assert calls == []

    def test_missing_user(self, evaluator):
        assert ModuleGuard(evaluator, "fees").render(None, "content", "denied") == "denied"


class TestActionGuard:
    """Tests for ActionGuard."""

    def test_allows(self, evaluator, viewer):
        assert ActionGuard(evaluator, "fees", "collect", "view_history").allows(viewer)
        assert not ActionGuard(evaluator, "fees", "collect", "record_payment").allows(viewer)

    def test_render(self, evaluator, viewer):
        button = ActionGuard(evaluator, "fees", "collect", "revert_payment")
        assert button.render(viewer, "Revert", fallback="") == ""
        assert button.render(make_user("Admin"), "Revert", fallback="") == "Revert"

    def test_unknown_target(self, evaluator, viewer):
        assert not ActionGuard(evaluator, "library", "shelf", "view_books").allows(viewer)
        assert ActionGuard(evaluator, "library", "shelf", "view_books").allows(make_user("Admin"))
