"""Unit tests for the role/permission model."""

import pytest

from stemhub.kernel.permissions.roles import (
    ALL_GRANTED,
    NONE_GRANTED,
    Capability,
    CollaboratorRole,
    PermissionBundle,
    ROLE_RANK,
    default_permissions,
    merge_permissions,
)


class TestDefaultPermissions:
    """Tests for default_permissions."""
    
    def test_viewer_can_only_export(self):
        """VIEWER gets export and nothing else."""
        bundle = default_permissions(CollaboratorRole.VIEWER)
        assert bundle.as_dict() == {
            "can_edit": False,
            "can_add_children": False,
            "can_delete_children": False,
            "can_invite_others": False,
            "can_export": True,
        }
    
    def test_contributor_defaults(self):
        """CONTRIBUTOR edits and adds but cannot delete or invite."""
        bundle = default_permissions(CollaboratorRole.CONTRIBUTOR)
        assert bundle.can_edit is True
        assert bundle.can_add_children is True
        assert bundle.can_export is True
        assert bundle.can_delete_children is False
        assert bundle.can_invite_others is False
    
    def test_admin_has_everything(self):
        """ADMIN gets all five capabilities."""
        assert default_permissions(CollaboratorRole.ADMIN) == ALL_GRANTED
    
    def test_accepts_raw_role_string(self):
        """Stored role strings resolve the same as the enum."""
        assert default_permissions("ADMIN") == ALL_GRANTED
    
    @pytest.mark.parametrize("role", ["OWNER", "admin", "", None, 42])
    def test_unknown_role_fails_closed(self, role):
        """Anything outside the closed role set grants nothing, not even export."""
        assert default_permissions(role) == NONE_GRANTED
        assert not any(default_permissions(role).as_dict().values())


class TestMergePermissions:
    """Tests for merge_permissions."""
    
    def test_no_overrides_is_identity(self):
        """None or empty overrides return the defaults unchanged."""
        defaults = default_permissions(CollaboratorRole.CONTRIBUTOR)
        assert merge_permissions(defaults, None) == defaults
        assert merge_permissions(defaults, {}) == defaults
    
    def test_present_keys_replace_defaults(self):
        """Explicit flags win over the role default."""
        defaults = default_permissions(CollaboratorRole.CONTRIBUTOR)
        merged = merge_permissions(defaults, {"can_delete_children": True, "can_edit": False})
        assert merged.can_delete_children is True
        assert merged.can_edit is False
        assert merged.can_add_children is True
    
    def test_none_values_keep_default(self):
        """A key sent as None behaves as if absent."""
        defaults = default_permissions(CollaboratorRole.VIEWER)
        merged = merge_permissions(defaults, {"can_export": None, "can_edit": None})
        assert merged == defaults
    
    def test_unknown_keys_are_ignored(self):
        """Keys that are not capability names do not leak into the bundle."""
        defaults = default_permissions(CollaboratorRole.VIEWER)
        merged = merge_permissions(defaults, {"can_fly": True, "role": "ADMIN"})
        assert merged == defaults
    
    def test_inputs_are_not_mutated(self):
        """Merging returns a new bundle and leaves both inputs alone."""
        defaults = default_permissions(CollaboratorRole.VIEWER)
        overrides = {"can_edit": True}
        merged = merge_permissions(defaults, overrides)
        assert merged.can_edit is True
        assert defaults.can_edit is False
        assert default_permissions(CollaboratorRole.VIEWER).can_edit is False
        assert overrides == {"can_edit": True}
    
    def test_override_of_unknown_role_still_applies(self):
        """Fail-closed defaults can still be opened by explicit flags."""
        merged = merge_permissions(default_permissions("GHOST"), {"can_export": True})
        assert merged == PermissionBundle(can_export=True)


class TestRoleHelpers:
    """Tests for role parsing, bundle access and listing rank."""
    
    def test_parse_known_and_unknown(self):
        assert CollaboratorRole.parse("VIEWER") is CollaboratorRole.VIEWER
        assert CollaboratorRole.parse(CollaboratorRole.ADMIN) is CollaboratorRole.ADMIN
        assert CollaboratorRole.parse("SUPERUSER") is None
    
    def test_granted_by_capability_or_name(self):
        bundle = PermissionBundle(can_edit=True)
        assert bundle.granted(Capability.EDIT) is True
        assert bundle.granted("can_edit") is True
        assert bundle.granted(Capability.EXPORT) is False
    
    def test_rank_orders_admin_first(self):
        """Listing order is ADMIN, CONTRIBUTOR, VIEWER."""
        ordered = sorted(CollaboratorRole, key=ROLE_RANK.__getitem__)
        assert ordered == [
            CollaboratorRole.ADMIN,
            CollaboratorRole.CONTRIBUTOR,
            CollaboratorRole.VIEWER,
        ]
