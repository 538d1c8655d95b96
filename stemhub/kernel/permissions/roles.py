"""
Role/permission model.

Maps a collaborator role to its default capability bundle and merges
per-collaborator overrides on top. Everything here is pure: no I/O, no
mutation of the inputs.
"""

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class CollaboratorRole(str, Enum):
    """Role held by a collaborator on a project."""
    VIEWER = "VIEWER"
    CONTRIBUTOR = "CONTRIBUTOR"
    ADMIN = "ADMIN"

    @classmethod
    def parse(cls, value: Any) -> Optional["CollaboratorRole"]:
        """Return the matching role, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Capability(str, Enum):
    """Granular capability flags. Values match the collaborator column names."""
    EDIT = "can_edit"
    ADD_CHILDREN = "can_add_children"
    DELETE_CHILDREN = "can_delete_children"
    INVITE_OTHERS = "can_invite_others"
    EXPORT = "can_export"


@dataclass(frozen=True)
class PermissionBundle:
    """The five capability flags as one immutable value."""

    can_edit: bool = False
    can_add_children: bool = False
    can_delete_children: bool = False
    can_invite_others: bool = False
    can_export: bool = False

    def granted(self, capability: Union[Capability, str]) -> bool:
        return bool(getattr(self, Capability(capability).value))

    def as_dict(self) -> Dict[str, bool]:
        return asdict(self)


ALL_GRANTED = PermissionBundle(
    can_edit=True,
    can_add_children=True,
    can_delete_children=True,
    can_invite_others=True,
    can_export=True,
)
NONE_GRANTED = PermissionBundle()

_ROLE_DEFAULTS: Dict[CollaboratorRole, PermissionBundle] = {
    CollaboratorRole.VIEWER: PermissionBundle(can_export=True),
    CollaboratorRole.CONTRIBUTOR: PermissionBundle(
        can_edit=True,
        can_add_children=True,
        can_delete_children=False,
        can_invite_others=False,
        can_export=True,
    ),
    CollaboratorRole.ADMIN: ALL_GRANTED,
}

# Listing order: ADMIN first, VIEWER last
ROLE_RANK: Dict[CollaboratorRole, int] = {
    CollaboratorRole.ADMIN: 0,
    CollaboratorRole.CONTRIBUTOR: 1,
    CollaboratorRole.VIEWER: 2,
}


def default_permissions(role: Any) -> PermissionBundle:
    """
    Default capability bundle for a role.

    Unknown or missing roles get nothing, not even export.
    """
    parsed = CollaboratorRole.parse(role)
    if parsed is None:
        return NONE_GRANTED
    return _ROLE_DEFAULTS[parsed]


def merge_permissions(
    defaults: PermissionBundle,
    overrides: Optional[Mapping[str, Any]] = None,
) -> PermissionBundle:
    """
    Apply explicit overrides on top of a bundle.

    Keys present in ``overrides`` with a non-None value replace the default;
    absent keys keep it. Keys that are not capability names are ignored.

    Args:
        defaults: Baseline bundle (usually ``default_permissions(role)``)
        overrides: Partial mapping of capability name -> bool

    Returns:
        A new PermissionBundle; ``defaults`` is left untouched
    """
    if not overrides:
        return defaults

    changes = {}
    for capability in Capability:
        value = overrides.get(capability.value)
        if value is not None:
            changes[capability.value] = bool(value)

    return replace(defaults, **changes)
