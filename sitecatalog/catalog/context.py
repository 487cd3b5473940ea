"""Request-scoped actor and tenant context.

Both objects are built once per request by the caller (the HTTP layer
builds them from headers) and handed to the category service.
"""

from dataclasses import dataclass, field

from sitecatalog.domain.entities import UserRole


@dataclass
class WorkContext:
    """The acting user and the roles it holds.

    Attributes:
        user_id: ID of the acting user, ``0`` for a guest.
        roles: Roles assigned to the user, active or not.
    """

    user_id: int = 0
    roles: list[UserRole] = field(default_factory=list)

    @classmethod
    def for_roles(cls, *role_ids: int, user_id: int = 0) -> "WorkContext":
        """Build a context whose roles are all active.

        Args:
            role_ids: Role IDs held by the user.
            user_id: ID of the acting user.

        Returns:
            New work context.
        """
        return cls(user_id=user_id, roles=[UserRole(id=role_id) for role_id in role_ids])

    @property
    def active_role_ids(self) -> frozenset[int]:
        """IDs of the roles that currently grant anything."""
        return frozenset(role.id for role in self.roles if role.active)

    @property
    def role_key(self) -> str:
        """Stable identity of the active role set, used in cache keys."""
        return ",".join(str(role_id) for role_id in sorted(self.active_role_ids))


@dataclass
class SiteContext:
    """The tenant site the request is served for."""

    site_id: int
