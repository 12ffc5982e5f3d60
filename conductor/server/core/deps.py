"""
Request dependencies.

Authentication happens upstream of this service; the gateway forwards the
acting user as ``X-User-ID`` (UUID) and ``X-User-Roles`` (comma-separated
``org:role`` pairs). :class:`ActingUser` answers the role questions the
Conductor permission rules ask.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from fastapi import Depends, Header

from conductor.core.errors import ConductorError, unauthorized

from .config import settings
from .constant import LIBRETEXTS_ORG_ID


@dataclass(frozen=True)
class ActingUser:
    """The user on whose behalf a request runs. ``uuid`` is None for anonymous requests."""

    uuid: Optional[str] = None
    roles: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.uuid)

    @property
    def is_superadmin(self) -> bool:
        return (LIBRETEXTS_ORG_ID, "superadmin") in self.roles

    def has_role(self, org_id: str, role: str) -> bool:
        """Check a role within an organization.

        Super administrators pass every check, and campus administrators of
        this instance's organization pass every check on this instance.
        """
        if self.is_superadmin:
            return True
        if (settings.org_id.lower(), "campusadmin") in self.roles:
            return True
        return (org_id.lower(), role.lower()) in self.roles


def parse_roles(raw: Optional[str]) -> Tuple[Tuple[str, str], ...]:
    """Parse ``org:role,org:role`` into lower-cased pairs, skipping malformed entries."""
    if not raw:
        return ()
    pairs: List[Tuple[str, str]] = []
    for entry in raw.split(","):
        org, sep, role = entry.strip().partition(":")
        if sep and org and role:
            pairs.append((org.lower(), role.lower()))
    return tuple(pairs)


async def get_acting_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_roles: Optional[str] = Header(default=None),
) -> ActingUser:
    uuid = x_user_id.strip() if x_user_id and x_user_id.strip() else None
    return ActingUser(uuid=uuid, roles=parse_roles(x_user_roles) if uuid else ())


async def require_user(user: ActingUser = Depends(get_acting_user)) -> ActingUser:
    if not user.is_authenticated:
        raise ConductorError("err9", 401)
    return user


async def require_campus_admin(user: ActingUser = Depends(require_user)) -> ActingUser:
    if not user.has_role(settings.org_id, "campusadmin"):
        raise unauthorized()
    return user


async def require_superadmin(user: ActingUser = Depends(require_user)) -> ActingUser:
    if not user.is_superadmin:
        raise unauthorized()
    return user
