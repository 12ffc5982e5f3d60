"""Unit tests for acting user resolution and role checks."""

import pytest

from conductor.core.errors import ConductorError
from conductor.server.core.config import settings
from conductor.server.core.deps import (
    ActingUser,
    get_acting_user,
    parse_roles,
    require_campus_admin,
    require_superadmin,
    require_user,
)


class TestParseRoles:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, ()),
            ("", ()),
            ("libretexts:SuperAdmin", (("libretexts", "superadmin"),)),
            (" ucd:campusadmin , ucd:member ", (("ucd", "campusadmin"), ("ucd", "member"))),
            ("broken,:role,org:,ok:member", (("ok", "member"),)),
        ],
    )
    def test_parse(self, raw, expected):
        assert parse_roles(raw) == expected


class TestActingUser:
    def test_anonymous(self):
        user = ActingUser()

        assert not user.is_authenticated
        assert not user.has_role("libretexts", "member")

    def test_superadmin_passes_every_check(self):
        user = ActingUser("u1", (("libretexts", "superadmin"),))

        assert user.is_superadmin
        assert user.has_role("ucd", "campusadmin")

    def test_campus_admin_of_instance(self, monkeypatch):
        monkeypatch.setattr(settings, "org_id", "ucd")
        user = ActingUser("u1", (("ucd", "campusadmin"),))

        assert user.has_role("other", "member")
        assert not user.is_superadmin

    def test_exact_role_match_is_case_insensitive(self):
        user = ActingUser("u1", (("ucd", "member"),))

        assert user.has_role("UCD", "Member")
        assert not user.has_role("ucd", "campusadmin")


class TestRequestDependencies:
    async def test_get_acting_user_from_headers(self):
        user = await get_acting_user(" u1 ", "libretexts:superadmin")

        assert user == ActingUser("u1", (("libretexts", "superadmin"),))

    async def test_roles_ignored_without_user_id(self):
        user = await get_acting_user("  ", "libretexts:superadmin")

        assert user == ActingUser()

    async def test_require_user(self):
        with pytest.raises(ConductorError) as exc_info:
            await require_user(ActingUser())

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == "err9"
        assert (await require_user(ActingUser("u1"))).uuid == "u1"

    async def test_require_campus_admin(self, monkeypatch):
        monkeypatch.setattr(settings, "org_id", "ucd")

        assert await require_campus_admin(ActingUser("u1", (("ucd", "campusadmin"),)))
        with pytest.raises(ConductorError) as exc_info:
            await require_campus_admin(ActingUser("u2", (("ucd", "member"),)))
        assert exc_info.value.status_code == 403

    async def test_require_superadmin(self, monkeypatch):
        monkeypatch.setattr(settings, "org_id", "ucd")

        with pytest.raises(ConductorError) as exc_info:
            await require_superadmin(ActingUser("u1", (("ucd", "campusadmin"),)))

        assert exc_info.value.code == "err8"
        assert await require_superadmin(ActingUser("u2", (("libretexts", "superadmin"),)))
