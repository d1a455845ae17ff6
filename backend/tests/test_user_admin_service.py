"""
Inkwell Backend — Admin User Management Service Tests
======================================================

What we test:
    ✅ Listing with search, role / status filters, sorting and paging
    ✅ Role change writes the profile, a RoleChangeLog row and an audit entry
    ✅ Self-demotion, unchanged role and unknown user are refused
    ✅ Deactivation and reactivation, with the same guards
    ✅ A deactivated user can no longer authenticate
"""

import uuid

import pytest
from sqlalchemy import select

from inkwell.auth import _load_profile
from inkwell.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from inkwell.models.audit_log import AuditLog, RoleChangeLog
from inkwell.models.user_profile import UserProfile
from inkwell.services.user_admin_service import UserAdminService, paginate


class TestListUsers:

    def setup_method(self):
        self.service = UserAdminService()

    @pytest.mark.asyncio
    async def test_lists_everyone_by_default(self, db, reader, author, admin):
        users, total = await self.service.list_users(db)

        assert total == 3
        assert {u.email for u in users} == {reader.email, author.email, admin.email}

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, db, reader, author, admin):
        users, total = await self.service.list_users(db, search="AUTH")

        assert total == 1
        assert users[0].user_id == author.user_id

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, db, reader, author):
        users, total = await self.service.list_users(db, search="%")

        assert total == 0
        assert users == []

    @pytest.mark.asyncio
    async def test_role_and_status_filters(self, db, reader, author, admin):
        reader.is_active = False
        await db.commit()

        inactive, _ = await self.service.list_users(db, status="inactive")
        authors, _ = await self.service.list_users(db, role="author", status="active")

        assert [u.user_id for u in inactive] == [reader.user_id]
        assert [u.user_id for u in authors] == [author.user_id]

    @pytest.mark.asyncio
    async def test_sort_and_pagination(self, db, reader, author, admin):
        first, total = await self.service.list_users(
            db, sort_by="email", sort_order="asc", page=1, limit=2
        )
        second, _ = await self.service.list_users(
            db, sort_by="email", sort_order="asc", page=2, limit=2
        )

        assert total == 3
        assert [u.email for u in first] == [admin.email, author.email]
        assert [u.email for u in second] == [reader.email]

    @pytest.mark.asyncio
    async def test_unknown_filters_are_rejected(self, db):
        with pytest.raises(ValidationError):
            await self.service.list_users(db, role="superuser")
        with pytest.raises(ValidationError):
            await self.service.list_users(db, status="banned")

    def test_paginate(self):
        page = paginate(page=2, limit=50, total=120)
        assert page.total_pages == 3
        assert paginate(page=1, limit=50, total=0).total_pages == 0


class TestChangeRole:

    def setup_method(self):
        self.service = UserAdminService()

    @pytest.mark.asyncio
    async def test_promotes_reader(self, db, reader, admin):
        profile, old_role = await self.service.change_role(
            db, reader.user_id, "author", admin, reason="Trusted contributor"
        )

        assert old_role == "reader"
        assert profile.role == "author"

        log = (await db.execute(
            select(RoleChangeLog).where(RoleChangeLog.user_id == reader.user_id)
        )).scalar_one()
        assert (log.old_role, log.new_role) == ("reader", "author")
        assert log.changed_by == admin.user_id
        assert log.reason == "Trusted contributor"

        entry = (await db.execute(
            select(AuditLog).where(AuditLog.action == "user_role_changed")
        )).scalar_one()
        assert entry.entity_type == "user_profile"
        assert entry.entity_id == str(reader.user_id)
        assert entry.details["new_role"] == "author"

    @pytest.mark.asyncio
    async def test_admin_cannot_demote_self(self, db, admin):
        with pytest.raises(PermissionDeniedError) as exc_info:
            await self.service.change_role(db, admin.user_id, "reader", admin)
        assert exc_info.value.code == "SELF_DEMOTION_FORBIDDEN"

        await db.refresh(admin)
        assert admin.role == "admin"

    @pytest.mark.asyncio
    async def test_unchanged_role(self, db, author, admin):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.change_role(db, author.user_id, "author", admin)
        assert exc_info.value.code == "ROLE_UNCHANGED"

        logs = (await db.execute(select(RoleChangeLog))).scalars().all()
        assert logs == []

    @pytest.mark.asyncio
    async def test_unknown_user(self, db, admin):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.change_role(db, uuid.uuid4(), "author", admin)
        assert exc_info.value.code == "USER_NOT_FOUND"


class TestSetActive:

    def setup_method(self):
        self.service = UserAdminService()

    @pytest.mark.asyncio
    async def test_deactivate_then_reactivate(self, db, reader, admin):
        profile = await self.service.set_active(db, reader.user_id, False, admin, reason="Spam")
        assert profile.is_active is False

        profile = await self.service.set_active(db, reader.user_id, True, admin)
        assert profile.is_active is True

        actions = (await db.execute(
            select(AuditLog.action)
            .where(AuditLog.entity_id == str(reader.user_id))
            .order_by(AuditLog.created_at)
        )).scalars().all()
        assert actions == ["user_deactivated", "user_activated"]

    @pytest.mark.asyncio
    async def test_admin_cannot_deactivate_self(self, db, admin):
        with pytest.raises(PermissionDeniedError) as exc_info:
            await self.service.set_active(db, admin.user_id, False, admin)
        assert exc_info.value.code == "SELF_DEACTIVATION_FORBIDDEN"

    @pytest.mark.asyncio
    async def test_unchanged_status(self, db, reader, admin):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.set_active(db, reader.user_id, True, admin)
        assert exc_info.value.code == "STATUS_UNCHANGED"
        assert exc_info.value.message == "User is already active"

    @pytest.mark.asyncio
    async def test_unknown_user(self, db, admin):
        with pytest.raises(NotFoundError):
            await self.service.set_active(db, uuid.uuid4(), False, admin)

    @pytest.mark.asyncio
    async def test_deactivated_user_cannot_authenticate(self, db, reader, admin, make_token):
        await self.service.set_active(db, reader.user_id, False, admin)
        await db.commit()

        with pytest.raises(AuthenticationError) as exc_info:
            await _load_profile(db, make_token(reader))
        assert exc_info.value.message == "User account is deactivated"

        profile = await db.get(UserProfile, reader.user_id)
        assert profile.is_active is False
