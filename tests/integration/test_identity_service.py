"""Integration tests for identity lookups."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.kernel.errors import NotFoundError
from stemhub.kernel.identity.identity_service import IdentityService
from stemhub.kernel.models import Project, User
from stemhub.kernel.permissions.access import ProjectAccessEvaluator
from stemhub.kernel.permissions.roles import CollaboratorRole

from tests.conftest import add_collaborator


class TestIdentityService:
    """Tests for IdentityService."""
    
    @pytest.mark.asyncio
    async def test_create_normalises_email(self, db_session: AsyncSession):
        service = IdentityService(db_session)
        user = await service.create_user("  Dana@Example.COM ", " Dana ")
        assert user.email == "dana@example.com"
        assert user.display_name == "Dana"
        assert (await service.get_user_by_email("DANA@example.com")).id == user.id
    
    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, db_session: AsyncSession, alice: User):
        with pytest.raises(ValueError):
            await IdentityService(db_session).create_user("ALICE@example.com")
    
    @pytest.mark.asyncio
    async def test_inactive_user_not_resolved(self, db_session: AsyncSession, alice: User):
        """Deactivated accounts cannot be invited."""
        alice.is_active = False
        await db_session.commit()
        with pytest.raises(NotFoundError) as exc_info:
            await IdentityService(db_session).resolve_user_by_email("alice@example.com")
        assert exc_info.value.resource == "User"


class TestHasAccess:
    """Tests for ProjectAccessEvaluator.has_access."""
    
    @pytest.mark.asyncio
    async def test_owner_collaborator_and_stranger(
        self,
        db_session: AsyncSession,
        project: Project,
        owner: User,
        alice: User,
        stranger: User,
    ):
        await add_collaborator(db_session, project, alice, CollaboratorRole.VIEWER)
        evaluator = ProjectAccessEvaluator(db_session)
        
        assert await evaluator.has_access(project, owner.id) is True
        assert await evaluator.has_access(project, alice.id) is True
        assert await evaluator.has_access(project, stranger.id) is False
