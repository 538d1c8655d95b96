"""
HTTP tests: the FastAPI app in-process over httpx, against the per-test
SQLite database.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stemhub.database import get_db
from stemhub.kernel.identity.jwt import create_access_token
from stemhub.kernel.models import Project, User
from stemhub.main import app


def auth(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest_asyncio.fixture
async def client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """Async client whose requests use the test database."""
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    
    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)


class TestAuthentication:
    """Requests without a valid bearer token."""
    
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "X-Request-ID" in response.headers
    
    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/v1/projects")
        assert response.status_code == 401
    
    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/projects",
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401


class TestCollaborationFlow:
    """Engine errors surface with their status code and ``code``."""
    
    @pytest.mark.asyncio
    async def test_invite_list_and_conflict(
        self, client: AsyncClient, project: Project, owner: User, alice: User
    ):
        base = f"/api/v1/projects/{project.id}/collaborators"
        
        response = await client.post(
            f"{base}/invite",
            json={"email": "alice@example.com", "role": "VIEWER"},
            headers=auth(owner),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["role"] == "VIEWER"
        assert body["user"]["email"] == "alice@example.com"
        assert body["can_export"] is True
        
        response = await client.post(
            f"{base}/invite",
            json={"email": "alice@example.com"},
            headers=auth(owner),
        )
        assert response.status_code == 409
        assert response.json() == {
            "detail": "User is already a collaborator on this project",
            "code": "conflict",
        }
        
        response = await client.get(base, headers=auth(alice))
        assert response.status_code == 200
        assert [c["user_id"] for c in response.json()] == [str(alice.id)]
    
    @pytest.mark.asyncio
    async def test_status_codes(
        self, client: AsyncClient, project: Project, owner: User, stranger: User
    ):
        base = f"/api/v1/projects/{project.id}/collaborators"
        
        response = await client.post(
            f"{base}/invite", json={"email": "nobody@example.com"}, headers=auth(owner)
        )
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"
        
        response = await client.get(base, headers=auth(stranger))
        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"
        
        response = await client.post(f"{base}/leave", headers=auth(owner))
        assert response.status_code == 409
    
    @pytest.mark.asyncio
    async def test_update_permissions_then_read(
        self, client: AsyncClient, project: Project, owner: User, alice: User
    ):
        base = f"/api/v1/projects/{project.id}/collaborators"
        await client.post(f"{base}/invite", json={"email": "alice@example.com"}, headers=auth(owner))
        
        response = await client.put(
            f"{base}/{alice.id}",
            json={"permissions": {"can_invite_others": True}},
            headers=auth(owner),
        )
        assert response.status_code == 200
        
        response = await client.get(f"{base}/{alice.id}/permissions", headers=auth(owner))
        assert response.status_code == 200
        assert response.json() == {
            "role": "CONTRIBUTOR",
            "permissions": {
                "can_edit": True,
                "can_add_children": True,
                "can_delete_children": False,
                "can_invite_others": True,
                "can_export": True,
            },
        }


class TestStemsAndSegments:
    """Versioned resources over HTTP."""
    
    @pytest.mark.asyncio
    async def test_stem_and_segment_lifecycle(
        self, client: AsyncClient, project: Project, owner: User
    ):
        response = await client.post(
            f"/api/v1/projects/{project.id}/stems",
            json={"name": "Bass", "instrument_type": "bass"},
            headers=auth(owner),
        )
        assert response.status_code == 201
        stem = response.json()
        assert stem["version"] == 1
        
        response = await client.patch(
            f"/api/v1/stems/{stem['id']}", json={"volume": 0.4}, headers=auth(owner)
        )
        assert response.json()["version"] == 2
        
        segments = f"/api/v1/stems/{stem['id']}/segments"
        first = await client.post(
            segments,
            json={"type": "MIDI", "name": "A", "start_time": 0, "end_time": 1000},
            headers=auth(owner),
        )
        second = await client.post(
            segments,
            json={"type": "MIDI", "name": "B", "start_time": 500, "end_time": 1500},
            headers=auth(owner),
        )
        assert first.status_code == 201
        assert second.status_code == 201
        assert second.json()["has_overlap"] is True
        assert second.json()["overlapping_ids"] == [first.json()["segment"]["id"]]
        
        response = await client.get(segments, params={"start": 600, "end": 900}, headers=auth(owner))
        assert len(response.json()) == 2
        
        response = await client.post(
            segments,
            json={"type": "MIDI", "name": "Bad", "start_time": 1000, "end_time": 1000},
            headers=auth(owner),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "validation"
        
        response = await client.get(f"/api/v1/stems/{stem['id']}", headers=auth(owner))
        assert [s["name"] for s in response.json()["segments"]] == ["A", "B"]
    
    @pytest.mark.asyncio
    async def test_viewer_cannot_create_stem(
        self, client: AsyncClient, project: Project, owner: User, alice: User
    ):
        await client.post(
            f"/api/v1/projects/{project.id}/collaborators/invite",
            json={"email": "alice@example.com", "role": "VIEWER"},
            headers=auth(owner),
        )
        response = await client.post(
            f"/api/v1/projects/{project.id}/stems",
            json={"name": "Lead"},
            headers=auth(alice),
        )
        assert response.status_code == 403
        assert response.json()["detail"] == "Missing capability: can_add_children"
        
        response = await client.get(
            f"/api/v1/projects/{project.id}/stems/permissions", headers=auth(alice)
        )
        assert response.json() == {
            "can_add_children": False,
            "can_delete_children": False,
            "can_edit": False,
        }
    
    @pytest.mark.asyncio
    async def test_null_on_required_field_is_400(
        self, client: AsyncClient, project: Project, owner: User
    ):
        """Explicit nulls on NOT NULL columns come back as validation errors, not 500s."""
        response = await client.post(
            f"/api/v1/projects/{project.id}/stems", json={"name": "Bass"}, headers=auth(owner)
        )
        stem_id = response.json()["id"]
        
        response = await client.patch(
            f"/api/v1/stems/{stem_id}", json={"name": None}, headers=auth(owner)
        )
        assert response.status_code == 400
        assert response.json() == {"detail": "Fields cannot be null: name", "code": "validation"}
        
        response = await client.post(
            f"/api/v1/stems/{stem_id}/segments",
            json={"type": "MIDI", "name": "A", "start_time": 0, "end_time": 1000},
            headers=auth(owner),
        )
        segment_id = response.json()["segment"]["id"]
        
        for body in ({"start_time": None}, {"end_time": None}, {"name": None}):
            response = await client.patch(
                f"/api/v1/segments/{segment_id}", json=body, headers=auth(owner)
            )
            assert response.status_code == 400
            assert response.json()["code"] == "validation"
        
        response = await client.patch(
            f"/api/v1/segments/{segment_id}", json={"name": "ok"}, headers=auth(owner)
        )
        assert response.status_code == 200
        assert response.json()["segment"]["version"] == 2
        
        response = await client.patch(
            f"/api/v1/projects/{project.id}", json={"tempo": None}, headers=auth(owner)
        )
        assert response.status_code == 400
