"""
API v1 routes.
"""

from fastapi import APIRouter

from stemhub.api.v1 import collaboration, projects, segments, stems

router = APIRouter()

router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(collaboration.router, prefix="/projects/{project_id}/collaborators", tags=["Collaboration"])
router.include_router(stems.router, tags=["Stems"])
router.include_router(segments.router, tags=["Segments"])
