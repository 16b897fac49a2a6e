"""
API v1 router aggregating all endpoints.
"""

from fastapi import APIRouter

from api.v1.auth import router as auth_router
from api.v1.ballot import router as ballot_router
from api.v1.election import router as election_router
from api.v1.results import router as results_router
from api.v1.super_admin import router as super_admin_router
from api.v1.votes import router as votes_router
from api.v1.workspaces import router as workspaces_router

router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
router.include_router(super_admin_router, prefix="/super-admin", tags=["Super Admin"])
router.include_router(workspaces_router, prefix="/workspaces", tags=["Workspaces"])
router.include_router(election_router, prefix="/workspaces/{workspace_id}", tags=["Election"])
router.include_router(ballot_router, prefix="/workspaces/{workspace_id}", tags=["Ballot"])
router.include_router(votes_router, prefix="/workspaces/{workspace_id}", tags=["Votes"])
router.include_router(results_router, prefix="/workspaces/{workspace_id}", tags=["Results"])
