"""Workout router: thin entry point that includes the sub-routers.

Sub-routers:
  - plans_router: Weekly plan creation, scoped listing, active plan
  - logs_router: Client check-ins, history and completion stats
"""
from fastapi import APIRouter

from src.domains.workouts.logs_router import logs_router
from src.domains.workouts.plans_router import plans_router

router = APIRouter()

# No prefix; the main app mounts this under /api/v1
router.include_router(plans_router)
router.include_router(logs_router)
