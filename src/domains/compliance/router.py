"""Manual triggers for the workout-compliance sweep."""
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db
from src.domains.auth.dependencies import StaffUser
from src.domains.compliance.scanner import ComplianceScanner
from src.domains.compliance.schemas import ComplianceCheckRequest, ComplianceCheckResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/check-today", response_model=ComplianceCheckResponse)
async def check_today(
    current_user: StaffUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    request: ComplianceCheckRequest | None = None,
) -> ComplianceCheckResponse:
    """Run the end-of-day summary scan now."""
    reference_date = request.reference_date if request else None
    result = await ComplianceScanner(db).scan_today(reference_date)
    logger.info(
        "compliance_check_triggered",
        mode="today",
        triggered_by=str(current_user.id),
        reference_date=result.reference_date.isoformat(),
        notifications_created=result.notifications_created,
    )
    return ComplianceCheckResponse(
        notifications_created=result.notifications_created,
        reference_date=result.reference_date,
    )


@router.post("/check-missed", response_model=ComplianceCheckResponse)
async def check_missed(
    current_user: StaffUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    request: ComplianceCheckRequest | None = None,
) -> ComplianceCheckResponse:
    """Run the unmarked-sessions scan for yesterday now."""
    reference_date = request.reference_date if request else None
    result = await ComplianceScanner(db).scan_missed(reference_date)
    logger.info(
        "compliance_check_triggered",
        mode="missed",
        triggered_by=str(current_user.id),
        reference_date=result.reference_date.isoformat(),
        notifications_created=result.notifications_created,
    )
    return ComplianceCheckResponse(
        notifications_created=result.notifications_created,
        reference_date=result.reference_date,
    )
