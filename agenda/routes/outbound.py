"""
Outbound Task Routes
Operator view of meeting/notification deliveries and manual retry
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.dispatcher import OutboundDispatcher
from ..services.outbound import (
    STATUS_DONE,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_RUNNING,
    OutboundRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/outbound", tags=["Outbound"])

TASK_STATUSES = (STATUS_PENDING, STATUS_RUNNING, STATUS_DONE, STATUS_FAILED)


class OutboundTaskResponse(BaseModel):
    id: int
    booking_id: int
    kind: str
    status: str
    attempts: int
    last_error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


def get_dispatcher(request: Request) -> OutboundDispatcher:
    dispatcher = getattr(request.app.state, "outbound_dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=503, detail="Outbound dispatcher not available")
    return dispatcher


@router.get("", response_model=list[OutboundTaskResponse])
def list_outbound_tasks(
    status: Optional[str] = Query(None),
    booking_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    """Outbound tasks in creation order, optionally filtered"""
    if status is not None and status not in TASK_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be one of {', '.join(TASK_STATUSES)}")
    return OutboundRepository.list_tasks(db, status=status, booking_id=booking_id)


@router.post("/{task_id}/retry", response_model=OutboundTaskResponse)
async def retry_outbound_task(
    task_id: int,
    dispatcher: OutboundDispatcher = Depends(get_dispatcher),
):
    """Run one task again now; 409 while another run holds it"""
    return await dispatcher.retry_task(task_id)
