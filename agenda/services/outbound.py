"""
Outbound task queue - storage side

Each admitted booking owes two side effects, recorded as rows in the same
transaction as the booking: a meeting (calendar event + video link) and a
notification (confirmation email). Rows stay visible to operators with their
status, attempt count and last error.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ..database import commit_session
from ..models import OutboundTask

TASK_MEETING = "meeting"
TASK_NOTIFICATION = "notification"

# Order matters: the confirmation email carries the meeting link when there is one
OUTBOUND_TASK_KINDS = (TASK_MEETING, TASK_NOTIFICATION)

STATUS_PENDING = "pending"
STATUS_RUNNING = "running"
STATUS_DONE = "done"
STATUS_FAILED = "failed"


class OutboundRepository:
    """Repository for outbound task rows"""

    @staticmethod
    def enqueue(db: Session, booking_id: int, kinds: tuple[str, ...]) -> list[OutboundTask]:
        """Stage pending tasks for a booking; the caller commits"""
        tasks = [
            OutboundTask(booking_id=booking_id, kind=kind, status=STATUS_PENDING, attempts=0)
            for kind in kinds
        ]
        db.add_all(tasks)
        return tasks

    @staticmethod
    def get_by_id(db: Session, task_id: int) -> Optional[OutboundTask]:
        return db.query(OutboundTask).filter(OutboundTask.id == task_id).first()

    @staticmethod
    def pending_for_booking(db: Session, booking_id: int) -> list[OutboundTask]:
        return (
            db.query(OutboundTask)
            .filter(OutboundTask.booking_id == booking_id, OutboundTask.status == STATUS_PENDING)
            .order_by(OutboundTask.id.asc())
            .all()
        )

    @staticmethod
    def list_tasks(
        db: Session,
        status: Optional[str] = None,
        booking_id: Optional[int] = None,
        created_before: Optional[datetime] = None,
    ) -> list[OutboundTask]:
        query = db.query(OutboundTask)
        if status:
            query = query.filter(OutboundTask.status == status)
        if booking_id is not None:
            query = query.filter(OutboundTask.booking_id == booking_id)
        if created_before is not None:
            query = query.filter(OutboundTask.created_at < created_before)
        return query.order_by(OutboundTask.id.asc()).all()

    @staticmethod
    def mark(db: Session, task: OutboundTask, status: str, error: Optional[str] = None) -> OutboundTask:
        task.status = status
        task.last_error = error
        commit_session(db)
        return task

    @staticmethod
    def claim(
        db: Session,
        task_id: int,
        from_statuses: tuple[str, ...],
        running_before: Optional[datetime] = None,
    ) -> bool:
        """
        Move a task to running with a conditional UPDATE and count the attempt.

        Only one caller can win: the row changes only while its status is one
        of from_statuses, or it is running since before running_before (an
        abandoned claim). Returns False when someone else holds the task.
        """
        condition = OutboundTask.status.in_(from_statuses)
        if running_before is not None:
            condition = or_(
                condition,
                and_(OutboundTask.status == STATUS_RUNNING, OutboundTask.updated_at < running_before),
            )

        claimed = (
            db.query(OutboundTask)
            .filter(OutboundTask.id == task_id, condition)
            .update(
                {
                    OutboundTask.status: STATUS_RUNNING,
                    OutboundTask.attempts: OutboundTask.attempts + 1,
                    OutboundTask.updated_at: datetime.utcnow(),
                },
                synchronize_session=False,
            )
        )
        commit_session(db)
        return claimed == 1
