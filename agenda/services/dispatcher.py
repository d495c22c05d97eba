"""
Outbound dispatcher - delivers the meeting and notification tasks of a booking

Runs after the admission response was sent, either inline through FastAPI
BackgroundTasks or in the ARQ worker. A provider failure marks its task
failed with the error; the booking itself is never touched beyond attaching
the meeting link.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from ..config import OUTBOUND_BACKEND, OUTBOUND_RUNNING_TIMEOUT_MINUTES
from ..database import SessionLocal
from ..domain.bookings.repository import BookingRepository
from ..errors import ConflictError, NotFoundError, ProviderError
from ..models import Booking, OutboundTask
from .meeting_adapter import MeetingAdapter
from .outbound import (
    STATUS_DONE,
    STATUS_FAILED,
    STATUS_PENDING,
    TASK_MEETING,
    TASK_NOTIFICATION,
    OutboundRepository,
)

logger = logging.getLogger(__name__)


class OutboundDispatcher:
    def __init__(
        self,
        meeting_adapter: MeetingAdapter,
        notifier,
        session_factory: Callable[[], Session] = SessionLocal,
    ):
        self.meeting_adapter = meeting_adapter
        self.notifier = notifier
        self.session_factory = session_factory

    async def deliver_booking(self, booking_id: int) -> dict:
        """
        Run every pending task of a booking in creation order (meeting first).

        Each task is claimed before its provider is called, so a task that a
        concurrent run already took is skipped instead of delivered twice.

        Returns:
            {"booking_id", "done", "failed"} counts for this run
        """
        summary = {"booking_id": booking_id, "done": 0, "failed": 0}
        db = self.session_factory()
        try:
            tasks = OutboundRepository.pending_for_booking(db, booking_id)
            if not tasks:
                logger.info(f"ℹ️ No pending outbound tasks for booking {booking_id}")
                return summary

            for task in tasks:
                if not OutboundRepository.claim(db, task.id, (STATUS_PENDING,)):
                    logger.info(f"ℹ️ Outbound task {task.id} already claimed by another run, skipping")
                    continue

                db.refresh(task)
                status = await self._run_task(db, task)
                if status == STATUS_DONE:
                    summary["done"] += 1
                elif status == STATUS_FAILED:
                    summary["failed"] += 1

            logger.info(
                f"📤 Outbound delivery for booking {booking_id}: "
                f"{summary['done']} done, {summary['failed']} failed"
            )
            return summary
        finally:
            db.close()

    async def retry_task(self, task_id: int) -> OutboundTask:
        """
        Re-run one task whatever its settled status (operator retry).
        A task that is running is refused unless its claim is older than
        OUTBOUND_RUNNING_TIMEOUT_MINUTES.
        """
        db = self.session_factory()
        try:
            task = OutboundRepository.get_by_id(db, task_id)
            if not task:
                raise NotFoundError(f"Outbound task {task_id} not found")

            previous_status = task.status
            running_before = datetime.utcnow() - timedelta(minutes=OUTBOUND_RUNNING_TIMEOUT_MINUTES)
            claimed = OutboundRepository.claim(
                db, task_id, (STATUS_PENDING, STATUS_DONE, STATUS_FAILED), running_before=running_before
            )
            if not claimed:
                raise ConflictError(f"Outbound task {task_id} is already running")

            logger.info(f"🔄 Retrying outbound task {task_id} ({task.kind}), status was {previous_status}")
            db.refresh(task)
            await self._run_task(db, task)
            db.refresh(task)
            db.expunge(task)
            return task
        finally:
            db.close()

    async def _run_task(self, db: Session, task: OutboundTask) -> Optional[str]:
        """Deliver a task the caller has claimed; its attempt is already counted"""
        booking: Optional[Booking] = BookingRepository.get_by_id(db, task.booking_id)
        if booking is None:
            # Booking deleted meanwhile; its tasks go with it
            logger.info(f"ℹ️ Booking {task.booking_id} no longer exists, skipping {task.kind} task")
            return None

        professional_name = booking.professional.name if booking.professional else "su profesional"

        try:
            if task.kind == TASK_MEETING:
                await self._create_meeting(db, booking, professional_name)
            elif task.kind == TASK_NOTIFICATION:
                db.refresh(booking)
                await self.notifier.send_booking_confirmation(
                    booking, professional_name, booking.meeting_link
                )
                logger.info(f"✅ Confirmation sent to {booking.client_email} for booking {booking.id}")
            else:
                raise ProviderError(f"Unknown outbound task kind: {task.kind}")
        except ProviderError as e:
            logger.error(f"❌ Outbound {task.kind} task {task.id} failed: {e.message}")
            OutboundRepository.mark(db, task, STATUS_FAILED, e.message)
            return STATUS_FAILED
        except Exception as e:
            logger.error(f"❌ Outbound {task.kind} task {task.id} failed unexpectedly: {e}", exc_info=True)
            db.rollback()
            OutboundRepository.mark(db, task, STATUS_FAILED, str(e) or e.__class__.__name__)
            return STATUS_FAILED

        OutboundRepository.mark(db, task, STATUS_DONE)
        return STATUS_DONE

    async def _create_meeting(self, db: Session, booking: Booking, professional_name: str) -> str:
        meeting_link = await self.meeting_adapter.schedule_meeting(
            summary=f"Consulta con {professional_name}",
            description=f"Consulta online con {booking.client_name}",
            attendee_email=booking.client_email,
            start=booking.start_at,
            end=booking.end_at,
        )
        if BookingRepository.attach_meeting_link(db, booking.id, meeting_link):
            logger.info(f"🔗 Meeting link attached to booking {booking.id}")
        else:
            logger.warning(f"⚠️ Booking {booking.id} vanished before its meeting link was stored")
        return meeting_link


async def enqueue_delivery(booking_id: int) -> None:
    """Hand a booking's delivery to the ARQ worker"""
    from arq import create_pool

    from ..worker import get_redis_settings

    try:
        pool = await create_pool(get_redis_settings())
        try:
            job = await pool.enqueue_job("deliver_booking_task", booking_id)
            logger.info(f"📨 Queued outbound delivery for booking {booking_id}: job {job.job_id if job else None}")
        finally:
            await pool.close()
    except Exception as e:
        # Tasks stay pending in the database; the worker cron picks them up
        logger.error(f"❌ Failed to queue outbound delivery for booking {booking_id}: {e}")


def schedule_delivery(
    background_tasks: BackgroundTasks,
    dispatcher: Optional[OutboundDispatcher],
    booking_id: int,
    backend: str = OUTBOUND_BACKEND,
) -> None:
    """Arrange delivery to start after the HTTP response has been sent"""
    if backend == "arq":
        background_tasks.add_task(enqueue_delivery, booking_id)
        return

    if dispatcher is None:
        logger.warning(f"⚠️ No outbound dispatcher configured, booking {booking_id} tasks stay {STATUS_PENDING}")
        return

    background_tasks.add_task(dispatcher.deliver_booking, booking_id)
