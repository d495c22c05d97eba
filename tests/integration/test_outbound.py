"""Meeting and confirmation delivery after admission."""
import asyncio
from datetime import datetime, timedelta

from agenda.domain.bookings.schemas import BookingRequest
from agenda.domain.bookings.service import BookingService
from agenda.models import Booking, OutboundTask
from agenda.services.outbound import (
    STATUS_DONE,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_RUNNING,
    OutboundRepository,
)


def admit(db, professional_id, when="2024-06-10T09:00"):
    request = BookingRequest.model_validate(
        {
            "name": "Camila Soto",
            "email": "camila.soto@example.cl",
            "rut": "7520873-1",
            "phone": "+56912345678",
            "professional": professional_id,
            "datetime": when,
        }
    )
    return BookingService(db).admit_booking(request)


def tasks_for(db, booking_id):
    db.expire_all()
    return db.query(OutboundTask).filter(OutboundTask.booking_id == booking_id).order_by(OutboundTask.id).all()


def test_admission_queues_meeting_then_notification(db, make_professional):
    ana = make_professional()
    booking = admit(db, ana.id)

    tasks = tasks_for(db, booking.id)
    assert [(t.kind, t.status, t.attempts) for t in tasks] == [
        ("meeting", STATUS_PENDING, 0),
        ("notification", STATUS_PENDING, 0),
    ]


def test_delivery_attaches_link_and_sends_it(db, make_professional, dispatcher, meeting_adapter, notifier):
    ana = make_professional()
    booking = admit(db, ana.id)

    summary = asyncio.run(dispatcher.deliver_booking(booking.id))
    assert summary == {"booking_id": booking.id, "done": 2, "failed": 0}

    db.expire_all()
    assert db.get(Booking, booking.id).meeting_link == meeting_adapter.link
    assert meeting_adapter.calls[0]["summary"] == "Consulta con Dra. Ana Pérez"
    assert meeting_adapter.calls[0]["attendee_email"] == "camila.soto@example.cl"
    assert notifier.sent == [
        {
            "booking_id": booking.id,
            "to": "camila.soto@example.cl",
            "professional": "Dra. Ana Pérez",
            "meeting_link": meeting_adapter.link,
        }
    ]
    assert [(t.status, t.attempts) for t in tasks_for(db, booking.id)] == [(STATUS_DONE, 1), (STATUS_DONE, 1)]

    # Nothing left to do on a second run
    assert asyncio.run(dispatcher.deliver_booking(booking.id))["done"] == 0
    assert len(meeting_adapter.calls) == 1


def test_provider_failure_keeps_the_booking(db, make_professional, dispatcher, meeting_adapter, notifier):
    ana = make_professional()
    booking = admit(db, ana.id)
    meeting_adapter.fail = True

    summary = asyncio.run(dispatcher.deliver_booking(booking.id))
    assert summary["failed"] == 1
    assert summary["done"] == 1

    db.expire_all()
    stored = db.get(Booking, booking.id)
    assert stored is not None
    assert stored.meeting_link is None

    meeting_task, notification_task = tasks_for(db, booking.id)
    assert meeting_task.status == STATUS_FAILED
    assert "not authorized" in meeting_task.last_error
    assert notification_task.status == STATUS_DONE
    assert notifier.sent[0]["meeting_link"] is None


def test_notification_failure_is_recorded(db, make_professional, dispatcher, notifier):
    ana = make_professional()
    booking = admit(db, ana.id)
    notifier.fail = True

    asyncio.run(dispatcher.deliver_booking(booking.id))

    meeting_task, notification_task = tasks_for(db, booking.id)
    assert meeting_task.status == STATUS_DONE
    assert notification_task.status == STATUS_FAILED
    assert notification_task.last_error == "Email service not configured"


def test_http_booking_succeeds_while_provider_is_down(client, db, make_professional, booking_payload, meeting_adapter):
    ana = make_professional()
    meeting_adapter.fail = True

    response = client.post("/api/bookings", json=booking_payload(ana.id))
    assert response.status_code == 201
    booking_id = response.json()["booking"]["id"]

    fetched = client.get(f"/api/bookings/{booking_id}")
    assert fetched.status_code == 200
    assert fetched.json()["meet_link"] is None

    failed = client.get("/api/admin/outbound", params={"status": "failed"}).json()
    assert [(t["booking_id"], t["kind"]) for t in failed] == [(booking_id, "meeting")]


def test_background_delivery_after_http_booking(client, make_professional, booking_payload, meeting_adapter):
    ana = make_professional()
    booking_id = client.post("/api/bookings", json=booking_payload(ana.id)).json()["booking"]["id"]

    fetched = client.get(f"/api/bookings/{booking_id}").json()
    assert fetched["meet_link"] == meeting_adapter.link

    done = client.get("/api/admin/outbound", params={"status": "done", "booking_id": booking_id}).json()
    assert {t["kind"] for t in done} == {"meeting", "notification"}


def test_operator_retry_of_failed_meeting(client, make_professional, booking_payload, meeting_adapter):
    ana = make_professional()
    meeting_adapter.fail = True
    booking_id = client.post("/api/bookings", json=booking_payload(ana.id)).json()["booking"]["id"]
    failed_task = client.get("/api/admin/outbound", params={"status": "failed"}).json()[0]

    meeting_adapter.fail = False
    response = client.post(f"/api/admin/outbound/{failed_task['id']}/retry")
    assert response.status_code == 200
    retried = response.json()
    assert retried["status"] == "done"
    assert retried["attempts"] == 2
    assert retried["last_error"] is None

    assert client.get(f"/api/bookings/{booking_id}").json()["meet_link"] == meeting_adapter.link


def test_retry_unknown_task_is_404(client):
    assert client.post("/api/admin/outbound/999/retry").status_code == 404


def test_invalid_status_filter_is_400(client):
    assert client.get("/api/admin/outbound", params={"status": "lost"}).status_code == 400


def test_deleting_booking_drops_its_tasks(db, make_professional, dispatcher):
    ana = make_professional()
    booking = admit(db, ana.id)
    booking_id = booking.id

    BookingService(db).delete_booking(booking_id)

    assert tasks_for(db, booking_id) == []
    assert asyncio.run(dispatcher.deliver_booking(booking_id))["done"] == 0


def test_claim_is_won_once(db, make_professional):
    ana = make_professional()
    booking = admit(db, ana.id)
    meeting_task = tasks_for(db, booking.id)[0]

    assert OutboundRepository.claim(db, meeting_task.id, (STATUS_PENDING,)) is True
    assert OutboundRepository.claim(db, meeting_task.id, (STATUS_PENDING,)) is False

    meeting_task = tasks_for(db, booking.id)[0]
    assert (meeting_task.status, meeting_task.attempts) == (STATUS_RUNNING, 1)


def test_delivery_skips_a_task_claimed_by_another_run(db, make_professional, dispatcher, meeting_adapter, notifier):
    ana = make_professional()
    booking = admit(db, ana.id)
    meeting_task = tasks_for(db, booking.id)[0]
    assert OutboundRepository.claim(db, meeting_task.id, (STATUS_PENDING,))

    summary = asyncio.run(dispatcher.deliver_booking(booking.id))
    assert summary == {"booking_id": booking.id, "done": 1, "failed": 0}
    assert meeting_adapter.calls == []
    assert len(notifier.sent) == 1

    meeting_task, notification_task = tasks_for(db, booking.id)
    assert (meeting_task.status, meeting_task.attempts) == (STATUS_RUNNING, 1)
    assert notification_task.status == STATUS_DONE


def test_overlapping_deliveries_create_one_meeting(db, make_professional, dispatcher, meeting_adapter):
    ana = make_professional()
    booking = admit(db, ana.id)

    async def both():
        return await asyncio.gather(
            dispatcher.deliver_booking(booking.id),
            dispatcher.deliver_booking(booking.id),
        )

    summaries = asyncio.run(both())
    assert sum(s["done"] for s in summaries) == 2
    assert len(meeting_adapter.calls) == 1
    assert [(t.status, t.attempts) for t in tasks_for(db, booking.id)] == [(STATUS_DONE, 1), (STATUS_DONE, 1)]


def test_retry_of_a_running_task_is_409(client, db, make_professional, booking_payload, meeting_adapter):
    ana = make_professional()
    meeting_adapter.fail = True
    client.post("/api/bookings", json=booking_payload(ana.id))
    failed_task = client.get("/api/admin/outbound", params={"status": "failed"}).json()[0]
    assert OutboundRepository.claim(db, failed_task["id"], (STATUS_FAILED,))

    meeting_adapter.fail = False
    response = client.post(f"/api/admin/outbound/{failed_task['id']}/retry")
    assert response.status_code == 409
    assert len(meeting_adapter.calls) == 1

    running = client.get("/api/admin/outbound", params={"status": "running"}).json()
    assert [t["id"] for t in running] == [failed_task["id"]]


def test_retry_takes_over_an_abandoned_claim(client, db, make_professional, booking_payload, meeting_adapter):
    ana = make_professional()
    meeting_adapter.fail = True
    booking_id = client.post("/api/bookings", json=booking_payload(ana.id)).json()["booking"]["id"]
    failed_task = client.get("/api/admin/outbound", params={"status": "failed"}).json()[0]
    assert OutboundRepository.claim(db, failed_task["id"], (STATUS_FAILED,))

    # The run that claimed it crashed an hour ago
    task = db.get(OutboundTask, failed_task["id"])
    task.updated_at = datetime.utcnow() - timedelta(hours=1)
    db.commit()

    meeting_adapter.fail = False
    response = client.post(f"/api/admin/outbound/{failed_task['id']}/retry")
    assert response.status_code == 200
    assert response.json()["status"] == "done"
    assert response.json()["attempts"] == 3

    assert client.get(f"/api/bookings/{booking_id}").json()["meet_link"] == meeting_adapter.link
