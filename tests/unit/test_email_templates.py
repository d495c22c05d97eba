"""Confirmation email content."""
from datetime import datetime

from agenda.email_templates import booking_confirmation_template, format_appointment_time


def test_appointment_time_is_spanish():
    assert format_appointment_time(datetime(2024, 6, 10, 9, 0)) == "lunes 10 de junio de 2024, 09:00"


def test_confirmation_includes_meeting_link():
    mjml = booking_confirmation_template(
        client_name="Camila Soto",
        professional_name="Dra. Ana Pérez",
        start=datetime(2024, 6, 10, 9, 0),
        meeting_link="https://meet.google.com/abc-defg-hij",
    )
    assert "Hola Camila Soto" in mjml
    assert "Dra. Ana Pérez" in mjml
    assert "lunes 10 de junio de 2024, 09:00" in mjml
    assert 'href="https://meet.google.com/abc-defg-hij"' in mjml
    assert "<mj-button" in mjml


def test_confirmation_without_link_and_escaping():
    mjml = booking_confirmation_template(
        client_name="<script>x</script>",
        professional_name="Dra. Ana Pérez",
        start=datetime(2024, 6, 10, 9, 0),
    )
    assert "<script>" not in mjml
    assert "&lt;script&gt;" in mjml
    assert "<mj-button" not in mjml
    assert "Te enviaremos el enlace" in mjml
