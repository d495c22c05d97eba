"""
MJML Email Templates
Patient-facing emails, compiled to HTML by the email service
"""

from datetime import datetime
from html import escape
from typing import Optional

THEME = {
    "primary": "#0ea5e9",
    "primary_dark": "#0369a1",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}

CLINIC_NAME = "Salud Para Chile"

SPANISH_WEEKDAYS = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]
SPANISH_MONTHS = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]


def format_appointment_time(start: datetime) -> str:
    """lunes 10 de junio de 2024, 09:00"""
    weekday = SPANISH_WEEKDAYS[start.weekday()]
    month = SPANISH_MONTHS[start.month - 1]
    return f"{weekday} {start.day} de {month} de {start.year}, {start.strftime('%H:%M')}"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{escape(cta_url, quote=True)}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {escape(cta_label)}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{escape(title)}</mj-title>
        <mj-preview>{escape(preview_text)}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="32px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {escape(title)}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              {CLINIC_NAME}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def booking_confirmation_template(
    client_name: str,
    professional_name: str,
    start: datetime,
    meeting_link: Optional[str] = None,
) -> str:
    """Booking confirmed email for the patient"""
    when = format_appointment_time(start)

    if meeting_link:
        link = escape(meeting_link, quote=True)
        meeting_section = f"""
    <mj-text>
      Accede a la reunión de Google Meet usando este enlace:
    </mj-text>

    <mj-text padding="0 0 20px 0">
      <a href="{link}" target="_blank" style="color: {THEME['primary_dark']};">{link}</a>
    </mj-text>
    """
    else:
        meeting_section = f"""
    <mj-text color="{THEME['text_muted']}">
      Te enviaremos el enlace de la videollamada antes de tu consulta.
    </mj-text>
    """

    content = f"""
    <mj-text>
      Hola {escape(client_name)},
    </mj-text>

    <mj-text>
      Tu reserva con <strong>{escape(professional_name)}</strong> ha sido confirmada para
      <strong>{when}</strong>.
    </mj-text>

    {meeting_section}

    <mj-text>
      Gracias por confiar en nosotros.
    </mj-text>
    """

    return get_base_template(
        title="Reserva confirmada",
        preview_text=f"Tu reserva con {professional_name} está confirmada",
        content_sections=content,
        cta_url=meeting_link,
        cta_label="Unirse a la videollamada" if meeting_link else None,
    )
