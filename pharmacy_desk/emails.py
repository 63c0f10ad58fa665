"""
HTML email bodies rendered from Jinja2 templates.
"""

import re
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from pharmacy_desk.domain import PharmacyRequest, RequestType

TEMPLATE_DIR = Path(__file__).parent / "templates"

SERVICE_LABELS = {
    "strep": "Testing and treatment for Strep A",
    "travel": "Traveller's Health",
    "sinus": "Sinus Infection",
    "allergies": "Allergies Treatment",
    "uti": "Testing and treatment for UTI",
}

STATUS_COLORS = {
    "pending": "#F59E0B",
    "in-progress": "#3B82F6",
    "completed": "#10B981",
}


def _environment() -> Environment:
    if not TEMPLATE_DIR.exists():
        raise FileNotFoundError(
            f"Template directory not found: {TEMPLATE_DIR}"
        )
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
    )


def format_phone_for_display(phone: str) -> str:
    """North American numbers become ``+1 (XXX) XXX-XXXX``; anything else
    is returned unchanged."""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"+1 ({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone


def request_title(request: PharmacyRequest) -> str:
    if request.type == RequestType.REFILL:
        return "Refill Request"
    return "Consultation Request"


def render_test_email(sender: str, recipient: str, sent_at: datetime) -> str:
    template = _environment().get_template("test_email.html.j2")
    return template.render(
        sender=sender,
        recipient=recipient,
        sent_at=sent_at.strftime("%Y-%m-%d %H:%M:%S %Z").strip(),
    )


def render_new_request_email(
    request: PharmacyRequest, dashboard_url: str, brand: str
) -> str:
    fields = request.model_extra or {}
    prescriptions = [
        rx for rx in fields.get("prescriptions") or [] if str(rx).strip()
    ]
    service = fields.get("service") or ""
    template = _environment().get_template("new_request.html.j2")
    return template.render(
        brand=brand,
        title=request_title(request),
        is_refill=request.type == RequestType.REFILL,
        request=request,
        status_color=STATUS_COLORS[request.status.value],
        phone=format_phone_for_display(str(fields.get("phone") or "")),
        prescriptions=prescriptions,
        delivery_type=fields.get("deliveryType"),
        estimated_time=fields.get("estimatedTime"),
        comments=fields.get("comments"),
        service=SERVICE_LABELS.get(service, service),
        preferred_date_time=fields.get("preferredDateTime"),
        additional_note=fields.get("additionalNote"),
        created_at=request.created_at.strftime("%Y-%m-%d %H:%M"),
        dashboard_url=dashboard_url,
    )
