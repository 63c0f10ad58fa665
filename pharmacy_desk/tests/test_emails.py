"""
Tests for HTML email rendering.
"""

from datetime import datetime, timezone

import pytest

from pharmacy_desk.domain import RequestType
from pharmacy_desk.emails import (
    format_phone_for_display,
    render_new_request_email,
    render_test_email,
    request_title,
)
from pharmacy_desk.tests.factories import PharmacyRequestFactory


@pytest.mark.parametrize(
    "phone, expected",
    [
        ("6135550123", "+1 (613) 555-0123"),
        ("(613) 555-0123", "+1 (613) 555-0123"),
        ("+44 20 7946 0958", "+44 20 7946 0958"),
        ("", ""),
    ],
)
def test_format_phone_for_display(phone: str, expected: str) -> None:
    assert format_phone_for_display(phone) == expected


def test_request_title() -> None:
    assert request_title(PharmacyRequestFactory()) == "Refill Request"
    consultation = PharmacyRequestFactory(type=RequestType.CONSULTATION)
    assert request_title(consultation) == "Consultation Request"


def test_render_test_email() -> None:
    html = render_test_email(
        sender="noreply@example.com",
        recipient="admin@example.com",
        sent_at=datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc),
    )

    assert "Email Configuration Test" in html
    assert "noreply@example.com" in html
    assert "admin@example.com" in html
    assert "2024-03-01 09:30:00 UTC" in html


def test_render_refill_email() -> None:
    request = PharmacyRequestFactory(
        id="req_1_abc",
        phone="6135550123",
        prescriptions=["111", " ", "222"],
        deliveryType="delivery",
        comments="<b>ring twice</b>",
    )

    html = render_new_request_email(
        request, dashboard_url="https://desk.example.com", brand="Kateri"
    )

    assert "New Refill Request" in html
    assert "req_1_abc" in html
    assert "+1 (613) 555-0123" in html
    assert "Rx #111" in html
    assert "Rx #222" in html
    assert "Rx # " not in html
    assert "https://desk.example.com" in html
    # business text is escaped
    assert "&lt;b&gt;ring twice&lt;/b&gt;" in html


def test_render_consultation_email_maps_service_label() -> None:
    request = PharmacyRequestFactory(
        type=RequestType.CONSULTATION,
        phone="6135550123",
        service="strep",
        preferredDateTime="2024-03-02 10:00",
    )

    html = render_new_request_email(
        request, dashboard_url="https://desk.example.com", brand="Kateri"
    )

    assert "New Consultation Request" in html
    assert "Testing and treatment for Strep A" in html
    assert "2024-03-02 10:00" in html


def test_render_uti_consultation_label() -> None:
    request = PharmacyRequestFactory(
        type=RequestType.CONSULTATION, phone="6135550123", service="uti"
    )

    html = render_new_request_email(
        request, dashboard_url="https://desk.example.com", brand="Kateri"
    )

    assert "Testing and treatment for UTI" in html
