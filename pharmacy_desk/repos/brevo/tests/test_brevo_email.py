"""
Tests for BrevoEmailRepository using ``httpx.MockTransport``.
"""

import json
from typing import List

import httpx
import pytest

from pharmacy_desk.config import BREVO_API_URL
from pharmacy_desk.repos.brevo import BrevoEmailRepository
from pharmacy_desk.repositories import EmailRepository
from pharmacy_desk.tests.factories import EmailMessageFactory
from pharmacy_desk.validation import ConfigurationError, DeliveryError


def make_repo(transport: httpx.MockTransport, api_key: str = "brevo-key"):
    return BrevoEmailRepository(
        api_key=api_key,
        sender_email="desk@example.com",
        sender_name="Kateri Pharmacy",
        transport=transport,
    )


def test_satisfies_protocol() -> None:
    repo = make_repo(httpx.MockTransport(lambda request: httpx.Response(201)))

    assert isinstance(repo, EmailRepository)


@pytest.mark.asyncio
async def test_posts_message_to_brevo() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"messageId": "<abc@brevo>"})

    message = EmailMessageFactory(to="owner@example.com", subject="Hi")

    receipt = await make_repo(httpx.MockTransport(handler)).send_email(
        message
    )

    assert receipt == {"messageId": "<abc@brevo>"}
    request = seen[0]
    assert str(request.url) == BREVO_API_URL
    assert request.headers["api-key"] == "brevo-key"
    assert json.loads(request.content) == {
        "sender": {"name": "Kateri Pharmacy", "email": "desk@example.com"},
        "to": [{"email": "owner@example.com"}],
        "subject": "Hi",
        "htmlContent": "<p>Hello</p>",
    }


@pytest.mark.asyncio
async def test_unparseable_receipt_still_counts_as_sent() -> None:
    bodies = [b"queued", b"[]"]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, content=bodies.pop(0))

    repo = make_repo(httpx.MockTransport(handler))

    assert await repo.send_email(EmailMessageFactory()) == {}
    assert await repo.send_email(EmailMessageFactory()) == {}

@pytest.mark.asyncio
async def test_missing_api_key_never_calls_provider() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={})

    repo = make_repo(httpx.MockTransport(handler), api_key="")

    with pytest.raises(ConfigurationError, match="not configured"):
        await repo.send_email(EmailMessageFactory())

    assert seen == []


@pytest.mark.asyncio
async def test_error_message_from_body() -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(
            400, json={"code": "invalid_parameter", "message": "bad sender"}
        )
    )

    with pytest.raises(DeliveryError, match="Brevo API error: bad sender"):
        await make_repo(transport).send_email(EmailMessageFactory())


@pytest.mark.asyncio
async def test_error_without_json_body_uses_reason() -> None:
    transport = httpx.MockTransport(
        lambda request: httpx.Response(503, text="<html>down</html>")
    )

    with pytest.raises(
        DeliveryError, match="Brevo API error: Service Unavailable"
    ):
        await make_repo(transport).send_email(EmailMessageFactory())


@pytest.mark.asyncio
async def test_transport_failure_is_delivery_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(DeliveryError):
        await make_repo(httpx.MockTransport(handler)).send_email(
            EmailMessageFactory()
        )
