"""Razorpay REST client and signature checks."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

import httpx

from student_portal.core.config import Settings, get_settings
from student_portal.core.security import signature_matches
from student_portal.shared.exceptions import UpstreamException

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    """Operations the service needs from the payment gateway."""

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, str],
    ) -> dict[str, Any]: ...

    async def fetch_order(self, order_id: str) -> dict[str, Any]: ...

    async def fetch_payment(self, payment_id: str) -> dict[str, Any]: ...


class RazorpayGateway:
    """Thin async client over the Razorpay orders and payments API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Razorpay %s %s failed with status %s",
                method,
                path,
                exc.response.status_code,
            )
            raise UpstreamException("Payment gateway rejected the request") from exc
        except httpx.HTTPError as exc:
            logger.warning("Razorpay %s %s failed: %s", method, path, exc)
            raise UpstreamException("Payment gateway is unavailable") from exc
        return response.json()

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict[str, str],
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/orders",
            json={"amount": amount, "currency": currency, "receipt": receipt, "notes": notes},
        )

    async def fetch_order(self, order_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/orders/{order_id}")

    async def fetch_payment(self, payment_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/payments/{payment_id}")


def build_razorpay_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.razorpay_base_url,
        auth=(settings.razorpay_key_id, settings.razorpay_key_secret),
        timeout=settings.payment_gateway_timeout_seconds,
    )


async def get_payment_gateway() -> AsyncIterator[PaymentGateway]:
    """Dependency yielding a gateway bound to a per-request HTTP client."""
    async with build_razorpay_client(get_settings()) as client:
        yield RazorpayGateway(client)


def verify_payment_signature(key_secret: str, order_id: str, payment_id: str, signature: str | None) -> bool:
    """Check checkout signature: HMAC-SHA256 of ``order_id|payment_id``."""
    return signature_matches(key_secret, f"{order_id}|{payment_id}".encode(), signature)


def verify_webhook_signature(webhook_secret: str, raw_body: bytes, signature: str | None) -> bool:
    """Check webhook signature: HMAC-SHA256 of the raw request body."""
    return signature_matches(webhook_secret, raw_body, signature)
