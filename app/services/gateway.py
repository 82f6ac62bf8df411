"""
Hosted invoice gateway client.

REST client for the Xendit invoice API. Only invoice creation is needed;
status changes arrive asynchronously through the webhook router.
"""

import httpx
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from app.core.config import settings
from app.core.exceptions import GatewayError

logger = logging.getLogger(__name__)


@dataclass
class Invoice:
    """Invoice created at the gateway."""
    invoice_id: str
    invoice_url: str
    external_id: str
    status: str


def _amount_for_wire(amount: Decimal):
    """IDR amounts go out as integers; anything with a fraction as a float."""
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


class XenditClient:
    """REST client for Xendit hosted invoices."""

    def __init__(
        self,
        base_url: str = "https://api.xendit.co",
        secret_key: Optional[str] = None,
        timeout: float = 10.0,
        currency: str = "IDR",
        invoice_duration: int = 86400,
    ):
        self.base_url = base_url.rstrip("/")
        self.secret_key = secret_key
        self.timeout = timeout
        self.currency = currency
        self.invoice_duration = invoice_duration
        self._client = httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls) -> "XenditClient":
        return cls(
            base_url=settings.XENDIT_API_URL,
            secret_key=settings.XENDIT_SECRET_KEY,
            timeout=settings.GATEWAY_TIMEOUT_SECONDS,
            currency=settings.INVOICE_CURRENCY,
            invoice_duration=settings.INVOICE_DURATION_SECONDS,
        )

    def create_invoice(
        self,
        external_id: str,
        amount: Decimal,
        description: str,
        payer_email: Optional[str] = None,
        success_redirect_url: Optional[str] = None,
    ) -> Invoice:
        """Create a payable invoice.

        Raises:
            GatewayError: the gateway is not configured, unreachable, or
                rejected the request.
        """
        if not self.secret_key:
            raise GatewayError("XENDIT_SECRET_KEY is not configured")

        body = {
            "external_id": external_id,
            "amount": _amount_for_wire(amount),
            "description": description,
            "currency": self.currency,
            "invoice_duration": self.invoice_duration,
        }
        if payer_email:
            body["payer_email"] = payer_email
        if success_redirect_url:
            body["success_redirect_url"] = success_redirect_url

        try:
            response = self._client.post(
                f"{self.base_url}/v2/invoices",
                json=body,
                auth=(self.secret_key, ""),
            )
        except httpx.HTTPError as e:
            logger.error("Xendit request failed for %s: %s", external_id, e)
            raise GatewayError(f"Payment gateway unreachable: {e}") from e

        if response.status_code >= 400:
            logger.warning("Xendit returned %s for %s: %s", response.status_code, external_id, response.text)
            raise GatewayError(
                f"Xendit API error [{response.status_code}]: {response.text}",
                status_code=response.status_code,
            )

        data = response.json()
        if not data.get("id") or not data.get("invoice_url"):
            raise GatewayError("Xendit response missing invoice id or url")

        return Invoice(
            invoice_id=data["id"],
            invoice_url=data["invoice_url"],
            external_id=data.get("external_id", external_id),
            status=data.get("status", "PENDING"),
        )

    def close(self):
        """Close the HTTP client"""
        self._client.close()
