"""Client for Paystack's transaction verification endpoint."""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import requests

from paydesk.errors import DependencyError

logger = logging.getLogger("paydesk.paystack")


@dataclass(frozen=True)
class PaymentResult:
    reference: str
    successful: bool
    # minor currency unit (kobo for NGN)
    amount: int = 0
    email: Optional[str] = None


class PaystackClient(object):

    def __init__(self, secret_key: str, base_url: str = "https://api.paystack.co",
                 timeout: float = 10.0) -> None:
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()

    def verify(self, reference: str) -> PaymentResult:
        """Ask Paystack once about ``reference``.

        Raises :class:`DependencyError` on network errors, 5xx answers and
        bodies that are not the documented JSON envelope.
        """
        url = f"{self._base_url}/transaction/verify/{quote(reference, safe='')}"
        headers = {"Authorization": f"Bearer {self._secret_key}"}
        try:
            resp = self._session.get(url, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.error("Paystack unreachable for %s: %s", reference, exc)
            raise DependencyError("Payment provider unavailable") from exc

        if resp.status_code >= 500:
            logger.error("Paystack answered %s for %s", resp.status_code, reference)
            raise DependencyError("Payment provider unavailable")

        try:
            body = resp.json()
        except ValueError as exc:
            raise DependencyError("Malformed payment provider response") from exc
        if not isinstance(body, dict):
            raise DependencyError("Malformed payment provider response")

        # 4xx from Paystack means the reference is unknown or rejected
        data = body.get("data")
        if not isinstance(data, dict):
            data = {}
        if resp.status_code >= 400 or not body.get("status") or data.get("status") != "success":
            logger.info("Payment %s not successful: %s", reference, body.get("message"))
            return PaymentResult(reference=reference, successful=False)

        try:
            amount = int(data["amount"])
            email = data["customer"]["email"]
        except (KeyError, TypeError, ValueError) as exc:
            raise DependencyError("Malformed payment provider response") from exc

        return PaymentResult(reference=reference, successful=True, amount=amount, email=email)
