"""
Minimal Razorpay REST client: orders, payments, refunds and the checkout
signature check. Auth is HTTP basic with the key id / key secret pair.
"""
import hashlib
import hmac
import logging

import requests

logger = logging.getLogger(__name__)


class PaymentProviderError(Exception):
    """Razorpay answered with an error or could not be reached."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class RazorpayClient:
    def __init__(self, key_id: str, key_secret: str, base_url: str = "https://api.razorpay.com/v1",
                 timeout=None, session: requests.Session = None):
        self.key_id = (key_id or "").strip()
        self.key_secret = (key_secret or "").strip()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_app_config(cls, config):
        return cls(
            key_id=config.get("RAZORPAY_KEY_ID"),
            key_secret=config.get("RAZORPAY_KEY_SECRET"),
            base_url=config.get("RAZORPAY_API_BASE") or "https://api.razorpay.com/v1",
            timeout=config.get("RAZORPAY_TIMEOUT_SECONDS"),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def public_config(self) -> dict:
        if not self.key_id:
            raise PaymentProviderError("Razorpay is not configured (missing key id).")
        return {"keyId": self.key_id}

    def _request(self, method: str, path: str, payload: dict = None) -> dict:
        if not self.is_configured:
            raise PaymentProviderError("Razorpay is not configured (missing env vars).")
        try:
            resp = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Razorpay %s %s failed: %s", method, path, exc)
            raise PaymentProviderError(f"Razorpay request failed: {exc}") from exc

        if not resp.ok:
            logger.error("Razorpay %s %s -> %s %s", method, path, resp.status_code, resp.text)
            raise PaymentProviderError(resp.text or f"Razorpay error {resp.status_code}", resp.status_code)
        return resp.json()

    def create_order(self, amount: int, currency: str, receipt: str, notes: dict = None) -> dict:
        return self._request("POST", "/orders", {
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        })

    def fetch_payment(self, payment_id: str) -> dict:
        return self._request("GET", f"/payments/{payment_id}")

    def create_refund(self, payment_id: str, amount: int, notes: dict = None) -> dict:
        return self._request("POST", f"/payments/{payment_id}/refund", {
            "amount": amount,
            "notes": notes or {},
        })

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not self.key_secret:
            raise PaymentProviderError("Razorpay is not configured (missing key secret).")
        expected = hmac.new(
            self.key_secret.encode("utf-8"),
            f"{order_id}|{payment_id}".encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        return hmac.compare_digest(expected, signature or "")
