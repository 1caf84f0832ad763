"""
Payment gateway adapter.

``GatewayClient`` is the contract the settlement services depend on: create a
remote order (payment intent), fetch a payment, and verify the signature the
checkout widget hands back to the browser. ``RazorpayGatewayClient`` speaks
the Razorpay REST API over ``requests``. Services receive a client instance
explicitly; ``build_gateway_client`` constructs the configured one.
"""
import hashlib
import hmac
import logging
import time
from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

import requests
from django.conf import settings
from django.utils.module_loading import import_string

from apps.common.exceptions import GatewayError

logger = logging.getLogger(__name__)


def to_minor_units(amount) -> int:
    """Rupees to paise, rounded half up"""
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def from_minor_units(amount_minor) -> Decimal:
    return (Decimal(int(amount_minor)) / 100).quantize(Decimal('0.01'))


def generate_receipt_id(order_number: str) -> str:
    return f"receipt_{order_number}_{int(time.time() * 1000)}"


def compute_signature(secret: str, message) -> str:
    """Hex HMAC-SHA256 of ``message`` (str or bytes) keyed with ``secret``"""
    if isinstance(message, str):
        message = message.encode('utf-8')
    return hmac.new(secret.encode('utf-8'), message, hashlib.sha256).hexdigest()


def signatures_match(expected: str, supplied: Optional[str]) -> bool:
    """Constant-time comparison"""
    if not supplied:
        return False
    return hmac.compare_digest(expected.encode('utf-8'), str(supplied).encode('utf-8'))


class GatewayClient(ABC):
    """
    Contract every gateway adapter implements. Adapters set ``key_id``, the
    public key handed to the checkout widget.
    """

    key_id: str

    @abstractmethod
    def create_order(self, amount_minor: int, currency: str, receipt: str, notes: Dict) -> Dict:
        """Create a remote order for ``amount_minor`` and return its record"""

    @abstractmethod
    def fetch_payment(self, payment_id: str) -> Dict:
        """Return the remote payment record"""

    @abstractmethod
    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        """Check the checkout signature for an order/payment pair"""


class RazorpayGatewayClient(GatewayClient):
    """Razorpay REST client"""

    def __init__(self, key_id=None, key_secret=None, base_url=None, timeout=None, session=None):
        config = settings.PAYMENT_GATEWAY
        self.key_id = key_id if key_id is not None else config['KEY_ID']
        self.key_secret = key_secret if key_secret is not None else config['KEY_SECRET']
        self.base_url = (base_url or config['API_BASE_URL']).rstrip('/')
        self.timeout = timeout or config['TIMEOUT']
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Dict:
        if not self.key_id or not self.key_secret:
            raise GatewayError('Payment gateway is not configured')

        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, auth=(self.key_id, self.key_secret), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"Gateway request {method} {path} failed: {e}")
            raise GatewayError(f'Payment gateway unreachable: {e}')

        try:
            data = response.json()
        except ValueError:
            logger.error(f"Gateway returned non-JSON response for {method} {path} ({response.status_code})")
            raise GatewayError('Invalid response from payment gateway')

        if response.status_code >= 400:
            description = (data.get('error') or {}).get('description', 'Unknown error')
            logger.error(f"Gateway error on {method} {path} ({response.status_code}): {description}")
            raise GatewayError(f'Payment gateway error: {description}')

        return data

    def create_order(self, amount_minor: int, currency: str, receipt: str, notes: Dict) -> Dict:
        return self._request('POST', '/orders', json={
            'amount': amount_minor,
            'currency': currency,
            'receipt': receipt,
            'notes': notes,
        })

    def fetch_payment(self, payment_id: str) -> Dict:
        return self._request('GET', f'/payments/{payment_id}')

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        expected = compute_signature(self.key_secret, f"{gateway_order_id}|{gateway_payment_id}")
        return signatures_match(expected, signature)


def build_gateway_client() -> GatewayClient:
    """Construct the client class named by ``PAYMENT_GATEWAY['CLIENT_CLASS']``"""
    path = settings.PAYMENT_GATEWAY.get('CLIENT_CLASS', 'apps.payments.services.gateway_client.RazorpayGatewayClient')
    return import_string(path)()
