import time
import uuid
from decimal import Decimal, ROUND_HALF_UP

import razorpay
from razorpay.errors import BadRequestError, SignatureVerificationError
from django.conf import settings
import logging
from urllib3.util.retry import Retry
from requests.adapters import HTTPAdapter

from movies.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

def to_minor_units(amount):
    """Rupees (or any two-decimal currency) to the integer sub-unit Razorpay expects."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))

class RazorpayClient:
    """Thin wrapper over the Razorpay SDK.

    Runs in mock mode when no real credentials are configured: orders are kept
    in memory and reported as paid, so the booking flow can be exercised locally.
    """

    max_retries = 5

    def __init__(self, key_id=None, key_secret=None):
        self.key_id = key_id if key_id is not None else getattr(settings, 'RAZORPAY_KEY_ID', '')
        self.key_secret = key_secret if key_secret is not None else getattr(settings, 'RAZORPAY_KEY_SECRET', '')

        self.is_mock = not self.key_id or 'xxxx' in self.key_id or not self.key_secret or self.key_secret == 'xxxx'
        self._mock_orders = {}

        if not self.is_mock:
            self.client = razorpay.Client(auth=(self.key_id, self.key_secret))
            self._configure_client_session()
        else:
            self.client = None
            logger.warning("⚠️ Running in MOCK PAYMENT MODE. No real transactions will occur.")

    def _configure_client_session(self):

        if not hasattr(self.client, 'session'):
            return
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["POST", "GET"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.client.session.mount("https://", adapter)
        self.client.session.mount("http://", adapter)
        logger.info("✅ Razorpay client session configured with retry strategy")

    def _call_with_retry(self, label, func, *args, **kwargs):
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return func(*args, **kwargs)
            except BadRequestError as e:
                # Rejected requests will not succeed on retry
                logger.error(f"❌ [RAZORPAY_{label}] Request rejected: {e}")
                raise PaymentGatewayError(f"Payment gateway rejected the request: {e}") from e
            except Exception as e:
                last_error = e
                if attempt < self.max_retries:
                    wait_time = 2 ** (attempt - 1)
                    logger.warning(
                        f"⚠️  [RAZORPAY_{label}] API error (attempt {attempt}/{self.max_retries}): {e}. "
                        f"Retrying in {wait_time}s..."
                    )
                    time.sleep(wait_time)

        logger.error(f"❌ [RAZORPAY_{label}] Failed after {self.max_retries} attempts: {last_error}")
        raise PaymentGatewayError(
            "Payment gateway temporarily unavailable. Please try again in a moment."
        ) from last_error

    def create_order(self, amount, currency="INR", receipt="receipt", notes=None):

        data = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt,
            "payment_capture": 1
        }

        if notes:
            data["notes"] = notes

        logger.info(
            f"💳 [RAZORPAY_ORDER] Creating order: Amount={amount} {currency} | "
            f"Receipt={receipt} | Mock={self.is_mock}"
        )

        if self.is_mock:
            order_id = f"order_mock_{uuid.uuid4().hex[:14]}"
            self._mock_orders[order_id] = {
                'id': order_id,
                'amount': data['amount'],
                'amount_paid': data['amount'],
                'currency': currency,
                'receipt': receipt,
                'status': 'paid',
            }
            logger.info(f"🎭 [RAZORPAY_ORDER_MOCK] Mock order created: {order_id}")
            return {
                'order_id': order_id,
                'amount': data['amount'],
                'currency': currency,
                'receipt': receipt,
                'is_mock': True,
            }

        order = self._call_with_retry('ORDER', self.client.order.create, data=data)
        logger.info(
            f"✅ [RAZORPAY_ORDER] Order created successfully: {order['id']} | "
            f"Amount: {order['amount']} | Status: {order.get('status', 'created')}"
        )
        return {
            'order_id': order['id'],
            'amount': order['amount'],
            'currency': order['currency'],
            'receipt': order.get('receipt', receipt),
            'is_mock': False,
        }

    def fetch_order(self, order_id):

        if self.is_mock:
            order = self._mock_orders.get(order_id)
            if order is None:
                raise PaymentGatewayError(f"Unknown payment intent: {order_id}")
            return dict(order)

        return self._call_with_retry('FETCH_ORDER', self.client.order.fetch, order_id)

    def fetch_order_payments(self, order_id):

        if self.is_mock:
            order = self.fetch_order(order_id)
            return [{
                'id': f"pay_mock_{order_id[-14:]}",
                'order_id': order_id,
                'status': 'captured',
                'amount': order['amount'],
                'currency': order['currency'],
            }]

        response = self._call_with_retry('ORDER_PAYMENTS', self.client.order.payments, order_id)
        return response.get('items', [])

    def find_captured_payment(self, order_id):
        for payment in self.fetch_order_payments(order_id):
            if payment.get('status') == 'captured':
                return payment
        return None

    def refund_payment(self, payment_id, amount, notes=None):

        data = {"amount": to_minor_units(amount)}
        if notes:
            data["notes"] = notes

        logger.info(f"↩️ [RAZORPAY_REFUND] Refunding {amount} for payment {payment_id} | Mock={self.is_mock}")

        if self.is_mock:
            return {'id': f"rfnd_mock_{uuid.uuid4().hex[:14]}", 'payment_id': payment_id,
                    'amount': data['amount'], 'status': 'processed'}

        refund = self._call_with_retry('REFUND', self.client.payment.refund, payment_id, data)
        logger.info(f"✅ [RAZORPAY_REFUND] Refund {refund.get('id')} created for payment {payment_id}")
        return refund

    def verify_payment_signature(self, razorpay_order_id, razorpay_payment_id, razorpay_signature):

        if not all([razorpay_order_id, razorpay_payment_id, razorpay_signature]):
            return False

        if self.is_mock:
            logger.info("🎭 [RAZORPAY_SIGNATURE] Mock verification successful")
            return True

        params_dict = {
            'razorpay_order_id': razorpay_order_id,
            'razorpay_payment_id': razorpay_payment_id,
            'razorpay_signature': razorpay_signature
        }

        try:
            self.client.utility.verify_payment_signature(params_dict)
            return True
        except SignatureVerificationError as e:
            logger.warning(f"Payment signature verification failed: {str(e)}")
            return False

razorpay_client = RazorpayClient()
