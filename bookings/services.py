import logging
from datetime import timedelta
import re

from django.conf import settings
from django.contrib.auth.models import User
from django.db import transaction, IntegrityError, OperationalError, DatabaseError
from django.db.models import Q
from django.utils import timezone

from accounts.models import UserProfile
from movies.exceptions import (
    AccessDenied, InvalidOperation, InvalidRequest, ResourceNotFound,
)
from movies.theater_models import Seat, Showtime
from movies.utils import parse_choice, parse_datetime, parse_decimal, parse_int, parse_sort

from .email_utils import (
    send_email_safe, send_booking_confirmation_email, send_booking_cancellation_email,
    send_payment_success_email,
)
from .models import Booking, BookingSeat, BookingPayment, Ticket
from .razorpay_utils import razorpay_client, to_minor_units
from .utils import SeatManager, PriceCalculator, supports_select_for_update

logger = logging.getLogger(__name__)

MAX_SEATS_PER_BOOKING = 10

SEAT_RACE_MESSAGE = (
    "One or more selected seats were just booked by another user. Please select different seats."
)

BOOKING_SORT_FIELDS = {
    'createdat': 'created_at',
    'totalamount': 'total_amount',
    'status': 'status',
}

ADMIN_BOOKING_SORT_FIELDS = {
    **BOOKING_SORT_FIELDS,
    'expiresat': 'expires_at',
}

PAYMENT_SORT_FIELDS = {
    'transactiondate': 'transaction_date',
    'amount': 'amount',
    'status': 'status',
}

CURRENCY_PATTERN = re.compile(r'^[A-Za-z]{3}$')

def locked(queryset):
    if supports_select_for_update():
        return queryset.select_for_update()
    return queryset

def _get_booking_for_update(booking_id):
    try:
        return locked(Booking.objects.all()).get(id=booking_id)
    except Booking.DoesNotExist:
        raise ResourceNotFound(f'Booking {booking_id} not found.')

def _ensure_owner(booking, user_id):
    if booking.user_id != user_id:
        logger.warning(f"User {user_id} tried to access booking {booking.booking_number} owned by {booking.user_id}")
        raise AccessDenied('You do not have access to this booking.')

def _amount_range(queryset, params, field, min_key, max_key):
    minimum = parse_decimal(params.get(min_key), min_key)
    maximum = parse_decimal(params.get(max_key), max_key)
    if minimum is not None and maximum is not None and minimum > maximum:
        raise InvalidRequest(f'{min_key} cannot be greater than {max_key}.')
    if minimum is not None:
        queryset = queryset.filter(**{f'{field}__gte': minimum})
    if maximum is not None:
        queryset = queryset.filter(**{f'{field}__lte': maximum})
    return queryset

def _date_range(queryset, params, field, from_key, to_key):
    start = parse_datetime(params.get(from_key), from_key)
    end = parse_datetime(params.get(to_key), to_key)
    if start and end and start > end:
        raise InvalidRequest(f'{from_key} cannot be after {to_key}.')
    if start:
        queryset = queryset.filter(**{f'{field}__gte': start})
    if end:
        queryset = queryset.filter(**{f'{field}__lte': end})
    return queryset

class BookingService:

    @staticmethod
    def _clean_seat_ids(seat_ids):
        if not isinstance(seat_ids, list) or not seat_ids:
            raise InvalidRequest('At least one seat must be selected.')

        cleaned = [parse_int(seat_id, 'seat_ids', required=True, minimum=1) for seat_id in seat_ids]
        if len(set(cleaned)) != len(cleaned):
            raise InvalidRequest('Duplicate seats are not allowed in a booking.')
        if len(cleaned) > MAX_SEATS_PER_BOOKING:
            raise InvalidRequest(f'Maximum {MAX_SEATS_PER_BOOKING} seats allowed per booking.')
        return cleaned

    @staticmethod
    def _create(user, showtime_id, seat_ids):
        seat_ids = BookingService._clean_seat_ids(seat_ids)

        try:
            with transaction.atomic():
                try:
                    showtime = locked(Showtime.objects.all()).get(id=showtime_id)
                except Showtime.DoesNotExist:
                    raise ResourceNotFound(f'Showtime {showtime_id} not found.')

                hall = showtime.hall
                if not hall.is_bookable():
                    raise InvalidOperation(
                        f'Hall {hall.hall_number} is not available for booking ({hall.get_status_display()}).'
                    )

                if showtime.has_started():
                    raise InvalidOperation('This showtime has already started.')

                seats = list(Seat.objects.filter(hall_id=hall.id, id__in=seat_ids))
                if len(seats) != len(seat_ids):
                    raise InvalidRequest('One or more selected seats do not belong to this hall.')

                taken = SeatManager.get_reserved_seat_ids(showtime.id) & set(seat_ids)
                if taken:
                    labels = ", ".join(sorted(seat.label for seat in seats if seat.id in taken))
                    raise InvalidOperation(f'Seats already reserved: {labels}.')

                price_details = PriceCalculator.calculate_booking_amount(showtime, len(seats))

                booking = Booking.objects.create(
                    user=user,
                    showtime=showtime,
                    total_amount=price_details['total_amount'],
                    status=Booking.PENDING,
                )
                BookingSeat.objects.bulk_create([
                    BookingSeat(booking=booking, seat=seat, price=showtime.price) for seat in seats
                ])

        except (IntegrityError, OperationalError) as e:
            logger.warning(f"Seat race while booking showtime {showtime_id} for user {user.id}: {e}")
            raise InvalidOperation(SEAT_RACE_MESSAGE) from e

        logger.info(
            f"Booking created: {booking.booking_number} for user {user.id} | "
            f"Seats: {len(seats)} | Total: {booking.total_amount}"
        )
        return Booking.objects.with_details().get(id=booking.id)

    @staticmethod
    def create_booking(user_id, showtime_id, seat_ids):
        showtime_id = parse_int(showtime_id, 'showtime_id', required=True, minimum=1)
        user = User.objects.get(id=user_id)
        return BookingService._create(user, showtime_id, seat_ids)

    @staticmethod
    def confirm_booking(user_id, booking_id):
        already_confirmed = False

        with transaction.atomic():
            booking = _get_booking_for_update(booking_id)
            _ensure_owner(booking, user_id)

            if booking.status == Booking.CONFIRMED:
                logger.info(f"Booking {booking.booking_number} already confirmed. Ensuring tickets exist.")
                TicketService.issue_tickets(booking)
                already_confirmed = True
            elif booking.status != Booking.PENDING:
                raise InvalidOperation(f'Cannot confirm booking with status: {booking.status}.')
            elif not booking.payments.filter(status=BookingPayment.COMPLETED).exists():
                raise InvalidOperation('Booking has no completed payment.')
            else:
                BookingService._mark_confirmed(booking)

        if not already_confirmed:
            BookingService._send_confirmation(booking)

        return Booking.objects.with_details().get(id=booking.id)

    @staticmethod
    def _mark_confirmed(booking):
        booking.status = Booking.CONFIRMED
        booking.confirmed_at = timezone.now()
        booking.save(update_fields=['status', 'confirmed_at', 'updated_at'])
        tickets = TicketService.issue_tickets(booking)
        logger.info(f"Booking {booking.booking_number} confirmed with {len(tickets)} tickets")

    @staticmethod
    def _send_confirmation(booking):
        if UserProfile.for_user(booking.user).is_email_confirmed:
            send_email_safe(send_booking_confirmation_email, booking.id)
        else:
            logger.info(f"⏭️  Confirmation email for {booking.booking_number} skipped - email not confirmed")

    @staticmethod
    def _cancel(booking):
        """Cancels ``booking`` inside the caller's transaction. Returns the refunded amount, if any."""
        if booking.status == Booking.CANCELLED:
            raise InvalidOperation('Booking is already cancelled.')

        if booking.status == Booking.CONFIRMED and booking.showtime.has_started():
            raise InvalidOperation('Cannot cancel a booking for a showtime that has started.')

        if booking.status not in (Booking.PENDING, Booking.CONFIRMED):
            raise InvalidOperation(f'Cannot cancel booking with status: {booking.status}.')

        booking.status = Booking.CANCELLED
        booking.cancelled_at = timezone.now()
        booking.save(update_fields=['status', 'cancelled_at', 'updated_at'])
        booking.tickets.exclude(status=Ticket.CANCELLED).update(status=Ticket.CANCELLED)
        booking.payments.filter(status=BookingPayment.PENDING).update(status=BookingPayment.FAILED)

        refund_amount = None
        payment = booking.payments.filter(status=BookingPayment.COMPLETED).first()
        if payment:
            PaymentService.refund_payment(payment.payment_intent_id, payment.amount)
            refund_amount = payment.amount

        logger.info(f"Booking {booking.booking_number} cancelled | Refund: {refund_amount}")
        return refund_amount

    @staticmethod
    def cancel_booking(user_id, booking_id):
        with transaction.atomic():
            booking = _get_booking_for_update(booking_id)
            _ensure_owner(booking, user_id)
            refund_amount = BookingService._cancel(booking)

        send_email_safe(send_booking_cancellation_email, booking.id, refund_amount)
        return Booking.objects.with_details().get(id=booking.id)

    @staticmethod
    def get_user_booking(user_id, booking_id):
        try:
            booking = Booking.objects.with_details().get(id=booking_id)
        except Booking.DoesNotExist:
            raise ResourceNotFound(f'Booking {booking_id} not found.')
        _ensure_owner(booking, user_id)
        return booking

    @staticmethod
    def _filter(queryset, params):
        status = parse_choice(params.get('status'), 'status', Booking.BOOKING_STATUS)
        if status:
            queryset = queryset.filter(status=status)

        showtime_id = parse_int(params.get('showtime_id'), 'showtime_id')
        if showtime_id:
            queryset = queryset.filter(showtime_id=showtime_id)

        queryset = _date_range(queryset, params, 'created_at', 'created_from', 'created_to')
        return _amount_range(queryset, params, 'total_amount', 'min_amount', 'max_amount')

    @staticmethod
    def list_user_bookings(user_id, params):
        bookings = BookingService._filter(Booking.objects.with_details().filter(user_id=user_id), params)
        ordering = parse_sort(params.get('sort_by'), params.get('sort_order'), BOOKING_SORT_FIELDS, 'createdat')
        return bookings.order_by(ordering, '-id')

    @staticmethod
    def expire_booking(booking):

        if booking.status != Booking.PENDING:
            return False, f"Cannot expire booking with status: {booking.status}"

        if not booking.is_expired():
            return False, "Booking has not expired yet"

        booking.status = Booking.EXPIRED
        booking.save(update_fields=['status', 'updated_at'])
        booking.payments.filter(status=BookingPayment.PENDING).update(status=BookingPayment.FAILED)

        logger.info(f"Booking {booking.booking_number} expired and seats released")
        return True, None

    @staticmethod
    def expire_pending_bookings():
        expired_bookings = Booking.objects.filter(
            status=Booking.PENDING,
            expires_at__lt=timezone.now()
        )

        released_count = 0
        for booking in expired_bookings:
            with transaction.atomic():
                success, error = BookingService.expire_booking(booking)
            if success:
                released_count += 1
            else:
                logger.info(f"Skipped expiring booking {booking.booking_number}: {error}")

        logger.info(f"Booking expiration complete: {released_count} expired")
        return released_count

    # Admin operations

    @staticmethod
    def admin_create_booking(user_id, showtime_id, seat_ids):
        user_id = parse_int(user_id, 'user_id', required=True, minimum=1)
        showtime_id = parse_int(showtime_id, 'showtime_id', required=True, minimum=1)
        try:
            user = User.objects.get(id=user_id)
        except User.DoesNotExist:
            raise ResourceNotFound(f'User {user_id} not found.')
        if not user.is_active:
            raise InvalidOperation('Cannot create a booking for an inactive user.')
        return BookingService._create(user, showtime_id, seat_ids)

    @staticmethod
    def admin_get(booking_id):
        try:
            return Booking.objects.with_details().get(id=booking_id)
        except Booking.DoesNotExist:
            raise ResourceNotFound(f'Booking {booking_id} not found.')

    @staticmethod
    def admin_list(params):
        bookings = BookingService._filter(Booking.objects.with_details(), params)

        user_id = parse_int(params.get('user_id'), 'user_id')
        if user_id:
            bookings = bookings.filter(user_id=user_id)

        movie_id = parse_int(params.get('movie_id'), 'movie_id')
        if movie_id:
            bookings = bookings.filter(showtime__movie_id=movie_id)

        ordering = parse_sort(params.get('sort_by'), params.get('sort_order'), ADMIN_BOOKING_SORT_FIELDS, 'createdat')
        return bookings.order_by(ordering, '-id')

    @staticmethod
    def admin_update_status(booking_id, status):
        status = parse_choice(status, 'status', Booking.BOOKING_STATUS)
        if not status:
            raise InvalidRequest('status is required.')

        refund_amount = None
        with transaction.atomic():
            booking = _get_booking_for_update(booking_id)

            if booking.status == status:
                raise InvalidOperation(f'Booking is already {status.lower()}.')

            if status == Booking.CONFIRMED:
                if booking.status != Booking.PENDING:
                    raise InvalidOperation(f'Cannot confirm booking with status: {booking.status}.')
                BookingService._mark_confirmed(booking)
            elif status == Booking.CANCELLED:
                refund_amount = BookingService._cancel(booking)
            elif status == Booking.EXPIRED:
                if booking.status != Booking.PENDING:
                    raise InvalidOperation('Only pending bookings can be expired.')
                booking.status = Booking.EXPIRED
                booking.save(update_fields=['status', 'updated_at'])
                booking.payments.filter(status=BookingPayment.PENDING).update(status=BookingPayment.FAILED)
            else:
                raise InvalidOperation('Bookings cannot be moved back to pending.')

        logger.info(f"Admin moved booking {booking.booking_number} to {status}")

        if status == Booking.CONFIRMED:
            BookingService._send_confirmation(booking)
        elif status == Booking.CANCELLED:
            send_email_safe(send_booking_cancellation_email, booking.id, refund_amount)

        return Booking.objects.with_details().get(id=booking.id)

    @staticmethod
    def admin_delete(booking_id):
        with transaction.atomic():
            booking = _get_booking_for_update(booking_id)
            if booking.payments.filter(status=BookingPayment.COMPLETED).exists():
                raise InvalidOperation('Booking has a completed payment. Cancel it instead so the payment is refunded.')
            number = booking.booking_number
            booking.delete()
        logger.info(f"Admin deleted booking {number}")

class PaymentService:

    @staticmethod
    def _clean_currency(currency):
        currency = (currency or settings.PAYMENT_CURRENCY).strip()
        if not CURRENCY_PATTERN.match(currency):
            raise InvalidRequest('currency must be a 3-letter ISO code.')
        return currency.upper()

    @staticmethod
    def _verify_gateway_order(order, payment):
        gateway_status = order.get('status')
        if gateway_status != 'paid':
            raise InvalidOperation(f'Payment has not succeeded (gateway status: {gateway_status}).')

        paid_amount = order.get('amount_paid') or order.get('amount')
        if int(paid_amount or 0) != to_minor_units(payment.amount):
            logger.error(
                f"Amount mismatch for {payment.payment_intent_id}: gateway={paid_amount} "
                f"expected={to_minor_units(payment.amount)}"
            )
            raise InvalidOperation('Paid amount does not match the booking total.')

        if (order.get('currency') or '').upper() != payment.currency.upper():
            raise InvalidOperation('Payment currency does not match the booking currency.')

    @staticmethod
    def create_payment_intent(user_id, booking_id, amount, currency=None, payment_method='card'):
        booking_id = parse_int(booking_id, 'booking_id', required=True, minimum=1)
        amount = parse_decimal(amount, 'amount', required=True)
        if amount <= 0:
            raise InvalidRequest('amount must be greater than zero.')
        currency = PaymentService._clean_currency(currency)
        payment_method = (payment_method or 'card').strip().lower()

        expired = False
        reused = False
        with transaction.atomic():
            booking = _get_booking_for_update(booking_id)
            _ensure_owner(booking, user_id)

            if booking.status == Booking.PENDING and booking.is_expired():
                BookingService.expire_booking(booking)
                expired = True
            elif booking.status == Booking.CONFIRMED:
                raise InvalidOperation('Booking is already confirmed.')
            elif booking.status != Booking.PENDING:
                raise InvalidOperation(f'Booking is not awaiting payment (status: {booking.status}).')
            else:
                if amount != booking.total_amount:
                    logger.warning(
                        f"Client amount {amount} differs from booking total {booking.total_amount} "
                        f"for {booking.booking_number}. Charging booking total."
                    )

                payment = booking.payments.filter(status=BookingPayment.PENDING).order_by('-transaction_date').first()

                if payment and payment.currency == currency and payment.amount == booking.total_amount:
                    logger.info(f"Reusing payment intent {payment.payment_intent_id} for booking {booking.booking_number}")
                    reused = True
                else:
                    order = razorpay_client.create_order(
                        amount=booking.total_amount,
                        currency=currency,
                        receipt=booking.booking_number,
                        notes={
                            'booking_id': booking.id,
                            'booking_number': booking.booking_number,
                            'user_id': booking.user_id,
                            'showtime_id': booking.showtime_id,
                        }
                    )

                    if payment is None:
                        payment = BookingPayment(booking=booking)
                    payment.payment_intent_id = order['order_id']
                    payment.amount = booking.total_amount
                    payment.currency = currency
                    payment.payment_method = payment_method
                    payment.status = BookingPayment.PENDING
                    payment.transaction_date = timezone.now()
                    payment.gateway_response = order
                    payment.save()

                    logger.info(f"Created payment intent {payment.payment_intent_id} for booking {booking.booking_number}")

        if expired:
            raise InvalidOperation('Booking has expired. Please create a new booking.')

        return payment, reused

    @staticmethod
    def confirm_payment(user_id, booking_id, payment_intent_id, gateway_payment_id=None, signature=None):
        booking_id = parse_int(booking_id, 'booking_id', required=True, minimum=1)
        payment_intent_id = (payment_intent_id or '').strip()
        if not payment_intent_id:
            raise InvalidRequest('payment_intent_id is required.')

        refunded_late_payment = False
        with transaction.atomic():
            booking = _get_booking_for_update(booking_id)
            _ensure_owner(booking, user_id)

            payment = locked(BookingPayment.objects.filter(
                booking=booking, payment_intent_id=payment_intent_id
            )).first()
            if payment is None:
                raise ResourceNotFound('Payment not found for this booking.')

            if booking.status == Booking.CONFIRMED:
                logger.info(f"Booking {booking.booking_number} already confirmed. Skipping payment confirmation.")
                return True

            if payment.status != BookingPayment.COMPLETED:
                # FAILED intents belong to lapsed bookings; the customer may still have paid at the gateway
                if payment.status not in (BookingPayment.PENDING, BookingPayment.FAILED):
                    raise InvalidOperation(f'Payment cannot be confirmed (status: {payment.status}).')
                if payment.status == BookingPayment.FAILED and booking.status == Booking.PENDING:
                    raise InvalidOperation('Payment cannot be confirmed (status: FAILED).')

                if signature and not razorpay_client.verify_payment_signature(
                    payment_intent_id, gateway_payment_id, signature
                ):
                    raise InvalidRequest('Invalid payment signature.')

                order = razorpay_client.fetch_order(payment_intent_id)
                PaymentService._verify_gateway_order(order, payment)

                if not gateway_payment_id:
                    captured = razorpay_client.find_captured_payment(payment_intent_id)
                    gateway_payment_id = captured['id'] if captured else ''

                payment.status = BookingPayment.COMPLETED
                payment.gateway_payment_id = gateway_payment_id or ''
                payment.transaction_date = timezone.now()
                payment.gateway_response = order
                payment.save()
                logger.info(f"Payment {payment_intent_id} completed for booking {booking.booking_number}")

            if booking.status != Booking.PENDING:
                # Paid after the booking lapsed; the seats may be gone, so return the money
                PaymentService.refund_payment(payment.payment_intent_id, payment.amount)
                refunded_late_payment = True

        if refunded_late_payment:
            raise InvalidOperation(
                f'Booking is no longer pending (status: {booking.status}). The payment has been refunded.'
            )

        BookingService.confirm_booking(user_id, booking.id)
        send_email_safe(send_payment_success_email, payment.id)
        return True

    @staticmethod
    def refund_payment(payment_intent_id, amount):
        payment_intent_id = (payment_intent_id or '').strip()
        if not payment_intent_id:
            raise InvalidRequest('payment_intent_id is required.')
        amount = parse_decimal(amount, 'amount', required=True)
        if amount <= 0:
            raise InvalidRequest('amount must be greater than zero.')

        with transaction.atomic():
            payment = locked(BookingPayment.objects.select_related('booking').filter(
                payment_intent_id=payment_intent_id
            )).first()
            if payment is None:
                raise ResourceNotFound(f'Payment {payment_intent_id} not found.')

            if payment.status == BookingPayment.REFUNDED:
                logger.info(f"Payment {payment_intent_id} already refunded. Skipping.")
                return True

            if payment.status != BookingPayment.COMPLETED:
                raise InvalidOperation('Only completed payments can be refunded.')

            if amount != payment.amount:
                raise InvalidRequest('Refund amount must equal the payment amount.')

            order = razorpay_client.fetch_order(payment_intent_id)
            PaymentService._verify_gateway_order(order, payment)

            gateway_payment_id = payment.gateway_payment_id
            if not gateway_payment_id:
                captured = razorpay_client.find_captured_payment(payment_intent_id)
                if captured is None:
                    raise InvalidOperation('No captured payment found for this payment intent.')
                gateway_payment_id = captured['id']

            refund = razorpay_client.refund_payment(
                gateway_payment_id,
                payment.amount,
                notes={'booking_number': payment.booking.booking_number},
            )

            payment.status = BookingPayment.REFUNDED
            payment.gateway_payment_id = gateway_payment_id
            payment.refunded_at = timezone.now()
            payment.gateway_response = {**(payment.gateway_response or {}), 'refund': refund}
            payment.save()

        logger.info(f"Payment {payment_intent_id} refunded ({payment.amount} {payment.currency})")
        return True

    @staticmethod
    def refund_for_user(user_id, payment_intent_id, amount):
        payment_intent_id = (payment_intent_id or '').strip()
        if not payment_intent_id:
            raise InvalidRequest('payment_intent_id is required.')

        payment = BookingPayment.objects.select_related('booking').filter(payment_intent_id=payment_intent_id).first()
        if payment is None:
            raise ResourceNotFound(f'Payment {payment_intent_id} not found.')
        _ensure_owner(payment.booking, user_id)

        with transaction.atomic():
            booking = _get_booking_for_update(payment.booking_id)
            if booking.status == Booking.CONFIRMED and booking.showtime.has_started():
                raise InvalidOperation('Cannot refund a booking for a showtime that has started.')

            result = PaymentService.refund_payment(payment_intent_id, amount)

            # A refunded booking must not keep holding its seats
            cancelled = booking.status in (Booking.PENDING, Booking.CONFIRMED)
            if cancelled:
                BookingService._cancel(booking)

        if cancelled:
            send_email_safe(send_booking_cancellation_email, booking.id, payment.amount)
        return result

    @staticmethod
    def admin_list(params):
        payments = BookingPayment.objects.select_related('booking__user', 'booking__showtime__movie')

        booking_id = parse_int(params.get('booking_id'), 'booking_id')
        if booking_id:
            payments = payments.filter(booking_id=booking_id)

        user_id = parse_int(params.get('user_id'), 'user_id')
        if user_id:
            payments = payments.filter(booking__user_id=user_id)

        status = parse_choice(params.get('status'), 'status', BookingPayment.PAYMENT_STATUS)
        if status:
            payments = payments.filter(status=status)

        payments = _date_range(payments, params, 'transaction_date', 'date_from', 'date_to')
        payments = _amount_range(payments, params, 'amount', 'min_amount', 'max_amount')

        ordering = parse_sort(params.get('sort_by'), params.get('sort_order'), PAYMENT_SORT_FIELDS, 'transactiondate')
        return payments.order_by(ordering, '-id')

    @staticmethod
    def admin_get(payment_id):
        try:
            return BookingPayment.objects.select_related('booking__user', 'booking__showtime__movie').get(id=payment_id)
        except BookingPayment.DoesNotExist:
            raise ResourceNotFound(f'Payment {payment_id} not found.')

TICKET_DETAIL_RELATED = (
    'seat', 'booking__user', 'booking__showtime__movie', 'booking__showtime__hall__branch',
)

class TicketService:

    @staticmethod
    def issue_tickets(booking):
        """Creates a ticket for every booked seat that does not have one yet."""
        if booking.status != Booking.CONFIRMED:
            raise InvalidOperation('Tickets can only be issued for confirmed bookings.')

        issued_seat_ids = set(booking.tickets.values_list('seat_id', flat=True))
        created = 0
        for booking_seat in booking.booking_seats.select_related('seat'):
            if booking_seat.seat_id in issued_seat_ids:
                continue
            Ticket.objects.create(booking=booking, seat=booking_seat.seat, price=booking_seat.price)
            created += 1

        if created:
            logger.info(f"Issued {created} tickets for booking {booking.booking_number}")
        return list(booking.tickets.select_related('seat'))

    @staticmethod
    def _filter(queryset, params):
        status = parse_choice(params.get('status'), 'status', Ticket.TICKET_STATUS)
        if status:
            queryset = queryset.filter(status=status)

        booking_id = parse_int(params.get('booking_id'), 'booking_id')
        if booking_id:
            queryset = queryset.filter(booking_id=booking_id)

        showtime_id = parse_int(params.get('showtime_id'), 'showtime_id')
        if showtime_id:
            queryset = queryset.filter(booking__showtime_id=showtime_id)
        return queryset

    @staticmethod
    def list_user_tickets(user_id, params):
        tickets = Ticket.objects.select_related(*TICKET_DETAIL_RELATED).filter(booking__user_id=user_id)
        return TicketService._filter(tickets, params).order_by('-created_at', 'id')

    @staticmethod
    def get_ticket(ticket_id):
        try:
            return Ticket.objects.select_related(*TICKET_DETAIL_RELATED).get(id=ticket_id)
        except Ticket.DoesNotExist:
            raise ResourceNotFound(f'Ticket {ticket_id} not found.')

    @staticmethod
    def get_user_ticket(user_id, ticket_id):
        ticket = TicketService.get_ticket(ticket_id)
        if ticket.booking.user_id != user_id:
            raise AccessDenied('You do not have access to this ticket.')
        return ticket

    @staticmethod
    def admin_list(params):
        tickets = TicketService._filter(Ticket.objects.select_related(*TICKET_DETAIL_RELATED), params)

        user_id = parse_int(params.get('user_id'), 'user_id')
        if user_id:
            tickets = tickets.filter(booking__user_id=user_id)

        search = (params.get('search') or '').strip()
        if search:
            tickets = tickets.filter(ticket_number__icontains=search)

        return tickets.order_by('-created_at', 'id')

    @staticmethod
    def by_booking(booking_id):
        if not Booking.objects.filter(id=booking_id).exists():
            raise ResourceNotFound(f'Booking {booking_id} not found.')
        return list(Ticket.objects.select_related(*TICKET_DETAIL_RELATED).filter(booking_id=booking_id))

    @staticmethod
    def by_showtime(showtime_id):
        if not Showtime.objects.filter(id=showtime_id).exists():
            raise ResourceNotFound(f'Showtime {showtime_id} not found.')
        return list(
            Ticket.objects.select_related(*TICKET_DETAIL_RELATED)
            .filter(booking__showtime_id=showtime_id)
            .order_by('seat_id')
        )

    @staticmethod
    def _find_by_qr(qr_token):
        qr_token = (qr_token or '').strip()
        if not qr_token:
            raise InvalidRequest('qr_token is required.')
        return Ticket.objects.select_related(*TICKET_DETAIL_RELATED).filter(qr_token=qr_token).first()

    @staticmethod
    def check_by_qr(qr_token):
        """Returns ``(ticket, message)``; ``ticket`` is None when the token is unknown."""
        ticket = TicketService._find_by_qr(qr_token)
        if ticket is None:
            return None, 'Ticket not found.'

        messages = {
            Ticket.ACTIVE: 'Ticket is valid.',
            Ticket.USED: 'Ticket has already been used.',
            Ticket.CANCELLED: 'Ticket has been cancelled.',
        }
        return ticket, messages.get(ticket.status, f'Ticket status is {ticket.status}.')

    @staticmethod
    def check_in(qr_token):
        """Marks the ticket behind ``qr_token`` as used. Returns ``(result, message, ticket)``."""
        qr_token = (qr_token or '').strip()
        if not qr_token:
            raise InvalidRequest('qr_token is required.')

        try:
            with transaction.atomic():
                ticket = locked(Ticket.objects.filter(qr_token=qr_token)).first()
                if ticket is None:
                    return 'NOT_FOUND', 'Ticket not found.', None

                ticket = TicketService.get_ticket(ticket.id)

                if ticket.status == Ticket.USED:
                    return 'ALREADY_USED', f'Ticket was already used at {ticket.used_at:%Y-%m-%d %H:%M}.', ticket

                if ticket.status == Ticket.CANCELLED:
                    return 'CANCELLED', 'Ticket has been cancelled.', ticket

                if ticket.status != Ticket.ACTIVE or ticket.booking.status != Booking.CONFIRMED:
                    return 'INVALID_STATUS', f'Ticket cannot be used (booking status: {ticket.booking.status}).', ticket

                ticket.status = Ticket.USED
                ticket.used_at = timezone.now()
                ticket.save(update_fields=['status', 'used_at'])

        except DatabaseError as e:
            logger.error(f"Check-in failed for QR token: {e}", exc_info=True)
            return 'ERROR', 'Check-in failed due to a server error. Please try again.', None

        logger.info(f"Ticket {ticket.ticket_number} checked in")
        return 'SUCCESS', 'Check-in successful. Enjoy the show!', ticket

def upcoming_reminder_bookings(now=None):
    """Confirmed bookings starting 110-130 minutes from now whose owners confirmed their email."""
    now = now or timezone.now()
    return Booking.objects.filter(
        status=Booking.CONFIRMED,
        reminder_email_sent=False,
        user__profile__is_email_confirmed=True,
        showtime__start_time__gte=now + timedelta(minutes=110),
        showtime__start_time__lte=now + timedelta(minutes=130),
    ).filter(~Q(user__email=''))
