import json
import uuid
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.contrib.auth.models import User
from django.core import mail
from django.core.management import call_command
from django.test import TestCase, Client
from django.utils import timezone

from accounts.models import UserProfile
from accounts.tokens import create_access_token
from movies.exceptions import AccessDenied, InvalidOperation, InvalidRequest
from movies.models import Movie
from movies.theater_models import Branch, Hall, Showtime

from .models import Booking, BookingPayment, Ticket
from .razorpay_utils import RazorpayClient
from .services import BookingService, PaymentService, TicketService
from .tasks import expire_pending_bookings, send_showtime_reminders
from .utils import PriceCalculator, SeatManager

def make_user(email='guest@example.com', confirmed=True):
    user = User.objects.create_user(username=email, email=email, password='Str0ngPass!23', first_name='Guest')
    profile = UserProfile.for_user(user)
    if confirmed:
        profile.mark_email_confirmed()
    return user

def make_showtime(hall_type='VIP', starts_in=timedelta(days=1), price='200.00', hall_number='1'):
    branch, _ = Branch.objects.get_or_create(name='Downtown', defaults={'location': 'Main Street 1'})
    movie, _ = Movie.objects.get_or_create(
        name='Test Movie',
        defaults={'duration': 120, 'release_date': timezone.now().date(), 'status': 'ACTIVE'},
    )
    hall = Hall.objects.create(branch=branch, hall_number=hall_number, hall_type=hall_type)
    hall.regenerate_seats()
    return Showtime.objects.create(
        movie=movie, hall=hall, start_time=timezone.now() + starts_in, price=Decimal(price)
    )

def auth_header(user, role='USER'):
    token, _ = create_access_token(user, role)
    return {'HTTP_AUTHORIZATION': f'Bearer {token}'}

class MockGatewayMixin:

    def setUp(self):
        super().setUp()
        self.gateway = RazorpayClient(key_id='', key_secret='')
        patcher = patch('bookings.services.razorpay_client', self.gateway)
        patcher.start()
        self.addCleanup(patcher.stop)

    def pay(self, booking):
        payment, _ = PaymentService.create_payment_intent(booking.user_id, booking.id, booking.total_amount, 'INR')
        PaymentService.confirm_payment(booking.user_id, booking.id, payment.payment_intent_id)
        booking.refresh_from_db()
        return payment

class PriceCalculationTests(TestCase):

    def setUp(self):
        self.showtime = make_showtime(price='250.00')

    def test_total_includes_fee_multiplier(self):
        amounts = PriceCalculator.calculate_booking_amount(self.showtime, 2)

        self.assertEqual(amounts['base_price'], Decimal('500.00'))
        self.assertEqual(amounts['total_amount'], Decimal('570.00'))
        self.assertEqual(amounts['fees'], Decimal('70.00'))

    def test_total_rounds_to_cents(self):
        self.showtime.price = Decimal('99.99')
        amounts = PriceCalculator.calculate_booking_amount(self.showtime, 3)

        self.assertEqual(amounts['total_amount'], Decimal('341.97'))

class BookingCreationTests(TestCase):

    def setUp(self):
        self.user = make_user()
        self.showtime = make_showtime()
        self.seats = list(self.showtime.hall.seats.all())

    def test_booking_is_created_pending_with_hold(self):
        booking = BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[0].id, self.seats[1].id])

        self.assertEqual(booking.status, Booking.PENDING)
        self.assertEqual(booking.total_amount, Decimal('456.00'))
        self.assertTrue(booking.booking_number.startswith('BOOK-'))
        self.assertGreater(booking.expires_at, timezone.now())
        self.assertEqual(booking.get_seat_labels(), [self.seats[0].label, self.seats[1].label])

    def test_booking_number_collision_draws_again(self):
        taken = uuid.UUID(int=int('11111' + '0' * 30))
        fresh = uuid.UUID(int=int('22222' + '0' * 30))
        with patch('bookings.models.uuid.uuid4', return_value=taken):
            first = BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[0].id])

        with patch('bookings.models.uuid.uuid4', side_effect=[taken, fresh]):
            second = BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[1].id])

        self.assertTrue(first.booking_number.endswith('-11111'))
        self.assertTrue(second.booking_number.endswith('-22222'))
        self.assertEqual(second.status, Booking.PENDING)

    def test_booking_number_space_exhausted(self):
        taken = uuid.UUID(int=int('33333' + '0' * 30))
        with patch('bookings.models.uuid.uuid4', return_value=taken):
            BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[0].id])

            with self.assertRaises(InvalidOperation) as ctx:
                BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[1].id])

        self.assertIn('booking number', ctx.exception.message)

    def test_reserved_seats_are_rejected(self):
        BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[0].id])
        other = make_user('other@example.com')

        with self.assertRaises(InvalidOperation) as ctx:
            BookingService.create_booking(other.id, self.showtime.id, [self.seats[0].id, self.seats[2].id])

        self.assertIn('already reserved', ctx.exception.message)
        self.assertEqual(ctx.exception.get_status_code(), 409)

    def test_expired_hold_releases_seats(self):
        booking = BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[0].id])
        Booking.objects.filter(id=booking.id).update(expires_at=timezone.now() - timedelta(minutes=1))

        other = make_user('other@example.com')
        second = BookingService.create_booking(other.id, self.showtime.id, [self.seats[0].id])

        self.assertEqual(second.status, Booking.PENDING)

    def test_seats_must_belong_to_hall(self):
        other_showtime = make_showtime(hall_number='2')
        foreign_seat = other_showtime.hall.seats.first()

        with self.assertRaises(InvalidRequest):
            BookingService.create_booking(self.user.id, self.showtime.id, [foreign_seat.id])

    def test_duplicate_and_empty_seat_lists_are_rejected(self):
        with self.assertRaises(InvalidRequest):
            BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[0].id, self.seats[0].id])
        with self.assertRaises(InvalidRequest):
            BookingService.create_booking(self.user.id, self.showtime.id, [])

    def test_hall_under_maintenance_cannot_be_booked(self):
        Hall.objects.filter(id=self.showtime.hall_id).update(status='MAINTENANCE')

        with self.assertRaises(InvalidOperation):
            BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[0].id])

    def test_started_showtime_cannot_be_booked(self):
        started = make_showtime(starts_in=timedelta(minutes=-5), hall_number='3')

        with self.assertRaises(InvalidOperation):
            BookingService.create_booking(self.user.id, started.id, [started.hall.seats.first().id])

    def test_split_seats_reports_reserved(self):
        BookingService.create_booking(self.user.id, self.showtime.id, [self.seats[3].id])

        available, reserved = SeatManager.split_seats(self.showtime)

        self.assertEqual(reserved, [self.seats[3]])
        self.assertEqual(len(available), 23)

class PaymentFlowTests(MockGatewayMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.user = make_user()
        self.showtime = make_showtime()
        self.seat_ids = list(self.showtime.hall.seats.values_list('id', flat=True)[:2])
        self.booking = BookingService.create_booking(self.user.id, self.showtime.id, self.seat_ids)

    def test_confirm_payment_confirms_booking_and_issues_tickets(self):
        payment = self.pay(self.booking)

        payment.refresh_from_db()
        self.assertEqual(payment.status, BookingPayment.COMPLETED)
        self.assertTrue(payment.gateway_payment_id.startswith('pay_mock_'))
        self.assertEqual(self.booking.status, Booking.CONFIRMED)
        self.assertIsNotNone(self.booking.confirmed_at)
        self.assertEqual(self.booking.tickets.filter(status=Ticket.ACTIVE).count(), 2)

        subjects = [message.subject for message in mail.outbox]
        self.assertTrue(any(subject.startswith('Booking Confirmation') for subject in subjects))
        self.assertTrue(any(subject.startswith('Payment Successful') for subject in subjects))

    def test_confirm_payment_is_idempotent(self):
        payment = self.pay(self.booking)

        self.assertTrue(PaymentService.confirm_payment(self.user.id, self.booking.id, payment.payment_intent_id))
        self.assertEqual(self.booking.tickets.count(), 2)

    def test_pending_intent_is_reused(self):
        first, reused_first = PaymentService.create_payment_intent(self.user.id, self.booking.id, '1', 'inr')
        second, reused_second = PaymentService.create_payment_intent(self.user.id, self.booking.id, '1', 'INR')

        self.assertFalse(reused_first)
        self.assertTrue(reused_second)
        self.assertEqual(first.payment_intent_id, second.payment_intent_id)
        self.assertEqual(second.amount, self.booking.total_amount)

    def test_invalid_currency_is_rejected(self):
        with self.assertRaises(InvalidRequest):
            PaymentService.create_payment_intent(self.user.id, self.booking.id, '10', 'RUPEES')

    def test_expired_booking_cannot_start_payment(self):
        Booking.objects.filter(id=self.booking.id).update(expires_at=timezone.now() - timedelta(seconds=1))

        with self.assertRaises(InvalidOperation):
            PaymentService.create_payment_intent(self.user.id, self.booking.id, '10', 'INR')

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.EXPIRED)

    def test_unpaid_gateway_order_is_not_confirmed(self):
        payment, _ = PaymentService.create_payment_intent(self.user.id, self.booking.id, '10', 'INR')
        self.gateway._mock_orders[payment.payment_intent_id]['status'] = 'attempted'

        with self.assertRaises(InvalidOperation):
            PaymentService.confirm_payment(self.user.id, self.booking.id, payment.payment_intent_id)

        payment.refresh_from_db()
        self.assertEqual(payment.status, BookingPayment.PENDING)

    def test_amount_mismatch_is_not_confirmed(self):
        payment, _ = PaymentService.create_payment_intent(self.user.id, self.booking.id, '10', 'INR')
        self.gateway._mock_orders[payment.payment_intent_id]['amount_paid'] = 100

        with self.assertRaises(InvalidOperation):
            PaymentService.confirm_payment(self.user.id, self.booking.id, payment.payment_intent_id)

    def test_booking_cannot_be_confirmed_without_payment(self):
        with self.assertRaises(InvalidOperation):
            BookingService.confirm_booking(self.user.id, self.booking.id)

    def test_other_users_cannot_pay_for_booking(self):
        intruder = make_user('intruder@example.com')

        with self.assertRaises(AccessDenied):
            PaymentService.create_payment_intent(intruder.id, self.booking.id, '10', 'INR')

    def test_payment_after_expiry_is_refunded(self):
        payment, _ = PaymentService.create_payment_intent(self.user.id, self.booking.id, '10', 'INR')
        Booking.objects.filter(id=self.booking.id).update(expires_at=timezone.now() - timedelta(seconds=1))
        BookingService.expire_pending_bookings()

        with self.assertRaises(InvalidOperation) as ctx:
            PaymentService.confirm_payment(self.user.id, self.booking.id, payment.payment_intent_id)
        self.assertIn('refunded', ctx.exception.message)

        payment.refresh_from_db()
        self.booking.refresh_from_db()
        self.assertEqual(payment.status, BookingPayment.REFUNDED)
        self.assertEqual(self.booking.status, Booking.EXPIRED)
        self.assertFalse(self.booking.tickets.exists())

    def test_payment_after_cancellation_is_refunded(self):
        payment, _ = PaymentService.create_payment_intent(self.user.id, self.booking.id, '10', 'INR')
        BookingService.cancel_booking(self.user.id, self.booking.id)

        with self.assertRaises(InvalidOperation):
            PaymentService.confirm_payment(self.user.id, self.booking.id, payment.payment_intent_id)

        payment.refresh_from_db()
        self.assertEqual(payment.status, BookingPayment.REFUNDED)
        self.assertIsNotNone(payment.refunded_at)

    def test_abandoned_intent_that_was_never_paid_stays_failed(self):
        payment, _ = PaymentService.create_payment_intent(self.user.id, self.booking.id, '10', 'INR')
        BookingService.cancel_booking(self.user.id, self.booking.id)
        self.gateway._mock_orders[payment.payment_intent_id]['status'] = 'created'

        with self.assertRaises(InvalidOperation):
            PaymentService.confirm_payment(self.user.id, self.booking.id, payment.payment_intent_id)

        payment.refresh_from_db()
        self.assertEqual(payment.status, BookingPayment.FAILED)

class CancellationTests(MockGatewayMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.user = make_user()
        self.showtime = make_showtime()
        seat_ids = list(self.showtime.hall.seats.values_list('id', flat=True)[:2])
        self.booking = BookingService.create_booking(self.user.id, self.showtime.id, seat_ids)

    def test_cancel_pending_booking(self):
        booking = BookingService.cancel_booking(self.user.id, self.booking.id)

        self.assertEqual(booking.status, Booking.CANCELLED)
        self.assertIsNotNone(booking.cancelled_at)
        self.assertEqual(SeatManager.get_reserved_seat_ids(self.showtime.id), set())

    def test_cancel_confirmed_booking_refunds_and_voids_tickets(self):
        payment = self.pay(self.booking)
        mail.outbox = []

        BookingService.cancel_booking(self.user.id, self.booking.id)

        payment.refresh_from_db()
        self.assertEqual(payment.status, BookingPayment.REFUNDED)
        self.assertIsNotNone(payment.refunded_at)
        self.assertFalse(self.booking.tickets.exclude(status=Ticket.CANCELLED).exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertTrue(mail.outbox[0].subject.startswith('Booking Cancelled'))

    def test_cancel_twice_is_conflict(self):
        BookingService.cancel_booking(self.user.id, self.booking.id)

        with self.assertRaises(InvalidOperation) as ctx:
            BookingService.cancel_booking(self.user.id, self.booking.id)
        self.assertEqual(ctx.exception.get_status_code(), 409)

    def test_refund_failure_rolls_back_cancellation(self):
        self.pay(self.booking)

        with patch.object(self.gateway, 'refund_payment', side_effect=InvalidOperation('Gateway refused')):
            with self.assertRaises(InvalidOperation):
                BookingService.cancel_booking(self.user.id, self.booking.id)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.CONFIRMED)
        self.assertEqual(self.booking.tickets.filter(status=Ticket.ACTIVE).count(), 2)

    def test_refund_already_refunded_payment_is_noop(self):
        payment = self.pay(self.booking)
        PaymentService.refund_payment(payment.payment_intent_id, payment.amount)

        self.assertTrue(PaymentService.refund_payment(payment.payment_intent_id, payment.amount))

    def test_user_refund_cancels_confirmed_booking(self):
        payment = self.pay(self.booking)

        PaymentService.refund_for_user(self.user.id, payment.payment_intent_id, payment.amount)

        self.booking.refresh_from_db()
        payment.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.CANCELLED)
        self.assertEqual(payment.status, BookingPayment.REFUNDED)
        self.assertFalse(self.booking.tickets.exclude(status=Ticket.CANCELLED).exists())

    def test_user_refund_releases_seats_of_unconfirmed_paid_booking(self):
        payment, _ = PaymentService.create_payment_intent(self.user.id, self.booking.id, '10', 'INR')
        BookingPayment.objects.filter(id=payment.id).update(status=BookingPayment.COMPLETED)
        mail.outbox = []

        PaymentService.refund_for_user(self.user.id, payment.payment_intent_id, payment.amount)

        self.booking.refresh_from_db()
        payment.refresh_from_db()
        self.assertEqual(payment.status, BookingPayment.REFUNDED)
        self.assertEqual(self.booking.status, Booking.CANCELLED)
        self.assertEqual(SeatManager.get_reserved_seat_ids(self.showtime.id), set())
        self.assertEqual(len(mail.outbox), 1)
        self.assertTrue(mail.outbox[0].subject.startswith('Booking Cancelled'))

    def test_refund_amount_must_match(self):
        payment = self.pay(self.booking)

        with self.assertRaises(InvalidRequest):
            PaymentService.refund_payment(payment.payment_intent_id, Decimal('1.00'))

class TicketCheckInTests(MockGatewayMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.user = make_user()
        self.showtime = make_showtime()
        seat_ids = list(self.showtime.hall.seats.values_list('id', flat=True)[:1])
        self.booking = BookingService.create_booking(self.user.id, self.showtime.id, seat_ids)
        self.pay(self.booking)
        self.ticket = self.booking.tickets.get()

    def test_check_in_marks_ticket_used_once(self):
        result, _, ticket = TicketService.check_in(self.ticket.qr_token)
        self.assertEqual(result, 'SUCCESS')
        self.assertIsNotNone(ticket.used_at)

        result, message, _ = TicketService.check_in(self.ticket.qr_token)
        self.assertEqual(result, 'ALREADY_USED')
        self.assertIn('already used', message)

    def test_unknown_token(self):
        result, _, ticket = TicketService.check_in('not-a-real-token')

        self.assertEqual(result, 'NOT_FOUND')
        self.assertIsNone(ticket)

    def test_cancelled_ticket_is_refused(self):
        Ticket.objects.filter(id=self.ticket.id).update(status=Ticket.CANCELLED)

        result, _, _ = TicketService.check_in(self.ticket.qr_token)
        self.assertEqual(result, 'CANCELLED')

    def test_check_by_qr_describes_ticket(self):
        ticket, message = TicketService.check_by_qr(self.ticket.qr_token)

        self.assertEqual(ticket.id, self.ticket.id)
        self.assertEqual(message, 'Ticket is valid.')

    def test_issue_tickets_is_idempotent(self):
        TicketService.issue_tickets(self.booking)

        self.assertEqual(self.booking.tickets.count(), 1)

class BackgroundJobTests(MockGatewayMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.user = make_user()

    def test_expire_pending_bookings(self):
        showtime = make_showtime()
        seat_ids = list(showtime.hall.seats.values_list('id', flat=True)[:1])
        booking = BookingService.create_booking(self.user.id, showtime.id, seat_ids)
        payment, _ = PaymentService.create_payment_intent(self.user.id, booking.id, '1', 'INR')
        Booking.objects.filter(id=booking.id).update(expires_at=timezone.now() - timedelta(minutes=1))

        expire_pending_bookings()

        booking.refresh_from_db()
        payment.refresh_from_db()
        self.assertEqual(booking.status, Booking.EXPIRED)
        self.assertEqual(payment.status, BookingPayment.FAILED)

    def test_cleanup_command_expires_bookings(self):
        showtime = make_showtime()
        seat_ids = list(showtime.hall.seats.values_list('id', flat=True)[:1])
        booking = BookingService.create_booking(self.user.id, showtime.id, seat_ids)
        Booking.objects.filter(id=booking.id).update(expires_at=timezone.now() - timedelta(minutes=1))

        call_command('cleanup_expired_bookings')

        booking.refresh_from_db()
        self.assertEqual(booking.status, Booking.EXPIRED)

    def test_reminders_sent_once_for_upcoming_showtimes(self):
        soon = make_showtime(starts_in=timedelta(minutes=120))
        later = make_showtime(starts_in=timedelta(hours=6), hall_number='2')
        for showtime in (soon, later):
            seat_ids = list(showtime.hall.seats.values_list('id', flat=True)[:1])
            self.pay(BookingService.create_booking(self.user.id, showtime.id, seat_ids))
        mail.outbox = []

        send_showtime_reminders()
        send_showtime_reminders()

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('starts soon', mail.outbox[0].subject)

class AdminBookingTests(MockGatewayMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.user = make_user()
        self.showtime = make_showtime()
        self.seat_ids = list(self.showtime.hall.seats.values_list('id', flat=True)[:2])

    def test_admin_confirm_issues_tickets(self):
        booking = BookingService.admin_create_booking(self.user.id, self.showtime.id, self.seat_ids)

        booking = BookingService.admin_update_status(booking.id, 'confirmed')

        self.assertEqual(booking.status, Booking.CONFIRMED)
        self.assertEqual(booking.tickets.count(), 2)

    def test_admin_cannot_reopen_cancelled_booking(self):
        booking = BookingService.admin_create_booking(self.user.id, self.showtime.id, self.seat_ids)
        BookingService.admin_update_status(booking.id, 'CANCELLED')

        with self.assertRaises(InvalidOperation):
            BookingService.admin_update_status(booking.id, 'CONFIRMED')

    def test_admin_list_filters_by_user(self):
        BookingService.admin_create_booking(self.user.id, self.showtime.id, self.seat_ids[:1])
        other = make_user('other@example.com')
        BookingService.admin_create_booking(other.id, self.showtime.id, self.seat_ids[1:])

        bookings = BookingService.admin_list({'user_id': str(other.id)})

        self.assertEqual([booking.user_id for booking in bookings], [other.id])

    def test_booking_with_completed_payment_cannot_be_deleted(self):
        booking = BookingService.create_booking(self.user.id, self.showtime.id, self.seat_ids)
        self.pay(booking)

        with self.assertRaises(InvalidOperation):
            BookingService.admin_delete(booking.id)

class BookingAPITests(MockGatewayMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = Client()
        self.user = make_user()
        self.showtime = make_showtime()
        self.seat_ids = list(self.showtime.hall.seats.values_list('id', flat=True)[:2])

    def post(self, url, payload, user=None):
        return self.client.post(
            url, data=json.dumps(payload), content_type='application/json', **auth_header(user or self.user)
        )

    def test_requires_bearer_token(self):
        response = self.client.get('/api/bookings')

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error']['code'], 'UNAUTHORIZED')

    def test_full_booking_flow(self):
        response = self.post('/api/bookings', {'showtime_id': self.showtime.id, 'seat_ids': self.seat_ids})
        self.assertEqual(response.status_code, 201)
        booking_id = response.json()['id']

        response = self.post('/api/payments/intent', {'booking_id': booking_id, 'amount': '456.00', 'currency': 'INR'})
        self.assertEqual(response.status_code, 201)
        intent = response.json()
        self.assertEqual(intent['amount_minor'], 45600)

        response = self.post('/api/payments/confirm', {
            'booking_id': booking_id,
            'payment_intent_id': intent['payment_intent_id'],
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['booking']['status'], 'CONFIRMED')

        response = self.client.get('/api/tickets', **auth_header(self.user))
        self.assertEqual(response.json()['total_count'], 2)

    def test_non_finite_amount_is_bad_request(self):
        booking = BookingService.create_booking(self.user.id, self.showtime.id, self.seat_ids)

        response = self.post('/api/payments/intent', {'booking_id': booking.id, 'amount': 'NaN', 'currency': 'INR'})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['code'], 'BAD_REQUEST')

    def test_seat_conflict_returns_409(self):
        self.post('/api/bookings', {'showtime_id': self.showtime.id, 'seat_ids': self.seat_ids})
        other = make_user('other@example.com')

        response = self.post('/api/bookings', {'showtime_id': self.showtime.id, 'seat_ids': self.seat_ids}, other)

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error']['code'], 'CONFLICT')

    def test_other_users_booking_is_forbidden(self):
        booking = BookingService.create_booking(self.user.id, self.showtime.id, self.seat_ids)
        other = make_user('other@example.com')

        response = self.client.get(f'/api/bookings/{booking.id}', **auth_header(other))

        self.assertEqual(response.status_code, 403)

    def test_missing_booking_is_404(self):
        response = self.client.get('/api/bookings/9999', **auth_header(self.user))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error']['code'], 'NOT_FOUND')

    def test_list_paging_falls_back_on_invalid_values(self):
        BookingService.create_booking(self.user.id, self.showtime.id, self.seat_ids)

        response = self.client.get('/api/bookings?page=0&page_size=5000', **auth_header(self.user))

        body = response.json()
        self.assertEqual(body['page'], 1)
        self.assertEqual(body['page_size'], 10)
        self.assertEqual(body['total_count'], 1)

    def test_cancel_via_delete(self):
        booking = BookingService.create_booking(self.user.id, self.showtime.id, self.seat_ids)

        response = self.client.delete(f'/api/bookings/{booking.id}', **auth_header(self.user))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'CANCELLED')

class MigrationTests(TestCase):

    def test_models_match_committed_migrations(self):
        out = StringIO()

        call_command('makemigrations', 'accounts', 'movies', 'bookings', check=True, dry_run=True, stdout=out)

        self.assertIn('No changes detected', out.getvalue())
