import secrets
import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.db import models
from django.db.models import Q
from django.utils import timezone

from movies.exceptions import InvalidOperation
from movies.theater_models import Showtime, Seat

BOOKING_NUMBER_ATTEMPTS = 10

class BookingQuerySet(models.QuerySet):

    def holding_seats(self, now=None):
        """Bookings that keep their seats: confirmed, or pending and not yet expired."""
        now = now or timezone.now()
        return self.filter(
            Q(status=Booking.CONFIRMED) |
            Q(status=Booking.PENDING, expires_at__gt=now)
        )

    def with_details(self):
        return self.select_related(
            'user', 'showtime__movie', 'showtime__hall__branch'
        ).prefetch_related('booking_seats__seat')

class Booking(models.Model):
    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    CANCELLED = 'CANCELLED'
    EXPIRED = 'EXPIRED'

    BOOKING_STATUS = (
        (PENDING, 'Pending Payment'),
        (CONFIRMED, 'Confirmed'),
        (CANCELLED, 'Cancelled'),
        (EXPIRED, 'Expired'),
    )

    booking_number = models.CharField(max_length=20, unique=True, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='bookings')
    showtime = models.ForeignKey(Showtime, on_delete=models.PROTECT, related_name='bookings')

    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=BOOKING_STATUS, default=PENDING, db_index=True)

    confirmation_email_sent = models.BooleanField(default=False, help_text="Track if confirmation email was sent")
    reminder_email_sent = models.BooleanField(default=False, help_text="Track if showtime reminder was sent")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.booking_number} - {self.user.email}"

    def save(self, *args, **kwargs):
        if not self.booking_number:
            self.booking_number = Booking.generate_booking_number()

        if self.status == self.PENDING and not self.expires_at:
            timeout = getattr(settings, 'SEAT_RESERVATION_TIMEOUT', 720)
            self.expires_at = timezone.now() + timedelta(seconds=timeout)

        super().save(*args, **kwargs)

    @classmethod
    def generate_booking_number(cls):
        """Draws ``BOOK-YYYYMMDD-nnnnn`` numbers until one is unused."""
        date_str = timezone.now().strftime('%Y%m%d')
        for _ in range(BOOKING_NUMBER_ATTEMPTS):
            candidate = f"BOOK-{date_str}-{str(uuid.uuid4().int)[:5]}"
            if not cls.objects.filter(booking_number=candidate).exists():
                return candidate
        raise InvalidOperation('Could not allocate a booking number. Please try again.')

    def get_seat_labels(self):
        return [booking_seat.seat.label for booking_seat in self.booking_seats.all()]

    def get_seats_display(self):
        return ", ".join(self.get_seat_labels())

    def is_expired(self):

        if self.status == self.PENDING and self.expires_at:
            return timezone.now() > self.expires_at
        return False

class BookingSeat(models.Model):
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='booking_seats')
    seat = models.ForeignKey(Seat, on_delete=models.PROTECT, related_name='booking_seats')
    price = models.DecimalField(max_digits=8, decimal_places=2)

    class Meta:
        ordering = ['seat_id']
        constraints = [
            models.UniqueConstraint(fields=['booking', 'seat'], name='unique_seat_per_booking'),
        ]

    def __str__(self):
        return f"{self.booking.booking_number} - {self.seat.label}"

class BookingPayment(models.Model):
    PENDING = 'PENDING'
    COMPLETED = 'COMPLETED'
    FAILED = 'FAILED'
    REFUNDED = 'REFUNDED'

    PAYMENT_STATUS = (
        (PENDING, 'Pending'),
        (COMPLETED, 'Completed'),
        (FAILED, 'Failed'),
        (REFUNDED, 'Refunded'),
    )

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default='INR')
    payment_method = models.CharField(max_length=30, default='card')

    # Razorpay order id; the intent the client pays against
    payment_intent_id = models.CharField(max_length=100, unique=True)
    gateway_payment_id = models.CharField(max_length=100, blank=True, db_index=True)

    status = models.CharField(max_length=20, choices=PAYMENT_STATUS, default=PENDING, db_index=True)
    gateway_response = models.JSONField(default=dict, blank=True)

    transaction_date = models.DateTimeField(default=timezone.now)
    refunded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-transaction_date']

    def __str__(self):
        return f"{self.payment_intent_id} - {self.status}"

class Ticket(models.Model):
    ACTIVE = 'ACTIVE'
    USED = 'USED'
    CANCELLED = 'CANCELLED'

    TICKET_STATUS = (
        (ACTIVE, 'Active'),
        (USED, 'Used'),
        (CANCELLED, 'Cancelled'),
    )

    ticket_number = models.CharField(max_length=30, unique=True, editable=False)
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='tickets')
    seat = models.ForeignKey(Seat, on_delete=models.PROTECT, related_name='tickets')
    price = models.DecimalField(max_digits=8, decimal_places=2)
    status = models.CharField(max_length=20, choices=TICKET_STATUS, default=ACTIVE, db_index=True)
    qr_token = models.CharField(max_length=64, unique=True, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['booking_id', 'seat_id']
        constraints = [
            models.UniqueConstraint(fields=['booking', 'seat'], name='unique_ticket_per_booked_seat'),
        ]

    def __str__(self):
        return f"{self.ticket_number} - {self.seat.label}"

    def save(self, *args, **kwargs):
        if not self.ticket_number:
            date_str = timezone.now().strftime('%Y%m%d')
            self.ticket_number = f"TK-{date_str}-{secrets.token_hex(3).upper()}"
        if not self.qr_token:
            self.qr_token = secrets.token_urlsafe(32)
        super().save(*args, **kwargs)
