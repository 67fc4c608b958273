import logging

from celery import shared_task
from django.db import transaction

from accounts.email_utils import send_templated_email, display_name
from accounts.models import UserProfile

logger = logging.getLogger(__name__)

def send_email_safe(task_func, *args, **kwargs):
    """Runs an email task inline. Failures are logged and never reach the caller."""
    try:
        logger.info(f"📧 Sending email synchronously: {task_func.__name__} with args: {args}")
        result = task_func(*args, **kwargs)
        logger.info(f"✅ 📧 Email task finished: {task_func.__name__}. Result: {result}")
        return result
    except Exception as e:
        logger.error(
            f"❌ 📧 ERROR sending email: {task_func.__name__} | "
            f"{type(e).__name__}: {str(e)} | Args: {args}",
            exc_info=True
        )
        return None

def _booking_context(booking):
    showtime = booking.showtime
    return {
        'booking': booking,
        'user': booking.user,
        'username': display_name(booking.user),
        'movie': showtime.movie,
        'showtime': showtime,
        'hall': showtime.hall,
        'branch': showtime.hall.branch,
        'seats': booking.get_seat_labels(),
    }

def _load_booking(booking_id):
    from .models import Booking
    return Booking.objects.with_details().get(id=booking_id)

@shared_task
def send_booking_confirmation_email(booking_id):
    from .models import Booking

    logger.info(f"🔄 [CONFIRMATION_EMAIL] Processing confirmation email for booking_id={booking_id}")
    with transaction.atomic():
        booking = Booking.objects.select_for_update().get(id=booking_id)

        if booking.status != Booking.CONFIRMED:
            logger.warning(
                f"⏭️  SKIPPED: Confirmation email for {booking.booking_number} - "
                f"Status is {booking.status}, not CONFIRMED"
            )
            return "Email not sent - booking not confirmed"

        if booking.confirmation_email_sent:
            logger.info(
                f"⏭️  SKIPPED: Confirmation email for {booking.booking_number} - "
                f"Already sent (idempotency check)"
            )
            return "Email already sent - skipping"

        booking.confirmation_email_sent = True
        booking.save(update_fields=['confirmation_email_sent'])

    booking = _load_booking(booking_id)
    context = _booking_context(booking)
    context['tickets'] = booking.tickets.select_related('seat')

    send_templated_email(
        f"Booking Confirmation - {booking.showtime.movie.name} 🎟️",
        'bookings/booking_confirmation',
        context,
        booking.user.email,
    )

    logger.info(f"✅ 📧 CONFIRMATION EMAIL SENT | Booking: {booking.booking_number} | To: {booking.user.email}")
    return f"Email sent successfully to {booking.user.email}"

@shared_task
def send_booking_cancellation_email(booking_id, refund_amount=None):

    booking = _load_booking(booking_id)
    context = _booking_context(booking)
    context['refunded'] = refund_amount is not None
    context['refund_amount'] = refund_amount

    send_templated_email(
        f"Booking Cancelled - {booking.showtime.movie.name}",
        'bookings/booking_cancellation',
        context,
        booking.user.email,
    )

    logger.info(f"✅ 📧 CANCELLATION EMAIL SENT | Booking: {booking.booking_number} | To: {booking.user.email}")
    return f"Email sent successfully to {booking.user.email}"

@shared_task
def send_payment_success_email(payment_id):
    from .models import BookingPayment

    payment = BookingPayment.objects.select_related('booking').get(id=payment_id)
    booking = _load_booking(payment.booking_id)
    context = _booking_context(booking)
    context['payment'] = payment

    send_templated_email(
        f"Payment Successful - Booking #{booking.id} ✅",
        'bookings/payment_success',
        context,
        booking.user.email,
    )

    logger.info(f"✅ 📧 PAYMENT EMAIL SENT | Booking: {booking.booking_number} | To: {booking.user.email}")
    return f"Email sent successfully to {booking.user.email}"

@shared_task
def send_showtime_reminder_email(booking_id):
    from .models import Booking

    with transaction.atomic():
        booking = Booking.objects.select_for_update().get(id=booking_id)
        if booking.reminder_email_sent:
            logger.info(f"⏭️  SKIPPED: Reminder for {booking.booking_number} - already sent")
            return "Reminder already sent - skipping"
        booking.reminder_email_sent = True
        booking.save(update_fields=['reminder_email_sent'])

    booking = _load_booking(booking_id)

    if not UserProfile.for_user(booking.user).is_email_confirmed:
        logger.info(f"⏭️  SKIPPED: Reminder for {booking.booking_number} - email not confirmed")
        return "Reminder not sent - email not confirmed"

    send_templated_email(
        f"Reminder: {booking.showtime.movie.name} starts soon ⏰",
        'bookings/showtime_reminder',
        _booking_context(booking),
        booking.user.email,
    )

    logger.info(f"✅ 📧 REMINDER EMAIL SENT | Booking: {booking.booking_number} | To: {booking.user.email}")
    return f"Reminder sent to {booking.user.email}"
