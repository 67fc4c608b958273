import logging

from celery import shared_task

logger = logging.getLogger(__name__)

@shared_task
def expire_pending_bookings():
    from .services import BookingService

    released_count = BookingService.expire_pending_bookings()
    return f"Expired {released_count} pending bookings"

@shared_task
def send_showtime_reminders():
    from .email_utils import send_email_safe, send_showtime_reminder_email
    from .services import upcoming_reminder_bookings

    sent_count = 0
    for booking_id in upcoming_reminder_bookings().values_list('id', flat=True):
        if send_email_safe(send_showtime_reminder_email, booking_id):
            sent_count += 1

    logger.info(f"⏰ Showtime reminder run complete: {sent_count} sent")
    return f"Sent {sent_count} showtime reminders"
