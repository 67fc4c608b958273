import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'cinemaverse.settings')

app = Celery('cinemaverse')
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()

app.conf.beat_schedule = {
    'expire-pending-bookings-every-minute': {
        'task': 'bookings.tasks.expire_pending_bookings',
        'schedule': 60.0,  # Every minute
    },
    'send-showtime-reminders': {
        'task': 'bookings.tasks.send_showtime_reminders',
        'schedule': 1200.0,  # Every 20 minutes, matches the reminder window width
    },
}
