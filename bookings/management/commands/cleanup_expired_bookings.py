from django.core.management.base import BaseCommand
from django.utils import timezone

from bookings.models import Booking
from bookings.services import BookingService

class Command(BaseCommand):
    help = 'Expire PENDING bookings whose seat hold has lapsed'

    def handle(self, *args, **options):
        count = Booking.objects.filter(status=Booking.PENDING, expires_at__lt=timezone.now()).count()

        if count == 0:
            self.stdout.write(
                self.style.SUCCESS('✅ No expired bookings to cleanup')
            )
            return

        self.stdout.write(
            self.style.WARNING(f'⏰ Found {count} expired PENDING bookings. Cleaning up...')
        )

        released = BookingService.expire_pending_bookings()

        self.stdout.write(
            self.style.SUCCESS(f'✅ Cleanup complete. Expired {released} bookings.')
        )
