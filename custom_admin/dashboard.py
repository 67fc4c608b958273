import logging
from datetime import timedelta
from decimal import Decimal

from django.core.cache import cache
from django.db.models import Count, Q, Sum
from django.utils import timezone

from bookings.models import Booking
from movies.theater_models import Showtime

logger = logging.getLogger(__name__)

SUMMARY_CACHE_KEY = 'dashboard_summary'
SUMMARY_CACHE_TIMEOUT = 60

PERIOD_DAYS = 30

def percent_change(current, previous):
    if not previous:
        return 0.0
    return round(float((Decimal(str(current)) - Decimal(str(previous))) / Decimal(str(previous)) * 100), 2)

def _kpi(current, previous):
    return {
        'current': current,
        'previous': previous,
        'percent_change': percent_change(current, previous),
    }

def _add_months(day, months):
    month_index = day.year * 12 + day.month - 1 + months
    return day.replace(year=month_index // 12, month=month_index % 12 + 1, day=1)

class DashboardService:

    @staticmethod
    def _revenue(start, end):
        total = Booking.objects.filter(
            status=Booking.CONFIRMED,
            created_at__gte=start,
            created_at__lt=end,
        ).aggregate(Sum('total_amount'))['total_amount__sum']
        return total or Decimal('0.00')

    @staticmethod
    def _booking_count(start, end):
        return Booking.objects.filter(created_at__gte=start, created_at__lt=end).count()

    @staticmethod
    def _active_users(start, end):
        return Booking.objects.filter(
            status=Booking.CONFIRMED,
            user__is_active=True,
            created_at__gte=start,
            created_at__lt=end,
        ).values('user_id').distinct().count()

    @staticmethod
    def _occupancy(start, end):
        """Average share of seats sold per showtime starting in the window, as a percentage."""
        showtimes = Showtime.objects.filter(
            start_time__gte=start,
            start_time__lt=end,
            hall__capacity__gt=0,
        ).annotate(
            booked=Count('bookings__booking_seats', filter=Q(bookings__status=Booking.CONFIRMED)),
        ).values_list('booked', 'hall__capacity')

        rates = [booked / capacity * 100 for booked, capacity in showtimes]
        if not rates:
            return 0.0
        return round(sum(rates) / len(rates), 2)

    @staticmethod
    def summary():
        cached = cache.get(SUMMARY_CACHE_KEY)
        if cached is not None:
            return cached

        now = timezone.now()
        current_start = now - timedelta(days=PERIOD_DAYS)
        previous_start = current_start - timedelta(days=PERIOD_DAYS)

        revenue_now = DashboardService._revenue(current_start, now)
        revenue_before = DashboardService._revenue(previous_start, current_start)

        data = {
            'period_days': PERIOD_DAYS,
            'revenue': _kpi(str(revenue_now), str(revenue_before)),
            'bookings': _kpi(
                DashboardService._booking_count(current_start, now),
                DashboardService._booking_count(previous_start, current_start),
            ),
            'active_users': _kpi(
                DashboardService._active_users(current_start, now),
                DashboardService._active_users(previous_start, current_start),
            ),
            'occupancy': _kpi(
                DashboardService._occupancy(current_start, now),
                DashboardService._occupancy(previous_start, current_start),
            ),
            'generated_at': now.isoformat(),
        }
        data['revenue']['percent_change'] = percent_change(revenue_now, revenue_before)

        cache.set(SUMMARY_CACHE_KEY, data, SUMMARY_CACHE_TIMEOUT)
        logger.info("Dashboard summary recomputed")
        return data

    @staticmethod
    def monthly_revenue(months=6):
        now = timezone.localtime()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        revenue = {}
        for offset in range(months - 1, -1, -1):
            start = _add_months(month_start, -offset)
            end = _add_months(start, 1)
            revenue[start.strftime('%Y-%m')] = str(DashboardService._revenue(start, end))
        return revenue

    @staticmethod
    def weekly_bookings():
        today = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)

        counts = {}
        for offset in range(6, -1, -1):
            start = today - timedelta(days=offset)
            counts[start.strftime('%a')] = DashboardService._booking_count(start, start + timedelta(days=1))
        return counts
