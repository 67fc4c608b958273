import json
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import TestCase, Client
from django.utils import timezone

from accounts.models import UserProfile
from accounts.tokens import create_access_token
from bookings.models import Booking, BookingSeat
from movies.models import Movie
from movies.theater_models import Branch, Hall, Showtime

from .dashboard import DashboardService, percent_change

class PercentChangeTests(TestCase):

    def test_zero_previous_is_zero(self):
        self.assertEqual(percent_change(10, 0), 0.0)

    def test_rounded_change(self):
        self.assertEqual(percent_change(150, 120), 25.0)
        self.assertEqual(percent_change(1, 3), -66.67)

class DashboardServiceTests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(username='fan@example.com', email='fan@example.com', password='x')
        movie = Movie.objects.create(name='M', duration=90, release_date=timezone.now().date(), status='ACTIVE')
        branch = Branch.objects.create(name='B', location='L')
        self.hall = Hall.objects.create(branch=branch, hall_number='1', hall_type='VIP')
        self.hall.regenerate_seats()
        self.showtime = Showtime.objects.create(
            movie=movie, hall=self.hall, start_time=timezone.now() - timedelta(days=1), price=10
        )

    def book(self, amount, status=Booking.CONFIRMED, days_ago=0, seats=1):
        booking = Booking.objects.create(
            user=self.user, showtime=self.showtime, total_amount=Decimal(amount), status=status
        )
        Booking.objects.filter(id=booking.id).update(created_at=timezone.now() - timedelta(days=days_ago))
        for seat in self.hall.seats.exclude(booking_seats__isnull=False)[:seats]:
            BookingSeat.objects.create(booking=booking, seat=seat, price=10)
        return booking

    def test_summary_compares_periods(self):
        self.book('300.00', days_ago=1, seats=6)
        self.book('100.00', days_ago=40)
        self.book('999.00', status=Booking.CANCELLED, days_ago=2)

        summary = DashboardService.summary()

        self.assertEqual(summary['revenue']['current'], '300.00')
        self.assertEqual(summary['revenue']['previous'], '100.00')
        self.assertEqual(summary['revenue']['percent_change'], 200.0)
        self.assertEqual(summary['bookings']['current'], 2)
        self.assertEqual(summary['active_users']['current'], 1)
        self.assertEqual(summary['occupancy']['current'], 29.17)

    def test_summary_is_cached(self):
        first = DashboardService.summary()
        self.book('50.00')

        self.assertEqual(DashboardService.summary(), first)

    def test_monthly_revenue_keys(self):
        self.book('80.00')

        months = DashboardService.monthly_revenue(6)

        self.assertEqual(len(months), 6)
        current_key = timezone.localtime().strftime('%Y-%m')
        self.assertEqual(list(months)[-1], current_key)
        self.assertEqual(months[current_key], '80.00')

    def test_weekly_bookings_covers_seven_days(self):
        self.book('10.00')

        days = DashboardService.weekly_bookings()

        self.assertEqual(len(days), 7)
        self.assertEqual(days[timezone.localtime().strftime('%a')], 1)

class AdminAPITests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = Client()
        self.admin = User.objects.create_user(username='admin@example.com', email='admin@example.com', password='x')
        profile = UserProfile.for_user(self.admin)
        profile.role = 'ADMIN'
        profile.save()
        token, _ = create_access_token(self.admin, 'ADMIN')
        self.auth = {'HTTP_AUTHORIZATION': f'Bearer {token}'}

    def send(self, method, url, payload=None):
        return getattr(self.client, method)(
            url, data=json.dumps(payload or {}), content_type='application/json', **self.auth
        )

    def test_venue_and_showtime_management(self):
        branch = self.send('post', '/api/admin/branches', {'name': 'Central', 'location': 'Market Sq'}).json()
        hall = self.send('post', '/api/admin/halls', {
            'branch_id': branch['id'], 'hall_number': 'A', 'hall_type': 'SCREEN_X',
        })
        self.assertEqual(hall.status_code, 201)
        self.assertEqual(len(hall.json()['seats']), 56)

        movie = self.send('post', '/api/admin/movies', {
            'name': 'Heat', 'duration': 170, 'release_date': '1995-12-15', 'status': 'ACTIVE',
        }).json()
        start = (timezone.now() + timedelta(days=3)).isoformat()
        showtime = self.send('post', '/api/admin/showtimes', {
            'movie_id': movie['id'], 'hall_id': hall.json()['id'], 'start_time': start, 'price': '9.50',
        })
        self.assertEqual(showtime.status_code, 201)

        clash = self.send('post', '/api/admin/showtimes', {
            'movie_id': movie['id'], 'hall_id': hall.json()['id'], 'start_time': start, 'price': '9.50',
        })
        self.assertEqual(clash.status_code, 409)

        response = self.send('delete', f"/api/admin/branches/{branch['id']}")
        self.assertEqual(response.status_code, 400)

    def test_user_flags(self):
        user = User.objects.create_user(username='u@example.com', email='u@example.com', password='x')

        response = self.send('post', f'/api/admin/users/{user.id}/deactivate')
        self.assertFalse(response.json()['is_active'])

        response = self.send('post', f'/api/admin/users/{user.id}/deactivate')
        self.assertEqual(response.status_code, 409)

        response = self.send('post', f'/api/admin/users/{user.id}/confirm-email')
        self.assertTrue(response.json()['is_email_confirmed'])

    def test_dashboard_routes(self):
        self.assertEqual(self.client.get('/api/admin/dashboard', **self.auth).status_code, 200)
        self.assertEqual(len(self.client.get('/api/admin/dashboard/weekly-bookings', **self.auth).json()['days']), 7)
        months = self.client.get('/api/admin/dashboard/monthly-revenue?months=3', **self.auth).json()['months']
        self.assertEqual(len(months), 3)

    def test_check_qr_unknown_token(self):
        response = self.send('post', '/api/admin/tickets/check-qr', {'qr_token': 'missing'})

        self.assertEqual(response.json(), {'is_found': False, 'message': 'Ticket not found.'})
