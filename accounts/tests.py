import json
from datetime import timedelta
from io import StringIO

from django.contrib.auth.models import User
from django.contrib.auth.tokens import default_token_generator
from django.core import mail
from django.core.management import call_command
from django.test import TestCase, Client, override_settings
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from movies.exceptions import AuthenticationFailed, InvalidOperation, InvalidRequest

from .models import UserProfile
from .services import AuthService, UserService
from .tokens import create_access_token, decode_access_token, email_verification_token

PASSWORD = 'Str0ngPass!23'

def uid_for(user):
    return urlsafe_base64_encode(force_bytes(user.pk))

class RegistrationTests(TestCase):

    def test_register_creates_profile_and_sends_emails(self):
        user = AuthService.register('  New.User@Example.com ', PASSWORD, first_name='New')

        self.assertEqual(user.email, 'new.user@example.com')
        profile = UserProfile.objects.get(user=user)
        self.assertEqual(profile.role, 'USER')
        self.assertFalse(profile.is_email_confirmed)

        subjects = [message.subject for message in mail.outbox]
        self.assertEqual(len(subjects), 2)
        self.assertTrue(any('Welcome' in subject for subject in subjects))
        self.assertTrue(any('Confirm' in subject for subject in subjects))

    def test_duplicate_email_is_conflict(self):
        AuthService.register('dup@example.com', PASSWORD)

        with self.assertRaises(InvalidOperation) as ctx:
            AuthService.register('DUP@example.com', PASSWORD)
        self.assertEqual(ctx.exception.get_status_code(), 409)

    def test_weak_password_is_rejected(self):
        with self.assertRaises(InvalidRequest):
            AuthService.register('weak@example.com', '123')

    def test_invalid_email_is_rejected(self):
        with self.assertRaises(InvalidRequest):
            AuthService.register('not-an-email', PASSWORD)

class EmailVerificationTests(TestCase):

    def setUp(self):
        self.user = AuthService.register('verify@example.com', PASSWORD)

    def test_verify_email_with_valid_token(self):
        token = email_verification_token.make_token(self.user)

        AuthService.verify_email(uid_for(self.user), token)

        self.assertTrue(UserProfile.for_user(self.user).is_email_confirmed)

    def test_bad_token_is_rejected(self):
        with self.assertRaises(InvalidRequest):
            AuthService.verify_email(uid_for(self.user), 'bad-token')

        self.assertFalse(UserProfile.for_user(self.user).is_email_confirmed)

    def test_resend_for_confirmed_email_is_conflict(self):
        UserProfile.for_user(self.user).mark_email_confirmed()

        with self.assertRaises(InvalidOperation):
            AuthService.resend_verification('verify@example.com')

    def test_resend_for_unknown_email_is_silent(self):
        mail.outbox = []

        AuthService.resend_verification('nobody@example.com')

        self.assertEqual(mail.outbox, [])

class LoginAndTokenTests(TestCase):

    def setUp(self):
        self.user = AuthService.register('login@example.com', PASSWORD)

    def test_login_returns_bearer_token(self):
        result = AuthService.login('login@example.com', PASSWORD)

        self.assertEqual(result['token_type'], 'Bearer')
        self.assertEqual(result['role'], 'USER')
        self.assertEqual(AuthService.authenticate_token(result['access_token']), self.user)

    def test_login_is_case_insensitive_on_email(self):
        result = AuthService.login('LOGIN@example.com', PASSWORD)

        self.assertEqual(result['user_id'], self.user.id)

    def test_wrong_password(self):
        with self.assertRaises(AuthenticationFailed):
            AuthService.login('login@example.com', 'wrong-password')

    def test_deactivated_user_token_is_rejected(self):
        token, _ = create_access_token(self.user, 'USER')
        UserService.set_active(self.user.id, False)

        with self.assertRaises(AuthenticationFailed):
            AuthService.authenticate_token(token)

    @override_settings(JWT_ACCESS_TOKEN_LIFETIME_MINUTES=-1)
    def test_expired_token_is_rejected(self):
        token, _ = create_access_token(self.user, 'USER')

        with self.assertRaises(AuthenticationFailed):
            decode_access_token(token)

    def test_tampered_token_is_rejected(self):
        token, _ = create_access_token(self.user, 'USER')

        with self.assertRaises(AuthenticationFailed):
            decode_access_token(token[:-2] + 'xx')

class PasswordTests(TestCase):

    def setUp(self):
        self.user = AuthService.register('pw@example.com', PASSWORD)

    def test_change_password(self):
        UserService.change_password(self.user.id, PASSWORD, 'An0ther-Secret!')

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('An0ther-Secret!'))

    def test_change_password_requires_current(self):
        with self.assertRaises(AuthenticationFailed):
            UserService.change_password(self.user.id, 'nope', 'An0ther-Secret!')

    def test_new_password_must_differ(self):
        with self.assertRaises(InvalidRequest):
            UserService.change_password(self.user.id, PASSWORD, PASSWORD)

    def test_reset_password_flow(self):
        mail.outbox = []
        AuthService.forgot_password('pw@example.com')
        self.assertEqual(len(mail.outbox), 1)

        token = default_token_generator.make_token(self.user)
        AuthService.reset_password(uid_for(self.user), token, 'Fresh-Passw0rd!')

        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Fresh-Passw0rd!'))

        with self.assertRaises(InvalidRequest):
            AuthService.reset_password(uid_for(self.user), token, 'Another-Passw0rd!')

class UserAdministrationTests(TestCase):

    def setUp(self):
        self.user = AuthService.register('managed@example.com', PASSWORD, first_name='Managed')

    def test_update_profile_trims_and_validates(self):
        user = UserService.update_profile(self.user.id, {
            'first_name': '  Ada ',
            'city': ' London ',
            'gender': 'female',
            'date_of_birth': '1990-12-10',
        })

        self.assertEqual(user.first_name, 'Ada')
        self.assertEqual(user.profile.city, 'London')
        self.assertEqual(user.profile.gender, 'FEMALE')

        with self.assertRaises(InvalidRequest):
            UserService.update_profile(self.user.id, {'gender': 'robot'})

    def test_set_active_twice_is_conflict(self):
        UserService.set_active(self.user.id, False)

        with self.assertRaises(InvalidOperation) as ctx:
            UserService.set_active(self.user.id, False)
        self.assertEqual(ctx.exception.get_status_code(), 409)

    def test_user_with_bookings_cannot_be_deleted(self):
        from bookings.models import Booking
        from movies.models import Movie
        from movies.theater_models import Branch, Hall, Showtime
        from django.utils import timezone

        movie = Movie.objects.create(name='M', duration=90, release_date=timezone.now().date(), status='ACTIVE')
        hall = Hall.objects.create(branch=Branch.objects.create(name='B', location='L'), hall_number='1')
        showtime = Showtime.objects.create(movie=movie, hall=hall, start_time=timezone.now() + timedelta(days=1), price=5)
        Booking.objects.create(user=self.user, showtime=showtime, total_amount=5)

        with self.assertRaises(InvalidOperation) as ctx:
            UserService.delete_user(self.user.id)
        self.assertIn('Deactivate the user instead', ctx.exception.message)

    def test_list_users_filters(self):
        UserService.create_user({'email': 'boss@example.com', 'password': PASSWORD, 'role': 'admin'})

        admins = UserService.list_users({'role': 'ADMIN'})
        self.assertEqual([user.email for user in admins], ['boss@example.com'])

        confirmed = UserService.list_users({'is_email_confirmed': 'false', 'search': 'managed'})
        self.assertEqual([user.email for user in confirmed], ['managed@example.com'])

    def test_create_admin_command(self):
        out = StringIO()
        call_command('create_admin', email='root@example.com', password=PASSWORD, stdout=out)

        profile = UserProfile.objects.get(user__email='root@example.com')
        self.assertEqual(profile.role, 'ADMIN')
        self.assertTrue(profile.is_email_confirmed)

class AccountAPITests(TestCase):

    def setUp(self):
        self.client = Client()

    def post(self, url, payload, **extra):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json', **extra)

    def test_register_login_and_me(self):
        response = self.post('/api/auth/register', {'email': 'api@example.com', 'password': PASSWORD})
        self.assertEqual(response.status_code, 201)

        response = self.post('/api/auth/login', {'email': 'api@example.com', 'password': PASSWORD})
        self.assertEqual(response.status_code, 200)
        token = response.json()['access_token']

        response = self.client.get('/api/me', HTTP_AUTHORIZATION=f'Bearer {token}')
        self.assertEqual(response.json()['email'], 'api@example.com')
        self.assertFalse(response.json()['is_email_confirmed'])

    def test_bad_login_envelope(self):
        response = self.post('/api/auth/login', {'email': 'ghost@example.com', 'password': 'x'})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {
            'error': {'message': 'Invalid email or password.', 'code': 'UNAUTHORIZED'},
        })

    def test_non_admin_cannot_reach_admin_routes(self):
        user = User.objects.create_user(username='u@example.com', email='u@example.com', password=PASSWORD)
        token, _ = create_access_token(user, 'USER')

        response = self.client.get('/api/admin/users', HTTP_AUTHORIZATION=f'Bearer {token}')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error']['code'], 'FORBIDDEN')
