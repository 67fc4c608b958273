import logging

from django.contrib.auth import authenticate, password_validation
from django.contrib.auth.models import User
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode

from movies.exceptions import (
    AuthenticationFailed, InvalidOperation, InvalidRequest, ResourceNotFound,
)
from movies.utils import parse_bool, parse_choice, parse_date, parse_sort

from .email_utils import AuthEmailService
from .models import UserProfile
from .tokens import create_access_token, decode_access_token, email_verification_token

logger = logging.getLogger(__name__)

USER_SORT_FIELDS = {
    'email': 'email',
    'name': 'first_name',
    'createdat': 'date_joined',
}

PROFILE_TEXT_FIELDS = ('phone_number', 'address', 'city')

def normalize_email(email):
    email = (email or '').strip().lower()
    if not email:
        raise InvalidRequest('Email is required.')
    try:
        validate_email(email)
    except ValidationError:
        raise InvalidRequest('Enter a valid email address.')
    return email

def check_password_strength(password, user=None):
    if not password:
        raise InvalidRequest('Password is required.')
    try:
        password_validation.validate_password(password, user)
    except ValidationError as e:
        raise InvalidRequest(' '.join(e.messages))

def _user_from_uid(uid):
    try:
        user_id = force_str(urlsafe_base64_decode(uid or ''))
        return User.objects.select_related('profile').get(pk=user_id)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        return None

class AuthService:

    @staticmethod
    def register(email, password, first_name='', last_name='', phone_number=''):
        email = normalize_email(email)

        if User.objects.filter(email__iexact=email).exists():
            raise InvalidOperation(f'An account with email "{email}" is already registered.')

        candidate = User(username=email, email=email, first_name=(first_name or '').strip(),
                         last_name=(last_name or '').strip())
        check_password_strength(password, candidate)

        with transaction.atomic():
            candidate.set_password(password)
            candidate.save()
            UserProfile.objects.create(user=candidate, phone_number=(phone_number or '').strip())

        logger.info(f"User registered: {candidate.email} (id={candidate.id})")

        AuthEmailService.send_welcome_email(candidate)
        AuthEmailService.send_verification_email(candidate)
        return candidate

    @staticmethod
    def login(email, password):
        if not email or not password:
            raise InvalidRequest('Email and password are required.')

        user = authenticate(username=email.strip(), password=password)
        if user is None:
            logger.info(f"Failed login attempt for {email}")
            raise AuthenticationFailed('Invalid email or password.')

        profile = UserProfile.for_user(user)
        role = 'ADMIN' if profile.is_admin else profile.role
        token, expires_at = create_access_token(user, role)

        user.last_login = timezone.now()
        user.save(update_fields=['last_login'])
        logger.info(f"User logged in: {user.email}")

        return {
            'access_token': token,
            'token_type': 'Bearer',
            'expires_at': expires_at.isoformat(),
            'user_id': user.id,
            'email': user.email,
            'role': role,
        }

    @staticmethod
    def authenticate_token(token):
        payload = decode_access_token(token)
        try:
            user = User.objects.select_related('profile').get(pk=int(payload['sub']))
        except (User.DoesNotExist, ValueError):
            raise AuthenticationFailed('Invalid access token.')

        if not user.is_active:
            raise AuthenticationFailed('This account has been deactivated.')
        return user

    @staticmethod
    def verify_email(uid, token):
        user = _user_from_uid(uid)
        if user is None:
            raise InvalidRequest('Invalid verification link.')

        profile = UserProfile.for_user(user)
        if profile.is_email_confirmed:
            logger.info(f"Email for {user.email} already confirmed. Skipping.")
            return user

        if not email_verification_token.check_token(user, token):
            raise InvalidRequest('Verification link is invalid or has expired.')

        profile.mark_email_confirmed()
        logger.info(f"Email confirmed for {user.email}")
        return user

    @staticmethod
    def resend_verification(email):
        email = normalize_email(email)
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            logger.info(f"Verification resend requested for unknown email {email}")
            return

        if UserProfile.for_user(user).is_email_confirmed:
            raise InvalidOperation('Email is already confirmed.')

        AuthEmailService.send_verification_email(user)

    @staticmethod
    def forgot_password(email):
        email = normalize_email(email)
        user = User.objects.filter(email__iexact=email, is_active=True).first()
        if user is None:
            logger.info(f"Password reset requested for unknown email {email}")
            return

        AuthEmailService.send_password_reset_email(user)

    @staticmethod
    def reset_password(uid, token, new_password):
        user = _user_from_uid(uid)
        if user is None or not default_token_generator.check_token(user, token):
            raise InvalidRequest('Password reset link is invalid or has expired.')

        check_password_strength(new_password, user)
        user.set_password(new_password)
        user.save(update_fields=['password'])
        logger.info(f"Password reset completed for {user.email}")
        return user

class UserService:

    @staticmethod
    def get_user(user_id):
        try:
            user = User.objects.select_related('profile').get(pk=user_id)
        except User.DoesNotExist:
            raise ResourceNotFound(f'User {user_id} not found.')
        UserProfile.for_user(user)
        return user

    @staticmethod
    def _apply_profile_fields(user, profile, data):
        for field in ('first_name', 'last_name'):
            if field in data:
                setattr(user, field, (data.get(field) or '').strip())

        for field in PROFILE_TEXT_FIELDS:
            if field in data:
                setattr(profile, field, (data.get(field) or '').strip())

        if 'date_of_birth' in data:
            date_of_birth = parse_date(data.get('date_of_birth'), 'date_of_birth')
            if date_of_birth and date_of_birth >= timezone.now().date():
                raise InvalidRequest('date_of_birth must be in the past.')
            profile.date_of_birth = date_of_birth

        if data.get('gender'):
            profile.gender = parse_choice(data['gender'], 'gender', UserProfile.GENDER_CHOICES)

    @staticmethod
    def update_profile(user_id, data):
        user = UserService.get_user(user_id)
        profile = user.profile

        UserService._apply_profile_fields(user, profile, data)

        with transaction.atomic():
            user.save()
            profile.save()

        logger.info(f"Profile updated for {user.email}")
        return user

    @staticmethod
    def change_password(user_id, current_password, new_password):
        user = UserService.get_user(user_id)

        if not current_password or not user.check_password(current_password):
            raise AuthenticationFailed('Current password is incorrect.')
        if not new_password:
            raise InvalidRequest('New password is required.')
        if current_password == new_password:
            raise InvalidRequest('New password must be different from the current password.')

        check_password_strength(new_password, user)
        user.set_password(new_password)
        user.save(update_fields=['password'])
        logger.info(f"Password changed for {user.email}")
        return user

    # Admin operations

    @staticmethod
    def list_users(params):
        users = User.objects.select_related('profile')

        search = (params.get('search') or '').strip()
        if search:
            users = users.filter(
                Q(email__icontains=search) |
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search)
            )

        role = parse_choice(params.get('role'), 'role', UserProfile.ROLE_CHOICES)
        if role:
            users = users.filter(profile__role=role)

        is_active = parse_bool(params.get('is_active'), 'is_active')
        if is_active is not None:
            users = users.filter(is_active=is_active)

        is_email_confirmed = parse_bool(params.get('is_email_confirmed'), 'is_email_confirmed')
        if is_email_confirmed is not None:
            users = users.filter(profile__is_email_confirmed=is_email_confirmed)

        ordering = parse_sort(params.get('sort_by'), params.get('sort_order'), USER_SORT_FIELDS, 'createdat')
        return users.order_by(ordering, 'id')

    @staticmethod
    def create_user(data):
        email = normalize_email(data.get('email'))
        if User.objects.filter(email__iexact=email).exists():
            raise InvalidOperation(f'An account with email "{email}" is already registered.')

        role = parse_choice(data.get('role'), 'role', UserProfile.ROLE_CHOICES) or 'USER'
        user = User(username=email, email=email, is_staff=(role == 'ADMIN'))
        profile = UserProfile(role=role)
        UserService._apply_profile_fields(user, profile, data)

        password = data.get('password')
        check_password_strength(password, user)

        with transaction.atomic():
            user.set_password(password)
            user.save()
            profile.user = user
            if parse_bool(data.get('is_email_confirmed'), 'is_email_confirmed'):
                profile.is_email_confirmed = True
                profile.email_confirmed_at = timezone.now()
            profile.save()

        logger.info(f"Admin created user {user.email} with role {role}")
        return user

    @staticmethod
    def update_user(user_id, data):
        user = UserService.get_user(user_id)
        profile = user.profile

        if 'email' in data:
            email = normalize_email(data.get('email'))
            if User.objects.filter(email__iexact=email).exclude(pk=user.pk).exists():
                raise InvalidOperation(f'An account with email "{email}" is already registered.')
            user.email = email
            user.username = email

        if data.get('role'):
            profile.role = parse_choice(data['role'], 'role', UserProfile.ROLE_CHOICES)
            user.is_staff = profile.role == 'ADMIN'

        UserService._apply_profile_fields(user, profile, data)

        with transaction.atomic():
            user.save()
            profile.save()

        logger.info(f"Admin updated user {user.email}")
        return user

    @staticmethod
    def delete_user(user_id):
        user = UserService.get_user(user_id)
        if user.bookings.exists():
            raise InvalidOperation('User has existing bookings. Deactivate the user instead.')

        email = user.email
        user.delete()
        logger.info(f"Admin deleted user {email}")

    @staticmethod
    def set_active(user_id, is_active):
        user = UserService.get_user(user_id)
        if user.is_active == is_active:
            state = 'active' if is_active else 'inactive'
            raise InvalidOperation(f'User is already {state}.')

        user.is_active = is_active
        user.save(update_fields=['is_active'])
        logger.info(f"User {user.email} {'activated' if is_active else 'deactivated'}")
        return user

    @staticmethod
    def set_email_confirmed(user_id, confirmed):
        user = UserService.get_user(user_id)
        if confirmed:
            user.profile.mark_email_confirmed()
        else:
            user.profile.mark_email_unconfirmed()
        logger.info(f"Email for {user.email} marked {'confirmed' if confirmed else 'unconfirmed'} by admin")
        return user
