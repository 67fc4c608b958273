from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode
import logging

from .tokens import email_verification_token

logger = logging.getLogger(__name__)

def send_templated_email(subject, template_name, context, recipient):
    """Renders ``<template_name>.txt`` and ``.html`` and sends them as one message."""
    context = {'site_url': settings.SITE_URL, **context}

    text_message = render_to_string(f'{template_name}.txt', context)
    html_message = render_to_string(f'{template_name}.html', context)

    email = EmailMultiAlternatives(
        subject=subject,
        body=text_message,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[recipient]
    )
    email.attach_alternative(html_message, "text/html")
    return email.send(fail_silently=False)

def display_name(user):
    return user.first_name or user.email

class AuthEmailService:

    @staticmethod
    def send_welcome_email(user):
        try:
            subject = f"🎬 Welcome to CinemaVerse, {display_name(user)}!"
            result = send_templated_email(subject, 'auth/welcome_email', {
                'user': user,
                'username': display_name(user),
                'signup_date': user.date_joined,
            }, user.email)

            logger.info(f"✅ Welcome email sent to {user.email} | Result: {result}")
            return True

        except Exception as e:
            logger.error(f"❌ Failed to send welcome email to {user.email}: {str(e)}", exc_info=True)
            return False

    @staticmethod
    def send_verification_email(user):
        try:
            uid = urlsafe_base64_encode(force_bytes(user.pk))
            token = email_verification_token.make_token(user)
            verify_link = f"{settings.SITE_URL}/verify-email?uid={uid}&token={token}"

            result = send_templated_email("📧 Confirm your CinemaVerse email", 'auth/verify_email', {
                'user': user,
                'username': display_name(user),
                'uid': uid,
                'token': token,
                'verify_link': verify_link,
            }, user.email)

            logger.info(f"✅ Verification email sent to {user.email} | Result: {result}")
            return True

        except Exception as e:
            logger.error(f"❌ Failed to send verification email to {user.email}: {str(e)}", exc_info=True)
            return False

    @staticmethod
    def send_password_reset_email(user):
        try:
            token = default_token_generator.make_token(user)
            uid = urlsafe_base64_encode(force_bytes(user.pk))
            reset_link = f"{settings.SITE_URL}/reset-password?uid={uid}&token={token}"

            result = send_templated_email("🔐 Reset Your Password - CinemaVerse", 'auth/password_reset_email', {
                'user': user,
                'username': display_name(user),
                'uid': uid,
                'token': token,
                'reset_link': reset_link,
                'expiry_hours': settings.PASSWORD_RESET_TIMEOUT // 3600,
            }, user.email)

            logger.info(f"✅ Password reset email sent to {user.email} | Result: {result}")
            return True

        except Exception as e:
            logger.error(f"❌ Failed to send password reset email to {user.email}: {str(e)}", exc_info=True)
            return False
