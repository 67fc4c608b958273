from django.db import models
from django.contrib.auth.models import User
from django.utils import timezone

class UserProfile(models.Model):

    ROLE_CHOICES = (
        ('USER', 'User'),
        ('ADMIN', 'Admin'),
    )

    GENDER_CHOICES = (
        ('MALE', 'Male'),
        ('FEMALE', 'Female'),
        ('OTHER', 'Other'),
        ('UNSPECIFIED', 'Prefer not to say'),
    )

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='USER', db_index=True)

    phone_number = models.CharField(max_length=20, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=20, choices=GENDER_CHOICES, default='UNSPECIFIED')

    is_email_confirmed = models.BooleanField(default=False)
    email_confirmed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'accounts_userprofile'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.email}'s Profile"

    @classmethod
    def for_user(cls, user):
        profile, _ = cls.objects.get_or_create(user=user)
        return profile

    @property
    def is_admin(self):
        return self.role == 'ADMIN' or self.user.is_staff

    def mark_email_confirmed(self):
        self.is_email_confirmed = True
        self.email_confirmed_at = timezone.now()
        self.save(update_fields=['is_email_confirmed', 'email_confirmed_at', 'updated_at'])

    def mark_email_unconfirmed(self):
        self.is_email_confirmed = False
        self.email_confirmed_at = None
        self.save(update_fields=['is_email_confirmed', 'email_confirmed_at', 'updated_at'])
