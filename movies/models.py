from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Avg
from django.utils.text import slugify

from embed_video.fields import EmbedVideoField

class Genre(models.Model):

    name = models.CharField(max_length=100)

    slug = models.SlugField(max_length=100, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['name']

class Movie(models.Model):

    AGE_RATINGS = (
        ('G', 'G - General Audiences'),
        ('PG', 'PG - Parental Guidance'),
        ('PG13', 'PG-13 - Parents Strongly Cautioned'),
        ('R', 'R - Restricted'),
        ('NC17', 'NC-17 - Adults Only'),
        ('AGE18PLUS', '18+'),
    )

    STATUS_CHOICES = (
        ('DRAFT', 'Draft'),
        ('ACTIVE', 'Active'),
        ('ARCHIVED', 'Archived'),
        ('COMING_SOON', 'Coming Soon'),
    )

    name = models.CharField(max_length=200, unique=True)
    slug = models.SlugField(max_length=200, db_index=True)

    description = models.TextField(blank=True)
    duration = models.PositiveIntegerField(help_text="Duration in minutes")
    release_date = models.DateField()

    age_rating = models.CharField(max_length=10, choices=AGE_RATINGS, default='PG')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='DRAFT', db_index=True)

    # Average of review ratings, recomputed by ReviewService
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal('0.00'))

    trailer_url = EmbedVideoField(blank=True)
    language = models.CharField(max_length=50, blank=True)

    genres = models.ManyToManyField(Genre, related_name='movies', blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.release_date.year})"

    def duration_formatted(self):

        hours = self.duration // 60
        minutes = self.duration % 60
        return f"{hours}h {minutes}m"

    def refresh_rating(self):
        average = self.reviews.aggregate(avg=Avg('rating'))['avg']
        self.rating = Decimal(str(round(average, 2))) if average is not None else Decimal('0.00')
        self.save(update_fields=['rating', 'updated_at'])
        return self.rating

    class Meta:
        ordering = ['-release_date', 'name']

class MovieImage(models.Model):
    movie = models.ForeignKey(Movie, on_delete=models.CASCADE, related_name='images')
    image_url = models.URLField(max_length=500)
    caption = models.CharField(max_length=200, blank=True)
    is_poster = models.BooleanField(default=False)
    display_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['display_order', 'id']

    def __str__(self):
        return f"{self.movie.name} image #{self.display_order}"

class MovieCastMember(models.Model):

    ROLE_TYPES = (
        ('ACTOR', 'Actor'),
        ('DIRECTOR', 'Director'),
        ('WRITER', 'Writer'),
        ('PRODUCER', 'Producer'),
        ('CINEMATOGRAPHER', 'Cinematographer'),
        ('COMPOSER', 'Composer'),
        ('OTHER', 'Other'),
    )

    movie = models.ForeignKey(Movie, on_delete=models.CASCADE, related_name='cast_members')
    person_name = models.CharField(max_length=200)
    image_url = models.URLField(max_length=500, blank=True)
    role_type = models.CharField(max_length=20, choices=ROLE_TYPES, default='ACTOR')
    character_name = models.CharField(max_length=200, blank=True)
    display_order = models.PositiveIntegerField(default=0)
    is_lead = models.BooleanField(default=False)

    class Meta:
        ordering = ['display_order', 'id']

    def __str__(self):
        return f"{self.person_name} ({self.get_role_type_display()})"

class Review(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews')
    movie = models.ForeignKey(Movie, on_delete=models.CASCADE, related_name='reviews')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user', 'movie'], name='unique_review_per_user_movie'),
        ]

    def __str__(self):
        return f"{self.user.email} on {self.movie.name}: {self.rating}"

from .theater_models import Branch, Hall, Seat, Showtime  # noqa: E402,F401
