from datetime import timedelta
from string import ascii_uppercase

from django.db import models
from django.utils import timezone

# hall type -> (row count, seat columns); aisles are the skipped column numbers
HALL_LAYOUTS = {
    'TWO_D': (10, list(range(1, 5)) + list(range(7, 11))),
    'THREE_D': (9, list(range(1, 5)) + list(range(9, 13))),
    'IMAX': (7, list(range(1, 6)) + list(range(11, 15))),
    'SCREEN_X': (7, list(range(2, 6)) + list(range(10, 14))),
    'VIP': (6, [1, 2, 9, 10]),
}

def layout_capacity(hall_type):
    rows, columns = HALL_LAYOUTS[hall_type]
    return rows * len(columns)

def layout_seat_labels(hall_type):

    rows, columns = HALL_LAYOUTS[hall_type]
    return [f"{ascii_uppercase[row]}{column}" for row in range(rows) for column in columns]

class Branch(models.Model):
    name = models.CharField(max_length=200, unique=True)
    location = models.CharField(max_length=300)

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name}, {self.location}"

    class Meta:
        verbose_name_plural = 'branches'
        ordering = ['name']

class Hall(models.Model):

    HALL_TYPES = (
        ('TWO_D', '2D'),
        ('THREE_D', '3D'),
        ('IMAX', 'IMAX'),
        ('SCREEN_X', 'ScreenX'),
        ('VIP', 'VIP'),
    )

    HALL_STATUS = (
        ('AVAILABLE', 'Available'),
        ('MAINTENANCE', 'Under Maintenance'),
        ('CLOSED', 'Closed'),
    )

    branch = models.ForeignKey(Branch, on_delete=models.CASCADE, related_name='halls')
    hall_number = models.CharField(max_length=20)

    hall_type = models.CharField(max_length=20, choices=HALL_TYPES, default='TWO_D')
    status = models.CharField(max_length=20, choices=HALL_STATUS, default='AVAILABLE', db_index=True)

    capacity = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.branch.name} - Hall {self.hall_number} [{self.get_hall_type_display()}]"

    def is_bookable(self):
        return self.status == 'AVAILABLE'

    def regenerate_seats(self):
        """Replaces the hall's seats with the layout of its current type."""
        self.seats.all().delete()
        Seat.objects.bulk_create([
            Seat(hall=self, label=label) for label in layout_seat_labels(self.hall_type)
        ])
        self.capacity = layout_capacity(self.hall_type)
        self.save(update_fields=['capacity'])

    class Meta:
        ordering = ['branch__name', 'hall_number']
        constraints = [
            models.UniqueConstraint(fields=['branch', 'hall_number'], name='unique_hall_number_per_branch'),
        ]

class Seat(models.Model):
    hall = models.ForeignKey(Hall, on_delete=models.CASCADE, related_name='seats')
    label = models.CharField(max_length=10)

    def __str__(self):
        return f"{self.label} ({self.hall})"

    class Meta:
        ordering = ['hall_id', 'id']
        constraints = [
            models.UniqueConstraint(fields=['hall', 'label'], name='unique_seat_label_per_hall'),
        ]

class Showtime(models.Model):
    movie = models.ForeignKey('movies.Movie', on_delete=models.CASCADE, related_name='showtimes')
    hall = models.ForeignKey(Hall, on_delete=models.CASCADE, related_name='showtimes')

    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()

    price = models.DecimalField(max_digits=8, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.movie.name} - {self.start_time:%Y-%m-%d %H:%M}"

    def save(self, *args, **kwargs):
        if self.start_time and not self.end_time:
            self.end_time = self.start_time + timedelta(minutes=self.movie.duration)
        super().save(*args, **kwargs)

    def has_started(self):
        return self.start_time <= timezone.now()

    class Meta:
        ordering = ['start_time']
