import csv

from django.contrib import admin
from django.http import HttpResponse
from django.utils.html import format_html

from movies.exceptions import ServiceError

from .models import Booking, BookingSeat, BookingPayment, Ticket
from .services import BookingService

class BookingSeatInline(admin.TabularInline):
    model = BookingSeat
    extra = 0
    readonly_fields = ['seat', 'price']

class TicketInline(admin.TabularInline):
    model = Ticket
    extra = 0
    readonly_fields = ['ticket_number', 'seat', 'price', 'status', 'used_at']
    exclude = ['qr_token']

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['booking_number', 'user', 'showtime', 'seat_count', 'total_amount', 'status', 'created_at', 'status_badge']
    list_filter = ['status', 'created_at', 'showtime__movie']
    search_fields = ['booking_number', 'user__email', 'showtime__movie__name']
    actions = ['cancel_bookings', 'export_as_csv']

    readonly_fields = ['booking_number', 'created_at', 'confirmed_at', 'cancelled_at']
    inlines = [BookingSeatInline, TicketInline]

    fieldsets = [
        ('Booking Information', {
            'fields': ['booking_number', 'user', 'showtime', 'total_amount', 'status']
        }),
        ('Emails', {
            'fields': ['confirmation_email_sent', 'reminder_email_sent']
        }),
        ('Timestamps', {
            'fields': ['created_at', 'confirmed_at', 'cancelled_at', 'expires_at']
        }),
    ]

    def seat_count(self, obj):
        return obj.booking_seats.count()
    seat_count.short_description = 'Seats'

    def status_badge(self, obj):
        colors = {
            'PENDING': 'warning',
            'CONFIRMED': 'success',
            'CANCELLED': 'danger',
            'EXPIRED': 'secondary',
        }
        color = colors.get(obj.status, 'secondary')

        return format_html('<span class="badge bg-{}">{}</span>', color, obj.status)
    status_badge.short_description = 'Status'

    @admin.action(description="Cancel selected bookings (refunds completed payments)")
    def cancel_bookings(self, request, queryset):
        updated = 0
        for booking in queryset.exclude(status=Booking.CANCELLED):
            try:
                BookingService.admin_update_status(booking.id, Booking.CANCELLED)
                updated += 1
            except ServiceError as e:
                self.message_user(request, f'{booking.booking_number}: {e.message}', level='warning')
        self.message_user(request, f'{updated} bookings cancelled successfully.')

    @admin.action(description="Export selected bookings to CSV")
    def export_as_csv(self, request, queryset):
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = 'attachment; filename="selected_bookings.csv"'
        writer = csv.writer(response)
        writer.writerow(['Booking Number', 'User', 'Movie', 'Seats', 'Amount', 'Status', 'Date'])

        for booking in queryset.with_details():
            writer.writerow([
                booking.booking_number,
                booking.user.email,
                booking.showtime.movie.name,
                booking.get_seats_display(),
                booking.total_amount,
                booking.status,
                booking.created_at.strftime('%Y-%m-%d %H:%M')
            ])
        return response

@admin.register(BookingPayment)
class BookingPaymentAdmin(admin.ModelAdmin):
    list_display = ['payment_intent_id', 'booking', 'amount', 'currency', 'status', 'transaction_date']
    list_filter = ['status', 'currency', 'transaction_date']
    search_fields = ['payment_intent_id', 'gateway_payment_id', 'booking__booking_number']
    readonly_fields = ['transaction_date', 'refunded_at', 'gateway_response']

@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ['ticket_number', 'booking', 'seat', 'price', 'status', 'used_at']
    list_filter = ['status']
    search_fields = ['ticket_number', 'booking__booking_number']
    readonly_fields = ['ticket_number', 'qr_token', 'created_at', 'used_at']
