from decimal import Decimal, ROUND_HALF_UP

from django.db import connection

from .models import Booking, BookingSeat

def supports_select_for_update():
    # SQLite serializes writers on its own and has no row locks
    return connection.features.has_select_for_update

class SeatManager:

    @staticmethod
    def get_reserved_seat_ids(showtime_id, exclude_booking_id=None):
        """Seat ids held by confirmed bookings or unexpired pending ones."""
        holding = Booking.objects.filter(showtime_id=showtime_id).holding_seats()
        if exclude_booking_id:
            holding = holding.exclude(id=exclude_booking_id)

        return set(
            BookingSeat.objects.filter(booking__in=holding).values_list('seat_id', flat=True)
        )

    @staticmethod
    def split_seats(showtime):
        """Returns ``(available, reserved)`` seat lists for the showtime's hall."""
        reserved_ids = SeatManager.get_reserved_seat_ids(showtime.id)
        available, reserved = [], []
        for seat in showtime.hall.seats.all():
            if seat.id in reserved_ids:
                reserved.append(seat)
            else:
                available.append(seat)
        return available, reserved

class PriceCalculator:

    # service fee and taxes folded into one multiplier on the ticket price
    FEE_MULTIPLIER = Decimal('1.14')

    @staticmethod
    def calculate_booking_amount(showtime, seat_count):

        base_price = showtime.price * seat_count
        total_amount = (base_price * PriceCalculator.FEE_MULTIPLIER).quantize(
            Decimal('0.01'), rounding=ROUND_HALF_UP
        )

        return {
            'base_price': base_price,
            'fees': total_amount - base_price,
            'total_amount': total_amount,
        }
