from accounts.mappers import user_summary_to_dict
from movies.mappers import showtime_to_dict

from .razorpay_utils import razorpay_client, to_minor_units

def _iso(value):
    return value.isoformat() if value else None

def _money(value):
    return str(value) if value is not None else None

def booking_to_dict(booking):
    return {
        'id': booking.id,
        'booking_number': booking.booking_number,
        'user': user_summary_to_dict(booking.user),
        'showtime': showtime_to_dict(booking.showtime),
        'seats': [
            {
                'seat_id': booking_seat.seat_id,
                'label': booking_seat.seat.label,
                'price': _money(booking_seat.price),
            }
            for booking_seat in booking.booking_seats.all()
        ],
        'total_amount': _money(booking.total_amount),
        'status': booking.status,
        'created_at': _iso(booking.created_at),
        'updated_at': _iso(booking.updated_at),
        'confirmed_at': _iso(booking.confirmed_at),
        'cancelled_at': _iso(booking.cancelled_at),
        'expires_at': _iso(booking.expires_at),
    }

def payment_to_dict(payment):
    booking = payment.booking
    return {
        'id': payment.id,
        'booking_id': booking.id,
        'booking_number': booking.booking_number,
        'user_id': booking.user_id,
        'amount': _money(payment.amount),
        'currency': payment.currency,
        'payment_method': payment.payment_method,
        'payment_intent_id': payment.payment_intent_id,
        'gateway_payment_id': payment.gateway_payment_id,
        'status': payment.status,
        'transaction_date': _iso(payment.transaction_date),
        'refunded_at': _iso(payment.refunded_at),
    }

def payment_intent_to_dict(payment, reused):
    return {
        'payment_intent_id': payment.payment_intent_id,
        'key_id': razorpay_client.key_id,
        'amount': _money(payment.amount),
        'amount_minor': to_minor_units(payment.amount),
        'currency': payment.currency,
        'status': payment.status,
        'booking_id': payment.booking_id,
        'reused': reused,
        'is_mock': razorpay_client.is_mock,
    }

def ticket_to_dict(ticket):
    booking = ticket.booking
    showtime = booking.showtime
    return {
        'id': ticket.id,
        'ticket_number': ticket.ticket_number,
        'booking_id': booking.id,
        'booking_number': booking.booking_number,
        'user_id': booking.user_id,
        'seat': {'id': ticket.seat_id, 'label': ticket.seat.label},
        'price': _money(ticket.price),
        'status': ticket.status,
        'qr_token': ticket.qr_token,
        'showtime': showtime_to_dict(showtime),
        'created_at': _iso(ticket.created_at),
        'used_at': _iso(ticket.used_at),
    }

def ticket_check_to_dict(ticket, message):
    if ticket is None:
        return {'is_found': False, 'message': message}

    showtime = ticket.booking.showtime
    hall = showtime.hall
    return {
        'is_found': True,
        'message': message,
        'ticket_number': ticket.ticket_number,
        'status': ticket.status,
        'movie_name': showtime.movie.name,
        'start_time': _iso(showtime.start_time),
        'duration': showtime.movie.duration,
        'hall_number': hall.hall_number,
        'hall_type': hall.hall_type,
        'seat_label': ticket.seat.label,
        'price': _money(ticket.price),
        'branch_name': hall.branch.name,
    }

def check_in_to_dict(result, message, ticket):
    return {
        'result': result,
        'message': message,
        'ticket': ticket_check_to_dict(ticket, message) if ticket else None,
    }
