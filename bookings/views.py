import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import jwt_required
from movies.utils import page_params, paginate, read_json

from .mappers import booking_to_dict, payment_intent_to_dict, ticket_to_dict
from .services import BookingService, PaymentService, TicketService

logger = logging.getLogger(__name__)

@csrf_exempt
@require_http_methods(["GET", "POST"])
@jwt_required
def bookings(request):
    if request.method == 'POST':
        data = read_json(request)
        booking = BookingService.create_booking(request.user.id, data.get('showtime_id'), data.get('seat_ids'))
        return JsonResponse(booking_to_dict(booking), status=201)

    queryset = BookingService.list_user_bookings(request.user.id, request.GET)
    page, page_size = page_params(request.GET)
    return JsonResponse(paginate(queryset, page, page_size, booking_to_dict))

@csrf_exempt
@require_http_methods(["GET", "DELETE"])
@jwt_required
def booking_detail(request, booking_id):
    if request.method == 'DELETE':
        booking = BookingService.cancel_booking(request.user.id, booking_id)
    else:
        booking = BookingService.get_user_booking(request.user.id, booking_id)
    return JsonResponse(booking_to_dict(booking))

@csrf_exempt
@require_POST
@jwt_required
def confirm_booking(request, booking_id):
    booking = BookingService.confirm_booking(request.user.id, booking_id)
    return JsonResponse(booking_to_dict(booking))

@csrf_exempt
@require_POST
@jwt_required
def payment_intent(request):
    data = read_json(request)
    payment, reused = PaymentService.create_payment_intent(
        request.user.id,
        data.get('booking_id'),
        data.get('amount'),
        data.get('currency'),
        data.get('payment_method') or 'card',
    )
    return JsonResponse(payment_intent_to_dict(payment, reused), status=200 if reused else 201)

@csrf_exempt
@require_POST
@jwt_required
def payment_confirm(request):
    data = read_json(request)
    PaymentService.confirm_payment(
        request.user.id,
        data.get('booking_id'),
        data.get('payment_intent_id'),
        gateway_payment_id=data.get('razorpay_payment_id') or data.get('gateway_payment_id'),
        signature=data.get('razorpay_signature') or data.get('signature'),
    )
    booking = BookingService.get_user_booking(request.user.id, data.get('booking_id'))
    return JsonResponse({
        'message': 'Payment confirmed.',
        'booking': booking_to_dict(booking),
    })

@csrf_exempt
@require_POST
@jwt_required
def payment_refund(request):
    data = read_json(request)
    PaymentService.refund_for_user(request.user.id, data.get('payment_intent_id'), data.get('amount'))
    return JsonResponse({'message': 'Refund processed.'})

@require_GET
@jwt_required
def tickets(request):
    queryset = TicketService.list_user_tickets(request.user.id, request.GET)
    page, page_size = page_params(request.GET)
    return JsonResponse(paginate(queryset, page, page_size, ticket_to_dict))

@require_GET
@jwt_required
def ticket_detail(request, ticket_id):
    return JsonResponse(ticket_to_dict(TicketService.get_user_ticket(request.user.id, ticket_id)))
