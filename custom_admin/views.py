import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import admin_required
from accounts.mappers import user_to_dict
from accounts.services import UserService
from bookings.mappers import (
    booking_to_dict, check_in_to_dict, payment_to_dict, ticket_check_to_dict, ticket_to_dict,
)
from bookings.services import BookingService, PaymentService, TicketService
from movies.mappers import (
    branch_to_dict, genre_to_dict, hall_summary_to_dict, hall_to_dict, movie_summary_to_dict,
    movie_to_dict, seat_to_dict, showtime_to_dict,
)
from movies.services import (
    BranchService, GenreService, HallService, MovieService, SeatService, ShowtimeService,
)
from movies.utils import page_params, paginate, parse_int, read_json

from .dashboard import DashboardService

logger = logging.getLogger(__name__)

def _page(request, queryset, mapper):
    page, page_size = page_params(request.GET)
    return JsonResponse(paginate(queryset, page, page_size, mapper))

def _deleted(label):
    return JsonResponse({'message': f'{label} deleted.'})

# Dashboard

@require_GET
@admin_required
def dashboard(request):
    return JsonResponse(DashboardService.summary())

@require_GET
@admin_required
def dashboard_monthly_revenue(request):
    months = parse_int(request.GET.get('months'), 'months', minimum=1) or 6
    return JsonResponse({'months': DashboardService.monthly_revenue(min(months, 24))})

@require_GET
@admin_required
def dashboard_weekly_bookings(request):
    return JsonResponse({'days': DashboardService.weekly_bookings()})

# Bookings

@csrf_exempt
@require_http_methods(["GET", "POST"])
@admin_required
def bookings(request):
    if request.method == 'POST':
        data = read_json(request)
        booking = BookingService.admin_create_booking(data.get('user_id'), data.get('showtime_id'), data.get('seat_ids'))
        return JsonResponse(booking_to_dict(booking), status=201)
    return _page(request, BookingService.admin_list(request.GET), booking_to_dict)

@csrf_exempt
@require_http_methods(["GET", "DELETE"])
@admin_required
def booking_detail(request, booking_id):
    if request.method == 'DELETE':
        BookingService.admin_delete(booking_id)
        return _deleted('Booking')
    return JsonResponse(booking_to_dict(BookingService.admin_get(booking_id)))

@csrf_exempt
@require_http_methods(["PUT", "PATCH", "POST"])
@admin_required
def booking_status(request, booking_id):
    booking = BookingService.admin_update_status(booking_id, read_json(request).get('status'))
    return JsonResponse(booking_to_dict(booking))

# Catalog

@csrf_exempt
@require_http_methods(["GET", "POST"])
@admin_required
def movies(request):
    if request.method == 'POST':
        return JsonResponse(movie_to_dict(MovieService.create(read_json(request))), status=201)
    return _page(request, MovieService.browse(request.GET, public=False), movie_summary_to_dict)

@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@admin_required
def movie_detail(request, movie_id):
    if request.method == 'DELETE':
        MovieService.delete(movie_id)
        return _deleted('Movie')
    if request.method == 'PUT':
        return JsonResponse(movie_to_dict(MovieService.update(movie_id, read_json(request))))
    return JsonResponse(movie_to_dict(MovieService.get_details(movie_id, public=False)))

@csrf_exempt
@require_http_methods(["GET", "POST"])
@admin_required
def genres(request):
    if request.method == 'POST':
        return JsonResponse(genre_to_dict(GenreService.create(read_json(request))), status=201)
    return _page(request, GenreService.list(request.GET), genre_to_dict)

@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@admin_required
def genre_detail(request, genre_id):
    if request.method == 'DELETE':
        GenreService.delete(genre_id)
        return _deleted('Genre')
    if request.method == 'PUT':
        return JsonResponse(genre_to_dict(GenreService.update(genre_id, read_json(request))))
    return JsonResponse(genre_to_dict(GenreService.get(genre_id)))

# Venues

@csrf_exempt
@require_http_methods(["GET", "POST"])
@admin_required
def branches(request):
    if request.method == 'POST':
        return JsonResponse(branch_to_dict(BranchService.create(read_json(request))), status=201)
    return _page(request, BranchService.list(request.GET), branch_to_dict)

@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@admin_required
def branch_detail(request, branch_id):
    if request.method == 'DELETE':
        BranchService.delete(branch_id)
        return _deleted('Branch')
    if request.method == 'PUT':
        return JsonResponse(branch_to_dict(BranchService.update(branch_id, read_json(request))))
    return JsonResponse(branch_to_dict(BranchService.get(branch_id)))

@csrf_exempt
@require_http_methods(["GET", "POST"])
@admin_required
def halls(request):
    if request.method == 'POST':
        return JsonResponse(hall_to_dict(HallService.create(read_json(request))), status=201)
    return _page(request, HallService.list(request.GET), hall_summary_to_dict)

@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@admin_required
def hall_detail(request, hall_id):
    if request.method == 'DELETE':
        HallService.delete(hall_id)
        return _deleted('Hall')
    if request.method == 'PUT':
        return JsonResponse(hall_to_dict(HallService.update(hall_id, read_json(request))))
    return JsonResponse(hall_to_dict(HallService.get(hall_id)))

@require_GET
@admin_required
def seats(request):
    return _page(request, SeatService.list(request.GET), seat_to_dict)

@require_GET
@admin_required
def seat_detail(request, seat_id):
    return JsonResponse(seat_to_dict(SeatService.get(seat_id)))

@csrf_exempt
@require_http_methods(["GET", "POST"])
@admin_required
def showtimes(request):
    if request.method == 'POST':
        return JsonResponse(showtime_to_dict(ShowtimeService.create(read_json(request))), status=201)
    return _page(request, ShowtimeService.list(request.GET), showtime_to_dict)

@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@admin_required
def showtime_detail(request, showtime_id):
    if request.method == 'DELETE':
        ShowtimeService.delete(showtime_id)
        return _deleted('Showtime')
    if request.method == 'PUT':
        return JsonResponse(showtime_to_dict(ShowtimeService.update(showtime_id, read_json(request))))
    return JsonResponse(showtime_to_dict(ShowtimeService.get(showtime_id)))

# Payments and tickets

@require_GET
@admin_required
def payments(request):
    return _page(request, PaymentService.admin_list(request.GET), payment_to_dict)

@require_GET
@admin_required
def payment_detail(request, payment_id):
    return JsonResponse(payment_to_dict(PaymentService.admin_get(payment_id)))

@require_GET
@admin_required
def tickets(request):
    return _page(request, TicketService.admin_list(request.GET), ticket_to_dict)

@require_GET
@admin_required
def ticket_detail(request, ticket_id):
    return JsonResponse(ticket_to_dict(TicketService.get_ticket(ticket_id)))

@require_GET
@admin_required
def tickets_by_booking(request, booking_id):
    return JsonResponse({'items': [ticket_to_dict(ticket) for ticket in TicketService.by_booking(booking_id)]})

@require_GET
@admin_required
def tickets_by_showtime(request, showtime_id):
    return JsonResponse({'items': [ticket_to_dict(ticket) for ticket in TicketService.by_showtime(showtime_id)]})

@csrf_exempt
@require_http_methods(["GET", "POST"])
@admin_required
def ticket_check_qr(request):
    qr_token = request.GET.get('qr_token') if request.method == 'GET' else read_json(request).get('qr_token')
    ticket, message = TicketService.check_by_qr(qr_token)
    return JsonResponse(ticket_check_to_dict(ticket, message))

@csrf_exempt
@require_POST
@admin_required
def ticket_check_in(request):
    result, message, ticket = TicketService.check_in(read_json(request).get('qr_token'))
    return JsonResponse(check_in_to_dict(result, message, ticket))

# Users

@csrf_exempt
@require_http_methods(["GET", "POST"])
@admin_required
def users(request):
    if request.method == 'POST':
        return JsonResponse(user_to_dict(UserService.create_user(read_json(request))), status=201)
    return _page(request, UserService.list_users(request.GET), user_to_dict)

@csrf_exempt
@require_http_methods(["GET", "PUT", "DELETE"])
@admin_required
def user_detail(request, user_id):
    if request.method == 'DELETE':
        UserService.delete_user(user_id)
        return _deleted('User')
    if request.method == 'PUT':
        return JsonResponse(user_to_dict(UserService.update_user(user_id, read_json(request))))
    return JsonResponse(user_to_dict(UserService.get_user(user_id)))

USER_FLAG_ACTIONS = {
    'activate': lambda user_id: UserService.set_active(user_id, True),
    'deactivate': lambda user_id: UserService.set_active(user_id, False),
    'confirm-email': lambda user_id: UserService.set_email_confirmed(user_id, True),
    'unconfirm-email': lambda user_id: UserService.set_email_confirmed(user_id, False),
}

@csrf_exempt
@require_POST
@admin_required
def user_action(request, user_id, action):
    return JsonResponse(user_to_dict(USER_FLAG_ACTIONS[action](user_id)))

@require_GET
@admin_required
def user_bookings(request, user_id):
    UserService.get_user(user_id)
    params = request.GET.copy()
    params['user_id'] = user_id
    return _page(request, BookingService.admin_list(params), booking_to_dict)

@require_GET
@admin_required
def user_tickets(request, user_id):
    UserService.get_user(user_id)
    params = request.GET.copy()
    params['user_id'] = user_id
    return _page(request, TicketService.admin_list(params), ticket_to_dict)

@require_GET
@admin_required
def user_payments(request, user_id):
    UserService.get_user(user_id)
    params = request.GET.copy()
    params['user_id'] = user_id
    return _page(request, PaymentService.admin_list(params), payment_to_dict)
