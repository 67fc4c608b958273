import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from accounts.decorators import jwt_required

from .mappers import (
    genre_to_dict, branch_to_dict, movie_summary_to_dict, movie_to_dict, review_to_dict,
    showtime_to_dict, showtime_hall_seats_to_dict,
)
from .services import (
    BranchService, GenreService, HallService, MovieService, ReviewService, ShowtimeService,
)
from .utils import page_params, paginate, read_json

logger = logging.getLogger(__name__)

@require_GET
def movie_list(request):
    movies = MovieService.browse(request.GET)
    page, page_size = page_params(request.GET)
    return JsonResponse(paginate(movies, page, page_size, movie_summary_to_dict))

@require_GET
def movie_detail(request, movie_id):
    return JsonResponse(movie_to_dict(MovieService.get_details(movie_id)))

@require_GET
def genre_list(request):
    return JsonResponse({'items': [genre_to_dict(genre) for genre in GenreService.list(request.GET)]})

@require_GET
def branch_list(request):
    branches = BranchService.list(request.GET)
    page, page_size = page_params(request.GET)
    return JsonResponse(paginate(branches, page, page_size, branch_to_dict))

@require_GET
def showtime_list(request):
    showtimes = ShowtimeService.list_upcoming(request.GET)
    page, page_size = page_params(request.GET)
    return JsonResponse(paginate(showtimes, page, page_size, showtime_to_dict))

@require_GET
def showtime_hall_seats(request, showtime_id):
    showtime, available, reserved = HallService.get_showtime_hall_seats(showtime_id)
    return JsonResponse(showtime_hall_seats_to_dict(showtime, available, reserved))

def _list_movie_reviews(request, movie_id):
    reviews = ReviewService.list_for_movie(movie_id)
    page, page_size = page_params(request.GET)
    return JsonResponse(paginate(reviews, page, page_size, review_to_dict))

@jwt_required
def _create_review(request, movie_id):
    review = ReviewService.create(request.user.id, movie_id, read_json(request))
    return JsonResponse(review_to_dict(review), status=201)

@csrf_exempt
@require_http_methods(["GET", "POST"])
def movie_reviews(request, movie_id):
    if request.method == 'POST':
        return _create_review(request, movie_id)
    return _list_movie_reviews(request, movie_id)

@require_GET
@jwt_required
def my_movie_review(request, movie_id):
    review = ReviewService.get_user_review_for_movie(request.user.id, movie_id)
    return JsonResponse(review_to_dict(review))

@csrf_exempt
@require_http_methods(["PUT", "DELETE"])
@jwt_required
def review_detail(request, review_id):
    if request.method == 'DELETE':
        ReviewService.delete(request.user.id, review_id)
        return JsonResponse({'message': 'Review deleted.'})

    review = ReviewService.update(request.user.id, review_id, read_json(request))
    return JsonResponse(review_to_dict(review))

@require_GET
@jwt_required
def my_reviews(request):
    reviews = ReviewService.list_for_user(request.user.id)
    page, page_size = page_params(request.GET)
    return JsonResponse(paginate(reviews, page, page_size, review_to_dict))
