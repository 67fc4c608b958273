import logging
from datetime import timedelta

from django.db import transaction, IntegrityError
from django.db.models import Q, Count
from django.utils import timezone

from embed_video.backends import detect_backend, UnknownBackendException

from .exceptions import AccessDenied, InvalidOperation, InvalidRequest, ResourceNotFound
from .models import Genre, Movie, MovieImage, MovieCastMember, Review
from .theater_models import Branch, Hall, Seat, Showtime, layout_capacity
from .utils import (
    parse_bool, parse_choice, parse_date, parse_datetime, parse_decimal, parse_int, parse_sort,
)

logger = logging.getLogger(__name__)

MOVIE_SORT_FIELDS = {
    'moviename': 'name',
    'rating': 'rating',
    'releasedate': 'release_date',
}

BRANCH_SORT_FIELDS = {
    'name': 'name',
    'location': 'location',
}

HALL_SORT_FIELDS = {
    'number': 'hall_number',
    'hallnumber': 'hall_number',
    'status': 'status',
    'type': 'hall_type',
    'halltype': 'hall_type',
    'capacity': 'capacity',
}

SHOWTIME_SORT_FIELDS = {
    'starttime': 'start_time',
    'price': 'price',
    'movie': 'movie__name',
}

def _required_text(value, field, max_length=None):
    text = (value or '').strip() if isinstance(value, str) or value is None else str(value).strip()
    if not text:
        raise InvalidRequest(f'{field} is required.')
    if max_length and len(text) > max_length:
        raise InvalidRequest(f'{field} must be at most {max_length} characters.')
    return text

def _has_bookings(**lookup):
    from bookings.models import Booking
    return Booking.objects.filter(**lookup).exists()

def _display_order(value, index):
    order = parse_int(value, 'display_order', minimum=0)
    return index if order is None else order

class MovieService:

    @staticmethod
    def _with_details(queryset):
        return queryset.prefetch_related('genres', 'images', 'cast_members')

    @staticmethod
    def browse(params, public=True):
        movies = Movie.objects.prefetch_related('genres', 'images')
        if public:
            movies = movies.exclude(status='DRAFT')

        search = (params.get('search') or '').strip()
        if search:
            movies = movies.filter(Q(name__icontains=search) | Q(description__icontains=search))

        genre_id = parse_int(params.get('genre_id'), 'genre_id')
        if genre_id:
            if not Genre.objects.filter(id=genre_id).exists():
                raise ResourceNotFound(f'Genre {genre_id} not found.')
            movies = movies.filter(genres__id=genre_id)

        age_rating = parse_choice(params.get('age_rating'), 'age_rating', Movie.AGE_RATINGS)
        if age_rating:
            movies = movies.filter(age_rating=age_rating)

        status = parse_choice(params.get('status'), 'status', Movie.STATUS_CHOICES)
        if status:
            movies = movies.filter(status=status)

        language = (params.get('language') or '').strip()
        if language:
            movies = movies.filter(language__iexact=language)

        released_from = parse_date(params.get('release_date_from'), 'release_date_from')
        released_to = parse_date(params.get('release_date_to'), 'release_date_to')
        if released_from and released_to and released_from > released_to:
            raise InvalidRequest('release_date_from cannot be after release_date_to.')
        if released_from:
            movies = movies.filter(release_date__gte=released_from)
        if released_to:
            movies = movies.filter(release_date__lte=released_to)

        ordering = parse_sort(params.get('sort_by'), params.get('sort_order'), MOVIE_SORT_FIELDS, 'releasedate')
        return movies.distinct().order_by(ordering, 'id')

    @staticmethod
    def get_details(movie_id, public=True):
        movies = MovieService._with_details(Movie.objects.all())
        if public:
            movies = movies.exclude(status='DRAFT')
        try:
            return movies.get(id=movie_id)
        except Movie.DoesNotExist:
            raise ResourceNotFound(f'Movie {movie_id} not found.')

    @staticmethod
    def _clean_trailer(url):
        url = (url or '').strip()
        if not url:
            return ''
        try:
            detect_backend(url)
        except UnknownBackendException:
            raise InvalidRequest('trailer_url must be a YouTube, Vimeo or SoundCloud link.')
        return url

    @staticmethod
    def _genres(genre_ids):
        if not isinstance(genre_ids, list):
            raise InvalidRequest('genre_ids must be a list.')
        ids = {parse_int(genre_id, 'genre_ids', required=True, minimum=1) for genre_id in genre_ids}
        genres = list(Genre.objects.filter(id__in=ids))
        if len(genres) != len(ids):
            missing = sorted(ids - {genre.id for genre in genres})
            raise ResourceNotFound(f'Genres not found: {", ".join(map(str, missing))}.')
        return genres

    @staticmethod
    def _apply_fields(movie, data, partial):
        if 'name' in data or not partial:
            name = _required_text(data.get('name'), 'name', 200)
            duplicate = Movie.objects.filter(name__iexact=name).exclude(id=movie.id)
            if duplicate.exists():
                raise InvalidOperation(f"A movie named '{name}' already exists.")
            movie.name = name

        if 'duration' in data or not partial:
            movie.duration = parse_int(data.get('duration'), 'duration', required=True, minimum=1)

        if 'release_date' in data or not partial:
            movie.release_date = parse_date(data.get('release_date'), 'release_date', required=True)

        if 'description' in data:
            movie.description = (data.get('description') or '').strip()

        if 'language' in data:
            movie.language = (data.get('language') or '').strip()

        if 'trailer_url' in data:
            movie.trailer_url = MovieService._clean_trailer(data.get('trailer_url'))

        if data.get('age_rating') is not None:
            movie.age_rating = parse_choice(data.get('age_rating'), 'age_rating', Movie.AGE_RATINGS)

        if data.get('status') is not None:
            movie.status = parse_choice(data.get('status'), 'status', Movie.STATUS_CHOICES)

    @staticmethod
    def _replace_images(movie, images):
        if not isinstance(images, list):
            raise InvalidRequest('images must be a list.')
        movie.images.all().delete()
        MovieImage.objects.bulk_create([
            MovieImage(
                movie=movie,
                image_url=_required_text(image.get('image_url'), 'image_url', 500),
                caption=(image.get('caption') or '').strip(),
                is_poster=bool(parse_bool(image.get('is_poster'), 'is_poster')),
                display_order=_display_order(image.get('display_order'), index),
            )
            for index, image in enumerate(images)
        ])

    @staticmethod
    def _replace_cast(movie, cast):
        if not isinstance(cast, list):
            raise InvalidRequest('cast must be a list.')
        movie.cast_members.all().delete()
        MovieCastMember.objects.bulk_create([
            MovieCastMember(
                movie=movie,
                person_name=_required_text(member.get('person_name'), 'person_name', 200),
                image_url=(member.get('image_url') or '').strip(),
                role_type=parse_choice(member.get('role_type'), 'role_type', MovieCastMember.ROLE_TYPES) or 'ACTOR',
                character_name=(member.get('character_name') or '').strip(),
                display_order=_display_order(member.get('display_order'), index),
                is_lead=bool(parse_bool(member.get('is_lead'), 'is_lead')),
            )
            for index, member in enumerate(cast)
        ])

    @staticmethod
    def _save(movie, data, partial):
        MovieService._apply_fields(movie, data, partial)
        genres = MovieService._genres(data['genre_ids']) if 'genre_ids' in data else None

        with transaction.atomic():
            movie.save()
            if genres is not None:
                movie.genres.set(genres)
            if 'images' in data:
                MovieService._replace_images(movie, data['images'])
            if 'cast' in data:
                MovieService._replace_cast(movie, data['cast'])

        return MovieService.get_details(movie.id, public=False)

    @staticmethod
    def create(data):
        movie = MovieService._save(Movie(), data, partial=False)
        logger.info(f"Movie created: {movie.name} (id={movie.id})")
        return movie

    @staticmethod
    def update(movie_id, data):
        movie = MovieService.get_details(movie_id, public=False)
        movie = MovieService._save(movie, data, partial=True)
        logger.info(f"Movie updated: {movie.name} (id={movie.id})")
        return movie

    @staticmethod
    def delete(movie_id):
        movie = MovieService.get_details(movie_id, public=False)
        if _has_bookings(showtime__movie_id=movie.id):
            raise InvalidOperation('Movie has bookings. Archive it instead.')
        movie.delete()
        logger.info(f"Movie deleted: {movie.name}")

class GenreService:

    @staticmethod
    def list(params):
        genres = Genre.objects.annotate(movie_count=Count('movies'))
        search = (params.get('search') or '').strip()
        if search:
            genres = genres.filter(name__icontains=search)
        return genres.order_by('name')

    @staticmethod
    def get(genre_id):
        try:
            return Genre.objects.annotate(movie_count=Count('movies')).get(id=genre_id)
        except Genre.DoesNotExist:
            raise ResourceNotFound(f'Genre {genre_id} not found.')

    @staticmethod
    def _clean_name(name, genre_id=None):
        name = _required_text(name, 'name', 100)
        if Genre.objects.filter(name__iexact=name).exclude(id=genre_id).exists():
            raise InvalidOperation(f"Genre '{name}' already exists.")
        return name

    @staticmethod
    def create(data):
        genre = Genre.objects.create(name=GenreService._clean_name(data.get('name')))
        logger.info(f"Genre created: {genre.name}")
        return GenreService.get(genre.id)

    @staticmethod
    def update(genre_id, data):
        genre = GenreService.get(genre_id)
        genre.name = GenreService._clean_name(data.get('name'), genre.id)
        genre.save()
        return GenreService.get(genre.id)

    @staticmethod
    def delete(genre_id):
        genre = GenreService.get(genre_id)
        if genre.movie_count:
            raise InvalidOperation(f'Genre is used by {genre.movie_count} movie(s) and cannot be deleted.')
        genre.delete()
        logger.info(f"Genre deleted: {genre.name}")

class BranchService:

    @staticmethod
    def list(params):
        branches = Branch.objects.annotate(hall_count=Count('halls'))
        search = (params.get('search') or '').strip()
        if search:
            branches = branches.filter(Q(name__icontains=search) | Q(location__icontains=search))
        ordering = parse_sort(
            params.get('sort_by'), params.get('sort_order'), BRANCH_SORT_FIELDS, 'name', default_desc=False
        )
        return branches.order_by(ordering, 'id')

    @staticmethod
    def get(branch_id):
        try:
            return Branch.objects.annotate(hall_count=Count('halls')).get(id=branch_id)
        except Branch.DoesNotExist:
            raise ResourceNotFound(f'Branch {branch_id} not found.')

    @staticmethod
    def _apply(branch, data, partial):
        if 'name' in data or not partial:
            name = _required_text(data.get('name'), 'name', 200)
            if Branch.objects.filter(name__iexact=name).exclude(id=branch.id).exists():
                raise InvalidOperation(f"Branch '{name}' already exists.")
            branch.name = name
        if 'location' in data or not partial:
            branch.location = _required_text(data.get('location'), 'location', 300)
        branch.save()
        return BranchService.get(branch.id)

    @staticmethod
    def create(data):
        branch = BranchService._apply(Branch(), data, partial=False)
        logger.info(f"Branch created: {branch.name}")
        return branch

    @staticmethod
    def update(branch_id, data):
        return BranchService._apply(BranchService.get(branch_id), data, partial=True)

    @staticmethod
    def delete(branch_id):
        branch = BranchService.get(branch_id)
        if branch.hall_count:
            raise InvalidOperation('Branch has halls. Remove its halls first.')
        branch.delete()
        logger.info(f"Branch deleted: {branch.name}")

class HallService:

    @staticmethod
    def list(params):
        halls = Hall.objects.select_related('branch')

        search = (params.get('search') or '').strip()
        if search:
            halls = halls.filter(Q(hall_number__icontains=search) | Q(branch__name__icontains=search))

        branch_id = parse_int(params.get('branch_id'), 'branch_id')
        if branch_id:
            halls = halls.filter(branch_id=branch_id)

        status = parse_choice(params.get('status'), 'status', Hall.HALL_STATUS)
        if status:
            halls = halls.filter(status=status)

        hall_type = parse_choice(params.get('hall_type'), 'hall_type', Hall.HALL_TYPES)
        if hall_type:
            halls = halls.filter(hall_type=hall_type)

        ordering = parse_sort(
            params.get('sort_by'), params.get('sort_order'), HALL_SORT_FIELDS, 'number', default_desc=False
        )
        return halls.order_by(ordering, 'id')

    @staticmethod
    def get(hall_id):
        try:
            return Hall.objects.select_related('branch').prefetch_related('seats').get(id=hall_id)
        except Hall.DoesNotExist:
            raise ResourceNotFound(f'Hall {hall_id} not found.')

    @staticmethod
    def _check_number(branch_id, hall_number, hall_id=None):
        duplicate = Hall.objects.filter(branch_id=branch_id, hall_number__iexact=hall_number).exclude(id=hall_id)
        if duplicate.exists():
            raise InvalidOperation(f'Hall {hall_number} already exists in this branch.')

    @staticmethod
    def create(data):
        branch = BranchService.get(parse_int(data.get('branch_id'), 'branch_id', required=True, minimum=1))
        hall_number = _required_text(data.get('hall_number'), 'hall_number', 20)
        hall_type = parse_choice(data.get('hall_type'), 'hall_type', Hall.HALL_TYPES)
        if not hall_type:
            raise InvalidRequest('hall_type is required.')
        status = parse_choice(data.get('status'), 'status', Hall.HALL_STATUS) or 'AVAILABLE'

        HallService._check_number(branch.id, hall_number)

        with transaction.atomic():
            hall = Hall.objects.create(
                branch=branch,
                hall_number=hall_number,
                hall_type=hall_type,
                status=status,
                capacity=layout_capacity(hall_type),
            )
            hall.regenerate_seats()

        logger.info(f"Hall created: {hall} with {hall.capacity} seats")
        return HallService.get(hall.id)

    @staticmethod
    def update(hall_id, data):
        hall = HallService.get(hall_id)

        branch_id = hall.branch_id
        if data.get('branch_id') is not None:
            branch_id = BranchService.get(parse_int(data['branch_id'], 'branch_id', minimum=1)).id

        hall_number = hall.hall_number
        if 'hall_number' in data:
            hall_number = _required_text(data.get('hall_number'), 'hall_number', 20)

        if branch_id != hall.branch_id or hall_number != hall.hall_number:
            HallService._check_number(branch_id, hall_number, hall.id)

        new_type = parse_choice(data.get('hall_type'), 'hall_type', Hall.HALL_TYPES) or hall.hall_type
        type_changed = new_type != hall.hall_type
        if type_changed and _has_bookings(showtime__hall_id=hall.id):
            raise InvalidOperation('Hall type cannot be changed while the hall has bookings.')

        with transaction.atomic():
            hall.branch_id = branch_id
            hall.hall_number = hall_number
            hall.hall_type = new_type
            hall.status = parse_choice(data.get('status'), 'status', Hall.HALL_STATUS) or hall.status
            hall.save()
            if type_changed:
                hall.regenerate_seats()
                logger.info(f"Hall {hall.id} switched to {new_type}; {hall.capacity} seats regenerated")

        return HallService.get(hall.id)

    @staticmethod
    def delete(hall_id):
        hall = HallService.get(hall_id)
        if hall.showtimes.exists():
            raise InvalidOperation('Hall has showtimes and cannot be deleted.')
        hall.delete()
        logger.info(f"Hall deleted: {hall.hall_number} at {hall.branch.name}")

    @staticmethod
    def get_showtime_hall_seats(showtime_id):
        """Returns ``(showtime, available_seats, reserved_seats)``."""
        from bookings.utils import SeatManager

        showtime = ShowtimeService.get(showtime_id)
        available, reserved = SeatManager.split_seats(showtime)
        return showtime, available, reserved

class SeatService:

    @staticmethod
    def get(seat_id):
        try:
            return Seat.objects.select_related('hall__branch').get(id=seat_id)
        except Seat.DoesNotExist:
            raise ResourceNotFound(f'Seat {seat_id} not found.')

    @staticmethod
    def list(params):
        seats = Seat.objects.select_related('hall__branch')

        hall_id = parse_int(params.get('hall_id'), 'hall_id')
        if hall_id:
            seats = seats.filter(hall_id=hall_id)

        search = (params.get('search') or '').strip()
        if search:
            seats = seats.filter(label__icontains=search)

        return seats.order_by('hall_id', 'id')

class ShowtimeService:

    @staticmethod
    def _queryset():
        return Showtime.objects.select_related('movie', 'hall__branch')

    @staticmethod
    def get(showtime_id):
        try:
            return ShowtimeService._queryset().get(id=showtime_id)
        except Showtime.DoesNotExist:
            raise ResourceNotFound(f'Showtime {showtime_id} not found.')

    @staticmethod
    def list(params):
        showtimes = ShowtimeService._queryset()

        for field in ('movie_id', 'hall_id'):
            value = parse_int(params.get(field), field)
            if value:
                showtimes = showtimes.filter(**{field: value})

        branch_id = parse_int(params.get('branch_id'), 'branch_id')
        if branch_id:
            showtimes = showtimes.filter(hall__branch_id=branch_id)

        start_from = parse_datetime(params.get('start_from'), 'start_from')
        start_to = parse_datetime(params.get('start_to'), 'start_to')
        if start_from and start_to and start_from > start_to:
            raise InvalidRequest('start_from cannot be after start_to.')
        if start_from:
            showtimes = showtimes.filter(start_time__gte=start_from)
        if start_to:
            showtimes = showtimes.filter(start_time__lte=start_to)

        min_price = parse_decimal(params.get('min_price'), 'min_price')
        max_price = parse_decimal(params.get('max_price'), 'max_price')
        if min_price is not None and max_price is not None and min_price > max_price:
            raise InvalidRequest('min_price cannot be greater than max_price.')
        if min_price is not None:
            showtimes = showtimes.filter(price__gte=min_price)
        if max_price is not None:
            showtimes = showtimes.filter(price__lte=max_price)

        ordering = parse_sort(
            params.get('sort_by'), params.get('sort_order'), SHOWTIME_SORT_FIELDS, 'starttime', default_desc=False
        )
        return showtimes.order_by(ordering, 'id')

    @staticmethod
    def list_upcoming(params):
        showtimes = ShowtimeService._queryset().filter(
            start_time__gt=timezone.now(),
            movie__status='ACTIVE',
            hall__status='AVAILABLE',
        )

        movie_id = parse_int(params.get('movie_id'), 'movie_id')
        if movie_id:
            showtimes = showtimes.filter(movie_id=movie_id)

        branch_id = parse_int(params.get('branch_id'), 'branch_id')
        if branch_id:
            showtimes = showtimes.filter(hall__branch_id=branch_id)

        day = parse_date(params.get('date'), 'date')
        if day:
            showtimes = showtimes.filter(start_time__date=day)

        return showtimes.order_by('start_time', 'id')

    @staticmethod
    def _validate_schedule(movie, hall, start_time, price, showtime_id=None):
        if movie.status != 'ACTIVE':
            raise InvalidOperation(f"Movie '{movie.name}' is not active.")
        if not hall.is_bookable():
            raise InvalidOperation(f'Hall {hall.hall_number} is not available ({hall.get_status_display()}).')
        if start_time <= timezone.now():
            raise InvalidRequest('start_time must be in the future.')
        if price <= 0:
            raise InvalidRequest('price must be greater than zero.')

        end_time = start_time + timedelta(minutes=movie.duration)
        overlapping = Showtime.objects.filter(
            hall_id=hall.id,
            start_time__lt=end_time,
            end_time__gt=start_time,
        ).exclude(id=showtime_id).select_related('movie').first()
        if overlapping:
            raise InvalidOperation(
                f"Hall {hall.hall_number} is already booked for '{overlapping.movie.name}' "
                f"from {overlapping.start_time:%Y-%m-%d %H:%M} to {overlapping.end_time:%H:%M}."
            )
        return end_time

    @staticmethod
    def _resolve_hall(hall_id, branch_id):
        hall = HallService.get(hall_id)
        if branch_id and hall.branch_id != branch_id:
            raise InvalidRequest(f'Hall {hall.hall_number} does not belong to branch {branch_id}.')
        return hall

    @staticmethod
    def create(data):
        movie = MovieService.get_details(parse_int(data.get('movie_id'), 'movie_id', required=True, minimum=1), public=False)
        hall = ShowtimeService._resolve_hall(
            parse_int(data.get('hall_id'), 'hall_id', required=True, minimum=1),
            parse_int(data.get('branch_id'), 'branch_id'),
        )
        start_time = parse_datetime(data.get('start_time'), 'start_time', required=True)
        price = parse_decimal(data.get('price'), 'price', required=True)

        end_time = ShowtimeService._validate_schedule(movie, hall, start_time, price)
        showtime = Showtime.objects.create(
            movie=movie, hall=hall, start_time=start_time, end_time=end_time, price=price
        )
        logger.info(f"Showtime created: {showtime} in hall {hall.id}")
        return ShowtimeService.get(showtime.id)

    @staticmethod
    def update(showtime_id, data):
        showtime = ShowtimeService.get(showtime_id)

        price = showtime.price
        if data.get('price') is not None:
            price = parse_decimal(data.get('price'), 'price')
            if price <= 0:
                raise InvalidRequest('price must be greater than zero.')

        movie_id = parse_int(data.get('movie_id'), 'movie_id') or showtime.movie_id
        hall_id = parse_int(data.get('hall_id'), 'hall_id') or showtime.hall_id
        start_time = parse_datetime(data.get('start_time'), 'start_time') or showtime.start_time
        schedule_changed = (
            movie_id != showtime.movie_id
            or hall_id != showtime.hall_id
            or start_time != showtime.start_time
        )

        if schedule_changed:
            if _has_bookings(showtime_id=showtime.id):
                raise InvalidOperation('Showtime has bookings. Only the price can be changed.')
            movie = MovieService.get_details(movie_id, public=False)
            hall = ShowtimeService._resolve_hall(hall_id, parse_int(data.get('branch_id'), 'branch_id'))
            showtime.end_time = ShowtimeService._validate_schedule(movie, hall, start_time, price, showtime.id)
            showtime.movie = movie
            showtime.hall = hall
            showtime.start_time = start_time

        showtime.price = price
        showtime.save()
        logger.info(f"Showtime {showtime.id} updated")
        return ShowtimeService.get(showtime.id)

    @staticmethod
    def delete(showtime_id):
        showtime = ShowtimeService.get(showtime_id)
        if _has_bookings(showtime_id=showtime.id):
            raise InvalidOperation('Showtime has bookings and cannot be deleted.')
        showtime.delete()
        logger.info(f"Showtime deleted: {showtime}")

class ReviewService:

    @staticmethod
    def _clean(data):
        rating = parse_int(data.get('rating'), 'rating', required=True)
        if rating < 1 or rating > 5:
            raise InvalidRequest('rating must be between 1 and 5.')
        return rating, (data.get('comment') or '').strip()

    @staticmethod
    def _get(review_id):
        try:
            return Review.objects.select_related('user', 'movie').get(id=review_id)
        except Review.DoesNotExist:
            raise ResourceNotFound(f'Review {review_id} not found.')

    @staticmethod
    def _owned(user_id, review_id):
        review = ReviewService._get(review_id)
        if review.user_id != user_id:
            raise AccessDenied('You can only modify your own reviews.')
        return review

    @staticmethod
    def create(user_id, movie_id, data):
        try:
            movie = Movie.objects.get(id=movie_id)
        except Movie.DoesNotExist:
            raise ResourceNotFound(f'Movie {movie_id} not found.')
        if movie.status != 'ACTIVE':
            raise InvalidOperation('Only active movies can be reviewed.')

        rating, comment = ReviewService._clean(data)
        if Review.objects.filter(user_id=user_id, movie_id=movie.id).exists():
            raise InvalidOperation('You have already reviewed this movie.')

        try:
            with transaction.atomic():
                review = Review.objects.create(user_id=user_id, movie=movie, rating=rating, comment=comment)
                movie.refresh_rating()
        except IntegrityError:
            raise InvalidOperation('You have already reviewed this movie.')

        logger.info(f"Review {review.id} by user {user_id} on movie {movie.id} | rating {rating}")
        return ReviewService._get(review.id)

    @staticmethod
    def update(user_id, review_id, data):
        review = ReviewService._owned(user_id, review_id)
        review.rating, review.comment = ReviewService._clean(data)
        with transaction.atomic():
            review.save()
            review.movie.refresh_rating()
        return ReviewService._get(review.id)

    @staticmethod
    def delete(user_id, review_id):
        review = ReviewService._owned(user_id, review_id)
        movie = review.movie
        with transaction.atomic():
            review.delete()
            movie.refresh_rating()
        logger.info(f"Review {review_id} deleted by user {user_id}")

    @staticmethod
    def list_for_movie(movie_id):
        if not Movie.objects.filter(id=movie_id).exists():
            raise ResourceNotFound(f'Movie {movie_id} not found.')
        return Review.objects.select_related('user', 'movie').filter(movie_id=movie_id).order_by('-created_at', '-id')

    @staticmethod
    def list_for_user(user_id):
        return Review.objects.select_related('user', 'movie').filter(user_id=user_id).order_by('-created_at', '-id')

    @staticmethod
    def get_user_review_for_movie(user_id, movie_id):
        review = Review.objects.select_related('user', 'movie').filter(user_id=user_id, movie_id=movie_id).first()
        if review is None:
            raise ResourceNotFound('You have not reviewed this movie.')
        return review
