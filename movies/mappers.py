import logging

from embed_video.backends import detect_backend, UnknownBackendException

logger = logging.getLogger(__name__)

def _iso(value):
    return value.isoformat() if value else None

def _money(value):
    return str(value) if value is not None else None

def trailer_embed_url(movie):
    if not movie.trailer_url:
        return None
    try:
        return detect_backend(str(movie.trailer_url)).url
    except UnknownBackendException:
        logger.warning(f"Unrecognised trailer URL for movie {movie.id}: {movie.trailer_url}")
        return None

def genre_to_dict(genre):
    data = {
        'id': genre.id,
        'name': genre.name,
        'slug': genre.slug,
    }
    if hasattr(genre, 'movie_count'):
        data['movie_count'] = genre.movie_count
    return data

def _poster_url(movie):
    images = list(movie.images.all())
    poster = next((image for image in images if image.is_poster), images[0] if images else None)
    return poster.image_url if poster else None

def movie_summary_to_dict(movie):
    return {
        'id': movie.id,
        'name': movie.name,
        'slug': movie.slug,
        'duration': movie.duration,
        'duration_formatted': movie.duration_formatted(),
        'release_date': _iso(movie.release_date),
        'age_rating': movie.age_rating,
        'status': movie.status,
        'rating': _money(movie.rating),
        'language': movie.language,
        'poster_url': _poster_url(movie),
        'genres': [genre_to_dict(genre) for genre in movie.genres.all()],
    }

def movie_to_dict(movie):
    return {
        **movie_summary_to_dict(movie),
        'description': movie.description,
        'trailer_url': str(movie.trailer_url) if movie.trailer_url else '',
        'trailer_embed_url': trailer_embed_url(movie),
        'images': [
            {
                'id': image.id,
                'image_url': image.image_url,
                'caption': image.caption,
                'is_poster': image.is_poster,
                'display_order': image.display_order,
            }
            for image in movie.images.all()
        ],
        'cast': [
            {
                'id': member.id,
                'person_name': member.person_name,
                'image_url': member.image_url,
                'role_type': member.role_type,
                'character_name': member.character_name,
                'display_order': member.display_order,
                'is_lead': member.is_lead,
            }
            for member in movie.cast_members.all()
        ],
        'created_at': _iso(movie.created_at),
        'updated_at': _iso(movie.updated_at),
    }

def branch_to_dict(branch):
    data = {
        'id': branch.id,
        'name': branch.name,
        'location': branch.location,
    }
    if hasattr(branch, 'hall_count'):
        data['hall_count'] = branch.hall_count
    return data

def seat_to_dict(seat):
    return {
        'id': seat.id,
        'label': seat.label,
        'hall_id': seat.hall_id,
    }

def hall_summary_to_dict(hall):
    return {
        'id': hall.id,
        'hall_number': hall.hall_number,
        'hall_type': hall.hall_type,
        'status': hall.status,
        'capacity': hall.capacity,
        'branch': branch_to_dict(hall.branch),
    }

def hall_to_dict(hall):
    return {
        **hall_summary_to_dict(hall),
        'seats': [seat_to_dict(seat) for seat in hall.seats.all()],
        'created_at': _iso(hall.created_at),
    }

def showtime_to_dict(showtime):
    movie = showtime.movie
    return {
        'id': showtime.id,
        'movie': {
            'id': movie.id,
            'name': movie.name,
            'duration': movie.duration,
            'age_rating': movie.age_rating,
        },
        'hall': hall_summary_to_dict(showtime.hall),
        'start_time': _iso(showtime.start_time),
        'end_time': _iso(showtime.end_time),
        'price': _money(showtime.price),
    }

def showtime_hall_seats_to_dict(showtime, available, reserved):
    return {
        'showtime': showtime_to_dict(showtime),
        'available_seats': [seat_to_dict(seat) for seat in available],
        'reserved_seats': [seat_to_dict(seat) for seat in reserved],
    }

def review_to_dict(review):
    return {
        'id': review.id,
        'movie_id': review.movie_id,
        'movie_name': review.movie.name,
        'user_id': review.user_id,
        'user_name': review.user.get_full_name() or review.user.email,
        'rating': review.rating,
        'comment': review.comment,
        'created_at': _iso(review.created_at),
        'updated_at': _iso(review.updated_at),
    }
