import json
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase, Client
from django.utils import timezone

from accounts.tokens import create_access_token

from .exceptions import AccessDenied, InvalidOperation, InvalidRequest, ResourceNotFound
from .mappers import trailer_embed_url
from .models import Genre, Movie, Review
from .services import (
    BranchService, GenreService, HallService, MovieService, ReviewService, ShowtimeService,
)
from .theater_models import Branch, Showtime, layout_capacity, layout_seat_labels
from .utils import page_params, parse_datetime, parse_decimal, parse_int, parse_sort

def make_movie(name='Arrival', status='ACTIVE', duration=116):
    return Movie.objects.create(
        name=name, duration=duration, release_date=timezone.now().date(), status=status
    )

def make_hall(hall_type='TWO_D', hall_number='1', branch_name='Downtown'):
    branch, _ = Branch.objects.get_or_create(name=branch_name, defaults={'location': 'Main Street 1'})
    return HallService.create({'branch_id': branch.id, 'hall_number': hall_number, 'hall_type': hall_type})

class HallLayoutTests(TestCase):

    def test_layout_capacities(self):
        self.assertEqual(layout_capacity('TWO_D'), 80)
        self.assertEqual(layout_capacity('THREE_D'), 72)
        self.assertEqual(layout_capacity('IMAX'), 63)
        self.assertEqual(layout_capacity('SCREEN_X'), 56)
        self.assertEqual(layout_capacity('VIP'), 24)

    def test_vip_labels_skip_aisles(self):
        labels = layout_seat_labels('VIP')

        self.assertEqual(labels[:4], ['A1', 'A2', 'A9', 'A10'])
        self.assertEqual(labels[-1], 'F10')

class HallServiceTests(TestCase):

    def test_create_generates_seats(self):
        hall = make_hall('IMAX')

        self.assertEqual(hall.capacity, 63)
        self.assertEqual(hall.seats.count(), 63)

    def test_hall_number_unique_per_branch(self):
        make_hall(hall_number='7')

        with self.assertRaises(InvalidOperation) as ctx:
            make_hall(hall_number='7')
        self.assertEqual(ctx.exception.get_status_code(), 409)

        other = make_hall(hall_number='7', branch_name='Uptown')
        self.assertEqual(other.hall_number, '7')

    def test_type_change_regenerates_seats(self):
        hall = make_hall('TWO_D')

        hall = HallService.update(hall.id, {'hall_type': 'vip'})

        self.assertEqual(hall.capacity, 24)
        self.assertEqual(hall.seats.count(), 24)

    def test_hall_with_showtimes_cannot_be_deleted(self):
        hall = make_hall()
        Showtime.objects.create(movie=make_movie(), hall=hall, start_time=timezone.now() + timedelta(days=1), price=10)

        with self.assertRaises(InvalidOperation):
            HallService.delete(hall.id)

    def test_branch_with_halls_cannot_be_deleted(self):
        hall = make_hall()

        with self.assertRaises(InvalidOperation):
            BranchService.delete(hall.branch_id)

class ShowtimeServiceTests(TestCase):

    def setUp(self):
        self.movie = make_movie(duration=120)
        self.hall = make_hall()
        self.start = timezone.now() + timedelta(days=2)

    def create(self, **overrides):
        data = {
            'movie_id': self.movie.id,
            'hall_id': self.hall.id,
            'start_time': self.start.isoformat(),
            'price': '12.50',
        }
        data.update(overrides)
        return ShowtimeService.create(data)

    def test_end_time_follows_duration(self):
        showtime = self.create()

        self.assertEqual(showtime.end_time - showtime.start_time, timedelta(minutes=120))
        self.assertEqual(showtime.price, Decimal('12.50'))

    def test_overlap_in_same_hall_is_conflict(self):
        self.create()

        with self.assertRaises(InvalidOperation) as ctx:
            self.create(start_time=(self.start + timedelta(minutes=90)).isoformat())
        self.assertEqual(ctx.exception.get_status_code(), 409)

    def test_back_to_back_showtimes_are_allowed(self):
        self.create()

        showtime = self.create(start_time=(self.start + timedelta(minutes=120)).isoformat())
        self.assertIsNotNone(showtime.id)

    def test_rules(self):
        with self.assertRaises(InvalidRequest):
            self.create(start_time=(timezone.now() - timedelta(hours=1)).isoformat())
        with self.assertRaises(InvalidRequest):
            self.create(price='0')

        draft = make_movie('Draft Movie', status='DRAFT')
        with self.assertRaises(InvalidOperation):
            self.create(movie_id=draft.id)

        other_branch = Branch.objects.create(name='Uptown', location='Hill Road')
        with self.assertRaises(InvalidRequest):
            self.create(branch_id=other_branch.id)

    def test_only_price_changes_once_booked(self):
        from bookings.models import Booking

        showtime = self.create()
        user = User.objects.create_user(username='a@example.com', email='a@example.com', password='x')
        Booking.objects.create(user=user, showtime=showtime, total_amount=Decimal('10.00'))

        updated = ShowtimeService.update(showtime.id, {'price': '15.00'})
        self.assertEqual(updated.price, Decimal('15.00'))

        with self.assertRaises(InvalidOperation):
            ShowtimeService.update(showtime.id, {'start_time': (self.start + timedelta(hours=5)).isoformat()})

        with self.assertRaises(InvalidOperation):
            ShowtimeService.delete(showtime.id)

    def test_upcoming_lists_future_showtimes_only(self):
        self.create()
        Showtime.objects.create(
            movie=self.movie, hall=self.hall, start_time=timezone.now() - timedelta(days=1), price=10
        )

        upcoming = ShowtimeService.list_upcoming({'movie_id': str(self.movie.id)})

        self.assertEqual(upcoming.count(), 1)

class MovieServiceTests(TestCase):

    def setUp(self):
        self.drama = Genre.objects.create(name='Drama')
        self.scifi = Genre.objects.create(name='Sci-Fi')

    def test_create_with_images_and_cast(self):
        movie = MovieService.create({
            'name': 'Dune',
            'duration': 155,
            'release_date': '2021-10-22',
            'status': 'active',
            'genre_ids': [self.scifi.id],
            'trailer_url': 'https://www.youtube.com/watch?v=n9xhJrPXop4',
            'images': [{'image_url': 'https://img.example.com/dune.jpg', 'is_poster': True}],
            'cast': [
                {'person_name': 'Denis Villeneuve', 'role_type': 'DIRECTOR', 'display_order': 1},
                {'person_name': 'Timothee Chalamet', 'character_name': 'Paul', 'is_lead': True},
            ],
        })

        self.assertEqual(movie.status, 'ACTIVE')
        self.assertEqual(list(movie.genres.all()), [self.scifi])
        self.assertEqual(movie.images.count(), 1)
        self.assertEqual([member.person_name for member in movie.cast_members.all()],
                         ['Denis Villeneuve', 'Timothee Chalamet'])
        self.assertIn('youtube.com/embed/n9xhJrPXop4', trailer_embed_url(movie))

    def test_explicit_zero_display_order_is_kept(self):
        movie = MovieService.create({
            'name': 'Arrival',
            'duration': 116,
            'release_date': '2016-11-11',
            'cast': [
                {'person_name': 'Amy Adams', 'display_order': 1},
                {'person_name': 'Jeremy Renner', 'display_order': 0},
                {'person_name': 'Forest Whitaker'},
            ],
        })

        orders = dict(movie.cast_members.values_list('person_name', 'display_order'))
        self.assertEqual(orders, {'Amy Adams': 1, 'Jeremy Renner': 0, 'Forest Whitaker': 2})

    def test_duplicate_name_is_conflict(self):
        make_movie('Heat')

        with self.assertRaises(InvalidOperation) as ctx:
            MovieService.create({'name': 'heat', 'duration': 170, 'release_date': '1995-12-15'})
        self.assertEqual(ctx.exception.get_status_code(), 409)

    def test_unknown_genre_is_not_found(self):
        with self.assertRaises(ResourceNotFound):
            MovieService.create({'name': 'X', 'duration': 90, 'release_date': '2020-01-01', 'genre_ids': [999]})

    def test_unsupported_trailer_host_is_rejected(self):
        with self.assertRaises(InvalidRequest):
            MovieService.create({
                'name': 'X', 'duration': 90, 'release_date': '2020-01-01',
                'trailer_url': 'https://example.com/trailer.mp4',
            })

    def test_browse_hides_drafts_and_filters(self):
        visible = make_movie('Visible')
        visible.genres.add(self.drama)
        make_movie('Hidden', status='DRAFT')
        make_movie('Other')

        names = [movie.name for movie in MovieService.browse({'genre_id': str(self.drama.id)})]
        self.assertEqual(names, ['Visible'])

        all_public = [movie.name for movie in MovieService.browse({})]
        self.assertNotIn('Hidden', all_public)

        admin_view = [movie.name for movie in MovieService.browse({}, public=False)]
        self.assertIn('Hidden', admin_view)

    def test_browse_unknown_genre_is_not_found(self):
        with self.assertRaises(ResourceNotFound):
            MovieService.browse({'genre_id': '404'})

    def test_genre_in_use_cannot_be_deleted(self):
        make_movie().genres.add(self.drama)

        with self.assertRaises(InvalidOperation):
            GenreService.delete(self.drama.id)

        GenreService.delete(self.scifi.id)
        self.assertFalse(Genre.objects.filter(id=self.scifi.id).exists())

    def test_genre_names_unique_ignoring_case(self):
        with self.assertRaises(InvalidOperation):
            GenreService.create({'name': 'drama'})

class ReviewServiceTests(TestCase):

    def setUp(self):
        self.movie = make_movie()
        self.alice = User.objects.create_user(username='alice@example.com', email='alice@example.com', password='x')
        self.bob = User.objects.create_user(username='bob@example.com', email='bob@example.com', password='x')

    def test_rating_is_average_of_reviews(self):
        ReviewService.create(self.alice.id, self.movie.id, {'rating': 5, 'comment': 'Great'})
        review = ReviewService.create(self.bob.id, self.movie.id, {'rating': 2})

        self.movie.refresh_from_db()
        self.assertEqual(self.movie.rating, Decimal('3.50'))

        ReviewService.delete(self.bob.id, review.id)
        self.movie.refresh_from_db()
        self.assertEqual(self.movie.rating, Decimal('5.00'))

    def test_one_review_per_user(self):
        ReviewService.create(self.alice.id, self.movie.id, {'rating': 4})

        with self.assertRaises(InvalidOperation) as ctx:
            ReviewService.create(self.alice.id, self.movie.id, {'rating': 3})
        self.assertEqual(ctx.exception.get_status_code(), 409)

    def test_only_owner_can_modify(self):
        review = ReviewService.create(self.alice.id, self.movie.id, {'rating': 4})

        with self.assertRaises(AccessDenied):
            ReviewService.update(self.bob.id, review.id, {'rating': 1})
        with self.assertRaises(AccessDenied):
            ReviewService.delete(self.bob.id, review.id)

    def test_rating_bounds(self):
        with self.assertRaises(InvalidRequest):
            ReviewService.create(self.alice.id, self.movie.id, {'rating': 6})

    def test_inactive_movie_cannot_be_reviewed(self):
        archived = make_movie('Old', status='ARCHIVED')

        with self.assertRaises(InvalidOperation):
            ReviewService.create(self.alice.id, archived.id, {'rating': 4})

    def test_rating_resets_to_zero(self):
        review = ReviewService.create(self.alice.id, self.movie.id, {'rating': 4})
        ReviewService.delete(self.alice.id, review.id)

        self.movie.refresh_from_db()
        self.assertEqual(self.movie.rating, Decimal('0.00'))
        self.assertFalse(Review.objects.exists())

class UtilityTests(TestCase):

    def test_page_params_defaults(self):
        self.assertEqual(page_params({'page': '-3', 'page_size': 'abc'}), (1, 10))
        self.assertEqual(page_params({'page': '2', 'page_size': '25'}), (2, 25))
        self.assertEqual(page_params({'page_size': '101'}), (1, 10))

    def test_parse_sort(self):
        fields = {'moviename': 'name', 'rating': 'rating'}

        self.assertEqual(parse_sort('MovieName', 'asc', fields, 'rating'), 'name')
        self.assertEqual(parse_sort('unknown', None, fields, 'rating'), '-rating')

    def test_naive_datetimes_are_utc(self):
        parsed = parse_datetime('2030-01-01T10:00:00', 'start_time')

        self.assertEqual(parsed.utcoffset(), timedelta(0))
        self.assertEqual(parsed.hour, 10)

    def test_non_finite_numbers_are_rejected(self):
        for value in ('NaN', 'sNaN', 'Infinity', '-inf'):
            with self.assertRaises(InvalidRequest):
                parse_decimal(value, 'amount')

        self.assertEqual(parse_decimal('12.50', 'amount'), Decimal('12.50'))

    def test_fractional_ids_are_rejected(self):
        with self.assertRaises(InvalidRequest):
            parse_int(1.9, 'seat_ids')

        self.assertEqual(parse_int(2.0, 'seat_ids'), 2)
        self.assertEqual(parse_int('7', 'seat_ids'), 7)

class CatalogAPITests(TestCase):

    def setUp(self):
        self.client = Client()
        self.movie = make_movie()
        self.hall = make_hall('VIP')
        self.showtime = Showtime.objects.create(
            movie=self.movie, hall=self.hall, start_time=timezone.now() + timedelta(days=1), price=10
        )
        self.user = User.objects.create_user(username='c@example.com', email='c@example.com', password='x')
        token, _ = create_access_token(self.user, 'USER')
        self.auth = {'HTTP_AUTHORIZATION': f'Bearer {token}'}

    def test_movie_list_is_paged(self):
        response = self.client.get('/api/movies?page_size=1')

        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(body['total_count'], 1)
        self.assertEqual(body['items'][0]['name'], 'Arrival')

    def test_draft_movie_detail_is_404(self):
        draft = make_movie('Secret', status='DRAFT')

        response = self.client.get(f'/api/movies/{draft.id}')

        self.assertEqual(response.status_code, 404)

    def test_hall_seats_for_showtime(self):
        response = self.client.get(f'/api/showtimes/{self.showtime.id}/hall-seats')

        body = response.json()
        self.assertEqual(len(body['available_seats']), 24)
        self.assertEqual(body['reserved_seats'], [])

    def test_review_endpoints(self):
        response = self.client.post(
            f'/api/movies/{self.movie.id}/reviews',
            data=json.dumps({'rating': 4, 'comment': 'Nice'}),
            content_type='application/json',
            **self.auth,
        )
        self.assertEqual(response.status_code, 201)

        response = self.client.get(f'/api/movies/{self.movie.id}/reviews/me', **self.auth)
        self.assertEqual(response.json()['rating'], 4)

        response = self.client.get(f'/api/movies/{self.movie.id}/reviews')
        self.assertEqual(response.json()['total_count'], 1)

    def test_posting_review_requires_auth(self):
        response = self.client.post(
            f'/api/movies/{self.movie.id}/reviews',
            data=json.dumps({'rating': 4}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 401)

    def test_malformed_json_is_400(self):
        response = self.client.post(
            f'/api/movies/{self.movie.id}/reviews', data='{bad', content_type='application/json', **self.auth
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error']['code'], 'BAD_REQUEST')
