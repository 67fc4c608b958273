from django.urls import path
from . import views

urlpatterns = [
    path('movies', views.movie_list, name='movie_list'),
    path('movies/<int:movie_id>', views.movie_detail, name='movie_detail'),
    path('movies/<int:movie_id>/reviews', views.movie_reviews, name='movie_reviews'),
    path('movies/<int:movie_id>/reviews/me', views.my_movie_review, name='my_movie_review'),

    path('genres', views.genre_list, name='genre_list'),
    path('branches', views.branch_list, name='branch_list'),

    path('showtimes', views.showtime_list, name='showtime_list'),
    path('showtimes/<int:showtime_id>/hall-seats', views.showtime_hall_seats, name='showtime_hall_seats'),

    path('reviews/<int:review_id>', views.review_detail, name='review_detail'),
    path('me/reviews', views.my_reviews, name='my_reviews'),
]
