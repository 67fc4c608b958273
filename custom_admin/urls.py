from django.urls import path
from . import views

urlpatterns = [
    path('dashboard', views.dashboard, name='admin_dashboard'),
    path('dashboard/monthly-revenue', views.dashboard_monthly_revenue, name='admin_monthly_revenue'),
    path('dashboard/weekly-bookings', views.dashboard_weekly_bookings, name='admin_weekly_bookings'),

    path('bookings', views.bookings, name='admin_bookings'),
    path('bookings/<int:booking_id>', views.booking_detail, name='admin_booking_detail'),
    path('bookings/<int:booking_id>/status', views.booking_status, name='admin_booking_status'),

    path('movies', views.movies, name='admin_movies'),
    path('movies/<int:movie_id>', views.movie_detail, name='admin_movie_detail'),
    path('genres', views.genres, name='admin_genres'),
    path('genres/<int:genre_id>', views.genre_detail, name='admin_genre_detail'),

    path('branches', views.branches, name='admin_branches'),
    path('branches/<int:branch_id>', views.branch_detail, name='admin_branch_detail'),
    path('halls', views.halls, name='admin_halls'),
    path('halls/<int:hall_id>', views.hall_detail, name='admin_hall_detail'),
    path('seats', views.seats, name='admin_seats'),
    path('seats/<int:seat_id>', views.seat_detail, name='admin_seat_detail'),
    path('showtimes', views.showtimes, name='admin_showtimes'),
    path('showtimes/<int:showtime_id>', views.showtime_detail, name='admin_showtime_detail'),

    path('payments', views.payments, name='admin_payments'),
    path('payments/<int:payment_id>', views.payment_detail, name='admin_payment_detail'),

    path('tickets', views.tickets, name='admin_tickets'),
    path('tickets/<int:ticket_id>', views.ticket_detail, name='admin_ticket_detail'),
    path('tickets/by-booking/<int:booking_id>', views.tickets_by_booking, name='admin_tickets_by_booking'),
    path('tickets/by-showtime/<int:showtime_id>', views.tickets_by_showtime, name='admin_tickets_by_showtime'),
    path('tickets/check-qr', views.ticket_check_qr, name='admin_ticket_check_qr'),
    path('tickets/check-in', views.ticket_check_in, name='admin_ticket_check_in'),

    path('users', views.users, name='admin_users'),
    path('users/<int:user_id>', views.user_detail, name='admin_user_detail'),
    path('users/<int:user_id>/activate', views.user_action, {'action': 'activate'}, name='admin_user_activate'),
    path('users/<int:user_id>/deactivate', views.user_action, {'action': 'deactivate'}, name='admin_user_deactivate'),
    path('users/<int:user_id>/confirm-email', views.user_action, {'action': 'confirm-email'},
         name='admin_user_confirm_email'),
    path('users/<int:user_id>/unconfirm-email', views.user_action, {'action': 'unconfirm-email'},
         name='admin_user_unconfirm_email'),
    path('users/<int:user_id>/bookings', views.user_bookings, name='admin_user_bookings'),
    path('users/<int:user_id>/tickets', views.user_tickets, name='admin_user_tickets'),
    path('users/<int:user_id>/payments', views.user_payments, name='admin_user_payments'),
]
