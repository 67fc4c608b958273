from django.urls import path
from . import views

urlpatterns = [
    path('bookings', views.bookings, name='bookings'),
    path('bookings/<int:booking_id>', views.booking_detail, name='booking_detail'),
    path('bookings/<int:booking_id>/confirm', views.confirm_booking, name='confirm_booking'),

    path('payments/intent', views.payment_intent, name='payment_intent'),
    path('payments/confirm', views.payment_confirm, name='payment_confirm'),
    path('payments/refund', views.payment_refund, name='payment_refund'),

    path('tickets', views.tickets, name='tickets'),
    path('tickets/<int:ticket_id>', views.ticket_detail, name='ticket_detail'),
]
