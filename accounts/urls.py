from django.urls import path
from . import views

urlpatterns = [
    path('auth/register', views.register, name='register'),
    path('auth/login', views.login_view, name='login'),
    path('auth/verify-email', views.verify_email, name='verify_email'),
    path('auth/resend-verification', views.resend_verification, name='resend_verification'),
    path('auth/forgot-password', views.forgot_password, name='forgot_password'),
    path('auth/reset-password', views.reset_password, name='reset_password'),

    path('me', views.me, name='me'),
    path('me/change-password', views.change_password, name='change_password'),
]
