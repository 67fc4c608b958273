from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/admin/', include('custom_admin.urls')),
    path('api/', include('accounts.urls')),
    path('api/', include('movies.urls')),
    path('api/', include('bookings.urls')),
]

handler400 = 'movies.error_handlers.handler400'
handler403 = 'movies.error_handlers.handler403'
handler404 = 'movies.error_handlers.handler404'
handler500 = 'movies.error_handlers.handler500'
