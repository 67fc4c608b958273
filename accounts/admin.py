from django.contrib import admin
from accounts.models import UserProfile

@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'role', 'is_email_confirmed', 'email_confirmed_at', 'created_at')
    list_filter = ('role', 'is_email_confirmed', 'gender', 'created_at')
    search_fields = ('user__email', 'user__first_name', 'user__last_name', 'phone_number')
    readonly_fields = ('created_at', 'updated_at', 'email_confirmed_at')

    fieldsets = (
        ('User', {
            'fields': ('user', 'role')
        }),
        ('Contact', {
            'fields': ('phone_number', 'address', 'city', 'date_of_birth', 'gender')
        }),
        ('Verification Status', {
            'fields': ('is_email_confirmed', 'email_confirmed_at')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
