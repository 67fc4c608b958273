from django.contrib import admin
from django.utils.html import format_html

from .models import Movie, Genre, MovieImage, MovieCastMember, Review
from .theater_models import Branch, Hall, Seat, Showtime

@admin.register(Genre)
class GenreAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug']
    search_fields = ['name']
    readonly_fields = ['slug']

class MovieImageInline(admin.TabularInline):
    model = MovieImage
    extra = 0

class MovieCastMemberInline(admin.TabularInline):
    model = MovieCastMember
    extra = 0

@admin.register(Movie)
class MovieAdmin(admin.ModelAdmin):
    list_display = ['name', 'release_date', 'rating', 'duration_formatted', 'status', 'poster_preview']

    list_filter = ['genres', 'status', 'age_rating', 'release_date']

    search_fields = ['name', 'description', 'cast_members__person_name']

    filter_horizontal = ['genres']

    readonly_fields = ['slug', 'rating']

    inlines = [MovieImageInline, MovieCastMemberInline]

    fieldsets = [
        ('Basic Info', {
            'fields': ['name', 'slug', 'description', 'trailer_url']
        }),
        ('Details', {
            'fields': ['release_date', 'duration', 'age_rating', 'rating', 'genres', 'language']
        }),
        ('Status', {
            'fields': ['status']
        }),
    ]

    def duration_formatted(self, obj):
        return obj.duration_formatted()
    duration_formatted.short_description = 'Duration'

    def poster_preview(self, obj):
        poster = obj.images.filter(is_poster=True).first() or obj.images.first()
        if poster:
            return format_html(
                '<img src="{}" style="width: 50px; height: 75px; object-fit: cover; border-radius: 4px;" />',
                poster.image_url
            )
        return format_html('<span style="color: #999;">{}</span>', 'No Poster')
    poster_preview.short_description = 'Poster'

@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['movie', 'user', 'rating', 'created_at']
    list_filter = ['rating', 'created_at']
    search_fields = ['movie__name', 'user__email', 'comment']

@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ['name', 'location', 'created_at']
    search_fields = ['name', 'location']

@admin.register(Hall)
class HallAdmin(admin.ModelAdmin):
    list_display = ['hall_number', 'branch', 'hall_type', 'status', 'capacity']
    list_filter = ['branch', 'hall_type', 'status']

    search_fields = ['hall_number', 'branch__name']

    readonly_fields = ['capacity']

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        if db_field.name == "branch":
            kwargs["queryset"] = Branch.objects.order_by('name')
        return super().formfield_for_foreignkey(db_field, request, **kwargs)

@admin.register(Seat)
class SeatAdmin(admin.ModelAdmin):
    list_display = ['label', 'hall']
    list_filter = ['hall__branch']
    search_fields = ['label', 'hall__hall_number']

@admin.register(Showtime)
class ShowtimeAdmin(admin.ModelAdmin):
    list_display = ['movie', 'hall', 'start_time', 'end_time', 'price']
    list_filter = ['hall__branch', 'hall__hall_type']

    search_fields = ['movie__name', 'hall__hall_number']

    date_hierarchy = 'start_time'

    def formfield_for_foreignkey(self, db_field, request, **kwargs):
        if db_field.name == "hall":
            kwargs["queryset"] = Hall.objects.select_related('branch').all()
        return super().formfield_for_foreignkey(db_field, request, **kwargs)
