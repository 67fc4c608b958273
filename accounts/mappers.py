from .models import UserProfile

def _iso(value):
    return value.isoformat() if value else None

def user_summary_to_dict(user):
    return {
        'id': user.id,
        'email': user.email,
        'first_name': user.first_name,
        'last_name': user.last_name,
    }

def user_to_dict(user):

    profile = UserProfile.for_user(user)
    return {
        **user_summary_to_dict(user),
        'phone_number': profile.phone_number,
        'address': profile.address,
        'city': profile.city,
        'date_of_birth': _iso(profile.date_of_birth),
        'gender': profile.gender,
        'role': 'ADMIN' if profile.is_admin else profile.role,
        'is_active': user.is_active,
        'is_email_confirmed': profile.is_email_confirmed,
        'created_at': _iso(user.date_joined),
        'updated_at': _iso(profile.updated_at),
    }
