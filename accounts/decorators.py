from functools import wraps

from movies.exceptions import AuthenticationFailed, AccessDenied

from .models import UserProfile

def _bearer_token(request):
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()

def jwt_required(view_func):
    """Resolves ``request.user`` from the ``Authorization: Bearer`` header."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        from .services import AuthService

        token = _bearer_token(request)
        if token is None:
            raise AuthenticationFailed('Authentication credentials were not provided.')

        request.user = AuthService.authenticate_token(token)
        return view_func(request, *args, **kwargs)

    return wrapper

def admin_required(view_func):
    @wraps(view_func)
    @jwt_required
    def wrapper(request, *args, **kwargs):
        if not UserProfile.for_user(request.user).is_admin:
            raise AccessDenied('Administrator privileges are required.')

        return view_func(request, *args, **kwargs)

    return wrapper
