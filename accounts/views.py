import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods, require_POST

from movies.utils import read_json

from .decorators import jwt_required
from .mappers import user_to_dict
from .services import AuthService, UserService

logger = logging.getLogger(__name__)

@csrf_exempt
@require_POST
def register(request):
    data = read_json(request)
    user = AuthService.register(
        email=data.get('email'),
        password=data.get('password'),
        first_name=data.get('first_name', ''),
        last_name=data.get('last_name', ''),
        phone_number=data.get('phone_number', ''),
    )
    return JsonResponse({
        'message': 'Registration successful. Please check your inbox to confirm your email.',
        'user': user_to_dict(user),
    }, status=201)

@csrf_exempt
@require_POST
def login_view(request):
    data = read_json(request)
    return JsonResponse(AuthService.login(data.get('email'), data.get('password')))

@csrf_exempt
@require_POST
def verify_email(request):
    data = read_json(request)
    AuthService.verify_email(data.get('uid'), data.get('token'))
    return JsonResponse({'message': 'Email confirmed successfully.'})

@csrf_exempt
@require_POST
def resend_verification(request):
    data = read_json(request)
    AuthService.resend_verification(data.get('email'))
    return JsonResponse({'message': 'If the account exists, a verification email has been sent.'})

@csrf_exempt
@require_POST
def forgot_password(request):
    data = read_json(request)
    AuthService.forgot_password(data.get('email'))
    return JsonResponse({'message': 'If the account exists, a password reset email has been sent.'})

@csrf_exempt
@require_POST
def reset_password(request):
    data = read_json(request)
    AuthService.reset_password(data.get('uid'), data.get('token'), data.get('new_password'))
    return JsonResponse({'message': 'Password has been reset. You can now log in.'})

@csrf_exempt
@require_http_methods(["GET", "PUT"])
@jwt_required
def me(request):
    if request.method == 'PUT':
        user = UserService.update_profile(request.user.id, read_json(request))
    else:
        user = UserService.get_user(request.user.id)
    return JsonResponse(user_to_dict(user))

@csrf_exempt
@require_POST
@jwt_required
def change_password(request):
    data = read_json(request)
    UserService.change_password(request.user.id, data.get('current_password'), data.get('new_password'))
    return JsonResponse({'message': 'Password changed successfully.'})
