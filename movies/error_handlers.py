import json
import logging
from django.http import JsonResponse
from django.core.exceptions import PermissionDenied
from django.db import DatabaseError

from .exceptions import ServiceError

logger = logging.getLogger(__name__)

def error_response(message, code, status):
    return JsonResponse({'error': {'message': message, 'code': code}}, status=status)

def handler400(request, exception):

    logger.warning(f'400 Error: {exception}')
    return error_response('The request could not be understood.', 'BAD_REQUEST', 400)

def handler403(request, exception):

    logger.warning(f'403 Error: {exception}')
    return error_response('You do not have permission to access this resource.', 'FORBIDDEN', 403)

def handler404(request, exception):

    logger.warning(f'404 Error: {request.path}')
    return error_response('The requested resource was not found.', 'NOT_FOUND', 404)

def handler500(request):

    logger.error('500 Internal Server Error')
    return error_response('An unexpected error occurred.', 'INTERNAL_ERROR', 500)

def handler503(request, exception=None):

    logger.error(f'503 Service Unavailable: {exception}')
    return error_response('The service is temporarily unavailable.', 'SERVICE_UNAVAILABLE', 503)

class ApiExceptionMiddleware:
    """Renders exceptions escaping API views as ``{"error": {"message", "code"}}``."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if isinstance(exception, ServiceError):
            status = exception.get_status_code()
            if status >= 500:
                logger.error(f'{type(exception).__name__} on {request.path}: {exception.message}')
            else:
                logger.info(f'{type(exception).__name__} on {request.path}: {exception.message}')
            return error_response(exception.message, exception.get_code(), status)

        if isinstance(exception, json.JSONDecodeError):
            logger.info(f'Malformed JSON body on {request.path}: {exception}')
            return error_response('Request body must be valid JSON.', 'BAD_REQUEST', 400)

        if isinstance(exception, PermissionDenied):
            return handler403(request, exception)

        if isinstance(exception, DatabaseError):
            logger.error(f'Database error on {request.path}: {exception}', exc_info=True)
            return handler503(request, exception)

        if not request.path.startswith('/api/'):
            return None

        logger.error(f'Unhandled exception on {request.path}: {exception}', exc_info=True)
        return error_response('An unexpected error occurred.', 'INTERNAL_ERROR', 500)
