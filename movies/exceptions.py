class ServiceError(Exception):
    status_code = 500
    code = 'INTERNAL_ERROR'

    def __init__(self, message=''):
        super().__init__(message)
        self.message = message

    def get_status_code(self):
        return self.status_code

    def get_code(self):
        return self.code


class ResourceNotFound(ServiceError):
    status_code = 404
    code = 'NOT_FOUND'


class AccessDenied(ServiceError):
    status_code = 403
    code = 'FORBIDDEN'


class AuthenticationFailed(ServiceError):
    status_code = 401
    code = 'UNAUTHORIZED'


class InvalidRequest(ServiceError):
    status_code = 400
    code = 'BAD_REQUEST'


class InvalidOperation(ServiceError):
    """Business-rule violation. Messages mentioning 'already' describe a conflicting state."""

    status_code = 400
    code = 'BAD_REQUEST'

    def get_status_code(self):
        if 'already' in self.message.lower():
            return 409
        return self.status_code

    def get_code(self):
        if 'already' in self.message.lower():
            return 'CONFLICT'
        return self.code


class PaymentGatewayError(ServiceError):
    status_code = 502
    code = 'PAYMENT_GATEWAY_ERROR'
