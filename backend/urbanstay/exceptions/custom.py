class UrbanStayError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(UrbanStayError):
    """Missing or malformed input, or an illegal state transition."""

    status_code = 400


class AuthenticationError(UrbanStayError):
    status_code = 401


class AuthorizationError(UrbanStayError):
    """Wrong role, or not a party to the resource."""

    status_code = 403


class NotFoundError(UrbanStayError):
    status_code = 404

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")
