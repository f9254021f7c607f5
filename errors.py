from fastapi import status


class BlogError(Exception):
    """Base error; the message is sent back to the client as {"error": message}."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(BlogError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(BlogError):
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(BlogError):
    status_code = status.HTTP_403_FORBIDDEN


class WrongSignInMethod(Forbidden):
    pass


class NotFound(BlogError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(BlogError):
    status_code = status.HTTP_409_CONFLICT
