"""
Error taxonomy for the shortener.

Each error carries the HTTP status it maps to and a public message that is
safe to return to clients. Internal details go to the log, never the body.
"""


class ShortenerError(Exception):
    """Base class for all errors the service reports to callers"""

    status_code: int = 500
    message: str = "Server Error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(ShortenerError):
    """Required input (url or token) is missing"""
    status_code = 400
    message = "Bad Request"


class NotFoundError(ShortenerError):
    """Token has no mapping"""
    status_code = 404
    message = "Not Found"


class CollisionError(ShortenerError):
    """Derived token is already bound to a different URL"""
    status_code = 409
    message = "A collision has occurred!"

    def __init__(self, token: str, existing_url: str, new_url: str):
        super().__init__()
        self.token = token
        self.existing_url = existing_url
        self.new_url = new_url


class RateLimitedError(ShortenerError):
    """Lookup throttled by the rate limiter"""
    status_code = 429
    message = "URL currently rate limited!"


class InternalError(ShortenerError):
    """Unexpected fault in hashing or a collaborator"""
    status_code = 500
    message = "Server Error"
