class CatalogError(Exception):
    status_code = 500

    def __init__(self, message, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra


class NotFound(CatalogError):
    """Unknown service / change request, or a transition whose precondition is not met."""
    status_code = 404


class InvalidArgument(CatalogError):
    status_code = 400


class Conflict(CatalogError):
    status_code = 409


class Forbidden(CatalogError):
    status_code = 403
