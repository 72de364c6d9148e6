class Medi360Error(Exception):
    """Base class for errors raised by application services."""


class NotFoundError(Medi360Error):
    pass


class ConflictError(Medi360Error):
    pass


class InvalidRequestError(Medi360Error):
    pass
