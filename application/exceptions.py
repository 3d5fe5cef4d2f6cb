"""
Application-layer exceptions.

These exceptions are raised by remote client implementations and handled by
the workout data store and the HTTP layer.
"""


class RemoteOperationError(Exception):
    """A call to the remote data service failed.

    Carries a human-readable ``message`` suitable for showing to the user.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotAuthenticatedError(RemoteOperationError):
    """A mutation was attempted without a signed-in user."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)
