"""Root of the application exception hierarchy."""


class AppException(Exception):
    """Base class for every error raised by the dashboard service."""

    def __init__(self, message: str = "An application error occurred"):
        """
        Initialize the exception with a human-readable message.

        Parameters:
            message (str): Description of the failure; also available as `message`.
        """
        self.message = message
        super().__init__(message)
