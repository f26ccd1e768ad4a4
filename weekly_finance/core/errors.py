from fastapi import status


class FinanceError(Exception):
    """Base error for the expense and budget services.

    Each subclass carries the HTTP status the API answers with, so the
    services never import anything from the routing layer.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FinanceError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidDateFormat(ValidationError):
    pass


class NotFound(FinanceError):
    status_code = status.HTTP_404_NOT_FOUND


class StoreError(FinanceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class DuplicateRecord(StoreError):
    """A write hit a unique constraint."""
