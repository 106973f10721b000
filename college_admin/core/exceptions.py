from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    code = "ServiceError"

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_detail(self) -> dict:
        return {"code": self.code, "message": self.message}


class ValidationError(ServiceError):
    """Missing or malformed input. Always recoverable by the caller."""

    code = "ValidationError"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class NotFound(ServiceError):
    code = "NotFound"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class PromotionBlocked(ServiceError):
    code = "PromotionBlocked"

    def __init__(self, current_status: str) -> None:
        super().__init__(
            f"Promotion blocked: current promotion status is '{current_status}', must be 'Eligible'",
            status.HTTP_409_CONFLICT,
        )
        self.current_status = current_status


class CourseCompleted(ServiceError):
    """Raised by promote() when the student has no further semester in the course."""

    code = "EndOfCourse"

    def __init__(self, reason: str) -> None:
        super().__init__(reason, status.HTTP_409_CONFLICT)


class SameCourseTransfer(ServiceError):
    code = "SameCourseTransfer"

    def __init__(self) -> None:
        super().__init__(
            "Branch transfer target must be a different course than the current one",
            status.HTTP_409_CONFLICT,
        )


class AlreadyRegistered(ServiceError):
    code = "AlreadyRegistered"

    def __init__(self) -> None:
        super().__init__("This academic year is already registered", status.HTTP_409_CONFLICT)


class MissingUndertaking(ServiceError):
    code = "MissingUndertaking"

    def __init__(self) -> None:
        super().__init__(
            "An undertaking document reference is required for the Installment payment plan",
            status.HTTP_400_BAD_REQUEST,
        )
