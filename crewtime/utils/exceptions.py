"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
One HTTPException subclass per error category of the shift lifecycle:
authentication, permission, missing records, conflicts, unmet preconditions,
invalid state transitions and exhausted clock cycles. Application-level
handlers in `crewtime.main` render all of them as ``{"error": detail}``.

Usage:
    from crewtime.utils.exceptions import NotFoundError, ConflictError
    raise NotFoundError("Shift not found")
    raise ConflictError("Employee is already clocked in")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a shift, assignment, employee or timesheet does not exist.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    """409 Conflict 예외 — 중복 배정, 중복 출근 등 충돌 시 사용.

    409 Conflict exception.
    Raised for duplicate assignments, a second clock-in while one entry is
    active, or deleting an assignment that already has time entries.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource conflict")
        status_code: HTTP 상태 코드 (Defaults to 409; unassign answers 400)
    """

    def __init__(self, detail: str = "Resource conflict", status_code: int = status.HTTP_409_CONFLICT) -> None:
        super().__init__(status_code=status_code, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised when the authenticated user is neither a manager nor the crew
    chief (designated or delegated) of the shift.

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request data is invalid beyond what Pydantic validation catches.

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class PreconditionError(BadRequestError):
    """400 선행 조건 미충족 — 교대 종료 전 타임시트 확정 시도 등.

    Precondition failure (400).
    Raised by finalize while some workers have not ended their shifts;
    the message carries the remaining count.
    """

    def __init__(self, detail: str = "Precondition failed") -> None:
        super().__init__(detail=detail)


class InvalidStateError(BadRequestError):
    """400 잘못된 상태 전이 — 현재 상태에서 허용되지 않는 동작.

    Invalid state transition (400).
    Raised for clock-out with no active entry, no-show after clock activity,
    clock actions after the shift ended, and out-of-order approvals.
    """

    def __init__(self, detail: str = "Invalid state for this action") -> None:
        super().__init__(detail=detail)


class ResourceExhaustedError(BadRequestError):
    """400 출퇴근 횟수 소진 — 배정당 최대 기록 수 초과.

    Clock cycles exhausted (400).
    Raised by clock-in once every entry number of an assignment is used.
    """

    def __init__(self, detail: str = "Maximum number of time entries reached") -> None:
        super().__init__(detail=detail)
