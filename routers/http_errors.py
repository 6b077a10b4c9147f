from fastapi import HTTPException, status

from services.errors import (
    ActionInFlight,
    NotAuthenticated,
    PersistenceFailure,
    PrescriptionNotFound,
    ReminderError,
    ReminderNotFound,
    ScheduleNotFound,
)


def to_http_exception(exc: ReminderError) -> HTTPException:
    if isinstance(exc, NotAuthenticated):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc) or "Not authenticated")
    if isinstance(exc, (ReminderNotFound, ScheduleNotFound, PrescriptionNotFound)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ActionInFlight):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, PersistenceFailure):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Reminder operation failed")
