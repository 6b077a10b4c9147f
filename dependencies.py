from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import SECRET_KEY, ALGORITHM
from services.session import ReminderSession

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> int | None:
    """User id from the bearer token's ``sub`` claim, or None when it cannot be resolved."""
    if not credentials:
        return None
    try:
        payload = jwt.decode(credentials.credentials, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


def get_reminder_session(user_id: int | None = Depends(get_current_user_id)) -> ReminderSession:
    return ReminderSession(user_id=user_id)
