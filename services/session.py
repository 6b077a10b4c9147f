from dataclasses import dataclass, field
from datetime import datetime

from services.clock import local_now, to_local_naive


@dataclass(frozen=True)
class ReminderSession:
    """Who is asking and when. Passed explicitly into every reminder operation."""

    user_id: int | None = None
    now: datetime = field(default_factory=local_now)

    def __post_init__(self):
        object.__setattr__(self, "now", to_local_naive(self.now))

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None
