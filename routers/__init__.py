from routers.reminders import router as reminders_router
from routers.medication_schedules import router as medication_schedules_router
from routers.jobs import router as jobs_router

__all__ = [
    "reminders_router",
    "medication_schedules_router",
    "jobs_router",
]
