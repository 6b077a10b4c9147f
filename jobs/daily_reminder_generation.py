import logging

from database import SessionLocal
from services.reminder_generator import ensure_today_generated_for_all_users

logger = logging.getLogger("rxremind.jobs")


def main():
    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        report = ensure_today_generated_for_all_users(db)
        logger.info(
            "Reminder generation: %s schedule(s), %s created, %s failed",
            report.schedules,
            report.created,
            len(report.failures),
        )
    finally:
        db.close()


if __name__ == "__main__":
    main()
