"""Background scheduler for the overdue-loan sweep."""

import logging
from typing import List

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.db.base import SessionLocal
from app.models.user import User, UserRoleEnum
from app.services.koperasi import get_koperasi_settings
from app.services.loan import mark_overdue_loans

logger = logging.getLogger(__name__)

scheduler: AsyncIOScheduler | None = None


def _borrower_name(loan) -> str:
    if loan.member is not None:
        return loan.member.name
    return loan.borrower_name or "Unknown"


def _mark_overdue(db) -> List[dict]:
    """Flag ACTIVE loans past due as OVERDUE.

    Returns a list of dicts describing each newly overdue loan (for the report email).
    """
    overdue = mark_overdue_loans(db)
    return [
        {
            "borrower_name": _borrower_name(loan),
            "category": loan.category.value,
            "loan_amount": float(loan.total_amount),
            "due_date": loan.due_date.isoformat(),
        }
        for loan in overdue
    ]


def run_scheduled_tasks() -> None:
    """Run the overdue sweep and notify admins when loans went overdue."""
    db = SessionLocal()
    try:
        overdue_loans = _mark_overdue(db)
        if not overdue_loans:
            return

        koperasi = get_koperasi_settings(db)
        if not (koperasi.notifications_enabled and koperasi.due_date_reminder):
            return

        admins = db.query(User).filter(
            User.role == UserRoleEnum.ADMIN,
            User.is_active.is_(True),
        ).all()
        admin_emails = [a.email for a in admins if a.email]
        if not admin_emails:
            return

        from app.core.email import send_overdue_report
        send_overdue_report(
            to_emails=admin_emails,
            koperasi_name=koperasi.name,
            overdue_loans=overdue_loans,
        )
    except Exception:
        db.rollback()
        logger.exception("Error in scheduled tasks")
    finally:
        db.close()


def start_scheduler() -> None:
    """Create and start the background scheduler."""
    global scheduler
    interval = settings.SCHEDULER_INTERVAL_MINUTES

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_scheduled_tasks,
        trigger=IntervalTrigger(minutes=interval),
        id="run_scheduled_tasks",
        name="Mark overdue loans",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Background scheduler started with interval=%d minutes", interval)


def stop_scheduler() -> None:
    """Shut down the background scheduler gracefully."""
    global scheduler
    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
        scheduler = None
