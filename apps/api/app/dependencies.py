from datetime import timedelta

from fastapi import Depends
from sqlalchemy.orm import Session

from app.config import settings
from app.db.session import get_db
from app.services.lifecycle import now_utc
from app.services.orders_service import OrderLifecycleService


def get_clock():
    return now_utc


def get_order_service(
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
) -> OrderLifecycleService:
    return OrderLifecycleService(
        db,
        clock=clock,
        archive_after=timedelta(hours=settings.archive_after_hours),
    )
