from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import extract
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrdesk.core.errors import Conflict, Invalid, NotFound
from hrdesk.core.logging import logger
from hrdesk.core.security import normalize_email
from hrdesk.database import get_db
from hrdesk.models.records import ContactMessage, Payment, Review, WorkEntry
from hrdesk.models.user import User


class RecordService:
    """Work sheets, salary payments, reviews and contact messages."""

    def __init__(self, db: Session):
        self.db = db

    def add_work_entry(self, owner: str, data: Dict[str, Any], name: Optional[str] = None) -> WorkEntry:
        entry = WorkEntry(email=normalize_email(owner), name=name, **data)
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def list_work_entries(
        self,
        email: Optional[str] = None,
        name: Optional[str] = None,
        month: Optional[int] = None,
    ) -> List[WorkEntry]:
        query = self.db.query(WorkEntry)
        if email:
            query = query.filter(WorkEntry.email == normalize_email(email))
        if name:
            query = query.filter(WorkEntry.name == name)
        if month:
            query = query.filter(extract("month", WorkEntry.date) == month)
        return query.order_by(WorkEntry.date.desc(), WorkEntry.id.desc()).all()

    def record_payment(self, data: Dict[str, Any]) -> Payment:
        email = normalize_email(data["email"])
        employee = self.db.query(User).filter(User.email == email).first()
        if employee is None:
            raise NotFound(f"User '{email}' not found")
        if not employee.is_verified:
            raise Invalid("Employee is not verified")
        if employee.is_fired:
            raise Invalid("Employee has been fired")

        existing = (
            self.db.query(Payment)
            .filter(Payment.email == email, Payment.month == data["month"], Payment.year == data["year"])
            .first()
        )
        if existing is not None:
            raise Conflict("Salary already paid for this month")

        payment = Payment(**{**data, "email": email, "name": employee.name})
        self.db.add(payment)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise Conflict("Salary already paid for this month")
        self.db.refresh(payment)

        logger.info(
            "Payment recorded",
            extra={"email": email, "month": payment.month, "year": payment.year},
        )
        return payment

    def list_payments(self, email: str) -> List[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.email == normalize_email(email))
            .order_by(Payment.year.desc(), Payment.month.desc())
            .all()
        )

    def add_review(self, data: Dict[str, Any]) -> Review:
        review = Review(**data)
        self.db.add(review)
        self.db.commit()
        self.db.refresh(review)
        return review

    def list_reviews(self) -> List[Review]:
        return self.db.query(Review).order_by(Review.id.desc()).all()

    def add_contact(self, data: Dict[str, Any]) -> ContactMessage:
        message = ContactMessage(**{**data, "email": normalize_email(data["email"])})
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def list_contacts(self) -> List[ContactMessage]:
        return self.db.query(ContactMessage).order_by(ContactMessage.id.desc()).all()


def get_record_service(db: Session = Depends(get_db)) -> RecordService:
    return RecordService(db)
