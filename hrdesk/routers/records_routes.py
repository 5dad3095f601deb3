from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from hrdesk.auth import ensure_self_or_privileged, is_privileged, require_admin, require_hr, require_identity
from hrdesk.core.security import Identity
from hrdesk.models.user import User
from hrdesk.schemas.records_schema import (ContactCreate, ContactResponse, PaymentCreate, PaymentResponse,
                                           ReviewCreate, ReviewResponse, WorkEntryCreate, WorkEntryResponse)
from hrdesk.services.accounts import AccountService, get_account_service
from hrdesk.services.records import RecordService, get_record_service

router = APIRouter(tags=["Records"])


@router.post("/work-sheet", response_model=WorkEntryResponse, status_code=status.HTTP_201_CREATED)
def add_work_entry(
    entry: WorkEntryCreate,
    identity: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
    records: RecordService = Depends(get_record_service),
):
    owner = accounts.resolve(identity.email)
    return records.add_work_entry(identity.email, entry.model_dump(), name=owner.name if owner else None)


@router.get("/work-sheet", response_model=list[WorkEntryResponse])
def get_work_entries(
    email: Optional[str] = None,
    name: Optional[str] = None,
    month: Optional[int] = Query(default=None, ge=1, le=12),
    identity: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
    records: RecordService = Depends(get_record_service),
):
    """Employees only ever see their own entries; HR and admin may filter."""
    if not is_privileged(accounts.resolve(identity.email)):
        email, name = identity.email, None
    return records.list_work_entries(email=email, name=name, month=month)


@router.post("/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def add_payment(
    payment: PaymentCreate,
    _: User = Depends(require_hr),
    records: RecordService = Depends(get_record_service),
):
    return records.record_payment(payment.model_dump())


@router.get("/payments/{email}", response_model=list[PaymentResponse])
def get_payments(
    email: str,
    identity: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
    records: RecordService = Depends(get_record_service),
):
    ensure_self_or_privileged(identity, email, accounts)
    return records.list_payments(email)


@router.post("/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def add_review(review: ReviewCreate, records: RecordService = Depends(get_record_service)):
    return records.add_review(review.model_dump())


@router.get("/reviews", response_model=list[ReviewResponse])
def get_reviews(records: RecordService = Depends(get_record_service)):
    return records.list_reviews()


@router.post("/contacts", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
def add_contact(contact: ContactCreate, records: RecordService = Depends(get_record_service)):
    return records.add_contact(contact.model_dump())


@router.get("/contacts", response_model=list[ContactResponse])
def get_contacts(
    _: User = Depends(require_admin),
    records: RecordService = Depends(get_record_service),
):
    return records.list_contacts()
