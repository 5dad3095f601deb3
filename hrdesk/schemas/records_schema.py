import datetime as dt
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class WorkEntryCreate(RecordModel):
    task: str = Field(min_length=1, max_length=100)
    hours: float = Field(gt=0, le=24)
    date: dt.date


class WorkEntryResponse(WorkEntryCreate):
    id: int
    email: str
    name: Optional[str] = None


class PaymentCreate(RecordModel):
    email: str = Field(min_length=3, max_length=255)
    amount: float = Field(gt=0)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=2000, le=9999)
    transaction_id: Optional[str] = Field(default=None, max_length=100)


class PaymentResponse(PaymentCreate):
    id: int
    name: Optional[str] = None
    paid_at: Optional[dt.datetime] = None


class ReviewCreate(RecordModel):
    name: str = Field(min_length=1, max_length=100)
    photo: Optional[str] = Field(default=None, max_length=500)
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=1, max_length=2000)


class ReviewResponse(ReviewCreate):
    id: int
    created_at: Optional[dt.datetime] = None


class ContactCreate(RecordModel):
    email: str = Field(min_length=3, max_length=255)
    name: str = Field(min_length=1, max_length=100)
    message: str = Field(min_length=1, max_length=5000)


class ContactResponse(ContactCreate):
    id: int
    created_at: Optional[dt.datetime] = None
