from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hrdesk.core.errors import Conflict, Invalid, NotFound
from hrdesk.core.logging import logger
from hrdesk.core.security import normalize_email
from hrdesk.database import get_db
from hrdesk.models.user import User, UserRole
from hrdesk.schemas.user_schema import MAX_EXTRA_FIELDS

UPDATABLE_FIELDS = ("name", "photo", "designation", "bank_account", "salary", "extra")


@dataclass
class UpdateResult:
    user: User
    modified: bool


class AccountService:
    """Account lifecycle and role resolution over the ``users`` table.

    Lookups always hit the store so a role change is visible on the next
    request. Uniqueness of ``email`` is guaranteed by the table's unique
    index; the existence check before insert only gives a friendlier path
    for the common case.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def get(self, email: str) -> User:
        user = self.resolve(email)
        if user is None:
            raise NotFound(f"User '{email}' not found")
        return user

    def create(self, email: str, profile: Dict[str, Any]) -> User:
        email = normalize_email(email)
        if self.resolve(email) is not None:
            raise Conflict("User already exists")

        db_user = User(
            email=email,
            name=profile.get("name"),
            photo=profile.get("photo"),
            designation=profile.get("designation"),
            bank_account=profile.get("bank_account"),
            extra={k: v for k, v in (profile.get("extra") or {}).items() if v is not None},
            role=UserRole.EMPLOYEE.value,
            is_verified=False,
            is_fired=False,
            salary=0,
        )
        self.db.add(db_user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost the race against a concurrent registration
            self.db.rollback()
            raise Conflict("User already exists")
        self.db.refresh(db_user)

        logger.info("Account created", extra={"email": email})
        return db_user

    def update_fields(self, email: str, fields: Dict[str, Any]) -> UpdateResult:
        db_user = self.get(email)

        modified = False
        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS:
                raise Invalid(f"Field '{key}' cannot be updated")
            if key == "salary" and value is None:
                raise Invalid("Salary cannot be empty")
            if key == "extra":
                value = _merge_extra(db_user.extra or {}, value or {})
            if getattr(db_user, key) != value:
                setattr(db_user, key, value)
                modified = True

        if modified:
            self.db.commit()
            self.db.refresh(db_user)
            logger.info("Account updated", extra={"email": db_user.email, "fields": sorted(fields)})
        return UpdateResult(user=db_user, modified=modified)

    def set_verified(self, email: str) -> None:
        self._set_flag(email, "is_verified")

    def set_fired(self, email: str) -> None:
        self._set_flag(email, "is_fired")

    def set_role(self, email: str, role: UserRole) -> User:
        db_user = self.get(email)
        if db_user.role != role.value:
            db_user.role = role.value
            self.db.commit()
            self.db.refresh(db_user)
            logger.info("Account role changed", extra={"email": db_user.email, "role": role.value})
        return db_user

    def get_role(self, email: str) -> Optional[UserRole]:
        user = self.resolve(email)
        return UserRole.parse(user.role) if user else None

    def is_admin(self, email: str) -> bool:
        return self.get_role(email) == UserRole.ADMIN

    def is_fired(self, email: str) -> bool:
        user = self.resolve(email)
        return bool(user and user.is_fired)

    def list_verified(self) -> List[User]:
        return self.db.query(User).filter(User.is_verified.is_(True)).order_by(User.id).all()

    def list_users(self, role: Optional[UserRole] = None) -> List[User]:
        query = self.db.query(User)
        if role is not None:
            query = query.filter(User.role == role.value)
        return query.order_by(User.id).all()

    def _set_flag(self, email: str, flag: str) -> None:
        db_user = self.get(email)
        if not getattr(db_user, flag):
            setattr(db_user, flag, True)
            self.db.commit()
            logger.info("Account flag set", extra={"email": db_user.email, "flag": flag})


def _merge_extra(current: Dict[str, Optional[str]], changes: Dict[str, Optional[str]]) -> Dict[str, Optional[str]]:
    merged = dict(current)
    for key, value in changes.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    if len(merged) > MAX_EXTRA_FIELDS:
        raise Invalid(f"At most {MAX_EXTRA_FIELDS} extra fields are allowed")
    return merged


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(db)
