from typing import Optional

from fastapi import APIRouter, Depends, status

from hrdesk.auth import ensure_can_set_salary, ensure_self_or_privileged, require_admin, require_hr, require_identity
from hrdesk.core.security import Identity
from hrdesk.models.user import User, UserRole
from hrdesk.schemas.user_schema import (AdminResponse, FiredResponse, RoleResponse, RoleUpdate, StatusResponse,
                                        UserCreate, UserResponse, UserUpdate, UserUpdateResponse)
from hrdesk.services.accounts import AccountService, get_account_service

router = APIRouter(
    prefix="/users",
    tags=["Users"]
)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, accounts: AccountService = Depends(get_account_service)):
    profile = user.model_dump(exclude={"email"})
    return accounts.create(user.email, profile)


@router.get("", response_model=list[UserResponse])
def get_users(
    role: Optional[UserRole] = None,
    _: User = Depends(require_hr),
    accounts: AccountService = Depends(get_account_service),
):
    return accounts.list_users(role)


@router.get("/verified", response_model=list[UserResponse])
def get_verified_users(
    _: User = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
):
    return accounts.list_verified()


@router.get("/role/{email}", response_model=RoleResponse)
def get_user_role(
    email: str,
    _: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
):
    return {"role": accounts.get_role(email)}


@router.get("/admin/{email}", response_model=AdminResponse)
def get_user_admin(
    email: str,
    _: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
):
    return {"admin": accounts.is_admin(email)}


@router.get("/fired/{email}", response_model=FiredResponse)
def get_user_fired(
    email: str,
    _: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
):
    return {"fired": accounts.is_fired(email)}


@router.get("/{email}", response_model=UserResponse)
def get_user(
    email: str,
    _: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
):
    return accounts.get(email)


@router.patch("/verify/{email}", response_model=StatusResponse)
def verify_user(
    email: str,
    _: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
):
    accounts.set_verified(email)
    return {"success": True, "message": "User verified"}


@router.patch("/fired/{email}", response_model=StatusResponse)
def fire_user(
    email: str,
    _: User = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
):
    accounts.set_fired(email)
    return {"success": True, "message": "User fired"}


@router.patch("/role/{email}", response_model=UserResponse)
def change_user_role(
    email: str,
    body: RoleUpdate,
    _: User = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
):
    return accounts.set_role(email, body.role)


@router.patch("/{email}", response_model=UserUpdateResponse)
def update_user(
    email: str,
    user: UserUpdate,
    identity: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
):
    caller = ensure_self_or_privileged(identity, email, accounts)

    # Only fields the caller actually sent
    update_data = user.model_dump(exclude_unset=True)
    if "salary" in update_data:
        ensure_can_set_salary(caller, email, accounts)

    result = accounts.update_fields(email, update_data)
    return {"modified": result.modified, "user": result.user}
