from typing import Callable, Optional

from fastapi import APIRouter, Depends, Request, Response

from hrdesk.core.config import Settings
from hrdesk.core.errors import Forbidden, Unauthenticated
from hrdesk.core.logging import logger
from hrdesk.core.security import Identity, InvalidToken, TokenCodec, normalize_email
from hrdesk.models.user import User, UserRole
from hrdesk.schemas.user_schema import EmailBody, StatusResponse
from hrdesk.services.accounts import AccountService, get_account_service

router = APIRouter(tags=["Authentication"])


class TokenResponse(StatusResponse):
    token: str


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def require_identity(
    request: Request,
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings_dep),
) -> Identity:
    """Establish the caller from the session cookie or stop the request."""
    token = request.cookies.get(settings.COOKIE_NAME)
    if not token:
        raise Unauthenticated("Unauthorized access")

    try:
        email = codec.verify(token)
    except InvalidToken as exc:
        logger.warning("Rejected session token", extra={"path": request.url.path, "reason": str(exc)})
        raise Forbidden("Forbidden access")

    return Identity(email=normalize_email(email))


def require_role(*roles: UserRole) -> Callable[..., User]:
    """Build a gate that admits callers whose stored role is one of ``roles``.

    The role is read from the account store on every request; nothing in the
    token besides the email is trusted.
    """
    allowed = {role.value for role in roles}

    def gate(
        request: Request,
        identity: Identity = Depends(require_identity),
        accounts: AccountService = Depends(get_account_service),
    ) -> User:
        user = accounts.resolve(identity.email)
        if user is None or user.role not in allowed:
            logger.warning(
                "Insufficient role",
                extra={"email": identity.email, "path": request.url.path, "required": sorted(allowed)},
            )
            raise Forbidden("Forbidden access")
        return user

    return gate


require_admin = require_role(UserRole.ADMIN)
require_hr = require_role(UserRole.HR, UserRole.ADMIN)


def is_privileged(user: Optional[User]) -> bool:
    return user is not None and user.role in (UserRole.HR.value, UserRole.ADMIN.value)


def ensure_self_or_privileged(identity: Identity, target_email: str, accounts: AccountService) -> Optional[User]:
    """Allow the owner of ``target_email``, or an hr/admin caller.

    Returns the caller's stored record, which may be None for a caller that
    has not registered yet.
    """
    caller = accounts.resolve(identity.email)
    if identity.email != normalize_email(target_email) and not is_privileged(caller):
        raise Forbidden("Forbidden access")
    return caller


def ensure_can_set_salary(caller: Optional[User], target_email: str, accounts: AccountService) -> None:
    """Admin may set any salary; HR only those of plain employees other than itself."""
    if not is_privileged(caller):
        raise Forbidden("Only HR or admin can change a salary")
    if caller.role == UserRole.ADMIN.value:
        return
    if caller.email == normalize_email(target_email) or is_privileged(accounts.resolve(target_email)):
        raise Forbidden("Only admin can change this salary")


@router.post("/jwt", response_model=TokenResponse)
async def issue_token(
    body: EmailBody,
    response: Response,
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_settings_dep),
):
    token = codec.issue(body.email)
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        max_age=int(codec.expires_in.total_seconds()),
        **settings.cookie_options,
    )
    logger.info("Session issued", extra={"email": normalize_email(body.email)})
    return {"success": True, "token": token, "message": "Token issued"}


@router.post("/logout", response_model=StatusResponse)
async def logout(response: Response, settings: Settings = Depends(get_settings_dep)):
    response.delete_cookie(settings.COOKIE_NAME, **settings.cookie_options)
    return {"success": True}
