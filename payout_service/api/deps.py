# payout_service/api/deps.py
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from payout_service.core.auth import AuthContext
from payout_service.core.config import settings
from payout_service.schemas.token import TokenPayload
from payout_service.services.payout.errors import ActionResult, PayoutErrorCode

# The `tokenUrl` is only used for the OpenAPI documentation.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")

ERROR_STATUS_CODES = {
    PayoutErrorCode.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    PayoutErrorCode.BANK_DETAILS_MISSING: 422,
    PayoutErrorCode.COOLDOWN_ACTIVE: status.HTTP_409_CONFLICT,
    PayoutErrorCode.NO_FUNDS_AVAILABLE: 422,
    PayoutErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    PayoutErrorCode.ALREADY_PROCESSED: status.HTTP_409_CONFLICT,
    PayoutErrorCode.VERIFICATION_FAILED: status.HTTP_502_BAD_GATEWAY,
    PayoutErrorCode.PERSISTENCE_FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_current_user(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])
        token_data = TokenPayload(**payload)
    except (JWTError, ValueError):
        # Catches any error from jose or Pydantic validation
        raise credentials_exception

    return token_data


def get_auth_context(current_user: TokenPayload = Depends(get_current_user)) -> AuthContext:
    return AuthContext(
        user_id=current_user.sub,
        role=current_user.role,
        sub_role=current_user.sub_role,
        name=current_user.name,
        email=current_user.email,
    )


def unwrap(result: ActionResult):
    """Return the result's data or raise the HTTP error matching its code."""
    if result.success:
        return result.data
    raise HTTPException(
        status_code=ERROR_STATUS_CODES.get(
            result.error, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        detail=result.message or "Something went wrong",
    )
