from fastapi import APIRouter, Depends, status

from app.api.deps import get_user_accounts
from app.core.security import TokenData, get_current_user
from app.schemas.user import LoginRequest, LoginResult, SignUpRequest, SignUpResult
from app.services.user_accounts import UserAccounts

router = APIRouter()


@router.post("/signup", response_model=SignUpResult, status_code=status.HTTP_201_CREATED)
def sign_up(body: SignUpRequest, accounts: UserAccounts = Depends(get_user_accounts)) -> SignUpResult:
    """
    Create an account with a phone number and password.

    ``both`` accounts start in passenger mode.
    """
    return accounts.sign_up(body)


@router.post("/login", response_model=LoginResult)
def login(body: LoginRequest, accounts: UserAccounts = Depends(get_user_accounts)) -> LoginResult:
    """
    Log in and receive a bearer token.

    When ``deviceId`` is given the device session is registered as well, so a
    driver already active on another device is refused with 409.
    """
    return accounts.login(body)


@router.get("/me", response_model=TokenData)
async def get_user_info(current_user: TokenData = Depends(get_current_user)):
    """
    Verify the bearer token and return the identity it carries.

    This endpoint requires a valid JWT token in the Authorization header.
    """
    return current_user
