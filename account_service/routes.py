# account_service/routes.py
from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.orm import Session

from .errors import AuthError
from .lifecycle import AccountLifecycle
from .schemas import (
    LoginData,
    ProfileUpdate,
    RegisterData,
    RegisterResponse,
    ResendOTPData,
    TokenResponse,
    VerifyOTPData,
)
from .store import AccountStore


# --- Dependencies ---
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_lifecycle(request: Request, db: Session = Depends(get_db)) -> AccountLifecycle:
    state = request.app.state
    return AccountLifecycle(
        store=AccountStore(db),
        otp=state.otp,
        tokens=state.tokens,
        mailer=state.mailer,
    )


def current_account_id(request: Request, authorization: str = Header(None)) -> int:
    if not authorization:
        raise AuthError("Not authorized, no token")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthError("Not authorized, token failed")
    return request.app.state.tokens.account_id(token.strip())


auth_router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@auth_router.post(
    "/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED
)
async def register_user(
    data: RegisterData, lifecycle: AccountLifecycle = Depends(get_lifecycle)
):
    account = await lifecycle.register(
        username=data.username,
        email=data.email,
        password=data.password,
        role=data.role.value if data.role else None,
    )
    return {
        "success": True,
        "message": "User registered. Check your email for OTP verification.",
        "userId": account.id,
    }


@auth_router.post("/verify-otp", response_model=TokenResponse)
async def verify_otp(
    data: VerifyOTPData, lifecycle: AccountLifecycle = Depends(get_lifecycle)
):
    account, token = await lifecycle.verify_otp(data.userId, data.otp)
    return {
        "success": True,
        "message": "Account verified successfully",
        "token": token,
        "user": account.summary(),
    }


@auth_router.post(
    "/login", response_model=TokenResponse, response_model_exclude_none=True
)
async def login_user(
    data: LoginData, lifecycle: AccountLifecycle = Depends(get_lifecycle)
):
    account, token = await lifecycle.login(data.email, data.password)
    return {"success": True, "token": token, "user": account.summary()}


@auth_router.post("/resend-otp")
async def resend_otp(
    data: ResendOTPData, lifecycle: AccountLifecycle = Depends(get_lifecycle)
):
    account = await lifecycle.resend_otp(data.userId)
    return {
        "success": True,
        "message": "OTP sent to email.",
        "userId": account.id,
    }


@auth_router.get("/profile")
async def get_user_profile(
    account_id: int = Depends(current_account_id),
    lifecycle: AccountLifecycle = Depends(get_lifecycle),
):
    account = await lifecycle.get_profile(account_id)
    return {"success": True, "user": account.public_dict()}


@auth_router.put("/profile")
async def update_user_profile(
    data: ProfileUpdate,
    account_id: int = Depends(current_account_id),
    lifecycle: AccountLifecycle = Depends(get_lifecycle),
):
    account = await lifecycle.update_profile(
        account_id, data.model_dump(exclude_unset=True)
    )
    return {
        "success": True,
        "user": {
            "id": account.id,
            "username": account.username,
            "email": account.email,
            "profile": account.profile,
        },
    }
