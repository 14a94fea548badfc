from fastapi import APIRouter, HTTPException, status

from app.core.security import create_access_token, verify_admin_credentials
from app.schemas.auth import ErrorResponse, LoginRequest, LoginResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Wrong email or password"}},
    summary="Admin login",
    description="Exchanges the admin email and password for a bearer token used by all admin endpoints.",
)
async def login(body: LoginRequest):
    if not verify_admin_credentials(body.email, body.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return LoginResponse(token=create_access_token(body.email.strip().lower()))
