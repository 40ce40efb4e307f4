from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.api.v1.schemas.auth import (
    AuthResponse,
    SignInRequest,
    SignUpRequest,
)
from app.core.schemas.auth import AuthUser  # noqa: TCH001
from app.core.services.auth_service import AuthService  # noqa: TCH001
from app.dependencies import (
    get_auth_service,
    get_current_user,
)
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from app.core.schemas.auth import AuthResult

logger = get_logger(__name__)

router = APIRouter(
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
    }
)


def _to_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        access_token=result.access_token,
        token_type="bearer",
        expires_in=result.expires_in,
        refresh_token=result.refresh_token,
        user={"id": str(result.user.id), "email": result.user.email},
    )


@router.post("/signup", response_model=AuthResponse)
async def sign_up_with_password(
    payload: SignUpRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Sign up with email and password."""
    try:
        result = await auth_service.sign_up(payload.email, payload.password)
    except Exception as err:
        logger.error("Unexpected error during signup", extra={"error": str(err)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from err

    if not result.ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error.message)
    return _to_response(result.data)


@router.post("/signin", response_model=AuthResponse)
async def sign_in_with_password(
    payload: SignInRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Sign in with email and password."""
    try:
        result = await auth_service.sign_in(payload.email, payload.password)
    except Exception as err:
        logger.error("Unexpected error during signin", extra={"error": str(err)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from err

    if not result.ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error.message)
    return _to_response(result.data)


@router.post("/signout")
async def sign_out(
    current_user: AuthUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Sign out the current user."""
    try:
        result = await auth_service.sign_out()
    except Exception as err:
        logger.error("Unexpected error during signout", extra={"error": str(err)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error",
        ) from err

    if not result.ok:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.error.message)
    logger.info("Signed out", extra={"user_id": str(current_user.id)})
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"message": "Signed out successfully"},
    )


@router.get("/validate")
async def validate_token(current_user: AuthUser = Depends(get_current_user)):
    """Validate the current user's token and return user info."""
    return {
        "id": str(current_user.id),
        "email": current_user.email,
        "role": current_user.role,
    }
