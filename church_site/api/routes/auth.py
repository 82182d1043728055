from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel

from church_site.adapters.auth.crypto import JWTAuthAdapter
from church_site.api.deps import (
    ACCESS_TOKEN_COOKIE,
    get_auth_adapter,
    get_auth_service,
    get_bearer_token,
    get_context_registry,
    get_gate,
    require_admin,
)
from church_site.components.auth import (
    AdminIdentity,
    AuthorizationGate,
    SessionContextRegistry,
)
from church_site.services.auth import AuthService

router = APIRouter()


class Token(BaseModel):
    access_token: str
    token_type: str


@router.post("/login", response_model=Token)
def login_for_access_token(
    response: Response,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    auth_service: AuthService = Depends(get_auth_service),
) -> Token:
    """Authenticate with email and password and open a session."""
    user = auth_service.login(form_data.username, form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token, _ = auth_service.create_session(user)
    max_age = auth_service.ttl_minutes * 60
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=f"Bearer {token}",
        httponly=True,
        max_age=max_age,
        expires=max_age,
        samesite="lax",
        secure=False,  # Set to True for HTTPS prod
    )
    return Token(access_token=token, token_type="bearer")


@router.post("/logout")
def logout(
    response: Response,
    token: Annotated[str | None, Depends(get_bearer_token)],
    gate: AuthorizationGate = Depends(get_gate),
    registry: SessionContextRegistry = Depends(get_context_registry),
    crypto: JWTAuthAdapter = Depends(get_auth_adapter),
) -> dict[str, str]:
    """End the session and drop its cached admin identity."""
    gate.deauthorize()
    if token:
        registry.discard(crypto.hash_token(token))
    response.delete_cookie(key=ACCESS_TOKEN_COOKIE)
    return {"status": "success"}


@router.get("/me")
def read_current_admin(
    admin: AdminIdentity = Depends(require_admin),
) -> dict[str, Any]:
    return {
        "id": str(admin.id),
        "email": admin.email,
        "display_name": admin.display_name,
        "role": admin.role,
    }
