import hashlib
from datetime import timedelta
from typing import Any
from uuid import UUID

from church_site.api.auth_utils import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


class JWTAuthAdapter:
    """Argon2 password hashing and signed JWT session tokens."""

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)

    def hash_token(self, token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def create_token(self, user_id: UUID, email: str, ttl_minutes: int) -> str:
        return create_access_token(
            {"sub": str(user_id), "email": email}, timedelta(minutes=ttl_minutes)
        )

    def validate_token(self, token: str) -> dict[str, Any] | None:
        """Claims of a well-formed, unexpired token; None otherwise."""
        payload = decode_access_token(token)
        if not payload or not payload.get("sub"):
            return None
        return payload
