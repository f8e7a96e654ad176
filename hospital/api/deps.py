from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.exceptions import AuthenticationRequired, PermissionDenied, RateLimited
from ..core.security import security, verify_token, UserRole, TokenPayload
from ..models.admin import Admin
from ..models.patient import Patient


class Principal(BaseModel):
    """The authenticated caller behind a request."""
    role: UserRole
    subject: str
    patient_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """Extract and verify the bearer token from the Authorization header."""
    if credentials is None:
        raise AuthenticationRequired("Authentication required")

    token_payload = verify_token(credentials.credentials)
    if not token_payload or not token_payload.sub or not token_payload.role:
        raise AuthenticationRequired("Invalid or expired token")

    return token_payload


def get_current_principal(
    token_payload: TokenPayload = Depends(get_token_payload),
    db: Session = Depends(get_db)
) -> Principal:
    """Resolve the token to an account that still exists."""
    if token_payload.role == UserRole.ADMIN:
        admin = db.query(Admin.id).filter(Admin.admin_id == token_payload.sub).first()
        if not admin:
            raise AuthenticationRequired("Account no longer exists")
        return Principal(role=UserRole.ADMIN, subject=token_payload.sub)

    try:
        patient_id = int(token_payload.sub)
    except ValueError:
        raise AuthenticationRequired("Invalid token payload")

    patient = db.query(Patient.id).filter(Patient.id == patient_id).first()
    if not patient:
        raise AuthenticationRequired("Account no longer exists")
    return Principal(role=UserRole.PATIENT, subject=token_payload.sub, patient_id=patient_id)


def get_admin(
    principal: Principal = Depends(get_current_principal)
) -> Principal:
    """Require admin role."""
    if not principal.is_admin:
        raise PermissionDenied("Admin access required")
    return principal


def ensure_patient_access(principal: Principal, patient_id: int) -> None:
    """Admins see every patient; a patient sees only themselves."""
    if principal.is_admin:
        return
    if principal.patient_id != patient_id:
        raise PermissionDenied("You can only access your own records")


# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client=Depends(get_redis)
) -> None:
    """Fixed-window rate limiting for authentication endpoints."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{request.url.path}:{client_ip}"

    current_requests = redis_client.incr(key)
    if current_requests == 1:
        redis_client.expire(key, settings.AUTH_RATE_LIMIT_WINDOW)

    if current_requests > settings.AUTH_RATE_LIMIT:
        raise RateLimited()
