from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from access_gate.core.config import settings
from access_gate.core.security import decode_token
from access_gate.schemas import Operator

# Clients must send "Authorization: Bearer <token>"
bearer_scheme = HTTPBearer(auto_error=False)

def get_current_operator(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Operator:
    """
    Validates the operator JWT. If valid, returns the operator identity.
    If missing or invalid, raises 401 Unauthorized.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise credentials_exception

    return Operator(
        uid=str(payload["sub"]),
        name=payload.get("name") or str(payload["sub"]),
        role=payload.get("role") or "controller",
    )

def get_current_admin(operator: Operator = Depends(get_current_operator)) -> Operator:
    if operator.role not in settings.ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return operator
