import logging
from typing import Dict, Optional

from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.crud.account import profile_crud
from app.database.session import get_db
from common_utils.auth.utils import verify_token

logger = logging.getLogger("uvicorn")

# Missing credentials are reported as 401 by us, not 403 by HTTPBearer
security = HTTPBearer(auto_error=False)


def validate_bearer_token():
    """
    Build a dependency resolving the bearer token to ``{"user_id", "role"}``.

    The role comes from the live account row, not from the token. A token
    for an anonymized or unknown user resolves to no role at all, which the
    permission checker rejects with 401.
    """
    def get_token_data(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        db: Session = Depends(get_db),
    ) -> Dict:
        if credentials is None or not credentials.credentials:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing authentication token",
                headers={"WWW-Authenticate": "Bearer"},
            )

        payload = verify_token(credentials.credentials)
        user_id = payload.get("user_id")
        if not user_id or payload.get("token_type") != "access":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication token",
            )

        profile = profile_crud.get_active(db, user_id=user_id)
        role = None
        if profile is not None and profile.account.deleted_at is None:
            role = profile.account.role.value

        logger.debug(f"Token resolved: user_id={user_id} role={role}")
        return {"user_id": user_id, "role": role}

    return get_token_data
