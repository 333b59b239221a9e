from fastapi import Depends, HTTPException, status
from typing import Dict, List
import logging

from app.models.account import RoleEnum
from app.utils.response_utils import ResponseWrapper

from .token_validation import validate_bearer_token

logger = logging.getLogger("uvicorn")

ROLE_HIERARCHY: Dict[str, int] = {
    RoleEnum.USER.value: 1,
    RoleEnum.DRIVER.value: 2,
    RoleEnum.ADMIN.value: 3,
}


def required_level(roles: List[str]) -> int:
    """The least privileged listed role sets the bar"""
    return min(ROLE_HIERARCHY[role] for role in roles)


class PermissionChecker:
    """
    Role gate for a route: ``Depends(PermissionChecker(["DRIVER"]))``.

    No resolved role is 401, a role below the threshold is 403. Ownership
    of the targeted resource is checked by the services, not here.
    """
    def __init__(self, required_roles: List[str]):
        if not required_roles:
            raise ValueError("PermissionChecker needs at least one role")
        self.required_roles = [getattr(role, "value", role) for role in required_roles]
        self.min_level = required_level(self.required_roles)

    def __call__(self, user_data=Depends(validate_bearer_token())):
        role = user_data.get("role")
        if role is None or role not in ROLE_HIERARCHY:
            logger.warning(f"Authorization failed: no role for user_id={user_data.get('user_id')}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=ResponseWrapper.error(
                    message="Authentication required",
                    error_code="UNAUTHORIZED",
                ),
            )

        if ROLE_HIERARCHY[role] < self.min_level:
            logger.warning(f"Permission denied. Required: {self.required_roles}, user has: {role}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=ResponseWrapper.error(
                    message="Insufficient permissions",
                    error_code="FORBIDDEN",
                ),
            )

        return user_data
