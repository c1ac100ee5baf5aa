from fastapi import Depends, HTTPException, status

from gymledger.auth.dependencies import get_current_user
from gymledger.auth.schemas import CurrentUser


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Require the admin role. Used for scheduling, reference data and payroll listings."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only administrators can perform this action",
        )
    return current_user


async def require_self_or_admin(
    professor_id: int,
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Admins see every teacher; a professor only their own record.

    Resolves `professor_id` from the path of the route it guards.
    """
    if current_user.is_admin or current_user.id == professor_id:
        return current_user
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Insufficient permissions",
    )
