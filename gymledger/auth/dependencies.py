from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.models import Teacher
from gymledger.auth.schemas import CurrentUser
from gymledger.core.config import settings
from gymledger.db.session import get_db


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login-oauth")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the authenticated teacher from the access token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise credentials_exception

    teacher_id_str = payload.get("teacher_id") or payload.get("sub")
    if not teacher_id_str:
        raise credentials_exception
    try:
        teacher_id = int(teacher_id_str)
    except (TypeError, ValueError):
        raise credentials_exception

    # Role is read from the row, not the token, so demotions apply immediately
    teacher = await db.get(Teacher, teacher_id)
    if not teacher:
        raise credentials_exception

    return CurrentUser(
        id=teacher.id,
        name=teacher.name,
        email=teacher.email,
        role=teacher.role,
    )
