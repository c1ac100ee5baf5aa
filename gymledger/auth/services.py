import logging
from datetime import datetime, timezone

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gymledger.auth.models import PasswordResetToken, Teacher
from gymledger.auth.schemas import (
    CurrentUser,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ResetPasswordRequest,
    ResetTokenValidation,
    UserInfo,
)
from gymledger.auth.security import (
    create_access_token,
    create_reset_token,
    hash_password,
    verify_password,
)
from gymledger.core.config import settings
from gymledger.core.exceptions import ServiceError

logger = logging.getLogger(__name__)

# Same answer whether or not the email exists
FORGOT_PASSWORD_MESSAGE = "If the email is registered, a password reset link has been sent."


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    email = payload.email.strip().lower()
    result = await db.execute(select(Teacher).where(func.lower(Teacher.email) == email))
    teacher = result.scalar_one_or_none()
    if not teacher:
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)
    if not verify_password(payload.password, teacher.password_hash):
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    access_token = create_access_token(
        subject={
            "sub": str(teacher.id),
            "teacher_id": str(teacher.id),
            "role": teacher.role,
        }
    )
    logger.info("Teacher %s logged in", teacher.id)
    return LoginResponse(
        access_token=access_token,
        user=UserInfo(id=teacher.id, name=teacher.name, email=teacher.email, role=teacher.role),
        issued_at=datetime.now(timezone.utc),
    )


def get_me(current_user: CurrentUser) -> UserInfo:
    return UserInfo(
        id=current_user.id,
        name=current_user.name,
        email=current_user.email,
        role=current_user.role,
    )


async def request_password_reset(
    db: AsyncSession, payload: ForgotPasswordRequest
) -> MessageResponse:
    """Create a reset token for a known email. Delivery is out of scope: the link is logged."""
    email = payload.email.strip().lower()
    result = await db.execute(select(Teacher).where(func.lower(Teacher.email) == email))
    teacher = result.scalar_one_or_none()
    if teacher:
        token, expires_at = create_reset_token()
        db.add(PasswordResetToken(teacher_id=teacher.id, token=token, expires_at=expires_at, used=False))
        await db.commit()
        logger.info(
            "Password reset link for teacher %s: %s?token=%s (expires %s)",
            teacher.id,
            settings.password_reset_url,
            token,
            expires_at.isoformat(),
        )
    else:
        logger.info("Password reset requested for unknown email")
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


async def _get_valid_token(db: AsyncSession, token: str):
    result = await db.execute(
        select(PasswordResetToken).where(
            PasswordResetToken.token == token,
            PasswordResetToken.used.is_(False),
        )
    )
    row = result.scalar_one_or_none()
    if not row:
        return None
    if _aware(row.expires_at) <= datetime.now(timezone.utc):
        return None
    return row


async def validate_reset_token(db: AsyncSession, token: str) -> ResetTokenValidation:
    return ResetTokenValidation(valid=await _get_valid_token(db, token) is not None)


async def reset_password(db: AsyncSession, payload: ResetPasswordRequest) -> MessageResponse:
    row = await _get_valid_token(db, payload.token)
    if not row:
        raise ServiceError("Invalid or expired token", status.HTTP_400_BAD_REQUEST)
    teacher = await db.get(Teacher, row.teacher_id)
    if not teacher:
        raise ServiceError("Invalid or expired token", status.HTTP_400_BAD_REQUEST)

    teacher.password_hash = hash_password(payload.password)
    row.used = True
    await db.commit()
    logger.info("Password reset completed for teacher %s", teacher.id)
    return MessageResponse(message="Password has been reset successfully.")
