"""Identity and role resolution."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.core.exceptions import AuthenticationError, NotFoundError
from staybook.core.permissions import Principal, UserRole
from staybook.core.security import verify_token
from staybook.models.user import User


class IdentityProvider:
    """Resolves bearer credentials to principals and checks guest accounts."""

    async def resolve(self, db: AsyncSession, credential: str) -> Principal:
        """Turn an access token into a ``Principal``.

        The role comes from the stored account, not from the token, so a
        demoted user loses access on the next request.
        """
        payload = verify_token(credential, token_type="access")
        subject = payload.get("sub")
        if not subject:
            raise AuthenticationError("Invalid token payload")
        try:
            user_id = UUID(str(subject))
        except ValueError:
            raise AuthenticationError("Invalid token subject")

        user = await db.get(User, user_id)
        if not user:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("User account is deactivated")

        return Principal(id=user.id, role=UserRole(user.role))

    async def get_active_user(self, db: AsyncSession, user_id: UUID) -> User:
        """Load a bookable account.

        A deactivated account is reported exactly like a missing one.
        """
        result = await db.execute(
            select(User).where(User.id == user_id, User.is_active.is_(True))
        )
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("Guest", str(user_id))
        return user


# Singleton instance
identity_provider = IdentityProvider()
