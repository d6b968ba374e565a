from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, status

from renewals.core.auth import AuthUser, get_current_user


def require_permissions(*permissions: str) -> Callable[..., Awaitable[AuthUser]]:
    async def checker(user: AuthUser = Depends(get_current_user)) -> AuthUser:
        if user.is_anonymous:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
        missing_permissions = [permission for permission in permissions if permission not in user.roles]
        if missing_permissions:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(missing_permissions)}",
            )
        return user

    return checker
