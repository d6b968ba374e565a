from dataclasses import dataclass, field

from jose import JWTError, jwt
from starlette.requests import Request

from renewals.core.config import get_settings


@dataclass
class AuthUser:
    sub: str
    roles: list[str] = field(default_factory=list)

    @property
    def is_anonymous(self) -> bool:
        return self.sub == "anonymous"


ANONYMOUS = AuthUser(sub="anonymous", roles=["guest"])


async def get_current_user(request: Request) -> AuthUser:
    auth_header = request.headers.get("authorization", "")
    token = auth_header.removeprefix("Bearer ").strip() if auth_header.startswith("Bearer ") else ""
    if not token:
        return ANONYMOUS

    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return ANONYMOUS

    roles = payload.get("roles", [])
    if not isinstance(roles, list):
        roles = []
    user = AuthUser(sub=str(payload.get("sub", "anonymous")), roles=[str(role) for role in roles])
    request.state.user_id = user.sub
    return user
