from fastapi import Request, Depends
from fastapi.security import HTTPBearer
from nexus.config import SECRET_KEY
from sqlalchemy.orm import Session
from nexus.dependencies import get_session
from nexus.elections.exceptions import AuthenticationError
from sqlalchemy.ext.asyncio import AsyncSession

from nexus.nexus_auth.model import crud

import jwt


async def decodeJWT(token: str, session: Session | AsyncSession):
    try:
        decoded_token = jwt.decode(token, SECRET_KEY, algorithms=["HS256"])
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid token or expired token.") from e

    public_id = decoded_token.get("public_id")
    if not public_id:
        raise AuthenticationError("Invalid token or expired token.")
    return await crud.get_user_by_public_id(public_id=public_id, session=session)


class AuthUser(HTTPBearer):

    """
    HTTPBearer class for authentication with Bearer tokens.

    With required=False a request without a token is let through as
    anonymous (None); a token that is present must always be valid.
    """

    def __init__(self, required: bool = True):
        super(AuthUser, self).__init__(auto_error=False)
        self.required = required

    async def __call__(self, request: Request, session: Session | AsyncSession = Depends(get_session)):
        credentials = await super(AuthUser, self).__call__(request)
        if not credentials:
            if self.required:
                raise AuthenticationError("Authorization token not provided.")
            return None

        user = await decodeJWT(credentials.credentials, session)
        if not user:
            raise AuthenticationError("Invalid token or expired token.")
        return user
