from werkzeug.security import check_password_hash
from fastapi import APIRouter, Depends

from nexus.dependencies import get_session
from nexus.elections.exceptions import AuthenticationError, Conflict

from nexus.nexus_auth.auth_bearer import AuthUser
from nexus.nexus_auth.model import crud as auth_crud
from nexus.nexus_auth.model import models, schemas
from nexus.nexus_auth.model.enums import UserRole
from nexus.nexus_auth import utils as auth_utils
from nexus.logger import logger

from fastapi.security import HTTPBasic, HTTPBasicCredentials

auth_router = APIRouter()

security = HTTPBasic()


@auth_router.post("/auth/register", status_code=201)
async def register(user_in: schemas.UserRegister, session=Depends(get_session)):
    """
    Self registration, every new account is a student
    """
    if await auth_crud.get_user_by_name(session=session, name=user_in.username):
        raise Conflict("Username already taken")

    user = await auth_utils.register_user(
        session,
        user_in.username,
        user_in.password,
        role=UserRole.student,
        name=user_in.name,
        department=user_in.department,
    )
    logger.info("User %s registered" % user.username)
    return {
        "success": True,
        "message": "User registered successfully",
        "data": schemas.UserOut.model_validate(user),
    }


@auth_router.post("/login", status_code=201)
async def login_user(credentials: HTTPBasicCredentials = Depends(security), session=Depends(get_session)):
    """
    Login a user

    """

    if not credentials or not credentials.username or not credentials.password:
        raise AuthenticationError("an error occurred, please try again")

    user = await auth_crud.get_user_by_name(session=session, name=credentials.username)

    if not user or not check_password_hash(user.password, credentials.password):
        raise AuthenticationError("wrong username or passwords")

    return {
        "success": True,
        "message": "Login successful",
        "data": {
            "token": auth_utils.create_access_token(user.public_id),
            "user": schemas.UserOut.model_validate(user),
        },
    }


@auth_router.get("/auth/profile", status_code=200)
async def profile(current_user: models.User = Depends(AuthUser())):
    return {
        "success": True,
        "data": schemas.UserOut.model_validate(current_user),
    }
