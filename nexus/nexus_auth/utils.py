import uuid
import jwt

from nexus.config import SECRET_KEY, ACCESS_TOKEN_EXPIRE
from nexus.database import db_handler
from nexus.elections import utils
from nexus.logger import logger

from nexus.nexus_auth.model import crud as auth_crud
from nexus.nexus_auth.model import schemas as auth_schemas
from nexus.nexus_auth.model.enums import UserRole

from werkzeug.security import generate_password_hash


PASSWORD_HASH_METHOD = "scrypt:32768:8:1"


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=PASSWORD_HASH_METHOD)


def create_access_token(public_id: str) -> str:
    payload = {
        "public_id": public_id,
        "exp": utils.tz_now() + ACCESS_TOKEN_EXPIRE,
    }
    return jwt.encode(payload, SECRET_KEY, algorithm="HS256")


async def register_user(session, username: str, password: str, role: UserRole = UserRole.student, name: str | None = None, department: str | None = None):
    """
    Stores a new user with a hashed password.
    """
    user = auth_schemas.UserIn(
        username=username,
        password=hash_password(password),
        public_id=str(uuid.uuid4()),
        role=role,
        name=name,
        department=department,
    )
    return await auth_crud.create_user(session=session, user=user)


@db_handler.func_with_session
async def create_user(session, username: str, password: str, role: str = UserRole.student.value, name: str | None = None) -> str:
    """
    Create a new user
    :param username: username of the user
    :param password: password of the user
    :param role: one of Admin, Faculty, Student
    """
    user = await register_user(session, username, password, role=UserRole(role), name=name)
    logger.info("User %s created successfully!" % user.username)
    return user.public_id


@db_handler.func_with_session
async def update_user(session, username: str, password: str) -> str:
    """
    Update the password of a user
    :param username: username of the user
    :param password: password of the user
    """
    user = await auth_crud.update_user(session=session, username=username, fields={"password": hash_password(password)})
    logger.info("User %s updated successfully!" % username)
    return user.public_id if user else None
