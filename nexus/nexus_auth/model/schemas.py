from pydantic import BaseModel, ConfigDict, Field

from nexus.nexus_auth.model.enums import UserRole


class UserBase(BaseModel):
    """
    Basic user schema.
    """

    username: str = Field(min_length=3, max_length=200)
    name: str | None = Field(default=None, max_length=200)
    department: str | None = Field(default=None, max_length=200)


class UserRegister(UserBase):
    """
    Schema for self registration, always creates a student.
    """

    password: str = Field(min_length=8, max_length=128)


class UserIn(UserBase):
    """
    Schema for creating a user.
    """

    password: str
    public_id: str
    role: UserRole = UserRole.student


class UserOut(UserBase):
    """
    Schema for reading/returning User data.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    role: UserRole
