from sqlalchemy import Column, String
from sqlalchemy.types import Enum

from nexus.database import Base
from nexus.elections import utils
from nexus.nexus_auth.model.enums import UserRole


class User(Base):

    __tablename__ = "auth_user"

    id = Column(String(36), primary_key=True, default=utils.generate_id)

    # Id for token
    public_id = Column(String(200), nullable=False, unique=True)

    username = Column(String(200), nullable=False, unique=True)
    password = Column(String(200), nullable=False)

    name = Column(String(200), nullable=True)
    department = Column(String(200), nullable=True)

    role = Column(Enum(UserRole), nullable=False, default=UserRole.student)

    def __repr__(self):
        return '<User %r>' % self.id
