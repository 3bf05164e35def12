from nexus.database import Base, engine
from nexus.config import USE_ASYNC_ENGINE
from nexus.elections.model import models  # noqa: F401
from nexus.nexus_auth.model import models as auth_models  # noqa: F401
from nexus.nexus_auth.model.enums import UserRole
from nexus.nexus_auth.utils import create_user
import asyncio


async def init_models():
    if USE_ASYNC_ENGINE:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
    else:
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)
    await create_user("admin", "12345678", UserRole.admin.value, "Administrator")

if __name__ == "__main__":
    asyncio.run(init_models())
