from fastapi import FastAPI

from nexus.elections.routes import api_router
from nexus.nexus_auth.routes import auth_router

from nexus.logger import logger
from nexus.middleware import register_middlewares, register_exception_handlers

app = FastAPI(title="Campus Nexus elections")

app.logger = logger

register_middlewares(app)
register_exception_handlers(app)

# Routes
app.include_router(api_router)
app.include_router(auth_router)
