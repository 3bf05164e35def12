from datetime import timedelta

import os

# Retrieve enviroment variables from .env file

DATABASE_USER = os.environ.get("DATABASE_USER")
DATABASE_PASS = os.environ.get("DATABASE_PASS")
DATABASE_HOST = os.environ.get("DATABASE_HOST")
DATABASE_NAME = os.environ.get("DATABASE_NAME")

# Full SQLAlchemy url, takes precedence over the MySQL parts above
DATABASE_URL = os.environ.get("DATABASE_URL")

SECRET_KEY: str = os.environ.get("SECRET_KEY", "change-me")

ACCESS_TOKEN_EXPIRE = timedelta(
    minutes=int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))
)

USE_ASYNC_ENGINE = bool(int(os.environ.get("USE_ASYNC_ENGINE", False)))
TIMEZONE = os.environ.get("TIMEZONE", "UTC")
DEBUG = bool(int(os.environ.get("DEBUG", False)))

LOGGER_CONFIG_PATH = os.environ.get("LOGGER_CONFIG_PATH")

ORIGINS: list = os.environ.get("ORIGINS", "*").split(",")
