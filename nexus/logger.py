import logging
import json

from nexus.elections.model.cruds import crud
from nexus.elections.model.enums import ElectionEventEnum
from nexus.elections import utils
from nexus.config import LOGGER_CONFIG_PATH

import sys
from pathlib import Path
from loguru import logger
from starlette_context import context
from starlette_context.header_keys import HeaderKeys


class InterceptHandler(logging.Handler):
    loglevel_mapping = {
        50: 'CRITICAL',
        40: 'ERROR',
        30: 'WARNING',
        20: 'INFO',
        10: 'DEBUG',
        0: 'NOTSET',
    }

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = self.loglevel_mapping[record.levelno]

        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(
            depth=depth,
            exception=record.exc_info
        ).log(level, record.getMessage())


def add_request_context(record):
    """
    Tags every record with the id of the request being served, if any.
    """
    if context.exists():
        record["extra"]["request_id"] = context.get(HeaderKeys.request_id)
        record["extra"]["forwarded_for"] = context.get(HeaderKeys.forwarded_for)


class CustomizeLogger:

    @classmethod
    def make_logger(cls, config_path: Path):

        config = cls.load_logging_config(config_path)
        logging_config = config.get('logger')

        logger = cls.customize_logging(
            logging_config.get('path'),
            level=logging_config.get('level'),
            retention=logging_config.get('retention'),
            rotation=logging_config.get('rotation'),
            format=logging_config.get('format')
        )
        return logger

    @classmethod
    def customize_logging(cls,
            filepath: Path,
            level: str,
            rotation: str,
            retention: str,
            format: str
    ):

        logger.remove()
        logger.configure(
            extra={"request_id": None, "forwarded_for": None},
            patcher=add_request_context,
        )
        try:
            logger.level("NEXUS", no=35, color="<magenta>", icon="")
        except TypeError:
            # already registered by a previous configuration
            pass
        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            level=level.upper(),
            format=format
        )
        logger.add(
            str(filepath),
            rotation=rotation,
            retention=retention,
            enqueue=True,
            backtrace=True,
            level=level.upper(),
            format=format
        )
        logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
        logging.getLogger("uvicorn.access").handlers = [InterceptHandler()]
        for _log in ['uvicorn',
                     'uvicorn.error',
                     'fastapi'
                     ]:
            _logger = logging.getLogger(_log)
            _logger.handlers = [InterceptHandler()]

        return logger

    @classmethod
    def load_logging_config(cls, config_path):
        config = None
        with open(config_path) as config_file:
            config = json.load(config_file)
        return config


class ElectionLogger(object):
    """
    Audit logger for election events, every entry is stored in the
    election_logs table through the caller's session.
    """

    _level_to_name = {
        logging.CRITICAL: 'CRITICAL',
        logging.ERROR: 'ERROR',
        logging.WARNING: 'WARNING',
        logging.INFO: 'INFO',
        logging.DEBUG: 'DEBUG',
        logging.NOTSET: 'NOTSET',
    }

    async def _log_to_db(self, session, level, election_id, event: ElectionEventEnum, **kwargs):
        return await crud.log_to_db(
            session=session,
            log_level=self._level_to_name[level],
            election_id=election_id,
            event=event.value,
            event_params=utils.to_json(kwargs),
            created_at=utils.tz_now(),
        )

    async def warning(self, session, election_id, event: ElectionEventEnum, **kwargs):
        return await self._log_to_db(session, logging.WARNING, election_id, event, **kwargs)

    async def info(self, session, election_id, event: ElectionEventEnum, **kwargs):
        return await self._log_to_db(session, logging.INFO, election_id, event, **kwargs)


election_logger = ElectionLogger()

logger_config_path = Path(LOGGER_CONFIG_PATH) if LOGGER_CONFIG_PATH else Path(__file__).with_name("logger_config.json")
logger = CustomizeLogger.make_logger(logger_config_path)
