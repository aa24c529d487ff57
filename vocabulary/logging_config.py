from __future__ import annotations
import logging
import logging.config

from .config import Settings


def setup_logging(settings: Settings) -> logging.Logger:
    level = getattr(logging, settings.log_level, logging.INFO)
    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'console': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'console',
                'stream': 'ext://sys.stdout',
            },
        },
        'loggers': {
            'vocabulary': {'level': level, 'handlers': ['console'], 'propagate': False},
        },
    })
    return logging.getLogger('vocabulary')
