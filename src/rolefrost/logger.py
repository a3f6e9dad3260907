import logging
import os

import coloredlogs

# The CLI overrides the level with -v/-vv, library users can set it here
LOG_LEVEL = os.getenv("ROLEFROST_LOG_LEVEL", "DEBUG").upper()

logger = logging.getLogger("rolefrost")
logger_style = "%(asctime)s: [%(levelname)-8s] [%(module)s] %(message)s"
coloredlogs.install(level=LOG_LEVEL, logger=logger, fmt=logger_style)

GLOBAL_LOGGER = logger
