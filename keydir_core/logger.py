import logging, json, sys, time, os

LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def env_level(default="INFO"):
    # unknown values fall back to the default; load_config() rejects them
    level = os.getenv("KEYDIR_LOG_LEVEL", default).upper()
    return level if level in LEVELS else default


def get_logger(name="keydir", level=None, to_file=None):
    """Unified structured logger for all key directory components."""
    logger = logging.getLogger(name)
    logger.setLevel(level or env_level())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "name": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # UTC timestamps
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def set_level(level, prefix="KeyDir"):
    """Apply a level to every logger already created under prefix."""
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and (name == prefix or name.startswith(prefix + ".")):
            logger.setLevel(level)
