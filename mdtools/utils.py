"""
Logging and error reporting setup shared by the command line tools.
"""

# system imports
#
import asyncio
import atexit
import json
import logging
import logging.config
import logging.handlers
import os
import sys
from pathlib import Path
from queue import SimpleQueue
from typing import TYPE_CHECKING, Any, Dict, List, Optional

# 3rd party module imports
#
import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration

if TYPE_CHECKING:
    from _typeshed import StrPath

DEFAULT_LOG_CONFIG_FILES = [
    Path("~/.config/mdtools/mdtools_log.json").expanduser(),
    Path("~/.config/mdtools/mdtools_log.cfg").expanduser(),
    Path("/etc/mdtools_log.json"),
    Path("/etc/mdtools_log.cfg"),
    Path("/usr/local/etc/mdtools_log.json"),
    Path("/usr/local/etc/mdtools_log.cfg"),
    Path("/opt/local/etc/mdtools_log.json"),
    Path("/opt/local/etc/mdtools_log.cfg"),
]

LOG_FORMATS = ("basic", "json")


##################################################################
##################################################################
#
class LocalQueueHandler(logging.handlers.QueueHandler):
    """
    A QueueHandler for an in-process queue. There is no need to prepare
    records that never leave this process, so we skip that.

    This is cribbed from:
         https://www.zopatista.com/python/2019/05/11/asyncio-logging/
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.enqueue(record)
        except asyncio.CancelledError:
            raise
        except Exception:
            self.handleError(record)


############################################################################
#
def setup_asyncio_logging() -> None:
    """
    Call this after you have configured all of your log handlers.

    The handlers on the root logger are moved behind a LocalQueueHandler and
    are run by a QueueListener in its own thread, so the message rendering
    workers do not block writing to them. Handlers a log config puts on
    other loggers are left where they are.
    """
    queue: SimpleQueue = SimpleQueue()
    root = logging.getLogger()

    handlers: List[logging.Handler] = []

    handler = LocalQueueHandler(queue)
    root.addHandler(handler)
    for h in root.handlers[:]:
        if h is not handler:
            root.removeHandler(h)
            handlers.append(h)

    listener = logging.handlers.QueueListener(
        queue, *handlers, respect_handler_level=True
    )
    listener.start()

    # Flush anything still queued when we exit.
    #
    atexit.register(listener.stop)


####################################################################
#
def _load_log_config(log_config: Path) -> None:
    """
    A `.json` file is a logging dict config, anything else is a logging
    config file.
    """
    if log_config.suffix == ".json":
        cfg = json.loads(log_config.read_text())
        logging.config.dictConfig(cfg)
    else:
        logging.config.fileConfig(str(log_config))


####################################################################
#
def setup_logging(
    log_config: Optional["StrPath"],
    debug: bool,
    log_format: str = "basic",
):
    """
    Set up logging.

    If `log_config` is given and exists it is loaded. Otherwise we look for
    a config in the DEFAULT_LOG_CONFIG_FILES. If none of those exist we log
    to stderr.

    Arguments:
    - `log_config`: a logging dict config as JSON, or a logging config file.
    - `debug`: log at DEBUG instead of WARNING.
    - `log_format`: `basic` or `json`, only used when we log to stderr.
    """
    root_logger = logging.getLogger()
    if debug:
        root_logger.setLevel(logging.DEBUG)

    if log_config is not None:
        log_config = Path(log_config)
        if log_config.exists():
            _load_log_config(log_config)
            return
        print(
            f"WARNING: Logging config '{log_config}' does not exist",
            file=sys.stderr,
        )

    for log_config in DEFAULT_LOG_CONFIG_FILES:
        if log_config.exists():
            _load_log_config(log_config)
            return

    if log_format not in LOG_FORMATS:
        print(
            f"WARNING: Unknown log format '{log_format}', using 'basic'",
            file=sys.stderr,
        )
        log_format = "basic"

    # If no logging config file is found then this is what will be used.
    #
    DEFAULT_LOGGING_CONFIG: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "basic": {
                "format": "[{asctime}] {levelname}:{module}.{funcName}: {message}",
                "style": "{",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": log_format,
                "stream": "ext://sys.stderr",
            },
        },
        # The console handler lives on the root logger so that
        # `setup_asyncio_logging()` can move it behind the queue.
        #
        "root": {
            "handlers": ["console"],
            "level": "DEBUG" if debug else "WARNING",
        },
        "loggers": {
            "mdtools": {
                "level": "DEBUG" if debug else "WARNING",
            },
        },
    }
    logging.config.dictConfig(DEFAULT_LOGGING_CONFIG)
    logger = logging.getLogger("mdtools.utils")
    logger.debug("Debug logging enabled")


####################################################################
#
def setup_sentry(debug: bool = False) -> bool:
    """
    If SENTRY_DSN is in the environment initialize sentry_sdk. Returns True
    if it was initialized.
    """
    logger = logging.getLogger("mdtools.utils")
    if "SENTRY_DSN" not in os.environ:
        logger.debug("Not initializing sentry_sdk: SENTRY_DSN not in environment")
        return False

    traces_sample_rate = float(
        os.environ.get("SENTRY_TRACES_SAMPLE_RATE", 0.1)
    )
    logger.debug("Initializing sentry_sdk")
    sentry_sdk.init(
        dsn=os.environ["SENTRY_DSN"],
        traces_sample_rate=traces_sample_rate,
        integrations=[
            AsyncioIntegration(),
        ],
        environment="devel" if debug else "production",
    )
    return True
