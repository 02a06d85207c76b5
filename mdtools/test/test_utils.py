"""
Test logging and sentry setup.
"""
# System imports
#
import json
import logging
from queue import SimpleQueue

# 3rd party imports
#
import pytest

# Project imports
#
from ..utils import (
    LocalQueueHandler,
    setup_asyncio_logging,
    setup_logging,
    setup_sentry,
)


####################################################################
#
@pytest.fixture
def restore_logging():
    """
    Put the root and `mdtools` loggers back the way they were after the
    test has reconfigured them.
    """
    root = logging.getLogger()
    mdtools_logger = logging.getLogger("mdtools")
    root_handlers = root.handlers[:]
    root_level = root.level
    mdtools_level = mdtools_logger.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in root_handlers:
        root.addHandler(handler)
    root.setLevel(root_level)
    mdtools_logger.setLevel(mdtools_level)


####################################################################
#
def test_setup_logging_dict_config(tmp_path):
    """
    A `.json` log config is loaded as a logging dict config.
    """
    log_config = tmp_path / "mdtools_log.json"
    log_config.write_text(
        json.dumps(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "loggers": {
                    "mdtools.test.dictconfig": {"level": "ERROR"},
                },
            }
        )
    )
    setup_logging(log_config, debug=False)
    logger = logging.getLogger("mdtools.test.dictconfig")
    assert logger.level == logging.ERROR


####################################################################
#
def test_setup_logging_missing_config(
    tmp_path, mocker, capsys, restore_logging
):
    """
    A log config that does not exist is warned about and we fall back to
    logging to stderr.
    """
    mocker.patch("mdtools.utils.DEFAULT_LOG_CONFIG_FILES", [])
    dict_config = mocker.patch("mdtools.utils.logging.config.dictConfig")

    setup_logging(tmp_path / "nope.json", debug=True, log_format="json")

    assert "does not exist" in capsys.readouterr().err
    dict_config.assert_called_once()
    cfg = dict_config.call_args.args[0]
    assert cfg["handlers"]["console"]["formatter"] == "json"
    assert cfg["root"]["handlers"] == ["console"]
    assert cfg["loggers"]["mdtools"]["level"] == "DEBUG"


####################################################################
#
def test_setup_logging_unknown_format(mocker, capsys):
    mocker.patch("mdtools.utils.DEFAULT_LOG_CONFIG_FILES", [])
    dict_config = mocker.patch("mdtools.utils.logging.config.dictConfig")

    setup_logging(None, debug=False, log_format="xml")

    assert "Unknown log format 'xml'" in capsys.readouterr().err
    cfg = dict_config.call_args.args[0]
    assert cfg["handlers"]["console"]["formatter"] == "basic"
    assert cfg["loggers"]["mdtools"]["level"] == "WARNING"


####################################################################
#
def test_default_logging_goes_through_queue(mocker, restore_logging):
    """
    With the default config every handler ends up behind the queue, so
    nothing in `mdtools` writes to stderr directly.
    """
    mocker.patch("mdtools.utils.DEFAULT_LOG_CONFIG_FILES", [])
    listener = mocker.patch("mdtools.utils.logging.handlers.QueueListener")

    setup_logging(None, debug=False)
    setup_asyncio_logging()

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], LocalQueueHandler)
    assert logging.getLogger("mdtools").handlers == []
    assert logging.getLogger("mdtools").propagate

    queued_handlers = listener.call_args.args[1:]
    assert len(queued_handlers) == 1
    assert isinstance(queued_handlers[0], logging.StreamHandler)
    listener.return_value.start.assert_called_once()


####################################################################
#
def test_local_queue_handler():
    queue: SimpleQueue = SimpleQueue()
    handler = LocalQueueHandler(queue)
    record = logging.LogRecord(
        "mdtools.test", logging.INFO, __file__, 1, "hello %s", ("there",), None
    )
    handler.emit(record)

    # Not prepared: the record is the one we handed over, args and all.
    #
    queued = queue.get_nowait()
    assert queued is record
    assert queued.args == ("there",)


####################################################################
#
def test_setup_sentry_without_dsn(monkeypatch, mocker):
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    init = mocker.patch("mdtools.utils.sentry_sdk.init")
    assert setup_sentry() is False
    init.assert_not_called()


####################################################################
#
def test_setup_sentry_with_dsn(monkeypatch, mocker):
    dsn = "https://public@sentry.example.com/1"
    monkeypatch.setenv("SENTRY_DSN", dsn)
    monkeypatch.delenv("SENTRY_TRACES_SAMPLE_RATE", raising=False)
    init = mocker.patch("mdtools.utils.sentry_sdk.init")

    assert setup_sentry(debug=True) is True
    init.assert_called_once()
    kwargs = init.call_args.kwargs
    assert kwargs["dsn"] == dsn
    assert kwargs["environment"] == "devel"
    assert kwargs["traces_sample_rate"] == 0.1
