#!/usr/bin/env python
#
# File: $Id$
#
"""
List the maildir folders in a mail store, the messages in a folder, or show
a single message. Every listing is rendered with a template, see
`mdtools.formatter`.

NOTE: For all command line options that can also be specified via an env. var:
      the command line option will override the env. var if set. A `.env`
      file in the current directory is read for env. vars too.

Usage:
  maildir-tools maildirs [--prefix=<dir>] [--format=<fmt>] [--short]
                         [--unread] [--unread-policy=<up>]
                         [--log-config=<lc>] [--debug]
  maildir-tools messages [--prefix=<dir>] [--format=<fmt>] [--workers=<n>]
                         [--unread-policy=<up>] [--log-config=<lc>] [--debug]
                         <folder>...
  maildir-tools message [--template=<file>] [--unread-policy=<up>]
                        [--log-config=<lc>] [--debug] <file>...
  maildir-tools message --dump-template
  maildir-tools (-h | --help)
  maildir-tools --version

Options:
  --version
  -h, --help             Show this text and exit

  --prefix=<dir>         The root of the maildir hierarchy. Defaults to
                         `$HOME/Maildir/`. The env. var is `MAILDIR_PREFIX`

  --format=<fmt>         The template each folder or message is rendered
                         with. For `maildirs` the default is
                         `#{06unread}/#{06total} - #{name}` and the env. var
                         is `MAILDIRS_FORMAT`. For `messages` the default is
                         `[#{index}/#{total} - #{flags}] #{subject}` and the
                         env. var is `MESSAGES_FORMAT`.

  --short                Render `#{name}` relative to the prefix.

  --unread               Only show folders that have unread messages.

  --unread-policy=<up>   How to decide a message is unread. `location`: it is
                         in `new/`. `seen-flag`: it is in `new/` or it does
                         not have the `S` flag. Defaults to `location`. The
                         env. var is `UNREAD_POLICY`

  --workers=<n>          How many messages to parse at once. Defaults to
                         twice the number of cpus. The env. var is `WORKERS`

  --template=<file>      A file containing the template to show a message
                         with. The env. var is `MESSAGE_TEMPLATE`

  --dump-template        Print the built in message template and exit.

  --debug                Will set the default logging level to `DEBUG` thus
                         enabling all of the debug logging. The env var is
                         `DEBUG`

  --log-config=<lc>      The log config file. This file may be either a JSON
                         file that follows the python logging configuration
                         dictionary schema or a file that conforms to the
                         python logging configuration file format. If no file
                         is specified it will check in ~/.config/mdtools,
                         /etc, /usr/local/etc, /opt/local/etc for a file named
                         `mdtools_log.cfg` or `mdtools_log.json`. If no valid
                         file can be found or loaded it will default to
                         logging to stderr. The env. var is `LOG_CONFIG`
"""
# system imports
#
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# 3rd party imports
#
from docopt import docopt
from dotenv import load_dotenv
from rich.traceback import install as rich_install

# Application imports
#
from mdtools import __version__ as VERSION
from mdtools.constants import (
    DEFAULT_MAILDIRS_FORMAT,
    DEFAULT_MESSAGE_TEMPLATE,
    DEFAULT_MESSAGES_FORMAT,
    DEFAULT_UNREAD_HIGHLIGHT,
    UnreadPolicy,
)
from mdtools.exceptions import MaildirToolsException
from mdtools.render import get_maildirs, get_message, get_messages
from mdtools.utils import setup_asyncio_logging, setup_logging, setup_sentry

rich_install(show_locals=True)

logger = logging.getLogger("mdtools.maildir_tools")

TRUE_VALUES = ("1", "true", "yes", "on")


####################################################################
#
def get_option(
    args: Dict[str, Any],
    option: str,
    env_var: str,
    default: Optional[str] = None,
) -> Optional[str]:
    """
    The command line option if it was given, otherwise the env. var if it is
    set, otherwise the default.
    """
    value = args.get(option)
    if value is None:
        value = os.environ.get(env_var, default)
    return value


####################################################################
#
def default_prefix() -> str:
    return os.path.join(os.path.expanduser("~"), "Maildir") + os.sep


####################################################################
#
def get_unread_policy(args: Dict[str, Any]) -> UnreadPolicy:
    policy = get_option(
        args, "--unread-policy", "UNREAD_POLICY", UnreadPolicy.LOCATION
    )
    try:
        return UnreadPolicy(policy)
    except ValueError:
        choices = ", ".join(p.value for p in UnreadPolicy)
        raise MaildirToolsException(
            f"Unknown unread policy '{policy}', must be one of: {choices}"
        )


####################################################################
#
def maildirs_cmd(args: Dict[str, Any]) -> int:
    """
    Print every maildir folder beneath the prefix.
    """
    prefix = get_option(args, "--prefix", "MAILDIR_PREFIX", default_prefix())
    template = get_option(
        args, "--format", "MAILDIRS_FORMAT", DEFAULT_MAILDIRS_FORMAT
    )
    maildirs = get_maildirs(
        prefix,
        template,
        short=args["--short"],
        unread_only=args["--unread"],
        unread_policy=get_unread_policy(args),
        highlight=os.environ.get("UNREAD_HIGHLIGHT", DEFAULT_UNREAD_HIGHLIGHT),
    )
    for maildir in maildirs:
        print(maildir.rendered)
    return 0


####################################################################
#
def messages_cmd(args: Dict[str, Any]) -> int:
    """
    Print every message in each of the given folders. Messages that could
    not be parsed are logged and left out.
    """
    prefix = get_option(args, "--prefix", "MAILDIR_PREFIX", default_prefix())
    template = get_option(
        args, "--format", "MESSAGES_FORMAT", DEFAULT_MESSAGES_FORMAT
    )
    workers = get_option(args, "--workers", "WORKERS")
    try:
        num_workers = int(workers) if workers is not None else None
    except ValueError:
        num_workers = 0
    # Anything that is not a positive integer.
    #
    if num_workers is not None and num_workers < 1:
        raise MaildirToolsException(f"Invalid number of workers: '{workers}'")
    unread_policy = get_unread_policy(args)
    highlight = os.environ.get("UNREAD_HIGHLIGHT", DEFAULT_UNREAD_HIGHLIGHT)

    for folder in args["<folder>"]:
        messages = asyncio.run(
            get_messages(
                prefix,
                folder,
                template,
                num_workers=num_workers,
                unread_policy=unread_policy,
                highlight=highlight,
            )
        )
        for msg in messages:
            if msg.ok:
                print(msg.rendered)
            else:
                logger.warning("Skipping message: %s", msg.error)
    return 0


####################################################################
#
def message_cmd(args: Dict[str, Any]) -> int:
    """
    Show each of the given message files.
    """
    if args["--dump-template"]:
        print(DEFAULT_MESSAGE_TEMPLATE)
        return 0

    template = DEFAULT_MESSAGE_TEMPLATE
    template_file = get_option(args, "--template", "MESSAGE_TEMPLATE")
    if template_file is not None:
        try:
            template = Path(template_file).read_text()
        except OSError as exc:
            raise MaildirToolsException(
                f"Unable to read template '{template_file}': {exc}"
            )

    unread_policy = get_unread_policy(args)
    highlight = os.environ.get("UNREAD_HIGHLIGHT", DEFAULT_UNREAD_HIGHLIGHT)

    status = 0
    for msg_file in args["<file>"]:
        try:
            print(
                get_message(
                    msg_file,
                    template,
                    unread_policy=unread_policy,
                    highlight=highlight,
                )
            )
        except MaildirToolsException as exc:
            logger.error("%s", exc)
            print(str(exc), file=sys.stderr)
            status = 1
    return status


#############################################################################
#
def main():
    """
    Our main entry point. Parse the options, set up logging, and run the
    sub-command.
    """
    load_dotenv()
    args = docopt(__doc__, version=VERSION)

    debug = args["--debug"] or (
        os.environ.get("DEBUG", "").lower() in TRUE_VALUES
    )
    log_config = get_option(args, "--log-config", "LOG_CONFIG")

    setup_logging(log_config, debug, os.environ.get("LOG_FORMAT", "basic"))
    setup_asyncio_logging()
    setup_sentry(debug)

    try:
        if args["maildirs"]:
            status = maildirs_cmd(args)
        elif args["messages"]:
            status = messages_cmd(args)
        else:
            status = message_cmd(args)
    except MaildirToolsException as exc:
        logger.error("%s", exc)
        print(str(exc), file=sys.stderr)
        status = 1
    except KeyboardInterrupt:
        logger.warning("Keyboard interrupt, exiting")
        status = 1
    except Exception as exc:
        logger.exception("Failed with uncaught exception %s", str(exc))
        status = 1
    sys.exit(status)


############################################################################
############################################################################
#
# Here is where it all starts
#
if __name__ == "__main__":
    main()
#
#
############################################################################
############################################################################
