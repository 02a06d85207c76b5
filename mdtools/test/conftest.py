"""
pytest fixtures for testing `mdtools`
"""
# System imports
#
import os
import time
from email.headerregistry import Address
from email.message import EmailMessage
from email.policy import SMTP
from email.utils import format_datetime
from itertools import count
from pathlib import Path
from typing import Iterable, Optional

# 3rd party imports
#
import pytest

# project imports
#
from ..constants import MAILDIR_SUBDIRS


####################################################################
#
@pytest.fixture
def maildir_root(tmp_path):
    """
    The root of the mail store all of the maildir folders for a test live
    in.
    """
    root = tmp_path / "Maildir"
    root.mkdir(parents=True, exist_ok=True)
    yield root


####################################################################
#
@pytest.fixture
def maildir_factory(maildir_root):
    """
    Returns a function that makes a maildir folder beneath the maildir root
    and returns its path. Pass `subdirs` to make a broken one.
    """

    def make_maildir(
        name: str = "inbox",
        subdirs: Iterable[str] = MAILDIR_SUBDIRS,
        root: Optional[Path] = None,
    ) -> Path:
        folder = (maildir_root if root is None else root) / name
        folder.mkdir(parents=True, exist_ok=True)
        for subdir in subdirs:
            (folder / subdir).mkdir(exist_ok=True)
        return folder

    return make_maildir


####################################################################
#
@pytest.fixture
def email_factory(faker):
    """
    Returns a factory that creates email.message.EmailMessages, a text part
    with an html alternative.
    """

    def make_email(**kwargs):
        """
        if kwargs for 'subject', 'msg_from' or 'to' are provided use those in
        the message instead of faker generated ones.
        """
        msg = EmailMessage()
        msg["Date"] = format_datetime(
            faker.date_time_between(start_date="-1y")
        )
        msg["Message-ID"] = f"<{faker.uuid4()}@{faker.domain_name()}>"
        msg["Subject"] = kwargs.get("subject", faker.sentence())
        if "msg_from" not in kwargs:
            username, domain_name = faker.email().split("@")
            msg["From"] = Address(faker.name(), username, domain_name)
        else:
            msg["From"] = kwargs["msg_from"]

        if "to" not in kwargs:
            username, domain_name = faker.email().split("@")
            msg["To"] = Address(faker.name(), username, domain_name)
        else:
            msg["To"] = kwargs["to"]

        message_content = kwargs.get("body", "\n".join(faker.paragraphs(nb=3)))
        msg.set_content(message_content)
        if kwargs.get("html", True):
            msg.add_alternative(
                f"<html><head></head><body><p>{message_content}</p></body></html>",
                subtype="html",
            )
        return msg

    return make_email


####################################################################
#
@pytest.fixture
def deliver(email_factory):
    """
    Returns a function that writes a message in to a maildir folder and
    returns the path to the message file as a string.

    - `subdir`: `cur`, `new`, or `tmp`.
    - `flags`: if not None the file name gets a `:2,<flags>` suffix.
    - `mtime`: set the file's mtime to this.
    - `name`: use this as the file name (before any flags).
    - `msg`: the message to write, made by the email_factory if not given.
    - `raw`: bytes to write as the message instead of `msg`.
    """
    serial = count(1)

    def deliver_msg(
        maildir: Path,
        subdir: str = "cur",
        flags: Optional[str] = None,
        mtime: Optional[float] = None,
        name: Optional[str] = None,
        msg: Optional[EmailMessage] = None,
        raw: Optional[bytes] = None,
        **kwargs,
    ) -> str:
        if name is None:
            name = f"{int(time.time())}.M{next(serial)}P{os.getpid()}.testhost"
        if flags is not None:
            name = f"{name}:2,{flags}"
        if raw is None:
            if msg is None:
                msg = email_factory(**kwargs)
            raw = msg.as_bytes(policy=SMTP)
        msg_path = Path(maildir) / subdir / name
        msg_path.write_bytes(raw)
        if mtime is not None:
            os.utime(msg_path, (mtime, mtime))
        return str(msg_path)

    return deliver_msg
