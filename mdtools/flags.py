#!/usr/bin/env python
#
# File: $Id$
#
"""
Decode the state of a message from its file name.

Maildir encodes a message's flags in its file name, after the `:2,`
marker, eg: `1690000000.M1P2.host:2,RS`. A message that has not been looked
at by a mail client yet lives in the folder's `new/` directory. We present
that as a synthetic `N` flag.
"""

# system imports
#
import os
from typing import TYPE_CHECKING, Optional

# Project imports
#
from .constants import FLAG_MARKER, NEW_DIR_MARKER, MaildirFlag, UnreadPolicy

if TYPE_CHECKING:
    from _typeshed import StrPath


####################################################################
#
def raw_flags(msg_path: "StrPath") -> str:
    """
    The flag letters exactly as they appear in the file name after the last
    `:2,` marker. Empty if there is no marker.
    """
    msg_path = str(msg_path)
    idx = msg_path.rfind(FLAG_MARKER)
    if idx < 0:
        return ""
    return msg_path[idx + len(FLAG_MARKER) :]


####################################################################
#
def is_new(msg_path: "StrPath") -> bool:
    """
    True if the message is in a folder's `new/` directory.
    """
    return NEW_DIR_MARKER in str(msg_path)


####################################################################
#
def flags(msg_path: "StrPath") -> str:
    """
    The canonical flag string for a message: the flag letters from the file
    name plus `N` if the message is in `new/`, sorted. Duplicates are kept.

    eg: `.../new/123.host:2,SR` -> `NRS`
    """
    letters = raw_flags(msg_path)
    if is_new(msg_path):
        letters += MaildirFlag.NEW
    return "".join(sorted(letters))


####################################################################
#
def in_new_dir(msg_path: "StrPath", maildir: "StrPath") -> bool:
    """
    True if the message is beneath the `new/` directory of `maildir`. Unlike
    `is_new()` a directory named `new` above the maildir does not count.
    """
    new_dir = os.path.join(str(maildir), "new") + os.sep
    return str(msg_path).startswith(new_dir)


####################################################################
#
def is_unread(
    msg_path: "StrPath",
    policy: UnreadPolicy = UnreadPolicy.LOCATION,
    maildir: Optional["StrPath"] = None,
) -> bool:
    """
    Decide if a message is unread according to the given policy. See
    `UnreadPolicy`.

    If `maildir` is given the message has to be in that maildir's `new/` to
    count as new, otherwise `is_new()` decides.
    """
    if maildir is not None:
        new = in_new_dir(msg_path, maildir)
    else:
        new = is_new(msg_path)
    if new:
        return True
    if policy == UnreadPolicy.SEEN_FLAG:
        return MaildirFlag.SEEN not in raw_flags(msg_path)
    return False
