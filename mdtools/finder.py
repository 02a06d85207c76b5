#!/usr/bin/env python
#
# File: $Id$
#
"""
Find the maildir folders beneath a root directory, and the messages in a
maildir folder.

Both walks are tolerant: anything we can not stat or read is left out of the
results, never raised. A mail store often has index files, lock files, and
directories we do not own sitting in it. If you want to know what was
skipped pass in a list as `errors` and every `OSError` we swallowed will be
appended to it.
"""

# system imports
#
import logging
import os
import stat
from typing import TYPE_CHECKING, List, Optional, Tuple

# Project imports
#
from .constants import MAILDIR_SUBDIRS, MESSAGE_SUBDIRS

if TYPE_CHECKING:
    from _typeshed import StrPath

logger = logging.getLogger("mdtools.finder")


####################################################################
#
def _walk(top: str, errors: Optional[List[OSError]]):
    """
    os.walk() in lexical order, not following symlinks, recording errors
    instead of raising them.
    """

    def onerror(exc: OSError):
        logger.debug("Skipping '%s': %s", exc.filename, exc)
        if errors is not None:
            errors.append(exc)

    for dirpath, dirnames, filenames in os.walk(
        top, onerror=onerror, followlinks=False
    ):
        dirnames.sort()
        filenames.sort()
        yield dirpath, dirnames, filenames


####################################################################
#
def is_maildir(path: "StrPath") -> bool:
    """
    A maildir folder is a directory with `cur`, `new`, and `tmp`
    sub-directories.
    """
    return all(os.path.isdir(os.path.join(path, d)) for d in MAILDIR_SUBDIRS)


####################################################################
#
def find_maildirs(
    root: "StrPath", errors: Optional[List[OSError]] = None
) -> List[str]:
    """
    Return every maildir folder at or beneath `root`, sorted
    case-insensitively by path.

    Maildirs may be nested inside other maildirs. Any directory whose own
    name is `cur`, `new`, or `tmp` is never reported even if it looks like a
    maildir itself.

    Arguments:
    - `root`: the top of the mail store.
    - `errors`: if not None, every OSError encountered is appended here.
    """
    maildirs = []
    for dirpath, _, _ in _walk(str(root), errors):
        if os.path.basename(dirpath.rstrip(os.sep)) in MAILDIR_SUBDIRS:
            continue
        if is_maildir(dirpath):
            maildirs.append(dirpath)

    maildirs.sort(key=str.lower)
    logger.debug("Found %d maildirs beneath '%s'", len(maildirs), root)
    return maildirs


####################################################################
#
def find_messages(
    maildir: "StrPath", errors: Optional[List[OSError]] = None
) -> List[str]:
    """
    Return the paths of all the messages in the given maildir folder, oldest
    first by modification time. Messages with the same mtime stay in the
    order the walk found them in.

    Only regular files beneath `cur/` and `new/` are messages. `tmp/` is
    never looked at.

    Arguments:
    - `maildir`: the maildir folder.
    - `errors`: if not None, every OSError encountered is appended here.
    """
    found: List[Tuple[int, str]] = []
    for subdir in MESSAGE_SUBDIRS:
        top = os.path.join(str(maildir), subdir)
        for dirpath, _, filenames in _walk(top, errors):
            for fname in filenames:
                path = os.path.join(dirpath, fname)
                try:
                    st = os.lstat(path)
                except OSError as exc:
                    logger.debug("Skipping '%s': %s", path, exc)
                    if errors is not None:
                        errors.append(exc)
                    continue
                if stat.S_ISREG(st.st_mode):
                    found.append((st.st_mtime_ns, path))

    # sort() is stable so equal mtimes keep their discovery order.
    #
    found.sort(key=lambda x: x[0])
    return [path for _, path in found]
