#!/usr/bin/env python
#
# File: $Id$
#
"""
Various global constants.
"""
from enum import StrEnum

# A directory is a maildir folder only if it has all three of these as
# immediate sub-directories.
#
MAILDIR_SUBDIRS = ("cur", "new", "tmp")

# Messages are only ever listed from these. Anything in `tmp/` is still being
# delivered.
#
MESSAGE_SUBDIRS = ("cur", "new")

# Maildir info suffix marker. Everything after the last occurrence of this in
# a message's file name is its flag letters.
#
FLAG_MARKER = ":2,"

# A message whose path contains this is in a folder's `new/` directory.
#
NEW_DIR_MARKER = "/new/"

# Emitted for `unread_highlight` when something is unread.
#
DEFAULT_UNREAD_HIGHLIGHT = "*"

DEFAULT_MAILDIRS_FORMAT = "#{06unread}/#{06total} - #{name}"
DEFAULT_MESSAGES_FORMAT = "[#{index}/#{total} - #{flags}] #{subject}"
DEFAULT_MESSAGE_TEMPLATE = """To: #{to}
From: #{from}
Cc: #{cc}
Date: #{date}
Subject: #{subject}

#{body}"""

NO_BODY = "No body available."


########################################################################
########################################################################
#
class MaildirFlag(StrEnum):
    """
    The single letter flags that may appear after the `:2,` marker. `NEW`
    never appears in a file name. We add it when the message is in `new/`.
    """

    DRAFT = "D"
    FLAGGED = "F"
    NEW = "N"
    PASSED = "P"
    REPLIED = "R"
    SEEN = "S"
    TRASHED = "T"


########################################################################
########################################################################
#
class UnreadPolicy(StrEnum):
    """
    How we decide if a message is unread.

    LOCATION: the message is in `new/`. A message in `cur/` that lacks the
              `S` flag is NOT unread under this policy.
    SEEN_FLAG: the message is in `new/` or its flags lack `S`.
    """

    LOCATION = "location"
    SEEN_FLAG = "seen-flag"
