#!/usr/bin/env python
#
# File: $Id$
#
"""
Field resolvers: what a `#{field}` in a template means when we are listing
folders, and when we are listing messages.

A resolver is any callable that takes a field name and returns a string.
`formatter.expand()` does not care what is behind it. The classes here are
the two we use: one per folder and one per message.
"""

# system imports
#
from enum import StrEnum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

# Project imports
#
from . import flags as flagdecoder
from .constants import DEFAULT_UNREAD_HIGHLIGHT, UnreadPolicy
from .finder import find_messages

if TYPE_CHECKING:
    from .mailreader import MailReader


########################################################################
########################################################################
#
class FolderField(StrEnum):
    NAME = "name"
    SHORTNAME = "shortname"
    TOTAL = "total"
    UNREAD = "unread"
    UNREAD_HIGHLIGHT = "unread_highlight"


# These require us to enumerate all the messages in the folder.
#
COUNT_FIELDS = frozenset(
    (FolderField.TOTAL, FolderField.UNREAD, FolderField.UNREAD_HIGHLIGHT)
)


########################################################################
########################################################################
#
class MessageField(StrEnum):
    BODY = "body"
    FILE = "file"
    FLAGS = "flags"
    INDEX = "index"
    TOTAL = "total"
    UNREAD_HIGHLIGHT = "unread_highlight"


########################################################################
########################################################################
#
class FieldResolver:
    """
    Base class for resolvers. Sub-classes provide `resolve()`.
    """

    ####################################################################
    #
    def __call__(self, field: str) -> str:
        return self.resolve(field)

    ####################################################################
    #
    def resolve(self, field: str) -> str:
        raise NotImplementedError

    ####################################################################
    #
    @staticmethod
    def unknown(field: str) -> str:
        return f"Unknown variable {field}"


########################################################################
########################################################################
#
class FolderResolver(FieldResolver):
    """
    Resolves fields for one maildir folder.

    The folder's messages are only enumerated the first time one of the
    COUNT_FIELDS is asked for, and then only once for this folder.
    """

    ####################################################################
    #
    def __init__(
        self,
        path: str,
        prefix: str = "",
        short: bool = False,
        unread_policy: UnreadPolicy = UnreadPolicy.LOCATION,
        highlight: str = DEFAULT_UNREAD_HIGHLIGHT,
        finder: Optional[Callable[[str], List[str]]] = find_messages,
    ):
        """
        Arguments:
        - `path`: the maildir folder.
        - `prefix`: the root of the scan, stripped off for `shortname`.
        - `short`: if True `name` is the same as `shortname`.
        - `unread_policy`: how we decide a message is unread.
        - `highlight`: what `unread_highlight` renders as when there is
                       unread mail.
        - `finder`: how we enumerate the folder's messages. If None this
                    folder is never enumerated and counts as empty.
        """
        self.path = path
        self.prefix = prefix
        self.short = short
        self.unread_policy = unread_policy
        self.highlight = highlight
        self.finder = finder
        self._messages: Optional[List[str]] = None
        self._handlers: Dict[FolderField, Callable[[], str]] = {
            FolderField.NAME: self._name,
            FolderField.SHORTNAME: self._shortname,
            FolderField.TOTAL: lambda: str(self.total),
            FolderField.UNREAD: lambda: str(self.unread),
            FolderField.UNREAD_HIGHLIGHT: self._unread_highlight,
        }

    ####################################################################
    #
    def resolve(self, field: str) -> str:
        try:
            tag = FolderField(field)
        except ValueError:
            return self.unknown(field)
        return self._handlers[tag]()

    ####################################################################
    #
    @property
    def messages(self) -> List[str]:
        if self._messages is None:
            self._messages = [] if self.finder is None else self.finder(self.path)
        return self._messages

    ####################################################################
    #
    @property
    def total(self) -> int:
        return len(self.messages)

    ####################################################################
    #
    @property
    def unread(self) -> int:
        return sum(
            1
            for msg in self.messages
            if flagdecoder.is_unread(
                msg, self.unread_policy, maildir=self.path
            )
        )

    ####################################################################
    #
    @property
    def shortname(self) -> str:
        """
        The folder path relative to the prefix.
        """
        if self.prefix and self.path.startswith(self.prefix):
            return self.path[len(self.prefix) :].lstrip("/")
        return self.path

    ####################################################################
    #
    def _name(self) -> str:
        return self.shortname if self.short else self.path

    ####################################################################
    #
    def _shortname(self) -> str:
        return self.shortname

    ####################################################################
    #
    def _unread_highlight(self) -> str:
        return self.highlight if self.unread > 0 else ""


########################################################################
########################################################################
#
class MessageResolver(FieldResolver):
    """
    Resolves fields for one message in a listing. Any field that is not one
    of ours is looked up as a header of the message.
    """

    ####################################################################
    #
    def __init__(
        self,
        path: str,
        reader: "MailReader",
        index: int = 1,
        total: int = 1,
        unread_policy: UnreadPolicy = UnreadPolicy.LOCATION,
        highlight: str = DEFAULT_UNREAD_HIGHLIGHT,
    ):
        """
        Arguments:
        - `path`: the message file.
        - `reader`: the parsed message.
        - `index`: 1-based position of this message in the listing.
        - `total`: the number of messages in the listing.
        - `unread_policy`: how we decide a message is unread.
        - `highlight`: what `unread_highlight` renders as for an unread
                       message.
        """
        self.path = path
        self.reader = reader
        self.index = index
        self.total = total
        self.unread_policy = unread_policy
        self.highlight = highlight
        self._handlers: Dict[MessageField, Callable[[], str]] = {
            MessageField.BODY: reader.body,
            MessageField.FILE: lambda: self.path,
            MessageField.FLAGS: lambda: flagdecoder.flags(self.path),
            MessageField.INDEX: lambda: str(self.index),
            MessageField.TOTAL: lambda: str(self.total),
            MessageField.UNREAD_HIGHLIGHT: self._unread_highlight,
        }

    ####################################################################
    #
    def resolve(self, field: str) -> str:
        try:
            tag = MessageField(field)
        except ValueError:
            return self.reader.header(field)
        return self._handlers[tag]()

    ####################################################################
    #
    def _unread_highlight(self) -> str:
        if flagdecoder.is_unread(self.path, self.unread_policy):
            return self.highlight
        return ""
