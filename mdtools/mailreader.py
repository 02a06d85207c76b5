#!/usr/bin/env python
#
# File: $Id$
#
"""
Read a single message from disk and return header values and its body.

Header values are returned as they appear in the message, unfolded, with any
RFC2047 encoded words decoded. We do not let the email policy normalize
addresses because `"Display Name" <addr>` is what the `.name` template
filter looks for.

Parsing only the headers is much faster than parsing the whole message, and
a message listing typically only needs a few header values. So a reader is
either header-only or full. Asking a header-only reader for its body gets
you `NO_BODY`.
"""

# system imports
#
import email.policy
import logging
import re
from email import message_from_binary_file, message_from_bytes
from email.errors import HeaderParseError, MessageError
from email.header import decode_header, make_header
from email.message import EmailMessage
from email.parser import BytesHeaderParser
from typing import TYPE_CHECKING

# 3rd party imports
#
import aiofiles

# Project imports
#
from .constants import NO_BODY
from .exceptions import MessageParseError

if TYPE_CHECKING:
    from _typeshed import StrPath

logger = logging.getLogger("mdtools.mailreader")

# A line break followed by white space inside a header value.
#
FOLD_RE = re.compile(r"\r?\n(?=[ \t])")


####################################################################
#
def decode_header_value(value: str) -> str:
    """
    Unfold a raw header value and decode any RFC2047 encoded words in
    it. If it can not be decoded the unfolded value is returned.
    """
    value = FOLD_RE.sub("", value)

    # Raw 8-bit header bytes come to us as surrogate escapes. Assume they
    # are utf-8.
    #
    value = value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
    try:
        decoded = str(make_header(decode_header(value)))
    except (HeaderParseError, LookupError, UnicodeError):
        return value
    return decoded if decoded else value


########################################################################
########################################################################
#
class MailReader:
    """
    A parsed message. Use `MailReader.load()` or `await MailReader.aload()`
    to make one.
    """

    ####################################################################
    #
    def __init__(self, path: "StrPath", msg: EmailMessage, headers_only: bool):
        self.path = str(path)
        self.msg = msg
        self.headers_only = headers_only

    ####################################################################
    #
    @classmethod
    def load(cls, path: "StrPath", headers_only: bool = False) -> "MailReader":
        """
        Read and parse the message at `path`.

        Raises MessageParseError if the file can not be read or parsed.
        """
        try:
            with open(path, "rb") as f:
                if headers_only:
                    msg = BytesHeaderParser(policy=email.policy.default).parse(
                        f
                    )
                else:
                    msg = message_from_binary_file(
                        f, policy=email.policy.default
                    )
        except (OSError, MessageError) as exc:
            raise MessageParseError(str(exc), path) from exc
        return cls(path, msg, headers_only)

    ####################################################################
    #
    @classmethod
    async def aload(
        cls, path: "StrPath", headers_only: bool = False
    ) -> "MailReader":
        """
        Same as `load()` but the file is read without blocking the event
        loop.
        """
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
            if headers_only:
                msg = BytesHeaderParser(policy=email.policy.default).parsebytes(
                    data
                )
            else:
                msg = message_from_bytes(data, policy=email.policy.default)
        except (OSError, MessageError) as exc:
            raise MessageParseError(str(exc), path) from exc
        return cls(path, msg, headers_only)

    ####################################################################
    #
    def header(self, name: str) -> str:
        """
        The decoded value of the first header with this name, or an empty
        string if the message does not have it. Header names are case
        insensitive.
        """
        name = name.lower()
        for key, value in self.msg.raw_items():
            if key.lower() == name:
                return decode_header_value(value)
        return ""

    ####################################################################
    #
    def body(self) -> str:
        """
        The body of the message. The text/plain part if there is one,
        otherwise the text/html part. If neither, `NO_BODY`.
        """
        if self.headers_only:
            return NO_BODY

        part = self.msg.get_body(preferencelist=("plain", "html"))
        if part is None:
            return NO_BODY
        try:
            return part.get_content()
        except (LookupError, ValueError) as exc:
            # An unknown charset, or a payload we can not decode.
            #
            logger.warning("Unable to decode body of '%s': %s", self.path, exc)
            return NO_BODY
