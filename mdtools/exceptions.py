#!/usr/bin/env python
#
# File: $Id$
#
"""
Some exceptions need to be generally available to many modules so they are
kept in this module to avoid circular dependencies.
"""


#######################################################################
#
class MaildirToolsException(Exception):
    def __init__(self, value="maildir tools exception"):
        self.value = value

    def __str__(self):
        return self.value


##################################################################
##################################################################
#
class MaildirNotFound(MaildirToolsException):
    """
    Raised when we are asked to list the messages in a folder that does not
    exist, either as given or relative to the maildir prefix.
    """

    def __init__(self, value="maildir not found", path=None):
        self.value = value
        self.path = path

    def __str__(self):
        if self.path is None:
            return self.value
        return "%s: '%s'" % (self.value, self.path)


##################################################################
##################################################################
#
class MessageParseError(MaildirToolsException):
    """
    A single message could not be read or parsed. These are recorded on the
    rendered result for that message and never stop the other messages from
    being rendered.
    """

    def __init__(self, value="unable to parse message", path=None):
        self.value = value
        self.path = path

    def __str__(self):
        return "%s, message: '%s'" % (self.value, self.path)
