#!/usr/bin/env python
#
# File: $Id$
#
"""
Expand `#{...}` placeholders in a template string.

A placeholder looks like:

    #{[<width>]<field>[.name|.email]}

- `<field>` is passed to a resolver which returns its value as a string.
- `<width>` is a run of digits. The value is left padded to that width, with
  `0` if the width starts with a `0` otherwise with spaces, and truncated to
  that width if it is longer. `#{0field}` therefore always renders as an
  empty string.
- `.name` turns `"Display Name" <addr>` in to `Display Name`.
- `.email` turns `anything <addr>` in to `<addr>`.

If a filter's pattern does not match the value is left alone. Everything
outside of a placeholder is copied literally, including a `#{` that is never
closed.

eg:
    >>> expand("#{06unread}/#{06total}", {"unread": "3", "total": "42"}.get)
    '000003/000042'
"""

# system imports
#
import re
from typing import Callable, Iterable, List, NamedTuple, Optional

# The first placeholder in a string: the literal text before it, what is
# between the braces, and everything after it.
#
PLACEHOLDER_RE = re.compile(r"(.*?)#\{([^}]+)\}(.*)", re.DOTALL)

# Leading width digits of a placeholder.
#
WIDTH_RE = re.compile(r"([0-9]+)(.*)", re.DOTALL)

# `.email` and `.name` filters.
#
EMAIL_RE = re.compile(r".*?(<.*>)", re.DOTALL)
NAME_RE = re.compile(r'"(.*)".*<.*>', re.DOTALL)

NAME_SUFFIX = ".name"
EMAIL_SUFFIX = ".email"


########################################################################
########################################################################
#
class Placeholder(NamedTuple):
    """
    One parsed `#{...}`.
    """

    field: str
    width: Optional[str] = None
    name_filter: bool = False
    email_filter: bool = False


####################################################################
#
def parse_placeholder(text: str) -> Placeholder:
    """
    Parse what is between the braces of a placeholder.

    NOTE: `width` is kept as the digit string so we can tell `06` from `6`.
    """
    width = None
    m = WIDTH_RE.fullmatch(text)
    if m:
        width, text = m.groups()

    name_filter = email_filter = False
    if text.endswith(NAME_SUFFIX):
        name_filter = True
        text = text[: -len(NAME_SUFFIX)]
    elif text.endswith(EMAIL_SUFFIX):
        email_filter = True
        text = text[: -len(EMAIL_SUFFIX)]

    return Placeholder(text, width, name_filter, email_filter)


####################################################################
#
def pad_or_truncate(value: str, width: str) -> str:
    """
    Left pad `value` out to `width` characters, then cut it down to `width`
    characters.
    """
    size = int(width)
    pad_char = "0" if width[0] == "0" else " "
    return value.rjust(size, pad_char)[:size]


####################################################################
#
def render_placeholder(
    placeholder: Placeholder, resolver: Callable[[str], str]
) -> str:
    """
    Get the value of one placeholder from the resolver and apply its filter
    and width.
    """
    value = resolver(placeholder.field)

    if placeholder.name_filter:
        m = NAME_RE.fullmatch(value)
        if m:
            value = m.group(1)
    elif placeholder.email_filter:
        m = EMAIL_RE.fullmatch(value)
        if m:
            value = m.group(1)

    if placeholder.width is not None:
        value = pad_or_truncate(value, placeholder.width)
    return value


####################################################################
#
def expand(template: str, resolver: Callable[[str], str]) -> str:
    """
    Expand every placeholder in `template` using `resolver` to look up field
    values. The resolver is called once per placeholder, left to right.

    Arguments:
    - `template`: the template string.
    - `resolver`: called with a field name, returns its value. Unknown fields
                  are the resolver's problem. We render whatever it returns.
    """
    out = []
    m = PLACEHOLDER_RE.fullmatch(template)
    while m:
        prefix, text, template = m.groups()
        out.append(prefix)
        out.append(render_placeholder(parse_placeholder(text), resolver))
        m = PLACEHOLDER_RE.fullmatch(template)

    # Whatever is left did not have a placeholder in it.
    #
    out.append(template)
    return "".join(out)


####################################################################
#
def template_fields(template: str) -> List[str]:
    """
    The field names referenced by `template`, in order, with any width and
    filter removed. A field appears once for each time it is referenced.
    """
    fields = []
    m = PLACEHOLDER_RE.fullmatch(template)
    while m:
        _, text, template = m.groups()
        fields.append(parse_placeholder(text).field)
        m = PLACEHOLDER_RE.fullmatch(template)
    return fields


####################################################################
#
def references(template: str, fields: Iterable[str]) -> bool:
    """
    True if `template` references any of `fields`.
    """
    return not set(fields).isdisjoint(template_fields(template))
