#!/usr/bin/env python
#
# File: $Id$
#
"""
Render folder listings and message listings with a template.

Folder listings are done in one pass, synchronously. Message listings have
to open and parse every message in the folder so they are done by a pool of
asyncio workers. See `ConcurrentRenderer`.
"""

# system imports
#
import asyncio
import logging
import os
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Sequence

# Project imports
#
from .constants import (
    DEFAULT_MAILDIRS_FORMAT,
    DEFAULT_MESSAGE_TEMPLATE,
    DEFAULT_MESSAGES_FORMAT,
    DEFAULT_UNREAD_HIGHLIGHT,
    UnreadPolicy,
)
from .exceptions import MaildirNotFound, MessageParseError
from .finder import find_maildirs, find_messages
from .formatter import expand, references
from .mailreader import MailReader
from .resolver import COUNT_FIELDS, FolderResolver, MessageField, MessageResolver

logger = logging.getLogger("mdtools.render")


########################################################################
########################################################################
#
@dataclass
class Maildir:
    path: str
    rendered: str


########################################################################
########################################################################
#
@dataclass
class SingleMessage:
    """
    The result of rendering one message. If the message could not be read
    `rendered` is None and `error` says why.

    `index` is the 1-based position of the message in the folder listing.
    """

    path: str
    index: int
    rendered: Optional[str] = None
    error: Optional[MessageParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


########################################################################
########################################################################
#
@dataclass
class Job:
    index: int
    total: int
    path: str


####################################################################
#
def default_workers() -> int:
    """
    Two workers per cpu.
    """
    return 2 * (os.cpu_count() or 1)


####################################################################
#
def get_maildirs(
    prefix: str,
    template: str = DEFAULT_MAILDIRS_FORMAT,
    short: bool = False,
    unread_only: bool = False,
    unread_policy: UnreadPolicy = UnreadPolicy.LOCATION,
    highlight: str = DEFAULT_UNREAD_HIGHLIGHT,
) -> List[Maildir]:
    """
    Render every maildir folder beneath `prefix` with `template`.

    Counting the messages in a folder means walking the whole folder so we
    decide once, up front, if this listing needs counts at all. If it does
    not no folder is ever enumerated.

    Arguments:
    - `prefix`: the root of the mail store.
    - `template`: rendered once per folder.
    - `short`: render `name` as the folder path relative to `prefix`.
    - `unread_only`: only include folders with unread messages.
    - `unread_policy`: how we decide a message is unread.
    - `highlight`: what `unread_highlight` renders as.
    """
    counting = unread_only or references(template, COUNT_FIELDS)
    logger.debug(
        "Listing maildirs in '%s', counting messages: %s", prefix, counting
    )

    results = []
    for path in find_maildirs(prefix):
        resolver = FolderResolver(
            path,
            prefix=prefix,
            short=short,
            unread_policy=unread_policy,
            highlight=highlight,
            finder=find_messages if counting else None,
        )
        if unread_only and resolver.unread < 1:
            continue
        results.append(Maildir(path=path, rendered=expand(template, resolver)))
    return results


########################################################################
########################################################################
#
class ConcurrentRenderer:
    """
    Render a list of message files with a pool of asyncio workers.

    A producer puts one `Job` per message on a bounded queue. Each worker
    takes jobs off that queue, reads and parses the message, renders the
    template, and puts the resulting `SingleMessage` on the results queue.
    When all the workers have exited a coordinator closes the results queue.

    Results come back in the order they complete, NOT the order they were
    submitted. Each result carries the index it was submitted with. A
    message that can not be parsed comes back with an error, it does not stop
    any of the other messages from being rendered.
    """

    ####################################################################
    #
    def __init__(
        self,
        template: str = DEFAULT_MESSAGES_FORMAT,
        num_workers: Optional[int] = None,
        unread_policy: UnreadPolicy = UnreadPolicy.LOCATION,
        highlight: str = DEFAULT_UNREAD_HIGHLIGHT,
    ):
        self.template = template
        self.num_workers = (
            num_workers if num_workers is not None else default_workers()
        )
        if self.num_workers < 1:
            raise ValueError(
                f"Must have at least one worker, not {self.num_workers}"
            )
        self.unread_policy = unread_policy
        self.highlight = highlight

        # Only parse the whole message if the body is actually wanted.
        #
        self.headers_only = not references(template, [MessageField.BODY])

    ####################################################################
    #
    async def render_one(self, job: Job) -> SingleMessage:
        """
        Read, parse, and render a single message.
        """
        result = SingleMessage(path=job.path, index=job.index + 1)
        try:
            reader = await MailReader.aload(
                job.path, headers_only=self.headers_only
            )
        except MessageParseError as exc:
            logger.warning("Unable to parse '%s': %s", job.path, exc)
            result.error = exc
            return result

        resolver = MessageResolver(
            job.path,
            reader,
            index=job.index + 1,
            total=job.total,
            unread_policy=self.unread_policy,
            highlight=self.highlight,
        )
        # A broken header can blow up when it is decoded. That is this
        # message's problem, not the pool's.
        #
        try:
            result.rendered = expand(self.template, resolver)
        except Exception as exc:
            logger.warning("Unable to render '%s': %s", job.path, exc)
            result.error = MessageParseError(str(exc), job.path)
        return result

    ####################################################################
    #
    async def _worker(self, jobs: asyncio.Queue, results: asyncio.Queue):
        while True:
            job = await jobs.get()
            try:
                if job is None:
                    return
                await results.put(await self.render_one(job))
            finally:
                jobs.task_done()

    ####################################################################
    #
    async def render(self, paths: Sequence[str]) -> AsyncIterator[SingleMessage]:
        """
        Render every message in `paths`, yielding results as they complete.
        """
        total = len(paths)
        jobs: asyncio.Queue = asyncio.Queue(maxsize=self.num_workers * 2)
        results: asyncio.Queue = asyncio.Queue()

        async def produce():
            for index, path in enumerate(paths):
                await jobs.put(Job(index=index, total=total, path=path))
            # One stop marker per worker closes the job queue.
            #
            for _ in range(self.num_workers):
                await jobs.put(None)

        workers = [
            asyncio.create_task(self._worker(jobs, results))
            for _ in range(self.num_workers)
        ]

        async def coordinate():
            await asyncio.gather(*workers, return_exceptions=True)
            await results.put(None)

        producer = asyncio.create_task(produce())
        coordinator = asyncio.create_task(coordinate())
        try:
            while True:
                result = await results.get()
                if result is None:
                    break
                yield result
        finally:
            for task in (producer, coordinator, *workers):
                task.cancel()
            await asyncio.gather(
                producer, coordinator, *workers, return_exceptions=True
            )


####################################################################
#
def resolve_maildir(prefix: str, path: str) -> str:
    """
    A folder may be given as a path, or as a path relative to the
    prefix. If both exist the one relative to the prefix wins.

    Raises MaildirNotFound if neither exists.
    """
    found = None
    for possible in (path, os.path.join(prefix, path)):
        if os.path.exists(possible):
            found = possible
    if found is None:
        raise MaildirNotFound("maildir wasn't found", path)
    return found


####################################################################
#
async def get_messages(
    prefix: str,
    path: str,
    template: str = DEFAULT_MESSAGES_FORMAT,
    num_workers: Optional[int] = None,
    unread_policy: UnreadPolicy = UnreadPolicy.LOCATION,
    highlight: str = DEFAULT_UNREAD_HIGHLIGHT,
) -> List[SingleMessage]:
    """
    Render every message in a maildir folder.

    Unlike `ConcurrentRenderer.render()` the results are returned sorted by
    their index in the folder. Messages that could not be parsed are
    included with their `error` set.

    Raises MaildirNotFound if the folder does not exist.
    """
    maildir = resolve_maildir(prefix, path)
    files = find_messages(maildir)
    logger.debug("Rendering %d messages in '%s'", len(files), maildir)

    renderer = ConcurrentRenderer(
        template,
        num_workers=num_workers,
        unread_policy=unread_policy,
        highlight=highlight,
    )
    messages = [msg async for msg in renderer.render(files)]
    messages.sort(key=lambda m: m.index)

    failed = sum(1 for m in messages if not m.ok)
    if failed:
        logger.warning(
            "%d of %d messages in '%s' could not be rendered",
            failed,
            len(messages),
            maildir,
        )
    return messages


####################################################################
#
def get_message(
    path: str,
    template: str = DEFAULT_MESSAGE_TEMPLATE,
    unread_policy: UnreadPolicy = UnreadPolicy.LOCATION,
    highlight: str = DEFAULT_UNREAD_HIGHLIGHT,
) -> str:
    """
    Render a single message file, body and all.

    Raises MessageParseError if the message can not be read.
    """
    reader = MailReader.load(path)
    resolver = MessageResolver(
        path, reader, unread_policy=unread_policy, highlight=highlight
    )
    return expand(template, resolver)
