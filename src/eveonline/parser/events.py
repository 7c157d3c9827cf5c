"""Incremental XML event source built on :mod:`xml.parsers.expat`.

:class:`EventParser` turns byte chunks into a flat sequence of
:class:`Event` objects -- ``OPEN``, ``CLOSE``, ``TEXT``, ``CDATA`` and a
final ``END`` -- that :class:`~eveonline.parser.transducer.Transducer`
consumes.  Chunks can be fed as they arrive from the network, so a
response never has to be held in memory as a whole before decoding starts.

Text handling follows the API's conventions rather than general XML
fidelity: character data is buffered until the next tag boundary, trimmed,
and dropped when only whitespace remains.  CDATA sections are reported
separately and untrimmed, one event per section.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import IO, Any, Iterable, Iterator, Optional, Union
from xml.parsers import expat

from eveonline.exceptions import XMLParseError

XMLSource = Union[str, bytes, IO[bytes], Iterable[bytes]]


class EventKind(str, enum.Enum):
    OPEN = "open"
    CLOSE = "close"
    TEXT = "text"
    CDATA = "cdata"
    END = "end"


@dataclass(frozen=True)
class Event:
    """A single parse event.

    ``name`` and ``attributes`` are set for ``OPEN``; ``name`` for
    ``CLOSE``; ``data`` for ``TEXT`` and ``CDATA``.
    """

    kind: EventKind
    name: Optional[str] = None
    attributes: dict[str, str] = field(default_factory=dict)
    data: Optional[str] = None


class EventParser:
    """Push parser producing :class:`Event` lists from XML chunks.

    Example::

        parser = EventParser()
        for chunk in response.iter_bytes():
            for event in parser.feed(chunk):
                ...
        for event in parser.close():
            ...
    """

    def __init__(self) -> None:
        self._pending: list[Event] = []
        self._text: list[str] = []
        self._cdata: list[str] = []
        self._in_cdata = False
        self._closed = False

        p = expat.ParserCreate()
        p.StartElementHandler = self._start
        p.EndElementHandler = self._end
        p.CharacterDataHandler = self._chars
        p.StartCdataSectionHandler = self._cdata_enter
        p.EndCdataSectionHandler = self._cdata_exit
        p.buffer_text = True
        self._parser = p

    def feed(self, chunk: Union[str, bytes]) -> list[Event]:
        """Parse *chunk* and return the events it completed."""
        if self._closed:
            raise XMLParseError("Parser already closed")
        self._parse(chunk, False)
        return self._drain()

    def close(self) -> list[Event]:
        """Signal end of input; returns the remaining events ending with ``END``."""
        if self._closed:
            return []
        self._parse(b"", True)
        self._closed = True
        self._flush_text()
        self._pending.append(Event(EventKind.END))
        return self._drain()

    # ------------------------------------------------------------------ #
    # expat callbacks
    # ------------------------------------------------------------------ #

    def _start(self, name: str, attributes: dict[str, str]) -> None:
        self._flush_text()
        self._pending.append(Event(EventKind.OPEN, name=name, attributes=dict(attributes)))

    def _end(self, name: str) -> None:
        self._flush_text()
        self._pending.append(Event(EventKind.CLOSE, name=name))

    def _chars(self, data: str) -> None:
        if self._in_cdata:
            self._cdata.append(data)
        else:
            self._text.append(data)

    def _cdata_enter(self) -> None:
        self._flush_text()
        self._in_cdata = True

    def _cdata_exit(self) -> None:
        self._in_cdata = False
        self._pending.append(Event(EventKind.CDATA, data="".join(self._cdata)))
        self._cdata.clear()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _parse(self, chunk: Union[str, bytes], final: bool) -> None:
        try:
            self._parser.Parse(chunk, final)
        except expat.ExpatError as exc:
            self._closed = True
            raise XMLParseError(f"Malformed XML response: {exc}") from exc

    def _flush_text(self) -> None:
        text = "".join(self._text).strip()
        self._text.clear()
        if text:
            self._pending.append(Event(EventKind.TEXT, data=text))

    def _drain(self) -> list[Event]:
        events, self._pending = self._pending, []
        return events


def _chunks(source: Any, chunk_size: int) -> Iterator[Union[str, bytes]]:
    if isinstance(source, (str, bytes, bytearray)):
        yield source
    elif hasattr(source, "read"):
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            yield chunk
    else:
        yield from source


def iter_events(source: XMLSource, chunk_size: int = 16384) -> Iterator[Event]:
    """Yield the parse events of *source*.

    Args:
        source: XML as ``str`` or ``bytes``, a binary file object, or an
            iterable of byte chunks (e.g. ``httpx.Response.iter_bytes()``).
        chunk_size: Read size used for file objects.

    Raises:
        XMLParseError: If the document is not well-formed.  Events that
            preceded the error have already been yielded.
    """
    parser = EventParser()
    for chunk in _chunks(source, chunk_size):
        yield from parser.feed(chunk)
    yield from parser.close()
