"""Transducer from API parse events to a result tree.

The EVE XML API speaks a small dialect on top of XML:

* ordinary elements nest -- ``<result><serverOpen>True</serverOpen></result>``
  becomes ``{"serverOpen": "True"}``;
* ``<rowset name="characters" key="characterID">`` holds ``<row>`` elements
  whose attributes are the columns; rows are keyed by the ``:``-joined
  values of the rowset's key columns;
* ``<key>`` attributes are flattened into the enclosing element;
* CDATA sections accumulate on a ``cdata`` property;
* ``<error code="...">`` replaces ``<result>`` when the call failed.

Each document looks like::

    <eveapi version="2">
      <currentTime>2011-11-10 20:08:53</currentTime>
      <result>...</result>
      <cachedUntil>2011-11-10 20:11:53</cachedUntil>
    </eveapi>

and decodes to the ``result`` mapping with ``currentTime`` and
``cachedUntil`` copied onto it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from eveonline.exceptions import ApiError, StructureError
from eveonline.parser.events import Event, EventKind, EventParser, XMLSource, iter_events

ROOT_TAG = "eveapi"
TIMESTAMP_FIELDS = ("currentTime", "cachedUntil")


@dataclass
class ParseFrame:
    """One currently-open tag.

    ``parent`` is the container this tag was inserted into and becomes the
    current container again when the tag closes.  ``keys`` is only set on
    ``rowset`` frames.
    """

    tag: str
    alias: str
    container: dict[str, Any]
    parent: dict[str, Any]
    keys: Optional[list[str]] = None


class Transducer:
    """Builds a result tree from :class:`~eveonline.parser.events.Event` objects.

    Call :meth:`feed` for every event; the ``END`` event returns the decoded
    result or raises.  Schema violations found along the way are held back
    and raised as :class:`~eveonline.exceptions.StructureError` at the end
    of the document.
    """

    def __init__(self) -> None:
        self.root: dict[str, Any] = {}
        self.stack: list[ParseFrame] = []
        self._current: dict[str, Any] = self.root
        self._violation: Optional[str] = None
        self._done = False

    @property
    def current(self) -> dict[str, Any]:
        """The container that new child elements are inserted into."""
        return self._current

    def feed(self, event: Event) -> Optional[dict[str, Any]]:
        """Apply *event*; returns the result when *event* is ``END``."""
        if self._done:
            raise StructureError("Event received after end of document")

        if event.kind is EventKind.OPEN:
            self.open(event.name or "", event.attributes)
        elif event.kind is EventKind.CLOSE:
            self.close(event.name or "")
        elif event.kind is EventKind.TEXT:
            self.text(event.data or "")
        elif event.kind is EventKind.CDATA:
            self.cdata(event.data or "")
        else:
            return self.finish()
        return None

    def open(self, tag: str, attributes: dict[str, str]) -> None:
        current = self.current

        if tag == "key":
            current.update(attributes)
            self.stack.append(ParseFrame(tag, tag, current, current))
            return

        alias = tag
        keys = None
        if tag == "row":
            alias = self._row_key(attributes)
        elif tag == "rowset":
            if "key" not in attributes:
                self._fail("rowset element without a 'key' attribute")
            keys = attributes.get("key", "").split(",")
            alias = attributes.get("name") or tag
        elif tag == "error":
            current["errorCode"] = attributes.get("code")

        container: dict[str, Any] = {}
        if tag == "row":
            container.update(attributes)
        current[alias] = container
        self.stack.append(ParseFrame(tag, alias, container, current, keys))
        self._current = container

    def close(self, tag: str) -> None:
        if not self.stack:
            self._fail(f"Unexpected closing tag </{tag}>")
            return
        frame = self.stack.pop()
        self._current = frame.parent

    def text(self, data: str) -> None:
        if not self.stack:
            return
        frame = self.stack[-1]
        frame.parent[frame.tag] = data

    def cdata(self, data: str) -> None:
        current = self.current
        current["cdata"] = current.get("cdata", "") + data

    def finish(self) -> dict[str, Any]:
        """Inspect the envelope and return the ``result`` mapping.

        Raises:
            ApiError: The envelope carries an ``<error>`` element.
            StructureError: The document is not a valid envelope.
        """
        self._done = True
        if self._violation is not None:
            raise StructureError(f"Invalid API response structure: {self._violation}")
        if self.stack:
            raise StructureError(f"Unclosed element <{self.stack[-1].tag}>")

        envelope = self.root.get(ROOT_TAG)
        if not isinstance(envelope, dict):
            raise StructureError("Invalid API response structure: missing <eveapi> root")

        if "error" in envelope:
            message = envelope["error"]
            raise ApiError(
                message if isinstance(message, str) else "",
                code=_to_int(envelope.get("errorCode")),
                current_time=envelope.get("currentTime"),
                cached_until=envelope.get("cachedUntil"),
            )

        result = envelope.get("result")
        if not isinstance(result, dict):
            raise StructureError("Invalid API response structure: missing <result>")

        for name in TIMESTAMP_FIELDS:
            if envelope.get(name):
                result[name] = envelope[name]
        return result

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _active_keys(self) -> Optional[list[str]]:
        for frame in reversed(self.stack):
            if frame.keys is not None:
                return frame.keys
        return None

    def _row_key(self, attributes: dict[str, str]) -> str:
        keys = self._active_keys()
        if keys is None:
            self._fail("row element outside of a rowset")
            keys = []
        return ":".join(attributes.get(k, "") for k in keys)

    def _fail(self, reason: str) -> None:
        if self._violation is None:
            self._violation = reason


def _to_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def decode(source: XMLSource) -> dict[str, Any]:
    """Decode an API response document into its result mapping.

    Args:
        source: XML as ``str``/``bytes``, a binary file object, or an
            iterable of byte chunks.

    Returns:
        The ``result`` mapping with ``currentTime`` and ``cachedUntil``.

    Raises:
        XMLParseError: The document is not well-formed XML.
        StructureError: The document is not a valid ``eveapi`` envelope.
        ApiError: The API reported an error.
    """
    transducer = Transducer()
    for event in iter_events(source):
        result = transducer.feed(event)
        if result is not None:
            return result
    raise StructureError("Event stream ended without an end-of-document event")


class StreamDecoder:
    """Push-style :func:`decode` for responses that arrive in chunks.

    Example::

        decoder = StreamDecoder()
        async for chunk in response.aiter_bytes():
            decoder.feed(chunk)
        result = decoder.close()
    """

    def __init__(self) -> None:
        self._parser = EventParser()
        self._transducer = Transducer()

    def feed(self, chunk: Union[str, bytes]) -> None:
        for event in self._parser.feed(chunk):
            self._transducer.feed(event)

    def close(self) -> dict[str, Any]:
        """Finish the document and return the result (same errors as :func:`decode`)."""
        for event in self._parser.close():
            result = self._transducer.feed(event)
            if result is not None:
                return result
        raise StructureError("Event stream ended without an end-of-document event")
