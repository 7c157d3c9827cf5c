"""EVE XML API response decoding.

:func:`decode` turns a response document into a plain ``dict`` result
tree.  The work is split in two layers:

* :mod:`eveonline.parser.events` -- incremental expat-based parser emitting
  open/close/text/cdata/end events from byte chunks;
* :mod:`eveonline.parser.transducer` -- :class:`Transducer`, which builds
  the result tree from those events and validates the envelope.

Example::

    from eveonline.parser import decode

    result = decode(xml_bytes)
    result["serverOpen"]   # 'True'
"""

from eveonline.parser.events import Event, EventKind, EventParser, iter_events
from eveonline.parser.transducer import ParseFrame, StreamDecoder, Transducer, decode

__all__ = [
    "Event",
    "EventKind",
    "EventParser",
    "ParseFrame",
    "StreamDecoder",
    "Transducer",
    "decode",
    "iter_events",
]
