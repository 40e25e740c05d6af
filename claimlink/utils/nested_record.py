"""
Nested Record Parser.

Some identity providers flatten structured claims (notably ``address``)
into a single string that looks like a serialized map, e.g.::

    {country=US, street_address=1 Main St, locality=Springfield}

The format is not JSON and has no escaping.  The parser below reads it
the way it is actually emitted:

- the body is the text between the first ``{`` and the last ``}``;
  anything after the closing brace is ignored;
- entries are separated by ``,``;
- the key is the text before the *first* ``=`` and the value the text
  after the *last* ``=``, both trimmed;
- a repeated key keeps its last value.

Known limitation
~~~~~~~~~~~~~~~~
A value that itself contains ``,`` is split into two entries, and the
fragment without ``=`` is dropped.  There is no way to recover the
original value from this encoding; providers that need such values must
send a structured claim instead.
"""

from __future__ import annotations

from typing import Optional

__all__ = ["parse_nested_record"]


def parse_nested_record(raw: Optional[str]) -> dict[str, str]:
    """Parse a ``{k1=v1, k2=v2}`` string into a dict.

    Returns an empty dict when *raw* is empty or lacks either brace.
    """
    if not raw:
        return {}

    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end <= start:
        return {}

    record: dict[str, str] = {}
    for segment in raw[start + 1:end].split(","):
        first = segment.find("=")
        if first == -1:
            continue
        last = segment.rfind("=")
        key = segment[:first].strip()
        if key:
            record[key] = segment[last + 1:].strip()
    return record
