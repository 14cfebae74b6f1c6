#!/usr/bin/env python
# coding=utf-8
"""Pragmatic header encoding detection for raw files.

Not using a general purpose unicode detection library because simulators only
write a reduced set of encodings, and the header always carries a known
marker that tells whether a candidate decoding is right.
"""

import codecs
import logging
from typing import Iterable, Sequence, Tuple

from ..core.constants import Encodings, RawFileConstants
from ..exceptions import MissingBoundaryMarkerError, UndecodableHeaderError

_logger = logging.getLogger("steppedraw.DetectEncoding")


def detect_encoding(
    data: bytes,
    markers: Sequence[str] = tuple(RawFileConstants.DATA_MARKERS),
    candidates: Iterable[str] = tuple(Encodings.DETECTION_ORDER),
) -> Tuple[str, str]:
    """Find the encoding of a raw file from its full contents.

    Each candidate decodes the bytes lossily; invalid sequences are replaced
    rather than rejected. The first candidate whose text contains any of the
    markers wins and no other candidate is tried.

    :param data: full file contents
    :param markers: substrings that prove a decoding is right
    :param candidates: codec names to try, UTF-8 then UTF-16 LE by default
    :return: the detected codec name and the decoded text
    :raises UndecodableHeaderError: when no candidate exposes a marker
    """
    tried = []
    for encoding in candidates:
        tried.append(encoding)
        text = data.decode(encoding, errors=Encodings.ERRORS)
        if any(marker in text for marker in markers):
            _logger.debug("Header decoded as %s", encoding)
            return encoding, text
    _logger.error("Could not decode raw header with %s", ", ".join(tried))
    raise UndecodableHeaderError(tried, list(markers))


def split_header_payload(
    data: bytes,
    text: str,
    encoding: str,
    marker: str = RawFileConstants.BINARY_MARKER,
) -> Tuple[str, bytes]:
    """Split a raw file into its header text and binary payload.

    The payload starts right after the first occurrence of the marker. The
    byte offset is the marker's position in the raw bytes, aligned to the
    encoding's code unit, plus the encoded marker length. For headers made of
    single code unit characters this equals the character offset scaled by
    the code unit width.

    :param data: full file contents
    :param text: the contents decoded with ``encoding``
    :param encoding: codec name returned by :func:`detect_encoding`
    :param marker: header/payload separator
    :return: header text (marker included) and payload bytes
    :raises MissingBoundaryMarkerError: when the marker is absent
    """
    index = text.find(marker)
    if index < 0:
        _logger.error("Separator %r not found in the raw header", marker)
        raise MissingBoundaryMarkerError(marker, encoding)

    encoded_marker = marker.encode(encoding)
    width = code_unit_width(encoding)
    position = data.find(encoded_marker)
    while position > 0 and position % width:
        position = data.find(encoded_marker, position + 1)
    if position < 0:
        _logger.error("Separator %r not aligned in the %s payload", marker, encoding)
        raise MissingBoundaryMarkerError(marker, encoding)

    header = text[: index + len(marker)]
    payload = data[position + len(encoded_marker) :]
    return header, payload


def code_unit_width(encoding: str) -> int:
    """Bytes per code unit of a codec: 4 for UTF-32, 2 for UTF-16, else 1."""
    name = codecs.lookup(encoding).name
    if name.startswith("utf-32"):
        return 4
    if name.startswith("utf-16"):
        return 2
    return 1
