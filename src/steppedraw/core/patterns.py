"""
Centralized regex patterns for steppedraw.

This module contains the regex patterns used to tokenize raw file headers.
"""

import re
from typing import Pattern

# Header field: a name at the start of the text or of a line, then a colon.
# The value runs up to the next field start. The data marker is not a field
# start, so the last field keeps it in its value.
HEADER_FIELD_PATTERN: Pattern[str] = re.compile(
    r"(?:\A|(?<=\n))(?P<name>[A-Za-z .]*[A-Za-z]):(?P<value>.*?)"
    r"(?=\n(?!(?:Binary|Values):)[A-Za-z .]*[A-Za-z]:|\Z)",
    re.DOTALL,
)

# One declaration line of the Variables field: index, name, type tag
VARIABLE_LINE_PATTERN: Pattern[str] = re.compile(
    r"^[ \t]*(?P<index>\d+)[ \t]+(?P<name>\S+)[ \t]+(?P<type>\S+)", re.MULTILINE
)

# Variable names such as V(out), I(R1) or Ix(u1:a)
VARIABLE_NAME_PATTERN: Pattern[str] = re.compile(
    r"^(?P<cls>[A-Za-z]+)\((?P<node>.*)\)$"
)

# Unsigned integer fields (No. Points, No. Variables)
UNSIGNED_INT_PATTERN: Pattern[str] = re.compile(r"^\d+$")

WHITESPACE_PATTERN: Pattern[str] = re.compile(r"\s+")
