"""Utility modules for steppedraw."""

from .detect_encoding import code_unit_width, detect_encoding, split_header_payload

__all__ = ["code_unit_width", "detect_encoding", "split_header_payload"]
