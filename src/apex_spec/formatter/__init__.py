"""APEX Formatter module.

Exports the ``DocumentFormatter`` class and the ``format_document``
convenience function.
"""
from __future__ import annotations

from apex_spec.formatter.formatter import DocumentFormatter, format_document

__all__ = ["DocumentFormatter", "format_document"]
