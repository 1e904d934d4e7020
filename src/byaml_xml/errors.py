"""Exception hierarchy for BYAML decoding and XML reification.

Both error kinds are fatal for the call that raised them: a decode or reify
either returns a complete tree or propagates the error, never a partial result.
"""

from __future__ import annotations

__all__ = ["ByamlError", "MalformedInputError", "OutOfRangeReferenceError"]


class ByamlError(Exception):
    """Base class for every error raised by byaml_xml."""


class MalformedInputError(ByamlError, ValueError):
    """Input does not follow the BYAML binary layout or the XML conventions.

    Raised for unknown type tags, reference cycles, bad magic bytes and
    un-typed XML leaves that are neither numeric nor boolean.
    """


class OutOfRangeReferenceError(ByamlError, IndexError):
    """A pool index or byte offset points outside its table or buffer."""
