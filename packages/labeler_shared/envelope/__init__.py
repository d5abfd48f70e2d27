"""Public shared envelope API for labeler services."""

from .builders import failure, success
from .envelope import Envelope
from .meta import EnvelopeKind, EnvelopeMeta, child_meta, new_meta
from .validate import validate_meta

__all__ = [
    "Envelope",
    "EnvelopeKind",
    "EnvelopeMeta",
    "child_meta",
    "failure",
    "new_meta",
    "success",
    "validate_meta",
]
