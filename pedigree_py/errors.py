"""Error types raised by the pedigree analysis engine.

- InvalidArgument: caller error (self-pairing, generation bound out of
  range, unknown sire/dam id). Rendered as a field-level validation message.
- ComputationError: an internal invariant broke (coefficient outside
  [0, 1], runaway recursion through a cyclic ancestry). Fatal to the
  request and always logged.

Missing parent data is not an error; see models.DataIntegrityWarning.
"""
from __future__ import annotations
from typing import Optional


class InvalidArgument(ValueError):
    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ComputationError(RuntimeError):
    pass
