"""Precision context shared by the calculators.

Amounts reach the calculators as `Decimal`s already scaled by the caller;
all arithmetic on them runs at `DECIMAL_PRECISION` significant digits.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from decimal import Context, localcontext

from yieldind.core.constants import DECIMAL_PRECISION

_CONTEXT = Context(prec=DECIMAL_PRECISION)


def decimal_context() -> AbstractContextManager[Context]:
    """Context manager running the enclosed arithmetic at analytics precision."""
    return localcontext(_CONTEXT)
