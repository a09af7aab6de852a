"""
Hashing and omission anonymizers.

StringHashAnonymizer pseudonymizes identifiers with a salted SHA-256 so the
same identifier maps to the same digest within a study. ValueOmittingAnonymizer
drops the value entirely.
"""

import hashlib
import json
from typing import Any

from anonymization.config import SessionContext

from .base import Anonymizer, register_anonymizer


@register_anonymizer(display_text="Hash")
class StringHashAnonymizer(Anonymizer):
    """One-way salted SHA-256 of the value's string form."""

    def transform(self, value: Any, context: SessionContext) -> Any:
        if isinstance(value, float):
            str_value = repr(value)  # Preserve precision
        elif isinstance(value, (dict, list)):
            str_value = json.dumps(value, sort_keys=True, default=str)
        else:
            str_value = str(value)

        hasher = hashlib.sha256()
        hasher.update(f"{context.hash_salt}{str_value}".encode())
        return hasher.hexdigest()


@register_anonymizer(display_text="Omit")
class ValueOmittingAnonymizer(Anonymizer):
    """Replace the value with null."""

    def transform(self, value: Any, context: SessionContext) -> Any:
        return None
