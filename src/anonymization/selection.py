"""
Selection surface for configuration screens.

A field's options are always "None" followed by its declared anonymizers in
declaration order; the selected index maps straight back to an assignment.
This is the boundary where assignments are validated against the catalog.
"""

import logging
from typing import List, Optional

from anonymization.anonymizers import Anonymizer
from anonymization.catalog import Anonymizable, FieldRef, catalog_for
from anonymization.errors import ConfigurationError
from anonymization.registry import AnonymizerRegistry

logger = logging.getLogger(__name__)

NONE_OPTION = "None"


def _declaration(field_ref: FieldRef) -> Anonymizable:
    declaration = catalog_for(field_ref.kind).declaration(field_ref.field)
    if declaration is None:
        raise ConfigurationError(f"{field_ref} does not declare any anonymizers")
    return declaration


def field_display_name(field_ref: FieldRef) -> str:
    """Get the label shown for a field."""
    return _declaration(field_ref).display_name or field_ref.field


def list_assignable_options(field_ref: FieldRef) -> List[str]:
    """Get the option labels for a field, "None" first."""
    declaration = _declaration(field_ref)
    return [NONE_OPTION] + [anonymizer.display_text for anonymizer in declaration.anonymizers]


def current_assignment_index(registry: AnonymizerRegistry, field_ref: FieldRef) -> int:
    """
    Get the option index of the field's current assignment.

    Returns 0 ("None") when nothing is assigned or when the assigned
    anonymizer is not among the declared ones.
    """
    declaration = _declaration(field_ref)
    anonymizer = registry.lookup(field_ref)
    if anonymizer is None:
        return 0
    try:
        return declaration.anonymizers.index(anonymizer) + 1
    except ValueError:
        logger.warning(f"{field_ref} is assigned undeclared {anonymizer.get_type()}")
        return 0


def set_assignment(
    registry: AnonymizerRegistry, field_ref: FieldRef, selected_index: int
) -> Optional[Anonymizer]:
    """
    Assign the option at selected_index to a field.

    Returns:
        The assigned anonymizer, or None for the "None" option

    Raises:
        ConfigurationError: If the field declares no anonymizers or the
            index is out of range
    """
    declaration = _declaration(field_ref)
    if not 0 <= selected_index <= len(declaration.anonymizers):
        raise ConfigurationError(
            f"Selection {selected_index} out of range for {field_ref} "
            f"({len(declaration.anonymizers) + 1} options)"
        )

    anonymizer = None
    if selected_index > 0:
        # option 0 is "None"; declared anonymizers start at 1
        anonymizer = declaration.anonymizers[selected_index - 1]

    registry.assign(field_ref, anonymizer)
    return anonymizer
