"""
Base anonymizer class and the anonymizer name registry.

Anonymizers are stateless with respect to the record: every instance of a
class behaves identically, so instances compare equal by class and the
registered name is enough to persist one.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type

from anonymization.config import SessionContext
from anonymization.errors import UnknownAnonymizerError

logger = logging.getLogger(__name__)

_ANONYMIZERS: Dict[str, Type["Anonymizer"]] = {}
_ALIASES: Dict[str, str] = {}


class Anonymizer(ABC):
    """Base class for field anonymizers."""

    name: str = ""
    display_text: str = ""

    @abstractmethod
    def transform(self, value: Any, context: SessionContext) -> Any:
        """
        Anonymize a single non-empty value.

        Args:
            value: Raw field value
            context: Active session context

        Returns:
            Anonymized value

        Raises:
            Any exception; the serializer treats it as fatal for the record.
        """
        pass

    def get_type(self) -> str:
        """Get anonymizer name for metrics."""
        return self.name or self.__class__.__name__

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def register_anonymizer(
    name: Optional[str] = None,
    display_text: Optional[str] = None,
    aliases: tuple = (),
) -> Callable[[Type[Anonymizer]], Type[Anonymizer]]:
    """
    Class decorator registering an anonymizer under a stable name.

    Args:
        name: Persisted identifier (default: class name)
        display_text: Text shown in selection lists (default: name)
        aliases: Extra names that resolve to this anonymizer, such as the
            fully qualified names found in legacy registries

    Raises:
        ValueError: If the name is already taken by another class
    """

    def decorator(cls: Type[Anonymizer]) -> Type[Anonymizer]:
        key = name or cls.__name__
        existing = _ANONYMIZERS.get(key)
        if existing is not None and existing is not cls:
            raise ValueError(f"Anonymizer name already registered: {key}")

        cls.name = key
        cls.display_text = display_text or cls.display_text or key
        _ANONYMIZERS[key] = cls
        for alias in aliases:
            _ALIASES[alias] = key

        logger.debug(f"Registered anonymizer {key}")
        return cls

    return decorator


def get_anonymizer(name: str) -> Anonymizer:
    """
    Instantiate the anonymizer registered under name.

    Fully qualified names are resolved by their last dotted segment when no
    exact match exists.

    Raises:
        UnknownAnonymizerError: If the name cannot be resolved
    """
    key = _ALIASES.get(name, name)
    cls = _ANONYMIZERS.get(key)
    if cls is None and "." in key:
        short = key.rsplit(".", 1)[1]
        cls = _ANONYMIZERS.get(_ALIASES.get(short, short))
    if cls is None:
        raise UnknownAnonymizerError(f"Unknown anonymizer: {name}")
    return cls()


def anonymizer_names() -> List[str]:
    """Get the sorted list of registered anonymizer names."""
    return sorted(_ANONYMIZERS)
