"""Shared base models and the address type."""

import logging
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict

from .exceptions import ModelValidationError


logger = logging.getLogger(__name__)


class Address(str):
    """A base58-encoded account or mint address.

    Kept as a distinct ``str`` subclass so that a mint address can be told apart from a token symbol.
    """

    def __new__(cls, value: str) -> "Address":
        return super().__new__(cls, str(value).strip())

    def __repr__(self) -> str:
        return "Address({0})".format(str.__repr__(self))


class FrozenModel(BaseModel):
    """Base schema for immutable snapshot and specification models."""

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        arbitrary_types_allowed=True,
        use_enum_values=False,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize model into a plain dictionary.

        Returns:
            Dict[str, Any]: Serialized model payload.

        Raises:
            ModelValidationError: If serialization fails.
        """
        try:
            return self.model_dump(exclude_none=True)
        except Exception as exc:
            logger.exception("Failed to serialize %s", self.__class__.__name__)
            raise ModelValidationError(str(exc))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FrozenModel":
        """Create model instance from a plain dictionary.

        Args:
            data: Model payload.

        Returns:
            FrozenModel: Typed domain instance.

        Raises:
            ModelValidationError: If payload parsing fails.
        """
        try:
            return cls.model_validate(dict(data))
        except Exception as exc:
            logger.exception("Failed to parse payload for %s", cls.__name__)
            raise ModelValidationError(str(exc))
