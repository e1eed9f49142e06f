"""Base model shared by shecurity data models.

Every model inherits from :class:`ShecurityBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase JSON keys (``distanceKm``,
  ``expiresAtEpochMs``) map to snake_case fields.
* ``populate_by_name`` so Python callers can use field names directly.
* Immutability (``frozen=True``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ShecurityBaseModel(BaseModel):
    """Base for shecurity models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with camelCase keys, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
