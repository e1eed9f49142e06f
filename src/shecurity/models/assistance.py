"""Assistance point models."""

from __future__ import annotations

from pydantic import Field, field_validator

from shecurity.models._base import ShecurityBaseModel


class AssistancePoint(ShecurityBaseModel):
    """Static catalog entry (police station, hospital, help desk)."""

    name: str
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("name must be non-empty")
        return name


class RankedAssistancePoint(AssistancePoint):
    """An assistance point together with its distance from the user."""

    distance_km: float = Field(ge=0.0)
