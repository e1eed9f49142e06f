"""Alert request/response models."""

from __future__ import annotations

from pydantic import Field

from shecurity.models._base import ShecurityBaseModel


class AlertRequest(ShecurityBaseModel):
    """Body of the outbound alert POST.

    ``email`` is omitted from the wire payload when ``None`` (legacy
    endpoint variant).
    """

    phone: str = Field(min_length=1)
    latitude: float
    longitude: float
    email: str | None = None


class AlertResponse(ShecurityBaseModel):
    """Message returned by the alert endpoint, shown verbatim."""

    message: str
