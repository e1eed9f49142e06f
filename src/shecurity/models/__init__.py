"""Data models for shecurity."""

from shecurity.models._base import ShecurityBaseModel
from shecurity.models.alert import AlertRequest, AlertResponse
from shecurity.models.assistance import AssistancePoint, RankedAssistancePoint
from shecurity.models.contact import CachedCredential, Contact
from shecurity.models.location import LocationOptions, Position
from shecurity.models.session import (
    ActivationSource,
    DispatchOutcome,
    DispatchState,
    Notice,
    NoticeCallback,
    NoticeLevel,
    SessionFlags,
)

__all__ = [
    "ActivationSource",
    "AlertRequest",
    "AlertResponse",
    "AssistancePoint",
    "CachedCredential",
    "Contact",
    "DispatchOutcome",
    "DispatchState",
    "LocationOptions",
    "Notice",
    "NoticeCallback",
    "NoticeLevel",
    "Position",
    "RankedAssistancePoint",
    "SessionFlags",
    "ShecurityBaseModel",
]
