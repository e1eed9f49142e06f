"""shecurity - Async emergency alert core with location and nearest-help lookup."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("shecurity")
except PackageNotFoundError:
    __version__ = "0+local"
from shecurity.catalog import load_catalog
from shecurity.client import ShecurityClient
from shecurity.config import ShecurityConfig
from shecurity.credentials import CredentialCache, JsonFileStore, MemoryStore
from shecurity.directions import directions_url, location_url
from shecurity.dispatcher import AlertDispatcher
from shecurity.exceptions import (
    CatalogError,
    DispatchError,
    DispatchRemoteError,
    DispatchTransportError,
    LocationError,
    LocationUnavailableError,
    MissingCredentialsError,
    ShecurityConfigError,
    ShecurityError,
    SpeechUnavailableError,
)
from shecurity.location import (
    CallbackLocationBackend,
    LocationProvider,
    StaticLocationBackend,
)
from shecurity.models import (
    ActivationSource,
    AlertResponse,
    AssistancePoint,
    Contact,
    DispatchOutcome,
    DispatchState,
    LocationOptions,
    Notice,
    NoticeLevel,
    Position,
    RankedAssistancePoint,
    SessionFlags,
)
from shecurity.ranking import haversine_km, rank_nearest
from shecurity.session import SessionController
from shecurity.voice import QueueSpeechRecognizer, VoiceTrigger, matches_keyword

__all__ = [
    "__version__",
    "ActivationSource",
    "AlertDispatcher",
    "AlertResponse",
    "AssistancePoint",
    "CallbackLocationBackend",
    "CatalogError",
    "Contact",
    "CredentialCache",
    "DispatchError",
    "DispatchOutcome",
    "DispatchRemoteError",
    "DispatchState",
    "DispatchTransportError",
    "JsonFileStore",
    "LocationError",
    "LocationOptions",
    "LocationProvider",
    "LocationUnavailableError",
    "MemoryStore",
    "MissingCredentialsError",
    "Notice",
    "NoticeLevel",
    "Position",
    "QueueSpeechRecognizer",
    "RankedAssistancePoint",
    "SessionController",
    "SessionFlags",
    "ShecurityClient",
    "ShecurityConfig",
    "ShecurityConfigError",
    "ShecurityError",
    "SpeechUnavailableError",
    "StaticLocationBackend",
    "VoiceTrigger",
    "directions_url",
    "haversine_km",
    "load_catalog",
    "location_url",
    "matches_keyword",
    "rank_nearest",
]
