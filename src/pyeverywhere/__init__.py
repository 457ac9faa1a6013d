"""pyeverywhere - Everywhere Hub device-track cache and feature emitter."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyeverywhere")
except PackageNotFoundError:
    __version__ = "0+local"
from pyeverywhere.config import EverywhereConfig
from pyeverywhere.emit import build_delta, build_feature_collection, build_snapshot, track_to_feature
from pyeverywhere.exceptions import (
    EverywhereApiError,
    EverywhereConfigError,
    EverywhereError,
    EverywhereTransportError,
    EverywhereValidationError,
)
from pyeverywhere.models import (
    DeviceMetadata,
    DeviceTrack,
    Feature,
    FeatureCollection,
    Position,
    TrackFeature,
    TrackFeatureCollection,
    WebhookItem,
    WebhookReport,
)
from pyeverywhere.state.policy import GateState, evaluate_gate
from pyeverywhere.state.retention import evict_expired
from pyeverywhere.state.store import EphemeralStore, JsonFileStateBackend, MemoryStateBackend, StateBackend
from pyeverywhere.task import EverywhereTask, FeatureSink, TickResult

__all__ = [
    "__version__",
    "DeviceMetadata",
    "DeviceTrack",
    "EphemeralStore",
    "EverywhereApiError",
    "EverywhereConfig",
    "EverywhereConfigError",
    "EverywhereError",
    "EverywhereTask",
    "EverywhereTransportError",
    "EverywhereValidationError",
    "Feature",
    "FeatureCollection",
    "FeatureSink",
    "GateState",
    "JsonFileStateBackend",
    "MemoryStateBackend",
    "Position",
    "StateBackend",
    "TickResult",
    "TrackFeature",
    "TrackFeatureCollection",
    "WebhookItem",
    "WebhookReport",
    "build_delta",
    "build_feature_collection",
    "build_snapshot",
    "evaluate_gate",
    "evict_expired",
    "track_to_feature",
]
