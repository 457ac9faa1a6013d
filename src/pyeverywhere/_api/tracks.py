"""Latest-track endpoint.

Endpoint:
  - GET /v2/api/tracks?tokenId=...&noEarlierThan=...&latestPositionOnly=true
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from pyeverywhere._constants import TIME_BOUND_ISO, TRACKS_ENDPOINT
from pyeverywhere._transport import Transport
from pyeverywhere.config import EverywhereConfig
from pyeverywhere.exceptions import EverywhereApiError, EverywhereConfigError
from pyeverywhere.models._base import ms_to_iso
from pyeverywhere.models.tracks import TrackFeatureCollection

_logger = logging.getLogger(__name__)


def build_tracks_params(config: EverywhereConfig, now_ms: int) -> dict[str, str]:
    """Build query parameters for a latest-position pull.

    ``noEarlierThan`` is ``now - retention``; anything older would be
    evicted on arrival anyway.
    """
    if config.token_id is None:
        raise EverywhereConfigError("token_id is required for the bulk pull")

    lower_bound = now_ms - config.retention_duration_ms
    if config.time_bound_format == TIME_BOUND_ISO:
        no_earlier_than = ms_to_iso(lower_bound)
    else:
        no_earlier_than = str(lower_bound)

    return {
        "tokenId": config.token_id,
        "noEarlierThan": no_earlier_than,
        "latestPositionOnly": "true",
    }


async def fetch_latest_tracks(
    config: EverywhereConfig,
    transport: Transport,
    now_ms: int,
) -> TrackFeatureCollection:
    """Fetch the latest position of every device on the token.

    Raises
    ------
    EverywhereTransportError
        Network failure, non-2xx status or non-JSON body.
    EverywhereApiError
        The body is not a track feature collection.
    """
    params = build_tracks_params(config, now_ms)
    decoded = await transport.get_json(TRACKS_ENDPOINT, params)

    try:
        collection = TrackFeatureCollection.model_validate(decoded)
    except ValidationError as exc:
        raise EverywhereApiError(
            f"{TRACKS_ENDPOINT} returned an unexpected shape: {exc.error_count()} error(s)",
            endpoint=TRACKS_ENDPOINT,
        ) from exc

    _logger.debug("Fetched %d latest track(s)", len(collection.features))
    return collection
