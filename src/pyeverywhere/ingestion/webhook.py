"""Webhook body parsing.

The hosting runtime normally validates webhook bodies before they reach
the task. :func:`parse_webhook_body` is the same contract in Python: the
full shape in normal mode, and only the fields the cache reads in DEBUG
mode.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from pyeverywhere._redact import redact_for_log
from pyeverywhere.exceptions import EverywhereValidationError
from pyeverywhere.models.webhook import WebhookItem, WebhookReport

_logger = logging.getLogger(__name__)


def parse_webhook_body(body: Any, *, debug: bool = False) -> WebhookReport:
    """Validate a webhook body.

    Parameters
    ----------
    body
        Decoded JSON object, or the raw JSON text/bytes.
    debug
        When true, accept any object that carries the fields needed to
        build a track and log the body.

    Raises
    ------
    EverywhereValidationError
        If the body is not JSON or lacks required fields.
    """
    if isinstance(body, (str, bytes, bytearray)):
        try:
            body = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise EverywhereValidationError(f"Webhook body is not JSON: {exc}") from exc

    if debug:
        _logger.debug("Webhook body: %s", json.dumps(redact_for_log(body), indent=4, default=str))

    if not isinstance(body, dict):
        raise EverywhereValidationError(f"Webhook body must be a JSON object, got {type(body).__name__}")

    model: type[WebhookReport] = WebhookReport if debug else WebhookItem
    try:
        return model.model_validate(body)
    except ValidationError as exc:
        raise EverywhereValidationError(f"Invalid webhook body: {exc.error_count()} error(s): {exc}") from exc
