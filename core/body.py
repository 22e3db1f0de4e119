"""Body strategy selection and buffered body encoding."""

import json
from json import JSONDecodeError
from urllib.parse import parse_qsl

from core.exceptions import BodyPreparationError
from core.request_types import BodyStrategy
from core.router import Route

FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"


def media_type(content_type: str | None) -> str:
    """Return the lowercased media type without parameters."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_multipart(content_type: str | None) -> bool:
    return media_type(content_type).startswith("multipart/")


def is_json(content_type: str | None) -> bool:
    kind = media_type(content_type)
    return kind == "application/json" or kind.endswith("+json")


class BodyStrategySelector:
    """Choose how a request body travels to the backend."""

    def select(self, route: Route, content_type: str | None) -> BodyStrategy:
        """Refine the route's strategy using the inbound Content-Type."""
        if route.strategy is BodyStrategy.STREAM_OUT:
            return BodyStrategy.STREAM_OUT
        if route.accepts_uploads and is_multipart(content_type):
            return BodyStrategy.STREAM_IN
        return route.strategy

    def encode_json(self, raw: bytes, content_type: str | None) -> bytes | None:
        """Re-serialize a buffered body as JSON.

        Returns None when there is nothing to forward: an empty body, or a
        content type the JSON strategy does not carry, a missing one included.
        """
        kind = media_type(content_type)
        if not raw or not (is_json(content_type) or kind == FORM_MEDIA_TYPE):
            return None

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BodyPreparationError(f"Body is not valid UTF-8: {e}", content_type) from e

        if is_json(content_type):
            try:
                payload = json.loads(text)
            except (JSONDecodeError, ValueError) as e:
                raise BodyPreparationError(f"Invalid JSON: {e}", content_type) from e
        else:
            payload = dict(parse_qsl(text, keep_blank_values=True))

        return json.dumps(payload).encode("utf-8")
