"""Header construction for backend requests and relayed responses."""

from collections.abc import Iterable, Mapping

from core.request_types import BodyStrategy

# Inbound headers passed through unchanged (Content-Type is handled per strategy)
FORWARDED_REQUEST_HEADERS = {
    "authorization": "Authorization",
    "accept": "Accept",
    "user-agent": "User-Agent",
}

# Backend response headers copied onto streamed downloads
DOWNLOAD_RESPONSE_HEADERS = {
    "content-type": "Content-Type",
    "content-disposition": "Content-Disposition",
    "content-length": "Content-Length",
}

# Backend response headers kept on relayed error answers (redirect targets)
ERROR_RESPONSE_HEADERS = {
    "location": "Location",
}


class HeaderBuilder:
    """Build backend headers and relayed response headers."""

    def build_backend_headers(
        self,
        headers: Mapping[str, str] | Iterable[tuple[str, str]],
        strategy: BodyStrategy,
    ) -> dict[str, str]:
        """Apply the inbound allow-list for the given body strategy."""
        items = headers.items() if isinstance(headers, Mapping) else headers
        backend: dict[str, str] = {}
        content_type: str | None = None
        for key, value in items:
            key_lower = key.lower()
            if key_lower in FORWARDED_REQUEST_HEADERS:
                backend[FORWARDED_REQUEST_HEADERS[key_lower]] = value
            elif key_lower == "content-type":
                content_type = value

        if strategy is BodyStrategy.JSON:
            backend["Content-Type"] = "application/json"
        elif strategy is BodyStrategy.STREAM_IN and content_type is not None:
            # Boundary parameter must survive byte-for-byte
            backend["Content-Type"] = content_type
        elif strategy is BodyStrategy.STREAM_OUT:
            # Keep Content-Length meaningful for the relayed bytes
            backend["Accept-Encoding"] = "identity"
        return backend

    def build_download_headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        """Copy the download headers from a backend response."""
        relayed: dict[str, str] = {}
        encoded = False
        for key, value in headers.items():
            key_lower = key.lower()
            if key_lower == "content-encoding" and value.lower() != "identity":
                encoded = True
            name = DOWNLOAD_RESPONSE_HEADERS.get(key_lower)
            if name is not None:
                relayed[name] = value
        if encoded:
            # Relayed bytes are decoded, so the backend's length no longer applies
            relayed.pop("Content-Length", None)
        return relayed

    def build_error_headers(self, headers: Mapping[str, str]) -> dict[str, str]:
        """Copy the headers a relayed non-2xx answer needs to stay usable."""
        return {
            ERROR_RESPONSE_HEADERS[key.lower()]: value
            for key, value in headers.items()
            if key.lower() in ERROR_RESPONSE_HEADERS
        }
