"""Failure taxonomy for the gateway request pipeline."""

from __future__ import annotations

from typing import Optional


class GatewayError(Exception):
    """Base error rendered as a plain-text response with the CORS policy."""

    status_code: int = 500
    message: str = "The server encountered an internal error while processing the request."

    def __init__(self, detail: Optional[str] = None, *, message: Optional[str] = None) -> None:
        super().__init__(detail or message or self.message)
        if message is not None:
            self.message = message


class ClientInputError(GatewayError):
    """The inbound request is missing or carries an invalid ``url`` parameter."""

    status_code = 400
    message = "Missing 'url' parameter."


class UnsupportedContentError(GatewayError):
    """A gallery post was requested through the media relay."""

    status_code = 400
    message = (
        "This is an image post. Use the endpoint with '&data=true' "
        "to get the image links."
    )


class ResolutionError(GatewayError):
    """The resolver could not produce usable metadata or a media URL."""

    status_code = 500


class UpstreamFetchError(GatewayError):
    """The direct media URL could not be fetched or answered with a non-success status."""

    status_code = 500
