"""Error taxonomy for the prompt gateway.

Handlers map these to HTTP statuses on the single-response path; the
streaming adapter turns them into an early, silent end of the text stream.
"""


class GatewayError(Exception):
    """Base class for gateway failures."""


class EncodingError(GatewayError):
    """Raised when a prompt cannot be serialized into the provider request schema."""


class DecodingError(GatewayError):
    """Raised when provider bytes do not match the expected response schema."""


class EmptyResultError(GatewayError):
    """Raised when the provider response carries no results."""


class ChannelError(GatewayError):
    """Raised on transport failures talking to the inference provider."""
