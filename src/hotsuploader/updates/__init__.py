"""Update package - release client, background checker, and custom errors."""

from .checker import ClientState, UpdateChecker
from .client import (
    GitHubUpdateClient,
    ReleaseAsset,
    ReleaseInfo,
    UpdateClient,
    create_update_client,
)
from .errors import (
    NetworkError,
    ParseError,
    RateLimitError,
    ReleaseNotFoundError,
    ServerError,
    UpdateConfigurationError,
    UpdateError,
)

__all__ = [
    "ClientState",
    "GitHubUpdateClient",
    "NetworkError",
    "ParseError",
    "RateLimitError",
    "ReleaseAsset",
    "ReleaseInfo",
    "ReleaseNotFoundError",
    "ServerError",
    "UpdateChecker",
    "UpdateClient",
    "UpdateConfigurationError",
    "UpdateError",
    "create_update_client",
]
