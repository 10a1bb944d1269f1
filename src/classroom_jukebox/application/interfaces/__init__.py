"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from classroom_jukebox.application.interfaces.client_connection import ClientConnection
from classroom_jukebox.application.interfaces.provider_client import (
    MalformedPayloadError,
    NoActiveDeviceError,
    ProviderAuthError,
    ProviderClient,
    ProviderError,
    ProviderRateLimitedError,
    ProviderUnavailableError,
)

__all__ = [
    "ClientConnection",
    "ProviderClient",
    "ProviderError",
    "ProviderAuthError",
    "ProviderRateLimitedError",
    "NoActiveDeviceError",
    "ProviderUnavailableError",
    "MalformedPayloadError",
]
