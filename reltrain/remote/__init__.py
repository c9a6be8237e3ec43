"""Remote repository and build service access."""

from reltrain.remote.azure import AzureBuildGateway, AzureRepositoryGateway, connect_azure
from reltrain.remote.gateways import (
    BuildGateway,
    Connect,
    GatewayError,
    RemoteClients,
    RepositoryGateway,
)
from reltrain.remote.http import HttpClient, HttpError, RealHttpClient

__all__ = [
    "AzureBuildGateway",
    "AzureRepositoryGateway",
    "BuildGateway",
    "Connect",
    "GatewayError",
    "HttpClient",
    "HttpError",
    "RealHttpClient",
    "RemoteClients",
    "RepositoryGateway",
    "connect_azure",
]
