"""InfluxDB line-protocol Python SDK."""

from .client import HttpClient, MetricsClient, NullClient, create_client
from .config import ClientConfig
from .errors import EmptyFieldsError, InfluxSdkError, TransportInitError
from .metric import Metric, Precision, encode_line
from .transport import TransportEngine

__all__ = [
    "HttpClient",
    "MetricsClient",
    "NullClient",
    "create_client",
    "ClientConfig",
    "EmptyFieldsError",
    "InfluxSdkError",
    "TransportInitError",
    "Metric",
    "Precision",
    "encode_line",
    "TransportEngine",
]
