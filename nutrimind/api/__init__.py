"""NutriMind API client layer -- re-exports the primary client class."""

from nutrimind.api.client import NutriMindClient, read_payload
from nutrimind.api.pipeline import PendingRequest, RequestPipeline

__all__ = ["NutriMindClient", "PendingRequest", "RequestPipeline", "read_payload"]
