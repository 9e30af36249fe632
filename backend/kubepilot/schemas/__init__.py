from .kubernetes import (
    ApplyOutcome,
    ApplyRequest,
    ApplyResponse,
    ClusterRequest,
    DeleteRequest,
    DeleteResponse,
    ListRequest,
    ListResponse,
    LogsRequest,
    ScaleRequest,
    ScaleResponse,
)

__all__ = [
    "ApplyOutcome",
    "ApplyRequest",
    "ApplyResponse",
    "ClusterRequest",
    "DeleteRequest",
    "DeleteResponse",
    "ListRequest",
    "ListResponse",
    "LogsRequest",
    "ScaleRequest",
    "ScaleResponse",
]
