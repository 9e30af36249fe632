from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


ResourceType = Literal["namespaces", "deployments", "pods", "services", "configmaps", "secrets"]
DeletableKind = Literal["Deployment", "Service", "ConfigMap", "Secret", "Pod", "Namespace"]
ApplyVerb = Literal["apply", "create"]
ApplyStatus = Literal["success", "error"]


class ClusterRequest(BaseModel):
    """Fields shared by every request: the caller's kubeconfig and an optional context."""

    kubeconfig: str = Field(min_length=1, description="kubeconfig YAML; never stored server-side")
    context: str | None = Field(default=None, description="kubeconfig context, defaults to current-context")


class ApplyRequest(ClusterRequest):
    manifest: str = Field(min_length=1, description="one or more YAML documents separated by ---")


class ListRequest(ClusterRequest):
    type: ResourceType
    namespace: str | None = None


class ScaleRequest(ClusterRequest):
    namespace: str = Field(min_length=1)
    name: str = Field(min_length=1)
    replicas: int = Field(ge=0)

    @field_validator("replicas", mode="before")
    @classmethod
    def _replicas_is_a_number(cls, value: Any) -> Any:
        # JSON numbers only; 3.0 passes, "3" and true do not
        if isinstance(value, (str, bool)):
            raise ValueError("replicas must be a number")
        return value


class DeleteRequest(ClusterRequest):
    kind: DeletableKind
    name: str = Field(min_length=1)
    namespace: str | None = None


class LogsRequest(ClusterRequest):
    namespace: str = Field(min_length=1)
    pod: str = Field(min_length=1)
    container: str | None = None
    tail_lines: int | None = Field(default=None, gt=0)


class ApplyOutcome(BaseModel):
    """Result of applying one manifest document; created once, never mutated."""

    model_config = ConfigDict(frozen=True)

    kind: str | None = None
    name: str | None = None
    namespace: str | None = None
    verb: ApplyVerb | None = None
    status: ApplyStatus
    detail: str | None = None
    apply_error: str | None = None


class ApplyResponse(BaseModel):
    result: list[ApplyOutcome]


class ListResponse(BaseModel):
    data: list[dict[str, Any]]


class ScaleResponse(BaseModel):
    replicas: int | None = None


class DeleteResponse(BaseModel):
    deleted: bool = True
