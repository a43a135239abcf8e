"""Pydantic models describing core/v1 Secret payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _null_to_empty(value: object) -> object:
    return {} if value is None else value


def _null_to_list(value: object) -> object:
    return [] if value is None else value


class KubernetesBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ObjectMetaPayload(KubernetesBaseModel):
    name: str
    namespace: str
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    resource_version: str | None = Field(default=None, alias="resourceVersion")

    _normalize_maps = field_validator("labels", "annotations", mode="before")(_null_to_empty)


class SecretPayload(KubernetesBaseModel):
    api_version: str = Field(default="v1", alias="apiVersion")
    kind: str = "Secret"
    metadata: ObjectMetaPayload
    data: dict[str, str] = Field(default_factory=dict)
    type: str | None = None

    _normalize_data = field_validator("data", mode="before")(_null_to_empty)


class ListMetaPayload(KubernetesBaseModel):
    resource_version: str | None = Field(default=None, alias="resourceVersion")
    continue_token: str | None = Field(default=None, alias="continue")


class SecretListPayload(KubernetesBaseModel):
    metadata: ListMetaPayload = Field(default_factory=ListMetaPayload)
    items: list[SecretPayload] = Field(default_factory=list)

    _normalize_items = field_validator("items", mode="before")(_null_to_list)


class StatusPayload(KubernetesBaseModel):
    """Error body returned by the API server."""

    status: str | None = None
    message: str | None = None
    reason: str | None = None
    code: int | None = None
