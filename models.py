import base64
import binascii
import json
from typing import Any, Literal
from pydantic import (
    BaseModel,
    RootModel,
    model_validator,
    field_validator,
)
from enum import StrEnum


class ApiVersion(StrEnum):
    V1 = "admission.k8s.io/v1"
    V1BETA1 = "admission.k8s.io/v1beta1"


class PatchType(StrEnum):
    JSONPatch = "JSONPatch"


class PatchOp(StrEnum):
    ADD = "add"


class PatchAction(BaseModel):
    op: PatchOp
    path: str
    value: Any


# https://jsonpatch.com/
Patch = RootModel[list[PatchAction]]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.30/#groupversionkind-v1-meta
class GroupVersionKind(BaseModel):
    group: str = ""
    version: str
    kind: str


# https://kubernetes.io/docs/reference/config-api/apiserver-admission.v1/#admission-k8s-io-v1-AdmissionResponse
class AdmissionResponse(BaseModel):
    allowed: bool
    uid: str
    patchType: PatchType | None = None
    patch: str | None = None

    @field_validator("patch", mode="before")
    @classmethod
    def validate_patch(cls, val):
        if isinstance(val, Patch):
            val = base64.b64encode(val.model_dump_json().encode()).decode()
        elif isinstance(val, (str, bytes)):
            # Make sure the base64 string contains valid data.
            Patch.model_validate_json(base64.b64decode(val))
        return val

    @model_validator(mode="after")
    def validate_model(self):
        if self.patch and not self.patchType:
            raise ValueError("missing patchType field")
        if self.patchType and not self.patch:
            raise ValueError(f"patchType is {self.patchType} but there is no patch")

        return self


# https://kubernetes.io/docs/reference/config-api/apiserver-admission.v1/#admission-k8s-io-v1-AdmissionRequest
class AdmissionRequest(BaseModel):
    uid: str
    kind: GroupVersionKind | None = None
    name: str | None = None
    namespace: str | None = None
    object: dict[str, Any] | None = None

    @field_validator("object", mode="before")
    @classmethod
    def validate_object(cls, val):
        """Decode an object submitted as a base64 encoded raw extension.

        The API server embeds the object as JSON, but a serialized object may
        also arrive as {"raw": "<base64>"}. Line breaks in the encoded data
        are ignored.
        """

        if isinstance(val, dict) and set(val) == {"raw"}:
            raw = val["raw"]
            if not isinstance(raw, str):
                raise ValueError("object is not valid base64: raw must be a string")

            try:
                data = base64.b64decode(
                    raw.replace("\r", "").replace("\n", ""), validate=True
                )
            except (binascii.Error, ValueError) as err:
                raise ValueError(f"object is not valid base64: {err}")

            try:
                val = json.loads(data)
            except ValueError as err:
                raise ValueError(f"object is not valid JSON: {err}")
        return val


# https://kubernetes.io/docs/reference/config-api/apiserver-admission.v1/#admission-k8s-io-v1-AdmissionReview
class AdmissionReview(BaseModel):
    apiVersion: ApiVersion = ApiVersion.V1
    kind: Literal["AdmissionReview"] = "AdmissionReview"
    request: AdmissionRequest | None = None
    response: AdmissionResponse | None = None

    @model_validator(mode="after")
    def validate_model(self):
        if not (self.request or self.response):
            raise ValueError("must contain a request or a response")

        return self


class Metadata(BaseModel):
    name: str | None = None
    namespace: str | None = None
    annotations: dict[str, str] | None = None


class Pod(BaseModel):
    metadata: Metadata = Metadata()


class Namespace(BaseModel):
    metadata: Metadata
