"""Wire payloads for the pipeline discovery and inference endpoints.

Requests are plain dictionaries built here; responses are decoded through pydantic
models so that nothing downstream indexes raw JSON. A payload that does not match
the expected shape is turned into a domain error at this boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, ValidationError

from ..errors import DiscoveryError, MalformedResponseError


TASK_TYPE = "translation"

TranslationResult = tuple[str, ...]


@dataclass(slots=True, frozen=True)
class Session:
    """Resolved inference endpoint for one language pair."""

    source_language: str
    target_language: str
    callback_url: str
    inference_api_key: str
    service_id: str

    @property
    def language_pair(self) -> tuple[str, str]:
        return (self.source_language, self.target_language)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class InferenceApiKey(_WireModel):
    value: str = Field(min_length=1)


class InferenceEndpoint(_WireModel):
    callback_url: AnyHttpUrl = Field(alias="callbackUrl")
    inference_api_key: InferenceApiKey = Field(alias="inferenceApiKey")


class ServiceConfig(_WireModel):
    service_id: str = Field(alias="serviceId", min_length=1)


class PipelineResponseConfig(_WireModel):
    config: ServiceConfig


class DiscoveryResponse(_WireModel):
    endpoint: InferenceEndpoint = Field(alias="pipelineInferenceAPIEndPoint")
    response_config: List[PipelineResponseConfig] = Field(
        alias="pipelineResponseConfig", min_length=1
    )


class OutputItem(_WireModel):
    target: str


class PipelineOutput(_WireModel):
    output: List[OutputItem]


class InferenceResponse(_WireModel):
    pipeline_response: List[PipelineOutput] = Field(alias="pipelineResponse", min_length=1)


def _language_config(source_language: str, target_language: str) -> dict[str, str]:
    return {"sourceLanguage": source_language, "targetLanguage": target_language}


def build_discovery_payload(source_language: str, target_language: str, pipeline_id: str) -> dict:
    """Body of the pipeline discovery request."""

    return {
        "pipelineTasks": [
            {
                "taskType": TASK_TYPE,
                "config": {"language": _language_config(source_language, target_language)},
            }
        ],
        "pipelineRequestConfig": {"pipelineId": pipeline_id},
    }


def build_inference_payload(session: Session, segments: Sequence[str]) -> dict:
    """Body of an inference request; each segment is its own input item."""

    return {
        "pipelineTasks": [
            {
                "taskType": TASK_TYPE,
                "config": {
                    "language": _language_config(session.source_language, session.target_language),
                    "serviceId": session.service_id,
                },
            }
        ],
        "inputData": {"input": [{"source": segment} for segment in segments]},
    }


def decode_session(data: Any, source_language: str, target_language: str) -> Session:
    """Turn a discovery response into a Session or raise DiscoveryError."""

    try:
        parsed = DiscoveryResponse.model_validate(data)
    except ValidationError as exc:
        raise DiscoveryError(
            f"Discovery response is missing session fields ({exc.error_count()} problem(s))"
        ) from exc
    return Session(
        source_language=source_language,
        target_language=target_language,
        callback_url=str(parsed.endpoint.callback_url),
        inference_api_key=parsed.endpoint.inference_api_key.value,
        service_id=parsed.response_config[0].config.service_id,
    )


def decode_translations(data: Any, expected: int) -> TranslationResult:
    """Extract the translated strings of an inference response, in input order."""

    try:
        parsed = InferenceResponse.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Inference response has an unexpected shape ({exc.error_count()} problem(s))"
        ) from exc
    outputs = parsed.pipeline_response[0].output
    if len(outputs) != expected:
        raise MalformedResponseError(
            f"Inference returned {len(outputs)} outputs for {expected} inputs"
        )
    return tuple(item.target for item in outputs)
