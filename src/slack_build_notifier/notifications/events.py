"""Build event model for the notification system.

This module defines the BuildStatus enum and the Build model, a frozen,
read-only projection of a Cloud Build record. Builds arrive either as raw
build JSON or wrapped in a Pub/Sub push envelope; parse_build() accepts both.

Example:
    >>> build = Build.model_validate(
    ...     {"id": "b-1", "status": "SUCCESS", "projectId": "hello-world-123"}
    ... )
    >>> build.status == BuildStatus.SUCCESS
    True
    >>> build.to_view()["projectId"]
    'hello-world-123'

"""

import base64
import binascii
import json
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from slack_build_notifier.core.exceptions import EventDecodeError


class BuildStatus(StrEnum):
    """Cloud Build status values.

    Statuses not listed here are still accepted on Build.status; they are
    kept verbatim and treated as neutral wherever a status is classified.
    """

    STATUS_UNKNOWN = "STATUS_UNKNOWN"
    PENDING = "PENDING"
    QUEUED = "QUEUED"
    WORKING = "WORKING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    TIMEOUT = "TIMEOUT"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


# Protobuf enum numbers, for producers that emit integer statuses
_STATUS_BY_NUMBER: dict[int, BuildStatus] = {
    0: BuildStatus.STATUS_UNKNOWN,
    10: BuildStatus.PENDING,
    1: BuildStatus.QUEUED,
    2: BuildStatus.WORKING,
    3: BuildStatus.SUCCESS,
    4: BuildStatus.FAILURE,
    5: BuildStatus.INTERNAL_ERROR,
    6: BuildStatus.TIMEOUT,
    7: BuildStatus.CANCELLED,
    9: BuildStatus.EXPIRED,
}


class Build(BaseModel):
    """Read-only view of a build record.

    Field names are snake_case in Python and camelCase on the wire. Unknown
    wire fields are discarded.

    Attributes:
        id: Build identifier.
        status: Status name; a BuildStatus value or any unrecognised name.
        project_id: GCP project owning the build.
        log_url: Console URL of the build logs.
        substitutions: User and built-in substitution variables.
        build_trigger_id: Trigger that started the build, if any.
        create_time: When the build was created.
        start_time: When execution started.
        finish_time: When execution finished.
        tags: Build tags.
        images: Images pushed by the build.

    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = ""
    status: str = BuildStatus.STATUS_UNKNOWN.value
    project_id: str = Field(default="", alias="projectId")
    log_url: str = Field(default="", alias="logUrl")
    substitutions: dict[str, str] = Field(default_factory=dict)
    build_trigger_id: str = Field(default="", alias="buildTriggerId")
    create_time: datetime | None = Field(default=None, alias="createTime")
    start_time: datetime | None = Field(default=None, alias="startTime")
    finish_time: datetime | None = Field(default=None, alias="finishTime")
    tags: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> str:
        """Accept enum names or protobuf numbers; unset maps to STATUS_UNKNOWN."""
        if v is None or v == "":
            return BuildStatus.STATUS_UNKNOWN.value
        if isinstance(v, bool):
            raise ValueError("status must be a string or integer")
        if isinstance(v, int):
            return _STATUS_BY_NUMBER.get(v, BuildStatus.STATUS_UNKNOWN).value
        if isinstance(v, str):
            return v
        raise ValueError(f"status must be a string or integer, got {type(v).__name__}")

    def to_view(self) -> dict[str, Any]:
        """Return the wire-form mapping exposed to templates, filters and bindings.

        Keys use the camelCase wire names. Unset timestamps are omitted.
        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def parse_build(raw: str | bytes) -> Build:
    """Decode a build from raw build JSON or a Pub/Sub push envelope.

    A Pub/Sub push body has the form ``{"message": {"data": "<base64>"}}``
    where the data is the build JSON.

    Args:
        raw: Request body or file contents.

    Returns:
        Validated Build.

    Raises:
        EventDecodeError: If the input is not valid JSON, the envelope data
            is not base64, or the build does not validate.

    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise EventDecodeError(f"Build message is not valid JSON: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("message"), dict):
        encoded = data["message"].get("data")
        if not isinstance(encoded, str):
            raise EventDecodeError("Pub/Sub envelope has no message data")
        try:
            data = json.loads(base64.b64decode(encoded, validate=True))
        except (binascii.Error, ValueError) as e:
            raise EventDecodeError(f"Pub/Sub message data is not base64 build JSON: {e}") from e

    if not isinstance(data, dict):
        raise EventDecodeError(f"Build message must be a JSON object, got {type(data).__name__}")

    try:
        return Build.model_validate(data)
    except ValidationError as e:
        raise EventDecodeError(f"Invalid build record:\n{e}") from e
