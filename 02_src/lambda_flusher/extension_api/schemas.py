"""Extensions API wire shapes."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Body of POST /register."""

    events: list[str]


class RegisterResponse(BaseModel):
    """Body of a successful registration (all fields optional)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    function_name: str | None = Field(None, alias="functionName")
    function_version: str | None = Field(None, alias="functionVersion")
    handler: str | None = None


class NextEventResponse(BaseModel):
    """Body of GET /event/next."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    event_type: str = Field(alias="eventType")
    deadline_ms: int | None = Field(None, alias="deadlineMs")
    request_id: str | None = Field(None, alias="requestId")
    invoked_function_arn: str | None = Field(None, alias="invokedFunctionArn")
    shutdown_reason: str | None = Field(None, alias="shutdownReason")
    tracing: dict[str, Any] | None = None


class ErrorReport(BaseModel):
    """Body of POST /init/error and /exit/error."""

    model_config = ConfigDict(populate_by_name=True)

    error_message: str = Field(alias="errorMessage")
    error_type: str = Field(alias="errorType")
    stack_trace: list[str] = Field(default_factory=list, alias="stackTrace")
