"""
Live-channel protocol.

Every frame is ``{"type": <kind>, "data": <payload>}``. Inbound frames are
parsed into a tagged union so an unknown ``type`` is rejected explicitly.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from lanshare.exceptions import ValidationError, field_from_errors
from lanshare.schemas.device import DeviceHandshake, DeviceResponse
from lanshare.schemas.message import MessageCreate, MessageResponse
from lanshare.schemas.transfer import TransferProgressUpdate, TransferResponse


# Client -> server

class DeviceConnect(BaseModel):
    type: Literal["device_connect"]
    data: DeviceHandshake


class SendMessage(BaseModel):
    type: Literal["send_message"]
    data: MessageCreate


class ReportTransferProgress(BaseModel):
    type: Literal["transfer_progress"]
    data: TransferProgressUpdate


ClientMessage = Annotated[
    Union[DeviceConnect, SendMessage, ReportTransferProgress],
    Field(discriminator="type"),
]

_client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(raw: str | bytes) -> DeviceConnect | SendMessage | ReportTransferProgress:
    """Parse one inbound frame, raising ValidationError for bad JSON or unknown kinds."""
    try:
        return _client_message_adapter.validate_json(raw)
    except PydanticValidationError as e:
        errors = e.errors()
        kinds = {err["type"] for err in errors}
        if "json_invalid" in kinds:
            raise ValidationError("Malformed JSON frame")
        if "union_tag_invalid" in kinds or "union_tag_not_found" in kinds:
            raise ValidationError("Unrecognized message type", field="type")
        raise ValidationError(errors[0]["msg"], field=field_from_errors(errors))


# Server -> client

class ErrorPayload(BaseModel):
    detail: str
    field: str | None = None


class ConnectedEvent(BaseModel):
    type: Literal["connected"] = "connected"


class DeviceConnectedEvent(BaseModel):
    type: Literal["device_connected"] = "device_connected"
    data: DeviceResponse


class DeviceDisconnectedEvent(BaseModel):
    type: Literal["device_disconnected"] = "device_disconnected"
    data: DeviceResponse


class NewMessageEvent(BaseModel):
    type: Literal["new_message"] = "new_message"
    data: MessageResponse


class TransferUpdatedEvent(BaseModel):
    type: Literal["transfer_updated"] = "transfer_updated"
    data: TransferResponse


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    data: ErrorPayload


ServerEvent = Union[
    ConnectedEvent,
    DeviceConnectedEvent,
    DeviceDisconnectedEvent,
    NewMessageEvent,
    TransferUpdatedEvent,
    ErrorEvent,
]


def encode_event(event: ServerEvent) -> dict:
    return event.model_dump(mode="json", by_alias=True)
