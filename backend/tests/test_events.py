import pytest

from lanshare.exceptions import ValidationError
from lanshare.models.device import DeviceType
from lanshare.schemas.events import (
    DeviceConnect,
    ErrorEvent,
    ErrorPayload,
    ReportTransferProgress,
    SendMessage,
    encode_event,
    parse_client_message,
)


def test_parses_device_connect():
    message = parse_client_message(
        '{"type": "device_connect", "data": {"name": "Tab", "type": "tablet", "ipAddress": "10.0.0.3"}}'
    )

    assert isinstance(message, DeviceConnect)
    assert message.data.type == DeviceType.TABLET
    assert message.data.ip_address == "10.0.0.3"
    assert message.data.device_id is None


def test_parses_send_message_and_progress():
    assert isinstance(
        parse_client_message('{"type": "send_message", "data": {"content": "hi", "fromDevice": 2}}'),
        SendMessage,
    )

    progress = parse_client_message(b'{"type": "transfer_progress", "data": {"transferId": 3, "progress": 50}}')
    assert isinstance(progress, ReportTransferProgress)
    assert progress.data.transfer_id == 3
    assert progress.data.progress == 50


@pytest.mark.parametrize(
    "raw, detail, field",
    [
        ('{"type": "nope", "data": {}}', "Unrecognized message type", "type"),
        ('{"data": {}}', "Unrecognized message type", "type"),
        ("not json", "Malformed JSON frame", None),
    ],
)
def test_rejects_unknown_or_malformed_frames(raw, detail, field):
    with pytest.raises(ValidationError) as exc_info:
        parse_client_message(raw)

    assert exc_info.value.detail == detail
    assert exc_info.value.field == field


def test_reports_offending_payload_field():
    with pytest.raises(ValidationError) as exc_info:
        parse_client_message('{"type": "transfer_progress", "data": {"transferId": 3, "progress": 500}}')

    assert exc_info.value.field == "progress"


def test_encodes_events():
    event = ErrorEvent(data=ErrorPayload(detail="bad", field="name"))

    assert encode_event(event) == {"type": "error", "data": {"detail": "bad", "field": "name"}}
