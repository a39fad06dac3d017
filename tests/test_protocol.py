from __future__ import annotations

import io

import pytest

from paramsock.protocol import (
    AccumulationBuffer,
    EncodingError,
    FieldTooLargeError,
    Message,
    MissingStartError,
    MissingStartPolicy,
    TruncatedFrameError,
    byte_reader,
    decode_bytes,
    decode_frame,
    encode_message,
    encode_parts,
)


def test_encode_decode_roundtrip():
    msg = Message(
        parts=["LOGIN", "alice", "secret"],
        named_parameters={"client": "cli", "version": "1.0", "flags": "a=b c"},
    )
    decoded = decode_bytes(encode_message(msg))
    assert decoded.parts == msg.parts
    assert decoded.named_parameters == msg.named_parameters


def test_roundtrip_keeps_inner_empty_fields():
    msg = Message(parts=["cmd", "", "x"], named_parameters={"empty": "", "last": "v"})
    assert decode_bytes(encode_message(msg)) == msg


def test_trailing_empty_field_is_dropped():
    assert decode_bytes(b"\x01cmd\x1e\x04") == Message.of("cmd")
    assert decode_bytes(b"\x01cmd\x1ename\x1f\x04") == Message.of("cmd")


def test_encode_layout():
    data = encode_message(Message.of("cmd", "arg", name="value"))
    assert data == b"\x01cmd\x1earg\x1ename\x1fvalue\x04"


def test_encode_parts():
    assert encode_parts("ERROR", "oops") == b"\x01ERROR\x1eoops\x04"


def test_encode_without_parts_is_empty():
    assert encode_message(Message()) == b""
    assert encode_message(Message(named_parameters={"a": "b"})) == b""


def test_encode_non_ascii_raises():
    with pytest.raises(EncodingError):
        encode_message(Message.of("café"))


def test_decode_named_parameter():
    decoded = decode_bytes(b"\x01cmd\x1ename\x1fvalue\x04")
    assert decoded.parts == ["cmd"]
    assert decoded.named_parameters == {"name": "value"}


def test_decode_multiple_parts():
    decoded = decode_bytes(b"\x01a\x1eb\x1ec\x04")
    assert decoded.parts == ["a", "b", "c"]
    assert decoded.named_parameters == {}


def test_decode_empty_frame():
    decoded = decode_bytes(b"\x01\x04")
    assert decoded.parts == []
    assert decoded.named_parameters == {}


def test_first_field_is_always_positional():
    decoded = decode_bytes(b"\x01a\x1fb\x04")
    assert decoded.parts == ["a", "b"]
    assert decoded.named_parameters == {}


def test_named_and_positional_interleaved():
    decoded = decode_bytes(b"\x01cmd\x1ek1\x1fv1\x1epos\x1ek2\x1fv2\x04")
    assert decoded.parts == ["cmd", "pos"]
    assert decoded.named_parameters == {"k1": "v1", "k2": "v2"}


def test_positional_only_frames_decode():
    # frames from peers that never send named parameters
    decoded = decode_bytes(encode_parts("PING", "1", "2"))
    assert decoded == Message.of("PING", "1", "2")


def test_decode_consumes_exactly_one_frame():
    stream = io.BytesIO(b"\x01first\x04\x01second\x1ex\x04trailing")
    read_byte = byte_reader(stream)
    assert decode_frame(read_byte).parts == ["first"]
    assert decode_frame(read_byte).parts == ["second", "x"]
    assert stream.read() == b"trailing"


def test_decode_non_ascii_bytes_are_replaced():
    decoded = decode_bytes(b"\x01caf\xe9\x04")
    assert decoded.parts == ["caf\ufffd"]


def test_missing_start_fails_by_default():
    reported = []
    stream = io.BytesIO(b"Xcmd\x04")
    with pytest.raises(MissingStartError):
        decode_frame(byte_reader(stream), on_error=reported.append)
    assert len(reported) == 1
    assert isinstance(reported[0], MissingStartError)
    assert stream.read() == b"cmd\x04"


def test_missing_start_lenient_continues_from_next_byte():
    reported = []
    decoded = decode_bytes(b"Xcmd\x1earg\x04", on_error=reported.append, missing_start=MissingStartPolicy.LENIENT)
    assert decoded.parts == ["cmd", "arg"]
    assert [type(err) for err in reported] == [MissingStartError]


def test_missing_start_resync_skips_to_next_start():
    reported = []
    decoded = decode_bytes(b"garbage\x01cmd\x04", on_error=reported.append, missing_start="resync")
    assert decoded.parts == ["cmd"]
    assert [type(err) for err in reported] == [MissingStartError]


def test_missing_start_resync_without_start_is_truncated():
    reported = []
    with pytest.raises(TruncatedFrameError):
        decode_bytes(b"garbage", on_error=reported.append, missing_start=MissingStartPolicy.RESYNC)
    assert [type(err) for err in reported] == [MissingStartError, TruncatedFrameError]


def test_missing_start_reported_before_reading_further():
    events = []
    stream = io.BytesIO(b"Xcmd\x04")

    def read_byte():
        events.append("read")
        chunk = stream.read(1)
        return chunk[0] if chunk else None

    decode_frame(read_byte, on_error=lambda err: events.append("report"), missing_start="lenient")
    assert events[:3] == ["read", "report", "read"]


def test_truncated_frame():
    reported = []
    with pytest.raises(TruncatedFrameError):
        decode_bytes(b"\x01partial", on_error=reported.append)
    assert len(reported) == 1
    assert reported[0].to_message().parts == ["ERROR", "Invalid command: stream ended before END_TOKEN was read."]


def test_empty_stream_is_truncated():
    with pytest.raises(TruncatedFrameError):
        decode_bytes(b"")


def test_empty_stream_lenient_reports_missing_start_first():
    reported = []
    with pytest.raises(TruncatedFrameError):
        decode_bytes(b"", on_error=reported.append, missing_start=MissingStartPolicy.LENIENT)
    assert [type(err) for err in reported] == [MissingStartError, TruncatedFrameError]


@pytest.mark.parametrize("policy", [MissingStartPolicy.FAIL, MissingStartPolicy.RESYNC])
def test_empty_stream_strict_policies_report_truncation_only(policy):
    reported = []
    with pytest.raises(TruncatedFrameError):
        decode_bytes(b"", on_error=reported.append, missing_start=policy)
    assert [type(err) for err in reported] == [TruncatedFrameError]


def test_long_field_grows_buffer():
    field = "x" * 10000
    buffer = AccumulationBuffer(16)
    decoded = decode_bytes(encode_parts("cmd", field), buffer=buffer)
    assert decoded.parts == ["cmd", field]
    assert buffer.capacity >= 10000


def test_oversized_field_is_recoverable():
    reported = []
    stream = io.BytesIO(b"\x01cmd\x1e" + b"y" * 64 + b"\x1etail\x04\x01next\x04")
    read_byte = byte_reader(stream)
    buffer = AccumulationBuffer(8, max_size=32)
    with pytest.raises(FieldTooLargeError) as excinfo:
        decode_frame(read_byte, buffer=buffer, on_error=reported.append)
    assert excinfo.value.limit == 32
    assert reported == [excinfo.value]
    assert decode_frame(read_byte, buffer=buffer).parts == ["next"]


def test_oversized_field_reported_before_draining():
    events = []
    stream = io.BytesIO(b"\x01" + b"y" * 8 + b"rest of frame\x04")

    def read_byte():
        events.append("read")
        chunk = stream.read(1)
        return chunk[0] if chunk else None

    with pytest.raises(FieldTooLargeError):
        decode_frame(
            read_byte,
            buffer=AccumulationBuffer(4, max_size=8),
            on_error=lambda err: events.append("report"),
        )
    # START + 8 buffered bytes + the byte that overflowed
    assert events.index("report") == 10
    assert events.count("read") == 1 + 8 + len(b"rest of frame\x04")
