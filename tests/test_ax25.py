"""Tests for AX.25 / TNC2 header parsing."""

import pytest

from packetmap.ax25 import (
    decode_ax25_address,
    parse_binary_header,
    parse_header,
    parse_text_header,
    split_callsign,
)
from packetmap.errors import DecodeError, HeaderError
from tests.framing import build_ui_frame, encode_ax25_address

PAYLOAD = b"!4903.50N/07201.75W-Test"


class TestCallsigns:

    def test_split_with_ssid(self):
        assert split_callsign("n0call-9") == ("N0CALL", 9)

    def test_split_without_ssid(self):
        assert split_callsign("APRS") == ("APRS", 0)

    def test_split_strips_used_marker(self):
        assert split_callsign("WIDE1-1*") == ("WIDE1", 1)

    @pytest.mark.parametrize("call", ["", "-1", "TOOLONG", "N0CALL-16", "N0CALL-X", "N0/CAL"])
    def test_split_rejects_invalid(self, call):
        with pytest.raises(ValueError):
            split_callsign(call)

    def test_address_round_trip(self):
        field = encode_ax25_address("N0CALL-9", is_last=True)
        assert len(field) == 7
        assert decode_ax25_address(field, 0) == ("N0CALL-9", 7, True)

    def test_has_been_used_bit(self):
        assert encode_ax25_address("WIDE1-1*")[6] & 0x80

    def test_decode_is_lenient_about_padding(self):
        # NUL padding instead of spaces
        field = bytes(ord(c) << 1 for c in "AB") + b"\x00" * 4 + bytes([0x61])
        assert decode_ax25_address(field, 0) == ("AB", 7, True)

    def test_decode_empty_callsign(self):
        field = bytes([0x40] * 6 + [0x60])
        with pytest.raises(HeaderError):
            decode_ax25_address(field, 0)

    def test_decode_truncated(self):
        with pytest.raises(HeaderError):
            decode_ax25_address(b"\x9c\x60", 0)


class TestBinaryHeader:

    @pytest.mark.parametrize("hops", range(0, 9))
    def test_source_is_second_field(self, hops):
        path = [f"DIGI{i}" for i in range(hops)]
        frame = build_ui_frame("N0CALL-9", "APRS", path, PAYLOAD)
        assert parse_binary_header(frame) == ("N0CALL-9", PAYLOAD)

    def test_too_short(self):
        with pytest.raises(HeaderError):
            parse_binary_header(b"\x00" * 15)

    def test_short_frame_is_decode_error(self):
        with pytest.raises(DecodeError):
            parse_header(b"\x9c\x60\x86")

    def test_non_ui_control_rejected(self):
        frame = bytearray(build_ui_frame("N0CALL", "APRS", None, PAYLOAD))
        frame[14] = 0x13
        with pytest.raises(HeaderError):
            parse_binary_header(bytes(frame))

    def test_other_pid_accepted(self):
        frame = bytearray(build_ui_frame("N0CALL", "APRS", None, PAYLOAD))
        frame[15] = 0xCF
        assert parse_binary_header(bytes(frame)) == ("N0CALL", PAYLOAD)

    def test_missing_end_of_address_bit(self):
        frame = b"".join(encode_ax25_address("N0CALL") for _ in range(11)) + b"\x03\xf0"
        with pytest.raises(HeaderError):
            parse_binary_header(frame)

    def test_address_path_past_end(self):
        frame = encode_ax25_address("APRS") + encode_ax25_address("N0CALL") + b"\x03\xf0"
        with pytest.raises(HeaderError):
            parse_binary_header(frame)

    def test_missing_control_and_pid(self):
        frame = (encode_ax25_address("APRS") + encode_ax25_address("N0CALL")
                 + encode_ax25_address("WIDE1-1", is_last=True))
        with pytest.raises(HeaderError):
            parse_binary_header(frame)

    def test_empty_information_field(self):
        frame = build_ui_frame("N0CALL", "APRS", None, b"")
        assert parse_binary_header(frame) == ("N0CALL", b"")

    def test_embedded_tnc2_header_is_stripped(self):
        frame = build_ui_frame("WIDE1", "APRS", None, b"N0CALL>APRS,WIDE1-1:" + PAYLOAD)
        assert parse_binary_header(frame) == ("WIDE1", PAYLOAD)

    def test_message_payload_is_not_stripped(self):
        info = b":N0CALL   :a>b:c"
        frame = build_ui_frame("K1ABC", "APRS", None, info)
        assert parse_binary_header(frame) == ("K1ABC", info)


class TestTextHeader:

    def test_basic_line(self):
        line = b"N0CALL-9>APRS,WIDE1-1,qAR,K1ABC:" + PAYLOAD
        assert parse_text_header(line) == ("N0CALL-9", PAYLOAD)

    def test_payload_may_contain_colons(self):
        assert parse_text_header(b"K1ABC>APRS::N0CALL   :hi") == ("K1ABC", b":N0CALL   :hi")

    def test_missing_source_separator(self):
        with pytest.raises(HeaderError):
            parse_text_header(b"N0CALL:hello")

    def test_empty_source(self):
        with pytest.raises(HeaderError):
            parse_text_header(b">APRS:hello")

    def test_source_too_long(self):
        with pytest.raises(HeaderError):
            parse_text_header(b"ABCDEFGHIJ>APRS:hello")

    def test_nine_character_source(self):
        assert parse_text_header(b"ABCDEF-12>APRS:x") == ("ABCDEF-12", b"x")


class TestAutoDetect:

    def test_detects_text(self):
        assert parse_header(b"N0CALL>APRS:" + PAYLOAD) == ("N0CALL", PAYLOAD)

    def test_detects_binary(self, ui_frame):
        frame = ui_frame(b":N0CALL   :Hello{001")
        assert parse_header(frame) == ("N0CALL-9", b":N0CALL   :Hello{001")

    def test_binary_without_colon(self, ui_frame):
        assert parse_header(ui_frame(PAYLOAD)) == ("N0CALL-9", PAYLOAD)
