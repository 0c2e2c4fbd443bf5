import pytest

from must_monitor.services.register_extractor import FrameLengthError, extract
from must_monitor.tests.fake_transport import make_frame


def test_extract_pairs_interior_bytes():
    frame = bytes([0x04, 0x03, 0x04, 0x12, 0x34, 0xAB, 0xCD, 0xEE, 0xFF])
    assert extract(frame, 2) == ["1234", "ABCD"]


def test_extract_returns_exactly_n_entries():
    for n in (1, 2, 21, 74):
        registers = [(i * 257) & 0xFFFF for i in range(n)]
        out = extract(make_frame(registers), n)
        assert len(out) == n
        assert out == [f"{v:04X}" for v in registers]


def test_extract_ignores_header_and_trailer_contents():
    frame = bytes([0xFF, 0xFF, 0xFF, 0x00, 0x01, 0xFF, 0xFF])
    assert extract(frame, 1) == ["0001"]


@pytest.mark.parametrize("length", [0, 6, 8, 46, 48])
def test_extract_rejects_wrong_length(length):
    with pytest.raises(FrameLengthError) as excinfo:
        extract(bytes(length), 1 if length < 10 else 21)
    assert excinfo.value.actual == length


def test_frame_length_error_is_value_error():
    with pytest.raises(ValueError, match="expected 7 got 5"):
        extract(bytes(5), 1)
