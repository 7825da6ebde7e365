import io

import pytest

from carlet_core.errors import FrameTooLarge, MalformedHeader, UndecodableVarint
from carlet_core.varint import encode_uvarint
from carlet_split.splitter import FrameSplitter

from conftest import SOURCE_HEADER, TrickleStream, frame


def test_strip_header_returns_first_frame_offset(make_car):
    data = make_car([b"a" * 10])
    fs = FrameSplitter(io.BytesIO(data))
    assert fs.strip_header() == 1 + len(SOURCE_HEADER)


@pytest.mark.parametrize("data", [
    b"",                      # nothing at all
    b"\x00" + b"rest",        # zero length header
    b"\x20" + b"short",       # header claims 32 bytes, has 5
    b"\xff\xff",              # prefix never terminates
])
def test_malformed_header(data):
    with pytest.raises(MalformedHeader):
        FrameSplitter(io.BytesIO(data)).strip_header()


def test_three_frames_target_150(make_car):
    frames = [bytes([i]) * 100 for i in range(3)]
    fs = FrameSplitter(io.BytesIO(make_car(frames)))
    fs.strip_header()

    first, second = io.BytesIO(), io.BytesIO()
    assert fs.fill_shard(first, 150) == 2 * 101
    assert not fs.at_end()
    assert fs.fill_shard(second, 150) == 101
    assert fs.at_end()

    assert first.getvalue() == frame(frames[0]) + frame(frames[1])
    assert second.getvalue() == frame(frames[2])


def test_oversized_frame_is_its_own_shard(make_car):
    big = b"\x42" * int(1.9 * 1024 * 1024)
    fs = FrameSplitter(io.BytesIO(make_car([big])))
    fs.strip_header()
    sink = io.BytesIO()
    fs.fill_shard(sink, 1024)
    assert sink.getvalue() == frame(big)
    assert fs.frame_count == 1
    assert fs.at_end()


def test_empty_after_header(make_car):
    fs = FrameSplitter(io.BytesIO(make_car([])))
    fs.strip_header()
    assert fs.at_end()
    assert fs.fill_shard(io.BytesIO(), 100) == 0


def test_zero_length_frame_is_valid(make_car):
    fs = FrameSplitter(io.BytesIO(make_car([b"", b"abc"])))
    fs.strip_header()
    sink = io.BytesIO()
    fs.fill_shard(sink, 10_000)
    assert sink.getvalue() == b"\x00" + b"\x03abc"
    assert fs.frame_count == 2


def test_non_minimal_length_prefix_is_a_frame(make_car):
    data = make_car([b"a" * 10]) + b"\x80\x00" + frame(b"b" * 10)
    fs = FrameSplitter(io.BytesIO(data))
    fs.strip_header()
    sink = io.BytesIO()
    fs.fill_shard(sink, 10_000)
    assert fs.frame_count == 3
    assert sink.getvalue() == frame(b"a" * 10) + b"\x80\x00" + frame(b"b" * 10)
    assert fs.at_end()


def test_frame_over_ceiling(make_car):
    data = make_car([b"ok"]) + encode_uvarint((2 << 20) + 1)
    fs = FrameSplitter(io.BytesIO(data))
    fs.strip_header()
    with pytest.raises(FrameTooLarge) as exc:
        fs.fill_shard(io.BytesIO(), 10_000)
    assert exc.value.offset == len(make_car([b"ok"]))


def test_trailing_garbage_reports_offset_after_last_frame(make_car):
    good = make_car([b"x" * 50, b"y" * 60])
    fs = FrameSplitter(io.BytesIO(good + b"\xff\xfe\xfd"))
    fs.strip_header()
    sink = io.BytesIO()
    with pytest.raises(UndecodableVarint) as exc:
        fs.fill_shard(sink, 10_000)
    assert exc.value.offset == len(good)
    # Everything before the garbage was copied intact
    assert sink.getvalue() == frame(b"x" * 50) + frame(b"y" * 60)


def test_torn_final_frame_ends_cleanly(make_car):
    data = make_car([b"a" * 40, b"b" * 40])[:-10]
    fs = FrameSplitter(io.BytesIO(data))
    fs.strip_header()
    sink = io.BytesIO()
    with pytest.warns(UserWarning, match="Torn final frame"):
        fs.fill_shard(sink, 10_000)
    assert fs.torn_tail
    assert fs.at_end()
    assert sink.getvalue() == frame(b"a" * 40) + frame(b"b" * 40)[:-10]


def test_slow_stream_splits_the_same(make_car, random_payloads):
    payloads = random_payloads(20, high=400)
    data = make_car(payloads)

    def shards(stream):
        fs = FrameSplitter(stream, buffer_size=127)
        fs.strip_header()
        out = []
        while not fs.at_end():
            sink = io.BytesIO()
            fs.fill_shard(sink, 700)
            out.append(sink.getvalue())
        return out

    assert shards(TrickleStream(data, step=3)) == shards(io.BytesIO(data))
