"""Unit tests for the event-stream decoder."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from chatagent.llm import EventStreamDecoder, delta_content, iter_content, resolve_encoding

RECORD = b'data: {"choices":[{"delta":{"content":"Hi"}}]}\n'


def _split(data: bytes, cuts: list[int]) -> list[bytes]:
    points = sorted(set(cuts))
    starts = [0, *points]
    ends = [*points, len(data)]
    return [data[a:b] for a, b in zip(starts, ends)]


def _decode_all(chunks: list[bytes], **kwargs) -> list[str]:
    decoder = EventStreamDecoder(**kwargs)
    fragments = []
    for chunk in chunks:
        fragments.extend(decoder.feed(chunk))
    return fragments


async def _aiter(chunks):
    for chunk in chunks:
        yield chunk


class TestDeltaContent:
    """Tests for the default content extractor."""

    def test_extracts_first_choice_delta(self):
        payload = {"choices": [{"delta": {"content": "a"}}, {"delta": {"content": "b"}}]}
        assert delta_content(payload) == "a"

    @pytest.mark.parametrize("payload", [
        None,
        [],
        {},
        {"choices": []},
        {"choices": [{}]},
        {"choices": [{"delta": {"role": "assistant"}}]},
        {"choices": [{"delta": {"content": None}}]},
        {"choices": [{"delta": {"content": 42}}]},
    ])
    def test_missing_content_returns_none(self, payload):
        assert delta_content(payload) is None


class TestEventStreamDecoder:
    """Tests for EventStreamDecoder."""

    def test_single_record(self):
        assert _decode_all([RECORD]) == ["Hi"]

    @given(st.lists(st.integers(min_value=0, max_value=len(RECORD)), max_size=12))
    def test_arbitrary_byte_splits_yield_same_fragment(self, cuts: list[int]):
        """Property test: splitting at any byte offsets does not change output."""
        assert _decode_all(_split(RECORD, cuts)) == ["Hi"]

    @given(st.lists(st.integers(min_value=0, max_value=60), max_size=8))
    def test_multibyte_characters_survive_splits(self, cuts: list[int]):
        """Property test: UTF-8 sequences split across chunks decode intact."""
        data = 'data: {"choices":[{"delta":{"content":"你好，世界"}}]}\n'.encode()
        assert _decode_all(_split(data, [c for c in cuts if c <= len(data)])) == ["你好，世界"]

    def test_done_stops_further_emissions(self):
        decoder = EventStreamDecoder()
        fragments = decoder.feed(RECORD + b"data: [DONE]\n" + RECORD + b"garbage\xff\xfe")
        assert fragments == ["Hi"]
        assert decoder.done
        assert decoder.feed(RECORD) == []

    def test_malformed_line_is_skipped(self, caplog):
        data = (
            b'data: {"choices":[{"delta":{"content":"one"}}]}\n'
            b"data: {not json\n"
            b'data: {"choices":[{"delta":{"content":"two"}}]}\n'
        )
        with caplog.at_level("WARNING", logger="chatagent.llm.stream"):
            assert _decode_all([data]) == ["one", "two"]
        assert "malformed" in caplog.text

    def test_incomplete_trailing_line_is_not_emitted(self):
        decoder = EventStreamDecoder()
        assert decoder.feed(RECORD[:-1]) == []
        assert decoder.feed(b"\n") == ["Hi"]

    def test_ignores_blank_comment_and_empty_content_lines(self):
        data = (
            b"\n"
            b": OPENROUTER PROCESSING\n"
            b"event: message\n"
            b'data: {"choices":[{"delta":{"role":"assistant","content":""}}]}\n'
            b"  " + RECORD.rstrip(b"\n") + b"  \r\n"
        )
        assert _decode_all([data]) == ["Hi"]

    def test_custom_extractor(self):
        data = b'data: {"text":"custom"}\n'
        assert _decode_all([data], extract=lambda p: p.get("text")) == ["custom"]

    def test_instances_do_not_share_buffers(self):
        first = EventStreamDecoder()
        second = EventStreamDecoder()
        first.feed(RECORD[:10])
        assert second.feed(RECORD) == ["Hi"]
        assert first.feed(RECORD[10:]) == ["Hi"]

    def test_declared_encoding_is_used(self):
        data = 'data: {"choices":[{"delta":{"content":"caf\u00e9"}}]}\n'.encode("latin-1")
        assert _decode_all([data], encoding="latin-1") == ["caf\u00e9"]

    def test_unknown_encoding_falls_back_to_utf8(self, caplog):
        with caplog.at_level("WARNING", logger="chatagent.llm.stream"):
            assert _decode_all([RECORD], encoding="bogus") == ["Hi"]
        assert "bogus" in caplog.text

    @pytest.mark.parametrize("name", [None, ""])
    def test_missing_encoding_resolves_to_utf8(self, name):
        assert resolve_encoding(name) == "utf-8"


class TestIterContent:
    """Tests for the async iter_content wrapper."""

    @pytest.mark.asyncio
    async def test_yields_fragments_in_order(self):
        chunks = [
            b'data: {"choices":[{"delta":{"content":"Hi"}}]}\ndata: {"choi',
            b'ces":[{"delta":{"content":" there"}}]}\n',
            b"data: [DONE]\n",
        ]
        assert [f async for f in iter_content(_aiter(chunks))] == ["Hi", " there"]

    @pytest.mark.asyncio
    async def test_stops_at_done_and_closes_source(self):
        closed = []

        class Source:
            def __init__(self):
                self._chunks = iter([RECORD, b"data: [DONE]\n", RECORD])

            def __aiter__(self):
                return self

            async def __anext__(self):
                try:
                    return next(self._chunks)
                except StopIteration:
                    raise StopAsyncIteration

            async def aclose(self):
                closed.append(True)

        assert [f async for f in iter_content(Source())] == ["Hi"]
        assert closed == [True]

    @pytest.mark.asyncio
    async def test_empty_stream_yields_nothing(self):
        assert [f async for f in iter_content(_aiter([]))] == []

    @pytest.mark.asyncio
    async def test_source_closed_when_consumer_abandons(self):
        source = _aiter([RECORD, RECORD, RECORD])
        stream = iter_content(source)
        assert await stream.__anext__() == "Hi"
        await stream.aclose()
        with pytest.raises(StopAsyncIteration):
            await source.__anext__()
