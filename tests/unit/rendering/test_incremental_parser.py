"""Unit tests for the incremental reply parser.

The parser must always produce the same segments as a full classification
of the buffer, while taking the cheap append path when a chunk cannot
change the structure.
"""

import pytest

from chatstream.rendering import IncrementalParser, Segment, SegmentKind, classify_segments


def stream_through(parser: IncrementalParser, chunks: list[str]) -> str:
    """Feed growing buffers and assert equivalence with a full parse each step."""
    text = ""
    for chunk in chunks:
        text += chunk
        assert parser.parse(text) == classify_segments(text), f"mismatch at {text!r}"
    return text


class TestReferentialStability:
    def test_same_text_returns_cached_list(self):
        parser = IncrementalParser()
        first = parser.parse("Hello")
        assert parser.parse("Hello") is first

    def test_final_parse_recomputes(self):
        parser = IncrementalParser()
        parser.parse("Hello")
        full_before = parser.full_parses
        parser.parse("Hello", is_final=True)
        assert parser.full_parses == full_before + 1

    def test_append_keeps_earlier_segment_objects(self):
        parser = IncrementalParser()
        segments = parser.parse("Intro\n\n```py\nx = 1\n")
        head = segments[0]
        updated = parser.parse("Intro\n\n```py\nx = 1\ny")

        assert parser.incremental_appends == 1
        assert updated[0] is head
        assert updated is not segments


class TestIncrementalPath:
    def test_code_example_scenario(self):
        parser = IncrementalParser()

        first = parser.parse("Here is ")
        assert first == [Segment(SegmentKind.TEXT, "Here is ")]
        assert parser.incremental_appends == 1

        second = parser.parse("Here is `code`:")
        assert second == [Segment(SegmentKind.TEXT, "Here is `code`:")]
        assert parser.incremental_appends == 2
        assert parser.full_parses == 0

        third = parser.parse("Here is `code`:\n```py\nprint(1)\n")
        assert parser.full_parses == 1
        assert third == [
            Segment(SegmentKind.TEXT, "Here is `code`:\n"),
            Segment(SegmentKind.CODE, "print(1)\n", "py"),
        ]

    def test_plain_prose_never_full_parses(self):
        parser = IncrementalParser()
        stream_through(parser, ["The ", "quick ", "brown ", "fox ", "jumps."])
        assert parser.full_parses == 0
        assert parser.incremental_appends == 5

    def test_code_body_appends_inside_fence(self):
        parser = IncrementalParser()
        stream_through(parser, ["Code:\n", "```python\n", "def f():", "\n    return 1"])

        assert parser.segments[-1] == Segment(SegmentKind.CODE, "def f():\n    return 1", "python")
        assert parser.incremental_appends >= 1

    def test_non_prefix_buffer_forces_full_parse(self):
        parser = IncrementalParser()
        parser.parse("First reply")
        parser.parse("Other")
        assert parser.full_parses == 1
        assert parser.segments == [Segment(SegmentKind.TEXT, "Other")]


class TestEquivalence:
    @pytest.mark.parametrize(
        "chunks",
        [
            ["Here ", "is ", "`", "``", "py", "thon\n", "x = 1\n", "``", "`\n", "after"],
            ["Text", "\n", "\n", "More text"],
            ["a ", "- item", "\n* two", " [link](x)", " | col |"],
            ["```", "\n", "bare\n", "```"],
            ["Try ``", "`ls", "``", "` now"],
            ["```sh", "ell\n", "echo hi\n", "```", "\n\nDone", "."],
        ],
    )
    def test_matches_full_classification_at_every_step(self, chunks):
        parser = IncrementalParser()
        text = stream_through(parser, chunks)
        assert parser.parse(text, is_final=True) == classify_segments(text)

    def test_fence_split_across_chunks(self):
        parser = IncrementalParser()
        stream_through(parser, ["Look: `", "`", "`js\nlet a", " = 1;"])
        assert parser.segments[-1].is_code
        assert parser.segments[-1].language == "js"


def test_reset_clears_state():
    parser = IncrementalParser()
    parser.parse("```py\nx")
    parser.reset()

    assert parser.segments == []
    assert parser.last_text == ""
    assert parser.full_parses == 0
    assert parser.incremental_appends == 0
