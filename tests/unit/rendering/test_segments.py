"""Unit tests for fence-based segment classification."""

from chatstream.rendering import Segment, SegmentKind, classify_segments, is_inside_fence


class TestClassifySegments:
    def test_plain_text_is_one_segment(self):
        assert classify_segments("Hello world") == [Segment(SegmentKind.TEXT, "Hello world")]

    def test_empty_buffer_has_no_segments(self):
        assert classify_segments("") == []

    def test_closed_fence_with_language(self):
        segments = classify_segments("Run this:\n```python\nprint(1)\n```\nDone.")

        assert segments == [
            Segment(SegmentKind.TEXT, "Run this:\n"),
            Segment(SegmentKind.CODE, "print(1)\n", "python"),
            Segment(SegmentKind.TEXT, "\nDone."),
        ]

    def test_fence_without_language(self):
        segments = classify_segments("```\nls -la\n```")
        assert segments == [Segment(SegmentKind.CODE, "ls -la\n", None)]

    def test_unterminated_fence_renders_as_code(self):
        segments = classify_segments("Here:\n```py\nprint(1)")

        assert segments[-1] == Segment(SegmentKind.CODE, "print(1)", "py")
        assert segments[-1].is_code

    def test_open_fence_with_partial_info_line(self):
        segments = classify_segments("Here:\n```pyt")
        assert segments == [
            Segment(SegmentKind.TEXT, "Here:\n"),
            Segment(SegmentKind.CODE, "pyt", "pyt"),
        ]

    def test_one_line_fence_is_language_and_content(self):
        segments = classify_segments("Try ```ls -la``` now")
        assert segments == [
            Segment(SegmentKind.TEXT, "Try "),
            Segment(SegmentKind.CODE, "ls -la", "ls -la"),
            Segment(SegmentKind.TEXT, " now"),
        ]

    def test_multiple_blocks_alternate(self):
        text = "a\n```js\nx()\n```\nb\n```\ny\n```"
        kinds = [segment.kind for segment in classify_segments(text)]
        assert kinds == [SegmentKind.TEXT, SegmentKind.CODE, SegmentKind.TEXT, SegmentKind.CODE]


class TestIsInsideFence:
    def test_parity(self):
        assert not is_inside_fence("no fences")
        assert is_inside_fence("```py\nx")
        assert not is_inside_fence("```py\nx\n```")
        assert is_inside_fence("```a```\n```b")


def test_segment_extended_returns_new_instance():
    original = Segment(SegmentKind.CODE, "x = 1", "py")
    extended = original.extended("\ny = 2")

    assert extended == Segment(SegmentKind.CODE, "x = 1\ny = 2", "py")
    assert original.content == "x = 1"
