"""LineBuffer unit tests."""

from __future__ import annotations

from toolproc.runtime.line_buffer import LineBuffer


class TestAppend:
    """Test splitting complete lines."""

    def test_complete_lines(self):
        buffer = LineBuffer()
        assert buffer.append("line1\nline2\n") == ["line1", "line2"]
        assert buffer.pending == ""

    def test_partial_line_is_kept(self):
        buffer = LineBuffer()
        assert buffer.append("line1\nli") == ["line1"]
        assert buffer.pending == "li"
        assert buffer.append("ne2\n") == ["line2"]
        assert buffer.pending == ""

    def test_fragment_without_newline_releases_nothing(self):
        buffer = LineBuffer()
        assert buffer.append("abc") == []
        assert buffer.append("def") == []
        assert buffer.pending == "abcdef"
        assert len(buffer) == 6

    def test_empty_lines_are_lines(self):
        buffer = LineBuffer()
        assert buffer.append("\n\nx\n") == ["", "", "x"]

    def test_empty_text(self):
        buffer = LineBuffer()
        assert buffer.append("") == []

    def test_crlf_stripped(self):
        buffer = LineBuffer()
        assert buffer.append("a\r\nb\r") == ["a"]
        assert buffer.append("\n") == ["b"]

    def test_long_line_in_small_pieces(self):
        buffer = LineBuffer()
        for _ in range(20000):
            assert buffer.append("x") == []
        assert len(buffer) == 20000

        assert buffer.append("y\nz") == ["x" * 20000 + "y"]
        assert buffer.pending == "z"
        assert len(buffer) == 1


class TestDrain:
    """Test end-of-stream flushing."""

    def test_drain_returns_tail(self):
        buffer = LineBuffer()
        buffer.append("line1\nline2")
        assert buffer.drain() == ["line2"]
        assert buffer.pending == ""

    def test_drain_empty(self):
        buffer = LineBuffer()
        buffer.append("line1\n")
        assert buffer.drain() == []

    def test_drain_twice(self):
        buffer = LineBuffer()
        buffer.append("tail")
        assert buffer.drain() == ["tail"]
        assert buffer.drain() == []
