"""Tests for text sanitization."""

from swing_mcp.utils.sanitize import sanitize_text, truncate_words


class TestSanitizeText:
    """Tests for sanitize_text function."""

    def test_sanitize_none(self) -> None:
        """Test sanitize returns None for None input."""
        assert sanitize_text(None) is None

    def test_sanitize_basic(self) -> None:
        """Test basic text passthrough."""
        assert sanitize_text("Hello World") == "Hello World"

    def test_sanitize_strips_whitespace(self) -> None:
        """Test whitespace is stripped."""
        assert sanitize_text("  Hello World  ") == "Hello World"

    def test_sanitize_removes_control_chars(self) -> None:
        """Test control characters are removed."""
        assert sanitize_text("Hello\x00World\x1f!") == "HelloWorld!"

    def test_sanitize_removes_carriage_return(self) -> None:
        """Test carriage return is removed."""
        assert sanitize_text("Hello\rWorld") == "HelloWorld"

    def test_sanitize_removes_high_control_chars(self) -> None:
        """Test high control characters (0x7f-0x9f) are removed."""
        assert sanitize_text("Hello\x7fWorld\x9f!") == "HelloWorld!"

    def test_sanitize_newlines_become_spaces(self) -> None:
        """Test newlines and tabs keep words apart."""
        assert sanitize_text("ETF\nflows\tsurged") == "ETF flows surged"

    def test_sanitize_truncates_long_text(self) -> None:
        """Test long text is truncated."""
        result = sanitize_text("A" * 600, max_length=500)

        assert len(result) == 503  # 500 + "..."
        assert result.endswith("...")

    def test_sanitize_exact_max_length(self) -> None:
        """Test text at exact max length."""
        assert sanitize_text("Hello", max_length=5) == "Hello"

    def test_sanitize_preserves_unicode(self) -> None:
        """Test Unicode characters are preserved."""
        assert sanitize_text("Hello 世界 🌍") == "Hello 世界 🌍"

    def test_sanitize_whitespace_only(self) -> None:
        """Test whitespace-only string."""
        assert sanitize_text("   ") == ""


class TestTruncateWords:
    """Tests for truncate_words function."""

    def test_short_text_unchanged(self) -> None:
        """Test text within the limit is returned as-is."""
        text = "Fed cut rates  by 50bp."
        assert truncate_words(text) == text

    def test_exactly_fifty_words(self) -> None:
        """Test exactly 50 words is not truncated."""
        text = " ".join(["word"] * 50)
        assert truncate_words(text) == text

    def test_over_limit(self) -> None:
        """Test 51 words keeps the first 50 and appends the marker."""
        words = [f"w{i}" for i in range(51)]
        result = truncate_words(" ".join(words))

        assert result == " ".join(words[:50]) + "..."

    def test_custom_limit(self) -> None:
        """Test custom word limit."""
        assert truncate_words("a b c d", max_words=2) == "a b..."
