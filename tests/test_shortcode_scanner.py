"""Tests for ShortcodeScanner."""

import pytest

from blog_builder.exceptions import ShortcodeSyntaxError, UnknownShortcodeError
from blog_builder.models import LiteralSegment, ShortcodeSegment
from blog_builder.parsers import ShortcodeScanner

pytestmark = pytest.mark.order(1)


@pytest.fixture
def scanner(registry) -> ShortcodeScanner:
    return ShortcodeScanner(registry)


def invocations(segments):
    return [s.invocation for s in segments if isinstance(s, ShortcodeSegment)]


def literal_text(segments):
    return "".join(s.text for s in segments if isinstance(s, LiteralSegment))


class TestShortcodeScanner:
    """Test suite for ShortcodeScanner."""

    def test_plain_text(self, scanner):
        segments = scanner.scan("Só texto, nada mais.\n")
        assert segments == [LiteralSegment("Só texto, nada mais.\n")]

    def test_single_shortcode(self, scanner):
        """Shortcode simples com argumento posicional entre aspas."""
        segments = scanner.scan('Antes\n\n{{< video "https://youtu.be/abc" >}}\n\nDepois\n')

        assert len(segments) == 3
        assert segments[0] == LiteralSegment("Antes\n\n")
        (invocation,) = invocations(segments)
        assert invocation.name == "video"
        assert invocation.args == ("https://youtu.be/abc",)
        assert invocation.line == 3
        assert segments[2] == LiteralSegment("\n\nDepois\n")

    def test_keyword_arguments(self, scanner):
        (invocation,) = invocations(
            scanner.scan('{{< video src="https://example.com/a.mp4" title="Demo clip" >}}')
        )
        assert invocation.args == ()
        assert invocation.kwargs == {"src": "https://example.com/a.mp4", "title": "Demo clip"}

    def test_percent_delimiters(self, scanner):
        (invocation,) = invocations(scanner.scan("{{% toc %}}"))
        assert invocation.name == "toc"

    def test_line_offset(self, scanner):
        """Linhas reportadas consideram as linhas do front matter."""
        (invocation,) = invocations(scanner.scan("\n\n{{< toc >}}", line_offset=5))
        assert invocation.line == 8

    def test_fenced_code_is_verbatim(self, scanner):
        """Shortcodes dentro de blocos de código não são expandidos."""
        text = "```markdown\n{{< video \"x\" >}}\n{{< nope >}}\n```\n\n{{< toc >}}\n"

        segments = scanner.scan(text)

        assert [i.name for i in invocations(segments)] == ["toc"]
        assert '{{< video "x" >}}' in literal_text(segments)
        assert "{{< nope >}}" in literal_text(segments)

    def test_tilde_fence_is_verbatim(self, scanner):
        segments = scanner.scan("~~~\n{{< nope >}}\n~~~\n")
        assert invocations(segments) == []

    def test_unclosed_fence_runs_to_end(self, scanner):
        segments = scanner.scan("```\n{{< nope >}}\n")
        assert invocations(segments) == []

    def test_inline_code_is_verbatim(self, scanner):
        text = "Use `{{< toc >}}` para gerar o sumário.\n"
        segments = scanner.scan(text)

        assert invocations(segments) == []
        assert literal_text(segments) == text

    def test_double_backtick_inline_code(self, scanner):
        segments = scanner.scan("Veja ``{{< nope >}} e ` aqui`` ok")
        assert invocations(segments) == []

    def test_escaped_shortcode_is_literal(self, scanner):
        """``{{</* nome */>}}`` produz o texto do shortcode sem expandir."""
        segments = scanner.scan('{{</* video "x" */>}}')

        assert invocations(segments) == []
        assert literal_text(segments) == '{{< video "x" >}}'

    def test_paired_shortcode(self, scanner):
        """Shortcodes pareados capturam a região interna."""
        text = "{{< notice tip >}}\nConteúdo **forte**.\n{{< /notice >}}\nfim"

        segments = scanner.scan(text)

        (invocation,) = invocations(segments)
        assert invocation.name == "notice"
        assert invocation.args == ("tip",)
        assert invocation.inner == "\nConteúdo **forte**.\n"
        assert segments[-1] == LiteralSegment("\nfim")

    def test_nested_paired_shortcodes(self, scanner):
        text = (
            "{{< notice note >}}\nfora\n{{< notice tip >}}dentro{{< /notice >}}\n"
            "{{< /notice >}}"
        )
        (invocation,) = invocations(scanner.scan(text))
        assert "{{< notice tip >}}dentro{{< /notice >}}" in invocation.inner

    def test_unknown_shortcode(self, scanner):
        """Shortcode sem handler gera UnknownShortcodeError com nome e documento."""
        with pytest.raises(UnknownShortcodeError) as exc_info:
            scanner.scan("texto {{< gist user 123 >}}", source="posts/gist.md")

        assert exc_info.value.name == "gist"
        assert "posts/gist.md" in str(exc_info.value)
        assert "gist" in str(exc_info.value)

    def test_unterminated_marker(self, scanner):
        with pytest.raises(ShortcodeSyntaxError):
            scanner.scan("{{< video x")

    def test_missing_close_of_paired(self, scanner):
        with pytest.raises(ShortcodeSyntaxError):
            scanner.scan("{{< notice tip >}}\nsem fechamento\n")

    def test_stray_close(self, scanner):
        with pytest.raises(ShortcodeSyntaxError):
            scanner.scan("{{< /notice >}}")

    def test_empty_shortcode(self, scanner):
        with pytest.raises(ShortcodeSyntaxError):
            scanner.scan("{{<  >}}")
