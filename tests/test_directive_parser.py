"""
Directive parser tests

Tests finding <%= %> directives, argument parsing, fenced code protection
and escapes.
"""

import pytest

from pagewright.lib.parser import DirectiveParser
from pagewright.lib.errors import (
    DirectiveSyntaxError,
    MissingAttributeError,
    UnsupportedDirectiveError,
)
from pagewright.models.directives import DirectiveKind, ImageTag, Partial


def directives_of(source, **kwargs):
    return DirectiveParser(source, **kwargs).scan().directives()


class TestPartialDirective:
    """Test partial directive forms"""

    def test_single_quoted(self):
        """Ruby-style partial with single-quoted name"""
        directives = directives_of("<%= partial 'tutorial_series' %>")

        assert len(directives) == 1
        assert isinstance(directives[0], Partial)
        assert directives[0].name == "tutorial_series"
        assert directives[0].kind is DirectiveKind.PARTIAL

    def test_parenthesised_double_quoted(self):
        """Parenthesised call with double-quoted name"""
        directives = directives_of('<%= partial("series/banner") %>')
        assert directives[0].name == "series/banner"

    def test_abstract_form(self):
        """Bare-word name as in `partial name`"""
        directives = directives_of("<%= partial banner %>")
        assert directives[0].name == "banner"

    def test_trim_mode_close(self):
        """-%> closes a tag like %> and swallows the newline after it"""
        parser = DirectiveParser("<%= partial 'banner' -%>\nnext line\n")
        scanned = parser.scan()

        assert scanned.directives()[0].name == "banner"
        assert scanned.segments[-1] == "next line\n"

    def test_stray_open_tag_does_not_swallow_directive(self):
        """An unclosed <%= in prose does not hide the directive after it"""
        directives = directives_of("ERB uses <%= too.\n<%= partial 'banner' %>\n")

        assert len(directives) == 1
        assert directives[0].name == "banner"
        assert directives[0].line_number == 2

    def test_missing_name(self):
        """partial with no argument raises MissingAttributeError"""
        with pytest.raises(MissingAttributeError) as info:
            directives_of("Text\n<%= partial %>", source_name="post.md")
        assert info.value.helper == "partial"
        assert info.value.line_number == 2

    def test_raw_text_kept(self):
        """Directive remembers its original text"""
        directives = directives_of("x <%= partial 'a' %> y")
        assert directives[0].raw == "<%= partial 'a' %>"


class TestImageTagDirective:
    """Test image_tag directive forms"""

    def test_ruby_keywords(self):
        """Path plus Ruby 1.9 keyword attributes"""
        directives = directives_of("<%= image_tag 'foo.png', alt: 'Foo', class: 'screenshot' %>")

        assert isinstance(directives[0], ImageTag)
        assert directives[0].path == "foo.png"
        assert directives[0].attributes == {"alt": "Foo", "class": "screenshot"}

    def test_hash_rockets(self):
        """Hash-rocket keywords with symbol and string keys"""
        directives = directives_of('<%= image_tag "foo.png", :alt => "Foo", "data-x" => \'1\' %>')
        assert directives[0].attributes == {"alt": "Foo", "data-x": "1"}

    def test_abstract_form(self):
        """`image path attr=value` form"""
        directives = directives_of('<%= image shots/one.png alt="First shot" width=640 %>')

        assert directives[0].path == "shots/one.png"
        assert directives[0].attributes == {"alt": "First shot", "width": "640"}

    def test_attribute_order_preserved(self):
        """Attributes keep source order"""
        directives = directives_of("<%= image_tag 'a.png', title: 't', alt: 'a', id: 'i' %>")
        assert list(directives[0].attributes) == ["title", "alt", "id"]

    def test_escaped_quotes_in_values(self):
        """Backslash escapes inside quoted values are unescaped"""
        directives = directives_of(r"""<%= image_tag 'a.png', alt: 'It\'s here', title: "say \"hi\"" %>""")
        assert directives[0].attributes == {"alt": "It's here", "title": 'say "hi"'}

    def test_nil_attribute_omitted(self):
        """An attribute set to nil is dropped"""
        directives = directives_of("<%= image_tag 'a.png', alt: nil %>")
        assert directives[0].attributes == {}

    def test_missing_path(self):
        """image_tag with only attributes raises MissingAttributeError"""
        with pytest.raises(MissingAttributeError) as info:
            directives_of("<%= image_tag alt: 'Foo' %>")
        assert info.value.attribute == "path"

    def test_extra_positional(self):
        """A second positional argument is a syntax error"""
        with pytest.raises(DirectiveSyntaxError):
            directives_of("<%= image_tag 'a.png', 'b.png' %>")

    def test_keyword_without_value(self):
        """A trailing keyword with no value is a syntax error"""
        with pytest.raises(DirectiveSyntaxError, match="no value"):
            directives_of("<%= image_tag 'a.png', alt: %>")

    def test_hash_argument_rejected(self):
        """Hash literals are not supported"""
        with pytest.raises(DirectiveSyntaxError):
            directives_of("<%= image_tag 'a.png', data: {x: 1} %>")


class TestFencedCode:
    """Test fenced code protection"""

    def test_directive_in_fence_not_found(self):
        """Directive-like text inside a fence is not a directive"""
        source = "Before\n```erb\n<%= partial 'x' %>\n```\nAfter <%= partial 'y' %>\n"
        directives = directives_of(source)

        assert [d.name for d in directives] == ["y"]

    def test_fence_blocks_stored_verbatim(self):
        """Protected block includes its fence lines"""
        parser = DirectiveParser("A\n```\n<%= partial 'x' %>\n```\nB")
        protected = parser.codefences_protect(parser.source)

        assert protected.fences == {0: "```\n<%= partial 'x' %>\n```\n"}
        assert protected.text == "A\n\x00FENCE_0\x00B"

    def test_longer_closing_fence(self):
        """A fence closes only on at least as many backticks"""
        source = "````\n```\n<%= partial 'x' %>\n```\n````\n<%= partial 'y' %>"
        assert [d.name for d in directives_of(source)] == ["y"]

    def test_unclosed_fence_runs_to_end(self):
        """An unclosed fence protects the rest of the body"""
        source = "<%= partial 'a' %>\n```\n<%= partial 'b' %>\n"
        assert [d.name for d in directives_of(source)] == ["a"]

    def test_indented_fence(self):
        """Fences inside list items may be indented"""
        source = "1. Step\n   ```\n   <%= partial 'x' %>\n   ```\n"
        assert directives_of(source) == []

    def test_inline_backticks_not_a_fence(self):
        """Triple backticks mid-line do not open a fence"""
        source = "Use ``` carefully <%= partial 'x' %>\n"
        assert [d.name for d in directives_of(source)] == ["x"]

    def test_line_numbers_count_fenced_lines(self):
        """Line numbers include lines hidden inside fences"""
        source = "one\n```\na\nb\nc\n```\n<%= partial 'x' %>"
        directives = directives_of(source, first_line=10)
        assert directives[0].line_number == 16


class TestEscapesAndUnsupported:
    """Test <%% escapes and directive kinds outside the supported set"""

    def test_escape_not_expanded(self):
        """<%%= ... %> is not a directive and restores to <%="""
        parser = DirectiveParser("Write <%%= partial 'x' %> to include")
        scanned = parser.scan()

        assert scanned.directives() == []
        restored = "".join(parser.segment_restore(s) for s in scanned.segments)
        assert restored == "Write <%= partial 'x' %> to include"

    def test_unsupported_left_as_text(self):
        """Unknown helpers stay in the literal text"""
        parser = DirectiveParser("<%= link_to 'Home', '/' %>", strict=False)
        scanned = parser.scan()

        assert scanned.directives() == []
        assert scanned.segments == ["<%= link_to 'Home', '/' %>"]

    def test_unsupported_strict(self):
        """Strict mode raises on unknown helpers"""
        with pytest.raises(UnsupportedDirectiveError) as info:
            directives_of("<%= current_article.title %>", strict=True)
        assert info.value.helper == "current_article.title"

    def test_non_output_tags_ignored(self):
        """<% code %> tags are not output directives"""
        assert directives_of("<% if true %>x<% end %>", strict=True) == []

    def test_segments_interleave(self):
        """Literal text and directives alternate in source order"""
        scanned = DirectiveParser("a <%= partial 'p' %> b <%= image_tag 'i.png' %> c").scan()

        kinds = [type(s).__name__ for s in scanned.segments]
        assert kinds == ["str", "Partial", "str", "ImageTag", "str"]
        assert scanned.segments[0] == "a "
        assert scanned.segments[-1] == " c"
