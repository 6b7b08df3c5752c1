"""
Partials collection and partial expansion tests

Tests partial lookup, directory loading, and rendering partials into posts.
"""

import tempfile
from pathlib import Path

import pytest

from pagewright.lib.partials import PartialCollection, name_normalize
from pagewright.lib.renderer import Renderer
from pagewright.lib.errors import MissingPartialError, PartialCycleError, RenderError


BANNER = '<div class="series">Part of the forum tutorial series</div>\n'


class TestNames:
    """Test partial name normalization and lookup"""

    @pytest.mark.parametrize("filename,expected", [
        ("_banner.html.erb", "banner"),
        ("banner.erb", "banner"),
        ("series/_banner.md.erb", "series/banner"),
        ("_tutorial_series.html", "tutorial_series"),
        ("plain", "plain"),
    ])
    def test_name_normalize(self, filename, expected):
        """Leading underscore and template extensions are dropped"""
        assert name_normalize(filename) == expected

    def test_lookup_spellings(self):
        """Common spellings all find the same partial"""
        partials = PartialCollection({"banner": BANNER}, partials_prefix="partials")

        for name in ["banner", "_banner", "/banner", "partials/banner",
                     "/partials/_banner", "banner.html.erb"]:
            assert partials.lookup(name) == BANNER, name
            assert name in partials

    def test_unknown_name(self):
        """Unknown names are not found"""
        partials = PartialCollection({"banner": BANNER})

        assert partials.lookup("footer") is None
        assert "footer" not in partials
        with pytest.raises(KeyError):
            partials["footer"]

    def test_collection_is_read_only(self):
        """Collection cannot be modified after construction"""
        source = {"banner": BANNER}
        partials = PartialCollection(source)
        source["banner"] = "changed"

        assert partials["banner"] == BANNER
        with pytest.raises(TypeError):
            partials["footer"] = "x"

    def test_directory_load(self):
        """Files under a directory load as named partials"""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "partials"
            (root / "series").mkdir(parents=True)
            (root / "_tutorial_series.html.erb").write_text(BANNER)
            (root / "series" / "_nav.erb").write_text("nav\n")

            partials = PartialCollection.directory_load(root)

            assert sorted(partials) == ["series/nav", "tutorial_series"]
            assert partials["tutorial_series"] == BANNER
            assert partials.lookup("partials/series/nav") == "nav\n"


class TestPartialExpansion:
    """Test partial directives in rendered bodies"""

    def test_known_partial_replaced_exactly(self):
        """Directive is replaced by exactly the partial text"""
        renderer = Renderer(partials={"tutorial_series": BANNER})
        output = renderer.body_render("<%= partial 'tutorial_series' %>\nIntro")

        assert output == BANNER + "\nIntro"
        assert "<%" not in output
        assert "partial" not in output

    def test_repeated_partial(self):
        """Each occurrence expands independently"""
        renderer = Renderer(partials={"sep": "---"})
        assert renderer.body_render("a <%= partial 'sep' %> b <%= partial 'sep' %> c") == "a --- b --- c"

    def test_trim_mode_drops_newline(self):
        """A partial closed with -%> is not followed by a blank line"""
        renderer = Renderer(partials={"banner": "Banner\n"})
        assert renderer.body_render("<%= partial 'banner' -%>\nIntro") == "Banner\nIntro"

    def test_unknown_partial(self):
        """Unknown partial raises MissingPartialError"""
        renderer = Renderer(partials={"banner": BANNER})

        with pytest.raises(MissingPartialError) as info:
            renderer.body_render("Intro\n\n<%= partial 'footer' %>", source_name="post.md")

        assert info.value.name == "footer"
        assert info.value.line_number == 3
        assert "post.md:3" in str(info.value)

    def test_nested_partials_rendered(self):
        """Partials are rendered before insertion, including their own directives"""
        renderer = Renderer(partials={
            "outer": "[<%= partial 'inner' %>]",
            "inner": "<%= image_tag 'i.png', alt: 'I' %>",
        })
        output = renderer.body_render("<%= partial 'outer' %>")
        assert output == '[<img src="/images/i.png" alt="I">]'

    def test_missing_nested_partial(self):
        """A missing partial inside a partial names the include path"""
        renderer = Renderer(partials={"outer": "<%= partial 'gone' %>"})

        with pytest.raises(MissingPartialError) as info:
            renderer.body_render("<%= partial 'outer' %>", source_name="post.md")
        assert info.value.source_name == "post.md > outer"

    def test_partial_fences_protected(self):
        """Fenced code inside a partial stays verbatim"""
        partial = "```\n<%= partial 'loop' %>\n```\n"
        renderer = Renderer(partials={"example": partial})

        assert renderer.body_render("<%= partial 'example' %>") == partial

    def test_partial_output_not_rescanned(self):
        """Directive-looking text produced by a partial escape is not expanded again"""
        renderer = Renderer(partials={"demo": "<%%= partial 'x' %>"})
        assert renderer.body_render("<%= partial 'demo' %>") == "<%= partial 'x' %>"

    def test_direct_cycle(self):
        """A partial including itself raises PartialCycleError"""
        renderer = Renderer(partials={"loop": "again <%= partial 'loop' %>"})

        with pytest.raises(PartialCycleError) as info:
            renderer.body_render("<%= partial 'loop' %>")
        assert info.value.chain == ["loop", "loop"]

    def test_indirect_cycle(self):
        """A cycle through several partials is detected"""
        renderer = Renderer(partials={
            "a": "<%= partial 'b' %>",
            "b": "<%= partial 'c' %>",
            "c": "<%= partial '_a' %>",
        })

        with pytest.raises(PartialCycleError) as info:
            renderer.body_render("<%= partial 'a' %>")
        assert info.value.chain == ["a", "b", "c", "a"]

    def test_include_depth_limit(self):
        """Nesting beyond max_include_depth fails"""
        partials = {f"p{i}": f"<%= partial 'p{i + 1}' %>" for i in range(5)}
        partials["p5"] = "end"
        renderer = Renderer(partials=partials, max_include_depth=3)

        with pytest.raises(RenderError, match="nested deeper"):
            renderer.body_render("<%= partial 'p0' %>")

        assert Renderer(partials=partials).body_render("<%= partial 'p0' %>") == "end"
