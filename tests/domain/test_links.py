"""Tests for link extraction and resolution."""

from __future__ import annotations

import pytest

from kbcheck.domain.links import (
    Edge,
    Link,
    LinkKind,
    classify_target,
    extract_links,
    normalize_target,
    resolve_links,
)

# ---------------------------------------------------------------------------
# normalize_target / classify_target
# ---------------------------------------------------------------------------


class TestNormalizeTarget:
    @pytest.mark.parametrize(
        "raw",
        ["", "#section", "https://example.com/a.md", "mailto:a@b.c", "//cdn.example/x.md"],
    )
    def test_not_links(self, raw: str) -> None:
        assert normalize_target(raw) is None

    def test_strips_fragment_and_query(self) -> None:
        assert normalize_target("guide.md#install") == "guide.md"
        assert normalize_target("guide.md?plain=1") == "guide.md"

    def test_angle_brackets_and_escapes(self) -> None:
        assert normalize_target("<my guide.md>") == "my guide.md"
        assert normalize_target("my%20guide.md") == "my guide.md"


class TestClassifyTarget:
    def test_kinds(self) -> None:
        assert classify_target("a/GUIDE.md") is LinkKind.DOCUMENT
        assert classify_target("notes.MARKDOWN") is LinkKind.DOCUMENT
        assert classify_target("docs/") is LinkKind.DIRECTORY
        assert classify_target("docs") is LinkKind.BARE
        assert classify_target("image.png") is None

    def test_custom_extensions(self) -> None:
        assert classify_target("page.txt", extensions=(".txt",)) is LinkKind.DOCUMENT
        assert classify_target("page.md", extensions=(".txt",)) is None


# ---------------------------------------------------------------------------
# extract_links
# ---------------------------------------------------------------------------


class TestExtractLinks:
    def test_inline_link(self) -> None:
        links = extract_links("[see guide](./GUIDE.md)")
        assert links == [Link(target="./GUIDE.md", line=1)]

    def test_reading_order_and_lines(self) -> None:
        body = "Intro [a](a.md) and [b](b.md)\n\nLater [c](sub/c.md)\n"
        links = extract_links(body)
        assert [(link.target, link.line) for link in links] == [
            ("a.md", 1),
            ("b.md", 1),
            ("sub/c.md", 3),
        ]

    def test_first_line_offset(self) -> None:
        links = extract_links("\n[a](a.md)", first_line=5)
        assert links[0].line == 6

    def test_duplicates_kept(self) -> None:
        links = extract_links("[a](a.md) [again](a.md)")
        assert len(links) == 2

    def test_skips_urls_and_anchors(self) -> None:
        body = "[x](https://example.com/x.md) [y](#top) [z](mailto:me@example.com)"
        assert extract_links(body) == []

    def test_skips_non_document_targets(self) -> None:
        assert extract_links("[pdf](manual.pdf) [img](diagram.svg)") == []

    def test_skips_images(self) -> None:
        assert extract_links("![diagram](diagram.md)") == []

    def test_link_title(self) -> None:
        links = extract_links('[a](a.md "The A page")')
        assert [link.target for link in links] == ["a.md"]

    def test_nested_brackets_in_text(self) -> None:
        links = extract_links("[see [the] guide](guide.md)")
        assert [link.target for link in links] == ["guide.md"]

    def test_directory_link(self) -> None:
        links = extract_links("[docs](docs/)")
        assert links == [Link(target="docs/", line=1, kind=LinkKind.DIRECTORY)]

    def test_bare_link(self) -> None:
        links = extract_links("[docs](docs)")
        assert links[0].kind is LinkKind.BARE

    def test_reference_definition(self) -> None:
        body = "See [the guide][g].\n\n[g]: ./GUIDE.md\n"
        links = extract_links(body)
        assert [(link.target, link.line) for link in links] == [("./GUIDE.md", 3)]

    def test_fenced_code_block_skipped(self) -> None:
        body = "[real](real.md)\n```markdown\n[fake](fake.md)\n```\n[after](after.md)\n"
        assert [link.target for link in extract_links(body)] == ["real.md", "after.md"]

    def test_tilde_fence_and_longer_closing(self) -> None:
        body = "~~~\n[fake](fake.md)\n~~~~\n[real](real.md)\n"
        assert [link.target for link in extract_links(body)] == ["real.md"]

    def test_mismatched_fence_does_not_close(self) -> None:
        body = "```\n~~~\n[fake](fake.md)\n```\n[real](real.md)\n"
        assert [link.target for link in extract_links(body)] == ["real.md"]

    def test_unclosed_fence_hides_rest(self) -> None:
        assert extract_links("```\n[fake](fake.md)\n") == []

    def test_inline_code_skipped(self) -> None:
        body = "Write `[x](x.md)` to link, like [this](this.md)."
        assert [link.target for link in extract_links(body)] == ["this.md"]

    def test_crlf(self) -> None:
        links = extract_links("line\r\n[a](a.md)\r\n")
        assert links == [Link(target="a.md", line=2)]


# ---------------------------------------------------------------------------
# resolve_links
# ---------------------------------------------------------------------------


KNOWN = {"README.md", "GUIDE.md", "agents/writer.md", "agents/index.md", "skills/README.md"}


def _links(*targets: str) -> list[Link]:
    return [link for t in targets for link in extract_links(f"[x]({t})")]


class TestResolveLinks:
    def test_existing_target_becomes_edge(self) -> None:
        edges, unresolved = resolve_links("README.md", _links("./GUIDE.md"), KNOWN)
        assert edges == [Edge(source="README.md", target="GUIDE.md")]
        assert unresolved == []

    def test_missing_target_is_unresolved(self) -> None:
        edges, unresolved = resolve_links("README.md", _links("./NOPE.md"), KNOWN)
        assert edges == []
        assert [link.target for link in unresolved] == ["./NOPE.md"]

    def test_relative_to_source_directory(self) -> None:
        edges, _ = resolve_links("agents/writer.md", _links("../GUIDE.md"), KNOWN)
        assert edges == [Edge(source="agents/writer.md", target="GUIDE.md")]

    def test_root_relative(self) -> None:
        edges, _ = resolve_links("agents/writer.md", _links("/skills/README.md"), KNOWN)
        assert edges == [Edge(source="agents/writer.md", target="skills/README.md")]

    def test_escaping_root_is_unresolved(self) -> None:
        edges, unresolved = resolve_links("README.md", _links("../README.md"), KNOWN)
        assert edges == []
        assert len(unresolved) == 1

    def test_directory_index(self) -> None:
        edges, _ = resolve_links("README.md", _links("agents/", "skills/"), KNOWN)
        assert [edge.target for edge in edges] == ["agents/index.md", "skills/README.md"]

    def test_directory_without_index_is_broken(self) -> None:
        _, unresolved = resolve_links("README.md", _links("missing/"), KNOWN)
        assert [link.target for link in unresolved] == ["missing/"]

    def test_bare_target_with_index(self) -> None:
        edges, unresolved = resolve_links("README.md", _links("agents"), KNOWN)
        assert [edge.target for edge in edges] == ["agents/index.md"]
        assert unresolved == []

    def test_bare_target_without_index_is_ignored(self) -> None:
        edges, unresolved = resolve_links("README.md", _links("LICENSE"), KNOWN)
        assert edges == []
        assert unresolved == []

    def test_self_link_is_dropped(self) -> None:
        edges, unresolved = resolve_links("GUIDE.md", _links("GUIDE.md", "./GUIDE.md"), KNOWN)
        assert edges == []
        assert unresolved == []

    def test_edges_are_distinct(self) -> None:
        edges, _ = resolve_links("README.md", _links("GUIDE.md", "./GUIDE.md#top"), KNOWN)
        assert edges == [Edge(source="README.md", target="GUIDE.md")]

    def test_one_unresolved_per_distinct_target(self) -> None:
        links = _links("NOPE.md", "NOPE.md", "OTHER.md")
        _, unresolved = resolve_links("README.md", links, KNOWN)
        assert [link.target for link in unresolved] == ["NOPE.md", "OTHER.md"]

    def test_custom_index_names(self) -> None:
        known = {"README.md", "guides/_index.md"}
        edges, _ = resolve_links(
            "README.md", _links("guides/"), known, index_names=("_index.md",)
        )
        assert [edge.target for edge in edges] == ["guides/_index.md"]

    def test_spellings_of_one_missing_path_reported_once(self) -> None:
        links = _links("./NOPE.md", "NOPE.md", "/NOPE.md", "agents/../NOPE.md")
        _, unresolved = resolve_links("README.md", links, KNOWN)
        assert [link.target for link in unresolved] == ["./NOPE.md"]
