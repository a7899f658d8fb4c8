"""定位符解析与版本标记归类测试"""

from __future__ import annotations

import pytest

from vcslocator.core.config import Options
from vcslocator.core.exceptions import (
    BadURIError,
    EmptyLocatorError,
    MissingFilePathError,
    ParseError,
    UnsupportedTransportError,
)
from vcslocator.core.locator import Locator, classify_ref, parse
from vcslocator.core.models import Components

SHA = "25c779ba165d1f4fac6fc2ce938bf40c1f8ab1a6"

# =========================================================================
# classify_ref
# =========================================================================


class TestClassifyRef:
    @pytest.mark.parametrize(("ref", "branch_mode", "expected"), [
        ("", False, ("", "", "")),
        ("", True, ("", "", "")),
        (SHA, False, ("", "", SHA)),
        (SHA, True, ("", "", SHA)),
        ("abc1234", False, ("", "", "abc1234")),
        ("abc1234", True, ("", "", "abc1234")),
        ("refs/tags/v1.0", False, ("v1.0", "", "")),
        ("refs/tags/v1.0", True, ("v1.0", "", "")),
        ("refs/heads/main", False, ("", "main", "")),
        ("refs/heads/main", True, ("", "main", "")),
        ("v1.0", False, ("v1.0", "", "")),
        ("main", True, ("", "main", "")),
        ("refs/notes/commits", False, ("", "", "")),
        ("refs/notes/commits", True, ("", "refs/notes/commits", "")),
    ])
    def test_rules(self, ref: str, branch_mode: bool, expected: tuple[str, str, str]) -> None:
        assert classify_ref(ref, branch_mode) == expected

    def test_explicit_prefix_beats_hash_heuristic(self) -> None:
        assert classify_ref("refs/tags/abc1234") == ("abc1234", "", "")
        assert classify_ref(f"refs/heads/{SHA}") == ("", SHA, "")

    @pytest.mark.parametrize("ref", ["ABC1234", "abc123", "abc12345", SHA.upper(), SHA + "0"])
    def test_non_commit_lengths_and_case(self, ref: str) -> None:
        """只有 7 位或 40 位小写十六进制才被视为提交"""
        tag, branch, commit = classify_ref(ref)
        assert commit == ""
        assert tag == ref and branch == ""

    @pytest.mark.parametrize("ref", ["", SHA, "v2", "refs/tags/x", "refs/heads/y", "refs/pull/1/head"])
    def test_at_most_one_field(self, ref: str) -> None:
        for mode in (False, True):
            assert sum(bool(x) for x in classify_ref(ref, mode)) <= 1


# =========================================================================
# parse
# =========================================================================


class TestParse:
    def test_plain_https(self) -> None:
        c = parse("https://github.com/example/test")
        assert c == Components(transport="https", hostname="github.com", repo_path="/example/test")

    def test_full_commit(self) -> None:
        c = parse(f"https://github.com/example/test@{SHA}")
        assert c.commit == SHA and c.ref_string == SHA
        assert c.tag == "" and c.branch == ""

    def test_tool_prefix_ref_as_branch(self) -> None:
        loc = "git+http://github.com/example/test@abcd#%2egithub/dependabot.yaml"
        c = parse(loc, Options().with_ref_as_branch())
        assert c.tool == "git" and c.transport == "http"
        assert c.branch == "abcd" and c.tag == ""
        assert c.sub_path == ".github/dependabot.yaml"

    def test_tool_prefix_ref_as_tag(self) -> None:
        c = parse("git+http://github.com/example/test@abcd#%2egithub/dependabot.yaml")
        assert c.tag == "abcd" and c.branch == ""

    def test_github_slug(self) -> None:
        c = parse("owner/repo")
        assert c == Components(
            tool="git", transport="https", hostname="github.com", repo_path="owner/repo",
        )
        assert c.repo_url() == "https://github.com/owner/repo"

    def test_github_slug_with_ref_and_subpath(self) -> None:
        c = parse("my-org/my_repo@v2#docs/a.md")
        assert c.hostname == "github.com" and c.repo_path == "my-org/my_repo"
        assert c.tag == "v2" and c.sub_path == "docs/a.md"

    def test_file_shorthand(self) -> None:
        c = parse(f"file:///a/b@{SHA}")
        assert c.transport == "file" and c.tool == "git"
        assert c.repo_path == "/a/b" and c.commit == SHA
        assert c.hostname == ""

    def test_file_shorthand_is_not_slug(self) -> None:
        c = parse("file://owner/repo")
        assert c.transport == "file" and c.hostname == ""
        assert c.repo_path == "owner/repo"

    def test_file_with_subpath(self) -> None:
        c = parse("file:///srv/repo@main#docs/guide.md", Options().with_ref_as_branch())
        assert c.repo_path == "/srv/repo" and c.branch == "main"
        assert c.sub_path == "docs/guide.md"

    def test_ssh(self) -> None:
        c = parse("ssh://gitlab.example.com/group/proj@refs/heads/dev#a/b.txt")
        assert c.tool == "" and c.transport == "ssh"
        assert c.hostname == "gitlab.example.com" and c.branch == "dev"
        assert c.repo_url() == "git@gitlab.example.com:group/proj"

    def test_unclassified_ref_kept_literally(self) -> None:
        c = parse("https://github.com/o/r@refs/pull/12/head#f")
        assert c.ref_string == "refs/pull/12/head"
        assert c.unclassified_ref
        assert not (c.tag or c.branch or c.commit)

    def test_hostname_is_lowercased_without_port(self) -> None:
        c = parse("https://GitHub.COM:443/o/r")
        assert c.hostname == "github.com"

    @pytest.mark.parametrize("loc", [
        "https://github.com/o/r@v1#a/b",
        "owner/repo@abc1234",
        "file:///x/y#z",
    ])
    def test_idempotent(self, loc: str) -> None:
        assert parse(loc) == parse(loc)

    def test_locator_wrapper(self) -> None:
        loc = Locator("owner/repo@main")
        assert loc.parse(Options(ref_is_branch=True)).branch == "main"
        assert isinstance(loc, str)


class TestParseErrors:
    def test_empty(self) -> None:
        with pytest.raises(EmptyLocatorError):
            parse("")

    @pytest.mark.parametrize("loc", ["http://github.com/o/r", "ftp://host/x", "svn://h/r"])
    def test_unsupported_transport_without_tool(self, loc: str) -> None:
        with pytest.raises(UnsupportedTransportError) as exc_info:
            parse(loc)
        assert exc_info.value.transport == loc.split(":")[0]

    def test_plain_relative_path_has_no_transport(self) -> None:
        with pytest.raises(UnsupportedTransportError):
            parse("just/a/relative/path")

    def test_file_without_path(self) -> None:
        with pytest.raises(MissingFilePathError):
            parse("file://")

    @pytest.mark.parametrize("loc", [
        "https://github.com/o/r#bad%zzescape",
        "https://github.com/o/r\n",
        "https://[::1/o/r",
    ])
    def test_bad_uri(self, loc: str) -> None:
        with pytest.raises(BadURIError):
            parse(loc)

    def test_all_parse_errors_share_base(self) -> None:
        for loc in ("", "ftp://h/r", "file://"):
            with pytest.raises(ParseError):
                parse(loc)


# =========================================================================
# Components
# =========================================================================


class TestComponents:
    @pytest.mark.parametrize(("transport", "expected"), [
        ("https", "https://h.example/a/b"),
        ("", "https://h.example/a/b"),
        ("ssh", "git@h.example:a/b"),
        ("file", "/a/b"),
        ("http", ""),
        ("svn", ""),
    ])
    def test_repo_url(self, transport: str, expected: str) -> None:
        c = Components(transport=transport, hostname="h.example", repo_path="/a/b")
        assert c.repo_url() == expected

    def test_to_dict(self) -> None:
        d = parse("owner/repo@v1#x").to_dict()
        assert d["tag"] == "v1" and d["sub_path"] == "x" and d["hostname"] == "github.com"
