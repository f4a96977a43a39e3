from __future__ import annotations

from pathlib import Path

import pytest

from betterbuild.errors import SCMError
from betterbuild.model import Lock
from betterbuild.scm import GitSCM

from conftest import git, requires_git


def test_consumes_github_shorthand() -> None:
    scm = GitSCM()

    opts = scm.consumes({"github": "foo/bar", "branch": "dev"})

    assert opts == {"git": "https://github.com/foo/bar.git", "branch": "dev"}
    assert scm.consumes({"path": "../bar"}) is None


def test_matches_same_repository_regardless_of_version() -> None:
    scm = GitSCM()
    a = {"git": "https://github.com/foo/bar.git", "tag": "v1.0"}
    b = {"github": "foo/bar", "tag": "v2.0"}
    c = {"git": "https://github.com/foo/baz.git"}

    assert scm.matches(a, a)
    assert scm.matches(a, b) and scm.matches(b, a)
    assert not scm.matches(a, c) and not scm.matches(c, a)


def test_check_rejects_missing_or_foreign_lock(tmp_path: Path) -> None:
    scm = GitSCM()
    opts = {"git": "https://example.com/x.git"}

    assert not scm.check(tmp_path, opts)
    assert not scm.check(tmp_path, {**opts, "lock": Lock("raw", "whatever")})


def test_clean_missing_path_is_noop(tmp_path: Path) -> None:
    GitSCM().clean(tmp_path / "does-not-exist", {"git": "x"})


@requires_git
def test_checkout_latest_then_check_round_trip(tmp_path: Path, upstream: Path) -> None:
    scm = GitSCM()
    dest = tmp_path / "deps" / "lib"
    opts = {"git": str(upstream)}

    lock = scm.checkout(dest, opts)

    assert lock == Lock("git", git("rev-parse", "HEAD", cwd=upstream))
    assert scm.is_available(dest, opts)
    assert (dest / "lib.py").read_text(encoding="utf-8") == "VERSION = 2\n"
    assert scm.check(dest, {**opts, "lock": lock})


@requires_git
def test_checkout_honours_lock(tmp_path: Path, upstream: Path) -> None:
    scm = GitSCM()
    first = git("rev-parse", "HEAD~1", cwd=upstream)
    dest = tmp_path / "deps" / "lib"

    lock = scm.checkout(dest, {"git": str(upstream), "lock": Lock("git", first)})

    assert lock == Lock("git", first)
    assert (dest / "lib.py").read_text(encoding="utf-8") == "VERSION = 1\n"


@requires_git
def test_update_to_lock_then_check_succeeds(tmp_path: Path, upstream: Path) -> None:
    scm = GitSCM()
    dest = tmp_path / "deps" / "lib"
    opts = {"git": str(upstream)}
    latest = scm.checkout(dest, opts)
    first = Lock("git", git("rev-parse", "HEAD~1", cwd=upstream))

    lock = scm.update(dest, {**opts, "lock": first})

    assert lock == first
    assert scm.check(dest, {**opts, "lock": first})
    assert not scm.check(dest, {**opts, "lock": latest})

    # without a lock the working copy moves back to the latest upstream state
    assert scm.update(dest, opts) == latest


@requires_git
def test_update_picks_up_new_upstream_commits(tmp_path: Path, upstream: Path) -> None:
    scm = GitSCM()
    dest = tmp_path / "deps" / "lib"
    opts = {"git": str(upstream)}
    old = scm.checkout(dest, opts)

    (upstream / "lib.py").write_text("VERSION = 3\n", encoding="utf-8")
    git("commit", "--quiet", "-am", "third", cwd=upstream)

    new = scm.update(dest, opts)

    assert new != old
    assert new == Lock("git", git("rev-parse", "HEAD", cwd=upstream))


@requires_git
def test_checkout_unreachable_fails_without_leaving_a_copy(tmp_path: Path) -> None:
    scm = GitSCM()
    dest = tmp_path / "deps" / "lib"

    with pytest.raises(SCMError) as exc:
        scm.checkout(dest, {"git": str(tmp_path / "no-such-repo")})

    assert exc.value.operation == "checkout"
    assert not dest.exists()
    assert list((tmp_path / "deps").iterdir()) == []


@requires_git
def test_unsatisfiable_lock_is_an_scm_error(tmp_path: Path, upstream: Path) -> None:
    scm = GitSCM()
    dest = tmp_path / "deps" / "lib"
    opts = {"git": str(upstream)}
    scm.checkout(dest, opts)
    bogus = Lock("git", "0" * 40)

    with pytest.raises(SCMError) as exc:
        scm.update(dest, {**opts, "lock": bogus})

    assert exc.value.operation == "update"
    assert scm.is_available(dest, opts)


@requires_git
def test_clean_removes_working_copy(tmp_path: Path, upstream: Path) -> None:
    scm = GitSCM()
    dest = tmp_path / "deps" / "lib"
    opts = {"git": str(upstream)}
    scm.checkout(dest, opts)

    scm.clean(dest, opts)

    assert not dest.exists()
    assert not scm.is_available(dest, opts)


@requires_git
def test_checkout_refuses_a_non_empty_destination(tmp_path: Path, upstream: Path) -> None:
    scm = GitSCM()
    dest = tmp_path / "deps" / "lib"
    dest.mkdir(parents=True)
    (dest / "notes.txt").write_text("mine\n", encoding="utf-8")

    with pytest.raises(SCMError) as exc:
        scm.checkout(dest, {"git": str(upstream)})

    assert exc.value.operation == "checkout"
    assert [p.name for p in dest.iterdir()] == ["notes.txt"]
    assert [p.name for p in (tmp_path / "deps").iterdir()] == ["lib"]
