from pathlib import Path

import pytest

from libs.artifacts.safe_path import make_safe_basename, resolve_safe_path


@pytest.mark.parametrize(
    "relative",
    [
        "../../etc/passwd",
        "/etc/passwd",
        "C:\\Windows\\system32\\evil.ts",
        "con:/../../weird??name.ts",
        "a/../../../b.ts",
        "",
        "..",
    ],
)
def test_resolved_path_never_escapes_root(tmp_path: Path, relative: str) -> None:
    root = tmp_path / "out"
    result = resolve_safe_path(root, relative, "default.ts")
    result.relative_to(root.resolve())
    assert result != root.resolve()


def test_traversal_falls_back_to_sanitized_basename(tmp_path: Path) -> None:
    root = tmp_path / "out"
    assert resolve_safe_path(root, "con:/../../weird??name.ts") == root.resolve() / "weird_name.ts"
    assert resolve_safe_path(root, "../../etc/passwd") == root.resolve() / "passwd"


def test_absolute_and_drive_prefixes_are_made_relative(tmp_path: Path) -> None:
    root = tmp_path / "out"
    assert resolve_safe_path(root, "/etc/passwd") == root.resolve() / "etc" / "passwd"
    assert resolve_safe_path(root, "C:\\specs\\login.spec.ts") == root.resolve() / "specs" / "login.spec.ts"


def test_empty_relative_uses_default_name(tmp_path: Path) -> None:
    assert resolve_safe_path(tmp_path, "", "login.json") == tmp_path.resolve() / "login.json"


def test_make_safe_basename() -> None:
    assert make_safe_basename("weird??name.ts") == "weird_name.ts"
    assert make_safe_basename("my login  page.page.ts") == "my_login_page.page.ts"
    assert make_safe_basename("..hidden..file..") == "hidden.file"
    assert make_safe_basename("CON.txt") == "_CON.txt"
    assert make_safe_basename("???") == "artifact"
    assert make_safe_basename("", fallback="login.json") == "login.json"


def test_make_safe_basename_truncates_but_keeps_extension() -> None:
    name = "a" * 300 + ".spec.ts"
    safe = make_safe_basename(name, max_length=50)
    assert len(safe) <= 50
    assert safe.endswith(".ts")
