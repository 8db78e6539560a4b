"""Unit tests for the safepaths command-line entry point."""

import os
import uuid

import pytest

from safepaths.cli import EXIT_OK, EXIT_REJECTED, EXIT_USAGE, main
from safepaths.domain.context_id import get_context_id


@pytest.fixture(autouse=True)
def quiet_environment(monkeypatch):
    """Keep environment overrides from leaking into CLI defaults."""
    for name in list(os.environ):
        if name.startswith("SAFEPATHS_"):
            monkeypatch.delenv(name)


def test_list_prints_sorted_pairs(capsys):
    """list prints every name=path pair in name order."""
    assert main(["--base", "/srv/app", "list"]) == EXIT_OK

    lines = capsys.readouterr().out.splitlines()
    assert lines == sorted(lines)
    assert "logs=/srv/app/var/logs" in lines
    assert "base=/srv/app" in lines


def test_get_prints_single_path(capsys):
    """get prints the path registered under one name."""
    assert main(["--base", "/srv/app", "get", "uploads"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "/srv/app/public/uploads"


def test_get_with_preset(capsys):
    """Presets are applied before lookup."""
    assert main(["--base", "/srv/app", "--preset", "laravel", "get", "controllers"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == "/srv/app/app/Http/Controllers"


def test_get_unknown_name_is_usage_error(capsys):
    """Unknown names exit with the usage code and a message on stderr."""
    assert main(["--base", "/srv/app", "get", "nonexistent"]) == EXIT_USAGE

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "error: Path 'nonexistent' not found" in captured.err


def test_unknown_preset_is_usage_error(capsys):
    """Unknown presets exit with the usage code."""
    assert main(["--preset", "symfony", "list"]) == EXIT_USAGE
    assert "Unknown preset 'symfony'" in capsys.readouterr().err


def test_join_prints_safe_path(capsys):
    """join prints the sanitized path beneath the named directory."""
    assert main(["--base", "/srv/app", "join", "storage", "app/image.jpg"]) == EXIT_OK

    expected = "/srv/app/var/storage" + os.sep + os.path.join("app", "image.jpg")
    assert capsys.readouterr().out.strip() == expected


def test_join_rejects_traversal(capsys):
    """Traversal attempts exit with the rejection code and the failing rule."""
    assert main(["--base", "/srv/app", "join", "storage", "../../etc/passwd"]) == EXIT_REJECTED

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "rejected [" in captured.err


def test_join_honours_policy(capsys):
    """The uploads policy refuses extensions outside its whitelist."""
    code = main(["--base", "/srv/app", "--policy", "uploads", "join", "uploads", "notes.md"])

    assert code == EXIT_REJECTED
    assert "rejected [extension_not_allowed]" in capsys.readouterr().err


def test_presets_command_lists_bundled_presets(capsys):
    """presets prints one tab-separated line per preset."""
    assert main(["presets"]) == EXIT_OK

    lines = capsys.readouterr().out.splitlines()
    names = [line.split("\t")[0] for line in lines]
    assert names == ["laminas", "laravel", "mezzio", "slim4"]
    assert lines[1].split("\t")[1] == "Laravel"


def test_each_run_is_tagged_with_context_id(capsys):
    """main tags the run with a fresh context ID for its log records."""
    assert main(["presets"]) == EXIT_OK
    first = get_context_id()

    assert main(["presets"]) == EXIT_OK
    second = get_context_id()

    capsys.readouterr()
    assert first is not None and second is not None
    assert uuid.UUID(first).version == 4
    assert first != second
