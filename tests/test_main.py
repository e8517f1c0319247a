#!/usr/bin/env python3
"""Tests for the fcopy command-line interface."""

import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fcopy import ConsoleProgressReporter, CopyOptions, TqdmProgressReporter
from fcopy.main import main, options_from_args, parse_arguments
from fcopy.util import DEFAULT_BLOCK_SIZE, KB, MB


@pytest.fixture
def cli_env(tmp_path):
    """Source file and directory for CLI runs."""
    source_file = tmp_path / "a.txt"
    source_file.write_bytes(b"hello world" * 100)

    source_dir = tmp_path / "tree"
    (source_dir / "sub").mkdir(parents=True)
    (source_dir / "one.txt").write_text("one")
    (source_dir / "sub" / "two.txt").write_text("two")

    return tmp_path, source_file, source_dir


def test_defaults() -> None:
    args = parse_arguments(["src", "dst"])
    options = options_from_args(args)

    assert args.source == "src"
    assert args.destination == "dst"
    assert options.block_size == DEFAULT_BLOCK_SIZE
    assert not any(
        [
            options.force,
            options.show_progress,
            options.recursive,
            options.show_stats,
            options.remove,
            options.no_dir_err,
            options.verbose,
            options.resume,
        ]
    )
    assert isinstance(options.progress_handler, ConsoleProgressReporter)


def test_all_flags() -> None:
    args = parse_arguments(["-b", "32M", "-p", "-r", "-s", "-f", "-m", "-n", "-v", "-c", "s", "d"])
    options = options_from_args(args)

    assert options.block_size == 32 * MB
    assert options.show_progress
    assert options.recursive
    assert options.show_stats
    assert options.force
    assert options.remove
    assert options.no_dir_err
    assert options.verbose
    assert options.resume


def test_long_flags() -> None:
    args = parse_arguments(
        ["--block-size", "64k", "--progress", "--recursive", "--stats", "--force",
         "--move", "--no-dir-error", "--verbose", "--continue", "s", "d"]
    )
    options = options_from_args(args)

    assert options.block_size == 64 * KB
    assert options.resume
    assert options.no_dir_err


def test_unrecognised_block_size_uses_default() -> None:
    assert parse_arguments(["-b", "lots", "s", "d"]).block_size == DEFAULT_BLOCK_SIZE


def test_zero_block_size_rejected() -> None:
    with pytest.raises(SystemExit) as exc_info:
        parse_arguments(["-b", "0M", "s", "d"])
    assert exc_info.value.code == 2


def test_bar_implies_progress() -> None:
    options = options_from_args(parse_arguments(["--bar", "s", "d"]))
    assert options.show_progress


def test_builder_chain_returns_same_options() -> None:
    options = CopyOptions()
    assert options.with_force(True).with_resume(True) is options
    assert options.force and options.resume
    with pytest.raises(ValueError):
        options.with_block_size(0)
    with pytest.raises(ValueError):
        CopyOptions(block_size=-1)


def test_main_copies_file(cli_env) -> None:
    tmp_path, source_file, _ = cli_env
    dest = tmp_path / "b.txt"

    assert main([str(source_file), str(dest)]) == 0
    assert dest.read_bytes() == source_file.read_bytes()


def test_main_copies_tree_with_progress_and_stats(cli_env, capsys) -> None:
    tmp_path, _, source_dir = cli_env
    dest = tmp_path / "out"

    assert main(["-r", "-p", "-s", str(source_dir), str(dest)]) == 0

    out = capsys.readouterr().out
    assert "Copied file 'one.txt'" in out
    assert "Copied file 'two.txt'" in out
    assert "Transfer speed" in out
    assert (dest / "sub" / "two.txt").read_text() == "two"


def test_main_bar(cli_env) -> None:
    tmp_path, _, source_dir = cli_env

    assert main(["-r", "--bar", str(source_dir), str(tmp_path / "out")]) == 0
    assert (tmp_path / "out" / "one.txt").read_text() == "one"


def test_main_copy_failure(cli_env, capsys) -> None:
    tmp_path, _, source_dir = cli_env

    assert main([str(source_dir), str(tmp_path / "out")]) == 1

    out = capsys.readouterr().out
    assert out.startswith("Copy failed:")
    assert "--recursive" in out
    assert not (tmp_path / "out").exists()


def test_main_move_failure(cli_env, capsys) -> None:
    tmp_path, source_file, _ = cli_env

    assert main(["-m", str(source_file), str(source_file)]) == 1

    assert capsys.readouterr().out.startswith("Move failed:")
    assert source_file.exists()


def test_main_existing_destination(cli_env, capsys) -> None:
    tmp_path, source_file, _ = cli_env
    dest = tmp_path / "b.txt"
    dest.write_text("old")

    assert main([str(source_file), str(dest)]) == 1
    out = capsys.readouterr().out
    assert out.startswith("Copy failed: ")
    assert "exists" in out
    assert "[Errno" not in out

    assert main(["-f", str(source_file), str(dest)]) == 0
    assert dest.read_bytes() == source_file.read_bytes()


def test_main_move_tree(cli_env) -> None:
    tmp_path, _, source_dir = cli_env
    dest = tmp_path / "moved"

    assert main(["-r", "-m", str(source_dir), str(dest)]) == 0
    assert not source_dir.exists()
    assert (dest / "one.txt").read_text() == "one"


def test_main_resume(cli_env) -> None:
    tmp_path, source_file, _ = cli_env
    dest = tmp_path / "partial.txt"
    data = source_file.read_bytes()
    dest.write_bytes(data[:300])

    assert main(["-c", "-b", "1K", str(source_file), str(dest)]) == 0
    assert dest.read_bytes() == data


def test_bar_reporter_installed(monkeypatch, cli_env) -> None:
    tmp_path, source_file, _ = cli_env
    seen = {}

    def fake_copy(src, dst, options):
        seen["handler"] = options.progress_handler

    monkeypatch.setattr("fcopy.main.copy", fake_copy)

    assert main(["--bar", str(source_file), str(tmp_path / "x")]) == 0
    assert isinstance(seen["handler"], TqdmProgressReporter)


def test_main_skipped_file_still_succeeds(cli_env, caplog) -> None:
    tmp_path, _, source_dir = cli_env
    dest = tmp_path / "out"
    target = dest / "tree"
    (target / "sub").mkdir(parents=True)
    (target / "sub" / "two.txt").write_text("old")

    assert main(["-r", "-n", str(source_dir), str(dest)]) == 0

    assert (target / "one.txt").read_text() == "one"
    assert (target / "sub" / "two.txt").read_text() == "old"
    assert "Failed to copy file" in caplog.text
