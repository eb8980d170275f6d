"""Tests for digeststore CLI."""

from pathlib import Path

from typer.testing import CliRunner

# Note: In Click 8.0+, mix_stderr is no longer a CliRunner parameter.
# Stderr output is combined with stdout by default when using CliRunner.invoke()
runner = CliRunner()

EMPTY_SHA512 = (
    "cf83e1357eefb8bdf1542850d66d8007d620e4050b5715dc83f4a921d36ce9ce"
    "47d0d13c5d85f2b0ff8318d2877eec2f63b931bd47417a81a538327af927da3e"
)


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_exists(self) -> None:
        """CLI app can be imported."""
        from digeststore.cli import app

        assert app is not None

    def test_version_flag(self) -> None:
        """--version shows version info."""
        from digeststore import __version__
        from digeststore.cli import app

        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"digeststore version {__version__}" in result.output

    def test_help_flag(self) -> None:
        """--help shows available commands."""
        from digeststore.cli import app

        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("store", "fetch", "path", "exists", "validate"):
            assert command in result.output

    def test_store_requires_root_or_settings(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        source = tmp_path / "file.txt"
        source.write_bytes(b"data")

        result = runner.invoke(app, ["store", str(source)])
        assert result.exit_code == 1
        assert "--settings or --root" in result.output

    def test_root_and_settings_conflict(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        result = runner.invoke(
            app, ["--root", str(tmp_path), "--settings", "x.yaml", "exists", EMPTY_SHA512]
        )
        assert result.exit_code == 1
        assert "not both" in result.output


class TestStoreAndFetch:
    """Round trips through the CLI."""

    def test_store_file_prints_id_and_length(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        source = tmp_path / "empty.txt"
        source.write_bytes(b"")
        root = tmp_path / "store"

        result = runner.invoke(app, ["--root", str(root), "store", str(source)])

        assert result.exit_code == 0
        assert result.stdout.strip() == f"{EMPTY_SHA512}\t0"
        assert (root / "4" / "248" / EMPTY_SHA512).is_file()

    def test_store_multiple_files(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        first = tmp_path / "a"
        first.write_bytes(b"alpha")
        second = tmp_path / "b"
        second.write_bytes(b"beta")

        result = runner.invoke(
            app, ["--root", str(tmp_path / "store"), "store", str(first), str(second)]
        )

        assert result.exit_code == 0
        lines = result.stdout.strip().splitlines()
        assert len(lines) == 2
        assert lines[0].endswith("\t5")
        assert lines[1].endswith("\t4")

    def test_store_from_stdin(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        result = runner.invoke(
            app, ["--root", str(tmp_path / "store"), "store", "-"], input=b""
        )

        assert result.exit_code == 0
        assert result.stdout.strip() == f"{EMPTY_SHA512}\t0"

    def test_store_missing_file(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        result = runner.invoke(
            app, ["--root", str(tmp_path / "store"), "store", str(tmp_path / "missing")]
        )

        assert result.exit_code == 1
        assert "No such file or directory" in result.output

    def test_fetch_to_stdout(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        root = str(tmp_path / "store")
        source = tmp_path / "hello.bin"
        source.write_bytes(b"Hello,\x00world")
        digest = runner.invoke(app, ["--root", root, "store", str(source)]).stdout.split("\t")[0]

        result = runner.invoke(app, ["--root", root, "fetch", digest])

        assert result.exit_code == 0
        assert result.stdout_bytes == b"Hello,\x00world"

    def test_fetch_to_file(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        root = str(tmp_path / "store")
        source = tmp_path / "hello.bin"
        source.write_bytes(b"payload")
        digest = runner.invoke(app, ["--root", root, "store", str(source)]).stdout.split("\t")[0]
        output = tmp_path / "copy.bin"

        result = runner.invoke(app, ["--root", root, "fetch", digest, "--output", str(output)])

        assert result.exit_code == 0
        assert output.read_bytes() == b"payload"

    def test_fetch_unknown_id(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        result = runner.invoke(app, ["--root", str(tmp_path / "store"), "fetch", EMPTY_SHA512])

        assert result.exit_code == 1
        assert "ID not found" in result.output

    def test_path_and_exists(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        root = tmp_path / "store"
        source = tmp_path / "empty"
        source.write_bytes(b"")
        runner.invoke(app, ["--root", str(root), "store", str(source)])

        path_result = runner.invoke(app, ["--root", str(root), "path", EMPTY_SHA512])
        exists_result = runner.invoke(app, ["--root", str(root), "exists", EMPTY_SHA512])
        missing_result = runner.invoke(app, ["--root", str(root), "exists", "0" * 128])

        assert path_result.exit_code == 0
        assert path_result.stdout.strip() == str(root / "4" / "248" / EMPTY_SHA512)
        assert exists_result.exit_code == 0
        assert exists_result.stdout.strip() == "yes"
        assert missing_result.exit_code == 1
        assert "no" in missing_result.output

    def test_custom_levels_and_algorithm(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        root = tmp_path / "store"
        source = tmp_path / "empty"
        source.write_bytes(b"")

        result = runner.invoke(
            app,
            ["--root", str(root), "--levels", "16", "--algorithm", "sha256", "store", str(source)],
        )

        digest = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        assert result.exit_code == 0
        assert result.stdout.strip() == f"{digest}\t0"
        assert (root / "14" / digest).is_file()

    def test_invalid_levels_option(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        result = runner.invoke(
            app, ["--root", str(tmp_path / "store"), "--levels", "", "exists", EMPTY_SHA512]
        )

        assert result.exit_code == 1
        assert "Configuration errors" in result.output


class TestSettingsFile:
    """Commands driven by a settings file."""

    def _write_settings(self, tmp_path: Path, extra: str = "") -> Path:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(f"""
store:
  root: "{tmp_path / 'store'}"
  levels: "8,256"
{extra}
logging:
  level: WARNING
""")
        return config_file

    def test_store_with_settings(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        config_file = self._write_settings(tmp_path)
        source = tmp_path / "empty"
        source.write_bytes(b"")

        result = runner.invoke(app, ["--settings", str(config_file), "store", str(source)])

        assert result.exit_code == 0
        assert (tmp_path / "store" / "4" / "248" / EMPTY_SHA512).is_file()

    def test_missing_settings_file(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        result = runner.invoke(
            app, ["--settings", str(tmp_path / "missing.yaml"), "exists", EMPTY_SHA512]
        )

        assert result.exit_code == 1
        assert "Settings file not found" in result.output

    def test_validate_valid(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        config_file = self._write_settings(tmp_path, '  dir_mask: "0750"')

        result = runner.invoke(app, ["validate", "--settings", str(config_file)])

        assert result.exit_code == 0
        assert "Configuration valid" in result.output
        assert "Levels: 8,256" in result.output
        assert "dir 0o750" in result.output
        assert not (tmp_path / "store").exists()

    def test_validate_invalid(self, tmp_path: Path) -> None:
        from digeststore.cli import app

        config_file = self._write_settings(tmp_path, "  algorithm: crc32")

        result = runner.invoke(app, ["validate", "--settings", str(config_file)])

        assert result.exit_code == 1
        assert "store.algorithm" in result.output
