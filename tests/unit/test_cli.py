"""Unit tests for the command line interface."""

from syncdiff.cli import apply_overrides, build_parser, main
from syncdiff.config.models import Config, LogLevel


class TestArgumentParsing:
    """Tests for argument parsing and configuration overrides."""

    def test_overrides_are_applied(self):
        """
        Why: Command line arguments take precedence over the configuration file
        What: Tests that every override reaches the configuration
        How: Parses a full argument list and applies it to defaults
        """
        args = build_parser().parse_args(
            [
                "pilot.xml",
                "production.xml",
                "--output",
                "out",
                "--connector",
                "HR",
                "--connector",
                "contoso.com",
                "--changes-only",
                "--log-level",
                "debug",
            ]
        )

        config = apply_overrides(Config(), args)

        assert str(config.input.pilot_path) == "pilot.xml"
        assert str(config.input.production_path) == "production.xml"
        assert str(config.output.directory) == "out"
        assert config.report.connectors == ["HR", "contoso.com"]
        assert config.report.changes_only is True
        assert config.system.log_level is LogLevel.DEBUG

    def test_unset_flags_keep_configuration(self):
        """
        Why: Flags that are not given must not reset configured values
        What: Tests that changes_only stays as configured
        How: Applies arguments without --changes-only to a configured value
        """
        args = build_parser().parse_args([])
        config = Config(report={"changes_only": True})

        apply_overrides(config, args)

        assert config.report.changes_only is True


class TestMain:
    """Tests for the main entry point."""

    def test_writes_report(self, snapshot_files, tmp_path, monkeypatch):
        """
        Why: The CLI is the primary way reports are produced
        What: Tests a successful run and the written report file
        How: Runs main with the sample exports and an output directory
        """
        monkeypatch.delenv("SYNCDIFF_CONFIG_PATH", raising=False)
        monkeypatch.chdir(tmp_path)
        pilot_path, production_path = snapshot_files
        output_dir = tmp_path / "report"

        exit_code = main([str(pilot_path), str(production_path), "--output", str(output_dir)])

        assert exit_code == 0
        report = output_dir / "sync-config-report.html"
        assert report.is_file()
        assert "HR Connector Configuration" in report.read_text(encoding="utf-8")

    def test_missing_snapshot_file(self, snapshot_files, tmp_path, monkeypatch):
        """
        Why: A wrong path must end the run with a failure code, not a traceback
        What: Tests exit code 1 for a non-existent production export
        How: Runs main with a missing production path
        """
        monkeypatch.delenv("SYNCDIFF_CONFIG_PATH", raising=False)
        monkeypatch.chdir(tmp_path)
        pilot_path, _ = snapshot_files

        assert main([str(pilot_path), str(tmp_path / "missing.xml")]) == 1

    def test_missing_arguments(self, tmp_path, monkeypatch):
        """
        Why: Both snapshots are required to compare anything
        What: Tests exit code 1 without snapshot paths
        How: Runs main without positional arguments
        """
        monkeypatch.delenv("SYNCDIFF_CONFIG_PATH", raising=False)
        monkeypatch.chdir(tmp_path)

        assert main([]) == 1

    def test_invalid_configuration(self, snapshot_files, tmp_path):
        """
        Why: Configuration mistakes must be reported before any work is done
        What: Tests exit code 1 for an invalid configuration file
        How: Runs main with a configuration containing an unknown section
        """
        config_path = tmp_path / "syncdiff.yaml"
        config_path.write_text("unknown_section:\n  key: value\n")
        pilot_path, production_path = snapshot_files

        exit_code = main(
            ["--config", str(config_path), str(pilot_path), str(production_path)]
        )

        assert exit_code == 1
        assert not (tmp_path / "sync-config-report.html").exists()
