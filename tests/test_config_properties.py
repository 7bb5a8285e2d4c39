"""
Property-based tests for configuration handling and the CLI.

Uses Hypothesis to verify that configurations survive a save/load cycle.
"""

import dataclasses
import json
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from whazzup_feed.cli import (
    create_default_config,
    create_parser,
    load_config_from_file,
    main,
    save_config_to_file,
)
from whazzup_feed.config import (
    FreshnessPolicy,
    LoggingConfig,
    PipelineConfig,
    StorageConfig,
)
from whazzup_feed.enums import TimeUnit


name_strategy = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_/. ",
    min_size=1,
    max_size=30,
)

file_name_strategy = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyz0123456789_",
    min_size=1,
    max_size=15,
).map(lambda s: f"{s}.txt")


@st.composite
def freshness_policy_strategy(draw) -> FreshnessPolicy:
    """Generate valid FreshnessPolicy objects."""
    return FreshnessPolicy(
        max_age=draw(st.integers(min_value=0, max_value=1000)),
        unit=draw(st.sampled_from(list(TimeUnit))),
    )


@st.composite
def pipeline_config_strategy(draw) -> PipelineConfig:
    """Generate valid PipelineConfig objects."""
    return PipelineConfig(
        app_name=draw(name_strategy),
        status_url=draw(st.sampled_from([
            "https://www.ivao.aero/whazzup/status.txt",
            "https://mirror.example/status.txt",
        ])),
        storage=StorageConfig(
            work_dir=Path(draw(st.sampled_from(["tmp", "/var/lib/whazzup", "data/feed"]))),
            status_file=draw(file_name_strategy),
            snapshot_file=draw(file_name_strategy),
            compressed_file=draw(file_name_strategy),
            clean_file=draw(file_name_strategy),
            json_file=draw(file_name_strategy),
        ),
        status_policy=draw(freshness_policy_strategy()),
        snapshot_policy=draw(freshness_policy_strategy()),
        create_json=draw(st.booleans()),
        http_timeout=draw(st.floats(min_value=0.5, max_value=120.0)),
        feed_encoding=draw(st.sampled_from(["iso-8859-1", "utf-8"])),
        logging=LoggingConfig(
            level=draw(st.sampled_from(["debug", "info", "warn", "error"])),
            output_format=draw(st.sampled_from(["json", "text", "both"])),
        ),
    )


class TestConfigRoundTripProperty:
    """Saved configurations load back unchanged."""

    @given(config=pipeline_config_strategy())
    @settings(max_examples=100)
    def test_save_load_round_trip(self, config: PipelineConfig) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"

            assert save_config_to_file(config, path)
            loaded = load_config_from_file(path)

        assert loaded == config

    def test_defaults(self) -> None:
        config = create_default_config(app_name="my-app")

        assert config.status_policy == FreshnessPolicy(24, TimeUnit.HOURS)
        assert config.snapshot_policy == FreshnessPolicy(5, TimeUnit.MINUTES)
        assert config.storage.status_path == Path("tmp") / "ivao_status.txt"
        assert config.storage.clean_path == Path("tmp") / "clean_whazzup.txt"
        assert not config.create_json

    def test_config_is_immutable(self) -> None:
        config = create_default_config(app_name="my-app")

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.app_name = "other"

    def test_invalid_json_yields_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"
            path.write_text("{not json", encoding="utf-8")

            assert load_config_from_file(path) is None

    def test_unknown_unit_yields_none(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"
            path.write_text(json.dumps({"status_policy": {"unit": "fortnights"}}), encoding="utf-8")

            assert load_config_from_file(path) is None


class TestCliProperty:
    """Configuration commands and offline JSON output."""

    def test_parser_commands(self) -> None:
        parser = create_parser()

        args = parser.parse_args(["fetch", "--target", "out.txt", "--json", "-a", "my-app"])

        assert args.command == "fetch"
        assert args.target == "out.txt"
        assert args.json
        assert args.app_name == "my-app"

    def test_config_init_and_validate(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = str(Path(tmpdir) / "config.json")

            assert main(["config", "init", "--path", path, "--app-name", "my-app"]) == 0
            assert main(["config", "init", "--path", path]) == 1
            assert main(["config", "validate", "--path", path]) == 0
            assert main(["config", "show", "--path", path]) == 0

    def test_validate_rejects_empty_app_name(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"
            save_config_to_file(create_default_config(), path)

            assert main(["config", "validate", "--path", str(path)]) == 1

    def test_json_command_works_offline(self, capsys, monkeypatch) -> None:
        monkeypatch.delenv("WHAZZUP_CREATE_JSON", raising=False)
        line = ":".join(["DLH1", "1", "x", "PILOT"] + ["0"] * 45)

        with tempfile.TemporaryDirectory() as tmpdir:
            work_dir = Path(tmpdir)
            (work_dir / "ivao_status.txt").write_bytes(b"url0=https://x/a.txt\n")
            (work_dir / "clean_whazzup.txt").write_text(line + "\n", encoding="utf-8")

            code = main(["json", "--work-dir", tmpdir, "--app-name", "my-app"])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert [r["callsign"] for r in output["PILOT"]] == ["DLH1"]

    def test_missing_app_name_fails(self, capsys, monkeypatch) -> None:
        monkeypatch.delenv("WHAZZUP_APP_NAME", raising=False)

        with tempfile.TemporaryDirectory() as tmpdir:
            code = main(["status", "--work-dir", tmpdir])

        assert code == 1
        assert "application name" in capsys.readouterr().err
