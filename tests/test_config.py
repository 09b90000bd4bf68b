#
# Copyright 2026 ABSA Group Limited
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

"""Tests for receiver configuration loading and validation."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from alertsync.notify.config import load_config, parse_config, parse_duration
from alertsync.shared.errors import ConfigError

DEFAULTS = {
    "api_url": "https://jira.example.com",
    "user": "bot",
    "password": "secret",
    "issue_type": "Bug",
    "summary": "{{ GroupLabels.alertname }}",
    "reopen_state": "Reopen",
    "reopen_duration": "1h",
    "group_field_name": "Alert Group",
    "group_field_id": "customfield_10001",
}


def _config(receivers: list[dict], defaults: dict | None = None) -> dict:
    return {"defaults": DEFAULTS if defaults is None else defaults, "receivers": receivers}


class TestParseDuration:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("30s", timedelta(seconds=30)),
            ("1h", timedelta(hours=1)),
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("7d", timedelta(days=7)),
            ("2w", timedelta(weeks=2)),
            ("1y", timedelta(days=365)),
            ("250ms", timedelta(milliseconds=250)),
        ],
    )
    def test_valid(self, raw: str, expected: timedelta) -> None:
        assert parse_duration(raw) == expected

    @pytest.mark.parametrize("raw", ["", "1", "h", "1x", "30m1h", "-1h", None])
    def test_invalid(self, raw) -> None:
        with pytest.raises(ConfigError):
            parse_duration(raw)


class TestParseConfig:
    def test_receiver_inherits_defaults(self) -> None:
        config = parse_config(_config([{"name": "team-a", "project": "AAA"}]))

        rc = config.receiver_by_name("team-a")
        assert rc is not None
        assert rc.project == "AAA"
        assert rc.issue_type == "Bug"
        assert rc.reopen_duration == timedelta(hours=1)
        assert rc.label_key == "alertname"
        assert rc.add_group_labels is False
        assert rc.timeout == timedelta(seconds=30)

    def test_receiver_overrides_defaults(self) -> None:
        config = parse_config(
            _config(
                [
                    {
                        "name": "team-a",
                        "project": "AAA",
                        "reopen_duration": "7d",
                        "components": ["{{ CommonLabels.service }}"],
                        "labels": ["alertsync"],
                        "add_group_labels": True,
                        "wont_fix_resolution": "Won't Fix",
                    }
                ]
            )
        )

        rc = config.receivers[0]
        assert rc.reopen_duration == timedelta(days=7)
        assert rc.components == ["{{ CommonLabels.service }}"]
        assert rc.labels == ["alertsync"]
        assert rc.add_group_labels is True
        assert rc.wont_fix_resolution == "Won't Fix"

    def test_unknown_receiver(self) -> None:
        config = parse_config(_config([{"name": "team-a", "project": "AAA"}]))
        assert config.receiver_by_name("team-z") is None

    def test_missing_required_field(self) -> None:
        with pytest.raises(ConfigError, match="project"):
            parse_config(_config([{"name": "team-a"}]))

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="reopen_sate"):
            parse_config(_config([{"name": "team-a", "project": "AAA", "reopen_sate": "Reopen"}]))

    def test_duplicate_names(self) -> None:
        with pytest.raises(ConfigError, match="duplicate"):
            parse_config(_config([{"name": "a", "project": "A"}, {"name": "a", "project": "B"}]))

    def test_no_receivers(self) -> None:
        with pytest.raises(ConfigError):
            parse_config({"defaults": DEFAULTS, "receivers": []})

    def test_invalid_template(self) -> None:
        with pytest.raises(ConfigError, match="team-a"):
            parse_config(_config([{"name": "team-a", "project": "{{ GroupLabels.project"}]))

    def test_components_must_be_strings(self) -> None:
        with pytest.raises(ConfigError, match="components"):
            parse_config(_config([{"name": "team-a", "project": "AAA", "components": "backend"}]))

    @pytest.mark.parametrize("value", ["false", "yes", 0, 1])
    def test_add_group_labels_must_be_boolean(self, value) -> None:
        with pytest.raises(ConfigError, match="add_group_labels"):
            parse_config(_config([{"name": "team-a", "project": "AAA", "add_group_labels": value}]))

    def test_labels_must_be_strings(self) -> None:
        with pytest.raises(ConfigError, match="labels"):
            parse_config(_config([{"name": "team-a", "project": "AAA", "labels": ["ok", 7]}]))

    def test_empty_required_field(self) -> None:
        with pytest.raises(ConfigError, match="issue_type"):
            parse_config(_config([{"name": "team-a", "project": "AAA", "issue_type": ""}]))

    @pytest.mark.parametrize("key", ["reopen_duration", "timeout"])
    def test_invalid_duration(self, key: str) -> None:
        with pytest.raises(ConfigError, match=key):
            parse_config(_config([{"name": "team-a", "project": "AAA", key: "soon"}]))

    def test_timeout_override(self) -> None:
        rc = parse_config(_config([{"name": "team-a", "project": "AAA", "timeout": "5s"}])).receivers[0]
        assert rc.timeout == timedelta(seconds=5)

    def test_config_is_frozen(self) -> None:
        rc = parse_config(_config([{"name": "team-a", "project": "AAA"}])).receivers[0]
        with pytest.raises(ValidationError):
            rc.project = "BBB"

    def test_password_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        defaults = {k: v for k, v in DEFAULTS.items() if k != "password"}
        defaults["password_env"] = "JIRA_PASSWORD"
        monkeypatch.setenv("JIRA_PASSWORD", "from-env")

        rc = parse_config(_config([{"name": "team-a", "project": "AAA"}], defaults)).receivers[0]

        assert rc.password == "from-env"

    def test_password_env_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        defaults = {k: v for k, v in DEFAULTS.items() if k != "password"}
        defaults["password_env"] = "JIRA_PASSWORD"
        monkeypatch.delenv("JIRA_PASSWORD", raising=False)

        with pytest.raises(ConfigError, match="JIRA_PASSWORD"):
            parse_config(_config([{"name": "team-a", "project": "AAA"}], defaults))

    def test_repr_hides_password(self) -> None:
        rc = parse_config(_config([{"name": "team-a", "project": "AAA"}])).receivers[0]
        assert "secret" not in repr(rc)


class TestLoadConfig:
    def test_example_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JIRA_PASSWORD", "pw")
        path = Path(__file__).resolve().parent.parent / "config.example.yml"

        config = load_config(str(path))

        assert [rc.name for rc in config.receivers] == ["team-a", "team-b"]
        assert config.receivers[1].reopen_duration == timedelta(days=7)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(str(tmp_path / "nope.yml"))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yml"
        path.write_text("receivers: [\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="cannot parse"):
            load_config(str(path))
