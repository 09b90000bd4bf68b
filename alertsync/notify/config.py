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

"""Receiver configuration: YAML loading, ``defaults`` inheritance,
duration parsing and validation.
"""

from __future__ import annotations

import os
import re
from datetime import timedelta
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..shared.errors import ConfigError, TemplateError
from ..shared.templates import Template

DURATION_RE = re.compile(
    r"^((?P<y>\d+)y)?((?P<w>\d+)w)?((?P<d>\d+)d)?((?P<h>\d+)h)?"
    r"((?P<m>\d+)m)?((?P<s>\d+)s)?((?P<ms>\d+)ms)?$"
)
_DURATION_UNITS: dict[str, timedelta] = {
    "y": timedelta(days=365),
    "w": timedelta(weeks=1),
    "d": timedelta(days=1),
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}

TEMPLATE_FIELDS = ("project", "issue_type", "summary", "description", "priority")


def parse_duration(raw: Any) -> timedelta:
    """Parse ``1h30m``-style durations (units ``y w d h m s ms``)."""
    text = str(raw or "").strip()
    match = DURATION_RE.match(text)
    if not text or match is None or not any(match.groupdict().values()):
        raise ConfigError(f"invalid duration {raw!r}")
    total = timedelta()
    for unit, count in match.groupdict().items():
        if count:
            total += int(count) * _DURATION_UNITS[unit]
    return total


class ReceiverConfig(BaseModel):
    """One JIRA receiver, after ``defaults`` have been merged in.

    Attributes:
        project, issue_type, summary, description, priority, components:
            ``{{ ... }}`` templates rendered per notification.
        reopen_duration: How long after resolution an issue is reopened
            instead of a new one being created.
        group_field_name, group_field_id: The custom field holding the
            group identity, by JQL name and by field id.
        password_env: Environment variable read when ``password`` is empty.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    api_url: str = Field(min_length=1)
    user: str = Field(min_length=1)
    password: str = Field(default="", repr=False)
    password_env: str = Field(default="", repr=False)
    project: str = Field(min_length=1)
    issue_type: str = Field(min_length=1)
    summary: str = Field(min_length=1)
    reopen_state: str = Field(min_length=1)
    reopen_duration: timedelta
    group_field_name: str = Field(min_length=1)
    group_field_id: str = Field(min_length=1)
    description: str = ""
    priority: str = ""
    components: list[str] = Field(default_factory=list, strict=True)
    labels: list[str] = Field(default_factory=list, strict=True)
    wont_fix_resolution: str = ""
    label_key: str = Field(default="alertname", min_length=1)
    add_group_labels: bool = Field(default=False, strict=True)
    timeout: timedelta = timedelta(seconds=30)

    @model_validator(mode="before")
    @classmethod
    def resolve_password(cls, data: Any) -> Any:
        """Fill ``password`` from ``password_env`` when it is not given inline."""
        if not isinstance(data, dict) or data.get("password"):
            return data
        env_name = data.get("password_env")
        if not env_name:
            raise ValueError("missing password or password_env")
        value = os.getenv(str(env_name))
        if not value:
            raise ValueError(f"environment variable {env_name} is not set")
        return {**data, "password": value}

    @field_validator("reopen_duration", "timeout", mode="before")
    @classmethod
    def validate_duration(cls, v: Any) -> timedelta:
        if isinstance(v, timedelta):
            return v
        try:
            return parse_duration(v)
        except ConfigError as exc:
            raise ValueError(str(exc)) from exc


class Config(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    receivers: list[ReceiverConfig] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_unique_names(self) -> Config:
        seen: set[str] = set()
        for rc in self.receivers:
            if rc.name in seen:
                raise ValueError(f"duplicate receiver name {rc.name!r}")
            seen.add(rc.name)
        return self

    def receiver_by_name(self, name: str) -> ReceiverConfig | None:
        for rc in self.receivers:
            if rc.name == name:
                return rc
        return None


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(parts)


def build_receiver(defaults: dict[str, Any], raw: dict[str, Any], template: Template) -> ReceiverConfig:
    """Merge *raw* over *defaults*, validate it and check its templates."""
    if not isinstance(raw, dict):
        raise ConfigError("each receiver must be a mapping")
    merged = {**defaults, **raw}
    name = merged.get("name") or ""

    try:
        rc = ReceiverConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"receiver {name!r}: {_describe(exc)}") from exc

    for text in [getattr(rc, k) for k in TEMPLATE_FIELDS] + rc.components:
        try:
            template.check(text)
        except TemplateError as exc:
            raise ConfigError(f"receiver {name!r}: {exc}") from exc
    return rc


def parse_config(data: Any, template: Template | None = None) -> Config:
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping")
    template = template or Template()

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigError("defaults must be a mapping")
    defaults = {k: v for k, v in defaults.items() if k != "name"}

    raw_receivers = data.get("receivers") or []
    if not isinstance(raw_receivers, list) or not raw_receivers:
        raise ConfigError("at least one receiver must be configured")

    receivers = [build_receiver(defaults, raw, template) for raw in raw_receivers]
    try:
        return Config(receivers=receivers)
    except ValidationError as exc:
        raise ConfigError(_describe(exc)) from exc


def load_config(path: str, template: Template | None = None) -> Config:
    if not os.path.exists(path):
        raise ConfigError(f"configuration file not found: {path}")
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {path}: {exc}") from exc
    return parse_config(data, template)
