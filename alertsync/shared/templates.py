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

"""``{{ placeholder }}`` template rendering for issue fields.

Placeholders are dotted paths into the alert group values, optionally
followed by ``| filter`` steps::

    {{ GroupLabels.alertname }}
    {{ CommonLabels.severity | upper }}

Errors do not abort rendering. A :class:`RenderScope` keeps the first error
seen so a batch of fields can be rendered and checked once afterwards.
"""

from __future__ import annotations

import functools
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from .errors import TemplateError

PLACEHOLDER_RE = re.compile(r"\{\{(.*?)\}\}", re.S)
PATH_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z0-9_]+)*$")


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _join(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(_to_text(v) for v in value)
    return _to_text(value)


FILTERS: dict[str, Callable[[Any], str]] = {
    "upper": lambda v: _to_text(v).upper(),
    "lower": lambda v: _to_text(v).lower(),
    "trim": lambda v: _to_text(v).strip(),
    "join": _join,
}


@dataclass(frozen=True)
class _Placeholder:
    start: int
    end: int
    path: tuple[str, ...]
    filters: tuple[str, ...]


@functools.lru_cache(maxsize=256)
def _parse(text: str) -> tuple[_Placeholder, ...]:
    placeholders: list[_Placeholder] = []
    pos = 0
    for match in PLACEHOLDER_RE.finditer(text):
        _check_literal(text[pos:match.start()])
        pos = match.end()

        parts = [p.strip() for p in match.group(1).split("|")]
        path = parts[0]
        if not PATH_RE.match(path):
            raise TemplateError(f"invalid placeholder {match.group(0)!r}")
        for name in parts[1:]:
            if name not in FILTERS:
                raise TemplateError(f"unknown filter {name!r} in {match.group(0)!r}")
        placeholders.append(
            _Placeholder(
                start=match.start(),
                end=match.end(),
                path=tuple(path.split(".")),
                filters=tuple(parts[1:]),
            )
        )
    _check_literal(text[pos:])
    return tuple(placeholders)


def _check_literal(segment: str) -> None:
    if "{{" in segment or "}}" in segment:
        raise TemplateError(f"unbalanced braces near {segment.strip()[:40]!r}")


def _resolve(values: dict[str, Any], path: tuple[str, ...]) -> Any:
    head, rest = path[0], path[1:]
    if head not in values:
        raise TemplateError(f"no value named {head!r}")
    cur: Any = values[head]
    for part in rest:
        if isinstance(cur, dict) and part in cur:
            cur = cur.get(part)
        else:
            # Missing label or annotation keys render empty.
            return ""
    return cur


def render(text: str, values: dict[str, Any]) -> str:
    """Render *text* against *values*, raising :class:`TemplateError`."""
    if not text:
        return ""
    out: list[str] = []
    pos = 0
    for ph in _parse(text):
        out.append(text[pos:ph.start])
        value = _resolve(values, ph.path)
        for name in ph.filters:
            value = FILTERS[name](value)
        out.append(_to_text(value))
        pos = ph.end
    out.append(text[pos:])
    return "".join(out)


def _values_of(data: Any) -> dict[str, Any]:
    if isinstance(data, dict):
        return data
    return data.template_values()


class RenderScope:
    """Renders a batch of templates, remembering the first failure."""

    def __init__(self) -> None:
        self._err: TemplateError | None = None

    @property
    def err(self) -> TemplateError | None:
        return self._err

    def execute(self, text: str, data: Any, logger: logging.Logger | logging.LoggerAdapter) -> str:
        try:
            return render(text, _values_of(data))
        except TemplateError as exc:
            logger.warning("template error: %s (template=%r)", exc, text)
            if self._err is None:
                self._err = exc
            return ""


class Template:
    """Entry point handed to receivers; stateless and safe to share."""

    def scope(self) -> RenderScope:
        return RenderScope()

    def check(self, text: str) -> None:
        """Parse *text* without rendering it, raising on syntax errors."""
        if text:
            _parse(text)
