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

"""Alertmanager webhook payload model: label sets, alerts and the grouped
notification data handed to receivers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple

ALERT_FIRING = "firing"
ALERT_RESOLVED = "resolved"


class Pair(NamedTuple):
    name: str
    value: str


class KV(dict[str, str]):
    """Label or annotation set; iteration helpers always sort by name."""

    def sorted_pairs(self) -> list[Pair]:
        return [Pair(name, self[name]) for name in sorted(self)]

    @classmethod
    def from_json(cls, obj: dict[str, Any] | None) -> KV:
        return cls({str(k): str(v) for k, v in (obj or {}).items()})


@dataclass
class Alert:
    status: str
    labels: KV = field(default_factory=KV)
    annotations: KV = field(default_factory=KV)
    starts_at: str = ""
    ends_at: str = ""
    generator_url: str = ""

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> Alert:
        return cls(
            status=str(obj.get("status") or ""),
            labels=KV.from_json(obj.get("labels")),
            annotations=KV.from_json(obj.get("annotations")),
            starts_at=str(obj.get("startsAt") or ""),
            ends_at=str(obj.get("endsAt") or ""),
            generator_url=str(obj.get("generatorURL") or ""),
        )

    def template_values(self) -> dict[str, Any]:
        return {
            "Status": self.status,
            "Labels": dict(self.labels),
            "Annotations": dict(self.annotations),
            "StartsAt": self.starts_at,
            "EndsAt": self.ends_at,
            "GeneratorURL": self.generator_url,
        }


@dataclass
class Data:
    """One grouped notification as posted by Alertmanager (payload version 4)."""

    receiver: str
    status: str
    alerts: list[Alert] = field(default_factory=list)
    group_labels: KV = field(default_factory=KV)
    common_labels: KV = field(default_factory=KV)
    common_annotations: KV = field(default_factory=KV)
    external_url: str = ""
    group_key: str = ""

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> Data:
        if not isinstance(obj, dict):
            raise ValueError("alertmanager payload must be a JSON object")
        return cls(
            receiver=str(obj.get("receiver") or ""),
            status=str(obj.get("status") or ""),
            alerts=[Alert.from_json(a) for a in obj.get("alerts") or [] if isinstance(a, dict)],
            group_labels=KV.from_json(obj.get("groupLabels")),
            common_labels=KV.from_json(obj.get("commonLabels")),
            common_annotations=KV.from_json(obj.get("commonAnnotations")),
            external_url=str(obj.get("externalURL") or ""),
            group_key=str(obj.get("groupKey") or ""),
        )

    def firing(self) -> list[Alert]:
        return [a for a in self.alerts if a.status == ALERT_FIRING]

    def resolved(self) -> list[Alert]:
        return [a for a in self.alerts if a.status == ALERT_RESOLVED]

    def template_values(self) -> dict[str, Any]:
        """Values visible to ``{{ ... }}`` placeholders."""
        return {
            "Receiver": self.receiver,
            "Status": self.status,
            "Alerts": {
                "All": [a.template_values() for a in self.alerts],
                "Firing": len(self.firing()),
                "Resolved": len(self.resolved()),
            },
            "GroupLabels": dict(self.group_labels),
            "CommonLabels": dict(self.common_labels),
            "CommonAnnotations": dict(self.common_annotations),
            "ExternalURL": self.external_url,
            "GroupKey": self.group_key,
        }
