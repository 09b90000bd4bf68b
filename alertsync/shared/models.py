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

"""JIRA data models – issues, their fields and workflow transitions, plus
conversion to and from the REST API JSON representation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from .common import parse_jira_time

# The JIRA status category keys are fixed: "new", "indeterminate" and "done".
STATUS_CATEGORY_DONE = "done"

# Custom field values are restricted to these kinds so the create payload
# stays serialisable.
CustomFieldValue = Union[str, list[str]]


@dataclass
class Status:
    name: str
    category_key: str


@dataclass
class Transition:
    id: str
    name: str

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> Transition:
        return cls(id=str(obj.get("id") or ""), name=str(obj.get("name") or ""))


@dataclass
class IssueFields:
    project_key: str = ""
    issue_type: str = ""
    summary: str = ""
    description: str = ""
    labels: list[str] = field(default_factory=list)
    components: list[str] = field(default_factory=list)
    priority: str | None = None
    status: Status | None = None
    resolution: str | None = None
    resolution_date: datetime | None = None
    custom: dict[str, CustomFieldValue] = field(default_factory=dict)


@dataclass
class Issue:
    key: str = ""
    id: str = ""
    fields: IssueFields = field(default_factory=IssueFields)

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> Issue:
        """Build an issue from a search result or ``GET /issue`` response.

        Only the fields requested by the search are populated; everything
        else keeps its default.
        """
        raw = obj.get("fields") or {}

        status = None
        raw_status = raw.get("status")
        if isinstance(raw_status, dict):
            category = raw_status.get("statusCategory") or {}
            status = Status(
                name=str(raw_status.get("name") or ""),
                category_key=str(category.get("key") or ""),
            )

        resolution = None
        raw_resolution = raw.get("resolution")
        if isinstance(raw_resolution, dict):
            resolution = str(raw_resolution.get("name") or "")

        return cls(
            key=str(obj.get("key") or ""),
            id=str(obj.get("id") or ""),
            fields=IssueFields(
                summary=str(raw.get("summary") or ""),
                status=status,
                resolution=resolution,
                resolution_date=parse_jira_time(raw.get("resolutiondate")),
            ),
        )

    def to_create_payload(self) -> dict[str, Any]:
        """Return the ``fields`` document for ``POST /rest/api/2/issue``."""
        f = self.fields
        fields: dict[str, Any] = {
            "project": {"key": f.project_key},
            "issuetype": {"name": f.issue_type},
            "summary": f.summary,
            "description": f.description,
            "labels": list(f.labels),
        }
        if f.priority is not None:
            fields["priority"] = {"name": f.priority}
        if f.components:
            fields["components"] = [{"name": name} for name in f.components]

        for field_id, value in f.custom.items():
            if isinstance(value, str):
                fields[field_id] = value
            elif isinstance(value, list) and all(isinstance(v, str) for v in value):
                fields[field_id] = list(value)
            else:
                raise TypeError(f"unsupported value for custom field {field_id}: {value!r}")

        return {"fields": fields}


def is_resolved(issue: Issue) -> bool:
    status = issue.fields.status
    return status is not None and status.category_key == STATUS_CATEGORY_DONE


def find_transition_by_name(transitions: list[Transition], name: str) -> Transition | None:
    for t in transitions:
        if t.name == name:
            return t
    return None
