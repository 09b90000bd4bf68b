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

"""Pytest fixtures shared by the alertsync tests."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests

from alertsync.notify.alertmanager import KV, Alert, Data
from alertsync.notify.config import ReceiverConfig
from alertsync.shared.jira_issues import JiraClient
from alertsync.shared.models import Issue, IssueFields, Status

NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_config(**overrides) -> ReceiverConfig:
    values = dict(
        name="team-a",
        api_url="https://jira.example.com",
        user="bot",
        password="secret",
        project="AAA",
        issue_type="Bug",
        summary="{{ GroupLabels.alertname }} on {{ GroupLabels.instance }}",
        description="{{ CommonAnnotations.description }}",
        reopen_state="Reopen",
        reopen_duration=timedelta(hours=1),
        group_field_name="Alert Group",
        group_field_id="customfield_10001",
        wont_fix_resolution="Won't Fix",
        label_key="alertname",
    )
    values.update(overrides)
    return ReceiverConfig(**values)


def make_data(labels: dict[str, str] | None = None, **overrides) -> Data:
    labels = {"alertname": "HighCPU", "instance": "a"} if labels is None else labels
    values = dict(
        receiver="team-a",
        status="firing",
        alerts=[Alert(status="firing", labels=KV(labels), annotations=KV({"description": "CPU above 90%"}))],
        group_labels=KV(labels),
        common_labels=KV({**labels, "severity": "critical"}),
        common_annotations=KV({"description": "CPU above 90%"}),
        external_url="http://alertmanager:9093",
        group_key='{}:{alertname="HighCPU"}',
    )
    values.update(overrides)
    return Data(**values)


def make_issue(
    key: str = "AAA-7",
    *,
    category: str = "done",
    resolution: str | None = "Fixed",
    resolved_at: datetime | None = None,
) -> Issue:
    return Issue(
        key=key,
        id="10007",
        fields=IssueFields(
            summary="HighCPU on a",
            status=Status(name="Closed" if category == "done" else "Open", category_key=category),
            resolution=resolution,
            resolution_date=resolved_at,
        ),
    )


def make_response(status: int, body: str = "", *, reason: str = "", url: str = "https://jira.example.com/rest/api/2/issue") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp._content = body.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = url
    resp.request = requests.Request("POST", url).prepare()
    return resp


def http_error(status: int, body: str = "", *, reason: str = "") -> requests.HTTPError:
    resp = make_response(status, body, reason=reason)
    return requests.HTTPError(f"{status} Error", response=resp)


@pytest.fixture
def client() -> MagicMock:
    fake = MagicMock(spec=JiraClient)
    fake.search.return_value = []
    fake.get_transitions.return_value = []
    fake.create.return_value = Issue(key="AAA-100", id="10100")
    return fake


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("alertsync.tests")


@pytest.fixture(autouse=True)
def reset_alertsync_logging():
    """Drop handlers added by configure_logging so they never outlive a test's captured streams."""
    yield
    root = logging.getLogger("alertsync")
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)
