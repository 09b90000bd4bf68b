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

"""JIRA Issues REST operations – the subset of ``/rest/api/2`` used by the
notifier: JQL search, transition listing, transition execution and issue
creation.

Every call raises :class:`requests.RequestException` on failure. HTTP error
statuses surface as :class:`requests.HTTPError` with ``response`` set; see
:mod:`.jira_errors` for how callers classify them.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from .models import Issue, Transition

logger = logging.getLogger(__name__)

API_PREFIX = "/rest/api/2"
DEFAULT_TIMEOUT = 30.0


class JiraClient:
    """Thin wrapper around a :class:`requests.Session` bound to one JIRA."""

    def __init__(
        self,
        api_url: str,
        user: str,
        password: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (user, password)
        self.session.headers.update({"Accept": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.api_url}{API_PREFIX}{path}"

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        resp = self.session.request(method, self._url(path), timeout=self.timeout, **kwargs)
        resp.raise_for_status()
        return resp

    def search(self, jql: str, *, fields: list[str], max_results: int) -> list[Issue]:
        resp = self._request(
            "GET",
            "/search",
            params={
                "jql": jql,
                "fields": ",".join(fields),
                "maxResults": max_results,
            },
        )
        data = resp.json() or {}
        return [Issue.from_json(obj) for obj in data.get("issues") or []]

    def get_transitions(self, issue_key: str) -> list[Transition]:
        resp = self._request("GET", f"/issue/{issue_key}/transitions")
        data = resp.json() or {}
        return [Transition.from_json(obj) for obj in data.get("transitions") or []]

    def do_transition(self, issue_key: str, transition_id: str) -> None:
        self._request(
            "POST",
            f"/issue/{issue_key}/transitions",
            json={"transition": {"id": transition_id}},
        )

    def create(self, issue: Issue) -> Issue:
        """Create *issue* and return the tracker's view of it (key and id)."""
        resp = self._request("POST", "/issue", json=issue.to_create_payload())
        try:
            data = resp.json() or {}
        except requests.JSONDecodeError:
            # The issue exists; only its key is unknown.
            logger.warning("create returned status %s with a non-JSON body %r", resp.status_code, resp.text[:200])
            data = {}
        return Issue(key=str(data.get("key") or ""), id=str(data.get("id") or ""), fields=issue.fields)
