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

"""Alert group to JIRA issue reconciliation.

For every notification the receiver looks up the most recent issue carrying
the group's identity in a custom field, then either leaves it alone, reopens
it, or creates a new issue. Failures come back as ``(retry, error)`` so the
caller can decide whether the notification should be resubmitted later.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Union

import requests

from ..shared.common import utc_now
from ..shared.errors import LabelNotFound, TransitionNotFound
from ..shared.jira_errors import handle_jira_error
from ..shared.jira_issues import JiraClient
from ..shared.models import Issue, IssueFields, find_transition_by_name, is_resolved
from ..shared.templates import RenderScope, Template
from .alertmanager import Data
from .config import ReceiverConfig
from .group import quote, to_group_id, to_group_labels, to_issue_label

Logger = Union[logging.Logger, logging.LoggerAdapter]

SEARCH_FIELDS = ["summary", "status", "resolution", "resolutiondate"]
SEARCH_MAX_RESULTS = 2

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class IssueState(Enum):
    """Where the most recent issue for a group stands, and so what to do."""

    NO_PRIOR_ISSUE = "no_prior_issue"  # create
    OPEN_ISSUE_EXISTS = "open_issue_exists"  # nothing
    RESOLVED_WONT_FIX = "resolved_wont_fix"  # nothing
    RESOLVED_RECENTLY = "resolved_recently"  # reopen
    RESOLVED_STALE = "resolved_stale"  # create


def classify_issue(
    issue: Issue | None,
    *,
    wont_fix_resolution: str,
    reopen_duration: timedelta,
    now: datetime,
) -> IssueState:
    if issue is None:
        return IssueState.NO_PRIOR_ISSUE
    if not is_resolved(issue):
        return IssueState.OPEN_ISSUE_EXISTS
    if wont_fix_resolution and issue.fields.resolution == wont_fix_resolution:
        return IssueState.RESOLVED_WONT_FIX
    resolved_at = issue.fields.resolution_date
    if resolved_at is not None and resolved_at + reopen_duration > now:
        return IssueState.RESOLVED_RECENTLY
    return IssueState.RESOLVED_STALE


def most_recently_resolved(issues: list[Issue]) -> Issue:
    # Same order as JIRA's "resolutiondate desc": issues without a resolution
    # date come first, then newest resolved. sorted() is stable.
    return sorted(
        issues,
        key=lambda i: (i.fields.resolution_date is None, i.fields.resolution_date or _OLDEST),
        reverse=True,
    )[0]


class Receiver:
    """A JIRA client bound to one configured receiver and its templates."""

    def __init__(
        self,
        conf: ReceiverConfig,
        tmpl: Template,
        client: JiraClient | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.conf = conf
        self.tmpl = tmpl
        self.client = client or JiraClient(
            conf.api_url,
            conf.user,
            conf.password,
            timeout=conf.timeout.total_seconds(),
        )
        self.clock = clock

    def notify(self, data: Data, logger: Logger) -> tuple[bool, Exception | None]:
        scope = self.tmpl.scope()
        project = scope.execute(self.conf.project, data, logger)
        if scope.err is not None:
            return False, scope.err

        group_id = to_group_id(data.group_labels)
        issue, retry, err = self.search(project, group_id, logger)
        if err is not None:
            return retry, err

        state = classify_issue(
            issue,
            wont_fix_resolution=self.conf.wont_fix_resolution,
            reopen_duration=self.conf.reopen_duration,
            now=self.clock(),
        )
        if state is IssueState.OPEN_ISSUE_EXISTS:
            logger.debug("issue is unresolved, nothing to do key=%s label=%s", issue.key, group_id)
            return False, None
        if state is IssueState.RESOLVED_WONT_FIX:
            logger.info(
                "issue was resolved as won't fix, not reopening key=%s label=%s resolution=%s",
                issue.key,
                group_id,
                issue.fields.resolution,
            )
            return False, None
        if state is IssueState.RESOLVED_RECENTLY:
            logger.info(
                "issue was recently resolved, reopening key=%s label=%s resolution_time=%s reopen_duration=%s",
                issue.key,
                group_id,
                issue.fields.resolution_date.isoformat(),
                self.conf.reopen_duration,
            )
            return self.reopen(issue.key, logger)

        logger.info("no recent matching issue found, creating new issue label=%s", group_id)
        issue = self.build_issue(project, group_id, data, scope, logger)
        if scope.err is not None:
            return False, scope.err

        retry, err = self.create(issue, logger)
        if err is None:
            logger.info("issue created key=%s id=%s", issue.key, issue.id)
        return retry, err

    def build_issue(self, project: str, group_id: str, data: Data, scope: RenderScope, logger: Logger) -> Issue:
        """Render a new issue for the group; check ``scope.err`` before use."""
        labels: list[str] = []
        try:
            labels.append(to_issue_label(self.conf.label_key, data.group_labels))
        except LabelNotFound as exc:
            logger.warning("%s", exc)

        fields = IssueFields(
            project_key=project,
            issue_type=scope.execute(self.conf.issue_type, data, logger),
            description=scope.execute(self.conf.description, data, logger),
            summary=scope.execute(self.conf.summary, data, logger),
            labels=labels,
            custom={self.conf.group_field_id: [group_id]},
        )
        if self.conf.priority:
            fields.priority = scope.execute(self.conf.priority, data, logger)

        for component in self.conf.components:
            fields.components.append(scope.execute(component, data, logger))

        fields.labels.extend(self.conf.labels)
        if self.conf.add_group_labels:
            fields.labels.extend(to_group_labels(data.group_labels))

        return Issue(fields=fields)

    def search(self, project: str, group_id: str, logger: Logger) -> tuple[Issue | None, bool, Exception | None]:
        query = (
            f"project={quote(project)} and {quote(self.conf.group_field_name)}={quote(group_id)} "
            "order by resolutiondate desc"
        )
        logger.debug("search query=%s fields=%s max_results=%d", query, SEARCH_FIELDS, SEARCH_MAX_RESULTS)
        try:
            issues = self.client.search(query, fields=SEARCH_FIELDS, max_results=SEARCH_MAX_RESULTS)
        except requests.RequestException as exc:
            retry, err = handle_jira_error("Issue.Search", exc.response, exc, logger)
            return None, retry, err

        if not issues:
            logger.debug("  no results query=%s", query)
            return None, False, None

        if len(issues) > 1:
            logger.debug(
                "  more than one issue matched, picking most recently resolved query=%s issues=%s",
                query,
                [i.key for i in issues],
            )
        issue = most_recently_resolved(issues)
        logger.debug("  found issue=%s query=%s", issue.key, query)
        return issue, False, None

    def reopen(self, issue_key: str, logger: Logger) -> tuple[bool, Exception | None]:
        try:
            transitions = self.client.get_transitions(issue_key)
        except requests.RequestException as exc:
            return handle_jira_error("Issue.GetTransitions", exc.response, exc, logger)

        transition = find_transition_by_name(transitions, self.conf.reopen_state)
        if transition is None:
            return False, TransitionNotFound(self.conf.reopen_state, issue_key)

        logger.debug("reopen key=%s transition_id=%s", issue_key, transition.id)
        try:
            self.client.do_transition(issue_key, transition.id)
        except requests.RequestException as exc:
            return handle_jira_error("Issue.DoTransition", exc.response, exc, logger)

        logger.debug("  done")
        return False, None

    def create(self, issue: Issue, logger: Logger) -> tuple[bool, Exception | None]:
        logger.debug("create issue=%s", issue.to_create_payload())
        try:
            created = self.client.create(issue)
        except requests.RequestException as exc:
            return handle_jira_error("Issue.Create", exc.response, exc, logger)

        issue.key = created.key
        issue.id = created.id
        logger.debug("  done key=%s id=%s", issue.key, issue.id)
        return False, None
