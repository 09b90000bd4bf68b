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

"""Exception types raised across the alertsync packages."""


class AlertSyncError(Exception):
    """Base class for every error raised by alertsync."""


class ConfigError(AlertSyncError):
    """The configuration file is missing, malformed or incomplete."""


class TemplateError(AlertSyncError):
    """A template could not be parsed or rendered."""


class JiraError(AlertSyncError):
    """A JIRA API call failed.

    ``retry`` tells the caller whether resubmitting the same notification
    later may succeed.
    """

    def __init__(self, message: str, *, retry: bool = False) -> None:
        super().__init__(message)
        self.retry = retry


class TransitionNotFound(AlertSyncError):
    """The configured reopen transition is not available on an issue."""

    def __init__(self, state: str, issue_key: str) -> None:
        super().__init__(f"JIRA state {state!r} does not exist or no transition possible for {issue_key}")
        self.state = state
        self.issue_key = issue_key


class LabelNotFound(AlertSyncError):
    """The configured label key is absent from the group labels."""

    def __init__(self, label_key: str) -> None:
        super().__init__(f"label key {label_key!r} not found")
        self.label_key = label_key
