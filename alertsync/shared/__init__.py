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

"""Shared JIRA utilities.

Modules
-------
common          Logging control, time helpers, JIRA timestamp parsing.
errors          Exception hierarchy.
models          Issue / transition dataclasses and REST JSON conversion.
templates       ``{{ placeholder }}`` rendering with scoped error tracking.
jira_issues     JIRA REST client (search, transitions, create).
jira_errors     Failed-call classification into ``(retry, error)``.
"""
