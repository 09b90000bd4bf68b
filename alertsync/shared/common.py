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

"""Shared low-level utilities – logging control, time helpers and
JIRA timestamp parsing.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# JIRA renders timestamps as e.g. 2024-03-01T10:15:30.000+0000.
_JIRA_TIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)


def parse_runner_debug() -> bool:
    raw = os.getenv("RUNNER_DEBUG")
    if raw is None or raw == "":
        return False
    if raw not in {"0", "1"}:
        raise SystemExit("ERROR: RUNNER_DEBUG must be '0' or '1' when set")
    return raw == "1"


def configure_logging(verbose: bool) -> logging.Logger:
    """Attach a single stderr handler to the ``alertsync`` logger tree."""
    logger = logging.getLogger("alertsync")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_jira_time(value: str | None) -> datetime | None:
    if not value:
        return None
    value = value.strip()
    for fmt in _JIRA_TIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None
