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

"""Classification of failed JIRA calls into a retry flag plus an error
carrying a useful message.
"""

from __future__ import annotations

import logging

import requests

from .errors import JiraError

RETRYABLE_STATUSES = frozenset({500, 503})


def _request_url(response: requests.Response | None) -> str | None:
    if response is None:
        return None
    if response.request is not None and response.request.url:
        return response.request.url
    return response.url or None


def _read_body(response: requests.Response) -> str:
    try:
        return response.text
    except Exception:
        return ""


def handle_jira_error(
    api: str,
    response: requests.Response | None,
    err: BaseException,
    logger: logging.Logger | logging.LoggerAdapter,
) -> tuple[bool, JiraError]:
    """Return ``(retry, error)`` for a failed call to *api*.

    Only HTTP 500 and 503 are worth retrying. Transport failures, where no
    response came back at all, are reported as fatal.
    """
    url = _request_url(response)
    if url is None:
        logger.debug("handle_jira_error api=%s err=%s", api, err)
    else:
        logger.debug("handle_jira_error api=%s err=%s url=%s", api, err, url)

    if response is not None and response.status_code // 100 != 2:
        retry = response.status_code in RETRYABLE_STATUSES
        body = _read_body(response)
        status = f"{response.status_code} {response.reason or ''}".rstrip()
        # The requests error message only repeats the status; include the body.
        return retry, JiraError(
            f"JIRA request {url} returned status {status}, body {body!r}",
            retry=retry,
        )
    return False, JiraError(f"JIRA request {api} failed: {err}")
