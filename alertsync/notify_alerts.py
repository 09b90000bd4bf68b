#!/usr/bin/env python3
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

"""Reconcile one Alertmanager notification against JIRA.

Input:
- Alertmanager webhook JSON (payload version 4), from ``--file`` or stdin.
- Receiver configuration YAML (``--config``, default ``$ALERTSYNC_CONFIG``).

Exit status:
- 0   nothing to do, issue reopened or issue created
- 1   fatal error, resubmitting the same notification will not help
- 75  temporary failure (JIRA returned 500/503), resubmit later

Draft / debug (no writes):
    ``alertsync-notify --config config.yml --file payload.json --dry-run --verbose``
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any

from .notify.alertmanager import Data
from .notify.config import load_config
from .notify.group import to_group_id
from .notify.receiver import Receiver
from .shared.common import configure_logging, parse_runner_debug
from .shared.errors import ConfigError
from .shared.templates import Template

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_RETRY = 75  # EX_TEMPFAIL


class ReceiverLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the receiver name and group key."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        return f"receiver={self.extra['receiver']} group_key={self.extra['group_key']} {msg}", kwargs


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create or reopen JIRA issues for an Alertmanager notification")
    p.add_argument(
        "--config",
        "-c",
        default=os.environ.get("ALERTSYNC_CONFIG", "config.yml"),
        help="receiver configuration YAML (default: $ALERTSYNC_CONFIG or config.yml)",
    )
    p.add_argument(
        "--file",
        "-f",
        default=None,
        help="Alertmanager webhook JSON payload (default: read stdin)",
    )
    p.add_argument(
        "--receiver",
        default=None,
        help="receiver name to use instead of the payload's 'receiver' field",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Render the issue that would be created and print it; make no JIRA calls",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logs (also enabled when RUNNER_DEBUG=1)",
    )
    return p.parse_args(argv)


def load_payload(path: str | None) -> dict[str, Any]:
    if path:
        if not os.path.exists(path):
            raise SystemExit(f"ERROR: payload file not found: {path}")
        with open(path, "r", encoding="utf-8") as fh:
            raw = fh.read()
    elif not sys.stdin.isatty():
        raw = sys.stdin.read()
    else:
        raise SystemExit("ERROR: no payload provided. Use --file or pipe JSON via stdin.")

    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"ERROR: cannot parse payload JSON: {exc}")


def exit_code(retry: bool, err: Exception | None) -> int:
    if err is None:
        return EXIT_OK
    return EXIT_RETRY if retry else EXIT_FATAL


def dry_run(receiver: Receiver, data: Data, logger: ReceiverLogAdapter) -> int:
    scope = receiver.tmpl.scope()
    project = scope.execute(receiver.conf.project, data, logger)
    issue = receiver.build_issue(project, to_group_id(data.group_labels), data, scope, logger)
    if scope.err is not None:
        print(f"ERROR: {scope.err}", file=sys.stderr)
        return EXIT_FATAL
    print("DRY-RUN: would search for an existing issue, then create if none is open or recent:")
    print(json.dumps(issue.to_create_payload(), indent=2))
    return EXIT_OK


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    base_logger = configure_logging(bool(args.verbose) or parse_runner_debug())

    tmpl = Template()
    try:
        config = load_config(args.config, tmpl)
    except ConfigError as exc:
        raise SystemExit(f"ERROR: {exc}")

    try:
        data = Data.from_json(load_payload(args.file))
    except ValueError as exc:
        raise SystemExit(f"ERROR: {exc}")

    name = args.receiver or data.receiver
    conf = config.receiver_by_name(name)
    if conf is None:
        raise SystemExit(f"ERROR: receiver {name!r} is not configured")

    logger = ReceiverLogAdapter(
        base_logger.getChild("notify"),
        {"receiver": conf.name, "group_key": data.group_key},
    )
    receiver = Receiver(conf, tmpl)

    if args.dry_run:
        raise SystemExit(dry_run(receiver, data, logger))

    retry, err = receiver.notify(data, logger)
    if err is not None:
        print(f"ERROR: {err}", file=sys.stderr)
    raise SystemExit(exit_code(retry, err))


if __name__ == "__main__":
    main()
