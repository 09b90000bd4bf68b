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

"""Group identity and issue label derivation from alert group labels."""

from __future__ import annotations

from ..shared.errors import LabelNotFound
from .alertmanager import KV


_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def quote(value: str) -> str:
    """Double-quote *value*, backslash-escaping non-printable characters.

    Quotes, backslashes and the usual control characters get short escapes
    (``\\n``, ``\\t``, ...). Other non-printable characters become ``\\xNN``
    below 0x80, ``\\uNNNN`` in the BMP and ``\\UNNNNNNNN`` beyond it. Group
    fields already stored in JIRA use this form.
    """
    out = ['"']
    for ch in value:
        code = ord(ch)
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif code < 0x80:
            out.append(f"\\x{code:02x}")
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def to_group_id(group_labels: KV) -> str:
    """Return the group labels as an ``ALERT{...}`` metric name, all spaces removed."""
    inner = ",".join(f"{p.name}={quote(p.value)}" for p in group_labels.sorted_pairs())
    return f"ALERT{{{inner}}}".replace(" ", "")


def to_issue_label(label_key: str, group_labels: KV) -> str:
    for p in group_labels.sorted_pairs():
        if p.name == label_key:
            return p.value
    raise LabelNotFound(label_key)


def to_group_labels(group_labels: KV) -> list[str]:
    """One ``name="value"`` issue label per group label, sorted by name."""
    return [f"{p.name}={quote(p.value)}" for p in group_labels.sorted_pairs()]
