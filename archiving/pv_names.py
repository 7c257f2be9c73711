"""PV name utilities.

A raw PV name may carry a protocol prefix (``pva://``) and a field suffix
(``SRC.HIHI``). The lookup name keeps the prefix; only the workflow queue key
drops it.
"""

from __future__ import annotations

import re

# Names carrying this prefix are served over the newer protocol version
V4_PREFIX = "pva://"

# Field that holds the primary value; SRC.VAL is the same PV as SRC
VALUE_FIELD = "VAL"

FIELD_SEPARATOR = "."

_VALID_PV_NAME = re.compile(r"[A-Za-z0-9_\-+:\[\]<>;/,#{}^]+")


def get_field_name(pv_name: str | None) -> str | None:
    """Return the field part of a PV name, or None if there is none."""
    if not pv_name or FIELD_SEPARATOR not in pv_name:
        return None
    field_name = pv_name.split(FIELD_SEPARATOR, 1)[1]
    return field_name or None


def strip_field_name(pv_name: str) -> str:
    """Return the PV name without its field suffix."""
    return pv_name.split(FIELD_SEPARATOR, 1)[0]


def strip_v4_prefix(pv_name: str) -> str:
    """Remove the protocol prefix, if present."""
    if pv_name.startswith(V4_PREFIX):
        return pv_name[len(V4_PREFIX) :]
    return pv_name


def is_valid_pv_name(pv_name: str | None) -> bool:
    """Check a PV name against the EPICS record name character set.

    The field suffix, if any, is not checked.
    """
    if not pv_name:
        return False
    base = strip_field_name(strip_v4_prefix(pv_name))
    return bool(_VALID_PV_NAME.fullmatch(base))
