"""Standard field catalog - fields archived automatically alongside a PV."""

from __future__ import annotations

import logging

from ..errors import CollaboratorIOError
from ..interfaces import ConfigStore

logger = logging.getLogger(__name__)


def get_fields_archived_as_part_of_stream(config_store: ConfigStore) -> frozenset[str]:
    """Load the standard field catalog once per batch.

    A store failure degrades to an empty catalog: no field is bundled, but
    admission carries on.
    """
    try:
        return frozenset(config_store.get_fields_archived_as_part_of_stream())
    except CollaboratorIOError as e:
        logger.error(f"Exception fetching standard fields: {e}")
        return frozenset()
