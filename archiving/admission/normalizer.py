"""Name normalization - turns a raw PV name into its admission lookup name."""

from __future__ import annotations

import logging
from collections.abc import Collection

from ..errors import InvalidNameError
from ..models import NormalizedName
from ..pv_names import VALUE_FIELD, get_field_name, is_valid_pv_name, strip_field_name

logger = logging.getLogger(__name__)


class NameNormalizer:
    """Resolves field suffixes against the standard field catalog"""

    def normalize(self, raw_name: str, standard_fields: Collection[str]) -> NormalizedName:
        """Normalize a raw PV name.

        - ``.VAL`` is dropped: ``SRC.VAL`` is admitted as ``SRC``
        - a standard field is stripped from the lookup name and remembered
        - any other field is left in place and never bundled

        Raises:
            InvalidNameError: if the resulting name fails the syntax check
        """
        pv_name = raw_name
        field_name = get_field_name(pv_name)
        is_standard_field = False

        if field_name:
            if field_name == VALUE_FIELD:
                logger.debug(f"Treating .VAL as pv name alone for {pv_name}")
                field_name = None
                pv_name = strip_field_name(pv_name)
            elif field_name in standard_fields:
                logger.debug(f"Field {field_name} is one of the standard fields for pv {pv_name}")
                pv_name = strip_field_name(pv_name)
                is_standard_field = True

        if not is_valid_pv_name(pv_name):
            logger.error(f"PV name fails syntax check {pv_name}")
            raise InvalidNameError(pv_name)

        return NormalizedName(pv_name=pv_name, field_name=field_name, is_standard_field=is_standard_field)
