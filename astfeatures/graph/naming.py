"""
Holder node labels.

Child slots are named after tree accessors such as getCondition or
getThenStatement; holder nodes are labeled with the upper snake case
form of the name with the accessor prefix removed.
"""

import logging
import re
from functools import lru_cache

logger = logging.getLogger(__name__)

_GETTER_PREFIX = re.compile(r"^get(?=[A-Z])")


def _upper_underscore(name: str) -> str:
    parts = []
    for index, char in enumerate(name):
        if char.isupper() and index > 0 and name[index - 1] != "_":
            parts.append("_")
        parts.append(char)
    return "".join(parts).upper()


@lru_cache(maxsize=None)
def accessor_to_label(name: str) -> str:
    """
    Convert an accessor name to a holder label.

    getCondition becomes CONDITION and getThenStatement becomes
    THEN_STATEMENT. Names that are not upper camel case once the
    prefix is removed are converted the same way and reported once.
    """
    stripped = _GETTER_PREFIX.sub("", name)
    if not stripped:
        logger.warning("Empty accessor name, labeling it UNNAMED")
        return "UNNAMED"
    if not stripped[0].isupper():
        logger.warning(f"Accessor name '{name}' is not upper camel case, labeling it as-is")
    return _upper_underscore(stripped)
