"""
Blacklist — Skip repositories whose full name matches a configured regex.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional


def matching_pattern(full_name: str, patterns: Iterable[str]) -> Optional[str]:
    """First pattern found anywhere in full_name, or None."""
    for pattern in patterns:
        if re.search(pattern, full_name):
            return pattern
    return None


def is_blacklisted(full_name: str, patterns: Iterable[str]) -> bool:
    return matching_pattern(full_name, patterns) is not None
