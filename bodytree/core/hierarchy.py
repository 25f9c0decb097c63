from __future__ import annotations

from bodytree.core.constants import DEFAULT_ROOT_NAME, HIERARCHY_DELIMITER


def segments(name: str) -> list[str]:
    # "" splits into [""], a single empty segment.
    return name.split(HIERARCHY_DELIMITER)


def depth(name: str) -> int:
    return len(segments(name))


def leaf_name(name: str) -> str:
    return segments(name)[-1]


def ancestor_name(name: str, root_name: str = DEFAULT_ROOT_NAME) -> str:
    parts = segments(name)
    if len(parts) >= 2:
        return parts[-2]
    return root_name
