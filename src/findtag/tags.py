import re
from typing import Iterable
from dataclasses import dataclass
from findtag.exceptions import ConfigurationError

RUN_PATTERN = re.compile(r"\d+|\D+")


@dataclass(frozen=True)
class TagSelection:
    tags: tuple[str, ...]
    total: int
    filtered: int


def version_key(tag: str) -> list[tuple[int, int, str]]:
    """Sort key comparing digit runs numerically, so 2.10 > 2.9."""
    return [
        (0, int(run), "") if run.isdecimal() else (1, 0, run)
        for run in RUN_PATTERN.findall(tag)
    ]


def select_tags(
    tags: Iterable[str], tag_filter: str = "", limit: int = 25
) -> TagSelection:
    if limit < 1:
        raise ConfigurationError("Tag limit must be an integer > 0")

    candidates = [tag for tag in tags if "windows" not in tag.lower()]
    filtered = sorted(
        (tag for tag in candidates if tag_filter in tag),
        key=version_key,
        reverse=True,
    )

    return TagSelection(tuple(filtered[:limit]), len(candidates), len(filtered))
