import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PageControl:
    """A numbered page link, or an ellipsis when ``page_number`` is None."""

    page_number: Optional[int] = None


def page_count(total: int, page_size: int) -> int:
    if page_size < 1:
        return 0
    return math.ceil(total / page_size)


def parse_page_param(value: Optional[str]) -> int:
    """1-based page number from the URL; anything unusable means page 1."""
    try:
        return max(1, int(value)) if value else 1
    except ValueError:
        return 1


def pagination_controls(current: int, count: int) -> list[PageControl]:
    """First, last and the neighbours of ``current``, with gaps collapsed."""
    if count <= 0:
        return []
    shown = sorted({1, count, current - 1, current, current + 1} & set(range(1, count + 1)))
    controls: list[PageControl] = []
    previous = 0
    for number in shown:
        if number - previous == 2:
            controls.append(PageControl(previous + 1))
        elif number - previous > 2:
            controls.append(PageControl())
        controls.append(PageControl(number))
        previous = number
    return controls
