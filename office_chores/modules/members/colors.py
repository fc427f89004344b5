from typing import Iterable, List

MEMBER_COLORS: List[str] = [
    "#3B82F6",  # blue
    "#10B981",  # emerald
    "#F59E0B",  # amber
    "#EF4444",  # red
    "#8B5CF6",  # violet
    "#EC4899",  # pink
    "#06B6D4",  # cyan
    "#84CC16",  # lime
    "#F97316",  # orange
    "#6366F1",  # indigo
]


def next_available_color(used_colors: Iterable[str]) -> str:
    """First palette color nobody uses yet; cycles through the palette once all are taken."""
    used = list(used_colors)
    for color in MEMBER_COLORS:
        if color not in used:
            return color
    return MEMBER_COLORS[len(used) % len(MEMBER_COLORS)]
