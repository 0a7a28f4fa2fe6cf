from typing import Optional, Tuple

# Applied uniformly to every interview, reported in this order.
RUBRIC: Tuple[str, ...] = (
    "Communication Skills",
    "Technical Knowledge",
    "Problem-Solving",
    "Cultural & Role Fit",
    "Confidence & Clarity",
)

SCORE_MIN = 0
SCORE_MAX = 100


def normalize_category(name: str) -> str:
    """Comparison key: case and spacing insensitive ("problem solving" == "Problem-Solving")."""
    return "".join(ch for ch in name.lower() if ch.isalnum() or ch == "&")


def canonical_category(name: str, rubric: Tuple[str, ...] = RUBRIC) -> Optional[str]:
    key = normalize_category(name)
    for category in rubric:
        if normalize_category(category) == key:
            return category
    return None
