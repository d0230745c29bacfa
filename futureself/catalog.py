"""Profession categories offered by the panel."""
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .models import SelectOption


PROFESSIONS_BY_CATEGORY: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (
        "Arts & Creative",
        (
            "Writer",
            "Painter",
            "Musician",
            "Cartographer",
            "Glassblower",
            "Lacemaker",
            "Perfumier",
        ),
    ),
    ("Academic & Exploration", ("Scholar", "Traveler", "Alchemist", "Docter")),
    (
        "Services & Maintenance",
        (
            "Lamplighter",
            "Water Carrier",
            "Chimney Sweep",
            "Telegraph Operator",
            "Ice Cutter",
            "Ragpicker",
        ),
    ),
    (
        "Manufacturing & Production",
        (
            "Blacksmith",
            "Silversmith",
            "Shoemaker",
            "Saddler",
            "Carpenter",
            "Tanner",
            "Oyster Shucker",
            "Baker",
        ),
    ),
    ("Agriculture & Nature", ("Farmer", "Gardener", "Miner")),
    ("Clothing & Fashion", ("Tailor", "Haberdasher")),
    ("Royalty & Power", ("King", "Queen", "Emperor")),
)


class CategoryJobIndex:
    """
    Read-only lookup from profession category to ordered job names.

    Usage:
        index = CategoryJobIndex()
        index.categories()             # options for the first dropdown
        index.jobs_for("Royalty & Power")
    """

    def __init__(self, table: Optional[Sequence[Tuple[str, Sequence[str]]]] = None):
        rows = PROFESSIONS_BY_CATEGORY if table is None else table
        self._order: List[str] = [category for category, _ in rows]
        self._jobs: Dict[str, Tuple[str, ...]] = {
            category: tuple(jobs) for category, jobs in rows
        }

    @property
    def table(self) -> Mapping[str, Tuple[str, ...]]:
        return dict(self._jobs)

    def categories(self) -> List[SelectOption]:
        return _as_options(self._order)

    def jobs_for(self, category: str) -> List[SelectOption]:
        """Job options for ``category``; unknown categories give an empty list."""
        return _as_options(self._jobs.get(category, ()))

    def __contains__(self, category: object) -> bool:
        return category in self._jobs


def _as_options(values: Sequence[str]) -> List[SelectOption]:
    return [SelectOption(index=i, value=v, label=v) for i, v in enumerate(values)]
