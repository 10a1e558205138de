"""Filter state for the relationship fetch and derived views."""

from dataclasses import dataclass, field, replace

MIN_DENSITY = 0
MAX_DENSITY = 100


@dataclass(frozen=True)
class FilterState:
    """
    Active filters applied when fetching relationships.

    Instances are immutable; every mutator returns a new, internally
    consistent FilterState. ``year_min <= year_max`` always holds.
    """

    year_min: int = 1980
    year_max: int = 2025
    cluster_ids: frozenset[int] = field(default_factory=frozenset)
    categories: frozenset[str] = field(default_factory=frozenset)
    keyword: str = ""
    include_undated: bool = True
    max_hops: int | None = None  # None = unbounded
    min_density: int = 0  # Percentage of tier-average connections
    limit: int = 15000

    def __post_init__(self) -> None:
        if self.year_min > self.year_max:
            raise ValueError(
                f"year_min ({self.year_min}) must not exceed year_max ({self.year_max})"
            )
        if not MIN_DENSITY <= self.min_density <= MAX_DENSITY:
            raise ValueError(f"min_density must be within 0-100, got {self.min_density}")
        if self.limit < 1:
            raise ValueError(f"limit must be positive, got {self.limit}")
        if self.max_hops is not None and self.max_hops < 0:
            raise ValueError(f"max_hops must be non-negative, got {self.max_hops}")

    @property
    def year_range(self) -> tuple[int, int]:
        return (self.year_min, self.year_max)

    def with_year_range(self, year_min: int, year_max: int) -> "FilterState":
        """Return a copy with a new year range; an inverted range is reordered."""
        if not isinstance(year_min, int) or not isinstance(year_max, int):
            raise ValueError("year range bounds must be integers")
        low, high = sorted((year_min, year_max))
        return replace(self, year_min=low, year_max=high)

    def with_keyword(self, keyword: str) -> "FilterState":
        return replace(self, keyword=keyword.strip())

    def with_limit(self, limit: int) -> "FilterState":
        return replace(self, limit=max(1, int(limit)))

    def with_max_hops(self, max_hops: int | None) -> "FilterState":
        return replace(self, max_hops=max_hops)

    def with_min_density(self, min_density: int) -> "FilterState":
        clamped = max(MIN_DENSITY, min(MAX_DENSITY, int(min_density)))
        return replace(self, min_density=clamped)

    def with_include_undated(self, include: bool) -> "FilterState":
        return replace(self, include_undated=include)

    def with_toggled_cluster(self, cluster_id: int) -> "FilterState":
        """Flip membership of a tag cluster."""
        return replace(self, cluster_ids=self.cluster_ids ^ {cluster_id})

    def with_toggled_category(self, category: str) -> "FilterState":
        """Flip membership of a document category."""
        return replace(self, categories=self.categories ^ {category})
