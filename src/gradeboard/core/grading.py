from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class GradeBand:
    grade: str
    min: int
    max: int
    color: str

    @property
    def range_label(self) -> str:
        return f"{self.min}-{self.max}"


@dataclass(frozen=True)
class GradeScale:
    """Ordered grade bands.

    Bands are scanned in declared order and the first band holding the score
    wins. Fractional scores are graded by their integer part, so 89.5 lands in
    an 80-89 band. Anything outside the scale's overall range (negative, above
    the top band, NaN) gets the lowest grade.
    """

    name: str
    bands: tuple[GradeBand, ...]

    def __post_init__(self) -> None:
        if not self.bands:
            raise ValueError(f"Grade scale '{self.name}' has no bands")
        for band in self.bands:
            if band.min > band.max:
                raise ValueError(
                    f"Grade band {band.grade} in '{self.name}' has min {band.min} above max {band.max}"
                )
        # distribution counts are keyed by letter
        seen: set[str] = set()
        for band in self.bands:
            if band.grade in seen:
                raise ValueError(f"Grade {band.grade} appears more than once in '{self.name}'")
            seen.add(band.grade)

    @property
    def grades(self) -> tuple[str, ...]:
        return tuple(band.grade for band in self.bands)

    @property
    def lowest_band(self) -> GradeBand:
        return min(self.bands, key=lambda band: band.min)

    @property
    def floor(self) -> int:
        return min(band.min for band in self.bands)

    @property
    def ceiling(self) -> int:
        return max(band.max for band in self.bands)

    def find_band(self, score: float) -> GradeBand | None:
        if not (self.floor <= score <= self.ceiling):
            return None
        whole = math.floor(score)
        for band in self.bands:
            if band.min <= whole <= band.max:
                return band
        return None

    def band_for(self, score: float) -> GradeBand:
        return self.find_band(score) or self.lowest_band

    def classify(self, score: float) -> str:
        return self.band_for(score).grade


CLASSROOM_SCALE = GradeScale(
    name="classroom",
    bands=(
        GradeBand("A", 90, 100, "bg-green-600 text-white"),
        GradeBand("B", 80, 89, "bg-blue-600 text-white"),
        GradeBand("C", 70, 79, "bg-cyan-600 text-white"),
        GradeBand("D", 60, 69, "bg-yellow-600 text-white"),
        GradeBand("F", 0, 59, "bg-red-600 text-white"),
    ),
)

DISTRIBUTION_SCALE = GradeScale(
    name="distribution",
    bands=(
        GradeBand("A", 75, 100, "text-green-600"),
        GradeBand("B", 65, 74, "text-blue-600"),
        GradeBand("C", 50, 64, "text-yellow-600"),
        GradeBand("D", 45, 49, "text-orange-600"),
        GradeBand("E", 40, 44, "text-orange-500"),
        GradeBand("F", 0, 39, "text-red-600"),
    ),
)

SCALES: dict[str, GradeScale] = {
    CLASSROOM_SCALE.name: CLASSROOM_SCALE,
    DISTRIBUTION_SCALE.name: DISTRIBUTION_SCALE,
}

DEFAULT_SCALE = CLASSROOM_SCALE


def get_scale(name: str) -> GradeScale:
    try:
        return SCALES[name.strip().lower()]
    except KeyError as exc:
        raise ValueError(f"Unknown grade scale: {name}. Use {', '.join(SCALES)}.") from exc


def classify(score: float, scale: GradeScale = DEFAULT_SCALE) -> str:
    return scale.classify(score)
