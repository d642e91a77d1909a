"""
Shape parameters for boundary and road generation.

These are the visual tuning knobs of the layout engine. Defaults reproduce the
reference look; callers build a new instance (or use ``model_copy(update=...)``)
to tweak them. Instances are frozen so a parameter set can be shared safely.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ShapeParameters(BaseModel):
    """Parameter bundle for region outlines, border rendering and roads."""

    model_config = ConfigDict(frozen=True)

    # Country outlines
    country_angular_ratio: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Share of angular (drawn border) sections"
    )
    country_angular_radius_min: float = Field(
        default=0.88, gt=0.0, description="Min radius factor for angular sections"
    )
    country_angular_radius_max: float = Field(
        default=1.12, gt=0.0, description="Max radius factor for angular sections"
    )
    country_organic_radius_min: float = Field(
        default=0.7, gt=0.0, description="Min radius factor for organic sections"
    )
    country_organic_radius_max: float = Field(
        default=1.3, gt=0.0, description="Max radius factor for organic sections"
    )
    country_angle_jitter: float = Field(
        default=0.3, ge=0.0, description="Angle jitter (radians) for organic sections"
    )
    country_sides: int = Field(default=18, ge=3, description="Base number of sections")
    country_side_jitter: int = Field(
        default=8, ge=0, description="Random extra sections added to the base count"
    )

    # Province outlines
    province_angular_ratio: float = Field(default=0.4, ge=0.0, le=1.0)
    province_angular_radius_min: float = Field(default=0.85, gt=0.0)
    province_angular_radius_max: float = Field(default=1.15, gt=0.0)
    province_organic_radius_min: float = Field(default=0.8, gt=0.0)
    province_organic_radius_max: float = Field(default=1.2, gt=0.0)
    province_angle_jitter: float = Field(default=0.35, ge=0.0)
    # High section count so borders can wrap tightly around settlements
    province_sides: int = Field(default=32, ge=3)
    province_side_jitter: int = Field(default=12, ge=0)

    # Border rendering
    path_straight_ratio: float = Field(
        default=0.4, ge=0.0, le=1.0, description="Share of border edges drawn as straight lines"
    )

    # Roads
    road_curviness: float = Field(
        default=0.35, ge=0.0, le=1.0, description="How much roads bend (0 = straight)"
    )
    road_segments: int = Field(
        default=4, ge=1, le=16, description="Number of curve segments per road"
    )

    @model_validator(mode="after")
    def _check_ranges(self) -> "ShapeParameters":
        for prefix in ("country", "province"):
            for style in ("angular", "organic"):
                low = getattr(self, f"{prefix}_{style}_radius_min")
                high = getattr(self, f"{prefix}_{style}_radius_max")
                if low > high:
                    raise ValueError(
                        f"{prefix}_{style}_radius_min ({low}) exceeds "
                        f"{prefix}_{style}_radius_max ({high})"
                    )
        return self

    def for_kind(self, kind: str) -> "RegionShape":
        """Collect the fields for one region kind ("country" or "province")."""
        if kind not in ("country", "province"):
            raise ValueError(f"No shape parameters for region kind '{kind}'")
        return RegionShape(
            angular_ratio=getattr(self, f"{kind}_angular_ratio"),
            angular_radius=(
                getattr(self, f"{kind}_angular_radius_min"),
                getattr(self, f"{kind}_angular_radius_max"),
            ),
            organic_radius=(
                getattr(self, f"{kind}_organic_radius_min"),
                getattr(self, f"{kind}_organic_radius_max"),
            ),
            angle_jitter=getattr(self, f"{kind}_angle_jitter"),
            sides=getattr(self, f"{kind}_sides"),
            side_jitter=getattr(self, f"{kind}_side_jitter"),
        )


class RegionShape(BaseModel):
    """Shape parameters resolved for a single region kind."""

    model_config = ConfigDict(frozen=True)

    angular_ratio: float
    angular_radius: Tuple[float, float]
    organic_radius: Tuple[float, float]
    angle_jitter: float
    sides: int
    side_jitter: int


DEFAULT_SHAPE_PARAMETERS = ShapeParameters()
