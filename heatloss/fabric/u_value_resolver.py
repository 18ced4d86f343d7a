"""
Resolve an effective U-value from a fabric description.

Return convention shared by every resolver:
    float > 0   resolved, contributes to fabric loss
    0.0         resolved, no loss (internal or party element)
    None        not yet resolvable (a required attribute is missing)

The aggregator skips elements that resolve to None; no loss is invented from
missing data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from .specs import (
    CeilingCategory,
    CeilingSpec,
    DoorCategory,
    DoorSpec,
    FabricSpec,
    FloorCategory,
    FloorSpec,
    InsulationLayer,
    WallCategory,
    WallSpec,
    WindowCategory,
    WindowSpec,
)
from .u_value_tables import (
    CEILING_U_CURVE,
    FLOOR_U_CURVES,
    GROUND_CONTACT_UPLIFT,
    INSULATION_LAMBDA,
    WINDOW_FRAME_MULTIPLIER,
    WINDOW_U_DEFAULTS,
    FloorConstruction,
    FloorExposure,
    lerp,
    round2,
    wall_base_u,
)

logger = logging.getLogger(__name__)

GroundElementKind = Literal["wall", "floor"]


@dataclass(frozen=True)
class GroundCorrection:
    """Equivalent U for an element in contact with the ground."""

    u_eq: float
    basis: Literal["pass-through", "default-uplift"]
    delta: float = 0.0


def equivalent_u_without_geometry(
    kind: GroundElementKind,
    u_known: float,
    includes_ground: bool = False,
) -> GroundCorrection:
    """
    Approximate ground-contact effects on a stated U-value.

    No perimeter/area geometry is used; a fixed uplift per element kind stands
    in for the ground and thermal-bridging effect. A value the user says
    already includes ground contact passes through unchanged.
    """
    if includes_ground:
        return GroundCorrection(u_eq=u_known, basis="pass-through")

    delta = GROUND_CONTACT_UPLIFT[kind]
    return GroundCorrection(u_eq=u_known + delta, basis="default-uplift", delta=delta)


def add_insulation_layer(u_base: float, layer: Optional[InsulationLayer]) -> float:
    """
    Add the thermal resistance of an insulation layer in series.

    U_new = 1 / (1/U_base + t/λ), rounded to 2 dp. An undeclared, zero-thickness
    or unknown-material layer leaves the base value untouched.
    """
    if layer is None or layer.thickness_mm <= 0 or u_base <= 0:
        return u_base

    conductivity = INSULATION_LAMBDA.get(layer.material)
    if not conductivity:
        logger.debug(f"Unknown insulation material '{layer.material}', ignoring layer")
        return u_base

    r_add = (layer.thickness_mm / 1000) / conductivity
    return round2(1 / (1 / u_base + r_add))


def resolve_wall(spec: WallSpec) -> Optional[float]:
    if spec.category is WallCategory.KNOWN_U:
        if spec.u_value is None:
            return None
        if spec.basement:
            return equivalent_u_without_geometry(
                "wall", spec.u_value, spec.includes_ground_contact
            ).u_eq
        return spec.u_value

    if spec.category in (WallCategory.INTERNAL, WallCategory.PARTY):
        return 0.0

    if spec.category is None or not spec.age_band or not spec.construction:
        return None

    base = wall_base_u(spec.age_band, spec.construction)
    if base is None:
        return None
    return add_insulation_layer(base, spec.insulation)


def resolve_floor(spec: FloorSpec) -> Optional[float]:
    if spec.category is FloorCategory.KNOWN_U:
        if spec.u_value is None:
            return None
        if spec.construction is FloorConstruction.SOLID:
            return equivalent_u_without_geometry(
                "floor", spec.u_value, spec.includes_ground_contact
            ).u_eq
        return spec.u_value

    if spec.category in (FloorCategory.INTERNAL, FloorCategory.PARTY):
        return 0.0

    if spec.category is None or spec.construction is None:
        return None

    exposure = FloorExposure.EXPOSED if spec.category is FloorCategory.EXPOSED else FloorExposure.GROUND
    return lerp(FLOOR_U_CURVES[exposure][spec.construction], spec.insulation_thickness_mm)


def resolve_ceiling(spec: CeilingSpec) -> Optional[float]:
    if spec.category is CeilingCategory.KNOWN_U:
        return spec.u_value

    if spec.category in (CeilingCategory.INTERNAL, CeilingCategory.PARTY):
        return 0.0

    if spec.category is None:
        return None
    return lerp(CEILING_U_CURVE, spec.insulation_thickness_mm)


def resolve_door(spec: DoorSpec) -> Optional[float]:
    if spec.category is DoorCategory.KNOWN_U:
        return spec.u_value
    if spec.category is DoorCategory.INTERNAL:
        return 0.0
    # No age-band door table yet; external doors need a known U
    return None


def resolve_window(spec: WindowSpec) -> Optional[float]:
    if spec.category is WindowCategory.KNOWN_U:
        return spec.u_value
    if spec.category is WindowCategory.INTERNAL:
        return 0.0
    if spec.category is None or spec.glazing_type is None:
        return None

    base = WINDOW_U_DEFAULTS[spec.glazing_type]
    multiplier = WINDOW_FRAME_MULTIPLIER.get(spec.frame_type, 1.0)
    return round2(base * multiplier)


class UValueResolver:
    """
    Single entry point for default U-value suggestions.

    Every element family resolves through here so the tables and adjustment
    rules exist exactly once.
    """

    def resolve(self, spec: Optional[FabricSpec]) -> Optional[float]:
        """Resolve any fabric spec to a U-value (W/m²K) or None."""
        if spec is None:
            return None
        if isinstance(spec, WallSpec):
            return resolve_wall(spec)
        if isinstance(spec, FloorSpec):
            return resolve_floor(spec)
        if isinstance(spec, CeilingSpec):
            return resolve_ceiling(spec)
        if isinstance(spec, DoorSpec):
            return resolve_door(spec)
        if isinstance(spec, WindowSpec):
            return resolve_window(spec)
        raise TypeError(f"Unsupported fabric spec: {type(spec).__name__}")


default_resolver = UValueResolver()
