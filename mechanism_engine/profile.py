from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Tuple

from .tables import Pathway

if TYPE_CHECKING:
    # Only for static typing; classifier imports the estimator, which imports this module.
    from .classifier import ReactionAnalysis

# ----------------------------------------------------------------------
# 1. Curve Description
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class EnergyProfile:
    """
    One reaction-coordinate curve, in kcal/mol relative to the starting
    material. A one-step curve has a single transition state and no
    intermediate; a two-step curve has two transition states around one
    intermediate.
    """

    name: str
    steps: int
    transition_states: Tuple[float, ...]
    intermediates: Tuple[float, ...]
    product_energy: float
    description: str = ""
    start_energy: float = 0.0

    def __post_init__(self) -> None:
        if self.steps not in (1, 2):
            raise ValueError(f"Energy profile must have 1 or 2 steps, not {self.steps}")
        if len(self.transition_states) != self.steps:
            raise ValueError(
                f"{self.steps}-step profile needs {self.steps} transition states, "
                f"got {len(self.transition_states)}"
            )
        if len(self.intermediates) != self.steps - 1:
            raise ValueError(
                f"{self.steps}-step profile needs {self.steps - 1} intermediates, "
                f"got {len(self.intermediates)}"
            )

    @property
    def activation_energy(self) -> float:
        return self.transition_states[0] - self.start_energy

    @property
    def delta_h(self) -> float:
        return self.product_energy - self.start_energy

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "steps": self.steps,
            "start_energy": self.start_energy,
            "transition_states": list(self.transition_states),
            "intermediates": list(self.intermediates),
            "product_energy": self.product_energy,
            "activation_energy": self.activation_energy,
            "delta_h": self.delta_h,
            "description": self.description,
        }


@dataclass(frozen=True)
class PlotPoint:
    label: str
    energy: float
    progress: float
    is_transition_state: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "energy": self.energy,
            "progress": self.progress,
            "is_transition_state": self.is_transition_state,
        }


# ----------------------------------------------------------------------
# 2. Builders
# ----------------------------------------------------------------------
def build_plot_points(profile: EnergyProfile) -> List[PlotPoint]:
    """
    Ordered stationary points along a 0..1 reaction coordinate:
    SM, TS (or TS1, Int, TS2), P.
    """
    points = [PlotPoint("SM", profile.start_energy, 0.0)]
    segment = 1.0 / (profile.steps * 2)
    for i, ts_energy in enumerate(profile.transition_states):
        label = "TS" if profile.steps == 1 else f"TS{i + 1}"
        points.append(PlotPoint(label, ts_energy, segment * (2 * i + 1), True))
        if i < len(profile.intermediates):
            points.append(PlotPoint("Int", profile.intermediates[i], segment * (2 * i + 2)))
    points.append(PlotPoint("P", profile.product_energy, 1.0))
    return points


def energy_bounds(profiles: Iterable[EnergyProfile]) -> Tuple[float, float]:
    """Shared energy-axis range for overlaid curves, padded by 10% of the span."""
    low, high = 0.0, 30.0
    for profile in profiles:
        energies = (
            profile.start_energy,
            profile.product_energy,
            *profile.transition_states,
            *profile.intermediates,
        )
        low = min(low, *energies)
        high = max(high, *energies)
    pad = (high - low) * 0.1
    return low - pad, high + pad


def profile_from_analysis(analysis: "ReactionAnalysis") -> EnergyProfile:
    """Curve for a structural analysis; SN1/E1 pathways get a carbocation intermediate."""
    ea = analysis.ea
    label = analysis.mechanism.value if analysis.mechanism is not None else analysis.category.value
    description = (
        f"{analysis.category.value}: "
        f"{', '.join(analysis.bonds_broken)} → {', '.join(analysis.bonds_formed)}"
    )
    if analysis.pathway.two_step:
        return EnergyProfile(
            name=f"{label} (from notation)",
            steps=2,
            transition_states=(ea, ea * 0.3),
            intermediates=(ea * 0.6,),
            product_energy=analysis.delta_h,
            description=description,
        )
    return EnergyProfile(
        name=f"{label} (from notation)",
        steps=1,
        transition_states=(ea,),
        intermediates=(),
        product_energy=analysis.delta_h,
        description=description,
    )


# ----------------------------------------------------------------------
# 3. Textbook Presets
# ----------------------------------------------------------------------
PRESETS: Mapping[Pathway, EnergyProfile] = MappingProxyType({
    Pathway.SN2: EnergyProfile(
        "SN2 (concerted)", 1, (15.0,), (), -5.0,
        "Single transition state, backside attack",
    ),
    Pathway.SN1: EnergyProfile(
        "SN1 (2-step)", 2, (20.0, 5.0), (12.0,), -5.0,
        "Carbocation intermediate",
    ),
    Pathway.E2: EnergyProfile(
        "E2 (concerted)", 1, (18.0,), (), 2.0,
        "Single transition state, anti-periplanar",
    ),
    Pathway.E1: EnergyProfile(
        "E1 (2-step)", 2, (22.0, 8.0), (14.0,), 2.0,
        "Carbocation intermediate",
    ),
    Pathway.HYDROGENATION: EnergyProfile(
        "Hydrogenation", 1, (12.0,), (), -30.0,
        "Highly exothermic",
    ),
    Pathway.EXOTHERMIC: EnergyProfile(
        "Exothermic (generic)", 1, (15.0,), (), -10.0,
        "Products lower in energy",
    ),
    Pathway.ENDOTHERMIC: EnergyProfile(
        "Endothermic (generic)", 1, (25.0,), (), 10.0,
        "Products higher in energy",
    ),
})


def preset(name: str) -> EnergyProfile:
    try:
        return PRESETS[Pathway(name.strip().lower())]
    except ValueError:
        raise KeyError(name) from None
