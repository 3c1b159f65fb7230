import logging
from types import MappingProxyType
from typing import Iterable, Mapping, NamedTuple, Optional, Tuple

from .profile import EnergyProfile
from .tables import (
    BOND_ENERGIES,
    DEFAULT_BASE_EA,
    DEFAULT_BOND_ENERGY,
    EA_FLOOR,
    LEAVING_GROUP_FACTORS,
    PATHWAY_BASE_EA,
    LeavingGroupQuality,
    Mechanism,
    Pathway,
    SubstrateClass,
)

logger = logging.getLogger("mechanism-engine.thermo")


class BondEstimate(NamedTuple):
    delta_h: float
    ea: float


class _MechanismBase(NamedTuple):
    name: str
    transition_states: Tuple[float, ...]
    intermediate: Optional[float]
    delta_h: float
    description: str


# ----------------------------------------------------------------------
# 1. Mechanism Parameters (kcal/mol)
# ----------------------------------------------------------------------
MECHANISM_BASES: Mapping[Mechanism, _MechanismBase] = MappingProxyType({
    Mechanism.SN2: _MechanismBase("SN2", (18.0,), None, -5.0, "Concerted backside attack"),
    Mechanism.SN1: _MechanismBase("SN1", (22.0, 5.0), 15.0, -5.0, "Carbocation intermediate"),
    Mechanism.E2: _MechanismBase("E2", (20.0,), None, 2.0, "Concerted anti-periplanar elimination"),
    Mechanism.E1: _MechanismBase(
        "E1", (22.0, 8.0), 15.0, 2.0, "Carbocation intermediate then elimination"
    ),
})

# SN2 barrier grows with crowding at the backside; tertiary is essentially blocked.
SN2_STERIC_PENALTY: Mapping[SubstrateClass, float] = MappingProxyType({
    SubstrateClass.METHYL: -3.0,
    SubstrateClass.PRIMARY: 0.0,
    SubstrateClass.SECONDARY: 5.0,
    SubstrateClass.TERTIARY: 15.0,
})

# Carbocation stability shifts the SN1/E1 intermediate.
CARBOCATION_ADJUSTMENT: Mapping[SubstrateClass, float] = MappingProxyType({
    SubstrateClass.TERTIARY: -5.0,
    SubstrateClass.BENZYLIC: -4.0,
    SubstrateClass.ALLYLIC: -4.0,
    SubstrateClass.SECONDARY: 0.0,
    SubstrateClass.PRIMARY: 8.0,
})


# ----------------------------------------------------------------------
# 2. Bond-Based Estimate
# ----------------------------------------------------------------------
def bond_energy(label: str) -> float:
    """Dissociation energy of a bond label such as "C-Br"; unknown labels get 80."""
    key = label.strip().replace("≡", "#")
    if key not in BOND_ENERGIES:
        logger.warning("No bond energy for %r, using %.0f kcal/mol", label, DEFAULT_BOND_ENERGY)
        return DEFAULT_BOND_ENERGY
    return float(BOND_ENERGIES[key])


def bond_enthalpy(bonds_broken: Iterable[str], bonds_formed: Iterable[str]) -> float:
    """ΔH = energy to break bonds - energy released forming bonds."""
    return sum(bond_energy(b) for b in bonds_broken) - sum(bond_energy(b) for b in bonds_formed)


def hammond_adjust(ea: float, delta_h: float) -> float:
    """
    Very exothermic steps have an early, reactant-like transition state
    (lower barrier); endothermic ones a late, product-like one (higher).
    """
    if delta_h < -20:
        return ea - 3.0
    if delta_h > 10:
        return ea + 5.0
    return ea


def floor_ea(ea: float) -> float:
    return max(EA_FLOOR, ea)


def estimate(
    bonds_broken: Iterable[str],
    bonds_formed: Iterable[str],
    pathway: Optional[Pathway] = None,
) -> BondEstimate:
    """
    Estimate (ΔH, Ea) from the bonds a reaction breaks and forms.
    Ea starts from the pathway's base barrier (20 when no pathway is given).
    """
    delta_h = bond_enthalpy(bonds_broken, bonds_formed)
    base = PATHWAY_BASE_EA.get(pathway, DEFAULT_BASE_EA)
    ea = floor_ea(hammond_adjust(base, delta_h))
    return BondEstimate(delta_h=delta_h, ea=ea)


# ----------------------------------------------------------------------
# 3. Mechanism-Based Estimate
# ----------------------------------------------------------------------
def estimate_profile(
    mechanism: Mechanism,
    substrate: SubstrateClass,
    leaving_group: LeavingGroupQuality,
) -> EnergyProfile:
    """
    Energy curve for a mechanism under a given substrate and leaving group.

    The leaving group raises the first barrier by (1 - factor) * 5; SN2 pays a
    steric penalty and SN1/E1 move their carbocation intermediate with
    substrate stability. The first barrier never drops below 5 kcal/mol.
    """
    base = MECHANISM_BASES[mechanism]
    lg_penalty = (1.0 - LEAVING_GROUP_FACTORS[leaving_group]) * 5.0

    first_ts = base.transition_states[0] + lg_penalty
    if mechanism is Mechanism.SN2:
        first_ts += SN2_STERIC_PENALTY.get(substrate, 0.0)
    transition_states = (floor_ea(first_ts),) + base.transition_states[1:]

    intermediates: Tuple[float, ...] = ()
    if base.intermediate is not None:
        intermediates = (base.intermediate + CARBOCATION_ADJUSTMENT.get(substrate, 0.0),)

    return EnergyProfile(
        name=base.name,
        steps=len(transition_states),
        transition_states=transition_states,
        intermediates=intermediates,
        product_energy=base.delta_h,
        description=base.description,
    )
