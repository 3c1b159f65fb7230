import logging
import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from . import structure
from .notation import HALOGENS, parse
from .profile import EnergyProfile
from .tables import (
    ADDITIVE_AXES,
    LEAVING_GROUP_FACTORS,
    LEAVING_GROUP_MAP,
    REAGENT_MAP,
    SOLVENT_MAP,
    SUBSTRATE_LABELS,
    LeavingGroupQuality,
    Mechanism,
    NucleophileClass,
    SolventClass,
    SubstrateClass,
    TemperatureBand,
)
from .thermo import estimate_profile

logger = logging.getLogger("mechanism-engine.conditions")

# A runner-up above this share is reported as a secondary mechanism.
COMPETITION_THRESHOLD = 15
# A secondary above this share is called out as a competing pathway.
WARNING_THRESHOLD = 25

BLOCKED_SCORE = -10.0


class UnknownCondition(ValueError):
    """A named solvent, reagent or leaving group we have no mapping for."""


# ----------------------------------------------------------------------
# 1. Records
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class ConditionSet:
    substrate: SubstrateClass = SubstrateClass.SECONDARY
    nucleophile: NucleophileClass = NucleophileClass.WEAK
    leaving_group: LeavingGroupQuality = LeavingGroupQuality.GOOD
    solvent: SolventClass = SolventClass.POLAR_PROTIC
    temperature: TemperatureBand = TemperatureBand.ROOM

    def to_dict(self) -> Dict[str, str]:
        return {
            "substrate": self.substrate.value,
            "nucleophile": self.nucleophile.value,
            "leaving_group": self.leaving_group.value,
            "solvent": self.solvent.value,
            "temperature": self.temperature.value,
        }


@dataclass(frozen=True)
class MechanismPrediction:
    conditions: ConditionSet
    raw_scores: Mapping[Mechanism, float]
    percentages: Mapping[Mechanism, int]
    primary: Mechanism
    secondary: Optional[Mechanism] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conditions": self.conditions.to_dict(),
            "raw_scores": {m.value: s for m, s in self.raw_scores.items()},
            "percentages": {m.value: p for m, p in self.percentages.items()},
            "primary": {"mechanism": self.primary.value, "percentage": self.percentages[self.primary]},
            "secondary": (
                {"mechanism": self.secondary.value, "percentage": self.percentages[self.secondary]}
                if self.secondary is not None
                else None
            ),
        }


@dataclass(frozen=True)
class Explanation:
    primary: Mechanism
    percentage: int
    reasons: Tuple[str, ...]
    competing: Optional[Mechanism] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary": self.primary.value,
            "percentage": self.percentage,
            "reasons": list(self.reasons),
            "competing": self.competing.value if self.competing is not None else None,
        }


@dataclass(frozen=True)
class CompetingPathway:
    mechanism: Mechanism
    percentage: int
    profile: EnergyProfile
    is_primary: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mechanism": self.mechanism.value,
            "percentage": self.percentage,
            "profile": self.profile.to_dict(),
            "is_primary": self.is_primary,
        }


# ----------------------------------------------------------------------
# 2. Scoring
# ----------------------------------------------------------------------
def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def raw_scores(conditions: ConditionSet) -> Dict[Mechanism, float]:
    """
    Per-mechanism sum of the additive axis tables, scaled by the leaving
    group factor, with the special-case overrides applied in order.
    """
    factor = LEAVING_GROUP_FACTORS[conditions.leaving_group]
    scores: Dict[Mechanism, float] = {}
    for mechanism in Mechanism:
        total = sum(table[getattr(conditions, axis)][mechanism] for axis, table in ADDITIVE_AXES)
        scores[mechanism] = total * factor

    # Vinyl/aryl carbons cannot do SN1 or SN2.
    if conditions.substrate is SubstrateClass.VINYL:
        scores[Mechanism.SN1] = BLOCKED_SCORE
        scores[Mechanism.SN2] = BLOCKED_SCORE
    # Methyl has no meaningful beta-hydrogens.
    if conditions.substrate is SubstrateClass.METHYL:
        scores[Mechanism.E1] = BLOCKED_SCORE
        scores[Mechanism.E2] = -5.0
    # A poor leaving group blocks everything.
    if conditions.leaving_group is LeavingGroupQuality.POOR:
        for mechanism in scores:
            scores[mechanism] = min(scores[mechanism], 0.0)
    return scores


def normalize(scores: Mapping[Mechanism, float]) -> Dict[Mechanism, int]:
    """
    Integer percentages summing to exactly 100.

    Scores are shifted so the lowest keeps a 0.1 share; the rounding
    remainder goes to the highest raw score (ties by mechanism order).
    """
    low = min(scores.values())
    adjusted = {m: max(0.0, s - low + 0.1) for m, s in scores.items()}
    total = sum(adjusted.values())
    percentages = {m: _round_half_up(100.0 * a / total) for m, a in adjusted.items()}

    remainder = 100 - sum(percentages.values())
    if remainder:
        leader = max(Mechanism, key=lambda m: scores[m])
        percentages[leader] += remainder
    return percentages


def score(conditions: ConditionSet) -> MechanismPrediction:
    """Likelihood of SN2/SN1/E2/E1 under a set of conditions. Defined for every combination."""
    scores = raw_scores(conditions)
    percentages = normalize(scores)

    primary = max(Mechanism, key=lambda m: percentages[m])
    runner_up = max((m for m in Mechanism if m is not primary), key=lambda m: percentages[m])
    secondary = runner_up if percentages[runner_up] > COMPETITION_THRESHOLD else None

    logger.debug("Scored %s -> %s", conditions.to_dict(), percentages)
    return MechanismPrediction(
        conditions=conditions,
        raw_scores=MappingProxyType(scores),
        percentages=MappingProxyType(percentages),
        primary=primary,
        secondary=secondary,
    )


# ----------------------------------------------------------------------
# 3. Explanations & Competing Pathways
# ----------------------------------------------------------------------
def explain(prediction: MechanismPrediction) -> Explanation:
    """Reasons, in axis order, why the primary mechanism wins."""
    c = prediction.conditions
    primary = prediction.primary
    unimolecular = primary in (Mechanism.SN1, Mechanism.E1)
    elimination = primary in (Mechanism.E2, Mechanism.E1)
    reasons: List[str] = []

    if c.substrate is SubstrateClass.TERTIARY:
        if unimolecular:
            reasons.append("Tertiary substrate stabilizes carbocation intermediate")
        if primary is Mechanism.E2:
            reasons.append("Tertiary substrate blocks SN2, favors elimination")
        reasons.append("SN2 is blocked due to steric hindrance")
    elif c.substrate in (SubstrateClass.METHYL, SubstrateClass.PRIMARY):
        if primary is Mechanism.SN2:
            reasons.append(f"{SUBSTRATE_LABELS[c.substrate]} substrate allows backside attack")
        reasons.append("Carbocation would be too unstable for SN1/E1")
    elif c.substrate is SubstrateClass.SECONDARY:
        reasons.append("Secondary substrate: multiple mechanisms possible")
    elif c.substrate is SubstrateClass.VINYL:
        reasons.append("Vinyl/aryl carbon cannot undergo SN1 or SN2")
    else:
        reasons.append(f"{SUBSTRATE_LABELS[c.substrate]} substrate is resonance-stabilized")

    if c.nucleophile is NucleophileClass.STRONG_BULKY:
        reasons.append("Bulky base favors elimination (E2) over substitution")
    elif c.nucleophile in (NucleophileClass.STRONG_SMALL, NucleophileClass.STRONG_NORMAL):
        if primary is Mechanism.SN2:
            reasons.append("Strong nucleophile drives SN2 mechanism")
    else:
        reasons.append("Weak/no nucleophile favors unimolecular mechanisms (SN1/E1)")

    if c.solvent is SolventClass.POLAR_APROTIC:
        reasons.append("Polar aprotic solvent enhances nucleophilicity")
    elif c.solvent is SolventClass.POLAR_PROTIC:
        if unimolecular:
            reasons.append("Polar protic solvent stabilizes carbocation")
        else:
            reasons.append("Polar protic solvent solvates nucleophile (reduces SN2 rate)")

    if c.temperature in (TemperatureBand.ELEVATED, TemperatureBand.HIGH) and elimination:
        reasons.append("High temperature favors elimination (ΔS positive)")

    if c.leaving_group is LeavingGroupQuality.EXCELLENT:
        reasons.append("Excellent leaving group accelerates all mechanisms")
    elif c.leaving_group is LeavingGroupQuality.POOR:
        reasons.append("Poor leaving group: reaction may require activation")

    secondary = prediction.secondary
    if secondary is not None and prediction.percentages[secondary] > WARNING_THRESHOLD:
        reasons.append(
            f"{secondary.value} is a competing pathway ({prediction.percentages[secondary]}%)"
        )

    return Explanation(
        primary=primary,
        percentage=prediction.percentages[primary],
        reasons=tuple(reasons),
        competing=secondary,
    )


def competing_mechanisms(conditions: ConditionSet, threshold: int = 10) -> List[CompetingPathway]:
    """Every mechanism at or above `threshold` percent with its energy curve, most likely first."""
    prediction = score(conditions)
    pathways = [
        CompetingPathway(
            mechanism=mechanism,
            percentage=prediction.percentages[mechanism],
            profile=estimate_profile(mechanism, conditions.substrate, conditions.leaving_group),
            is_primary=mechanism is prediction.primary,
        )
        for mechanism in Mechanism
        if prediction.percentages[mechanism] >= threshold
    ]
    pathways.sort(key=lambda p: p.percentage, reverse=True)
    return pathways


# ----------------------------------------------------------------------
# 4. Named Condition Resolution
# ----------------------------------------------------------------------
def _lookup(name: str, named: Mapping[str, Any], enum_type: Any, kind: str) -> Any:
    key = name.strip().lower()
    if key in named:
        return named[key]
    try:
        return enum_type(key)
    except ValueError:
        raise UnknownCondition(f"Unknown {kind}: {name!r}") from None


def resolve_solvent(name: str) -> SolventClass:
    return _lookup(name, SOLVENT_MAP, SolventClass, "solvent")


def resolve_nucleophile(reagent: str) -> NucleophileClass:
    return _lookup(reagent, REAGENT_MAP, NucleophileClass, "reagent")


def resolve_leaving_group(name: str) -> LeavingGroupQuality:
    return _lookup(name, LEAVING_GROUP_MAP, LeavingGroupQuality, "leaving group")


def resolve_temperature(celsius: float) -> TemperatureBand:
    if celsius < 0:
        return TemperatureBand.LOW
    if celsius <= 40:
        return TemperatureBand.ROOM
    if celsius <= 80:
        return TemperatureBand.ELEVATED
    return TemperatureBand.HIGH


def resolve_conditions(
    substrate: str,
    solvent: str,
    reagent: str,
    temperature: float = 25.0,
    leaving_group: Optional[str] = None,
) -> ConditionSet:
    """
    Build a ConditionSet from free-form selections: a substrate notation, a
    named solvent and reagent, and a temperature in °C.

    The substrate class comes from RDKit's reading of the carbon carrying
    the halogen when RDKit accepts the notation, otherwise from the
    heuristic parser. Without an explicit leaving group, the best halogen
    present decides it (none at all means a poor leaving group).
    """
    features = parse(substrate)
    strict = structure.classify_substrate(features.notation)
    substrate_class = strict[0] if strict is not None else features.substitution

    if leaving_group is not None:
        lg_quality = resolve_leaving_group(leaving_group)
    elif strict is not None:
        lg_quality = LEAVING_GROUP_MAP[strict[1].lower()]
    else:
        present = [h for h in reversed(HALOGENS) if features.halogens[h] > 0]
        lg_quality = LEAVING_GROUP_MAP[present[0].lower()] if present else LeavingGroupQuality.POOR

    conditions = ConditionSet(
        substrate=substrate_class,
        nucleophile=resolve_nucleophile(reagent),
        leaving_group=lg_quality,
        solvent=resolve_solvent(solvent),
        temperature=resolve_temperature(temperature),
    )
    logger.info("Resolved %r in %s with %s at %s°C -> %s",
                substrate, solvent, reagent, temperature, conditions.to_dict())
    return conditions
