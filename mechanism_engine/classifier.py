import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from . import thermo
from .notation import HALOGENS, MoleculeFeatures, parse
from .tables import (
    Confidence,
    MechanismSubtype,
    Pathway,
    ReactionCategory,
    SubstrateClass,
)

logger = logging.getLogger("mechanism-engine.classifier")


@dataclass(frozen=True)
class ReactionAnalysis:
    """
    Structural reading of a reactant -> product pair.

    `mechanism` is set only for substitution and elimination; `pathway` is
    the energy pathway the thermodynamics were estimated with (SN2 for the
    ambiguous SN1/SN2 case, hydrogenation for additions).
    """

    reactant: MoleculeFeatures
    product: MoleculeFeatures
    category: ReactionCategory
    mechanism: Optional[MechanismSubtype]
    pathway: Pathway
    bonds_broken: Tuple[str, ...]
    bonds_formed: Tuple[str, ...]
    delta_h: float
    ea: float
    confidence: Confidence

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reactant": self.reactant.to_dict(),
            "product": self.product.to_dict(),
            "category": self.category.value,
            "mechanism": self.mechanism.value if self.mechanism is not None else None,
            "candidates": (
                [m.value for m in self.mechanism.candidates] if self.mechanism is not None else []
            ),
            "pathway": self.pathway.value,
            "bonds_broken": list(self.bonds_broken),
            "bonds_formed": list(self.bonds_formed),
            "delta_h": self.delta_h,
            "ea": self.ea,
            "confidence": self.confidence.value,
        }


_SUBSTITUTION_SUBTYPES = {
    SubstrateClass.METHYL: MechanismSubtype.SN2,
    SubstrateClass.PRIMARY: MechanismSubtype.SN2,
    SubstrateClass.SECONDARY: MechanismSubtype.SN1_OR_SN2,
    SubstrateClass.TERTIARY: MechanismSubtype.SN1,
}


def lost_halogen(before: MoleculeFeatures, after: MoleculeFeatures) -> Optional[str]:
    """First halogen (F, Cl, Br, I order) whose count went down, if any."""
    before_counts = before.halogens
    after_counts = after.halogens
    for symbol in HALOGENS:
        if before_counts[symbol] > after_counts[symbol]:
            return symbol
    return None


def classify(before: MoleculeFeatures, after: MoleculeFeatures) -> ReactionAnalysis:
    """
    Decision list over the feature changes, first match wins:
      1. halogen lost + O or N gained, no new C=C -> substitution
      2. halogen lost + new C=C                    -> elimination
      3. C=C consumed                              -> addition (hydrogenation)
      4. anything else                             -> unknown
    """
    halogen = lost_halogen(before, after)
    oxygen_gained = after.oxygens > before.oxygens
    nitrogen_gained = after.nitrogens > before.nitrogens
    double_bond_gained = after.double_bonds > before.double_bonds

    mechanism: Optional[MechanismSubtype] = None
    confidence = Confidence.MEDIUM

    if halogen and (oxygen_gained or nitrogen_gained) and not double_bond_gained:
        category = ReactionCategory.SUBSTITUTION
        mechanism = _SUBSTITUTION_SUBTYPES.get(before.substitution, MechanismSubtype.SN1_OR_SN2)
        pathway = Pathway.from_mechanism(mechanism.default)
        bonds_broken: Tuple[str, ...] = (f"C-{halogen}",)
        bonds_formed: Tuple[str, ...] = ("C-O",) if oxygen_gained else ("C-N",)
    elif halogen and double_bond_gained:
        category = ReactionCategory.ELIMINATION
        if before.substitution is SubstrateClass.TERTIARY:
            mechanism = MechanismSubtype.E1
        else:
            mechanism = MechanismSubtype.E2
        pathway = Pathway.from_mechanism(mechanism.default)
        bonds_broken = (f"C-{halogen}", "C-H")
        bonds_formed = ("C=C",)
    elif before.double_bonds > after.double_bonds:
        category = ReactionCategory.ADDITION
        pathway = Pathway.HYDROGENATION
        bonds_broken = ("C=C",)
        bonds_formed = ("C-C", "C-H", "C-H")
    else:
        category = ReactionCategory.UNKNOWN
        pathway = Pathway.EXOTHERMIC
        bonds_broken = ()
        bonds_formed = ()
        confidence = Confidence.LOW

    delta_h, ea = thermo.estimate(bonds_broken, bonds_formed, pathway)
    analysis = ReactionAnalysis(
        reactant=before,
        product=after,
        category=category,
        mechanism=mechanism,
        pathway=pathway,
        bonds_broken=bonds_broken,
        bonds_formed=bonds_formed,
        delta_h=delta_h,
        ea=ea,
        confidence=confidence,
    )
    logger.debug(
        "Classified %s -> %s as %s/%s",
        before.notation, after.notation, category.value,
        mechanism.value if mechanism else None,
    )
    return analysis


def analyze(reactant: str, product: str) -> ReactionAnalysis:
    """Parse both notations and classify the change. Raises EmptyInput for blank input."""
    return classify(parse(reactant), parse(product))
