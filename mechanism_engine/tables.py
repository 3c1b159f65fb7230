from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

# ----------------------------------------------------------------------
# 1. Enumerations
# ----------------------------------------------------------------------
class Mechanism(Enum):
    """The four substitution/elimination mechanisms, in tie-break order."""

    SN2 = "SN2"
    SN1 = "SN1"
    E2 = "E2"
    E1 = "E1"


class SubstrateClass(Enum):
    METHYL = "methyl"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
    VINYL = "vinyl"
    ALLYLIC = "allylic"
    BENZYLIC = "benzylic"


class NucleophileClass(Enum):
    STRONG_SMALL = "strong_small"
    STRONG_NORMAL = "strong_normal"
    STRONG_BULKY = "strong_bulky"
    WEAK = "weak"
    NONE = "none"


class LeavingGroupQuality(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"


class SolventClass(Enum):
    POLAR_APROTIC = "polar_aprotic"
    POLAR_PROTIC = "polar_protic"
    NONPOLAR = "nonpolar"


class TemperatureBand(Enum):
    LOW = "low"
    ROOM = "room"
    ELEVATED = "elevated"
    HIGH = "high"


class FunctionalGroup(Enum):
    ALKYL_HALIDE = "alkyl-halide"
    ALCOHOL = "alcohol"
    ETHER = "ether"
    ALKENE = "alkene"
    ALKYNE = "alkyne"
    CARBONYL = "carbonyl"
    CARBOXYL = "carboxyl"
    AMINE = "amine"
    NITRILE = "nitrile"
    THIOL = "thiol"


class ReactionCategory(Enum):
    SUBSTITUTION = "substitution"
    ELIMINATION = "elimination"
    ADDITION = "addition"
    UNKNOWN = "unknown"


class MechanismSubtype(Enum):
    """
    Sub-type assigned by the structural classifier. SN1_OR_SN2 keeps the
    ambiguity of secondary substrates explicit; callers that need a single
    mechanism use `default`.
    """

    SN1 = "SN1"
    SN2 = "SN2"
    E1 = "E1"
    E2 = "E2"
    SN1_OR_SN2 = "SN1/SN2"

    @property
    def candidates(self) -> Tuple[Mechanism, ...]:
        if self is MechanismSubtype.SN1_OR_SN2:
            return (Mechanism.SN1, Mechanism.SN2)
        return (Mechanism(self.value),)

    @property
    def default(self) -> Mechanism:
        if self is MechanismSubtype.SN1_OR_SN2:
            return Mechanism.SN2
        return Mechanism(self.value)


class Pathway(Enum):
    """Energy pathways known to the thermodynamics estimator."""

    SN2 = "sn2"
    SN1 = "sn1"
    E2 = "e2"
    E1 = "e1"
    HYDROGENATION = "hydrogenation"
    EXOTHERMIC = "exothermic"
    ENDOTHERMIC = "endothermic"

    @classmethod
    def from_mechanism(cls, mechanism: Mechanism) -> "Pathway":
        return cls(mechanism.value.lower())

    @property
    def two_step(self) -> bool:
        return self in (Pathway.SN1, Pathway.E1)


class Confidence(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ----------------------------------------------------------------------
# 2. Condition Weight Tables
# ----------------------------------------------------------------------
# Every row gives one integer contribution per mechanism.
WeightRow = Mapping[Mechanism, int]


def _row(sn2: int, sn1: int, e2: int, e1: int) -> WeightRow:
    return MappingProxyType({
        Mechanism.SN2: sn2,
        Mechanism.SN1: sn1,
        Mechanism.E2: e2,
        Mechanism.E1: e1,
    })


SUBSTRATE_WEIGHTS: Mapping[SubstrateClass, WeightRow] = MappingProxyType({
    SubstrateClass.METHYL: _row(5, 0, 1, 0),
    SubstrateClass.PRIMARY: _row(4, 1, 2, 0),
    SubstrateClass.SECONDARY: _row(2, 2, 3, 2),
    SubstrateClass.TERTIARY: _row(0, 4, 4, 4),
    SubstrateClass.VINYL: _row(0, 0, 0, 0),
    SubstrateClass.ALLYLIC: _row(3, 4, 2, 3),
    SubstrateClass.BENZYLIC: _row(3, 4, 2, 3),
})

NUCLEOPHILE_WEIGHTS: Mapping[NucleophileClass, WeightRow] = MappingProxyType({
    NucleophileClass.STRONG_SMALL: _row(4, 0, 1, 0),
    NucleophileClass.STRONG_NORMAL: _row(3, 0, 3, 0),
    NucleophileClass.STRONG_BULKY: _row(0, 0, 5, 0),
    NucleophileClass.WEAK: _row(1, 3, 0, 2),
    NucleophileClass.NONE: _row(0, 2, 0, 3),
})

SOLVENT_WEIGHTS: Mapping[SolventClass, WeightRow] = MappingProxyType({
    SolventClass.POLAR_APROTIC: _row(3, -1, 2, -1),
    SolventClass.POLAR_PROTIC: _row(-1, 3, 0, 2),
    SolventClass.NONPOLAR: _row(0, -2, 1, -2),
})

TEMPERATURE_WEIGHTS: Mapping[TemperatureBand, WeightRow] = MappingProxyType({
    TemperatureBand.LOW: _row(1, -1, -1, -2),
    TemperatureBand.ROOM: _row(0, 0, 0, 0),
    TemperatureBand.ELEVATED: _row(-1, 1, 2, 2),
    TemperatureBand.HIGH: _row(-2, 1, 3, 3),
})

LEAVING_GROUP_FACTORS: Mapping[LeavingGroupQuality, float] = MappingProxyType({
    LeavingGroupQuality.EXCELLENT: 1.3,
    LeavingGroupQuality.GOOD: 1.0,
    LeavingGroupQuality.MODERATE: 0.6,
    LeavingGroupQuality.POOR: 0.1,
})

# Additive axes of a ConditionSet, by attribute name.
ADDITIVE_AXES: Tuple[Tuple[str, Mapping[Enum, WeightRow]], ...] = (
    ("substrate", SUBSTRATE_WEIGHTS),
    ("nucleophile", NUCLEOPHILE_WEIGHTS),
    ("solvent", SOLVENT_WEIGHTS),
    ("temperature", TEMPERATURE_WEIGHTS),
)

SUBSTRATE_LABELS: Mapping[SubstrateClass, str] = MappingProxyType({
    SubstrateClass.METHYL: "Methyl (CH3-X)",
    SubstrateClass.PRIMARY: "1° Primary",
    SubstrateClass.SECONDARY: "2° Secondary",
    SubstrateClass.TERTIARY: "3° Tertiary",
    SubstrateClass.VINYL: "Vinyl/Aryl",
    SubstrateClass.ALLYLIC: "Allylic",
    SubstrateClass.BENZYLIC: "Benzylic",
})

# ----------------------------------------------------------------------
# 3. Thermochemistry Tables
# ----------------------------------------------------------------------
# Average bond dissociation energies (kcal/mol).
BOND_ENERGIES: Mapping[str, int] = MappingProxyType({
    "C-H": 99,
    "C-C": 83,
    "C=C": 146,
    "C#C": 200,
    "C-O": 86,
    "C=O": 178,
    "C-N": 73,
    "C=N": 147,
    "C#N": 213,
    "C-F": 116,
    "C-Cl": 81,
    "C-Br": 68,
    "C-I": 51,
    "C-S": 65,
    "O-H": 110,
    "N-H": 93,
    "S-H": 82,
    "H-H": 104,
    "H-F": 136,
    "H-Cl": 103,
    "H-Br": 87,
    "H-I": 71,
})

DEFAULT_BOND_ENERGY = 80.0

PATHWAY_BASE_EA: Mapping[Pathway, float] = MappingProxyType({
    Pathway.SN2: 18.0,
    Pathway.SN1: 22.0,
    Pathway.E2: 20.0,
    Pathway.E1: 22.0,
    Pathway.HYDROGENATION: 12.0,
    Pathway.EXOTHERMIC: 15.0,
    Pathway.ENDOTHERMIC: 25.0,
})

DEFAULT_BASE_EA = 20.0
EA_FLOOR = 5.0

# ----------------------------------------------------------------------
# 4. Named Condition Mapping
# ----------------------------------------------------------------------
SOLVENT_MAP: Mapping[str, SolventClass] = MappingProxyType({
    "water": SolventClass.POLAR_PROTIC,
    "ethanol": SolventClass.POLAR_PROTIC,
    "methanol": SolventClass.POLAR_PROTIC,
    "isopropanol": SolventClass.POLAR_PROTIC,
    "t-butanol": SolventClass.POLAR_PROTIC,
    "acetic acid": SolventClass.POLAR_PROTIC,
    "formic acid": SolventClass.POLAR_PROTIC,

    "acetone": SolventClass.POLAR_APROTIC,
    "dmso": SolventClass.POLAR_APROTIC,
    "dmf": SolventClass.POLAR_APROTIC,
    "acetonitrile": SolventClass.POLAR_APROTIC,
    "thf": SolventClass.POLAR_APROTIC,

    "dichloromethane": SolventClass.NONPOLAR,
    "chloroform": SolventClass.NONPOLAR,
    "toluene": SolventClass.NONPOLAR,
    "benzene": SolventClass.NONPOLAR,
    "hexane": SolventClass.NONPOLAR,
    "diethyl ether": SolventClass.NONPOLAR,
    "pentane": SolventClass.NONPOLAR,
})

REAGENT_MAP: Mapping[str, NucleophileClass] = MappingProxyType({
    "nacn": NucleophileClass.STRONG_SMALL,
    "kcn": NucleophileClass.STRONG_SMALL,
    "ki": NucleophileClass.STRONG_SMALL,
    "nai": NucleophileClass.STRONG_SMALL,
    "nash": NucleophileClass.STRONG_SMALL,
    "nan3": NucleophileClass.STRONG_SMALL,

    "naoh": NucleophileClass.STRONG_NORMAL,
    "koh": NucleophileClass.STRONG_NORMAL,
    "naoch3": NucleophileClass.STRONG_NORMAL,
    "naome": NucleophileClass.STRONG_NORMAL,
    "naoet": NucleophileClass.STRONG_NORMAL,
    "basic": NucleophileClass.STRONG_NORMAL,
    "strong base": NucleophileClass.STRONG_NORMAL,

    "kotbu": NucleophileClass.STRONG_BULKY,
    "lda": NucleophileClass.STRONG_BULKY,
    "dbu": NucleophileClass.STRONG_BULKY,

    "h2o": NucleophileClass.WEAK,
    "ch3oh": NucleophileClass.WEAK,
    "meoh": NucleophileClass.WEAK,
    "etoh": NucleophileClass.WEAK,
    "weak base": NucleophileClass.WEAK,
    "acidic": NucleophileClass.WEAK,
    "neutral": NucleophileClass.WEAK,

    "none": NucleophileClass.NONE,
    "heat": NucleophileClass.NONE,
})

LEAVING_GROUP_MAP: Mapping[str, LeavingGroupQuality] = MappingProxyType({
    "i": LeavingGroupQuality.EXCELLENT,
    "ots": LeavingGroupQuality.EXCELLENT,
    "oms": LeavingGroupQuality.EXCELLENT,
    "otf": LeavingGroupQuality.EXCELLENT,
    "br": LeavingGroupQuality.GOOD,
    "cl": LeavingGroupQuality.GOOD,
    "f": LeavingGroupQuality.MODERATE,
    "oac": LeavingGroupQuality.MODERATE,
    "oh": LeavingGroupQuality.POOR,
    "or": LeavingGroupQuality.POOR,
    "nh2": LeavingGroupQuality.POOR,
})

# ----------------------------------------------------------------------
# 5. Example Reactions
# ----------------------------------------------------------------------
REACTION_EXAMPLES: Mapping[str, Dict[str, str]] = MappingProxyType({
    "SN2 - Bromide to Alcohol": {
        "reactant": "CCBr",
        "product": "CCO",
        "description": "Bromoethane + OH- -> Ethanol",
    },
    "SN1 - Tertiary Bromide": {
        "reactant": "CC(C)(C)Br",
        "product": "CC(C)(C)O",
        "description": "2-Bromo-2-methylpropane -> tert-Butanol",
    },
    "E2 - Elimination": {
        "reactant": "CC(Br)C",
        "product": "CC=C",
        "description": "2-Bromopropane -> Propene",
    },
    "Hydrogenation": {
        "reactant": "CC=CC",
        "product": "CCCC",
        "description": "2-Butene + H2 -> Butane",
    },
})
