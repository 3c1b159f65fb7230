"""Strict reading of notations with RDKit.

The heuristic parser in `notation` never fails on malformed input; this
module is the strict counterpart used to tell students whether RDKit
accepts what they typed, and to classify the reacting carbon of a substrate
from its real connectivity.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Set, Tuple

from rdkit import Chem
from rdkit import RDLogger

from . import config
from .notation import EmptyInput
from .tables import SubstrateClass

logger = logging.getLogger("mechanism-engine.structure")

# ----------------------------------------------------------------------
# 0. RDKit Logging Configuration
# ----------------------------------------------------------------------
# RDKit reports every parse failure on stderr; we surface our own hint instead.
if not config.RDKIT_LOGS:
    RDLogger.logger().setLevel(RDLogger.CRITICAL)

HALOGEN_SYMBOLS: Set[str] = {"F", "Cl", "Br", "I"}

PARSE_HINT = (
    "Could not parse this notation. Common issues:\n"
    "  - Use 'C' instead of 'CH2' (atoms, not groups)\n"
    "  - Each ring digit must be opened and closed exactly once (e.g. C1CCCCC1)\n"
    "  - Use correct case for atoms (e.g. 'Cl' not 'CL' or 'cl')\n"
    "  - Separate disconnected parts with '.'"
)


@dataclass(frozen=True)
class NotationCheck:
    notation: str
    valid: bool
    canonical: Optional[str] = None
    hint: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "notation": self.notation,
            "valid": self.valid,
            "canonical": self.canonical,
            "hint": self.hint,
        }


# ----------------------------------------------------------------------
# 1. Parsing & Canonicalization
# ----------------------------------------------------------------------
def read_molecule(notation: str) -> Optional[Chem.Mol]:
    """RDKit molecule for a notation, or None when RDKit rejects it."""
    return Chem.MolFromSmiles(notation.strip(), sanitize=True)


def check_notation(notation: str) -> NotationCheck:
    """
    Parse strictly with RDKit and return the canonical form, or a hint
    listing the usual mistakes when the notation is rejected.
    """
    text = notation.strip()
    if not text:
        raise EmptyInput("Notation is empty. Enter a structure such as CCBr.")
    mol = read_molecule(text)
    if mol is None:
        logger.warning("RDKit rejected notation %r", text)
        return NotationCheck(notation=text, valid=False, hint=PARSE_HINT)
    return NotationCheck(notation=text, valid=True, canonical=Chem.MolToSmiles(mol, canonical=True))


# ----------------------------------------------------------------------
# 2. Substrate Analysis
# ----------------------------------------------------------------------
def find_alpha_carbon(mol: Chem.Mol) -> Optional[Tuple[Chem.Atom, str]]:
    """
    Return the carbon bonded to a halogen by a SINGLE bond, with the halogen
    symbol, if any.
    """
    for bond in mol.GetBonds():
        if bond.GetBondType() != Chem.rdchem.BondType.SINGLE:
            continue
        a1 = bond.GetBeginAtom()
        a2 = bond.GetEndAtom()
        if a1.GetSymbol() in HALOGEN_SYMBOLS and a2.GetSymbol() == "C":
            return a2, a1.GetSymbol()
        if a2.GetSymbol() in HALOGEN_SYMBOLS and a1.GetSymbol() == "C":
            return a1, a2.GetSymbol()
    return None


def _is_allylic_neighbor(neighbor: Chem.Atom, alpha: Chem.Atom) -> bool:
    for bond in neighbor.GetBonds():
        if (
            bond.GetBondType() == Chem.rdchem.BondType.DOUBLE
            and bond.GetOtherAtom(neighbor).GetIdx() != alpha.GetIdx()
        ):
            return True
    return False


def classify_substrate(notation: str) -> Optional[Tuple[SubstrateClass, str]]:
    """
    Substrate class and halogen of the carbon carrying the leaving group:
    vinylic/aryl, benzylic, allylic, or methyl..tertiary by carbon count.
    None when RDKit rejects the notation or there is no C-halogen bond.
    """
    mol = read_molecule(notation)
    if mol is None:
        return None
    found = find_alpha_carbon(mol)
    if found is None:
        return None
    alpha, halogen = found

    if alpha.GetIsAromatic() or alpha.GetHybridization() == Chem.rdchem.HybridizationType.SP2:
        return SubstrateClass.VINYL, halogen

    carbons = [nbr for nbr in alpha.GetNeighbors() if nbr.GetSymbol() == "C"]
    if any(nbr.GetIsAromatic() for nbr in carbons):
        return SubstrateClass.BENZYLIC, halogen
    if any(_is_allylic_neighbor(nbr, alpha) for nbr in carbons):
        return SubstrateClass.ALLYLIC, halogen

    if len(carbons) == 0:
        return SubstrateClass.METHYL, halogen
    if len(carbons) == 1:
        return SubstrateClass.PRIMARY, halogen
    if len(carbons) == 2:
        return SubstrateClass.SECONDARY, halogen
    return SubstrateClass.TERTIARY, halogen
