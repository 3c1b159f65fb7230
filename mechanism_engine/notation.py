import logging
import re
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from . import config
from .tables import FunctionalGroup, SubstrateClass

logger = logging.getLogger("mechanism-engine.notation")

# ----------------------------------------------------------------------
# 1. Errors
# ----------------------------------------------------------------------
class ParseError(ValueError):
    """A notation that cannot be read at all."""


class EmptyInput(ParseError):
    """Empty or whitespace-only notation. A user-input problem, not a fault."""


# ----------------------------------------------------------------------
# 2. Feature Record
# ----------------------------------------------------------------------
HALOGENS: Tuple[str, ...] = ("F", "Cl", "Br", "I")


@dataclass(frozen=True)
class MoleculeFeatures:
    notation: str
    carbons: int = 0
    fluorine: int = 0
    chlorine: int = 0
    bromine: int = 0
    iodine: int = 0
    oxygens: int = 0
    nitrogens: int = 0
    sulfurs: int = 0
    double_bonds: int = 0
    triple_bonds: int = 0
    rings: int = 0
    branches: int = 0
    aromatic_atoms: int = 0
    functional_groups: FrozenSet[FunctionalGroup] = frozenset()
    substitution: SubstrateClass = SubstrateClass.PRIMARY

    @property
    def halogens(self) -> Dict[str, int]:
        """Halogen counts keyed by symbol, in the order F, Cl, Br, I."""
        return {
            "F": self.fluorine,
            "Cl": self.chlorine,
            "Br": self.bromine,
            "I": self.iodine,
        }

    def has_group(self, group: FunctionalGroup) -> bool:
        return group in self.functional_groups

    def to_dict(self) -> Dict[str, Any]:
        return {
            "notation": self.notation,
            "carbons": self.carbons,
            "halogens": self.halogens,
            "oxygens": self.oxygens,
            "nitrogens": self.nitrogens,
            "sulfurs": self.sulfurs,
            "double_bonds": self.double_bonds,
            "triple_bonds": self.triple_bonds,
            "rings": self.rings,
            "branches": self.branches,
            "aromatic_atoms": self.aromatic_atoms,
            "functional_groups": [g.value for g in FunctionalGroup if g in self.functional_groups],
            "substitution": self.substitution.value,
        }


# ----------------------------------------------------------------------
# 3. Token Tables
# ----------------------------------------------------------------------
# Organic-subset atoms outside brackets -> counter (None: an atom we do not count).
# Two-letter symbols are tried first so "Cl" is never read as "C".
_TWO_LETTER_ATOMS = {"Cl": "chlorine", "Br": "bromine"}
_ONE_LETTER_ATOMS = {
    "C": "carbons",
    "N": "nitrogens",
    "O": "oxygens",
    "S": "sulfurs",
    "F": "fluorine",
    "I": "iodine",
    "B": None,
    "P": None,
}
# Lower-case (aromatic) atoms: the only aromaticity the parser knows about.
_AROMATIC_ATOMS = {
    "c": "carbons",
    "n": "nitrogens",
    "o": "oxygens",
    "s": "sulfurs",
    "b": None,
    "p": None,
}
_BOND_COUNTERS = {"=": "double_bonds", "#": "triple_bonds"}
# Characters that carry no feature information and are skipped quietly.
_IGNORED = set("-/\\:@+*")

_COUNTERS = (
    "carbons", "fluorine", "chlorine", "bromine", "iodine",
    "oxygens", "nitrogens", "sulfurs", "double_bonds", "triple_bonds",
    "rings", "branches", "aromatic_atoms",
)

# ----------------------------------------------------------------------
# 4. Pattern Tables
# ----------------------------------------------------------------------
_GROUP_PATTERNS: Tuple[Tuple[FunctionalGroup, "re.Pattern[str]"], ...] = (
    (FunctionalGroup.ALKYL_HALIDE, re.compile(r"Cl|Br|I|F")),
    # terminal O on a carbon, a ring atom, an open or closed branch (not the OH of an acid)
    (
        FunctionalGroup.ALCOHOL,
        re.compile(r"^O[Cc](?!\(=O\))|(?:[Cc\d]|(?<!=O)\)|(?<!O=C)\()O(?=$|[).])"),
    ),
    (FunctionalGroup.ETHER, re.compile(r"(?:[Cc\d]|(?<!=O)\)|(?<!O=C)\()O[Cc]")),
    (FunctionalGroup.ALKENE, re.compile(r"C(?:\d|%\d\d)?=C|C\(=C")),
    (FunctionalGroup.ALKYNE, re.compile(r"C(?:\d|%\d\d)?#C|C\(#C")),
    (FunctionalGroup.CARBONYL, re.compile(r"C=O|O=C|C\(=O\)")),
    (FunctionalGroup.CARBOXYL, re.compile(r"C\(=O\)O(?=$|[).])|^OC\(=O\)|O=C\(O\)")),
    # charged and nitro nitrogens are not amines
    (FunctionalGroup.AMINE, re.compile(r"(?<![#=])N(?![a-z=#+]|\(=O\)|H\d?\+)")),
    (FunctionalGroup.NITRILE, re.compile(r"C#N|N#C")),
    (FunctionalGroup.THIOL, re.compile(r"^S[Cc]|[Cc\d()]S(?=$|[).])")),
)

# Substitution heuristics, tried in order. A carbon token is "C" not followed by "l".
_TERTIARY = re.compile(r"C(?!l)\([^()]*C(?!l)[^()]*\)\([^()]*C(?!l)[^()]*\)")
_SECONDARY = re.compile(r"C(?!l)C\(|C\([^)]+\)C(?!l)")
_METHYL = re.compile(r"^C(?:Cl|Br|I|F|O|N|S)?$")


# ----------------------------------------------------------------------
# 5. Tokenizer
# ----------------------------------------------------------------------
def _read_bracket_atom(text: str, start: int) -> Tuple[Optional[str], bool, int]:
    """
    Read a bracket atom beginning just after '['.
    Returns (counter name or None, aromatic flag, index after the closing ']').
    Hydrogen counts, charges, isotopes and chirality marks inside the bracket
    are not atoms; a missing ']' consumes the rest of the string.
    """
    end = text.find("]", start)
    body = text[start:] if end == -1 else text[start:end]
    stop = len(text) if end == -1 else end + 1

    i = 0
    while i < len(body) and body[i].isdigit():
        i += 1
    if i >= len(body):
        return None, False, stop

    ch = body[i]
    if ch.isupper():
        symbol = ch + body[i + 1] if i + 1 < len(body) and body[i + 1].islower() else ch
        if symbol in _TWO_LETTER_ATOMS:
            return _TWO_LETTER_ATOMS[symbol], False, stop
        if len(symbol) == 1:
            return _ONE_LETTER_ATOMS.get(symbol), False, stop
        return None, False, stop  # e.g. Na, Li: an atom, but not one we count
    if ch in _AROMATIC_ATOMS:
        return _AROMATIC_ATOMS[ch], True, stop
    return None, False, stop


def _scan(text: str) -> Dict[str, int]:
    """
    Single left-to-right pass producing the counters of a MoleculeFeatures.

    State kept during the pass:
      - anchor: index of the atom the next bond leaves from (None at the
        start and after '.')
      - branch stack: anchors to restore on ')'
      - pending bond marker ('=' or '#'), consumed by the next atom or ring label
      - open ring labels: label -> (opening atom index, bond already counted)
    """
    counts = {name: 0 for name in _COUNTERS}
    atom_index = -1
    anchor: Optional[int] = None
    branch_stack: List[Optional[int]] = []
    pending: Optional[str] = None
    open_rings: Dict[str, Tuple[int, bool]] = {}
    skipped: List[str] = []

    def add_atom(counter: Optional[str], aromatic: bool) -> None:
        nonlocal atom_index, anchor, pending
        atom_index += 1
        if counter is not None:
            counts[counter] += 1
        if aromatic:
            counts["aromatic_atoms"] += 1
        if pending is not None and anchor is not None:
            counts[_BOND_COUNTERS[pending]] += 1
        pending = None
        anchor = atom_index

    def ring_label(label: str) -> None:
        nonlocal pending
        if anchor is None:
            skipped.append(label)
            return
        marker_counted = False
        if label in open_rings:
            _, counted_at_open = open_rings.pop(label)
            counts["rings"] += 1
            if pending is not None and not counted_at_open:
                counts[_BOND_COUNTERS[pending]] += 1
        else:
            if pending is not None:
                counts[_BOND_COUNTERS[pending]] += 1
                marker_counted = True
            open_rings[label] = (anchor, marker_counted)
        pending = None

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        two = text[i:i + 2]

        if two in _TWO_LETTER_ATOMS:
            add_atom(_TWO_LETTER_ATOMS[two], False)
            i += 2
            continue
        if ch in _ONE_LETTER_ATOMS:
            add_atom(_ONE_LETTER_ATOMS[ch], False)
        elif ch in _AROMATIC_ATOMS:
            add_atom(_AROMATIC_ATOMS[ch], True)
        elif ch == "[":
            counter, aromatic, i = _read_bracket_atom(text, i + 1)
            add_atom(counter, aromatic)
            continue
        elif ch in _BOND_COUNTERS:
            # A marker with no atom before it has no bond to describe.
            if anchor is not None:
                pending = ch
        elif ch.isdigit():
            ring_label(ch)
        elif ch == "%":
            label = text[i + 1:i + 3]
            if len(label) == 2 and label.isdigit():
                ring_label("%" + label)
                i += 3
                continue
            skipped.append(ch)
        elif ch == "(":
            counts["branches"] += 1
            branch_stack.append(anchor)
        elif ch == ")":
            if branch_stack:
                anchor = branch_stack.pop()
            pending = None
        elif ch == ".":
            anchor = None
            pending = None
        elif ch not in _IGNORED and not ch.isspace():
            skipped.append(ch)
        i += 1

    if skipped or open_rings:
        logger.warning(
            "Degraded parse of %r: skipped %s, unclosed ring labels %s",
            text, skipped, sorted(open_rings),
        )
    return counts


# ----------------------------------------------------------------------
# 6. Pattern Inference
# ----------------------------------------------------------------------
def detect_functional_groups(text: str) -> FrozenSet[FunctionalGroup]:
    """
    Independent fixed-pattern matches over the whole notation. Groups are
    recognised in chain, branch and ring-closure spellings; an amide N still
    reads as an amine.
    """
    return frozenset(group for group, pattern in _GROUP_PATTERNS if pattern.search(text))


def infer_substitution(text: str) -> SubstrateClass:
    """
    Guess the substitution class of the reacting carbon from local patterns.

    Known approximation: a carbon followed by two carbon-bearing branches is
    tertiary, any "CC(" or "C(...)C" is secondary, a lone carbon (optionally
    with a single heteroatom) is methyl, everything else is primary. Branch
    order matters, so "CC(Br)(C)C" reads as secondary.

    The methyl rule departs from the older "leading C, then any capital,
    three characters at most" rule in both directions: "CC", "CCC" and
    "CCO" read as primary here, and a bare "C" reads as methyl.
    """
    if _TERTIARY.search(text):
        return SubstrateClass.TERTIARY
    if _SECONDARY.search(text):
        return SubstrateClass.SECONDARY
    if _METHYL.match(text):
        return SubstrateClass.METHYL
    return SubstrateClass.PRIMARY


def _build_features(text: str) -> MoleculeFeatures:
    counts = _scan(text)
    features = MoleculeFeatures(
        notation=text,
        functional_groups=detect_functional_groups(text),
        substitution=infer_substitution(text),
        **counts,
    )
    logger.debug("Parsed %r -> %s", text, features)
    return features


_parse_cached = lru_cache(maxsize=config.PARSE_CACHE_SIZE)(_build_features)


# ----------------------------------------------------------------------
# 7. Public Entry Point
# ----------------------------------------------------------------------
def parse(notation: str) -> MoleculeFeatures:
    """
    Parse a line notation into a MoleculeFeatures record.

    Raises EmptyInput for an empty or whitespace-only string. Anything else
    parses: unknown characters are skipped and unclosed ring labels dropped.
    """
    if not isinstance(notation, str):
        raise ParseError(f"Notation must be a string, not {type(notation).__name__}")
    text = notation.strip()
    if not text:
        raise EmptyInput("Notation is empty. Enter a structure such as CCBr.")
    return replace(_parse_cached(text))
