from typing import List, Optional

from pydantic import BaseModel, Field

from .conditions import ConditionSet
from .tables import (
    LeavingGroupQuality,
    Mechanism,
    NucleophileClass,
    Pathway,
    SolventClass,
    SubstrateClass,
    TemperatureBand,
)


class NotationRequest(BaseModel):
    notation: str


class ReactionRequest(BaseModel):
    reactant: str
    product: str


class ConditionRequest(BaseModel):
    substrate: SubstrateClass = SubstrateClass.SECONDARY
    nucleophile: NucleophileClass = NucleophileClass.WEAK
    leaving_group: LeavingGroupQuality = LeavingGroupQuality.GOOD
    solvent: SolventClass = SolventClass.POLAR_PROTIC
    temperature: TemperatureBand = TemperatureBand.ROOM

    def to_conditions(self) -> ConditionSet:
        return ConditionSet(
            substrate=self.substrate,
            nucleophile=self.nucleophile,
            leaving_group=self.leaving_group,
            solvent=self.solvent,
            temperature=self.temperature,
        )


class CompetingRequest(ConditionRequest):
    threshold: int = Field(10, ge=0, le=100)


class Prediction(BaseModel):
    smiles: str
    solvent: str
    reagent: str
    temperature: float = 25.0
    leaving_group: Optional[str] = None


class BondEnergyRequest(BaseModel):
    bonds_broken: List[str] = []
    bonds_formed: List[str] = []
    pathway: Optional[Pathway] = None


class MechanismEnergyRequest(BaseModel):
    mechanism: Mechanism
    substrate: SubstrateClass = SubstrateClass.SECONDARY
    leaving_group: LeavingGroupQuality = LeavingGroupQuality.GOOD
