from .classifier import ReactionAnalysis, analyze, classify
from .conditions import ConditionSet, MechanismPrediction, competing_mechanisms, explain, score
from .notation import EmptyInput, MoleculeFeatures, ParseError, parse
from .profile import EnergyProfile, build_plot_points, profile_from_analysis
from .thermo import estimate, estimate_profile

__all__ = [
    "parse",
    "MoleculeFeatures",
    "ParseError",
    "EmptyInput",
    "classify",
    "analyze",
    "ReactionAnalysis",
    "score",
    "explain",
    "competing_mechanisms",
    "ConditionSet",
    "MechanismPrediction",
    "estimate",
    "estimate_profile",
    "EnergyProfile",
    "build_plot_points",
    "profile_from_analysis",
]
