from typing import Any, Dict

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import config
from .classifier import analyze
from .conditions import (
    UnknownCondition,
    competing_mechanisms,
    explain,
    resolve_conditions,
    score,
)
from .models import (
    BondEnergyRequest,
    CompetingRequest,
    ConditionRequest,
    MechanismEnergyRequest,
    NotationRequest,
    Prediction,
    ReactionRequest,
)
from .notation import ParseError, parse
from .profile import PRESETS, build_plot_points, preset, profile_from_analysis
from .structure import check_notation
from .tables import REACTION_EXAMPLES
from .thermo import estimate, estimate_profile

app = FastAPI(title=config.APP_TITLE)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ParseError)
@app.exception_handler(UnknownCondition)
async def input_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    # Bad user input, not a server fault.
    config.logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/")
def root():
    return {"message": "Mechanism Predictor API"}


@app.get("/health")
def health():
    return {"ok": True}


@app.post("/parse")
def parse_notation(req: NotationRequest) -> Dict[str, Any]:
    features = parse(req.notation)
    return {
        "features": features.to_dict(),
        "check": check_notation(req.notation).to_dict(),
    }


@app.post("/analyze")
def analyze_reaction(req: ReactionRequest) -> Dict[str, Any]:
    analysis = analyze(req.reactant, req.product)
    profile = profile_from_analysis(analysis)
    return {
        "analysis": analysis.to_dict(),
        "profile": profile.to_dict(),
        "points": [p.to_dict() for p in build_plot_points(profile)],
    }


@app.post("/predict")
def predict(req: ConditionRequest) -> Dict[str, Any]:
    prediction = score(req.to_conditions())
    return {
        "prediction": prediction.to_dict(),
        "explanation": explain(prediction).to_dict(),
    }


@app.post("/predict/named")
def predict_named(prediction: Prediction) -> Dict[str, Any]:
    conditions = resolve_conditions(
        prediction.smiles,
        prediction.solvent,
        prediction.reagent,
        prediction.temperature,
        prediction.leaving_group,
    )
    result = score(conditions)
    return {
        "conditions": conditions.to_dict(),
        "prediction": result.to_dict(),
        "explanation": explain(result).to_dict(),
    }


@app.post("/competing")
def competing(req: CompetingRequest) -> Dict[str, Any]:
    pathways = competing_mechanisms(req.to_conditions(), req.threshold)
    return {"mechanisms": [p.to_dict() for p in pathways]}


@app.post("/energy/bonds")
def energy_from_bonds(req: BondEnergyRequest) -> Dict[str, Any]:
    delta_h, ea = estimate(req.bonds_broken, req.bonds_formed, req.pathway)
    return {"delta_h": delta_h, "ea": ea}


@app.post("/energy/mechanism")
def energy_for_mechanism(req: MechanismEnergyRequest) -> Dict[str, Any]:
    profile = estimate_profile(req.mechanism, req.substrate, req.leaving_group)
    return {
        "profile": profile.to_dict(),
        "points": [p.to_dict() for p in build_plot_points(profile)],
    }


@app.get("/presets")
def list_presets() -> Dict[str, Any]:
    return {pathway.value: profile.to_dict() for pathway, profile in PRESETS.items()}


@app.get("/presets/{name}")
def get_preset(name: str) -> Dict[str, Any]:
    try:
        profile = preset(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No preset named {name!r}")
    return {
        "profile": profile.to_dict(),
        "points": [p.to_dict() for p in build_plot_points(profile)],
    }


@app.get("/examples")
def examples() -> Dict[str, Any]:
    return dict(REACTION_EXAMPLES)
