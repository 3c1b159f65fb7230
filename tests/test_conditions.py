import itertools

import pytest

from mechanism_engine.conditions import (
    ConditionSet,
    UnknownCondition,
    competing_mechanisms,
    explain,
    normalize,
    raw_scores,
    resolve_conditions,
    resolve_leaving_group,
    resolve_nucleophile,
    resolve_solvent,
    resolve_temperature,
    score,
)
from mechanism_engine.tables import (
    LeavingGroupQuality,
    Mechanism,
    NucleophileClass,
    SolventClass,
    SubstrateClass,
    TemperatureBand,
)

ALL_CONDITIONS = [
    ConditionSet(*combo)
    for combo in itertools.product(
        SubstrateClass, NucleophileClass, LeavingGroupQuality, SolventClass, TemperatureBand
    )
]


@pytest.fixture
def tertiary_solvolysis():
    return ConditionSet(
        substrate=SubstrateClass.TERTIARY,
        nucleophile=NucleophileClass.WEAK,
        leaving_group=LeavingGroupQuality.GOOD,
        solvent=SolventClass.POLAR_PROTIC,
        temperature=TemperatureBand.ROOM,
    )


class TestScore:
    def test_tertiary_solvolysis(self, tertiary_solvolysis):
        prediction = score(tertiary_solvolysis)
        assert dict(prediction.raw_scores) == {
            Mechanism.SN2: 0, Mechanism.SN1: 10, Mechanism.E2: 4, Mechanism.E1: 8,
        }
        assert dict(prediction.percentages) == {
            Mechanism.SN2: 0, Mechanism.SN1: 46, Mechanism.E2: 18, Mechanism.E1: 36,
        }
        assert prediction.primary is Mechanism.SN1
        assert prediction.secondary is Mechanism.E1

    def test_vinyl_blocks_substitution(self):
        prediction = score(ConditionSet(
            substrate=SubstrateClass.VINYL,
            nucleophile=NucleophileClass.STRONG_NORMAL,
            leaving_group=LeavingGroupQuality.GOOD,
            solvent=SolventClass.POLAR_PROTIC,
            temperature=TemperatureBand.ROOM,
        ))
        assert dict(prediction.percentages) == {
            Mechanism.SN2: 0, Mechanism.SN1: 0, Mechanism.E2: 52, Mechanism.E1: 48,
        }
        assert prediction.primary is Mechanism.E2

    def test_methyl_blocks_elimination(self):
        prediction = score(ConditionSet(
            substrate=SubstrateClass.METHYL,
            nucleophile=NucleophileClass.STRONG_SMALL,
            leaving_group=LeavingGroupQuality.GOOD,
            solvent=SolventClass.POLAR_APROTIC,
            temperature=TemperatureBand.LOW,
        ))
        assert prediction.raw_scores[Mechanism.E1] == -10
        assert prediction.raw_scores[Mechanism.E2] == -5
        assert dict(prediction.percentages) == {
            Mechanism.SN2: 64, Mechanism.SN1: 22, Mechanism.E2: 14, Mechanism.E1: 0,
        }
        assert prediction.primary is Mechanism.SN2

    def test_poor_leaving_group_flattens_scores(self, tertiary_solvolysis):
        conditions = ConditionSet(
            substrate=tertiary_solvolysis.substrate,
            nucleophile=tertiary_solvolysis.nucleophile,
            leaving_group=LeavingGroupQuality.POOR,
            solvent=tertiary_solvolysis.solvent,
            temperature=tertiary_solvolysis.temperature,
        )
        prediction = score(conditions)
        assert all(s <= 0 for s in prediction.raw_scores.values())
        assert set(prediction.percentages.values()) == {25}
        # ties resolve in mechanism order
        assert prediction.primary is Mechanism.SN2
        assert prediction.secondary is Mechanism.SN1

    def test_small_runner_up_is_not_reported(self):
        prediction = score(ConditionSet(
            substrate=SubstrateClass.SECONDARY,
            nucleophile=NucleophileClass.STRONG_BULKY,
            leaving_group=LeavingGroupQuality.EXCELLENT,
            solvent=SolventClass.POLAR_APROTIC,
            temperature=TemperatureBand.HIGH,
        ))
        assert prediction.primary is Mechanism.E2
        assert prediction.percentages[Mechanism.E1] == 15
        assert prediction.secondary is None

    def test_defaults(self):
        assert ConditionSet() == ConditionSet(
            substrate=SubstrateClass.SECONDARY,
            nucleophile=NucleophileClass.WEAK,
            leaving_group=LeavingGroupQuality.GOOD,
            solvent=SolventClass.POLAR_PROTIC,
            temperature=TemperatureBand.ROOM,
        )

    def test_to_dict(self, tertiary_solvolysis):
        data = score(tertiary_solvolysis).to_dict()
        assert data["primary"] == {"mechanism": "SN1", "percentage": 46}
        assert data["secondary"] == {"mechanism": "E1", "percentage": 36}
        assert data["percentages"] == {"SN2": 0, "SN1": 46, "E2": 18, "E1": 36}


class TestInvariants:
    def test_percentages_always_sum_to_100(self):
        for conditions in ALL_CONDITIONS:
            percentages = score(conditions).percentages
            assert sum(percentages.values()) == 100, conditions
            assert all(isinstance(p, int) and p >= 0 for p in percentages.values()), conditions

    def test_vinyl_substitution_is_always_the_minimum(self):
        for conditions in ALL_CONDITIONS:
            if conditions.substrate is not SubstrateClass.VINYL:
                continue
            percentages = score(conditions).percentages
            lowest = min(percentages.values())
            assert percentages[Mechanism.SN1] == lowest
            assert percentages[Mechanism.SN2] == lowest

    def test_poor_leaving_group_never_scores_positive(self):
        for conditions in ALL_CONDITIONS:
            if conditions.leaving_group is LeavingGroupQuality.POOR:
                assert max(raw_scores(conditions).values()) <= 0

    def test_primary_has_the_highest_percentage(self):
        for conditions in ALL_CONDITIONS:
            prediction = score(conditions)
            assert prediction.percentages[prediction.primary] == max(prediction.percentages.values())

    def test_normalize_keeps_lowest_share(self):
        percentages = normalize({
            Mechanism.SN2: 0.0, Mechanism.SN1: 0.0, Mechanism.E2: 0.0, Mechanism.E1: 0.0,
        })
        assert list(percentages.values()) == [25, 25, 25, 25]


class TestExplain:
    def test_tertiary_solvolysis_reasons(self, tertiary_solvolysis):
        explanation = explain(score(tertiary_solvolysis))
        assert explanation.primary is Mechanism.SN1
        assert explanation.percentage == 46
        assert explanation.reasons == (
            "Tertiary substrate stabilizes carbocation intermediate",
            "SN2 is blocked due to steric hindrance",
            "Weak/no nucleophile favors unimolecular mechanisms (SN1/E1)",
            "Polar protic solvent stabilizes carbocation",
            "E1 is a competing pathway (36%)",
        )
        assert explanation.competing is Mechanism.E1

    def test_bulky_base(self):
        explanation = explain(score(ConditionSet(
            substrate=SubstrateClass.SECONDARY,
            nucleophile=NucleophileClass.STRONG_BULKY,
            leaving_group=LeavingGroupQuality.EXCELLENT,
            solvent=SolventClass.POLAR_APROTIC,
            temperature=TemperatureBand.HIGH,
        )))
        assert explanation.primary is Mechanism.E2
        assert "Bulky base favors elimination (E2) over substitution" in explanation.reasons
        assert "High temperature favors elimination (ΔS positive)" in explanation.reasons
        assert "Excellent leaving group accelerates all mechanisms" in explanation.reasons
        assert explanation.competing is None

    def test_primary_substrate_with_strong_nucleophile(self):
        explanation = explain(score(ConditionSet(
            substrate=SubstrateClass.PRIMARY,
            nucleophile=NucleophileClass.STRONG_SMALL,
            solvent=SolventClass.POLAR_APROTIC,
        )))
        assert explanation.primary is Mechanism.SN2
        assert explanation.reasons[:3] == (
            "1° Primary substrate allows backside attack",
            "Carbocation would be too unstable for SN1/E1",
            "Strong nucleophile drives SN2 mechanism",
        )

    def test_vinyl(self):
        explanation = explain(score(ConditionSet(substrate=SubstrateClass.VINYL)))
        assert explanation.reasons[0] == "Vinyl/aryl carbon cannot undergo SN1 or SN2"


class TestCompeting:
    def test_sorted_by_likelihood(self, tertiary_solvolysis):
        pathways = competing_mechanisms(tertiary_solvolysis)
        assert [p.mechanism for p in pathways] == [Mechanism.SN1, Mechanism.E1, Mechanism.E2]
        assert [p.percentage for p in pathways] == [46, 36, 18]
        assert [p.is_primary for p in pathways] == [True, False, False]

    def test_profiles_follow_mechanism(self, tertiary_solvolysis):
        first = competing_mechanisms(tertiary_solvolysis)[0]
        assert first.profile.steps == 2
        assert first.profile.transition_states == (22.0, 5.0)
        assert first.profile.intermediates == (10.0,)

    def test_threshold(self, tertiary_solvolysis):
        assert [p.mechanism for p in competing_mechanisms(tertiary_solvolysis, 40)] == [Mechanism.SN1]
        assert len(competing_mechanisms(tertiary_solvolysis, 0)) == 4


class TestResolve:
    @pytest.mark.parametrize(
        "celsius, band",
        [
            (-20, TemperatureBand.LOW),
            (0, TemperatureBand.ROOM),
            (25, TemperatureBand.ROOM),
            (40, TemperatureBand.ROOM),
            (60, TemperatureBand.ELEVATED),
            (80, TemperatureBand.ELEVATED),
            (120, TemperatureBand.HIGH),
        ],
    )
    def test_temperature(self, celsius, band):
        assert resolve_temperature(celsius) is band

    def test_named_solvents(self):
        assert resolve_solvent("DMSO") is SolventClass.POLAR_APROTIC
        assert resolve_solvent(" Ethanol ") is SolventClass.POLAR_PROTIC
        assert resolve_solvent("hexane") is SolventClass.NONPOLAR
        assert resolve_solvent("polar_protic") is SolventClass.POLAR_PROTIC

    def test_named_reagents(self):
        assert resolve_nucleophile("KOtBu") is NucleophileClass.STRONG_BULKY
        assert resolve_nucleophile("NaCN") is NucleophileClass.STRONG_SMALL
        assert resolve_nucleophile("NaOH") is NucleophileClass.STRONG_NORMAL
        assert resolve_nucleophile("H2O") is NucleophileClass.WEAK
        assert resolve_nucleophile("heat") is NucleophileClass.NONE

    def test_named_leaving_groups(self):
        assert resolve_leaving_group("OTs") is LeavingGroupQuality.EXCELLENT
        assert resolve_leaving_group("OH") is LeavingGroupQuality.POOR

    def test_unknown_names(self):
        with pytest.raises(UnknownCondition):
            resolve_solvent("lava")
        with pytest.raises(UnknownCondition):
            resolve_nucleophile("unobtainium")
        with pytest.raises(UnknownCondition):
            resolve_leaving_group("nonsense")


class TestResolveConditions:
    def test_tertiary_bromide_in_ethanol(self):
        conditions = resolve_conditions("CC(C)(C)Br", "ethanol", "EtOH", 25)
        assert conditions == ConditionSet(
            substrate=SubstrateClass.TERTIARY,
            nucleophile=NucleophileClass.WEAK,
            leaving_group=LeavingGroupQuality.GOOD,
            solvent=SolventClass.POLAR_PROTIC,
            temperature=TemperatureBand.ROOM,
        )
        assert score(conditions).primary is Mechanism.SN1

    def test_primary_iodide_with_cyanide(self):
        conditions = resolve_conditions("CCI", "acetone", "NaCN", 25)
        assert conditions.substrate is SubstrateClass.PRIMARY
        assert conditions.leaving_group is LeavingGroupQuality.EXCELLENT
        assert conditions.nucleophile is NucleophileClass.STRONG_SMALL
        assert conditions.solvent is SolventClass.POLAR_APROTIC

    @pytest.mark.parametrize(
        "notation, substrate",
        [
            ("C=CBr", SubstrateClass.VINYL),
            ("Brc1ccccc1", SubstrateClass.VINYL),
            ("BrCc1ccccc1", SubstrateClass.BENZYLIC),
            ("C=CCBr", SubstrateClass.ALLYLIC),
            ("CBr", SubstrateClass.METHYL),
            ("CC(Br)C", SubstrateClass.SECONDARY),
        ],
    )
    def test_substrate_from_structure(self, notation, substrate):
        assert resolve_conditions(notation, "ethanol", "NaOH").substrate is substrate

    def test_falls_back_to_heuristics_when_rdkit_rejects(self):
        conditions = resolve_conditions("C1CCBr", "ethanol", "NaOH")
        assert conditions.substrate is SubstrateClass.PRIMARY
        assert conditions.leaving_group is LeavingGroupQuality.GOOD

    def test_no_halogen_means_poor_leaving_group(self):
        conditions = resolve_conditions("CC(C)(C)O", "water", "H2O", 50)
        assert conditions.substrate is SubstrateClass.TERTIARY
        assert conditions.leaving_group is LeavingGroupQuality.POOR
        assert conditions.temperature is TemperatureBand.ELEVATED

    def test_explicit_leaving_group_wins(self):
        conditions = resolve_conditions("CCBr", "dmso", "NaCN", leaving_group="OTs")
        assert conditions.leaving_group is LeavingGroupQuality.EXCELLENT

    def test_unknown_solvent(self):
        with pytest.raises(UnknownCondition):
            resolve_conditions("CCBr", "lava", "NaCN")
