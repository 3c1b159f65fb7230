import pytest

from mechanism_engine.classifier import analyze
from mechanism_engine.profile import (
    PRESETS,
    EnergyProfile,
    build_plot_points,
    energy_bounds,
    preset,
    profile_from_analysis,
)
from mechanism_engine.tables import Pathway


def test_step_counts_must_agree():
    with pytest.raises(ValueError):
        EnergyProfile("bad", 2, (20.0,), (10.0,), -5.0)
    with pytest.raises(ValueError):
        EnergyProfile("bad", 1, (20.0,), (10.0,), -5.0)
    with pytest.raises(ValueError):
        EnergyProfile("bad", 3, (20.0, 5.0, 4.0), (10.0, 3.0), -5.0)


def test_one_step_points():
    points = build_plot_points(PRESETS[Pathway.SN2])
    assert [p.label for p in points] == ["SM", "TS", "P"]
    assert [p.progress for p in points] == [0.0, 0.5, 1.0]
    assert [p.energy for p in points] == [0.0, 15.0, -5.0]
    assert [p.is_transition_state for p in points] == [False, True, False]


def test_two_step_points():
    points = build_plot_points(PRESETS[Pathway.SN1])
    assert [p.label for p in points] == ["SM", "TS1", "Int", "TS2", "P"]
    assert [p.progress for p in points] == [0.0, 0.25, 0.5, 0.75, 1.0]
    assert [p.energy for p in points] == [0.0, 20.0, 12.0, 5.0, -5.0]


def test_profile_from_two_step_analysis():
    profile = profile_from_analysis(analyze("CC(C)(C)Br", "CC(C)(C)O"))
    assert profile.name == "SN1 (from notation)"
    assert profile.steps == 2
    assert profile.transition_states == pytest.approx((22.0, 6.6))
    assert profile.intermediates == pytest.approx((13.2,))
    assert profile.product_energy == -18


def test_profile_from_addition():
    profile = profile_from_analysis(analyze("CC=CC", "CCCC"))
    assert profile.name == "addition (from notation)"
    assert profile.steps == 1
    assert profile.transition_states == (9.0,)
    assert profile.description == "addition: C=C → C-C, C-H, C-H"


def test_activation_and_enthalpy_are_relative_to_start():
    profile = EnergyProfile("shifted", 1, (25.0,), (), 0.0, start_energy=5.0)
    assert profile.activation_energy == 20.0
    assert profile.delta_h == -5.0


def test_bounds_pad_the_span():
    low, high = energy_bounds([PRESETS[Pathway.HYDROGENATION]])
    assert low == pytest.approx(-36.0)
    assert high == pytest.approx(36.0)


def test_bounds_default_range():
    low, high = energy_bounds([])
    assert (low, high) == pytest.approx((-3.0, 33.0))


def test_bounds_cover_every_curve():
    profiles = list(PRESETS.values())
    low, high = energy_bounds(profiles)
    for profile in profiles:
        for point in build_plot_points(profile):
            assert low <= point.energy <= high


def test_preset_lookup():
    assert preset("SN1") is PRESETS[Pathway.SN1]
    assert preset(" endothermic ").product_energy == 10.0
    with pytest.raises(KeyError):
        preset("photochemical")


def test_presets_are_well_formed():
    assert set(PRESETS) == set(Pathway)
    for pathway, profile in PRESETS.items():
        assert profile.steps == (2 if pathway.two_step else 1)
