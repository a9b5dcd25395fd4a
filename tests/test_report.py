"""
Unit tests for mission reports, threat assessment and strategy comparison.

Run with: python -m pytest tests/test_report.py -v
"""

import json
import math
from dataclasses import replace

import pytest

from planetary_defense.catalog import (
    Asteroid,
    DefenseStrategy,
    SizeClass,
    calculate_mass,
    get_asteroid,
    get_strategy,
    load_strategies,
)
from planetary_defense.damage import (
    assess,
    calculate_damage_radius,
    calculate_impact_energy,
    round_half_up,
)
from planetary_defense.orchestrator import MissionOrchestrator
from planetary_defense.report import (
    MissionReport,
    assess_threat,
    build_timeline,
    compare_strategies,
    compare_strategy,
    create_mission_report,
    create_report_from_orchestrator,
)

DT = 1.0 / 60.0


class FixedRng:
    """Random source that always returns the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


# Fixtures

@pytest.fixture
def apophis():
    return get_asteroid("apophis")


@pytest.fixture
def kinetic():
    return get_strategy("kinetic")


@pytest.fixture
def success_report(apophis, kinetic) -> MissionReport:
    return create_mission_report(apophis, kinetic, success=True, deflection_amount=80.0)


@pytest.fixture
def failed_run():
    orchestrator = MissionOrchestrator(get_asteroid("2024-yr4"), get_strategy("DART"), rng=FixedRng(0.99))
    orchestrator.run(DT)
    return orchestrator


# Mission report tests

class TestMissionReport:
    """Tests for results figures and rendering."""

    def test_success_figures(self, success_report, apophis):
        energy = calculate_impact_energy(apophis.mass_kg, apophis.velocity_kps)
        radius = calculate_damage_radius(energy)
        assert success_report.impact_energy_mt == pytest.approx(energy)
        assert success_report.lives_protected == round_half_up(radius * radius * 1000)
        assert success_report.energy_redirected_mt == pytest.approx(energy * 0.8)
        assert success_report.new_miss_distance == pytest.approx(apophis.distance + 0.8)
        assert success_report.status == "THREAT NEUTRALIZED"

    def test_failure_protects_no_lives(self, apophis, kinetic):
        report = create_mission_report(apophis, kinetic, success=False, deflection_amount=10.0)
        assert report.lives_protected == 0
        assert report.status == "IMPACT OCCURRED"

    def test_text_output(self, success_report):
        text = success_report.to_text()
        assert "MISSION REPORT" in text
        assert "Target: Apophis" in text
        assert "[DART]" in text
        assert "THREAT NEUTRALIZED" in text
        assert "80.0%" in text

    def test_json_output(self, success_report):
        data = json.loads(success_report.to_json())
        assert data["success"] is True
        assert data["strategy"]["code"] == "DART"
        assert data["assessment"] is None
        assert data["timeline"] == []

    def test_report_from_failed_run(self, failed_run):
        report = create_report_from_orchestrator(failed_run)
        assert report.success is False
        assert report.assessment is failed_run.assessment
        assert report.deflection_amount == pytest.approx(29.7)

        text = report.to_text()
        assert "DAMAGE ASSESSMENT:" in text
        assert "TIMELINE:" in text
        assert "Atmospheric entry" in text

        data = json.loads(report.to_json())
        assert data["assessment"]["casualties"]["label"] == failed_run.assessment.casualties.label
        ready = [e for e in data["timeline"] if e["event"] == "DAMAGE_READY"]
        assert len(ready) == 1
        assert isinstance(ready[0]["data"]["assessment"], dict)
        assert data["duration_seconds"] == pytest.approx(failed_run.clock)

    def test_report_requires_completed_run(self, apophis, kinetic):
        with pytest.raises(ValueError):
            create_report_from_orchestrator(MissionOrchestrator(apophis, kinetic))

    def test_timeline_descriptions(self, failed_run):
        timeline = build_timeline(failed_run.events)
        assert len(timeline) == len(failed_run.events)
        assert timeline[0].description == "Mission control online"
        assert timeline[-1].description.startswith("Mission complete (")
        assert timeline[0].format_timestamp() == "00:00.0"


# Threat assessment tests

class TestThreatAssessment:
    """Tests for the pre-mission briefing."""

    def test_figures(self, apophis):
        threat = assess_threat(apophis)
        assert threat.affected_area_km2 == pytest.approx(math.pi * threat.damage_radius_km ** 2)
        assert threat.torino_band == "none"
        assert threat.impact_odds == round_half_up(1 / apophis.impact_probability)
        assert threat.palermo_summary == "3.2x below background hazard level"

    def test_zero_probability_has_no_odds(self):
        rock = get_asteroid("2018-vp1")
        threat = assess_threat(rock)
        assert threat.impact_odds is not None
        assert assess_threat(replace(rock, impact_probability=0.0)).impact_odds is None

    def test_positive_palermo(self, apophis):
        threat = assess_threat(replace(apophis, palermo_scale=0.4))
        assert threat.palermo_summary == "Threat level exceeds background risk"


# Strategy comparison tests

class TestStrategyComparison:
    """Tests for effectiveness-weighted comparison."""

    def test_lives_protected_complements_reduced(self, apophis, kinetic):
        comparison = compare_strategy(kinetic, apophis)
        baseline = assess(apophis.mass_kg, apophis.velocity_kps).casualties
        p = kinetic.success_rate * 0.75

        assert comparison.success_probability == pytest.approx(p)
        assert comparison.reduced_casualties.max == round_half_up(baseline.max * (1 - p))
        assert comparison.lives_protected.max == baseline.max - comparison.reduced_casualties.max
        assert comparison.lives_protected.min == baseline.min - comparison.reduced_casualties.min

    def test_reduced_casualties_round_half_up(self):
        boulder = Asteroid(
            asteroid_id="boulder",
            name="Boulder",
            diameter_m=20,
            velocity_kps=20,
            mass_kg=calculate_mass(20),
        )
        # 1 - 0.9375 is exact in binary, so 1000 * 0.0625 lands on 62.5
        strategy = DefenseStrategy(
            "sharp", "Sharp", "SHRP", success_rate=0.9375,
            effectiveness={SizeClass.SMALL: 1.0},
        )
        comparison = compare_strategy(strategy, boulder)

        assert comparison.baseline_casualties.label == "Local Impact"
        assert comparison.reduced_casualties.min == 63
        assert comparison.reduced_casualties.max == 6250
        assert comparison.lives_protected.min == 937

    def test_sorted_best_first(self, apophis):
        comparisons = compare_strategies(load_strategies(), apophis)
        probabilities = [c.success_probability for c in comparisons]
        assert probabilities == sorted(probabilities, reverse=True)
        assert len(comparisons) == 4

    def test_nuclear_best_against_large(self):
        large = get_asteroid("bennu")
        large = replace(large, diameter_m=800)
        assert compare_strategies(load_strategies(), large)[0].strategy_code == "NUKE"
