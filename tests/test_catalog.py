"""
Unit tests for the threat and defense catalog.

Run with: python -m pytest tests/test_catalog.py -v
"""

import json
import math

import pytest

from planetary_defense.catalog import (
    ASTEROID_DENSITY_KG_M3,
    CUSTOM_PRESETS,
    MISSION_TIMELINE,
    Asteroid,
    DefenseStrategy,
    SizeClass,
    calculate_mass,
    classify_size,
    create_custom_asteroid,
    get_asteroid,
    get_strategy,
    get_torino_description,
    load_asteroids,
    load_catalog_data,
    load_strategies,
    torino_band,
)


# Fixtures

@pytest.fixture
def sample_catalog() -> dict:
    """Minimal catalog with one asteroid and one strategy."""
    return {
        "asteroids": [
            {
                "id": "test-rock",
                "name": "Test Rock",
                "diameter_m": 120,
                "velocity_kps": 21.0,
                "torino_scale": 2,
            }
        ],
        "strategies": [
            {
                "id": "test-kinetic",
                "name": "Test Impactor",
                "code": "TEST",
                "success_rate": 0.5,
                "effectiveness": {"small": 0.9, "medium": 0.6, "large": 0.3},
            }
        ],
    }


@pytest.fixture
def catalog_file(tmp_path, sample_catalog):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(sample_catalog))
    return path


# Mass and size tests

class TestDerivedQuantities:
    """Tests for mass derivation and size classification."""

    def test_mass_is_uniform_sphere(self):
        expected = (4.0 / 3.0) * math.pi * 50.0**3 * ASTEROID_DENSITY_KG_M3
        assert calculate_mass(100.0) == pytest.approx(expected)

    @pytest.mark.parametrize("diameter", [0.0, -5.0, float("nan"), float("inf")])
    def test_degenerate_diameter_has_zero_mass(self, diameter):
        assert calculate_mass(diameter) == 0.0

    @pytest.mark.parametrize("diameter,expected", [
        (2, SizeClass.SMALL),
        (99.9, SizeClass.SMALL),
        (100, SizeClass.MEDIUM),
        (370, SizeClass.MEDIUM),
        (499.9, SizeClass.MEDIUM),
        (500, SizeClass.LARGE),
        (1200, SizeClass.LARGE),
    ])
    def test_classify_size_boundaries(self, diameter, expected):
        assert classify_size(diameter) == expected


class TestTorino:
    """Tests for Torino scale presentation helpers."""

    def test_every_level_has_description(self):
        for level in range(11):
            assert get_torino_description(level) != "Unknown classification"

    def test_unknown_level(self):
        assert get_torino_description(11) == "Unknown classification"

    @pytest.mark.parametrize("scale,band", [
        (0, "none"),
        (1, "normal"),
        (2, "attention"),
        (4, "attention"),
        (5, "threatening"),
        (7, "threatening"),
        (8, "certain"),
        (10, "certain"),
    ])
    def test_bands(self, scale, band):
        assert torino_band(scale) == band

    def test_mission_timeline_order(self):
        names = [step.name for step in MISSION_TIMELINE]
        assert names == ["DETECTION", "ASSESSMENT", "PREPARATION", "LAUNCH", "INTERCEPT"]


# Catalog loading tests

class TestCatalogLoading:
    """Tests for loading the packaged and custom catalogs."""

    def test_builtin_catalog_contents(self):
        asteroids = load_asteroids()
        strategies = load_strategies()
        assert [a.asteroid_id for a in asteroids] == [
            "2024-yr4", "apophis", "2023-dw", "2021-qm1", "2018-vp1", "bennu"
        ]
        assert [s.code for s in strategies] == ["DART", "GRAV", "NUKE", "LASR"]

    def test_builtin_masses_derived_from_diameter(self):
        for asteroid in load_asteroids():
            assert asteroid.mass_kg == pytest.approx(calculate_mass(asteroid.diameter_m))

    def test_load_from_file(self, catalog_file):
        data = load_catalog_data(catalog_file)
        asteroid = load_asteroids(data)[0]
        assert isinstance(asteroid, Asteroid)
        assert asteroid.name == "Test Rock"
        assert asteroid.size_class == SizeClass.MEDIUM

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog_data(tmp_path / "missing.json")

    def test_strategy_effectiveness_keys(self, sample_catalog):
        strategy = load_strategies(sample_catalog)[0]
        assert isinstance(strategy, DefenseStrategy)
        assert strategy.effectiveness_for(SizeClass.SMALL) == pytest.approx(0.9)
        assert strategy.effectiveness_for(SizeClass.LARGE) == pytest.approx(0.3)

    def test_only_nuke_is_nuclear(self):
        nuclear = [s.code for s in load_strategies() if s.is_nuclear]
        assert nuclear == ["NUKE"]


class TestLookups:
    """Tests for id and code lookups."""

    def test_get_asteroid(self):
        apophis = get_asteroid("apophis")
        assert apophis.diameter_m == 370
        assert apophis.velocity_kps == pytest.approx(30.7)

    def test_get_strategy_by_id_and_code(self):
        assert get_strategy("kinetic") == get_strategy("DART")
        assert get_strategy("kinetic").success_rate == pytest.approx(0.85)

    def test_unknown_asteroid_raises_key_error(self):
        with pytest.raises(KeyError, match="not found"):
            get_asteroid("no-such-rock")

    def test_unknown_strategy_raises_key_error(self):
        with pytest.raises(KeyError, match="not found"):
            get_strategy("PRAY")


# Custom asteroid tests

class TestCustomAsteroid:
    """Tests for the custom asteroid factory."""

    def test_blank_name_gets_generated_name(self):
        asteroid = create_custom_asteroid(name="  ", timestamp_ms=36)
        assert asteroid.name == "Custom-10"
        assert asteroid.asteroid_id == "custom-36"

    def test_given_name_is_kept(self):
        asteroid = create_custom_asteroid(name="Nemesis", timestamp_ms=1)
        assert asteroid.name == "Nemesis"
        assert asteroid.is_custom

    def test_orbital_period_from_kepler(self):
        asteroid = create_custom_asteroid(semi_major_axis_au=4.0, timestamp_ms=1)
        assert asteroid.orbital_period_years == pytest.approx(8.0)

    def test_palermo_from_probability(self):
        asteroid = create_custom_asteroid(impact_probability=0.01, timestamp_ms=1)
        assert asteroid.palermo_scale == pytest.approx(-1.0)

    def test_torino_clamped(self):
        assert create_custom_asteroid(torino_scale=15, timestamp_ms=1).torino_scale == 10
        assert create_custom_asteroid(torino_scale=-3, timestamp_ms=1).torino_scale == 0

    def test_mass_derived(self):
        asteroid = create_custom_asteroid(diameter_m=300, timestamp_ms=1)
        assert asteroid.mass_kg == pytest.approx(calculate_mass(300))

    def test_degenerate_values_are_accepted(self):
        asteroid = create_custom_asteroid(diameter_m=0, velocity_kps=-4, timestamp_ms=1)
        assert asteroid.mass_kg == 0.0

    @pytest.mark.parametrize("preset", CUSTOM_PRESETS, ids=lambda p: p.name)
    def test_presets_build_asteroids(self, preset):
        asteroid = create_custom_asteroid(
            name=preset.name,
            diameter_m=preset.diameter_m,
            velocity_kps=preset.velocity_kps,
            impact_probability=preset.impact_probability,
            torino_scale=preset.torino_scale,
            timestamp_ms=1,
        )
        assert asteroid.torino_scale == preset.torino_scale
        assert asteroid.mass_kg > 0
