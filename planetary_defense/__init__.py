"""Planetary Defense asteroid intercept and impact simulator package."""

from .catalog import (
    # Data types
    Asteroid,
    AsteroidPreset,
    DefenseStrategy,
    SizeClass,
    TimelineStep,
    # Presentation tables
    CUSTOM_PRESETS,
    MISSION_TIMELINE,
    TORINO_DESCRIPTIONS,
    # Functions
    calculate_mass,
    classify_size,
    create_custom_asteroid,
    get_asteroid,
    get_strategy,
    get_torino_description,
    load_asteroids,
    load_strategies,
    torino_band,
)

from .config import (
    Settings,
    configure_logging,
    get_settings,
)

from .damage import (
    CasualtyEstimate,
    DamageAssessment,
    assess,
    calculate_damage_radius,
    calculate_impact_energy,
    classify_casualties,
)

from .effects import (
    CueRecorder,
    EffectEngine,
)

from .events import (
    EventDispatcher,
    SimulationEvent,
    SimulationEventType,
)

from .impact import (
    ImpactPhase,
    ImpactPhaseController,
    ImpactSnapshot,
)

from .mission import (
    MissionOutcome,
    MissionPhase,
    MissionPhaseController,
    MissionSnapshot,
)

from .orchestrator import (
    HostCallbacks,
    MissionOrchestrator,
    OrchestratorSnapshot,
    OrchestratorStage,
)

from .outcome import (
    OutcomeLatch,
    OutcomeResolver,
    comparison_probability,
    estimate_success_probability,
    roll_deflection_amount,
)

from .physics import Vector3D

from .report import (
    MissionReport,
    StrategyComparison,
    ThreatAssessment,
    assess_threat,
    compare_strategies,
    compare_strategy,
    create_mission_report,
    create_report_from_orchestrator,
)

__version__ = "0.1.0"

__all__ = [
    # Catalog
    "Asteroid",
    "AsteroidPreset",
    "DefenseStrategy",
    "SizeClass",
    "TimelineStep",
    "CUSTOM_PRESETS",
    "MISSION_TIMELINE",
    "TORINO_DESCRIPTIONS",
    "calculate_mass",
    "classify_size",
    "create_custom_asteroid",
    "get_asteroid",
    "get_strategy",
    "get_torino_description",
    "load_asteroids",
    "load_strategies",
    "torino_band",
    # Config
    "Settings",
    "configure_logging",
    "get_settings",
    # Damage model
    "CasualtyEstimate",
    "DamageAssessment",
    "assess",
    "calculate_damage_radius",
    "calculate_impact_energy",
    "classify_casualties",
    # Effects and events
    "CueRecorder",
    "EffectEngine",
    "EventDispatcher",
    "SimulationEvent",
    "SimulationEventType",
    # Controllers
    "ImpactPhase",
    "ImpactPhaseController",
    "ImpactSnapshot",
    "MissionOutcome",
    "MissionPhase",
    "MissionPhaseController",
    "MissionSnapshot",
    "HostCallbacks",
    "MissionOrchestrator",
    "OrchestratorSnapshot",
    "OrchestratorStage",
    # Outcome
    "OutcomeLatch",
    "OutcomeResolver",
    "comparison_probability",
    "estimate_success_probability",
    "roll_deflection_amount",
    # Physics
    "Vector3D",
    # Reports
    "MissionReport",
    "StrategyComparison",
    "ThreatAssessment",
    "assess_threat",
    "compare_strategies",
    "compare_strategy",
    "create_mission_report",
    "create_report_from_orchestrator",
]
