# Licensed under the PolyForm Noncommercial License 1.0.0
"""Catalog of real-world engines for building a RocketSpecification."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .models import RocketSpecification

THRUST_GRAVITY = 9.81  # gravity used by the catalog's thrust figures (m/s^2)
STRUCTURAL_MASS = 24000.0  # upper stage structure added to its propellant (kg)


def catalog_thrust(fuel_mass: float, burn_time: float, isp: float) -> float:
    """Thrust that burns fuel_mass in burn_time at the given ISP (N)."""
    return fuel_mass / burn_time * THRUST_GRAVITY * isp


@dataclass(frozen=True)
class Engine:
    """
    Attributes:
        id: Catalog key
        name: Display name
        stage: Stage the engine is meant for, 1 or 2
        isp: Specific impulse (s)
        burn_time: Nominal burn duration (s)
        fuel_mass: Propellant burned over the nominal burn (kg)
        engine_type: 'Sea Level', 'Vacuum' or 'Hybrid'
        description: Free text
    """
    id: str
    name: str
    stage: int
    isp: float
    burn_time: float
    fuel_mass: float
    engine_type: str
    description: str = ""

    @property
    def thrust(self) -> float:
        return catalog_thrust(self.fuel_mass, self.burn_time, self.isp)


ENGINES: Dict[str, Engine] = {e.id: e for e in (
    # Stage 1 engines
    Engine('merlin-1d', 'Merlin 1D', 1, 282, 162, 418054, 'Sea Level',
           'SpaceX Falcon 9/Heavy first stage engine'),
    Engine('raptor-sl', 'Raptor Sea Level', 1, 330, 180, 450000, 'Sea Level',
           'SpaceX Starship/Super Heavy sea level engine'),
    Engine('rs-25', 'RS-25 (SSME)', 1, 366, 480, 600000, 'Sea Level',
           'Space Shuttle Main Engine'),
    # Stage 2 engines
    Engine('merlin-1d-vac', 'Merlin 1D Vacuum', 2, 348, 397, 107000, 'Vacuum',
           'SpaceX Falcon 9/Heavy second stage vacuum engine'),
    Engine('raptor-vac', 'Raptor Vacuum', 2, 380, 350, 120000, 'Vacuum',
           'SpaceX Starship vacuum-optimized engine'),
    Engine('rl10', 'RL10', 2, 450, 700, 80000, 'Vacuum',
           'Aerojet Rocketdyne upper stage engine'),
)}


def engines_by_stage(stage: int) -> List[Engine]:
    return [engine for engine in ENGINES.values() if engine.stage == stage]


def get_engine(engine_id: str) -> Optional[Engine]:
    return ENGINES.get(engine_id)


def specification_from_engines(stage1: Engine, stage2: Engine, drag_coefficient: float = 0.3,
                               structural_mass: float = STRUCTURAL_MASS) -> RocketSpecification:
    """
    Build a vehicle from one engine per stage.

    The mass left after separation is the second stage propellant plus
    structural_mass; lift-off mass adds the first stage propellant on top.
    """
    separation_mass = stage2.fuel_mass + structural_mass
    return RocketSpecification(
        mass=stage1.fuel_mass + separation_mass,
        stage_separation_mass=separation_mass,
        drag_coefficient=drag_coefficient,
        stage1_thrust=stage1.thrust,
        stage1_isp=stage1.isp,
        stage1_burn_time=stage1.burn_time,
        stage2_thrust=stage2.thrust,
        stage2_isp=stage2.isp,
        stage2_burn_time=stage2.burn_time,
    )
