# Licensed under the PolyForm Noncommercial License 1.0.0
"""
Command-line demo of the two-stage ascent simulator.
"""

from . import LaunchParameters, RocketSpecification, plot_results, run_simulation


def main():
    """Run the simulator with a Falcon 9-like vehicle launched from Cape Canaveral."""
    print("Two-Stage Ascent Simulator")
    print("==========================")

    rocket = RocketSpecification(
        mass=549054,  # lift-off mass (kg)
        stage_separation_mass=131000,  # upper stage + payload (kg)
        drag_coefficient=0.3,
        stage1_thrust=7.607e6,  # 7.6 MN
        stage1_isp=282,
        stage1_burn_time=162,
        stage2_thrust=9.34e5,
        stage2_isp=421,
        stage2_burn_time=397,
    )
    params = LaunchParameters(latitude=28.5721, longitude=-80.6480, orbit_height=400, rocket=rocket)

    # Run simulation
    print("Running simulation...")
    result = run_simulation(params, verbose=True)
    result.raise_for_status()

    # Plot results
    print("Plotting results...")
    plot_results(result, show=True)

    # Print some key results
    optimal = result.optimal_params
    print(f"\nSimulation Complete!")
    print(f"Peak altitude: {optimal.max_altitude / 1000:.1f} km")
    print(f"Stage separation: t={optimal.stage_separation_time:.1f} s at "
          f"{optimal.stage_separation_altitude / 1000:.1f} km")
    print(f"Final speed: {optimal.achieved_velocity / 1000:.2f} km/s "
          f"(required {optimal.required_velocity / 1000:.2f} km/s)")
    print(f"Launch angle: {optimal.launch_angle:.1f} deg")


if __name__ == "__main__":
    main()
