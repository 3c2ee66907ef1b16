# determinism_probe.py

"""
Builds the same planet twice, once on the thread pool and once sequentially,
and checks that every output array is bit-identical.

Usage:
    python determinism_probe.py --config path/to/your/config.json
"""
import argparse
import hashlib
import logging
import os
import sys

import numpy as np

sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from bake_planet import load_planet_parameters
from planet_generator.errors import PlanetConfigError
from planet_generator.generator import PlanetGenerator


def collect_arrays(generator: PlanetGenerator) -> dict:
    """Every output array of the generator's current state, by name."""
    state = generator.state
    arrays = {
        "points": state.points,
        "plate_ids": state.plate_ids,
        "rotation_axes": np.array([plate.rotation_axis for plate in state.plates]),
        "angular_velocities": np.array([plate.angular_velocity for plate in state.plates]),
    }
    for name, data_array in state.crust.arrays().items():
        arrays[f"crust_{name}"] = data_array
    if state.boundary_flags is not None:
        arrays["boundary_flags"] = state.boundary_flags
    return arrays


def digest(data_array: np.ndarray) -> str:
    return hashlib.sha256(np.ascontiguousarray(data_array).tobytes()).hexdigest()


def run_probe(planet_params: dict, logger: logging.Logger) -> bool:
    """Returns True if both execution modes produce identical arrays."""
    results = {}
    for mode, parallel in (("parallel", True), ("sequential", False)):
        logger.info(f"--- Building planet ({mode}) ---")
        generator = PlanetGenerator(config={**planet_params, 'parallel': parallel}, logger=logger)
        generator.rebuild()
        results[mode] = {name: digest(data_array) for name, data_array in collect_arrays(generator).items()}

    all_passed = True
    for name, parallel_digest in results["parallel"].items():
        sequential_digest = results["sequential"].get(name)
        result = "PASS" if parallel_digest == sequential_digest else "FAIL"
        if result == "FAIL":
            all_passed = False
        logger.info(f"  - {name}: {parallel_digest[:16]} vs {str(sequential_digest)[:16]} -> {result}")

    missing = set(results["sequential"]) - set(results["parallel"])
    for name in sorted(missing):
        all_passed = False
        logger.info(f"  - {name}: only produced in sequential mode -> FAIL")

    return all_passed


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    logger = logging.getLogger("DeterminismProbe")

    parser = argparse.ArgumentParser(description="Checks that parallel and sequential planet builds match.")
    parser.add_argument("--config", type=str, required=True, help="Path to the JSON configuration file.")
    args = parser.parse_args(argv)

    planet_params = load_planet_parameters(args.config, logger)
    if planet_params is None:
        return 2

    try:
        passed = run_probe(planet_params, logger)
    except PlanetConfigError as e:
        logger.critical(f"Invalid planet configuration: {e}")
        return 2

    logger.info("--- Probe Complete ---")
    if passed:
        logger.info("SUCCESS: Parallel and sequential builds are bit-identical.")
        return 0
    logger.error("FAILURE: Mismatch detected in one or more arrays.")
    return 1


if __name__ == '__main__':
    sys.exit(main())
