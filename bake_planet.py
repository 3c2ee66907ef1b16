# bake_planet.py

"""
================================================================================
OFFLINE PLANET BAKER SCRIPT
================================================================================
This script is a command-line tool for generating a planet's initial tectonic
state and saving it to disk as raw NumPy arrays ("baking"). Downstream tools
(renderers, simulation stages) load these arrays instead of regenerating the
planet themselves.

Output layout (default: baked_planets/seed_<seed>/):
    master_data/points.npy            (N, 3) float32 sample positions, km
    master_data/plate_ids.npy         (N,)   plate of every point
    master_data/crust_<field>.npy     one array per crust field
    master_data/boundary_flags.npy    (N,)   bool, only if adjacency was built
    master_data/triangles.npy         (T, 3) only if adjacency was built
    plates.json                       per-plate summary and motion
    generation_config.json            the resolved settings and their hash

Usage:
    python bake_planet.py --config path/to/your/config.json
================================================================================
"""
import argparse
import json
import logging
import os
import sys
import time
from typing import Optional

import numpy as np

# Add project root to Python path to allow importing from planet_generator
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from planet_generator.errors import PlanetConfigError
from planet_generator.generator import PlanetGenerator

CONFIG_SECTION = 'planet_generation_parameters'


def load_planet_parameters(config_path: str, logger: logging.Logger) -> Optional[dict]:
    """Reads a JSON config file. Returns None (after logging) if it cannot be used."""
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return None
    if not isinstance(config, dict):
        logger.critical(f"Config file must contain a JSON object, got {type(config).__name__}.")
        return None
    section = config.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        logger.critical(f"'{CONFIG_SECTION}' must be a JSON object, got {type(section).__name__}.")
        return None
    return section


def save_planet(generator: PlanetGenerator, output_dir: str, logger: logging.Logger) -> str:
    """Writes the generator's current state to `output_dir`."""
    state = generator.state
    master_data_dir = os.path.join(output_dir, "master_data")
    os.makedirs(master_data_dir, exist_ok=True)

    logger.info(f"Saving master data to '{master_data_dir}'...")

    data_to_save = {
        "points": state.points,
        "plate_ids": state.plate_ids,
    }
    for name, data_array in state.crust.arrays().items():
        data_to_save[f"crust_{name}"] = data_array
    if state.boundary_flags is not None:
        data_to_save["boundary_flags"] = state.boundary_flags
    if state.adjacency is not None:
        data_to_save["triangles"] = state.adjacency.triangles

    for name, data_array in data_to_save.items():
        filepath = os.path.join(master_data_dir, f"{name}.npy")
        np.save(filepath, data_array)
        logger.info(f"  - Saved {name}.npy (shape: {data_array.shape})")

    plates_path = os.path.join(output_dir, "plates.json")
    with open(plates_path, 'w') as f:
        json.dump([plate.to_dict() for plate in state.plates], f, indent=2)
    logger.info(f"Saved plates.json ({state.num_plates} plates)")

    # The "birth certificate" of this bake.
    gen_config = dict(generator.settings)
    gen_config['settings_hash'] = generator.settings_hash
    gen_config_path = os.path.join(output_dir, "generation_config.json")
    with open(gen_config_path, 'w') as f:
        json.dump(gen_config, f, indent=4)
    logger.info(f"Saved generation_config.json to '{output_dir}'")

    return output_dir


def bake_planet(
    config_path: str,
    output_dir: Optional[str] = None,
    sequential: bool = False,
    build_adjacency: bool = True
) -> Optional[str]:
    """
    Loads a configuration, generates the planet and saves it.

    Returns:
        str: The output directory, or None if the bake was aborted.
    """
    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("PlanetBaker")

    # 2. --- Load Configuration ---
    planet_params = load_planet_parameters(config_path, logger)
    if planet_params is None:
        return None
    if sequential:
        planet_params['parallel'] = False

    # 3. --- Generate ---
    start_time = time.perf_counter()
    try:
        generator = PlanetGenerator(config=planet_params, logger=logger)
    except PlanetConfigError as e:
        logger.critical(f"Invalid planet configuration: {e}")
        return None

    generator.rebuild(with_adjacency=build_adjacency)
    if build_adjacency and generator.last_adjacency_error is not None:
        logger.warning("Boundary flags were not computed; baking without adjacency.")

    # 4. --- Save ---
    output_dir = output_dir or os.path.join("baked_planets", f"seed_{generator.seed}")
    save_planet(generator, output_dir, logger)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    logger.info(
        f"  - {generator.state.num_points} points, {generator.state.num_plates} plates, "
        f"{generator.state.continental_point_fraction():.1%} continental points, "
        f"{generator.state.num_boundary_points()} boundary points"
    )
    logger.info(f"Baked planet saved to: {output_dir}")
    return output_dir


# --- Command-Line Interface ---
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Offline Planet Baker for the Tectonic Planet Generator.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file for the planet to be baked."
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory. Defaults to baked_planets/seed_<seed>."
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Run every stage in the calling thread instead of the thread pool."
    )
    parser.add_argument(
        "--no-adjacency",
        action="store_true",
        help="Skip triangulation and boundary detection."
    )
    args = parser.parse_args()

    bake_planet(args.config, output_dir=args.output, sequential=args.sequential, build_adjacency=not args.no_adjacency)
