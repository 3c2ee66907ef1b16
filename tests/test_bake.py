"""Offline baker and determinism probe tests"""

import json

import numpy as np
import pytest

from bake_planet import bake_planet
from determinism_probe import main as probe_main


class TestBakePlanet:

    def setup_method(self):
        self.params = {
            'seed': 77,
            'num_sample_points': 600,
            'num_plates': 6,
            'continental_ratio': 0.5,
        }

    def write_config(self, tmp_path, params):
        config_path = tmp_path / "planet.json"
        config_path.write_text(json.dumps({'planet_generation_parameters': params}))
        return str(config_path)

    def test_writes_master_data(self, tmp_path):
        output_dir = tmp_path / "out"

        result = bake_planet(self.write_config(tmp_path, self.params), output_dir=str(output_dir))

        assert result == str(output_dir)
        master = output_dir / "master_data"
        for name in ("points", "plate_ids", "crust_crust_type", "crust_elevation", "boundary_flags", "triangles"):
            assert (master / f"{name}.npy").exists(), name

        points = np.load(master / "points.npy")
        assert points.shape == (600, 3)
        assert np.load(master / "boundary_flags.npy").shape == (600,)

        plates = json.loads((output_dir / "plates.json").read_text())
        assert len(plates) == 6
        assert sum(p['num_points'] for p in plates) == 600

        gen_config = json.loads((output_dir / "generation_config.json").read_text())
        assert gen_config['seed'] == 77
        assert len(gen_config['settings_hash']) == 64

    def test_without_adjacency(self, tmp_path):
        output_dir = tmp_path / "out"

        bake_planet(self.write_config(tmp_path, self.params), output_dir=str(output_dir), build_adjacency=False)

        master = output_dir / "master_data"
        assert (master / "points.npy").exists()
        assert not (master / "boundary_flags.npy").exists()
        assert not (master / "triangles.npy").exists()

    def test_missing_config_aborts(self, tmp_path):
        assert bake_planet(str(tmp_path / "missing.json"), output_dir=str(tmp_path / "out")) is None
        assert not (tmp_path / "out").exists()

    @pytest.mark.parametrize("section", [None, [1, 2], "seed"])
    def test_malformed_parameter_section_aborts(self, tmp_path, caplog, section):
        config_path = tmp_path / "planet.json"
        config_path.write_text(json.dumps({'planet_generation_parameters': section}))

        with caplog.at_level("CRITICAL"):
            result = bake_planet(str(config_path), output_dir=str(tmp_path / "out"))

        assert result is None
        assert not (tmp_path / "out").exists()
        assert "planet_generation_parameters" in caplog.text

    def test_invalid_config_aborts(self, tmp_path):
        config_path = self.write_config(tmp_path, {**self.params, 'num_plates': 0})

        assert bake_planet(config_path, output_dir=str(tmp_path / "out")) is None
        assert not (tmp_path / "out").exists()


class TestDeterminismProbe:

    def test_parallel_and_sequential_match(self, tmp_path):
        config_path = tmp_path / "planet.json"
        config_path.write_text(json.dumps({
            'planet_generation_parameters': {'seed': 3, 'num_sample_points': 500, 'num_plates': 5}
        }))

        assert probe_main(["--config", str(config_path)]) == 0

    def test_missing_config(self, tmp_path):
        assert probe_main(["--config", str(tmp_path / "missing.json")]) == 2
