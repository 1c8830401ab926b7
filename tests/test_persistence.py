# tests/test_persistence.py
# Integration tests for saving and loading planets.

import json
import os
import tempfile
import unittest

import numpy as np

from planet_generator.errors import PersistenceError
from planet_generator.layers import NoiseLayer
from planet_generator.noise_filter import FilterType, NoiseFilter
from planet_generator.persistence import load_state, save_state, state_from_dict
from planet_generator.shape import ShapeGenerator


class TestSaveAndLoad(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp_dir.name, "planet.json")

        self.shape_gen = ShapeGenerator({'radius': 2.75, 'sea_level': 0.9})
        self.shape_gen.noise_layers[0].filter = NoiseFilter({
            'seed': 0xCAFEBABE, 'num_octaves': 6, 'strength': 0.31, 'roughness': 1.17,
            'lacunarity': 2.13, 'persistence': 0.47, 'offset': 0.123456789, 'floor': 0.1,
            'center': (0.1, 0.2, 0.3),
        })
        self.shape_gen.add_layer(NoiseLayer(
            filter=NoiseFilter({'seed': 77, 'filter_type': FilterType.RIGID, 'num_octaves': 4}),
            first_layer_mask=True,
        ))
        self.shape_gen.add_layer(NoiseLayer(
            filter=NoiseFilter({'seed': 5, 'filter_type': FilterType.WARP, 'strength': 0.2,
                                'warp_offset': (1.0 / 3.0, 2.0 / 7.0, -0.1)}),
            is_warp=True, warp_target=2,
        ))

        rng = np.random.default_rng(3)
        points = rng.normal(size=(25, 3))
        self.points = points / np.linalg.norm(points, axis=1)[:, np.newaxis]

    def tearDown(self):
        self.tmp_dir.cleanup()

    def test_round_trip_reproduces_elevations_exactly(self):
        before = [self.shape_gen.get_elevation(p) for p in self.points]
        save_state(self.path, self.shape_gen, settings={'resolution': 64})

        state = load_state(self.path)
        after = [state.shape_gen.get_elevation(p) for p in self.points]
        self.assertEqual(before, after)
        self.assertEqual(state.settings['resolution'], 64)

    def test_kernels_are_rebuilt_from_seeds(self):
        save_state(self.path, self.shape_gen)
        state = load_state(self.path)
        for original, restored in zip(self.shape_gen.noise_layers, state.shape_gen.noise_layers):
            self.assertEqual(restored.filter.seed, original.filter.seed)
            np.testing.assert_array_equal(restored.filter.noise.random, original.filter.noise.random)

    def test_permutation_tables_are_not_written(self):
        save_state(self.path, self.shape_gen)
        with open(self.path, 'r') as f:
            data = json.load(f)
        layer = data['shape_gen']['noise_layers'][0]
        self.assertEqual(layer['filter']['seed'], 0xCAFEBABE)
        self.assertNotIn('random', layer['filter'])
        self.assertNotIn('simplex_random', layer['filter'])

    def test_structure_survives(self):
        save_state(self.path, self.shape_gen, colors={'elevation_gradient': [[0.0, [0, 0, 0]], [1.0, [9, 9, 9]]]})
        state = load_state(self.path)
        self.assertEqual(state.shape_gen.to_dict(), self.shape_gen.to_dict())
        self.assertEqual(state.colors['elevation_gradient'][1], [1.0, [9, 9, 9]])

    def test_default_settings(self):
        state = state_from_dict({'shape_gen': {}})
        self.assertEqual(state.shape_gen.num_layers, 1)
        self.assertIn('resolution', state.settings)
        self.assertEqual(state.colors, {})


class TestLoadErrors(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp_dir.name, "broken.json")

    def tearDown(self):
        self.tmp_dir.cleanup()

    def _write(self, text):
        with open(self.path, 'w') as f:
            f.write(text)

    def test_missing_file(self):
        with self.assertRaises(PersistenceError):
            load_state(os.path.join(self.tmp_dir.name, "missing.json"))

    def test_invalid_utf8(self):
        with open(self.path, 'wb') as f:
            f.write(b'\xff\xfe{"shape_gen": {}}')
        with self.assertRaises(PersistenceError):
            load_state(self.path)

    def test_directory_path(self):
        with self.assertRaises(PersistenceError):
            load_state(self.tmp_dir.name)

    def test_non_integer_resolution(self):
        for resolution in ("64", 64.5, True):
            self._write(json.dumps({'shape_gen': {}, 'settings': {'resolution': resolution}}))
            with self.assertRaises(PersistenceError):
                load_state(self.path)

    def test_colors_must_be_an_object(self):
        self._write(json.dumps({'shape_gen': {}, 'colors': [1, 2]}))
        with self.assertRaises(PersistenceError):
            load_state(self.path)

    def test_malformed_gradient(self):
        self._write(json.dumps({'shape_gen': {}, 'colors': {'elevation_gradient': [[0.0, [1, 2]], [1.0, 5]]}}))
        with self.assertRaises(PersistenceError):
            load_state(self.path)

    def test_fractional_seed(self):
        self._write(json.dumps({'shape_gen': {'noise_layers': [{'filter': {'seed': 1.9}}]}}))
        with self.assertRaises(PersistenceError):
            load_state(self.path)

    def test_invalid_json(self):
        self._write("{not json")
        with self.assertRaises(PersistenceError):
            load_state(self.path)

    def test_not_an_object(self):
        self._write("[1, 2, 3]")
        with self.assertRaises(PersistenceError):
            load_state(self.path)

    def test_missing_shape_gen(self):
        self._write(json.dumps({'settings': {}}))
        with self.assertRaises(PersistenceError):
            load_state(self.path)

    def test_bad_filter_type(self):
        self._write(json.dumps({'shape_gen': {'noise_layers': [{'filter': {'filter_type': 'billow'}}]}}))
        with self.assertRaises(PersistenceError):
            load_state(self.path)

    def test_bad_seed(self):
        self._write(json.dumps({'shape_gen': {'noise_layers': [{'filter': {'seed': -4}}]}}))
        with self.assertRaises(PersistenceError):
            load_state(self.path)


if __name__ == '__main__':
    unittest.main()
