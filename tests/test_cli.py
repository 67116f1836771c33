"""Tests for CLI argument handling."""

import contextlib
import io
import json
import os
import shutil
import tempfile
import unittest
from unittest import mock

import numpy as np

from conftest import write_hdre


class TestCLI(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.good = os.path.join(self.tmpdir, "good.hdre")
        write_hdre(self.good, num_levels=3, version=3.0, width=4, num_channels=3)

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _run(self, argv):
        from CubeBrew import cli

        out = io.StringIO()
        with mock.patch("CubeBrew.cli.setup_logging"), contextlib.redirect_stdout(out):
            try:
                cli.main(argv)
                code = 0
            except SystemExit as exc:
                code = exc.code
        return code, out.getvalue()

    def test_summary_for_valid_file(self):
        code, out = self._run([self.good, "--levels", "3"])
        self.assertEqual(code, 0)
        self.assertIn("version:        3.0", out)
        self.assertIn("4, 2, 1", out)

    def test_json_output(self):
        code, out = self._run([self.good, "--levels", "3", "--json"])
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["failures"], {})
        self.assertEqual(data["assets"][0]["num_channels"], 3)
        self.assertEqual(len(data["assets"][0]["levels"]), 3)

    def test_failure_sets_exit_code(self):
        bad = os.path.join(self.tmpdir, "bad.hdre")
        write_hdre(bad, format_tag=1)
        code, out = self._run([self.good, bad, "--levels", "3", "--json"])
        self.assertEqual(code, 1)
        data = json.loads(out)
        self.assertEqual(len(data["assets"]), 1)
        self.assertIn(bad, data["failures"])

    def test_non_finite_version_reported_as_failure(self):
        bad = os.path.join(self.tmpdir, "nan.hdre")
        write_hdre(bad, version=float("nan"))
        code, out = self._run([self.good, bad, "--levels", "3", "--json"])
        self.assertEqual(code, 1)
        data = json.loads(out)
        self.assertIn(bad, data["failures"])
        self.assertIn("finite", data["failures"][bad])

    def test_export_writes_npy_faces(self):
        dest = os.path.join(self.tmpdir, "export")
        code, _ = self._run([self.good, "--levels", "3", "--export", dest])
        self.assertEqual(code, 0)
        face_dir = os.path.join(dest, "good")
        names = sorted(os.listdir(face_dir))
        self.assertEqual(len(names), 18)
        face = np.load(os.path.join(face_dir, "level1_face2.npy"))
        self.assertEqual(face.shape, (2, 2, 3))
        self.assertEqual(face.dtype, np.float32)

    def test_no_files_is_error(self):
        code, _ = self._run([])
        self.assertEqual(code, 1)

    def test_invalid_levels_rejected(self):
        code, _ = self._run([self.good, "--levels", "0"])
        self.assertEqual(code, 1)

    def test_missing_config_rejected(self):
        code, out = self._run([self.good, "--config", os.path.join(self.tmpdir, "x.yaml")])
        self.assertEqual(code, 1)
        self.assertIn("Config file not found", out)

    def test_generate_config(self):
        dest = os.path.join(self.tmpdir, "cfg.yaml")
        code, out = self._run(["--generate-config", "--config", dest])
        self.assertEqual(code, 0)
        self.assertTrue(os.path.exists(dest))

        from CubeBrew.config import CubeBrewConfig
        self.assertEqual(CubeBrewConfig.from_yaml(dest).decoder.num_levels, 6)


if __name__ == "__main__":
    unittest.main(verbosity=2)
