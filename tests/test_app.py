import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

import app
from config.config_loader import DEFAULT_CONFIG


class TestLoadHandlers(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.samples = os.path.join(self.tmp.name, "samples")
        os.makedirs(self.samples)
        config = dict(DEFAULT_CONFIG,
                      output_directory=os.path.join(self.tmp.name, "logs"),
                      examples_directory=self.samples)
        self.session = app.Session(config)
        self.output = io.StringIO()
        patcher = mock.patch.object(app, "console", Console(file=self.output, width=200, color_system=None))
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self.tmp.cleanup()

    def write_sample(self, name, text):
        Path(self.samples, name).write_text(text, encoding="utf-8")

    def test_sample_missing_key_is_reported(self):
        self.write_sample("bad.yaml", "start: q0\nempty_symbol: _\n")
        with mock.patch.object(app.IntPrompt, "ask", return_value=0):
            app.handle_load_sample(self.session)
        self.assertIsNone(self.session.engine)
        self.assertIn("rules", self.output.getvalue())

    def test_sample_malformed_yaml_is_reported(self):
        self.write_sample("broken.yaml", "start: [q0\nrules: {\n")
        with mock.patch.object(app.IntPrompt, "ask", return_value=0):
            app.handle_load_sample(self.session)
        self.assertIsNone(self.session.engine)
        self.assertIn("Invalid YAML", self.output.getvalue())

    def test_sample_with_numeric_blank_loads(self):
        self.write_sample("beaver.yaml", (
            "start: A\n"
            "empty_symbol: 0\n"
            "halt: [H]\n"
            "rules:\n"
            "  - [A, 0, 1, R, B]\n"
            "  - [A, 1, 1, L, B]\n"
            "  - [B, 0, 1, L, A]\n"
            "  - [B, 1, 1, R, H]\n"
        ))
        with mock.patch.object(app.IntPrompt, "ask", return_value=0):
            app.handle_load_sample(self.session)
        self.assertIsNotNone(self.session.engine)
        self.assertEqual(self.session.engine.empty_symbol, "0")
        self.assertFalse(self.session.halted)

    def test_load_missing_file_is_reported(self):
        missing = os.path.join(self.tmp.name, "nope.json")
        with mock.patch.object(app.Prompt, "ask", return_value=missing):
            app.handle_load(self.session)
        self.assertIsNone(self.session.engine)
        self.assertIn("not found", self.output.getvalue())


if __name__ == "__main__":
    unittest.main()
