import io
import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

from config.config_loader import save_machine_config
from engine.step_engine import StepEngine
from logger.logger import JSONLogger
from tools.machine_inspect import inspect_machine, preview_machine
from tools.render import render_machine, render_operation, render_rules, render_tape
from tools.run_machine import run_machines, simulate_machine

APPEND_ONE = {
    "start": "q0",
    "empty_symbol": "_",
    "halt": ["qh"],
    "tape": ["1", "1"],
    "rules": [
        ["q0", "1", "1", "R", "q0"],
        ["q0", "_", "1", "N", "qh"],
    ],
}

INCOMPLETE = {
    "start": "q0",
    "empty_symbol": "_",
    "tape": ["1"],
    "rules": [["q0", "1", "1", "R", "q0"]],
}


def to_text(renderable):
    console = Console(file=io.StringIO(), width=100, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


class TestRender(unittest.TestCase):

    def test_tape_is_padded_with_empty_cells(self):
        engine = StepEngine.from_config(APPEND_ONE)
        strip, marker = to_text(render_tape(engine)).splitlines()
        self.assertEqual(strip, " _ | 1 | 1 | _ |")
        # head sits under the first real cell
        self.assertEqual(marker.index("^"), strip.index("1"))

    def test_head_marker_follows_action(self):
        engine = StepEngine.from_config(APPEND_ONE)
        for _ in range(4):
            engine.advance()
        self.assertIn(">", to_text(render_tape(engine)).splitlines()[1])

    def test_operation_label(self):
        engine = StepEngine.from_config(APPEND_ONE)
        self.assertIn("1 At state", to_text(render_operation(engine)))
        engine.run()
        self.assertIn("4 Halted", to_text(render_operation(engine)))

    def test_rules_table(self):
        engine = StepEngine.from_config(APPEND_ONE)
        text = to_text(render_rules(engine))
        self.assertIn("Scanned symbol", text)
        self.assertIn("qh (halt)", text)

    def test_machine_group(self):
        engine = StepEngine.from_config(APPEND_ONE)
        for _ in range(5):
            engine.advance()
            self.assertIn("Current state", to_text(render_machine(engine)))


class TestInspect(unittest.TestCase):

    def test_preview_falls_back_to_permissive(self):
        engine, error = preview_machine(dict(APPEND_ONE, rules=APPEND_ONE["rules"] + [["q0", "1"]]))
        self.assertIsNotNone(error)
        self.assertFalse(engine.rule_table.strict)
        self.assertIn('"q0" -> "qh"', engine.describe())

    def test_inspect_writes_graph(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = save_machine_config(APPEND_ONE, os.path.join(tmp, "append"))
            result = inspect_machine(path, graph_directory=os.path.join(tmp, "graphs"))
            self.assertTrue(result["valid"])
            self.assertIsNone(result["error"])
            self.assertEqual(Path(result["graph_path"]).read_text(encoding="utf-8"), result["graph"])


class TestRunMachine(unittest.TestCase):

    def test_simulate_halting_machine(self):
        engine = StepEngine.from_config(APPEND_ONE)
        result = simulate_machine(engine, max_steps=100)
        self.assertTrue(result["halted"])
        self.assertEqual(result["steps"], 3)
        self.assertEqual(result["tape"], "111")
        self.assertIsNone(result["error"])

    def test_simulate_missing_rule(self):
        engine = StepEngine.from_config(INCOMPLETE)
        result = simulate_machine(engine, max_steps=100)
        self.assertFalse(result["halted"])
        self.assertTrue(result["error"].startswith("MissingRule"))
        self.assertEqual(result["steps"], 1)

    def test_simulate_budget(self):
        looping = {"start": "a", "empty_symbol": "_", "rules": [["a", "_", "_", "R", "a"]]}
        engine = StepEngine.from_config(looping)
        result = simulate_machine(engine, max_steps=5)
        self.assertFalse(result["halted"])
        self.assertEqual(result["steps"], 5)

    def test_simulate_logs_trace(self):
        with tempfile.TemporaryDirectory() as tmp:
            logger = JSONLogger(tmp, "trace_")
            looping = {"start": "a", "empty_symbol": "_", "rules": [["a", "_", "_", "R", "a"]]}
            simulate_machine(StepEngine.from_config(looping), max_steps=10, logger=logger,
                             log_frequency=2, machine="loop")
            with open(logger.current_log, "r", encoding="utf-8") as f:
                entries = [json.loads(line) for line in f]
            self.assertEqual(len(entries), 5)
            self.assertEqual(entries[0]["machine"], "loop")

    def test_run_machines_batch(self):
        with tempfile.TemporaryDirectory() as tmp:
            good = save_machine_config(APPEND_ONE, os.path.join(tmp, "good"))
            bad = save_machine_config(INCOMPLETE, os.path.join(tmp, "bad"))
            broken = save_machine_config(dict(APPEND_ONE, head=9), os.path.join(tmp, "broken"))
            out = os.path.join(tmp, "out")

            results = run_machines([good, bad, broken], output_directory=out, max_steps=50)

            self.assertEqual([r["machine"] for r in results], ["good", "bad", "broken"])
            self.assertTrue(results[0]["halted"])
            self.assertIn("MissingRule", results[1]["error"])
            self.assertIn("InvalidHeadIndex", results[2]["error"])
            with open(os.path.join(out, "results.jsonl"), "r", encoding="utf-8") as f:
                self.assertEqual(len(f.readlines()), 3)

    def test_run_machines_rotates_per_machine(self):
        with tempfile.TemporaryDirectory() as tmp:
            first = save_machine_config(APPEND_ONE, os.path.join(tmp, "first"))
            second = save_machine_config(APPEND_ONE, os.path.join(tmp, "second"))
            with mock.patch.object(JSONLogger, "rotate") as rotate:
                run_machines([first, second], output_directory=os.path.join(tmp, "out"), max_steps=50)
            self.assertEqual(rotate.call_count, 2)


if __name__ == "__main__":
    unittest.main()
