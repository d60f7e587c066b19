"""Run the property-test runner in tools/ as part of the unit suite."""

import contextlib
import importlib.util
import io
import os
import sys
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
RUNNER = os.path.join(ROOT, "tools", "invariants_runner.py")


def load_runner():
    spec = importlib.util.spec_from_file_location("mapbind_invariants_runner", RUNNER)
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


class TestInvariantsRunner(unittest.TestCase):
    def test_runner_passes(self):
        runner = load_runner()
        out = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(out):
            code = runner.main(trials=50)
        self.assertEqual(code, 0, out.getvalue())


if __name__ == "__main__":
    unittest.main()
