import json
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from stoichsim.cli import app

ENV = {"STOICHSIM_CONFIG": "", "STOICHSIM_CATALOG": "", "STOICHSIM_HISTORY": ""}


class TestCLI(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.history_file = str(Path(self.tmp.name) / "history.sqlite")

    def invoke(self, *args):
        return self.runner.invoke(app, list(args), env=ENV)

    def test_simulate_reverse_order(self):
        result = self.invoke(
            "simulate", "Hydrochloric acid", "36.46", "grams", "Sodium hydroxide", "80", "grams"
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Limiting reagent: Hydrochloric acid", result.output)
        self.assertIn("Excess Sodium hydroxide: 1.0000 mol (40.0000 g)", result.output)

    def test_simulate_json(self):
        result = self.invoke(
            "simulate", "Sodium hydroxide", "50", "mL", "Hydrochloric acid", "1", "moles", "--json"
        )
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.stdout)
        self.assertEqual(payload["limiting_reagent"], "A")
        self.assertAlmostEqual(payload["input_a"]["moles"], 0.05)

    def test_unknown_pair(self):
        result = self.invoke("simulate", "Zinc", "1", "grams", "Oxygen", "1", "grams")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Reaction not found", result.output)

    def test_invalid_quantity(self):
        result = self.invoke(
            "simulate", "Zinc", "0", "grams", "Hydrochloric acid", "1", "grams"
        )
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Invalid quantity", result.output)

    def test_unknown_unit(self):
        result = self.invoke(
            "simulate", "Zinc", "1", "kg", "Hydrochloric acid", "1", "grams"
        )
        self.assertEqual(result.exit_code, 2)

    def test_save_history_delete(self):
        saved = self.invoke(
            "simulate", "Zinc", "6.538", "grams", "Hydrochloric acid", "0.5", "moles",
            "--save", "--history-file", self.history_file,
        )
        self.assertEqual(saved.exit_code, 0, saved.output)

        listed = self.invoke("history", "--history-file", self.history_file)
        self.assertEqual(listed.exit_code, 0, listed.output)
        self.assertIn("1 simulations", listed.output)
        self.assertIn("limiting: Zinc", listed.output)

        deleted = self.invoke("delete", "1", "--history-file", self.history_file)
        self.assertEqual(deleted.exit_code, 0, deleted.output)
        missing = self.invoke("delete", "1", "--history-file", self.history_file)
        self.assertEqual(missing.exit_code, 1)

    def test_reactions_and_partners(self):
        listed = self.invoke("reactions")
        self.assertEqual(listed.exit_code, 0, listed.output)
        self.assertIn("2H2 + O2 → 2H2O", listed.output)

        partners = self.invoke("partners", "Hydrochloric acid")
        self.assertEqual(partners.exit_code, 0, partners.output)
        self.assertEqual(
            partners.stdout.split("\n")[:3],
            ["Calcium carbonate", "Sodium hydroxide", "Zinc"],
        )

    def test_missing_config_file(self):
        missing = str(Path(self.tmp.name) / "nope.json")
        result = self.invoke("--config", missing, "reactions")
        self.assertEqual(result.exit_code, 2)

        env = dict(ENV, STOICHSIM_CONFIG=missing)
        result = self.runner.invoke(app, ["reactions"], env=env)
        self.assertEqual(result.exit_code, 2)
        self.assertNotIsInstance(result.exception, FileNotFoundError)

    def test_malformed_config_file(self):
        path = Path(self.tmp.name) / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        result = self.invoke("--config", str(path), "reactions")
        self.assertEqual(result.exit_code, 2)

        path.write_text('{"colour": "blue"}', encoding="utf-8")
        result = self.invoke("--config", str(path), "reactions")
        self.assertEqual(result.exit_code, 2)
        self.assertIn("Cannot load settings", result.output)

    def test_progress(self):
        result = self.invoke(
            "progress", "Sodium hydroxide", "80", "grams", "Hydrochloric acid", "36.46", "grams",
            "--elapsed-ms", "2500",
        )
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.stdout)
        self.assertEqual(payload["progress"], 100.0)
        self.assertAlmostEqual(payload["Sodium hydroxide"], 50.0)
        self.assertAlmostEqual(payload["Hydrochloric acid"], 0.0)


if __name__ == '__main__':
    unittest.main()
