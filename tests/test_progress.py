import unittest

import numpy as np

from stoichsim.models import Product, Reactant, Reaction
from stoichsim.progress import (
    clamp_progress,
    depletion_curve,
    is_complete,
    playback_duration_ms,
    progress_at,
    progress_frames,
    reactant_remaining,
)
from stoichsim.stoichiometry import calculate_stoichiometry


class TestSchedule(unittest.TestCase):
    def test_ticks(self):
        self.assertEqual(progress_at(0), 0.0)
        self.assertEqual(progress_at(49), 0.0)
        self.assertEqual(progress_at(50), 2.0)
        self.assertEqual(progress_at(1250), 50.0)
        self.assertEqual(progress_at(2500), 100.0)
        self.assertEqual(progress_at(10_000), 100.0)
        self.assertEqual(progress_at(-100), 0.0)

    def test_monotonic_and_restartable(self):
        values = [progress_at(t) for t in range(0, 3000, 7)]
        self.assertEqual(values, sorted(values))
        self.assertEqual(progress_at(733), progress_at(733))

    def test_custom_step(self):
        self.assertEqual(progress_at(100, step=5, interval_ms=20), 25.0)
        with self.assertRaises(ValueError):
            progress_at(10, interval_ms=0)

    def test_frames(self):
        frames = progress_frames()
        self.assertEqual(len(frames), 51)
        self.assertEqual(frames[0], 0.0)
        self.assertEqual(frames[-1], 100.0)
        self.assertEqual(playback_duration_ms(), 2500.0)
        self.assertEqual(progress_frames(30).tolist(), [0.0, 30.0, 60.0, 90.0, 100.0])

    def test_clamp(self):
        self.assertEqual(clamp_progress(140), 100.0)
        self.assertEqual(clamp_progress(-3), 0.0)
        self.assertTrue(is_complete(100.0))
        self.assertFalse(is_complete(98.0))


class TestDepletion(unittest.TestCase):
    def setUp(self):
        self.reaction = Reaction(
            reactant_a=Reactant("Sodium hydroxide", "NaOH", 40.0, 1),
            reactant_b=Reactant("Hydrochloric acid", "HCl", 36.5, 1),
            products=(Product("Sodium chloride", "NaCl", 58.5, 1),),
            balanced_equation="NaOH + HCl → NaCl + H2O",
            reaction_type="Neutralization",
        )

    def test_excess_reactant_depletes_partially(self):
        # B limiting with half the moles of A: A ends at 50 %.
        result = calculate_stoichiometry(self.reaction, 80.0, "grams", 36.5, "grams")
        self.assertEqual(reactant_remaining(result, 0.0), (100.0, 100.0))
        remaining_a, remaining_b = reactant_remaining(result, 100.0)
        self.assertAlmostEqual(remaining_a, 50.0)
        self.assertAlmostEqual(remaining_b, 0.0)

    def test_a_limiting_leaves_half_of_b(self):
        result = calculate_stoichiometry(self.reaction, 40.0, "grams", 73.0, "grams")
        remaining_a, remaining_b = reactant_remaining(result, 100.0)
        self.assertAlmostEqual(remaining_a, 0.0)
        self.assertAlmostEqual(remaining_b, 50.0)
        self.assertAlmostEqual(reactant_remaining(result, 50.0)[1], 75.0)

    def test_curve(self):
        result = calculate_stoichiometry(self.reaction, 40.0, "grams", 36.5, "grams")
        curve = depletion_curve(result)
        self.assertEqual(len(curve.progress), 51)
        np.testing.assert_allclose(curve.reactant_a, 100.0 - curve.progress)
        np.testing.assert_allclose(curve.reactant_b, 100.0 - curve.progress)
        np.testing.assert_allclose(curve.products, curve.progress)
        self.assertTrue(np.all(curve.reactant_a >= 0.0))


if __name__ == '__main__':
    unittest.main()
