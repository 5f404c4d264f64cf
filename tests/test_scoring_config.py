import unittest
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.scoring_config import get_scoring_config, get_scoring_value  # noqa: E402


class ScoringConfigTests(unittest.TestCase):
    def test_loader_and_value_lookup(self):
        config = get_scoring_config()
        self.assertIsInstance(config, dict)
        self.assertEqual(get_scoring_value("dictionary.max_tokens"), 60)
        self.assertEqual(get_scoring_value("matching.fuzzy_threshold"), 0.90)
        self.assertEqual(get_scoring_value("matching.semantic.threshold"), 0.78)

    def test_missing_path_returns_default(self):
        self.assertEqual(get_scoring_value("matching.nope", 7), 7)
        self.assertEqual(get_scoring_value("dictionary.max_tokens.deeper", "x"), "x")
        self.assertIsNone(get_scoring_value(""))


if __name__ == "__main__":
    unittest.main()
