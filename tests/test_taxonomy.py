import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.taxonomy import StaticTaxonomy, get_default_taxonomy_provider  # noqa: E402
from app.taxonomy.local_taxonomy import LocalTaxonomy  # noqa: E402


class TaxonomyTests(unittest.TestCase):
    def test_synonym_table_resolves_canonical_spelling(self):
        taxonomy = LocalTaxonomy()
        self.assertEqual(taxonomy.canonical("MS SQL"), "SQL Server")
        self.assertEqual(taxonomy.canonical("pbi"), "Power BI")
        self.assertEqual(taxonomy.canonical("Snowflake"), "Snowflake")

    def test_stopwords_are_case_insensitive(self):
        taxonomy = LocalTaxonomy()
        self.assertTrue(taxonomy.is_stopword("Experience"))
        self.assertFalse(taxonomy.is_stopword("Python"))

    def test_static_taxonomy_substitutes_tables(self):
        taxonomy = StaticTaxonomy({"k8s": "Kubernetes"}, {"foo"})
        self.assertEqual(taxonomy.canonical("K8S"), "Kubernetes")
        self.assertTrue(taxonomy.is_stopword("FOO"))

    def test_default_provider_is_shared(self):
        self.assertIs(get_default_taxonomy_provider(), get_default_taxonomy_provider())


if __name__ == "__main__":
    unittest.main()
