import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.features.sections import (  # noqa: E402
    SKILLS_LABELS,
    ExtractionStrategy,
    detect_section_flags,
    extract_section,
    robust_slice,
)
from app.schemas.analysis import SectionFlags  # noqa: E402
from tests.fixtures import SAMPLE_RESUME  # noqa: E402


class ExtractSectionTests(unittest.TestCase):
    def test_summary_stops_at_next_heading(self):
        self.assertEqual(
            extract_section(SAMPLE_RESUME, "summary"),
            "Data analyst with 6 years of experience delivering Power BI dashboards that cut reporting time by 30%.",
        )

    def test_skills_and_education_blocks(self):
        self.assertEqual(extract_section(SAMPLE_RESUME, "skills"), "SQL, Power BI, Python, DAX, Excel")
        self.assertEqual(
            extract_section(SAMPLE_RESUME, "education"),
            "Bachelor of Science in Statistics, University of Sydney",
        )

    def test_experience_block_excludes_education(self):
        experience = extract_section(SAMPLE_RESUME, "experience")
        self.assertTrue(experience.startswith("Senior Data Analyst, Acme Corp"))
        self.assertIn("Developed automated SQL pipelines", experience)
        self.assertNotIn("Bachelor", experience)

    def test_missing_section_is_empty(self):
        self.assertEqual(extract_section(SAMPLE_RESUME, "projects"), "")
        self.assertEqual(extract_section("", "summary"), "")

    def test_inline_heading_falls_back_to_legacy_pattern(self):
        self.assertEqual(
            extract_section("Summary: Analyst with 5 years in retail", "summary"),
            "Analyst with 5 years in retail",
        )

    def test_custom_strategies_are_tried_in_order(self):
        strategies = [
            ExtractionStrategy(name="short", run=lambda text, kind: "abc"),
            ExtractionStrategy(name="long", run=lambda text, kind: "a much longer excerpt"),
        ]
        self.assertEqual(
            extract_section("anything", "summary", strategies=strategies, min_length=10),
            "a much longer excerpt",
        )
        self.assertEqual(extract_section("anything", "summary", strategies=strategies, min_length=0), "abc")

    def test_no_strategy_accepted_returns_first_non_empty(self):
        strategies = [
            ExtractionStrategy(name="empty", run=lambda text, kind: ""),
            ExtractionStrategy(name="short", run=lambda text, kind: "abc"),
        ]
        self.assertEqual(extract_section("anything", "summary", strategies=strategies, min_length=50), "abc")

    def test_unknown_kind_is_rejected(self):
        with self.assertRaises(ValueError):
            extract_section(SAMPLE_RESUME, "hobbies")

    def test_robust_slice_truncates(self):
        self.assertEqual(robust_slice("Skills\n" + "x" * 50, SKILLS_LABELS, max_chars=10), "x" * 10)


class SectionFlagTests(unittest.TestCase):
    def test_sample_resume_flags(self):
        self.assertEqual(
            detect_section_flags(SAMPLE_RESUME),
            SectionFlags(
                has_summary=True,
                has_education=True,
                has_skills=True,
                has_experience=True,
                has_tools=False,
                has_projects=False,
                has_contact=True,
                uses_bullets=True,
            ),
        )

    def test_empty_text_has_no_flags(self):
        self.assertEqual(detect_section_flags(""), SectionFlags())


if __name__ == "__main__":
    unittest.main()
