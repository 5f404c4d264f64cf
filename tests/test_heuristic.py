import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.features.sections import detect_section_flags  # noqa: E402
from app.schemas.analysis import BUCKET_ORDER, HeuristicParts, SectionFlags  # noqa: E402
from app.scoring.common import round_half_up  # noqa: E402
from app.scoring.heuristic import (  # noqa: E402
    compute_ats_heuristic,
    compute_structure,
    compute_summary_flags,
    experience_signals,
    keywords_floor_score,
    skills_score,
    to_ats_breakdown,
    unique_skill_count,
)
from tests.fixtures import SAMPLE_RESUME  # noqa: E402


def _scores(buckets):
    return {bucket.label: bucket.score for bucket in buckets}


class HeuristicScoreTests(unittest.TestCase):
    def test_sample_resume_breakdown(self):
        result = compute_ats_heuristic(SAMPLE_RESUME, detect_section_flags(SAMPLE_RESUME))
        self.assertEqual(
            _scores(result.buckets),
            {"Structure": 20, "Summary": 20, "Skills": 8, "Experience": 12, "Education": 10, "Keywords": 10},
        )
        self.assertEqual(result.score, 80)
        self.assertEqual([bucket.label for bucket in result.buckets], list(BUCKET_ORDER))
        experience = result.buckets[3]
        self.assertEqual(experience.reasons, ["3 action verbs", "3 quantified metrics"])

    def test_feedback_lines_follow_bucket_order(self):
        result = compute_ats_heuristic(SAMPLE_RESUME, detect_section_flags(SAMPLE_RESUME))
        self.assertEqual(len(result.feedback), 6)
        self.assertTrue(result.feedback[0].startswith("Structure: 20/20"))
        self.assertTrue(result.feedback[-1].startswith("Keywords: 10/10"))

    def test_scoring_is_deterministic(self):
        flags = detect_section_flags(SAMPLE_RESUME)
        self.assertEqual(compute_ats_heuristic(SAMPLE_RESUME, flags), compute_ats_heuristic(SAMPLE_RESUME, flags))

    def test_empty_resume_stays_in_bounds(self):
        result = compute_ats_heuristic("", SectionFlags())
        self.assertGreaterEqual(result.score, 0)
        self.assertLessEqual(result.score, 100)
        self.assertEqual(_scores(result.buckets)["Keywords"], 4)
        self.assertEqual(result.buckets[4].reasons, ["education missing"])
        for bucket in result.buckets:
            self.assertLessEqual(bucket.score, bucket.max)


class BucketComponentTests(unittest.TestCase):
    def test_structure_without_sections(self):
        structure = compute_structure(SectionFlags())
        self.assertEqual(structure.score, 0)
        self.assertEqual(
            structure.reasons,
            [
                "missing summary",
                "missing experience",
                "missing skills",
                "missing education",
                "no contact info",
                "no bullets",
            ],
        )

    def test_summary_signals(self):
        self.assertEqual(compute_summary_flags("", "SQL").score, 0)
        full = compute_summary_flags("Analyst with 5+ years saving $120,000 using SQL", "SQL, Excel")
        self.assertEqual(full.score, 20)
        self.assertEqual(
            full.reasons,
            ["has summary", "years mentioned", "has quantified outcome", "mentions a resume skill"],
        )

    def test_summary_ignores_skills_not_in_resume_list(self):
        summary = compute_summary_flags("Analyst with 5 years of Tableau work", "SQL, Excel")
        self.assertEqual(summary.score, 10)
        self.assertIn("no skill mentioned", summary.reasons)

    def test_experience_signals(self):
        signals = experience_signals("Led a team of 5 and cut 200 hours of manual work, saving $1,200")
        self.assertEqual((signals.action_hits, signals.metric_hits), (2, 3))
        self.assertEqual(signals.score, 10)

    def test_skills_score_is_capped(self):
        self.assertEqual(skills_score(0), 0)
        self.assertEqual(skills_score(6), 10)
        self.assertEqual(skills_score(12), 20)
        self.assertEqual(skills_score(30), 20)

    def test_unique_skills_are_counted_on_normalized_text(self):
        self.assertEqual(unique_skill_count("Excel, excel., \uff25\uff38\uff23\uff25\uff2c\nSQL"), 2)

    def test_keyword_floor(self):
        self.assertEqual(keywords_floor_score("Modelled churn in R and Stata"), 7)
        self.assertEqual(keywords_floor_score("Wrote Rust services"), 3)
        self.assertEqual(keywords_floor_score("Built SQL views"), 7)

    def test_half_up_rounding(self):
        self.assertEqual(round_half_up(4.5), 5)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.49), 2)


class BreakdownMappingTests(unittest.TestCase):
    def test_parts_map_onto_ui_buckets(self):
        parts = HeuristicParts(
            structure25=10,
            summary20=10,
            skills20=5,
            experience20=6,
            education10=6,
            keywords7=3,
        )
        buckets = to_ats_breakdown(parts)
        self.assertEqual(
            _scores(buckets),
            {"Structure": 8, "Summary": 10, "Skills": 5, "Experience": 6, "Education": 6, "Keywords": 4},
        )

    def test_offline_total_agrees_with_breakdown(self):
        for resume in (SAMPLE_RESUME, "", "Skills\nSQL"):
            result = compute_ats_heuristic(resume, detect_section_flags(resume))
            self.assertEqual(result.score, sum(bucket.score for bucket in result.buckets))


if __name__ == "__main__":
    unittest.main()
