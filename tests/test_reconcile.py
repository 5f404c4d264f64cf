import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.features.jd_dictionary import build_jd_dictionary  # noqa: E402
from app.features.sections import detect_section_flags, extract_section  # noqa: E402
from app.schemas.analysis import KeywordMatchResult, SectionFlags  # noqa: E402
from app.scoring.education import names_study_field, score_education  # noqa: E402
from app.scoring.heuristic import compute_ats_heuristic  # noqa: E402
from app.scoring.reconcile import (  # noqa: E402
    BUCKET_TRUST_POLICY,
    display_terms,
    keyword_bucket,
    parse_external_breakdown,
    reconcile,
)
from app.semantic.matcher import compute_keyword_match  # noqa: E402
from tests.fixtures import DATA_JD, RESUME_WITHOUT_EDUCATION, SAMPLE_RESUME  # noqa: E402


def _reconcile(resume_text, external, job_description=DATA_JD, **kwargs):
    flags = detect_section_flags(resume_text)
    keyword_match = compute_keyword_match(
        job_description,
        resume_text,
        dictionary=build_jd_dictionary(job_description, extra_keywords=[]),
    )
    return reconcile(
        compute_ats_heuristic(resume_text, flags),
        external,
        keyword_match,
        flags,
        extract_section(resume_text, "summary"),
        extract_section(resume_text, "skills"),
        resume_text,
        job_description,
        experience_excerpt=extract_section(resume_text, "experience") or resume_text,
        **kwargs,
    )


def _scores(result):
    return {bucket.label: bucket.score for bucket in result.breakdown}


class ReconcileTests(unittest.TestCase):
    def test_without_external_scores_uses_local_buckets(self):
        result = _reconcile(SAMPLE_RESUME, None)
        self.assertEqual(result.source, "heuristic")
        self.assertEqual(
            _scores(result),
            {"Structure": 20, "Summary": 20, "Skills": 8, "Experience": 12, "Education": 10, "Keywords": 8},
        )
        self.assertEqual(result.score, 78)
        self.assertEqual(len(result.feedback), 6)
        self.assertTrue(result.feedback[5].startswith("Keywords: 8/10"))
        self.assertEqual([bucket.max for bucket in result.breakdown], [20, 20, 20, 20, 10, 10])

    def test_missing_education_overrides_external_score(self):
        external = {"score": 70, "breakdown": [{"label": "Education", "score": 10, "max": 10}]}
        result = _reconcile(RESUME_WITHOUT_EDUCATION, external)
        education = result.breakdown[4]
        self.assertEqual(education.score, 0)
        self.assertIn("education missing", education.reasons)
        self.assertEqual(result.score, 70)
        self.assertEqual(result.source, "model")

    def test_summary_is_always_recomputed(self):
        external = {"breakdown": [{"label": "Summary", "score": 2, "max": 20}]}
        self.assertEqual(_scores(_reconcile(RESUME_WITHOUT_EDUCATION, external))["Summary"], 15)

    def test_malformed_external_values_are_clamped_or_dropped(self):
        external = {
            "score": 250,
            "breakdown": [
                {"label": "Skills", "score": 500, "max": 20},
                {"label": "Bogus", "score": 5, "max": 5},
                {"label": "Experience", "score": "n/a", "max": 20},
            ],
        }
        result = _reconcile(SAMPLE_RESUME, external)
        scores = _scores(result)
        self.assertEqual(scores["Skills"], 20)
        self.assertEqual(scores["Experience"], 12)
        self.assertNotIn("Bogus", scores)
        self.assertEqual(result.score, 90)
        self.assertEqual(result.source, "model")

    def test_valid_top_line_is_kept(self):
        external = {"score": 73, "breakdown": [{"label": "Skills", "score": 14, "max": 20}]}
        result = _reconcile(SAMPLE_RESUME, external)
        self.assertEqual(result.score, 73)
        self.assertEqual(_scores(result)["Skills"], 14)
        self.assertEqual(result.breakdown[2].reasons, ["extracted 5 skill tokens", "limited skill variety"])

    def test_education_omitted_by_external_breakdown_counts_as_zero(self):
        jd = "Bachelor degree required. Experience with SQL and Power BI."
        external = {"score": 70, "breakdown": [{"label": "Skills", "score": 14, "max": 20}]}
        education = _reconcile(SAMPLE_RESUME, external, job_description=jd).breakdown[4]
        self.assertEqual(education.score, 6)
        self.assertEqual(education.reasons, ["education present", "partially relevant"])

        offline = _reconcile(SAMPLE_RESUME, None, job_description=jd).breakdown[4]
        self.assertEqual(offline.score, 10)

        supplied = {"breakdown": [{"label": "Education", "score": 9, "max": 10}]}
        self.assertEqual(_reconcile(SAMPLE_RESUME, supplied, job_description=jd).breakdown[4].score, 9)

    def test_unusable_external_payload_is_logged(self):
        with self.assertLogs("app.scoring.reconcile", level="WARNING"):
            result = _reconcile(SAMPLE_RESUME, {"unexpected": True})
        self.assertEqual(result.source, "heuristic")
        self.assertEqual(result.score, 78)

    def test_policy_can_distrust_external_skills(self):
        external = {"breakdown": [{"label": "Skills", "score": 20, "max": 20}]}
        policy = dict(BUCKET_TRUST_POLICY, Skills="recompute")
        self.assertEqual(_scores(_reconcile(SAMPLE_RESUME, external, policy=policy))["Skills"], 8)
        self.assertEqual(_scores(_reconcile(SAMPLE_RESUME, external))["Skills"], 20)


class ExternalBreakdownTests(unittest.TestCase):
    def test_scores_are_rescaled_to_fixed_maxima(self):
        external = {
            "breakdown": [
                {"label": "Skills", "score": 20, "max": 40},
                {"label": "Education", "score": 8, "max": 10},
                {"label": "Skills", "score": 1, "max": 20},
            ]
        }
        self.assertEqual(parse_external_breakdown(external), {"Skills": 10, "Education": 8})

    def test_non_mapping_input(self):
        self.assertEqual(parse_external_breakdown(None), {})
        self.assertEqual(parse_external_breakdown({"breakdown": "nope"}), {})


class KeywordBucketTests(unittest.TestCase):
    def test_missing_terms_are_filtered_for_display(self):
        match = KeywordMatchResult(
            matched=["SQL", "Excel"],
            missing=["Kubernetes", "a related field", "Airflow"],
            pct=40,
            present_in_jd=["SQL", "Excel", "Kubernetes", "a related field", "Airflow"],
        )
        bucket = keyword_bucket(match)
        self.assertEqual(bucket.score, 4)
        self.assertEqual(bucket.reasons, ["matches 40% of JD keywords", "missing: Kubernetes, Airflow"])

    def test_half_points_round_up(self):
        self.assertEqual(keyword_bucket(KeywordMatchResult(pct=45, present_in_jd=["SQL"])).score, 5)

    def test_empty_dictionary(self):
        bucket = keyword_bucket(KeywordMatchResult())
        self.assertEqual(bucket.score, 0)
        self.assertEqual(bucket.reasons, ["matches 0% of JD keywords", "no job description keywords found"])

    def test_all_matched(self):
        bucket = keyword_bucket(KeywordMatchResult(matched=["SQL"], pct=100, present_in_jd=["SQL"]))
        self.assertEqual(bucket.score, 10)
        self.assertEqual(bucket.reasons[-1], "no critical gaps")

    def test_display_terms_prettify_and_dedupe(self):
        self.assertEqual(
            display_terms(["Programming language", "SQL", "sql", "reporting"]),
            ["Programming language (e.g., Python/R)", "SQL"],
        )


class EducationRelevanceTests(unittest.TestCase):
    jd = "A tertiary degree in statistics or mathematics is required."

    def test_no_education_section(self):
        self.assertEqual(score_education(SectionFlags(), SAMPLE_RESUME, self.jd, base_score=10).score, 0)

    def test_matching_field(self):
        bucket = score_education(SectionFlags(has_education=True), "BSc Statistics", self.jd)
        self.assertEqual(bucket.score, 10)

    def test_other_degree_earns_partial_credit(self):
        bucket = score_education(SectionFlags(has_education=True), "Bachelor of Arts in History", self.jd)
        self.assertEqual(bucket.score, 6)
        self.assertIn("partially relevant", bucket.reasons)

    def test_no_degree_is_capped(self):
        bucket = score_education(
            SectionFlags(has_education=True),
            "Certificate IV in Hospitality",
            self.jd,
            base_score=10,
        )
        self.assertEqual(bucket.score, 4)

    def test_study_field_names_match_by_substring(self):
        self.assertTrue(names_study_field("Master of Data Science"))
        self.assertTrue(names_study_field("ECONOMICS"))
        self.assertFalse(names_study_field("Power BI"))

    def test_description_without_degree_requirement(self):
        flags = SectionFlags(has_education=True)
        self.assertEqual(score_education(flags, "Certificate IV", "Experience with SQL.").score, 6)
        self.assertEqual(score_education(flags, "Certificate IV", "Experience with SQL.", base_score=9).score, 9)


if __name__ == "__main__":
    unittest.main()
