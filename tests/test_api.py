import sys
import unittest
from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config import settings  # noqa: E402
from app.core.rate_limit import limiter  # noqa: E402
from app.main import app  # noqa: E402
from app.services.llm import LLMError  # noqa: E402
from tests.fixtures import DATA_JD, LONG_RESUME  # noqa: E402


class AnalyzeApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls._limiter_enabled = limiter.enabled
        limiter.enabled = False
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls):
        limiter.enabled = cls._limiter_enabled

    def setUp(self):
        patcher = patch("app.services.analysis_service.json_completion", return_value=None)
        self.completion = patcher.start()
        self.addCleanup(patcher.stop)

    def test_health_reports_flags(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertIn("llm_enabled", body)
        self.assertIn("semantic_match_enabled", body)

    def test_analyze_json_payload(self):
        response = self.client.post(
            "/v1/analyze-resume",
            json={
                "resume_text": LONG_RESUME,
                "job_description_text": DATA_JD,
                "job_title": "Data Analyst",
                "company_name": "Acme",
            },
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["mode"], "heuristic")
        self.assertEqual([item["label"] for item in body["ats_score"]["breakdown"]][0], "Structure")
        self.assertEqual(len(body["ats_score"]["breakdown"]), 6)
        self.assertIn("Kubernetes", body["keywords"]["missing"])

    def test_short_job_description_is_a_bad_request(self):
        response = self.client.post(
            "/v1/analyze-resume",
            json={"resume_text": LONG_RESUME, "job_description_text": "SQL please"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("Job description is too short", response.json()["detail"])

    def test_empty_fields_fail_schema_validation(self):
        response = self.client.post("/v1/analyze-resume", json={"resume_text": "", "job_description_text": DATA_JD})
        self.assertEqual(response.status_code, 422)

    def test_upload_text_resume(self):
        response = self.client.post(
            "/v1/analyze-resume/upload",
            files={"resume": ("cv.txt", LONG_RESUME.encode("utf-8"), "text/plain")},
            data={"job_description": DATA_JD, "use_model": "false"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["sections"]["has_education"])
        self.completion.assert_not_called()

    def test_upload_rejects_unsupported_type(self):
        response = self.client.post(
            "/v1/analyze-resume/upload",
            files={"resume": ("photo.png", b"\x89PNG\r\n", "image/png")},
            data={"job_description": DATA_JD},
        )
        self.assertEqual(response.status_code, 400)

    def test_upload_rejects_empty_file(self):
        response = self.client.post(
            "/v1/analyze-resume/upload",
            files={"resume": ("cv.txt", b"", "text/plain")},
            data={"job_description": DATA_JD},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("empty", response.json()["detail"])

    def test_upload_too_large(self):
        with patch("app.api.v1.analyze.settings", replace(settings, max_upload_bytes=10)):
            response = self.client.post(
                "/v1/analyze-resume/upload",
                files={"resume": ("cv.txt", LONG_RESUME.encode("utf-8"), "text/plain")},
                data={"job_description": DATA_JD},
            )
        self.assertEqual(response.status_code, 413)

    def test_required_model_unavailable_is_503(self):
        with patch(
            "app.services.analysis_service.json_completion_required",
            side_effect=LLMError("Model analysis was requested but OpenAI is not configured.", code="llm_disabled"),
        ):
            response = self.client.post(
                "/v1/analyze-resume",
                json={"resume_text": LONG_RESUME, "job_description_text": DATA_JD, "require_model": True},
            )
        self.assertEqual(response.status_code, 503)

    def test_api_key_is_enforced_when_configured(self):
        payload = {"resume_text": LONG_RESUME, "job_description_text": DATA_JD}
        with patch("app.core.security.settings", replace(settings, api_key="secret")):
            missing = self.client.post("/v1/analyze-resume", json=payload, headers={"Accept-Language": "de-DE"})
            accepted = self.client.post("/v1/analyze-resume", json=payload, headers={"X-API-Key": "secret"})
        self.assertEqual(missing.status_code, 401)
        self.assertIn("API-Schlüssel", missing.json()["detail"])
        self.assertEqual(accepted.status_code, 200)


if __name__ == "__main__":
    unittest.main()
