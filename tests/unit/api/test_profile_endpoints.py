"""
Tests for profile and resume endpoints.

Tests:
- Reading own and other profiles
- Updating fields, role switching and skill validation
- Resume upload, replacement and size limit
- Resume download policy for owners and recruiters
"""

import pytest

from conftest import JOB_PAYLOAD, signup_via_api
from core.config import settings


class TestProfiles:

    @pytest.mark.asyncio
    async def test_get_my_profile(self, client):
        user = await signup_via_api(client, "p@example.com", full_name="Pat")

        response = await client.get("/api/v1/profiles/me", headers=user["headers"])

        assert response.status_code == 200
        assert response.json()["full_name"] == "Pat"

    @pytest.mark.asyncio
    async def test_profiles_are_publicly_readable(self, client):
        user = await signup_via_api(client, "public@example.com", full_name="Pub")
        profile_id = user["body"]["identity_id"]

        response = await client.get(f"/api/v1/profiles/{profile_id}")

        assert response.status_code == 200
        assert response.json()["full_name"] == "Pub"

    @pytest.mark.asyncio
    async def test_update_fields_and_skills(self, client):
        user = await signup_via_api(client, "u@example.com")

        response = await client.patch(
            "/api/v1/profiles/me",
            json={
                "full_name": "  Updated Name ",
                "location": "Lisbon",
                "skills": [" python ", "", "sql"],
                "experience_years": 4,
            },
            headers=user["headers"],
        )

        assert response.status_code == 200
        data = response.json()
        assert data["full_name"] == "Updated Name"
        assert data["location"] == "Lisbon"
        assert data["skills"] == ["python", "sql"]
        assert data["experience_years"] == 4

    @pytest.mark.asyncio
    async def test_duplicate_skills_are_rejected(self, client):
        user = await signup_via_api(client, "dup-skills@example.com")

        response = await client.patch(
            "/api/v1/profiles/me",
            json={"skills": ["python", "python "]},
            headers=user["headers"],
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_switch_to_recruiter(self, client):
        user = await signup_via_api(client, "switch@example.com")

        response = await client.patch(
            "/api/v1/profiles/me", json={"role": "recruiter"}, headers=user["headers"]
        )

        assert response.status_code == 200
        assert response.json()["role"] == "recruiter"

    @pytest.mark.asyncio
    async def test_admin_cannot_be_self_assigned(self, client):
        user = await signup_via_api(client, "wannabe@example.com")

        response = await client.patch(
            "/api/v1/profiles/me", json={"role": "admin"}, headers=user["headers"]
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_requires_authentication(self, client):
        response = await client.patch("/api/v1/profiles/me", json={"bio": "hi"})
        assert response.status_code == 401


class TestResumes:

    @pytest.mark.asyncio
    async def test_upload_sets_resume_url(self, client, storage):
        user = await signup_via_api(client, "cv@example.com")
        identity_id = user["body"]["identity_id"]

        response = await client.put(
            "/api/v1/profiles/me/resume",
            files={"file": ("My CV.PDF", b"%PDF-1.4 resume", "application/pdf")},
            headers=user["headers"],
        )

        assert response.status_code == 200
        data = response.json()
        assert data["key"] == f"{identity_id}/resume.pdf"
        assert data["resume_url"] == f"/api/v1/resumes/{identity_id}/resume.pdf"
        assert data["size_bytes"] == len(b"%PDF-1.4 resume")
        assert await storage.exists(data["key"])

        me = await client.get("/api/v1/profiles/me", headers=user["headers"])
        assert me.json()["resume_url"] == data["resume_url"]

    @pytest.mark.asyncio
    async def test_reupload_with_new_extension_replaces_old_file(self, client, storage):
        user = await signup_via_api(client, "cv2@example.com")
        identity_id = user["body"]["identity_id"]

        await client.put(
            "/api/v1/profiles/me/resume",
            files={"file": ("cv.pdf", b"v1", "application/pdf")},
            headers=user["headers"],
        )
        response = await client.put(
            "/api/v1/profiles/me/resume",
            files={"file": ("cv.docx", b"v2", "application/octet-stream")},
            headers=user["headers"],
        )

        assert response.json()["key"] == f"{identity_id}/resume.docx"
        assert not await storage.exists(f"{identity_id}/resume.pdf")

    @pytest.mark.asyncio
    async def test_oversized_resume_is_rejected(self, client, monkeypatch):
        monkeypatch.setattr(settings, "resume_max_bytes", 10)
        user = await signup_via_api(client, "big@example.com")

        response = await client.put(
            "/api/v1/profiles/me/resume",
            files={"file": ("cv.pdf", b"x" * 11, "application/pdf")},
            headers=user["headers"],
        )

        assert response.status_code == 413
        assert response.json()["error"]["code"] == "FILE_TOO_LARGE"

    @pytest.mark.asyncio
    async def test_owner_downloads_resume(self, client):
        user = await signup_via_api(client, "dl@example.com")
        upload = await client.put(
            "/api/v1/profiles/me/resume",
            files={"file": ("cv.pdf", b"%PDF my resume", "application/pdf")},
            headers=user["headers"],
        )

        response = await client.get(upload.json()["resume_url"], headers=user["headers"])

        assert response.status_code == 200
        assert response.content == b"%PDF my resume"
        assert response.headers["content-type"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_recruiter_reads_resume_only_after_application(self, client):
        seeker = await signup_via_api(client, "applicant@example.com")
        recruiter = await signup_via_api(client, "hr@example.com", role="recruiter")
        upload = await client.put(
            "/api/v1/profiles/me/resume",
            files={"file": ("cv.pdf", b"%PDF resume", "application/pdf")},
            headers=seeker["headers"],
        )
        resume_url = upload.json()["resume_url"]

        before = await client.get(resume_url, headers=recruiter["headers"])
        assert before.status_code == 403

        job = await client.post("/api/v1/jobs", json=JOB_PAYLOAD, headers=recruiter["headers"])
        applied = await client.post(
            f"/api/v1/jobs/{job.json()['id']}/apply", json={}, headers=seeker["headers"]
        )
        assert applied.json()["resume_url"] == resume_url

        after = await client.get(resume_url, headers=recruiter["headers"])
        assert after.status_code == 200
        assert after.content == b"%PDF resume"

    @pytest.mark.asyncio
    async def test_missing_resume_is_not_found(self, client):
        user = await signup_via_api(client, "nofile@example.com")
        identity_id = user["body"]["identity_id"]

        response = await client.get(
            f"/api/v1/resumes/{identity_id}/resume.pdf", headers=user["headers"]
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_dot_segments_cannot_reach_another_resume(self, client):
        victim = await signup_via_api(client, "victim@example.com")
        other = await signup_via_api(client, "other@example.com")
        await client.put(
            "/api/v1/profiles/me/resume",
            files={"file": ("cv.pdf", b"%PDF private resume", "application/pdf")},
            headers=victim["headers"],
        )
        victim_id = victim["body"]["identity_id"]
        other_id = other["body"]["identity_id"]

        response = await client.get(
            f"/api/v1/resumes/{other_id}/%2E%2E/{victim_id}/resume.pdf",
            headers=other["headers"],
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_KEY"
        assert b"private resume" not in response.content

    @pytest.mark.asyncio
    async def test_extra_segments_are_rejected(self, client):
        user = await signup_via_api(client, "nested@example.com")
        identity_id = user["body"]["identity_id"]

        response = await client.get(
            f"/api/v1/resumes/{identity_id}/old/resume.pdf", headers=user["headers"]
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_KEY"
