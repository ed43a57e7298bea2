"""
Tests for application review and dashboard endpoints.

Tests:
- Applicant and recruiter application lists
- Status changes by the job owner only
- Dashboard numbers per role
- Recruiter analytics and success rate
"""

import pytest

from conftest import JOB_PAYLOAD, signup_via_api


async def _setup_application(client):
    recruiter = await signup_via_api(client, "r@example.com", role="recruiter", full_name="Rita")
    seeker = await signup_via_api(client, "s@example.com", full_name="Sam")
    job = (await client.post("/api/v1/jobs", json=JOB_PAYLOAD, headers=recruiter["headers"])).json()
    application = (
        await client.post(f"/api/v1/jobs/{job['id']}/apply", json={}, headers=seeker["headers"])
    ).json()
    return recruiter, seeker, job, application


class TestApplicationLists:

    @pytest.mark.asyncio
    async def test_applicant_lists_own_applications(self, client):
        _, seeker, job, application = await _setup_application(client)

        response = await client.get("/api/v1/applications/mine", headers=seeker["headers"])

        assert response.status_code == 200
        data = response.json()
        assert [a["id"] for a in data] == [application["id"]]
        assert data[0]["job"]["title"] == job["title"]
        assert data[0]["job"]["salary_display"] == "$80k - $100k"

    @pytest.mark.asyncio
    async def test_recruiter_lists_received_applications(self, client):
        recruiter, _, _, application = await _setup_application(client)

        response = await client.get("/api/v1/applications/received", headers=recruiter["headers"])

        assert response.status_code == 200
        data = response.json()
        assert [a["id"] for a in data] == [application["id"]]
        assert data[0]["applicant"]["full_name"] == "Sam"
        assert data[0]["applicant"]["email"] == "s@example.com"

    @pytest.mark.asyncio
    async def test_received_filters_by_status(self, client):
        recruiter, _, _, _ = await _setup_application(client)

        response = await client.get(
            "/api/v1/applications/received",
            params={"status": "hired"},
            headers=recruiter["headers"],
        )

        assert response.json() == []

    @pytest.mark.asyncio
    async def test_received_is_recruiter_only(self, client):
        _, seeker, _, _ = await _setup_application(client)

        response = await client.get("/api/v1/applications/received", headers=seeker["headers"])

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ROLE_REQUIRED"

    @pytest.mark.asyncio
    async def test_stranger_cannot_read_application(self, client):
        _, _, _, application = await _setup_application(client)
        stranger = await signup_via_api(client, "x@example.com")

        response = await client.get(
            f"/api/v1/applications/{application['id']}", headers=stranger["headers"]
        )

        assert response.status_code == 404


class TestStatusChanges:

    @pytest.mark.asyncio
    async def test_recruiter_shortlists(self, client):
        recruiter, seeker, _, application = await _setup_application(client)

        response = await client.patch(
            f"/api/v1/applications/{application['id']}/status",
            json={"status": "shortlisted"},
            headers=recruiter["headers"],
        )

        assert response.status_code == 200
        assert response.json()["status"] == "shortlisted"

        seen_by_applicant = await client.get(
            f"/api/v1/applications/{application['id']}", headers=seeker["headers"]
        )
        assert seen_by_applicant.json()["status"] == "shortlisted"

    @pytest.mark.asyncio
    async def test_applicant_cannot_change_status(self, client):
        _, seeker, _, application = await _setup_application(client)

        response = await client.patch(
            f"/api/v1/applications/{application['id']}/status",
            json={"status": "hired"},
            headers=seeker["headers"],
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ACCESS_DENIED"

    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self, client):
        recruiter, _, _, application = await _setup_application(client)

        response = await client.patch(
            f"/api/v1/applications/{application['id']}/status",
            json={"status": "ghosted"},
            headers=recruiter["headers"],
        )

        assert response.status_code == 422


class TestDashboard:

    @pytest.mark.asyncio
    async def test_job_seeker_dashboard(self, client):
        _, seeker, job, _ = await _setup_application(client)
        await client.put(f"/api/v1/jobs/{job['id']}/save", headers=seeker["headers"])

        response = await client.get("/api/v1/dashboard", headers=seeker["headers"])

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "job_seeker"
        assert data["full_name"] == "Sam"
        assert data["stats"]["applications"] == 1
        assert data["stats"]["saved_jobs"] == 1

    @pytest.mark.asyncio
    async def test_saved_count_matches_saved_list_after_job_closes(self, client):
        recruiter, seeker, job, _ = await _setup_application(client)
        await client.put(f"/api/v1/jobs/{job['id']}/save", headers=seeker["headers"])

        closed = await client.patch(
            f"/api/v1/jobs/{job['id']}", json={"status": "closed"}, headers=recruiter["headers"]
        )
        assert closed.status_code == 200

        saved = await client.get("/api/v1/saved-jobs", headers=seeker["headers"])
        response = await client.get("/api/v1/dashboard", headers=seeker["headers"])

        assert saved.json() == []
        assert response.json()["stats"]["saved_jobs"] == 0


    @pytest.mark.asyncio
    async def test_recruiter_dashboard(self, client):
        recruiter, _, _, _ = await _setup_application(client)
        await client.post(
            "/api/v1/jobs", json={**JOB_PAYLOAD, "status": "closed"}, headers=recruiter["headers"]
        )

        response = await client.get("/api/v1/dashboard", headers=recruiter["headers"])

        stats = response.json()["stats"]
        assert stats["active_jobs"] == 1
        assert stats["total_applicants"] == 1

    @pytest.mark.asyncio
    async def test_analytics_success_rate(self, client):
        recruiter, _, job, application = await _setup_application(client)
        second = await signup_via_api(client, "s2@example.com")
        await client.post(f"/api/v1/jobs/{job['id']}/apply", json={}, headers=second["headers"])
        await client.patch(
            f"/api/v1/applications/{application['id']}/status",
            json={"status": "hired"},
            headers=recruiter["headers"],
        )

        response = await client.get("/api/v1/analytics", headers=recruiter["headers"])

        assert response.status_code == 200
        data = response.json()
        assert data["total_jobs"] == 1
        assert data["active_jobs"] == 1
        assert data["total_applications"] == 2
        assert data["applications_by_status"] == {
            "applied": 1,
            "viewed": 0,
            "shortlisted": 0,
            "rejected": 0,
            "hired": 1,
        }
        assert data["success_rate"] == 50.0
        assert data["success_rate_display"] == "50.0%"

    @pytest.mark.asyncio
    async def test_analytics_without_applications(self, client):
        recruiter = await signup_via_api(client, "r@example.com", role="recruiter")

        response = await client.get("/api/v1/analytics", headers=recruiter["headers"])

        data = response.json()
        assert data["total_jobs"] == 0
        assert data["success_rate"] == 0.0
        assert data["total_views"] == 0

    @pytest.mark.asyncio
    async def test_analytics_is_recruiter_only(self, client):
        seeker = await signup_via_api(client, "s@example.com")

        response = await client.get("/api/v1/analytics", headers=seeker["headers"])

        assert response.status_code == 403
