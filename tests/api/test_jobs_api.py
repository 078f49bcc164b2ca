"""API tests for job generation and progress endpoints."""
from fastapi.testclient import TestClient
from redis.exceptions import RedisError
from batchsmith.core.exceptions import ProviderError


class TestGenerateJobAPI:
    """Test POST /api/v1/jobs/{job_id}/generate."""

    def test_generate_job_success(self, client: TestClient):
        """Test a full run returns per-task results and progress."""
        response = client.post("/api/v1/jobs/job-1/generate")

        assert response.status_code == 200
        json_response = response.json()
        assert json_response["code"] == "JOB_0001"
        assert json_response["httpStatus"] == "OK"

        data = json_response["data"]
        assert data["job_id"] == "job-1"
        assert data["success"] is True
        assert data["progress"]["completed"] == 3
        assert data["progress"]["percentage"] == 100
        assert [r["status"] for r in data["results"]] == ["completed"] * 3
        assert data["results"][0]["result"] == {"job_id": "job-1", "task_name": "A"}

    def test_generate_job_failure_then_resume(self, client: TestClient, work_outcomes):
        """Test a failing task stops the run and a second call resumes."""
        work_outcomes["B"] = ProviderError("Invalid prompt", status_code=400)

        response = client.post("/api/v1/jobs/job-1/generate")

        assert response.status_code == 200
        json_response = response.json()
        assert json_response["code"] == "JOB_0004"
        data = json_response["data"]
        assert data["success"] is False
        assert [r["task_id"] for r in data["results"]] == ["1", "2"]
        assert data["results"][1]["status"] == "failed"
        assert data["results"][1]["error"] == "Task 2 failed immediately: Invalid prompt"
        assert data["progress"]["pending"] == 1

        del work_outcomes["B"]
        response = client.post("/api/v1/jobs/job-1/generate")

        data = response.json()["data"]
        assert data["success"] is True
        assert [r["status"] for r in data["results"]] == ["skipped", "completed", "completed"]
        assert data["results"][0]["reason"] == "already_completed"

    def test_generate_job_locked(self, client: TestClient, redis_mock):
        """Test a concurrent trigger for the same job returns 409."""
        redis_mock.set.return_value = None

        response = client.post("/api/v1/jobs/job-1/generate")

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "JOB_4001"
        assert "job-1" in detail["description"]

    def test_generate_job_lock_unavailable(self, client: TestClient, redis_mock):
        """Test an unreachable Redis returns 503 without running the job."""
        redis_mock.set.side_effect = RedisError("connection refused")

        response = client.post("/api/v1/jobs/job-1/generate")

        assert response.status_code == 503
        assert response.json()["detail"]["code"] == "JOB_5031"

        progress = client.get("/api/v1/jobs/job-1/progress").json()["data"]["progress"]
        assert progress["total"] == 0

    def test_generate_releases_lock(self, client: TestClient, redis_mock):
        """Test the lock is released after the run."""
        client.post("/api/v1/jobs/job-1/generate")

        redis_mock.eval.assert_called_once()

    def test_generate_default_catalogue(self, default_client: TestClient):
        """Test the default app runs all fourteen demo tasks."""
        response = default_client.post("/api/v1/jobs/demo-job/generate")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["success"] is True
        assert data["progress"]["total"] == 14
        assert data["results"][-1]["task_name"] == "bundle_listing"


class TestJobProgressAPI:
    """Test GET /api/v1/jobs/{job_id}/progress."""

    def test_progress_unknown_job(self, client: TestClient):
        """Test an unknown job reports zero counts."""
        response = client.get("/api/v1/jobs/missing/progress")

        assert response.status_code == 200
        json_response = response.json()
        assert json_response["code"] == "JOB_0002"
        data = json_response["data"]
        assert data["job_id"] == "missing"
        assert data["progress"] == {
            "total": 0,
            "completed": 0,
            "in_progress": 0,
            "failed": 0,
            "pending": 0,
            "percentage": 0,
        }
        assert "timestamp" in data

    def test_progress_after_partial_run(self, client: TestClient, work_outcomes):
        """Test progress reflects a stopped run."""
        work_outcomes["A"] = ProviderError("Unauthorized", status_code=401)
        client.post("/api/v1/jobs/job-2/generate")

        response = client.get("/api/v1/jobs/job-2/progress")

        progress = response.json()["data"]["progress"]
        assert progress["total"] == 3
        assert progress["failed"] == 1
        assert progress["pending"] == 2
        assert progress["percentage"] == 0


class TestJobTasksAPI:
    """Test GET /api/v1/jobs/{job_id}/tasks."""

    def test_list_tasks_for_job(self, client: TestClient, work_outcomes):
        """Test per-task records include attempts and errors."""
        work_outcomes["C"] = TimeoutError("provider timeout")
        client.post("/api/v1/jobs/job-3/generate")

        response = client.get("/api/v1/jobs/job-3/tasks")

        assert response.status_code == 200
        json_response = response.json()
        assert json_response["code"] == "JOB_0003"
        records = json_response["data"]
        assert [r["task_id"] for r in records] == ["1", "2", "3"]
        assert records[0]["status"] == "completed"
        assert records[0]["attempt_count"] == 1
        assert records[2]["status"] == "failed"
        assert records[2]["attempt_count"] == 3
        assert records[2]["error_message"] == "Failed after 3 attempts: provider timeout"

    def test_list_tasks_unknown_job(self, client: TestClient):
        """Test an unknown job has no records."""
        response = client.get("/api/v1/jobs/missing/tasks")

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_resumed_task_has_no_stale_error(self, client: TestClient, work_outcomes):
        """Test a task that fails and then completes on resume reports no error."""
        work_outcomes["B"] = ProviderError("Unauthorized", status_code=401)
        client.post("/api/v1/jobs/job-4/generate")
        del work_outcomes["B"]
        client.post("/api/v1/jobs/job-4/generate")

        records = client.get("/api/v1/jobs/job-4/tasks").json()["data"]

        assert records[1]["status"] == "completed"
        assert records[1]["error_message"] is None
