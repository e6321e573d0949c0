"""
Tests for teacher and student dashboards.
"""

from learnspace.core.config import settings
from learnspace.services.progress import get_or_create_progress

API = settings.API_V1_STR


class TestTeacherDashboard:

    def test_counts(self, client, teacher_headers, course, enrolled):
        response = client.get(f"{API}/dashboard/teacher", headers=teacher_headers)
        assert response.status_code == 200

        body = response.json()
        assert body["total_courses"] == 1
        assert body["total_students"] == 1
        assert body["courses"][0]["enrolled_count"] == 1

    def test_students_denied(self, client, student_headers):
        assert client.get(f"{API}/dashboard/teacher", headers=student_headers).status_code == 403


class TestStudentDashboard:

    def test_progress_by_course(self, client, db, enrolled, student_headers, course, challenge):
        progress = get_or_create_progress(db, enrolled.id, course.id)
        progress.record_completion(challenge.id, 30)
        db.commit()

        response = client.get(f"{API}/dashboard/student", headers=student_headers)
        assert response.status_code == 200

        body = response.json()
        assert body["user"]["id"] == enrolled.id
        assert body["enrolled_courses"] == [{"id": course.id, "title": course.title}]
        assert body["total_points"] == 30
        assert body["progress_by_course"][0]["completed_challenges"] == 1

    def test_teachers_denied(self, client, teacher_headers):
        assert client.get(f"{API}/dashboard/student", headers=teacher_headers).status_code == 403


class TestStudentAnalytics:

    def test_average_score(self, client, student, student_headers, teacher_headers, challenge):
        url = f"{API}/submissions/"
        client.post(url, json={"challenge_id": challenge.id, "language": "python",
                               "code": "n = int(input())\nprint(n * 2)"}, headers=student_headers)
        client.post(url, json={"challenge_id": challenge.id, "language": "python",
                               "code": "print(6)"}, headers=student_headers)

        response = client.get(f"{API}/dashboard/student/{student.id}", headers=teacher_headers)
        assert response.status_code == 200

        body = response.json()
        assert body["total_submissions"] == 2
        assert body["passed_submissions"] == 1
        assert body["average_score"] == 75.0
        assert len(body["progress"]) == 1

    def test_unknown_student(self, client, teacher_headers):
        response = client.get(f"{API}/dashboard/student/999", headers=teacher_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Student not found"

    def test_students_denied(self, client, student, student_headers):
        response = client.get(f"{API}/dashboard/student/{student.id}", headers=student_headers)
        assert response.status_code == 403
