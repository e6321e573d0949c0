"""
Tests for reading and updating course progress.
"""

from learnspace.core.config import settings
from learnspace.models import Challenge, Course, User
from tests.conftest import auth_headers

API = settings.API_V1_STR


def progress_url(student_id, course_id):
    return f"{API}/progress/student/{student_id}/course/{course_id}"


class TestProgress:

    def test_no_progress_yet(self, client, student, student_headers, course):
        response = client.get(progress_url(student.id, course.id), headers=student_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Progress not found"

    def test_record_completion(self, client, db, student, student_headers, course, challenge):
        response = client.put(
            progress_url(student.id, course.id),
            json={"challenge_id": challenge.id, "points_earned": 150},
            headers=student_headers
        )
        assert response.status_code == 200

        body = response.json()
        assert body["total_points"] == 150
        assert body["current_level"] == 2
        assert body["completed_challenges"][0]["challenge_id"] == challenge.id
        assert body["completed_challenges"][0]["title"] == "Double It"

        db.expire_all()
        assert db.get(User, student.id).points == 150

    def test_completion_is_idempotent(self, client, db, student, student_headers, course, challenge):
        url = progress_url(student.id, course.id)
        client.put(url, json={"challenge_id": challenge.id, "points_earned": 10}, headers=student_headers)
        response = client.put(url, json={"challenge_id": challenge.id, "points_earned": 10}, headers=student_headers)

        assert response.json()["total_points"] == 10
        assert len(response.json()["completed_challenges"]) == 1

        db.expire_all()
        assert db.get(User, student.id).points == 10

    def test_get_after_update(self, client, student, student_headers, course, challenge):
        url = progress_url(student.id, course.id)
        client.put(url, json={"challenge_id": challenge.id, "points_earned": 10}, headers=student_headers)
        assert client.get(url, headers=student_headers).json()["total_points"] == 10

    def test_challenge_from_other_course(self, client, db, student, student_headers, course, teacher):
        elsewhere = Course(title="Elsewhere", description="x", instructor_id=teacher.id, target_grades=[7])
        db.add(elsewhere)
        db.flush()
        other = Challenge(title="Other", description="x", course_id=elsewhere.id, test_cases=[])
        db.add(other)
        db.commit()

        response = client.put(
            progress_url(student.id, course.id),
            json={"challenge_id": other.id, "points_earned": 10},
            headers=student_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Challenge is invalid for this course"

    def test_unknown_course(self, client, student, student_headers, challenge):
        response = client.put(
            progress_url(student.id, 999),
            json={"challenge_id": challenge.id, "points_earned": 10},
            headers=student_headers
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Course not found"

    def test_negative_points_rejected(self, client, student, student_headers, course, challenge):
        response = client.put(
            progress_url(student.id, course.id),
            json={"challenge_id": challenge.id, "points_earned": -5},
            headers=student_headers
        )
        assert response.status_code == 422

    def test_students_cannot_read_each_other(self, client, student, other_student, course):
        response = client.get(progress_url(student.id, course.id), headers=auth_headers(other_student))
        assert response.status_code == 403

    def test_teacher_updates_for_student(self, client, student, teacher_headers, course, challenge):
        response = client.put(
            progress_url(student.id, course.id),
            json={"challenge_id": challenge.id, "points_earned": 20},
            headers=teacher_headers
        )
        assert response.status_code == 200
        assert response.json()["student_id"] == student.id
