"""
Tests for course listing, creation and enrollment.
"""

from learnspace.core.config import settings
from learnspace.models import Course

API = settings.API_V1_STR


def new_course(**overrides):
    data = {
        "title": "Loops for Beginners",
        "description": "Repeat things",
        "target_grades": [4, 5],
        "difficulty": "beginner",
        "topics": ["loops"],
        "lessons": [{"title": "What is a loop?", "order": 1}],
        "is_published": True,
    }
    data.update(overrides)
    return data


class TestListCourses:

    def test_lists_published_only(self, client, db, course, teacher):
        db.add(Course(
            title="Draft",
            description="Not ready",
            instructor_id=teacher.id,
            target_grades=[8],
            is_published=False,
        ))
        db.commit()

        response = client.get(f"{API}/courses/")
        assert response.status_code == 200
        titles = [c["title"] for c in response.json()]
        assert titles == ["Python Basics"]

    def test_course_shape(self, client, course, challenge, teacher):
        data = client.get(f"{API}/courses/").json()[0]
        assert data["instructor"]["id"] == teacher.id
        assert data["target_grades"] == [5, 6]
        assert data["challenge_count"] == 1
        assert data["enrolled_count"] == 0

    def test_filter_by_grade(self, client, course):
        assert len(client.get(f"{API}/courses/", params={"target_grade": 5}).json()) == 1
        assert client.get(f"{API}/courses/", params={"target_grade": 9}).json() == []

    def test_filter_by_difficulty(self, client, course):
        assert len(client.get(f"{API}/courses/", params={"difficulty": "beginner"}).json()) == 1
        assert client.get(f"{API}/courses/", params={"difficulty": "advanced"}).json() == []

    def test_get_course_with_challenges(self, client, course, challenge):
        response = client.get(f"{API}/courses/{course.id}")
        assert response.status_code == 200
        assert [c["title"] for c in response.json()["challenges"]] == ["Double It"]

    def test_get_missing_course(self, client, db):
        response = client.get(f"{API}/courses/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Course not found"


class TestCreateCourse:

    def test_teacher_creates_course(self, client, teacher, teacher_headers):
        response = client.post(f"{API}/courses/", json=new_course(), headers=teacher_headers)
        assert response.status_code == 201

        body = response.json()
        assert body["message"] == "Course created successfully"
        assert body["course"]["instructor"]["id"] == teacher.id
        assert body["course"]["lessons"][0]["title"] == "What is a loop?"

    def test_student_cannot_create_course(self, client, student_headers):
        response = client.post(f"{API}/courses/", json=new_course(), headers=student_headers)
        assert response.status_code == 403

    def test_target_grades_required(self, client, teacher_headers):
        response = client.post(f"{API}/courses/", json=new_course(target_grades=[]), headers=teacher_headers)
        assert response.status_code == 422


class TestEnroll:

    def test_enroll(self, client, db, course, student, student_headers):
        response = client.post(f"{API}/courses/{course.id}/enroll", headers=student_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Enrolled successfully"
        assert response.json()["course"]["enrolled_count"] == 1

    def test_enroll_twice_is_noop(self, client, course, student_headers):
        client.post(f"{API}/courses/{course.id}/enroll", headers=student_headers)
        response = client.post(f"{API}/courses/{course.id}/enroll", headers=student_headers)
        assert response.json()["message"] == "Already enrolled in this course"
        assert response.json()["course"]["enrolled_count"] == 1

    def test_enroll_missing_course(self, client, student_headers, db):
        response = client.post(f"{API}/courses/999/enroll", headers=student_headers)
        assert response.status_code == 404

    def test_teacher_cannot_enroll(self, client, course, teacher_headers):
        response = client.post(f"{API}/courses/{course.id}/enroll", headers=teacher_headers)
        assert response.status_code == 403
