"""
Tests for assignments: creation, teacher status tracking, CSV export and
the student view.
"""

import csv
import io
from datetime import timedelta

import pytest

from learnspace.core.config import settings
from learnspace.models import Assignment
from learnspace.utils.dates import utcnow
from tests.conftest import auth_headers, create_user

API = settings.API_V1_STR

DOUBLE_IT = "n = int(input())\nprint(n * 2)"


@pytest.fixture
def roster(db, course, student, other_student):
    course.enrolled_students.extend([student, other_student])
    db.commit()
    return [student, other_student]


def make_assignment(db, course, challenge, teacher, students, due_in_days):
    assignment = Assignment(
        title="Homework",
        description="Double some numbers",
        course_id=course.id,
        challenge_id=challenge.id,
        teacher_id=teacher.id,
        due_date=utcnow() + timedelta(days=due_in_days),
        assigned_to=list(students),
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


def submit(client, user, assignment, code=DOUBLE_IT):
    return client.post(
        f"{API}/submissions/",
        json={
            "challenge_id": assignment.challenge_id,
            "assignment_id": assignment.id,
            "language": "python",
            "code": code,
        },
        headers=auth_headers(user)
    )


class TestCreateAssignment:

    def payload(self, course, challenge, **overrides):
        data = {
            "title": "Week 1",
            "description": "Double it",
            "course_id": course.id,
            "challenge_id": challenge.id if challenge else None,
            "due_date": (utcnow() + timedelta(days=3)).isoformat() + "Z",
        }
        data.update(overrides)
        return data

    def test_assigns_every_enrolled_student(self, client, teacher_headers, course, challenge, roster):
        response = client.post(f"{API}/assignments/", json=self.payload(course, challenge), headers=teacher_headers)
        assert response.status_code == 201

        body = response.json()
        assert body["message"] == "Assignment created"
        assert [s["id"] for s in body["assignment"]["assigned_to"]] == [s.id for s in roster]
        assert body["assignment"]["challenge"]["title"] == "Double It"

    def test_subset_limited_to_enrolled(self, client, db, teacher_headers, course, challenge, roster):
        outsider = create_user(db, "outsider")
        response = client.post(
            f"{API}/assignments/",
            json=self.payload(course, challenge, assigned_to=[roster[1].id, outsider.id]),
            headers=teacher_headers
        )
        assert [s["id"] for s in response.json()["assignment"]["assigned_to"]] == [roster[1].id]

    def test_no_enrolled_students(self, client, teacher_headers, course, challenge):
        response = client.post(f"{API}/assignments/", json=self.payload(course, challenge), headers=teacher_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "No valid students available for this assignment"

    def test_challenge_must_belong_to_course(self, client, teacher_headers, course, roster):
        response = client.post(
            f"{API}/assignments/",
            json=self.payload(course, None, challenge_id=999),
            headers=teacher_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Challenge is invalid for this course"

    def test_missing_course(self, client, teacher_headers, challenge):
        response = client.post(
            f"{API}/assignments/",
            json={
                "title": "X",
                "description": "Y",
                "course_id": 999,
                "challenge_id": challenge.id,
                "due_date": utcnow().isoformat(),
            },
            headers=teacher_headers
        )
        assert response.status_code == 404

    def test_student_cannot_create(self, client, student_headers, course, challenge, roster):
        response = client.post(f"{API}/assignments/", json=self.payload(course, challenge), headers=student_headers)
        assert response.status_code == 403

    def test_options(self, client, teacher_headers, course, challenge, roster):
        response = client.get(f"{API}/assignments/teacher/options", headers=teacher_headers)
        courses = response.json()["courses"]
        assert [c["id"] for c in courses] == [course.id]
        assert courses[0]["challenges"] == [{"id": challenge.id, "title": "Double It"}]
        assert len(courses[0]["students"]) == 2

    def test_options_only_own_courses(self, client, db, course, roster):
        other_teacher = create_user(db, "otto", role="teacher")
        response = client.get(f"{API}/assignments/teacher/options", headers=auth_headers(other_teacher))
        assert response.json()["courses"] == []


class TestTeacherStatuses:

    def statuses(self, summary):
        return {s["student_id"]: s["status"] for s in summary["student_statuses"]}

    def test_pending_and_completed(self, client, teacher, teacher_headers, course, challenge, roster, db):
        assignment = make_assignment(db, course, challenge, teacher, roster, due_in_days=2)
        assert submit(client, roster[0], assignment).status_code == 201

        summary = client.get(f"{API}/assignments/teacher", headers=teacher_headers).json()["assignments"][0]

        assert self.statuses(summary) == {roster[0].id: "completed", roster[1].id: "pending"}
        assert summary["assigned_count"] == 2
        assert summary["submitted_count"] == 1
        assert summary["pending_count"] == 1
        assert summary["pending_student_names"] == [roster[1].full_name]
        assert summary["is_overdue"] is False

    def test_late_and_missing(self, client, teacher, teacher_headers, course, challenge, roster, db):
        assignment = make_assignment(db, course, challenge, teacher, roster, due_in_days=-1)
        submit(client, roster[0], assignment)

        summary = client.get(f"{API}/assignments/teacher", headers=teacher_headers).json()["assignments"][0]

        assert self.statuses(summary) == {roster[0].id: "completed_late", roster[1].id: "missing"}
        assert summary["late_count"] == 1
        assert summary["missing_count"] == 1
        assert summary["missing_student_names"] == [roster[1].full_name]
        assert summary["is_overdue"] is True

    def test_latest_submission_counts(self, client, teacher, teacher_headers, course, challenge, roster, db):
        assignment = make_assignment(db, course, challenge, teacher, roster, due_in_days=2)
        submit(client, roster[0], assignment, code="print(0)")

        summary = client.get(f"{API}/assignments/teacher", headers=teacher_headers).json()["assignments"][0]
        assert self.statuses(summary)[roster[0].id] == "pending"

    def test_status_filter(self, client, teacher, teacher_headers, course, challenge, roster, db):
        assignment = make_assignment(db, course, challenge, teacher, roster, due_in_days=2)
        submit(client, roster[0], assignment)

        response = client.get(f"{API}/assignments/teacher", params={"status": "pending"}, headers=teacher_headers)
        summary = response.json()["assignments"][0]
        assert [s["student_id"] for s in summary["student_statuses"]] == [roster[1].id]
        assert summary["assigned_count"] == 2

    def test_invalid_status_filter(self, client, teacher_headers):
        response = client.get(f"{API}/assignments/teacher", params={"status": "lost"}, headers=teacher_headers)
        assert response.status_code == 422

    def test_other_teacher_sees_nothing(self, client, db, teacher, course, challenge, roster):
        make_assignment(db, course, challenge, teacher, roster, due_in_days=2)
        other_teacher = create_user(db, "otto", role="teacher")
        response = client.get(f"{API}/assignments/teacher", headers=auth_headers(other_teacher))
        assert response.json()["assignments"] == []

    def test_admin_sees_everything(self, client, db, teacher, admin_headers, course, challenge, roster):
        make_assignment(db, course, challenge, teacher, roster, due_in_days=2)
        response = client.get(f"{API}/assignments/teacher", headers=admin_headers)
        assert len(response.json()["assignments"]) == 1

    def test_csv_export(self, client, teacher, teacher_headers, course, challenge, roster, db):
        assignment = make_assignment(db, course, challenge, teacher, roster, due_in_days=-1)
        submit(client, roster[0], assignment)

        response = client.get(f"{API}/assignments/teacher/export", headers=teacher_headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]

        rows = list(csv.DictReader(io.StringIO(response.text)))
        assert [(int(r["student_id"]), r["status"]) for r in rows] == [
            (roster[0].id, "completed_late"),
            (roster[1].id, "missing"),
        ]
        assert rows[0]["submitted_at"]
        assert rows[1]["submitted_at"] == ""

    def test_csv_export_filtered(self, client, teacher, teacher_headers, course, challenge, roster, db):
        make_assignment(db, course, challenge, teacher, roster, due_in_days=-1)
        response = client.get(
            f"{API}/assignments/teacher/export",
            params={"status": "completed"},
            headers=teacher_headers
        )
        assert list(csv.DictReader(io.StringIO(response.text))) == []


class TestStudentView:

    def test_student_statuses(self, client, db, teacher, course, challenge, roster):
        upcoming = make_assignment(db, course, challenge, teacher, roster, due_in_days=2)
        overdue = make_assignment(db, course, challenge, teacher, roster, due_in_days=-2)
        submit(client, roster[0], upcoming)

        response = client.get(f"{API}/assignments/student", headers=auth_headers(roster[0]))
        assert response.status_code == 200
        statuses = {a["id"]: a["status"] for a in response.json()["assignments"]}
        assert statuses == {upcoming.id: "completed", overdue.id: "overdue"}

    def test_only_own_assignments(self, client, db, teacher, course, challenge, roster):
        make_assignment(db, course, challenge, teacher, roster[:1], due_in_days=2)
        response = client.get(f"{API}/assignments/student", headers=auth_headers(roster[1]))
        assert response.json()["assignments"] == []

    def test_submit_to_unassigned_assignment(self, client, db, teacher, course, challenge, roster):
        assignment = make_assignment(db, course, challenge, teacher, roster[:1], due_in_days=2)
        response = submit(client, roster[1], assignment)
        assert response.status_code == 403
        assert response.json()["detail"] == "Assignment is not assigned to you"

    def test_teacher_has_no_student_view(self, client, teacher_headers):
        assert client.get(f"{API}/assignments/student", headers=teacher_headers).status_code == 403
