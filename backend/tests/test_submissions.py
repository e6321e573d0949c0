"""
Tests for submitting and grading challenge answers.
"""

import pytest

from learnspace.core.config import settings
from learnspace.models import Challenge, Progress, Submission, User
from tests.conftest import auth_headers

API = settings.API_V1_STR

DOUBLE_IT = "n = int(input())\nprint(n * 2)"


def submit(client, headers, challenge_id, **fields):
    payload = {"challenge_id": challenge_id, "language": "python", "code": DOUBLE_IT}
    payload.update(fields)
    return client.post(f"{API}/submissions/", json=payload, headers=headers)


@pytest.fixture
def say_hi(db, course):
    challenge = Challenge(
        title="Say Hi",
        description="Print hi",
        course_id=course.id,
        language="python",
        expected_output="hi",
        test_cases=[],
        gamification_points=50,
    )
    db.add(challenge)
    db.commit()
    db.refresh(challenge)
    return challenge


class TestSubmitCode:

    def test_passing_submission(self, client, db, student, student_headers, challenge):
        response = submit(client, student_headers, challenge.id)
        assert response.status_code == 201

        body = response.json()
        assert body["message"] == "Submission graded"
        submission = body["submission"]
        assert submission["result"] == "passed"
        assert submission["tests_passed"] == 2
        assert submission["total_tests"] == 2
        assert submission["feedback"] == "All 2 tests passed"
        assert submission["points_earned"] == 100
        assert submission["attempts"] == 1
        assert submission["is_first_attempt"] is True
        assert submission["completed_at"] is not None
        assert body["new_badges"] == ["First Steps", "Point Collector"]

        db.expire_all()
        assert db.get(User, student.id).points == 100
        progress = db.query(Progress).filter(Progress.student_id == student.id).one()
        assert progress.total_points == 100
        assert progress.current_level == 2

    def test_failing_submission(self, client, db, student, student_headers, challenge):
        response = submit(client, student_headers, challenge.id, code="print(int(input()) + 1)")

        submission = response.json()["submission"]
        assert submission["result"] == "failed"
        assert submission["tests_passed"] == 0
        assert submission["feedback"] == "Test 1 failed: expected '6', got '4'"
        assert submission["points_earned"] == 0
        assert response.json()["new_badges"] == []

        db.expire_all()
        assert db.get(User, student.id).points == 0

    def test_runtime_error(self, client, student_headers, challenge):
        response = submit(client, student_headers, challenge.id, code="print(undefined_name)")
        submission = response.json()["submission"]
        assert submission["result"] == "error"
        assert "NameError" in submission["feedback"]

    def test_null_character_reported_as_error(self, client, student_headers, challenge):
        response = submit(client, student_headers, challenge.id, code="print(1)\x00")
        assert response.status_code == 201

        submission = response.json()["submission"]
        assert submission["result"] == "error"
        assert submission["tests_passed"] == 0
        assert submission["feedback"] == "Test 1 raised an error: Code must not contain null characters"

    def test_points_awarded_once(self, client, db, student, student_headers, challenge):
        submit(client, student_headers, challenge.id)
        response = submit(client, student_headers, challenge.id)

        submission = response.json()["submission"]
        assert submission["result"] == "passed"
        assert submission["points_earned"] == 0
        assert submission["attempts"] == 2
        assert submission["is_first_attempt"] is False
        assert response.json()["new_badges"] == []

        db.expire_all()
        assert db.get(User, student.id).points == 100

    def test_blank_code_rejected(self, client, student_headers, challenge):
        response = submit(client, student_headers, challenge.id, code="   ")
        assert response.status_code == 422

    def test_missing_challenge(self, client, student_headers, db):
        response = submit(client, student_headers, 999)
        assert response.status_code == 404
        assert response.json()["detail"] == "Challenge not found"

    def test_requires_login(self, client, challenge):
        response = client.post(f"{API}/submissions/", json={"challenge_id": challenge.id, "code": "x"})
        assert response.status_code == 401


class TestSubmitBlocks:

    def test_blocks_transpiled_to_challenge_language(self, client, student_headers, say_hi):
        response = submit(
            client, student_headers, say_hi.id,
            language="blockly",
            code="",
            blocks=[{"type": "log", "template": "print(%text%)", "params": {"text": "hi"}}],
        )
        assert response.status_code == 201

        submission = response.json()["submission"]
        assert submission["code"] == 'print("hi")'
        assert submission["language"] == "blockly"
        assert submission["result"] == "passed"
        assert submission["points_earned"] == 50

    def test_palette_blocks_use_challenge_language(self, client, student_headers, say_hi):
        response = submit(
            client, student_headers, say_hi.id,
            language="blockly",
            code="",
            blocks=[{"type": "log", "params": {"text": "hi"}}],
        )
        submission = response.json()["submission"]
        assert submission["code"] == 'print("hi")'
        assert submission["result"] == "passed"

    def test_blocks_required(self, client, student_headers, say_hi):
        response = submit(client, student_headers, say_hi.id, language="blockly", code="", blocks=[])
        assert response.status_code == 422

    def test_unknown_block_param(self, client, student_headers, say_hi):
        response = submit(
            client, student_headers, say_hi.id,
            language="blockly",
            blocks=[{"type": "log", "template": "print(%text%)", "params": {"colour": "red"}}],
        )
        assert response.status_code == 400
        assert "colour" in response.json()["detail"]


class TestReadSubmissions:

    def test_list_own_submissions(self, client, student, student_headers, challenge):
        submit(client, student_headers, challenge.id, code="print(0)")
        submit(client, student_headers, challenge.id)

        response = client.get(f"{API}/submissions/student/{student.id}", headers=student_headers)
        assert response.status_code == 200
        results = [s["result"] for s in response.json()]
        assert results == ["passed", "failed"]
        assert response.json()[0]["challenge_title"] == "Double It"

    def test_other_students_submissions_hidden(self, client, student, other_student, challenge):
        response = client.get(f"{API}/submissions/student/{student.id}", headers=auth_headers(other_student))
        assert response.status_code == 403

    def test_teacher_sees_student_submission(self, client, db, student_headers, teacher_headers, challenge):
        submission_id = submit(client, student_headers, challenge.id).json()["submission"]["id"]
        response = client.get(f"{API}/submissions/{submission_id}", headers=teacher_headers)
        assert response.status_code == 200
        assert response.json()["id"] == submission_id

    def test_missing_submission(self, client, student_headers):
        response = client.get(f"{API}/submissions/999", headers=student_headers)
        assert response.status_code == 404

    def test_submission_stored(self, client, db, student, student_headers, challenge):
        submit(client, student_headers, challenge.id)
        stored = db.query(Submission).filter(Submission.student_id == student.id).one()
        assert stored.course_id == challenge.course_id
        assert stored.code == DOUBLE_IT
