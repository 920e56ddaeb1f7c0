from extensions import db, socketio
from astroquiz.models import LogEntry, Participant, QuizSubmission, School
from astroquiz.services.log_service import log_event
from conftest import ADMIN_PASSWORD, make_question, team_members


def _seed_quiz(app):
    with app.app_context():
        for i in range(5):
            make_question(f"Solo {i}", correct="B", marks=2, order=i + 1)
        make_question("Team", correct="A", marks=9, mode="team", subject="Cosmology")
        make_question("Both", correct="A", marks=4, mode="both")
        db.session.commit()


def _counts(app):
    with app.app_context():
        return School.query.count(), Participant.query.count()


# -------------------
# SCENARIOS
# -------------------
def test_solo_participant_full_flow(app, client):
    _seed_quiz(app)

    res = client.post("/api/participants", json={"name": "Ava"})
    assert res.status_code == 200
    ava = res.get_json()["newParticipants"][0]
    assert len(ava["passcode"]) == 6
    assert ava["mode"] == "solo"

    res = client.post("/api/participants/verify", json={"passcode": ava["passcode"]})
    assert res.status_code == 200
    assert res.get_json()["participant"]["id"] == ava["id"]

    res = client.get("/api/questions", query_string={"passcode": ava["passcode"]})
    assert res.status_code == 200
    questions = res.get_json()
    assert [x["text"] for x in questions] == [f"Solo {i}" for i in range(5)]
    assert all("correctAnswer" not in x for x in questions)

    answers = {
        questions[0]["id"]: "B",
        questions[1]["id"]: "B",
        questions[2]["id"]: "B",
        questions[3]["id"]: "C",
    }
    res = client.post("/api/quiz-submissions", json={
        "participantId": ava["id"],
        "answers": answers,
        "timeTaken": 140,
    })
    assert res.status_code == 200
    body = res.get_json()
    assert (body["score"], body["totalMarks"], body["timeTaken"]) == (6, 10, 140)

    res = client.post("/api/quiz-submissions", json={
        "participantId": ava["id"],
        "answers": answers,
        "timeTaken": 150,
    })
    assert res.status_code == 403
    assert res.get_json()["message"] == "Participant already completed quiz"

    res = client.post("/api/participants/verify", json={"passcode": ava["passcode"]})
    assert res.status_code == 403
    res = client.get("/api/questions", query_string={"passcode": ava["passcode"]})
    assert res.status_code == 403


def test_school_registration_scenario(app, client):
    res = client.post("/api/schools/register", json={
        "schoolName": "Lincoln High",
        "team": "B",
        "members": team_members(leaders=(1,)),
    })
    assert res.status_code == 200
    body = res.get_json()
    assert body["school"]["name"] == "Lincoln High"
    assert body["school"]["team"] == "B"
    assert len(body["newParticipants"]) == 5
    assert [p["isLeader"] for p in body["newParticipants"]] == [False, True, False, False, False]
    assert _counts(app) == (1, 5)

    res = client.post("/api/schools/register", json={
        "schoolName": "Lincoln High",
        "members": team_members(leaders=(0, 1)),
    })
    assert res.status_code == 400
    details = res.get_json()["details"]
    assert any(d["field"] == "isLeader" for d in details)
    assert _counts(app) == (1, 5)


def test_school_member_gets_subject_questions(app, client):
    with app.app_context():
        make_question("Cosmo", correct="A", marks=3, order=2, mode="team", subject="Cosmology")
        make_question("Rocket", correct="A", marks=7, order=1, mode="team", subject="Rocketry")
        make_question("Everyone", correct="C", marks=2, order=3, mode="both")
        make_question("Solo", correct="A", marks=11, mode="solo")
        db.session.commit()

    res = client.post("/api/schools/register", json={"schoolName": "Lincoln High", "members": team_members()})
    member = next(p for p in res.get_json()["newParticipants"] if p["subject"] == "Rocketry")

    res = client.get("/api/questions", query_string={"passcode": member["passcode"]})
    assert [x["text"] for x in res.get_json()] == ["Rocket", "Everyone"]


# -------------------
# PUBLIC ERRORS
# -------------------
def test_public_settings_defaults_open(client):
    res = client.get("/api/settings")
    assert res.get_json() == {
        "soloRegistrationOpen": True,
        "schoolRegistrationOpen": True,
        "quizActive": True,
    }


def test_closed_registration_returns_403(client, admin_headers):
    client.put("/api/admin/settings", json={"soloRegistrationOpen": False, "schoolRegistrationOpen": False},
               headers=admin_headers)

    res = client.post("/api/participants", json={"name": "Ava"})
    assert res.status_code == 403
    assert res.get_json()["message"] == "Solo registration is currently closed"

    res = client.post("/api/schools/register", json={"schoolName": "Lincoln High", "members": team_members()})
    assert res.status_code == 403


def test_inactive_quiz_blocks_verify(client, admin_headers):
    ava = client.post("/api/participants", json={"name": "Ava"}).get_json()["newParticipants"][0]
    client.put("/api/admin/settings", json={"quizActive": False}, headers=admin_headers)

    res = client.post("/api/participants/verify", json={"passcode": ava["passcode"]})
    assert res.status_code == 403
    assert res.get_json()["message"] == "Quiz is currently inactive"


def test_unknown_passcode_and_participant(client):
    assert client.post("/api/participants/verify", json={"passcode": "ZZZZZZ"}).status_code == 404
    assert client.get("/api/questions", query_string={"passcode": "ZZZZZZ"}).status_code == 404
    assert client.get("/api/questions").status_code == 400

    res = client.post("/api/quiz-submissions", json={"participantId": "nope", "answers": {}, "timeTaken": 1})
    assert res.status_code == 404


def test_invalid_payloads_return_400(client):
    res = client.post("/api/participants", json={"email": "x@example.com"})
    assert res.status_code == 400
    assert res.get_json()["details"][0]["field"] == "name"

    res = client.post("/api/quiz-submissions", json={"participantId": "p", "answers": [], "timeTaken": -1})
    assert res.status_code == 400
    fields = {d["field"] for d in res.get_json()["details"]}
    assert fields == {"answers", "timeTaken"}

    res = client.post("/api/schools/register", data="not json", content_type="text/plain")
    assert res.status_code == 400


# -------------------
# ADMIN AUTH
# -------------------
def test_admin_routes_require_auth(client):
    assert client.get("/api/admin/stats").status_code == 401
    res = client.get("/api/admin/participants", headers={"Authorization": "Bearer forged.token"})
    assert res.status_code == 401
    assert res.get_json()["message"] == "Admin access required"


def test_admin_login_rejects_wrong_password(client):
    res = client.post("/api/admin/login", json={"password": "guess"})
    assert res.status_code == 401
    assert client.get("/api/admin/stats").status_code == 401


def test_admin_token_grants_access(client, admin_headers):
    assert client.get("/api/admin/stats", headers=admin_headers).status_code == 200


def test_admin_session_grants_access_without_token(client):
    res = client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
    assert res.status_code == 200
    assert client.get("/api/admin/stats").status_code == 200

    client.post("/api/admin/logout")
    assert client.get("/api/admin/stats").status_code == 401


# -------------------
# ADMIN OPERATIONS
# -------------------
def test_admin_settings_update_validates(client, admin_headers):
    res = client.put("/api/admin/settings", json={"quizActive": "yes"}, headers=admin_headers)
    assert res.status_code == 400

    res = client.put("/api/admin/settings", json={"quizActive": False}, headers=admin_headers)
    assert res.get_json()["quizActive"] is False
    assert client.get("/api/settings").get_json()["quizActive"] is False


def test_admin_question_crud(client, admin_headers):
    payload = {
        "text": "Which planet has the most extensive ring system?",
        "options": {"A": "Jupiter", "B": "Saturn", "C": "Uranus", "D": "Neptune"},
        "correctAnswer": "B",
        "timeLimit": 60,
        "marks": 5,
        "orderIndex": 1,
        "mode": "solo",
        "subject": "Cosmology",
    }
    res = client.post("/api/admin/questions", json=payload, headers=admin_headers)
    assert res.status_code == 201
    created = res.get_json()
    assert created["subject"] is None
    assert created["correctAnswer"] == "B"

    res = client.post("/api/admin/questions", json=dict(payload, mode="team", subject=None), headers=admin_headers)
    assert res.status_code == 400

    res = client.put(f"/api/admin/questions/{created['id']}",
                     json=dict(payload, mode="school", subject="Rocketry", marks=3), headers=admin_headers)
    assert res.status_code == 200
    assert (res.get_json()["mode"], res.get_json()["subject"], res.get_json()["marks"]) == ("team", "Rocketry", 3)

    res = client.delete(f"/api/admin/questions/{created['id']}", headers=admin_headers)
    assert res.get_json() == {"success": True}
    assert client.get(f"/api/admin/questions/{created['id']}", headers=admin_headers).status_code == 404


def test_deleting_submission_reopens_quiz(app, client, admin_headers):
    _seed_quiz(app)
    ava = client.post("/api/participants", json={"name": "Ava"}).get_json()["newParticipants"][0]
    client.post("/api/quiz-submissions", json={"participantId": ava["id"], "answers": {}, "timeTaken": 5})

    subs = client.get("/api/admin/quiz-submissions", headers=admin_headers).get_json()
    assert len(subs) == 1
    assert subs[0]["participantName"] == "Ava"
    assert (subs[0]["score"], subs[0]["totalMarks"]) == (0, 10)

    detail = client.get(f"/api/admin/quiz-submissions/{subs[0]['id']}", headers=admin_headers).get_json()
    assert detail["participant"]["hasCompletedQuiz"] is True

    res = client.delete(f"/api/admin/quiz-submissions/{subs[0]['id']}", headers=admin_headers)
    assert res.status_code == 200

    participant = client.get(f"/api/admin/participants/{ava['id']}", headers=admin_headers).get_json()
    assert participant["hasCompletedQuiz"] is False
    assert client.post("/api/participants/verify", json={"passcode": ava["passcode"]}).status_code == 200


def test_deleting_school_removes_members_and_submissions(app, client, admin_headers):
    res = client.post("/api/schools/register", json={"schoolName": "Lincoln High", "members": team_members()})
    school_id = res.get_json()["school"]["id"]
    member = res.get_json()["newParticipants"][0]
    with app.app_context():
        member_id = Participant.query.filter_by(passcode=member["passcode"]).one().id
    client.post("/api/quiz-submissions", json={"participantId": member_id, "answers": {}, "timeTaken": 3})

    schools = client.get("/api/admin/schools", headers=admin_headers).get_json()
    assert len(schools[0]["members"]) == 5

    res = client.delete(f"/api/admin/schools/{school_id}", headers=admin_headers)
    assert res.status_code == 200
    assert client.get("/api/admin/stats", headers=admin_headers).get_json() == {
        "totalSoloRegistrations": 0,
        "totalSchools": 0,
        "totalSchoolMembers": 0,
        "totalSubmissions": 0,
    }


def test_admin_participant_edit_keeps_passcode(client, admin_headers):
    res = client.post("/api/admin/participants", json={"name": "Ava"}, headers=admin_headers)
    assert res.status_code == 201
    ava = res.get_json()

    res = client.put(f"/api/admin/participants/{ava['id']}", json={"passcode": "AAAAAA"}, headers=admin_headers)
    assert res.status_code == 400

    res = client.put(f"/api/admin/participants/{ava['id']}",
                     json={"email": "ava@example.com", "institution": "Lowell Observatory"}, headers=admin_headers)
    assert res.get_json()["email"] == "ava@example.com"
    assert res.get_json()["passcode"] == ava["passcode"]

    assert client.delete(f"/api/admin/participants/{ava['id']}", headers=admin_headers).status_code == 200
    assert client.delete(f"/api/admin/participants/{ava['id']}", headers=admin_headers).status_code == 404


def test_deleting_participant_removes_submission(app, client, admin_headers):
    _seed_quiz(app)
    ava = client.post("/api/participants", json={"name": "Ava"}).get_json()["newParticipants"][0]
    res = client.post("/api/quiz-submissions", json={"participantId": ava["id"], "answers": {}, "timeTaken": 8})
    assert res.status_code == 200

    res = client.delete(f"/api/admin/participants/{ava['id']}", headers=admin_headers)
    assert res.status_code == 200
    with app.app_context():
        assert Participant.query.count() == 0
        assert QuizSubmission.query.count() == 0


def test_post_delete_fallbacks(app, client, admin_headers):
    _seed_quiz(app)
    ava = client.post("/api/participants", json={"name": "Ava"}).get_json()["newParticipants"][0]
    vera = client.post("/api/participants", json={"name": "Vera"}).get_json()["newParticipants"][0]
    client.post("/api/quiz-submissions", json={"participantId": vera["id"], "answers": {}, "timeTaken": 8})
    res = client.post("/api/schools/register", json={"schoolName": "Lincoln High", "members": team_members()})
    school_id = res.get_json()["school"]["id"]

    res = client.post("/api/admin/participants/delete", json={}, headers=admin_headers)
    assert res.status_code == 400
    assert res.get_json()["message"] == "Missing participant id"

    res = client.post("/api/admin/participants/delete", json={"id": ava["id"]}, headers=admin_headers)
    assert res.get_json() == {"success": True}
    res = client.post("/api/admin/participants/delete", json={"id": ava["id"]}, headers=admin_headers)
    assert res.status_code == 404

    res = client.post("/api/admin/schools/delete", query_string={"id": school_id}, headers=admin_headers)
    assert res.status_code == 200

    submission_id = client.get("/api/admin/quiz-submissions", headers=admin_headers).get_json()[0]["id"]
    res = client.post("/api/admin/quiz-submissions/delete", json={"id": submission_id}, headers=admin_headers)
    assert res.status_code == 200

    assert client.get("/api/admin/stats", headers=admin_headers).get_json() == {
        "totalSoloRegistrations": 1,
        "totalSchools": 0,
        "totalSchoolMembers": 0,
        "totalSubmissions": 0,
    }
    assert client.post("/api/admin/schools/delete", json={"id": school_id}).status_code == 401


def test_admin_stats_and_logs(client, admin_headers):
    client.post("/api/participants", json={"name": "Ava"})
    client.post("/api/schools/register", json={"schoolName": "Lincoln High", "members": team_members()})

    stats = client.get("/api/admin/stats", headers=admin_headers).get_json()
    assert stats == {
        "totalSoloRegistrations": 1,
        "totalSchools": 1,
        "totalSchoolMembers": 5,
        "totalSubmissions": 0,
    }

    logs = client.get("/api/admin/logs", headers=admin_headers).get_json()
    messages = [row["message"] for row in logs]
    assert any(m.startswith("school Lincoln High") for m in messages)
    assert any(m.startswith("solo participant Ava") for m in messages)


def test_registration_survives_failed_audit_write(app, client):
    with app.app_context():
        LogEntry.__table__.drop(db.engine)

    res = client.post("/api/participants", json={"name": "Ava"})
    assert res.status_code == 200
    with app.app_context():
        assert Participant.query.filter_by(name="Ava").count() == 1


def test_log_table_is_trimmed(app):
    with app.app_context():
        for i in range(60):
            log_event("test", f"event {i}")
        assert LogEntry.query.count() == app.config["LOG_RETENTION"]
        assert LogEntry.query.filter_by(message="event 0").first() is None
        assert LogEntry.query.filter_by(message="event 59").first() is not None


# -------------------
# ADMIN LIVE FEED
# -------------------
def test_admin_socket_receives_stats_updates(app, client, admin_token):
    sio = socketio.test_client(app, flask_test_client=client, auth={"token": admin_token})
    assert sio.is_connected()
    assert any(m["name"] == "admin_stats" for m in sio.get_received())

    client.post("/api/participants", json={"name": "Vera"})

    updates = [m for m in sio.get_received() if m["name"] == "admin_stats_update"]
    assert updates[-1]["args"][0]["totalSoloRegistrations"] == 1
    sio.disconnect()


def test_admin_socket_rejects_anonymous(app):
    sio = socketio.test_client(app)
    assert not sio.is_connected()
