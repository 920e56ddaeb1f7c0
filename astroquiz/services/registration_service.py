from extensions import db
from astroquiz.errors import SchoolRegistrationClosed, SoloRegistrationClosed, ValidationError
from astroquiz.models import Participant, School
from astroquiz.models.participant import MODE_SCHOOL, MODE_SOLO
from astroquiz.services.code_service import new_passcode, run_with_unique_codes
from astroquiz.services.settings_service import (
    SCHOOL_REGISTRATION_OPEN,
    SOLO_REGISTRATION_OPEN,
    require_open,
)

SUBJECTS = (
    "Astrophysics",
    "Observational Astronomy",
    "Rocketry",
    "Cosmology",
    "General Astronomy",
)
TEAM_SIZE = len(SUBJECTS)
TEAM_TAGS = ("A", "B")

SOLO_OPTIONAL_FIELDS = ("email", "phone", "institution")
MEMBER_REQUIRED_FIELDS = ("name", "email", "phone")


def _clean_text(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeError
    value = value.strip()
    return value or None


def _validate_solo(fields):
    if not isinstance(fields, dict):
        raise ValidationError("Invalid registration data")

    details = []
    clean = {}
    try:
        clean["name"] = _clean_text(fields.get("name"))
    except TypeError:
        clean["name"] = None
    if not clean["name"]:
        details.append({"field": "name", "message": "Name is required"})

    for field in SOLO_OPTIONAL_FIELDS:
        try:
            clean[field] = _clean_text(fields.get(field))
        except TypeError:
            details.append({"field": field, "message": "Must be a string"})

    if details:
        raise ValidationError("Invalid registration data", details)
    return clean


def register_solo(fields, enforce_gate=True):
    """Creates one solo participant with a fresh passcode."""
    if enforce_gate:
        require_open(SOLO_REGISTRATION_OPEN, SoloRegistrationClosed)

    clean = _validate_solo(fields)

    def _insert():
        participant = Participant(
            name=clean["name"],
            email=clean.get("email"),
            phone=clean.get("phone"),
            institution=clean.get("institution"),
            passcode=new_passcode(),
            mode=MODE_SOLO,
            has_completed_quiz=False,
        )
        db.session.add(participant)
        db.session.flush()
        return participant

    return run_with_unique_codes(_insert)


def validate_school(school_name, members, team=None):
    """
    Returns (name, team, members) normalized, or raises ValidationError
    listing every violated rule, per member where it applies.
    """
    details = []

    try:
        name = _clean_text(school_name)
    except TypeError:
        name = None
    if not name:
        details.append({"field": "schoolName", "message": "School name is required"})

    if team is None or team == "":
        team = TEAM_TAGS[0]
    if team not in TEAM_TAGS:
        details.append({"field": "team", "message": "Team must be A or B"})

    if not isinstance(members, list):
        details.append({"field": "members", "message": "Members must be a list"})
        raise ValidationError("Invalid registration data", details)

    if len(members) != TEAM_SIZE:
        details.append({
            "field": "members",
            "message": f"A school team must have exactly {TEAM_SIZE} members.",
        })

    clean_members = []
    for idx, member in enumerate(members):
        if not isinstance(member, dict):
            details.append({"member": idx, "field": "member", "message": "Member must be an object"})
            continue

        # position in the submitted list, reported back in details
        clean = {"index": idx}
        for field in MEMBER_REQUIRED_FIELDS:
            try:
                clean[field] = _clean_text(member.get(field))
            except TypeError:
                clean[field] = None
            if not clean[field]:
                details.append({"member": idx, "field": field, "message": f"{field.capitalize()} is required"})

        subject = member.get("subject")
        if subject not in SUBJECTS:
            details.append({
                "member": idx,
                "field": "subject",
                "message": "Subject must be one of: " + ", ".join(SUBJECTS),
            })
        clean["subject"] = subject

        is_leader = member.get("isLeader", False)
        if not isinstance(is_leader, bool):
            details.append({"member": idx, "field": "isLeader", "message": "isLeader must be a boolean"})
            is_leader = False
        clean["is_leader"] = is_leader

        clean_members.append(clean)

    leaders = [m["index"] for m in clean_members if m["is_leader"]]
    if len(leaders) != 1:
        details.append({
            "field": "isLeader",
            "members": leaders,
            "message": "Exactly one member must be designated as the leader.",
        })

    seen = {}
    for member in clean_members:
        subject = member["subject"]
        if subject in SUBJECTS:
            seen.setdefault(subject, []).append(member["index"])
    for subject, owners in seen.items():
        if len(owners) > 1:
            details.append({
                "field": "subject",
                "members": owners,
                "message": f"Subject '{subject}' is assigned to more than one member.",
            })

    if details:
        raise ValidationError("Invalid registration data", details)
    return name, team, clean_members


def register_school(school_name, members, team=None, enforce_gate=True):
    """
    Registers a school and its five members in a single transaction.
    Either all six rows are committed or none are.
    """
    if enforce_gate:
        require_open(SCHOOL_REGISTRATION_OPEN, SchoolRegistrationClosed)

    name, team, clean_members = validate_school(school_name, members, team)

    def _insert():
        school = School(name=name, team=team)
        db.session.add(school)
        db.session.flush()

        taken = set()
        created = []
        for member in clean_members:
            participant = Participant(
                name=member["name"],
                email=member["email"],
                phone=member["phone"],
                passcode=new_passcode(taken),
                mode=MODE_SCHOOL,
                school_id=school.id,
                subject=member["subject"],
                is_leader=member["is_leader"],
                has_completed_quiz=False,
            )
            db.session.add(participant)
            created.append(participant)
        db.session.flush()
        return school, created

    return run_with_unique_codes(_insert)
