"""
Tests for appointment booking, scheduling conflicts and visibility.
"""
from datetime import datetime, timezone
import pytest

from hnms.appointments import service as appointment_service
from hnms.models import Appointment, AppointmentStatus, UserRole

NINE = datetime(2030, 3, 4, 9, 0, tzinfo=timezone.utc)


def parse_time(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def patient_a(hospitals, make_patient):
    return make_patient(hospitals[0], "Alice")


def book(client, headers, patient, doctor, when, **extra):
    payload = {"patient_id": patient.id, "doctor_id": doctor.id, "appointment_time": when.isoformat()}
    payload.update(extra)
    return client.post("/api/appointments/", json=payload, headers=headers)


def test_create_appointment(client, staff, patient_a, auth_headers):
    response = book(client, auth_headers(staff["nurse_a"]), patient_a, staff["doctor_a"], NINE, reason="Checkup")

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Appointment created successfully."
    data = body["data"]
    assert data["status"] == "SCHEDULED"
    assert data["duration_minutes"] == 30
    assert data["reason"] == "Checkup"
    assert data["patient_name"] == "Alice"
    assert data["doctor_name"] == staff["doctor_a"].name
    assert data["hospital_id"] == patient_a.hospital_id
    assert parse_time(data["appointment_time"]) == NINE


def test_create_normalises_offset_to_utc(client, staff, patient_a, auth_headers):
    response = book(
        client, auth_headers(staff["admin_a"]), patient_a, staff["doctor_a"],
        datetime.fromisoformat("2030-03-04T11:00:00+02:00"),
    )
    assert response.status_code == 201
    assert parse_time(response.json()["data"]["appointment_time"]) == NINE


def test_double_booking_rejected(client, db, staff, patient_a, make_patient, auth_headers):
    headers = auth_headers(staff["admin_a"])
    other_patient = make_patient(patient_a.hospital, "Anna")

    first = book(client, headers, patient_a, staff["doctor_a"], NINE)
    second = book(client, headers, other_patient, staff["doctor_a"], NINE)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["message"] == "Doctor already has an appointment at this time."
    assert db.query(Appointment).count() == 1


def test_other_doctor_same_time_allowed(client, staff, patient_a, auth_headers):
    headers = auth_headers(staff["admin_a"])
    assert book(client, headers, patient_a, staff["doctor_a"], NINE).status_code == 201
    assert book(client, headers, patient_a, staff["doctor_a2"], NINE).status_code == 201


def test_cancelled_slot_can_be_rebooked(client, staff, patient_a, auth_headers):
    headers = auth_headers(staff["admin_a"])
    first = book(client, headers, patient_a, staff["doctor_a"], NINE).json()["data"]

    cancelled = client.delete(f"/api/appointments/{first['id']}", headers=headers)
    assert cancelled.status_code == 200

    again = book(client, headers, patient_a, staff["doctor_a"], NINE)
    assert again.status_code == 201


def test_overlapping_but_different_start_is_not_a_conflict(client, staff, patient_a, auth_headers):
    # Only identical start times conflict; durations are not compared
    headers = auth_headers(staff["admin_a"])
    assert book(client, headers, patient_a, staff["doctor_a"], NINE, duration_minutes=60).status_code == 201
    overlapping = NINE.replace(minute=15)
    assert book(client, headers, patient_a, staff["doctor_a"], overlapping).status_code == 201


def test_unique_index_backs_conflict_check(client, db, staff, patient_a, auth_headers, monkeypatch):
    headers = auth_headers(staff["admin_a"])
    assert book(client, headers, patient_a, staff["doctor_a"], NINE).status_code == 201

    # Simulate a concurrent writer that passed the pre-check
    monkeypatch.setattr(appointment_service, "find_conflicting_appointment", lambda *args, **kwargs: None)
    response = book(client, headers, patient_a, staff["doctor_a"], NINE)

    assert response.status_code == 409
    assert db.query(Appointment).count() == 1


def test_doctor_from_other_hospital_not_found(client, staff, patient_a, auth_headers):
    response = book(client, auth_headers(staff["admin_a"]), patient_a, staff["doctor_b"], NINE)
    assert response.status_code == 404
    assert response.json()["message"] == "Doctor not found."


def test_non_doctor_cannot_be_booked(client, staff, patient_a, auth_headers):
    response = book(client, auth_headers(staff["admin_a"]), patient_a, staff["nurse_a"], NINE)
    assert response.status_code == 404


def test_inactive_doctor_cannot_be_booked(client, staff, hospitals, patient_a, make_user, auth_headers):
    retired = make_user(UserRole.DOCTOR, hospitals[0], is_active=False)
    response = book(client, auth_headers(staff["admin_a"]), patient_a, retired, NINE)
    assert response.status_code == 404


def test_cannot_book_for_other_hospitals_patient(client, staff, hospitals, make_patient, auth_headers):
    foreign = make_patient(hospitals[1], "Bob")
    response = book(client, auth_headers(staff["admin_a"]), foreign, staff["doctor_b"], NINE)
    assert response.status_code == 404
    assert response.json()["message"] == "Patient not found or access denied."


def test_patient_role_cannot_book(client, staff, patient_a, auth_headers):
    response = book(client, auth_headers(staff["patient_user_a"]), patient_a, staff["doctor_a"], NINE)
    assert response.status_code == 403


def test_invalid_time_rejected(client, staff, patient_a, auth_headers):
    payload = {"patient_id": patient_a.id, "doctor_id": staff["doctor_a"].id, "appointment_time": "tomorrow"}
    response = client.post("/api/appointments/", json=payload, headers=auth_headers(staff["admin_a"]))
    assert response.status_code == 400


def test_reschedule_keeps_other_fields(client, staff, patient_a, make_appointment, auth_headers):
    appointment = make_appointment(patient_a, staff["doctor_a"], NINE, reason="Follow-up", notes="Bring scans")
    later = NINE.replace(hour=11)

    response = client.put(
        f"/api/appointments/{appointment.id}",
        json={"appointment_time": later.isoformat()},
        headers=auth_headers(staff["nurse_a"]),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert response.json()["message"] == "Appointment updated successfully."
    assert parse_time(data["appointment_time"]) == later
    assert data["reason"] == "Follow-up"
    assert data["notes"] == "Bring scans"
    assert data["status"] == "SCHEDULED"


def test_reschedule_into_taken_slot(client, staff, patient_a, make_appointment, auth_headers):
    make_appointment(patient_a, staff["doctor_a"], NINE)
    movable = make_appointment(patient_a, staff["doctor_a"], NINE.replace(hour=10))

    response = client.put(
        f"/api/appointments/{movable.id}",
        json={"appointment_time": NINE.isoformat()},
        headers=auth_headers(staff["admin_a"]),
    )

    assert response.status_code == 409


def test_reschedule_to_own_time_is_not_a_conflict(client, staff, patient_a, make_appointment, auth_headers):
    appointment = make_appointment(patient_a, staff["doctor_a"], NINE)

    response = client.put(
        f"/api/appointments/{appointment.id}",
        json={"appointment_time": NINE.isoformat(), "notes": "Confirmed"},
        headers=auth_headers(staff["admin_a"]),
    )

    assert response.status_code == 200
    assert response.json()["data"]["notes"] == "Confirmed"


def test_cancelled_appointment_cannot_move_onto_booked_slot(client, staff, patient_a, make_appointment, auth_headers):
    make_appointment(patient_a, staff["doctor_a"], NINE)
    cancelled = make_appointment(
        patient_a, staff["doctor_a"], NINE.replace(hour=10), status=AppointmentStatus.CANCELLED
    )

    response = client.put(
        f"/api/appointments/{cancelled.id}",
        json={"appointment_time": NINE.isoformat()},
        headers=auth_headers(staff["admin_a"]),
    )

    assert response.status_code == 409


def test_repeated_update_gives_same_appointment(client, staff, patient_a, make_appointment, auth_headers):
    appointment = make_appointment(patient_a, staff["doctor_a"], NINE)
    headers = auth_headers(staff["nurse_a"])
    payload = {"appointment_time": NINE.replace(hour=14).isoformat(), "notes": "Bring scans"}

    first = client.put(f"/api/appointments/{appointment.id}", json=payload, headers=headers)
    second = client.put(f"/api/appointments/{appointment.id}", json=payload, headers=headers)

    assert first.status_code == second.status_code == 200
    first_data, second_data = first.json()["data"], second.json()["data"]
    first_data.pop("updated_at", None)
    second_data.pop("updated_at", None)
    assert first_data == second_data


def test_status_transitions(client, staff, patient_a, make_appointment, auth_headers):
    headers = auth_headers(staff["doctor_a"])
    appointment = make_appointment(patient_a, staff["doctor_a"], NINE)

    completed = client.put(f"/api/appointments/{appointment.id}", json={"status": "COMPLETED"}, headers=headers)
    assert completed.status_code == 200
    assert completed.json()["data"]["status"] == "COMPLETED"

    back = client.put(f"/api/appointments/{appointment.id}", json={"status": "SCHEDULED"}, headers=headers)
    assert back.status_code == 400


def test_cancel_is_soft(client, db, staff, patient_a, make_appointment, auth_headers):
    appointment = make_appointment(patient_a, staff["doctor_a"], NINE)

    response = client.delete(f"/api/appointments/{appointment.id}", headers=auth_headers(staff["nurse_a"]))

    assert response.status_code == 200
    assert response.json()["message"] == "Appointment cancelled successfully."
    assert response.json()["data"]["status"] == "CANCELLED"
    db.refresh(appointment)
    assert appointment.status == AppointmentStatus.CANCELLED
    assert db.query(Appointment).count() == 1


def test_cancel_other_hospitals_appointment(client, db, staff, hospitals, make_patient, make_appointment, auth_headers):
    foreign = make_patient(hospitals[1], "Bob")
    appointment = make_appointment(foreign, staff["doctor_b"], NINE)

    response = client.delete(f"/api/appointments/{appointment.id}", headers=auth_headers(staff["admin_a"]))

    assert response.status_code == 404
    db.refresh(appointment)
    assert appointment.status == AppointmentStatus.SCHEDULED


def test_list_visibility_by_role(client, staff, hospitals, patient_a, make_patient, make_appointment, auth_headers):
    own = make_appointment(patient_a, staff["doctor_a"], NINE)
    make_appointment(patient_a, staff["doctor_a2"], NINE)
    make_appointment(make_patient(hospitals[1], "Bob"), staff["doctor_b"], NINE)

    def visible(user):
        response = client.get("/api/appointments/", headers=auth_headers(user))
        assert response.status_code == 200
        return response.json()

    assert [a["id"] for a in visible(staff["doctor_a"])["data"]] == [own.id]
    assert visible(staff["nurse_a"])["pagination"]["total"] == 2
    assert visible(staff["admin_b"])["pagination"]["total"] == 1
    assert visible(staff["super_admin"])["pagination"]["total"] == 3


def test_doctor_cannot_read_colleagues_appointment(client, staff, patient_a, make_appointment, auth_headers):
    theirs = make_appointment(patient_a, staff["doctor_a2"], NINE)

    assert client.get(f"/api/appointments/{theirs.id}", headers=auth_headers(staff["doctor_a"])).status_code == 404
    assert client.get(f"/api/appointments/{theirs.id}", headers=auth_headers(staff["doctor_a2"])).status_code == 200


def test_list_filters(client, staff, patient_a, make_patient, make_appointment, auth_headers):
    other_patient = make_patient(patient_a.hospital, "Anna")
    first = make_appointment(patient_a, staff["doctor_a"], NINE)
    make_appointment(patient_a, staff["doctor_a"], NINE.replace(day=5), status=AppointmentStatus.CANCELLED)
    third = make_appointment(other_patient, staff["doctor_a2"], NINE.replace(day=5))
    headers = auth_headers(staff["admin_a"])

    def ids(query):
        return [a["id"] for a in client.get(f"/api/appointments/?{query}", headers=headers).json()["data"]]

    assert ids("status=SCHEDULED") == [third.id, first.id]
    assert ids(f"doctorId={staff['doctor_a2'].id}") == [third.id]
    assert ids(f"patientId={patient_a.id}&status=SCHEDULED") == [first.id]
    assert ids("date=2030-03-04") == [first.id]
    assert len(ids("date=2030-03-05")) == 2


def test_doctor_schedule_by_date(client, staff, patient_a, make_appointment, auth_headers):
    late = make_appointment(patient_a, staff["doctor_a"], NINE.replace(hour=15))
    early = make_appointment(patient_a, staff["doctor_a"], NINE)
    make_appointment(patient_a, staff["doctor_a"], NINE.replace(hour=12), status=AppointmentStatus.CANCELLED)
    make_appointment(patient_a, staff["doctor_a"], NINE.replace(day=5))

    response = client.get(
        f"/api/appointments/doctor/{staff['doctor_a'].id}/schedule?date=2030-03-04",
        headers=auth_headers(staff["nurse_a"]),
    )

    assert response.status_code == 200
    assert [a["id"] for a in response.json()["data"]] == [early.id, late.id]


def test_doctor_schedule_by_week(client, staff, patient_a, make_appointment, auth_headers):
    inside = [
        make_appointment(patient_a, staff["doctor_a"], NINE),
        make_appointment(patient_a, staff["doctor_a"], NINE.replace(day=10, hour=23)),
    ]
    make_appointment(patient_a, staff["doctor_a"], NINE.replace(day=11))
    make_appointment(patient_a, staff["doctor_a"], NINE.replace(day=3))

    response = client.get(
        f"/api/appointments/doctor/{staff['doctor_a'].id}/schedule?week=2030-03-04",
        headers=auth_headers(staff["admin_a"]),
    )

    assert [a["id"] for a in response.json()["data"]] == [a.id for a in inside]


def test_doctor_schedule_scoping(client, staff, hospitals, patient_a, make_patient, make_appointment, auth_headers):
    make_appointment(patient_a, staff["doctor_a2"], NINE)
    make_appointment(make_patient(hospitals[1], "Bob"), staff["doctor_b"], NINE)

    colleague = client.get(
        f"/api/appointments/doctor/{staff['doctor_a2'].id}/schedule",
        headers=auth_headers(staff["doctor_a"]),
    )
    foreign = client.get(
        f"/api/appointments/doctor/{staff['doctor_b'].id}/schedule",
        headers=auth_headers(staff["admin_a"]),
    )

    assert colleague.status_code == 200
    assert colleague.json()["data"] == []
    assert foreign.json()["data"] == []
