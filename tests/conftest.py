"""
Test configuration for the hospital network API.
"""
import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hnms.database import get_db
from hnms.main import app
from hnms.models import Base, Hospital, User, UserRole, Patient, Appointment, AppointmentStatus
from hnms.core.permissions import Principal
from hnms.core.security import create_access_token, hash_password, token_claims_for

TEST_PASSWORD = "Secret123!"

# Create test database engine
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """
    Create a test client with a test database session.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides = {}


@pytest.fixture
def make_hospital(db):
    counter = {"n": 0}

    def _make(name=None):
        counter["n"] += 1
        hospital = Hospital(name=name or f"Hospital {counter['n']}")
        db.add(hospital)
        db.commit()
        db.refresh(hospital)
        return hospital
    return _make


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=UserRole.ADMIN, hospital=None, email=None, password=TEST_PASSWORD, is_active=True, name=None):
        counter["n"] += 1
        user = User(
            name=name or f"{role.value.title()} {counter['n']}",
            email=email or f"{role.value.lower()}{counter['n']}@example.com",
            password_hash=hash_password(password),
            role=role,
            hospital_id=hospital.id if hospital is not None else None,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_patient(db):
    def _make(hospital, full_name="Jane Doe", **fields):
        patient = Patient(hospital_id=hospital.id, full_name=full_name, **fields)
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return patient
    return _make


@pytest.fixture
def make_appointment(db):
    def _make(patient, doctor, when, status=AppointmentStatus.SCHEDULED, **fields):
        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            appointment_time=when,
            status=status,
            **fields
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment
    return _make


def _auth_headers(user):
    token = create_access_token(token_claims_for(user))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Bearer header factory for a user."""
    return _auth_headers


@pytest.fixture
def principal_for():
    def _principal(user):
        return Principal(id=user.id, role=user.role, tenant_id=user.hospital_id, email=user.email)
    return _principal


@pytest.fixture
def hospitals(make_hospital):
    """Two hospitals, A and B."""
    return make_hospital("Hospital A"), make_hospital("Hospital B")


@pytest.fixture
def staff(hospitals, make_user):
    """Users of both hospitals plus a SUPER_ADMIN."""
    hospital_a, hospital_b = hospitals
    return {
        "super_admin": make_user(UserRole.SUPER_ADMIN),
        "admin_a": make_user(UserRole.ADMIN, hospital_a),
        "doctor_a": make_user(UserRole.DOCTOR, hospital_a),
        "doctor_a2": make_user(UserRole.DOCTOR, hospital_a),
        "nurse_a": make_user(UserRole.NURSE, hospital_a),
        "patient_user_a": make_user(UserRole.PATIENT, hospital_a),
        "admin_b": make_user(UserRole.ADMIN, hospital_b),
        "doctor_b": make_user(UserRole.DOCTOR, hospital_b),
    }
