import os
import tempfile
import unittest
from types import SimpleNamespace as Obj

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from core.database import Base, get_db
from auth.services.auth_service import get_current_active_user
from uploads.storage import ArtifactStore, get_artifact_store
import models_bootstrap

PNG = ("me.png", b"\x89PNG\r\n\x1a\n fake", "image/png")

FORM = {
    "first_name": "Ana",
    "last_name": "Lee",
    "email": "ana@x.com",
    "department": "Eng",
    "position": "SWE",
}


class EmployeeFlowTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, future=True)

        self.tmp = tempfile.TemporaryDirectory()
        self.store = ArtifactStore(self.tmp.name)

        # --- Dependency overrides ---
        def _get_db_override():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = _get_db_override
        app.dependency_overrides[get_current_active_user] = lambda: Obj(id="manager-7", is_active=True)
        app.dependency_overrides[get_artifact_store] = lambda: self.store

        self.client = TestClient(app)

    def tearDown(self):
        for dep in [get_db, get_current_active_user, get_artifact_store]:
            app.dependency_overrides.pop(dep, None)
        self.engine.dispose()
        self.tmp.cleanup()

    def files(self):
        return sorted(os.listdir(self.tmp.name))

    def test_full_employee_flow(self):
        # 1) Create with a profile picture
        r = self.client.post("/api/employees", data=FORM, files={"profile_picture": PNG})
        self.assertEqual(r.status_code, 201, r.text)
        created = r.json()["employee"]
        emp_id = created["id"]
        self.assertEqual(created["created_by"], "manager-7")
        self.assertEqual(created["salary"], 0)
        first_picture = created["profile_picture"]
        self.assertTrue(first_picture.startswith("/uploads/"))
        self.assertEqual(self.files(), [first_picture.rsplit("/", 1)[1]])

        # 2) Partial update
        r = self.client.put(f"/api/employees/{emp_id}", data={"department": "Ops"})
        self.assertEqual(r.status_code, 200, r.text)
        r = self.client.get(f"/api/employees/{emp_id}")
        self.assertEqual(r.json()["department"], "Ops")
        self.assertEqual(r.json()["position"], "SWE")

        # 3) Duplicate email with a picture: rejected, nothing new on disk
        r = self.client.post(
            "/api/employees",
            data=dict(FORM, email="ANA@x.com"),
            files={"profile_picture": PNG},
        )
        self.assertEqual(r.status_code, 409, r.text)
        self.assertEqual(len(self.files()), 1)

        # 4) Invalid input with a picture: rejected, nothing new on disk
        r = self.client.post(
            "/api/employees",
            data=dict(FORM, email="bo@x.com", salary="lots"),
            files={"profile_picture": PNG},
        )
        self.assertEqual(r.status_code, 400, r.text)
        self.assertEqual(r.json()["detail"]["errors"], {"salary": "Salary must be a number"})
        self.assertEqual(len(self.files()), 1)

        # 5) Replace the picture
        r = self.client.put(f"/api/employees/{emp_id}", files={"profile_picture": ("new.jpg", b"jpeg", "image/jpeg")})
        self.assertEqual(r.status_code, 200, r.text)
        second_picture = r.json()["employee"]["profile_picture"]
        self.assertNotEqual(second_picture, first_picture)
        self.assertEqual(self.files(), [second_picture.rsplit("/", 1)[1]])

        # 6) Search
        self.client.post("/api/employees", data=dict(FORM, email="mo@x.com", department="Marketing"))
        self.client.put(f"/api/employees/{emp_id}", data={"department": "Engineering"})
        r = self.client.get("/api/employees/search", params={"department": "eng"})
        self.assertEqual([e["id"] for e in r.json()], [emp_id])
        r = self.client.get("/api/employees")
        self.assertEqual(len(r.json()), 2)

        # 7) Delete, twice
        r = self.client.delete(f"/api/employees/{emp_id}")
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(self.files(), [])
        r = self.client.get(f"/api/employees/{emp_id}")
        self.assertEqual(r.status_code, 404)
        r = self.client.delete(f"/api/employees/{emp_id}")
        self.assertEqual(r.status_code, 404)

    def test_invalid_id_is_not_found(self):
        r = self.client.get("/api/employees/abc")
        self.assertEqual(r.status_code, 404)
        r = self.client.put("/api/employees/abc", data={"department": "Ops"}, files={"profile_picture": PNG})
        self.assertEqual(r.status_code, 404)
        self.assertEqual(self.files(), [])


if __name__ == "__main__":
    unittest.main()
