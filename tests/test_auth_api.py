import unittest

from garageops.auth import (
    create_access_token, decode_access_token, get_current_active_employee, hash_password, verify_password,
)
from garageops.exceptions import AuthenticationError, ValidationError
from garageops.main import app

from tests.helpers import GARAGE_ID, OTHER_GARAGE_ID, ApiTestCase


class TestPasswordHelpers(unittest.TestCase):

    def test_hash_and_verify(self):
        password_hash = hash_password("correct horse")
        self.assertNotEqual(password_hash, "correct horse")
        self.assertTrue(verify_password("correct horse", password_hash))
        self.assertFalse(verify_password("wrong horse", password_hash))
        self.assertFalse(verify_password("anything", None))

    def test_password_over_72_bytes(self):
        with self.assertRaises(ValidationError) as ctx:
            hash_password("x" * 80)
        self.assertEqual(ctx.exception.details[0]["field"], "password")

        password_hash = hash_password("correct horse")
        self.assertFalse(verify_password("x" * 80, password_hash))

    def test_token_round_trip(self):
        token = create_access_token("employee-42")
        self.assertEqual(decode_access_token(token), "employee-42")

    def test_garbage_token(self):
        with self.assertRaises(AuthenticationError):
            decode_access_token("not.a.token")


class TestAuthApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.employee = self.create_employee("mech.jo", lastName="Okafor")

    def test_login_reports_missing_password(self):
        response = self.client.post(f"{self.api}/auth/login", json={"loginId": "mech.jo"})
        self.assertEqual(response.status_code, 200)
        user = response.json()["user"]
        self.assertEqual(user["userUid"], self.employee["id"])
        self.assertEqual(user["userRole"], "mechanic")
        self.assertFalse(user["hasPassword"])

    def test_login_unknown_id(self):
        response = self.client.post(f"{self.api}/auth/login", json={"loginId": "nobody"})
        self.assertEqual(response.status_code, 404)

    def test_short_password_rejected(self):
        response = self.client.post(f"{self.api}/auth/set-password", json={"loginId": "mech.jo", "password": "short"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"][0]["field"], "password")

    def test_long_password_rejected(self):
        response = self.client.post(f"{self.api}/auth/set-password", json={"loginId": "mech.jo", "password": "x" * 80})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Validation failed")
        self.assertEqual(response.json()["details"][0]["field"], "password")

        login = self.client.post(f"{self.api}/auth/login", json={"loginId": "mech.jo"}).json()
        self.assertFalse(login["user"]["hasPassword"])

    def test_long_password_counts_bytes(self):
        # 40 characters, 80 bytes in UTF-8
        response = self.client.post(f"{self.api}/auth/set-password", json={"loginId": "mech.jo", "password": "é" * 40})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"][0]["field"], "password")

    def test_long_password_on_new_employee(self):
        response = self.client.post(
            f"{self.api}/employees",
            json={
                "garageId": GARAGE_ID,
                "loginId": "mech.ana",
                "firstName": "Ana",
                "lastName": "Silva",
                "password": "x" * 80,
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"][0]["field"], "password")

    def test_set_and_verify_password(self):
        response = self.client.post(
            f"{self.api}/auth/set-password", json={"loginId": "mech.jo", "password": "torque-wrench-42"}
        )
        self.assertEqual(response.status_code, 200)

        login = self.client.post(f"{self.api}/auth/login", json={"loginId": "mech.jo"}).json()
        self.assertTrue(login["user"]["hasPassword"])

        response = self.client.post(
            f"{self.api}/auth/verify-password", json={"loginId": "mech.jo", "password": "wrong-password"}
        )
        self.assertEqual(response.status_code, 401)

        response = self.client.post(
            f"{self.api}/auth/verify-password", json={"loginId": "mech.jo", "password": "torque-wrench-42"}
        )
        self.assertEqual(response.status_code, 200)
        token = response.json()["accessToken"]
        self.assertEqual(response.json()["tokenType"], "bearer")

        # Use the real dependency from here on
        del app.dependency_overrides[get_current_active_employee]

        response = self.client.get(f"{self.api}/job-cards", params={"garageId": GARAGE_ID})
        self.assertEqual(response.status_code, 401)

        headers = {"Authorization": f"Bearer {token}"}
        response = self.client.get(f"{self.api}/job-cards", params={"garageId": GARAGE_ID}, headers=headers)
        self.assertEqual(response.status_code, 200)

        response = self.client.get(f"{self.api}/job-cards", params={"garageId": OTHER_GARAGE_ID}, headers=headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Garage not found")

    def test_inactive_employee_rejected(self):
        self.client.patch(f"{self.api}/employees/{self.employee['id']}", json={"isActive": False})
        token = create_access_token(self.employee["id"])
        del app.dependency_overrides[get_current_active_employee]

        response = self.client.get(
            f"{self.api}/customers",
            params={"garageId": GARAGE_ID},
            headers={"Authorization": f"Bearer {token}"},
        )
        self.assertEqual(response.status_code, 401)


if __name__ == "__main__":
    unittest.main()
