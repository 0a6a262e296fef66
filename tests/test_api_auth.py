"""
Registration, login and bearer-token handling over HTTP.
"""
import unittest

from tests.api_case import ApiTestCase


class AuthApiTests(ApiTestCase):
    def test_signup_returns_token_and_safe_user(self):
        res = self.client.post("/auth/signup", json={
            "username": "alice", "email": "alice@example.com", "password": "secret123",
        })
        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertTrue(body["token"])
        self.assertEqual(body["username"], "alice")
        self.assertNotIn("password_hash", body["user"])
        self.assertNotIn("password_salt", body["user"])

    def test_register_alias(self):
        res = self.client.post("/auth/register", json={
            "username": "bob", "email": "bob@example.com", "password": "secret123",
        })
        self.assertEqual(res.status_code, 201)

    def test_duplicate_username_or_email_conflicts(self):
        self.signup("alice")
        res = self.client.post("/auth/signup", json={
            "username": "alice", "email": "other@example.com", "password": "secret123",
        })
        self.assertEqual(res.status_code, 409)
        self.assertEqual(res.json(), {"error": "Username or email already taken"})
        res = self.client.post("/auth/signup", json={
            "username": "alice2", "email": "alice@example.com", "password": "secret123",
        })
        self.assertEqual(res.status_code, 409)

    def test_invalid_signup_body_is_400(self):
        res = self.client.post("/auth/signup", json={"username": "al", "email": "nope", "password": "x"})
        self.assertEqual(res.status_code, 400)
        self.assertIn("error", res.json())

    def test_login_by_username_or_email(self):
        user_id, _ = self.signup("alice")
        for body in ({"username": "alice", "password": "secret123"},
                     {"email": "alice@example.com", "password": "secret123"}):
            with self.subTest(body=body):
                res = self.client.post("/auth/login", json=body)
                self.assertEqual(res.status_code, 200)
                self.assertEqual(res.json()["user_id"], user_id)

    def test_login_with_wrong_password_is_401(self):
        self.signup("alice")
        res = self.client.post("/auth/login", json={"username": "alice", "password": "wrong-one"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json(), {"error": "Invalid credentials"})

    def test_login_without_handle_is_400(self):
        res = self.client.post("/auth/login", json={"password": "secret123"})
        self.assertEqual(res.status_code, 400)

    def test_me_requires_token(self):
        res = self.client.get("/auth/me")
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json(), {"error": "Missing token"})

    def test_me_rejects_bad_token(self):
        res = self.client.get("/auth/me", headers={"Authorization": "Bearer not.valid"})
        self.assertEqual(res.status_code, 401)
        self.assertEqual(res.json(), {"error": "Invalid token"})

    def test_me_returns_profile(self):
        user_id, headers = self.signup("alice")
        res = self.client.get("/auth/me", headers=headers)
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["_id"], user_id)
        self.assertEqual(body["travel_statistics"]["total_trips"], 0)
        self.assertNotIn("password_hash", body)


if __name__ == "__main__":
    unittest.main()
