"""
Profiles, the follow graph and user search.
"""
import unittest

from tests.api_case import ApiTestCase


class FollowTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.a_id, self.a = self.signup("alice")
        self.b_id, self.b = self.signup("bob")

    def user(self, user_id):
        return self.db["user"].find_one({"_id": user_id})

    def assert_bilateral(self):
        a, b = self.user(self.a_id), self.user(self.b_id)
        self.assertEqual(self.b_id in a["following"], self.a_id in b["followers"])
        self.assertEqual(self.a_id in b["following"], self.b_id in a["followers"])

    def test_follow_then_toggle_back(self):
        res = self.client.post(f"/users/{self.b_id}/follow", headers=self.a)
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()["following"])
        self.assertEqual(self.user(self.a_id)["following"], [self.b_id])
        self.assertEqual(self.user(self.b_id)["followers"], [self.a_id])
        self.assert_bilateral()

        res = self.client.post(f"/users/{self.b_id}/follow", headers=self.a)
        self.assertFalse(res.json()["following"])
        self.assertEqual(self.user(self.a_id)["following"], [])
        self.assertEqual(self.user(self.b_id)["followers"], [])
        self.assert_bilateral()

    def test_self_follow_is_rejected(self):
        res = self.client.post(f"/users/{self.a_id}/follow", headers=self.a)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Cannot follow yourself"})
        self.assertEqual(self.user(self.a_id)["following"], [])

    def test_follow_unknown_user_is_404(self):
        res = self.client.post("/users/000000000000000000000000/follow", headers=self.a)
        self.assertEqual(res.status_code, 404)

    def test_explicit_unfollow_is_idempotent(self):
        self.client.post(f"/users/{self.b_id}/follow", headers=self.a)
        for _ in range(2):
            res = self.client.delete(f"/users/{self.b_id}/follow", headers=self.a)
            self.assertEqual(res.status_code, 200)
            self.assertFalse(res.json()["following"])
        self.assert_bilateral()

    def test_followers_and_following_lists(self):
        self.client.post(f"/users/{self.b_id}/follow", headers=self.a)
        followers = self.client.get(f"/users/{self.b_id}/followers").json()
        self.assertEqual([u["username"] for u in followers], ["alice"])
        following = self.client.get(f"/users/{self.a_id}/following").json()
        self.assertEqual([u["username"] for u in following], ["bob"])


class ProfileTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.a_id, self.a = self.signup("alice")
        self.b_id, self.b = self.signup("bob")

    def test_update_profile(self):
        res = self.client.put("/users/profile", headers=self.a, json={
            "first_name": "Alice", "last_name": "Liddell", "bio": "Down the rabbit hole",
        })
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["first_name"], "Alice")
        self.assertNotIn("password_hash", body)
        self.assertEqual(self.client.get("/users/profile", headers=self.a).json()["bio"], "Down the rabbit hole")

    def test_profile_update_cannot_touch_statistics(self):
        self.client.put("/users/profile", headers=self.a, json={"travel_statistics": {"total_trips": 99}})
        user = self.db["user"].find_one({"_id": self.a_id})
        self.assertEqual(user["travel_statistics"]["total_trips"], 0)

    def test_private_profile_is_owner_only(self):
        self.client.put("/users/profile", headers=self.a,
                        json={"privacy_settings": {"profile_visibility": "private"}})
        self.assertEqual(self.client.get(f"/users/{self.a_id}", headers=self.b).status_code, 403)
        self.assertEqual(self.client.get(f"/users/{self.a_id}/followers").status_code, 403)
        self.assertEqual(self.client.get(f"/users/{self.a_id}", headers=self.a).status_code, 200)

    def test_unknown_user_is_404(self):
        self.assertEqual(self.client.get("/users/000000000000000000000000").status_code, 404)


class UserSearchTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.signup("alice")
        self.signup("malik")
        self.signup("bob")

    def test_case_insensitive_substring(self):
        res = self.client.get("/users/search", params={"q": "ALI"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual({u["username"] for u in res.json()}, {"alice", "malik"})

    def test_results_never_expose_credentials(self):
        for user in self.client.get("/users/search", params={"q": "a"}).json():
            self.assertNotIn("password_hash", user)
            self.assertNotIn("password_salt", user)
            self.assertNotIn("email", user)
            self.assertIn("travel_statistics", user)

    def test_regex_characters_are_literal(self):
        self.assertEqual(self.client.get("/users/search", params={"q": ".*"}).json(), [])

    def test_query_is_required(self):
        res = self.client.get("/users/search")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Search query is required"})

    def test_result_cap(self):
        for i in range(25):
            self.signup(f"traveller{i}")
        self.assertEqual(len(self.client.get("/users/search", params={"q": "traveller"}).json()), 20)


if __name__ == "__main__":
    unittest.main()
