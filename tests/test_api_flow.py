# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import os
import shutil
import sys
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

from fastapi.testclient import TestClient


def _ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


class ApiTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="caltrack-test-"))
        data_root = cls._tmp / "data"
        os.environ["CALTRACK_DATA_ROOT"] = str(data_root)
        os.environ["CALTRACK_DB_PATH"] = str(data_root / "caltrack.db")
        os.environ["CALTRACK_JWT_SECRET"] = "test-secret"
        os.environ["CALTRACK_TIMEZONE"] = "UTC"
        os.environ["CALTRACK_DAILY_CALORIE_GOAL"] = "1650"
        os.environ.pop("OPENAI_KEY", None)
        os.environ.pop("OPENAI_API_KEY", None)

        # Ensure settings/app reflect the env vars above.
        for name in list(sys.modules.keys()):
            if name == "caltrack" or name.startswith("caltrack."):
                sys.modules.pop(name, None)

        from caltrack.api import app  # noqa: WPS433 (import inside test for env control)

        cls.app = app
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _login_as(self, username: str, password: str = "secret1") -> TestClient:
        client = TestClient(self.app)
        resp = client.post("/api/auth/register", json={"username": username, "password": password})
        self.assertIn(resp.status_code, (201, 409))
        resp = client.post("/api/auth/login", json={"username": username, "password": password})
        self.assertEqual(resp.status_code, 200)
        self.addCleanup(client.close)
        return client


class TestAuth(ApiTestCase):
    def test_auth_required(self) -> None:
        unauth = TestClient(self.app)
        self.assertEqual(unauth.get("/api/foods").status_code, 401)
        self.assertEqual(unauth.post("/api/calculate-calories", json={"mealDescription": "x"}).status_code, 401)
        self.assertEqual(unauth.get("/api/health").status_code, 200)
        unauth.close()

    def test_register_validation(self) -> None:
        client = TestClient(self.app)
        resp = client.post("/api/auth/register", json={"username": "ab", "password": "secret1"})
        self.assertEqual(resp.status_code, 400)
        resp = client.post("/api/auth/register", json={"username": "shorty", "password": "12345"})
        self.assertEqual(resp.status_code, 400)
        client.close()

    def test_register_duplicate_and_session(self) -> None:
        client = TestClient(self.app)
        resp = client.post("/api/auth/register", json={"username": "  Asha ", "password": "secret1"})
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["username"], "asha")

        resp = client.get("/api/auth/session")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["authenticated"], True)
        self.assertEqual(resp.json()["username"], "asha")

        other = TestClient(self.app)
        resp = other.post("/api/auth/register", json={"username": "ASHA", "password": "another1"})
        self.assertEqual(resp.status_code, 409)
        other.close()

        client.post("/api/auth/logout")
        resp = client.get("/api/auth/session")
        self.assertEqual(resp.json(), {"authenticated": False, "user_id": None, "username": None})
        client.close()

    def test_session_with_forged_cookie(self) -> None:
        client = TestClient(self.app)
        resp = client.get("/api/auth/session", headers={"Cookie": "caltrack_token=not.a.token"})
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["authenticated"])
        client.close()

    def test_login_failure(self) -> None:
        self._login_as("ravi")
        client = TestClient(self.app)
        resp = client.post("/api/auth/login", json={"username": "ravi", "password": "wrong-pass"})
        self.assertEqual(resp.status_code, 401)
        resp = client.post("/api/auth/login", json={"username": "nobody", "password": "secret1"})
        self.assertEqual(resp.status_code, 401)
        client.close()

    def test_change_and_reset_password(self) -> None:
        client = self._login_as("meera")
        resp = client.post("/api/auth/change-password", json={"new_password": "123"})
        self.assertEqual(resp.status_code, 400)
        resp = client.post("/api/auth/change-password", json={"new_password": "changed1"})
        self.assertEqual(resp.status_code, 200)

        anon = TestClient(self.app)
        self.assertEqual(
            anon.post("/api/auth/login", json={"username": "meera", "password": "changed1"}).status_code, 200
        )
        resp = anon.post("/api/auth/reset-password", json={"username": "meera", "new_password": "reset12"})
        self.assertEqual(resp.status_code, 200)
        resp = anon.post("/api/auth/reset-password", json={"username": "ghost", "new_password": "reset12"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            anon.post("/api/auth/login", json={"username": "meera", "password": "reset12"}).status_code, 200
        )
        anon.close()


class TestFoods(ApiTestCase):
    def test_crud(self) -> None:
        client = self._login_as("kiran")
        resp = client.post("/api/foods", json={"name": "  Masala dosa ", "calories": 350, "protein": 8.5})
        self.assertEqual(resp.status_code, 201)
        created = resp.json()
        self.assertEqual(created["name"], "Masala dosa")
        self.assertEqual(created["calories"], 350)
        food_id = created["id"]

        older = _ms(datetime(2025, 10, 13, 8, 0, tzinfo=timezone.utc))
        resp = client.post("/api/foods", json={"name": "Upma", "calories": 250, "protein": 6, "timestamp": older})
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["timestamp"], older)

        resp = client.get("/api/foods")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([f["name"] for f in resp.json()], ["Masala dosa", "Upma"])

        resp = client.put(f"/api/foods/{food_id}", json={"name": "Plain dosa", "calories": 200, "protein": 5})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["name"], "Plain dosa")
        self.assertEqual(resp.json()["timestamp"], created["timestamp"])

        # Other users can neither see nor delete it.
        intruder = self._login_as("intruder")
        self.assertEqual(intruder.get("/api/foods").json(), [])
        self.assertEqual(intruder.delete(f"/api/foods/{food_id}").status_code, 404)

        self.assertEqual(client.delete("/api/foods/not-an-id").status_code, 400)
        resp = client.delete(f"/api/foods/{food_id}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(client.delete(f"/api/foods/{food_id}").status_code, 404)
        self.assertEqual([f["name"] for f in client.get("/api/foods").json()], ["Upma"])

    def test_create_validation(self) -> None:
        client = self._login_as("validator")
        self.assertEqual(client.post("/api/foods", json={"name": " ", "calories": 100, "protein": 1}).status_code, 422)
        self.assertEqual(client.post("/api/foods", json={"name": "tea", "calories": 0, "protein": 1}).status_code, 422)
        self.assertEqual(client.post("/api/foods", json={"name": "tea", "calories": 50}).status_code, 422)
        self.assertEqual(client.post("/api/foods", json={"name": "tea", "calories": 50, "protein": -1}).status_code, 422)

    def test_summaries(self) -> None:
        client = self._login_as("weekly")
        for name, when, calories, protein in (
            ("poha", datetime(2025, 10, 13, 8, 0), 400, 12.0),
            ("biryani", datetime(2025, 10, 13, 20, 0), 1500, 40.5),
            ("thali", datetime(2025, 10, 15, 13, 0), 700, 25.0),
        ):
            resp = client.post(
                "/api/foods",
                json={
                    "name": name,
                    "calories": calories,
                    "protein": protein,
                    "timestamp": _ms(when.replace(tzinfo=timezone.utc)),
                },
            )
            self.assertEqual(resp.status_code, 201)

        resp = client.get("/api/foods/summary/daily", params={"date": "2025-10-13"})
        self.assertEqual(resp.status_code, 200)
        daily = resp.json()
        self.assertEqual(daily["calories"], 1900)
        self.assertEqual(daily["entry_count"], 2)
        self.assertEqual(daily["label"], "Mon, Oct 13")
        self.assertEqual(daily["goal"], 1650)
        self.assertFalse(daily["within_goal"])

        resp = client.get("/api/foods/summary/days")
        self.assertEqual([d["date"] for d in resp.json()["days"]], ["2025-10-15", "2025-10-13"])

        resp = client.get("/api/foods/summary/weekly", params={"date": "2025-10-19", "tz": "UTC"})
        self.assertEqual(resp.status_code, 200)
        week = resp.json()
        self.assertEqual(week["week_start"], "2025-10-13")
        self.assertEqual(week["calories"], 2600)
        self.assertEqual(week["days_over_goal"], 1)
        self.assertEqual(week["days_under_goal"], 1)
        self.assertEqual(week["highest_day"]["date"], "2025-10-13")

        resp = client.get("/api/foods/summary/weekly", params={"date": "2025-10-13", "tz": "Asia/Kolkata"})
        self.assertEqual(resp.json()["days"][1]["calories"], 1500)

        self.assertEqual(client.get("/api/foods/summary/daily", params={"date": "13/10/2025"}).status_code, 400)
        self.assertEqual(client.get("/api/foods/summary/days", params={"tz": "Nowhere/City"}).status_code, 400)


class TestCalculateCalories(ApiTestCase):
    def setUp(self) -> None:
        self.client = self._login_as("estimator")

    def _post(self, raw_reply, description: str = "2 roti & dal"):
        with mock.patch("caltrack.estimate.api.request_meal_estimate", return_value=raw_reply) as call:
            resp = self.client.post("/api/calculate-calories", json={"mealDescription": description})
        return resp, call

    def test_success(self) -> None:
        items = [{"item": "roti", "quantity": "2", "calories": 240, "protein": 6}]
        reply = json.dumps({"items": items, "total": {"calories": 420, "protein": 15.5}})
        resp, call = self._post(f"```json\n{reply}\n```")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"calories": 420, "protein": 15.5, "breakdown": items})
        call.assert_called_once_with("2 roti & dal")

    def test_breakdown_items_pass_through_in_any_shape(self) -> None:
        items = [{"item": "chai"}, "2 biscuits", {"item": "upma", "quantity": "1 plate", "calories": 0, "protein": -1}]
        reply = json.dumps({"items": items, "total": {"calories": 310, "protein": 7}})
        resp, _ = self._post(reply)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["breakdown"], items)

    def test_fallback_totals(self) -> None:
        resp, _ = self._post("I estimate 450, 20.5 for this meal.")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"calories": 450, "protein": 20.5, "breakdown": []})

    def test_normalization_errors_map_to_500(self) -> None:
        cases = (
            (None, "No response from AI"),
            ('{"items":[],"total":{"calories":0,"protein":5}}', "Invalid calorie value received"),
            ('{"items":[],"total":{"calories":300,"protein":-1}}', "Invalid protein value received"),
            ('{"items":[{"item":"rice","quantity":"300 10"}],"total":{}}', "Invalid calorie value received"),
            ("no numbers here", "Invalid response format from AI"),
        )
        for reply, detail in cases:
            with self.subTest(reply=reply):
                resp, _ = self._post(reply)
                self.assertEqual(resp.status_code, 500)
                self.assertEqual(resp.json()["detail"], detail)

    def test_description_required(self) -> None:
        with mock.patch("caltrack.estimate.api.request_meal_estimate") as call:
            for body in ({}, {"mealDescription": ""}, {"mealDescription": "   "}, {"mealDescription": 42}):
                with self.subTest(body=body):
                    resp = self.client.post("/api/calculate-calories", json=body)
                    self.assertEqual(resp.status_code, 400)
            call.assert_not_called()

    def test_upstream_failures(self) -> None:
        from caltrack.estimate.client import CompletionConfigError, CompletionError

        with mock.patch(
            "caltrack.estimate.api.request_meal_estimate",
            side_effect=CompletionConfigError("OpenAI API key not configured"),
        ):
            resp = self.client.post("/api/calculate-calories", json={"mealDescription": "idli"})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["detail"], "OpenAI API key not configured")

        with mock.patch(
            "caltrack.estimate.api.request_meal_estimate",
            side_effect=CompletionError("Completion API unreachable"),
        ):
            resp = self.client.post("/api/calculate-calories", json={"mealDescription": "idli"})
        self.assertEqual(resp.status_code, 502)

    def test_missing_api_key_end_to_end(self) -> None:
        resp = self.client.post("/api/calculate-calories", json={"mealDescription": "idli"})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["detail"], "OpenAI API key not configured")


if __name__ == "__main__":
    unittest.main()
