"""
JSON boundary: status codes, response records and error mapping.
"""

import pytest

from butchercalc import create_app


def create(client, url, payload):
    response = client.post(url, json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]


class TestMaterialRoutes:

    def test_create_list_and_get(self, client):
        material = create(client, "/api/materials", {
            "name": "Beef Chuck", "current_price": 10, "unit_of_measure": "kg",
        })

        listed = client.get("/api/materials").get_json()
        assert listed["success"] is True
        assert [m["id"] for m in listed["data"]] == [material["id"]]
        assert client.get(f"/api/materials/{material['id']}").get_json()["data"]["name"] == "Beef Chuck"

    def test_duplicate_name_is_409(self, client):
        payload = {"name": "Beef Chuck", "current_price": 10, "unit_of_measure": "kg"}
        create(client, "/api/materials", payload)

        response = client.post("/api/materials", json=dict(payload, name="BEEF CHUCK"))

        assert response.status_code == 409
        assert response.get_json() == {
            "success": False,
            "error": "DUPLICATE_NAME",
            "message": "A record with this name already exists",
        }

    def test_include_archived_flag(self, client):
        material = create(client, "/api/materials", {
            "name": "Beef Chuck", "current_price": 10, "unit_of_measure": "kg",
        })
        client.post(f"/api/materials/{material['id']}/archive")

        assert client.get("/api/materials").get_json()["data"] == []
        assert len(client.get("/api/materials?include_archived=true").get_json()["data"]) == 1

    def test_missing_material_is_404(self, client):
        response = client.get("/api/materials/missing")
        assert response.status_code == 404
        assert response.get_json()["error"] == "NOT_FOUND"

    def test_invalid_value_names_field(self, client):
        response = client.post("/api/materials", json={
            "name": "Beef", "current_price": -1, "unit_of_measure": "kg",
        })
        assert response.status_code == 400
        assert response.get_json()["field"] == "current_price"


class TestRecipeRoutes:

    def test_full_flow(self, client):
        beef = create(client, "/api/materials", {"name": "Beef", "current_price": 10, "unit_of_measure": "kg"})
        bag = create(client, "/api/packaging", {"name": "Bag", "unit_price": 0.3, "unit_type": "bag"})
        recipe = create(client, "/api/recipes", {"name": "Sausage", "yield_quantity": 1, "yield_unit": "kg"})

        create(client, f"/api/recipes/{recipe['id']}/ingredients", {
            "material_id": beef["id"], "quantity": 500, "unit": "g",
        })
        row = create(client, f"/api/recipes/{recipe['id']}/packaging", {
            "packaging_material_id": bag["id"], "quantity": 2,
        })

        detail = client.get(f"/api/recipes/{recipe['id']}").get_json()["data"]
        assert detail["total_cost"] == pytest.approx(5.6)

        response = client.delete(f"/api/packaging/{bag['id']}")
        assert response.status_code == 409
        assert response.get_json()["recipe_names"] == ["Sausage"]

        response = client.patch(f"/api/recipes/packaging/{row['id']}", json={"quantity": 3})
        assert response.get_json()["data"]["quantity"] == 3

    def test_duplicate_and_suggested_name(self, client):
        recipe = create(client, "/api/recipes", {"name": "Sausage", "yield_quantity": 1, "yield_unit": "kg"})

        suggested = client.get(f"/api/recipes/{recipe['id']}/duplicate-name").get_json()["data"]["name"]
        copy = create(client, f"/api/recipes/{recipe['id']}/duplicate", {})

        assert suggested == "Sausage (Copy)"
        assert copy["name"] == "Sausage (Copy)"
        available = client.get("/api/recipes/name-available?name=sausage%20(copy)").get_json()["data"]
        assert available == {"available": False}

    def test_favorite_toggle(self, client):
        recipe = create(client, "/api/recipes", {"name": "Sausage", "yield_quantity": 1, "yield_unit": "kg"})
        response = client.post(f"/api/recipes/{recipe['id']}/favorite")
        assert response.get_json()["data"]["is_favorite"] is True

    def test_reorder_requires_list(self, client):
        recipe = create(client, "/api/recipes", {"name": "Sausage", "yield_quantity": 1, "yield_unit": "kg"})
        response = client.put(f"/api/recipes/{recipe['id']}/ingredients/order", json={"ingredient_ids": "x"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "INVALID_VALUE"

    def test_add_ingredient_to_missing_recipe(self, client):
        response = client.post("/api/recipes/missing/ingredients", json={
            "material_id": "whatever", "quantity": 1, "unit": "kg",
        })
        assert response.status_code == 404
        assert response.get_json()["error"] == "RECIPE_NOT_FOUND"

    def test_pricing(self, client):
        recipe = create(client, "/api/recipes", {
            "name": "Sausage", "yield_quantity": 1, "yield_unit": "kg", "prep_time_minutes": 30,
        })
        pricing = client.get(f"/api/recipes/{recipe['id']}/pricing").get_json()["data"]
        assert pricing["labor_cost"] == 12.5


class TestSettingsAndCategoryRoutes:

    def test_settings_seeded_and_updated(self, client):
        keys = [s["key"] for s in client.get("/api/settings").get_json()["data"]]
        assert keys == ["default_vat_rate", "labor_rate_per_hour"]

        response = client.put("/api/settings/default_vat_rate", json={"value": 9})
        assert response.get_json()["data"]["value"] == "9"

    def test_setting_value_required(self, client):
        response = client.put("/api/settings/default_vat_rate", json={})
        assert response.status_code == 400

    def test_category_crud(self, client):
        category = create(client, "/api/categories", {"name": "Beef", "type": "material"})
        assert len(client.get("/api/categories?type=material").get_json()["data"]) == 1

        assert client.delete(f"/api/categories/{category['id']}").status_code == 200
        assert client.get(f"/api/categories/{category['id']}").status_code == 404

    def test_non_object_body_rejected(self, client):
        response = client.post("/api/categories", json=["Beef"])
        assert response.status_code == 400
        assert response.get_json()["field"] == "body"


class TestMalformedPayloads:

    def test_reorder_with_object_ids(self, client):
        recipe = create(client, "/api/recipes", {"name": "Sausage", "yield_quantity": 1, "yield_unit": "kg"})
        response = client.put(f"/api/recipes/{recipe['id']}/ingredients/order", json={"ingredient_ids": [{"a": 1}]})
        assert response.status_code == 400
        assert response.get_json()["field"] == "ingredient_ids"

    def test_add_ingredient_with_list_material_id(self, client):
        recipe = create(client, "/api/recipes", {"name": "Sausage", "yield_quantity": 1, "yield_unit": "kg"})
        response = client.post(f"/api/recipes/{recipe['id']}/ingredients", json={
            "material_id": [1, 2], "quantity": 1, "unit": "kg",
        })
        assert response.status_code == 404
        assert response.get_json()["error"] == "MATERIAL_NOT_FOUND"

    def test_huge_quantity(self, client):
        recipe = create(client, "/api/recipes", {"name": "Sausage", "yield_quantity": 1, "yield_unit": "kg"})
        bag = create(client, "/api/packaging", {"name": "Bag", "unit_price": 0.3, "unit_type": "bag"})
        response = client.post(
            f"/api/recipes/{recipe['id']}/packaging",
            data='{"packaging_material_id": "%s", "quantity": 1%s}' % (bag["id"], "0" * 400),
            content_type="application/json",
        )
        assert response.status_code == 400
        assert response.get_json()["field"] == "quantity"


class TestAppFactory:

    def test_factory_registers_no_exit_hook(self, db_path, monkeypatch):
        hooks = []
        monkeypatch.setattr("atexit.register", lambda func, *args, **kwargs: hooks.append(func))

        app = create_app({"TESTING": True, "DATABASE_PATH": db_path})
        database = app.extensions["butchercalc.database"]
        database.close()

        assert not [hook for hook in hooks if getattr(hook, "__self__", None) is database]
