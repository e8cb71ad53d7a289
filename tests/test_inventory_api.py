import unittest

from tests.helpers import GARAGE_ID, OTHER_GARAGE_ID, ApiTestCase


class TestInventoryApi(ApiTestCase):

    def test_create_and_get(self):
        part = self.create_inventory_part(partNumber="BP-100", purchasePrice=20, sellingPrice=35)
        self.assertEqual(part["garageId"], GARAGE_ID)
        self.assertEqual(part["stockStatus"], "in-stock")
        self.assertEqual(part["profitMarginPct"], 75.0)
        self.assertEqual(part["lowStockThreshold"], 5)

        response = self.client.get(f"{self.api}/inventory/{part['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["partNumber"], "BP-100")

    def test_stock_status(self):
        low = self.create_inventory_part(onHandStock=3)
        empty = self.create_inventory_part(onHandStock=0)
        self.assertEqual(low["stockStatus"], "low-stock")
        self.assertEqual(empty["stockStatus"], "out-of-stock")

        response = self.client.get(f"{self.api}/inventory", params={"stockStatus": "low-stock"})
        self.assertEqual([part["id"] for part in response.json()], [low["id"]])

    def test_duplicate_part_number(self):
        self.create_inventory_part(partNumber="OF-7")
        response = self.client.post(
            f"{self.api}/inventory",
            json={"garageId": GARAGE_ID, "partNumber": "OF-7", "partName": "Oil filter", "category": "Filters"},
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], 'A part with part number "OF-7" already exists')

        self.create_inventory_part(garage_id=OTHER_GARAGE_ID, partNumber="OF-7")

    def test_search_and_category(self):
        self.create_inventory_part(partName="Oil filter", category="Filters", make="Hiflo")
        self.create_inventory_part(partName="Air filter", category="Filters", make="K&N")
        self.create_inventory_part()

        response = self.client.get(f"{self.api}/inventory", params={"category": "Filters"})
        self.assertEqual(len(response.json()), 2)

        response = self.client.get(f"{self.api}/inventory", params={"search": "hiflo"})
        self.assertEqual([part["partName"] for part in response.json()], ["Oil filter"])

    def test_partial_update(self):
        part = self.create_inventory_part(location="Shelf A")
        response = self.client.patch(f"{self.api}/inventory/{part['id']}", json={"onHandStock": 0})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["stockStatus"], "out-of-stock")
        self.assertEqual(response.json()["location"], "Shelf A")

        response = self.client.patch(f"{self.api}/inventory/{part['id']}", json={"sellingPrice": None})
        self.assertEqual(response.status_code, 400)

    def test_delete(self):
        part = self.create_inventory_part()
        self.assertEqual(self.client.delete(f"{self.api}/inventory/{part['id']}").status_code, 204)
        response = self.client.get(f"{self.api}/inventory/{part['id']}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "Part not found")

    def test_field_options_follow_usage(self):
        self.create_inventory_part(category="Filters")
        self.create_inventory_part(category="Filters")
        self.create_inventory_part(category="Brakes")
        self.create_inventory_part(garage_id=OTHER_GARAGE_ID, category="Exhaust")

        response = self.client.get(f"{self.api}/inventory/field-options", params={"field": "category"})
        self.assertEqual(response.status_code, 200)
        options = response.json()["options"]
        self.assertEqual([option["value"] for option in options[:3]], ["Filters", "Brakes", "Engine"])
        self.assertEqual(options[0]["usageCount"], 2)
        self.assertEqual(next(o for o in options if o["value"] == "Exhaust")["usageCount"], 0)

    def test_unknown_field_options(self):
        response = self.client.get(f"{self.api}/inventory/field-options", params={"field": "colour"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Unknown field: colour")

    def test_other_garage_inventory_is_hidden(self):
        foreign = self.create_inventory_part(garage_id=OTHER_GARAGE_ID)

        self.assertEqual(self.client.get(f"{self.api}/inventory/{foreign['id']}").status_code, 404)
        self.assertEqual(self.client.delete(f"{self.api}/inventory/{foreign['id']}").status_code, 404)
        response = self.client.get(f"{self.api}/inventory", params={"garageId": OTHER_GARAGE_ID})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(self.client.get(f"{self.api}/inventory").json(), [])


if __name__ == "__main__":
    unittest.main()
