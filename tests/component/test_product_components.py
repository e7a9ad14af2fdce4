"""
Component tests for the product catalog

Seeded catalog: 1 Camisa Oxford, 2 Buzo Canguro, 4 Medias are available;
3 Campera Retirada is not.
"""
import pytest


class TestListProducts:
    def test_lists_only_available_products(self, client):
        response = client.get("/api/products")

        assert response.status_code == 200
        body = response.get_json()
        assert [p["id"] for p in body["data"]] == [1, 2, 4]
        assert body["count"] == 3
        assert body["message"] == "Se encontraron 3 producto(s)"

    def test_products_carry_variants_with_color_and_size(self, client):
        data = client.get("/api/products").get_json()["data"]

        shirt = data[0]
        assert shirt["name"] == "Camisa Oxford"
        assert shirt["price"] == 10
        assert [v["id"] for v in shirt["product_variants"]] == [1, 4]
        assert shirt["product_variants"][0] == {
            "id": 1,
            "stock": 5,
            "colors": {"id": 1, "name": "Blanco"},
            "sizes": {"id": 1, "name": "M"},
        }

    @pytest.mark.parametrize(
        "query, expected",
        [
            ({"name": "camisa"}, [1]),
            ({"name": "CAMISA"}, [1]),
            ({"name": "canguro"}, [2]),
            ({"description": "frisa"}, [2]),
            ({"description": "algodon"}, [1]),
            ({"name": "buzo", "description": "capucha"}, [2]),
            ({"name": "buzo", "description": "algodon"}, []),
            ({"name": "100%"}, [4]),
        ],
    )
    def test_filters_are_partial_and_case_insensitive(self, client, query, expected):
        data = client.get("/api/products", query_string=query).get_json()["data"]

        assert [p["id"] for p in data] == expected

    def test_percent_sign_is_literal(self, client):
        data = client.get("/api/products", query_string={"name": "%"}).get_json()["data"]

        assert [p["id"] for p in data] == [4]

    def test_unavailable_product_not_found_by_name(self, client):
        body = client.get("/api/products", query_string={"name": "campera"}).get_json()

        assert body == {
            "message": "No se encontraron productos con los filtros especificados.",
            "count": 0,
            "data": [],
        }


class TestGetProduct:
    def test_product_detail_includes_category_and_garment_type(self, client):
        response = client.get("/api/products/2")

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["name"] == "Buzo Canguro"
        assert data["categories"] == {"id": 2, "name": "Unisex"}
        assert data["garment_types"] == {"id": 2, "name": "Sudadera con capucha"}
        assert len(data["product_variants"]) == 1

    def test_product_without_classification(self, client):
        data = client.get("/api/products/4").get_json()["data"]

        assert data["categories"] is None
        assert data["garment_types"] is None

    def test_unknown_product_is_404(self, client):
        response = client.get("/api/products/999")

        assert response.status_code == 404
        assert response.get_json() == {"error": "No se encontró ningún producto con el ID 999"}

    @pytest.mark.parametrize("bad_id", ["abc", "²", "99999999999999999999999"])
    def test_invalid_product_id_is_400(self, client, bad_id):
        response = client.get(f"/api/products/{bad_id}")

        assert response.status_code == 400
        assert response.get_json() == {"error": "ID de producto inválido"}
