"""
Component tests for get-or-create client

The call is the session start: it resolves the client by e-mail and
hands back the single active cart every later cart call is scoped to.
"""
import pytest
from sqlalchemy import text


def get_or_create(client, **body):
    return client.post("/api/clients/get-or-create", json=body)


class TestGetOrCreateClient:
    def test_new_client_gets_active_cart(self, client, count_rows):
        # Act
        response = get_or_create(client, name="Ana Pérez", email="ana.perez@gmail.com", phone="+5491155550000")

        # Assert
        assert response.status_code == 200
        body = response.get_json()
        assert set(body) == {"clientId", "cartId", "cartStatus"}
        assert body["cartStatus"] == "active"
        assert count_rows("clients") == 1
        assert count_rows("carts", "client_id = :cid", cid=body["clientId"]) == 1

    def test_is_idempotent_per_email(self, client, count_rows):
        first = get_or_create(client, name="Ana", email="ana@gmail.com").get_json()
        second = get_or_create(client, name="Ana", email="ana@gmail.com").get_json()

        assert first == second
        assert count_rows("clients") == 1
        assert count_rows("carts", "client_id = :cid", cid=first["clientId"]) == 1

    def test_email_is_matched_as_supplied(self, client):
        first = get_or_create(client, name="Ana", email="Ana@Gmail.com").get_json()
        second = get_or_create(client, name="Ana", email="  Ana@Gmail.com ").get_json()

        assert first == second

    def test_existing_mixed_case_email_is_reused(self, client, engine, count_rows):
        # Arrange
        with engine.begin() as conn:
            conn.execute(
                text("INSERT INTO clients (id, name, email) VALUES (50, 'Ana', 'Ana.Perez@Shop.com')")
            )

        # Act
        response = get_or_create(client, name="Ana", email="Ana.Perez@Shop.com")

        # Assert
        assert response.status_code == 200
        assert response.get_json()["clientId"] == 50
        assert count_rows("clients") == 1

    def test_new_phone_updates_existing_client(self, client, engine):
        first = get_or_create(client, name="Luis", email="luis@gmail.com", phone="111").get_json()
        second = get_or_create(client, name="Luis", email="luis@gmail.com", phone="222").get_json()

        assert second["clientId"] == first["clientId"]
        with engine.connect() as conn:
            phone = conn.execute(
                text("SELECT phone FROM clients WHERE id = :id"), {"id": first["clientId"]}
            ).scalar()
        assert phone == "222"

    def test_missing_phone_keeps_stored_phone(self, client_service):
        session = client_service.get_or_create_client("Luis", "luis@gmail.com", "111")
        client_service.get_or_create_client("Luis", "luis@gmail.com", None)

        stored = client_service.client_repo.find_by_email("luis@gmail.com")
        assert stored.id == session.client_id
        assert stored.phone == "111"

    def test_cart_is_usable_for_cart_operations(self, client):
        session = get_or_create(client, name="Eva", email="eva@gmail.com").get_json()

        response = client.post(
            f"/api/carts/{session['cartId']}/items", json={"product_variant_id": 2, "qty": 1}
        )

        assert response.status_code == 201

    def test_non_active_cart_is_not_reused(self, client, engine):
        first = get_or_create(client, name="Eva", email="eva@gmail.com").get_json()
        with engine.begin() as conn:
            conn.execute(text("UPDATE carts SET status = 'ordered' WHERE id = :id"), {"id": first["cartId"]})

        second = get_or_create(client, name="Eva", email="eva@gmail.com").get_json()

        assert second["clientId"] == first["clientId"]
        assert second["cartId"] != first["cartId"]
        assert second["cartStatus"] == "active"

    def test_different_emails_are_different_clients(self, client):
        a = get_or_create(client, name="A", email="a.shopper@gmail.com").get_json()
        b = get_or_create(client, name="B", email="b.shopper@gmail.com").get_json()

        assert a["clientId"] != b["clientId"]
        assert a["cartId"] != b["cartId"]

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"name": "Ana"},
            {"email": "ana@gmail.com"},
            {"name": "", "email": "ana@gmail.com"},
            {"name": "Ana", "email": ""},
        ],
    )
    def test_name_and_email_required(self, client, count_rows, body):
        response = get_or_create(client, **body)

        assert response.status_code == 400
        assert response.get_json() == {"error": "Se requiere nombre y email"}
        assert count_rows("clients") == 0

    def test_malformed_email_is_400(self, client):
        response = get_or_create(client, name="Ana", email="not-an-email")

        assert response.status_code == 400
        assert response.get_json() == {"error": "Email inválido: not-an-email"}
