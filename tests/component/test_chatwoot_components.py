"""
Component tests for the Chatwoot surfaces: the inbound webhook and the
human-agent handoff. Outbound calls land on the recording session.
"""
import pytest

HANDOFF_MESSAGE = (
    "La conversación ha sido transferida a un agente humano. "
    "Un miembro de nuestro equipo te atenderá pronto."
)

PLAIN_EVENT = {
    "event": "message_created",
    "message_type": "incoming",
    "content": "Hola, ¿tienen camisas?",
    "conversation": {"id": 12, "status": "open"},
    "sender": {"id": 3, "name": "Ana"},
}

AUTOMATION_EVENT = {
    "event": "automation_event.message_created",
    "id": 12,
    "messages": [
        {"id": 901, "content": "Hola, ¿tienen camisas?", "message_type": 0, "sender": {"name": "Ana"}}
    ],
}


def post_webhook(client, payload):
    return client.post("/api/chatwoot/webhook", json=payload)


class TestWebhookLogMode:
    @pytest.mark.parametrize("payload", [PLAIN_EVENT, AUTOMATION_EVENT])
    def test_incoming_message_is_logged_only(self, client, http_session, payload):
        response = post_webhook(client, payload)

        assert response.status_code == 200
        assert response.mimetype == "text/plain"
        assert response.get_data(as_text=True) == "OK - Evento registrado"
        assert http_session.requests == []

    @pytest.mark.parametrize(
        "payload",
        [
            {**PLAIN_EVENT, "message_type": "outgoing"},
            {**PLAIN_EVENT, "event": "conversation_status_changed"},
            {**PLAIN_EVENT, "content": None},
            {**PLAIN_EVENT, "conversation": None},
            {**AUTOMATION_EVENT, "messages": [{"content": "bot", "message_type": 1}]},
            {**AUTOMATION_EVENT, "messages": []},
            {"event": "message_created"},
        ],
    )
    def test_other_events_are_ignored(self, client, payload):
        response = post_webhook(client, payload)

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "OK - Evento ignorado"

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2, 3]", "null"])
    def test_malformed_body_still_acknowledged(self, client, raw):
        response = client.post("/api/chatwoot/webhook", data=raw, content_type="application/json")

        assert response.status_code == 200
        assert response.get_data(as_text=True).startswith("OK")


class TestWebhookStaticMode:
    @pytest.fixture(autouse=True)
    def static_mode(self, config):
        config.webhook.mode = "static"

    def test_static_reply_is_relayed(self, client, http_session):
        response = post_webhook(client, PLAIN_EVENT)

        assert response.get_data(as_text=True) == "OK"
        calls = http_session.to("/conversations/12/messages")
        assert len(calls) == 1
        assert calls[0]["json"] == {
            "content": "Gracias, ya te respondemos.",
            "message_type": "outgoing",
            "private": False,
        }

    def test_relay_failure_is_swallowed(self, client, http_session, stub_response):
        http_session.respond("/messages", stub_response(401, None, "Unauthorized"))

        response = post_webhook(client, AUTOMATION_EVENT)

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "OK - Error manejado"


class TestWebhookForwardMode:
    @pytest.fixture(autouse=True)
    def forward_mode(self, config):
        config.webhook.mode = "forward"

    def test_agent_answer_is_relayed(self, client, http_session, stub_response):
        # Arrange
        http_session.respond("agent.shop.test", stub_response(200, {"answer": "Sí, tenemos camisas Oxford."}))

        # Act
        response = post_webhook(client, AUTOMATION_EVENT)

        # Assert
        assert response.get_data(as_text=True) == "OK"
        agent_calls = http_session.to("agent.shop.test")
        assert len(agent_calls) == 1
        assert agent_calls[0]["json"] == AUTOMATION_EVENT
        messages = http_session.to("/conversations/12/messages")
        assert [m["json"]["content"] for m in messages] == ["Sí, tenemos camisas Oxford."]

    @pytest.mark.parametrize(
        "agent_response",
        [
            (500, {"error": "boom"}),
            (200, {"no_answer": True}),
            (200, None),
        ],
    )
    def test_agent_failure_is_swallowed(self, client, http_session, stub_response, agent_response):
        status, payload = agent_response
        http_session.respond("agent.shop.test", stub_response(status, payload))

        response = post_webhook(client, PLAIN_EVENT)

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "OK - Error manejado"
        assert http_session.to("/messages") == []


class TestRequestHumanAgent:
    def test_handoff_disables_bot_and_labels(self, client, http_session):
        # Act
        response = client.post(
            "/api/chatwoot/request-human", json={"conversation_id": 15, "reason": "reembolso"}
        )

        # Assert
        assert response.status_code == 200
        assert response.get_json() == {"message": HANDOFF_MESSAGE}
        attributes = http_session.to("/conversations/15/custom_attributes")
        assert attributes[0]["json"] == {"custom_attributes": {"bot": False}}
        labels = http_session.to("/conversations/15/labels")
        assert labels[0]["json"] == {"labels": ["humano", "reembolso"]}

    def test_reason_is_optional(self, client, http_session):
        response = client.post("/api/chatwoot/request-human", json={"conversation_id": 15})

        assert response.status_code == 200
        assert http_session.to("/labels")[0]["json"] == {"labels": ["humano"]}

    def test_invalid_reason_is_400(self, client, http_session):
        response = client.post(
            "/api/chatwoot/request-human", json={"conversation_id": 15, "reason": "aburrido"}
        )

        assert response.status_code == 400
        assert response.get_json() == {
            "error": "Motivo inválido. Debe ser uno de: reembolso, producto_danado, otros"
        }
        assert http_session.requests == []

    @pytest.mark.parametrize("body", [{}, {"conversation_id": 0}, {"conversation_id": "x"}])
    def test_conversation_id_required(self, client, body):
        response = client.post("/api/chatwoot/request-human", json=body)

        assert response.status_code == 400
        assert response.get_json() == {"error": "Se requiere conversation_id"}

    def test_bot_flag_failure_is_502(self, client, http_session, stub_response):
        http_session.respond("/custom_attributes", stub_response(500, None, "boom"))

        response = client.post("/api/chatwoot/request-human", json={"conversation_id": 15})

        assert response.status_code == 502
        assert response.get_json() == {"error": "Error al actualizar el estado del bot"}
        assert http_session.to("/labels") == []

    def test_label_failure_does_not_fail_handoff(self, client, http_session, stub_response):
        http_session.respond("/labels", stub_response(404, None, "not found"))

        response = client.post(
            "/api/chatwoot/request-human", json={"conversation_id": 15, "reason": "otros"}
        )

        assert response.status_code == 200
        assert response.get_json() == {"message": HANDOFF_MESSAGE}
