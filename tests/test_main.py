import json

import client as client_module
from pages import MockStore
from query import QueryClientRegistry, SessionRegistry

BOOKING = {"id": "b1", "userId": "u1", "providerId": "p1", "status": "PENDING"}
ALICE = {"Authorization": "Bearer alice-token"}
BOB = {"Authorization": "Bearer bob-token"}

# --- Health ---

def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}

def test_upstream_health(client, backend):
    backend.on("GET", "/health", {"status": "ok", "db": "up"})

    response = client.get("/api/health/upstream")

    assert response.status_code == 200
    assert response.json()["upstream"] == {"status": "ok", "db": "up"}

def test_upstream_unreachable_is_bad_gateway(client, backend):
    backend.offline = True

    response = client.get("/api/health/upstream")

    assert response.status_code == 502
    assert response.json() == {"detail": "Something went wrong"}

# --- Auth Page Tests ---

def test_login_requires_email_and_password(client, backend):
    response = client.post("/api/pages/login", json={"email": "jane@example.com", "password": ""})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please enter both email and password"
    assert backend.requests == []

def test_login_returns_token(client, backend):
    backend.on("POST", "/auth/login", {"accessToken": "tok-1", "user": {"id": "u1", "email": "jane@example.com"}})

    response = client.post("/api/pages/login", json={"email": "jane@example.com", "password": "secret"})

    assert response.status_code == 200
    res_json = response.json()
    assert res_json["access_token"] == "tok-1"
    assert res_json["user"]["id"] == "u1"
    assert res_json["redirect"] == "/"
    assert json.loads(backend.requests[0].content) == {"email": "jane@example.com", "password": "secret"}

def test_login_surfaces_server_message(client, backend):
    backend.on("POST", "/auth/login", {"message": "Invalid email or password"}, status=401)

    response = client.post("/api/pages/login", json={"email": "jane@example.com", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"

def test_signup_password_mismatch(client, backend):
    payload = {"email": "jane@example.com", "password": "secret1", "confirmPassword": "secret2"}

    response = client.post("/api/pages/signup", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Passwords do not match"
    assert backend.requests == []

def test_signup_redirects_to_verification(client, backend):
    backend.on("POST", "/auth/signup", {"message": "Verification email sent"}, status=201)
    payload = {
        "userType": "provider",
        "firstName": "Jane",
        "lastName": "Okafor",
        "email": "jane+qh@example.com",
        "phone": "",
        "password": "secret1",
        "confirmPassword": "secret1",
    }

    response = client.post("/api/pages/signup", json=payload)

    assert response.status_code == 200
    assert response.json()["redirect"] == "/verify-email?email=jane%2Bqh%40example.com"
    body = json.loads(backend.calls("POST", "/auth/signup")[0].content)
    assert body == {
        "email": "jane+qh@example.com",
        "password": "secret1",
        "firstName": "Jane",
        "lastName": "Okafor",
        "role": "provider",
    }

def test_forgot_password(client, backend):
    backend.on("POST", "/auth/forgot-password", {"message": "Reset link sent"})

    bad = client.post("/api/pages/forgot-password", json={"email": "not-an-email"})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Please enter a valid email address"

    response = client.post("/api/pages/forgot-password", json={"email": "jane@example.com"})
    assert response.json()["submitted"] is True

def test_reset_password_state(client):
    response = client.post("/api/pages/reset-password/state", json={"password": "Passw0rd!", "confirm_password": "Passw0rd!"})
    assert response.json()["can_submit"] is True

    response = client.post("/api/pages/reset-password/state", json={"password": "Password!", "confirm_password": "Password!"})
    res_json = response.json()
    assert res_json["requirements"]["has_number"] is False
    assert res_json["can_submit"] is False

def test_reset_password_page(client):
    res_json = client.get("/api/pages/reset-password").json()
    assert res_json["email"] == "your account"
    assert res_json["has_token"] is False

def test_reset_password_without_token(client, backend):
    response = client.post("/api/pages/reset-password", json={"password": "Passw0rd!", "confirmPassword": "Passw0rd!"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired reset link. Please request a new one."
    assert backend.requests == []

def test_reset_password_submits_to_token_endpoint(client, backend):
    backend.on("POST", "/auth/reset-password/reset-abc", {"message": "Password updated"})

    response = client.post("/api/pages/reset-password", json={
        "token": "reset-abc", "password": "Passw0rd!", "confirmPassword": "Passw0rd!",
    })

    assert response.status_code == 200
    assert response.json()["redirect"] == "/login"
    assert json.loads(backend.requests[0].content) == {"password": "Passw0rd!"}

def test_verify_email_rejects_short_code(client, backend):
    response = client.post("/api/pages/verify-email", json={"email": "jane@example.com", "code": ["1", "2", "3"]})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please enter a valid 6-digit code"
    assert backend.requests == []

def test_verify_email_success(client, backend):
    backend.on("GET", "/auth/verify-email/123456", {"message": "Email verified"})

    response = client.post("/api/pages/verify-email", json={"code": ["1", "2", "3", "4", "5", "6"]})

    assert response.status_code == 200
    assert response.json()["verified"] is True

def test_verify_email_upstream_failure(client, backend):
    backend.on("GET", "/auth/verify-email/654321", {"message": "Token expired"}, status=400)

    response = client.post("/api/pages/verify-email", json={"code": "654 321"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid or expired verification code. Please try again."

def test_resend_verification_cooldown(client, backend):
    backend.on("POST", "/auth/resend-verification", {"message": "Sent"})

    first = client.post("/api/pages/verify-email/resend", json={"email": "jane@example.com"})
    assert first.status_code == 200
    assert first.json()["resend_cooldown"] == 60

    second = client.post("/api/pages/verify-email/resend", json={"email": "jane@example.com"})
    assert second.status_code == 429
    assert len(backend.calls("POST", "/auth/resend-verification")) == 1

    page = client.get("/api/pages/verify-email", params={"email": "jane@example.com"}).json()
    assert page["resend_cooldown"] > 0

def test_resend_verification_failure(client, backend):
    backend.on("POST", "/auth/resend-verification", {"message": "Too many requests"}, status=429)

    response = client.post("/api/pages/verify-email/resend", json={"email": "jane@example.com"})

    assert response.status_code == 429
    assert response.json()["detail"] == "Failed to resend verification email. Please try again."
    # A failed resend does not start the cooldown
    assert client.get("/api/pages/verify-email", params={"email": "jane@example.com"}).json()["resend_cooldown"] == 0

# --- Discovery Page Tests ---

def test_home(client):
    res_json = client.get("/api/pages/home").json()
    assert res_json["location"] == "Nearby"
    assert len(res_json["categories"]) == 8

def test_search_route(client):
    response = client.get("/api/pages/search", params={"q": "plumb", "filter": "providers"})
    assert [r["name"] for r in response.json()["results"]] == ["John D."]

    assert client.get("/api/pages/search", params={"filter": "everything"}).status_code == 422

def test_providers_route(client):
    response = client.get("/api/pages/providers", params={"category": "Plumbing", "available_now": "true"})
    assert [p["id"] for p in response.json()["providers"]] == [1, 4]

    assert client.get("/api/pages/providers", params={"distance": 100}).status_code == 422

def test_contact_provider(client):
    assert client.post("/api/pages/providers/2/contact").json() == {"toast": "Contacting Sarah M...."}
    assert client.post("/api/pages/providers/99/contact").status_code == 404

# --- Booking Page Tests ---

def test_book_page(client):
    res_json = client.get("/api/pages/book/1", params={"tab": "about"}).json()
    assert res_json["active_tab"] == "about"
    assert res_json["provider_name"] == "John D."

def test_book_appointment_requires_selection(client):
    response = client.post("/api/pages/book/1", json={"selectedDate": 16})

    assert response.status_code == 400
    assert response.json()["detail"] == "Please select date and time"

def test_book_appointment(client):
    response = client.post("/api/pages/book/1", json={"selectedDate": 17, "selectedTime": "10:00 AM", "serviceNeeded": "Leaking pipe"})

    assert response.status_code == 200
    res_json = response.json()
    assert res_json["toast"] == "Appointment booked successfully!"
    assert res_json["redirect"] == "/bookings/confirmation"

def test_bookings_cached_per_session(client, backend):
    backend.on("GET", "/users/me/bookings", [BOOKING])

    first = client.get("/api/pages/bookings", headers=ALICE)
    client.get("/api/pages/bookings", headers=ALICE)
    client.get("/api/pages/bookings", headers=BOB)

    assert first.json()["bookings"][0]["providerId"] == "p1"
    calls = backend.calls("GET", "/users/me/bookings")
    assert len(calls) == 2
    assert calls[0].headers["Authorization"] == "Bearer alice-token"
    assert calls[1].headers["Authorization"] == "Bearer bob-token"

def test_create_booking_refreshes_booking_list(client, backend):
    backend.on("GET", "/users/me/bookings", [BOOKING])
    backend.on("POST", "/bookings", {**BOOKING, "id": "b2"}, status=201)

    client.get("/api/pages/bookings", headers=ALICE)
    response = client.post("/api/pages/bookings", headers=ALICE, json={
        "providerId": "p1",
        "serviceId": "s1",
        "scheduledDate": "2024-05-01T09:00:00Z",
        "address": "12 Allen Ave, Ikeja",
        "locationLat": 6.6,
        "locationLng": 3.35,
        "price": 15000,
    })
    client.get("/api/pages/bookings", headers=ALICE)

    assert response.status_code == 200
    assert response.json()["booking"]["id"] == "b2"
    assert len(backend.calls("GET", "/users/me/bookings")) == 2

def test_provider_bookings_with_status(client, backend):
    backend.on("GET", "/providers/me/bookings", [BOOKING])

    response = client.get("/api/pages/bookings", params={"role": "provider", "status": "PENDING"}, headers=ALICE)

    assert response.json()["role"] == "provider"
    assert dict(backend.requests[0].url.params) == {"status": "PENDING"}

def test_cancel_booking_without_body(client, backend):
    backend.on("PATCH", "/bookings/b1/cancel", {**BOOKING, "status": "CANCELLED"})

    response = client.post("/api/pages/bookings/b1/cancel", headers=ALICE)

    assert response.json()["booking"]["status"] == "CANCELLED"

# --- Chat Page Tests ---

def test_chat_page_sorted(client):
    res_json = client.get("/api/pages/chat").json()
    assert [c["id"] for c in res_json["chats"]] == ["2", "1", "3"]

def test_chat_unknown_thread(client):
    assert client.get("/api/pages/chat", params={"active_chat": "42"}).status_code == 404
    assert client.post("/api/pages/chat/42/messages", json={"text": "hi"}).status_code == 404

def test_chat_message_gets_reply(client):
    response = client.post("/api/pages/chat/1/messages", json={"text": "Is 3pm okay?"})

    assert response.status_code == 200
    res_json = response.json()
    assert res_json["message"]["text"] == "Is 3pm okay?"
    assert res_json["message"]["status"] == "sent"

    # The simulated reply lands once the background task has run
    messages = client.get("/api/pages/chat", params={"active_chat": "1"}).json()["messages"]
    assert len(messages) == 6
    assert messages[-1]["sender"] == "provider"
    assert messages[-1]["status"] == "delivered"

def test_chat_blank_message_ignored(client):
    response = client.post("/api/pages/chat/1/messages", json={"text": "   "})

    assert response.json()["message"] is None
    assert len(response.json()["messages"]) == 4

# --- Reviews / Notifications ---

def test_reviews_route(client):
    res_json = client.get("/api/pages/reviews", params={"filter": "with-photos"}).json()
    assert res_json["average_rating"] == "4.4"
    assert [r["id"] for r in res_json["reviews"]] == ["1"]

def test_notifications_routes(client):
    assert client.get("/api/pages/notifications").json()["unread_count"] == 2

    assert client.post("/api/pages/notifications/1/read").status_code == 200
    assert client.post("/api/pages/notifications/99/read").status_code == 404
    assert client.post("/api/pages/notifications/read-all").json() == {"updated": 1}

    res_json = client.get("/api/pages/notifications", params={"filter": "unread"}).json()
    assert res_json["unread_count"] == 0
    assert res_json["notifications"] == []

# --- Profile Page Tests ---

def test_profile_verification(client):
    started = client.post("/api/pages/profile/verification").json()
    assert started["verification_badge"] == "Under Review"

    res_json = client.get("/api/pages/profile").json()
    assert res_json["is_verified"] is True
    assert res_json["trust_score"] == 100

def test_upload_avatar(client, backend):
    backend.on("POST", "/users/me/avatar", {"imageUrl": "https://cdn.test/u1.png"})

    response = client.post("/api/pages/profile/avatar", headers=ALICE, files={"file": ("me.png", b"png-bytes", "image/png")})

    assert response.json() == {"image_url": "https://cdn.test/u1.png"}
    assert b"png-bytes" in backend.requests[0].content

def test_upload_avatar_failure(client, backend):
    backend.on("POST", "/users/me/avatar", {"message": "Unsupported file"}, status=400)

    response = client.post("/api/pages/profile/avatar", files={"file": ("me.gif", b"gif", "image/gif")})

    assert response.status_code == 400
    assert response.json()["detail"] == "Failed to upload profile picture"

def test_upload_documents(client, backend):
    backend.on("POST", "/providers/me/documents", {
        "id": "p1",
        "documents": [{"id": "d1", "type": "CERTIFICATE", "url": "https://cdn.test/d1.pdf"}],
    })

    response = client.post(
        "/api/pages/profile/documents",
        headers=ALICE,
        files=[("files", ("cert.pdf", b"%PDF", "application/pdf"))],
        data={"type": "CERTIFICATE"},
    )

    assert response.status_code == 200
    assert response.json()["documents"][0]["type"] == "CERTIFICATE"
    assert b'name="type"' in backend.requests[0].content

def test_logout_drops_session(client, backend):
    backend.on("GET", "/users/me/bookings", [BOOKING])
    backend.on("POST", "/auth/logout", {"message": "Logged out"})

    client.get("/api/pages/bookings", headers=ALICE)
    response = client.post("/api/pages/logout", headers=ALICE)
    client.get("/api/pages/bookings", headers=ALICE)

    assert response.json()["redirect"] == "/login"
    assert len(backend.calls("GET", "/users/me/bookings")) == 2

def test_delete_account(client, backend):
    backend.on("DELETE", "/users/me", status=204)

    client.get("/api/pages/profile", headers=ALICE)
    response = client.delete("/api/pages/profile", headers=ALICE)

    assert response.status_code == 200
    assert response.json()["redirect"] == "/"
    assert len(client_module.query_clients) == 0
    assert len(client_module.mock_stores) == 0

# --- Admin / Static Pages ---

def test_admin_users_tab(client):
    res_json = client.get("/api/pages/admin", params={"tab": "users", "q": "abuja"}).json()
    assert [u["name"] for u in res_json["users"]] == ["Jane Smith"]

def test_rules_expanded(client):
    res_json = client.get("/api/pages/rules", params=[("expanded", "safety-policies")]).json()
    assert [s["id"] for s in res_json["sections"] if s["expanded"]] == ["safety-policies"]

def test_help(client):
    res_json = client.get("/api/pages/help", params={"q": "safety"}).json()
    assert res_json["items"][0]["id"] == "safety"

# --- Session Isolation Tests ---

def test_notifications_are_per_session(client):
    client.post("/api/pages/notifications/read-all", headers=ALICE)

    assert client.get("/api/pages/notifications", headers=ALICE).json()["unread_count"] == 0
    assert client.get("/api/pages/notifications", headers=BOB).json()["unread_count"] == 2

def test_chat_messages_are_per_session(client):
    client.post("/api/pages/chat/1/messages", headers=ALICE, json={"text": "alice private"})

    bob_messages = client.get("/api/pages/chat", params={"active_chat": "1"}, headers=BOB).json()["messages"]
    assert len(bob_messages) == 4
    assert "alice private" not in [m["text"] for m in bob_messages]

    alice_messages = client.get("/api/pages/chat", params={"active_chat": "1"}, headers=ALICE).json()["messages"]
    assert [m["text"] for m in alice_messages][-2] == "alice private"

def test_verification_is_per_session(client):
    client.post("/api/pages/profile/verification", headers=ALICE)

    assert client.get("/api/pages/profile", headers=ALICE).json()["is_verified"] is True
    assert client.get("/api/pages/profile", headers=BOB).json()["is_verified"] is False

def test_logout_resets_page_state(client, backend):
    backend.on("POST", "/auth/logout", {"message": "Logged out"})
    client.post("/api/pages/notifications/read-all", headers=ALICE)

    client.post("/api/pages/logout", headers=ALICE)

    assert client.get("/api/pages/notifications", headers=ALICE).json()["unread_count"] == 2

def test_sessions_stay_bounded(client, backend, monkeypatch):
    monkeypatch.setattr(client_module, "query_clients", QueryClientRegistry(max_sessions=5))
    monkeypatch.setattr(client_module, "mock_stores", SessionRegistry(MockStore, max_sessions=5))
    backend.on("GET", "/users/me/bookings", [])

    for i in range(50):
        headers = {"Authorization": f"Bearer junk-{i}"}
        assert client.get("/api/pages/bookings", headers=headers).status_code == 200
        assert client.get("/api/pages/notifications", headers=headers).status_code == 200

    assert len(client_module.query_clients) == 5
    assert len(client_module.mock_stores) == 5
