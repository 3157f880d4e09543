"""
test_dependencies.py — Session-cookie auth dependencies

Signs a real Starlette session cookie (itsdangerous) so get_user,
require_user and require_admin run unmocked.

Called by: pytest
Depends on: wholesale/dependencies.py, conftest.py (anon_client)
"""

import json
from base64 import b64encode

from itsdangerous import TimestampSigner

from wholesale.config import settings


def _login(client, user_id):
    signer = TimestampSigner(str(settings.secret_key))
    cookie = signer.sign(b64encode(json.dumps({"user_id": user_id}).encode())).decode()
    client.cookies.set("session", cookie)


def test_me_with_session(anon_client, test_user, gold_member):
    _login(anon_client, test_user.id)
    user = anon_client.get("/api/auth/me").json()["user"]
    assert user["email"] == "buyer@acme-retail.com"
    assert user["membership"]["tier"]["name"] == "Gold"


def test_require_user_accepts_session(anon_client, test_user):
    _login(anon_client, test_user.id)
    assert anon_client.get("/api/cart").status_code == 200


def test_unknown_user_is_401(anon_client):
    _login(anon_client, 424242)
    assert anon_client.get("/api/cart").status_code == 401


def test_deactivated_user_is_403(db_session, anon_client, test_user):
    test_user.is_active = False
    db_session.commit()
    _login(anon_client, test_user.id)
    resp = anon_client.get("/api/cart")
    assert resp.status_code == 403
    assert resp.json()["error"] == "Account deactivated, contact support"


def test_buyer_cannot_reach_admin_route(anon_client, test_user):
    _login(anon_client, test_user.id)
    assert anon_client.post("/api/quotes/expire-stale").status_code == 403


def test_admin_reaches_admin_route(anon_client, admin_user):
    _login(anon_client, admin_user.id)
    resp = anon_client.post("/api/quotes/expire-stale")
    assert resp.status_code == 200
    assert resp.json() == {"expired": 0}


def test_tampered_cookie_is_ignored(anon_client, test_user):
    _login(anon_client, test_user.id)
    anon_client.cookies.set("session", anon_client.cookies.get("session") + "x")
    assert anon_client.get("/api/cart").status_code == 401


def test_logout_clears_session(anon_client, test_user):
    _login(anon_client, test_user.id)
    assert anon_client.post("/api/auth/logout").json() == {"success": True}
    assert anon_client.get("/api/auth/me").json() == {"user": None}
