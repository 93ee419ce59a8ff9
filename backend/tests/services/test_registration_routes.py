"""Registration route tests: register and update-mobile wizards end to end.

Tests cover:
    - Register: mobile -> OTP -> profile creates exactly one complete member
    - The OTP code never appears in any response body
    - Wrong code, expiry, attempt cap; resend invalidates the earlier code
    - Duplicate mobile rejected before any OTP is dispatched
    - Update: pick member -> new mobile -> OTP patches only mobile/updatedAt
    - Step order enforced; unknown wizard is 404
"""

from datetime import timedelta

import samaj_diary.api.routes.registration as registration_routes

BASE = "/api/v1/registration"


async def _start(client, flow="register"):
    response = await client.post(f"{BASE}/wizards", json={"flow": flow})
    assert response.status_code == 201
    return response.json()


def _members(store):
    return store.data.get("members", {})


# --- Register flow ------------------------------------------------------------


async def test_register_happy_path(client, seeded, gateway):
    seeded.data["members"].pop("m1")
    wizard = await _start(client)
    assert wizard["step"] == "collect-mobile"
    wid = wizard["wizard_id"]

    sent = await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "98765 43210"})
    assert sent.status_code == 200
    assert sent.json()["step"] == "otp-sent"
    assert sent.json()["otp_seconds_remaining"] > 0
    code = gateway.last_code()
    assert gateway.sent == [("9876543210", code)]
    assert code not in sent.text

    verified = await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": code})
    assert verified.status_code == 200
    assert verified.json()["step"] == "collect-profile"

    created = await client.post(f"{BASE}/wizards/{wid}/profile", json={
        "name": "रमेश", "father_name": "सीता राम", "village_id": "v1",
    })
    assert created.status_code == 201
    body = created.json()
    assert body["step"] == "done"
    assert body["message"] == "सफलतापूर्वक पंजीकृत।"
    member = body["member"]
    assert member["mobile"] == "9876543210"
    assert member["villageName"] == "Kherwara"
    assert member["fatherName"] == "सीता राम"

    matches = [m for m in _members(seeded).values() if m["mobile"] == "9876543210"]
    assert len(matches) == 1
    assert matches[0]["updatedAt"] > 0
    assert registration_routes._wizards == {}


async def test_registered_mobile_rejected_before_dispatch(client, seeded, gateway):
    wid = (await _start(client))["wizard_id"]

    response = await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9876543210"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "MOBILE_ALREADY_REGISTERED"
    assert gateway.sent == []


async def test_invalid_mobile_gets_localized_message(client, seeded, gateway):
    wid = (await _start(client))["wizard_id"]

    response = await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "12345"})

    assert response.status_code == 400
    assert response.json()["error"]["user_message"] == "कृपया सही 10 अंकों का मोबाइल नंबर डालें"
    assert gateway.sent == []


async def test_wrong_code_then_right_code(client, seeded, gateway):
    wid = (await _start(client))["wizard_id"]
    await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9111111111"})
    code = gateway.last_code()
    wrong = "000000" if code != "000000" else "111111"

    rejected = await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": wrong})
    assert rejected.status_code == 400
    assert rejected.json()["error"]["code"] == "OTP_MISMATCH"

    accepted = await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": code})
    assert accepted.json()["step"] == "collect-profile"


async def test_resend_invalidates_previous_code(client, seeded, gateway):
    wid = (await _start(client))["wizard_id"]
    await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9111111111"})
    first = gateway.last_code()
    await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9111111111"})
    second = gateway.last_code()
    assert len(gateway.sent) == 2

    if first != second:
        stale = await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": first})
        assert stale.status_code == 400
    fresh = await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": second})
    assert fresh.status_code == 200


async def test_expired_code_is_rejected(client, seeded, gateway):
    wid = (await _start(client))["wizard_id"]
    await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9111111111"})
    state = next(iter(registration_routes._wizards.values()))
    state.challenge.expires_at -= timedelta(seconds=301)

    response = await client.post(
        f"{BASE}/wizards/{wid}/otp", json={"code": gateway.last_code()},
    )

    assert response.status_code == 410
    assert response.json()["error"]["code"] == "OTP_EXPIRED"


async def test_attempt_cap(client, seeded, gateway, settings):
    wid = (await _start(client))["wizard_id"]
    await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9111111111"})
    code = gateway.last_code()
    wrong = "000000" if code != "000000" else "111111"

    statuses = [
        (await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": wrong})).status_code
        for _ in range(settings.otp_max_attempts)
    ]
    assert statuses[-1] == 429

    locked = await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": code})
    assert locked.status_code == 429


async def test_gateway_rejection_leaves_wizard_collecting(client, seeded, gateway):
    gateway.accept = False
    wid = (await _start(client))["wizard_id"]

    response = await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9111111111"})

    assert response.status_code == 502
    state = await client.get(f"{BASE}/wizards/{wid}")
    assert state.json()["step"] == "collect-mobile"


async def test_profile_requires_devanagari_names(client, seeded, gateway):
    wid = (await _start(client))["wizard_id"]
    await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9111111111"})
    await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": gateway.last_code()})

    response = await client.post(f"{BASE}/wizards/{wid}/profile", json={
        "name": "Ramesh", "father_name": "सीता राम", "village_id": "v1",
    })

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_NAME_SCRIPT"


async def test_profile_requires_all_fields(client, seeded, gateway):
    wid = (await _start(client))["wizard_id"]
    await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9111111111"})
    await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": gateway.last_code()})

    response = await client.post(f"{BASE}/wizards/{wid}/profile", json={
        "name": "रमेश", "father_name": "", "village_id": "v1",
    })

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_FIELDS"


async def test_profile_before_otp_is_out_of_order(client, seeded):
    wid = (await _start(client))["wizard_id"]

    response = await client.post(f"{BASE}/wizards/{wid}/profile", json={
        "name": "रमेश", "father_name": "सीता राम", "village_id": "v1",
    })

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "WIZARD_STEP_INVALID"
    assert len(_members(seeded)) == 3


async def test_unknown_wizard_is_404(client):
    response = await client.get(f"{BASE}/wizards/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


async def test_cancel_wizard(client):
    wid = (await _start(client))["wizard_id"]
    assert (await client.delete(f"{BASE}/wizards/{wid}")).status_code == 204
    assert (await client.get(f"{BASE}/wizards/{wid}")).status_code == 404


# --- Update flow --------------------------------------------------------------


async def test_update_mobile_happy_path(client, seeded, gateway):
    wizard = await _start(client, "update")
    assert wizard["step"] == "select-member"
    wid = wizard["wizard_id"]

    candidates = await client.get(
        f"{BASE}/wizards/{wid}/candidates", params={"village_id": "v2"},
    )
    assert candidates.json() == [{
        "id": "m2", "name": "अमित", "father_name": "मोहन", "masked_mobile": "******0002",
    }]

    chosen = await client.post(f"{BASE}/wizards/{wid}/member", json={"member_id": "m2"})
    assert chosen.json()["step"] == "collect-mobile"
    assert chosen.json()["member_name"] == "अमित"

    await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9222222222"})
    done = await client.post(f"{BASE}/wizards/{wid}/otp", json={"code": gateway.last_code()})

    assert done.status_code == 200
    assert done.json()["step"] == "done"
    assert done.json()["member"]["mobile"] == "9222222222"
    stored = _members(seeded)["m2"]
    assert stored["mobile"] == "9222222222"
    assert stored["name"] == "अमित"
    assert stored["updatedAt"] > 1


async def test_update_rejects_mobile_of_another_member(client, seeded, gateway):
    wid = (await _start(client, "update"))["wizard_id"]
    await client.post(f"{BASE}/wizards/{wid}/member", json={"member_id": "m2"})

    response = await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9876543210"})

    assert response.status_code == 409
    assert gateway.sent == []


async def test_update_allows_member_to_keep_own_mobile(client, seeded, gateway):
    wid = (await _start(client, "update"))["wizard_id"]
    await client.post(f"{BASE}/wizards/{wid}/member", json={"member_id": "m2"})

    response = await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9000000002"})

    assert response.status_code == 200


async def test_update_member_choice_cannot_address_other_records(client, seeded):
    wid = (await _start(client, "update"))["wizard_id"]

    response = await client.post(
        f"{BASE}/wizards/{wid}/member", json={"member_id": "m1/../../villages/v1"},
    )

    assert response.status_code == 400
    assert "Kherwara" not in response.text
    wizard = await client.get(f"{BASE}/wizards/{wid}")
    assert wizard.json()["step"] == "select-member"


async def test_update_mobile_requires_member_choice(client, seeded, gateway):
    wid = (await _start(client, "update"))["wizard_id"]

    response = await client.post(f"{BASE}/wizards/{wid}/mobile", json={"mobile": "9222222222"})

    assert response.status_code == 409
    assert gateway.sent == []


async def test_deletion_request_link(client, seeded):
    response = await client.post(f"{BASE}/deletion-request", json={
        "name": "रमेश", "father_name": "सीता राम", "mobile": "9876543210", "village_id": "v1",
    })

    assert response.status_code == 200
    url = response.json()["url"]
    assert url.startswith("https://wa.me/919982151938?text=")
    assert "9876543210" in url
