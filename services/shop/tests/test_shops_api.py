from fastapi import status


def _week(open_day=True):
    names = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]
    return [{"day": name, "open": open_day, "open_time": "10:00", "close_time": "19:00"} for name in names]


def test_superadmin_provisions_shop(client, superadmin_headers):
    response = client.post(
        "/shops/",
        json={"name": "Barbería Norte", "plan": "BASIC", "city": "Córdoba"},
        headers=superadmin_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["shop"]["slug"] == "barberia-norte"
    assert body["admin_user"] == "admin-barberia-norte"
    assert len(body["admin_password"]) == 8

    login = client.post(
        "/auth/login",
        json={"slug": "barberia-norte", "username": body["admin_user"], "password": body["admin_password"]},
    )
    assert login.status_code == status.HTTP_200_OK

    listing = client.get("/shops/", headers=superadmin_headers)
    assert [shop["slug"] for shop in listing.json()] == ["barberia-norte"]


def test_duplicate_shop_is_a_conflict(client, seeded, superadmin_headers):
    response = client.post("/shops/", json={"name": "Barberia El Tano"}, headers=superadmin_headers)

    assert response.status_code == status.HTTP_409_CONFLICT


def test_only_superadmin_provisions(client, admin_headers):
    response = client.post("/shops/", json={"name": "Pirata"}, headers=admin_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_cloud_status(client, superadmin_headers):
    response = client.get("/shops/status", headers=superadmin_headers)

    assert response.json() == {"status": "online"}


def test_plan_change_rederives_features_and_keeps_token(client, seeded, superadmin_headers, admin_headers):
    client.put(
        f"/shops/{seeded.slug}/settings",
        json={"payment_gateway_token": "tok_123"},
        headers=admin_headers,
    )

    response = client.put(f"/shops/{seeded.slug}/plan", json={"plan": "FREE"}, headers=superadmin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["plan"] == "FREE"

    features = client.get(f"/shops/{seeded.slug}", headers=admin_headers).json()["features"]
    assert features["inventory"] is False
    assert features["multi_branch"] is False
    assert features["payment_gateway_token"] == "tok_123"


def test_invalid_plan_is_rejected(client, seeded, superadmin_headers):
    response = client.put(f"/shops/{seeded.slug}/plan", json={"plan": "GOLD"}, headers=superadmin_headers)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_public_profile_hides_credentials(client, seeded):
    response = client.get(f"/shops/{seeded.slug}/public")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert "admin_password_hash" not in body
    assert "admin_user" not in body
    assert "payment_gateway_token" not in body["features"]
    assert {barber["name"] for barber in body["barbers"]} == {"Lucas", "Marta", "Sofía"}
    assert all("password_hash" not in barber for barber in body["barbers"])


def test_inactive_shop_is_hidden(client, seeded, superadmin_headers):
    client.patch(f"/shops/{seeded.slug}/active", json={"active": False}, headers=superadmin_headers)

    assert client.get(f"/shops/{seeded.slug}/public").status_code == status.HTTP_404_NOT_FOUND
    assert (
        client.get(f"/shops/{seeded.slug}/availability", params={"date": "2030-01-15"}).status_code
        == status.HTTP_404_NOT_FOUND
    )


def test_availability_for_future_date(client, seeded):
    response = client.get(f"/shops/{seeded.slug}/availability", params={"date": "2030-01-15"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["slots"] == [
        "09:00", "10:00", "11:00", "12:00", "14:00", "15:00", "16:00", "17:00", "18:00", "19:00",
    ]


def test_availability_can_follow_opening_hours(client, seeded):
    # 2030-01-20 es domingo; el local cierra los domingos por defecto
    response = client.get(
        f"/shops/{seeded.slug}/availability",
        params={"date": "2030-01-20", "respect_opening_hours": True},
    )

    assert response.json()["slots"] == []


def test_admin_view_has_no_password_hashes(client, seeded, admin_headers):
    body = client.get(f"/shops/{seeded.slug}", headers=admin_headers).json()

    assert "admin_password_hash" not in body
    assert all("password_hash" not in barber for barber in body["barbers"])
    assert body["revision"] == seeded.revision


def test_settings_update_uses_revision(client, seeded, admin_headers):
    stale = client.put(
        f"/shops/{seeded.slug}/settings",
        json={"revision": seeded.revision - 1, "description": "vieja"},
        headers=admin_headers,
    )
    assert stale.status_code == status.HTTP_409_CONFLICT

    fresh = client.put(
        f"/shops/{seeded.slug}/settings",
        json={"revision": seeded.revision, "description": "Cortes y barba", "timezone": "America/Argentina/Buenos_Aires"},
        headers=admin_headers,
    )
    assert fresh.status_code == status.HTTP_200_OK
    assert fresh.json()["description"] == "Cortes y barba"
    assert fresh.json()["revision"] == seeded.revision + 1


def test_settings_reject_incomplete_week(client, seeded, admin_headers):
    response = client.put(
        f"/shops/{seeded.slug}/settings",
        json={"opening_hours": _week()[:6]},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_payment_token_requires_gateway_feature(client, seeded, superadmin_headers, admin_headers):
    client.put(f"/shops/{seeded.slug}/plan", json={"plan": "BASIC"}, headers=superadmin_headers)

    response = client.put(
        f"/shops/{seeded.slug}/settings",
        json={"payment_gateway_token": "tok_123"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Requiere Plan Superior (Cobros online)"


def _branch_id(client, seeded, admin_headers, name):
    branches = client.get(f"/shops/{seeded.slug}", headers=admin_headers).json()["branches"]
    return next(branch["id"] for branch in branches if branch["name"] == name)


def test_branch_rename_cascades(client, seeded, admin_headers):
    client.put(
        f"/shops/{seeded.slug}/inventory/{seeded.shampoo_id}/stock",
        json={"branch": "Centro", "stock": 4},
        headers=admin_headers,
    )
    client.put(f"/shops/{seeded.slug}/schedules/Centro", json={"schedule": _week()}, headers=admin_headers)
    branch_id = _branch_id(client, seeded, admin_headers, "Centro")

    response = client.put(
        f"/shops/{seeded.slug}/branches/{branch_id}",
        json={"name": "Centro Histórico"},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    shop = client.get(f"/shops/{seeded.slug}", headers=admin_headers).json()
    sofia = next(barber for barber in shop["barbers"] if barber["id"] == seeded.sofia_id)
    assert sofia["branch"] == "Centro Histórico"
    assert list(shop["branch_schedules"]) == ["Centro Histórico"]
    shampoo = next(item for item in shop["inventory"] if item["id"] == seeded.shampoo_id)
    assert shampoo["branch_stock"]["Centro Histórico"]["stock"] == 4
    assert "Centro" not in shampoo["branch_stock"]


def test_branch_names_are_checked(client, seeded, admin_headers):
    reserved = client.post(f"/shops/{seeded.slug}/branches", json={"name": "casa central"}, headers=admin_headers)
    assert reserved.status_code == status.HTTP_400_BAD_REQUEST

    duplicate = client.post(f"/shops/{seeded.slug}/branches", json={"name": "CENTRO"}, headers=admin_headers)
    assert duplicate.status_code == status.HTTP_409_CONFLICT


def test_branch_with_barbers_cannot_be_removed(client, seeded, admin_headers):
    branch_id = _branch_id(client, seeded, admin_headers, "Centro")

    response = client.delete(f"/shops/{seeded.slug}/branches/{branch_id}", headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_remove_empty_branch(client, seeded, admin_headers):
    created = client.post(f"/shops/{seeded.slug}/branches", json={"name": "Norte"}, headers=admin_headers)
    assert created.status_code == status.HTTP_201_CREATED

    response = client.delete(f"/shops/{seeded.slug}/branches/{created.json()['id']}", headers=admin_headers)

    assert response.status_code == status.HTTP_204_NO_CONTENT
    names = [branch["name"] for branch in client.get(f"/shops/{seeded.slug}", headers=admin_headers).json()["branches"]]
    assert names == ["Centro"]


def test_branches_require_multi_branch(client, seeded, superadmin_headers, admin_headers):
    client.put(f"/shops/{seeded.slug}/plan", json={"plan": "BASIC"}, headers=superadmin_headers)

    response = client.post(f"/shops/{seeded.slug}/branches", json={"name": "Norte"}, headers=admin_headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_casa_central_schedule_writes_opening_hours(client, seeded, admin_headers):
    response = client.put(
        f"/shops/{seeded.slug}/schedules/Casa Central",
        json={"schedule": _week(open_day=False)},
        headers=admin_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    shop = client.get(f"/shops/{seeded.slug}", headers=admin_headers).json()
    assert all(day["open"] is False for day in shop["opening_hours"])


def test_openapi_version(client):
    response = client.get("/openapi.json")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["openapi"] == "3.0.3"


def test_health(client):
    assert client.get("/health").json()["service"] == "shop"
    assert client.get("/ready").status_code == status.HTTP_200_OK
