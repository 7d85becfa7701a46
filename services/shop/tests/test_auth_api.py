import os

from fastapi import status


def test_admin_login(client, seeded, admin_credentials):
    username, password = admin_credentials

    response = client.post("/auth/login", json={"slug": seeded.slug, "username": username, "password": password})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["role"] == "ADMIN"
    assert body["shop_slug"] == seeded.slug
    assert body["token_type"] == "bearer"

    me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["sub"] == f"admin-{seeded.slug}"


def test_barber_login(client, seeded):
    response = client.post("/auth/login", json={"slug": seeded.slug, "username": "lucas", "password": "navaja"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["role"] == "BARBER"
    assert response.json()["user_id"] == seeded.lucas_id


def test_wrong_password_is_rejected(client, seeded, admin_credentials):
    username, _ = admin_credentials

    response = client.post("/auth/login", json={"slug": seeded.slug, "username": username, "password": "otra"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Credenciales inválidas"


def test_unknown_shop_is_rejected(client):
    response = client.post("/auth/login", json={"slug": "no-existe", "username": "admin", "password": "x"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_inactive_barber_cannot_login(client, seeded, admin_headers):
    client.put(f"/shops/{seeded.slug}/barbers/{seeded.lucas_id}", json={"active": False}, headers=admin_headers)

    response = client.post("/auth/login", json={"slug": seeded.slug, "username": "lucas", "password": "navaja"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_inactive_shop_cannot_login(client, seeded, superadmin_headers, admin_credentials):
    username, password = admin_credentials
    client.patch(f"/shops/{seeded.slug}/active", json={"active": False}, headers=superadmin_headers)

    response = client.post("/auth/login", json={"slug": seeded.slug, "username": username, "password": password})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_superadmin_login(client):
    response = client.post(
        "/auth/superadmin/login",
        json={"username": os.environ["SUPERADMIN_USER"], "password": os.environ["SUPERADMIN_PASSWORD"]},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["role"] == "SUPERADMIN"
    assert response.json()["shop_slug"] is None


def test_superadmin_wrong_password(client):
    response = client.post(
        "/auth/superadmin/login",
        json={"username": os.environ["SUPERADMIN_USER"], "password": "adivinanza"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_requires_token(client):
    assert client.get("/auth/me").status_code == status.HTTP_401_UNAUTHORIZED
    assert client.get("/auth/me", headers={"Authorization": "Bearer basura"}).status_code == status.HTTP_401_UNAUTHORIZED


def test_admin_of_other_shop_is_forbidden(client, seeded, token_headers):
    headers = token_headers("admin-otro", "ADMIN", "Otro", "otro-local")

    response = client.get(f"/shops/{seeded.slug}", headers=headers)

    assert response.status_code == status.HTTP_403_FORBIDDEN
