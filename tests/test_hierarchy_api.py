def create_administration(client, name="Spring 2025 Administration") -> dict:
    response = client.post("/api/administration", json={"name": name})
    assert response.status_code == 201
    return response.json()


def create_track(client, administration_id: int, name="Track 1") -> dict:
    response = client.post("/api/track", json={"name": name, "administration_id": administration_id})
    assert response.status_code == 201
    return response.json()


def test_create_and_get_administration(client):
    administration = create_administration(client, "  Fall 2025 Administration  ")

    assert administration["name"] == "Fall 2025 Administration"
    assert administration["track_ids"] == []

    response = client.get(f"/api/administration/{administration['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Fall 2025 Administration"


def test_create_administration_blank_name(client):
    response = client.post("/api/administration", json={"name": "   "})

    assert response.status_code == 400
    assert response.json()["detail"] == "Name is required and cannot be empty"


def test_administration_not_found(client):
    assert client.get("/api/administration/99").status_code == 404
    assert client.put("/api/administration/99", json={"name": "x"}).status_code == 404
    assert client.delete("/api/administration/99").status_code == 404


def test_update_and_list_administrations(client):
    first = create_administration(client)
    create_administration(client, "Fall 2025 Administration")

    response = client.put(f"/api/administration/{first['id']}", json={"name": "Spring 2026 Administration"})
    assert response.status_code == 200
    assert response.json()["name"] == "Spring 2026 Administration"

    names = [item["name"] for item in client.get("/api/administration").json()]
    assert names == ["Spring 2026 Administration", "Fall 2025 Administration"]


def test_create_track_appends_to_administration(client):
    administration = create_administration(client)
    first = create_track(client, administration["id"], "Track 1")
    second = create_track(client, administration["id"], "Track 2")

    stored = client.get(f"/api/administration/{administration['id']}").json()
    assert stored["track_ids"] == [first["id"], second["id"]]


def test_create_track_unknown_administration(client):
    response = client.post("/api/track", json={"name": "Track 1", "administration_id": 42})

    assert response.status_code == 404
    assert response.json()["detail"] == "Administration not found"


def test_list_tracks_by_administration(client):
    spring = create_administration(client)
    fall = create_administration(client, "Fall 2025 Administration")
    create_track(client, spring["id"], "Track 1")
    create_track(client, fall["id"], "Track 2")

    assert len(client.get("/api/track").json()) == 2
    tracks = client.get("/api/track", params={"administration_id": fall["id"]}).json()
    assert [track["name"] for track in tracks] == ["Track 2"]


def test_move_track_between_administrations(client):
    spring = create_administration(client)
    fall = create_administration(client, "Fall 2025 Administration")
    track = create_track(client, spring["id"])

    response = client.put(f"/api/track/{track['id']}", json={"administration_id": fall["id"]})

    assert response.status_code == 200
    assert response.json()["administration_id"] == fall["id"]
    assert client.get(f"/api/administration/{spring['id']}").json()["track_ids"] == []
    assert client.get(f"/api/administration/{fall['id']}").json()["track_ids"] == [track["id"]]


def test_delete_administration_with_tracks_is_rejected(client):
    administration = create_administration(client)
    track = create_track(client, administration["id"])

    response = client.delete(f"/api/administration/{administration['id']}")
    assert response.status_code == 400

    assert client.delete(f"/api/track/{track['id']}").json() == {"message": "Track deleted successfully"}
    assert client.get(f"/api/administration/{administration['id']}").json()["track_ids"] == []
    response = client.delete(f"/api/administration/{administration['id']}")
    assert response.json() == {"message": "Administration deleted successfully"}


def test_station_crud(client):
    administration = create_administration(client)
    track = create_track(client, administration["id"])

    response = client.post("/api/station", json={"name": "Station 1 - Track 1", "track_id": track["id"]})
    assert response.status_code == 201
    station = response.json()

    assert client.get(f"/api/station/{station['id']}").json()["name"] == "Station 1 - Track 1"
    assert [s["id"] for s in client.get("/api/station", params={"track_id": track["id"]}).json()] == [station["id"]]

    response = client.put(f"/api/station/{station['id']}", json={"name": "Station 1"})
    assert response.json()["name"] == "Station 1"

    # A track with stations cannot be deleted
    assert client.delete(f"/api/track/{track['id']}").status_code == 400

    assert client.delete(f"/api/station/{station['id']}").json() == {"message": "Station deleted successfully"}
    assert client.get(f"/api/station/{station['id']}").status_code == 404
    assert client.delete(f"/api/track/{track['id']}").status_code == 200


def test_station_unknown_track(client):
    response = client.post("/api/station", json={"name": "Station 1", "track_id": 7})

    assert response.status_code == 404
    assert response.json()["detail"] == "Track not found"


def test_update_administration_cannot_set_track_ids(client):
    administration = create_administration(client)
    track = create_track(client, administration["id"])

    response = client.put(f"/api/administration/{administration['id']}", json={"track_ids": [99]})

    assert response.status_code == 422
    assert client.get(f"/api/administration/{administration['id']}").json()["track_ids"] == [track["id"]]
