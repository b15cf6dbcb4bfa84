def _create(client, path, **payload):
    r = client.post(path, json=payload)
    assert r.status_code == 201, r.json
    return r.json


def _setup(client):
    dest = _create(client, "/api/destinations", name="India")
    cardio = _create(client, "/api/specialties", name="Cardiology")
    ortho = _create(client, "/api/specialties", name="Orthopedics")
    hospital = _create(client, "/api/hospitals", name="Apollo Chennai", destination_id=dest["id"], city="Chennai")
    return dest, cardio, ortho, hospital


def test_hospital_requires_destination_and_inherits_country(client, login):
    login(client)
    r = client.post("/api/hospitals", json={"name": "Nowhere General"})
    assert r.status_code == 400
    _dest, _c, _o, hospital = _setup(client)
    assert hospital["country"] == "India"


def test_hospital_specialties_replace(client, login):
    login(client)
    _dest, cardio, ortho, hospital = _setup(client)
    url = f"/api/hospitals/{hospital['id']}/specialties"

    r = client.put(url, json={"specialty_ids": [ortho["id"], cardio["id"], cardio["id"]]})
    assert r.status_code == 200
    assert r.json["specialty_ids"] == sorted([cardio["id"], ortho["id"]])
    assert {s["name"] for s in client.get(url).json} == {"Cardiology", "Orthopedics"}

    r = client.put(url, json={"specialty_ids": [cardio["id"]]})
    assert [s["name"] for s in client.get(url).json] == ["Cardiology"]

    r = client.put(url, json={"specialty_ids": [9999]})
    assert r.status_code == 400
    assert [s["name"] for s in client.get(url).json] == ["Cardiology"]


def test_linked_specialty_cannot_be_deleted(client, login):
    login(client)
    _dest, cardio, _ortho, hospital = _setup(client)
    client.put(f"/api/hospitals/{hospital['id']}/specialties", json={"specialty_ids": [cardio["id"]]})

    r = client.delete(f"/api/specialties/{cardio['id']}")
    assert r.status_code == 409
    assert r.json["dependencies"] == ["1 hospital(s)"]


def test_deleting_hospital_clears_its_links(client, login):
    login(client)
    _dest, cardio, _ortho, hospital = _setup(client)
    client.put(f"/api/hospitals/{hospital['id']}/specialties", json={"specialty_ids": [cardio["id"]]})

    assert client.delete(f"/api/hospitals/{hospital['id']}").status_code == 200
    assert client.delete(f"/api/specialties/{cardio['id']}").status_code == 200


def test_doctor_fills_location_from_hospital_and_links_treatments(client, login):
    login(client)
    dest, cardio, _ortho, hospital = _setup(client)
    bypass = _create(client, "/api/treatments", name="Heart Bypass", specialty_id=cardio["id"])
    valve = _create(client, "/api/treatments", name="Valve Replacement", specialty_id=cardio["id"])

    doc = _create(client, "/api/doctors", name="Dr. Rao", hospital_id=hospital["id"], specialty_id=cardio["id"])
    assert doc["destination_id"] == dest["id"]
    assert doc["city"] == "Chennai"

    r = client.put(f"/api/doctor-treatments/{doc['id']}", json={"treatment_ids": [valve["id"], bypass["id"]]})
    assert r.status_code == 200
    assert r.json["count"] == 2
    names = [t["name"] for t in client.get(f"/api/doctor-treatments/{doc['id']}").json]
    assert names == ["Heart Bypass", "Valve Replacement"]

    r = client.delete(f"/api/treatments/{bypass['id']}")
    assert r.status_code == 409
    assert r.json["dependencies"] == ["1 doctor(s)"]

    r = client.delete(f"/api/hospitals/{hospital['id']}")
    assert r.status_code == 409
    assert "1 doctor(s)" in r.json["dependencies"]


def test_doctor_slug_check_alias(client, login):
    login(client)
    _dest, _c, _o, hospital = _setup(client)
    _create(client, "/api/doctors", name="Dr. Mehta", hospital_id=hospital["id"])
    r = client.get("/api/doctor-slug-check/dr-mehta")
    assert r.json["available"] is False
    r = client.get("/api/blog-slug-check/anything")
    assert r.json["available"] is True
