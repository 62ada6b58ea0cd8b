from osce_admin.utils.statistics_utils import calculate_rating_distribution, calculate_rating_summary


def submit(client, rate: int, name: str = "Dee", feedback: str = "Well organised"):
    return client.post(
        "/api/feedback", json={"name": name, "email": "dee@example.com", "feedback": feedback, "rate": rate}
    )


def test_submit_feedback(client):
    response = submit(client, 5, name="  Dee  ")

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Dee"
    assert data["rate"] == 5
    assert "id" in data


def test_submit_feedback_validation(client):
    assert submit(client, 6).status_code == 422
    assert submit(client, 0).status_code == 422
    assert submit(client, 3, feedback="   ").status_code == 422
    response = client.post("/api/feedback", json={"name": "Dee", "email": "not-an-email", "feedback": "x", "rate": 3})
    assert response.status_code == 422


def test_list_feedback_newest_first(client):
    first = submit(client, 4).json()
    second = submit(client, 2).json()

    ids = [item["id"] for item in client.get("/api/feedback").json()]

    assert ids == [second["id"], first["id"]]


def test_feedback_stats(client):
    for rate in (5, 5, 4, 1):
        submit(client, rate)

    response = client.get("/api/feedback/stats")

    assert response.status_code == 200
    assert response.json() == {
        "total_feedbacks": 4,
        "average_rating": 3.75,
        "rating_distribution": {"rating5": 2, "rating4": 1, "rating3": 0, "rating2": 0, "rating1": 1},
    }


def test_feedback_stats_empty(client):
    data = client.get("/api/feedback/stats").json()

    assert data["total_feedbacks"] == 0
    assert data["average_rating"] == 0
    assert set(data["rating_distribution"].values()) == {0}


def test_update_and_delete_feedback(client):
    created = submit(client, 3).json()

    response = client.put(f"/api/feedback/{created['id']}", json={"rate": 4})
    assert response.status_code == 200
    assert response.json()["rate"] == 4
    assert response.json()["feedback"] == "Well organised"

    assert client.put(f"/api/feedback/{created['id']}", json={}).status_code == 400

    assert client.delete(f"/api/feedback/{created['id']}").json() == {"message": "Feedback deleted successfully"}
    response = client.get(f"/api/feedback/{created['id']}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Feedback not found"


def test_calculate_rating_summary_rounds_average():
    summary = calculate_rating_summary([5, 4, 4])

    assert summary["total_feedbacks"] == 3
    assert summary["average_rating"] == 4.33


def test_calculate_rating_distribution_ignores_out_of_range():
    assert calculate_rating_distribution([5, 7, 1, 1]) == {
        "rating5": 1,
        "rating4": 0,
        "rating3": 0,
        "rating2": 0,
        "rating1": 2,
    }
