import pytest
from fastapi.testclient import TestClient

from app.middleware.error_handler import ExternalServiceError, NotFoundError
from app.schemas.search import SearchDocument, SearchResult


def _doc() -> SearchDocument:
    return SearchDocument(
        id="42", activity_id="42", name="Futbol 5", category="football", location="Sede Centro"
    )


def test_search(search_client: TestClient, search_service) -> None:
    search_service.search.return_value = SearchResult(total=1, page=1, size=10, docs=[_doc()])

    response = search_client.get(
        "/api/v1/search", params={"query": "  Futbol ", "category": "football"}
    )

    assert response.status_code == 200
    assert response.json()["total"] == 1
    query = search_service.search.call_args.args[0]
    assert query.text == "futbol"
    assert query.category == "football"
    assert query.sort == "start_dt asc"


@pytest.mark.parametrize(
    "params",
    [
        {"size": 101},
        {"size": 0},
        {"page": 0},
        {"date": "10/11/2025"},
        {"sort": "name; drop"},
    ],
)
def test_invalid_parameters_are_rejected(search_client: TestClient, search_service, params) -> None:
    response = search_client.get("/api/v1/search", params=params)

    assert response.status_code == 400
    search_service.search.assert_not_called()


def test_max_page_size_is_accepted(search_client: TestClient, search_service) -> None:
    search_service.search.return_value = SearchResult(total=0, page=1, size=100)

    assert search_client.get("/api/v1/search", params={"size": 100}).status_code == 200


def test_index_outage_is_a_502(search_client: TestClient, search_service) -> None:
    search_service.search.side_effect = ExternalServiceError("Search index unavailable", service="solr")

    response = search_client.get("/api/v1/search")

    assert response.status_code == 502
    assert response.json()["error"]["service"] == "solr"


def test_get_document(search_client: TestClient, search_service) -> None:
    search_service.get_document.return_value = _doc()

    response = search_client.get("/api/v1/search/documents/42")

    assert response.status_code == 200
    assert response.json()["name"] == "Futbol 5"


def test_get_missing_document(search_client: TestClient, search_service) -> None:
    search_service.get_document.side_effect = NotFoundError("Document", "43")

    assert search_client.get("/api/v1/search/documents/43").status_code == 404


def test_health(search_client: TestClient) -> None:
    response = search_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
