"""Tests for the HTTP API."""

import pytest
from httpx import ASGITransport, AsyncClient

from inkforge.api import decks as decks_api
from inkforge.api import health as health_api
from inkforge.main import app
from inkforge.models.card import Requirements


def _missing_catalog():
    raise FileNotFoundError("Card catalog not found")


@pytest.fixture
def use_catalog(monkeypatch):
    """Serve the given cards as the card catalog."""

    def install(cards):
        catalog = tuple(cards)
        monkeypatch.setattr(decks_api, "get_catalog", lambda: catalog)
        monkeypatch.setattr(health_api, "get_catalog", lambda: catalog)

    return install


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestHealthEndpoint:
    async def test_reports_catalog_size(self, client: AsyncClient, use_catalog, vanilla_catalog) -> None:
        use_catalog(vanilla_catalog)

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "cards": len(vanilla_catalog)}

    async def test_healthy_without_catalog(self, client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(health_api, "get_catalog", _missing_catalog)

        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "cards": None}


class TestGenerateDeckEndpoint:
    async def test_generates_deck(self, client: AsyncClient, use_catalog, vanilla_catalog) -> None:
        use_catalog(vanilla_catalog)

        response = await client.post("/decks/generate", json={"inks": ["amber"], "seed": 3})

        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == "success"
        assert body["failure"] is None
        deck = body["data"]
        assert deck["inks"] == ["Amber"]
        assert deck["archetype"] == "default"
        assert deck["total_cards"] == 60
        assert sum(card["count"] for card in deck["cards"]) == 60
        assert all(card["count"] <= 4 for card in deck["cards"])
        assert set(deck["cost_curve"]) == {"Amber"}
        assert deck["import_link"].startswith("https://inktable.net/lor/import")

    async def test_same_seed_same_deck(self, client: AsyncClient, use_catalog, vanilla_catalog) -> None:
        use_catalog(vanilla_catalog)
        request = {"inks": ["Steel"], "archetype": "aggro", "seed": 11}

        first = (await client.post("/decks/generate", json=request)).json()
        second = (await client.post("/decks/generate", json=request)).json()

        assert first["data"]["cards"] == second["data"]["cards"]

    async def test_empty_ink_pool(self, client: AsyncClient, use_catalog, vanilla_catalog) -> None:
        use_catalog(vanilla_catalog)

        response = await client.post("/decks/generate", json={"inks": ["Sapphire"]})

        assert response.status_code == 404
        body = response.json()
        assert body["outcome"] == "known_failure"
        assert body["failure"]["kind"] == "empty_ink_pool"

    async def test_invalid_ink(self, client: AsyncClient, use_catalog, vanilla_catalog) -> None:
        use_catalog(vanilla_catalog)

        response = await client.post("/decks/generate", json={"inks": ["Purple"]})

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_too_many_inks(self, client: AsyncClient, use_catalog, vanilla_catalog) -> None:
        use_catalog(vanilla_catalog)

        response = await client.post(
            "/decks/generate", json={"inks": ["Amber", "Steel", "Ruby"]}
        )

        assert response.status_code == 400
        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_unknown_archetype(self, client: AsyncClient, use_catalog, vanilla_catalog) -> None:
        use_catalog(vanilla_catalog)

        response = await client.post(
            "/decks/generate", json={"inks": ["Amber"], "archetype": "control"}
        )

        assert response.json()["failure"]["kind"] == "invalid_input"

    async def test_no_pickable_candidate(self, client: AsyncClient, use_catalog, card_factory) -> None:
        use_catalog([card_factory("a", cost=1), card_factory("b", cost=2)])

        response = await client.post("/decks/generate", json={"inks": ["Amber"]})

        assert response.json()["failure"]["kind"] == "no_pickable_candidate"

    async def test_retry_budget_exhausted(self, client: AsyncClient, use_catalog, card_factory) -> None:
        needs_ward = Requirements(keywords=frozenset({"Ward"}))
        use_catalog(
            card_factory(f"c{cost}-{n}", cost=cost, requirements=needs_ward)
            for cost in range(1, 6)
            for n in range(4)
        )

        response = await client.post(
            "/decks/generate", json={"inks": ["Amber"], "retry_budget": 1, "seed": 5}
        )

        body = response.json()
        assert body["outcome"] == "known_failure"
        assert body["failure"]["kind"] == "retry_budget_exhausted"
        assert "2 attempts" in body["failure"]["detail"]

    async def test_retry_budget_out_of_range(self, client: AsyncClient, use_catalog, vanilla_catalog) -> None:
        use_catalog(vanilla_catalog)

        response = await client.post(
            "/decks/generate", json={"inks": ["Amber"], "retry_budget": 0}
        )

        assert response.status_code == 422

    async def test_catalog_unavailable(self, client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(decks_api, "get_catalog", _missing_catalog)

        response = await client.post("/decks/generate", json={"inks": ["Amber"]})

        assert response.status_code == 503
        assert response.json()["failure"]["kind"] == "service_unavailable"
