# tests/test_routes/test_admin_routes.py
import pytest
from unittest.mock import AsyncMock

from elite_cards.core.enums import UserRole
from elite_cards.core.exceptions import CardAPIRateLimitError, CardAPITimeoutError, CardAPIUnavailableError, UserNotFoundError
from elite_cards.dependencies import (
    get_card_client,
    get_card_import_service,
    get_store_sync_service,
    get_user_service,
)
from elite_cards.main import app
from elite_cards.schemas.card import CardSearchPage
from elite_cards.services.store_sync_service import PushResult

from conftest import make_card, make_linkage, make_product, make_user


@pytest.fixture
def user_service():
    service = AsyncMock()
    app.dependency_overrides[get_user_service] = lambda: service
    return service


@pytest.fixture
def card_client():
    client = AsyncMock()
    app.dependency_overrides[get_card_client] = lambda: client
    return client


"""
1. User management
"""

def test_admin_routes_reject_merchants(test_client, user_service, merchant_headers):
    response = test_client.get("/api/admin/users", headers=merchant_headers)

    assert response.status_code == 403
    user_service.list_users.assert_not_awaited()


def test_list_users_hides_access_tokens(test_client, user_service, admin_headers):
    user_service.list_users.return_value = [make_user(), make_user("admin-1", "owner-store.myshopify.com", UserRole.ADMIN)]

    response = test_client.get("/api/admin/users", headers=admin_headers)

    assert response.status_code == 200
    users = response.json()["users"]
    assert [u["role"] for u in users] == ["end_user", "admin"]
    assert all("access_token" not in u for u in users)


def test_promote_user(test_client, user_service, admin_headers):
    user_service.update_user_role.return_value = make_user(role=UserRole.ADMIN)

    response = test_client.post(
        "/api/admin/promote-user",
        json={"shopDomain": "card-shop.myshopify.com", "newRole": "admin"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "admin"
    user_service.update_user_role.assert_awaited_once_with("card-shop.myshopify.com", UserRole.ADMIN)


def test_promote_user_with_invalid_role(test_client, user_service, admin_headers):
    response = test_client.post(
        "/api/admin/promote-user",
        json={"shopDomain": "card-shop.myshopify.com", "newRole": "superuser"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    user_service.update_user_role.assert_not_awaited()


def test_promote_unknown_user(test_client, user_service, admin_headers):
    user_service.update_user_role.side_effect = UserNotFoundError("User not found: ghost.myshopify.com")

    response = test_client.post(
        "/api/admin/promote-user",
        json={"shopDomain": "ghost.myshopify.com", "newRole": "admin"},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.json() == {"error": "User not found: ghost.myshopify.com"}


def test_push_to_user(test_client, user_service, admin_headers):
    target = make_user("user-7", "other-shop.myshopify.com")
    user_service.get_user_by_id.return_value = target
    store_sync = AsyncMock()
    store_sync.push_product_by_id.return_value = PushResult(
        product=make_product(), linkage=make_linkage("user-7"), shopify_product_id="777"
    )
    app.dependency_overrides[get_store_sync_service] = lambda: store_sync

    response = test_client.post(
        "/api/admin/push-to-user", json={"productId": "prod-1", "userId": "user-7"}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["shopifyProductId"] == "777"
    store_sync.push_product_by_id.assert_awaited_once_with("prod-1", target)


def test_push_to_unknown_user(test_client, user_service, admin_headers):
    user_service.get_user_by_id.return_value = None
    app.dependency_overrides[get_store_sync_service] = lambda: AsyncMock()

    response = test_client.post(
        "/api/admin/push-to-user", json={"productId": "prod-1", "userId": "ghost"}, headers=admin_headers
    )

    assert response.status_code == 404


"""
2. Card proxy
"""

def test_card_search(test_client, card_client, admin_headers):
    card_client.search_cards.return_value = CardSearchPage(cards=[make_card()], page=1, page_size=50, total=1)

    response = test_client.get("/api/pokemon-tcg/search", params={"q": "name:charizard"}, headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["cards"][0]["id"] == "base1-4"
    assert body["cards"][0]["set"] == "Base"
    assert body["pagination"] == {"page": 1, "pageSize": 50, "total": 1}
    card_client.search_cards.assert_awaited_once_with("name:charizard", page=1, page_size=50)


def test_card_search_by_set(test_client, card_client, admin_headers):
    card_client.get_cards_by_set.return_value = CardSearchPage(cards=[], page=1, page_size=50, total=0)

    response = test_client.get("/api/pokemon-tcg/search", params={"setId": "base1"}, headers=admin_headers)

    assert response.status_code == 200
    card_client.get_cards_by_set.assert_awaited_once_with("base1", page=1, page_size=50)


@pytest.mark.parametrize("error,status", [
    (CardAPITimeoutError("Request timeout"), 504),
    (CardAPIRateLimitError("Rate limit exceeded"), 429),
    (CardAPIUnavailableError("Pokemon TCG API error: 500"), 503),
])
def test_card_api_errors_map_to_status(test_client, card_client, admin_headers, error, status):
    card_client.get_card.side_effect = error

    response = test_client.get("/api/pokemon-tcg/cards/base1-4", headers=admin_headers)

    assert response.status_code == status
    assert response.json() == {"error": error.message}


def test_card_proxy_requires_admin(test_client, card_client, merchant_headers):
    response = test_client.get("/api/pokemon-tcg/sets", headers=merchant_headers)

    assert response.status_code == 403
    card_client.get_sets.assert_not_awaited()


def test_add_card_to_catalog(test_client, admin_headers):
    import_service = AsyncMock()
    import_service.import_card.return_value = make_product(pokemon_card_id="base1-4", is_single=True)
    app.dependency_overrides[get_card_import_service] = lambda: import_service

    response = test_client.post(
        "/api/pokemon-tcg/add-to-catalog",
        json={"pokemonCardId": "base1-4", "createVariants": True},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["product"]["pokemon_card_id"] == "base1-4"
    import_service.import_card.assert_awaited_once_with(
        "base1-4", created_by="admin-1", create_variants=True, auto_price_sync=True
    )
