"""Tests for category and product endpoints."""

import inspect

from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from sitecatalog.domain.entities import AclRecord, SiteMapping
from sitecatalog.infrastructure.repositories import RecordStores
from sitecatalog.main import app


def ids(items: list[dict]) -> list[int]:
    """Extract IDs from response items."""
    return [item["id"] for item in items]


class TestListCategories:
    """Tests for GET /categories."""

    def test_tree_order(self, client: TestClient) -> None:
        """Categories are listed parents first."""
        response = client.get("/categories")
        assert response.status_code == 200
        data = response.json()
        assert ids(data["items"]) == [1, 2, 4, 3]
        assert data["total"] == 4
        assert data["total_pages"] == 1

    def test_paging(self, client: TestClient) -> None:
        """Page parameters cut the tree-ordered list."""
        data = client.get("/categories", params={"page": 2, "page_size": 2}).json()
        assert ids(data["items"]) == [4, 3]
        assert data["total_pages"] == 2

    def test_invalid_page_size(self, client: TestClient) -> None:
        """Out-of-range page sizes are rejected."""
        response = client.get("/categories", params={"page_size": 0})
        assert response.status_code == 422

    def test_acl_by_role_header(self, client: TestClient, stores: RecordStores) -> None:
        """Roles from X-Role-Ids unlock ACL-restricted categories."""
        laptops = stores.categories.get_by_id(3)
        laptops.subject_to_acl = True
        stores.categories.update(laptops)
        stores.acl_records.insert(AclRecord(entity_id=3, user_role_id=2))

        anonymous = client.get("/categories").json()
        granted = client.get("/categories", headers={"X-Role-Ids": "1, 2"}).json()

        assert ids(anonymous["items"]) == [1, 2, 4]
        assert ids(granted["items"]) == [1, 2, 4, 3]

    def test_invalid_role_header(self, client: TestClient) -> None:
        """Malformed role IDs are rejected."""
        response = client.get("/categories", headers={"X-Role-Ids": "admin"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ROLE_IDS"

    def test_site_header(self, client: TestClient, stores: RecordStores) -> None:
        """X-Site-Id selects the site for site-restricted categories."""
        phones = stores.categories.get_by_id(2)
        phones.limited_to_sites = True
        stores.categories.update(phones)
        stores.site_mappings.insert(SiteMapping(entity_id=2, site_id=3))

        default_site = client.get("/categories/1/children").json()
        mapped_site = client.get("/categories/1/children", headers={"X-Site-Id": "3"}).json()

        assert ids(default_site) == [3]
        assert ids(mapped_site) == [2, 3]


class TestGetCategory:
    """Tests for GET /categories/{id} and children."""

    def test_get(self, client: TestClient) -> None:
        """Existing categories are returned."""
        response = client.get("/categories/2")
        assert response.status_code == 200
        assert response.json()["name"] == "Phones"

    def test_not_found(self, client: TestClient) -> None:
        """Unknown categories return 404."""
        response = client.get("/categories/99")
        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "CATEGORY_NOT_FOUND"
        assert "request_id" in data

    def test_root_is_not_a_category(self, client: TestClient) -> None:
        """ID 0 is the root marker, not a category."""
        assert client.get("/categories/0").status_code == 404

    def test_children_of_root(self, client: TestClient) -> None:
        """Children of 0 are the root categories."""
        assert ids(client.get("/categories/0/children").json()) == [1]

    def test_home_page(self, client: TestClient, stores: RecordStores) -> None:
        """Flagged categories are listed for the home page."""
        laptops = stores.categories.get_by_id(3)
        laptops.show_on_home_page = True
        stores.categories.update(laptops)

        assert ids(client.get("/categories/home-page").json()) == [3]


class TestCreateCategory:
    """Tests for POST /categories."""

    def test_create(self, client: TestClient) -> None:
        """A created category is listed under its parent."""
        response = client.post(
            "/categories",
            json={"name": "Tablets", "parent_category_id": 1, "applied_discount_ids": [5]},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 5
        assert data["has_discounts_applied"] is True

        children = client.get("/categories/1/children").json()
        assert ids(children) == [2, 3, 5]

    def test_name_required(self, client: TestClient) -> None:
        """An empty name is rejected."""
        response = client.post("/categories", json={"name": ""})
        assert response.status_code == 422


class TestUpdateCategory:
    """Tests for PUT /categories/{id}."""

    def test_update(self, client: TestClient) -> None:
        """Fields are replaced."""
        response = client.put(
            "/categories/3",
            json={"name": "Notebooks", "parent_category_id": 1, "display_order": -1},
        )
        assert response.status_code == 200
        assert response.json()["parent_reset"] is False
        assert response.json()["category"]["name"] == "Notebooks"

        assert ids(client.get("/categories/1/children").json()) == [3, 2]

    def test_cycle_reported(self, client: TestClient) -> None:
        """Moving a category below its own descendant resets it to root."""
        response = client.put(
            "/categories/1",
            json={"name": "Electronics", "parent_category_id": 4},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["parent_reset"] is True
        assert data["requested_parent_id"] == 4
        assert data["category"]["parent_category_id"] == 0

    def test_not_found(self, client: TestClient) -> None:
        """Unknown categories return 404."""
        response = client.put("/categories/99", json={"name": "Ghost"})
        assert response.status_code == 404


class TestDeleteCategory:
    """Tests for DELETE /categories/{id}."""

    def test_delete_reparents_children(self, client: TestClient, stores: RecordStores) -> None:
        """Children move to the root."""
        response = client.delete("/categories/1")
        assert response.status_code == 204

        assert stores.categories.get_by_id(1).deleted is True
        assert ids(client.get("/categories/0/children").json()) == [2, 3, 4]

    def test_delete_with_children(self, client: TestClient) -> None:
        """The whole subtree is soft-deleted."""
        response = client.delete("/categories/1", params={"delete_children": True})
        assert response.status_code == 204
        assert client.get("/categories").json()["items"] == []

    def test_not_found(self, client: TestClient) -> None:
        """Unknown categories return 404."""
        assert client.delete("/categories/99").status_code == 404


class TestCategoryPath:
    """Tests for GET /products/{id}/category-path."""

    def test_path(self, client: TestClient) -> None:
        """The breadcrumb of the product's category is returned."""
        response = client.get("/products/100/category-path")
        assert response.status_code == 200
        assert response.json() == {
            "product_id": 100,
            "path": "Electronics > Phones > Smartphones",
        }

    def test_unknown_product(self, client: TestClient) -> None:
        """Unknown products return 404."""
        response = client.get("/products/5/category-path")
        assert response.status_code == 404
        assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"


class TestRequestId:
    """Tests for request ID correlation."""

    def test_request_id_echoed(self, client: TestClient) -> None:
        """A provided request ID is echoed back."""
        response = client.get("/categories", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestHandlersRunInThreadpool:
    """Catalog handlers call the blocking service and must not be coroutines."""

    def test_catalog_routes_are_sync(self) -> None:
        """FastAPI runs plain functions in its threadpool, off the event loop."""
        routes = [
            route
            for route in app.routes
            if isinstance(route, APIRoute) and route.path.startswith(("/categories", "/products"))
        ]
        assert routes
        assert not [r.path for r in routes if inspect.iscoroutinefunction(r.endpoint)]
