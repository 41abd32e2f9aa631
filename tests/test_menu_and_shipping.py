import pytest

from storefront.models.content import WPMenuItem
from storefront.services.menu import build_menu_tree, is_active_path
from storefront.services.shipping import (
    ZONE_HANOI,
    ZONE_HCM,
    ZONE_OTHER_PROVINCES,
    amount_to_free_shipping,
    calculate_shipping_cost,
    get_shipping_zone_for_address,
    qualifies_for_free_shipping,
)


def item(item_id, parent=None):
    return WPMenuItem(id=item_id, label=item_id.upper(), path=f"/{item_id}", parent_id=parent)


class TestBuildMenuTree:
    def test_nested_tree_keeps_input_order(self):
        tree = build_menu_tree([item("a"), item("b"), item("a1", "a"), item("a2", "a"), item("a1x", "a1")])

        assert [node.id for node in tree] == ["a", "b"]
        assert [child.id for child in tree[0].children] == ["a1", "a2"]
        assert tree[0].children[0].children[0].id == "a1x"
        assert tree[1].children == []

    def test_child_listed_before_parent(self):
        tree = build_menu_tree([item("c", "p"), item("p")])

        assert [node.id for node in tree] == ["p"]
        assert tree[0].children[0].id == "c"

    def test_unknown_parent_becomes_root(self):
        tree = build_menu_tree([item("orphan", "missing")])

        assert [node.id for node in tree] == ["orphan"]

    def test_empty(self):
        assert build_menu_tree([]) == []


@pytest.mark.parametrize(
    "item_path, current, expected",
    [
        ("/blog/", "/blog", True),
        ("/", "", True),
        ("/", "/", True),
        ("/blog", "/blog/post", False),
        ("/blog//", "/blog", False),
        ("/shop/ao/", "/shop/ao/", True),
    ],
)
def test_is_active_path(item_path, current, expected):
    assert is_active_path(item_path, current) is expected


class TestShipping:
    def test_zones(self):
        assert get_shipping_zone_for_address("VN", "SG") == ZONE_HCM
        assert get_shipping_zone_for_address("VN", "HN") == ZONE_HANOI
        assert get_shipping_zone_for_address("VN", "DN") == ZONE_OTHER_PROVINCES
        assert get_shipping_zone_for_address("US", "CA") is None

    def test_flat_rate(self):
        assert calculate_shipping_cost(ZONE_HCM, 3000, 100000) == 25000
        assert calculate_shipping_cost(ZONE_HANOI, 0, 100000) == 30000

    @pytest.mark.parametrize(
        "weight, expected",
        [(0, 35000), (500, 35000), (501, 40000), (1000, 40000), (1600, 50000)],
    )
    def test_weight_based(self, weight, expected):
        assert calculate_shipping_cost(ZONE_OTHER_PROVINCES, weight, 100000) == expected

    def test_free_shipping_threshold(self):
        assert calculate_shipping_cost(ZONE_OTHER_PROVINCES, 5000, 500000) == 0
        assert qualifies_for_free_shipping(500000)
        assert not qualifies_for_free_shipping(499999)
        assert amount_to_free_shipping(450000) == 50000
        assert amount_to_free_shipping(600000) == 0

    def test_unknown_zone_costs_nothing(self):
        assert calculate_shipping_cost(None, 1000, 0) == 0

    def test_quote_endpoint(self, client):
        response = client.post(
            "/api/v1/shipping/quote",
            json={"country": "VN", "state": "DN", "weight_grams": 1200, "subtotal": 300000},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["zone"]["name"] == "Tỉnh Thành Khác"
        assert body["cost"] == 45000
        assert body["free_shipping_applied"] is False
        assert body["amount_to_free_shipping"] == 200000
