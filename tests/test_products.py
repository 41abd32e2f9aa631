import pytest

from storefront.models.product import (
    PriceFields,
    ProductAttribute,
    StockConfig,
    StockStatus,
    Variation,
    VariationAttribute,
)
from storefront.services.products import (
    check_stock_sync,
    determine_stock_status,
    stock_config_from_woocommerce,
    synchronize_stock_status,
    validate_price_fields,
    validate_variations,
    variation_from_woocommerce,
)

ADMIN_HEADERS = {"X-Admin-API-Key": "test-admin-key"}

WC_PRODUCT = {
    "id": 77,
    "slug": "ao-thun",
    "type": "simple",
    "price": "150000",
    "regular_price": "150000",
    "sale_price": "",
    "on_sale": False,
    "manage_stock": True,
    "stock_quantity": 0,
    "backorders": "no",
    "backorders_allowed": False,
    "stock_status": "instock",
    "attributes": [],
}


def variation(sku="AO-M", **overrides) -> Variation:
    data = dict(
        sku=sku,
        stock_status=StockStatus.IN_STOCK,
        stock_quantity=3,
        attributes=[VariationAttribute(name="pa_size", value="M")],
    )
    data.update(overrides)
    return Variation(**data)


SIZE = ProductAttribute(name="Size", slug="pa_size", options=["M", "L"], variation=True)


class TestPriceFields:
    def test_regular_product(self):
        result = validate_price_fields(PriceFields(price="100", regular_price="100", sale_price=""))

        assert result.valid
        assert result.errors == []

    def test_sale_product(self):
        result = validate_price_fields(PriceFields(price="80", regular_price="100", sale_price="80", on_sale=True))

        assert result.valid

    @pytest.mark.parametrize(
        "fields, error_code",
        [
            (PriceFields(price="100", regular_price=None), "missing_regular_price"),
            (PriceFields(price="100", regular_price="   "), "missing_regular_price"),
            (PriceFields(price="", regular_price="100"), "missing_price"),
            (PriceFields(price="80", regular_price="100", sale_price=None, on_sale=True), "missing_sale_price"),
            (PriceFields(price="80", regular_price="100", sale_price=" ", on_sale=True), "missing_sale_price"),
            (PriceFields(price="100", regular_price="100", sale_price="80", on_sale=False), "unexpected_sale_price"),
        ],
    )
    def test_rejections(self, fields, error_code):
        result = validate_price_fields(fields)

        assert not result.valid
        assert result.errors == [error_code]

    def test_all_errors_reported(self):
        result = validate_price_fields(PriceFields(on_sale=True))

        assert result.errors == ["missing_regular_price", "missing_price", "missing_sale_price"]


class TestStockStatus:
    @pytest.mark.parametrize(
        "quantity, backorders, expected",
        [
            (5, False, StockStatus.IN_STOCK),
            (1, True, StockStatus.IN_STOCK),
            (0, False, StockStatus.OUT_OF_STOCK),
            (-2, False, StockStatus.OUT_OF_STOCK),
            (None, False, StockStatus.OUT_OF_STOCK),
            (0, True, StockStatus.ON_BACKORDER),
            (None, True, StockStatus.ON_BACKORDER),
        ],
    )
    def test_status_follows_quantity(self, quantity, backorders, expected):
        config = StockConfig(manage_stock=True, stock_quantity=quantity, backorders_allowed=backorders)

        assert determine_stock_status(config) == expected
        assert synchronize_stock_status(config, StockStatus.IN_STOCK) == expected

    @pytest.mark.parametrize("current", list(StockStatus))
    def test_unmanaged_stock_keeps_status(self, current):
        config = StockConfig(manage_stock=False, stock_quantity=0)

        assert synchronize_stock_status(config, current) == current

    @pytest.mark.parametrize("backorders, allowed", [("no", False), ("notify", True), ("yes", True)])
    def test_backorders_setting(self, backorders, allowed):
        config = stock_config_from_woocommerce({"manage_stock": True, "backorders": backorders})

        assert config.backorders_allowed is allowed

    def test_out_of_sync_product(self):
        result = check_stock_sync(77, WC_PRODUCT)

        assert result.current_status == StockStatus.IN_STOCK
        assert result.expected_status == StockStatus.OUT_OF_STOCK
        assert not result.in_sync
        assert not result.updated

    def test_unknown_status_is_out_of_sync(self):
        result = check_stock_sync(77, {"manage_stock": False, "stock_quantity": 4, "stock_status": "discontinued"})

        assert result.current_status is None
        assert result.expected_status == StockStatus.IN_STOCK
        assert not result.in_sync


class TestVariations:
    def test_valid_variations(self):
        result = validate_variations([variation("AO-M"), variation("AO-L")], [SIZE])

        assert result.valid
        assert result.errors == []

    def test_attribute_matched_by_name(self):
        result = validate_variations([variation(attributes=[VariationAttribute(name="Size", value="L")])], [SIZE])

        assert result.valid

    @pytest.mark.parametrize(
        "variations, error_code",
        [
            ([variation("AO-M"), variation("AO-M")], "duplicate_sku"),
            ([variation("  ")], "missing_sku"),
            ([variation(stock_status=None)], "missing_stock_status"),
            ([variation(stock_quantity=-1)], "invalid_stock_quantity"),
            ([variation(attributes=[])], "missing_variation_attributes"),
            ([variation(attributes=[VariationAttribute(name="pa_size", value="")])], "missing_variation_attributes"),
            ([variation(attributes=[VariationAttribute(name="pa_color", value="red")])], "unknown_variation_attribute"),
        ],
    )
    def test_rejections(self, variations, error_code):
        result = validate_variations(variations, [SIZE])

        assert not result.valid
        assert result.errors == [error_code]

    def test_zero_stock_quantity_is_valid(self):
        assert validate_variations([variation(stock_quantity=0)]).valid

    def test_attributes_not_checked_without_product_attributes(self):
        result = validate_variations([variation(attributes=[VariationAttribute(name="pa_color", value="red")])])

        assert result.valid

    def test_errors_reported_once(self):
        result = validate_variations([variation("A"), variation("A"), variation("A", stock_status=None)])

        assert result.errors == ["duplicate_sku", "missing_stock_status"]

    def test_variation_from_woocommerce(self):
        parsed = variation_from_woocommerce({
            "id": 9,
            "sku": "AO-M",
            "stock_status": "onbackorder",
            "stock_quantity": None,
            "attributes": [{"id": 1, "name": "Size", "option": "M"}],
        })

        assert parsed.stock_status == StockStatus.ON_BACKORDER
        assert parsed.attributes == [VariationAttribute(name="Size", value="M")]


class TestProductEndpoints:
    def test_integrity_of_simple_product(self, client, wc_service):
        wc_service.get_product.return_value = dict(WC_PRODUCT)

        response = client.get("/api/v1/products/77/integrity")

        assert response.status_code == 200
        body = response.json()
        assert body["price"] == {"valid": True, "errors": []}
        assert body["stock"]["expected_status"] == "OUT_OF_STOCK"
        assert body["stock"]["in_sync"] is False
        assert body["variations"]["valid"] is True
        wc_service.get_product_variations.assert_not_awaited()

    def test_integrity_of_variable_product(self, client, wc_service):
        wc_service.get_product.return_value = dict(
            WC_PRODUCT,
            type="variable",
            attributes=[{"id": 1, "name": "Size", "options": ["M", "L"], "variation": True}],
        )
        wc_service.get_product_variations.return_value = [
            {"id": 1, "sku": "AO-M", "stock_status": "instock", "attributes": [{"name": "Size", "option": "M"}]},
            {"id": 2, "sku": "AO-M", "stock_status": "instock", "attributes": [{"name": "Color", "option": "Đỏ"}]},
        ]

        response = client.get("/api/v1/products/77/integrity")

        assert response.status_code == 200
        assert response.json()["variations"] == {
            "valid": False,
            "errors": ["duplicate_sku", "unknown_variation_attribute"],
        }
        wc_service.get_product_variations.assert_awaited_once_with(77)

    def test_integrity_of_missing_product(self, client, wc_service):
        response = client.get("/api/v1/products/404/integrity")

        assert response.status_code == 404

    def test_stock_sync_requires_key(self, client):
        response = client.post("/api/v1/products/77/stock/sync")

        assert response.status_code == 403

    def test_stock_sync_updates_and_notifies(self, client, wc_service, notifier):
        wc_service.get_product.return_value = dict(WC_PRODUCT)
        wc_service.update_product_stock_status.return_value = dict(WC_PRODUCT, stock_status="outofstock")

        response = client.post("/api/v1/products/77/stock/sync", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()["updated"] is True
        wc_service.update_product_stock_status.assert_awaited_once_with(77, "outofstock")
        notifier.trigger.assert_called_once_with(
            "inventory",
            "ao-thun",
            {"product_id": 77, "stock_status": "outofstock", "stock_quantity": 0},
        )

    def test_stock_sync_in_sync_is_noop(self, client, wc_service, notifier):
        wc_service.get_product.return_value = dict(WC_PRODUCT, stock_quantity=4)

        response = client.post("/api/v1/products/77/stock/sync", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json() == {
            "product_id": 77,
            "current_status": "IN_STOCK",
            "expected_status": "IN_STOCK",
            "in_sync": True,
            "updated": False,
        }
        wc_service.update_product_stock_status.assert_not_awaited()
        notifier.trigger.assert_not_called()
