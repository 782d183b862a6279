import pytest
from receipt import (InvalidReceiptError, Item, MalformedReceiptError, Receipt, check_receipt,
                     parse_receipt, validate_item, validate_receipt)


@pytest.fixture
def receipt_body():
    return {
        "retailer": "Walgreens",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "08:13",
        "total": "2.65",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"},
            {"shortDescription": "Dasani", "price": "1.40"}
        ]
    }


def test_parse_receipt(receipt_body):
    receipt = parse_receipt(receipt_body)
    assert receipt == Receipt(
        retailer="Walgreens",
        purchase_date="2022-01-02",
        purchase_time="08:13",
        items=(Item("Pepsi - 12-oz", "1.25"), Item("Dasani", "1.40")),
        total="2.65",
    )


def test_parse_receipt_ignores_unknown_attributes(receipt_body):
    receipt_body["cashier"] = "Sam"
    assert parse_receipt(receipt_body).retailer == "Walgreens"


def test_parse_receipt_rejects_non_objects():
    for body in [None, [], "receipt", 12]:
        with pytest.raises(MalformedReceiptError, match="must be a json object"):
            parse_receipt(body)


def test_parse_receipt_rejects_missing_attribute(receipt_body):
    del receipt_body["purchaseTime"]
    with pytest.raises(MalformedReceiptError, match="missing purchaseTime"):
        parse_receipt(receipt_body)


def test_parse_receipt_accepts_empty_items(receipt_body):
    receipt_body["items"] = []
    assert parse_receipt(receipt_body).items == ()


def test_receipt_is_immutable(receipt_body):
    receipt = parse_receipt(receipt_body)
    with pytest.raises(AttributeError):
        receipt.total = "0.00"


def test_validate_receipt_valid(receipt_body):
    assert validate_receipt(parse_receipt(receipt_body)) == []


def test_validate_receipt_retailer_rules(receipt_body):
    for retailer in ["M&M Corner Market", "Shop_Express", "Walmart-Super", "7 Eleven", " "]:
        receipt_body["retailer"] = retailer
        assert validate_receipt(parse_receipt(receipt_body)) == []
    for retailer in ["", "Retailer@123", "Store#1", "Kroger's", "Target\u00a0"]:
        receipt_body["retailer"] = retailer
        assert validate_receipt(parse_receipt(receipt_body)) == [f"invalid retailer: {retailer}"]


def test_validate_receipt_dates(receipt_body):
    for date in ["2024-02-29", "1999-12-31"]:
        receipt_body["purchaseDate"] = date
        assert validate_receipt(parse_receipt(receipt_body)) == []
    for date in ["2023-02-29", "2022-01-32", "2022-00-10", "2022-01-01\n", " 2022-01-01"]:
        receipt_body["purchaseDate"] = date
        assert validate_receipt(parse_receipt(receipt_body)) == [f"invalid purchaseDate: {date}"]


def test_validate_receipt_times(receipt_body):
    for time in ["00:00", "23:59", "14:00"]:
        receipt_body["purchaseTime"] = time
        assert validate_receipt(parse_receipt(receipt_body)) == []
    for time in ["24:00", "12:60", "12:5", "12:05:00"]:
        receipt_body["purchaseTime"] = time
        assert validate_receipt(parse_receipt(receipt_body)) == [f"invalid purchaseTime: {time}"]


def test_validate_receipt_total_rejects_trailing_newline(receipt_body):
    receipt_body["total"] = "2.65\n"
    assert validate_receipt(parse_receipt(receipt_body)) == ["invalid total: 2.65\n"]


def test_validate_item_collects_both_fields():
    assert validate_item(Item("Pepsi & Co", "1.2")) == [
        "invalid item [Pepsi & Co] shortDescription: Pepsi & Co",
        "invalid item [Pepsi & Co] price: 1.2",
    ]


def test_validate_receipt_does_not_stop_at_first_item(receipt_body):
    receipt_body["items"] = [
        {"shortDescription": "ok", "price": "1"},
        {"shortDescription": "fine", "price": "1.00"},
        {"shortDescription": "bad!", "price": "2.00"},
    ]
    assert validate_receipt(parse_receipt(receipt_body)) == [
        "invalid item [ok] price: 1",
        "invalid item [bad!] shortDescription: bad!",
    ]


def test_check_receipt_raises_with_all_errors(receipt_body):
    receipt_body["total"] = "6.4"
    receipt_body["items"] = []
    with pytest.raises(InvalidReceiptError) as excinfo:
        check_receipt(parse_receipt(receipt_body))
    assert excinfo.value.errors == ["invalid total: 6.4", "receipt needs at least one item"]
    assert isinstance(excinfo.value, ValueError)


def test_check_receipt_passes_valid_receipt(receipt_body):
    check_receipt(parse_receipt(receipt_body))
