import pytest
from receipt import Item, Receipt
from scoring import (calculate_points, score_item_count, score_item_description, score_items,
                     score_purchase_date, score_purchase_time, score_retailer, score_total)


@pytest.fixture
def target_receipt():
    return Receipt(
        retailer="Target",
        purchase_date="2022-01-01",
        purchase_time="13:01",
        items=(Item("Mountain Dew 12PK", "6.49"),),
        total="6.49",
    )


def test_score_retailer_counts_ascii_alphanumerics():
    assert score_retailer("Target") == 6
    assert score_retailer("M&M Corner Market") == 14
    assert score_retailer("  -_& ") == 0
    assert score_retailer("7-Eleven 24") == 9
    assert score_retailer("Café") == 3


def test_score_total_round_dollar():
    for total in ["0.00", "9.00", "100.00"]:
        assert score_total(total) == 75


def test_score_total_quarters():
    for total in ["1.25", "35.50", "2.75"]:
        assert score_total(total) == 25


def test_score_total_other_cents():
    for cents in range(100):
        fraction = f"{cents:02d}"
        if fraction not in ("00", "25", "50", "75"):
            assert score_total(f"12.{fraction}") == 0


def test_score_item_count():
    for count in range(11):
        items = [Item("Dasani", "1.40")] * count
        assert score_item_count(items) == 5 * (count // 2)


def test_score_item_description_trimmed_length():
    assert score_item_description(Item("Emils Cheese Pizza", "12.25")) == 3
    assert score_item_description(Item("   Klarbrunn 12-PK 12 FL OZ  ", "12.00")) == 3
    assert score_item_description(Item("Mountain Dew 12PK", "6.49")) == 0
    assert score_item_description(Item("Dasani", "1.40")) == 1


def test_score_item_description_rounds_up_exactly():
    assert score_item_description(Item("abc", "15.00")) == 3
    assert score_item_description(Item("abc", "15.01")) == 4
    assert score_item_description(Item("abc", "0.00")) == 0


def test_score_item_description_blank_description():
    assert score_item_description(Item("   ", "10.00")) == 0


def test_score_items():
    items = [Item("Gatorade", "2.25")] * 4
    assert score_items(items) == 10
    assert score_items([Item("Dasani", "1.40"), Item("Pepsi - 12-oz", "1.25")]) == 6


def test_score_purchase_date():
    assert score_purchase_date("2022-01-01") == 6
    assert score_purchase_date("2022-01-31") == 6
    assert score_purchase_date("2022-01-02") == 0
    assert score_purchase_date("2022-03-20") == 0


def test_score_purchase_time_hour_boundaries():
    assert score_purchase_time("14:00") == 10
    assert score_purchase_time("14:33") == 10
    assert score_purchase_time("15:59") == 10
    assert score_purchase_time("13:59") == 0
    assert score_purchase_time("16:00") == 0
    assert score_purchase_time("02:30") == 0


def test_calculate_points_example(target_receipt):
    assert calculate_points(target_receipt) == 12


def test_calculate_points_is_pure(target_receipt):
    assert {calculate_points(target_receipt) for _ in range(5)} == {12}


def test_calculate_points_sums_every_rule():
    receipt = Receipt(
        retailer="M&M Corner Market",
        purchase_date="2022-03-20",
        purchase_time="14:33",
        items=tuple(Item("Gatorade", "2.25") for _ in range(4)),
        total="9.00",
    )
    assert calculate_points(receipt) == 14 + 75 + 10 + 0 + 10
