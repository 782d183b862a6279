import math
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from receipt import Item, Receipt, RECEIPT_DATE_FORMAT, RECEIPT_TIME_FORMAT

POINTS_RETAILER_NAME_ALPHANUM_CHARACTER = 1
POINTS_TOTAL_HAS_NO_CENTS = 50
POINTS_TOTAL_IS_MULTIPLE_OF_QUARTERS = 25
POINTS_ITEMS_COUNT = 5
POINTS_ITEM_DESCRIPTION = Decimal("0.2")
POINTS_ODD_PURCHASE_DAY = 6
POINTS_VALID_PURCHASE_HOUR = 10
REWARD_ITEM_DESCRIPTION_LENGTH_FACTOR = 3
REWARD_HOURS = (14, 15)
QUARTER_CENTS = ("25", "50", "75")


def score_retailer(retailer_name: str) -> int:
    """ One point for every ASCII letter or digit in the retailer name """
    return sum(POINTS_RETAILER_NAME_ALPHANUM_CHARACTER
               for c in retailer_name if c.isascii() and c.isalnum())


def score_total(total: str) -> int:
    """
    Scores the cents of the total. A round dollar amount is also a multiple of
    0.25, so "00" earns both rewards and the other quarters earn only the second.
    """
    cents = total.rsplit(".", 1)[1]
    if cents == "00":
        return POINTS_TOTAL_HAS_NO_CENTS + POINTS_TOTAL_IS_MULTIPLE_OF_QUARTERS
    if cents in QUARTER_CENTS:
        return POINTS_TOTAL_IS_MULTIPLE_OF_QUARTERS
    return 0


def score_item_count(items: Sequence[Item]) -> int:
    return (len(items) // 2) * POINTS_ITEMS_COUNT


def score_item_description(item: Item) -> int:
    length = len(item.short_description.strip())
    if length > 0 and length % REWARD_ITEM_DESCRIPTION_LENGTH_FACTOR == 0:
        return math.ceil(Decimal(item.price) * POINTS_ITEM_DESCRIPTION)
    return 0


def score_items(items: Sequence[Item]) -> int:
    """ Points for pairs of items plus the per-item description points """
    return score_item_count(items) + sum(score_item_description(item) for item in items)


def score_purchase_date(date: str) -> int:
    day = datetime.strptime(date, RECEIPT_DATE_FORMAT).day
    return POINTS_ODD_PURCHASE_DAY if day % 2 != 0 else 0


def score_purchase_time(time: str) -> int:
    # hour equality, so 14:00 scores and 16:00 does not
    hour = datetime.strptime(time, RECEIPT_TIME_FORMAT).hour
    return POINTS_VALID_PURCHASE_HOUR if hour in REWARD_HOURS else 0


def calculate_points(receipt: Receipt) -> int:
    """ Calculates points earned from each component of an already validated receipt """
    points = 0
    points += score_retailer(receipt.retailer)
    points += score_total(receipt.total)
    points += score_items(receipt.items)
    points += score_purchase_date(receipt.purchase_date)
    points += score_purchase_time(receipt.purchase_time)
    return points
