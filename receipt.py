import re
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Tuple

REQUIRED_RECEIPT_ATTRIBUTES = ["retailer", "purchaseDate", "purchaseTime", "items", "total"]
REQUIRED_ITEM_ATTRIBUTES = ["shortDescription", "price"]
RECEIPT_DATE_FORMAT = '%Y-%m-%d'
RECEIPT_TIME_FORMAT = '%H:%M'

RETAILER_PATTERN = re.compile(r"[\w\s\-&]+", re.ASCII)
DESCRIPTION_PATTERN = re.compile(r"[\w\s\-]+", re.ASCII)
AMOUNT_PATTERN = re.compile(r"\d+\.\d{2}", re.ASCII)
DATE_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
TIME_SHAPE = re.compile(r"\d{2}:\d{2}", re.ASCII)


class MalformedReceiptError(ValueError):
    """ Raised when a request body does not have the shape of a receipt """


class InvalidReceiptError(ValueError):
    """ Raised when a receipt fails one or more field rules """

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("; ".join(errors))


@dataclass(frozen=True)
class Item:
    short_description: str
    price: str


@dataclass(frozen=True)
class Receipt:
    retailer: str
    purchase_date: str
    purchase_time: str
    items: Tuple[Item, ...]
    total: str


def parse_item(item) -> Item:
    """ Builds an Item from one element of the receipt items list """
    if not isinstance(item, dict):
        raise MalformedReceiptError("Error: invalid receipt item format")
    for attribute in REQUIRED_ITEM_ATTRIBUTES:
        if not isinstance(item.get(attribute), str):
            raise MalformedReceiptError("Error: invalid receipt item format")
    return Item(short_description=item["shortDescription"], price=item["price"])


def parse_receipt(body) -> Receipt:
    """
    Checks the structure of a decoded json body and converts it into a Receipt.
    Only the shape is checked here (attributes present, strings where strings are
    expected, items a list of objects); field contents are left to validate_receipt.
    """
    if not isinstance(body, dict):
        raise MalformedReceiptError("Error: receipt must be a json object")
    for attribute in REQUIRED_RECEIPT_ATTRIBUTES:
        if attribute not in body:
            raise MalformedReceiptError(f"Error: missing {attribute} in receipt")
        if attribute != "items" and not isinstance(body[attribute], str):
            raise MalformedReceiptError(f"Error: invalid {attribute} format")

    if not isinstance(body["items"], list):
        raise MalformedReceiptError("Error: invalid receipt items list format")
    items = tuple(parse_item(item) for item in body["items"])

    return Receipt(
        retailer=body["retailer"],
        purchase_date=body["purchaseDate"],
        purchase_time=body["purchaseTime"],
        items=items,
        total=body["total"],
    )


def matches(pattern: re.Pattern) -> Callable[[str], bool]:
    return lambda value: pattern.fullmatch(value) is not None


def parses_as(shape: re.Pattern, fmt: str) -> Callable[[str], bool]:
    """ Rule accepting values of the exact shape that strptime also accepts """
    def rule(value: str) -> bool:
        if shape.fullmatch(value) is None:
            return False
        try:
            datetime.strptime(value, fmt)
        except ValueError:
            return False
        return True
    return rule


is_valid_retailer = matches(RETAILER_PATTERN)
is_valid_description = matches(DESCRIPTION_PATTERN)
is_valid_amount = matches(AMOUNT_PATTERN)
is_valid_date = parses_as(DATE_SHAPE, RECEIPT_DATE_FORMAT)
is_valid_time = parses_as(TIME_SHAPE, RECEIPT_TIME_FORMAT)


def check_rules(rules, label: str = "") -> List[str]:
    """ Evaluates every (field, value, rule) entry and collects the failures """
    return [f"invalid {label}{field}: {value}" for field, value, rule in rules if not rule(value)]


def validate_item(item: Item) -> List[str]:
    return check_rules([
        ("shortDescription", item.short_description, is_valid_description),
        ("price", item.price, is_valid_amount),
    ], label=f"item [{item.short_description}] ")


def validate_receipt(receipt: Receipt) -> List[str]:
    """
    Applies the field rules to a receipt and its items.

    Every rule is evaluated, so the returned list holds all violations found
    rather than the first one. An empty list means the receipt is valid.
    """
    errors = check_rules([
        ("retailer", receipt.retailer, is_valid_retailer),
        ("purchaseDate", receipt.purchase_date, is_valid_date),
        ("purchaseTime", receipt.purchase_time, is_valid_time),
        ("total", receipt.total, is_valid_amount),
    ])

    if len(receipt.items) < 1:
        errors.append("receipt needs at least one item")

    for item in receipt.items:
        errors.extend(validate_item(item))
    return errors


def check_receipt(receipt: Receipt):
    """ Raises InvalidReceiptError if the receipt breaks any field rule """
    errors = validate_receipt(receipt)
    if errors:
        raise InvalidReceiptError(errors)
