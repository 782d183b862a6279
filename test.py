import json
import uuid
import pytest
from concurrent.futures import ThreadPoolExecutor
from app import create_app, flask_app, parse_args
from receipt import parse_receipt
from scoring import calculate_points
from store import PointsStore

valid_receipts = {
    json.dumps({
        "retailer": "Target",
        "purchaseDate": "2022-01-01",
        "purchaseTime": "13:01",
        "items": [
            {
                "shortDescription": "Mountain Dew 12PK",
                "price": "6.49"
            }, {
                "shortDescription": "Emils Cheese Pizza",
                "price": "12.25"
            }, {
                "shortDescription": "Knorr Creamy Chicken",
                "price": "1.26"
            }, {
                "shortDescription": "Doritos Nacho Cheese",
                "price": "3.35"
            }, {
                "shortDescription": "   Klarbrunn 12-PK 12 FL OZ  ",
                "price": "12.00"
            }
        ],
        "total": "35.35"
    }): 28,
    json.dumps({
        "retailer": "M&M Corner Market",
        "purchaseDate": "2022-03-20",
        "purchaseTime": "14:33",
        "items": [
            {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }, {
                "shortDescription": "Gatorade",
                "price": "2.25"
            }
        ],
        "total": "9.00"
    }): 109,
    json.dumps({
        "retailer": "Walgreens",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "08:13",
        "total": "2.65",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"},
            {"shortDescription": "Dasani", "price": "1.40"}
        ]
    }): 15,
    json.dumps({
        "retailer": "Target",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "13:13",
        "total": "1.25",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"}
        ]
    }): 31,
    json.dumps({
        "retailer": "Target",
        "purchaseDate": "2022-01-01",
        "purchaseTime": "13:01",
        "items": [
            {"shortDescription": "Mountain Dew 12PK", "price": "6.49"}
        ],
        "total": "6.49"
    }): 12
}

required_receipt_attributes = ["retailer", "total", "items", "purchaseDate", "purchaseTime"]


@pytest.fixture
def store():
    return PointsStore()


@pytest.fixture
def app(store):
    app = create_app(store)
    app.config['DEBUG'] = True
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def simple_receipt_skeleton():
    return {
        "retailer": "Target",
        "purchaseDate": "2022-01-02",
        "purchaseTime": "13:13",
        "total": "1.25",
        "items": [
            {"shortDescription": "Pepsi - 12-oz", "price": "1.25"}
        ]
    }


def post_receipt(client, receipt):
    return client.post('/receipts/process', content_type='application/json', data=json.dumps(receipt))


def assert_single_violation(response, violation):
    assert response.status_code == 400
    assert json.loads(response.data) == {"error": "Error: the receipt is invalid", "violations": [violation]}


def test_process_valid_receipts(client):
    for test_json, expected_points in valid_receipts.items():
        expected = {"points": expected_points}
        process_response = client.post('/receipts/process', content_type='application/json', data=test_json)
        assert process_response.status_code == 200
        receipt_id = json.loads(process_response.data)["id"]
        uuid.UUID(receipt_id)
        get_response = client.get(f'/receipts/{receipt_id}/points')
        assert get_response.status_code == 200
        assert expected == json.loads(get_response.data)


def test_process_then_retrieve_matches_direct_score(client):
    for test_json in valid_receipts:
        direct = calculate_points(parse_receipt(json.loads(test_json)))
        receipt_id = json.loads(client.post('/receipts/process', content_type='application/json',
                                            data=test_json).data)["id"]
        assert json.loads(client.get(f'/receipts/{receipt_id}/points').data) == {"points": direct}


def test_process_receipts_unique_ids(client, simple_receipt_skeleton):
    receipt_ids = []
    for i in range(10):
        process_response = post_receipt(client, simple_receipt_skeleton)
        receipt_ids.append(json.loads(process_response.data)["id"])
    assert len(set(receipt_ids)) == len(receipt_ids)


def test_apps_do_not_share_stores(simple_receipt_skeleton):
    first, second = create_app().test_client(), create_app().test_client()
    receipt_id = json.loads(post_receipt(first, simple_receipt_skeleton).data)["id"]
    assert first.get(f'/receipts/{receipt_id}/points').status_code == 200
    assert second.get(f'/receipts/{receipt_id}/points').status_code == 404


def test_module_level_app_serves_requests(simple_receipt_skeleton):
    client = flask_app.test_client()
    receipt_id = json.loads(post_receipt(client, simple_receipt_skeleton).data)["id"]
    assert json.loads(client.get(f'/receipts/{receipt_id}/points').data) == {"points": 31}


def test_process_receipts_unparseable_body(client, store):
    for body in ["not json", "{\"retailer\": ", ""]:
        process_response = client.post('/receipts/process', content_type='application/json', data=body)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == {"error": "Error: receipt must be a json object"}
    for body in [[], "a string", 3, None]:
        process_response = client.post('/receipts/process', content_type='application/json',
                                       data=json.dumps(body))
        assert process_response.status_code == 400
    assert len(store) == 0


def test_process_receipts_missing_attributes(client, simple_receipt_skeleton):
    for attribute in required_receipt_attributes:
        receipt = dict(simple_receipt_skeleton)
        del receipt[attribute]
        process_response = post_receipt(client, receipt)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == {"error": f"Error: missing {attribute} in receipt"}


def test_process_receipts_invalid_retailer_name(client, simple_receipt_skeleton):
    invalid_names = ["", "Target!", "Shop*Name", "Store#1", "Café"]
    for name in invalid_names:
        simple_receipt_skeleton["retailer"] = name
        assert_single_violation(post_receipt(client, simple_receipt_skeleton), f"invalid retailer: {name}")


def test_process_receipts_whitespace_retailer_name(client, simple_receipt_skeleton):
    simple_receipt_skeleton["retailer"] = "   "
    process_response = post_receipt(client, simple_receipt_skeleton)
    receipt_id = json.loads(process_response.data)["id"]
    assert json.loads(client.get(f'/receipts/{receipt_id}/points').data) == {"points": 25}


def test_process_receipts_invalid_purchase_date(client, simple_receipt_skeleton):
    invalid_dates = ["test", "0000-01-01", "2023-15-15", "2023-10-99", "dummydummydummy", "", '9999-99-99',
                     "2022-02-30", "2022-1-1", "20220101"]
    for date in invalid_dates:
        simple_receipt_skeleton["purchaseDate"] = date
        assert_single_violation(post_receipt(client, simple_receipt_skeleton), f"invalid purchaseDate: {date}")


def test_process_receipts_invalid_purchase_time(client, simple_receipt_skeleton):
    invalid_times = ["test", "13:99", "99:13", "99:99", "dummydummydummy", "", '13-13', "24:00", "1:05"]
    for time in invalid_times:
        simple_receipt_skeleton["purchaseTime"] = time
        assert_single_violation(post_receipt(client, simple_receipt_skeleton), f"invalid purchaseTime: {time}")


def test_process_receipts_invalid_total(client, simple_receipt_skeleton):
    invalid_totals = ["test", "0", "333", "", "5.310", ".22", "6.4", "-1.00"]
    for total in invalid_totals:
        simple_receipt_skeleton["total"] = total
        assert_single_violation(post_receipt(client, simple_receipt_skeleton), f"invalid total: {total}")


def test_process_receipts_invalid_attribute_formats_except_items(client, simple_receipt_skeleton):
    invalid_elements = [None, [], 25, 3.88, {}]
    for attribute in required_receipt_attributes:
        if attribute != "items":
            expected = {"error": f"Error: invalid {attribute} format"}
            for elem in invalid_elements:
                receipt = dict(simple_receipt_skeleton, **{attribute: elem})
                process_response = post_receipt(client, receipt)
                assert process_response.status_code == 400
                assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_items_format(client, simple_receipt_skeleton):
    invalid_elements = [None, 25, 3.88, {}, ""]
    expected = {"error": "Error: invalid receipt items list format"}
    for elem in invalid_elements:
        simple_receipt_skeleton["items"] = elem
        process_response = post_receipt(client, simple_receipt_skeleton)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_items_list_length(client, simple_receipt_skeleton):
    simple_receipt_skeleton["items"] = []
    assert_single_violation(post_receipt(client, simple_receipt_skeleton), "receipt needs at least one item")


def test_process_receipts_invalid_item_formats(client, simple_receipt_skeleton):
    expected = {"error": "Error: invalid receipt item format"}
    for elem in [None, 25, 3.88, [], ""]:
        receipt = dict(simple_receipt_skeleton, items=[elem])
        process_response = post_receipt(client, receipt)
        assert process_response.status_code == 400
        assert json.loads(process_response.data) == expected
    for attribute in ["shortDescription", "price"]:
        for elem in [None, 25, 3.88, [], {}]:
            item = {"shortDescription": "Pepsi - 12-oz", "price": "1.25", attribute: elem}
            process_response = post_receipt(client, dict(simple_receipt_skeleton, items=[item]))
            assert process_response.status_code == 400
            assert json.loads(process_response.data) == expected
        process_response = post_receipt(client, dict(simple_receipt_skeleton, items=[
            {k: v for k, v in simple_receipt_skeleton["items"][0].items() if k != attribute}]))
        assert json.loads(process_response.data) == expected


def test_process_receipts_invalid_item_descriptions(client, simple_receipt_skeleton):
    invalid_descriptions = ["", "???", "&&&&", "<<<<>>>>", "\\\\"]
    for description in invalid_descriptions:
        simple_receipt_skeleton["items"][0]["shortDescription"] = description
        assert_single_violation(post_receipt(client, simple_receipt_skeleton),
                                f"invalid item [{description}] shortDescription: {description}")


def test_process_receipts_invalid_item_price(client, simple_receipt_skeleton):
    invalid_prices = ["test", "0", "333", "", "5.310", ".22"]
    for price in invalid_prices:
        simple_receipt_skeleton["items"][0]["price"] = price
        assert_single_violation(post_receipt(client, simple_receipt_skeleton),
                                f"invalid item [Pepsi - 12-oz] price: {price}")


def test_process_receipts_reports_every_violation(client, store):
    receipt = {
        "retailer": "Target!",
        "purchaseDate": "2022-13-01",
        "purchaseTime": "25:00",
        "total": "6.4",
        "items": [
            {"shortDescription": "Pepsi?", "price": "1.2"},
            {"shortDescription": "Dasani", "price": "1.40"}
        ]
    }
    process_response = post_receipt(client, receipt)
    assert process_response.status_code == 400
    assert json.loads(process_response.data)["violations"] == [
        "invalid retailer: Target!",
        "invalid purchaseDate: 2022-13-01",
        "invalid purchaseTime: 25:00",
        "invalid total: 6.4",
        "invalid item [Pepsi?] shortDescription: Pepsi?",
        "invalid item [Pepsi?] price: 1.2",
    ]
    assert len(store) == 0


def test_get_points_nonexistent_id(client):
    for receipt_id in ["test", str(uuid.uuid4()), "12345"]:
        res = client.get(f'/receipts/{receipt_id}/points')
        assert res.status_code == 404
        assert json.loads(res.data) == {'error': f'ERROR: receipt id not found ({receipt_id})'}


def test_get_points_idempotency(client, simple_receipt_skeleton):
    process_response = post_receipt(client, simple_receipt_skeleton)
    receipt_id = json.loads(process_response.data)["id"]
    for i in range(5):
        get_response = client.get(f'/receipts/{receipt_id}/points')
        assert get_response.status_code == 200
        assert json.loads(get_response.data)["points"] == 31


def test_process_receipts_concurrency(client, store, simple_receipt_skeleton):
    params = [simple_receipt_skeleton] * 300

    def test_post(json_param):
        return client.post('/receipts/process', content_type='application/json', json=json_param)

    with ThreadPoolExecutor(max_workers=50) as pool:
        responses = list(pool.map(test_post, params))
    assert all(response.status_code == 200 for response in responses)
    assert len({json.loads(response.data)["id"] for response in responses}) == len(params)
    assert len(store) == len(params)


def test_get_points_concurrency(client, simple_receipt_skeleton):
    process_response = post_receipt(client, simple_receipt_skeleton)
    receipt_id = json.loads(process_response.data)["id"]
    params = [receipt_id] * 300

    def test_get(id_param):
        return json.loads(client.get(f'/receipts/{id_param}/points').data)

    with ThreadPoolExecutor(max_workers=50) as pool:
        assert all(result == {"points": 31} for result in pool.map(test_get, params))


def test_parse_args_port():
    assert parse_args(["--port", "8080"]).port == 8080
    assert parse_args([]).log_level == "INFO"
    for port in ["0", "65536", "http"]:
        with pytest.raises(SystemExit):
            parse_args(["--port", port])
