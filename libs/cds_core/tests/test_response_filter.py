from __future__ import annotations

import copy

from cds.constants import BECKN_DRIVER_CONTEXT, DRIVER_CONTEXT, JOB_CONTEXT
from cds.response_filter import allowed_contexts_for_role, filter_response, item_contexts


def _item(item_id, ctx, key="beckn:itemAttributes"):
    return {"beckn:id": item_id, key: {"@context": ctx}}


def test_allow_lists():
    assert allowed_contexts_for_role("provider") == {BECKN_DRIVER_CONTEXT, DRIVER_CONTEXT}
    assert allowed_contexts_for_role("driver") == {JOB_CONTEXT}
    assert allowed_contexts_for_role(None) == {BECKN_DRIVER_CONTEXT, DRIVER_CONTEXT, JOB_CONTEXT}


def test_provider_scenario_keeps_only_driver_item():
    response = {
        "message": {
            "catalogs": [
                {
                    "beckn:items": [
                        {"id": "a", "itemAttributes": {"@context": DRIVER_CONTEXT}},
                        {"id": "b", "itemAttributes": {"@context": JOB_CONTEXT}},
                    ]
                }
            ]
        }
    }
    out = filter_response(response, "provider")
    catalogs = out["message"]["catalogs"]
    assert len(catalogs) == 1
    assert [i["id"] for i in catalogs[0]["beckn:items"]] == ["a"]


def test_emptied_catalog_removed_but_itemless_catalog_kept():
    response = {
        "message": {
            "catalogs": [
                {"beckn:id": "jobs", "beckn:items": [_item("j1", JOB_CONTEXT)]},
                {"beckn:id": "drivers", "beckn:items": [_item("d1", DRIVER_CONTEXT)]},
                {"beckn:id": "meta-only"},
            ]
        }
    }
    out = filter_response(response, "provider")
    assert [c["beckn:id"] for c in out["message"]["catalogs"]] == ["drivers", "meta-only"]


def test_items_without_context_dropped():
    response = {"message": {"items": [{"beckn:id": "x"}, {"beckn:id": "y", "beckn:itemAttributes": {}}]}}
    out = filter_response(response, None)
    assert out["message"]["items"] == []


def test_list_context_any_match():
    item = _item("m", ["https://other.example/ctx", JOB_CONTEXT])
    assert item_contexts(item) == ["https://other.example/ctx", JOB_CONTEXT]
    assert filter_response({"message": {"items": [item]}}, "driver")["message"]["items"] == [item]
    assert filter_response({"message": {"items": [item]}}, "provider")["message"]["items"] == []


def test_results_shape():
    response = {
        "message": {
            "results": [
                {"items": [_item("d", DRIVER_CONTEXT)]},
                {"items": [_item("j", JOB_CONTEXT)]},
                {"score": 1},
            ]
        }
    }
    out = filter_response(response, "driver")
    assert out["message"]["results"] == [{"items": [_item("j", JOB_CONTEXT)]}, {"score": 1}]


def test_bare_list_short_circuits():
    items = [_item("d", DRIVER_CONTEXT), _item("j", JOB_CONTEXT), {"no": "ctx"}]
    assert filter_response(items, "driver") == [_item("j", JOB_CONTEXT)]


def test_all_shapes_together():
    response = {
        "context": {"action": "on_discover"},
        "message": {
            "catalogs": [{"beckn:items": [_item("c1", DRIVER_CONTEXT), _item("c2", JOB_CONTEXT)]}],
            "items": [_item("i1", JOB_CONTEXT), _item("i2", BECKN_DRIVER_CONTEXT)],
            "results": [{"beckn:items": [_item("r1", BECKN_DRIVER_CONTEXT)]}],
        },
    }
    out = filter_response(response, "provider")
    assert out["context"] == {"action": "on_discover"}
    assert [i["beckn:id"] for i in out["message"]["catalogs"][0]["beckn:items"]] == ["c1"]
    assert [i["beckn:id"] for i in out["message"]["items"]] == ["i2"]
    assert [i["beckn:id"] for i in out["message"]["results"][0]["beckn:items"]] == ["r1"]


def test_input_not_mutated():
    response = {"message": {"catalogs": [{"beckn:items": [_item("a", DRIVER_CONTEXT), _item("b", JOB_CONTEXT)]}]}}
    before = copy.deepcopy(response)
    out = filter_response(response, "provider")
    assert response == before
    assert out is not response
    assert out["message"]["catalogs"][0] is not response["message"]["catalogs"][0]


def test_idempotent():
    response = {
        "message": {
            "catalogs": [{"beckn:items": [_item("a", DRIVER_CONTEXT), _item("b", JOB_CONTEXT)]}],
            "items": [_item("c", JOB_CONTEXT)],
        }
    }
    once = filter_response(response, "driver")
    assert filter_response(once, "driver") == once


def test_unknown_shapes_pass_through():
    assert filter_response({"error": "x"}, "provider") == {"error": "x"}
    assert filter_response({"message": "ack"}, "provider") == {"message": "ack"}
    assert filter_response(None, "provider") is None
