from models import Record
from schema import (
    DATABASE_PROPERTIES,
    build_create_request,
    build_row_request,
    current_timestamp_label,
    database_title,
)


def test_create_request_declares_five_fixed_columns() -> None:
    request = build_create_request("page-1", "18/10/2026, 10:00:00")

    assert request["parent"] == {"page_id": "page-1"}
    assert request["title"] == [
        {"type": "text", "text": {"content": "Obsidian Table Export - 18/10/2026, 10:00:00"}}
    ]
    kinds = {name: prop["type"] for name, prop in request["properties"].items()}
    assert kinds == {
        "name": "title",
        "link": "url",
        "tags": "multi_select",
        "description": "rich_text",
        "type": "select",
    }


def test_create_request_columns_identical_across_calls() -> None:
    first = build_create_request("page-1", "a")
    second = build_create_request("page-1", "b")

    assert first["properties"] == second["properties"]
    assert first["title"] != second["title"]


def test_create_request_does_not_share_property_definitions() -> None:
    request = build_create_request("page-1", "a")
    request["properties"]["tags"]["multi_select"]["options"] = [{"name": "x"}]

    assert DATABASE_PROPERTIES["tags"]["multi_select"] == {}
    assert build_create_request("page-1", "a")["properties"]["tags"]["multi_select"] == {}


def test_database_title_embeds_timestamp() -> None:
    label = current_timestamp_label()
    assert label
    assert database_title(label) == f"Obsidian Table Export - {label}"


def test_row_request_maps_every_field() -> None:
    record = Record(
        name="ripgrep",
        link="https://github.com/BurntSushi/ripgrep",
        tags=("rust", "search"),
        description="Fast grep.\nRecursive.",
        type="tool",
    )

    request = build_row_request("db-1", record)

    assert request["parent"] == {"database_id": "db-1"}
    assert request["properties"] == {
        "name": {"title": [{"text": {"content": "ripgrep"}}]},
        "link": {"url": "https://github.com/BurntSushi/ripgrep"},
        "tags": {"multi_select": [{"name": "rust"}, {"name": "search"}]},
        "description": {"rich_text": [{"text": {"content": "Fast grep.\nRecursive."}}]},
        "type": {"select": {"name": "tool"}},
    }


def test_row_request_blank_fields() -> None:
    properties = build_row_request("db-1", Record(name=""))["properties"]

    assert properties["name"] == {"title": [{"text": {"content": ""}}]}
    assert properties["link"] == {"url": None}
    assert properties["tags"] == {"multi_select": []}
    assert properties["description"] == {"rich_text": []}
    assert properties["type"] == {"select": None}
