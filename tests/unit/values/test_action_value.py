"""
settings-audit — unit tests for the action configuration value

File: tests/unit/values/test_action_value.py
Last updated: 2026-10-17

Purpose
- Validate parsing, serialization, validation and rendering of ordered action values.

What this test file should cover
- Per-entry serialization round trip (property based).
- Single-message validation ordering: required, duplicate name, structural failure.
- Persisted document parsing, including lossy legacy migration.
- Display and API rendering, with certificate facts from an injected inspector.

Non-functional requirements
- Deterministic and offline.
"""

from __future__ import annotations

from xml.etree import ElementTree

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from settings_audit.values import ActionEntry, ActionValue, ParseError
from settings_audit.values.action import DirectoryMethod, WebServiceMethod
from settings_audit.values.action_value import CERTIFICATE_INFOS_KEY

_TEXT = st.text(max_size=12)

_DIRECTORY_ENTRIES = st.builds(
    ActionEntry.directory,
    name=_TEXT,
    attribute_name=_TEXT,
    attribute_value=_TEXT,
    method=st.sampled_from([*DirectoryMethod, None]),
    description=_TEXT,
)

_WEBSERVICE_ENTRIES = st.builds(
    ActionEntry.webservice,
    name=_TEXT,
    url=_TEXT,
    method=st.sampled_from([*WebServiceMethod, None]),
    headers=st.dictionaries(_TEXT, _TEXT, max_size=3),
    body=_TEXT,
    certificates=st.lists(_TEXT, max_size=2),
    description=_TEXT,
)

_ENTRIES = st.one_of(_DIRECTORY_ENTRIES, _WEBSERVICE_ENTRIES)


class _FakeInspector:
    def __init__(self) -> None:
        self.seen: list[str] = []

    def describe(self, certificate: str) -> dict[str, str]:
        self.seen.append(certificate)
        return {"subject": f"CN={certificate}"}


@pytest.mark.unit
@settings(max_examples=75, deadline=None)
@given(entries=st.lists(_ENTRIES, max_size=4))
def test_parse_of_serialize_restores_value(entries: list[ActionEntry]) -> None:
    value = ActionValue.of(entries)

    assert ActionValue.parse(value.serialize()) == value


@pytest.mark.unit
def test_serialize_keeps_header_insertion_order() -> None:
    entry = ActionEntry.webservice("hook", "https://h", headers={"X-B": "1", "Accept": "2"})
    value = ActionValue.of([entry])

    (payload,) = value.serialize()
    restored = ActionValue.parse(value.serialize())

    assert payload.index('"X-B"') < payload.index('"Accept"')
    assert restored == value
    assert restored.entries[0] is not None
    assert restored.entries[0].payload.headers == (("X-B", "1"), ("Accept", "2"))


@pytest.mark.unit
def test_parse_rejects_invalid_utf8_bytes() -> None:
    with pytest.raises(ParseError, match=r"entry\[1\]: invalid UTF-8"):
        ActionValue.parse([b'{"name":"a","attributeName":"t"}', b'{"name":"\xff"}'])


@pytest.mark.unit
@settings(max_examples=50, deadline=None)
@given(names=st.lists(st.from_regex(r"[a-z]{1,8}", fullmatch=True), max_size=5, unique=True))
def test_unique_well_formed_entries_validate_clean(names: list[str]) -> None:
    value = ActionValue.of(ActionEntry.directory(name, "title", "x") for name in names)

    assert value.validate(required=False) == []


@pytest.mark.unit
def test_duplicate_names_compare_case_insensitively() -> None:
    value = ActionValue.of(
        [ActionEntry.directory("Foo", "title"), ActionEntry.directory("foo", "mail")]
    )

    assert value.validate(required=False) == ["each action name must be unique: foo"]


@pytest.mark.unit
def test_validate_returns_only_first_failure() -> None:
    value = ActionValue.of(
        [
            ActionEntry.directory("a", ""),
            ActionEntry.webservice("b", ""),
            ActionEntry.directory("A", "mail"),
        ]
    )

    messages = value.validate()

    assert len(messages) == 1
    assert messages[0].startswith("each action name must be unique")


@pytest.mark.unit
def test_required_value_missing_when_empty_or_first_entry_absent() -> None:
    assert ActionValue().validate(required=True) == ["required value missing"]
    assert ActionValue.of([None, ActionEntry.directory("a", "title")]).validate(
        required=True
    ) == ["required value missing"]
    assert ActionValue().validate(required=False) == []


@pytest.mark.unit
def test_structural_failure_is_reported_as_format_error() -> None:
    value = ActionValue.of([ActionEntry.webservice("hook", "", method=WebServiceMethod.POST)])

    messages = value.validate()

    assert len(messages) == 1
    assert messages[0].startswith("format error: config_format (")
    assert "url is required" in messages[0]


@pytest.mark.unit
def test_parse_skips_empty_payloads_and_rejects_garbage() -> None:
    value = ActionValue.parse([None, "", "null", '{"name":"a","attributeName":"title"}'])

    assert len(value) == 1
    assert value.lookup("a") is not None

    with pytest.raises(ParseError, match=r"entry\[0\]"):
        ActionValue.parse(["{not json"])
    with pytest.raises(ParseError, match=r"entry\[1\]"):
        ActionValue.parse(['{"name":"a"}', '{"name":"b","type":"fax"}'])
    with pytest.raises(ParseError):
        ActionValue.parse("[]")  # type: ignore[arg-type]


@pytest.mark.unit
def test_from_json_reads_whole_array_document() -> None:
    value = ActionValue.from_json(
        '[{"name":"a","type":"ldap","attributeName":"title"},'
        '{"name":"b","type":"webservice","url":"https://h"}]'
    )

    assert [entry.name for entry in value if entry is not None] == ["a", "b"]
    assert ActionValue.from_json(None) == ActionValue()
    with pytest.raises(ParseError, match="expected JSON array"):
        ActionValue.from_json('{"name":"a"}')


@pytest.mark.unit
def test_parse_document_reads_json_value_nodes() -> None:
    element = ElementTree.fromstring(
        "<setting key='pwm.actions'>"
        '<value>{"name":"a","attributeName":"title","attributeValue":"x"}</value>'
        '<value>{"name":"b","type":"webservice","url":"https://h"}</value>'
        "</setting>"
    )

    value = ActionValue.parse_document(element)

    assert [entry.name for entry in value if entry is not None] == ["a", "b"]


@pytest.mark.unit
def test_legacy_document_migrates_and_drops_localized_nodes() -> None:
    element = ElementTree.fromstring(
        "<setting syntax='STRING_ARRAY'>"
        "<value>title=Manager</value>"
        "<value locale='de'>title=Leiter</value>"
        "<value>description=a=b</value>"
        "</setting>"
    )

    value = ActionValue.parse_document(element)

    assert value == ActionValue.of(
        [
            ActionEntry.directory("title", "title", "Manager"),
            ActionEntry.directory("description", "description", "a=b"),
        ]
    )


@pytest.mark.unit
def test_xml_value_nodes_carry_serialized_entries() -> None:
    value = ActionValue.of([ActionEntry.directory("a", "title"), None])

    nodes = value.to_xml_values()

    assert [node.tag for node in nodes] == ["value"]
    assert nodes[0].text == value.serialize()[0]


@pytest.mark.unit
def test_display_omits_index_for_single_entry() -> None:
    single = ActionValue.of([ActionEntry.directory("a", "title", "x")])

    assert single.describe_for_display() == (
        "Action-directory: [Directory: method=replace attribute=title value=x]"
    )


@pytest.mark.unit
def test_display_indexes_multiple_entries() -> None:
    value = ActionValue.of(
        [
            ActionEntry.directory("a", "title"),
            ActionEntry.webservice("b", "https://h", headers={"Accept": "text/plain"}),
            ActionEntry.directory("c", "mail"),
        ]
    )

    lines = value.describe_for_display().splitlines()

    assert [line.split(":", 1)[0] for line in lines] == [
        "Action0-directory",
        "Action1-webservice",
        "Action2-directory",
    ]
    assert 'headers={"Accept": "text/plain"}' in lines[1]


@pytest.mark.unit
def test_api_description_adds_certificate_facts_only_where_pinned() -> None:
    inspector = _FakeInspector()
    value = ActionValue.of(
        [
            ActionEntry.directory("a", "title"),
            ActionEntry.webservice("b", "https://h", certificates=["ONE", "TWO"]),
        ]
    )

    described = value.describe_for_api(inspector)

    assert CERTIFICATE_INFOS_KEY not in described[0]
    assert described[1][CERTIFICATE_INFOS_KEY] == [{"subject": "CN=ONE"}, {"subject": "CN=TWO"}]
    assert described[1]["certificates"] == ["ONE", "TWO"]
    assert inspector.seen == ["ONE", "TWO"]


@pytest.mark.unit
def test_lookup_matches_name_exactly() -> None:
    value = ActionValue.of([ActionEntry.directory("Reset", "title")])

    assert value.lookup("Reset") is not None
    assert value.lookup("reset") is None
