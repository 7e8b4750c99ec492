"""
settings-audit — action configuration value

File: src/settings_audit/values/action_value.py
Last updated: 2026-10-17

Purpose
- Immutable ordered collection of action entries backing one configuration setting.

Wire format
- A persisted value is an ordered list of ``value`` nodes; each node's text is one
  entry's JSON representation, serialized independently of its siblings.
- Legacy documents (``syntax="STRING_ARRAY"``) hold flat ``attribute=value`` strings.
  Nodes carrying a ``locale`` attribute are dropped during migration.

Functional requirements
- ``validate`` returns at most one message: required, then duplicate name, then the
  first structural failure.
- Debug rendering omits the index suffix when exactly one entry is present.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final
from xml.etree.ElementTree import Element

from settings_audit.constants import (
    LEGACY_STRING_ARRAY_SYNTAX,
    LOCALE_ATTRIBUTE,
    SYNTAX_ATTRIBUTE,
    VALUE_ELEMENT_NAME,
)
from settings_audit.security.certificates import CertificateInspector, X509CertificateInspector
from settings_audit.values.action import (
    ActionEntry,
    DirectoryAction,
    JSONValue,
    ParseError,
    StructuredConfigError,
)

REQUIRED_VALUE_MISSING: Final[str] = "required value missing"
DUPLICATE_NAME_PREFIX: Final[str] = "each action name must be unique: "
FORMAT_ERROR_PREFIX: Final[str] = "format error: "
CERTIFICATE_INFOS_KEY: Final[str] = "certificateInfos"


@dataclass(frozen=True, slots=True)
class ActionValue:
    """Ordered, immutable action entries for one setting."""

    entries: tuple[ActionEntry | None, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", tuple(self.entries))

    # -- construction ------------------------------------------------------------------

    @classmethod
    def of(cls, entries: Iterable[ActionEntry | None]) -> ActionValue:
        return cls(entries=tuple(entries))

    @classmethod
    def parse(cls, raw: Sequence[object] | None) -> ActionValue:
        """Build a value from per-entry payloads (JSON text or mappings).

        ``None``, empty strings and JSON ``null`` payloads are dropped. Any other payload
        that does not deserialize into a known variant fails the whole parse.
        """

        if raw is None:
            return cls()
        if isinstance(raw, (str, bytes, bytearray)) or not isinstance(raw, Sequence):
            raise ParseError(f"expected a list of entry payloads, got {type(raw).__name__}")

        parsed: list[ActionEntry] = []
        for index, item in enumerate(raw):
            decoded = _decode_payload(item, index)
            if decoded is None:
                continue
            try:
                parsed.append(ActionEntry.from_dict(decoded))
            except ParseError as exc:
                raise ParseError(f"entry[{index}]: {exc.reason}") from exc
        return cls(entries=tuple(parsed))

    @classmethod
    def from_json(cls, text: str | None) -> ActionValue:
        """Build a value from a whole JSON array document."""

        if text is None:
            return cls()
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(f"invalid JSON document: {exc.msg}") from exc
        if decoded is None:
            return cls()
        if not isinstance(decoded, list):
            raise ParseError(f"expected JSON array, got {type(decoded).__name__}")
        return cls.parse(decoded)

    @classmethod
    def parse_document(cls, element: Element) -> ActionValue:
        """Parse a persisted setting element, dispatching on its ``syntax`` attribute."""

        if element.get(SYNTAX_ATTRIBUTE) == LEGACY_STRING_ARRAY_SYNTAX:
            return cls.parse_legacy_document(element)
        payloads = [node.text for node in element.findall(VALUE_ELEMENT_NAME) if node.text]
        return cls.parse(payloads)

    @classmethod
    def parse_legacy_document(cls, element: Element) -> ActionValue:
        """Migrate flat legacy strings; locale-tagged nodes are dropped."""

        entries: list[ActionEntry] = []
        for node in element.findall(VALUE_ELEMENT_NAME):
            text = node.text
            if not text:
                continue
            if node.get(LOCALE_ATTRIBUTE) is not None:
                continue
            entries.append(ActionEntry.from_legacy_string(text))
        return cls(entries=tuple(entries))

    # -- serialization -----------------------------------------------------------------

    def serialize(self) -> list[str]:
        """One canonical JSON payload per entry, in order."""

        return [_dumps(entry.to_dict()) for entry in self._present_entries()]

    def to_xml_values(self, element_name: str = VALUE_ELEMENT_NAME) -> list[Element]:
        nodes: list[Element] = []
        for payload in self.serialize():
            node = Element(element_name)
            node.text = payload
            nodes.append(node)
        return nodes

    def to_native(self) -> tuple[ActionEntry | None, ...]:
        return self.entries

    # -- validation --------------------------------------------------------------------

    def validate(self, required: bool = False) -> list[str]:
        """Return at most one human-readable error; empty when the value is valid."""

        if required and (not self.entries or self.entries[0] is None):
            return [REQUIRED_VALUE_MISSING]

        seen_names: set[str] = set()
        for entry in self._present_entries():
            folded = entry.name.lower()
            if folded in seen_names:
                return [f"{DUPLICATE_NAME_PREFIX}{entry.name}"]
            seen_names.add(folded)

        for entry in self._present_entries():
            try:
                entry.validate()
            except StructuredConfigError as exc:
                return [f"{FORMAT_ERROR_PREFIX}{exc.to_debug_str()}"]

        return []

    # -- rendering ---------------------------------------------------------------------

    def describe_for_display(self, locale: str | None = None) -> str:
        """Multi-line debug rendering, one block per entry.

        ``locale`` is accepted for interface parity with other setting values; the
        rendering itself carries no translated text.
        """

        entries = list(self._present_entries())
        blocks: list[str] = []
        for index, entry in enumerate(entries):
            label = f"Action{index}" if len(entries) > 1 else "Action"
            blocks.append(f"{label}-{entry.kind.value}: [{_display_body(entry)}]")
        return "\n".join(blocks)

    def describe_for_api(
        self, inspector: CertificateInspector | None = None
    ) -> list[dict[str, Any]]:
        """Generic mappings for API consumers, with redacted certificate facts."""

        resolved = inspector if inspector is not None else X509CertificateInspector()
        original = json.dumps([entry.to_dict() for entry in self._present_entries()])
        generic: list[dict[str, Any]] = json.loads(original)
        for mapping in generic:
            name = mapping.get("name")
            entry = self.lookup(name) if isinstance(name, str) else None
            if entry is None or not entry.certificates:
                continue
            mapping[CERTIFICATE_INFOS_KEY] = [
                resolved.describe(certificate) for certificate in entry.certificates
            ]
        return generic

    # -- lookup ------------------------------------------------------------------------

    def lookup(self, name: str) -> ActionEntry | None:
        """First entry whose name equals ``name`` exactly."""

        for entry in self._present_entries():
            if entry.name == name:
                return entry
        return None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ActionEntry | None]:
        return iter(self.entries)

    def _present_entries(self) -> Iterator[ActionEntry]:
        return (entry for entry in self.entries if entry is not None)


def _decode_payload(item: object, index: int) -> Mapping[str, object] | None:
    if item is None:
        return None
    if isinstance(item, Mapping):
        return item
    if isinstance(item, (bytes, bytearray)):
        try:
            item = bytes(item).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"entry[{index}]: invalid UTF-8 at byte {exc.start}") from exc
    if not isinstance(item, str):
        raise ParseError(f"entry[{index}]: expected JSON text or object, got {type(item).__name__}")
    if not item.strip():
        return None
    try:
        decoded = json.loads(item)
    except json.JSONDecodeError as exc:
        raise ParseError(f"entry[{index}]: invalid JSON: {exc.msg}") from exc
    if decoded is None:
        return None
    if not isinstance(decoded, Mapping):
        raise ParseError(f"entry[{index}]: expected JSON object, got {type(decoded).__name__}")
    return decoded


def _display_body(entry: ActionEntry) -> str:
    payload = entry.payload
    method = payload.method.value if payload.method is not None else ""
    if isinstance(payload, DirectoryAction):
        return (
            f"Directory: method={method} attribute={payload.attribute_name} "
            f"value={payload.attribute_value}"
        )
    headers = json.dumps(payload.header_map(), ensure_ascii=False)
    return f"WebService: method={method} url={payload.url} headers={headers} body={payload.body}"


def _dumps(value: JSONValue) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


__all__ = [
    "CERTIFICATE_INFOS_KEY",
    "DUPLICATE_NAME_PREFIX",
    "FORMAT_ERROR_PREFIX",
    "REQUIRED_VALUE_MISSING",
    "ActionValue",
]
