"""
settings-audit — action entry variant

File: src/settings_audit/values/action.py
Last updated: 2026-10-17

Purpose
- Model one configured action: a directory attribute write or a web-service call.

Structure
- ``ActionEntry`` is a tagged variant: ``kind`` is the discriminant and ``payload`` is
  exactly one of ``DirectoryAction`` / ``WebServiceAction``.
- Every type is a frozen dataclass; there are no setters after construction.

Functional requirements
- Deserialize persisted payloads tolerantly (legacy ``ldap`` kind alias, ``ldapMethod``
  key, missing fields) while rejecting payloads that cannot map onto a known variant.
- Structural validation is separate from construction so malformed persisted data still
  loads and can be reported.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Final, NoReturn, TypeAlias

JSONScalar = str | int | float | bool | None
JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]

HeaderPairs: TypeAlias = tuple[tuple[str, str], ...]

_FORMAT_ERROR_CODE: Final[str] = "config_format"


class ParseError(ValueError):
    """Raised when a persisted action document cannot be deserialized."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"unable to parse action value: {reason}")


class StructuredConfigError(ValueError):
    """Per-entry structural violation reported by ``ActionEntry.validate``."""

    def __init__(self, detail: str, *, code: str = _FORMAT_ERROR_CODE) -> None:
        self.code = code
        self.detail = detail
        super().__init__(self.to_debug_str())

    def to_debug_str(self) -> str:
        return f"{self.code} ({self.detail})"


class ActionKind(StrEnum):
    """Discriminant for the action entry variant."""

    DIRECTORY = "directory"
    WEBSERVICE = "webservice"


class DirectoryMethod(StrEnum):
    REPLACE = "replace"
    ADD = "add"
    REMOVE = "remove"


class WebServiceMethod(StrEnum):
    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"


# Persisted documents written before the webservice kind existed use "ldap".
_KIND_ALIASES: Final[Mapping[str, ActionKind]] = {"ldap": ActionKind.DIRECTORY}


@dataclass(frozen=True, slots=True)
class DirectoryAction:
    """Write one attribute value on the user's directory entry."""

    method: DirectoryMethod | None = DirectoryMethod.REPLACE
    attribute_name: str = ""
    attribute_value: str = ""


@dataclass(frozen=True, slots=True)
class WebServiceAction:
    """Invoke an external web service, optionally pinned to trusted certificates."""

    method: WebServiceMethod | None = WebServiceMethod.GET
    url: str = ""
    headers: HeaderPairs = ()
    body: str = ""
    certificates: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.headers, Mapping):
            object.__setattr__(self, "headers", tuple(self.headers.items()))
        else:
            object.__setattr__(self, "headers", tuple(tuple(pair) for pair in self.headers))
        object.__setattr__(self, "certificates", tuple(self.certificates))

    def header_map(self) -> dict[str, str]:
        return dict(self.headers)


ActionPayload: TypeAlias = DirectoryAction | WebServiceAction


@dataclass(frozen=True, slots=True)
class ActionEntry:
    """One named action; the tagged union over directory and web-service payloads."""

    name: str
    kind: ActionKind
    payload: ActionPayload
    description: str = ""

    def __post_init__(self) -> None:
        expected = DirectoryAction if self.kind is ActionKind.DIRECTORY else WebServiceAction
        if not isinstance(self.payload, expected):
            raise ValueError(
                f"ActionEntry.payload: kind {self.kind.value!r} requires "
                f"{expected.__name__}, got {type(self.payload).__name__}"
            )

    @classmethod
    def directory(
        cls,
        name: str,
        attribute_name: str,
        attribute_value: str = "",
        *,
        method: DirectoryMethod | None = DirectoryMethod.REPLACE,
        description: str = "",
    ) -> ActionEntry:
        return cls(
            name=name,
            kind=ActionKind.DIRECTORY,
            payload=DirectoryAction(
                method=method,
                attribute_name=attribute_name,
                attribute_value=attribute_value,
            ),
            description=description,
        )

    @classmethod
    def webservice(
        cls,
        name: str,
        url: str,
        *,
        method: WebServiceMethod | None = WebServiceMethod.GET,
        headers: Mapping[str, str] | None = None,
        body: str = "",
        certificates: Sequence[str] = (),
        description: str = "",
    ) -> ActionEntry:
        return cls(
            name=name,
            kind=ActionKind.WEBSERVICE,
            payload=WebServiceAction(
                method=method,
                url=url,
                headers=tuple((headers or {}).items()),
                body=body,
                certificates=tuple(certificates),
            ),
            description=description,
        )

    @classmethod
    def from_dict(cls, payload: object) -> ActionEntry:
        """Deserialize one wire payload; raises ``ParseError`` on unknown shapes."""

        if not isinstance(payload, Mapping):
            _parse_fail(f"action payload must be an object, got {type(payload).__name__}")

        name = _optional_text(payload.get("name"), "name")
        description = _optional_text(payload.get("description"), "description")
        kind = _parse_kind(payload.get("type"))

        if kind is ActionKind.DIRECTORY:
            raw_method = payload.get("method", payload.get("ldapMethod"))
            has_method = "method" in payload or "ldapMethod" in payload
            return cls(
                name=name,
                kind=kind,
                payload=DirectoryAction(
                    method=_parse_method(raw_method, DirectoryMethod, DirectoryMethod.REPLACE)
                    if has_method
                    else DirectoryMethod.REPLACE,
                    attribute_name=_optional_text(payload.get("attributeName"), "attributeName"),
                    attribute_value=_optional_text(
                        payload.get("attributeValue"), "attributeValue"
                    ),
                ),
                description=description,
            )

        return cls(
            name=name,
            kind=kind,
            payload=WebServiceAction(
                method=_parse_method(payload.get("method"), WebServiceMethod, None)
                if "method" in payload
                else WebServiceMethod.GET,
                url=_optional_text(payload.get("url"), "url"),
                headers=_parse_headers(payload.get("headers")),
                body=_optional_text(payload.get("body"), "body"),
                certificates=_parse_certificates(payload.get("certificates")),
            ),
            description=description,
        )

    @classmethod
    def from_legacy_string(cls, text: str) -> ActionEntry:
        """Convert one legacy ``attribute=value`` string into a directory entry."""

        attribute_name, _, attribute_value = text.partition("=")
        attribute_name = attribute_name.strip()
        return cls.directory(
            name=attribute_name,
            attribute_name=attribute_name,
            attribute_value=attribute_value,
            method=DirectoryMethod.REPLACE,
        )

    @property
    def certificates(self) -> tuple[str, ...]:
        if isinstance(self.payload, WebServiceAction):
            return self.payload.certificates
        return ()

    def to_dict(self) -> dict[str, JSONValue]:
        """Variant-tagged structured representation used on the wire."""

        out: dict[str, JSONValue] = {
            "name": self.name,
            "description": self.description,
            "type": self.kind.value,
        }
        payload = self.payload
        if isinstance(payload, DirectoryAction):
            out["method"] = payload.method.value if payload.method is not None else ""
            out["attributeName"] = payload.attribute_name
            out["attributeValue"] = payload.attribute_value
            return out

        out["method"] = payload.method.value if payload.method is not None else ""
        out["url"] = payload.url
        out["headers"] = {key: value for key, value in payload.headers}
        out["body"] = payload.body
        out["certificates"] = list(payload.certificates)
        return out

    def validate(self) -> None:
        """Raise ``StructuredConfigError`` when required payload fields are empty."""

        payload = self.payload
        if isinstance(payload, DirectoryAction):
            if not payload.attribute_name:
                raise StructuredConfigError(f"{self.to_debug_str()}: attribute name is required")
            return

        if not payload.url:
            raise StructuredConfigError(f"{self.to_debug_str()}: url is required")
        if payload.method is None:
            raise StructuredConfigError(f"{self.to_debug_str()}: method is required")

    def to_debug_str(self) -> str:
        payload = self.payload
        method = payload.method.value if payload.method is not None else ""
        if isinstance(payload, DirectoryAction):
            return (
                f"directory action {self.name!r} "
                f"(method={method}, attribute={payload.attribute_name})"
            )
        return f"webservice action {self.name!r} (method={method}, url={payload.url})"


def _parse_kind(raw: object) -> ActionKind:
    if raw is None:
        return ActionKind.DIRECTORY
    if not isinstance(raw, str):
        _parse_fail(f"type: expected string, got {type(raw).__name__}")
    candidate = raw.strip().lower()
    if candidate in _KIND_ALIASES:
        return _KIND_ALIASES[candidate]
    try:
        return ActionKind(candidate)
    except ValueError:
        allowed = ", ".join(item.value for item in ActionKind)
        _parse_fail(f"type: unknown action kind {raw!r}; expected one of: {allowed}")


def _parse_method(raw: object, enum_type: type[StrEnum], default: StrEnum | None) -> StrEnum | None:
    if raw is None:
        return default
    if not isinstance(raw, str):
        _parse_fail(f"method: expected string, got {type(raw).__name__}")
    candidate = raw.strip().lower()
    if not candidate:
        return None
    try:
        return enum_type(candidate)
    except ValueError:
        allowed = ", ".join(item.value for item in enum_type)
        _parse_fail(f"method: unknown value {raw!r}; expected one of: {allowed}")


def _optional_text(raw: object, field_name: str) -> str:
    if raw is None:
        return ""
    if not isinstance(raw, str):
        _parse_fail(f"{field_name}: expected string, got {type(raw).__name__}")
    return raw


def _parse_headers(raw: object) -> HeaderPairs:
    if raw is None:
        return ()
    if not isinstance(raw, Mapping):
        _parse_fail(f"headers: expected object, got {type(raw).__name__}")
    pairs: list[tuple[str, str]] = []
    for key, value in raw.items():
        if not isinstance(key, str) or not isinstance(value, str):
            _parse_fail(f"headers: entries must map strings to strings ({key!r})")
        pairs.append((key, value))
    return tuple(pairs)


def _parse_certificates(raw: object) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes, bytearray)):
        _parse_fail(f"certificates: expected list, got {type(raw).__name__}")
    parsed: list[str] = []
    for index, item in enumerate(raw):
        if not isinstance(item, str):
            _parse_fail(f"certificates[{index}]: expected PEM string, got {type(item).__name__}")
        parsed.append(item)
    return tuple(parsed)


def _parse_fail(reason: str) -> NoReturn:
    raise ParseError(reason)


__all__ = [
    "ActionEntry",
    "ActionKind",
    "ActionPayload",
    "DirectoryAction",
    "DirectoryMethod",
    "JSONValue",
    "ParseError",
    "StructuredConfigError",
    "WebServiceAction",
    "WebServiceMethod",
]
