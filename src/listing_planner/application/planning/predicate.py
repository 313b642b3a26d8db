"""Application planning – PredicateDocument and PredicateBuilder.

The predicate is an engine-agnostic conjunction of tagged leaves.  Each leaf
knows how to render itself as a MongoDB query fragment; the conjunction
renders as a single ``$and`` (or the bare leaf when there is only one).
"""
from __future__ import annotations

import abc
import dataclasses
import re
from enum import Enum
from typing import Any, ClassVar, Mapping

from listing_planner.application.planning.profiles import CollectionProfile
from listing_planner.application.planning.request import FilterRequest
from listing_planner.kernel.errors import InvalidParameterError, InvalidPipelineError


class LeafKind(str, Enum):
    EQUALITY = "equality"
    RANGE = "range"
    SET_MEMBERSHIP = "set_membership"
    REGEX_SUBSTRING = "regex_substring"
    TEXT_SEARCH = "text_search"


class PredicateLeaf(abc.ABC):
    """One clause of the conjunction."""

    kind: ClassVar[LeafKind]

    @abc.abstractmethod
    def to_mongo(self) -> dict[str, Any]: ...


@dataclasses.dataclass(frozen=True)
class Equality(PredicateLeaf):
    kind: ClassVar[LeafKind] = LeafKind.EQUALITY

    field: str
    value: Any

    def to_mongo(self) -> dict[str, Any]:
        return {self.field: self.value}


@dataclasses.dataclass(frozen=True)
class Range(PredicateLeaf):
    """Inclusive bound on one field; only the bounds present are emitted."""
    kind: ClassVar[LeafKind] = LeafKind.RANGE

    field: str
    minimum: float | None = None
    maximum: float | None = None

    def __post_init__(self) -> None:
        if self.minimum is None and self.maximum is None:
            raise InvalidPipelineError(f"range on '{self.field}' has no bound")

    def to_mongo(self) -> dict[str, Any]:
        bounds: dict[str, Any] = {}
        if self.minimum is not None:
            bounds["$gte"] = self.minimum
        if self.maximum is not None:
            bounds["$lte"] = self.maximum
        return {self.field: bounds}


@dataclasses.dataclass(frozen=True)
class SetMembership(PredicateLeaf):
    """Any-of match: the stored value (or any element of a stored array) is in ``values``."""
    kind: ClassVar[LeafKind] = LeafKind.SET_MEMBERSHIP

    field: str
    values: tuple[Any, ...]

    def to_mongo(self) -> dict[str, Any]:
        return {self.field: {"$in": list(self.values)}}


@dataclasses.dataclass(frozen=True)
class RegexSubstring(PredicateLeaf):
    """Case-insensitive literal substring on one or more fields (any-of)."""
    kind: ClassVar[LeafKind] = LeafKind.REGEX_SUBSTRING

    fields: tuple[str, ...]
    text: str

    def to_mongo(self) -> dict[str, Any]:
        pattern = re.escape(self.text)
        clauses = [{f: {"$regex": pattern, "$options": "i"}} for f in self.fields]
        if len(clauses) == 1:
            return clauses[0]
        return {"$or": clauses}


@dataclasses.dataclass(frozen=True)
class TextSearch(PredicateLeaf):
    """Full-text match served by the collection's compound text index."""
    kind: ClassVar[LeafKind] = LeafKind.TEXT_SEARCH

    query: str

    def to_mongo(self) -> dict[str, Any]:
        return {"$text": {"$search": self.query}}


@dataclasses.dataclass(frozen=True)
class PredicateDocument:
    """Conjunction of leaves.  At most one :class:`TextSearch` leaf is allowed."""

    clauses: tuple[PredicateLeaf, ...] = ()

    def __post_init__(self) -> None:
        text_leaves = sum(1 for c in self.clauses if c.kind is LeafKind.TEXT_SEARCH)
        if text_leaves > 1:
            raise InvalidPipelineError(
                "a predicate may hold only one text-search clause",
                stages=[c.kind.value for c in self.clauses],
            )

    @property
    def has_text_search(self) -> bool:
        return any(c.kind is LeafKind.TEXT_SEARCH for c in self.clauses)

    def leaves(self, kind: LeafKind) -> list[PredicateLeaf]:
        return [c for c in self.clauses if c.kind is kind]

    def and_(self, leaf: PredicateLeaf) -> "PredicateDocument":
        return PredicateDocument((*self.clauses, leaf))

    def to_mongo(self) -> dict[str, Any]:
        if not self.clauses:
            return {}
        if len(self.clauses) == 1:
            return self.clauses[0].to_mongo()
        return {"$and": [c.to_mongo() for c in self.clauses]}


class PredicateBuilder:
    """Turn a :class:`FilterRequest` into a :class:`PredicateDocument`.

    The visibility clause (``status == visible_status``) is always the first
    leaf and cannot be overridden by filters.  Free text becomes a single
    :class:`TextSearch` leaf, except on proximity requests: the engine does
    not accept ``$text`` inside ``$geoNear``, so there the text is matched as
    a case-insensitive substring across the profile's text fields instead.
    """

    def __init__(self, profile: CollectionProfile) -> None:
        self._profile = profile

    def build(self, request: FilterRequest) -> PredicateDocument:
        p = self._profile
        clauses: list[PredicateLeaf] = [Equality(p.status_field, p.visible_status)]

        if request.categories:
            if len(request.categories) == 1:
                (category,) = request.categories
                clauses.append(Equality(p.category_field, category))
            else:
                clauses.append(SetMembership(p.category_field, tuple(sorted(request.categories))))

        for name in sorted(request.flags):
            clauses.append(Equality(self._path(p.equality_fields, name), request.flags[name]))

        for name in sorted(request.ranges):
            clauses.extend(self._range_leaves(name, request))

        if request.min_rating is not None:
            clauses.append(Range(p.rating_field, minimum=request.min_rating))

        for name in sorted(request.memberships):
            path = self._path(p.set_fields, name)
            clauses.append(SetMembership(path, tuple(sorted(request.memberships[name]))))

        uses_text_index = request.text is not None and request.origin is None
        for name in sorted(request.matches):
            path = self._path(p.regex_fields, name)
            if uses_text_index and path in p.text_fields:
                raise InvalidParameterError(
                    name, "cannot be combined with free-text search", value=request.matches[name]
                )
            clauses.append(RegexSubstring((path,), request.matches[name]))

        if request.text is not None:
            if uses_text_index:
                clauses.append(TextSearch(request.text))
            else:
                clauses.append(RegexSubstring(p.text_fields, request.text))

        return PredicateDocument(tuple(clauses))

    def _path(self, fields: Mapping[str, str], name: str) -> str:
        try:
            return fields[name]
        except KeyError:
            raise InvalidParameterError(name, f"not filterable on '{self._profile.name}'") from None

    def _range_leaves(self, name: str, request: FilterRequest) -> list[PredicateLeaf]:
        spec = self._profile.range_fields.get(name)
        if spec is None:
            raise InvalidParameterError(name, f"not filterable on '{self._profile.name}'")
        bounds = request.ranges[name]
        if spec.is_scalar:
            return [Range(spec.min_path, bounds.minimum, bounds.maximum)]
        leaves: list[PredicateLeaf] = []
        if bounds.minimum is not None:
            leaves.append(Range(spec.min_path, minimum=bounds.minimum))
        if bounds.maximum is not None:
            leaves.append(Range(spec.max_path or spec.min_path, maximum=bounds.maximum))
        return leaves


__all__ = [
    "Equality",
    "LeafKind",
    "PredicateBuilder",
    "PredicateDocument",
    "PredicateLeaf",
    "Range",
    "RegexSubstring",
    "SetMembership",
    "TextSearch",
]
