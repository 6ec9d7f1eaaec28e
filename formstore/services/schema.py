# formstore/services/schema.py
"""
Best-effort lookup of the form definition behind a bucket.

Entries only store field keys. Depending on when an entry was written the key
is the field's internal node identifier, its speaking identifier or its
label, and the form may since have been edited, localized or deleted. The
resolver finds the form elements of the form that writes into the bucket and
matches a key against all three identity spaces. Not finding anything is a
normal outcome; callers fall back to the raw key.
"""

import itertools
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import NamedTuple, Optional, Protocol

from sqlalchemy.orm import Session, selectinload

from formstore.config import ContentDimension, Settings, get_settings
from formstore.models import FormDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormElementData:
    """Descriptive metadata of one form field."""

    type_name: str
    node_identifier: str
    speaking_identifier: Optional[str] = None
    label: Optional[str] = None

    @property
    def display_label(self) -> str:
        """Best available label: label, else speaking identifier, else node identifier."""
        return self.label or self.speaking_identifier or self.node_identifier


class DimensionChoice(NamedTuple):
    """The preset chosen for one dimension axis, with its fallback chain."""

    target: str
    values: tuple[str, ...]


Combination = dict[str, DimensionChoice]


def prepare_dimensions(content_dimensions: Mapping[str, ContentDimension | dict] | None) -> list[Combination]:
    """
    All combinations of configured dimension presets, default presets first.

    Each axis lists its default preset first, followed by the remaining
    presets in configuration order. With no dimensions configured the result
    is a single empty combination.
    """
    axes: list[tuple[str, list[DimensionChoice]]] = []
    for axis, dimension in (content_dimensions or {}).items():
        if not isinstance(dimension, ContentDimension):
            dimension = ContentDimension.model_validate(dimension)

        default = dimension.presets.get(dimension.default)
        choices = [DimensionChoice(dimension.default, tuple(default.values if default else [dimension.default]))]
        for name, preset in dimension.presets.items():
            if name != dimension.default:
                choices.append(DimensionChoice(name, tuple(preset.values)))
        axes.append((axis, choices))

    names = [axis for axis, _ in axes]
    return [dict(zip(names, combo)) for combo in itertools.product(*(choices for _, choices in axes))]


class FormSchemaSource(Protocol):
    """Where form definitions come from."""

    def find_form_elements(self, identifier: str, combination: Combination) -> Optional[list[FormElementData]]:
        """
        Elements of the single form writing into `identifier` for this combination.

        Returns None when no form, more than one form, or a form without
        elements is found.
        """
        ...


class StaticSchemaSource:
    """Form definitions kept in memory, independent of dimensions."""

    def __init__(self, forms: Mapping[str, Iterable[FormElementData]]):
        self._forms = {identifier: list(elements) for identifier, elements in forms.items()}

    def find_form_elements(self, identifier: str, combination: Combination) -> Optional[list[FormElementData]]:
        return self._forms.get(identifier) or None


class DatabaseSchemaSource:
    """Form definitions stored in the form_definitions/form_elements tables."""

    def __init__(self, db: Session):
        self._db = db

    @staticmethod
    def _rank(definition: FormDefinition, combination: Combination) -> Optional[int]:
        """
        How well a definition fits a combination (lower is better, None = no match).

        A localized axis matches when its value is in the preset's fallback
        chain, ranked by position; an axis the definition is not localized in
        matches after every fallback value.
        """
        rank = 0
        dimensions = definition.dimensions or {}
        for axis, choice in combination.items():
            value = dimensions.get(axis)
            if value is None:
                rank += len(choice.values)
            elif value in choice.values:
                rank += choice.values.index(value)
            else:
                return None
        return rank

    def find_form_elements(self, identifier: str, combination: Combination) -> Optional[list[FormElementData]]:
        definitions = (
            self._db.query(FormDefinition)
            .options(selectinload(FormDefinition.elements))
            .filter(FormDefinition.identifier == identifier)
            .all()
        )

        ranked = [(self._rank(d, combination), d) for d in definitions]
        ranked = [(rank, d) for rank, d in ranked if rank is not None]
        if not ranked:
            return None

        best = min(rank for rank, _ in ranked)
        winners = [d for rank, d in ranked if rank == best]
        if len(winners) != 1:
            logger.debug(f"Ambiguous form definitions for '{identifier}': {len(winners)} candidates")
            return None

        elements = [
            FormElementData(
                type_name=element.type_name,
                node_identifier=element.node_identifier,
                speaking_identifier=element.speaking_identifier,
                label=element.label,
            )
            for element in winners[0].elements
        ]
        return elements or None


class SchemaResolver:
    """
    Resolves field keys of one bucket against its form definition.

    The first combination of content dimensions that yields form elements
    wins; the result is memoized for the lifetime of the resolver.
    """

    def __init__(
        self,
        identifier: str,
        source: Optional[FormSchemaSource] = None,
        combinations: Optional[list[Combination]] = None,
        ignored_in_export: Iterable[str] = (),
        ignored_in_finisher: Iterable[str] = (),
    ):
        self.identifier = identifier
        self._source = source
        self._combinations = combinations if combinations is not None else [{}]
        self._ignored_in_export = frozenset(ignored_in_export)
        self._ignored_in_finisher = frozenset(ignored_in_finisher)
        self._elements: Optional[list[FormElementData]] = None
        self._loaded = False

    def elements(self) -> Optional[list[FormElementData]]:
        if self._loaded:
            return self._elements
        self._loaded = True

        if self._source is None:
            return None

        for combination in self._combinations:
            elements = self._source.find_form_elements(self.identifier, combination)
            if elements:
                self._elements = elements
                break
        return self._elements

    def resolve(self, key: str) -> Optional[FormElementData]:
        """Match key against node identifier, speaking identifier and display label."""
        for element in self.elements() or ():
            if element.node_identifier == key:
                return element
            if element.speaking_identifier == key:
                return element
            if element.display_label == key:
                return element
        return None

    def must_be_ignored_in_export(self, type_name: str) -> bool:
        return type_name in self._ignored_in_export

    def must_be_ignored_in_finisher(self, key: str) -> bool:
        """Without a form definition nothing is known about the field, so it is kept."""
        element = self.resolve(key)
        if element is None:
            return False
        return element.type_name in self._ignored_in_finisher


def schema_resolver_for(db: Session, bucket: str, settings: Optional[Settings] = None) -> SchemaResolver:
    """Resolver backed by the database and the configured dimensions and ignore lists."""
    settings = settings or get_settings()
    return SchemaResolver(
        bucket,
        source=DatabaseSchemaSource(db),
        combinations=prepare_dimensions(settings.CONTENT_DIMENSIONS),
        ignored_in_export=settings.NODE_TYPES_IGNORED_IN_EXPORT,
        ignored_in_finisher=settings.NODE_TYPES_IGNORED_IN_FINISHER,
    )
