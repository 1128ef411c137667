"""
Rule catalog: which first-species rules run, and at which severity.

The catalog is read from a JSON document of the form
    {"species": "first", "rules": [{"id": ..., "enabled": ..., "severity": ..., "description": ...}, ...]}
and validated into frozen models. Editing a rule returns a new catalog, so a lint
run always sees the snapshot it was given.
"""
import json
import logging
import os
from enum import Enum
from functools import lru_cache
from typing import Iterator, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from constants import DEFAULT_RULE_CATALOG_FILENAME
from counterpoint_rules_base import Severity

logger = logging.getLogger(__name__)

ROOT_PATH = os.path.dirname(os.path.abspath(__file__))  # This is src/
DEFAULT_RULE_CATALOG_PATH = os.path.join(ROOT_PATH, DEFAULT_RULE_CATALOG_FILENAME)


class RuleCatalogError(Exception):
    """Raised when a rule catalog document cannot be read or does not validate."""
    def __init__(self, source, original_error):
        self.source = source
        self.original_error = original_error
        super().__init__(f"Invalid rule catalog '{source}': {type(original_error).__name__}: {original_error}")


class RuleId(str, Enum):
    """Rule ids that have an evaluator."""
    EQUAL_LENGTH = 'equalLength'
    WHOLE_NOTES_ONLY = 'wholeNotesOnly'
    NO_VOICE_CROSSING = 'noVoiceCrossing'
    VERTICAL_CONSONANCE = 'verticalConsonance'
    PERFECT_START_AND_END = 'perfectStartAndEnd'
    NO_PARALLEL_PERFECTS = 'noParallelPerfects'
    NO_REPEATED_NOTES_CF = 'noRepeatedNotesCF'
    ONE_REPEATED_NOTE_CPT = 'oneRepeatedNoteCPT'
    UNIQUE_CLIMAX = 'uniqueClimax'
    CADENCE_CF = 'cadenceCF'
    CADENCE_CPT = 'cadenceCPT'

    def __str__(self):
        return self.value


class RuleDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')

    id: str = Field(..., min_length=1)
    enabled: bool = True
    severity: Severity = Severity.ERROR
    description: str = ''

    @property
    def rule_id(self) -> RuleId | None:
        """The typed rule id, or None when no evaluator exists for this id yet."""
        try:
            return RuleId(self.id)
        except ValueError:
            return None


class RuleCatalog(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')

    species: Literal['first'] = 'first'
    rules: tuple[RuleDescriptor, ...] = ()

    @field_validator('rules')
    @classmethod
    def validate_unique_ids(cls, rules: tuple[RuleDescriptor, ...]) -> tuple[RuleDescriptor, ...]:
        seen = set()
        for rule in rules:
            if rule.id in seen:
                raise ValueError(f"duplicate rule id '{rule.id}'")
            seen.add(rule.id)
        return rules

    def get(self, rule_id: str) -> RuleDescriptor | None:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None

    def implemented_rules(self) -> Iterator[tuple[RuleId, RuleDescriptor]]:
        """
        Enabled rules with an evaluator, in declaration order.
        Disabled rules and ids without an evaluator are skipped, not reported.
        """
        for rule in self.rules:
            if not rule.enabled:
                logger.debug("Skipping disabled rule '%s'", rule.id)
                continue
            rule_id = rule.rule_id
            if rule_id is None:
                logger.debug("Skipping rule '%s': no evaluator implemented", rule.id)
                continue
            yield rule_id, rule

    def with_rule(self, rule_id: str, enabled: bool | None = None,
                  severity: Severity | str | None = None) -> 'RuleCatalog':
        """Return a new catalog with one rule's enabled flag and/or severity changed."""
        if self.get(rule_id) is None:
            raise KeyError(f"No rule '{rule_id}' in catalog")

        update = {}
        if enabled is not None:
            update['enabled'] = enabled
        if severity is not None:
            update['severity'] = severity

        rules = []
        for rule in self.rules:
            if rule.id == rule_id:
                # model_copy does not validate, so rebuild the descriptor
                try:
                    rule = RuleDescriptor.model_validate({**rule.model_dump(), **update})
                except ValidationError as e:
                    raise RuleCatalogError(f"rule '{rule_id}'", e) from e
            rules.append(rule)
        rules = tuple(rules)
        return self.model_copy(update={'rules': rules})


def parse_rule_catalog(data: dict, source: str = '<dict>') -> RuleCatalog:
    try:
        return RuleCatalog.model_validate(data)
    except ValidationError as e:
        raise RuleCatalogError(source, e) from e


def load_rule_catalog(path: str) -> RuleCatalog:
    """Read and validate a rule catalog JSON file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RuleCatalogError(path, e) from e

    catalog = parse_rule_catalog(data, source=path)
    logger.debug("Loaded %d rules from %s", len(catalog.rules), path)
    return catalog


@lru_cache(maxsize=1)
def default_rule_catalog() -> RuleCatalog:
    """
    The catalog in first_species_rules.json next to this module, read once per process.
    Edit that file to change which rules run by default.
    """
    return load_rule_catalog(DEFAULT_RULE_CATALOG_PATH)
