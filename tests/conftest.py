from pathlib import Path

import pytest

from Note import Note, notes
from rule_catalog import RuleCatalog, RuleDescriptor


PROJECT_ROOT = Path(__file__).resolve().parent.parent

# A clean first-species exercise in C major: cantus below, counterpoint above.
VALID_CANTUS = [62, 64, 65, 67, 69, 67, 62, 60]
VALID_COUNTERPOINT = [69, 67, 74, 71, 78, 71, 71, 72]


@pytest.fixture
def valid_cantus() -> list[Note]:
    return notes(VALID_CANTUS)


@pytest.fixture
def valid_counterpoint() -> list[Note]:
    return notes(VALID_COUNTERPOINT)


@pytest.fixture
def only_rule():
    """Factory for a catalog that enables a single rule."""
    def _only_rule(rule_id: str, severity: str = 'error') -> RuleCatalog:
        return RuleCatalog(rules=(RuleDescriptor(id=rule_id, enabled=True, severity=severity),))
    return _only_rule


@pytest.fixture
def examples_dir() -> Path:
    return PROJECT_ROOT / 'examples'


@pytest.fixture
def shipped_catalog_path() -> Path:
    return PROJECT_ROOT / 'src' / 'first_species_rules.json'
