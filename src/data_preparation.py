import json
from collections import defaultdict
from dataclasses import dataclass, field

import pandas as pd

from counterpoint_rules_base import RuleViolation, Severity
from key_signature import KeySignature
from Note import Note
from rule_catalog import RuleCatalog
from constants import DEFAULT_KEY_SIGNATURE, DURATION_MAP, DURATION_NAMES


VIOLATION_COLUMNS = ['rule_id', 'severity', 'index', 'voice_name', 'message']
DURATION_NAME_TO_VALUE = {name: value for value, name in DURATION_NAMES.items()}


class ExcerptError(Exception):
    """Raised when an excerpt file cannot be read or contains an invalid entry."""


@dataclass(frozen=True)
class Excerpt:
    upper: list[Note | None] = field(default_factory=list)
    lower: list[Note | None] = field(default_factory=list)
    key_signature: KeySignature = KeySignature(DEFAULT_KEY_SIGNATURE)
    cantus_staff: str = 'lower'


# --- Loading excerpts ---

def parse_staff_entry(entry) -> Note | None:
    """
    One measure of a staff. Accepted forms:
        60                               whole note, MIDI pitch
        "1c", "2B-", "r"                 kern token
        null                             rest
        {"pitch": 60, "duration": "half"}  duration as a name or kern duration token
    """
    if entry is None:
        return None
    # bool is a subclass of int, and never a pitch
    if isinstance(entry, bool):
        raise ExcerptError(f"Invalid staff entry {entry!r}")
    try:
        if isinstance(entry, int):
            return Note(pitch=entry)
        if isinstance(entry, str):
            return Note.from_kern_token(entry)
        if isinstance(entry, dict) and isinstance(entry.get('pitch'), int) and not isinstance(entry['pitch'], bool):
            duration = entry.get('duration', 'whole')
            if duration in DURATION_NAME_TO_VALUE:
                return Note(pitch=entry['pitch'], duration=DURATION_NAME_TO_VALUE[duration])
            if str(duration) in DURATION_MAP:
                return Note(pitch=entry['pitch'], duration=DURATION_MAP[str(duration)])
            raise ExcerptError(f"Unknown duration {duration!r} in staff entry {entry!r}")
    except ValueError as e:
        raise ExcerptError(str(e)) from e

    raise ExcerptError(f"Invalid staff entry {entry!r}")


def parse_excerpt(data: dict) -> Excerpt:
    if not isinstance(data, dict):
        raise ExcerptError("Excerpt must be a JSON object with 'upper' and 'lower' staves")

    try:
        key_signature = KeySignature.from_label(data.get('key', DEFAULT_KEY_SIGNATURE))
    except ValueError as e:
        raise ExcerptError(str(e)) from e

    cantus_staff = data.get('cantus_staff', 'lower')
    if cantus_staff not in ('upper', 'lower'):
        raise ExcerptError(f"cantus_staff must be 'upper' or 'lower', got {cantus_staff!r}")

    staves = {}
    for staff_name in ('upper', 'lower'):
        entries = data.get(staff_name, [])
        if not isinstance(entries, list):
            raise ExcerptError(f"Staff '{staff_name}' must be a list")
        staves[staff_name] = [parse_staff_entry(entry) for entry in entries]

    return Excerpt(upper=staves['upper'], lower=staves['lower'],
                   key_signature=key_signature, cantus_staff=cantus_staff)


def load_excerpt(path: str) -> Excerpt:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ExcerptError(f"Could not read excerpt '{path}': {e}") from e
    return parse_excerpt(data)


# --- Data preparation functions for counterpoint violations ---

def feature_counts(violations: list[RuleViolation]) -> dict[str, int]:
    '''
    Number of findings per rule id, in order of first appearance.
    e.g. {"verticalConsonance": 2, "cadenceCF": 1}
    '''
    counts = defaultdict(int)
    for violation in violations:
        counts[violation.rule_id] += 1
    return dict(counts)


def violations_to_df(violations: list[RuleViolation]) -> pd.DataFrame:
    """One row per finding, in emission order. Whole-line findings have a missing index."""
    df = pd.DataFrame([violation.to_dict() for violation in violations], columns=VIOLATION_COLUMNS)
    df['index'] = df['index'].astype('Int64')
    return df


def sort_df_by_rule_order(df: pd.DataFrame, catalog: RuleCatalog) -> pd.DataFrame:
    """
    Sort rows by the position of their rule in the catalog.
    Rules that are not in the catalog (e.g. the 'incomplete' notice) come first.
    """
    if df.empty:
        return df
    rule_order = {rule.id: position for position, rule in enumerate(catalog.rules)}
    return (df.assign(_rule_position=df['rule_id'].map(rule_order).fillna(-1))
              .sort_values('_rule_position', kind='stable')
              .drop(columns='_rule_position'))


def summarize_violations(violations: list[RuleViolation], catalog: RuleCatalog | None = None) -> pd.DataFrame:
    """
    Count findings per rule and severity.
    Columns: rule_id, error, warning, total. Ordered by catalog when one is given.
    """
    severities = [severity.value for severity in Severity]
    df = violations_to_df(violations)
    if df.empty:
        return pd.DataFrame(columns=['rule_id', *severities, 'total'])

    # crosstab sorts its index, so restore the order in which rules first reported
    summary = (pd.crosstab(df['rule_id'], df['severity'])
                 .reindex(index=list(feature_counts(violations)), columns=severities, fill_value=0))
    summary['total'] = summary[severities].sum(axis=1)
    summary = summary.reset_index()
    summary.columns.name = None

    if catalog is not None:
        summary = sort_df_by_rule_order(summary, catalog).reset_index(drop=True)
    return summary
