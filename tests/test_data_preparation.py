import json

import pytest

from counterpoint_rules import lint_staves
from counterpoint_rules_base import RuleViolation, Severity
from data_preparation import (Excerpt, ExcerptError, feature_counts, load_excerpt, parse_excerpt,
                              parse_staff_entry, summarize_violations, violations_to_df)
from key_signature import KeySignature
from Note import Note
from rule_catalog import default_rule_catalog


VIOLATIONS = [
    RuleViolation('equalLength', Severity.ERROR, 'Lengths differ.'),
    RuleViolation('verticalConsonance', Severity.ERROR, 'Dissonance.', index=0),
    RuleViolation('verticalConsonance', Severity.ERROR, 'Dissonance.', index=3),
    RuleViolation('uniqueClimax', Severity.WARNING, 'Climax twice.', voice_name='cantus'),
]


@pytest.mark.parametrize('entry, expected', [
    (60, Note(60)),
    ('2d', Note(62, duration=0.5)),
    (None, None),
    ('r', None),
    ({'pitch': 60, 'duration': 'half'}, Note(60, duration=0.5)),
    ({'pitch': 60, 'duration': '0'}, Note(60, duration=2.0)),
    ({'pitch': 64}, Note(64)),
])
def test_parse_staff_entry(entry, expected):
    assert parse_staff_entry(entry) == expected


@pytest.mark.parametrize('entry', [True, 'zz9', 60.5, {'pitch': 60, 'duration': 'dotted'}, {'duration': 'whole'},
                                   200, -1, {'pitch': 128, 'duration': 'half'}, {'pitch': True}])
def test_parse_staff_entry_rejects_invalid(entry):
    with pytest.raises(ExcerptError):
        parse_staff_entry(entry)


def test_parse_excerpt():
    excerpt = parse_excerpt({'key': 'Bb', 'cantus_staff': 'upper', 'upper': [70, None], 'lower': ['B-', 'c']})
    assert excerpt == Excerpt(upper=[Note(70), None], lower=[Note(58), Note(60)],
                              key_signature=KeySignature.B_FLAT_MAJOR, cantus_staff='upper')


def test_parse_excerpt_defaults():
    excerpt = parse_excerpt({})
    assert excerpt.key_signature is KeySignature.C_MAJOR
    assert excerpt.cantus_staff == 'lower'
    assert excerpt.upper == [] and excerpt.lower == []


@pytest.mark.parametrize('data', [
    [],
    {'key': 'H major'},
    {'cantus_staff': 'middle'},
    {'upper': 'c d e'},
])
def test_parse_excerpt_rejects_invalid(data):
    with pytest.raises(ExcerptError):
        parse_excerpt(data)


def test_load_example_excerpt(examples_dir):
    excerpt = load_excerpt(str(examples_dir / 'valid_first_species.json'))
    assert excerpt.lower[0] == Note(62)
    assert lint_staves(excerpt.upper, excerpt.lower, excerpt.key_signature, cantus_staff=excerpt.cantus_staff) == []


def test_load_excerpt_errors(tmp_path):
    with pytest.raises(ExcerptError):
        load_excerpt(str(tmp_path / 'missing.json'))
    path = tmp_path / 'broken.json'
    path.write_text('{"upper": [60,', encoding='utf-8')
    with pytest.raises(ExcerptError):
        load_excerpt(str(path))


def test_feature_counts_keep_first_appearance_order():
    assert feature_counts(VIOLATIONS) == {'equalLength': 1, 'verticalConsonance': 2, 'uniqueClimax': 1}
    assert list(feature_counts(VIOLATIONS)) == ['equalLength', 'verticalConsonance', 'uniqueClimax']


def test_violations_to_df():
    df = violations_to_df(VIOLATIONS)
    assert list(df.columns) == ['rule_id', 'severity', 'index', 'voice_name', 'message']
    assert list(df['rule_id']) == ['equalLength', 'verticalConsonance', 'verticalConsonance', 'uniqueClimax']
    assert df['index'].isna().tolist() == [True, False, False, True]
    assert df.loc[2, 'index'] == 3
    assert set(df['severity']) == {'error', 'warning'}


def test_violations_to_df_empty():
    df = violations_to_df([])
    assert df.empty
    assert list(df.columns) == ['rule_id', 'severity', 'index', 'voice_name', 'message']


def test_summarize_violations_in_catalog_order():
    summary = summarize_violations(list(reversed(VIOLATIONS)), default_rule_catalog())
    assert list(summary['rule_id']) == ['equalLength', 'verticalConsonance', 'uniqueClimax']
    assert list(summary['error']) == [1, 2, 0]
    assert list(summary['warning']) == [0, 0, 1]
    assert list(summary['total']) == [1, 2, 1]


def test_summarize_without_catalog_keeps_emission_order():
    summary = summarize_violations(list(reversed(VIOLATIONS)))
    assert list(summary['rule_id']) == ['uniqueClimax', 'verticalConsonance', 'equalLength']


def test_summarize_no_violations():
    summary = summarize_violations([])
    assert summary.empty
    assert list(summary.columns) == ['rule_id', 'error', 'warning', 'total']
