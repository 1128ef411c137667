"""Tests for running a whole rule catalog over an excerpt."""

import pytest

import counterpoint_rules
from counterpoint_rules import (CounterpointRuleError, CounterpointRules, RULE_IMPLEMENTATIONS,
                                lint_first_species, lint_staves, pair_staves)
from counterpoint_rules_base import Severity
from Note import Note, notes
from rule_catalog import RuleCatalog, RuleDescriptor, RuleId, default_rule_catalog


# Breaks several rules at once: lengths differ, dissonant start, repeated cantus note, both cadences.
MESSY_CANTUS = [60, 60, 62]
MESSY_COUNTERPOINT = [61, 62]
MESSY_EXPECTED = [
    ('equalLength', None),
    ('verticalConsonance', 0),
    ('verticalConsonance', 1),
    ('perfectStartAndEnd', 0),
    ('perfectStartAndEnd', 1),
    ('noRepeatedNotesCF', 1),
    ('cadenceCF', 2),
    ('cadenceCPT', 1),
]


# Breaks all eleven rules: a half note, a crossing and dissonant last pair, parallel fifths into the
# second pair, a repeated cantus note, three counterpoint climaxes and neither cadence.
EVERY_RULE_CANTUS = notes([60, 62, 62, 65, 60, 67])
EVERY_RULE_COUNTERPOINT = [Note(67), Note(69, duration=0.5), Note(69), Note(69), Note(55)]


def _ids_and_indices(violations):
    return [(v.rule_id, v.index) for v in violations]


def _rule_ids(violations):
    return {v.rule_id for v in violations}


def test_every_rule_id_has_an_evaluator():
    assert set(RULE_IMPLEMENTATIONS) == set(RuleId)


class TestLintFirstSpecies:

    def test_accepts_a_valid_line(self, valid_cantus, valid_counterpoint):
        assert lint_first_species(valid_cantus, valid_counterpoint) == []

    def test_findings_follow_catalog_then_rule_order(self):
        result = lint_first_species(notes(MESSY_CANTUS), notes(MESSY_COUNTERPOINT))
        assert _ids_and_indices(result) == MESSY_EXPECTED

    def test_reordered_catalog_reorders_findings(self):
        catalog = default_rule_catalog()
        reversed_catalog = RuleCatalog(rules=tuple(reversed(catalog.rules)))
        result = lint_first_species(notes(MESSY_CANTUS), notes(MESSY_COUNTERPOINT), catalog=reversed_catalog)
        rule_sequence = []
        for rule_id, _ in _ids_and_indices(result):
            if not rule_sequence or rule_sequence[-1] != rule_id:
                rule_sequence.append(rule_id)
        assert rule_sequence == ['cadenceCPT', 'cadenceCF', 'noRepeatedNotesCF',
                                 'perfectStartAndEnd', 'verticalConsonance', 'equalLength']

    def test_every_rule_fires_on_the_broken_exercise(self):
        full = lint_first_species(EVERY_RULE_CANTUS, EVERY_RULE_COUNTERPOINT)
        assert _rule_ids(full) == {rule_id.value for rule_id in RuleId}
        assert ('noParallelPerfects', 1) in _ids_and_indices(full)
        assert ('oneRepeatedNoteCPT', 3) in _ids_and_indices(full)

    @pytest.mark.parametrize('disabled_rule', [rule_id.value for rule_id in RuleId])
    def test_disabling_a_rule_removes_only_its_findings(self, disabled_rule):
        full = lint_first_species(EVERY_RULE_CANTUS, EVERY_RULE_COUNTERPOINT)
        catalog = default_rule_catalog().with_rule(disabled_rule, enabled=False)
        reduced = lint_first_species(EVERY_RULE_CANTUS, EVERY_RULE_COUNTERPOINT, catalog=catalog)

        assert any(v.rule_id == disabled_rule for v in full)
        assert not any(v.rule_id == disabled_rule for v in reduced)
        assert reduced == [v for v in full if v.rule_id != disabled_rule]

    def test_unknown_rule_ids_are_ignored(self, valid_cantus):
        catalog = RuleCatalog(rules=(
            RuleDescriptor(id='noTritoneOutlines', enabled=True, severity='error'),
            RuleDescriptor(id='equalLength', enabled=True, severity='warning'),
        ))
        result = lint_first_species(valid_cantus, notes([69]), catalog=catalog)
        assert _ids_and_indices(result) == [('equalLength', None)]
        assert result[0].severity == Severity.WARNING

    def test_runs_are_deterministic(self):
        cantus, counterpoint = notes(MESSY_CANTUS), notes(MESSY_COUNTERPOINT)
        first = lint_first_species(cantus, counterpoint, 'C major')
        second = lint_first_species(cantus, counterpoint, 'C major')
        assert first == second
        assert [repr(v) for v in first] == [repr(v) for v in second]

    @pytest.mark.parametrize('cantus, counterpoint', [([], []), ([60], [67])])
    def test_short_excerpts_do_not_fail(self, cantus, counterpoint):
        assert lint_first_species(notes(cantus), notes(counterpoint)) == []

    def test_flags_from_the_original_exercises(self, valid_cantus):
        cases = [
            ([60, 62, 64], [67, 68, 71], 'verticalConsonance'),
            ([60, 62, 64], [67, 62, 71], 'noVoiceCrossing'),
            ([60, 62, 64], [67, 69, 71], 'noParallelPerfects'),
            ([60, 60, 62, 64], [67, 69, 71, 72], 'noRepeatedNotesCF'),
            ([62, 64, 65, 67, 69, 67, 62, 60], [69, 69, 74, 71, 71, 71, 71, 72], 'oneRepeatedNoteCPT'),
            ([62, 64, 69, 67, 69, 67, 62, 60], [69, 67, 74, 71, 78, 71, 71, 72], 'uniqueClimax'),
            ([62, 64, 65, 67, 69, 67, 64, 60], [69, 67, 74, 71, 78, 71, 69, 72], 'cadenceCF'),
            ([62, 64, 65, 67, 69, 67, 64, 60], [69, 67, 74, 71, 78, 71, 69, 72], 'cadenceCPT'),
        ]
        for cantus, counterpoint, expected_rule in cases:
            assert expected_rule in _rule_ids(lint_first_species(notes(cantus), notes(counterpoint)))

    def test_cantus_as_upper_voice(self):
        cantus_upper = notes([72, 74, 76])
        counterpoint_lower = notes([60, 62, 64])
        result = lint_first_species(cantus_upper, counterpoint_lower, cantus_is_upper_voice=True)
        assert 'noVoiceCrossing' not in _rule_ids(result)

    def test_class_form_uses_given_catalog(self, only_rule):
        cp_rules = CounterpointRules(only_rule('verticalConsonance', severity='warning'))
        result = cp_rules.validate_all_rules(notes(MESSY_CANTUS), notes(MESSY_COUNTERPOINT))
        assert _ids_and_indices(result) == [('verticalConsonance', 0), ('verticalConsonance', 1)]
        assert {v.severity for v in result} == {Severity.WARNING}

    def test_evaluator_fault_is_wrapped_with_rule_context(self, monkeypatch):
        def broken_rule(rulename, **kwargs):
            raise ZeroDivisionError("boom")

        monkeypatch.setitem(counterpoint_rules.RULE_IMPLEMENTATIONS, RuleId.EQUAL_LENGTH, broken_rule)
        with pytest.raises(CounterpointRuleError) as excinfo:
            lint_first_species(notes([60]), notes([67]))
        assert excinfo.value.rule_name == 'equalLength'
        assert isinstance(excinfo.value.__cause__, ZeroDivisionError)

    def test_unsupported_key_signature_is_rejected(self):
        with pytest.raises(ValueError):
            lint_first_species(notes([60]), notes([67]), key_signature='F# major')


class TestLintStaves:

    def test_empty_staves_give_a_single_notice(self):
        result = lint_staves([None, None], [None, notes([60])[0]])
        assert _ids_and_indices(result) == [('empty', None)]
        assert result[0].severity == Severity.WARNING

    def test_rests_are_dropped_with_a_notice(self, valid_cantus, valid_counterpoint):
        upper = list(valid_counterpoint)
        upper[2] = None
        result = lint_staves(upper, valid_cantus, 'C major')
        assert _ids_and_indices(result) == [('incomplete', None)]

    def test_complete_staves_have_no_notice(self, valid_cantus, valid_counterpoint):
        assert lint_staves(valid_counterpoint, valid_cantus) == []

    def test_pair_staves_assigns_roles(self):
        upper, lower = notes([72, 74]), notes([60, 62, 64])
        cantus, counterpoint, measure_count = pair_staves(upper, lower, cantus_staff='upper')
        assert cantus == upper
        assert counterpoint == lower[:2]
        assert measure_count == 3

    def test_pair_staves_rejects_unknown_staff(self):
        with pytest.raises(ValueError):
            pair_staves([], [], cantus_staff='middle')
