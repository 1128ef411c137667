import logging
from typing import Callable, Literal

from counterpoint_rules_base import RuleViolation, Severity
from counterpoint_rules_first_species import CounterpointRulesFirstSpecies
from key_signature import KeySignature
from Note import Note
from rule_catalog import RuleCatalog, RuleId, default_rule_catalog

from constants import DEFAULT_KEY_SIGNATURE

logger = logging.getLogger(__name__)

EMPTY_EXCERPT_RULE_ID = 'empty'
INCOMPLETE_EXCERPT_RULE_ID = 'incomplete'


class CounterpointRuleError(Exception):
    """Custom exception that includes rule context information."""
    def __init__(self, rule_name, original_error, rule_class_name=None):
        self.rule_name = rule_name
        self.original_error = original_error
        self.rule_class_name = rule_class_name

        error_msg = f"Error in rule '{rule_name}'"
        if rule_class_name:
            error_msg += f" (from {rule_class_name})"
        error_msg += f": {type(original_error).__name__}: {str(original_error)}"

        super().__init__(error_msg)


# One evaluator per rule id. Adding a RuleId without an entry here is caught by the tests.
RULE_IMPLEMENTATIONS: dict[RuleId, Callable[..., list[RuleViolation]]] = {
    RuleId.EQUAL_LENGTH: CounterpointRulesFirstSpecies.equal_length,
    RuleId.WHOLE_NOTES_ONLY: CounterpointRulesFirstSpecies.whole_notes_only,
    RuleId.NO_VOICE_CROSSING: CounterpointRulesFirstSpecies.no_voice_crossing,
    RuleId.VERTICAL_CONSONANCE: CounterpointRulesFirstSpecies.vertical_consonance,
    RuleId.PERFECT_START_AND_END: CounterpointRulesFirstSpecies.perfect_start_and_end,
    RuleId.NO_PARALLEL_PERFECTS: CounterpointRulesFirstSpecies.no_parallel_perfects,
    RuleId.NO_REPEATED_NOTES_CF: CounterpointRulesFirstSpecies.no_repeated_notes_cf,
    RuleId.ONE_REPEATED_NOTE_CPT: CounterpointRulesFirstSpecies.one_repeated_note_cpt,
    RuleId.UNIQUE_CLIMAX: CounterpointRulesFirstSpecies.unique_climax,
    RuleId.CADENCE_CF: CounterpointRulesFirstSpecies.cadence_cf,
    RuleId.CADENCE_CPT: CounterpointRulesFirstSpecies.cadence_cpt,
}


class CounterpointRules:
    """Runs the enabled rules of a catalog over a cantus and a counterpoint line."""

    def __init__(self, catalog: RuleCatalog | None = None):
        self.catalog = catalog if catalog is not None else default_rule_catalog()

    def validate_all_rules(self, cantus: list[Note], counterpoint: list[Note],
                           key_signature: KeySignature | str = DEFAULT_KEY_SIGNATURE,
                           cantus_is_upper_voice: bool = False) -> list[RuleViolation]:
        """
        Findings in catalog order, and within a rule in the order the rule emits them.
        Nothing is deduplicated or sorted by severity.
        """
        key_signature = KeySignature.from_label(key_signature)
        violations = []

        for rule_id, descriptor in self.catalog.implemented_rules():
            func = RULE_IMPLEMENTATIONS[rule_id]
            try:
                result = func(func.__name__,
                              cantus=cantus,
                              counterpoint=counterpoint,
                              severity=descriptor.severity,
                              key_signature=key_signature,
                              cantus_is_upper_voice=cantus_is_upper_voice)
            except Exception as e:
                # Re-raise with rule context
                raise CounterpointRuleError(rule_id.value, e, CounterpointRulesFirstSpecies.__name__) from e

            logger.debug("Rule '%s' produced %d finding(s)", rule_id.value, len(result))
            violations.extend(result)

        return violations


def lint_first_species(cantus: list[Note], counterpoint: list[Note],
                       key_signature: KeySignature | str = DEFAULT_KEY_SIGNATURE,
                       catalog: RuleCatalog | None = None,
                       cantus_is_upper_voice: bool = False) -> list[RuleViolation]:
    """Lint a cantus firmus and its counterpoint. Uses the default catalog when none is given."""
    cp_rules = CounterpointRules(catalog)
    return cp_rules.validate_all_rules(cantus, counterpoint, key_signature, cantus_is_upper_voice)


def pair_staves(upper_staff: list[Note | None], lower_staff: list[Note | None],
                cantus_staff: Literal['upper', 'lower'] = 'lower') -> tuple[list[Note], list[Note], int]:
    """
    Keep only the measures where both staves hold a note.
    Returns (cantus, counterpoint, measure_count); a staff shorter than the other counts as rests.
    """
    if cantus_staff not in ('upper', 'lower'):
        raise ValueError(f"cantus_staff must be 'upper' or 'lower', got '{cantus_staff}'")

    cantus_line, counterpoint_line = (lower_staff, upper_staff) if cantus_staff == 'lower' else (upper_staff, lower_staff)
    measure_count = max(len(upper_staff), len(lower_staff))

    cantus, counterpoint = [], []
    for measure in range(measure_count):
        cantus_note = cantus_line[measure] if measure < len(cantus_line) else None
        counterpoint_note = counterpoint_line[measure] if measure < len(counterpoint_line) else None
        if cantus_note is not None and counterpoint_note is not None:
            cantus.append(cantus_note)
            counterpoint.append(counterpoint_note)

    return cantus, counterpoint, measure_count


def lint_staves(upper_staff: list[Note | None], lower_staff: list[Note | None],
                key_signature: KeySignature | str = DEFAULT_KEY_SIGNATURE,
                catalog: RuleCatalog | None = None,
                cantus_staff: Literal['upper', 'lower'] = 'lower') -> list[RuleViolation]:
    """
    Lint two staves that may contain rests (None). Measures with a rest in either staff
    are left out; a notice is put in front of the findings when that happens.
    """
    cantus, counterpoint, measure_count = pair_staves(upper_staff, lower_staff, cantus_staff)

    if not cantus:
        return [RuleViolation(
            rule_id=EMPTY_EXCERPT_RULE_ID,
            severity=Severity.WARNING,
            message="Add notes to both staves to run first-species linting.",
        )]

    violations = lint_first_species(cantus, counterpoint, key_signature, catalog,
                                    cantus_is_upper_voice=(cantus_staff == 'upper'))

    if len(cantus) < measure_count:
        logger.debug("Linted %d of %d measures; the rest contain rests", len(cantus), measure_count)
        violations.insert(0, RuleViolation(
            rule_id=INCOMPLETE_EXCERPT_RULE_ID,
            severity=Severity.WARNING,
            message="Some measures contain rests; linting currently evaluates only fully-notated note pairs.",
        ))

    return violations
