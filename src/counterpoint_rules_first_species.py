from counterpoint_rules_base import CounterpointRulesBase, RuleViolation, Severity
from Note import Note
from key_signature import KeySignature
from rule_catalog import RuleId


class CounterpointRulesFirstSpecies(CounterpointRulesBase):
    """
    %%% Rules for two voices, note against note %%%

    Every rule is called as rule(rulename, **kwargs) with the keyword arguments
    cantus, counterpoint, severity, key_signature and cantus_is_upper_voice.
    Rules never fail on short or empty voices; they report nothing instead.
    """

    """ %% Rhythm and length %% """
    @staticmethod
    def equal_length(rulename, **kwargs) -> list[RuleViolation]:
        """ Cantus and counterpoint have the same number of notes. """
        rule_id = RuleId.EQUAL_LENGTH

        cantus: list[Note] = kwargs['cantus']
        counterpoint: list[Note] = kwargs['counterpoint']
        severity = Severity(kwargs['severity'])

        if len(cantus) == len(counterpoint):
            return []
        return [RuleViolation(
            rule_id=rule_id.value,
            severity=severity,
            message=f"Cantus has {len(cantus)} notes but counterpoint has {len(counterpoint)}; "
                    f"both lines must have the same number of notes.",
        )]

    @staticmethod
    def whole_notes_only(rulename, **kwargs) -> list[RuleViolation]:
        """ Every note of both voices is a whole note. Cantus findings come first. """
        rule_id = RuleId.WHOLE_NOTES_ONLY

        severity = Severity(kwargs['severity'])
        violations = []

        for voice_name in CounterpointRulesBase.voice_names:
            voice: list[Note] = kwargs[voice_name]
            for index, note in enumerate(voice):
                if not note.is_whole_note:
                    violations.append(RuleViolation(
                        rule_id=rule_id.value,
                        severity=severity,
                        message=f"{voice_name.capitalize()} note {note.name} is a {note.duration_name} note, not a whole note.",
                        index=index,
                        voice_name=voice_name,
                    ))

        return violations

    """ %% Vertical relationships %% """
    @staticmethod
    def no_voice_crossing(rulename, **kwargs) -> list[RuleViolation]:
        """
        The voice on the lower staff stays strictly below the voice on the upper staff.
        The cantus is the lower voice unless cantus_is_upper_voice is set.
        """
        rule_id = RuleId.NO_VOICE_CROSSING

        cantus: list[Note] = kwargs['cantus']
        counterpoint: list[Note] = kwargs['counterpoint']
        severity = Severity(kwargs['severity'])
        cantus_is_upper_voice = kwargs.get('cantus_is_upper_voice', False)

        lower_voice, upper_voice = CounterpointRulesBase._lower_and_upper(cantus, counterpoint, cantus_is_upper_voice)
        lower_name, upper_name = ('counterpoint', 'cantus') if cantus_is_upper_voice else ('cantus', 'counterpoint')

        violations = []
        for index in range(CounterpointRulesBase._shared_length(cantus, counterpoint)):
            lower_note, upper_note = lower_voice[index], upper_voice[index]
            if lower_note.pitch >= upper_note.pitch:
                violations.append(RuleViolation(
                    rule_id=rule_id.value,
                    severity=severity,
                    message=f"Voices cross or overlap: lower voice ({lower_name}) {lower_note.name} "
                            f"is not below upper voice ({upper_name}) {upper_note.name}.",
                    index=index,
                ))

        return violations

    @staticmethod
    def vertical_consonance(rulename, **kwargs) -> list[RuleViolation]:
        """ Every vertical interval is a unison/octave, third, fifth or sixth. """
        rule_id = RuleId.VERTICAL_CONSONANCE

        cantus: list[Note] = kwargs['cantus']
        counterpoint: list[Note] = kwargs['counterpoint']
        severity = Severity(kwargs['severity'])

        violations = []
        for index in range(CounterpointRulesBase._shared_length(cantus, counterpoint)):
            reduced_interval = CounterpointRulesBase._reduced_interval(cantus[index].pitch, counterpoint[index].pitch)
            if not CounterpointRulesBase._is_consonant(reduced_interval):
                interval_name = CounterpointRulesBase._interval_name(cantus[index], counterpoint[index])
                violations.append(RuleViolation(
                    rule_id=rule_id.value,
                    severity=severity,
                    message=f"Dissonant vertical interval ({interval_name}) between "
                            f"{cantus[index].name} and {counterpoint[index].name}.",
                    index=index,
                ))

        return violations

    @staticmethod
    def perfect_start_and_end(rulename, **kwargs) -> list[RuleViolation]:
        """ The first and the last shared interval are perfect consonances. """
        rule_id = RuleId.PERFECT_START_AND_END

        cantus: list[Note] = kwargs['cantus']
        counterpoint: list[Note] = kwargs['counterpoint']
        severity = Severity(kwargs['severity'])

        shared_length = CounterpointRulesBase._shared_length(cantus, counterpoint)
        if shared_length == 0:
            return []

        violations = []
        # With a single pair the first and the last interval are the same one, and both are checked.
        for index, position in ((0, 'First'), (shared_length - 1, 'Last')):
            reduced_interval = CounterpointRulesBase._reduced_interval(cantus[index].pitch, counterpoint[index].pitch)
            if not CounterpointRulesBase._is_perfect(reduced_interval):
                interval_name = CounterpointRulesBase._interval_name(cantus[index], counterpoint[index])
                violations.append(RuleViolation(
                    rule_id=rule_id.value,
                    severity=severity,
                    message=f"{position} interval must be a perfect consonance (unison, fifth, octave), "
                            f"found {interval_name}.",
                    index=index,
                ))

        return violations

    """ %% Motion %% """
    @staticmethod
    def no_parallel_perfects(rulename, **kwargs) -> list[RuleViolation]:
        """
        No two successive perfect intervals reached by both voices moving in the same direction.
        Each transition is judged on its own, so a chain of three parallel fifths gives two findings.
        Similar motion into a perfect interval from an imperfect one is allowed.
        """
        rule_id = RuleId.NO_PARALLEL_PERFECTS

        cantus: list[Note] = kwargs['cantus']
        counterpoint: list[Note] = kwargs['counterpoint']
        severity = Severity(kwargs['severity'])

        violations = []
        for index in range(1, CounterpointRulesBase._shared_length(cantus, counterpoint)):
            prev_interval = CounterpointRulesBase._reduced_interval(cantus[index-1].pitch, counterpoint[index-1].pitch)
            curr_interval = CounterpointRulesBase._reduced_interval(cantus[index].pitch, counterpoint[index].pitch)
            if not (CounterpointRulesBase._is_perfect(prev_interval) and CounterpointRulesBase._is_perfect(curr_interval)):
                continue

            cantus_motion = CounterpointRulesBase._motion(cantus[index-1], cantus[index])
            counterpoint_motion = CounterpointRulesBase._motion(counterpoint[index-1], counterpoint[index])
            if cantus_motion != 0 and cantus_motion == counterpoint_motion:
                prev_name = CounterpointRulesBase._interval_name(cantus[index-1], counterpoint[index-1])
                curr_name = CounterpointRulesBase._interval_name(cantus[index], counterpoint[index])
                violations.append(RuleViolation(
                    rule_id=rule_id.value,
                    severity=severity,
                    message=f"Parallel perfect intervals: {prev_name} to {curr_name} with both voices moving "
                            f"{'up' if cantus_motion > 0 else 'down'}.",
                    index=index,
                ))

        return violations

    """ %% Melody %% """
    @staticmethod
    def no_repeated_notes_cf(rulename, **kwargs) -> list[RuleViolation]:
        """ The cantus never repeats the previous pitch. """
        rule_id = RuleId.NO_REPEATED_NOTES_CF

        cantus: list[Note] = kwargs['cantus']
        severity = Severity(kwargs['severity'])

        violations = []
        for index in range(1, len(cantus)):
            if cantus[index].pitch == cantus[index-1].pitch:
                violations.append(RuleViolation(
                    rule_id=rule_id.value,
                    severity=severity,
                    message=f"Cantus repeats the previous note ({cantus[index].name}).",
                    index=index,
                    voice_name='cantus',
                ))

        return violations

    @staticmethod
    def one_repeated_note_cpt(rulename, **kwargs) -> list[RuleViolation]:
        """ The counterpoint may repeat a pitch once; every further repetition is reported. """
        rule_id = RuleId.ONE_REPEATED_NOTE_CPT

        counterpoint: list[Note] = kwargs['counterpoint']
        severity = Severity(kwargs['severity'])

        violations = []
        repeat_count = 0
        for index in range(1, len(counterpoint)):
            if counterpoint[index].pitch != counterpoint[index-1].pitch:
                continue
            repeat_count += 1
            if repeat_count > 1:
                violations.append(RuleViolation(
                    rule_id=rule_id.value,
                    severity=severity,
                    message=f"Counterpoint repeats a note more than once (repetition {repeat_count}, "
                            f"{counterpoint[index].name}).",
                    index=index,
                    voice_name='counterpoint',
                ))

        return violations

    @staticmethod
    def unique_climax(rulename, **kwargs) -> list[RuleViolation]:
        """ The highest pitch of each voice occurs exactly once. Checked for cantus, then counterpoint. """
        rule_id = RuleId.UNIQUE_CLIMAX

        severity = Severity(kwargs['severity'])
        violations = []

        for voice_name in CounterpointRulesBase.voice_names:
            voice: list[Note] = kwargs[voice_name]
            if not voice:
                continue
            climax = max(note.pitch for note in voice)
            climax_count = sum(1 for note in voice if note.pitch == climax)
            if climax_count != 1:
                climax_name = next(note.name for note in voice if note.pitch == climax)
                violations.append(RuleViolation(
                    rule_id=rule_id.value,
                    severity=severity,
                    message=f"{voice_name.capitalize()} reaches its highest note {climax_name} "
                            f"{climax_count} times; the climax should be unique.",
                    voice_name=voice_name,
                ))

        return violations

    """ %% Cadence %% """
    @staticmethod
    def cadence_cf(rulename, **kwargs) -> list[RuleViolation]:
        """ The cantus ends with scale degree 2 stepping down to scale degree 1. """
        rule_id = RuleId.CADENCE_CF

        cantus: list[Note] = kwargs['cantus']
        severity = Severity(kwargs['severity'])
        key_signature = KeySignature.from_label(kwargs['key_signature'])

        if len(cantus) < 2:
            return []

        prev_note, last_note = cantus[-2], cantus[-1]
        if (prev_note.pitch_class == key_signature.scale_degree_pitch_class(2)
                and last_note.pitch_class == key_signature.scale_degree_pitch_class(1)
                and prev_note.pitch > last_note.pitch):
            return []

        return [RuleViolation(
            rule_id=rule_id.value,
            severity=severity,
            message=f"Cantus should end with scale degree 2 falling to 1 in {key_signature}, "
                    f"found {prev_note.name} to {last_note.name}.",
            index=len(cantus) - 1,
            voice_name='cantus',
        )]

    @staticmethod
    def cadence_cpt(rulename, **kwargs) -> list[RuleViolation]:
        """ The counterpoint ends with scale degree 7 stepping up to scale degree 1. """
        rule_id = RuleId.CADENCE_CPT

        counterpoint: list[Note] = kwargs['counterpoint']
        severity = Severity(kwargs['severity'])
        key_signature = KeySignature.from_label(kwargs['key_signature'])

        if len(counterpoint) < 2:
            return []

        prev_note, last_note = counterpoint[-2], counterpoint[-1]
        if (prev_note.pitch_class == key_signature.scale_degree_pitch_class(7)
                and last_note.pitch_class == key_signature.scale_degree_pitch_class(1)
                and prev_note.pitch < last_note.pitch):
            return []

        return [RuleViolation(
            rule_id=rule_id.value,
            severity=severity,
            message=f"Counterpoint should end with scale degree 7 rising to 1 in {key_signature}, "
                    f"found {prev_note.name} to {last_note.name}.",
            index=len(counterpoint) - 1,
            voice_name='counterpoint',
        )]
