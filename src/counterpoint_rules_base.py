from dataclasses import dataclass, asdict
from enum import Enum

from music21 import pitch as m21_pitch
from music21 import interval as m21_interval

from Note import Note
from constants import CONSONANT_INTERVALS, PERFECT_INTERVALS


class Severity(str, Enum):
    ERROR = 'error'
    WARNING = 'warning'

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class RuleViolation:
    """
    One finding of a lint run. index is the 0-based note-pair position,
    or None when the finding is about a whole line (e.g. a length mismatch).
    """
    rule_id: str
    severity: Severity
    message: str
    index: int | None = None
    voice_name: str | None = None  # 'cantus' or 'counterpoint' for single-voice findings

    def __repr__(self):
        base_str = f"({self.severity}, {self.rule_id}"
        if self.index is not None:
            base_str += f", index={self.index}"
        if self.voice_name:
            base_str += f", voice={self.voice_name}"
        base_str += f": {self.message})"
        return base_str

    def to_dict(self) -> dict:
        violation_dict = asdict(self)
        violation_dict['severity'] = self.severity.value
        return violation_dict


class CounterpointRulesBase:
    voice_names = ('cantus', 'counterpoint')

    """ Helper functions """

    @staticmethod
    def _reduced_interval(pitch_a: int, pitch_b: int) -> int:
        """Octave-reduced distance in semitones between two pitches, regardless of order."""
        return abs(pitch_b - pitch_a) % 12

    @staticmethod
    def _is_consonant(reduced_interval: int) -> bool:
        return reduced_interval in CONSONANT_INTERVALS

    @staticmethod
    def _is_perfect(reduced_interval: int) -> bool:
        return reduced_interval in PERFECT_INTERVALS

    @staticmethod
    def _shared_length(cantus: list[Note], counterpoint: list[Note]) -> int:
        """Number of note pairs that can be compared vertically."""
        return min(len(cantus), len(counterpoint))

    @staticmethod
    def _motion(prev_note: Note, curr_note: Note) -> int:
        """1 when the line rises, -1 when it falls, 0 when the pitch is repeated."""
        motion = curr_note.pitch - prev_note.pitch
        return (motion > 0) - (motion < 0)

    @staticmethod
    def _lower_and_upper(cantus: list[Note], counterpoint: list[Note],
                         cantus_is_upper_voice: bool) -> tuple[list[Note], list[Note]]:
        """Return the voices as (lower staff, upper staff)."""
        if cantus_is_upper_voice:
            return counterpoint, cantus
        return cantus, counterpoint

    @staticmethod
    def _interval_name(note_a: Note, note_b: Note) -> str:
        """Name of the vertical interval between two notes, e.g. 'Perfect Fifth'."""
        low, high = sorted((note_a.pitch, note_b.pitch))
        return m21_interval.Interval(m21_pitch.Pitch(midi=low), m21_pitch.Pitch(midi=high)).niceName
