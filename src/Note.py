import re
from dataclasses import dataclass, replace

from music21 import pitch as m21_pitch

from constants import DURATION_MAP, DURATION_NAMES, WHOLE_NOTE_DURATION
from constants import DIATONIC_PITCH_TO_MIDI, ACCIDENTALS, MIDI_PITCH_RANGE


# Duration digits, pitch letters, accidental. E.g. '1c', '2B-', 'cc#'
KERN_NOTE_PATTERN = re.compile(r'^(?P<duration>\d+)?(?P<letters>[A-Ga-g]+)(?P<accidental>#{1,3}|-{1,3}|n)?$')
KERN_REST_PATTERN = re.compile(r'^(?P<duration>\d+)?r$')


@dataclass(frozen=True, slots=True)
class Note:
    """
    A single pitched note in one voice. Immutable: editing a note means replacing it.
    Equality and hashing use pitch and duration.
    """
    pitch: int
    duration: float = WHOLE_NOTE_DURATION

    def __post_init__(self):
        low, high = MIDI_PITCH_RANGE
        if not low <= self.pitch <= high:
            raise ValueError(f"MIDI pitch {self.pitch} is outside {low}..{high}")

    def __repr__(self):
        return f"({self.duration_name}: {self.name})"

    @property
    def name(self) -> str:
        """Spelled name with octave, e.g. 'C4' or 'B-3'."""
        return m21_pitch.Pitch(midi=self.pitch).nameWithOctave

    @property
    def pitch_class(self) -> int:
        return self.pitch % 12

    @property
    def duration_name(self) -> str:
        return DURATION_NAMES.get(self.duration, str(self.duration))

    @property
    def is_whole_note(self) -> bool:
        return self.duration == WHOLE_NOTE_DURATION

    def with_pitch(self, pitch: int) -> 'Note':
        return replace(self, pitch=pitch)

    def with_duration(self, duration: float) -> 'Note':
        return replace(self, duration=duration)

    @classmethod
    def from_kern_token(cls, token: str) -> 'Note | None':
        """
        Parse a kern note token such as '1c' (whole middle C) or '2BB-' (half B-flat 1).
        A missing duration means a whole note. Rests ('r', '1r') return None.
        Raises ValueError for tokens that are not a plain note or rest.
        """
        token = token.strip()
        if (rest_match := KERN_REST_PATTERN.match(token)) is not None:
            duration_token = rest_match.group('duration')
            if duration_token is not None and duration_token not in DURATION_MAP:
                raise ValueError(f"Unknown kern duration '{duration_token}' in token '{token}'")
            return None

        note_match = KERN_NOTE_PATTERN.match(token)
        if note_match is None:
            raise ValueError(f"Cannot parse kern token '{token}'")

        duration_token = note_match.group('duration') or '1'
        if duration_token not in DURATION_MAP:
            raise ValueError(f"Unknown kern duration '{duration_token}' in token '{token}'")

        letters = note_match.group('letters')
        if letters not in DIATONIC_PITCH_TO_MIDI:
            raise ValueError(f"Kern pitch '{letters}' in token '{token}' is out of range")

        midi_pitch = DIATONIC_PITCH_TO_MIDI[letters]
        if accidental := note_match.group('accidental'):
            midi_pitch += ACCIDENTALS[accidental]

        return cls(pitch=midi_pitch, duration=DURATION_MAP[duration_token])


def notes(pitches: list[int], duration: float = WHOLE_NOTE_DURATION) -> list[Note]:
    """Build a voice from MIDI pitches, all with the same duration."""
    return [Note(pitch=p, duration=duration) for p in pitches]
