from enum import Enum

from music21 import key as m21_key

from constants import KEY_SIGNATURE_PITCH_CLASSES, KEY_SIGNATURE_TONICS, KEY_SIGNATURE_M21_TONICS
from constants import MAJOR_SCALE_DEGREE_OFFSETS, SCALE_PITCH_RANGE


class KeySignature(str, Enum):
    """The major keys a first-species exercise can be written in."""
    C_MAJOR = 'C major'
    G_MAJOR = 'G major'
    D_MAJOR = 'D major'
    A_MAJOR = 'A major'
    E_MAJOR = 'E major'
    F_MAJOR = 'F major'
    B_FLAT_MAJOR = 'Bb major'

    def __str__(self):
        return self.value

    @classmethod
    def from_label(cls, label: 'str | KeySignature') -> 'KeySignature':
        """Accepts 'Bb major', 'bb major' or a bare tonic like 'Bb'."""
        if isinstance(label, KeySignature):
            return label
        normalized = label.strip()
        if not normalized.lower().endswith('major'):
            normalized = f"{normalized} major"
        for key_signature in cls:
            if key_signature.value.lower() == normalized.lower():
                return key_signature
        raise ValueError(f"Unsupported key signature '{label}'. Expected one of: {', '.join(k.value for k in cls)}")

    @property
    def pitch_classes(self) -> tuple[int, ...]:
        return KEY_SIGNATURE_PITCH_CLASSES[self.value]

    @property
    def tonic(self) -> int:
        return KEY_SIGNATURE_TONICS[self.value]

    def scale_degree_pitch_class(self, degree: int) -> int:
        """Pitch class of a scale degree (1-7) of this major key."""
        if degree not in MAJOR_SCALE_DEGREE_OFFSETS:
            raise ValueError(f"Scale degree must be between 1 and 7, got {degree}")
        return (self.tonic + MAJOR_SCALE_DEGREE_OFFSETS[degree]) % 12

    def scale_pitches(self, min_midi: int = SCALE_PITCH_RANGE[0], max_midi: int = SCALE_PITCH_RANGE[1]) -> list[int]:
        """All diatonic MIDI pitches of the key between min_midi and max_midi, inclusive."""
        pitch_classes = set(self.pitch_classes)
        return [midi for midi in range(min_midi, max_midi + 1) if midi % 12 in pitch_classes]

    def to_music21(self) -> m21_key.Key:
        return m21_key.Key(KEY_SIGNATURE_M21_TONICS[self.value], 'major')
