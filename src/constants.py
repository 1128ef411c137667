DEFAULT_KEY_SIGNATURE = 'C major'

# Duration mapping, keyed by the kern duration token.
DURATION_MAP = {
    '0': 2.0,   # Brevis
    '1': 1.0,   # Whole note
    '2': 0.5,   # Half note
    '4': 0.25,  # Quarter note
    '8': 0.125, # Eighth note
    '16': 0.0625,
    '32': 0.03125,
}
WHOLE_NOTE_DURATION = DURATION_MAP['1']
DURATION_NAMES = {
    2.0: 'brevis',
    1.0: 'whole',
    0.5: 'half',
    0.25: 'quarter',
    0.125: 'eighth',
    0.0625: 'sixteenth',
    0.03125: 'thirty-second',
}

REDUCED_INTERVAL_CONSONANCE_MAP = {
    0: True,  # Unison
    1: False, # Minor 2nd
    2: False, # Major 2nd
    3: True,  # Minor 3rd
    4: True,  # Major 3rd
    5: False, # Perfect 4th
    6: False, # Augmented 4th / dimished 5th
    7: True,  # Perfect 5th
    8: True,  # Minor 6th
    9: True,  # Major 6th
    10: False, # Minor 7th
    11: False, # Major 7th
}
CONSONANT_INTERVALS = frozenset(i for i, is_consonant in REDUCED_INTERVAL_CONSONANCE_MAP.items() if is_consonant)
PERFECT_INTERVALS = frozenset({0, 7})  # Unison/octave and fifth

# Kern pitch letters without accidentals. Upper case is below middle C, each repetition moves an octave.
DIATONIC_PITCH_TO_MIDI = {
    'CCC': 24, 'DDD': 26, 'EEE': 28, 'FFF': 29, 'GGG': 31, 'AAA': 33, 'BBB': 35,
    'CC': 36, 'DD': 38, 'EE': 40, 'FF': 41, 'GG': 43, 'AA': 45, 'BB': 47,
    'C': 48, 'D': 50, 'E': 52, 'F': 53, 'G': 55, 'A': 57, 'B': 59,
    'c': 60, 'd': 62, 'e': 64, 'f': 65, 'g': 67, 'a': 69, 'b': 71,
    'cc': 72, 'dd': 74, 'ee': 76, 'ff': 77, 'gg': 79, 'aa': 81, 'bb': 83,
    'ccc': 84, 'ddd': 86, 'eee': 88, 'fff': 89, 'ggg': 91, 'aaa': 93, 'bbb': 95,
    'cccc': 96, 'dddd': 98, 'eeee': 100, 'ffff': 101, 'gggg': 103, 'aaaa': 105, 'bbbb': 107,
}
ACCIDENTALS = {
    '#': 1,  '##': 2,  '###': 3,
    '-': -1, '--': -2, '---': -3,
    'n': 0,
}

# Ascending pitch classes of each supported major key, and the tonic pitch class.
KEY_SIGNATURE_PITCH_CLASSES = {
    'C major':  (0, 2, 4, 5, 7, 9, 11),
    'G major':  (0, 2, 4, 6, 7, 9, 11),
    'D major':  (1, 2, 4, 6, 7, 9, 11),
    'A major':  (1, 2, 4, 6, 8, 9, 11),
    'E major':  (1, 3, 4, 6, 8, 9, 11),
    'F major':  (0, 2, 4, 5, 7, 9, 10),
    'Bb major': (0, 2, 3, 5, 7, 9, 10),
}
KEY_SIGNATURE_TONICS = {
    'C major': 0,
    'G major': 7,
    'D major': 2,
    'A major': 9,
    'E major': 4,
    'F major': 5,
    'Bb major': 10,
}
# music21 spells flats with '-'
KEY_SIGNATURE_M21_TONICS = {
    'C major': 'C',
    'G major': 'G',
    'D major': 'D',
    'A major': 'A',
    'E major': 'E',
    'F major': 'F',
    'Bb major': 'B-',
}

# Semitones above the tonic for each degree of the major scale
MAJOR_SCALE_DEGREE_OFFSETS = {
    1: 0,
    2: 2,
    3: 4,
    4: 5,
    5: 7,
    6: 9,
    7: 11,
}

SCALE_PITCH_RANGE = (48, 84)  # C3 to C6

MIDI_PITCH_RANGE = (0, 127)

# The default rule catalog ships next to these modules, see rule_catalog.default_rule_catalog()
DEFAULT_RULE_CATALOG_FILENAME = 'first_species_rules.json'
