"""Constants and mappings for the Sparky nightly report."""

from pathlib import Path

PROJECT_DIR = Path(__file__).parent.parent
DATA_DIR = PROJECT_DIR / 'data'
CONFIG_PATH = DATA_DIR / 'league_config.json'

# Live-scoring team names (lowercased) to franchise abbreviation
FRANCHISE_MAP = {
    "jason's gaucho chudpumpers": 'JGC',
    'gaucho chudpumpers': 'JGC',
    "cmack's pwn": 'PWN',
    'pwn': 'PWN',
    "brian's endless winter": 'BEW',
    'endless winter': 'BEW',
    "brian's.endless.win ter.s13e01.720p.mp4": 'BEW',
    "matt's mid tier perpetual projects": 'MPP',
    'mid tier perpetual projects': 'MPP',
    "richie's meatspinners": 'RMS',
    'meatspinners': 'RMS',
    "graeme's downtown demons": 'GDD',
    'downtown demons': 'GDD',
}

# Last-resort keywords for renamed or corrupted team names
FRANCHISE_KEYWORDS = {
    'gaucho': 'JGC',
    'chudpumper': 'JGC',
    'pwn': 'PWN',
    'endless': 'BEW',
    'winter': 'BEW',
    'perpetual': 'MPP',
    'mid tier': 'MPP',
    'meatspinner': 'RMS',
    'downtown': 'GDD',
    'demon': 'GDD',
}

FRANCHISE_NAMES = {
    'JGC': 'Gaucho Chudpumpers',
    'PWN': 'PWN',
    'BEW': 'Endless Winter',
    'MPP': 'mid tier perpetual projects',
    'RMS': 'Meatspinners',
    'GDD': 'Downtown Demons',
}

# Owner names used as column prefixes in the archive sheet
OWNER_TO_FRANCHISE = {
    'Jason': 'JGC',
    'Brian': 'BEW',
    'Graeme': 'GDD',
    'Chris': 'PWN',
    'Richie': 'RMS',
    'Matt': 'MPP',
}

# Career-point milestones, ascending
CAREER_MILESTONES = (
    1000, 2500, 5000, 7500, 10000, 12500, 15000, 17500, 20000,
    25000, 30000, 35000, 40000, 45000, 50000,
)

# Single-day team total above which a record is flagged for review
MAX_PLAUSIBLE_DAY_PTS = 150.0
