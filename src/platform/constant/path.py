from pathlib import Path


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Log directory
LOG_DIR = BASE_DIR / 'logs'

# Seed data directory
SEED_DIR = BASE_DIR / 'script' / 'seed'
