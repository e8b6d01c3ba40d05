from pathlib import Path

# Centralized paths for data files (single source of truth)
DATA_DIR = (Path(__file__).parent.parent / 'data').resolve()
RECIPES_DIR = DATA_DIR / 'recettes'
CACHE_DIR = DATA_DIR / 'cache'

__all__ = ['DATA_DIR', 'RECIPES_DIR', 'CACHE_DIR']
