import json
import logging
from pathlib import Path
from typing import List, Optional

from recettes.domain.Catalog import RecipeCatalog
from recettes.domain.Recipe import Recipe
from recettes.infra.paths import RECIPES_DIR
from recettes.utilities.constants import MANIFEST_FILE

logger = logging.getLogger(__name__)


def _read_manifest(recipes_dir: Path) -> Optional[List[str]]:
    manifest = recipes_dir / MANIFEST_FILE
    try:
        with open(manifest, 'r', encoding='utf-8') as f:
            files = json.load(f)
    except FileNotFoundError:
        logger.warning(f"Recipe manifest not found: {manifest}. Listing directory instead.")
        return None
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in recipe manifest: {e}")
        return None
    if not isinstance(files, list) or not all(isinstance(name, str) for name in files):
        logger.error(f"Recipe manifest {manifest} is not a list of file names")
        return None
    return files


def _list_recipe_files(recipes_dir: Path) -> List[str]:
    if not recipes_dir.is_dir():
        return []
    return sorted(p.name for p in recipes_dir.glob('*.json') if p.is_file() and p.name != MANIFEST_FILE)


def read_recipe(path: Path) -> Optional[Recipe]:
    """Read one recipe file; returns None (and logs) if it cannot be used."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.error(f"Recipe file not found: {path}")
        return None
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in recipe file {path.name}: {e}")
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading recipe {path.name}: {e}")
        return None
    recipe = Recipe.from_dict(data)
    if not recipe.id:
        logger.error(f"Recipe file {path.name} has no id, skipped")
        return None
    return recipe


def reading_from_recipes(recipes_dir: Optional[Path] = None) -> RecipeCatalog:
    """Load the recipe catalog listed by the manifest, skipping files that fail to load."""
    recipes_dir = Path(recipes_dir or RECIPES_DIR)
    files = _read_manifest(recipes_dir)
    if files is None:
        files = _list_recipe_files(recipes_dir)
    recipes = []
    for name in files:
        recipe = read_recipe(recipes_dir / name)
        if recipe is not None:
            recipes.append(recipe)
    logger.info(f"Loaded {len(recipes)} recipes from {recipes_dir}")
    return RecipeCatalog(recipes)
