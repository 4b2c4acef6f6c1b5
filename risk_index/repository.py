"""
Risk Index Engine - Formula Repository.

============================================================
PURPOSE
============================================================
In-memory store of validated formulas keyed by modelName.

The repository is owned by the caller (a task pane, a CLI
run, a test) and passed around explicitly. The engine never
looks formulas up on its own.

============================================================
LOADING
============================================================
- ``load_directory`` reads every ``*.json`` formula in a folder
- A file that fails to parse is logged and skipped; the rest
  still load
- ``load_bundled`` reads the formulas shipped with the package

============================================================
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from .schema import load_formula_file
from .types import FormulaDefinition, FormulaNotFoundError, RiskIndexError


logger = logging.getLogger(__name__)


BUNDLED_FORMULAS_DIR = Path(__file__).parent / "formulas"


class FormulaRepository:
    """
    Repository of formulas keyed by model name.

    ============================================================
    METHODS
    ============================================================
    - add / remove: manage entries
    - get: lookup that raises FormulaNotFoundError
    - find: lookup that returns None
    - names: model names in insertion order
    - load_directory / load_bundled: bulk load from JSON files
    ============================================================
    """

    def __init__(self) -> None:
        self._formulas: Dict[str, FormulaDefinition] = {}

    # --------------------------------------------------------
    # WRITE OPERATIONS
    # --------------------------------------------------------

    def add(self, formula: FormulaDefinition, replace: bool = False) -> None:
        """
        Register a formula.

        Raises:
            ValueError: If the name is taken and ``replace`` is False
        """
        if formula.model_name in self._formulas and not replace:
            raise ValueError(f"Formula '{formula.model_name}' is already registered")
        self._formulas[formula.model_name] = formula

    def remove(self, model_name: str) -> FormulaDefinition:
        """Remove and return a formula."""
        try:
            return self._formulas.pop(model_name)
        except KeyError:
            raise FormulaNotFoundError(model_name) from None

    def clear(self) -> None:
        self._formulas.clear()

    # --------------------------------------------------------
    # READ OPERATIONS
    # --------------------------------------------------------

    def get(self, model_name: str) -> FormulaDefinition:
        formula = self._formulas.get(model_name)
        if formula is None:
            raise FormulaNotFoundError(model_name)
        return formula

    def find(self, model_name: str) -> Optional[FormulaDefinition]:
        return self._formulas.get(model_name)

    def names(self) -> List[str]:
        return list(self._formulas)

    def __len__(self) -> int:
        return len(self._formulas)

    def __contains__(self, model_name: object) -> bool:
        return model_name in self._formulas

    def __iter__(self) -> Iterator[FormulaDefinition]:
        return iter(list(self._formulas.values()))

    # --------------------------------------------------------
    # BULK LOADING
    # --------------------------------------------------------

    def load_directory(
        self,
        path: Union[str, Path],
        pattern: str = "*.json",
        replace: bool = False,
    ) -> List[str]:
        """
        Load every formula file in a directory.

        Args:
            path: Directory to scan
            pattern: Glob for formula files
            replace: Overwrite formulas already registered

        Returns:
            Model names that were loaded, in file-name order
        """
        directory = Path(path)
        if not directory.is_dir():
            raise FileNotFoundError(f"Formula directory not found: {directory}")

        loaded: List[str] = []
        for file_path in sorted(directory.glob(pattern)):
            try:
                formula = load_formula_file(file_path)
                self.add(formula, replace=replace)
            except (RiskIndexError, ValueError, OSError) as e:
                logger.error(f"Failed to load formula: {file_path.name}: {e}")
                continue
            loaded.append(formula.model_name)

        logger.info(f"Loaded {len(loaded)} formulas from {directory}")
        return loaded

    def load_bundled(self) -> List[str]:
        """Load the formulas shipped with the package."""
        return self.load_directory(BUNDLED_FORMULAS_DIR)

    @classmethod
    def from_directory(cls, path: Union[str, Path]) -> "FormulaRepository":
        repository = cls()
        repository.load_directory(path)
        return repository
