"""
TerpTaster Backend - Terpene Reference Dataset
==============================================

What:  Immutable, in-memory view of the terpene reference data plus the
       derived flavor → terpene index.
How:   `load_terpene_dataset()` reads and validates terpenes.json once at
       startup; the resulting `TerpeneDataset` is attached to `app.state`
       and handed to routes through the `get_terpene_dataset` dependency.
Who:   Scoring, training and terpene routes. Nothing writes to it after
       construction.

Index layout:
    flavor → tuple of terpene names listing that flavor, in dataset order.
    Example: "Woody" → ("Caryophyllene", "Pinene", "Humulene", ...)
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from fastapi import Request
from pydantic import ValidationError as PydanticValidationError

from terptaster.exceptions import DatasetError
from terptaster.schemas.terpene import Terpene, TerpeneDataFile

logger = logging.getLogger(__name__)


class TerpeneDataset:
    """
    Read-only terpene lookup tables.

    Attributes:
        terpenes:      All terpenes in file order (tuple).
        by_name:       Read-only mapping name → Terpene.
        flavor_index:  Read-only mapping flavor → terpene names (dataset order).

    Safe to share between concurrent requests: every table is built in
    __init__ and exposed through immutable views.
    """

    def __init__(self, terpenes: Iterable[Terpene]):
        self.terpenes: Tuple[Terpene, ...] = tuple(terpenes)

        by_name: Dict[str, Terpene] = {}
        for terpene in self.terpenes:
            if terpene.name in by_name:
                raise DatasetError(
                    message=f"Duplicate terpene name in dataset: {terpene.name}",
                    context={"terpene": terpene.name},
                )
            by_name[terpene.name] = terpene
        self.by_name: Mapping[str, Terpene] = MappingProxyType(by_name)

        index: Dict[str, List[str]] = {}
        for terpene in self.terpenes:
            # A flavor listed twice for one terpene still maps to it once
            for flavor in dict.fromkeys(terpene.possible_flavors):
                index.setdefault(flavor, []).append(terpene.name)
        self.flavor_index: Mapping[str, Tuple[str, ...]] = MappingProxyType(
            {flavor: tuple(names) for flavor, names in index.items()}
        )

    def __len__(self) -> int:
        return len(self.terpenes)

    def __contains__(self, name: object) -> bool:
        return name in self.by_name

    def get(self, name: str) -> Optional[Terpene]:
        return self.by_name.get(name)

    def names(self) -> List[str]:
        """All terpene names, sorted alphabetically (the selection list order)."""
        return sorted(self.by_name)

    def flavors(self) -> List[str]:
        """Every distinct flavor in the dataset, sorted alphabetically."""
        return sorted(self.flavor_index)

    def possible_flavors(self, name: str) -> Tuple[str, ...]:
        """Flavors for a terpene; empty for names that are not in the dataset."""
        terpene = self.by_name.get(name)
        return terpene.possible_flavors if terpene else ()

    def terpenes_for_flavor(self, flavor: str) -> Tuple[str, ...]:
        """Terpenes that list `flavor`; empty for unknown flavors."""
        return self.flavor_index.get(flavor, ())

    def expected_flavors(self, selected: Iterable[str]) -> List[str]:
        """
        Union of possible flavors for the selected terpenes.

        Order: selection order first, then each terpene's flavor order, with
        duplicates dropped. Unknown names contribute nothing.
        """
        seen: Dict[str, None] = {}
        for name in selected:
            for flavor in self.possible_flavors(name):
                seen.setdefault(flavor, None)
        return list(seen)


def load_terpene_dataset(path: str) -> TerpeneDataset:
    """
    Read and validate the terpene data file.

    Args:
        path: Path to a JSON file shaped like `{"terpenes": [...]}`.

    Returns:
        A fully built TerpeneDataset.

    Raises:
        DatasetError: file missing/unreadable, invalid JSON, schema mismatch,
                      or duplicate terpene names.
    """
    data_path = Path(path)
    try:
        raw = json.loads(data_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise DatasetError(
            message=f"Could not read terpene data file: {data_path}",
            context={"path": str(data_path), "os_error": str(e)},
        ) from e
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError both land here
        raise DatasetError(
            message=f"Terpene data file is not valid JSON: {data_path}",
            context={"path": str(data_path), "error": str(e)},
        ) from e

    try:
        data = TerpeneDataFile.model_validate(raw)
    except PydanticValidationError as e:
        raise DatasetError(
            message=f"Terpene data file has an invalid structure: {data_path}",
            context={"path": str(data_path), "errors": e.error_count()},
        ) from e

    dataset = TerpeneDataset(data.terpenes)
    logger.info(
        "Loaded %d terpenes (%d distinct flavors) from %s",
        len(dataset),
        len(dataset.flavor_index),
        data_path,
    )
    return dataset


def get_terpene_dataset(request: Request) -> TerpeneDataset:
    """
    FastAPI dependency returning the dataset loaded at startup.

    Raises:
        DatasetError (→ 503) if the lifespan handler has not attached it.
    """
    dataset = getattr(request.app.state, "terpene_dataset", None)
    if dataset is None:
        raise DatasetError()
    return dataset
