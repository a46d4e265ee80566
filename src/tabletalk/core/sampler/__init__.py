"""
Sampler - Seleccion acotada de filas para los prompts.

Devuelve siempre un prefijo determinista del dataset (no muestreo aleatorio),
para que preguntas repetidas sobre el mismo archivo produzcan el mismo prompt.
"""

from typing import Any

from tabletalk.core.tabular_parser import TabularDataset


def sample(dataset: TabularDataset, count: int) -> list[dict[str, Any]]:
    """Return the first min(count, row_count) rows in original order."""
    if count < 0:
        raise ValueError(f"sample count must be >= 0, got {count}")
    return [dict(row) for row in dataset.rows[:count]]


__all__ = ["sample"]
