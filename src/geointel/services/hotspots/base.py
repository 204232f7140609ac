"""Base classes for hotspot clustering implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...models.domain import Coordinate

NOISE_LABEL = -1


class Clusterer(ABC):
    """Contract for spatial clustering of delivery locations."""

    @abstractmethod
    def cluster(self, *, points: Sequence[Coordinate]) -> "ClusteringResult":
        raise NotImplementedError


class ClusteringResult:
    """Per-point cluster labels; ``NOISE_LABEL`` marks points in no cluster."""

    def __init__(self, labels: Sequence[int], metadata: dict | None = None):
        self.labels = list(labels)
        self.metadata = metadata or {}

    def groups(self) -> dict[int, list[int]]:
        """Point indices per cluster label, noise excluded."""
        groups: dict[int, list[int]] = {}
        for index, label in enumerate(self.labels):
            if label == NOISE_LABEL:
                continue
            groups.setdefault(label, []).append(index)
        return groups

    def noise_count(self) -> int:
        return sum(1 for label in self.labels if label == NOISE_LABEL)
