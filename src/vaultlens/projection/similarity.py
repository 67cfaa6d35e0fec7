"""Near-duplicate image groups built from the backend's similarity relation."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from vaultlens.backend import VaultBackend
from vaultlens.records import FileRecord, SimilarityTriple

LOGGER = logging.getLogger(__name__)

MIN_THRESHOLD = 70
MAX_THRESHOLD = 99
DEFAULT_THRESHOLD = 90


class SimilarityGroup(BaseModel):
    """A representative image and the local images judged similar to it."""

    model_config = ConfigDict(frozen=True)

    representative: FileRecord
    members: tuple[FileRecord, ...]
    similarity_pct: float


def threshold_to_max_distance(threshold: int) -> int:
    """Convert a similarity percentage into the backend's maximum distance.

    Raises:
        ValueError: If ``threshold`` is outside ``[70, 99]``.
    """
    if not MIN_THRESHOLD <= threshold <= MAX_THRESHOLD:
        raise ValueError(
            f"Similarity threshold must be between {MIN_THRESHOLD} and {MAX_THRESHOLD}, "
            f"got {threshold}."
        )
    return 100 - threshold


def describe_threshold(threshold: int) -> str:
    """Return a short hint describing how strict ``threshold`` is."""
    if threshold >= 95:
        return "Very strict, nearly pixel-perfect"
    if threshold >= 85:
        return "Balanced, catches most near-duplicates"
    return "Loose, may include different images"


def image_records(records: Iterable[FileRecord]) -> list[FileRecord]:
    """Return the records that take part in similarity scans."""
    return [record for record in records if record.category == "image"]


def resolve_similarity(
    relation: Iterable[SimilarityTriple],
    records: Iterable[FileRecord],
) -> list[SimilarityGroup]:
    """Reconcile the backend relation with locally known image records.

    Hashes the client does not know are skipped and repeated member hashes
    are kept once. A triple whose representative is unknown, or whose members
    all are, is dropped entirely. Backend order is preserved.
    """
    by_hash: dict[str, FileRecord] = {}
    for record in image_records(records):
        by_hash.setdefault(record.hash, record)

    groups: list[SimilarityGroup] = []
    for triple in relation:
        representative = by_hash.get(triple.representative_hash)
        if representative is None:
            LOGGER.debug(
                "Skipping group with unknown representative %s", triple.representative_hash
            )
            continue
        seen: set[str] = set()
        resolved: list[FileRecord] = []
        for member in triple.member_hashes:
            if member in seen or member == triple.representative_hash or member not in by_hash:
                continue
            seen.add(member)
            resolved.append(by_hash[member])
        members = tuple(resolved)
        if not members:
            continue
        groups.append(
            SimilarityGroup(
                representative=representative,
                members=members,
                similarity_pct=triple.similarity_pct,
            )
        )
    return groups


class SmartDedupIndex:
    """Latest near-duplicate scan result; each scan replaces the previous one."""

    def __init__(self, threshold: int = DEFAULT_THRESHOLD) -> None:
        threshold_to_max_distance(threshold)
        self._threshold = threshold
        self._groups: list[SimilarityGroup] = []
        self._scanned = False

    @property
    def threshold(self) -> int:
        return self._threshold

    @threshold.setter
    def threshold(self, value: int) -> None:
        threshold_to_max_distance(value)
        self._threshold = value

    @property
    def groups(self) -> list[SimilarityGroup]:
        return list(self._groups)

    @property
    def scanned(self) -> bool:
        """Whether at least one scan has completed."""
        return self._scanned

    async def scan(
        self,
        backend: VaultBackend,
        records: Iterable[FileRecord],
        threshold: Optional[int] = None,
    ) -> list[SimilarityGroup]:
        """Run a similarity scan and replace the stored groups.

        The backend is not called when no image records are known. On a
        backend failure the previous groups are kept and the error propagates.

        Args:
            backend: Backend that computes the similarity relation.
            records: Locally known records (all categories; images are selected here).
            threshold: Optional new threshold, in percent.

        Returns:
            list[SimilarityGroup]: The new groups.
        """
        if threshold is not None:
            self.threshold = threshold
        known = image_records(records)
        if not known:
            LOGGER.info("No indexed images; skipping similarity scan.")
            self._groups = []
            self._scanned = True
            return []

        relation = await backend.find_similar_images(threshold_to_max_distance(self._threshold))
        self._groups = resolve_similarity(relation, known)
        self._scanned = True
        LOGGER.info(
            "Similarity scan at %d%% found %d group(s) among %d image(s).",
            self._threshold,
            len(self._groups),
            len(known),
        )
        return self.groups


__all__ = [
    "DEFAULT_THRESHOLD",
    "MAX_THRESHOLD",
    "MIN_THRESHOLD",
    "SimilarityGroup",
    "SmartDedupIndex",
    "describe_threshold",
    "image_records",
    "resolve_similarity",
    "threshold_to_max_distance",
]
