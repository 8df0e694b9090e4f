"""Numbered feature directories under the specs root.

Each feature lives in ``<specs_dir>/<number><sep><slug>``. Numbers are
assigned as the current maximum plus one and are never reused, so
deleting a directory leaves a gap.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from .config import FeatureNaming
from .errors import AlreadyExists, IOFailure, NotFound
from .models import Feature, Phase
from .phase import determine_phase
from .slug import normalize_slug, validate_slug

logger = logging.getLogger("kit.registry")


class FeatureRegistry:
    """Enumerate, resolve and create features in one specs directory."""

    def __init__(self, specs_dir: Path | str, naming: Optional[FeatureNaming] = None):
        self.specs_dir = Path(specs_dir)
        self.naming = naming or FeatureNaming()
        self._dir_pattern = re.compile(rf"^(\d+){re.escape(self.naming.separator)}(.+)$")

    # ------------------------------------------------------------------
    # Directory names
    # ------------------------------------------------------------------

    def format_dir_name(self, number: int, slug: str) -> str:
        return f"{number:0{self.naming.numeric_width}d}{self.naming.separator}{slug}"

    def parse_dir_name(self, name: str) -> Optional[Tuple[int, str]]:
        """Return ``(number, slug)`` for a feature directory name, else None."""
        match = self._dir_pattern.match(name)
        if not match:
            return None
        return int(match.group(1)), match.group(2)

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def list_features(self) -> List[Feature]:
        """All feature directories, ascending by number.

        Entries that are not directories or do not match the naming pattern
        are ignored. A missing specs directory yields an empty list.
        """
        try:
            entries = list(self.specs_dir.iterdir())
        except FileNotFoundError:
            return []
        except OSError as e:
            raise IOFailure(self.specs_dir, e) from e

        features: List[Feature] = []
        for entry in entries:
            if not entry.is_dir():
                continue
            parsed = self.parse_dir_name(entry.name)
            if parsed is None:
                continue
            number, slug = parsed
            features.append(
                Feature(
                    number=number,
                    slug=slug,
                    dir_name=entry.name,
                    path=entry,
                    created_at=_modified_at(entry),
                    phase=determine_phase(entry),
                )
            )

        features.sort(key=lambda feature: (feature.number, feature.dir_name))
        return features

    def next_number(self) -> int:
        features = self.list_features()
        if not features:
            return 1
        return features[-1].number + 1

    def find_active_feature(self) -> Optional[Feature]:
        """The most recently numbered feature, or None when there are none."""
        features = self.list_features()
        return features[-1] if features else None

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_by_dir_name(self, dir_name: str) -> Optional[Feature]:
        for feature in self.list_features():
            if feature.dir_name == dir_name:
                return feature
        return None

    def find_by_slug(self, slug: str) -> Optional[Feature]:
        wanted = slug.lower()
        for feature in self.list_features():
            if feature.slug.lower() == wanted:
                return feature
        return None

    def resolve(self, ref: str) -> Feature:
        """Find a feature by exact directory name, then by slug ignoring case."""
        feature = self.find_by_dir_name(ref) or self.find_by_slug(ref)
        if feature is None:
            raise NotFound(ref)
        return feature

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(self, slug: str) -> Feature:
        validate_slug(slug)

        existing = self.find_by_slug(slug)
        if existing is not None:
            raise AlreadyExists(slug, existing.path)

        number = self.next_number()
        dir_name = self.format_dir_name(number, slug)
        path = self.specs_dir / dir_name
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(path, e) from e

        logger.info(f"Created feature directory {path}")
        return Feature(
            number=number,
            slug=slug,
            dir_name=dir_name,
            path=path,
            created_at=datetime.now(),
            phase=Phase.SPEC,
        )

    def ensure_exists(self, ref: str) -> Tuple[Feature, bool]:
        """Resolve ``ref`` or create it from its normalized slug.

        Returns the feature and whether it was created.
        """
        try:
            return self.resolve(ref), False
        except NotFound:
            pass

        slug = normalize_slug(ref)
        validate_slug(slug)
        return self.create(slug), True


def _modified_at(path: Path) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(path.stat().st_mtime)
    except OSError:
        return None
