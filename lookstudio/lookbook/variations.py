"""
Ordered set of a look's images.

Keeps insertion order (what the gallery shows) plus a membership index, so
"is it already there?" has exactly one definition.
"""

from typing import Iterable, Iterator, Optional

from ..core.errors import InvalidStateError
from ..services.images import ImageRef


class VariationSet:

    def __init__(self, primary: ImageRef, variations: Iterable[ImageRef] = ()):
        self.primary = primary
        self._order: list[ImageRef] = []
        self._index: set[ImageRef] = set()
        for image in variations:
            self._insert(image)

    def _insert(self, image: ImageRef) -> bool:
        if image in self._index:
            return False
        self._order.append(image)
        self._index.add(image)
        return True

    def __contains__(self, image: object) -> bool:
        return image in self._index

    def __iter__(self) -> Iterator[ImageRef]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def is_known(self, image: ImageRef) -> bool:
        """True for the primary image and every variation."""
        return image == self.primary or image in self._index

    def add(self, image: ImageRef) -> bool:
        """Insert an image. Returns False when it was already present.

        The first insert also records the current primary, so the primary is
        always a member once any variation exists.
        """
        if not image:
            raise InvalidStateError("Cannot add an empty image as a variation")
        if not self._order and image != self.primary:
            self._insert(self.primary)
        return self._insert(image)

    def promote(self, image: ImageRef) -> Optional[ImageRef]:
        """Make `image` the primary. Returns the previous primary (None if unchanged)."""
        if not self.is_known(image):
            raise InvalidStateError("Only an existing variation can become the main image")
        if image == self.primary:
            return None
        previous = self.primary
        self._insert(previous)
        self.primary = image
        return previous

    def ensure_primary(self) -> bool:
        """Put the primary in front when variations exist without it. Returns True if it was added."""
        if not self._order or self.primary in self._index:
            return False
        self._order.insert(0, self.primary)
        self._index.add(self.primary)
        return True

    def as_list(self) -> list[ImageRef]:
        return list(self._order)

    def gallery(self) -> list[ImageRef]:
        """Primary first, then every other variation in order."""
        return [self.primary] + [img for img in self._order if img != self.primary]
