"""
Picks the best variant of every track in a manifest.
"""

import logging

from echo360_dl.exceptions import NoVariantsError
from echo360_dl.models.media import Manifest, SelectedStream, Variant

log = logging.getLogger(__name__)


class VariantSelector:
    """
    Reduces a manifest to one stream per track index.

    A single pass over the variants in listed order: the first variant of a
    track is admitted, a later one replaces it only with strictly higher
    quality, so ties keep the earlier variant. Tracks come out in the order
    they first appear in the manifest.
    """

    def select(self, manifest: Manifest) -> list[SelectedStream]:
        if not manifest.variants:
            raise NoVariantsError(f"Manifest {manifest.base_uri} lists no variants.")

        best: dict[int, Variant] = {}
        for variant in manifest.variants:
            current = best.get(variant.track_index)
            if current is None or variant.quality > current.quality:
                best[variant.track_index] = variant

        selected = [SelectedStream.from_variant(v) for v in best.values()]
        for stream in selected:
            log.debug(
                f"Track {stream.track_index}: selected quality {stream.quality} "
                f"({stream.uri})"
            )
        return selected
