"""Rater backed by a JSON file of precomputed ratings.

The file maps a chunk id or a commit sha to a rating object::

    {
      "3f2a...": {"effort": 6, "complexity": 5, "novelty": 4,
                  "confidence": 0.9, "label": "feature"}
    }

A chunk is looked up by its id first, then by each of its commit shas.
Unknown chunks raise RatingError, which the runner records as an error
rating for that chunk only.
"""

import json
from pathlib import Path
from typing import Mapping, Union

from ..exceptions import ConfigurationError, RatingError
from ..filtering.chunker import CommitChunk
from .models import Rating


class StaticRater:
    def __init__(self, ratings: Mapping[str, Rating]):
        self._ratings = dict(ratings)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "StaticRater":
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read ratings file '{path}': {e}")
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Ratings file '{path}' must contain a JSON object")

        ratings = {}
        for key, value in raw.items():
            try:
                ratings[key] = Rating.from_dict(value)
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid rating for {key} in '{path}': {e}")
        return cls(ratings)

    def rate(self, chunk: CommitChunk) -> Rating:
        for key in (chunk.chunk_id, *chunk.shas):
            if key in self._ratings:
                return self._ratings[key]
        raise RatingError("no rating recorded", chunk_id=chunk.chunk_id)
