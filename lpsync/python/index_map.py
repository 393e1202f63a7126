# Copyright 2010-2025 Google LLC
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""A bijection between model entities and dense backend indices."""

from typing import (
    Dict,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    TypeVar,
)

_K = TypeVar("_K", bound=Hashable)


class IndexMap(Generic[_K]):
    """Maps entities to the contiguous indices 0..n-1 a backend gives them.

    The backend appends new entries at index n and compacts indices when entries
    are deleted, so after any deletion every index may have changed and the map
    is rebuilt wholesale.
    """

    __slots__ = "_by_index", "_by_key"

    def __init__(self) -> None:
        self._by_index: List[_K] = []
        self._by_key: Dict[_K, int] = {}

    def append(self, key: _K) -> int:
        """Assigns the next index to key and returns it."""
        if key in self._by_key:
            raise KeyError(f"{key!r} already has index {self._by_key[key]}")
        index = len(self._by_index)
        self._by_index.append(key)
        self._by_key[key] = index
        return index

    def get(self, key: _K) -> Optional[int]:
        """Returns the index of key, None if key has no index."""
        return self._by_key.get(key)

    def key(self, index: int) -> _K:
        return self._by_index[index]

    def keys(self) -> Sequence[_K]:
        """The keys in index order."""
        return tuple(self._by_index)

    def delete_mask(self, keys: Iterable[_K]) -> List[bool]:
        """Returns a mask over all current indices, True for the given keys."""
        mask = [False] * len(self._by_index)
        for key in keys:
            index = self._by_key.get(key)
            if index is not None:
                mask[index] = True
        return mask

    def compact(self, mask: Sequence[bool]) -> None:
        """Drops the masked indices and renumbers the others, as the backend does."""
        if len(mask) != len(self._by_index):
            raise ValueError(
                f"mask has {len(mask)} entries for {len(self._by_index)} indices"
            )
        self.rebuild(key for key, deleted in zip(self._by_index, mask) if not deleted)

    def rebuild(self, keys: Iterable[_K]) -> None:
        """Replaces the whole map, keys get indices 0..n-1 in iteration order."""
        self._by_index = list(keys)
        self._by_key = {key: index for index, key in enumerate(self._by_index)}
        if len(self._by_key) != len(self._by_index):
            raise ValueError("duplicated keys in IndexMap.rebuild()")

    def clear(self) -> None:
        self._by_index = []
        self._by_key = {}

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._by_index)

    def __iter__(self) -> Iterator[_K]:
        return iter(self._by_index)
