"""
Channel Pair Processor Module
-----------------------------
Resolves region-of-interest channel lists and builds the channel pairs that
phase locking is computed for.
"""
from itertools import combinations
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

PAIR_MODES = ('combinations', 'seed')

ChannelRef = Union[str, int]


def resolve_channels(roi: Sequence[ChannelRef], ch_names: Optional[Sequence[str]] = None,
                     n_channels: Optional[int] = None, min_channels: int = 2) -> List[int]:
    """
    Maps channel names or integer indices to sorted, unique channel indices.

    Args:
        roi (Sequence[str | int]): Channel names and/or zero-based indices.
        ch_names (Optional[Sequence[str]]): Channel names of the recording; needed for names.
        n_channels (Optional[int]): Number of channels, used to range-check indices.
        min_channels (int): Minimum number of distinct channels required.

    Returns:
        List[int]: Sorted channel indices.
    """
    if n_channels is None and ch_names is not None:
        n_channels = len(ch_names)
    indices = set()
    for ref in roi:
        if isinstance(ref, str):
            if ch_names is None:
                raise KeyError(f"Channel '{ref}' given by name but no channel names are available.")
            if ref not in ch_names:
                raise KeyError(f"Channel '{ref}' not found in channel names.")
            indices.add(list(ch_names).index(ref))
        elif isinstance(ref, (int, np.integer)) and not isinstance(ref, bool):
            if ref < 0 or (n_channels is not None and ref >= n_channels):
                raise IndexError(f"Channel index {ref} out of range for {n_channels} channels.")
            indices.add(int(ref))
        else:
            raise TypeError(f"Channel reference must be a name or an index, got {ref!r}.")
    if len(indices) < min_channels:
        raise ValueError(f"At least {min_channels} distinct channels are required, got {sorted(indices)}.")
    return sorted(indices)


def build_channel_pairs(channels: Union[int, Sequence[int]], mode: str = 'combinations',
                        seeds: Optional[Sequence[int]] = None) -> List[Tuple[int, int]]:
    """
    Builds independent channel pairs.

    'combinations' gives every unordered pair (i, j), i before j in list order.
    'seed' pairs every seed channel with every other channel; a pair already
    produced in the opposite orientation is not repeated.
    """
    if isinstance(channels, (int, np.integer)):
        channels = list(range(int(channels)))
    channels = [int(c) for c in channels]
    if len(set(channels)) < 2:
        raise ValueError(f"Phase locking needs at least two channels, got {channels}.")
    if mode == 'combinations':
        return list(combinations(channels, 2))
    if mode == 'seed':
        if not seeds:
            raise ValueError("Pair mode 'seed' needs at least one seed channel.")
        pairs, seen = [], set()
        for s in seeds:
            for c in channels:
                key = frozenset((int(s), c))
                if c == s or key in seen:
                    continue
                seen.add(key)
                pairs.append((int(s), c))
        return pairs
    raise ValueError(f"Unknown pair mode '{mode}'. Use one of {PAIR_MODES}.")
