"""Multi-node helpers built on the point-to-point link orchestrator.

Node positions are planar (x, y) coordinates in km. Every pair is evaluated
with the orchestrator's current parameters and only the distance changed.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from commlink.core.errors import InvalidParameterError
from commlink.domain.models import LinkStatus
from commlink.services.link_budget import DISTANCE_RANGE_KM, LinkBudgetOrchestrator

logger = logging.getLogger(__name__)

Position = Tuple[float, float]


def _pair_distance(a: Position, b: Position) -> float:
    distance = float(np.hypot(b[0] - a[0], b[1] - a[1]))
    return min(max(distance, DISTANCE_RANGE_KM[0]), DISTANCE_RANGE_KM[1])


def _status_at(trial: LinkBudgetOrchestrator, distance_km: float) -> Optional[LinkStatus]:
    """Link status over ``distance_km``, None when the link cannot be modelled that far."""
    if not trial.set_distance(distance_km):
        logger.debug("No usable link over %.3f km", distance_km)
        return None
    return trial.calculate_link_status()


def calculate_link_matrix(orchestrator: LinkBudgetOrchestrator, positions: Sequence[Position]) -> np.ndarray:
    """Symmetric matrix of link SNR in dB; the diagonal is 0 and unusable pairs are -inf."""
    n = len(positions)
    matrix = np.zeros((n, n))
    trial = orchestrator.what_if()
    for i in range(n):
        for j in range(i + 1, n):
            status = _status_at(trial, _pair_distance(positions[i], positions[j]))
            matrix[i, j] = matrix[j, i] = status.snr_db if status is not None else -np.inf
    return matrix


def calculate_network_connectivity(orchestrator: LinkBudgetOrchestrator, positions: Sequence[Position]) -> float:
    """Fraction of node pairs whose direct link is connected."""
    n = len(positions)
    if n < 2:
        return 0.0
    trial = orchestrator.what_if()
    connected = 0
    pairs = 0
    for i in range(n):
        for j in range(i + 1, n):
            status = _status_at(trial, _pair_distance(positions[i], positions[j]))
            pairs += 1
            if status is not None and status.is_connected:
                connected += 1
    return connected / pairs


def find_optimal_relay_positions(
    orchestrator: LinkBudgetOrchestrator,
    source: Position,
    destination: Position,
    max_relays: int,
) -> List[Position]:
    """
    Fewest evenly spaced relays on the source-destination line that connect every hop.

    Args:
        orchestrator: Link parameters used for every hop
        source: Source node position (km)
        destination: Destination node position (km)
        max_relays: Upper bound on the number of relays

    Returns:
        Relay positions ordered from source to destination. Empty when the
        direct link already works or no relay count up to ``max_relays`` suffices.
    """
    if max_relays < 0:
        raise InvalidParameterError(f"max_relays must be non-negative, got {max_relays}")

    start = np.asarray(source, dtype=float)
    end = np.asarray(destination, dtype=float)
    total = float(np.hypot(*(end - start)))
    trial = orchestrator.what_if()

    for relays in range(max_relays + 1):
        hop = min(max(total / (relays + 1), DISTANCE_RANGE_KM[0]), DISTANCE_RANGE_KM[1])
        status = _status_at(trial, hop)
        if status is not None and status.is_connected:
            fractions = np.linspace(0.0, 1.0, relays + 2)[1:-1]
            points = [tuple(float(c) for c in start + f * (end - start)) for f in fractions]
            logger.debug("Connected with %d relay(s), hop %.3f km", relays, hop)
            return points

    logger.debug("No relay layout with up to %d relays connects %.3f km", max_relays, total)
    return []
