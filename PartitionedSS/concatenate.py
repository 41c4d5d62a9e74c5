import logging

import numpy as np
import control as ct
from scipy.linalg import block_diag

from PartitionedSS.errors import DimensionMismatch
from PartitionedSS.timeevol import common_timeevol
from PartitionedSS.PartitionedStateSpace import PartitionedStateSpace

logger = logging.getLogger(__name__)


def _check_shared(systems, attr):
    if len(systems) == 0:
        raise ValueError("At least one system is required")
    size = getattr(systems[0], attr)
    for i, s in enumerate(systems):
        if getattr(s, attr) != size:
            raise DimensionMismatch(
                f"All systems must have the same {attr}: system 0 has {attr}={size}, "
                f"system {i} has {attr}={getattr(s, attr)}")
    return size


def vcat_1(systems):
    """
    Concatenate systems vertically with
        the same first input u1,
        second input u2 = [u2_1; u2_2; ...],
        outputs y1 = [y1_1; y1_2; ...] and y2 = [y2_1; y2_2; ...]
    where u1_i, u2_i, y1_i, y2_i are the signals of system i.

    Parameters
    ----------
    systems : sequence of PartitionedStateSpace
        All with the same nu1

    Returns
    -------
    sys : PartitionedStateSpace
        nu1 = the shared nu1, ny1 = sum of the ny1
    """
    systems = list(systems)
    nu1 = _check_shared(systems, 'nu1')
    dt = common_timeevol(*systems)

    A = block_diag(*[s.A for s in systems])

    B1 = np.vstack([s.B1 for s in systems])
    B2 = block_diag(*[s.B2 for s in systems])

    C1 = block_diag(*[s.C1 for s in systems])
    C2 = block_diag(*[s.C2 for s in systems])

    D11 = np.vstack([s.D11 for s in systems])
    D12 = block_diag(*[s.D12 for s in systems])
    D21 = np.vstack([s.D21 for s in systems])
    D22 = block_diag(*[s.D22 for s in systems])

    P = ct.ss(A, np.hstack([B1, B2]), np.vstack([C1, C2]), np.block([[D11, D12], [D21, D22]]), dt)
    sys = PartitionedStateSpace(P, nu1, sum(s.ny1 for s in systems))
    logger.debug("vcat_1 of %d systems: %r", len(systems), sys)
    return sys


def hcat_1(systems):
    """
    Concatenate systems horizontally with
        the same first output y1, the sum of the y1_i,
        second output y2 = [y2_1; y2_2; ...],
        inputs u1 = [u1_1; u1_2; ...] and u2 = [u2_1; u2_2; ...]
    where u1_i, u2_i, y1_i, y2_i are the signals of system i.

    Parameters
    ----------
    systems : sequence of PartitionedStateSpace
        All with the same ny1

    Returns
    -------
    sys : PartitionedStateSpace
        ny1 = the shared ny1, nu1 = sum of the nu1
    """
    systems = list(systems)
    ny1 = _check_shared(systems, 'ny1')
    dt = common_timeevol(*systems)

    A = block_diag(*[s.A for s in systems])

    B1 = block_diag(*[s.B1 for s in systems])
    B2 = block_diag(*[s.B2 for s in systems])

    C1 = np.hstack([s.C1 for s in systems])
    C2 = block_diag(*[s.C2 for s in systems])

    D11 = np.hstack([s.D11 for s in systems])
    D12 = np.hstack([s.D12 for s in systems])
    D21 = block_diag(*[s.D21 for s in systems])
    D22 = block_diag(*[s.D22 for s in systems])

    P = ct.ss(A, np.hstack([B1, B2]), np.vstack([C1, C2]), np.block([[D11, D12], [D21, D22]]), dt)
    sys = PartitionedStateSpace(P, sum(s.nu1 for s in systems), ny1)
    logger.debug("hcat_1 of %d systems: %r", len(systems), sys)
    return sys
