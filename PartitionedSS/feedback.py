import logging

import numpy as np
import control as ct
from scipy.linalg import block_diag

from PartitionedSS.errors import DimensionMismatch
from PartitionedSS.timeevol import common_timeevol
from PartitionedSS.PartitionedStateSpace import PartitionedStateSpace, partition

logger = logging.getLogger(__name__)

# Condition number of I + D2_11*D1_11 above which feedback() warns
COND_WARN = 1e12


def _solve(L, R):
    if L.shape[0] == 0 or R.shape[1] == 0:
        return np.zeros((L.shape[0], R.shape[1]))
    return np.linalg.solve(L, R)


def _check_loop(L, name, cond_warn):
    if L.size == 0:
        return
    cond = np.linalg.cond(L)
    if cond > cond_warn:
        logger.warning("Feedback loop is close to ill-posed: cond(%s) = %.3g", name, cond)


def feedback(s1, s2, cond_warn=COND_WARN):
    """
    Negative feedback interconnection of two partitioned systems.

    The partition-1 output of s1 drives the partition-1 input of s2, whose
    partition-1 output is subtracted from the reference r entering s1:
        e1 = r - z2,    e2 = z1
    Partition-2 channels of both systems stay external.

    Parameters
    ----------
    s1, s2 : PartitionedStateSpace
        Requires s1.ny1 == s2.nu1 and s2.ny1 == s1.nu1
    cond_warn : float, optional
        Log a warning when the loop matrix I + D2_11*D1_11 has a larger
        condition number (default: 1e12)

    Returns
    -------
    sys_cl : PartitionedStateSpace
        Inputs [r; u1; u2], outputs [z1; y1; y2], with nu1 = s2.nu1 and
        ny1 = s1.ny1

    Raises
    ------
    numpy.linalg.LinAlgError
        If the loop is not well posed (I + D2_11*D1_11 singular)
    """
    if s1.ny1 != s2.nu1 or s2.ny1 != s1.nu1:
        raise DimensionMismatch(
            f"Feedback needs s1.ny1 == s2.nu1 and s2.ny1 == s1.nu1, got "
            f"s1 (nu1, ny1) = {(s1.nu1, s1.ny1)}, s2 (nu1, ny1) = {(s2.nu1, s2.ny1)}")
    dt = common_timeevol(s1, s2)

    n1, n2 = s1.nx, s2.nx

    # Algebraic loop: (I + D2_11 D1_11) e1 = ..., (I + D1_11 D2_11) e2 = ...
    L2 = np.eye(s1.nu1) + s2.D11 @ s1.D11
    L1 = np.eye(s2.nu1) + s1.D11 @ s2.D11
    _check_loop(L2, "I + D2_11*D1_11", cond_warn)

    X_11 = _solve(L2, np.hstack([-s2.D11 @ s1.C1, -s2.C1]))
    X_21 = _solve(L1, np.hstack([s1.C1, -s1.D11 @ s2.C1]))
    X_12 = _solve(L2, np.hstack([np.eye(s1.nu1), -s2.D11 @ s1.D12, -s2.D12]))
    X_22 = _solve(L1, np.hstack([s1.D11, s1.D12, -s1.D11 @ s2.D12]))

    A = np.vstack([s1.B1 @ X_11, s2.B1 @ X_21]) + block_diag(s1.A, s2.A)

    B = np.vstack([s1.B1 @ X_12, s2.B1 @ X_22])
    nb = s1.nu2 + s2.nu2
    B[:, B.shape[1] - nb:] += block_diag(s1.B2, s2.B2)

    C = np.vstack([
        s1.D11 @ X_11,
        s1.D21 @ X_11,
        s2.D21 @ X_21
    ]) + np.vstack([
        np.hstack([s1.C1, np.zeros((s1.ny1, n2))]),
        block_diag(s1.C2, s2.C2)
    ])

    D = np.vstack([
        s1.D11 @ X_12,
        s1.D21 @ X_12,
        s2.D21 @ X_22
    ])
    D[:, D.shape[1] - nb:] += np.vstack([
        np.hstack([s1.D12, np.zeros((s1.ny1, s2.nu2))]),
        block_diag(s1.D22, s2.D22)
    ])

    sys_cl = PartitionedStateSpace(ct.ss(A, B, C, D, dt), s2.nu1, s1.ny1)
    logger.debug("feedback: %r", sys_cl)
    return sys_cl


def lft(P, K):
    """
    Lower Linear Fractional Transformation (LFT)

    Given
        P = [P11 P12; P21 P22], K
    returns the closed-loop system: P11 + P12*K*(I - P22*K)^(-1)*P21

    Parameters
    ----------
    P : PartitionedStateSpace or control.StateSpace
        Generalized plant, inputs [w; u], outputs [z; y]. A plain
        control.StateSpace is partitioned from the size of K.
    K : control.StateSpace
        Controller from y to u

    Returns
    -------
    sys_cl : control.StateSpace
        Closed-loop system from w to z (not minimal)
    """
    if not isinstance(P, PartitionedStateSpace):
        P = partition(P, P.ninputs - K.noutputs, P.noutputs - K.ninputs)
    if K.ninputs != P.ny2 or K.noutputs != P.nu2:
        raise DimensionMismatch(
            f"Controller must map {P.ny2} measurements to {P.nu2} controls, "
            f"got {K.ninputs} inputs and {K.noutputs} outputs")
    common_timeevol(P, K)

    P11 = P.block(1, 1)
    P12 = P.block(1, 2)
    P21 = P.block(2, 1)
    P22 = P.block(2, 2)

    sys_cl = P11 + ct.series(P21, ct.feedback(K, P22, sign=1), P12)
    logger.debug("lft: %d states", sys_cl.nstates)
    return sys_cl
