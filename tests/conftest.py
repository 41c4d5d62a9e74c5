import numpy as np
import pytest

from PartitionedSS.PartitionedStateSpace import PartitionedStateSpace


def make_system(rng, nx, nu1, nu2, ny1, ny2, dt=0, d_scale=0.3):
    A = -2.0 * np.eye(nx) + 0.5 * rng.standard_normal((nx, nx))
    B = rng.standard_normal((nx, nu1 + nu2))
    C = rng.standard_normal((ny1 + ny2, nx))
    D = d_scale * rng.standard_normal((ny1 + ny2, nu1 + nu2))
    return PartitionedStateSpace.from_blocks(
        A, B[:, :nu1], B[:, nu1:], C[:ny1, :], C[ny1:, :],
        D[:ny1, :nu1], D[:ny1, nu1:], D[ny1:, :nu1], D[ny1:, nu1:], dt)


@pytest.fixture
def rng():
    return np.random.default_rng(20240611)


@pytest.fixture
def random_system(rng):
    """Factory: random_system(nx, nu1, nu2, ny1, ny2, dt=0)"""
    def factory(nx, nu1, nu2, ny1, ny2, dt=0, d_scale=0.3):
        return make_system(rng, nx, nu1, nu2, ny1, ny2, dt, d_scale)
    return factory


@pytest.fixture
def check_shapes():
    def check(s):
        nx = s.A.shape[0]
        assert s.A.shape == (nx, nx)
        assert s.B1.shape[0] == s.B2.shape[0] == nx
        assert s.C1.shape[1] == s.C2.shape[1] == nx
        assert s.D11.shape[1] == s.D21.shape[1] == s.B1.shape[1] == s.nu1
        assert s.D12.shape[1] == s.D22.shape[1] == s.B2.shape[1] == s.nu2
        assert s.D11.shape[0] == s.D12.shape[0] == s.C1.shape[0] == s.ny1
        assert s.D21.shape[0] == s.D22.shape[0] == s.C2.shape[0] == s.ny2
    return check


@pytest.fixture
def points():
    """Complex evaluation points for frequency-response comparisons"""
    return [0.3j, 1.0 + 2.0j, 2.5j]
