from PartitionedSS.errors import IncompatibleTimeError


def timeevol_kind(dt):
    """
    Classify a python-control timebase.

    Parameters
    ----------
    dt : None, bool or float
        0 for continuous time, positive number or True for discrete time,
        None when the timebase is left unspecified.

    Returns
    -------
    kind : str
        'continuous', 'discrete' or 'unspecified'
    """
    if dt is None:
        return 'unspecified'
    if dt is True:
        return 'discrete'
    if isinstance(dt, bool):
        raise ValueError("dt=False is not a valid timebase")
    if dt == 0:
        return 'continuous'
    if dt > 0:
        return 'discrete'
    raise ValueError(f"invalid timebase dt={dt}")


def common_dt(dt1, dt2):
    """
    Timebase shared by two systems.

    None matches anything and True (discrete, unspecified sampling time)
    matches any discrete timebase.
    """
    kind1, kind2 = timeevol_kind(dt1), timeevol_kind(dt2)
    if kind1 == 'unspecified':
        return dt2
    if kind2 == 'unspecified':
        return dt1
    if kind1 == kind2 == 'discrete':
        if dt1 is True:
            return dt2
        if dt2 is True:
            return dt1
    if kind1 == kind2 and dt1 == dt2:
        return dt1
    raise IncompatibleTimeError(
        f"Systems have incompatible timebases: {kind1} (dt={dt1}) and {kind2} (dt={dt2})")


def common_timeevol(*systems):
    """
    Common timebase of one or more systems.

    Parameters
    ----------
    *systems : PartitionedStateSpace or control.StateSpace
        Any objects exposing a python-control ``dt`` attribute

    Returns
    -------
    dt : None, bool or float
        Timebase to give the interconnected system
    """
    if not systems:
        raise ValueError("At least one system is required")
    dt = systems[0].dt
    for sys in systems[1:]:
        dt = common_dt(dt, sys.dt)
    return dt
