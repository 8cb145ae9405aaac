"""
Utility functions for the Trochia package.
"""

import warnings
from typing import Type
import numpy as np
from .config import config


def validation_error(message: str, error_class: Type[Exception] = ValueError):
    """
    Raise error or warn based on config.STRICT_VALIDATION.

    This function provides consistent validation behavior across the package.
    When STRICT_VALIDATION is True (default), raises the specified exception.
    When False, issues a UserWarning instead.

    Parameters
    ----------
    message : str
        Validation error message
    error_class : Type[Exception], optional
        Exception class to raise if STRICT_VALIDATION is True.
        Default: ValueError

    Raises
    ------
    Exception (of type error_class)
        If config.STRICT_VALIDATION is True

    Warns
    -----
    UserWarning
        If config.STRICT_VALIDATION is False

    Examples
    --------
    >>> from trochia.utils import validation_error
    >>> from trochia import config
    >>> config.STRICT_VALIDATION = True
    >>> validation_error("Invalid value")  # Raises ValueError

    >>> config.STRICT_VALIDATION = False
    >>> validation_error("Invalid value")  # Issues warning
    """
    if config.STRICT_VALIDATION:
        raise error_class(message)
    else:
        warnings.warn(message, UserWarning, stacklevel=2)


def as_vector(values) -> np.ndarray:
    """
    Copy a 3-component sequence into a read-only float array.

    Raises
    ------
    ValueError
        If the input does not have exactly three components
    """
    vec = np.array(values, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"Vector must have 3 components, got shape {vec.shape}")
    vec.flags.writeable = False
    return vec


def unit_vector(values) -> np.ndarray:
    """Normalized copy of a vector, or the zero vector if its norm is 0."""
    vec = np.asarray(values, dtype=float)
    norm = np.linalg.norm(vec)
    if norm == 0:
        return as_vector(np.zeros(3))
    return as_vector(vec / norm)


def rtn_frame(position, velocity) -> np.ndarray:
    """
    Radial / transverse / normal unit vectors for a Cartesian state.

    Returns
    -------
    np.ndarray
        3x3 array whose rows are R_hat, T_hat, N_hat
    """
    r_hat = unit_vector(position)
    n_hat = unit_vector(np.cross(position, velocity))
    t_hat = np.cross(n_hat, r_hat)
    frame = np.vstack([r_hat, t_hat, n_hat])
    frame.flags.writeable = False
    return frame
