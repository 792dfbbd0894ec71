"""
Validation functions for parameters.

"""

import cerberus
from .exceptions import InvalidParameter


def validate(params: dict, validator: cerberus.Validator) -> dict:
    """
    Function used to validate parameters.

    Parameters
    ----------
    params: dict
    validator: cerberus.Validator

    Returns
    -------
    dict: Validated and normalized parameters

    Raises
    ------
    InvalidParameter: if any of the parameters are invalid.
    """
    normalized = validator.normalized(params)
    if not validator.validate(normalized):
        msg = ""
        for field, e_msgs in validator.errors.items():
            for e_msg in e_msgs:
                msg += "{}: {}\n".format(field, e_msg)
        raise InvalidParameter(msg)
    return normalized


class ParameterValidator(cerberus.Validator):
    def _validate_is_positive(self, is_positive, field, value):
        """
        Tests if a value is positive

        The rule's arguments are validated against this schema:
        {"type": "boolean"}
        """
        # negated comparison also rejects nan
        if is_positive and (value is not None) and not (value > 0):
            msg = "Must be a positive number"
            self._error(field, msg)

    def _validate_lower_than(self, limit, field, value):
        """
        Tests if a value is strictly lower than a limit.

        The rule's arguments are validated against this schema:
        {"type": "number"}
        """
        if (value is not None) and not (value < limit):
            msg = "Must be lower than {}".format(limit)
            self._error(field, msg)


def get_distribution_schema() -> dict:
    schema = {
        "resolution": {
            "type": "number",
            "is_positive": True
        },
        "min_intensity": {
            "type": "number",
            "is_positive": True,
            "max": 1.0
        },
        "min_p": {
            "type": "number",
            "min": 0.0,
            "lower_than": 1.0
        },
        "n_jobs": {
            "type": "integer",
            "nullable": True,
            "forbidden": [0]
        }
    }
    return schema


def validate_distribution_params(
    resolution: float, min_intensity: float, min_p: float, n_jobs=None
) -> dict:
    """
    Checks the tuning parameters of the isotopic distribution engine.

    Raises
    ------
    InvalidParameter
        If `resolution` is not positive, `min_intensity` is outside (0, 1],
        `min_p` is outside [0, 1) or `n_jobs` is zero.

    """
    params = {
        "resolution": resolution,
        "min_intensity": min_intensity,
        "min_p": min_p,
        "n_jobs": n_jobs
    }
    validator = ParameterValidator(get_distribution_schema())
    return validate(params, validator)
