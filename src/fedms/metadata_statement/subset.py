import logging

from fedms.exception import UnexpectedValueType

logger = logging.getLogger(__name__)


def _json_type(value):
    # bool must be tested before int, bool is an int subclass
    if isinstance(value, bool):
        return "boolean"
    elif isinstance(value, (int, float)):
        return "number"
    elif isinstance(value, str):
        return "string"
    elif isinstance(value, list):
        return "array"
    elif isinstance(value, dict):
        return "object"
    else:
        raise UnexpectedValueType(f"Unexpected JSON type: {type(value).__name__}")


def _equal(val1, val2):
    # 1 == True in Python but not in JSON
    return isinstance(val1, bool) == isinstance(val2, bool) and val1 == val2


def is_subset(obj1, obj2) -> bool:
    """
    Indicates whether one value is a subset of another one, according to the
    OpenID Connect Federation draft. This is the rule an upper metadata statement
    has to follow when it overrides a claim in a lower one.

    :param obj1: One value.
    :param obj2: Another value.
    :return: True if obj1 is a subset of obj2. False otherwise.
    :raises UnexpectedValueType: If the values are of different or unsupported
        JSON types.
    """
    typ1 = _json_type(obj1)
    typ2 = _json_type(obj2)
    if typ1 != typ2:
        raise UnexpectedValueType(f"Can not compare {typ1} with {typ2}")

    if typ1 in ["string", "boolean"]:
        return obj1 == obj2
    elif typ1 == "number":
        return obj1 <= obj2
    elif typ1 == "array":
        return all(any(_equal(item, other) for other in obj2) for item in obj1)
    else:
        for key, val in obj1.items():
            if key not in obj2 or not is_subset(val, obj2[key]):
                return False
        return True
