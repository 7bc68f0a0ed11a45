"""Effective cluster interactions with optional temperature dependence."""
import json
import numpy as np
from cecvm.errors import InvalidInputError


class ECISet(object):
    """
    Effective cluster interactions ECI_l(T) = a_l + b_l*T

    :param a: Temperature independent part, one value per independent CF
    :param b: Coefficient of the linear temperature term (default zero)
    :param names: Optional name of every term
    """

    def __init__(self, a, b=None, names=None):
        self.a = np.array(a, dtype=float)
        if b is None:
            b = np.zeros_like(self.a)
        self.b = np.array(b, dtype=float)
        if self.a.ndim != 1 or self.a.shape != self.b.shape:
            raise InvalidInputError(
                "a and b must be vectors of equal length. Got shapes {} and "
                "{}".format(self.a.shape, self.b.shape))
        if names is None:
            names = ["term{}".format(i) for i in range(len(self.a))]
        if len(names) != len(self.a):
            raise InvalidInputError("Got {} names for {} terms".format(
                len(names), len(self.a)))
        self.names = list(names)

    @property
    def temperature_dependent(self):
        return bool(np.any(self.b != 0.0))

    def __len__(self):
        return len(self.a)

    def at(self, temperature, required_length=None):
        """
        Evaluate the ECIs at the given temperature

        :param temperature: Temperature
        :param required_length: If given, the number of terms has to match
        """
        if required_length is not None and required_length != len(self):
            raise InvalidInputError(
                "The ECI set has {} values, but the model requires {}. Make "
                "sure there is one ECI per independent correlation "
                "function".format(len(self), required_length))
        return self.a + self.b * temperature

    @staticmethod
    def from_dict(data):
        """
        Read ECIs from a dictionary

        Either {"cecTerms": [{"name": ..., "a": ..., "b": ...}, ...]} or a
        flat list {"cecValues": [...]}.
        """
        if "cecTerms" in data:
            a = []
            b = []
            names = []
            for i, term in enumerate(data["cecTerms"]):
                if "a" not in term:
                    raise InvalidInputError(
                        "ECI term {} has no 'a' coefficient".format(i))
                a.append(term["a"])
                b.append(term.get("b", 0.0))
                names.append(term.get("name", "term{}".format(i)))
            return ECISet(a, b=b, names=names)
        if "cecValues" in data:
            return ECISet(data["cecValues"])
        raise InvalidInputError("ECI data needs either 'cecTerms' or "
                                "'cecValues'")

    @staticmethod
    def load(fname):
        with open(fname, 'r') as infile:
            data = json.load(infile)
        return ECISet.from_dict(data)

    def to_dict(self):
        terms = []
        for name, a, b in zip(self.names, self.a, self.b):
            terms.append({"name": name, "a": float(a), "b": float(b)})
        return {"cecTerms": terms,
                "temperatureDependent": self.temperature_dependent}

    def save(self, fname):
        with open(fname, 'w') as outfile:
            json.dump(self.to_dict(), outfile, indent=2)
