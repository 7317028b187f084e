import json
import logging
import pprint
from pathlib import Path
from typing import Optional, Dict

from .functions import Activation

logger = logging.getLogger(__name__)


class Config:
    """
    Process-wide configuration values

    Holds the ranges used when drawing a random network
    (:meth:`~ffann.core.ann.Network.random`) and the activation functions
    assigned to hidden and output units.
    Values are read at build time: changing them does not alter existing
    networks.
    """

    #: Half-width of the interval in which placeholder inputs are drawn
    inputRange: float = 1.0

    #: Half-width of the interval in which weights are drawn
    weightRange: float = 1.0

    #: Multiplier applied to a [-1, 1) draw to produce a bias
    biasScale: float = 10.0

    #: Activation function of every hidden unit
    hiddenActivation: str = Activation.RELU.value

    #: Activation function of every output unit
    outputActivation: str = Activation.SIGMOID.value

    #: Private reference to the config sections
    _sections = dict(
        initialisation=["inputRange", "weightRange", "biasScale"],
        activations=["hiddenActivation", "outputActivation"],
    )

    @classmethod
    def to_json(cls) -> Dict:
        """
        Convert to a json-compliant Python dictionary
        """
        return {
            section: {k: getattr(cls, k) for k in items}
            for section, items in cls._sections.items()
        }

    @classmethod
    def from_json(cls, j: Dict):
        """
        Restore values from a json-compliant Python dictionary

        :param j: the dictionary to parse values from
        """
        for section, items in cls._sections.items():
            for k in items:
                attr = j[section][k]
                this_attr = getattr(cls, k)
                setattr(cls, k, cls._convert(k, attr, type(this_attr)))

    @staticmethod
    def _convert(item, value, c_type):
        logger.debug(f"\tConverting {item}={value}:{type(value)} to {c_type}")
        if isinstance(value, c_type):
            return value
        if c_type is float and isinstance(value, int) \
                and not isinstance(value, bool):
            return float(value)
        raise TypeError(f"Failed to convert {item}:"
                        f" {value} ({type(value)}) -> {c_type}")

    @classmethod
    def write(cls, path: Optional[Path]):
        """
        Write the configuration to the specified file or stdout

        :param path: where to write or none to print to screen
        """

        if path is not None and path.exists():
            raise IOError(f"Will not overwrite existing "
                          f"file {path} with this one")

        json_cls = cls.to_json()

        if path is None:
            pprint.pprint(json_cls)
        else:
            with open(path, 'w') as f:
                json.dump(json_cls, f)
            assert path.exists()
            logger.info(f"Generated {path}")

    @classmethod
    def show(cls):
        """
        Write the configuration on standard output
        """

        cls.write(path=None)

    @classmethod
    def read(cls, path: Path):
        """
        Try to load data from provided path

        :param path: Filename
        """

        if not path.exists():
            raise IOError(f"Input path '{path}' does not exist")

        with open(path, 'r') as f:
            cls.from_json(json.load(f))

        # Then check relationship assertions
        for key in cls._sections["activations"]:
            func = getattr(cls, key)
            if not Activation.known(func):
                raise ValueError(f"Activation function {func} for {key}"
                                 f" is unknown")

        for key in cls._sections["initialisation"]:
            if getattr(cls, key) < 0:
                raise ValueError(f"{key} cannot be negative:"
                                 f" {getattr(cls, key)}")

        return path
