from enum import Enum

import numpy as np


functions = dict(
    relu=lambda x: np.maximum(x, 0),
    sigm=lambda x: 1 / (1 + np.exp(-x)),

    id=lambda x: x,
    tanh=lambda x: np.tanh(x),
)


class Activation(Enum):
    """Nonlinearity applied to a unit's weighted sum plus bias

    Values are the keys of :data:`functions`
    """
    RELU = "relu"
    SIGMOID = "sigm"
    ID = "id"
    TANH = "tanh"

    def __call__(self, x):
        return functions[self.value](x)

    @staticmethod
    def known(name: str) -> bool:
        return name in functions

    @classmethod
    def from_string(cls, name: str) -> 'Activation':
        if not cls.known(name):
            raise ValueError(f"Activation function {name} is unknown")
        return cls(name)
