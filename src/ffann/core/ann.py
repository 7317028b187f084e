import dataclasses
import logging
import pathlib
import time
from dataclasses import dataclass
from random import Random
from shutil import which
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from graphviz import Digraph

from .config import Config
from .functions import Activation

logger = logging.getLogger(__name__)

dot_found = (which("dot") is not None)


@dataclass(frozen=True)
class RawValue:
    """Immutable scalar placeholder populating the input layer"""
    value: float


class Unit:
    """Computing node: weighted sum of the previous layer, plus bias,
    passed through an activation function

    Weights, bias and activation are fixed at construction, only
    :attr:`output` changes when the network is evaluated.
    """
    def __init__(self, weights: Sequence[float], bias: float,
                 activation: Union[Activation, str], output: float = 0.0):
        self._weights = np.array(weights, dtype=float).reshape(-1)
        self._weights.flags.writeable = False
        self._bias = float(bias)
        if isinstance(activation, str):
            activation = Activation.from_string(activation)
        self._activation = activation
        self.output = float(output)

    def __repr__(self):
        return (f"Unit(weights={self._weights.tolist()}, bias={self._bias},"
                f" activation={self._activation.value}, output={self.output})")

    @property
    def weights(self) -> np.ndarray: return self._weights

    @property
    def bias(self) -> float: return self._bias

    @property
    def activation(self) -> Activation: return self._activation

    def copy(self) -> 'Unit':
        """A new unit with the same parameters and a reset output"""
        return Unit(self._weights, self._bias, self._activation)

    @classmethod
    def random(cls, inputs: int, activation: Activation, rng: Random) \
            -> 'Unit':
        """Draw `inputs` weights and a bias from `rng`"""
        weights = [_uniform(rng, Config.weightRange) for _ in range(inputs)]
        return cls(weights=weights,
                   bias=_uniform(rng, Config.biasScale),
                   activation=activation)

    @property
    def value(self) -> float:
        return self.output

    def __call__(self, previous: np.ndarray) -> float:
        """Update the output from the values of the previous layer"""
        raw = self.bias + self.weights.dot(previous)
        self.output = float(self.activation(raw))
        return self.output


Node = Union[RawValue, Unit]


class Network:
    """Fully-connected feedforward network

    Layers are stored input first, output last. The input layer holds
    :class:`RawValue` nodes, every other layer holds :class:`Unit`.
    Can be created either randomly (:meth:`random`) or from explicit units
    (:meth:`from_layers`).
    A bare ``Network()`` holds no layer and every accessor raises
    ValueError until populated by one of these builders.
    """

    @dataclass
    class Stats:
        depth: int = -1
        inputs: int = -1
        hidden: int = -1
        outputs: int = -1
        edges: int = -1
        passes: int = 0
        time: dict = dataclasses.field(
            default_factory=lambda: dict(build=-1, eval=-1))

        def dict(self): return dataclasses.asdict(self)

    def __init__(self):
        self._layers: List[List[Node]] = []
        self._stats = Network.Stats()

    def __repr__(self):
        return f"Network({'-'.join(str(n) for n in self.shape())})"

    @classmethod
    def random(cls, input_size: int, hidden_sizes: Sequence[int],
               output_size: int, rng: Optional[Random] = None) -> 'Network':
        """
        Build a network with randomly drawn inputs, weights and biases

        Hidden units use :attr:`Config.hiddenActivation`, output units
        :attr:`Config.outputActivation`. Zero sizes are allowed and produce
        empty layers (or units without weights).

        :param input_size: number of raw input values
        :param hidden_sizes: number of units in each hidden layer, in order
        :param output_size: number of output units
        :param rng: source of randomness (a fresh, unseeded one if None)
        :return: the new network
        """
        start = _time()

        sizes = [input_size, *hidden_sizes, output_size]
        if any(s < 0 for s in sizes):
            raise ValueError(f"Negative layer size in {sizes}")

        if rng is None:
            rng = Random()

        hidden = Activation.from_string(Config.hiddenActivation)
        output = Activation.from_string(Config.outputActivation)

        network = cls()
        network._layers.append([
            RawValue(_uniform(rng, Config.inputRange))
            for _ in range(input_size)
        ])
        for size in hidden_sizes:
            network._layers.append(
                _random_layer(size, len(network._layers[-1]), hidden, rng))
        network._layers.append(
            _random_layer(output_size, len(network._layers[-1]), output, rng))

        network._compute_stats()
        network._stats.time['build'] = _time_diff(start)
        logger.debug(f"Built {network} with {network._stats.edges} edges")
        return network

    @classmethod
    def from_layers(cls, inputs: Sequence[float],
                    layers: Sequence[Sequence[Unit]]) -> 'Network':
        """
        Build a network from explicit values

        :param inputs: initial values of the input layer
        :param layers: hidden layers, if any, followed by the output layer
            (units are copied: the network never shares them with the
            caller or another network)
        :return: the new network
        :raises ValueError: if there is no output layer or a unit does not
            have one weight per node in the previous layer
        """
        start = _time()

        if len(layers) == 0:
            raise ValueError("A network requires at least an output layer")

        network = cls()
        network._layers.append([RawValue(float(v)) for v in inputs])
        for i, layer in enumerate(layers, start=1):
            previous = len(network._layers[-1])
            for j, unit in enumerate(layer):
                if not isinstance(unit, Unit):
                    raise ValueError(f"Node {j} of layer {i} is not a unit:"
                                     f" {unit}")
                if len(unit.weights) != previous:
                    raise ValueError(f"Unit {j} of layer {i} has"
                                     f" {len(unit.weights)} weights for"
                                     f" {previous} incoming nodes")
            network._layers.append([unit.copy() for unit in layer])

        network._compute_stats()
        network._stats.time['build'] = _time_diff(start)
        return network

    def set_inputs(self, values: Sequence[float]) -> None:
        """
        Replace the whole input layer

        :raises ValueError: if the number of values differs from the size of
            the input layer. The network is left untouched
        """
        self._check_built()
        expected = len(self._layers[0])
        if len(values) != expected:
            raise ValueError(f"Length of new input layer does not match"
                             f" length of old input layer."
                             f" {len(values)} vs {expected}")
        self._layers[0] = [RawValue(float(v)) for v in values]

    def forward(self) -> List[float]:
        """
        Propagate the input values, one layer at a time

        Each layer only sees the values its predecessor held at the start of
        its own step.

        :return: the output values
        """
        self._check_built()
        start = _time()

        for i in range(1, len(self._layers)):
            previous = self._snapshot(i - 1)
            for unit in self._layers[i]:
                unit(previous)

        self._stats.passes += 1
        self._stats.time['eval'] += _time_diff(start)
        return self.output_values()

    def __call__(self, inputs: Optional[Sequence[float]] = None) \
            -> List[float]:
        if inputs is not None:
            self.set_inputs(inputs)
        return self.forward()

    def layers(self) -> Tuple[Tuple[Node, ...], ...]:
        return tuple(tuple(layer) for layer in self._layers)

    def shape(self) -> List[int]:
        return [len(layer) for layer in self._layers]

    def layer_values(self, i: int) -> List[float]:
        self._check_built()
        return [n.value for n in self._layers[i]]

    def input_values(self) -> List[float]: return self.layer_values(0)

    def output_layer(self) -> Tuple[Node, ...]:
        self._check_built()
        return tuple(self._layers[-1])

    def output_values(self) -> List[float]: return self.layer_values(-1)

    def squared_error(self, expected: Sequence[float]) -> float:
        """
        Sum of the squared differences between outputs and expected values

        Only the first ``len(expected)`` outputs are compared, so that an
        empty expectation always yields 0.

        :raises ValueError: if more values are expected than there are
            outputs
        """
        outputs = self.output_values()
        if len(expected) > len(outputs):
            raise ValueError(f"Cannot compare {len(expected)} expected values"
                             f" to {len(outputs)} outputs")
        residuals = (np.array(outputs[:len(expected)], dtype=float)
                     - np.array(expected, dtype=float))
        return float(np.sum(residuals ** 2))

    def stats(self): return self._stats

    def empty(self):
        return self._stats.edges == 0

    def _check_built(self):
        if len(self._layers) < 2:
            raise ValueError(f"{self} has no layers. Use Network.random or"
                             f" Network.from_layers to build one")

    def _snapshot(self, i: int) -> np.ndarray:
        layer = self._layers[i]
        return np.fromiter((n.value for n in layer), dtype=float,
                           count=len(layer))

    def _compute_stats(self):
        shape = self.shape()
        self._stats.depth = len(shape) - 1
        self._stats.inputs = shape[0]
        self._stats.hidden = sum(shape[1:-1])
        self._stats.outputs = shape[-1]
        self._stats.edges = sum(lhs * rhs for lhs, rhs
                                in zip(shape[:-1], shape[1:]))
        self._stats.time['eval'] = 0

    def to_dot(self, path: str, ext: str = "pdf",
               title: Optional[str] = None) -> str:
        """Produce a graphical representation of this network

        Edges are red for negative weights, black otherwise, and widen with
        the weight's magnitude.

        Args:
            path: The path to write to
            ext: The rendering format to use
            title: Optional title for the graph

        Raises:
            OSError: if the `dot` program is not available (not installed, on
                the path and executable)
        """
        if not dot_found:  # pragma: no cover
            raise OSError("""
                dot program not found. Make sure it is installed before using
                 this function.

                [ubuntu] sudo apt install graphviz
            """)

        path = pathlib.Path(path)
        if path.suffix != "":
            ext = path.suffix.replace('.', '')
            path = path.with_suffix('')

        dot = Digraph('network')
        if title is not None:
            dot.attr(labelloc="t")
            dot.attr(label=title)
        dot.attr(rankdir='LR')

        def name(_i, _j): return f"L{_i}N{_j}"

        for i, layer in enumerate(self._layers):
            g = Digraph(f"layer{i}")
            g.attr(rank="source" if i == 0 else "same")
            for j, n in enumerate(layer):
                if isinstance(n, Unit):
                    g.node(name(i, j),
                           f"{n.activation.value}\nb={n.bias:.3g}",
                           shape="circle", fixedsize="shape",
                           width="0.75in", height="0.75in")
                else:
                    g.node(name(i, j), f"{n.value:.3g}", shape="plaintext")
            dot.subgraph(g)

        w_max = max([abs(w) for layer in self._layers[1:] for n in layer
                     for w in n.weights], default=0) or 1
        for i, layer in enumerate(self._layers[1:], start=1):
            for j, n in enumerate(layer):
                for k, w in enumerate(n.weights):
                    dot.edge(name(i - 1, k), name(i, j),
                             color="red" if w < 0 else "black",
                             penwidth=str(3.75 * abs(w) / w_max + .25))

        return dot.render(path, format=ext, cleanup=True)


def _uniform(rng: Random, scale: float = 1) -> float:
    return scale * (2 * rng.random() - 1)


def _random_layer(size: int, inputs: int, activation: Activation,
                  rng: Random) -> List[Node]:
    return [Unit.random(inputs, activation, rng) for _ in range(size)]


def _time(): return time.perf_counter()
def _time_diff(start): return _time() - start
