import logging
import math
from pathlib import Path
from typing import Optional, Dict, List, Tuple, Union

import plotly.graph_objects as go

from .ann import Network, Unit

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


def plotly_render(network: Network,
                  labels: Optional[Dict[Position, str]] = None) -> go.Figure:
    """
    Produce a 2D figure from a feedforward network

    Layers are laid out from left (inputs) to right (outputs). Nodes are
    coloured by their current value, edges by the sign of their weight.

    :param network: the network to draw
    :param labels: optional names for nodes, keyed by (layer, index)
    """

    return _figure(data=[_edges(network), _nodes(network, labels)])


def _iter_nodes(network: Network):
    for i, layer in enumerate(network.layers()):
        for j, n in enumerate(layer):
            yield (i, j), n


def _iter_edges(network: Network):
    for i, layer in enumerate(network.layers()[1:], start=1):
        for j, dst in enumerate(layer):
            for k, w in enumerate(dst.weights):
                yield (i - 1, k), (i, j), w


def _coordinates(network: Network, pos: Position) -> Tuple[float, float]:
    shape = network.shape()
    i, j = pos
    x = 2 * i / max(1, len(shape) - 1) - 1
    y = 0 if shape[i] <= 1 else 1 - 2 * j / (shape[i] - 1)
    return x, y


class NetworkMonitor:
    """Records the values of every node after each forward pass

    Call :meth:`step` after :meth:`Network.forward` and :meth:`close` once
    done to write the collected data.
    """
    def __init__(self, network: Network,
                 folder: Path,
                 values_file: Union[Path, str],
                 labels: Optional[Dict[Position, str]] = None,
                 html: bool = False):
        self.network = network

        self.labels = labels

        self.save_folder = folder
        self.values_file = folder.joinpath(values_file)
        self.html = html

        if self.labels is None:
            def _id(_pos): return f"L{_pos[0]}N{_pos[1]}"
        else:
            def _id(pos): return f"L{pos[0]}N{pos[1]}:{self.labels.get(pos)}"

        self.values = _TinyDataFrame(
            columns=[_id(pos) for pos, _ in _iter_nodes(self.network)]
        )

    def step(self):
        self.values.append([
            n.value for _, n in _iter_nodes(self.network)
        ])

    def close(self):
        self.values.to_csv(self.values_file, sep=' ')
        logger.info(f"Generated {self.values_file}")

        if self.html:
            fig = go.Figure(data=[
                go.Scatter(x=list(range(len(self.values.data))),
                           y=[row[c] for row in self.values.data],
                           mode='lines', name=name)
                for c, name in enumerate(self.values.columns)
            ])
            fig.update_layout(xaxis_title="Pass", yaxis_title="Value")

            interactive_plot_file = self.values_file.with_suffix(".html")
            fig.write_html(interactive_plot_file, auto_play=False)
            logger.info(f"Generated {interactive_plot_file}")


def _nodes(network: Network, labels: Optional[Dict[Position, str]],
           **kwargs) -> go.Scatter:

    coordinates = [_coordinates(network, pos)
                   for pos, _ in _iter_nodes(network)]
    x, y = [c[0] for c in coordinates], [c[1] for c in coordinates]
    last = len(network.shape()) - 1
    names = []
    for (i, j), n in _iter_nodes(network):
        kind = "Input" if i == 0 else "Output" if i == last else "Hidden"
        if labels is None or (label := labels.get((i, j), None)) is None:
            label = f"{kind[0]}{j}"
        text = f"<b>{kind}</b><br><i>{label}</i>"
        if isinstance(n, Unit):
            text += (f"<br>Bias: {n.bias:.3g}"
                     f"<br>Activation: {n.activation.value}")
        names.append(text)

    values = [n.value for _, n in _iter_nodes(network)]
    v_max = max(1, max((abs(v) for v in values), default=0))

    markers = dict(
        symbol='circle', size=14,
        color=values, showscale=True,
        colorscale=[
            "rgb(0, 0, 255)",
            "rgba(0, 0, 0, 0)",
            "rgb(255, 0, 0)"],
        cmin=-v_max, cmax=v_max,
        line=dict(width=1, color="black"),
        colorbar=dict(
            len=0.5, y=.5,
            yanchor="top",
            title=dict(text="Values", side="right")
        )
    )

    return go.Scatter(
            x=x, y=y,
            mode='markers',
            marker=markers,
            hovertemplate="%{hovertext}<br>value: %{customdata:.3}"
                          "<extra></extra>",
            customdata=values,
            hovertext=names,
            **kwargs
        )


def _edges(network: Network, **kwargs) -> List[go.Scatter]:

    if network.empty():
        return []

    w_max = max(abs(w) for _, _, w in _iter_edges(network)) or 1

    # plotly lines share a single color: one trace per weight sign
    traces = []
    for positive, color in [(True, "black"), (False, "red")]:
        edges = [(src, dst, w) for src, dst, w in _iter_edges(network)
                 if (w >= 0) == positive]
        if len(edges) == 0:
            continue

        x, y = [], []
        for src, dst, _ in edges:
            (x0, y0), (x1, y1) = (_coordinates(network, src),
                                  _coordinates(network, dst))
            x.extend([x0, x1, None])
            y.extend([y0, y1, None])

        w_mean = math.fsum(abs(w) for _, _, w in edges) / len(edges)
        traces.append(go.Scatter(
            x=x, y=y,
            mode='lines',
            line=dict(width=1 + 2 * w_mean / w_max, color=color),
            opacity=.5,
            hoverinfo='none',
            **kwargs
        ))
    return traces


def _figure(data, **kwargs) -> go.Figure:

    fig = go.Figure(data=list(_flatten(data)), **kwargs)

    fig.update_layout(
        xaxis=dict(range=[-1.1, 1.1], visible=False),
        yaxis=dict(range=[-1.1, 1.1], visible=False),
        showlegend=False,
        hoverlabel=dict(
            bgcolor="white",
            font_size=16,
            font_family="Courrier"
        ),
        margin=dict(r=0, l=0, b=0, t=0)
    )

    return fig


def _flatten(data):
    for d in data:
        if isinstance(d, list):
            yield from d
        else:
            yield d


class _TinyDataFrame:
    def __init__(self, columns: List[str]):
        self.columns = columns
        self.data = []

    def append(self, data):
        self.data.append(data)

    def to_csv(self, file, sep=","):
        with open(file, "w") as f:
            f.write(sep.join(f"\"{s}\"" for s in [""] + self.columns) + "\n")
            for i, row in enumerate(self.data):
                f.write(sep.join(str(v) for v in [i] + row) + "\n")
