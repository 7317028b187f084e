from enum import IntFlag
from typing import Dict, Any

import pytest

from ffann import Config


class TestSize(IntFlag):
    SMALL = 2
    NORMAL = 8
    LARGE = 32


flags = {
    TestSize.SMALL: "--fast",
    TestSize.NORMAL: "--normal-scale",
    TestSize.LARGE: "--full-scale",
}


def pytest_addoption(parser):
    parser.addoption(flags[TestSize.SMALL], "--small-scale",
                     action='store_const',
                     const=TestSize.SMALL, default=TestSize.NORMAL,
                     dest='size',
                     help='Run very small test suite '
                          '(two shapes, 2 seeds...)')
    parser.addoption(flags[TestSize.NORMAL], action='store_const',
                     const=TestSize.NORMAL, default=TestSize.NORMAL,
                     dest='size',
                     help='Run moderate test suite '
                          '(five shapes, 8 seeds...)')
    parser.addoption(flags[TestSize.LARGE], "--large-scale",
                     action='store_const',
                     const=TestSize.LARGE, default=TestSize.NORMAL,
                     dest='size',
                     help='Run large test suite '
                          '(wide and deep shapes, 32 seeds...). '
                          'Warning: While it ensures good coverage, it will'
                          ' take (too) long')

    parser.addoption("--test-examples", dest='examples',
                     action='store_true',
                     help="Run all examples. Writes files under"
                          " tmp/examples.")


# (inputs, hidden layers, outputs)
scale_config: Dict[str, Dict[TestSize, Any]] = dict(
    seed={k: range(k) for k in TestSize},
    shape={
        TestSize.SMALL: [(2, (), 1), (2, (10, 5), 2)],
        TestSize.NORMAL: [(1, (1,), 1), (5, (8,), 3), (3, (4, 4, 4), 2)],
        TestSize.LARGE: [(0, (3,), 2), (16, (32, 32, 16), 8)],
    },
)


def values_for(key: str):
    values = []
    for v in scale_config[key].values():
        values += v
    return sorted(set(values))


def scale_for(key: str, value):
    for ts in TestSize:
        if value in scale_config[key][ts]:
            return ts


def max_scale_for(params):
    scale = TestSize.SMALL
    for k, v in params.items():
        if k in scale_config:
            scale = max(scale, scale_for(k, v))
    return scale


def pytest_generate_tests(metafunc):
    def can_parametrize(name):
        if name not in metafunc.fixturenames:
            return False
        existing = [
            m for m in metafunc.definition.iter_markers('parametrize')
            if name == m.args[0]
        ]
        return len(existing) == 0

    def maybe_parametrize(name, short_name=None, values=None):
        if can_parametrize(name):
            if values is None:
                values = values_for(name)

            metafunc.parametrize(name, values,
                                 ids=lambda val: ""
                                 if short_name is None else
                                 f"{short_name}_{val}")

    maybe_parametrize("seed", "s")
    maybe_parametrize("shape", "sh")


def pytest_collection_modifyitems(config, items):
    scale = config.getoption("size")
    slow_marks = {}
    for s_ in TestSize:
        if s_ <= scale:
            continue
        flag = flags[s_]
        slow_marks[s_] = \
            pytest.mark.skip(reason=f"Test scale ({s_.name}) is larger than"
                                    f" current target ({scale.name}). Use"
                                    f" {flag} to run")

    file_order = ["scale", "functions", "config", "ann", "render",
                  "examples"]

    def _key(_item): return _item.reportinfo()[0].stem.split("_")[1]

    def index(_item):
        try:
            return file_order.index(_key(_item))
        except ValueError:
            return len(file_order)

    items.sort(key=lambda _item: index(_item))

    for item in items:
        if item.originalname == "test_run_examples":
            if not config.getoption("examples"):
                item.add_marker(
                    pytest.mark.skip(reason="Only running examples test on"
                                            " explicit request. Use"
                                            " --test-examples to do so.")
                )
            continue

        if not hasattr(item, 'callspec'):
            continue

        that_scale = max_scale_for(item.callspec.params)
        if scale < that_scale:
            item.add_marker(slow_marks[that_scale])


@pytest.fixture
def restore_config_after():
    config = Config.to_json()

    yield

    Config.from_json(config)
