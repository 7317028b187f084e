from random import Random

from ffann import Config, Network, NetworkMonitor
from ffann.core.ann import dot_found
from common import example_path, int_arg


def main(is_test=False):
    seed = int_arg(1, 0)
    samples = 10 if is_test else int_arg(2, 100)

    # Identity outputs to look at the raw sums
    output_activation = Config.outputActivation
    Config.outputActivation = "id"
    rng = Random(seed)
    network = Network.random(3, [4], 2, rng)
    Config.outputActivation = output_activation

    folder = example_path("")
    monitor = NetworkMonitor(network, folder, "network.values.dat",
                             labels={(0, 0): "x", (0, 1): "y", (0, 2): "z"},
                             html=True)

    for _ in range(samples):
        network([rng.uniform(-1, 1) for _ in range(3)])
        monitor.step()
    monitor.close()

    if dot_found:
        print("Wrote", network.to_dot(folder.joinpath("network.png"),
                                      title=repr(network)))

    print(network.stats().dict())


if __name__ == "__main__":
    main()
