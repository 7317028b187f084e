import logging
import pprint

from ffann import Network

logger = logging.getLogger(__name__)


def main():
    # Setup neural network
    network = Network.random(2, [10, 5], 2)
    logger.debug(f"{network}: {network.stats().dict()}")

    network.set_inputs([1.0, 0.0])

    # Process data
    network.forward()

    print("Output values:")
    pprint.pprint(network.output_values())
    print("Error Value:")
    print(network.squared_error([0.0, 1.0]))


if __name__ == "__main__":
    main()
