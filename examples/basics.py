from random import Random

from ffann import Network, plotly_render
from common import example_path, int_arg

seed = int_arg(1, 0)
passes = int_arg(2, 5)
print(f"{seed=}, {passes=}")

# /1/ Draw a network: 2 inputs, two hidden layers (10, 5), 2 outputs
rng = Random(seed)
network = Network.random(2, [10, 5], 2, rng)
print(f"{network}: {network.stats().edges} edges")

# /2/ Assign neural inputs
network.set_inputs([1, rng.uniform(-1, 1)])

# /3/ Propagate. Weights never change so repeated passes agree
outputs = network.forward()
for _ in range(passes - 1):
    assert network.forward() == outputs

# /3.1/ Generate visualization
plotly_render(network).write_html(example_path("./sample_network.html"))

# /4/ Retrieve responses
print("Outputs:", network.output_values())
print("Error:", network.squared_error([0, 1]))

# /5/ An empty network is generally useless
exit(network.empty())
