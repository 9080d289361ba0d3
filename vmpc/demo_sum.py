# vmpc/demo_sum.py
"""Three parties add their private inputs; only the sum is opened."""
from .mpc_core import (
    Add, Circuit, Input, MPCConfig, Open, Orchestrator, Output, ShareAndDistribute,
    configure_logging,
)

# private inputs, one per party
INPUTS = {0: {"x0": 10}, 1: {"x1": 20}, 2: {"x2": 5}}

CIRCUIT = Circuit.of(
    # each party records its own value and deals shares of it
    Input(id="x0", party=0), ShareAndDistribute(id="x0", party=0),
    Input(id="x1", party=1), ShareAndDistribute(id="x1", party=1),
    Input(id="x2", party=2), ShareAndDistribute(id="x2", party=2),
    # local share additions, no communication
    Add(dest="s01", a="x0", b="x1"),
    Add(dest="sum", a="s01", b="x2"),
    # reconstruct
    Open(dest="total", id="sum"),
    Output(id="total"),
)


def main(seed: bytes = b"demo-sum"):
    orch = Orchestrator(MPCConfig(parties=3, seed=seed), INPUTS)
    orch.run(CIRCUIT)
    return orch.outputs("total")


if __name__ == "__main__":
    configure_logging("INFO")
    for party, value in main().items():
        print(f"party {party}: Final Sum = {value}")
