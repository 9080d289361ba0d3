# vmpc/demo_scale.py
"""Party 0 shares a secret, both parties scale it by a public 6 and open it."""
from .mpc_core import (
    Circuit, Input, MPCConfig, Open, Orchestrator, Output, ScalarMul, ShareAndDistribute,
    configure_logging,
)

x, scalar = 7, 6

CIRCUIT = Circuit.of(
    Input(id="x", party=0, value=x),
    ShareAndDistribute(id="x", party=0),
    ScalarMul(dest="y", a="x", scalar=scalar),
    Open(dest="product", id="y"),
    Output(id="product"),
)


def main(seed: bytes = b"demo-scale"):
    orch = Orchestrator(MPCConfig(parties=2, seed=seed))
    orch.run(CIRCUIT)
    return orch.outputs("product")


if __name__ == "__main__":
    configure_logging("INFO")
    for party, value in main().items():
        print(f"party {party}: Final Product = {value}")
